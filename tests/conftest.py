import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Créer engine SQLite pour tests AVANT d'importer app
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test.db"
test_engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

# PATCH: remplacer le engine et SessionLocal du core.database AVANT d'importer app
import app.core.database
app.core.database.engine = test_engine
app.core.database.SessionLocal = TestingSessionLocal

# Maintenant importer app (qui utilisera notre engine SQLite)
from app.core.config import Settings, get_settings
from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.main import app
from app.models.bot import Bot
from app.models.project import Project
from app.models.subscription import Subscription
from app.models.task import Task
from app.models.user import User
from app.services.bot_access import serialize_permissions
from app.services.bot_api_key import generate_bot_api_key
from app.services.bot_rate_limit import rate_limiter

CRON_SECRET = "test-cron-secret"
PASSWORD = "Str0ng!Pass"

test_settings = Settings(
    DATABASE_URL=SQLALCHEMY_TEST_DATABASE_URL,
    JWT_SECRET="test-jwt-secret",
    CRON_SECRET=CRON_SECRET,
    STRIPE_SECRET_KEY="sk_test_dummy",
    SMTP_SERVER=None,
    SMTP_EMAIL=None,
)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def override_get_settings():
    return test_settings


# Override les dépendances
app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_settings] = override_get_settings


@pytest.fixture(autouse=True)
def setup_teardown():
    """Crée et nettoie la DB avant/après chaque test"""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    rate_limiter.reset()
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def settings():
    return test_settings


@pytest.fixture
def client():
    """Client de test FastAPI"""
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture
def db():
    """Session DB pour les tests"""
    db = TestingSessionLocal()
    yield db
    db.close()


def create_user(db, email="user@taskquadrant.io", plan="FREE", is_admin=False, retention_days=None):
    user = User(email=email, first_name="Test", is_admin=is_admin,
                completed_task_retention_days=retention_days)
    user.set_password(PASSWORD)
    db.add(user)
    db.flush()
    if plan:
        db.add(Subscription(user_id=user.id, plan=plan))
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    token = create_access_token(test_settings, user.id, user.email)
    return {"Authorization": f"Bearer {token}"}


def create_project(db, user, name="Projet"):
    project = Project(user_id=user.id, name=name)
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def create_task(db, user, completed_days_ago=None, **fields):
    """Tâche en base ; completed_days_ago la marque terminée il y a N jours."""
    if completed_days_ago is not None:
        fields.setdefault("completed", True)
        fields.setdefault("completed_at", datetime.utcnow() - timedelta(days=completed_days_ago))
    fields.setdefault("title", "Tâche")
    task = Task(user_id=user.id, **fields)
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def create_bot(db, owner, permissions=("*",), project_ids=(), rate_limit=60, is_active=True):
    """Retourne (bot, clé brute)"""
    key = generate_bot_api_key()
    bot = Bot(
        owner_id=owner.id,
        name="Build bot",
        api_key_hash=key.hash,
        api_key_prefix=key.prefix,
        permissions=serialize_permissions(permissions),
        project_ids=list(project_ids),
        rate_limit_per_minute=rate_limit,
        is_active=is_active,
    )
    db.add(bot)
    db.commit()
    db.refresh(bot)
    return bot, key.raw_key


@pytest.fixture
def user(db):
    return create_user(db)


@pytest.fixture
def headers(user):
    return auth_headers(user)
