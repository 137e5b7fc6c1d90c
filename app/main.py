import logging

from fastapi import FastAPI

from app.core.config import settings
from app.core.database import engine, Base
from app.core.responses import register_exception_handlers
# Les modèles doivent être importés avant create_all
from app.models import bot, password_reset, project, subscription, task, task_artifact, task_comment, team, user  # noqa: F401
from app.routers import health, auth, admin, subscriptions, projects, tasks, teams, bots, bot_api

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

# Init DB
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    version="1.0.0"
)

register_exception_handlers(app)

# Routes
app.include_router(health.router, prefix="/health")
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(subscriptions.router)
app.include_router(projects.router)
app.include_router(tasks.router)
app.include_router(teams.router)
app.include_router(bots.router)
app.include_router(bot_api.router)
