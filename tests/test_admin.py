import time

from jose import jwt

from conftest import create_user
from app.core.security import ALGORITHM


def test_admin_login_returns_token(client, settings):
    response = client.post("/api/admin/login", json={"adminId": "1", "email": "a@b.com", "role": "admin"})
    assert response.status_code == 200
    token = response.json()["data"]["token"]

    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM])
    assert payload["user_id"] == "1"
    assert payload["email"] == "a@b.com"
    assert payload["role"] == "admin"
    assert payload["type"] == "access"


def test_admin_token_expires_in_seven_days(client, settings):
    response = client.post("/api/admin/login", json={"adminId": 42, "email": "ops@taskquadrant.io", "role": "superadmin"})
    payload = jwt.decode(response.json()["data"]["token"], settings.JWT_SECRET, algorithms=[ALGORITHM])
    assert payload["user_id"] == 42
    # exp - maintenant ≈ 7 jours
    remaining = payload["exp"] - time.time()
    assert 7 * 86400 - 120 < remaining <= 7 * 86400 + 120


def test_admin_login_missing_fields(client):
    for body in (
        {"email": "a@b.com", "role": "admin"},
        {"adminId": "1", "role": "admin"},
        {"adminId": "1", "email": "a@b.com"},
        {"adminId": "", "email": "a@b.com", "role": "admin"},
        {},
    ):
        response = client.post("/api/admin/login", json=body)
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": {"message": "Missing required fields", "code": "MISSING_FIELDS"}
        }


def test_admin_token_accepted_as_user_session(client, db):
    """Le token admin porte les claims d'un token d'accès utilisateur"""
    admin = create_user(db, email="root@taskquadrant.io", is_admin=True)
    token = client.post("/api/admin/login", json={
        "adminId": admin.id, "email": admin.email, "role": "admin"
    }).json()["data"]["token"]

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["data"]["isAdmin"] is True
