from datetime import datetime, timedelta

from conftest import PASSWORD, auth_headers, create_user
from app.models.password_reset import PasswordReset
from app.models.subscription import Subscription
from app.models.user import User
from app.services import password_reset_service
from app.services.password_reset_service import RESET_REQUESTED_MESSAGE


def capture_codes(monkeypatch):
    """Remplace l'envoi d'email et retourne la liste des codes envoyés"""
    sent = []

    def fake_send(settings, email, recipient_name, code):
        sent.append((email, code))
        return True

    monkeypatch.setattr(password_reset_service, "send_password_reset_code", fake_send)
    return sent


# ========== REGISTER / LOGIN ==========
def test_register_success(client, db):
    """Inscription : tokens + plan FREE créé"""
    response = client.post("/api/auth/register", json={
        "email": "New.User@TaskQuadrant.io",
        "password": PASSWORD,
        "firstName": "Alice"
    })
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["accessToken"]
    assert body["data"]["tokenType"] == "bearer"
    assert body["data"]["user"]["email"] == "new.user@taskquadrant.io"

    user = db.query(User).filter(User.email == "new.user@taskquadrant.io").first()
    subscription = db.query(Subscription).filter(Subscription.user_id == user.id).first()
    assert subscription.plan == "FREE"


def test_register_duplicate_email(client, user):
    response = client.post("/api/auth/register", json={"email": user.email, "password": PASSWORD})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "EMAIL_ALREADY_EXISTS"


def test_register_weak_password(client):
    response = client.post("/api/auth/register", json={"email": "weak@taskquadrant.io", "password": "abc"})
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "WEAK_PASSWORD"
    assert len(error["details"]["errors"]) >= 3


def test_register_missing_email(client):
    response = client.post("/api/auth/register", json={"password": PASSWORD})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_FIELD"


def test_login_success(client, user):
    response = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["data"]["user"]["id"] == user.id


def test_login_wrong_password(client, user):
    response = client.post("/api/auth/login", json={"email": user.email, "password": "Wr0ng!Pass"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


def test_refresh_token(client, user):
    login = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD}).json()
    response = client.post("/api/auth/refresh", json={"refreshToken": login["data"]["refreshToken"]})
    assert response.status_code == 200
    assert response.json()["data"]["accessToken"]


def test_refresh_rejects_access_token(client, user):
    login = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD}).json()
    response = client.post("/api/auth/refresh", json={"refreshToken": login["data"]["accessToken"]})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


# ========== /me ==========
def test_me(client, user, headers):
    response = client.get("/api/auth/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["email"] == user.email


def test_me_without_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": {"message": "Unauthorized", "code": "UNAUTHORIZED"}}


def test_me_invalid_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


def test_me_deleted_user(client, db):
    user = create_user(db, email="gone@taskquadrant.io", plan=None)
    headers = auth_headers(user)
    db.delete(user)
    db.commit()
    response = client.get("/api/auth/me", headers=headers)
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


# ========== FORGOT PASSWORD ==========
def test_forgot_password_same_response_for_unknown_email(client, user, monkeypatch):
    """Ne révèle pas si le compte existe"""
    capture_codes(monkeypatch)
    known = client.post("/api/auth/forgot-password", json={"email": user.email})
    unknown = client.post("/api/auth/forgot-password", json={"email": "nobody@taskquadrant.io"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert known.json()["data"]["message"] == RESET_REQUESTED_MESSAGE


def test_forgot_password_unknown_email_sends_nothing(client, db, monkeypatch):
    sent = capture_codes(monkeypatch)
    client.post("/api/auth/forgot-password", json={"email": "nobody@taskquadrant.io"})
    assert sent == []
    assert db.query(PasswordReset).count() == 0


def test_forgot_password_invalid_email(client):
    response = client.post("/api/auth/forgot-password", json={"email": "not-an-email"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_EMAIL"


def test_forgot_password_missing_email(client):
    response = client.post("/api/auth/forgot-password", json={})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_FIELD"


def test_forgot_password_keeps_single_record(client, db, user, monkeypatch):
    sent = capture_codes(monkeypatch)
    client.post("/api/auth/forgot-password", json={"email": user.email})
    client.post("/api/auth/forgot-password", json={"email": user.email})

    records = db.query(PasswordReset).filter(PasswordReset.user_id == user.id).all()
    assert len(records) == 1
    assert len(sent) == 2
    code = sent[-1][1]
    assert len(code) == 6 and code.isdigit()
    # jamais stocké en clair
    assert records[0].code_hash != code


def test_forgot_password_without_smtp_still_succeeds(client, user):
    response = client.post("/api/auth/forgot-password", json={"email": user.email})
    assert response.status_code == 200


# ========== RESET PASSWORD ==========
def test_reset_password_success(client, db, user, monkeypatch):
    sent = capture_codes(monkeypatch)
    client.post("/api/auth/forgot-password", json={"email": user.email})
    code = sent[0][1]

    response = client.post("/api/auth/reset-password", json={
        "email": user.email, "code": code, "newPassword": "N3w!Password"
    })
    assert response.status_code == 200

    login = client.post("/api/auth/login", json={"email": user.email, "password": "N3w!Password"})
    assert login.status_code == 200

    # le code ne sert qu'une fois
    again = client.post("/api/auth/reset-password", json={
        "email": user.email, "code": code, "newPassword": "0ther!Password"
    })
    assert again.status_code == 400
    assert again.json()["error"]["code"] == "INVALID_RESET"


def test_reset_password_first_code_invalidated(client, user, monkeypatch):
    sent = capture_codes(monkeypatch)
    client.post("/api/auth/forgot-password", json={"email": user.email})
    client.post("/api/auth/forgot-password", json={"email": user.email})
    first_code, second_code = sent[0][1], sent[1][1]

    if first_code != second_code:
        response = client.post("/api/auth/reset-password", json={
            "email": user.email, "code": first_code, "newPassword": "N3w!Password"
        })
        assert response.status_code == 400

    response = client.post("/api/auth/reset-password", json={
        "email": user.email, "code": second_code, "newPassword": "N3w!Password"
    })
    assert response.status_code == 200


def test_reset_password_wrong_code(client, user, monkeypatch):
    sent = capture_codes(monkeypatch)
    client.post("/api/auth/forgot-password", json={"email": user.email})
    wrong = "111111" if sent[0][1] != "111111" else "222222"

    response = client.post("/api/auth/reset-password", json={
        "email": user.email, "code": wrong, "newPassword": "N3w!Password"
    })
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_CODE"


def test_reset_password_expired_code(client, db, user, monkeypatch):
    sent = capture_codes(monkeypatch)
    client.post("/api/auth/forgot-password", json={"email": user.email})
    record = db.query(PasswordReset).filter(PasswordReset.user_id == user.id).first()
    record.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()

    response = client.post("/api/auth/reset-password", json={
        "email": user.email, "code": sent[0][1], "newPassword": "N3w!Password"
    })
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_RESET"


def test_reset_password_unknown_email(client):
    response = client.post("/api/auth/reset-password", json={
        "email": "nobody@taskquadrant.io", "code": "123456", "newPassword": "N3w!Password"
    })
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_RESET"


def test_reset_password_bad_code_format(client, user):
    response = client.post("/api/auth/reset-password", json={
        "email": user.email, "code": "12ab", "newPassword": "N3w!Password"
    })
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_CODE"


def test_reset_password_weak_password(client, user):
    response = client.post("/api/auth/reset-password", json={
        "email": user.email, "code": "123456", "newPassword": "short"
    })
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "WEAK_PASSWORD"


def test_reset_password_missing_fields(client):
    response = client.post("/api/auth/reset-password", json={"email": "x@taskquadrant.io"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_FIELD"


def test_create_user_helper_hashes_password(db):
    user = create_user(db, email="hash@taskquadrant.io")
    assert user.password_hash != PASSWORD
    assert user.verify_password(PASSWORD)


# ========== MOTS DE PASSE TROP LONGS (limite bcrypt) ==========
LONG_PASSWORD = "Aa1!" + "x" * 80


def test_register_password_over_72_bytes(client):
    response = client.post("/api/auth/register", json={"email": "long@taskquadrant.io", "password": LONG_PASSWORD})
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "WEAK_PASSWORD"
    assert "Password must be at most 72 bytes long" in error["details"]["errors"]


def test_register_multibyte_password_over_72_bytes(client):
    # 40 caractères mais plus de 72 octets en UTF-8
    response = client.post("/api/auth/register", json={"email": "utf8@taskquadrant.io", "password": "Aa1!" + "é" * 36})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "WEAK_PASSWORD"


def test_reset_password_over_72_bytes(client, user):
    response = client.post("/api/auth/reset-password", json={
        "email": user.email, "code": "123456", "newPassword": LONG_PASSWORD
    })
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "WEAK_PASSWORD"


def test_login_password_over_72_bytes(client, user):
    response = client.post("/api/auth/login", json={"email": user.email, "password": LONG_PASSWORD})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"
