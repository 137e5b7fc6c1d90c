import re

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.deps import get_current_user
from app.core.responses import ApiError, ApiErrors, success
from app.core.security import create_access_token, create_refresh_token, verify_token
from app.core.validation import is_valid_email, password_strength_errors
from app.models.subscription import Subscription
from app.models.user import User
from app.schemas.user import (
    ForgotPasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserResponse,
)
from app.services.password_reset_service import request_password_reset, reset_password

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _token_response(settings: Settings, user: User) -> dict:
    return TokenResponse.serialize({
        "access_token": create_access_token(settings, user.id, user.email),
        "refresh_token": create_refresh_token(settings, user.id, user.email),
        "user": user,
    })


@router.post("/register")
def register(body: RegisterRequest, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """Créer un nouvel utilisateur (plan FREE)"""
    if not body.email:
        raise ApiErrors.MISSING_REQUIRED_FIELD("email")
    if not body.password:
        raise ApiErrors.MISSING_REQUIRED_FIELD("password")
    if not is_valid_email(body.email):
        raise ApiErrors.INVALID_EMAIL()

    errors = password_strength_errors(body.password)
    if errors:
        raise ApiErrors.WEAK_PASSWORD(errors)

    email = body.email.lower()
    # Vérifie si l'email existe déjà
    if db.query(User).filter(User.email == email).first():
        raise ApiErrors.EMAIL_ALREADY_EXISTS()

    new_user = User(email=email, first_name=body.first_name)
    new_user.set_password(body.password)
    db.add(new_user)
    db.flush()
    db.add(Subscription(user_id=new_user.id, plan="FREE"))
    db.commit()
    db.refresh(new_user)

    return success(_token_response(settings, new_user), status.HTTP_201_CREATED)


@router.post("/login")
def login(body: LoginRequest, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """Se connecter et recevoir les tokens"""
    if not body.email or not body.password:
        raise ApiErrors.MISSING_FIELDS()

    user = db.query(User).filter(User.email == body.email.lower()).first()
    # même erreur pour email inconnu et mauvais mdp
    if not user or not user.verify_password(body.password):
        raise ApiErrors.INVALID_CREDENTIALS()

    return success(_token_response(settings, user))


@router.post("/refresh")
def refresh(body: RefreshRequest, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """Utiliser un refresh_token pour obtenir un nouvel access_token"""
    if not body.refresh_token:
        raise ApiErrors.MISSING_REQUIRED_FIELD("refreshToken")

    payload = verify_token(settings, body.refresh_token, token_type="refresh")
    if not payload:
        raise ApiErrors.INVALID_TOKEN()

    user = db.query(User).filter(User.id == payload.get("user_id")).first()
    if not user:
        raise ApiErrors.USER_NOT_FOUND()

    return success({
        "accessToken": create_access_token(settings, user.id, user.email),
        "refreshToken": body.refresh_token,
        "tokenType": "bearer",
    })


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return success(UserResponse.serialize(current_user))


@router.post("/forgot-password")
def forgot_password(
    body: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """Envoie un code de réinitialisation, sans révéler si le compte existe"""
    if not body.email:
        raise ApiErrors.MISSING_REQUIRED_FIELD("email")
    if not is_valid_email(body.email):
        raise ApiErrors.INVALID_EMAIL()

    message = request_password_reset(db, settings, body.email)
    return success({"message": message})


@router.post("/reset-password")
def reset_password_with_code(body: ResetPasswordRequest, db: Session = Depends(get_db)):
    for field, value in (("email", body.email), ("code", body.code), ("newPassword", body.new_password)):
        if not value:
            raise ApiErrors.MISSING_REQUIRED_FIELD(field)

    if not is_valid_email(body.email):
        raise ApiErrors.INVALID_EMAIL()
    if not re.fullmatch(r"\d{6}", body.code):
        raise ApiError(400, "Invalid reset code format", "INVALID_CODE")

    errors = password_strength_errors(body.new_password)
    if errors:
        raise ApiErrors.WEAK_PASSWORD(errors)

    reset_password(db, body.email, body.code, body.new_password)
    return success({
        "message": "Password has been reset successfully. Please log in with your new password."
    })
