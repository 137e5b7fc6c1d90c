"""
Password reset service

Codes à 6 chiffres envoyés par email, stockés uniquement hachés (bcrypt),
valables PASSWORD_RESET_EXPIRE_MIN minutes. Un seul code actif par utilisateur.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.responses import ApiError
from app.core.security import hash_secret, verify_secret
from app.models.password_reset import PasswordReset
from app.models.user import User
from app.services.email_service import send_password_reset_code

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account with that email exists, a reset code has been sent."


def generate_reset_code() -> str:
    # 100000-999999, source cryptographique
    return str(100000 + secrets.randbelow(900000))


def request_password_reset(
    db: Session,
    settings: Settings,
    email: str,
    send_code: Optional[Callable[..., bool]] = None,
) -> str:
    """Émet un nouveau code si le compte existe.

    Retourne toujours le même message, que le compte existe ou non.
    """
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user:
        return RESET_REQUESTED_MESSAGE

    code = generate_reset_code()

    # suppression des anciens codes et création du nouveau dans une seule transaction
    db.query(PasswordReset).filter(PasswordReset.user_id == user.id).delete(synchronize_session=False)
    db.add(PasswordReset(
        user_id=user.id,
        code_hash=hash_secret(code),
        expires_at=datetime.utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MIN),
    ))
    db.commit()

    send_code = send_code or send_password_reset_code
    sent = send_code(settings, user.email, user.first_name or "there", code)
    if not sent:
        logger.warning(f"Password reset code for user {user.id} could not be emailed")
    else:
        logger.info(f"Password reset code issued for user {user.id}")
    return RESET_REQUESTED_MESSAGE


def get_active_reset(db: Session, user_id: int, now: Optional[datetime] = None) -> Optional[PasswordReset]:
    now = now or datetime.utcnow()
    return db.query(PasswordReset).filter(
        PasswordReset.user_id == user_id,
        PasswordReset.used_at.is_(None),
        PasswordReset.expires_at > now
    ).order_by(PasswordReset.created_at.desc()).first()


def reset_password(db: Session, email: str, code: str, new_password: str) -> None:
    """Vérifie le code et change le mot de passe. Lève ApiError si invalide."""
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user:
        raise ApiError(400, "Invalid reset code or email", "INVALID_RESET")

    reset = get_active_reset(db, user.id)
    if not reset:
        raise ApiError(400, "Reset code has expired or is invalid", "INVALID_RESET")

    if not verify_secret(code, reset.code_hash):
        raise ApiError(400, "Invalid reset code", "INVALID_CODE")

    user.set_password(new_password)
    reset.used_at = datetime.utcnow()
    db.commit()
    logger.info(f"Password reset completed for user {user.id}")
