import re
from typing import List

from email_validator import EmailNotValidError, validate_email as _validate_email

from app.core.security import BCRYPT_MAX_BYTES

SPECIAL_CHARACTERS = "!@#$%^&*"


def is_valid_email(email: str) -> bool:
    try:
        _validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def password_strength_errors(password: str) -> List[str]:
    """Liste des règles non respectées (vide = mot de passe accepté)."""
    errors = []
    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")
    if len(password.encode()) > BCRYPT_MAX_BYTES:
        errors.append(f"Password must be at most {BCRYPT_MAX_BYTES} bytes long")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        errors.append("Password must contain at least one number")
    if not any(c in SPECIAL_CHARACTERS for c in password):
        errors.append(f"Password must contain at least one special character ({SPECIAL_CHARACTERS})")
    return errors
