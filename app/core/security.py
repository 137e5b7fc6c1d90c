from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from app.core.config import Settings

ALGORITHM = "HS256"
BCRYPT_MAX_BYTES = 72


def create_access_token(settings: Settings, user_id, email: str) -> str:
    #crée un token d'accès JWT (7 jours par défaut)
    payload = {
        "user_id": user_id,
        "email": email,
        "exp": datetime.utcnow() + timedelta(minutes=settings.JWT_EXPIRE_MIN),
        "type": "access"
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)


def create_refresh_token(settings: Settings, user_id, email: str) -> str:
    #crée un token de rafraîchissement JWT valable 30 jours
    payload = {
        "user_id": user_id,
        "email": email,
        "exp": datetime.utcnow() + timedelta(minutes=settings.JWT_REFRESH_EXPIRE_MIN),
        "type": "refresh"
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)


def create_admin_token(settings: Settings, admin_id, email: str, role: str) -> str:
    """Token de session admin, signé et limité dans le temps, sans révocation."""
    payload = {
        "user_id": admin_id,
        "email": email,
        "role": role,
        "exp": datetime.utcnow() + timedelta(days=settings.ADMIN_TOKEN_EXPIRE_DAYS),
        "type": "access"
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)


def verify_token(settings: Settings, token: str, token_type: str = "access") -> Optional[dict]:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload


def decode_token(settings: Settings, token: str):
    payload = verify_token(settings, token)
    if payload is None:
        return None
    return payload.get("user_id")


def get_token_from_header(authorization: Optional[str]) -> Optional[str]:
    """Extrait le token d'un header `Authorization: Bearer <token>`."""
    if not authorization:
        return None
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        return None
    return parts[1]


def hash_secret(value: str) -> str:
    return bcrypt.hashpw(value.encode(), bcrypt.gensalt()).decode()


def verify_secret(value: str, hashed: str) -> bool:
    # bcrypt refuse les entrées de plus de 72 octets
    if len(value.encode()) > BCRYPT_MAX_BYTES:
        return False
    return bcrypt.checkpw(value.encode(), hashed.encode())
