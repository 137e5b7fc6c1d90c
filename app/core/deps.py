"""Dépendances d'authentification partagées par les routers"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.responses import ApiError, ApiErrors
from app.core.security import decode_token, get_token_from_header
from app.models.bot import Bot
from app.models.user import User
from app.services.bot_access import BotPermission, bot_has_permission
from app.services.bot_api_key import hash_api_key, is_valid_key_format
from app.services.bot_rate_limit import RateLimiter, RateLimitResult, get_rate_limiter

logger = logging.getLogger(__name__)


def authenticate_user(db: Session, settings: Settings, authorization: Optional[str]) -> User:
    token = get_token_from_header(authorization)
    if not token:
        raise ApiErrors.UNAUTHORIZED()

    user_id = decode_token(settings, token)
    if not user_id:
        raise ApiErrors.INVALID_TOKEN()

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise ApiErrors.USER_NOT_FOUND()
    return user


def get_current_user(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    authorization: Optional[str] = Header(None)
) -> User:
    return authenticate_user(db, settings, authorization)


@dataclass
class BotContext:
    bot: Bot
    rate: RateLimitResult

    @property
    def headers(self) -> dict:
        return self.rate.headers()

    def require(self, permission: BotPermission) -> None:
        if not bot_has_permission(self.bot, permission):
            raise ApiError(
                403,
                f"Bot does not have {permission.value} permission",
                "BOT_PERMISSION_DENIED",
                headers=self.headers,
            )


def get_bot_context(
    db: Session = Depends(get_db),
    limiter: RateLimiter = Depends(get_rate_limiter),
    authorization: Optional[str] = Header(None)
) -> BotContext:
    """Authentifie un bot par sa clé API puis applique sa limite de débit."""
    if not authorization or not authorization.startswith("Bearer "):
        raise ApiErrors.MISSING_TOKEN()

    raw_key = authorization[len("Bearer "):]
    if not is_valid_key_format(raw_key):
        raise ApiErrors.INVALID_TOKEN()

    bot = db.query(Bot).filter(Bot.api_key_hash == hash_api_key(raw_key)).first()
    if not bot:
        raise ApiErrors.INVALID_TOKEN()
    if not bot.is_active:
        logger.info(f"Inactive bot {bot.id} rejected")
        raise ApiErrors.UNAUTHORIZED()

    rate = limiter.check(bot.id, bot.rate_limit_per_minute)
    if not rate.allowed:
        logger.warning(f"Bot {bot.id} rate limited")
        raise ApiError(429, "Rate limit exceeded", "BOT_RATE_LIMITED", headers=rate.headers())

    bot.last_used_at = datetime.utcnow()
    db.commit()
    return BotContext(bot=bot, rate=rate)
