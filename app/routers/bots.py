"""Gestion des bots par leur propriétaire"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_user
from app.core.responses import ApiError, ApiErrors, success
from app.models.bot import Bot
from app.models.project import Project
from app.models.user import User
from app.schemas.bot import BotCreate, BotResponse
from app.services.bot_access import parse_permissions, serialize_permissions
from app.services.bot_api_key import generate_bot_api_key, generate_webhook_secret

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bots", tags=["bots"])


def bot_to_response(bot: Bot) -> dict:
    # ni le hash ni la clé brute ne sortent d'ici
    return BotResponse.serialize({
        "id": bot.id,
        "name": bot.name,
        "description": bot.description,
        "api_key_prefix": bot.api_key_prefix,
        "permissions": sorted(p.value for p in parse_permissions(bot.permissions)),
        "project_ids": bot.project_ids or [],
        "rate_limit_per_minute": bot.rate_limit_per_minute,
        "webhook_url": bot.webhook_url,
        "is_active": bot.is_active,
        "last_used_at": bot.last_used_at,
        "created_at": bot.created_at,
    })


def _get_own_bot(db: Session, bot_id: int, user: User) -> Bot:
    bot = db.query(Bot).filter(Bot.id == bot_id, Bot.owner_id == user.id).first()
    if not bot:
        raise ApiErrors.NOT_FOUND("Bot")
    return bot


@router.post("")
def create_bot(
    bot_data: BotCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Crée un bot. La clé API brute n'est renvoyée qu'ici."""
    if bot_data.project_ids:
        owned = db.query(Project.id).filter(
            Project.id.in_(bot_data.project_ids),
            Project.user_id == current_user.id
        ).count()
        if owned != len(set(bot_data.project_ids)):
            raise ApiError(400, "Bot can only be scoped to your own projects", "INVALID_PROJECT_SCOPE")

    key = generate_bot_api_key()
    bot = Bot(
        owner_id=current_user.id,
        name=bot_data.name,
        description=bot_data.description,
        api_key_hash=key.hash,
        api_key_prefix=key.prefix,
        webhook_url=bot_data.webhook_url,
        webhook_secret=generate_webhook_secret() if bot_data.webhook_url else None,
        permissions=serialize_permissions(bot_data.permissions),
        project_ids=sorted(set(bot_data.project_ids)),
        rate_limit_per_minute=bot_data.rate_limit_per_minute,
    )
    db.add(bot)
    db.commit()
    db.refresh(bot)
    logger.info(f"Bot {bot.id} created by user {current_user.id}")

    return success(
        {**bot_to_response(bot), "apiKey": key.raw_key, "webhookSecret": bot.webhook_secret},
        status.HTTP_201_CREATED
    )


@router.get("")
def list_bots(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    bots = db.query(Bot).filter(Bot.owner_id == current_user.id).order_by(Bot.created_at.desc()).all()
    return success([bot_to_response(b) for b in bots])


@router.post("/{bot_id}/regenerate-key")
def regenerate_key(
    bot_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Invalide l'ancienne clé et en renvoie une nouvelle (affichée une fois)"""
    bot = _get_own_bot(db, bot_id, current_user)
    key = generate_bot_api_key()
    bot.api_key_hash = key.hash
    bot.api_key_prefix = key.prefix
    db.commit()
    db.refresh(bot)
    logger.info(f"API key regenerated for bot {bot.id}")
    return success({**bot_to_response(bot), "apiKey": key.raw_key})


@router.delete("/{bot_id}")
def delete_bot(
    bot_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    bot = _get_own_bot(db, bot_id, current_user)
    # soft delete
    bot.is_active = False
    db.commit()
    return success({"id": bot_id, "isActive": False})
