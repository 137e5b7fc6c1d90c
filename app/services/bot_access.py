"""
Contrôle d'accès des bots : permissions et périmètre projets.

Les permissions sont stockées en base sous forme de chaîne
("tasks:read,tasks:write") mais manipulées ici comme un ensemble de
BotPermission.
"""

import logging
from enum import Enum
from typing import FrozenSet, Iterable

from sqlalchemy.orm import Session

from app.models.bot import Bot
from app.models.project import Project

logger = logging.getLogger(__name__)


class BotPermission(str, Enum):
    TASKS_READ = "tasks:read"
    TASKS_WRITE = "tasks:write"
    COMMENTS_READ = "comments:read"
    COMMENTS_WRITE = "comments:write"
    ARTIFACTS_READ = "artifacts:read"
    ALL = "*"


def parse_permissions(raw: str) -> FrozenSet[BotPermission]:
    """Parse la chaîne stockée, les valeurs inconnues sont ignorées."""
    parsed = set()
    for item in (raw or "").split(","):
        item = item.strip()
        if not item:
            continue
        try:
            parsed.add(BotPermission(item))
        except ValueError:
            logger.warning(f"Unknown bot permission ignored: {item}")
    return frozenset(parsed)


def serialize_permissions(permissions: Iterable[BotPermission]) -> str:
    return ",".join(sorted(BotPermission(p).value for p in permissions))


def bot_has_permission(bot: Bot, permission: BotPermission) -> bool:
    perms = parse_permissions(bot.permissions)
    return permission in perms or BotPermission.ALL in perms


def bot_can_access_project(db: Session, bot: Bot, project_id) -> bool:
    # Liste explicite si renseignée, sinon tous les projets du owner
    if project_id is None:
        return False
    if bot.project_ids:
        return int(project_id) in {int(pid) for pid in bot.project_ids}

    project = db.query(Project).filter(
        Project.id == project_id,
        Project.user_id == bot.owner_id
    ).first()
    return project is not None
