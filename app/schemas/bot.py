from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import Field

from app.schemas.common import CamelModel
from app.services.bot_access import BotPermission


class BotCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    permissions: List[BotPermission] = Field(default_factory=lambda: [BotPermission.TASKS_READ])
    project_ids: List[int] = Field(default_factory=list)
    rate_limit_per_minute: int = Field(default=60, ge=1, le=1000)
    webhook_url: Optional[str] = None


class BotResponse(CamelModel):
    id: int
    name: str
    description: Optional[str]
    api_key_prefix: str
    permissions: List[str]
    project_ids: List[int]
    rate_limit_per_minute: int
    webhook_url: Optional[str]
    is_active: bool
    last_used_at: Optional[datetime]
    created_at: datetime


# Corps des requêtes envoyées par les bots (champs obligatoires vérifiés à la main)

class BotTaskCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    project_id: Optional[int] = None
    quadrant: Optional[str] = None
    start_date: Optional[date] = None
    start_time: Optional[str] = None
    due_date: Optional[date] = None
    due_time: Optional[str] = None
    assign_to_self: bool = False


class BotTaskUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    quadrant: Optional[str] = None
    status: Optional[str] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    completed: Optional[bool] = None


class CommentCreate(CamelModel):
    body: Optional[str] = None
    metadata: Optional[Any] = None
