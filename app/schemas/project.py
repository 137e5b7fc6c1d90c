from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel


class ProjectCreate(CamelModel):
    name: str
    color: Optional[str] = None


class ProjectResponse(CamelModel):
    id: int
    user_id: int
    name: str
    color: Optional[str]
    created_at: datetime
