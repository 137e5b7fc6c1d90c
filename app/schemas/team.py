from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel


class TeamSummary(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str]
    owner_id: int


class PendingInvitationResponse(CamelModel):
    id: int
    token: str
    email: str
    role: str
    created_at: datetime
    expires_at: datetime
    team: TeamSummary
