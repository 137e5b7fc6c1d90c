from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from app.core.database import get_db
from app.core.deps import get_current_user
from app.core.responses import success
from app.models.team import TeamInvitation
from app.models.user import User
from app.schemas.team import PendingInvitationResponse

router = APIRouter(prefix="/api/teams", tags=["teams"])


@router.get("/pending-invitations")
def pending_invitations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Invitations non expirées adressées à l'email de l'utilisateur, plus récentes d'abord"""
    invitations = db.query(TeamInvitation).options(
        joinedload(TeamInvitation.team)
    ).filter(
        TeamInvitation.email == current_user.email.lower(),
        TeamInvitation.expires_at > datetime.utcnow()
    ).order_by(TeamInvitation.created_at.desc(), TeamInvitation.id.desc()).all()

    return success([PendingInvitationResponse.serialize(inv) for inv in invitations])
