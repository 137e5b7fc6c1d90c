from fastapi import APIRouter, Depends

from app.core.config import Settings, get_settings
from app.core.deps import get_current_user
from app.core.responses import ApiErrors, success
from app.models.subscription import PLANS
from app.models.user import User
from app.schemas.subscription import UpgradeRequest
from app.services.payment_service import create_upgrade_payment_intent

router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])


@router.post("/upgrade-stripe")
def upgrade_stripe(
    body: UpgradeRequest,
    current_user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings)
):
    """Crée un PaymentIntent Stripe ; l'upgrade est confirmé par webhook."""
    if body.plan not in PLANS or body.amount is None or body.amount <= 0:
        raise ApiErrors.INVALID_INPUT("Invalid plan or amount")

    return success(create_upgrade_payment_intent(settings, current_user, body.plan, body.amount))
