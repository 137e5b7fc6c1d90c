"""Création des PaymentIntent Stripe pour les upgrades d'abonnement"""

import logging

import stripe

from app.core.config import Settings
from app.core.responses import ApiError
from app.models.user import User

logger = logging.getLogger(__name__)


def create_upgrade_payment_intent(settings: Settings, user: User, plan: str, amount: int) -> dict:
    """Initie le paiement ; la confirmation arrive par le webhook Stripe.

    Les métadonnées permettent au webhook de retrouver user, plan et abonnement.
    """
    subscription_id = user.subscription.id if user.subscription is not None else "new"

    try:
        intent = stripe.PaymentIntent.create(
            api_key=settings.STRIPE_SECRET_KEY,
            amount=amount,
            currency=settings.STRIPE_CURRENCY,
            payment_method_types=["card"],
            metadata={
                "userId": str(user.id),
                "userEmail": user.email,
                "plan": plan,
                "subscriptionId": str(subscription_id),
            },
            description=f"{settings.PROJECT_NAME} subscription upgrade to {plan} plan for {user.email}",
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe payment intent failed for user {user.id}: {e}")
        raise ApiError(502, "Payment provider error", "PAYMENT_PROVIDER_ERROR")

    logger.info(f"Payment intent {intent['id']} created for user {user.id} ({plan}, {amount} cents)")
    return {
        "clientSecret": intent["client_secret"],
        "paymentIntentId": intent["id"],
        "amount": amount,
        "plan": plan,
    }
