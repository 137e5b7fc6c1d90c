import logging

from fastapi import APIRouter, Depends

from app.core.config import Settings, get_settings
from app.core.responses import ApiErrors, success
from app.core.security import create_admin_token
from app.schemas.admin import AdminLoginRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/login")
def admin_login(body: AdminLoginRequest, settings: Settings = Depends(get_settings)):
    """Génère le JWT de session admin (7 jours)"""
    if body.admin_id in (None, "") or not body.email or not body.role:
        raise ApiErrors.MISSING_FIELDS()

    token = create_admin_token(settings, body.admin_id, body.email, body.role)
    logger.info(f"Admin token issued for {body.admin_id} (role: {body.role})")
    return success({"token": token})
