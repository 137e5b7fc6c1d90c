from fastapi import APIRouter, Depends

from app.core.config import Settings, get_settings

router = APIRouter()

@router.get("/z")
def healthz(settings: Settings = Depends(get_settings)):
    # Check si l'API est up
    return {"status": "ok", "service": settings.PROJECT_NAME}
