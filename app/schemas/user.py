from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel

# Les champs obligatoires restent Optional : l'absence est signalée par un code
# d'erreur métier (MISSING_FIELD) plutôt que par une erreur de validation.

class RegisterRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None

class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None

class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None

class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None

class ResetPasswordRequest(CamelModel):
    email: Optional[str] = None
    code: Optional[str] = None
    new_password: Optional[str] = None

class UserResponse(CamelModel):
    id: int
    email: str
    first_name: Optional[str]
    is_admin: bool
    completed_task_retention_days: Optional[int]
    created_at: datetime

class TokenResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse
