from typing import Optional, Union

from app.schemas.common import CamelModel


class AdminLoginRequest(CamelModel):
    admin_id: Optional[Union[int, str]] = None
    email: Optional[str] = None
    role: Optional[str] = None
