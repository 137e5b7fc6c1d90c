from typing import Optional

from app.schemas.common import CamelModel


class UpgradeRequest(CamelModel):
    plan: Optional[str] = None
    amount: Optional[int] = None  # en centimes
