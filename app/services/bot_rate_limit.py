"""Limitation de débit par bot, fenêtre fixe de 60 secondes"""

import math
from dataclasses import dataclass
from typing import Dict

from limits import RateLimitItemPerMinute
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # timestamp epoch (secondes)

    def headers(self) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(max(0, self.remaining)),
            "X-RateLimit-Reset": str(math.ceil(self.reset_at)),
        }


class RateLimiter:
    """Compteurs en mémoire du process (storage limits), une fenêtre par bot."""

    def __init__(self, storage_uri: str = "memory://"):
        self.storage = MemoryStorage(storage_uri)
        self.strategy = FixedWindowRateLimiter(self.storage)

    def check(self, bot_id: int, limit_per_minute: int) -> RateLimitResult:
        item = RateLimitItemPerMinute(limit_per_minute)
        key = str(bot_id)
        allowed = self.strategy.hit(item, key)
        reset_time, remaining = self.strategy.get_window_stats(item, key)
        return RateLimitResult(allowed, limit_per_minute, remaining, reset_time)

    def reset(self) -> None:
        self.storage.reset()


rate_limiter = RateLimiter()


def get_rate_limiter() -> RateLimiter:
    return rate_limiter
