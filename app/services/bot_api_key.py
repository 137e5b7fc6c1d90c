"""Génération et hachage des clés API des bots"""

import hashlib
import secrets
from typing import NamedTuple

KEY_PREFIX = "tk_live_"
KEY_RANDOM_HEX_LENGTH = 48


class GeneratedKey(NamedTuple):
    raw_key: str  # montré une seule fois à la création
    hash: str
    prefix: str


def hash_api_key(raw_key: str) -> str:
    return hashlib.sha256(raw_key.encode()).hexdigest()


def generate_bot_api_key() -> GeneratedKey:
    raw_key = KEY_PREFIX + secrets.token_hex(KEY_RANDOM_HEX_LENGTH // 2)
    return GeneratedKey(raw_key=raw_key, hash=hash_api_key(raw_key), prefix=raw_key[:8])


def is_valid_key_format(key) -> bool:
    return (
        isinstance(key, str)
        and key.startswith(KEY_PREFIX)
        and len(key) == len(KEY_PREFIX) + KEY_RANDOM_HEX_LENGTH
    )


def generate_webhook_secret() -> str:
    # secret HMAC pour signer les webhooks sortants
    return secrets.token_hex(32)
