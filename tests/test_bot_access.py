import time
from types import SimpleNamespace

import pytest

from conftest import create_project, create_user
from app.services.bot_access import (
    BotPermission,
    bot_can_access_project,
    bot_has_permission,
    parse_permissions,
    serialize_permissions,
)
from app.services.bot_api_key import KEY_PREFIX, generate_bot_api_key, hash_api_key, is_valid_key_format
from app.services.bot_rate_limit import RateLimiter


# ========== CLÉS API ==========
def test_generated_key_format():
    key = generate_bot_api_key()
    assert key.raw_key.startswith(KEY_PREFIX)
    assert len(key.raw_key) == len(KEY_PREFIX) + 48
    assert key.prefix == key.raw_key[:8]
    assert key.hash == hash_api_key(key.raw_key)
    assert is_valid_key_format(key.raw_key)


def test_generated_keys_are_unique():
    assert generate_bot_api_key().raw_key != generate_bot_api_key().raw_key


@pytest.mark.parametrize("value", [None, "", "tk_test_" + "a" * 48, KEY_PREFIX + "abc", 12])
def test_invalid_key_format(value):
    assert not is_valid_key_format(value)


# ========== PERMISSIONS ==========
def test_parse_permissions_ignores_unknown_values():
    perms = parse_permissions("tasks:read, comments:write,,admin:everything")
    assert perms == frozenset({BotPermission.TASKS_READ, BotPermission.COMMENTS_WRITE})


def test_serialize_permissions_sorted():
    assert serialize_permissions([BotPermission.TASKS_WRITE, BotPermission.TASKS_READ]) == "tasks:read,tasks:write"


def test_wildcard_grants_everything():
    bot = SimpleNamespace(permissions="*")
    assert all(bot_has_permission(bot, p) for p in BotPermission)


def test_missing_permission():
    bot = SimpleNamespace(permissions="tasks:read")
    assert bot_has_permission(bot, BotPermission.TASKS_READ)
    assert not bot_has_permission(bot, BotPermission.TASKS_WRITE)


# ========== PÉRIMÈTRE PROJETS ==========
def test_allow_list_restricts_projects(db):
    bot = SimpleNamespace(project_ids=[3, 5], owner_id=1)
    assert bot_can_access_project(db, bot, 5)
    assert bot_can_access_project(db, bot, "3")
    assert not bot_can_access_project(db, bot, 4)
    assert not bot_can_access_project(db, bot, None)


def test_empty_allow_list_means_owner_projects(db):
    owner = create_user(db, email="owner@taskquadrant.io")
    other = create_user(db, email="other@taskquadrant.io")
    mine = create_project(db, owner)
    theirs = create_project(db, other)

    bot = SimpleNamespace(project_ids=[], owner_id=owner.id)
    assert bot_can_access_project(db, bot, mine.id)
    assert not bot_can_access_project(db, bot, theirs.id)


# ========== RATE LIMIT ==========
def test_rate_limiter_blocks_after_limit():
    limiter = RateLimiter()
    before = time.time()
    results = [limiter.check(1, 3) for _ in range(4)]

    assert [r.allowed for r in results] == [True, True, True, False]
    assert [r.remaining for r in results] == [2, 1, 0, 0]
    headers = results[-1].headers()
    assert headers["X-RateLimit-Limit"] == "3"
    assert headers["X-RateLimit-Remaining"] == "0"
    # fin de fenêtre dans la minute qui vient
    assert before < int(headers["X-RateLimit-Reset"]) <= before + 61


def test_rate_limiter_reset_clears_windows():
    limiter = RateLimiter()
    limiter.check(1, 1)
    assert not limiter.check(1, 1).allowed

    limiter.reset()
    assert limiter.check(1, 1).allowed


def test_rate_limiter_per_bot():
    limiter = RateLimiter()
    limiter.check(1, 1)
    assert limiter.check(2, 1).allowed
