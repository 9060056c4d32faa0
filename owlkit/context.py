"""Per-context environment name and log id."""

from __future__ import annotations

import random
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import datetime, timedelta, timezone

TEST = "test"
PROD = "prod"

_SHANGHAI = timezone(timedelta(hours=8), "Asia/Shanghai")

_env: ContextVar[str] = ContextVar("env", default="")
_log_id: ContextVar[str] = ContextVar("log_id", default="")


def get_env() -> str:
    """Return the environment name of the current context, or ""."""
    return _env.get()


def set_env(env: str) -> Token:
    """Set the environment name; the returned token can undo it."""
    return _env.set(env)


def is_test_env() -> bool:
    """Return True if the current environment is the test one."""
    return get_env() == TEST


def is_prod_env() -> bool:
    """Return True if the current environment is the production one."""
    return get_env() == PROD


def generate_log_id() -> str:
    """Return a 32-digit id: a Shanghai-time timestamp and 18 random digits."""
    now = datetime.now(_SHANGHAI)
    rng = random.Random(time.time_ns())
    random_part = f"{rng.getrandbits(63):018d}"[:18]
    return now.strftime("%Y%m%d%H%M%S") + random_part


def get_log_id() -> str:
    """Return the log id of the current context, or ""."""
    return _log_id.get()


@contextmanager
def with_log_id(log_id: str) -> Iterator[str]:
    """Use log_id as the current log id for the duration of the block."""
    token = _log_id.set(log_id)
    try:
        yield log_id
    finally:
        _log_id.reset(token)