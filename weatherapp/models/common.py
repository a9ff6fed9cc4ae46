"""Common types and helpers shared across models."""

import time
from datetime import UTC, datetime
from typing import TypeAlias

FavoriteId: TypeAlias = str


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000
