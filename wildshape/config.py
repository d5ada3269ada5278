from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Settings:
    redis_url: str
    key_prefix: str
    # Delay before position is re-applied after a resize.
    resize_settle_delay_ms: int
    log_level: str


def settings_from_env() -> Settings:
    return Settings(
        redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
        key_prefix=os.environ.get("WILDSHAPE_KEY_PREFIX", "wildshape"),
        resize_settle_delay_ms=int(os.environ.get("WILDSHAPE_RESIZE_DELAY_MS", "10")),
        log_level=os.environ.get("WILDSHAPE_LOG_LEVEL", "INFO").upper(),
    )
