# /gemclient/config.py
from __future__ import annotations

import os

from pydantic import BaseModel


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name)
    return float(raw) if raw else None


class Settings(BaseModel):
    # Protocol constants
    DEFAULT_PORT: int = 1965
    MAX_REDIRECTS: int = 5

    # Transfer
    CHUNK_SIZE: int = int(os.getenv("GEMINI_CHUNK_SIZE", "16384"))
    TIMEOUT_SECONDS: float | None = _optional_float("GEMINI_TIMEOUT_SECONDS")  # unset = no timeout

    # TOFU
    TOFU_MISMATCH_POLICY: str = os.getenv("TOFU_MISMATCH_POLICY", "keep")  # keep | forget
    TOFU_KEY_PREFIX: str = os.getenv("TOFU_KEY_PREFIX", "tofu")

    # Redis (trust store)
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
