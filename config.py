"""Runtime settings.

Read from ``CALC_``-prefixed environment variables, or a ``.env`` file in
the working directory.
"""
from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from entry import MAX_LENGTH_LIMIT


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CALC_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    debug: bool = False

    # Simulated payment processing time.
    payment_delay_seconds: float = Field(default=3.0, ge=0)

    # None keeps the entitlement in memory only.
    entitlement_path: Path | None = None

    max_entry_length: int = Field(default=64, ge=1, le=MAX_LENGTH_LIMIT)
    log_level: str = "INFO"
