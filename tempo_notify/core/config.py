# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Notify Configuration — Environment-driven settings.

All configuration is loaded from environment variables (or .env file).
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from tempo_notify.kernel.clock import parse_timezone


class NotifySettings(BaseSettings):
    """Notification service configuration loaded from environment."""

    # --- Server ---
    HOST: str = Field(default="0.0.0.0", description="Bind host")
    PORT: int = Field(default=8082, description="Bind port")
    LOG_LEVEL: str = Field(default="INFO")

    # --- Clock Matcher ---
    TIMEZONE: str = Field(
        default="+05:30",
        description="Timezone for time-of-day matching: UTC offset or IANA name",
    )
    POLL_INTERVAL: float = Field(
        default=30.0,
        description="Seconds between clock checks while a target is armed",
    )
    MATCH_MAX_WAIT: float = Field(
        default=86460.0,
        description="Seconds before an unmatched target expires (<= 0 disables)",
    )

    # --- Broadcast ---
    SEND_TIMEOUT: float = Field(
        default=5.0,
        description="Per-client send timeout in seconds",
    )

    # --- Static ---
    STATIC_INDEX: str = Field(
        default="static/index.html",
        description="Home page served on GET /",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    @field_validator("TIMEZONE")
    @classmethod
    def _check_timezone(cls, v: str) -> str:
        parse_timezone(v)
        return v

    @field_validator("POLL_INTERVAL", "SEND_TIMEOUT")
    @classmethod
    def _check_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v


# Global singleton
settings = NotifySettings()
