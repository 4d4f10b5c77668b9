"""Settings for deep.

``DeepSettings`` reads ``DEEP_``-prefixed environment variables (and a
``.env`` file) through pydantic-settings.

Examples:
    >>> from deep.settings import DeepSettings
    >>> settings = DeepSettings(database_url="sqlite:///:memory:")
    >>> settings.search_policy
    'strict'

Tags:
    settings, configuration, pydantic, environment, deep

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class DeepSettings(BaseSettings):
    """Runtime configuration for the data-access layer.

    Fields
    ──────
    database_url   : SQLAlchemy URL of the CMS database
    echo           : Log every SQL statement through SQLAlchemy
    pool_size      : Connection pool size (ignored for SQLite)
    max_overflow   : Pool overflow (ignored for SQLite)
    pool_timeout   : Pool checkout timeout in seconds (ignored for SQLite)
    log_level      : structlog log level
    json_logs      : JSON log output; ``None`` auto-detects from the tty
    search_policy  : ``strict`` raises on unknown search fields,
                     ``lenient`` logs and skips them
    """

    model_config = SettingsConfigDict(
        env_prefix="DEEP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str = "sqlite:///deep.db"
    echo: bool = False
    pool_size: int | None = None
    max_overflow: int | None = None
    pool_timeout: int | None = None

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── Queries ──────────────────────────────────────────────────
    search_policy: Literal["strict", "lenient"] = Field(
        default="strict",
        description="How the search scope treats field names that do not resolve",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return upper
