"""Client configuration using Pydantic Settings.

Configuration is environment-aware:
- CRPT_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
CRPT_ENV = os.getenv("CRPT_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(CRPT_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (deployments might inject env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_api_settings() -> "ApiSettings":
    """Build API settings from environment."""

    return ApiSettings()


def _build_rate_limit_settings() -> "RateLimitSettings":
    """Build rate limit settings from environment."""

    return RateLimitSettings()


def _build_log_settings() -> "LogSettings":
    """Build logging settings from environment."""

    return LogSettings()


class ApiSettings(BaseSettings):
    """Remote CRPT API endpoint configuration."""

    base_url: str = Field(
        "https://ismp.crpt.ru/api/v3",
        description="Base URL of the CRPT API (without trailing slash)",
    )
    create_document_path: str = Field(
        "/lk/documents/create",
        description="Path of the document creation endpoint",
    )
    timeout_seconds: float = Field(
        30.0,
        description="Overall request timeout in seconds",
        gt=0,
    )
    connect_timeout_seconds: float = Field(
        30.0,
        description="Connection establishment timeout in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="CRPT_API_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Client-side admission gate configuration."""

    requests: int = Field(
        10,
        description="Maximum number of requests admitted per window",
        ge=1,
    )
    window_seconds: float = Field(
        1.0,
        description="Length of the sliding window in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="CRPT_RATE_LIMIT_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field(
        "INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR)",
    )
    format: str = Field(
        "json",
        description="Log format: 'json' or 'plain'",
    )
    output: str = Field(
        "stdout",
        description="Log destination: 'stdout' or 'file'",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output is 'file'",
    )
    max_bytes: int = Field(
        10_485_760,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(
        5,
        description="Number of rotated log files to keep",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main client settings container.

    Automatically loads from the appropriate .env.{CRPT_ENV} file.
    Raises validation errors on creation if a setting is out of range.
    """

    crpt_env: str = CRPT_ENV
    api: ApiSettings = Field(default_factory=_build_api_settings)
    rate_limit: RateLimitSettings = Field(default_factory=_build_rate_limit_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
