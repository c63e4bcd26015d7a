"""Application settings using Pydantic Settings.

Centralized configuration for the filing core. Every value can be
overridden with a FILING_-prefixed environment variable, e.g.
FILING_DEFAULT_MAX_FILE_SIZE_MB=20 or
FILING_DEFAULT_ALLOWED_FORMATS='["pdf","png"]'.
"""

import logging
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class FilingSettings(BaseSettings):
    """Main filing core settings."""

    model_config = SettingsConfigDict(
        env_prefix="FILING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application info
    name: str = Field(default="Social Insurance Filing Core", description="Application name")
    environment: str = Field(default="development", description="Environment name")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    # Attachment defaults (used when neither filing type nor organization sets a policy)
    default_allowed_formats: List[str] = Field(
        default=["pdf", "jpg", "jpeg", "png"],
        description="Allowed attachment file extensions",
    )
    default_max_file_size_mb: int = Field(default=10, ge=1, description="Maximum attachment size in MB")

    # Deadlines
    prompt_deadline_days: int = Field(
        default=14, ge=0,
        description="Days after creation for address/name change external filings",
    )
    internal_deadline_days: int = Field(default=3, ge=0, description="Notification lead time, internal filings")
    external_deadline_days: int = Field(default=7, ge=0, description="Notification lead time, external filings")

    @field_validator("default_allowed_formats")
    @classmethod
    def normalise_formats(cls, value: List[str]) -> List[str]:
        """Lower-case extensions without a leading dot."""
        return [v.lower().lstrip(".") for v in value if v and v.strip()]

    @field_validator("log_level")
    @classmethod
    def normalise_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() in ("production", "prod")

    @property
    def max_file_size_bytes(self) -> int:
        return self.default_max_file_size_mb * 1024 * 1024


@lru_cache()
def get_settings() -> FilingSettings:
    """
    Get cached application settings instance.

    Returns:
        FilingSettings: Cached settings loaded from environment.
    """
    return FilingSettings()
