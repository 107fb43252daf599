"""
Application configuration settings.
"""

import logging

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, Self


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Pickid Result Engine"
    APP_VERSION: str = "0.1.0"
    ENV: Literal["development", "production", "test"] = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database (read-only access to test/result definitions)
    DATABASE_URL: str = "sqlite:///./pickid.db"
    DB_ECHO: bool = False  # Log SQL statements

    # Result matching
    # Stored score conditions historically used both "min"/"max" and
    # "min_score"/"max_score". When enabled, the legacy spelling is mapped
    # onto min/max at load time.
    MATCH_ACCEPT_LEGACY_SCORE_FIELDS: bool = True
    MATCH_CODE_SEPARATOR: str = Field(
        default=",",
        min_length=1,
        description="Separator used when comparing joined code combinations",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields from .env not defined in Settings
    )

    @model_validator(mode="after")
    def validate_log_level(self) -> Self:
        """Reject log levels the logging module does not know."""
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        if not isinstance(level, int):
            raise ValueError(
                f"LOG_LEVEL must be a standard logging level name, got {self.LOG_LEVEL!r}"
            )
        self.LOG_LEVEL = self.LOG_LEVEL.upper()
        return self


settings = Settings()
