"""Application settings and configuration management."""

from __future__ import annotations

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lexicard.domain.shared.models import Direction


class Settings(BaseSettings):
    """Application settings with environment variable and ``.env`` support."""

    # Storage
    database_path: str = Field(default="data/lexicard.db", alias="LEXICARD_DATABASE_PATH")

    # Practice
    default_direction: Direction = Field(
        default=Direction.FORWARD, alias="LEXICARD_DEFAULT_DIRECTION"
    )
    shuffle_seed: int | None = Field(default=None, alias="LEXICARD_SHUFFLE_SEED")

    # Logging
    log_level: str = Field(default="INFO", alias="LEXICARD_LOG_LEVEL")
    log_file: str = Field(default="logs/lexicard.log", alias="LEXICARD_LOG_FILE")

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
