"""Parser configuration using Pydantic Settings."""

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_TEN_MB = 10 * 1024 * 1024


class Settings(BaseSettings):
    """Parser settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Limits
    parser_max_xml_size: int = Field(
        default=_TEN_MB, gt=0, description="Maximum FDX payload size in bytes"
    )
    parser_max_file_size: int = Field(
        default=_TEN_MB, gt=0, description="Maximum script file size read from disk"
    )

    # Fountain heuristics
    parser_max_cue_length: int = Field(
        default=50, gt=0, description="Character cues must be shorter than this"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level and reject names unknown to ``logging``."""
        level = str(v).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid log level: {v}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
