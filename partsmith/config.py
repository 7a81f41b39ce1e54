"""Library configuration using Pydantic Settings.

Reads configuration from environment variables (prefixed ``PARTSMITH_``)
with sensible defaults. These settings govern the ambient behaviour of the
library (logging, file reading, watching); per-engine options live in the
engine's ConfigStore.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PARTSMITH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    environment: Literal["prod", "staging", "dev"] = Field(
        default="dev",
        description="Environment name",
    )

    # =========================================================================
    # File source
    # =========================================================================
    include_hidden: bool = Field(
        default=False,
        description="Read dot-files and dot-directories from source paths",
    )
    read_contents: bool = Field(
        default=True,
        description="Attach file bytes to file records as 'contents'",
    )
    watch_interval: float = Field(
        default=0.5,
        gt=0.0,
        description="Polling interval in seconds for source watching",
    )

    # =========================================================================
    # Logging
    # =========================================================================
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_json: bool = Field(
        default=False,
        description="Output logs as JSON",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for convenience
settings = get_settings()
