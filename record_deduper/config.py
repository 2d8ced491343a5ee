"""
Configuration management for the record deduper.

Uses pydantic-settings for type-safe configuration with environment variable support.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DeduperSettings(BaseSettings):
    """Deduplication run settings."""

    model_config = SettingsConfigDict(
        env_prefix="DEDUPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None
    log_rotation: str = "10 MB"
    log_retention: str = "1 week"

    # Output file naming: <base><suffix><ext>
    unique_suffix: str = "_uniqs"
    duplicate_suffix: str = "_dupes"

    # File handling
    encoding: str = "utf-8"
    warn_on_overwrite: bool = True

    # Raise instead of warn when a record is missing a key field
    strict_short_records: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        """Accept lower-case level names from the environment."""
        return str(v).upper()

    @field_validator("unique_suffix", "duplicate_suffix")
    @classmethod
    def suffix_not_empty(cls, v: str) -> str:
        """An empty suffix would make an output overwrite the input."""
        if not v:
            raise ValueError("output suffix must not be empty")
        return v


@lru_cache()
def get_settings() -> DeduperSettings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DeduperSettings()


# Convenience handle for quick access
settings = get_settings()
