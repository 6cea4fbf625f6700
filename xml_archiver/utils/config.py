"""
Configuration management for the XML archiver.

Uses pydantic-settings to load configuration from environment variables
and .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Watch Configuration
    watch_dir: Path = Path(".")
    recursive: bool = False
    watch_suffix: str = ".xml"

    # Archive Configuration
    archive_name: str = "xml_archive.zip"
    staging_prefix: str = "_"
    compression_level: Optional[int] = Field(default=None, ge=0, le=9)

    # Settle Configuration
    settle_ticks: int = Field(default=5, ge=1)
    tick_interval: float = Field(default=1.0, gt=0)

    # Delivery Configuration
    retry_delay: float = Field(default=1.0, ge=0)
    max_attempts: Optional[int] = Field(default=None, ge=1)

    # Process Configuration
    lock_name: str = "xml-archiver"
    log_level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="XML_ARCHIVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalise_log_level(cls, value):
        """Accept loguru level names in any case."""
        return value.upper() if isinstance(value, str) else value

    def get_archive_path(self) -> Path:
        """Resolve the archive file against the watch directory."""
        archive = Path(self.archive_name).expanduser()
        if archive.is_absolute():
            return archive
        return self.watch_dir.expanduser() / archive


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
