"""
Configuration loaded from environment variables.
"""
import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Store settings from environment variables (prefixed with DOCSTORE_)."""

    model_config = SettingsConfigDict(env_prefix="DOCSTORE_", env_file=".env", extra="ignore")

    # MongoDB
    mongo_uri: str = Field(default="mongodb://localhost:27017")
    database_name: str = Field(default="docstore")
    server_selection_timeout_ms: int = Field(default=5000)

    # Bindings
    create_missing_collections: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Apply the default log format, using the configured level unless one is given."""
    level = level or get_settings().log_level
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
