"""
Centralized configuration management for the revocab application.
"""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_db_path() -> Path:
    """Returns the default path for the database file."""
    return Path.home() / ".revocab" / "revocab.db"


class Settings(BaseSettings):
    """
    Defines application settings, loaded from environment variables or .env files.
    """

    model_config = SettingsConfigDict(
        env_prefix="REVOCAB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Overridden by REVOCAB_DB_PATH.
    db_path: Path = get_default_db_path()

    # Stable identifier that scopes every set and persistence call.
    # Overridden by REVOCAB_OWNER_ID.
    owner_id: str = "local"

    # When True, disables safety checks that prevent data loss during tests.
    # Should NEVER be enabled in production.
    testing_mode: bool = False


settings = Settings()
