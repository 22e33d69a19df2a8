"""
Centralized configuration management for flashdeck.
"""
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_db_path() -> Path:
    """Returns the default path for the database file."""
    return Path.home() / ".flashdeck" / "flashdeck.db"


class Settings(BaseSettings):
    """
    Application settings, loaded from FLASHDECK_* environment variables or a
    .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FLASHDECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Overridden by FLASHDECK_DB_PATH.
    db_path: Path = get_default_db_path()

    # Signed-in user. Overridden by FLASHDECK_USER_ID; None means signed out.
    user_id: Optional[str] = None

    # When True, disables safety checks that prevent data loss during tests.
    # Should NEVER be enabled in production. Set via FLASHDECK_TESTING_MODE.
    testing_mode: bool = False


settings = Settings()
