import os
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings read from the environment or ``local.env``.

    ``DATABASE_URL`` must point at SQLite (e.g. ``sqlite:///./edublog.db``). Post
    search relies on SQLite's ``json_each`` and the ``casefold`` function
    registered by ``make_engine``; no other database driver is installed.
    """
    # Required, the app refuses to start without them
    DATABASE_URL: str = Field(min_length=1)
    JWT_SECRET: str = Field(min_length=1)

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ORIGINS: List[str] = ["*"]

    # Tokens
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=7 * 24 * 60, gt=0)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default=30, gt=0)

    # Optional development settings
    LOG_LEVEL: str = "INFO"
    DB_ECHO: bool = False

    class Config:
        # Look for env file in project root, even when running from subdirectories
        env_file = os.getenv("ENV_FILE") or str(Path(__file__).parent.parent.parent / "local.env")
        # Allow case-insensitive environment variable names
        case_sensitive = False
        frozen = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
