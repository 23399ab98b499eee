"""
Runtime configuration helpers for the collaboration backend.

Loads DATABASE_URL and the remaining variables from the process environment,
falling back to the .env file located in the project root.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root
BASE_DIR = Path(__file__).resolve().parents[1]

# Absolute path to .env
ENV_PATH = BASE_DIR / ".env"

# Load .env defaults without overriding environment variables provided by the platform
load_dotenv(dotenv_path=ENV_PATH, override=False)

DEFAULT_REQUEST_MESSAGE = "Would like to collaborate with you!"


class Settings(BaseSettings):
    # Required field — must come from the environment or .env
    database_url: str = Field(..., alias="DATABASE_URL")

    app_name: str = Field(default="ScholarLink Collaborations", alias="APP_NAME")
    api_version: str = Field(default="0.1.0", alias="API_VERSION")
    cors_origins: str | None = Field(default=None, alias="CORS_ORIGINS")

    # Bearer tokens
    jwt_secret_key: str | None = Field(default=None, alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_expires_minutes: int = Field(default=1440, alias="JWT_EXPIRES_MINUTES")

    # Collaboration requests
    default_request_message: str = Field(default=DEFAULT_REQUEST_MESSAGE, alias="DEFAULT_REQUEST_MESSAGE")
    membership_retry_attempts: int = Field(default=3, alias="MEMBERSHIP_RETRY_ATTEMPTS")
    membership_retry_delay_seconds: float = Field(default=0.5, alias="MEMBERSHIP_RETRY_DELAY_SECONDS")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["DEFAULT_REQUEST_MESSAGE", "Settings", "get_settings"]
