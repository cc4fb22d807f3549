# config.py
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Token verification
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    database_url: str = "sqlite:///./expenses.db"

    # "name" merges participants sharing a display name
    balance_key: Literal["name", "user_id"] = "name"

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()
    except Exception as e:
        raise ValueError(
            f"Failed to load settings. Set EXPENSE_TRACKER_JWT_SECRET in the "
            f"environment or in a .env file.\nError: {e}"
        ) from e
