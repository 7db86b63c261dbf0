"""Application configuration from environment."""
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from env / .env."""

    app_name: str = "Poker Drill Engine"
    debug: bool = False
    log_level: str = "INFO"

    # Database (any async SQLAlchemy URL)
    database_url: str = "sqlite+aiosqlite:///./drill_engine.db"

    # JWT identity issued upstream
    secret_key: str = "change-me-in-production-use-env"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Spaced repetition: days per repetition, last value repeats
    interval_days: list[int] = [1, 2, 3, 5, 8, 13, 14]
    retry_minutes: int = 10

    # Due drills
    due_limit_default: int = 5
    due_limit_max: int = 50

    # Queue bootstrap
    bootstrap_max_leaks: int = 3

    # Skill rating (default step strategy)
    rating_initial: int = 50
    rating_correct_delta: int = 4
    rating_wrong_delta: int = -6
    rating_min: int = 0
    rating_max: int = 100

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
