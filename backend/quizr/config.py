"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Rate-limit defaults: 60s window, 10 requests, 1000 keys, 5 min cleanup

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://quizr:quizr@db:5432/quizr"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres provides postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    database_timeout_seconds: float = 5.0

    # Trivia content source
    trivia_api_url: str = "https://opentdb.com/api.php?amount=1&type=multiple"
    trivia_timeout_seconds: float = 10.0

    # Rate limiting (process-local)
    rate_limit_window_seconds: int = 60
    rate_limit_max_requests: int = 10
    rate_limit_max_store_size: int = 1000
    rate_limit_cleanup_interval_seconds: int = 300

    # Push notifications
    push_api_url: str = "https://exp.host/--/api/v2/push/send"
    push_timeout_seconds: float = 30.0
    notification_title: str = "Quizr Daily Trivia!"
    # Unset -> POST /notifications/daily rejects every caller (fail closed)
    broadcast_secret: str | None = None

    # API
    cors_origins: list[str] = [
        "exp://localhost:19000",
        "http://localhost:19006",
        "https://localhost:19006",
    ]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
