"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - db_query_timeout_seconds bounds every store call

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    environment: str = "development"
    version: str = "1.0.0"

    # Database
    database_url: str = (
        "postgresql+asyncpg://replays:replays@db:5432/replays"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 25
    database_max_overflow: int = 10
    db_query_timeout_seconds: float = 3.0

    # Credentials & tokens
    bcrypt_cost: int = 12
    authentication_token_ttl_hours: int = 24
    activation_token_ttl_hours: int = 72

    # SMTP — mail is skipped (logged) when smtp_host is empty
    smtp_host: str = ""
    smtp_port: int = 25
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_sender: str = "Dota Replays <no-reply@dotareplays.local>"
    smtp_timeout_seconds: float = 5.0

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Per-client-IP rate limiting
    limiter_enabled: bool = True
    limiter_rps: float = 2.0
    limiter_burst: int = 4

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
