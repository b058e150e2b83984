"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables
    - get_settings() is cached (lru_cache) — single instance per process, never hot-reloaded
    - An empty admin_key disables every admin route

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - claim_token_ttl_days defaults to None: claim links keep working until the
      card is claimed, however long the printed card sat in a drawer
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://spex:spex@db:5432/spex"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgres:// URLs; asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str):
            for prefix in ("postgres://", "postgresql://"):
                if v.startswith(prefix):
                    return v.replace(prefix, "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Credentials
    jwt_secret: str = "dev-secret"
    jwt_algorithm: str = "HS256"
    ownership_token_ttl_days: int = 90
    claim_token_ttl_days: int | None = None

    # Admin
    admin_key: str = ""

    # Public URLs
    base_url: str = "http://localhost:8080"
    frontend_base: str = "http://localhost:3000"

    # Uploads
    upload_dir: str = "uploads"
    upload_max_bytes: int = 2 * 1024 * 1024

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def ownership_ttl(self) -> timedelta:
        return timedelta(days=self.ownership_token_ttl_days)

    @property
    def claim_ttl(self) -> timedelta | None:
        if self.claim_token_ttl_days is None:
            return None
        return timedelta(days=self.claim_token_ttl_days)


@lru_cache
def get_settings() -> Settings:
    return Settings()
