"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (e.g. SECRET_KEY) are validated at
load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except secret_key, which is
    validated in validate_required_and_storage.
    """

    # App
    app_name: str = "accounts"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database (SQLAlchemy async URL; sqlite+aiosqlite or postgresql+asyncpg)
    database_url: str = "sqlite+aiosqlite:///./accounts.db"
    database_echo: bool = False
    # Create tables on startup (dev/sqlite); otherwise run the alembic migrations.
    database_create_tables: bool = True

    # Security
    secret_key: SecretStr = SecretStr("")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 hours

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Picture storage
    storage_root: str = "./uploads"
    max_upload_size: int = 5 * 1024 * 1024  # 5MB
    allowed_image_types: str = "image/png,image/jpeg,image/gif,image/webp"

    # Request / middleware
    request_timeout_seconds: int = 60
    request_id_header: str = "X-Request-ID"
    rate_limit_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def allowed_image_type_set(self) -> frozenset[str]:
        """Allowed upload content types; empty set means any type is accepted."""
        return frozenset(
            t.strip().lower() for t in self.allowed_image_types.split(",") if t.strip()
        )

    @model_validator(mode="after")
    def validate_required_and_storage(self) -> "Settings":
        """Validate required env and storage/database settings."""
        if not self.secret_key.get_secret_value():
            raise ValueError(
                "SECRET_KEY is required. Generate with: openssl rand -hex 32."
            )
        if "+" not in self.database_url.split("://", 1)[0]:
            raise ValueError(
                f"DATABASE_URL must name an async driver (e.g. sqlite+aiosqlite, "
                f"postgresql+asyncpg), got: {self.database_url!r}"
            )
        if not self.storage_root:
            raise ValueError("STORAGE_ROOT is required for picture storage.")
        if self.max_upload_size <= 0:
            raise ValueError("MAX_UPLOAD_SIZE must be positive.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
