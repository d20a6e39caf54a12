"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. DATABASE_URL is validated when the engine is first
needed, not at import time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings have defaults; database_url must be set before any
    store operation runs (see database._ensure_engine).
    """

    # App
    app_name: str = "helpdesk"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database (postgresql+asyncpg://... in production)
    database_url: str = ""
    database_echo: bool = False
    # Optional pool overrides (None = use defaults in database.py)
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # Tickets
    ticket_reference_prefix: str = "T"
    ticket_reference_max_attempts: int = 5

    # Notifications: rows older than this are removed by the maintenance sweep.
    notification_retention_days: int = 30

    # bcrypt cost for staff passwords; older hashes are upgraded on login.
    password_hash_rounds: int = 12

    # Bootstrap admin account (created by scripts/seed_rbac.py when both are set)
    default_admin_username: str = "admin"
    default_admin_password: SecretStr | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_ranges(self) -> "Settings":
        """Reject values that would make ticket creation or pruning misbehave."""
        if self.ticket_reference_max_attempts < 1:
            raise ValueError("TICKET_REFERENCE_MAX_ATTEMPTS must be at least 1")
        if self.notification_retention_days < 1:
            raise ValueError("NOTIFICATION_RETENTION_DAYS must be at least 1")
        if not 4 <= self.password_hash_rounds <= 31:
            raise ValueError("PASSWORD_HASH_ROUNDS must be between 4 and 31")
        if not self.ticket_reference_prefix.isalnum():
            raise ValueError(
                f"TICKET_REFERENCE_PREFIX must be alphanumeric, got: {self.ticket_reference_prefix!r}"
            )
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
