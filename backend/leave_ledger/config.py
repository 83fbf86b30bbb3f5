from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Leave Ledger"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    database_url: str = "postgresql+asyncpg://leave_ledger:leave_ledger@db:5432/leave_ledger"
    db_lock_timeout_ms: int = 5000
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]

    # Quotas granted at onboarding.
    default_cl_balance: int = 16
    default_el_balance: int = 18
    default_rh_balance: int = 3

    cancellation_window_hours: int = 12
    notification_feed_limit: int = 50
    ledger_journal_enabled: bool = True
    permissive_reject: bool = False


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
