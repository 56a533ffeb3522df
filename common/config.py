"""Centralized application configuration using Pydantic settings."""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration shared across services."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    database_url: str = Field(
        default="sqlite:///./hostel.db",
        description="SQLAlchemy database URL. Defaults to local SQLite for development.",
    )
    run_db_migrations: bool = Field(
        default=False,
        description="Whether this service should create/update database tables on startup.",
    )
    seed_initial_data: bool = Field(
        default=False,
        description="Create the default warden, rooms and food menu on startup when missing.",
    )
    jwt_secret: str = Field(default="hostel-management-secret", description="JWT signing secret")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    access_token_expire_minutes: int = Field(default=24 * 60, description="Token lifetime in minutes")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")
    default_rate_limit: str = Field(default="60/minute", description="Global rate limiting rule")
    login_rate_limit: str = Field(default="10/minute", description="Rate limit applied to the login route")
    rate_limiting_enabled: bool = Field(default=True, description="Toggle to disable SlowAPI limits (useful in tests)")
    menu_cache_ttl: int = Field(default=300, description="TTL (s) for the cached food menu")
    log_dir: str = Field(default="logs", description="Directory receiving the per-service audit logs")

    default_warden_password: str = Field(default="warden123", description="Password given to the seeded warden")
    warden_office_hours: str = "9:00 AM - 5:00 PM (Monday to Friday)"
    warden_emergency_contact: str = "Available 24/7 for emergencies"

    users_service_port: int = 5001
    rooms_service_port: int = 5002
    approvals_service_port: int = 5003


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the Settings object."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached Settings instance (useful for tests)."""

    get_settings.cache_clear()
