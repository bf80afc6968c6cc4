"""Application settings and configuration.

This module defines all configuration options for the Groupdeedo Stage
application. Settings are loaded from environment variables with sensible
defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Groupdeedo Stage", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    base_url: str = Field(default="https://groupdeedo.com", alias="BASE_URL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./groupdeedo.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Membership and matching
    geofence_enabled: bool = Field(default=False, alias="GEOFENCE_ENABLED")
    default_radius_miles: float = Field(default=10.0, gt=0, alias="DEFAULT_RADIUS_MILES")
    default_display_name: str = Field(default="Anonymous", alias="DEFAULT_DISPLAY_NAME")
    max_display_name_length: int = Field(default=50, alias="MAX_DISPLAY_NAME_LENGTH")
    max_message_length: int = Field(default=500, alias="MAX_MESSAGE_LENGTH")

    # Snapshot loading
    snapshot_limit: int = Field(default=100, ge=1, alias="SNAPSHOT_LIMIT")
    snapshot_delay_seconds: float = Field(default=1.0, ge=0, alias="SNAPSHOT_DELAY_SECONDS")

    # Community moderation: distinct downvoters needed to remove a post
    auto_moderation_threshold: int = Field(default=3, ge=1, alias="AUTO_MODERATION_THRESHOLD")

    # Admin panel
    admin_password: str = Field(default="GroupdeedoAdmin2024!", alias="ADMIN_PASSWORD")
    admin_session_hours: int = Field(default=24, alias="ADMIN_SESSION_HOURS")

    # Retention sweep
    retention_days: int = Field(default=30, ge=1, alias="RETENTION_DAYS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling such as Alembic."""
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def uses_default_admin_password(self) -> bool:
        """Return True when the admin password was never overridden."""
        return self.admin_password == Settings.model_fields["admin_password"].default


settings = Settings()
