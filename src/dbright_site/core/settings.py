"""Application settings and configuration.

This module defines all configuration options for the Dbright site backend.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Documented fallbacks; acceptable for local development only.
DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "admin123"
DEFAULT_SESSION_SECRET = "change-this-secret-key"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or a `.env` file.
    """

    # Application metadata
    app_name: str = Field(default="Dbright Services", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./dbright.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Admin credentials and session
    admin_username: str = Field(default=DEFAULT_ADMIN_USERNAME, alias="ADMIN_USERNAME")
    admin_password: str = Field(default=DEFAULT_ADMIN_PASSWORD, alias="ADMIN_PASSWORD")
    admin_password_hash: str | None = Field(default=None, alias="ADMIN_PASSWORD_HASH")
    session_secret: str = Field(default=DEFAULT_SESSION_SECRET, alias="SESSION_SECRET")
    session_cookie_name: str = Field(default="admin_session", alias="SESSION_COOKIE_NAME")
    session_max_age_days: int = Field(default=7, alias="SESSION_MAX_AGE_DAYS")
    session_cookie_secure: bool = Field(default=True, alias="SESSION_COOKIE_SECURE")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")

    # Dashboard and export behaviour
    site_timezone: str = Field(default="Asia/Tokyo", alias="SITE_TIMEZONE")
    stats_timeout_seconds: float = Field(default=5.0, alias="STATS_TIMEOUT_SECONDS")
    schema_init_timeout_seconds: float = Field(
        default=8.0,
        alias="SCHEMA_INIT_TIMEOUT_SECONDS",
    )
    export_row_cap: int = Field(default=10_000, alias="EXPORT_ROW_CAP")
    rate_limit_sweep_seconds: float = Field(default=3600.0, alias="RATE_LIMIT_SWEEP_SECONDS")

    # Outbound mail for new submissions
    notify_enabled: bool = Field(default=False, alias="NOTIFY_ENABLED")
    send_user_confirmation: bool = Field(default=False, alias="SEND_USER_CONFIRMATION")
    contact_email: str | None = Field(default=None, alias="CONTACT_EMAIL")
    smtp_host: str = Field(default="localhost", alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_user: str | None = Field(default=None, alias="SMTP_USER")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_from: str | None = Field(default=None, alias="SMTP_FROM")
    smtp_starttls: bool = Field(default=True, alias="SMTP_STARTTLS")

    # CORS configuration for the marketing frontend
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("database_url")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        # Heroku-style URLs use postgres://, which SQLAlchemy 2.0 rejects; the
        # bundled driver is psycopg 3.
        for prefix in ("postgres://", "postgresql://"):
            if value.startswith(prefix):
                return value.replace(prefix, "postgresql+psycopg://", 1)
        return value

    @property
    def session_max_age_seconds(self) -> int:
        """Return the session lifetime in seconds."""
        return self.session_max_age_days * 24 * 60 * 60

    @property
    def mail_sender(self) -> str | None:
        """Return the envelope sender used for outbound mail."""
        return self.smtp_from or self.smtp_user

    def insecure_defaults(self) -> list[str]:
        """Return the names of options still set to their insecure defaults.

        Returns:
            Environment variable names that should be overridden in production
        """
        insecure: list[str] = []
        if self.admin_username == DEFAULT_ADMIN_USERNAME:
            insecure.append("ADMIN_USERNAME")
        if self.admin_password_hash is None and self.admin_password == DEFAULT_ADMIN_PASSWORD:
            insecure.append("ADMIN_PASSWORD")
        if self.session_secret == DEFAULT_SESSION_SECRET:
            insecure.append("SESSION_SECRET")
        return insecure


settings = Settings()
