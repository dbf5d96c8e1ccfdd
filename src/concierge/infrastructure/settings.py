"""Configuration for the access engine, read from the environment.

Each section is its own pydantic-settings model with a ``CONCIERGE_*``
prefix and a cached getter. Local runs work without any variables set;
deployments point ``CONCIERGE_DB_*`` at the directory database.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Directory store connection and pool settings.

    Environment variables:
        CONCIERGE_DB_HOST: Server host (default: localhost)
        CONCIERGE_DB_PORT: Server port (default: 5432)
        CONCIERGE_DB_DATABASE: Database name (default: concierge)
        CONCIERGE_DB_USERNAME: Login role (default: concierge)
        CONCIERGE_DB_PASSWORD: Login password (empty for local trust auth)
        CONCIERGE_DB_POOL_SIZE: Connections kept open (default: 5)
        CONCIERGE_DB_MAX_OVERFLOW: Extra connections allowed under load (default: 0)
        CONCIERGE_DB_POOL_TIMEOUT: Seconds to wait for a free connection (default: 10)
        CONCIERGE_DB_ECHO: Log emitted SQL (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="CONCIERGE_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost")
    port: int = Field(default=5432, ge=1, le=65535)
    database: str = Field(default="concierge", min_length=1)
    username: str = Field(default="concierge", min_length=1)
    password: SecretStr = Field(default=SecretStr(""))
    pool_size: int = Field(default=5, ge=1, le=100)
    max_overflow: int = Field(default=0, ge=0, le=100)
    pool_timeout: float = Field(default=10.0, gt=0)
    echo: bool = Field(default=False)

    @model_validator(mode="after")
    def check_pool_ceiling(self) -> "DatabaseSettings":
        """Reject pools that could open more than 100 connections."""
        ceiling = self.pool_size + self.max_overflow
        if ceiling > 100:
            raise ValueError(
                f"pool_size + max_overflow is {ceiling}; at most 100 connections are allowed"
            )
        return self

    @property
    def redacted_dsn(self) -> str:
        """DSN safe to put in log lines: the password is never included."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class AccessSettings(BaseSettings):
    """Session resolution and access gate settings.

    Environment variables:
        CONCIERGE_ACCESS_SIGN_IN_PATH: Where unauthenticated users are sent
        CONCIERGE_ACCESS_TENANT_SELECTION_PATH: Where users without a company go
        CONCIERGE_ACCESS_ROLE_FALLBACK_PATH: Where role/module gate failures go
        CONCIERGE_ACCESS_DEFAULT_ASSIGNED_ROLE: Role used by manual company assignment
        CONCIERGE_ACCESS_AVATAR_SIZE: Pixel size requested for hosted avatars
        CONCIERGE_ACCESS_DENIAL_MESSAGE_TEMPLATE: Denial text, formatted with {email}
        CONCIERGE_ACCESS_READ_FAILURE_MESSAGE: Text shown when lookups fail
    """

    model_config = SettingsConfigDict(
        env_prefix="CONCIERGE_ACCESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    sign_in_path: str = Field(default="/login")
    tenant_selection_path: str = Field(default="/select-company")
    role_fallback_path: str = Field(default="/")
    default_assigned_role: str = Field(default="agent", min_length=1)
    avatar_size: int = Field(default=96, ge=16, le=1024)
    denial_message_template: str = Field(
        default="{email} does not have permission to access this application."
    )
    read_failure_message: str = Field(default="Failed to load authentication state.")

    @model_validator(mode="after")
    def validate_paths(self) -> "AccessSettings":
        """Gate redirect targets must be absolute application paths."""
        for name in ("sign_in_path", "tenant_selection_path", "role_fallback_path"):
            value = getattr(self, name)
            if not value.startswith("/"):
                raise ValueError(f"{name} must start with '/', got {value!r}")
        return self

    def denial_message(self, email: str) -> str:
        """Render the user-visible denial message for an email."""
        return self.denial_message_template.format(email=email)


class Settings(BaseSettings):
    """Process-wide settings plus accessors for the section models.

    Environment variables:
        CONCIERGE_APP_NAME: Name stamped on log lines (default: Concierge)
        CONCIERGE_LOG_LEVEL: Minimum log level (default: INFO)
        CONCIERGE_LOG_JSON: Render logs as JSON instead of console text
    """

    model_config = SettingsConfigDict(
        env_prefix="CONCIERGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="Concierge")
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    @property
    def database(self) -> DatabaseSettings:
        return get_database_settings()

    @property
    def access(self) -> AccessSettings:
        return get_access_settings()


@lru_cache
def get_settings() -> Settings:
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    return DatabaseSettings()


@lru_cache
def get_access_settings() -> AccessSettings:
    """Access settings, read from the environment once per process."""
    return AccessSettings()
