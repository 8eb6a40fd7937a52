"""Settings for the Bill backend, read from the environment or a .env file."""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PII_HASH_SECRET_MIN_LENGTH = 32


def _split_csv(value: str | list[str]) -> list[str]:
    """Split a comma-separated variable into its non-empty, trimmed items."""
    items = value if isinstance(value, list) else value.split(",")
    return [item.strip() for item in items if item.strip()]


class Settings(BaseSettings):
    """Environment-backed settings. Secrets are read from SECRET_-prefixed variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # API Settings
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Bill"
    DEBUG: bool = False
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    @field_validator("ALLOWED_ORIGINS", mode="after")
    @classmethod
    def parse_cors(cls, v: str | list[str]) -> list[str]:
        return _split_csv(v)

    # Database Settings
    DATABASE_URL: str = Field(validation_alias="SECRET_DATABASE_URL")
    DATABASE_ECHO: bool = False
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10

    # Supabase (identity provider) Settings
    SUPABASE_URL: str
    SUPABASE_ANON_KEY: str = Field(validation_alias="SECRET_SUPABASE_ANON_KEY")
    SUPABASE_JWT_SECRET: str = Field(validation_alias="SECRET_SUPABASE_JWT_SECRET")
    AUTH_PROVIDER_TIMEOUT: float = 10.0  # Seconds before a sign-up call to the provider is abandoned
    JWT_AUDIENCE: str = "authenticated"

    # PII Hashing Settings
    PII_HASH_SECRET: str = Field(validation_alias="SECRET_PII_HASH")  # HMAC key for hashing emails in logs

    @field_validator("PII_HASH_SECRET", mode="after")
    @classmethod
    def validate_pii_hash_secret(cls, v: str) -> str:
        """A short key would make email hashes in logs guessable."""
        if len(v) < PII_HASH_SECRET_MIN_LENGTH:
            msg = f"SECRET_PII_HASH must be at least {PII_HASH_SECRET_MIN_LENGTH} characters long"
            raise ValueError(msg)
        return v

    # Alembic Settings
    ALEMBIC_INI_PATH: str = "alembic.ini"

    # OpenTelemetry Settings
    OTEL_ENABLED: bool = True
    OTEL_SERVICE_NAME: str = "bill-backend"
    OTEL_ENVIRONMENT: str = "production"
    OTEL_EXPORTER_OTLP_TRACES_ENDPOINT: str | None = None
    OTEL_EXPORTER_OTLP_HEADERS: str | None = Field(default=None, validation_alias="SECRET_OTEL_HEADERS")
    OTEL_EXCLUDED_URLS: str = "/health,/ready"

    @field_validator("OTEL_EXCLUDED_URLS", mode="after")
    @classmethod
    def parse_otel_excluded_urls(cls, v: str | list[str]) -> list[str]:
        return _split_csv(v)

    # Logging Settings
    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        known = logging.getLevelNamesMapping()
        if level not in known:
            msg = f"Invalid LOG_LEVEL '{v}'; expected one of {', '.join(sorted(known))}"
            raise ValueError(msg)
        return level


settings = Settings()


def require_config(*field_names: str) -> None:
    """
    Fail fast when a module needs settings that are unset or blank.

    Called at import time by modules that cannot work without the named fields.

    Raises:
        ValueError: Naming every field that is missing, None or blank

    Example:
        require_config("SUPABASE_URL", "SUPABASE_ANON_KEY")
    """
    missing = [name for name in field_names if _is_blank(getattr(settings, name, None))]
    if missing:
        msg = f"Required configuration missing: {', '.join(missing)}"
        raise ValueError(msg)


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
