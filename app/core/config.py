"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_VERSION = "0.1.0"

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "postgres+psycopg2://",
    "sqlite://",
)


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    PORT: int = 8000
    API_V1_PREFIX: str = "/api/v1"

    # Required: no default, startup fails without it
    DATABASE_URL: str

    # JWT session tokens
    JWT_SECRET: SecretStr
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 1440
    JWT_COOKIE_NAME: str = "jwt"

    # Password reset tokens are single-use and short-lived
    PASSWORD_RESET_EXPIRE_MINUTES: int = 10

    # Outbound mail (SMTP); MAIL_USERNAME doubles as the sender address
    MAIL_HOST: str
    MAIL_PORT: int = 587
    MAIL_USERNAME: str
    MAIL_PASSWORD: SecretStr
    MAIL_USE_TLS: bool = True
    MAIL_TIMEOUT_SEC: float = 10.0

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("PORT must be between 1 and 65535")
        return v

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL URL (e.g. postgresql:// or postgresql+psycopg2://) "
                "or a sqlite:// URL"
            )
        return v.strip()

    @field_validator("JWT_SECRET", "MAIL_PASSWORD")
    @classmethod
    def validate_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("secret must be set and non-empty")
        return v

    @field_validator("JWT_ALGORITHM", "JWT_COOKIE_NAME", "MAIL_HOST", "MAIL_USERNAME")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("value must be set and non-empty")
        return v.strip()

    @field_validator("JWT_EXPIRE_MINUTES")
    @classmethod
    def validate_jwt_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 43200:
            raise ValueError(
                "JWT_EXPIRE_MINUTES must be between 1 and 43200 (1 min to 30 days)"
            )
        return v

    @field_validator("PASSWORD_RESET_EXPIRE_MINUTES")
    @classmethod
    def validate_reset_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 1440:
            raise ValueError("PASSWORD_RESET_EXPIRE_MINUTES must be between 1 and 1440")
        return v

    @field_validator("MAIL_TIMEOUT_SEC")
    @classmethod
    def validate_mail_timeout(cls, v: float) -> float:
        if v <= 0 or v > 120:
            raise ValueError("MAIL_TIMEOUT_SEC must be greater than 0 and at most 120")
        return v

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "prod"


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
