# classbook/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).resolve().parents[2] / ".env"
    load_dotenv(env_path)

_DEV_SECRET_KEY = "classbook-dev-secret-key-not-for-production"
PRODUCTION_ENVIRONMENTS = {"prod", "production", "live"}


class Settings(BaseSettings):
    """Runtime configuration read from the environment (and ``.env``)."""

    # Database
    database_url: str = Field(
        default="sqlite:///./classbook.db",
        description="SQLAlchemy database URL",
    )
    database_service_key: SecretStr = Field(
        default=SecretStr(""),
        description="Hosted database credential, used as the password when DATABASE_URL has none",
    )
    database_echo: bool = False

    # Stripe Configuration
    stripe_secret_key: SecretStr = Field(
        default=SecretStr(""),
        description="Stripe secret key for backend API calls",
    )
    stripe_webhook_secret: SecretStr = Field(
        default=SecretStr(""),
        description="Signing secret of the Stripe webhook endpoint",
    )
    stripe_webhook_tolerance_seconds: int = Field(
        default=300, description="Maximum accepted age of a signed webhook payload"
    )

    # Sessions
    secret_key: SecretStr = Field(
        default=SecretStr(_DEV_SECRET_KEY),
        description="Secret key for JWT session tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 720  # 12 hours
    session_cookie_name: str = Field(default="classbook_session")
    session_cookie_secure: bool = False
    session_cookie_samesite: Literal["lax", "strict", "none"] = "lax"

    # Runtime
    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed browser origins",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def _normalize_postgres_scheme(cls, value: object) -> object:
        # Hosted providers still hand out the legacy scheme SQLAlchemy rejects
        if isinstance(value, str) and value.startswith("postgres://"):
            return "postgresql://" + value[len("postgres://") :]
        return value

    @field_validator("session_cookie_secure", mode="before")
    @classmethod
    def _coerce_cookie_secure(cls, value: object) -> bool | object:
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return value

    @model_validator(mode="after")
    def _refuse_dev_secret_in_production(self) -> "Settings":
        if self.is_production and self.secret_key.get_secret_value() == _DEV_SECRET_KEY:
            raise ValueError("SECRET_KEY must be set in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in PRODUCTION_ENVIRONMENTS

    @property
    def webhook_secret(self) -> Optional[str]:
        """Return the configured Stripe webhook secret, or None when unset."""
        secret_str = self.stripe_webhook_secret.get_secret_value()
        return secret_str or None

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def session_max_age(self) -> int:
        return self.access_token_expire_minutes * 60


settings = Settings()
