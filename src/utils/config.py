"""Application settings loaded from the environment and an optional .env file."""

import logging
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEVELOPMENT_JWT_SECRET = "development-only-jwt-secret-change-me"


class Settings(BaseSettings):
    # Security
    jwt_secret_key: Optional[str] = None
    jwt_expiration_hours: int = 24
    bcrypt_rounds: int = 12

    # Storage
    database_url: str = "sqlite+pysqlite:///:memory:"

    # HTTP
    cors_origins: str = "*"
    port: int = 5000

    log_level: str = "INFO"
    environment: str = "development"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True)

    @model_validator(mode="after")
    def _require_secret_in_production(self) -> "Settings":
        if not self.jwt_secret_key:
            if self.is_production:
                raise ValueError(
                    "JWT_SECRET_KEY environment variable is required. "
                    "Generate a secure key with: openssl rand -hex 32"
                )
            logger.warning("JWT_SECRET_KEY not set, using the development signing key")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def signing_key(self) -> str:
        return self.jwt_secret_key or DEVELOPMENT_JWT_SECRET


def load_settings(env_file: Optional[str] = ".env") -> Settings:
    """Read settings from environment variables, then the env file if present.

    Raises:
        pydantic.ValidationError: JWT_SECRET_KEY missing in production, or a malformed value
    """
    return Settings(_env_file=env_file)
