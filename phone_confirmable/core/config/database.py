"""
Database connection settings.
"""
import logging
from typing import Optional

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class DatabaseSettings(BaseSettings):
    """
    Defines settings for connecting to the PostgreSQL database holding user records.

    Security Note:
        - POSTGRES_PASSWORD must be securely stored and never logged or exposed
          in version control.
    Performance Note:
        - Tune POSTGRES_POOL_SIZE and POSTGRES_MAX_OVERFLOW based on application
          load and database server capacity.
    """
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: Optional[SecretStr] = None
    POSTGRES_DB: str = "phone_confirmable"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = Field(ge=1, le=65535, default=5432)
    POSTGRES_POOL_SIZE: int = Field(ge=1, default=10)
    POSTGRES_MAX_OVERFLOW: int = Field(ge=0, default=20)
    DATABASE_URL: str = Field(default="", validate_default=True)

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_url(cls, v: Optional[str], info: ValidationInfo) -> str:
        """
        Assembles the async database connection URL if not provided explicitly.

        Args:
            v: Explicitly provided URL or None.
            info: Validation context with other field values.

        Returns:
            Assembled or provided database URL.
        """
        if v:
            return v

        values = info.data
        password = values.get("POSTGRES_PASSWORD")
        if not password:
            logger.warning("POSTGRES_PASSWORD not set during DATABASE_URL assembly.")
            credentials = values.get("POSTGRES_USER")
        else:
            credentials = f"{values.get('POSTGRES_USER')}:{password.get_secret_value()}"

        url = (
            f"postgresql+asyncpg://{credentials}@{values.get('POSTGRES_HOST')}:"
            f"{values.get('POSTGRES_PORT')}/{values.get('POSTGRES_DB')}"
        )
        logger.debug("Assembled DATABASE_URL (password masked for security).")
        return url
