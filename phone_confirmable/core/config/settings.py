"""Main application settings and configuration management.

This module composes the settings from the different modules (app, database,
confirmation, sms) into a single `Settings` class, loaded from environment
variables and .env files.

Environment Support:
- Development: Uses .env, SMS test mode enabled
- Test: Uses .env.test, SMS test mode enabled
- Staging/Production: Uses .env.staging / .env.production, gateway required
"""

import logging
import os
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .confirmation import ConfirmationSettings
from .database import DatabaseSettings
from .sms import SmsSettings

logger = logging.getLogger(__name__)


class Settings(AppSettings, DatabaseSettings, ConfirmationSettings, SmsSettings):
    """The main settings class that aggregates all application configurations.

    Usage:
        - Access settings via the singleton instance `settings`. Domain
          services receive explicit objects built from it by the factories in
          `infrastructure.dependency_injection`.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    def __init__(self, **kwargs):
        """Initialize settings with environment-specific configuration."""
        super().__init__(**kwargs)
        self._set_environment_defaults(self.APP_ENV)

    def _set_environment_defaults(self, env: str) -> None:
        """Set environment-specific default values.

        Args:
            env: Environment name
        """
        if env in ("development", "test"):
            self.SMS_TEST_MODE = True
        if env == "development":
            self.DEBUG = True
        logger.info(f"Application running in {env} environment")

    def validate_required_fields(self) -> None:
        """Validates that production settings are complete.

        Raises:
            ValueError: If the SMS gateway is not configured outside test mode.
        """
        if self.SMS_TEST_MODE:
            return
        missing = [
            name for name in ("SMS_GATEWAY_URL", "SMS_API_KEY") if not getattr(self, name)
        ]
        if missing:
            error_msg = f"Missing required environment variables: {', '.join(missing)}"
            logger.error(error_msg)
            raise ValueError(error_msg)


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")
    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production",
    }
    env_file = env_files.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        return Settings(_env_file=env_file)
    return Settings()


settings = create_settings()
