"""
Application-specific settings.
"""
from pydantic import Field
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Defines application-wide settings like project name, environment and logging.

    Operational Note:
        - LOG_JSON should stay enabled in staging and production so that log
          shippers can parse the structured events emitted by the services.
    """
    PROJECT_NAME: str = "phone-confirmable"
    VERSION: str = "0.1.0"
    APP_ENV: str = Field(default="development", pattern="^(development|test|staging|production)$")
    DEBUG: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    DEFAULT_LANGUAGE: str = "en"
