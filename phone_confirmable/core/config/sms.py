"""
SMS gateway settings used by the notification transport.
"""
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings


class SmsSettings(BaseSettings):
    """
    Defines settings for the SMS gateway that delivers confirmation codes.

    In test mode codes are written to the structured log instead of being
    posted to the gateway.

    Security Note:
        - SMS_API_KEY must never be logged.
    """
    SMS_GATEWAY_URL: Optional[str] = None
    SMS_API_KEY: Optional[SecretStr] = None
    SMS_SENDER: str = "PhoneConfirm"
    SMS_TIMEOUT_SECONDS: float = Field(gt=0, default=10.0)
    SMS_TEST_MODE: bool = False
    NOTIFICATION_QUEUE_SIZE: int = Field(ge=0, default=1000)
