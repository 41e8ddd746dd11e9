"""
Phone confirmation settings.

Durations are expressed in seconds in the environment. An empty value for
PHONE_CONFIRMATION_ALLOW_UNCONFIRMED_ACCESS_FOR or
PHONE_CONFIRMATION_CONFIRM_WITHIN means "no limit".
"""
from datetime import timedelta
from typing import List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class ConfirmationSettings(BaseSettings):
    """
    Defines the per-record-type options of the phone confirmation flow.

    These values are read once by the dependency factory and turned into an
    immutable `ConfirmationConfig`; domain services never read them directly.
    """
    PHONE_CONFIRMATION_ALLOW_UNCONFIRMED_ACCESS_FOR: Optional[timedelta] = timedelta(0)
    PHONE_CONFIRMATION_CONFIRM_WITHIN: Optional[timedelta] = None
    PHONE_CONFIRMATION_RECONFIRMABLE: bool = True
    PHONE_CONFIRMATION_KEYS: Union[str, List[str]] = Field(default=["phone"])
    PHONE_CONFIRMATION_SEND_PHONE_CHANGED_NOTIFICATION: bool = False
    PHONE_CONFIRMATION_TOKEN_LENGTH: int = Field(ge=4, le=12, default=6)

    @field_validator(
        "PHONE_CONFIRMATION_ALLOW_UNCONFIRMED_ACCESS_FOR",
        "PHONE_CONFIRMATION_CONFIRM_WITHIN",
        mode="before",
    )
    @classmethod
    def parse_seconds(cls, v):
        """Accepts plain seconds (int or numeric string); blank means unlimited."""
        if v is None or isinstance(v, timedelta):
            return v
        if isinstance(v, str):
            v = v.strip()
            if not v or v.lower() == "none":
                return None
        return timedelta(seconds=float(v))

    @field_validator("PHONE_CONFIRMATION_KEYS", mode="before")
    @classmethod
    def assemble_keys(cls, v: Union[str, List[str]]) -> List[str]:
        """
        Splits a comma-separated string of lookup keys into a list.
        """
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v
