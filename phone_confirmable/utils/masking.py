"""Helpers that keep phone numbers and tokens out of logs."""

from typing import Optional


def mask_phone(phone: Optional[str]) -> Optional[str]:
    """Keep the last three digits of a phone number, e.g. ``***567``."""
    if not phone:
        return phone
    return "***" + phone[-3:] if len(phone) > 3 else "***"


def token_prefix(token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    return token[:2] + "****"
