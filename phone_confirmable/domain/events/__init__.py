from .base_events import BaseDomainEvent
from .phone_confirmation_events import (
    PhoneChangeRequestedEvent,
    PhoneConfirmationCompletedEvent,
    PhoneConfirmationFailedEvent,
    PhoneConfirmationRequestedEvent,
)

__all__ = [
    "BaseDomainEvent",
    "PhoneChangeRequestedEvent",
    "PhoneConfirmationCompletedEvent",
    "PhoneConfirmationFailedEvent",
    "PhoneConfirmationRequestedEvent",
]
