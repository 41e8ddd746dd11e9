"""Phone Confirmation Domain Events.

These events represent significant business occurrences in the phone
confirmation domain that other parts of the system may need to react to
(audit logging, monitoring, analytics). Phone numbers are stored masked.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .base_events import BaseDomainEvent


@dataclass(frozen=True)
class PhoneConfirmationRequestedEvent(BaseDomainEvent):
    """Event published when confirmation instructions are handed to the notifier.

    Attributes:
        phone: Masked destination phone number
        reconfirmation: Whether the instructions confirm a phone change
    """

    phone: Optional[str] = None
    reconfirmation: bool = False

    @classmethod
    def create(
        cls,
        occurred_at: datetime,
        user_id: Optional[int],
        phone: Optional[str],
        reconfirmation: bool = False,
        correlation_id: Optional[str] = None,
    ) -> 'PhoneConfirmationRequestedEvent':
        return cls(
            occurred_at=occurred_at,
            user_id=user_id,
            correlation_id=correlation_id,
            phone=phone,
            reconfirmation=reconfirmation,
        )


@dataclass(frozen=True)
class PhoneConfirmationCompletedEvent(BaseDomainEvent):
    """Event published when a phone confirmation was persisted.

    Attributes:
        phone: Masked phone number now confirmed
        reconfirmation: Whether a pending phone change was applied
    """

    phone: Optional[str] = None
    reconfirmation: bool = False

    @classmethod
    def create(
        cls,
        occurred_at: datetime,
        user_id: Optional[int],
        phone: Optional[str],
        reconfirmation: bool = False,
        correlation_id: Optional[str] = None,
    ) -> 'PhoneConfirmationCompletedEvent':
        return cls(
            occurred_at=occurred_at,
            user_id=user_id,
            correlation_id=correlation_id,
            phone=phone,
            reconfirmation=reconfirmation,
        )


@dataclass(frozen=True)
class PhoneConfirmationFailedEvent(BaseDomainEvent):
    """Event published when a confirmation attempt was rejected.

    Attributes:
        failure_reason: Error code attached to the record
            (already_confirmed, confirmation_period_expired, ...)
    """

    failure_reason: str = ""

    @classmethod
    def create(
        cls,
        occurred_at: datetime,
        user_id: Optional[int],
        failure_reason: str,
        correlation_id: Optional[str] = None,
    ) -> 'PhoneConfirmationFailedEvent':
        return cls(
            occurred_at=occurred_at,
            user_id=user_id,
            correlation_id=correlation_id,
            failure_reason=failure_reason,
        )


@dataclass(frozen=True)
class PhoneChangeRequestedEvent(BaseDomainEvent):
    """Event published when a phone change was postponed until confirmation.

    Attributes:
        previous_phone: Masked phone number still in effect
        requested_phone: Masked phone number awaiting confirmation
    """

    previous_phone: Optional[str] = None
    requested_phone: Optional[str] = None

    @classmethod
    def create(
        cls,
        occurred_at: datetime,
        user_id: Optional[int],
        previous_phone: Optional[str],
        requested_phone: Optional[str],
        correlation_id: Optional[str] = None,
    ) -> 'PhoneChangeRequestedEvent':
        return cls(
            occurred_at=occurred_at,
            user_id=user_id,
            correlation_id=correlation_id,
            previous_phone=previous_phone,
            requested_phone=requested_phone,
        )
