"""Service interfaces for the collaborators of the confirmation services.

These interfaces define contracts for the notifier, the SMS transport, the
clock and the event publisher, enabling dependency inversion and better
testability.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from phone_confirmable.domain.events.base_events import BaseDomainEvent


class IPhoneNotifier(ABC):
    """Hands confirmation messages over for delivery.

    Both methods are fire-and-forget: they enqueue and return, and delivery
    failures are handled (logged) by the implementation, never reported back.
    """

    @abstractmethod
    def deliver(self, phone: str, raw_token: str) -> None:
        """Queue confirmation instructions carrying ``raw_token`` for ``phone``."""
        pass

    @abstractmethod
    def deliver_phone_changed(self, phone: str) -> None:
        """Queue a notice that a phone change was requested, sent to the old ``phone``."""
        pass


class ISmsTransport(ABC):
    """Sends one text message to one phone number."""

    @abstractmethod
    async def send(self, phone: str, body: str) -> None:
        """Send ``body`` to ``phone``.

        Raises:
            NotificationDeliveryError: If the message could not be handed over.
        """
        pass


class IClock(ABC):
    """Single time source of the confirmation services."""

    @abstractmethod
    def now(self) -> datetime:
        """Current time as a timezone-aware UTC datetime."""
        pass


class IEventPublisher(ABC):
    """Interface for domain event publishing."""

    @abstractmethod
    async def publish(self, event: BaseDomainEvent) -> None:
        """Publish a domain event.

        Args:
            event: Domain event to publish
        """
        pass

    @abstractmethod
    async def publish_many(self, events: List[BaseDomainEvent]) -> None:
        """Publish multiple domain events.

        Args:
            events: List of domain events to publish
        """
        pass
