"""Event Publisher Infrastructure Service.

Concrete implementation of the domain event publishing interface, letting the
confirmation services publish events without coupling to infrastructure.
"""

import asyncio
from typing import Callable, List, Optional

import structlog

from phone_confirmable.domain.events.base_events import BaseDomainEvent
from phone_confirmable.domain.interfaces.services import IEventPublisher

logger = structlog.get_logger(__name__)


class InMemoryEventPublisher(IEventPublisher):
    """In-memory event publisher for development and testing.

    Stores every published event for inspection and notifies registered
    subscribers. Subscriber failures are logged and never reach the domain
    operation that published the event.
    """

    def __init__(self):
        """Initialize event publisher with in-memory storage."""
        self._published_events: List[BaseDomainEvent] = []
        self._subscribers: List[Callable] = []

        logger.info("InMemoryEventPublisher initialized")

    async def publish(self, event: BaseDomainEvent) -> None:
        """Publish a single domain event.

        Args:
            event: Domain event to publish
        """
        try:
            self._published_events.append(event)

            if self._subscribers:
                await self._notify_subscribers(event)

            logger.info(
                "Domain event published",
                event_type=type(event).__name__,
                user_id=getattr(event, 'user_id', None),
                correlation_id=getattr(event, 'correlation_id', None),
                occurred_at=event.occurred_at.isoformat(),
            )

        except Exception as e:
            logger.error(
                "Failed to publish domain event",
                event_type=type(event).__name__,
                error=str(e),
            )

    async def publish_many(self, events: List[BaseDomainEvent]) -> None:
        """Publish multiple domain events in order.

        Args:
            events: List of domain events to publish
        """
        for event in events:
            await self.publish(event)

    def add_subscriber(self, callback: Callable) -> None:
        """Add event subscriber callback.

        Args:
            callback: Sync or async function called with each published event
        """
        self._subscribers.append(callback)
        logger.debug("Event subscriber added")

    def get_published_events(
        self,
        event_type: Optional[type] = None,
        user_id: Optional[int] = None,
    ) -> List[BaseDomainEvent]:
        """Get published events with optional filtering.

        Args:
            event_type: Filter by event class
            user_id: Filter by user ID

        Returns:
            List[BaseDomainEvent]: Filtered list of published events
        """
        events = self._published_events
        if event_type is not None:
            events = [e for e in events if isinstance(e, event_type)]
        if user_id is not None:
            events = [e for e in events if getattr(e, 'user_id', None) == user_id]
        return list(events)

    def clear_published_events(self) -> None:
        """Clear all stored published events."""
        event_count = len(self._published_events)
        self._published_events.clear()
        logger.debug("Published events cleared", event_count=event_count)

    async def _notify_subscribers(self, event: BaseDomainEvent) -> None:
        """Notify all subscribers of a published event concurrently."""
        tasks = []
        for subscriber in self._subscribers:
            if asyncio.iscoroutinefunction(subscriber):
                tasks.append(subscriber(event))
            else:
                tasks.append(asyncio.get_running_loop().run_in_executor(None, subscriber, event))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.error(
                    "Event subscriber failed",
                    event_type=type(event).__name__,
                    error=str(result),
                )
