"""Base class of the domain events."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class BaseDomainEvent:
    """Base class for all domain events.

    Attributes:
        occurred_at: When the event occurred
        user_id: ID of the user associated with the event
        correlation_id: Optional correlation ID for tracking
    """

    occurred_at: datetime
    user_id: Optional[int]
    correlation_id: Optional[str]

    def __post_init__(self):
        """Ensure occurred_at is timezone-aware."""
        if not self.occurred_at.tzinfo:
            object.__setattr__(self, 'occurred_at',
                               self.occurred_at.replace(tzinfo=timezone.utc))
