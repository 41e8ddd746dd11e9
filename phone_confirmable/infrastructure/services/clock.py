"""System clock adapter."""

from datetime import datetime, timezone

from phone_confirmable.domain.interfaces import IClock


class SystemClock(IClock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
