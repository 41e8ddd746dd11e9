import pytest

from phone_confirmable.infrastructure.services.notification import (
    LoggingSmsTransport,
    QueuedPhoneNotifier,
)


@pytest.fixture
def sms_transport():
    return LoggingSmsTransport()


@pytest.fixture
def notifier(sms_transport):
    """Real queued notifier; journeys drain it to read the sent codes."""
    return QueuedPhoneNotifier(sms_transport)
