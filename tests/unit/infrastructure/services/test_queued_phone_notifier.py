from unittest.mock import AsyncMock

import pytest

from phone_confirmable.core.exceptions import NotificationDeliveryError
from phone_confirmable.infrastructure.services.notification import (
    LoggingSmsTransport,
    QueuedPhoneNotifier,
)


@pytest.fixture
def transport():
    return LoggingSmsTransport()


@pytest.mark.asyncio
async def test_deliver_enqueues_and_returns(transport):
    notifier = QueuedPhoneNotifier(transport)

    notifier.deliver("+15550100123", "123456")

    assert notifier.pending == 1
    assert transport.sent == []
    assert await notifier.drain() == 1
    assert transport.sent == [("+15550100123", "Your confirmation code is 123456")]
    assert notifier.pending == 0


@pytest.mark.asyncio
async def test_messages_are_rendered_in_configured_language(transport):
    notifier = QueuedPhoneNotifier(transport, language="es")

    notifier.deliver("+15550100123", "654321")
    await notifier.drain()

    assert transport.sent[0][1] == "Tu código de confirmación es 654321"


@pytest.mark.asyncio
async def test_phone_changed_notice(transport):
    notifier = QueuedPhoneNotifier(transport)

    notifier.deliver_phone_changed("+15550100123")
    await notifier.drain()

    phone, body = transport.sent[0]
    assert phone == "+15550100123"
    assert body.startswith("A change of the phone number on your account was requested.")


@pytest.mark.asyncio
async def test_full_queue_drops_new_messages(transport):
    notifier = QueuedPhoneNotifier(transport, max_queue_size=1)

    notifier.deliver("+15550100123", "111111")
    notifier.deliver("+15550100456", "222222")

    assert notifier.pending == 1
    await notifier.drain()
    assert [phone for phone, _ in transport.sent] == ["+15550100123"]


@pytest.mark.asyncio
async def test_delivery_failures_are_contained():
    transport = AsyncMock()
    transport.send.side_effect = [NotificationDeliveryError("gateway down"), RuntimeError("bug"), None]
    notifier = QueuedPhoneNotifier(transport)

    for token in ("111111", "222222", "333333"):
        notifier.deliver("+15550100123", token)

    assert await notifier.drain() == 3
    assert transport.send.await_count == 3


@pytest.mark.asyncio
async def test_worker_sends_queued_messages_before_stopping(transport):
    notifier = QueuedPhoneNotifier(transport)
    notifier.start()

    notifier.deliver("+15550100123", "123456")
    notifier.deliver("+15550100456", "654321")
    await notifier.stop()

    assert len(transport.sent) == 2
    assert notifier.pending == 0
