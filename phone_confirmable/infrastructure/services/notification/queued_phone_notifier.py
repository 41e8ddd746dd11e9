"""Queued phone notifier.

`deliver` renders the message and puts it on an asyncio queue, then returns;
a background worker drains the queue through the SMS transport. Confirmation
logic therefore never waits on transport latency, and delivery failures stay
here, in the log.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import structlog

from phone_confirmable.core.exceptions import NotificationDeliveryError
from phone_confirmable.domain.interfaces import IPhoneNotifier, ISmsTransport
from phone_confirmable.utils.i18n import get_translated_message
from phone_confirmable.utils.masking import mask_phone

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SmsMessage:
    phone: str
    body: str
    kind: str


class QueuedPhoneNotifier(IPhoneNotifier):
    """Fire-and-forget notifier backed by an `asyncio.Queue`.

    Args:
        transport: Transport used by the worker to send messages.
        language: Language of the rendered messages.
        max_queue_size: Queue bound; 0 means unbounded. When full, new
            messages are dropped and logged.
    """

    def __init__(
        self,
        transport: ISmsTransport,
        language: str = "en",
        max_queue_size: int = 0,
    ) -> None:
        self._transport = transport
        self._language = language
        self._queue: "asyncio.Queue[SmsMessage]" = asyncio.Queue(maxsize=max_queue_size)
        self._worker: Optional[asyncio.Task] = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def deliver(self, phone: str, raw_token: str) -> None:
        body = get_translated_message(
            "sms_confirmation_instructions", self._language, token=raw_token
        )
        self._enqueue(SmsMessage(phone=phone, body=body, kind="confirmation_instructions"))

    def deliver_phone_changed(self, phone: str) -> None:
        body = get_translated_message("sms_phone_changed", self._language)
        self._enqueue(SmsMessage(phone=phone, body=body, kind="phone_changed"))

    def _enqueue(self, message: SmsMessage) -> None:
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.error(
                "Notification queue full, message dropped",
                phone=mask_phone(message.phone),
                kind=message.kind,
            )
            return
        logger.debug("SMS queued", phone=mask_phone(message.phone), kind=message.kind)

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the background worker on the running loop."""
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self.run())
            logger.info("Phone notifier worker started")

    async def stop(self) -> None:
        """Wait for queued messages to be sent, then stop the worker."""
        await self._queue.join()
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
            logger.info("Phone notifier worker stopped")

    async def run(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self._send(message)
            finally:
                self._queue.task_done()

    async def drain(self) -> int:
        """Send everything currently queued without a worker; returns the count."""
        sent = 0
        while not self._queue.empty():
            message = self._queue.get_nowait()
            try:
                await self._send(message)
            finally:
                self._queue.task_done()
            sent += 1
        return sent

    async def _send(self, message: SmsMessage) -> None:
        try:
            await self._transport.send(message.phone, message.body)
        except NotificationDeliveryError as e:
            logger.error(
                "SMS delivery failed",
                phone=mask_phone(message.phone),
                kind=message.kind,
                error=str(e),
                error_code=e.code,
            )
        except Exception as e:
            logger.error(
                "Unexpected error delivering SMS",
                phone=mask_phone(message.phone),
                kind=message.kind,
                error=str(e),
                error_type=type(e).__name__,
            )
