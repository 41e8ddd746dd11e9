"""SMS transport implementations.

`LoggingSmsTransport` writes messages to the structured log and keeps them in
memory (development and test mode). `HttpSmsTransport` posts them to a JSON
SMS gateway.
"""

from typing import List, Optional, Tuple

import httpx
import structlog

from phone_confirmable.core.exceptions import NotificationDeliveryError
from phone_confirmable.domain.interfaces import ISmsTransport
from phone_confirmable.utils.masking import mask_phone

logger = structlog.get_logger(__name__)


class LoggingSmsTransport(ISmsTransport):
    """Transport for development and tests; nothing leaves the process."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, str]] = []

    async def send(self, phone: str, body: str) -> None:
        self.sent.append((phone, body))
        logger.info("SMS captured (test mode)", phone=mask_phone(phone), length=len(body))


class HttpSmsTransport(ISmsTransport):
    """Posts messages to an SMS gateway as ``{"to", "from", "body"}`` JSON.

    Args:
        gateway_url: Endpoint accepting message submissions.
        api_key: Bearer token for the gateway.
        sender: Sender id shown on the handset.
        timeout: Request timeout in seconds.
        client: Optional pre-built client (shared pools, tests).
    """

    def __init__(
        self,
        gateway_url: str,
        api_key: str,
        sender: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._gateway_url = gateway_url
        self._sender = sender
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = {"Authorization": f"Bearer {api_key}"}

    async def send(self, phone: str, body: str) -> None:
        payload = {"to": phone, "from": self._sender, "body": body}
        try:
            response = await self._client.post(
                self._gateway_url, json=payload, headers=self._headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationDeliveryError(
                f"SMS gateway rejected message with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise NotificationDeliveryError(f"SMS gateway unreachable: {e}") from e

        logger.info("SMS submitted to gateway", phone=mask_phone(phone))

    async def aclose(self) -> None:
        await self._client.aclose()
