"""Dependency factories for the phone confirmation services.

Every factory takes the collaborators it needs explicitly and falls back to
the process-wide settings, so tests can build the whole graph from a custom
`Settings` object and an in-memory repository.

Typical wiring:

    async with get_async_db() as session:
        manager = build_confirmation_manager(UserRepository(session), notifier)
        lookup = build_lookup_service(manager)
        record = await lookup.confirm_by_token(code)
"""

from typing import Optional

import structlog

from phone_confirmable.core.config.settings import Settings, settings as default_settings
from phone_confirmable.domain.interfaces import (
    IClock,
    IEventPublisher,
    IPhoneNotifier,
    ISmsTransport,
    IUserRepository,
)
from phone_confirmable.domain.services.phone_confirmation import (
    PhoneConfirmationLookupService,
    PhoneConfirmationManager,
)
from phone_confirmable.domain.value_objects.confirmation_config import ConfirmationConfig
from phone_confirmable.infrastructure.services.clock import SystemClock
from phone_confirmable.infrastructure.services.event_publisher import InMemoryEventPublisher
from phone_confirmable.infrastructure.services.notification import (
    HttpSmsTransport,
    LoggingSmsTransport,
    QueuedPhoneNotifier,
)

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Infrastructure Layer Dependencies
# ---------------------------------------------------------------------------


def build_confirmation_config(settings: Optional[Settings] = None) -> ConfirmationConfig:
    """Resolve the confirmation options once.

    Raises:
        ConfigurationError: If the options are inconsistent.
    """
    return ConfirmationConfig.from_settings(settings or default_settings)


def build_sms_transport(settings: Optional[Settings] = None) -> ISmsTransport:
    """Logging transport in test mode, otherwise the HTTP gateway transport."""
    settings = settings or default_settings
    if settings.SMS_TEST_MODE:
        logger.info("SMS test mode enabled, messages are logged only")
        return LoggingSmsTransport()

    settings.validate_required_fields()
    return HttpSmsTransport(
        gateway_url=settings.SMS_GATEWAY_URL,
        api_key=settings.SMS_API_KEY.get_secret_value(),
        sender=settings.SMS_SENDER,
        timeout=settings.SMS_TIMEOUT_SECONDS,
    )


def build_notifier(
    transport: Optional[ISmsTransport] = None,
    settings: Optional[Settings] = None,
) -> QueuedPhoneNotifier:
    """Queued notifier over ``transport``; the caller starts and stops its worker."""
    settings = settings or default_settings
    return QueuedPhoneNotifier(
        transport or build_sms_transport(settings),
        language=settings.DEFAULT_LANGUAGE,
        max_queue_size=settings.NOTIFICATION_QUEUE_SIZE,
    )


def get_event_publisher() -> IEventPublisher:
    """In-memory publisher; swap for a broker-backed one in deployments that need it."""
    return InMemoryEventPublisher()


# ---------------------------------------------------------------------------
# Domain Service Dependencies
# ---------------------------------------------------------------------------


def build_confirmation_manager(
    user_repository: IUserRepository,
    notifier: IPhoneNotifier,
    clock: Optional[IClock] = None,
    config: Optional[ConfirmationConfig] = None,
    event_publisher: Optional[IEventPublisher] = None,
    settings: Optional[Settings] = None,
) -> PhoneConfirmationManager:
    """Build the confirmation manager for one unit of work.

    Args:
        user_repository: Repository bound to the current session
        notifier: Shared notifier, usually built once per process
        clock: Defaults to the system clock
        config: Defaults to the options resolved from ``settings``
        event_publisher: Defaults to `get_event_publisher()`
        settings: Settings to resolve ``config`` from
    """
    return PhoneConfirmationManager(
        user_repository=user_repository,
        notifier=notifier,
        clock=clock or SystemClock(),
        config=config or build_confirmation_config(settings),
        event_publisher=event_publisher if event_publisher is not None else get_event_publisher(),
    )


def build_lookup_service(
    confirmation_manager: PhoneConfirmationManager,
    user_repository: Optional[IUserRepository] = None,
) -> PhoneConfirmationLookupService:
    """Lookup service sharing the manager's repository unless one is given."""
    return PhoneConfirmationLookupService(
        user_repository=user_repository or confirmation_manager.user_repository,
        confirmation_manager=confirmation_manager,
    )
