import pytest

from phone_confirmable.core.config.settings import Settings
from phone_confirmable.domain.services.phone_confirmation import (
    PhoneConfirmationLookupService,
    PhoneConfirmationManager,
)
from phone_confirmable.domain.value_objects import ConfirmationConfig
from phone_confirmable.infrastructure.dependency_injection.confirmation_dependencies import (
    build_confirmation_config,
    build_confirmation_manager,
    build_lookup_service,
    build_notifier,
    build_sms_transport,
)
from phone_confirmable.infrastructure.services.event_publisher import InMemoryEventPublisher
from phone_confirmable.infrastructure.services.notification import (
    HttpSmsTransport,
    LoggingSmsTransport,
    QueuedPhoneNotifier,
)


@pytest.fixture(autouse=True)
def clean_sms_env(monkeypatch):
    for name in ("SMS_GATEWAY_URL", "SMS_API_KEY", "SMS_TEST_MODE", "APP_ENV"):
        monkeypatch.delenv(name, raising=False)


def test_test_mode_uses_logging_transport():
    settings = Settings(_env_file=None, APP_ENV="test")

    assert isinstance(build_sms_transport(settings), LoggingSmsTransport)


@pytest.mark.asyncio
async def test_production_uses_gateway_transport():
    settings = Settings(
        _env_file=None,
        APP_ENV="production",
        SMS_GATEWAY_URL="https://sms.example.test/v1/messages",
        SMS_API_KEY="secret-key",
    )

    transport = build_sms_transport(settings)

    assert isinstance(transport, HttpSmsTransport)
    await transport.aclose()


def test_production_without_gateway_fails_fast():
    with pytest.raises(ValueError, match="SMS_GATEWAY_URL"):
        build_sms_transport(Settings(_env_file=None, APP_ENV="production"))


def test_services_are_wired_from_settings(repository):
    settings = Settings(_env_file=None, APP_ENV="test", PHONE_CONFIRMATION_CONFIRM_WITHIN=3600)

    notifier = build_notifier(settings=settings)
    manager = build_confirmation_manager(repository, notifier, settings=settings)
    lookup = build_lookup_service(manager)

    assert isinstance(notifier, QueuedPhoneNotifier)
    assert isinstance(manager, PhoneConfirmationManager)
    assert isinstance(lookup, PhoneConfirmationLookupService)
    assert manager.user_repository is repository
    assert manager.config == build_confirmation_config(settings)
    assert manager.config.confirm_within.total_seconds() == 3600


def test_manager_publishes_to_in_memory_publisher_by_default(repository, notifier):
    manager = build_confirmation_manager(repository, notifier, config=ConfirmationConfig())

    assert isinstance(manager.event_publisher, InMemoryEventPublisher)


def test_manager_keeps_given_publisher(repository, notifier, event_publisher):
    manager = build_confirmation_manager(
        repository, notifier, config=ConfirmationConfig(), event_publisher=event_publisher
    )

    assert manager.event_publisher is event_publisher
