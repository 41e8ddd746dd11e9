from unittest.mock import Mock

import pytest

from phone_confirmable.domain.interfaces import IPhoneNotifier
from phone_confirmable.domain.services.phone_confirmation import (
    PhoneConfirmationLookupService,
    PhoneConfirmationManager,
)
from phone_confirmable.domain.value_objects import ConfirmationConfig
from phone_confirmable.infrastructure.repositories import InMemoryUserRepository
from phone_confirmable.infrastructure.services.event_publisher import InMemoryEventPublisher
from tests.factories import FrozenClock


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def repository():
    return InMemoryUserRepository()


@pytest.fixture
def notifier():
    return Mock(spec=IPhoneNotifier)


@pytest.fixture
def event_publisher():
    return InMemoryEventPublisher()


@pytest.fixture
def build_manager(repository, notifier, clock, event_publisher):
    """Build a manager over the shared fixtures with custom confirmation options."""

    def _build(**options) -> PhoneConfirmationManager:
        return PhoneConfirmationManager(
            user_repository=repository,
            notifier=notifier,
            clock=clock,
            config=ConfirmationConfig(**options),
            event_publisher=event_publisher,
        )

    return _build


@pytest.fixture
def manager(build_manager):
    return build_manager()


@pytest.fixture
def lookup(repository, manager):
    return PhoneConfirmationLookupService(repository, manager)
