import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker

from phone_confirmable.domain.services.phone_confirmation import (
    PhoneConfirmationLookupService,
    PhoneConfirmationManager,
)
from phone_confirmable.domain.value_objects import ConfirmationConfig
from phone_confirmable.infrastructure.database.async_db import (
    build_engine,
    create_async_db_and_tables,
)
from phone_confirmable.infrastructure.repositories import UserRepository


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite database, so separate sessions use separate connections."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'users.db'}")
    await create_async_db_and_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def sql_services(notifier, clock, event_publisher):
    """Build a manager and lookup service bound to one session."""

    def _build(session, **options):
        repository = UserRepository(session)
        manager = PhoneConfirmationManager(
            user_repository=repository,
            notifier=notifier,
            clock=clock,
            config=ConfirmationConfig(**options),
            event_publisher=event_publisher,
        )
        return manager, PhoneConfirmationLookupService(repository, manager)

    return _build
