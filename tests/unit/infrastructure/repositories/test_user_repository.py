from unittest.mock import MagicMock, Mock

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import make_transient_to_detached
from sqlalchemy.orm.exc import StaleDataError

from phone_confirmable.core.exceptions import DatabaseError, DuplicatePhoneError, StaleRecordError
from phone_confirmable.domain.entities.user import User
from phone_confirmable.domain.value_objects import ConfirmationErrorCode
from phone_confirmable.infrastructure.repositories import UserRepository
from tests.factories import create_fake_user

INSPECT = "phone_confirmable.infrastructure.repositories.user_repository.inspect"


@pytest_asyncio.fixture
async def mock_db_session(mocker):
    session = mocker.AsyncMock(spec=AsyncSession)
    session.add = MagicMock()
    session.no_autoflush = MagicMock()
    return session


def result_returning(value):
    result = MagicMock()
    result.scalars.return_value.first.return_value = value
    return result


@pytest.fixture
def repository(mock_db_session):
    return UserRepository(mock_db_session)


@pytest.mark.asyncio
async def test_find_first_by_returns_first_match(repository, mock_db_session):
    user = create_fake_user(id=1)
    mock_db_session.execute.return_value = result_returning(user)

    assert await repository.find_first_by(phone=user.phone) is user
    mock_db_session.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_find_first_by_wraps_driver_errors(repository, mock_db_session):
    mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))

    with pytest.raises(DatabaseError):
        await repository.find_first_by(phone="+15550100123")


@pytest.mark.asyncio
async def test_get_by_id_rejects_invalid_ids(repository):
    with pytest.raises(ValueError):
        await repository.get_by_id(-1)


@pytest.mark.asyncio
async def test_validate_reports_taken_phone(repository, mock_db_session):
    mock_db_session.execute.return_value = result_returning(2)

    assert await repository.validate(create_fake_user(id=1)) == [
        ("phone", ConfirmationErrorCode.TAKEN)
    ]


@pytest.mark.asyncio
async def test_validate_skips_query_without_phone(repository, mock_db_session):
    assert await repository.validate(create_fake_user(phone=None)) == []
    mock_db_session.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_save_inserts_new_user(repository, mock_db_session):
    user = create_fake_user()

    assert await repository.save(user) is user

    mock_db_session.add.assert_called_once_with(user)
    mock_db_session.commit.assert_awaited_once()
    mock_db_session.refresh.assert_awaited_once_with(user)
    mock_db_session.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_save_commits_update_through_the_session(repository, mock_db_session, mocker):
    mocker.patch(INSPECT, return_value=Mock(has_identity=True, identity=(5,)))
    user = create_fake_user(id=5, lock_version=3)

    assert await repository.save(user) is user

    mock_db_session.add.assert_called_once_with(user)
    mock_db_session.commit.assert_awaited_once()
    mock_db_session.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_save_rolls_back_and_reloads_on_stale_data(repository, mock_db_session, mocker):
    mocker.patch(INSPECT, return_value=Mock(has_identity=True, identity=(5,)))
    mock_db_session.commit.side_effect = StaleDataError("UPDATE matched 0 rows")
    user = create_fake_user(id=5, lock_version=3)

    with pytest.raises(StaleRecordError):
        await repository.save(user)

    mock_db_session.rollback.assert_awaited_once()
    mock_db_session.get.assert_awaited_once_with(User, 5, populate_existing=True)


@pytest.mark.asyncio
async def test_reload_returns_none_for_unsaved_user(repository, mock_db_session):
    assert await repository.reload(create_fake_user()) is None
    mock_db_session.get.assert_not_awaited()


@pytest.mark.asyncio
async def test_save_maps_phone_constraint_to_duplicate_phone(repository, mock_db_session):
    mock_db_session.commit.side_effect = IntegrityError(
        "INSERT", {}, Exception('duplicate key value violates unique constraint "ix_users_phone"')
    )

    with pytest.raises(DuplicatePhoneError):
        await repository.save(create_fake_user())
    mock_db_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_save_wraps_other_integrity_errors(repository, mock_db_session):
    mock_db_session.commit.side_effect = IntegrityError(
        "INSERT", {}, Exception('duplicate key value violates unique constraint "ix_users_phone_confirmation_token"')
    )

    with pytest.raises(DatabaseError) as exc_info:
        await repository.save(create_fake_user())
    assert not isinstance(exc_info.value, DuplicatePhoneError)


def test_change_tracking_uses_attribute_history(repository):
    user = create_fake_user(id=9, phone="+15550100123")
    make_transient_to_detached(user)

    assert repository.is_changing(user, "phone") is False
    assert repository.value_in_database(user, "phone") == "+15550100123"

    user.phone = "+15550100999"
    assert repository.is_changing(user, "phone") is True
    assert repository.value_in_database(user, "phone") == "+15550100123"


def test_change_tracking_for_transient_user(repository):
    user = create_fake_user(phone="+15550100123")

    assert repository.is_changing(user, "phone") is True
    assert repository.value_in_database(user, "phone") is None
