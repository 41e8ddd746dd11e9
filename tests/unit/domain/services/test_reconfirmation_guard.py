from datetime import timedelta

import pytest

from phone_confirmable.domain.entities import ConfirmableUser
from phone_confirmable.domain.services.phone_confirmation import (
    ConfirmationTokenIssuer,
    ReconfirmationGuard,
)
from phone_confirmable.domain.value_objects import ConfirmationConfig, ReconfirmationCycle
from tests.factories import create_fake_user, fake_phone


def make_guard(repository, clock, **options):
    config = ConfirmationConfig(**options)
    return ReconfirmationGuard(repository, ConfirmationTokenIssuer(repository, clock, config), config)


async def stored_record(repository, clock, **kwargs) -> ConfirmableUser:
    kwargs.setdefault("phone_confirmed_at", clock.now() - timedelta(days=10))
    user = await repository.save(create_fake_user(**kwargs))
    return ConfirmableUser(await repository.get_by_id(user.id))


@pytest.mark.asyncio
async def test_postpones_phone_change_on_reconfirmable_record(repository, clock):
    guard = make_guard(repository, clock)
    record = await stored_record(repository, clock)
    record.phone = fake_phone()

    assert guard.should_postpone(record) is True


@pytest.mark.asyncio
async def test_does_not_postpone_when_not_reconfirmable(repository, clock):
    guard = make_guard(repository, clock, reconfirmable=False)
    record = await stored_record(repository, clock)
    record.phone = fake_phone()

    assert guard.should_postpone(record) is False


@pytest.mark.asyncio
async def test_does_not_postpone_without_phone_change(repository, clock):
    guard = make_guard(repository, clock)
    record = await stored_record(repository, clock)
    record.user.is_active = False

    assert guard.should_postpone(record) is False


@pytest.mark.asyncio
@pytest.mark.parametrize("new_phone", [None, "", "   "])
async def test_does_not_postpone_when_new_phone_is_blank(repository, clock, new_phone):
    guard = make_guard(repository, clock)
    record = await stored_record(repository, clock)
    record.phone = new_phone

    assert guard.should_postpone(record) is False


@pytest.mark.asyncio
async def test_bypass_covers_exactly_one_consultation(repository, clock):
    guard = make_guard(repository, clock)
    record = await stored_record(repository, clock)
    record.phone = fake_phone()
    record.state.cycle = ReconfirmationCycle.BYPASS_POSTPONE

    assert guard.should_postpone(record) is False
    assert record.state.cycle is ReconfirmationCycle.NORMAL
    assert guard.should_postpone(record) is True


@pytest.mark.asyncio
async def test_bypass_is_consumed_even_when_nothing_changes(repository, clock):
    guard = make_guard(repository, clock)
    record = await stored_record(repository, clock)
    record.state.cycle = ReconfirmationCycle.BYPASS_POSTPONE

    assert guard.should_postpone(record) is False
    assert record.state.cycle is ReconfirmationCycle.NORMAL


@pytest.mark.asyncio
async def test_first_phone_after_create_with_notification_is_not_postponed(repository, clock):
    guard = make_guard(repository, clock)
    record = await stored_record(repository, clock, phone=None, phone_confirmed_at=None)
    record.state.created_with_notification = True
    record.phone = fake_phone()

    assert guard.should_postpone(record) is False
    record.state.created_with_notification = False
    assert guard.should_postpone(record) is True


@pytest.mark.asyncio
async def test_postpone_moves_new_phone_aside_and_issues_token(repository, clock):
    guard = make_guard(repository, clock)
    record = await stored_record(
        repository, clock,
        phone_confirmation_token="123456",
        phone_confirmation_sent_at=clock.now() - timedelta(days=10),
    )
    old_phone, new_phone = record.phone, fake_phone()
    record.phone = new_phone

    await guard.postpone_phone_change(record)

    assert record.phone == old_phone
    assert record.unconfirmed_phone == new_phone
    assert record.raw_token == record.confirmation_token
    assert record.confirmation_token is not None
    assert record.confirmation_sent_at == clock.now()
    assert record.state.cycle is ReconfirmationCycle.PENDING_RECONFIRMATION_SEND


@pytest.mark.asyncio
async def test_reconfirmation_required_only_after_postponing(repository, clock):
    guard = make_guard(repository, clock)
    record = await stored_record(repository, clock)

    assert guard.is_reconfirmation_required(record) is False
    record.phone = fake_phone()
    await guard.postpone_phone_change(record)
    assert guard.is_reconfirmation_required(record) is True
