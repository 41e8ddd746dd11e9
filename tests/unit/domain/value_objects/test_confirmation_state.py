from phone_confirmable.domain.value_objects import ConfirmationState, ReconfirmationCycle


def test_new_state_has_no_pending_behaviour():
    state = ConfirmationState()

    assert state.cycle is ReconfirmationCycle.NORMAL
    assert state.notification_suppressed is False
    assert state.created_with_notification is False


def test_consume_resets_matching_cycle_once():
    state = ConfirmationState(cycle=ReconfirmationCycle.BYPASS_POSTPONE)

    assert state.consume(ReconfirmationCycle.BYPASS_POSTPONE) is True
    assert state.cycle is ReconfirmationCycle.NORMAL
    assert state.consume(ReconfirmationCycle.BYPASS_POSTPONE) is False


def test_consume_leaves_other_cycle_untouched():
    state = ConfirmationState(cycle=ReconfirmationCycle.PENDING_RECONFIRMATION_SEND)

    assert state.consume(ReconfirmationCycle.BYPASS_POSTPONE) is False
    assert state.cycle is ReconfirmationCycle.PENDING_RECONFIRMATION_SEND
