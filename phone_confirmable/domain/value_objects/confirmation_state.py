"""Transient, per-instance confirmation state."""

from dataclasses import dataclass
from enum import Enum


class ReconfirmationCycle(str, Enum):
    """One-shot step of the reconfirmation cycle for the next save.

    Attributes:
        NORMAL: No pending one-shot behaviour.
        BYPASS_POSTPONE: The next save applies a phone change directly
            instead of postponing it. Consumed whenever the reconfirmation
            guard is consulted.
        PENDING_RECONFIRMATION_SEND: A phone change was postponed; the
            reconfirmation instructions go out once the save commits.
            Consumed by the post-update notification step.
    """

    NORMAL = "normal"
    BYPASS_POSTPONE = "bypass_postpone"
    PENDING_RECONFIRMATION_SEND = "pending_reconfirmation_send"


@dataclass
class ConfirmationState:
    """State that lives on one in-memory instance and is never persisted.

    Attributes:
        cycle: One-shot reconfirmation step, see `ReconfirmationCycle`.
        notification_suppressed: Skip the create/update confirmation
            notifications for this instance. Unlike skipping confirmation,
            the record still needs to be confirmed.
        created_with_notification: Set after a create that sent the
            confirmation notification. A later save on the same instance only
            postpones a phone change when a phone was already stored.
    """

    cycle: ReconfirmationCycle = ReconfirmationCycle.NORMAL
    notification_suppressed: bool = False
    created_with_notification: bool = False

    def consume(self, cycle: ReconfirmationCycle) -> bool:
        """Reset ``cycle`` to NORMAL if it is the current one; report whether it was."""
        if self.cycle is cycle:
            self.cycle = ReconfirmationCycle.NORMAL
            return True
        return False
