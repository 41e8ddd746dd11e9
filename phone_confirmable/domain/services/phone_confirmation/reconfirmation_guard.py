"""Reconfirmation Guard.

Intercepts a pending phone change before it is committed and defers it until
the new number is confirmed.
"""

import structlog

from phone_confirmable.domain.entities.confirmable_user import ConfirmableUser
from phone_confirmable.domain.interfaces import IUserRepository
from phone_confirmable.domain.services.phone_confirmation.token_issuer import (
    ConfirmationTokenIssuer,
)
from phone_confirmable.domain.value_objects.confirmation_config import ConfirmationConfig
from phone_confirmable.domain.value_objects.confirmation_state import ReconfirmationCycle
from phone_confirmable.utils.masking import mask_phone

logger = structlog.get_logger(__name__)


def _present(value) -> bool:
    return bool(value and str(value).strip())


class ReconfirmationGuard:
    """Postpones phone changes on reconfirmable records.

    Runs before every update of a persisted record. When it activates, the
    stored phone stays in effect, the requested one moves to
    `unconfirmed_phone` and a fresh token is issued for it; the
    reconfirmation instructions are sent once the update commits.
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        token_issuer: ConfirmationTokenIssuer,
        config: ConfirmationConfig,
    ) -> None:
        self._user_repository = user_repository
        self._token_issuer = token_issuer
        self._config = config

    def should_postpone(self, record: ConfirmableUser) -> bool:
        """Decide whether the pending phone change must wait for confirmation.

        Consulting the guard always consumes a `BYPASS_POSTPONE` request, so a
        bypass covers exactly one save.
        """
        bypassed = record.state.consume(ReconfirmationCycle.BYPASS_POSTPONE)
        if bypassed or not self._config.reconfirmable:
            return False

        user = record.user
        if not self._user_repository.is_changing(user, "phone"):
            return False
        if not _present(user.phone):
            return False

        stored_phone = self._user_repository.value_in_database(user, "phone")
        return not record.state.created_with_notification or stored_phone is not None

    async def postpone_phone_change(self, record: ConfirmableUser) -> None:
        """Move the requested phone aside and issue a token for it."""
        user = record.user
        previous_phone = self._user_repository.value_in_database(user, "phone")

        user.unconfirmed_phone = user.phone
        user.phone = previous_phone
        user.phone_confirmation_token = None
        await self._token_issuer.generate(record)
        record.state.cycle = ReconfirmationCycle.PENDING_RECONFIRMATION_SEND

        logger.info(
            "Phone change postponed until confirmation",
            user_id=user.id,
            phone=mask_phone(previous_phone),
            unconfirmed_phone=mask_phone(user.unconfirmed_phone),
        )

    def is_reconfirmation_required(self, record: ConfirmableUser) -> bool:
        """Whether reconfirmation instructions are due after the current save."""
        user = record.user
        return (
            self._config.reconfirmable
            and record.state.cycle is ReconfirmationCycle.PENDING_RECONFIRMATION_SEND
            and (_present(user.phone) or _present(user.unconfirmed_phone))
        )
