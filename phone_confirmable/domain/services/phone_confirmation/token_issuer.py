"""Issuance and expiry of phone confirmation tokens."""

from datetime import datetime, timezone
from typing import Optional

import structlog
from tenacity import RetryCallState, retry, retry_if_result, stop_after_attempt

from phone_confirmable.core.exceptions import TokenGenerationError
from phone_confirmable.domain.entities.confirmable_user import ConfirmableUser
from phone_confirmable.domain.entities.user import User
from phone_confirmable.domain.interfaces import IClock, IUserRepository
from phone_confirmable.domain.value_objects.confirmation_config import ConfirmationConfig
from phone_confirmable.domain.value_objects.confirmation_token import PhoneConfirmationToken
from phone_confirmable.utils.masking import token_prefix

logger = structlog.get_logger(__name__)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes coming back from the store as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _log_collision(retry_state: RetryCallState) -> None:
    logger.debug("Confirmation token collision, retrying", attempt=retry_state.attempt_number)


def _give_up(retry_state: RetryCallState) -> None:
    logger.error("Could not mint a unique confirmation token", attempts=retry_state.attempt_number)
    raise TokenGenerationError(
        f"No unique confirmation token after {retry_state.attempt_number} attempts"
    )


class ConfirmationTokenIssuer:
    """Mints tokens and decides whether the outstanding one is still valid.

    Shared by the confirmation manager and the reconfirmation guard so that
    both stamp `phone_confirmation_sent_at` from the same clock.
    """

    MAX_ATTEMPTS = 10

    def __init__(
        self,
        user_repository: IUserRepository,
        clock: IClock,
        config: ConfirmationConfig,
    ) -> None:
        self._user_repository = user_repository
        self._clock = clock
        self._config = config

    def is_expired(self, user: User) -> bool:
        """Whether the validity window of the outstanding token has elapsed.

        Never true without a window (`confirm_within` is None) or without a
        generated token. The window end itself still counts as valid.
        """
        within = self._config.confirm_within
        sent_at = as_utc(user.phone_confirmation_sent_at)
        if within is None or sent_at is None:
            return False
        return self._clock.now() > sent_at + within

    async def generate(self, record: ConfirmableUser) -> str:
        """Reuse the outstanding token while it is valid, otherwise mint a new one.

        Reusing keeps a code the user may already have received working when
        a repeat request arrives. The returned plaintext is also kept on
        ``record.raw_token``.
        """
        user = record.user
        if user.phone_confirmation_token and not self.is_expired(user):
            record.raw_token = user.phone_confirmation_token
            logger.debug(
                "Reusing outstanding phone confirmation token",
                user_id=user.id,
                token_prefix=token_prefix(record.raw_token),
            )
            return record.raw_token

        token = await self._mint_unique()
        user.phone_confirmation_token = record.raw_token = token.value
        user.phone_confirmation_sent_at = self._clock.now()
        logger.info(
            "Phone confirmation token generated",
            user_id=user.id,
            token_prefix=token_prefix(token.value),
        )
        return token.value

    @retry(
        stop=stop_after_attempt(MAX_ATTEMPTS),
        retry=retry_if_result(lambda token: token is None),
        before_sleep=_log_collision,
        retry_error_callback=_give_up,
    )
    async def _mint_unique(self) -> Optional[PhoneConfirmationToken]:
        candidate = PhoneConfirmationToken.generate(self._config.token_length)
        taken = await self._user_repository.find_first_by(
            phone_confirmation_token=candidate.value
        )
        return None if taken is not None else candidate
