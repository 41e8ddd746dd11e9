"""Phone Confirmation Domain Service.

The confirmation manager owns the confirmation state machine and the token
lifecycle of a user record:

    UNCONFIRMED --confirm(valid token)--> CONFIRMED
    UNCONFIRMED --confirm(expired token)--> UNCONFIRMED (error)
    CONFIRMED --phone change, reconfirmable--> PENDING_RECONFIRMATION
    PENDING_RECONFIRMATION --confirm(valid token)--> CONFIRMED (phone swapped in)

Persistence, delivery and time are collaborators injected at construction.
Record lifecycle steps are explicit calls: `create` and `update` run the token
generation, the reconfirmation guard and the post-commit notifications
around the repository save.
"""

from typing import Any, Optional

import structlog

from phone_confirmable.core.exceptions import DuplicatePhoneError, StaleRecordError
from phone_confirmable.domain.entities.confirmable_user import ConfirmableUser
from phone_confirmable.domain.events import (
    BaseDomainEvent,
    PhoneChangeRequestedEvent,
    PhoneConfirmationCompletedEvent,
    PhoneConfirmationFailedEvent,
    PhoneConfirmationRequestedEvent,
)
from phone_confirmable.domain.interfaces import (
    IClock,
    IEventPublisher,
    IPhoneNotifier,
    IUserRepository,
)
from phone_confirmable.domain.services.phone_confirmation.reconfirmation_guard import (
    ReconfirmationGuard,
)
from phone_confirmable.domain.services.phone_confirmation.token_issuer import (
    ConfirmationTokenIssuer,
    as_utc,
)
from phone_confirmable.domain.value_objects.confirmation_config import ConfirmationConfig
from phone_confirmable.domain.value_objects.confirmation_state import ReconfirmationCycle
from phone_confirmable.domain.value_objects.field_errors import ConfirmationErrorCode
from phone_confirmable.utils.masking import mask_phone

logger = structlog.get_logger(__name__)


class PhoneConfirmationManager:
    """Domain service for phone confirmation operations.

    Responsibilities:
    - Issue confirmation tokens, reusing the outstanding one while valid
    - Confirm records, applying a pending phone change
    - Hand confirmation instructions to the notifier
    - Answer confirmation and authentication eligibility queries
    - Orchestrate create/update saves around the reconfirmation guard

    Domain failures never raise: operations return ``False`` and attach
    field errors to ``record.errors``.
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        notifier: IPhoneNotifier,
        clock: IClock,
        config: Optional[ConfirmationConfig] = None,
        event_publisher: Optional[IEventPublisher] = None,
    ):
        """Initialize the manager with its collaborators.

        Args:
            user_repository: Repository for user data access
            notifier: Fire-and-forget delivery of confirmation messages
            clock: Single time source
            config: Confirmation options, defaults to `ConfirmationConfig()`
            event_publisher: Optional publisher for domain events
        """
        self._user_repository = user_repository
        self._notifier = notifier
        self._clock = clock
        self._config = config or ConfirmationConfig()
        self._event_publisher = event_publisher
        self._token_issuer = ConfirmationTokenIssuer(user_repository, clock, self._config)
        self._guard = ReconfirmationGuard(user_repository, self._token_issuer, self._config)

        logger.info(
            "PhoneConfirmationManager initialized",
            reconfirmable=self._config.reconfirmable,
            confirm_within=str(self._config.confirm_within),
            allow_unconfirmed_access_for=str(self._config.allow_unconfirmed_access_for),
        )

    @property
    def config(self) -> ConfirmationConfig:
        return self._config

    @property
    def user_repository(self) -> IUserRepository:
        return self._user_repository

    @property
    def event_publisher(self) -> Optional[IEventPublisher]:
        return self._event_publisher

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_confirmed(self, record: ConfirmableUser) -> bool:
        return record.user.phone_confirmed_at is not None

    def is_pending_reconfirmation(self, record: ConfirmableUser) -> bool:
        unconfirmed = record.user.unconfirmed_phone
        return self._config.reconfirmable and bool(unconfirmed and unconfirmed.strip())

    def is_confirmation_required(self, record: ConfirmableUser) -> bool:
        """Override point: by default a record needs confirmation until confirmed."""
        return not self.is_confirmed(record)

    def is_token_expired(self, record: ConfirmableUser) -> bool:
        return self._token_issuer.is_expired(record.user)

    def is_confirmation_period_valid(self, record: ConfirmableUser) -> bool:
        """Whether an unconfirmed record is still inside the grace window.

        Examples, with the token generated at ``sent_at``:

            allowance = None                       -> always True
            no token generated yet                 -> False
            allowance = 5 days, sent 4 days ago    -> True
            allowance = 5 days, sent 5 days ago    -> False
            allowance = 0                          -> always False
        """
        allowance = self._config.allow_unconfirmed_access_for
        if allowance is None:
            return True
        sent_at = as_utc(record.user.phone_confirmation_sent_at)
        if sent_at is None:
            return False
        return self._clock.now() - sent_at < allowance

    def is_eligible_for_authentication(self, record: ConfirmableUser) -> bool:
        """Whether the record may sign in.

        Inactive accounts never may; otherwise a confirmed record, a record
        that needs no confirmation, or one inside the grace window may.
        """
        return bool(record.user.is_active) and (
            not self.is_confirmation_required(record)
            or self.is_confirmed(record)
            or self.is_confirmation_period_valid(record)
        )

    def inactive_message(self, record: ConfirmableUser) -> Optional[str]:
        """Message key explaining why authentication is refused, if it is."""
        if not self.is_confirmed(record):
            return "unconfirmed"
        if not record.user.is_active:
            return "inactive"
        return None

    # ------------------------------------------------------------------
    # Skips
    # ------------------------------------------------------------------

    def skip_confirmation(self, record: ConfirmableUser) -> None:
        """Mark the record confirmed now; no token is generated or sent on create."""
        record.user.phone_confirmed_at = self._clock.now()

    def skip_confirmation_notification(self, record: ConfirmableUser) -> None:
        """Do not send create/update notifications; the record still needs confirming."""
        record.state.notification_suppressed = True

    def skip_reconfirmation(self, record: ConfirmableUser) -> None:
        """Apply the next phone change directly, without reconfirmation."""
        record.state.cycle = ReconfirmationCycle.BYPASS_POSTPONE

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    async def generate_token(self, record: ConfirmableUser) -> str:
        """Idempotent token issuance, see `ConfirmationTokenIssuer.generate`."""
        return await self._token_issuer.generate(record)

    async def generate_token_and_save(self, record: ConfirmableUser) -> bool:
        await self.generate_token(record)
        return await self.save(record, validate=False)

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    async def confirm(self, record: ConfirmableUser, ensure_valid: bool = False) -> bool:
        """Confirm the record, applying a pending phone change.

        Args:
            record: Record to confirm.
            ensure_valid: Validate the save even when only timestamps change.

        Returns:
            bool: True when the confirmation was persisted. On False the
            reason is attached to ``record.errors``.
        """
        record.errors.clear()
        try:
            return await self._confirm(record, ensure_valid)
        except StaleRecordError:
            # Another writer saved the row first; decide again on its state.
            logger.info("Confirmation lost a concurrent update, reloading", user_id=record.id)
            fresh = await self._user_repository.reload(record.user)
            if fresh is not None:
                record.user = fresh
            record.errors.clear()
            return await self._confirm(record, ensure_valid)

    async def _confirm(self, record: ConfirmableUser, ensure_valid: bool) -> bool:
        if not self._check_pending_any_confirmation(record):
            await self._publish_failed(record, ConfirmationErrorCode.ALREADY_CONFIRMED)
            return False

        if self.is_token_expired(record):
            record.errors.add(
                "phone",
                ConfirmationErrorCode.CONFIRMATION_PERIOD_EXPIRED,
                period=self._config.confirm_within,
            )
            logger.warning("Phone confirmation token expired", user_id=record.id)
            await self._publish_failed(record, ConfirmationErrorCode.CONFIRMATION_PERIOD_EXPIRED)
            return False

        user = record.user
        user.phone_confirmed_at = self._clock.now()

        reconfirmation = self.is_pending_reconfirmation(record)
        if reconfirmation:
            self.skip_reconfirmation(record)
            user.phone = user.unconfirmed_phone
            user.unconfirmed_phone = None
            # The phone value changes, so uniqueness has to be checked again
            saved = await self.save(record, validate=True)
        else:
            saved = await self.save(record, validate=ensure_valid)

        if saved:
            logger.info(
                "Phone confirmation completed",
                user_id=record.id,
                phone=mask_phone(user.phone),
                reconfirmation=reconfirmation,
            )
            await self.after_confirmation(record)
            await self._publish(
                PhoneConfirmationCompletedEvent.create(
                    occurred_at=self._clock.now(),
                    user_id=record.id,
                    phone=mask_phone(user.phone),
                    reconfirmation=reconfirmation,
                )
            )
        return saved

    async def after_confirmation(self, record: ConfirmableUser) -> None:
        """Hook run after a confirmation was persisted. No-op by default.

        Example:

            class InvitingConfirmationManager(PhoneConfirmationManager):
                async def after_confirmation(self, record):
                    record.user.invite_code = None
                    await self.save(record, validate=False)
        """

    def _check_pending_any_confirmation(self, record: ConfirmableUser) -> bool:
        if not self.is_confirmed(record) or self.is_pending_reconfirmation(record):
            return True
        record.errors.add("phone", ConfirmationErrorCode.ALREADY_CONFIRMED)
        logger.info("Phone already confirmed", user_id=record.id)
        return False

    # ------------------------------------------------------------------
    # Instructions
    # ------------------------------------------------------------------

    async def send_confirmation_instructions(self, record: ConfirmableUser) -> None:
        """Ensure a token exists and hand it to the notifier.

        The message goes to the unconfirmed phone while a reconfirmation is
        pending, else to the current phone. Delivery is enqueue-and-return.
        """
        if not record.raw_token:
            await self.generate_token_and_save(record)

        reconfirmation = self.is_pending_reconfirmation(record)
        destination = record.user.unconfirmed_phone if reconfirmation else record.user.phone
        if not destination:
            logger.warning("No phone to send confirmation instructions to", user_id=record.id)
            return

        self._notifier.deliver(destination, record.raw_token)
        logger.info(
            "Phone confirmation instructions queued",
            user_id=record.id,
            phone=mask_phone(destination),
            reconfirmation=reconfirmation,
        )
        await self._publish(
            PhoneConfirmationRequestedEvent.create(
                occurred_at=self._clock.now(),
                user_id=record.id,
                phone=mask_phone(destination),
                reconfirmation=reconfirmation,
            )
        )

    async def send_on_create_confirmation_instructions(self, record: ConfirmableUser) -> None:
        """Hook delivering instructions after create; override for a sign-up message."""
        await self.send_confirmation_instructions(record)

    async def send_reconfirmation_instructions(self, record: ConfirmableUser) -> None:
        # The one-shot flag resets whether or not a notification goes out
        record.state.consume(ReconfirmationCycle.PENDING_RECONFIRMATION_SEND)
        if not record.state.notification_suppressed:
            await self.send_confirmation_instructions(record)

    async def resend_confirmation_instructions(self, record: ConfirmableUser) -> bool:
        """Send the instructions again, regenerating the token if it expired.

        Returns:
            bool: False with an `already_confirmed` error on a settled record.
        """
        record.errors.clear()
        if not self._check_pending_any_confirmation(record):
            return False
        if record.raw_token and self.is_token_expired(record):
            record.raw_token = None
        await self.send_confirmation_instructions(record)
        return True

    # ------------------------------------------------------------------
    # Record lifecycle
    # ------------------------------------------------------------------

    async def create(self, record: ConfirmableUser) -> bool:
        """Persist a new record and send its first confirmation instructions."""
        return await self.save(record)

    async def update(self, record: ConfirmableUser, **changes: Any) -> bool:
        """Apply ``changes`` to the record and persist them.

        A phone change on a reconfirmable record is postponed until the new
        number is confirmed.
        """
        for name, value in changes.items():
            setattr(record.user, name, value)
        return await self.save(record)

    async def save(self, record: ConfirmableUser, validate: bool = True) -> bool:
        """Persist the record, running the create or update steps around the write.

        Raises:
            StaleRecordError: If an update lost an optimistic concurrency race.
        """
        if record.persisted:
            return await self._save_update(record, validate)
        return await self._save_create(record, validate)

    async def _save_create(self, record: ConfirmableUser, validate: bool) -> bool:
        if self.is_confirmation_required(record):
            await self.generate_token(record)

        if not await self._persist(record, validate):
            return False

        if self._should_send_confirmation_notification(record):
            record.state.created_with_notification = True
            await self.send_on_create_confirmation_instructions(record)
        return True

    async def _save_update(self, record: ConfirmableUser, validate: bool) -> bool:
        previous_phone = self._user_repository.value_in_database(record.user, "phone")
        if self._guard.should_postpone(record):
            await self._guard.postpone_phone_change(record)

        if not await self._persist(record, validate):
            return False

        if self._guard.is_reconfirmation_required(record):
            notify_previous = self._config.send_phone_changed_notification and previous_phone
            await self._publish(
                PhoneChangeRequestedEvent.create(
                    occurred_at=self._clock.now(),
                    user_id=record.id,
                    previous_phone=mask_phone(previous_phone),
                    requested_phone=mask_phone(record.user.unconfirmed_phone),
                )
            )
            await self.send_reconfirmation_instructions(record)
            if notify_previous:
                self._notifier.deliver_phone_changed(previous_phone)
                logger.info(
                    "Phone change notice queued",
                    user_id=record.id,
                    phone=mask_phone(previous_phone),
                )
        return True

    def _should_send_confirmation_notification(self, record: ConfirmableUser) -> bool:
        phone = record.user.phone
        return (
            self.is_confirmation_required(record)
            and not record.state.notification_suppressed
            and bool(phone and phone.strip())
        )

    async def _persist(self, record: ConfirmableUser, validate: bool) -> bool:
        if validate:
            problems = await self._user_repository.validate(record.user)
            if problems:
                for field_name, code in problems:
                    record.errors.add(field_name, code)
                logger.info(
                    "User record failed validation",
                    user_id=record.id,
                    errors=record.errors.to_dict(),
                )
                return False

        try:
            record.user = await self._user_repository.save(record.user)
        except DuplicatePhoneError:
            record.errors.add("phone", ConfirmationErrorCode.TAKEN)
            logger.info("User record rejected: phone taken", user_id=record.id)
            return False
        return True

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def _publish_failed(self, record: ConfirmableUser, code: ConfirmationErrorCode) -> None:
        await self._publish(
            PhoneConfirmationFailedEvent.create(
                occurred_at=self._clock.now(),
                user_id=record.id,
                failure_reason=code.value,
            )
        )

    async def _publish(self, event: BaseDomainEvent) -> None:
        if self._event_publisher is None:
            return
        try:
            await self._event_publisher.publish(event)
        except Exception as e:
            logger.error(
                "Failed to publish phone confirmation event",
                event_type=type(event).__name__,
                user_id=event.user_id,
                error=str(e),
            )
