"""Confirmation Configuration Value Object.

Options of the phone confirmation flow for one record type. They are resolved
once, when the confirmation services are built, and never change afterwards.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Tuple

from phone_confirmable.core.exceptions import ConfigurationError
from phone_confirmable.domain.value_objects.confirmation_token import PhoneConfirmationToken

LOOKUP_FIELDS = frozenset({"phone", "unconfirmed_phone", "id"})


@dataclass(frozen=True)
class ConfirmationConfig:
    """Immutable configuration of the confirmation flow.

    Attributes:
        allow_unconfirmed_access_for: Grace period during which an unconfirmed
            user may still authenticate, measured from the token generation
            time. ``None`` means unlimited grace, ``timedelta(0)`` means
            confirmation is always mandatory.
        confirm_within: Validity window of an issued token. ``None`` means
            tokens never expire. A repeat request inside the window reuses
            the outstanding token instead of minting a new one.
        reconfirmable: Whether a phone change must be confirmed before it
            takes effect. Until then the new number is kept in
            ``unconfirmed_phone``.
        confirmation_keys: Fields used to find a record when confirmation
            instructions are requested again.
        send_phone_changed_notification: With ``reconfirmable``, notify the
            original phone when a change is requested.
        token_length: Number of digits of generated tokens.
    """

    allow_unconfirmed_access_for: Optional[timedelta] = timedelta(0)
    confirm_within: Optional[timedelta] = None
    reconfirmable: bool = True
    confirmation_keys: Tuple[str, ...] = ("phone",)
    send_phone_changed_notification: bool = False
    token_length: int = PhoneConfirmationToken.DEFAULT_LENGTH

    def __post_init__(self):
        # Accept any iterable of keys but store an immutable tuple
        object.__setattr__(self, "confirmation_keys", tuple(self.confirmation_keys))
        self._validate()

    def _validate(self) -> None:
        for name in ("allow_unconfirmed_access_for", "confirm_within"):
            value = getattr(self, name)
            if value is not None and value < timedelta(0):
                raise ConfigurationError(f"{name} must not be negative")

        if not self.confirmation_keys:
            raise ConfigurationError("confirmation_keys must not be empty")
        unknown = set(self.confirmation_keys) - LOOKUP_FIELDS
        if unknown:
            raise ConfigurationError(
                f"Unknown confirmation keys: {', '.join(sorted(unknown))}"
            )

        if not (
            PhoneConfirmationToken.MIN_LENGTH
            <= self.token_length
            <= PhoneConfirmationToken.MAX_LENGTH
        ):
            raise ConfigurationError("token_length is out of range")

    @property
    def required_fields(self) -> Tuple[str, ...]:
        """Columns a record type must carry to support this configuration."""
        fields = ("phone_confirmation_token", "phone_confirmed_at", "phone_confirmation_sent_at")
        if self.reconfirmable:
            fields += ("unconfirmed_phone",)
        return fields

    @classmethod
    def from_settings(cls, settings) -> "ConfirmationConfig":
        """Build the configuration from the ``PHONE_CONFIRMATION_*`` settings."""
        return cls(
            allow_unconfirmed_access_for=settings.PHONE_CONFIRMATION_ALLOW_UNCONFIRMED_ACCESS_FOR,
            confirm_within=settings.PHONE_CONFIRMATION_CONFIRM_WITHIN,
            reconfirmable=settings.PHONE_CONFIRMATION_RECONFIRMABLE,
            confirmation_keys=tuple(settings.PHONE_CONFIRMATION_KEYS),
            send_phone_changed_notification=settings.PHONE_CONFIRMATION_SEND_PHONE_CHANGED_NOTIFICATION,
            token_length=settings.PHONE_CONFIRMATION_TOKEN_LENGTH,
        )
