"""Confirmable user aggregate.

Wraps a persisted `User` together with the state that only exists on one
in-memory instance: the plaintext token produced by the last generation, the
one-shot reconfirmation flags and the field errors of the last operation.
Every lookup hands out a fresh aggregate, so this state never leaks between
callers.
"""

from typing import Any, Optional

from phone_confirmable.domain.entities.user import User
from phone_confirmable.domain.value_objects.confirmation_state import ConfirmationState
from phone_confirmable.domain.value_objects.field_errors import FieldErrors


class ConfirmableUser:
    """Aggregate root of the confirmation flow.

    Attributes:
        user: The persisted record.
        raw_token: Plaintext token kept in memory after generation or reuse.
        state: Transient one-shot flags, see `ConfirmationState`.
        errors: Field errors attached by the last operation.
    """

    def __init__(self, user: Optional[User] = None, **attributes: Any) -> None:
        self.user = user if user is not None else User(**attributes)
        self.raw_token: Optional[str] = None
        self.state = ConfirmationState()
        self.errors = FieldErrors()

    @property
    def persisted(self) -> bool:
        return self.user.id is not None

    @property
    def id(self) -> Optional[int]:
        return self.user.id

    @property
    def phone(self) -> Optional[str]:
        return self.user.phone

    @phone.setter
    def phone(self, value: Optional[str]) -> None:
        self.user.phone = value

    @property
    def unconfirmed_phone(self) -> Optional[str]:
        return self.user.unconfirmed_phone

    @property
    def confirmation_token(self) -> Optional[str]:
        return self.user.phone_confirmation_token

    @property
    def confirmed_at(self):
        return self.user.phone_confirmed_at

    @property
    def confirmation_sent_at(self):
        return self.user.phone_confirmation_sent_at

    def __repr__(self) -> str:
        return (
            f"ConfirmableUser(id={self.user.id!r}, persisted={self.persisted}, "
            f"errors={self.errors!r})"
        )
