"""In-memory User Repository.

Behaves like a table: every lookup hands out a fresh `User` copy of the
stored row, so two callers holding the same record really hold two
instances, and saves are checked against the stored ``lock_version``. Used by
the test-suite and for local runs without a database.
"""

from typing import Any, Dict, List, Optional, Tuple

from structlog import get_logger

from phone_confirmable.core.exceptions import (
    DatabaseError,
    DuplicatePhoneError,
    StaleRecordError,
)
from phone_confirmable.domain.entities.user import User
from phone_confirmable.domain.interfaces.repositories import IUserRepository
from phone_confirmable.domain.value_objects.field_errors import ConfirmationErrorCode

logger = get_logger(__name__)

UNIQUE_FIELDS = ("phone", "phone_confirmation_token")


def _row(user: User) -> Dict[str, Any]:
    return {name: getattr(user, name) for name in User.model_fields}


class InMemoryUserRepository(IUserRepository):
    """Dictionary-backed implementation of `IUserRepository`."""

    def __init__(self) -> None:
        self._rows: Dict[int, Dict[str, Any]] = {}
        self._next_id = 1
        logger.debug("InMemoryUserRepository initialized")

    def __len__(self) -> int:
        return len(self._rows)

    async def get_by_id(self, user_id: int) -> Optional[User]:
        if user_id <= 0:
            raise ValueError("User ID must be a positive integer")
        row = self._rows.get(user_id)
        return User(**row) if row is not None else None

    async def find_first_by(self, **conditions: Any) -> Optional[User]:
        if not conditions:
            raise ValueError("At least one lookup condition is required")
        for user_id in sorted(self._rows):
            row = self._rows[user_id]
            if all(row.get(name) == value for name, value in conditions.items()):
                return User(**row)
        return None

    async def validate(self, user: User) -> List[Tuple[str, ConfirmationErrorCode]]:
        if user.phone and self._taken_by_other(user, "phone"):
            return [("phone", ConfirmationErrorCode.TAKEN)]
        return []

    async def save(self, user: User) -> User:
        for name in UNIQUE_FIELDS:
            if getattr(user, name) is not None and self._taken_by_other(user, name):
                if name == "phone":
                    raise DuplicatePhoneError()
                raise DatabaseError(f"Duplicate value for unique field {name}")

        if user.id is not None and user.id in self._rows:
            stored_version = self._rows[user.id]["lock_version"]
            if stored_version != user.lock_version:
                raise StaleRecordError()
            user.lock_version = stored_version + 1
        else:
            if user.id is None:
                user.id = self._next_id
            self._next_id = max(self._next_id, user.id) + 1

        self._rows[user.id] = _row(user)
        logger.debug("User saved", user_id=user.id, lock_version=user.lock_version)
        return user

    async def reload(self, user: User) -> Optional[User]:
        if user.id is None:
            return None
        return await self.get_by_id(user.id)

    def is_changing(self, user: User, field: str) -> bool:
        return getattr(user, field) != self.value_in_database(user, field)

    def value_in_database(self, user: User, field: str) -> Any:
        row = self._rows.get(user.id) if user.id is not None else None
        return row[field] if row is not None else None

    def _taken_by_other(self, user: User, field: str) -> bool:
        value = getattr(user, field)
        return any(
            row[field] == value
            for user_id, row in self._rows.items()
            if user_id != user.id
        )
