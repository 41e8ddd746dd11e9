"""Repository interfaces for abstracting data persistence in the domain layer.

The confirmation services only talk to storage through `IUserRepository`.
Concrete adapters live in `infrastructure.repositories`: one backed by an
SQLAlchemy async session, one in memory for tests and local runs.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from phone_confirmable.domain.entities.user import User
from phone_confirmable.domain.value_objects.field_errors import ConfirmationErrorCode


class IUserRepository(ABC):
    """An interface defining the contract for user persistence operations.

    Besides plain lookups and saves it exposes the change-tracking queries the
    reconfirmation guard relies on (is a field changing, what is the stored
    value) and optimistic concurrency through `User.lock_version`.
    """

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Retrieves a user by their unique identifier."""
        raise NotImplementedError

    @abstractmethod
    async def find_first_by(self, **conditions: Any) -> Optional[User]:
        """Retrieves the first user whose fields equal all ``conditions``.

        Args:
            **conditions: Field name to value, e.g. ``phone="+15550100"``.

        Returns:
            An optional `User` entity. Returns `None` if no user matches.
        """
        raise NotImplementedError

    @abstractmethod
    async def validate(self, user: User) -> List[Tuple[str, ConfirmationErrorCode]]:
        """Runs the store's validations (phone uniqueness) against ``user``.

        Returns:
            A list of ``(field, code)`` pairs; empty when the user is valid.
        """
        raise NotImplementedError

    @abstractmethod
    async def save(self, user: User) -> User:
        """Persists a new user or updates an existing one.

        Raises:
            StaleRecordError: If the stored row changed since ``user`` was loaded.
            DuplicatePhoneError: If the store rejects a duplicate phone.
        """
        raise NotImplementedError

    @abstractmethod
    async def reload(self, user: User) -> Optional[User]:
        """Returns ``user`` with its stored state, discarding unsaved changes."""
        raise NotImplementedError

    @abstractmethod
    def is_changing(self, user: User, field: str) -> bool:
        """Whether the in-memory value of ``field`` differs from the stored one."""
        raise NotImplementedError

    @abstractmethod
    def value_in_database(self, user: User, field: str) -> Any:
        """The stored value of ``field``; `None` for records never saved."""
        raise NotImplementedError
