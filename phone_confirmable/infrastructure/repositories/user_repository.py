"""User Repository implementation using SQLAlchemy.

Adapter between the confirmation services and the `users` table through an
async session. Change tracking comes from the SQLAlchemy attribute history
of the loaded instance; optimistic concurrency from the mapper's
``lock_version`` version column, checked by the ORM on every UPDATE.
"""

from typing import Any, List, Optional, Tuple

from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError
from structlog import get_logger

from phone_confirmable.core.exceptions import (
    DatabaseError,
    DuplicatePhoneError,
    StaleRecordError,
)
from phone_confirmable.domain.entities.user import User
from phone_confirmable.domain.interfaces.repositories import IUserRepository
from phone_confirmable.domain.value_objects.field_errors import ConfirmationErrorCode
from phone_confirmable.utils.masking import mask_phone

logger = get_logger(__name__)


class UserRepository(IUserRepository):
    """SQLAlchemy implementation of `IUserRepository`.

    Responsibilities:
    - Lookups by id and by field equality
    - Phone uniqueness validation
    - Saves guarded by optimistic locking
    - Change tracking for the reconfirmation guard
    """

    def __init__(self, db_session: AsyncSession):
        """Initialize repository with database session.

        Args:
            db_session: SQLAlchemy async session for database operations
        """
        self.db_session = db_session
        logger.debug("UserRepository initialized", repository_type="infrastructure")

    async def get_by_id(self, user_id: int) -> Optional[User]:
        if user_id <= 0:
            raise ValueError("User ID must be a positive integer")
        return await self.find_first_by(id=user_id)

    async def find_first_by(self, **conditions: Any) -> Optional[User]:
        if not conditions:
            raise ValueError("At least one lookup condition is required")

        try:
            statement = select(User)
            for name, value in conditions.items():
                statement = statement.where(getattr(User, name) == value)
            statement = statement.order_by(User.id).limit(1)
            # Pending changes stay unflushed so their history survives until save
            with self.db_session.no_autoflush:
                result = await self.db_session.execute(statement)
            user = result.scalars().first()

            logger.debug(
                "User lookup completed",
                fields=sorted(conditions),
                found=user is not None,
                operation="find_first_by",
            )
            return user

        except SQLAlchemyError as e:
            logger.error(
                "Error retrieving user",
                fields=sorted(conditions),
                error=str(e),
                error_type=type(e).__name__,
                operation="find_first_by",
            )
            raise DatabaseError(f"User lookup failed: {e}") from e

    async def validate(self, user: User) -> List[Tuple[str, ConfirmationErrorCode]]:
        problems: List[Tuple[str, ConfirmationErrorCode]] = []
        if user.phone:
            statement = select(User.id).where(User.phone == user.phone)
            if user.id is not None:
                statement = statement.where(User.id != user.id)
            with self.db_session.no_autoflush:
                result = await self.db_session.execute(statement.limit(1))
            if result.scalars().first() is not None:
                problems.append(("phone", ConfirmationErrorCode.TAKEN))
        return problems

    async def save(self, user: User) -> User:
        is_update = inspect(user).has_identity
        user_id = user.id
        expected_version = user.lock_version
        try:
            self.db_session.add(user)
            await self.db_session.commit()
            await self.db_session.refresh(user)

            logger.debug(
                "User saved",
                user_id=user.id,
                operation="update" if is_update else "create",
                lock_version=user.lock_version,
            )
            return user

        except StaleDataError as e:
            # The rejected UPDATE must not linger in the transaction
            await self.db_session.rollback()
            logger.info(
                "Stale user record detected",
                user_id=user_id,
                lock_version=expected_version,
            )
            await self.reload(user)
            raise StaleRecordError() from e

        except IntegrityError as e:
            await self.db_session.rollback()
            if is_update:
                # Rollback expired the instance; load it again while we can await
                await self.reload(user)
            logger.warning(
                "User save rejected by constraint",
                user_id=user.id,
                phone=mask_phone(user.phone),
                error=str(e.orig),
            )
            detail = str(e.orig)
            if "phone" in detail and "phone_confirmation_token" not in detail:
                raise DuplicatePhoneError() from e
            raise DatabaseError(f"User save failed: {e.orig}") from e

    async def reload(self, user: User) -> Optional[User]:
        state = inspect(user)
        if not state.has_identity:
            return None
        # The identity key survives expiry, so no attribute load is needed here
        with self.db_session.no_autoflush:
            return await self.db_session.get(
                User, state.identity[0], populate_existing=True
            )

    def is_changing(self, user: User, field: str) -> bool:
        state = inspect(user)
        if not state.has_identity:
            return getattr(user, field) is not None
        return state.attrs[field].history.has_changes()

    def value_in_database(self, user: User, field: str) -> Any:
        state = inspect(user)
        if not state.has_identity:
            return None
        history = state.attrs[field].history
        if history.deleted:
            return history.deleted[0]
        if history.added:
            return None
        return getattr(user, field)
