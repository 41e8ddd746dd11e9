"""Lookups over the user collection for the confirmation flow.

Both lookups always hand back a `ConfirmableUser`: the stored record when one
matches, otherwise a transient record carrying a field error, so callers have
a uniform object to render.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

import structlog

from phone_confirmable.domain.entities.confirmable_user import ConfirmableUser
from phone_confirmable.domain.entities.user import User
from phone_confirmable.domain.interfaces import IUserRepository
from phone_confirmable.domain.services.phone_confirmation.confirmation_manager import (
    PhoneConfirmationManager,
)
from phone_confirmable.domain.value_objects.field_errors import ConfirmationErrorCode
from phone_confirmable.utils.masking import mask_phone, token_prefix

logger = structlog.get_logger(__name__)

TOKEN_FIELD = "phone_confirmation_token"


def _clean(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class PhoneConfirmationLookupService:
    """Find records by lookup keys or by token and run the confirmation step on them."""

    def __init__(
        self,
        user_repository: IUserRepository,
        confirmation_manager: PhoneConfirmationManager,
    ) -> None:
        self._user_repository = user_repository
        self._manager = confirmation_manager
        self._config = confirmation_manager.config

    async def find_or_initialize_with_errors(
        self,
        required_keys: Iterable[str],
        attributes: Mapping[str, Any],
        error: ConfirmationErrorCode = ConfirmationErrorCode.NOT_FOUND,
    ) -> ConfirmableUser:
        """Find the first record matching every key, or build one carrying errors.

        Whitespace is stripped and blank values dropped first. Each key of a
        transient result gets ``blank`` when it was missing, else ``error``.
        """
        required_keys = tuple(required_keys)
        conditions: Dict[str, Any] = {}
        for key in required_keys:
            value = _clean(attributes.get(key))
            if not _blank(value):
                conditions[key] = value

        if len(conditions) == len(required_keys):
            user = await self._user_repository.find_first_by(**conditions)
            if user is not None:
                return ConfirmableUser(user)

        record = ConfirmableUser(
            **{k: v for k, v in conditions.items() if k in User.model_fields and k != "id"}
        )
        for key in required_keys:
            record.errors.add(key, error if key in conditions else ConfirmationErrorCode.BLANK)
        return record

    async def find_by_unconfirmed_phone_with_errors(
        self, attributes: Mapping[str, Any]
    ) -> ConfirmableUser:
        """Same as `find_or_initialize_with_errors` with ``phone`` read as ``unconfirmed_phone``."""
        keys = tuple(
            "unconfirmed_phone" if key == "phone" else key
            for key in self._config.confirmation_keys
        )
        remapped = {k: v for k, v in attributes.items() if k in self._config.confirmation_keys}
        remapped["unconfirmed_phone"] = remapped.pop("phone", None)
        return await self.find_or_initialize_with_errors(keys, remapped)

    async def find_or_initialize_for_resend(
        self, attributes: Mapping[str, Any]
    ) -> ConfirmableUser:
        """Resend confirmation instructions to the record matching ``attributes``.

        A pending (unconfirmed) phone is searched first when reconfirmable,
        then the configured lookup keys. Instructions are resent only to a
        stored record; a transient one comes back with a ``not_found`` or
        ``blank`` error.
        """
        record: Optional[ConfirmableUser] = None
        if self._config.reconfirmable:
            record = await self.find_by_unconfirmed_phone_with_errors(attributes)
        if record is None or not record.persisted:
            record = await self.find_or_initialize_with_errors(
                self._config.confirmation_keys, attributes
            )

        if record.persisted:
            await self._manager.resend_confirmation_instructions(record)
        else:
            logger.info(
                "Confirmation resend requested for unknown record",
                phone=mask_phone(_clean(attributes.get("phone"))),
                errors=record.errors.to_dict(),
            )
        return record

    async def confirm_by_token(self, token: Optional[str]) -> ConfirmableUser:
        """Find the record holding ``token`` and confirm it."""
        if _blank(token):
            record = ConfirmableUser()
            record.errors.add(TOKEN_FIELD, ConfirmationErrorCode.BLANK)
            return record

        user = await self._user_repository.find_first_by(**{TOKEN_FIELD: token})
        if user is None:
            logger.warning("Phone confirmation attempted with unknown token",
                           token_prefix=token_prefix(token))
            record = ConfirmableUser(**{TOKEN_FIELD: token})
            record.errors.add(TOKEN_FIELD, ConfirmationErrorCode.NOT_FOUND)
            return record

        record = ConfirmableUser(user)
        await self._manager.confirm(record)
        return record
