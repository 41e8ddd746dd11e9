from __future__ import annotations

"""Structured exception hierarchy for phone_confirmable.

Domain failures of the confirmation flow (already confirmed, expired token,
unknown token) are never raised: they are attached to the record as field
errors. The exceptions below cover the infrastructure seams instead, the
persistence adapter, the notification transport and configuration loading.
Each one carries a machine-readable `code` next to its human-readable
`message` so that callers and log processors can branch on it.
"""

from typing import Final

__all__: Final = [
    "ConfirmableError",
    "ConfigurationError",
    "DatabaseError",
    "StaleRecordError",
    "DuplicatePhoneError",
    "NotificationDeliveryError",
    "TokenGenerationError",
]


class ConfirmableError(Exception):
    """Base exception class for all custom errors in the package.

    Attributes:
        message (str): A human-readable error message, suitable for logging.
        code (str): A unique, machine-readable error code.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


class ConfigurationError(ConfirmableError):
    """Raised when confirmation options are invalid.

    Options are resolved once when the manager is built, so this surfaces at
    startup rather than during a request.
    """

    def __init__(self, message: str, code: str = "configuration_error"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Persistence errors
# ---------------------------------------------------------------------------


class DatabaseError(ConfirmableError):
    """Raised for low-level database interaction errors.

    Wraps underlying driver errors so the domain never imports them.
    """

    def __init__(self, message: str, code: str = "database_error"):
        super().__init__(message, code)


class StaleRecordError(DatabaseError):
    """Raised when a save lost an optimistic concurrency race.

    The stored row was updated by another writer after this instance was
    loaded; the `lock_version` no longer matches.
    """

    def __init__(
        self,
        message: str = "Record was modified by another writer",
        code: str = "stale_record",
    ):
        super().__init__(message, code)


class DuplicatePhoneError(DatabaseError):
    """Raised when the store rejects a phone number that is already taken."""

    def __init__(
        self,
        message: str = "Phone number is already taken",
        code: str = "duplicate_phone",
    ):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Token and notification errors
# ---------------------------------------------------------------------------


class TokenGenerationError(ConfirmableError):
    """Raised when no unique confirmation token could be minted."""

    def __init__(self, message: str, code: str = "token_generation_error"):
        super().__init__(message, code)


class NotificationDeliveryError(ConfirmableError):
    """Raised by SMS transports when a message could not be handed over.

    The queued notifier catches and logs it; it never reaches the
    confirmation logic.
    """

    def __init__(self, message: str, code: str = "notification_delivery_error"):
        super().__init__(message, code)
