"""Value objects of the phone confirmation domain."""

from .confirmation_config import ConfirmationConfig
from .confirmation_state import ConfirmationState, ReconfirmationCycle
from .confirmation_token import PhoneConfirmationToken
from .field_errors import ConfirmationErrorCode, FieldError, FieldErrors

__all__ = [
    "ConfirmationConfig",
    "ConfirmationState",
    "ReconfirmationCycle",
    "PhoneConfirmationToken",
    "ConfirmationErrorCode",
    "FieldError",
    "FieldErrors",
]
