from .confirmation_manager import PhoneConfirmationManager
from .lookup_service import PhoneConfirmationLookupService
from .reconfirmation_guard import ReconfirmationGuard
from .token_issuer import ConfirmationTokenIssuer

__all__ = [
    "PhoneConfirmationManager",
    "PhoneConfirmationLookupService",
    "ReconfirmationGuard",
    "ConfirmationTokenIssuer",
]
