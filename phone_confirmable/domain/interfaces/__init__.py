"""Domain interfaces (ports) implemented by the infrastructure layer."""

from .repositories import IUserRepository
from .services import IClock, IEventPublisher, IPhoneNotifier, ISmsTransport

__all__ = [
    "IUserRepository",
    "IClock",
    "IEventPublisher",
    "IPhoneNotifier",
    "ISmsTransport",
]
