from .confirmable_user import ConfirmableUser
from .user import User

__all__ = ["ConfirmableUser", "User"]
