from .clock import FrozenClock
from .user import create_confirmable_user, create_fake_user, fake_phone

__all__ = ["FrozenClock", "create_confirmable_user", "create_fake_user", "fake_phone"]
