"""Phone number confirmation for user accounts."""

__version__ = "0.1.0"
