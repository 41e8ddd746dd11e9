"""Phone confirmation token value object."""

import secrets
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class PhoneConfirmationToken:
    """A short numeric code proving receipt of an SMS.

    Codes are drawn from `secrets`, so every digit is uniformly random and
    unguessable. Uniqueness across records is enforced by the caller, which
    retries while another record already holds the candidate.
    """

    value: str

    DEFAULT_LENGTH: ClassVar[int] = 6
    MIN_LENGTH: ClassVar[int] = 4
    MAX_LENGTH: ClassVar[int] = 12

    def __post_init__(self):
        if not self.value or not self.value.isdigit():
            raise ValueError("Confirmation token must be a non-empty string of digits")
        if not self.MIN_LENGTH <= len(self.value) <= self.MAX_LENGTH:
            raise ValueError(
                f"Confirmation token must have between {self.MIN_LENGTH} and "
                f"{self.MAX_LENGTH} digits"
            )

    @classmethod
    def generate(cls, length: int = DEFAULT_LENGTH) -> "PhoneConfirmationToken":
        return cls(value=f"{secrets.randbelow(10 ** length):0{length}d}")

    def __str__(self) -> str:
        return f"{self.value[:2]}{'*' * (len(self.value) - 2)}"
