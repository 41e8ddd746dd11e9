"""Field-attached validation errors.

Confirmation failures are reported the way form validation is: a boolean
result plus an inspectable collection of errors keyed by field, so callers
always have a uniform object to render.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from phone_confirmable.utils.i18n import get_translated_message


class ConfirmationErrorCode(str, Enum):
    ALREADY_CONFIRMED = "already_confirmed"
    CONFIRMATION_PERIOD_EXPIRED = "confirmation_period_expired"
    NOT_FOUND = "not_found"
    BLANK = "blank"
    TAKEN = "taken"


@dataclass(frozen=True)
class FieldError:
    """A single error attached to a field.

    Attributes:
        field: Name of the record field the error belongs to.
        code: Machine-readable error code.
        options: Interpolation values for the message (e.g. ``period``).
    """

    field: str
    code: ConfirmationErrorCode
    options: Dict[str, Any] = field(default_factory=dict)

    def message(self, language: str = "en") -> str:
        return get_translated_message(self.code.value, language, **self.options)

    def full_message(self, language: str = "en") -> str:
        label = get_translated_message(f"field_{self.field}", language)
        return f"{label} {self.message(language)}"


class FieldErrors:
    """Ordered collection of `FieldError` objects for one record instance."""

    def __init__(self) -> None:
        self._errors: List[FieldError] = []

    def add(self, field_name: str, code: ConfirmationErrorCode, **options: Any) -> FieldError:
        error = FieldError(field=field_name, code=ConfirmationErrorCode(code), options=options)
        self._errors.append(error)
        return error

    def on(self, field_name: str) -> List[FieldError]:
        return [e for e in self._errors if e.field == field_name]

    def has(self, field_name: str, code: Optional[ConfirmationErrorCode] = None) -> bool:
        return any(code is None or e.code == code for e in self.on(field_name))

    def codes(self, field_name: str) -> List[ConfirmationErrorCode]:
        return [e.code for e in self.on(field_name)]

    def clear(self) -> None:
        self._errors.clear()

    def full_messages(self, language: str = "en") -> List[str]:
        return [e.full_message(language) for e in self._errors]

    def to_dict(self) -> Dict[str, List[str]]:
        """Group error codes by field, e.g. ``{"phone": ["already_confirmed"]}``."""
        grouped: Dict[str, List[str]] = {}
        for error in self._errors:
            grouped.setdefault(error.field, []).append(error.code.value)
        return grouped

    def __iter__(self) -> Iterator[FieldError]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __bool__(self) -> bool:
        return bool(self._errors)

    def __repr__(self) -> str:
        return f"FieldErrors({self.to_dict()!r})"
