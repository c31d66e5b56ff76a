"""Typed constraint violations.

A violation is the immutable record of one failed constraint. Each subclass
corresponds to one constraint kind and carries the rule parameters and the
observed value (or its size), so it can be rendered later without access to
the rule or the original data.

Every violation exposes:
- ``message_id``: stable key used for catalog lookups and default templates
- ``params()``: ordered name/value pairs for message substitution
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from .errors import ValidationErrors

_MESSAGE_FIELDS = ("message", "custom_id")


@dataclass(frozen=True)
class Violation:
    """Base class for all violations.

    Attributes:
        message: Optional template replacing the built-in default message
        custom_id: Optional catalog key replacing ``message_id``
    """

    kind: ClassVar[str] = "violation"

    message: str | None = field(default=None, kw_only=True, compare=False, repr=False)
    custom_id: str | None = field(default=None, kw_only=True, compare=False, repr=False)

    @property
    def message_id(self) -> str:
        """Stable message key for this violation."""
        return self.custom_id or self.default_message_id()

    def default_message_id(self) -> str:
        return self.kind

    def params(self) -> dict[str, Any]:
        """Named parameters available to message templates, in declared order."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in _MESSAGE_FIELDS
        }

    def __str__(self) -> str:
        from .messages import render_violation

        return render_violation(self)


@dataclass(frozen=True)
class TypeViolation(Violation):
    """Value is of the wrong kind for the rule or field."""

    kind: ClassVar[str] = "type"

    expected: str
    actual: str


@dataclass(frozen=True)
class RequiredViolation(Violation):
    """A required field is missing or null."""

    kind: ClassVar[str] = "required"


@dataclass(frozen=True)
class RangeViolation(Violation):
    """Number lies outside its declared bounds.

    ``violated`` names the bound that failed: ``"minimum"`` or ``"maximum"``.
    """

    kind: ClassVar[str] = "range"

    actual: Any
    minimum: Any = None
    maximum: Any = None
    exclusive_minimum: bool = False
    exclusive_maximum: bool = False
    violated: str = "maximum"

    def default_message_id(self) -> str:
        if self.violated == "minimum":
            return "exclusive-minimum" if self.exclusive_minimum else "minimum"
        return "exclusive-maximum" if self.exclusive_maximum else "maximum"


@dataclass(frozen=True)
class NonFiniteViolation(Violation):
    """Number is NaN or infinite where a finite number is needed."""

    kind: ClassVar[str] = "non-finite"

    actual: Any


@dataclass(frozen=True)
class MultipleOfViolation(Violation):
    kind: ClassVar[str] = "multiple-of"

    actual: Any
    multiple_of: Any


@dataclass(frozen=True)
class LengthViolation(Violation):
    """Text length (in grapheme clusters) outside its bounds."""

    kind: ClassVar[str] = "length"

    length: int
    min_length: int | None = None
    max_length: int | None = None
    violated: str = "max_length"

    def default_message_id(self) -> str:
        return "min-length" if self.violated == "min_length" else "max-length"


@dataclass(frozen=True)
class PatternViolation(Violation):
    kind: ClassVar[str] = "pattern"

    actual: str
    pattern: str


@dataclass(frozen=True)
class EnumViolation(Violation):
    """Value is not one of the allowed values.

    ``allowed`` keeps the order in which the rule author declared them.
    """

    kind: ClassVar[str] = "enum"

    actual: Any
    allowed: tuple[Any, ...]


@dataclass(frozen=True)
class ItemCountViolation(Violation):
    kind: ClassVar[str] = "item-count"

    count: int
    min_items: int | None = None
    max_items: int | None = None
    violated: str = "max_items"

    def default_message_id(self) -> str:
        return "min-items" if self.violated == "min_items" else "max-items"


@dataclass(frozen=True)
class UniqueItemsViolation(Violation):
    """First pair of equal items found scanning in order."""

    kind: ClassVar[str] = "unique-items"

    first_index: int
    second_index: int
    duplicate: Any


@dataclass(frozen=True)
class ContainsViolation(Violation):
    """Too few (or too many) items match the contained constraint."""

    kind: ClassVar[str] = "contains"

    matched: int
    min_contains: int = 1
    max_contains: int | None = None
    violated: str = "min_contains"

    def default_message_id(self) -> str:
        return "min-contains" if self.violated == "min_contains" else "max-contains"


@dataclass(frozen=True)
class PropertyCountViolation(Violation):
    kind: ClassVar[str] = "property-count"

    count: int
    min_properties: int | None = None
    max_properties: int | None = None
    violated: str = "max_properties"

    def default_message_id(self) -> str:
        return "min-properties" if self.violated == "min_properties" else "max-properties"


@dataclass(frozen=True)
class UnknownPropertiesViolation(Violation):
    """Record carries keys that a strict schema does not declare."""

    kind: ClassVar[str] = "unknown-properties"

    names: tuple[str, ...]


@dataclass(frozen=True)
class CustomViolation(Violation):
    """Failure reported by a user supplied predicate."""

    kind: ClassVar[str] = "custom"

    reason: str


@dataclass(frozen=True)
class AnyOfViolation(Violation):
    """No alternative matched; carries every alternative's error tree."""

    kind: ClassVar[str] = "any-of"

    branches: tuple[ValidationErrors, ...]

    def params(self) -> dict[str, Any]:
        return {"count": len(self.branches)}


@dataclass(frozen=True)
class OneOfViolation(Violation):
    """Zero or several alternatives matched where exactly one must.

    ``branches`` holds the error tree of every alternative in declared order
    (empty trees for the ones that matched).
    """

    kind: ClassVar[str] = "one-of"

    matched: int
    matched_indices: tuple[int, ...]
    branches: tuple[ValidationErrors, ...]

    def default_message_id(self) -> str:
        return "one-of-none" if self.matched == 0 else "one-of-many"

    def params(self) -> dict[str, Any]:
        return {
            "count": len(self.branches),
            "matched": self.matched,
            "matched_indices": self.matched_indices,
        }


@dataclass(frozen=True)
class NotViolation(Violation):
    """The negated constraint unexpectedly succeeded."""

    kind: ClassVar[str] = "not"


__all__ = [
    "Violation",
    "AnyOfViolation",
    "ContainsViolation",
    "CustomViolation",
    "EnumViolation",
    "ItemCountViolation",
    "LengthViolation",
    "MultipleOfViolation",
    "NonFiniteViolation",
    "NotViolation",
    "OneOfViolation",
    "PatternViolation",
    "PropertyCountViolation",
    "RangeViolation",
    "RequiredViolation",
    "TypeViolation",
    "UniqueItemsViolation",
    "UnknownPropertiesViolation",
]
