"""Constraint implementations with consistent, composable API.

Every constraint exposes ``check(value) -> ValidationErrors``. Leaf rules
additionally implement the pure ``evaluate(value) -> Violation | None``, which
returns ``None`` when the value satisfies the rule.

Conventions shared by all leaf rules:
- ``None`` passes (presence is enforced by ``Field(required=True)``),
  except for :class:`TypeOf` and :class:`Custom`, which see every value
- a value of the wrong kind yields a :class:`TypeViolation`, never an exception
- inconsistent rule parameters raise :class:`ConfigurationError` on construction
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal, InvalidOperation
from re import Pattern as RegexPattern
from typing import TYPE_CHECKING, Any

import regex

from .errors import ValidationErrors
from .exceptions import ConfigurationError
from .patterns import compile_pattern
from .types import (
    ValueType,
    is_mapping,
    is_number,
    is_sequence,
    json_equal,
    value_type_of,
)
from .violations import (
    ContainsViolation,
    CustomViolation,
    EnumViolation,
    ItemCountViolation,
    LengthViolation,
    MultipleOfViolation,
    NonFiniteViolation,
    PatternViolation,
    PropertyCountViolation,
    RangeViolation,
    TypeViolation,
    UniqueItemsViolation,
    Violation,
)

if TYPE_CHECKING:
    from .composition import AllOf, AnyOf, Not

logger = logging.getLogger(__name__)

_GRAPHEME = regex.compile(r"\X")

# Remainder tolerance for float multiple_of checks, in units in the last place
MULTIPLE_OF_ULPS = 4


class Constraint(ABC):
    """Base class for all constraints with composable operators."""

    @abstractmethod
    def check(self, value: Any) -> ValidationErrors:
        """Validate a value against this constraint.

        Args:
            value: Value to validate

        Returns:
            ValidationErrors tree, empty when the value is valid
        """

    def __and__(self, other: Constraint) -> AllOf:
        """Combine with AND: both constraints must pass."""
        from .composition import AllOf

        if isinstance(self, AllOf):
            return AllOf(self.constraints + [other])
        elif isinstance(other, AllOf):
            return AllOf([self] + other.constraints)
        return AllOf([self, other])

    def __or__(self, other: Constraint) -> AnyOf:
        """Combine with OR: at least one constraint must pass."""
        from .composition import AnyOf

        if isinstance(self, AnyOf):
            return AnyOf(self.constraints + [other])
        elif isinstance(other, AnyOf):
            return AnyOf([self] + other.constraints)
        return AnyOf([self, other])

    def __invert__(self) -> Not:
        """Negate this constraint."""
        from .composition import Not

        return Not(self)


class Rule(Constraint):
    """A single leaf constraint kind with fixed parameters.

    Args:
        message: Optional template overriding the default message
        message_id: Optional catalog key overriding the default message id
    """

    def __init__(self, message: str | None = None, message_id: str | None = None):
        self.message = message
        self.message_id = message_id

    @abstractmethod
    def evaluate(self, value: Any) -> Violation | None:
        """Evaluate the rule, returning the violation or None on success."""

    def check(self, value: Any) -> ValidationErrors:
        violation = self.evaluate(value)
        if violation is None:
            return ValidationErrors()
        return ValidationErrors.leaf(violation)

    def _violation(self, violation_cls: type[Violation], *args: Any, **kwargs: Any) -> Violation:
        return violation_cls(*args, message=self.message, custom_id=self.message_id, **kwargs)

    def _type_violation(self, expected: str, value: Any) -> Violation:
        return self._violation(TypeViolation, expected, value_type_of(value).value)

    def __repr__(self) -> str:
        params = ", ".join(
            f"{key}={val!r}"
            for key, val in vars(self).items()
            if not key.startswith("_") and key not in ("message", "message_id") and val is not None
        )
        return f"{type(self).__name__}({params})"


def _require_count(rule: str, name: str, value: int | None) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise _config_error(f"{name} must be an integer, got {value!r}", rule=rule, **{name: value})
    if value < 0:
        raise _config_error(f"{name} cannot be negative: {value}", rule=rule, **{name: value})


def _require_bounds(rule: str, low_name: str, low: Any, high_name: str, high: Any) -> None:
    if low is not None and high is not None and low > high:
        raise _config_error(
            f"{low_name} ({low}) cannot be greater than {high_name} ({high})",
            rule=rule,
            **{low_name: low, high_name: high},
        )


def _config_error(message: str, **context: Any) -> ConfigurationError:
    logger.error(f"Invalid rule configuration: {message}")
    return ConfigurationError(message, context=context)


def _is_finite(value: Any) -> bool:
    if isinstance(value, int):
        return True
    if isinstance(value, Decimal):
        return value.is_finite()
    try:
        return math.isfinite(value)
    except (TypeError, ValueError, OverflowError):
        return True


def grapheme_length(text: str) -> int:
    """Count the extended grapheme clusters (user-perceived characters) of a text."""
    return len(_GRAPHEME.findall(text))


def is_multiple_of(value: Any, multiple_of: Any) -> bool:
    """Check divisibility, tolerating float rounding.

    Integers and Decimals are checked exactly. Anything involving a float is
    checked through the remainder, which may differ from zero by a few units
    in the last place of the larger operand, so that ``0.3`` counts as a
    multiple of ``0.1`` while ``1e9 + 0.5`` does not count as a multiple of
    ``1.0``.
    """
    exact_types = (int, Decimal)
    if isinstance(value, exact_types) and isinstance(multiple_of, exact_types):
        try:
            return Decimal(value) % Decimal(multiple_of) == 0
        except InvalidOperation:
            pass
    value, multiple_of = float(value), float(multiple_of)
    remainder = math.remainder(value, multiple_of)
    if not math.isfinite(remainder):
        return False
    tolerance = MULTIPLE_OF_ULPS * math.ulp(max(abs(value), abs(multiple_of)))
    return abs(remainder) <= tolerance


class TypeOf(Rule):
    """Value must belong to one of the given kinds."""

    def __init__(self, *types: ValueType | str, message: str | None = None, message_id: str | None = None):
        super().__init__(message, message_id)
        if not types:
            raise _config_error("TypeOf requires at least one type", rule="type")
        try:
            self.types = tuple(ValueType.from_name(t) for t in types)
        except ValueError as e:
            raise _config_error(str(e), rule="type", types=list(types)) from e

    def evaluate(self, value: Any) -> Violation | None:
        if any(t.matches(value) for t in self.types):
            return None
        expected = " | ".join(t.value for t in self.types)
        return self._type_violation(expected, value)


class Range(Rule):
    """Numeric value must be within bounds.

    Args:
        minimum: Lower bound (inclusive unless ``exclusive_minimum``)
        maximum: Upper bound (inclusive unless ``exclusive_maximum``)
        exclusive_minimum: If True, value must be > minimum
        exclusive_maximum: If True, value must be < maximum
    """

    def __init__(
        self,
        minimum: Any = None,
        maximum: Any = None,
        exclusive_minimum: bool = False,
        exclusive_maximum: bool = False,
        message: str | None = None,
        message_id: str | None = None,
    ):
        super().__init__(message, message_id)
        for name, bound in (("minimum", minimum), ("maximum", maximum)):
            if bound is not None and (not is_number(bound) or not _is_finite(bound)):
                raise _config_error(f"{name} must be a finite number, got {bound!r}", rule="range")
        _require_bounds("range", "minimum", minimum, "maximum", maximum)
        self.minimum = minimum
        self.maximum = maximum
        self.exclusive_minimum = exclusive_minimum
        self.exclusive_maximum = exclusive_maximum

    def evaluate(self, value: Any) -> Violation | None:
        if value is None:
            return None
        if not is_number(value):
            return self._type_violation(ValueType.NUMBER.value, value)
        if not _is_finite(value):
            return self._violation(NonFiniteViolation, value)

        violated = None
        if self.minimum is not None:
            if value < self.minimum or (self.exclusive_minimum and value == self.minimum):
                violated = "minimum"
        if violated is None and self.maximum is not None:
            if value > self.maximum or (self.exclusive_maximum and value == self.maximum):
                violated = "maximum"
        if violated is None:
            return None
        return self._violation(
            RangeViolation,
            value,
            minimum=self.minimum,
            maximum=self.maximum,
            exclusive_minimum=self.exclusive_minimum,
            exclusive_maximum=self.exclusive_maximum,
            violated=violated,
        )


class MultipleOf(Rule):
    """Number must be an integer multiple of ``multiple_of``."""

    def __init__(self, multiple_of: Any, message: str | None = None, message_id: str | None = None):
        super().__init__(message, message_id)
        if not is_number(multiple_of) or not _is_finite(multiple_of) or multiple_of <= 0:
            raise _config_error(
                f"multiple_of must be a positive number, got {multiple_of!r}",
                rule="multiple_of",
                multiple_of=multiple_of,
            )
        self.multiple_of = multiple_of

    def evaluate(self, value: Any) -> Violation | None:
        if value is None:
            return None
        if not is_number(value):
            return self._type_violation(ValueType.NUMBER.value, value)
        if not _is_finite(value):
            return self._violation(NonFiniteViolation, value)
        if is_multiple_of(value, self.multiple_of):
            return None
        return self._violation(MultipleOfViolation, value, self.multiple_of)


class Length(Rule):
    """Text length, counted in grapheme clusters, must be in range."""

    def __init__(
        self,
        min_length: int | None = None,
        max_length: int | None = None,
        message: str | None = None,
        message_id: str | None = None,
    ):
        super().__init__(message, message_id)
        _require_count("length", "min_length", min_length)
        _require_count("length", "max_length", max_length)
        _require_bounds("length", "min_length", min_length, "max_length", max_length)
        self.min_length = min_length
        self.max_length = max_length

    def evaluate(self, value: Any) -> Violation | None:
        if value is None:
            return None
        if not isinstance(value, str):
            return self._type_violation(ValueType.STRING.value, value)

        length = grapheme_length(value)
        if self.min_length is not None and length < self.min_length:
            violated = "min_length"
        elif self.max_length is not None and length > self.max_length:
            violated = "max_length"
        else:
            return None
        return self._violation(
            LengthViolation,
            length,
            min_length=self.min_length,
            max_length=self.max_length,
            violated=violated,
        )


class Pattern(Rule):
    """Text must contain a match for a regular expression.

    The match may occur anywhere in the text; write ``^...$`` to require a
    full match.
    """

    def __init__(
        self,
        pattern: str | RegexPattern[str],
        message: str | None = None,
        message_id: str | None = None,
    ):
        super().__init__(message, message_id)
        if isinstance(pattern, str):
            self.regex = compile_pattern(pattern)
        else:
            self.regex = pattern
        self.pattern = self.regex.pattern

    def evaluate(self, value: Any) -> Violation | None:
        if value is None:
            return None
        if not isinstance(value, str):
            return self._type_violation(ValueType.STRING.value, value)
        if self.regex.search(value) is None:
            return self._violation(PatternViolation, value, self.pattern)
        return None

    def __repr__(self) -> str:
        return f"Pattern({self.pattern!r})"


class Enum(Rule):
    """Value must equal one of the allowed values."""

    def __init__(self, values: Iterable[Any], message: str | None = None, message_id: str | None = None):
        super().__init__(message, message_id)
        self.values = tuple(values)
        if not self.values:
            raise _config_error("Enum constraint requires at least one allowed value", rule="enum")

    def evaluate(self, value: Any) -> Violation | None:
        if value is None:
            return None
        if any(json_equal(value, allowed) for allowed in self.values):
            return None
        return self._violation(EnumViolation, value, self.values)


class ItemCount(Rule):
    """Sequence must hold between ``min_items`` and ``max_items`` elements."""

    def __init__(
        self,
        min_items: int | None = None,
        max_items: int | None = None,
        message: str | None = None,
        message_id: str | None = None,
    ):
        super().__init__(message, message_id)
        _require_count("items", "min_items", min_items)
        _require_count("items", "max_items", max_items)
        _require_bounds("items", "min_items", min_items, "max_items", max_items)
        self.min_items = min_items
        self.max_items = max_items

    def evaluate(self, value: Any) -> Violation | None:
        if value is None:
            return None
        if not is_sequence(value):
            return self._type_violation(ValueType.ARRAY.value, value)

        count = len(value)
        if self.min_items is not None and count < self.min_items:
            violated = "min_items"
        elif self.max_items is not None and count > self.max_items:
            violated = "max_items"
        else:
            return None
        return self._violation(
            ItemCountViolation,
            count,
            min_items=self.min_items,
            max_items=self.max_items,
            violated=violated,
        )


def find_duplicate(items: Sequence[Any]) -> tuple[int, int] | None:
    """Return the first ``(i, j)`` with ``i < j`` and equal items, scanning j in order."""
    for j in range(1, len(items)):
        for i in range(j):
            if json_equal(items[i], items[j]):
                return i, j
    return None


class UniqueItems(Rule):
    """Sequence elements must be pairwise distinct."""

    def evaluate(self, value: Any) -> Violation | None:
        if value is None:
            return None
        if not is_sequence(value):
            return self._type_violation(ValueType.ARRAY.value, value)
        duplicate = find_duplicate(value)
        if duplicate is None:
            return None
        first, second = duplicate
        return self._violation(UniqueItemsViolation, first, second, value[second])


class Contains(Rule):
    """Between ``min_contains`` and ``max_contains`` elements must satisfy a constraint."""

    def __init__(
        self,
        constraint: Constraint,
        min_contains: int = 1,
        max_contains: int | None = None,
        message: str | None = None,
        message_id: str | None = None,
    ):
        super().__init__(message, message_id)
        _require_count("contains", "min_contains", min_contains)
        _require_count("contains", "max_contains", max_contains)
        _require_bounds("contains", "min_contains", min_contains, "max_contains", max_contains)
        self.constraint = constraint
        self.min_contains = min_contains
        self.max_contains = max_contains

    def evaluate(self, value: Any) -> Violation | None:
        if value is None:
            return None
        if not is_sequence(value):
            return self._type_violation(ValueType.ARRAY.value, value)

        matched = sum(1 for item in value if self.constraint.check(item).is_empty())
        if matched < self.min_contains:
            violated = "min_contains"
        elif self.max_contains is not None and matched > self.max_contains:
            violated = "max_contains"
        else:
            return None
        return self._violation(
            ContainsViolation,
            matched,
            min_contains=self.min_contains,
            max_contains=self.max_contains,
            violated=violated,
        )


class PropertyCount(Rule):
    """Mapping must hold between ``min_properties`` and ``max_properties`` keys."""

    def __init__(
        self,
        min_properties: int | None = None,
        max_properties: int | None = None,
        message: str | None = None,
        message_id: str | None = None,
    ):
        super().__init__(message, message_id)
        _require_count("properties", "min_properties", min_properties)
        _require_count("properties", "max_properties", max_properties)
        _require_bounds("properties", "min_properties", min_properties, "max_properties", max_properties)
        self.min_properties = min_properties
        self.max_properties = max_properties

    def evaluate(self, value: Any) -> Violation | None:
        if value is None:
            return None
        if not is_mapping(value):
            return self._type_violation(ValueType.OBJECT.value, value)

        count = len(value)
        if self.min_properties is not None and count < self.min_properties:
            violated = "min_properties"
        elif self.max_properties is not None and count > self.max_properties:
            violated = "max_properties"
        else:
            return None
        return self._violation(
            PropertyCountViolation,
            count,
            min_properties=self.min_properties,
            max_properties=self.max_properties,
            violated=violated,
        )


class Custom(Rule):
    """Custom constraint using a callable.

    The callable may return:
    - ``True`` or ``None`` when the value is valid
    - ``False`` to fail with ``error_message``
    - a string, used as the failure reason
    - a :class:`Violation`, reported as is
    """

    def __init__(
        self,
        validator: Callable[[Any], bool | str | Violation | None],
        error_message: str = "Custom validation failed",
        name: str | None = None,
        message: str | None = None,
        message_id: str | None = None,
    ):
        super().__init__(message, message_id)
        self.validator = validator
        self.error_message = error_message
        self.name = name or getattr(validator, "__name__", "custom")

    def evaluate(self, value: Any) -> Violation | None:
        try:
            result = self.validator(value)
        except Exception as e:
            logger.debug(f"Custom validator {self.name} raised: {e!s}")
            return self._violation(CustomViolation, f"Custom validation error: {e!s}")

        if result is True or result is None:
            return None
        if result is False:
            return self._violation(CustomViolation, self.error_message)
        if isinstance(result, str):
            return self._violation(CustomViolation, result)
        if isinstance(result, Violation):
            return result
        return self._violation(
            CustomViolation,
            f"Custom validator returned unexpected type: {type(result).__name__}",
        )

    def __repr__(self) -> str:
        return f"Custom({self.name})"


__all__ = [
    "Constraint",
    "Rule",
    "Contains",
    "Custom",
    "Enum",
    "ItemCount",
    "Length",
    "MultipleOf",
    "Pattern",
    "PropertyCount",
    "Range",
    "TypeOf",
    "UniqueItems",
    "find_duplicate",
    "grapheme_length",
    "is_multiple_of",
]
