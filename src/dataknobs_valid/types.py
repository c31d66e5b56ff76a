"""Value kinds and JSON-faithful comparison helpers.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from enum import Enum
from numbers import Number
from typing import Any


class ValueType(Enum):
    """JSON data model kinds a value can belong to."""

    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"

    @classmethod
    def from_name(cls, name: str | ValueType) -> ValueType:
        """Resolve a JSON Schema type name (or enum name) to a ValueType.

        Args:
            name: Type name such as "integer", "STRING" or a ValueType

        Returns:
            Matching ValueType

        Raises:
            ValueError: If the name is unknown
        """
        if isinstance(name, ValueType):
            return name
        lowered = name.lower()
        for member in cls:
            if member.value == lowered:
                return member
        raise ValueError(f"Unknown value type: {name}")

    def matches(self, value: Any) -> bool:
        """Check whether a value belongs to this kind."""
        if self is ValueType.NULL:
            return value is None
        if self is ValueType.BOOLEAN:
            return isinstance(value, bool)
        if self is ValueType.INTEGER:
            if is_number(value):
                if isinstance(value, int):
                    return True
                try:
                    return math.isfinite(value) and float(value).is_integer()  # type: ignore[arg-type]
                except (TypeError, ValueError):
                    return False
            return False
        if self is ValueType.NUMBER:
            return is_number(value)
        if self is ValueType.STRING:
            return isinstance(value, str)
        if self is ValueType.ARRAY:
            return is_sequence(value)
        return is_record(value)


def is_number(value: Any) -> bool:
    """True for numeric values, excluding booleans."""
    return isinstance(value, Number) and not isinstance(value, bool)


def is_sequence(value: Any) -> bool:
    """True for sequences that are not text or bytes."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_record(value: Any) -> bool:
    """True for mappings and attribute-bearing objects (not scalars or sequences)."""
    if value is None or isinstance(value, (bool, int, float, str, bytes)):
        return False
    if is_mapping(value):
        return True
    return not is_sequence(value) and hasattr(value, "__dict__")


def value_type_of(value: Any) -> ValueType:
    """Classify a value into its most specific JSON kind.

    Objects that are neither mappings nor sequences (dataclass records and
    the like) are reported as OBJECT.
    """
    if value is None:
        return ValueType.NULL
    if isinstance(value, bool):
        return ValueType.BOOLEAN
    if ValueType.INTEGER.matches(value):
        return ValueType.INTEGER
    if is_number(value):
        return ValueType.NUMBER
    if isinstance(value, str):
        return ValueType.STRING
    if is_sequence(value):
        return ValueType.ARRAY
    return ValueType.OBJECT


def json_equal(left: Any, right: Any) -> bool:
    """Compare two values with JSON equality semantics.

    Unlike ``==``, booleans never equal numbers (``True != 1``), mappings
    are compared by key set and value, and any two sequences are compared
    element-wise regardless of their concrete type.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if is_mapping(left) and is_mapping(right):
        if left.keys() != right.keys():
            return False
        return all(json_equal(left[key], right[key]) for key in left)
    if is_sequence(left) and is_sequence(right):
        if len(left) != len(right):
            return False
        return all(json_equal(a, b) for a, b in zip(left, right))
    if is_mapping(left) or is_mapping(right) or is_sequence(left) or is_sequence(right):
        return False
    return bool(left == right)


__all__ = [
    "ValueType",
    "is_mapping",
    "is_number",
    "is_record",
    "is_sequence",
    "json_equal",
    "value_type_of",
]
