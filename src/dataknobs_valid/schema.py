"""Schema definition with fluent API for structural validation.

Schemas describe records field by field; :class:`Items` and :class:`Values`
apply a constraint to every element of a sequence or every value of a
mapping. All of them are constraints themselves, so they nest freely and
can be combined with the composition operators.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Any

from .constraints import Constraint
from .errors import ValidationErrors
from .exceptions import ConfigurationError
from .types import ValueType, is_mapping, is_record, is_sequence, value_type_of
from .violations import RequiredViolation, TypeViolation, UnknownPropertiesViolation

logger = logging.getLogger(__name__)

_MISSING = object()


def get_field_value(record: Any, name: str) -> Any:
    """Read a field from a mapping key or an object attribute.

    Returns:
        The field value, or a module sentinel when the field is absent
    """
    if is_mapping(record):
        return record.get(name, _MISSING)
    return getattr(record, name, _MISSING)


def is_missing(value: Any) -> bool:
    return value is _MISSING


def record_items(record: Any) -> list[tuple[Any, Any]]:
    """Key/value pairs of a mapping, or public attributes of an object."""
    if is_mapping(record):
        return list(record.items())
    return [(key, item) for key, item in vars(record).items() if not key.startswith("_")]


@dataclass
class Field:
    """Field definition for schema validation.

    Attributes:
        name: Field name (mapping key or attribute name)
        constraints: Constraints applied to the field value
        required: If True, a missing or null value is a violation
        default: Value validated in place of a missing or null one
        field_type: Optional kind the value must have
        description: Human-readable description
    """

    name: str
    constraints: list[Constraint] = dataclass_field(default_factory=list)
    required: bool = False
    default: Any = None
    field_type: ValueType | None = None
    description: str | None = None

    def add_constraint(self, constraint: Constraint) -> Field:
        """Add a constraint to this field (fluent API)."""
        self.constraints.append(constraint)
        return self

    def check(self, value: Any) -> ValidationErrors:
        """Validate a field value (already extracted from its record).

        Args:
            value: Field value, or the missing sentinel

        Returns:
            Errors of this field, relative to the field itself
        """
        if is_missing(value) or value is None:
            if self.required:
                return ValidationErrors.leaf(RequiredViolation())
            if self.default is None:
                return ValidationErrors()
            value = self.default

        if self.field_type is not None and not self.field_type.matches(value):
            return ValidationErrors.leaf(
                TypeViolation(self.field_type.value, value_type_of(value).value)
            )

        errors = ValidationErrors()
        for constraint in self.constraints:
            errors.update(constraint.check(value))
        return errors


class Schema(Constraint):
    """Record schema with fluent API for validation.

    Fields are validated in declaration order and their errors are merged
    under the field name. Node rules (e.g. :class:`PropertyCount`) are
    checked against the record itself, regardless of field failures.

    Example:
        ```python
        schema = (
            Schema("user")
            .field("name", [Length(min_length=1, max_length=40)], required=True)
            .field("age", [Range(minimum=0, maximum=150)])
        )
        errors = schema.check({"name": "", "age": 200})
        errors.render()
        # {'/name': ['The length of the value must be `>= 1`.'],
        #  '/age': ['The number must be `<= 150`.']}
        ```
    """

    def __init__(
        self,
        name: str = "unnamed",
        strict: bool = False,
        additional: Constraint | None = None,
    ):
        """Initialize schema.

        Args:
            name: Schema name for identification
            strict: If True, reject records with undeclared fields
            additional: Constraint applied to the value of every undeclared field

        Raises:
            ConfigurationError: If both strict and additional are given
        """
        if strict and additional is not None:
            raise ConfigurationError(
                f"Schema {name}: strict schemas cannot constrain additional fields",
                context={"schema": name},
            )
        self.name = name
        self.strict = strict
        self.additional = additional
        self.fields: dict[str, Field] = {}
        self.rules: list[Constraint] = []
        self.description: str | None = None

    def field(
        self,
        name: str,
        constraints: Iterable[Constraint] | None = None,
        required: bool = False,
        default: Any = None,
        field_type: ValueType | str | None = None,
        description: str | None = None,
    ) -> Schema:
        """Add a field definition (fluent API).

        Args:
            name: Field name
            constraints: Constraints to apply to the value
            required: Whether the field must be present and non-null
            default: Default value validated when the field is missing
            field_type: Required kind (ValueType or its name)
            description: Field description

        Returns:
            Self for chaining
        """
        if isinstance(field_type, str):
            field_type = ValueType.from_name(field_type)

        if name in self.fields:
            logger.debug(f"Schema {self.name}: redefining field {name}")
        self.fields[name] = Field(
            name=name,
            constraints=list(constraints or []),
            required=required,
            default=default,
            field_type=field_type,
            description=description,
        )
        return self

    def rule(self, constraint: Constraint) -> Schema:
        """Add a constraint on the record as a whole (fluent API)."""
        self.rules.append(constraint)
        return self

    def with_description(self, description: str) -> Schema:
        """Set schema description (fluent API)."""
        self.description = description
        return self

    def check(self, value: Any) -> ValidationErrors:
        """Validate a record against this schema.

        A missing record is handled by the enclosing field; given directly,
        ``None`` is not a record and yields a type violation.

        Args:
            value: Mapping or attribute-bearing object

        Returns:
            Complete error tree for the record
        """
        if not is_record(value):
            return ValidationErrors.leaf(
                TypeViolation(ValueType.OBJECT.value, value_type_of(value).value)
            )

        errors = ValidationErrors()
        for rule in self.rules:
            errors.update(rule.check(value))

        undeclared = [(key, item) for key, item in record_items(value) if key not in self.fields]
        if self.strict and undeclared:
            errors.add(UnknownPropertiesViolation(tuple(str(key) for key, _ in undeclared)))

        for name, field_def in self.fields.items():
            errors.add_property(name, field_def.check(get_field_value(value, name)))

        if self.additional is not None:
            for key, item in undeclared:
                errors.add_property(key, self.additional.check(item))

        return errors

    def validate(self, value: Any) -> ValidationErrors:
        """Alias of :meth:`check`."""
        return self.check(value)

    def validate_many(self, values: Iterable[Any]) -> list[ValidationErrors]:
        """Validate multiple records.

        Args:
            values: Records to validate

        Returns:
            One error tree per record, in input order
        """
        return [self.check(value) for value in values]

    def __repr__(self) -> str:
        return f"Schema({self.name!r}, fields={list(self.fields)!r})"


class Items(Constraint):
    """Apply a constraint to every element of a sequence."""

    def __init__(self, constraint: Constraint):
        self.constraint = constraint

    def check(self, value: Any) -> ValidationErrors:
        if value is None:
            return ValidationErrors()
        if not is_sequence(value):
            return ValidationErrors.leaf(
                TypeViolation(ValueType.ARRAY.value, value_type_of(value).value)
            )

        errors = ValidationErrors()
        for index, item in enumerate(value):
            errors.add_item(index, self.constraint.check(item))
        return errors

    def __repr__(self) -> str:
        return f"Items({self.constraint!r})"


class Values(Constraint):
    """Apply a constraint to every value of a mapping, keyed by its key."""

    def __init__(self, constraint: Constraint):
        self.constraint = constraint

    def check(self, value: Any) -> ValidationErrors:
        if value is None:
            return ValidationErrors()
        if not is_mapping(value):
            return ValidationErrors.leaf(
                TypeViolation(ValueType.OBJECT.value, value_type_of(value).value)
            )

        errors = ValidationErrors()
        for key, item in value.items():
            errors.add_property(key, self.constraint.check(item))
        return errors

    def __repr__(self) -> str:
        return f"Values({self.constraint!r})"


def validate(value: Any, *constraints: Constraint) -> ValidationErrors:
    """Validate a value against one or more constraints.

    Returns:
        Merged error tree of all constraints, empty when the value is valid
    """
    errors = ValidationErrors()
    for constraint in constraints:
        errors.update(constraint.check(value))
    return errors


__all__ = [
    "Field",
    "Items",
    "Schema",
    "Values",
    "get_field_value",
    "record_items",
    "is_record",
    "validate",
]
