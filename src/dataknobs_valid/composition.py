"""JSON-Schema style composition of constraints.

The functional forms operate on already-produced error trees so that callers
with their own validation logic can combine results; the classes evaluate
their branches against a value and delegate to the functional forms.

- ``all_of``: union of every failing branch
- ``any_of``: stops at the first passing branch; consumes its input lazily,
  so passing a generator skips evaluation of the remaining branches
- ``one_of``: always consumes every branch to count the matches
- ``negate``: fails only when the inner result passed
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .constraints import Constraint
from .errors import ValidationErrors
from .exceptions import ConfigurationError
from .violations import AnyOfViolation, NotViolation, OneOfViolation


def all_of(results: Iterable[ValidationErrors]) -> ValidationErrors:
    """Merge every result into one tree (empty when all passed)."""
    merged = ValidationErrors()
    for result in results:
        merged.update(result)
    return merged


def any_of(results: Iterable[ValidationErrors]) -> AnyOfViolation | None:
    """Return None as soon as one result passes, else a violation with all branches."""
    branches = []
    for result in results:
        if result.is_empty():
            return None
        branches.append(result)
    return AnyOfViolation(tuple(branches))


def one_of(results: Iterable[ValidationErrors]) -> OneOfViolation | None:
    """Return None when exactly one result passed, else a violation with the count."""
    branches = tuple(results)
    matched_indices = tuple(i for i, result in enumerate(branches) if result.is_empty())
    if len(matched_indices) == 1:
        return None
    return OneOfViolation(len(matched_indices), matched_indices, branches)


def negate(result: ValidationErrors) -> NotViolation | None:
    """Return a violation when the negated result passed."""
    if result.is_empty():
        return NotViolation()
    return None


class AllOf(Constraint):
    """All constraints must pass (AND logic).

    Every branch is evaluated and all of their errors are reported together.
    """

    def __init__(self, constraints: list[Constraint]):
        self.constraints = list(constraints)

    def check(self, value: Any) -> ValidationErrors:
        return all_of(constraint.check(value) for constraint in self.constraints)

    def __repr__(self) -> str:
        return f"AllOf({self.constraints!r})"


class AnyOf(Constraint):
    """At least one constraint must pass (OR logic)."""

    def __init__(self, constraints: list[Constraint]):
        if not constraints:
            raise ConfigurationError("AnyOf requires at least one constraint", context={"rule": "any_of"})
        self.constraints = list(constraints)

    def check(self, value: Any) -> ValidationErrors:
        violation = any_of(constraint.check(value) for constraint in self.constraints)
        if violation is None:
            return ValidationErrors()
        return ValidationErrors.leaf(violation)

    def __repr__(self) -> str:
        return f"AnyOf({self.constraints!r})"


class OneOf(Constraint):
    """Exactly one constraint must pass (XOR logic)."""

    def __init__(self, constraints: list[Constraint]):
        if not constraints:
            raise ConfigurationError("OneOf requires at least one constraint", context={"rule": "one_of"})
        self.constraints = list(constraints)

    def check(self, value: Any) -> ValidationErrors:
        violation = one_of(constraint.check(value) for constraint in self.constraints)
        if violation is None:
            return ValidationErrors()
        return ValidationErrors.leaf(violation)

    def __repr__(self) -> str:
        return f"OneOf({self.constraints!r})"


class Not(Constraint):
    """Negates a constraint."""

    def __init__(self, constraint: Constraint):
        self.constraint = constraint

    def check(self, value: Any) -> ValidationErrors:
        violation = negate(self.constraint.check(value))
        if violation is None:
            return ValidationErrors()
        return ValidationErrors.leaf(violation)

    def __repr__(self) -> str:
        return f"Not({self.constraint!r})"


__all__ = [
    "AllOf",
    "AnyOf",
    "Not",
    "OneOf",
    "all_of",
    "any_of",
    "negate",
    "one_of",
]
