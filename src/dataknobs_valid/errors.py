"""Path-addressed error tree produced by a validation pass.
"""

from __future__ import annotations

import json
from collections.abc import Hashable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .exceptions import ValidationFailedError
from .violations import Violation

if TYPE_CHECKING:
    from .messages import Catalog


@dataclass(frozen=True)
class FlatError:
    """One rendered error addressed by a JSON pointer."""

    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


def escape_pointer_segment(segment: Hashable) -> str:
    """Escape a path segment for use in a JSON pointer (RFC 6901)."""
    return str(segment).replace("~", "~0").replace("/", "~1")


@dataclass
class ValidationErrors:
    """Ordered tree of violations.

    A node holds the violations of the value itself (``errors``) and the
    subtrees of its fields or mapping keys (``properties``) and of its
    sequence elements (``items``). Subtrees are only stored when they
    contain at least one violation, so an empty tree always means the value
    passed.

    Example:
        ```python
        errors = ValidationErrors()
        errors.add_property("age", ValidationErrors.leaf(violation))
        errors.is_empty()
        # False
        errors.render()
        # {'/age': ['The number must be `<= 100`.']}
        ```
    """

    errors: list[Violation] = field(default_factory=list)
    properties: dict[Hashable, ValidationErrors] = field(default_factory=dict)
    items: dict[int, ValidationErrors] = field(default_factory=dict)

    @classmethod
    def leaf(cls, *violations: Violation) -> ValidationErrors:
        """Create a tree holding only node-level violations."""
        return cls(errors=list(violations))

    def is_empty(self) -> bool:
        """True when no violation exists anywhere in the tree."""
        if self.errors:
            return False
        return all(child.is_empty() for child in self.properties.values()) and all(
            child.is_empty() for child in self.items.values()
        )

    def add(self, violation: Violation) -> ValidationErrors:
        """Append a node-level violation (fluent API)."""
        self.errors.append(violation)
        return self

    def extend(self, violations: Iterable[Violation]) -> ValidationErrors:
        self.errors.extend(violations)
        return self

    def add_property(self, name: Hashable, child: ValidationErrors) -> ValidationErrors:
        """Merge a child tree under a field or key name.

        Merging an empty child is a no-op.
        """
        if child.is_empty():
            return self
        existing = self.properties.get(name)
        if existing is None:
            self.properties[name] = child.copy()
        else:
            existing.update(child)
        return self

    def add_item(self, index: int, child: ValidationErrors) -> ValidationErrors:
        """Merge a child tree under a sequence index, keeping index order."""
        if child.is_empty():
            return self
        existing = self.items.get(index)
        if existing is None:
            self.items[index] = child.copy()
            if len(self.items) > 1 and index < max(self.items):
                self.items = dict(sorted(self.items.items()))
        else:
            existing.update(child)
        return self

    def update(self, other: ValidationErrors) -> ValidationErrors:
        """Merge another tree into this one in place (path-wise union)."""
        self.errors.extend(other.errors)
        for name, child in other.properties.items():
            self.add_property(name, child)
        for index, child in other.items.items():
            self.add_item(index, child)
        return self

    def merge(self, other: ValidationErrors) -> ValidationErrors:
        """Return a new tree that is the path-wise union of both trees."""
        return self.copy().update(other)

    def copy(self) -> ValidationErrors:
        """Copy the tree structure; violations are immutable and shared."""
        return ValidationErrors(
            errors=list(self.errors),
            properties={name: child.copy() for name, child in self.properties.items()},
            items={index: child.copy() for index, child in self.items.items()},
        )

    def walk(self, path: str = "") -> Iterator[tuple[str, Violation]]:
        """Yield ``(json_pointer, violation)`` pairs depth-first in tree order."""
        for violation in self.errors:
            yield path, violation
        for name, child in self.properties.items():
            yield from child.walk(f"{path}/{escape_pointer_segment(name)}")
        for index, child in self.items.items():
            yield from child.walk(f"{path}/{index}")

    def __len__(self) -> int:
        """Total number of violations in the tree."""
        return sum(1 for _ in self.walk())

    def render(
        self,
        catalog: Catalog | None = None,
        locale: str | None = None,
    ) -> dict[str, list[str]]:
        """Render every violation, grouped by JSON pointer path.

        Args:
            catalog: Optional localization catalog
            locale: Locale passed to the catalog

        Returns:
            Mapping from path ("" for the root) to rendered messages in order
        """
        from .messages import render_violation

        rendered: dict[str, list[str]] = {}
        for path, violation in self.walk():
            rendered.setdefault(path, []).append(render_violation(violation, catalog, locale))
        return rendered

    def to_flat(
        self,
        catalog: Catalog | None = None,
        locale: str | None = None,
    ) -> list[FlatError]:
        """Render the tree as a flat list of path/message pairs."""
        from .messages import render_violation

        return [
            FlatError(path, render_violation(violation, catalog, locale))
            for path, violation in self.walk()
        ]

    def to_dict(
        self,
        catalog: Catalog | None = None,
        locale: str | None = None,
    ) -> dict[str, Any]:
        """Convert to a nested, serializable representation.

        Returns:
            ``{"errors": [...]}`` plus ``"properties"`` and/or ``"items"``
            mappings when the node has failing children. Item keys are
            stringified so the result can be encoded as JSON, TOML or YAML.
            Composite failures (any-of, one-of) also add a ``"branches"``
            mapping from the message index in ``"errors"`` to the nested
            trees of their alternatives.
        """
        from .messages import render_violation

        result: dict[str, Any] = {
            "errors": [render_violation(v, catalog, locale) for v in self.errors]
        }
        branches = {
            str(position): [branch.to_dict(catalog, locale) for branch in violation.branches]
            for position, violation in enumerate(self.errors)
            if getattr(violation, "branches", None)
        }
        if branches:
            result["branches"] = branches
        if self.properties:
            result["properties"] = {
                str(name): child.to_dict(catalog, locale)
                for name, child in self.properties.items()
            }
        if self.items:
            result["items"] = {
                str(index): child.to_dict(catalog, locale)
                for index, child in self.items.items()
            }
        return result

    def to_json(
        self,
        catalog: Catalog | None = None,
        locale: str | None = None,
        **kwargs: Any,
    ) -> str:
        """Serialize :meth:`to_dict` output as a JSON string."""
        return json.dumps(self.to_dict(catalog, locale), ensure_ascii=False, **kwargs)

    def raise_if_errors(self, message: str | None = None) -> None:
        """Raise ValidationFailedError when the tree is not empty."""
        if not self.is_empty():
            raise ValidationFailedError(self, message)


__all__ = [
    "FlatError",
    "ValidationErrors",
    "escape_pointer_segment",
]
