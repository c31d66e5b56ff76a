"""Exception hierarchy for dataknobs-valid.

Constraint violations found in the data are *not* exceptions: they are
collected into a :class:`~dataknobs_valid.errors.ValidationErrors` tree and
returned. The exceptions here cover the cases where validation cannot even be
performed meaningfully:

- :class:`ConfigurationError` for rules that are internally inconsistent
  (an authoring bug, e.g. ``minimum > maximum`` or an invalid regex)
- :class:`ConversionError` for malformed external representations
  (bad JSON/TOML/YAML text, unusable schema documents)
- :class:`ValidationFailedError` for callers that prefer an exception over
  inspecting the returned tree

Example:
    ```python
    from dataknobs_valid.exceptions import ConversionError

    try:
        value = from_serialized(payload, "toml")
    except ConversionError as e:
        logger.error(f"Bad payload: {e}")
        if e.context:
            logger.error(f"Context: {e.context}")
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .errors import ValidationErrors


class ValidError(Exception):
    """Base exception for all dataknobs-valid errors.

    Attributes:
        context: Dictionary containing contextual information about the error

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context (rule name, pattern, etc.)
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(ValidError):
    """Raised when a rule is internally inconsistent.

    This indicates a bug in the rule declaration rather than bad input data,
    so it is raised when the rule is built instead of being folded into the
    error tree. Common scenarios include:
    - ``minimum`` greater than ``maximum``
    - negative length or item bounds
    - ``multiple_of`` that is not strictly positive
    - an empty enumeration
    - a pattern that does not compile

    Example:
        ```python
        raise ConfigurationError(
            "min_length (5) cannot be greater than max_length (3)",
            context={"rule": "length", "min_length": 5, "max_length": 3}
        )
        ```
    """

    pass


class ConversionError(ValidError):
    """Raised when an external representation cannot be converted.

    Use this for documents that could not be evaluated at all:
    - JSON/TOML/YAML parse failures
    - schema documents with malformed keyword values
    - unsupported schema features such as ``$ref``

    Example:
        ```python
        raise ConversionError(
            "Cannot parse yaml document",
            context={"format": "yaml", "error": "mapping values are not allowed here"}
        )
        ```
    """

    pass


class ValidationFailedError(ValidError):
    """Raised by helpers that turn a non-empty error tree into an exception.

    Attributes:
        errors: The complete :class:`ValidationErrors` tree
    """

    def __init__(self, errors: ValidationErrors, message: str | None = None):
        super().__init__(
            message or "Validation failed",
            context={"errors": errors.to_dict()},
        )
        self.errors = errors


__all__ = [
    "ValidError",
    "ConfigurationError",
    "ConversionError",
    "ValidationFailedError",
]
