"""Document-level validation through the third-party ``jsonschema`` engine.

This gives callers a flat, JSON-pointer addressed error list in the same
shape as :meth:`ValidationErrors.to_flat`, so responses produced from either
engine look alike. Requires the ``flatten`` extra.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..constraints import Constraint
from ..errors import FlatError, escape_pointer_segment
from ..exceptions import ConversionError
from .documents import to_schema_document

logger = logging.getLogger(__name__)


def jsonschema_errors(document: Mapping[str, Any] | Constraint, instance: Any) -> list[FlatError]:
    """Validate an instance with ``jsonschema`` and flatten the errors.

    Args:
        document: JSON Schema document, or a constraint to convert first
        instance: Value to validate

    Returns:
        Errors ordered by instance path; empty when the instance is valid

    Raises:
        ConversionError: If the document is not a valid schema
    """
    from jsonschema import Draft202012Validator
    from jsonschema.exceptions import SchemaError

    if isinstance(document, Constraint):
        document = to_schema_document(document)

    try:
        Draft202012Validator.check_schema(document)
    except SchemaError as e:
        raise ConversionError(
            f"Invalid schema document: {e.message}",
            context={"schema_path": "/".join(str(p) for p in e.path)},
        ) from e

    validator = Draft202012Validator(document)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(map(str, e.path)))
    logger.debug(f"jsonschema reported {len(errors)} error(s)")
    return [
        FlatError(
            "".join(f"/{escape_pointer_segment(segment)}" for segment in error.path),
            error.message,
        )
        for error in errors
    ]


__all__ = ["jsonschema_errors"]
