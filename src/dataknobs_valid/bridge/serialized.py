"""Parsing of JSON, TOML and YAML text into values ready for validation.
"""

from __future__ import annotations

import json
import logging
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from ..constraints import Constraint
from ..exceptions import ConversionError

logger = logging.getLogger(__name__)


class SerializedFormat(Enum):
    """Supported text formats."""

    JSON = "json"
    TOML = "toml"
    YAML = "yaml"

    @classmethod
    def from_name(cls, name: str | SerializedFormat) -> SerializedFormat:
        if isinstance(name, SerializedFormat):
            return name
        try:
            return cls(name.lower())
        except ValueError as e:
            raise ConversionError(
                f"Unsupported format: {name}",
                context={"format": name, "supported": [f.value for f in cls]},
            ) from e

    @classmethod
    def from_path(cls, path: str | Path) -> SerializedFormat:
        """Infer the format from a file suffix."""
        suffix = Path(path).suffix.lower().lstrip(".")
        if suffix == "yml":
            suffix = "yaml"
        return cls.from_name(suffix)


def from_serialized(data: str | bytes, format: str | SerializedFormat) -> Any:
    """Parse serialized text into a plain value.

    Args:
        data: Document text (bytes are decoded as UTF-8)
        format: "json", "toml" or "yaml"

    Returns:
        Parsed value (dicts, lists and scalars)

    Raises:
        ConversionError: If the document cannot be decoded or parsed
    """
    fmt = SerializedFormat.from_name(format)
    try:
        text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
        if fmt is SerializedFormat.JSON:
            return json.loads(text)
        if fmt is SerializedFormat.TOML:
            return tomllib.loads(text)
        return yaml.safe_load(text)
    except (UnicodeDecodeError, json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        logger.debug(f"Failed to parse {fmt.value} document: {e}")
        raise ConversionError(
            f"Cannot parse {fmt.value} document: {e}",
            context={"format": fmt.value, "error": str(e)},
        ) from e


def load_file(path: str | Path, format: str | SerializedFormat | None = None) -> Any:
    """Read and parse a file, inferring the format from its suffix by default."""
    path = Path(path)
    fmt = SerializedFormat.from_name(format) if format else SerializedFormat.from_path(path)
    return from_serialized(path.read_bytes(), fmt)


def load_validated(
    data: str | bytes,
    format: str | SerializedFormat,
    constraint: Constraint,
) -> Any:
    """Parse a document and validate it in one step.

    Returns:
        The parsed value when it satisfies the constraint

    Raises:
        ConversionError: If the document cannot be parsed
        ValidationFailedError: If the value violates the constraint
    """
    value = from_serialized(data, format)
    constraint.check(value).raise_if_errors()
    return value


__all__ = [
    "SerializedFormat",
    "from_serialized",
    "load_file",
    "load_validated",
]
