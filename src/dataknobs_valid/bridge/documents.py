"""Conversion between constraints and JSON Schema (draft 2020-12) documents.

Only representation is converted here; no validation logic lives in this
module. Text lengths keep grapheme semantics in both directions, which is
stricter than third-party engines that count code points.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..composition import AllOf, AnyOf, Not, OneOf
from ..constraints import (
    Constraint,
    Contains,
    Custom,
    Enum,
    ItemCount,
    Length,
    MultipleOf,
    Pattern,
    PropertyCount,
    Range,
    TypeOf,
    UniqueItems,
)
from ..exceptions import ConfigurationError, ConversionError
from ..schema import Field, Items, Schema, Values
from ..types import is_number

logger = logging.getLogger(__name__)

SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"

# Keywords that change meaning when combined with each other in one object
_OBJECT_KEYWORDS = {"properties", "required", "additionalProperties"}


def to_schema_document(constraint: Constraint, dialect: bool = True) -> dict[str, Any]:
    """Convert a constraint (or schema) into a JSON Schema document.

    Args:
        constraint: Constraint to convert
        dialect: If True, add the ``$schema`` keyword

    Returns:
        JSON-compatible schema document
    """
    document = _fragment(constraint)
    if dialect:
        document = {"$schema": SCHEMA_DIALECT, **document}
    return document


def _fragment(constraint: Constraint) -> dict[str, Any]:
    if isinstance(constraint, Schema):
        return _schema_fragment(constraint)
    if isinstance(constraint, TypeOf):
        names = [t.value for t in constraint.types]
        return {"type": names[0] if len(names) == 1 else names}
    if isinstance(constraint, Range):
        return _range_fragment(constraint)
    if isinstance(constraint, MultipleOf):
        return {"multipleOf": constraint.multiple_of}
    if isinstance(constraint, Length):
        return _bounds("minLength", constraint.min_length, "maxLength", constraint.max_length)
    if isinstance(constraint, Pattern):
        return {"pattern": constraint.pattern}
    if isinstance(constraint, Enum):
        return {"enum": list(constraint.values)}
    if isinstance(constraint, ItemCount):
        return _bounds("minItems", constraint.min_items, "maxItems", constraint.max_items)
    if isinstance(constraint, UniqueItems):
        return {"uniqueItems": True}
    if isinstance(constraint, Contains):
        fragment = {"contains": _fragment(constraint.constraint)}
        if constraint.min_contains != 1:
            fragment["minContains"] = constraint.min_contains
        if constraint.max_contains is not None:
            fragment["maxContains"] = constraint.max_contains
        return fragment
    if isinstance(constraint, PropertyCount):
        return _bounds(
            "minProperties", constraint.min_properties,
            "maxProperties", constraint.max_properties,
        )
    if isinstance(constraint, Items):
        return {"items": _fragment(constraint.constraint)}
    if isinstance(constraint, Values):
        return {"additionalProperties": _fragment(constraint.constraint)}
    if isinstance(constraint, AllOf):
        if not constraint.constraints:
            return {}
        return {"allOf": [_fragment(c) for c in constraint.constraints]}
    if isinstance(constraint, AnyOf):
        return {"anyOf": [_fragment(c) for c in constraint.constraints]}
    if isinstance(constraint, OneOf):
        return {"oneOf": [_fragment(c) for c in constraint.constraints]}
    if isinstance(constraint, Not):
        return {"not": _fragment(constraint.constraint)}
    if isinstance(constraint, Custom):
        logger.warning(f"Custom rule {constraint.name} cannot be represented in a schema document")
        return {}
    raise ConversionError(
        f"Unsupported constraint type: {type(constraint).__name__}",
        context={"constraint": repr(constraint)},
    )


def _bounds(low_key: str, low: Any, high_key: str, high: Any) -> dict[str, Any]:
    fragment = {}
    if low is not None:
        fragment[low_key] = low
    if high is not None:
        fragment[high_key] = high
    return fragment


def _range_fragment(rule: Range) -> dict[str, Any]:
    fragment = {}
    if rule.minimum is not None:
        fragment["exclusiveMinimum" if rule.exclusive_minimum else "minimum"] = rule.minimum
    if rule.maximum is not None:
        fragment["exclusiveMaximum" if rule.exclusive_maximum else "maximum"] = rule.maximum
    return fragment


def _combine(fragments: list[dict[str, Any]]) -> dict[str, Any]:
    """Merge fragments into one object, moving colliding ones into ``allOf``."""
    combined: dict[str, Any] = {}
    overflow: list[dict[str, Any]] = []
    for fragment in fragments:
        if not fragment:
            continue
        collides = any(key in combined for key in fragment) or (
            bool(_OBJECT_KEYWORDS & fragment.keys()) and bool(_OBJECT_KEYWORDS & combined.keys())
        )
        if collides:
            overflow.append(fragment)
        else:
            combined.update(fragment)
    if overflow:
        combined.setdefault("allOf", [])
        combined["allOf"] = combined["allOf"] + overflow
    return combined


def _field_fragment(field_def: Field) -> dict[str, Any]:
    fragments = [_fragment(c) for c in field_def.constraints]
    if field_def.field_type is not None:
        fragments.insert(0, {"type": field_def.field_type.value})
    document = _combine(fragments)
    if field_def.description:
        document["description"] = field_def.description
    if field_def.default is not None:
        document["default"] = field_def.default
    return document


def _schema_fragment(schema: Schema) -> dict[str, Any]:
    document: dict[str, Any] = {"type": "object"}
    if schema.name and schema.name != "unnamed":
        document["title"] = schema.name
    if schema.description:
        document["description"] = schema.description
    document["properties"] = {
        name: _field_fragment(field_def) for name, field_def in schema.fields.items()
    }
    required = [name for name, field_def in schema.fields.items() if field_def.required]
    if required:
        document["required"] = required
    if schema.strict:
        document["additionalProperties"] = False
    elif schema.additional is not None:
        document["additionalProperties"] = _fragment(schema.additional)
    rules = [_fragment(rule) for rule in schema.rules]
    return _combine([document, *rules])


def from_schema_document(document: Any) -> Constraint:
    """Build a constraint from a JSON Schema document.

    Annotation keywords that carry no assertion (``$id``, ``examples``...)
    are ignored. ``$ref`` and malformed keyword values are rejected.

    Args:
        document: Schema document (mapping or boolean schema)

    Returns:
        Equivalent constraint

    Raises:
        ConversionError: If the document cannot be converted
    """
    try:
        return _build(document, "")
    except ConfigurationError as e:
        raise ConversionError(f"Invalid rule in schema document: {e}", context=e.context) from e


def _fail(path: str, keyword: str, message: str) -> ConversionError:
    return ConversionError(
        f"{path or '/'}: '{keyword}' {message}",
        context={"path": path or "/", "keyword": keyword},
    )


def _number(document: Mapping[str, Any], keyword: str, path: str) -> Any:
    value = document[keyword]
    if not is_number(value):
        raise _fail(path, keyword, f"must be a number, got {value!r}")
    return value


def _count(document: Mapping[str, Any], keyword: str, path: str) -> int | None:
    if keyword not in document:
        return None
    value = document[keyword]
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise _fail(path, keyword, f"must be a non-negative integer, got {value!r}")
    return value


def _subschemas(document: Mapping[str, Any], keyword: str, path: str) -> list[Constraint]:
    value = document[keyword]
    if not isinstance(value, list) or not value:
        raise _fail(path, keyword, "must be a non-empty array of schemas")
    return [_build(sub, f"{path}/{keyword}/{i}") for i, sub in enumerate(value)]


def _build(document: Any, path: str) -> Constraint:
    if document is True:
        return AllOf([])
    if document is False:
        return Not(AllOf([]))
    if not isinstance(document, Mapping):
        raise ConversionError(
            f"{path or '/'}: schema must be an object or boolean",
            context={"path": path or "/"},
        )
    if "$ref" in document:
        raise _fail(path, "$ref", "is not supported")

    constraints: list[Constraint] = []
    object_rules = _object_rules(document, path)

    if "type" in document:
        types = document["type"]
        names = types if isinstance(types, list) else [types]
        # A record schema already rejects everything that is not an object
        record_schema = any(isinstance(rule, Schema) for rule in object_rules)
        if not (record_schema and names == ["object"]):
            try:
                constraints.append(TypeOf(*names))
            except ConfigurationError as e:
                raise _fail(path, "type", str(e)) from e

    constraints.extend(_numeric_rules(document, path))

    if "minLength" in document or "maxLength" in document:
        constraints.append(Length(_count(document, "minLength", path), _count(document, "maxLength", path)))
    if "pattern" in document:
        if not isinstance(document["pattern"], str):
            raise _fail(path, "pattern", "must be a string")
        constraints.append(Pattern(document["pattern"]))
    if "enum" in document:
        if not isinstance(document["enum"], list) or not document["enum"]:
            raise _fail(path, "enum", "must be a non-empty array")
        constraints.append(Enum(document["enum"]))
    if "const" in document:
        constraints.append(Enum([document["const"]]))

    constraints.extend(_array_rules(document, path))
    constraints.extend(object_rules)

    for keyword, composite in (("allOf", AllOf), ("anyOf", AnyOf), ("oneOf", OneOf)):
        if keyword in document:
            constraints.append(composite(_subschemas(document, keyword, path)))
    if "not" in document:
        constraints.append(Not(_build(document["not"], f"{path}/not")))

    if len(constraints) == 1:
        return constraints[0]
    return AllOf(constraints)


def _numeric_rules(document: Mapping[str, Any], path: str) -> list[Constraint]:
    rules: list[Constraint] = []
    lower = upper = None
    exclusive_lower = exclusive_upper = False
    if "exclusiveMinimum" in document:
        lower, exclusive_lower = _number(document, "exclusiveMinimum", path), True
        if "minimum" in document:
            rules.append(Range(minimum=_number(document, "minimum", path)))
    elif "minimum" in document:
        lower = _number(document, "minimum", path)
    if "exclusiveMaximum" in document:
        upper, exclusive_upper = _number(document, "exclusiveMaximum", path), True
        if "maximum" in document:
            rules.append(Range(maximum=_number(document, "maximum", path)))
    elif "maximum" in document:
        upper = _number(document, "maximum", path)
    if lower is not None or upper is not None:
        rules.insert(0, Range(lower, upper, exclusive_lower, exclusive_upper))
    if "multipleOf" in document:
        rules.append(MultipleOf(_number(document, "multipleOf", path)))
    return rules


def _array_rules(document: Mapping[str, Any], path: str) -> list[Constraint]:
    rules: list[Constraint] = []
    if "items" in document:
        rules.append(Items(_build(document["items"], f"{path}/items")))
    if "minItems" in document or "maxItems" in document:
        rules.append(ItemCount(_count(document, "minItems", path), _count(document, "maxItems", path)))
    if document.get("uniqueItems") is True:
        rules.append(UniqueItems())
    if "contains" in document:
        min_contains = _count(document, "minContains", path)
        rules.append(Contains(
            _build(document["contains"], f"{path}/contains"),
            min_contains=1 if min_contains is None else min_contains,
            max_contains=_count(document, "maxContains", path),
        ))
    return rules


def _object_rules(document: Mapping[str, Any], path: str) -> list[Constraint]:
    rules: list[Constraint] = []
    properties = document.get("properties", {})
    required = document.get("required", [])
    additional = document.get("additionalProperties", True)
    if not isinstance(properties, Mapping):
        raise _fail(path, "properties", "must be an object")
    if not isinstance(required, list) or not all(isinstance(name, str) for name in required):
        raise _fail(path, "required", "must be an array of strings")

    additional_rule = None
    if additional is not True and additional is not False:
        additional_rule = _build(additional, f"{path}/additionalProperties")

    if "properties" in document or "required" in document or additional is False:
        # additionalProperties only covers keys not listed under properties
        schema = Schema(
            document.get("title", "unnamed"),
            strict=additional is False,
            additional=additional_rule,
        )
        if "description" in document:
            schema.with_description(document["description"])
        for name, sub in properties.items():
            field_path = f"{path}/properties/{name}"
            constraint = _build(sub, field_path)
            default = sub.get("default") if isinstance(sub, Mapping) else None
            description = sub.get("description") if isinstance(sub, Mapping) else None
            schema.field(
                name,
                [constraint],
                required=name in required,
                default=default,
                description=description,
            )
        for name in required:
            if name not in schema.fields:
                schema.field(name, required=True)
        rules.append(schema)
    elif additional_rule is not None:
        rules.append(Values(additional_rule))

    if "minProperties" in document or "maxProperties" in document:
        rules.append(PropertyCount(
            _count(document, "minProperties", path),
            _count(document, "maxProperties", path),
        ))
    return rules


__all__ = [
    "SCHEMA_DIALECT",
    "from_schema_document",
    "to_schema_document",
]
