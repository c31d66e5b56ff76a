"""DataKnobs Valid package.

Constraint validation with complete, path-addressed error reporting:
- Leaf rules for numbers, text, sequences and mappings
- JSON-Schema style composition (all/any/one of, not)
- Fluent schema definitions for records, sequences and mappings
- Localizable message rendering
- Conversion to and from JSON Schema documents and JSON/TOML/YAML text
"""

from .composition import AllOf, AnyOf, Not, OneOf, all_of, any_of, negate, one_of
from .constraints import (
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
    Rule,
    TypeOf,
    UniqueItems,
    grapheme_length,
)
from .errors import FlatError, ValidationErrors
from .exceptions import (
    ConfigurationError,
    ConversionError,
    ValidationFailedError,
    ValidError,
)
from .factory import SchemaFactory, schema_factory
from .messages import (
    DEFAULT_TEMPLATES,
    Catalog,
    MessageCatalog,
    MessageContext,
    render_violation,
)
from .schema import Field, Items, Schema, Values, validate
from .types import ValueType, json_equal
from .violations import (
    AnyOfViolation,
    ContainsViolation,
    CustomViolation,
    EnumViolation,
    ItemCountViolation,
    LengthViolation,
    MultipleOfViolation,
    NonFiniteViolation,
    NotViolation,
    OneOfViolation,
    PatternViolation,
    PropertyCountViolation,
    RangeViolation,
    RequiredViolation,
    TypeViolation,
    UniqueItemsViolation,
    UnknownPropertiesViolation,
    Violation,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Errors
    "ValidationErrors",
    "FlatError",
    "ValidError",
    "ConfigurationError",
    "ConversionError",
    "ValidationFailedError",
    # Constraints
    "Constraint",
    "Rule",
    "TypeOf",
    "Range",
    "MultipleOf",
    "Length",
    "Pattern",
    "Enum",
    "ItemCount",
    "UniqueItems",
    "Contains",
    "PropertyCount",
    "Custom",
    "grapheme_length",
    # Composition
    "AllOf",
    "AnyOf",
    "OneOf",
    "Not",
    "all_of",
    "any_of",
    "one_of",
    "negate",
    # Schema
    "Schema",
    "Field",
    "Items",
    "Values",
    "validate",
    "ValueType",
    "json_equal",
    # Messages
    "Catalog",
    "MessageCatalog",
    "MessageContext",
    "DEFAULT_TEMPLATES",
    "render_violation",
    # Factories
    "SchemaFactory",
    "schema_factory",
    # Violations
    "Violation",
    "TypeViolation",
    "RequiredViolation",
    "RangeViolation",
    "NonFiniteViolation",
    "MultipleOfViolation",
    "LengthViolation",
    "PatternViolation",
    "EnumViolation",
    "ItemCountViolation",
    "UniqueItemsViolation",
    "ContainsViolation",
    "PropertyCountViolation",
    "UnknownPropertiesViolation",
    "CustomViolation",
    "AnyOfViolation",
    "OneOfViolation",
    "NotViolation",
]
