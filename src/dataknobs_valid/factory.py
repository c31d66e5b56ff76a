"""Factory for building validation schemas from configuration."""

import logging
from pathlib import Path
from typing import Any

from .bridge.serialized import load_file
from .composition import AllOf, AnyOf, Not, OneOf
from .constraints import (
    Constraint,
    Contains,
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
from .exceptions import ConfigurationError
from .schema import Items, Schema, Values

logger = logging.getLogger(__name__)


class SchemaFactory:
    """Factory for creating validation schemas from configuration.

    Configuration Options:
        name (str): Schema name
        strict (bool): Whether to reject unknown fields (default: False)
        additional (dict): Constraint definition applied to undeclared fields
        description (str): Optional schema description
        fields (list): List of field definitions
        rules (list): Constraint definitions applied to the record itself

    Field Definition Options:
        name (str): Field name
        type (str): Value type (null, boolean, integer, number, string, array, object)
        required (bool): Whether field is required (default: False)
        default (any): Default value if field is missing
        description (str): Field description
        constraints (list): List of constraint definitions

    Constraint Definition Options:
        type (str): One of range, multiple_of, length, pattern, enum,
            items, unique_items, contains, properties, value_type,
            all_of, any_of, one_of, not, schema, each, values
        message (str): Optional custom message template
        message_id (str): Optional catalog key

    Example Configuration:
        schemas:
          - name: user_schema
            factory: schema
            strict: true
            description: User registration schema
            fields:
              - name: username
                type: string
                required: true
                constraints:
                  - type: length
                    min_length: 3
                    max_length: 20
                  - type: pattern
                    pattern: "^[a-zA-Z0-9_]+$"
              - name: age
                type: integer
                constraints:
                  - type: range
                    minimum: 13
                    maximum: 120
    """

    def create(self, **config: Any) -> Schema:
        """Create a Schema instance from configuration.

        Args:
            **config: Schema configuration

        Returns:
            Schema instance

        Raises:
            ConfigurationError: If a constraint definition is invalid
        """
        name = config.get("name", "unnamed_schema")
        strict = config.get("strict", False)
        description = config.get("description")

        logger.info(f"Creating schema: {name}")

        additional = config.get("additional")
        if additional is not None:
            additional = self.build_constraint(additional)

        schema = Schema(name, strict, additional)
        if description:
            schema.with_description(description)

        for field_config in config.get("fields", []):
            self._add_field_to_schema(schema, field_config)

        for constraint in self._build_constraints(config.get("rules", [])):
            schema.rule(constraint)

        return schema

    def from_file(self, path: str | Path) -> Schema:
        """Create a Schema from a YAML, TOML or JSON configuration file."""
        config = load_file(path)
        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Schema configuration in {path} must be a mapping",
                context={"path": str(path)},
            )
        return self.create(**config)

    def _add_field_to_schema(self, schema: Schema, field_config: dict[str, Any]) -> None:
        """Add a field to the schema based on configuration."""
        field_name = field_config.get("name")
        if not field_name:
            logger.warning("Field configuration missing 'name', skipping")
            return

        try:
            schema.field(
                name=field_name,
                constraints=self._build_constraints(field_config.get("constraints", [])),
                required=field_config.get("required", False),
                default=field_config.get("default"),
                field_type=field_config.get("type"),
                description=field_config.get("description"),
            )
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid field '{field_name}': {e}",
                context={"schema": schema.name, "field": field_name},
            ) from e

    def _build_constraints(self, constraint_configs: list[dict[str, Any]]) -> list[Constraint]:
        """Build constraint objects from configuration.

        Args:
            constraint_configs: List of constraint configurations

        Returns:
            List of Constraint objects
        """
        return [self.build_constraint(config) for config in constraint_configs]

    def build_constraint(self, config: dict[str, Any]) -> Constraint:
        """Build a single constraint from its configuration."""
        constraint_type = config.get("type", "").lower()
        messages = {"message": config.get("message"), "message_id": config.get("message_id")}

        if constraint_type == "range":
            return Range(
                minimum=config.get("minimum"),
                maximum=config.get("maximum"),
                exclusive_minimum=config.get("exclusive_minimum", False),
                exclusive_maximum=config.get("exclusive_maximum", False),
                **messages,
            )

        elif constraint_type == "multiple_of":
            return MultipleOf(config.get("multiple_of"), **messages)

        elif constraint_type == "length":
            return Length(config.get("min_length"), config.get("max_length"), **messages)

        elif constraint_type == "pattern":
            return Pattern(self._require(config, "pattern"), **messages)

        elif constraint_type == "enum":
            return Enum(config.get("values", []), **messages)

        elif constraint_type == "items":
            return ItemCount(config.get("min_items"), config.get("max_items"), **messages)

        elif constraint_type == "unique_items":
            return UniqueItems(**messages)

        elif constraint_type == "contains":
            return Contains(
                self.build_constraint(self._require(config, "constraint")),
                min_contains=config.get("min_contains", 1),
                max_contains=config.get("max_contains"),
                **messages,
            )

        elif constraint_type == "properties":
            return PropertyCount(config.get("min_properties"), config.get("max_properties"), **messages)

        elif constraint_type == "value_type":
            types = config.get("types") or [self._require(config, "value_type")]
            return TypeOf(*types, **messages)

        elif constraint_type == "all_of":
            return AllOf(self._build_constraints(config.get("constraints", [])))

        elif constraint_type == "any_of":
            return AnyOf(self._build_constraints(config.get("constraints", [])))

        elif constraint_type == "one_of":
            return OneOf(self._build_constraints(config.get("constraints", [])))

        elif constraint_type == "not":
            return Not(self.build_constraint(self._require(config, "constraint")))

        elif constraint_type == "schema":
            nested = {key: value for key, value in config.items() if key != "type"}
            return self.create(**nested)

        elif constraint_type == "each":
            return Items(self.build_constraint(self._require(config, "constraint")))

        elif constraint_type == "values":
            return Values(self.build_constraint(self._require(config, "constraint")))

        logger.error(f"Unknown constraint type: {constraint_type}")
        raise ConfigurationError(
            f"Unknown constraint type: {constraint_type!r}",
            context={"constraint": config},
        )

    @staticmethod
    def _require(config: dict[str, Any], key: str) -> Any:
        if key not in config:
            raise ConfigurationError(
                f"Constraint '{config.get('type')}' requires '{key}'",
                context={"constraint": config},
            )
        return config[key]


# Singleton instance for registration
schema_factory = SchemaFactory()
