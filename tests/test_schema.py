"""Tests for record schemas and the validation walk."""

from dataclasses import dataclass

import pytest

from dataknobs_valid import (
    ConfigurationError,
    Field,
    Items,
    Length,
    PropertyCount,
    Range,
    RequiredViolation,
    Schema,
    TypeViolation,
    UniqueItemsViolation,
    UnknownPropertiesViolation,
    ValueType,
    Values,
    validate,
)


@dataclass
class Address:
    street: str
    zip: str


@dataclass
class User:
    name: str
    age: int | None = None
    tags: list | None = None
    address: Address | None = None


class TestField:
    """Test single field validation."""

    def test_required_missing(self):
        """Missing required values yield a required violation."""
        field = Field("name", required=True)
        errors = field.check(None)
        assert errors.errors == [RequiredViolation()]

    def test_optional_missing(self):
        """Missing optional values skip the constraints."""
        field = Field("age", [Range(minimum=0)])
        assert field.check(None).is_empty()

    def test_default_is_validated(self):
        """The default stands in for a missing value."""
        field = Field("level", [Range(maximum=5)], default=10)
        errors = field.check(None)
        assert errors.errors[0].actual == 10

    def test_type_mismatch_stops_constraints(self):
        """A wrong kind is reported once, without constraint noise."""
        field = Field("age", [Range(minimum=0)], field_type=ValueType.INTEGER)
        errors = field.check("old")
        assert errors.errors == [TypeViolation("integer", "string")]

    def test_add_constraint(self):
        """Constraints can be added fluently."""
        field = Field("age").add_constraint(Range(minimum=0)).add_constraint(Range(maximum=9))
        assert len(field.constraints) == 2
        assert len(field.check(10)) == 1


class TestSchema:
    """Test record schema validation."""

    def test_valid_record(self, user_schema, valid_user):
        """A valid record yields an empty tree."""
        errors = user_schema.check(valid_user)
        assert errors.is_empty()
        assert errors.render() == {}

    def test_single_failure_is_precise(self, user_schema):
        """Exactly one violation at exactly one path."""
        errors = user_schema.check({"name": "Al", "age": 200})
        assert len(errors) == 1
        assert errors.render() == {"/age": ["The number must be `<= 150`."]}

    def test_all_failures_reported(self, user_schema):
        """Validation never stops at the first failure."""
        errors = user_schema.check({"age": -5, "tags": ["a", "b", "c", "d"]})
        assert errors.render() == {
            "/name": ["The value is required."],
            "/age": ["The number must be `>= 0`."],
            "/tags": ["The length of the items must be `<= 3`."],
        }

    def test_paths_follow_declared_order(self, user_schema):
        """Fields are reported in declaration order, not input order."""
        errors = user_schema.check({"age": 200, "name": ""})
        assert list(errors.render()) == ["/name", "/age"]

    def test_sequence_items(self, user_schema):
        """Element failures are addressed by index."""
        errors = user_schema.check({"name": "Al", "tags": ["ok", "BAD", "ok"]})
        assert errors.render() == {
            "/tags": ["The items must be unique (items 0 and 2 are equal)."],
            "/tags/1": ['The value must match the pattern of "^[a-z]+$".'],
        }
        tags = errors.properties["tags"]
        assert isinstance(tags.errors[0], UniqueItemsViolation)
        assert list(tags.items) == [1]

    def test_nested_record(self, user_schema):
        """Nested schemas report below their field."""
        errors = user_schema.check({"name": "Al", "address": {"street": ""}})
        assert errors.render() == {
            "/address/street": ["The length of the value must be `>= 1`."],
            "/address/zip": ["The value is required."],
        }

    def test_type_mismatch(self, user_schema):
        """Wrong kinds are reported on the field."""
        errors = user_schema.check({"name": "Al", "age": "old"})
        assert errors.render() == {
            "/age": ["The value must be of type `integer`, got `string`."],
        }

    def test_integral_float_is_integer(self, user_schema):
        """34.0 satisfies an integer field."""
        assert user_schema.check({"name": "Al", "age": 34.0}).is_empty()

    def test_non_record(self, user_schema):
        """Scalars cannot be checked against a record schema."""
        errors = user_schema.check(5)
        assert errors.errors == [TypeViolation("object", "integer")]

    def test_null_record(self, user_schema):
        """None given directly is not a record."""
        assert user_schema.check(None).errors == [TypeViolation("object", "null")]

    def test_null_nested_record_is_optional(self, user_schema):
        """An optional nested record may still be null."""
        assert user_schema.check({"name": "Al", "address": None}).is_empty()

    def test_attribute_records(self, user_schema):
        """Objects with attributes are records too."""
        user = User(name="Al", age=200, address=Address(street="Main", zip="x"))
        errors = user_schema.check(user)
        assert errors.render() == {
            "/age": ["The number must be `<= 150`."],
            "/address/zip": ['The value must match the pattern of "^\\d{5}$".'],
        }

    def test_strict_mode(self):
        """Strict schemas reject undeclared fields at the record path."""
        schema = Schema("point", strict=True).field("x").field("y")
        errors = schema.check({"x": 1, "y": 2, "z": 3, "w": 4})
        assert errors.errors == [UnknownPropertiesViolation(("z", "w"))]
        assert errors.render() == {"": ['Unknown properties: "z", "w".']}

    def test_additional_fields(self):
        """Undeclared fields are checked against the additional constraint."""
        schema = Schema("open", additional=Range(minimum=0)).field("name", [Length(min_length=1)])
        assert schema.check({"name": "x", "count": 3}).is_empty()
        errors = schema.check({"name": "", "count": -1, "size": 2})
        assert set(errors.render()) == {"/name", "/count"}

    def test_additional_fields_on_attribute_records(self):
        """Public attributes beyond the declared fields are additional."""
        schema = Schema("user", additional=Range(maximum=10)).field("name")
        errors = schema.check(User(name="Al", age=200))
        assert set(errors.render()) == {"/age"}

    def test_strict_excludes_additional(self):
        """Strict schemas cannot also constrain additional fields."""
        with pytest.raises(ConfigurationError):
            Schema("p", strict=True, additional=Range(minimum=0))

    def test_record_rules_always_run(self):
        """Record-level rules are checked even when fields fail."""
        schema = (
            Schema("small")
            .field("a", [Range(maximum=1)])
            .rule(PropertyCount(max_properties=2))
        )
        errors = schema.check({"a": 5, "b": 1, "c": 1})
        assert errors.render() == {
            "": ["The size of the properties must be `<= 2`."],
            "/a": ["The number must be `<= 1`."],
        }

    def test_field_type_names(self):
        """Field types can be given by name."""
        schema = Schema().field("flag", field_type="boolean")
        assert schema.fields["flag"].field_type is ValueType.BOOLEAN
        with pytest.raises(ValueError):
            Schema().field("flag", field_type="widget")

    def test_validate_many(self, user_schema, valid_user):
        """Each record gets its own tree."""
        results = user_schema.validate_many([valid_user, {"age": 1}])
        assert results[0].is_empty()
        assert set(results[1].render()) == {"/name"}

    def test_description(self):
        """Descriptions are kept for documentation."""
        schema = Schema("user").with_description("A user")
        assert schema.description == "A user"


class TestItemsAndValues:
    """Test element-wise constraints."""

    def test_items(self):
        """Each failing element is reported by index."""
        errors = Items(Range(maximum=3)).check([1, 5, 2, 9])
        assert list(errors.items) == [1, 3]
        assert set(errors.render()) == {"/1", "/3"}

    def test_items_wrong_kind(self):
        """A non-sequence yields a type violation."""
        assert Items(Range()).check(5).errors == [TypeViolation("array", "integer")]

    def test_nested_items(self):
        """Sequences of records are addressed by index and field."""
        point = Schema("point").field("x", [Range(minimum=0)], required=True)
        errors = Items(point).check([{"x": 1}, {"x": -1}, {}])
        assert errors.render() == {
            "/1/x": ["The number must be `>= 0`."],
            "/2/x": ["The value is required."],
        }

    def test_values(self):
        """Mapping values are addressed by key."""
        errors = Values(Range(minimum=0)).check({"a": 1, "b": -1})
        assert errors.render() == {"/b": ["The number must be `>= 0`."]}

    def test_values_wrong_kind(self):
        """A non-mapping yields a type violation."""
        assert Values(Range()).check([1]).errors == [TypeViolation("object", "array")]


class TestValidate:
    """Test the module-level validate helper."""

    def test_merges_constraints(self):
        """All constraints contribute to one tree."""
        errors = validate("toolong", Length(max_length=3), Length(min_length=10))
        assert [v.message_id for v in errors.errors] == ["max-length", "min-length"]

    def test_no_constraints(self):
        """Nothing to check means nothing failed."""
        assert validate(42).is_empty()
