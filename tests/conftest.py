"""Shared fixtures for dataknobs-valid tests."""

import pytest

from dataknobs_valid import (
    ItemCount,
    Items,
    Length,
    MessageCatalog,
    Pattern,
    Range,
    Schema,
    UniqueItems,
)


@pytest.fixture
def address_schema():
    """Nested record schema for addresses."""
    return (
        Schema("address")
        .field("street", [Length(min_length=1, max_length=40)])
        .field("zip", [Pattern(r"^\d{5}$")], required=True, field_type="string")
    )


@pytest.fixture
def user_schema(address_schema):
    """Record schema exercising leaf, sequence and nested rules."""
    return (
        Schema("user")
        .field("name", [Length(min_length=1, max_length=10)], required=True, field_type="string")
        .field("age", [Range(minimum=0, maximum=150)], field_type="integer")
        .field(
            "tags",
            [ItemCount(max_items=3), UniqueItems(), Items(Pattern(r"^[a-z]+$"))],
        )
        .field("address", [address_schema])
    )


@pytest.fixture
def valid_user():
    return {
        "name": "Alice",
        "age": 34,
        "tags": ["admin", "ops"],
        "address": {"street": "Main St", "zip": "12345"},
    }


@pytest.fixture
def german_catalog():
    """Catalog with German messages and a plural entry."""
    return MessageCatalog(
        {
            "de": {
                "maximum": "Die Zahl muss `<= {maximum}` sein.",
                "required": "Der Wert ist erforderlich.",
                "min-items": {
                    "count": "min_items",
                    "one": "Mindestens {min_items} Eintrag.",
                    "other": "Mindestens {min_items} Einträge.",
                },
            },
            "en": {
                "required": "This field is required.",
            },
        }
    )
