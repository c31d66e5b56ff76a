"""Tests for message rendering and localization catalogs."""

import pytest

from dataknobs_valid import (
    Catalog,
    ConversionError,
    ItemCountViolation,
    MessageCatalog,
    MessageContext,
    OneOfViolation,
    Range,
    RangeViolation,
    RequiredViolation,
    Schema,
    ValidationErrors,
    Violation,
    render_violation,
)
from dataknobs_valid.messages import format_param


def too_big(actual=150, maximum=100):
    return RangeViolation(actual, minimum=0, maximum=maximum, violated="maximum")


class TestDefaultMessages:
    """Test built-in English messages."""

    def test_default_rendering(self):
        """Without a catalog the built-in template is used."""
        assert render_violation(too_big()) == "The number must be `<= 100`."

    def test_message_context(self):
        """Context exposes the message id and ordered parameters."""
        context = MessageContext.from_violation(too_big())
        assert context.message_id == "maximum"
        assert [name for name, _ in context.params] == [
            "actual",
            "minimum",
            "maximum",
            "exclusive_minimum",
            "exclusive_maximum",
            "violated",
        ]
        assert context.as_dict()["actual"] == 150

    def test_composite_parameters(self):
        """Composite violations expose counts instead of raw branches."""
        violation = OneOfViolation(2, (0, 2), (ValidationErrors(),) * 3)
        assert MessageContext.from_violation(violation).as_dict() == {
            "count": 3,
            "matched": 2,
            "matched_indices": (0, 2),
        }

    def test_unknown_message_id(self):
        """Violations without a template still render something useful."""
        assert render_violation(Violation()) == "The value is invalid (violation)."

    def test_format_param(self):
        """Parameters are displayed in JSON-like notation."""
        assert format_param(True) == "true"
        assert format_param(None) == "null"
        assert format_param(("a", 1)) == '"a", 1'
        assert format_param(2.5) == "2.5"


class TestMessageCatalog:
    """Test localized rendering."""

    def test_locale_lookup(self, german_catalog):
        """Catalog entries replace the default text."""
        assert render_violation(too_big(), german_catalog, "de") == "Die Zahl muss `<= 100` sein."

    def test_region_falls_back_to_language(self, german_catalog):
        """de-AT and de_CH fall back to de."""
        assert render_violation(too_big(), german_catalog, "de-AT") == "Die Zahl muss `<= 100` sein."
        assert render_violation(too_big(), german_catalog, "de_CH") == "Die Zahl muss `<= 100` sein."

    def test_falls_back_to_default_locale(self, german_catalog):
        """Unknown locales use the catalog default locale."""
        assert render_violation(RequiredViolation(), german_catalog, "fr") == "This field is required."
        assert render_violation(RequiredViolation(), german_catalog) == "This field is required."

    def test_missing_entry_uses_builtin(self, german_catalog):
        """No entry in any candidate locale means the built-in text."""
        assert render_violation(too_big(), german_catalog, "fr") == "The number must be `<= 100`."

    def test_plural_entries(self, german_catalog):
        """The counted parameter selects the plural form."""
        one = ItemCountViolation(0, min_items=1, violated="min_items")
        many = ItemCountViolation(0, min_items=3, violated="min_items")
        assert render_violation(one, german_catalog, "de") == "Mindestens 1 Eintrag."
        assert render_violation(many, german_catalog, "de") == "Mindestens 3 Einträge."

    def test_custom_plural_rules(self):
        """Languages can register their own plural categories."""

        def polish(n):
            if n == 1:
                return "one"
            if n in (2, 3, 4):
                return "few"
            return "other"

        catalog = MessageCatalog(
            {
                "pl": {
                    "min-items": {
                        "count": "min_items",
                        "one": "Co najmniej {min_items} element.",
                        "few": "Co najmniej {min_items} elementy.",
                        "other": "Co najmniej {min_items} elementów.",
                    }
                }
            },
            plural_rules={"pl": polish},
        )
        violation = ItemCountViolation(0, min_items=3, violated="min_items")
        assert render_violation(violation, catalog, "pl-PL") == "Co najmniej 3 elementy."

    def test_unknown_placeholder_left_in_place(self):
        """Placeholders without parameters are kept verbatim."""
        catalog = MessageCatalog({"en": {"maximum": "Value {unknown} above {maximum}"}})
        assert render_violation(too_big(), catalog) == "Value {unknown} above 100"

    def test_broken_template_falls_back(self):
        """A malformed catalog entry never breaks rendering."""
        catalog = MessageCatalog({"en": {"maximum": "Value above {maximum"}})
        assert render_violation(too_big(), catalog) == "The number must be `<= 100`."

    def test_custom_message_id(self):
        """Rules can point at their own catalog key."""
        catalog = MessageCatalog({"en": {"age-too-high": "Too old ({actual})."}})
        violation = Range(maximum=120, message_id="age-too-high").evaluate(130)
        assert render_violation(violation, catalog) == "Too old (130)."

    def test_catalog_beats_rule_message(self):
        """A catalog entry wins over the rule's own template."""
        catalog = MessageCatalog({"de": {"maximum": "Zu groß."}})
        violation = Range(maximum=5, message="too big").evaluate(7)
        assert render_violation(violation, catalog, "de") == "Zu groß."
        assert render_violation(violation, catalog, "en") == "too big"

    def test_render_tree(self, german_catalog):
        """Whole trees render through the catalog."""
        schema = Schema("s").field("age", [Range(maximum=100)]).field("name", required=True)
        errors = schema.check({"age": 150})
        assert errors.render(german_catalog, "de") == {
            "/age": ["Die Zahl muss `<= 100` sein."],
            "/name": ["Der Wert ist erforderlich."],
        }


class TestCatalogProtocol:
    """Test alternative catalog implementations."""

    def test_protocol(self, german_catalog):
        """Any object with lookup() can serve as a catalog."""

        class Shouting:
            def lookup(self, message_id, locale, params):
                return message_id.upper()

        assert isinstance(Shouting(), Catalog)
        assert isinstance(german_catalog, Catalog)
        assert render_violation(too_big(), Shouting()) == "MAXIMUM"


class TestCatalogLoading:
    """Test catalog construction from data and files."""

    def test_from_dict(self):
        """default_locale and messages are read from the mapping."""
        catalog = MessageCatalog.from_dict(
            {"default_locale": "de", "messages": {"de": {"required": "Pflichtfeld."}}}
        )
        assert catalog.default_locale == "de"
        assert render_violation(RequiredViolation(), catalog, "fr") == "Pflichtfeld."

    def test_from_dict_requires_messages(self):
        """A mapping without messages is rejected."""
        with pytest.raises(ConversionError):
            MessageCatalog.from_dict({"default_locale": "en"})

    def test_from_yaml(self, tmp_path):
        """Catalogs can be kept in YAML files."""
        path = tmp_path / "messages.yaml"
        path.write_text(
            "default_locale: en\n"
            "messages:\n"
            "  de:\n"
            "    maximum: \"Höchstens {maximum}.\"\n",
            encoding="utf-8",
        )
        catalog = MessageCatalog.from_yaml(path)
        assert render_violation(too_big(), catalog, "de") == "Höchstens 100."

    def test_from_yaml_malformed(self, tmp_path):
        """YAML syntax errors become conversion errors."""
        path = tmp_path / "broken.yaml"
        path.write_text("messages: [\n", encoding="utf-8")
        with pytest.raises(ConversionError):
            MessageCatalog.from_yaml(path)
