"""Rendering of violations into human-readable, optionally localized messages.

Resolution order for a violation's message:
1. the catalog entry for its ``message_id`` in the requested locale
2. the rule's own ``message`` template, if the rule author supplied one
3. the built-in English template for the ``message_id``

Templates use ``{name}`` placeholders filled from the violation's params.
Placeholders without a matching parameter are left untouched, and a broken
catalog entry falls back to the next source instead of failing.

Example:
    ```python
    catalog = MessageCatalog({
        "de": {
            "maximum": "Die Zahl muss `<= {maximum}` sein.",
            "min-length": {
                "count": "min_length",
                "one": "Mindestens {min_length} Zeichen.",
                "other": "Mindestens {min_length} Zeichen.",
            },
        },
    })
    render_violation(violation, catalog, locale="de-AT")
    ```
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from .exceptions import ConversionError
from .violations import Violation

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES: dict[str, str] = {
    "type": "The value must be of type `{expected}`, got `{actual}`.",
    "required": "The value is required.",
    "minimum": "The number must be `>= {minimum}`.",
    "exclusive-minimum": "The number must be `> {minimum}`.",
    "maximum": "The number must be `<= {maximum}`.",
    "exclusive-maximum": "The number must be `< {maximum}`.",
    "non-finite": "The number must be finite, got `{actual}`.",
    "multiple-of": "The value must be multiple of `{multiple_of}`.",
    "min-length": "The length of the value must be `>= {min_length}`.",
    "max-length": "The length of the value must be `<= {max_length}`.",
    "pattern": 'The value must match the pattern of "{pattern}".',
    "enum": "The value must be in [{allowed}].",
    "min-items": "The length of the items must be `>= {min_items}`.",
    "max-items": "The length of the items must be `<= {max_items}`.",
    "unique-items": "The items must be unique (items {first_index} and {second_index} are equal).",
    "min-contains": "The items must contain at least `{min_contains}` matching item(s), found `{matched}`.",
    "max-contains": "The items must contain at most `{max_contains}` matching item(s), found `{matched}`.",
    "min-properties": "The size of the properties must be `>= {min_properties}`.",
    "max-properties": "The size of the properties must be `<= {max_properties}`.",
    "unknown-properties": "Unknown properties: {names}.",
    "custom": "{reason}",
    "any-of": "The value must match at least one of {count} alternatives.",
    "one-of-none": "The value must match exactly one of {count} alternatives, but matched none.",
    "one-of-many": (
        "The value must match exactly one of {count} alternatives, "
        "but matched {matched} (alternatives {matched_indices})."
    ),
    "not": "The value must not match the negated constraint.",
}

FALLBACK_TEMPLATE = "The value is invalid ({message_id})."


@runtime_checkable
class Catalog(Protocol):
    """Source of localized message templates.

    ``lookup`` returns the fully rendered message, or None when the catalog
    has no usable entry so the renderer can fall back to the defaults.
    """

    def lookup(self, message_id: str, locale: str | None, params: Mapping[str, Any]) -> str | None:
        ...


@dataclass(frozen=True)
class MessageContext:
    """Message identifier plus the ordered parameters for substitution."""

    message_id: str
    params: tuple[tuple[str, Any], ...]

    @classmethod
    def from_violation(cls, violation: Violation) -> MessageContext:
        return cls(violation.message_id, tuple(violation.params().items()))

    def as_dict(self) -> dict[str, Any]:
        return dict(self.params)

    def display_params(self) -> dict[str, str]:
        """Parameters converted to display strings for template substitution."""
        return {name: format_param(value) for name, value in self.params}


def format_param(value: Any) -> str:
    """Format a parameter value for display.

    Sequences become comma-separated lists whose text elements are quoted,
    so ``("a", 1)`` renders as ``"a", 1``.
    """
    if isinstance(value, (list, tuple)):
        return ", ".join(_format_element(v) for v in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def _format_element(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (list, tuple, dict, bool)) or value is None:
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def format_template(template: str, params: Mapping[str, Any]) -> str:
    """Substitute ``{name}`` placeholders, leaving unknown ones in place.

    Raises:
        ValueError: If the template itself is malformed
    """
    return template.format_map(_KeepMissing(params))


def english_plural(count: Any) -> str:
    """Cardinal plural category for English-like languages."""
    return "one" if count == 1 else "other"


PluralRule = Callable[[Any], str]


class MessageCatalog:
    """Dictionary backed localization catalog with plural support.

    Entries are either a template string or a plural mapping::

        {"count": "<param name>", "one": "...", "other": "..."}

    The plural category for the counted parameter is chosen by the plural
    rule registered for the locale (English-style by default).

    Args:
        messages: Mapping of locale to ``{message_id: entry}``
        default_locale: Locale consulted when the requested one has no entry
        plural_rules: Mapping of locale (or language) to plural rule callable
    """

    def __init__(
        self,
        messages: Mapping[str, Mapping[str, Any]],
        default_locale: str = "en",
        plural_rules: Mapping[str, PluralRule] | None = None,
    ):
        self.messages = {locale: dict(entries) for locale, entries in messages.items()}
        self.default_locale = default_locale
        self.plural_rules = dict(plural_rules or {})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MessageCatalog:
        """Create a catalog from ``{"default_locale": ..., "messages": {...}}``."""
        messages = data.get("messages")
        if not isinstance(messages, Mapping):
            raise ConversionError(
                "Message catalog requires a 'messages' mapping",
                context={"keys": list(data.keys())},
            )
        return cls(messages, default_locale=data.get("default_locale", "en"))

    @classmethod
    def from_yaml(cls, path: str | Path) -> MessageCatalog:
        """Load a catalog from a YAML file (see :meth:`from_dict` for the layout)."""
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConversionError(
                f"Cannot parse message catalog {path}: {e}",
                context={"format": "yaml", "path": str(path)},
            ) from e
        if not isinstance(data, Mapping):
            raise ConversionError(
                f"Message catalog {path} must contain a mapping",
                context={"format": "yaml", "path": str(path)},
            )
        return cls.from_dict(data)

    def locales_for(self, locale: str | None) -> list[str]:
        """Candidate locales in lookup order, e.g. de-AT -> de -> default."""
        candidates = []
        if locale:
            normalized = locale.replace("_", "-")
            candidates.append(normalized)
            language = normalized.split("-")[0]
            if language != normalized:
                candidates.append(language)
        if self.default_locale not in candidates:
            candidates.append(self.default_locale)
        return candidates

    def plural_rule(self, locale: str) -> PluralRule:
        rule = self.plural_rules.get(locale) or self.plural_rules.get(locale.split("-")[0])
        return rule or english_plural

    def lookup(self, message_id: str, locale: str | None, params: Mapping[str, Any]) -> str | None:
        for candidate in self.locales_for(locale):
            entry = self.messages.get(candidate, {}).get(message_id)
            if entry is None:
                continue
            template = self._select_template(entry, candidate, params)
            if template is None:
                continue
            display = {name: format_param(value) for name, value in params.items()}
            try:
                return format_template(template, display)
            except (ValueError, IndexError) as e:
                logger.warning(f"Broken catalog template for {message_id!r} ({candidate}): {e}")
                return None
        return None

    def _select_template(self, entry: Any, locale: str, params: Mapping[str, Any]) -> str | None:
        if isinstance(entry, str):
            return entry
        if isinstance(entry, Mapping):
            count = params.get(entry.get("count", "count"))
            category = self.plural_rule(locale)(count)
            template = entry.get(category, entry.get("other"))
            return template if isinstance(template, str) else None
        logger.warning(f"Ignoring catalog entry of type {type(entry).__name__} ({locale})")
        return None


def render_violation(
    violation: Violation,
    catalog: Catalog | None = None,
    locale: str | None = None,
) -> str:
    """Render a violation to a message string.

    Args:
        violation: Violation to render
        catalog: Optional localization catalog
        locale: Locale requested from the catalog

    Returns:
        Rendered message; never raises for missing translations
    """
    context = MessageContext.from_violation(violation)

    if catalog is not None:
        localized = catalog.lookup(context.message_id, locale, context.as_dict())
        if localized is not None:
            return localized
        logger.debug(f"No catalog message for {context.message_id!r} ({locale}), using default")

    display = context.display_params()
    if violation.message is not None:
        try:
            return format_template(violation.message, display)
        except (ValueError, IndexError) as e:
            logger.warning(f"Broken custom message for {context.message_id!r}: {e}")

    template = DEFAULT_TEMPLATES.get(violation.default_message_id())
    if template is None:
        return FALLBACK_TEMPLATE.format(message_id=context.message_id)
    return format_template(template, display)


__all__ = [
    "Catalog",
    "DEFAULT_TEMPLATES",
    "MessageCatalog",
    "MessageContext",
    "english_plural",
    "format_param",
    "format_template",
    "render_violation",
]
