"""Conversions between constraints, schema documents and serialized text.

Nothing in the validation core depends on this package. The ``jsonschema``
interop in :mod:`.flatten` needs the optional ``flatten`` extra, which is
only imported when it is called.
"""

from .documents import SCHEMA_DIALECT, from_schema_document, to_schema_document
from .flatten import jsonschema_errors
from .serialized import SerializedFormat, from_serialized, load_file, load_validated

__all__ = [
    "SCHEMA_DIALECT",
    "SerializedFormat",
    "from_schema_document",
    "from_serialized",
    "jsonschema_errors",
    "load_file",
    "load_validated",
    "to_schema_document",
]
