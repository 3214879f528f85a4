"""Document formatter: typed documents to canonical, indented extended JSON."""

from __future__ import annotations

import json

from mongopeek.exceptions import FormatError

from .extended_json import loads, to_extended_json
from .values import Document

INDENT = "  "


def format_document(doc: Document, sort_keys: bool = False) -> str:
    """Render ``doc`` as compact extended-JSON text.

    The output compiles back to an equal document.

    Raises:
        FormatError: If the document holds a value with no extended-JSON form.
    """
    if not isinstance(doc, Document):
        raise FormatError("Only documents can be formatted", value_type=type(doc).__name__)
    return json.dumps(to_extended_json(doc, sort_keys), ensure_ascii=False, separators=(",", ":"))


def indent(json_text: str) -> str:
    """Re-indent JSON text with two-space nesting.

    Raises:
        FormatError: If ``json_text`` is not valid JSON.
    """
    try:
        data = loads(json_text)
    except ValueError as e:
        raise FormatError(f"Cannot indent invalid JSON: {e}") from e
    return json.dumps(data, ensure_ascii=False, indent=len(INDENT))


def render_document(doc: Document, sort_keys: bool = False) -> str:
    """Format and indent ``doc`` for display or editing."""
    return indent(format_document(doc, sort_keys))
