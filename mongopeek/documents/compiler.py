"""
Query-text compiler.

Turns filter, sort and projection text typed by the user into a typed
``Document``::

    >>> compile_query('{ _id: ObjectId("507f1f77bcf86cd799439011") }')
    Document(fields={'_id': ObjectId('507f1f77bcf86cd799439011')})

Blank text and ``{}`` mean "no constraint" and compile to an empty document.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import timezone, tzinfo
from typing import Optional

from mongopeek.exceptions import CompileError

from .extended_json import ExtendedJsonError, from_extended_json, loads
from .shorthand import expand_shorthand
from .values import Array, Document, Regex, String, Value

logger = logging.getLogger(__name__)

# Operators whose array operands may not contain $regex documents
_REGEX_ARRAY_OPERATORS = ("$in", "$nin")


@dataclass(frozen=True)
class CompilerConfig:
    """Settings that affect compilation.

    Attributes:
        default_timezone: Zone for timestamps written without an offset.
    """

    default_timezone: tzinfo = timezone.utc

    @classmethod
    def for_timezone(cls, name: str) -> "CompilerConfig":
        """Build a config from an IANA zone name such as ``Europe/Warsaw``."""
        if name.upper() in ("UTC", "Z"):
            return cls(timezone.utc)
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

        try:
            return cls(ZoneInfo(name))
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"unknown timezone {name!r}") from e


DEFAULT_CONFIG = CompilerConfig()


def is_blank_query(text: Optional[str]) -> bool:
    """True when ``text`` is empty or ``{}`` once whitespace is removed."""
    if text is None:
        return True
    squeezed = "".join(text.split())
    return squeezed in ("", "{}")


def _excerpt(text: str, pos: int, width: int = 20) -> str:
    start = max(0, pos - width)
    return text[start : pos + width]


def compile_query(text: Optional[str], config: Optional[CompilerConfig] = None) -> Document:
    """Compile shell-style query text into a ``Document``.

    Args:
        text: Filter, sort or projection text as typed by the user.
        config: Compilation settings; UTC defaults when omitted.

    Returns:
        The compiled document; empty for blank input.

    Raises:
        CompileError: If any stage fails. Nothing partial is returned.
    """
    if text is None or is_blank_query(text):
        return Document()

    config = config or DEFAULT_CONFIG

    try:
        expanded = expand_shorthand(text, config.default_timezone)
    except CompileError as e:
        logger.debug("Shorthand expansion failed for %r: %s", text, e)
        raise

    try:
        raw = loads(expanded)
    except json.JSONDecodeError as e:
        logger.debug("Invalid query JSON %r: %s", expanded, e)
        raise CompileError(f"Invalid query syntax: {e.msg}", fragment=_excerpt(expanded, e.pos)) from e
    except ValueError as e:
        raise CompileError(f"Invalid query syntax: {e}", fragment=text) from e

    if not isinstance(raw, dict):
        raise CompileError("Query must be a document", fragment=text)

    try:
        value = from_extended_json(raw, config.default_timezone)
    except ExtendedJsonError as e:
        logger.debug("Invalid extended JSON in %r: %s", text, e)
        raise CompileError(str(e), fragment=e.fragment) from e
    except ValueError as e:
        raise CompileError(str(e), fragment=text) from e

    if not isinstance(value, Document):
        logger.debug("Query %r compiled to a bare %s", text, type(value).__name__)
        raise CompileError("Query must be a document", fragment=text)
    return value


def _regex_from_operator(value: Value) -> Value:
    if not isinstance(value, Document) or "$regex" not in value:
        return value
    if set(value.keys()) - {"$regex", "$options"}:
        return value
    pattern = value["$regex"]
    options = value.get("$options", String(""))
    if not isinstance(pattern, String) or not isinstance(options, String):
        return value
    return Regex(pattern.value, options.value)


def _convert_document(doc: Document) -> Document:
    fields = {}
    for key, item in doc.items():
        if key in _REGEX_ARRAY_OPERATORS and isinstance(item, Array):
            fields[key] = Array(tuple(_regex_from_operator(_convert(v)) for v in item))
        else:
            fields[key] = _convert(item)
    return Document(fields)


def _convert(value: Value) -> Value:
    if isinstance(value, Document):
        return _convert_document(value)
    if isinstance(value, Array):
        return Array(tuple(_convert(v) for v in value))
    return value


def native_regex_in_arrays(doc: Document) -> Document:
    """Replace ``$regex`` documents inside ``$in``/``$nin`` arrays with ``Regex``.

    The database accepts ``{"$regex": ...}`` as a field operator but only
    native regular expressions as ``$in`` members, so ``{name: {$in: [/^a/i]}}``
    must carry ``Regex("^a", "i")`` in the array.
    """
    return _convert_document(doc)
