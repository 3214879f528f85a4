"""
Extended-JSON conversion.

Extended JSON represents types that plain JSON lacks through ``$``-prefixed
wrapper objects, e.g. ``{"$oid": "..."}`` or ``{"$numberLong": "42"}``.
``from_extended_json`` resolves wrappers in a parsed JSON tree into typed
values; ``to_extended_json`` does the reverse.
"""

from __future__ import annotations

import json
import math
import re
from datetime import timezone, tzinfo
from typing import Any, Optional

from mongopeek.exceptions import FormatError

from .dates import format_iso_date, parse_iso_date
from .values import (
    Array,
    Binary,
    Bool,
    DateTime,
    Decimal128,
    Document,
    Double,
    Int32,
    Int64,
    MaxKey,
    MinKey,
    Null,
    ObjectId,
    Regex,
    String,
    Value,
)

WRAPPER_KEYS = frozenset(
    {
        "$oid",
        "$date",
        "$numberInt",
        "$numberLong",
        "$numberDouble",
        "$numberDecimal",
        "$binary",
        "$regularExpression",
        "$minKey",
        "$maxKey",
    }
)

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_NON_FINITE = {"NaN": math.nan, "Infinity": math.inf, "-Infinity": -math.inf}


class ExtendedJsonError(ValueError):
    """A wrapper object has the wrong shape or payload."""

    def __init__(self, message: str, fragment: Any) -> None:
        super().__init__(message)
        self.fragment = fragment if isinstance(fragment, str) else _dump(fragment)


def _dump(obj: Any) -> str:
    try:
        return json.dumps(obj, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(obj)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON; use {{\"$numberDouble\": \"{name}\"}}")


def loads(text: str) -> Any:
    """Parse strict JSON text into plain Python data (no NaN/Infinity)."""
    return json.loads(text, parse_constant=_reject_constant)


def from_extended_json(obj: Any, default_tz: Optional[tzinfo] = None) -> Value:
    """Convert a parsed JSON tree into a typed value, resolving wrappers."""
    if obj is None:
        return Null()
    if isinstance(obj, bool):
        return Bool(obj)
    if isinstance(obj, int):
        return Int32(obj) if -(2**31) <= obj < 2**31 else Int64(obj)
    if isinstance(obj, float):
        return Double(obj)
    if isinstance(obj, str):
        return String(obj)
    if isinstance(obj, list):
        return Array(tuple(from_extended_json(item, default_tz) for item in obj))
    if isinstance(obj, dict):
        if WRAPPER_KEYS.intersection(obj):
            return _unwrap(obj, default_tz or timezone.utc)
        return Document({key: from_extended_json(val, default_tz) for key, val in obj.items()})
    raise ExtendedJsonError(f"unsupported JSON value of type {type(obj).__name__}", repr(obj))


def _integer(text: Any, wrapper: dict, bits: int) -> int:
    if not isinstance(text, str) or not _INTEGER_RE.match(text):
        raise ExtendedJsonError("integer wrapper needs a string of digits", wrapper)
    number = int(text)
    if not -(2 ** (bits - 1)) <= number < 2 ** (bits - 1):
        raise ExtendedJsonError(f"{number} does not fit in {bits} bits", wrapper)
    return number


def _is_one(payload: Any) -> bool:
    return type(payload) is int and payload == 1


def _unwrap(obj: dict, default_tz: tzinfo) -> Value:
    keys = set(obj)
    if keys == {"$oid"}:
        try:
            return ObjectId.from_hex(obj["$oid"])
        except (TypeError, ValueError) as e:
            raise ExtendedJsonError(f"invalid ObjectId: {e}", obj) from e

    if keys == {"$date"}:
        return _unwrap_date(obj, default_tz)

    if keys == {"$numberInt"}:
        return Int32(_integer(obj["$numberInt"], obj, 32))

    if keys == {"$numberLong"}:
        return Int64(_integer(obj["$numberLong"], obj, 64))

    if keys == {"$numberDouble"}:
        text = obj["$numberDouble"]
        if not isinstance(text, str):
            raise ExtendedJsonError("$numberDouble needs a string", obj)
        if text in _NON_FINITE:
            return Double(_NON_FINITE[text])
        try:
            return Double(float(text))
        except ValueError as e:
            raise ExtendedJsonError(f"invalid double {text!r}", obj) from e

    if keys == {"$numberDecimal"}:
        text = obj["$numberDecimal"]
        if not isinstance(text, str):
            raise ExtendedJsonError("$numberDecimal needs a string", obj)
        try:
            return Decimal128.parse(text)
        except ValueError as e:
            raise ExtendedJsonError(str(e), obj) from e

    if "$binary" in keys:
        return _unwrap_binary(obj)

    if keys == {"$regularExpression"}:
        body = obj["$regularExpression"]
        if (
            not isinstance(body, dict)
            or set(body) - {"pattern", "options"}
            or not isinstance(body.get("pattern"), str)
            or not isinstance(body.get("options", ""), str)
        ):
            raise ExtendedJsonError("$regularExpression needs pattern and options strings", obj)
        return Regex(body["pattern"], body.get("options", ""))

    if keys == {"$minKey"} and _is_one(obj["$minKey"]):
        return MinKey()

    if keys == {"$maxKey"} and _is_one(obj["$maxKey"]):
        return MaxKey()

    raise ExtendedJsonError("malformed extended-JSON wrapper", obj)


def _unwrap_date(obj: dict, default_tz: tzinfo) -> DateTime:
    payload = obj["$date"]
    if isinstance(payload, str):
        try:
            return parse_iso_date(payload, default_tz)
        except ValueError as e:
            raise ExtendedJsonError(f"invalid date: {e}", payload) from e
    if isinstance(payload, dict) and set(payload) == {"$numberLong"}:
        return DateTime(_integer(payload["$numberLong"], obj, 64))
    if isinstance(payload, int) and not isinstance(payload, bool):
        return DateTime(payload)
    raise ExtendedJsonError("$date needs an ISO string or $numberLong", obj)


def _unwrap_binary(obj: dict) -> Binary:
    payload = obj["$binary"]
    try:
        if isinstance(payload, dict) and set(obj) == {"$binary"}:
            if set(payload) != {"base64", "subType"}:
                raise ValueError("$binary needs base64 and subType")
            return Binary.from_base64(payload["base64"], int(payload["subType"], 16))
        if isinstance(payload, str) and set(obj) == {"$binary", "$type"}:
            return Binary.from_base64(payload, int(obj["$type"], 16))
    except (TypeError, ValueError) as e:
        raise ExtendedJsonError(f"invalid binary: {e}", obj) from e
    raise ExtendedJsonError("malformed $binary wrapper", obj)


def to_extended_json(value: Value, sort_keys: bool = False) -> Any:
    """Convert a typed value into JSON-serialisable data with wrappers.

    Raises:
        FormatError: If the value is not one of the known variants.
    """
    if isinstance(value, Null):
        return None
    if isinstance(value, Bool):
        return value.value
    if isinstance(value, Int32):
        return value.value
    if isinstance(value, Int64):
        return {"$numberLong": str(value.value)}
    if isinstance(value, Double):
        if value.is_finite:
            return value.value
        if math.isnan(value.value):
            return {"$numberDouble": "NaN"}
        return {"$numberDouble": "Infinity" if value.value > 0 else "-Infinity"}
    if isinstance(value, Decimal128):
        return {"$numberDecimal": str(value.value)}
    if isinstance(value, String):
        return value.value
    if isinstance(value, ObjectId):
        return {"$oid": value.hex}
    if isinstance(value, DateTime):
        iso = format_iso_date(value)
        if iso is not None:
            return {"$date": iso}
        return {"$date": {"$numberLong": str(value.millis)}}
    if isinstance(value, Binary):
        return {"$binary": {"base64": value.base64, "subType": f"{value.subtype:02x}"}}
    if isinstance(value, Regex):
        return {"$regularExpression": {"pattern": value.pattern, "options": value.options}}
    if isinstance(value, MinKey):
        return {"$minKey": 1}
    if isinstance(value, MaxKey):
        return {"$maxKey": 1}
    if isinstance(value, Array):
        return [to_extended_json(item, sort_keys) for item in value]
    if isinstance(value, Document):
        clashing = WRAPPER_KEYS.intersection(value.keys())
        if clashing:
            # Would read back as a typed value, not a document
            raise FormatError(
                "Document keys clash with an extended-JSON wrapper", keys=", ".join(sorted(clashing))
            )
        keys = sorted(value.keys()) if sort_keys else list(value.keys())
        return {key: to_extended_json(value[key], sort_keys) for key in keys}
    raise FormatError("No extended-JSON form for value", value_type=type(value).__name__)
