"""
Typed value model for documents.

Every value stored in or queried from the database is one of the variants
below. Code that needs to branch on the kind of a value matches on these
classes instead of probing arbitrary Python objects.
"""

from __future__ import annotations

import base64
import binascii
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterator, List, Tuple, Union

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Null:
    pass


@dataclass(frozen=True)
class Bool:
    value: bool


@dataclass(frozen=True)
class Int32:
    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not INT32_MIN <= self.value <= INT32_MAX:
            raise ValueError(f"{self.value!r} is not a 32-bit integer")


@dataclass(frozen=True)
class Int64:
    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not INT64_MIN <= self.value <= INT64_MAX:
            raise ValueError(f"{self.value!r} is not a 64-bit integer")


@dataclass(frozen=True)
class Double:
    value: float

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.value)


@dataclass(frozen=True)
class Decimal128:
    value: Decimal

    @classmethod
    def parse(cls, text: str) -> "Decimal128":
        try:
            return cls(Decimal(text))
        except InvalidOperation as e:
            raise ValueError(f"invalid decimal {text!r}") from e


@dataclass(frozen=True)
class String:
    value: str


@dataclass(frozen=True)
class ObjectId:
    """12-byte object identifier."""

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != 12:
            raise ValueError("ObjectId must be exactly 12 bytes")

    @classmethod
    def from_hex(cls, text: str) -> "ObjectId":
        if len(text) != 24:
            raise ValueError(f"{text!r} is not a 24-digit hex ObjectId")
        try:
            return cls(bytes.fromhex(text))
        except ValueError as e:
            raise ValueError(f"{text!r} is not a 24-digit hex ObjectId") from e

    @property
    def hex(self) -> str:
        return self.raw.hex()

    def __repr__(self) -> str:
        return f"ObjectId({self.hex!r})"


@dataclass(frozen=True)
class DateTime:
    """Point in time as signed milliseconds since the Unix epoch."""

    millis: int

    @classmethod
    def from_datetime(cls, value: datetime) -> "DateTime":
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        delta = value - _EPOCH
        millis = (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000
        return cls(millis)

    def to_datetime(self) -> datetime:
        return _EPOCH + timedelta(milliseconds=self.millis)


@dataclass(frozen=True)
class Binary:
    data: bytes
    subtype: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.subtype <= 0xFF:
            raise ValueError(f"binary subtype {self.subtype} out of range")

    @classmethod
    def from_base64(cls, text: str, subtype: int = 0) -> "Binary":
        try:
            return cls(base64.b64decode(text, validate=True), subtype)
        except binascii.Error as e:
            raise ValueError(f"invalid base64 payload {text!r}") from e

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


@dataclass(frozen=True)
class Regex:
    pattern: str
    options: str = ""


@dataclass(frozen=True)
class MinKey:
    pass


@dataclass(frozen=True)
class MaxKey:
    pass


@dataclass(frozen=True)
class Array:
    items: Tuple["Value", ...] = ()

    def __iter__(self) -> Iterator["Value"]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> "Value":
        return self.items[index]


@dataclass(frozen=True, eq=False)
class Document:
    """Ordered key/value mapping.

    Insertion order is kept for display; equality ignores it.
    """

    fields: Dict[str, "Value"] = field(default_factory=dict)

    @classmethod
    def of(cls, pairs: List[Tuple[str, "Value"]]) -> "Document":
        return cls(dict(pairs))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self.fields == other.fields

    def __hash__(self) -> int:
        return hash(frozenset(self.fields))

    def __getitem__(self, key: str) -> "Value":
        return self.fields[key]

    def __contains__(self, key: object) -> bool:
        return key in self.fields

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    def keys(self):
        return self.fields.keys()

    def items(self):
        return self.fields.items()

    def without(self, key: str) -> "Document":
        """Return a copy of this document with ``key`` removed."""
        return Document({k: v for k, v in self.fields.items() if k != key})

    def with_field(self, key: str, value: "Value") -> "Document":
        """Return a copy with ``key`` set; an existing key keeps its position."""
        fields = dict(self.fields)
        fields[key] = value
        return Document(fields)


Value = Union[
    Null,
    Bool,
    Int32,
    Int64,
    Double,
    Decimal128,
    String,
    ObjectId,
    DateTime,
    Binary,
    Regex,
    MinKey,
    MaxKey,
    Array,
    Document,
]

SCALAR_TYPES = (
    Null,
    Bool,
    Int32,
    Int64,
    Double,
    Decimal128,
    String,
    ObjectId,
    DateTime,
    Binary,
    Regex,
    MinKey,
    MaxKey,
)


def to_value(obj: Any) -> Value:
    """Lift plain Python data into the value model."""
    if isinstance(obj, (Document, Array, *SCALAR_TYPES)):
        return obj
    if obj is None:
        return Null()
    if isinstance(obj, bool):
        return Bool(obj)
    if isinstance(obj, int):
        if INT32_MIN <= obj <= INT32_MAX:
            return Int32(obj)
        return Int64(obj)
    if isinstance(obj, float):
        return Double(obj)
    if isinstance(obj, Decimal):
        return Decimal128(obj)
    if isinstance(obj, str):
        return String(obj)
    if isinstance(obj, (bytes, bytearray)):
        return Binary(bytes(obj))
    if isinstance(obj, datetime):
        return DateTime.from_datetime(obj)
    if isinstance(obj, dict):
        return Document({str(k): to_value(v) for k, v in obj.items()})
    if isinstance(obj, (list, tuple)):
        return Array(tuple(to_value(v) for v in obj))
    raise TypeError(f"cannot convert {type(obj).__name__} to a document value")


def document(obj: Dict[str, Any]) -> Document:
    """Shorthand for ``to_value`` on a mapping, typed as a Document."""
    if not isinstance(obj, dict):
        raise TypeError(f"expected a mapping, got {type(obj).__name__}")
    return Document({str(k): to_value(v) for k, v in obj.items()})


def to_python(value: Value) -> Any:
    """Lower a value to plain Python data (the inverse of ``to_value``)."""
    if isinstance(value, Null):
        return None
    if isinstance(value, (Bool, Int32, Int64, Double, Decimal128, String)):
        return value.value
    if isinstance(value, DateTime):
        return value.to_datetime()
    if isinstance(value, Binary):
        return value.data
    if isinstance(value, Array):
        return [to_python(v) for v in value]
    if isinstance(value, Document):
        return {k: to_python(v) for k, v in value.items()}
    # ObjectId, Regex, MinKey, MaxKey have no plain-Python counterpart
    return value


def type_name(value: Value) -> str:
    """Short display name for a value's type."""
    return type(value).__name__
