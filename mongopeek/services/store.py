"""
Document store interface and an in-memory implementation.

``DocumentStore`` is what the rest of mongopeek needs from a database
driver. ``InMemoryStore`` implements it over a list of documents; it backs
the ``browse`` command (documents loaded from a file) and the tests. Its
query support covers the operators people type most often, not the full
database query language.
"""

from __future__ import annotations

import itertools
import logging
import os
import re
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from mongopeek.documents.compiler import compile_query
from mongopeek.documents.extended_json import ExtendedJsonError, from_extended_json, loads
from mongopeek.documents.formatter import format_document
from mongopeek.documents.values import (
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
from mongopeek.exceptions import CompileError, DocumentNotFoundError, QueryError, StoreError

logger = logging.getLogger(__name__)

_MISSING = object()
_NUMERIC = (Int32, Int64, Double, Decimal128)


class DocumentStore(Protocol):
    """Operations mongopeek needs from a document database."""

    def list_documents(
        self,
        filter: Document,
        sort: Document,
        projection: Document,
        skip: int = 0,
        limit: int = 0,
    ) -> Tuple[List[Document], int]: ...

    def get_document(self, doc_id: Value) -> Document: ...

    def insert_document(self, doc: Document) -> Value: ...

    def update_document(self, doc_id: Value, doc: Document) -> None: ...

    def delete_document(self, doc_id: Value) -> None: ...


# =============================================================================
# Value comparison
# =============================================================================

# Cross-type sort order used by the database
_TYPE_RANK: Dict[type, int] = {
    MinKey: 0,
    Null: 1,
    Int32: 2,
    Int64: 2,
    Double: 2,
    Decimal128: 2,
    String: 3,
    Document: 4,
    Array: 5,
    Binary: 6,
    ObjectId: 7,
    Bool: 8,
    DateTime: 9,
    Regex: 10,
    MaxKey: 11,
}


def sort_key(value: Value):
    """Orderable key that sorts values the way the database does."""
    rank = _TYPE_RANK.get(type(value), 99)
    if isinstance(value, _NUMERIC):
        number = value.value
        return (rank, float(number) if not isinstance(number, int) else number)
    if isinstance(value, (String, Bool)):
        return (rank, value.value)
    if isinstance(value, DateTime):
        return (rank, value.millis)
    if isinstance(value, ObjectId):
        return (rank, value.raw)
    if isinstance(value, Binary):
        return (rank, (len(value.data), value.subtype, value.data))
    if isinstance(value, Regex):
        return (rank, (value.pattern, value.options))
    if isinstance(value, (Document, Array)):
        return (rank, format_document(Document({"v": value})))
    return (rank, 0)


def values_equal(left: Value, right: Value) -> bool:
    if isinstance(left, _NUMERIC) and isinstance(right, _NUMERIC):
        return left.value == right.value
    return left == right


def _resolve(doc: Document, path: str):
    current: object = doc
    for part in path.split("."):
        if isinstance(current, Document) and part in current:
            current = current[part]
        elif isinstance(current, Array) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return _MISSING
    return current


def _candidates(value) -> List[Value]:
    if value is _MISSING:
        return []
    if isinstance(value, Array):
        return [value, *value.items]
    return [value]


def _regex_flags(options: str) -> int:
    flags = 0
    for flag, bit in (("i", re.IGNORECASE), ("m", re.MULTILINE), ("s", re.DOTALL), ("x", re.VERBOSE)):
        if flag in options:
            flags |= bit
    return flags


def _regex_matches(pattern: str, options: str, value: Value) -> bool:
    if not isinstance(value, String):
        return False
    try:
        return re.search(pattern, value.value, _regex_flags(options)) is not None
    except re.error as e:
        raise QueryError(f"Invalid regular expression: {e}", option="$regex") from e


def _equals(value, expected: Value) -> bool:
    if isinstance(expected, Regex):
        return any(_regex_matches(expected.pattern, expected.options, v) for v in _candidates(value))
    if value is _MISSING:
        return isinstance(expected, Null)
    return any(values_equal(v, expected) for v in _candidates(value))


def _compare(value, expected: Value, test: Callable[[int], bool]) -> bool:
    rank = sort_key(expected)[0]
    for candidate in _candidates(value):
        key = sort_key(candidate)
        if key[0] == rank and test((key > sort_key(expected)) - (key < sort_key(expected))):
            return True
    return False


def _apply_operators(value, operators: Document) -> bool:
    for op, operand in operators.items():
        if op == "$eq":
            ok = _equals(value, operand)
        elif op == "$ne":
            ok = not _equals(value, operand)
        elif op == "$gt":
            ok = _compare(value, operand, lambda c: c > 0)
        elif op == "$gte":
            ok = _compare(value, operand, lambda c: c >= 0)
        elif op == "$lt":
            ok = _compare(value, operand, lambda c: c < 0)
        elif op == "$lte":
            ok = _compare(value, operand, lambda c: c <= 0)
        elif op in ("$in", "$nin"):
            if not isinstance(operand, Array):
                raise QueryError(f"{op} needs an array", option=op)
            hit = any(_equals(value, item) for item in operand)
            ok = hit if op == "$in" else not hit
        elif op == "$exists":
            truthy = not isinstance(operand, (Null,)) and getattr(operand, "value", True) not in (False, 0)
            ok = (value is not _MISSING) == truthy
        elif op == "$regex":
            options = operators.get("$options", String(""))
            if isinstance(operand, Regex):
                pattern, opts = operand.pattern, operand.options
            elif isinstance(operand, String) and isinstance(options, String):
                pattern, opts = operand.value, options.value
            else:
                raise QueryError("$regex needs a string pattern", option="$regex")
            ok = any(_regex_matches(pattern, opts, v) for v in _candidates(value))
        elif op == "$options":
            continue
        elif op == "$not":
            if isinstance(operand, Document):
                ok = not _apply_operators(value, operand)
            else:
                ok = not _equals(value, operand)
        else:
            raise QueryError(f"Unsupported operator {op}", option=op)
        if not ok:
            return False
    return True


def _is_operator_document(value: Value) -> bool:
    return isinstance(value, Document) and len(value) > 0 and all(k.startswith("$") for k in value)


def matches(doc: Document, query: Document) -> bool:
    """True when ``doc`` satisfies ``query``."""
    for key, condition in query.items():
        if key in ("$and", "$or", "$nor"):
            if not isinstance(condition, Array) or not all(isinstance(c, Document) for c in condition):
                raise QueryError(f"{key} needs an array of documents", option=key)
            results = (matches(doc, sub) for sub in condition)  # type: ignore[arg-type]
            if key == "$and" and not all(results):
                return False
            if key == "$or" and not any(results):
                return False
            if key == "$nor" and any(results):
                return False
            continue
        if key.startswith("$"):
            raise QueryError(f"Unsupported top-level operator {key}", option=key)

        value = _resolve(doc, key)
        if _is_operator_document(condition):
            if not _apply_operators(value, condition):  # type: ignore[arg-type]
                return False
        elif not _equals(value, condition):
            return False
    return True


# =============================================================================
# Sort and projection
# =============================================================================


def sort_documents(docs: Iterable[Document], sort: Document) -> List[Document]:
    result = list(docs)
    for key, direction in reversed(list(sort.items())):
        if not isinstance(direction, _NUMERIC) or direction.value not in (1, -1):
            raise QueryError(f"Sort direction for {key!r} must be 1 or -1", option="sort")

        def key_func(doc: Document, key: str = key):
            value = _resolve(doc, key)
            return sort_key(Null() if value is _MISSING else value)

        result.sort(key=key_func, reverse=direction.value == -1)
    return result


def _truthy(value: Value) -> bool:
    if isinstance(value, (Bool, *_NUMERIC)):
        return bool(value.value)
    raise QueryError("Projection values must be 0/1 or true/false", option="projection")


def _project(doc: Document, paths: Dict[str, bool], include: bool) -> Document:
    heads: Dict[str, List[str]] = {}
    for path in paths:
        head, _, rest = path.partition(".")
        heads.setdefault(head, []).append(rest)

    fields = {}
    for key, value in doc.items():
        if key not in heads:
            if not include:
                fields[key] = value
            continue
        rests = heads[key]
        if "" in rests:
            if include:
                fields[key] = value
            continue
        if isinstance(value, Document):
            fields[key] = _project(value, {r: True for r in rests}, include)
        elif not include:
            fields[key] = value
    return Document(fields)


def project_document(doc: Document, projection: Document) -> Document:
    """Apply an inclusion or exclusion projection to ``doc``."""
    if not projection:
        return doc
    flags = {key: _truthy(value) for key, value in projection.items()}
    id_flag = flags.pop("_id", None)
    modes = set(flags.values())
    if len(modes) > 1:
        raise QueryError("Cannot mix inclusion and exclusion in a projection", option="projection")

    include = modes == {True} or (not modes and id_flag is True)
    if include:
        if id_flag is not False:
            flags["_id"] = True
        return _project(doc, flags, include=True)
    if id_flag is False:
        flags["_id"] = False
    return _project(doc, flags, include=False)


# =============================================================================
# In-memory store
# =============================================================================

_oid_counter = itertools.count(int.from_bytes(os.urandom(3), "big"))
_oid_process = os.urandom(5)


def new_object_id() -> ObjectId:
    """Generate an ObjectId: 4-byte timestamp, 5 random bytes, 3-byte counter."""
    counter = next(_oid_counter) % 0xFFFFFF
    return ObjectId(int(time.time()).to_bytes(4, "big") + _oid_process + counter.to_bytes(3, "big"))


class InMemoryStore:
    """``DocumentStore`` over a list held in memory."""

    def __init__(self, documents: Optional[Sequence[Document]] = None):
        self._documents: List[Document] = []
        for doc in documents or ():
            self.insert_document(doc)

    def __len__(self) -> int:
        return len(self._documents)

    def _index_of(self, doc_id: Value) -> int:
        for index, doc in enumerate(self._documents):
            if "_id" in doc and values_equal(doc["_id"], doc_id):
                return index
        raise DocumentNotFoundError(document_id=format_document(Document({"_id": doc_id})))

    def list_documents(
        self,
        filter: Document,
        sort: Document,
        projection: Document,
        skip: int = 0,
        limit: int = 0,
    ) -> Tuple[List[Document], int]:
        if skip < 0 or limit < 0:
            raise QueryError("skip and limit must not be negative", option="skip" if skip < 0 else "limit")
        found = [doc for doc in self._documents if matches(doc, filter)]
        total = len(found)
        if sort:
            found = sort_documents(found, sort)
        found = found[skip : skip + limit] if limit else found[skip:]
        return [project_document(doc, projection) for doc in found], total

    def get_document(self, doc_id: Value) -> Document:
        return self._documents[self._index_of(doc_id)]

    def insert_document(self, doc: Document) -> Value:
        if "_id" not in doc:
            doc = Document({"_id": new_object_id(), **doc.fields})
        else:
            try:
                self._index_of(doc["_id"])
            except DocumentNotFoundError:
                pass
            else:
                raise StoreError("Duplicate _id", document_id=format_document(Document({"_id": doc["_id"]})))
        self._documents.append(doc)
        return doc["_id"]

    def update_document(self, doc_id: Value, doc: Document) -> None:
        index = self._index_of(doc_id)
        self._documents[index] = Document({"_id": doc_id, **doc.without("_id").fields})

    def delete_document(self, doc_id: Value) -> None:
        del self._documents[self._index_of(doc_id)]


def load_documents(path: Path) -> List[Document]:
    """Read documents from ``path``.

    The file may hold one document, a JSON array of documents, or one
    document per line. Shell-style syntax is accepted.

    Raises:
        StoreError: If the file cannot be read or parsed.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise StoreError(f"Cannot read {path}: {e}") from e

    stripped = text.strip()
    if not stripped:
        return []

    if stripped.startswith("["):
        try:
            items = from_extended_json(loads(stripped))
        except (ValueError, ExtendedJsonError) as e:
            raise StoreError(f"Invalid document array in {path}: {e}") from e
        if not isinstance(items, Array) or not all(isinstance(i, Document) for i in items):
            raise StoreError(f"{path} must contain an array of documents")
        return list(items)  # type: ignore[arg-type]

    try:
        return [compile_query(stripped)]
    except CompileError:
        logger.debug("%s is not a single document, reading one per line", path)

    documents = []
    for number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            documents.append(compile_query(line))
        except CompileError as e:
            raise StoreError(f"Invalid document on line {number} of {path}: {e}") from e
    return documents


def dump_documents(documents: Iterable[Document]) -> str:
    """One compact extended-JSON document per line."""
    return "".join(format_document(doc) + "\n" for doc in documents)


__all__ = [
    "DocumentStore",
    "InMemoryStore",
    "dump_documents",
    "load_documents",
    "matches",
    "new_object_id",
    "project_document",
    "sort_documents",
]
