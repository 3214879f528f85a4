"""
Query pipeline.

Compiles the filter, sort and projection text typed by the user and runs
them against a ``DocumentStore``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from mongopeek.documents.compiler import CompilerConfig, compile_query, native_regex_in_arrays
from mongopeek.documents.values import Document
from mongopeek.exceptions import CompileError, QueryError

from .store import DocumentStore

logger = logging.getLogger(__name__)


@dataclass
class QueryOptions:
    """A compiled query ready to run."""

    filter: Document = field(default_factory=Document)
    sort: Document = field(default_factory=Document)
    projection: Document = field(default_factory=Document)
    skip: int = 0
    limit: int = 0


def _compile_part(text: Optional[str], option: str, config: Optional[CompilerConfig]) -> Document:
    try:
        return compile_query(text, config)
    except CompileError as e:
        # Name the box the bad text came from
        raise CompileError(f"{option}: {e.message}", fragment=e.fragment) from e


def build_query(
    filter_text: Optional[str] = None,
    sort_text: Optional[str] = None,
    projection_text: Optional[str] = None,
    skip: int = 0,
    limit: int = 0,
    config: Optional[CompilerConfig] = None,
) -> QueryOptions:
    """Compile user-entered query text into ``QueryOptions``.

    ``$regex`` documents inside ``$in``/``$nin`` arrays of the filter become
    native regular expressions. A ``limit`` of 0 means no limit.

    Raises:
        CompileError: If any of the texts fails to compile.
        QueryError: If ``skip`` or ``limit`` is negative.
    """
    if skip < 0:
        raise QueryError("skip must not be negative", option="skip")
    if limit < 0:
        raise QueryError("limit must not be negative", option="limit")

    return QueryOptions(
        filter=native_regex_in_arrays(_compile_part(filter_text, "filter", config)),
        sort=_compile_part(sort_text, "sort", config),
        projection=_compile_part(projection_text, "projection", config),
        skip=skip,
        limit=limit,
    )


def run_query(store: DocumentStore, options: QueryOptions) -> Tuple[List[Document], int]:
    """Run ``options`` against ``store``; returns the page and the total match count."""
    docs, total = store.list_documents(
        options.filter, options.sort, options.projection, options.skip, options.limit
    )
    logger.debug("Query matched %d documents, returning %d", total, len(docs))
    return docs, total
