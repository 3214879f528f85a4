"""Tests for the query pipeline."""

import pytest

from mongopeek.documents.values import Array, Document, Int32, Regex
from mongopeek.exceptions import CompileError, QueryError
from mongopeek.services.query import QueryOptions, build_query, run_query


class TestBuildQuery:
    """Compiling filter, sort and projection text together."""

    def test_blank_everything(self):
        options = build_query()
        assert options == QueryOptions()

    def test_all_parts(self):
        options = build_query("{ age: { $gt: 30 } }", "{ age: -1 }", "{ name: 1 }", 5, 10)
        assert options.filter == Document({"age": Document({"$gt": Int32(30)})})
        assert options.sort == Document({"age": Int32(-1)})
        assert options.projection == Document({"name": Int32(1)})
        assert (options.skip, options.limit) == (5, 10)

    def test_filter_gets_native_regex_in_arrays(self):
        options = build_query("{ name: { $in: [ /^acme/i, /^ack/ ] } }")
        assert options.filter["name"]["$in"] == Array((Regex("^acme", "i"), Regex("^ack", "")))

    def test_error_names_the_part(self):
        with pytest.raises(CompileError) as exc:
            build_query("{}", "{ age: }")
        assert exc.value.message.startswith("sort:")

    @pytest.mark.parametrize("skip,limit", [(-1, 0), (0, -5)])
    def test_negative_paging_rejected(self, skip, limit):
        with pytest.raises(QueryError):
            build_query(skip=skip, limit=limit)


def test_run_query_returns_page_and_total(store):
    docs, total = run_query(store, build_query(sort_text="{ age: 1 }", limit=1))
    assert total == 4
    assert docs[0]["name"].value == "alfred"
