"""Tests for the typed value model."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

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
    Null,
    ObjectId,
    String,
    document,
    to_python,
    to_value,
)


class TestScalars:
    """Range checks and conversions on scalar variants."""

    def test_int32_range(self):
        Int32(2**31 - 1)
        with pytest.raises(ValueError):
            Int32(2**31)

    def test_int64_range(self):
        Int64(-(2**63))
        with pytest.raises(ValueError):
            Int64(2**63)

    def test_int_rejects_bool(self):
        with pytest.raises(ValueError):
            Int32(True)

    def test_object_id_hex(self):
        oid = ObjectId.from_hex("507F1F77BCF86CD799439011")
        assert oid.hex == "507f1f77bcf86cd799439011"
        assert len(oid.raw) == 12
        assert repr(oid) == "ObjectId('507f1f77bcf86cd799439011')"

    @pytest.mark.parametrize("text", ["", "507f1f77", "zz7f1f77bcf86cd799439011", "507f1f77bcf86cd7994390111"])
    def test_object_id_rejects_bad_hex(self, text):
        with pytest.raises(ValueError):
            ObjectId.from_hex(text)

    def test_datetime_millis(self):
        moment = datetime(2024, 1, 1, 0, 0, 0, 123000, tzinfo=timezone.utc)
        value = DateTime.from_datetime(moment)
        assert value.millis == 1704067200123
        assert value.to_datetime() == moment

    def test_datetime_before_epoch(self):
        value = DateTime.from_datetime(datetime(1969, 12, 31, 23, 59, 59, tzinfo=timezone.utc))
        assert value.millis == -1000

    def test_binary_base64(self):
        value = Binary.from_base64("aGVsbG8=", 0)
        assert value.data == b"hello"
        assert value.base64 == "aGVsbG8="

    def test_binary_invalid_base64(self):
        with pytest.raises(ValueError):
            Binary.from_base64("***")

    def test_decimal_parse(self):
        assert Decimal128.parse("19.99").value == Decimal("19.99")
        with pytest.raises(ValueError):
            Decimal128.parse("abc")


class TestDocument:
    """Ordered mapping with order-insensitive equality."""

    def test_equality_ignores_key_order(self):
        a = Document({"x": Int32(1), "y": Int32(2)})
        b = Document({"y": Int32(2), "x": Int32(1)})
        assert a == b
        assert hash(a) == hash(b)

    def test_keeps_insertion_order(self):
        doc = Document.of([("b", Null()), ("a", Null())])
        assert list(doc.keys()) == ["b", "a"]

    def test_mapping_helpers(self):
        doc = Document({"_id": Int32(1), "name": String("x")})
        assert "name" in doc
        assert len(doc) == 2
        assert doc.get("missing") is None
        assert doc.without("_id") == Document({"name": String("x")})
        assert list(doc.with_field("_id", Int32(2)).keys()) == ["_id", "name"]

    def test_array_order_matters(self):
        assert Array((Int32(1), Int32(2))) != Array((Int32(2), Int32(1)))


class TestConversion:
    """to_value / to_python between plain Python data and the model."""

    def test_to_value_picks_integer_width(self):
        assert to_value(5) == Int32(5)
        assert to_value(2**40) == Int64(2**40)

    def test_to_value_nested(self):
        doc = document({"a": [1, "x", None, True, 1.5], "b": {"c": b"\x01"}})
        assert doc == Document(
            {
                "a": Array((Int32(1), String("x"), Null(), Bool(True), Double(1.5))),
                "b": Document({"c": Binary(b"\x01")}),
            }
        )

    def test_to_python_round_trip(self):
        data = {"a": [1, "x", None], "b": {"c": Decimal("1.5")}}
        assert to_python(document(data)) == data

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            to_value(object())

    def test_document_needs_a_mapping(self):
        with pytest.raises(TypeError):
            document([1, 2])  # type: ignore[arg-type]
