"""Tests for the document edit round trip."""

from unittest.mock import Mock

import pytest

from mongopeek.documents.formatter import render_document
from mongopeek.documents.values import Document, Int32, ObjectId, String
from mongopeek.exceptions import DocumentNotFoundError, EditorRoundTripError
from mongopeek.services.document_service import DocumentService


class TestEdit:
    """Editing an existing document."""

    def test_unchanged_text_writes_nothing(self, store, people, make_editor):
        store.update_document = Mock(wraps=store.update_document)
        service = DocumentService(store, make_editor())
        assert service.edit(people[0]["_id"]) is None
        store.update_document.assert_not_called()

    def test_whitespace_only_change_writes_nothing(self, store, people, make_editor):
        store.update_document = Mock(wraps=store.update_document)
        editor = make_editor(lambda text: text.replace("\n", "\n\n  ") + "\n\n")
        assert DocumentService(store, editor).edit(people[0]["_id"]) is None
        store.update_document.assert_not_called()

    def test_equal_document_writes_nothing(self, store, people, make_editor):
        store.update_document = Mock(wraps=store.update_document)
        # Same values, different key order and syntax
        doc = people[1]
        text = (
            f'{{ tags: ["dev"], age: NumberInt(27), name: \'bob\', _id: ObjectId("{doc["_id"].hex}") }}'
        )
        assert DocumentService(store, make_editor(text)).edit(doc["_id"]) is None
        store.update_document.assert_not_called()

    def test_changed_document_is_saved(self, store, people, make_editor):
        doc_id = people[1]["_id"]
        editor = make_editor(lambda text: text.replace('"bob"', '"robert"'))
        updated = DocumentService(store, editor).edit(doc_id)
        assert updated["name"] == String("robert")
        assert store.get_document(doc_id)["name"] == String("robert")

    def test_editor_sees_rendered_document(self, store, people, make_editor):
        editor = make_editor()
        DocumentService(store, editor).edit(people[0]["_id"])
        assert editor.seen == [render_document(people[0])]

    def test_id_cannot_be_changed(self, store, people, make_editor):
        doc_id = people[0]["_id"]
        editor = make_editor('{ _id: ObjectId("ffffffffffffffffffffffff"), name: "new" }')
        updated = DocumentService(store, editor).edit(doc_id)
        assert updated == Document({"_id": doc_id, "name": String("new")})

    def test_invalid_text_raises_and_writes_nothing(self, store, people, make_editor):
        store.update_document = Mock(wraps=store.update_document)
        with pytest.raises(EditorRoundTripError):
            DocumentService(store, make_editor("{ name: ")).edit(people[0]["_id"])
        store.update_document.assert_not_called()

    def test_editor_failure_propagates(self, store, people, make_editor):
        editor = make_editor(error=EditorRoundTripError("boom", exit_code=1))
        with pytest.raises(EditorRoundTripError):
            DocumentService(store, editor).edit(people[0]["_id"])

    def test_missing_document(self, store, make_editor):
        with pytest.raises(DocumentNotFoundError):
            DocumentService(store, make_editor()).edit(ObjectId(b"\x00" * 12))


class TestInsertDuplicateDelete:
    """Creating and removing documents through the service."""

    def test_insert(self, store, make_editor):
        editor = make_editor('{ name: "new", n: 1 }')
        created = DocumentService(store, editor).insert()
        assert editor.seen == ["{}"]
        assert created["name"] == String("new")
        assert isinstance(created["_id"], ObjectId)
        assert len(store) == 5

    def test_insert_left_empty_is_noop(self, store, make_editor):
        assert DocumentService(store, make_editor()).insert() is None
        assert len(store) == 4

    def test_duplicate_gets_new_id(self, store, people, make_editor):
        editor = make_editor()
        copy = DocumentService(store, editor).duplicate(people[0]["_id"])
        assert "_id" not in editor.seen[0]
        assert copy["_id"] != people[0]["_id"]
        assert copy.without("_id") == people[0].without("_id")
        assert len(store) == 5

    def test_duplicate_with_edit(self, store, people, make_editor):
        editor = make_editor(lambda text: text.replace("34", "35"))
        copy = DocumentService(store, editor).duplicate(people[0]["_id"])
        assert copy["age"] == Int32(35)

    def test_delete(self, store, people, make_editor):
        DocumentService(store, make_editor()).delete(people[2]["_id"])
        assert len(store) == 3
