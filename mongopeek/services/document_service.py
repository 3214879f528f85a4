"""Document service facade for the UI layer.

Document edits go through here: render the stored document, hand it to
the external editor, compile what comes back and write it to the store.
UI code never talks to the editor or the store directly for edits.
"""

from __future__ import annotations

import logging
from typing import Optional

from mongopeek.documents.compiler import CompilerConfig, compile_query
from mongopeek.documents.formatter import render_document
from mongopeek.documents.values import Document, Value
from mongopeek.exceptions import CompileError, EditorRoundTripError

from .editor import TextEditor
from .store import DocumentStore

logger = logging.getLogger(__name__)


def _squeeze(text: str) -> str:
    return "".join(text.split())


class DocumentService:
    """Edit, insert, duplicate and delete documents in a ``DocumentStore``."""

    def __init__(
        self,
        store: DocumentStore,
        editor: TextEditor,
        config: Optional[CompilerConfig] = None,
        sort_keys: bool = False,
    ):
        self.store = store
        self.editor = editor
        self.config = config
        self.sort_keys = sort_keys

    def _round_trip(self, doc: Document) -> Optional[Document]:
        """Edit ``doc`` in the editor; None when nothing meaningful changed."""
        original = render_document(doc, self.sort_keys)
        edited = self.editor.edit(original)

        if _squeeze(edited) == _squeeze(original):
            logger.debug("Editor returned unchanged text")
            return None

        try:
            result = compile_query(edited, self.config)
        except CompileError as e:
            logger.error("Edited document does not compile: %s", e)
            raise EditorRoundTripError(f"Edited document is invalid: {e.message}") from e

        if result == doc:
            logger.debug("Edited text compiles to the same document")
            return None
        return result

    def edit(self, doc_id: Value) -> Optional[Document]:
        """Edit the stored document ``doc_id`` and save the result.

        The ``_id`` of the stored document is kept whatever the edit does
        to it.

        Returns:
            The saved document, or None when the edit changed nothing.

        Raises:
            DocumentNotFoundError: If no document has ``doc_id``.
            EditorRoundTripError: If the editor fails or the text is invalid.
        """
        doc = self.store.get_document(doc_id)
        edited = self._round_trip(doc)
        if edited is None:
            return None

        updated = Document({"_id": doc_id, **edited.without("_id").fields})
        self.store.update_document(doc_id, updated)
        logger.info("Updated document %s", doc_id)
        return updated

    def insert(self) -> Optional[Document]:
        """Write a new document starting from ``{}``; None if left empty."""
        edited = self._round_trip(Document())
        if edited is None:
            return None
        doc_id = self.store.insert_document(edited)
        logger.info("Inserted document %s", doc_id)
        return self.store.get_document(doc_id)

    def duplicate(self, doc_id: Value) -> Optional[Document]:
        """Insert an edited copy of ``doc_id`` under a new ``_id``."""
        source = self.store.get_document(doc_id).without("_id")
        original = render_document(source, self.sort_keys)
        edited_text = self.editor.edit(original)
        try:
            edited = compile_query(edited_text, self.config)
        except CompileError as e:
            logger.error("Duplicated document does not compile: %s", e)
            raise EditorRoundTripError(f"Edited document is invalid: {e.message}") from e
        if not edited:
            return None

        new_id = self.store.insert_document(edited.without("_id"))
        logger.info("Duplicated document %s as %s", doc_id, new_id)
        return self.store.get_document(new_id)

    def delete(self, doc_id: Value) -> None:
        self.store.delete_document(doc_id)
        logger.info("Deleted document %s", doc_id)
