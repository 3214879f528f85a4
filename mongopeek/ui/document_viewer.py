"""
Full-screen document viewer for mongopeek.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from rich.markup import escape
from textual import events
from textual.app import App, ComposeResult
from textual.widgets import Label, Static

from mongopeek.documents.formatter import render_document
from mongopeek.documents.values import Document, Value
from mongopeek.exceptions import ClipboardError, MongopeekError
from mongopeek.navigator.selection import CopyMode
from mongopeek.navigator.state import ClipboardWriter, DocumentNavigator
from mongopeek.services.document_service import DocumentService
from mongopeek.services.store import project_document

from .modals import DeleteConfirmScreen
from .render import SELECTED_MARKER, paint_lines

logger = logging.getLogger(__name__)


class DocumentView(Static):
    """Paints one navigator and keeps it sized to the widget."""

    def __init__(self, navigator: DocumentNavigator, **kwargs):
        super().__init__(**kwargs)
        self.navigator = navigator

    def on_resize(self, event: events.Resize) -> None:
        self.navigator.resize(max(1, event.size.width - len(SELECTED_MARKER)), event.size.height)
        self.repaint()

    def repaint(self) -> None:
        nav = self.navigator
        self.update(paint_lines(nav.lines, nav.state, nav.highlighted_range()))


class DocumentViewerApp(App):
    """Browse a list of documents one at a time."""

    CSS = """
    #header {
        dock: top;
        height: 1;
        background: $surface;
        padding: 0 1;
    }

    #content {
        width: 100%;
        height: 1fr;
    }

    #footer {
        dock: bottom;
        height: 1;
        background: $surface;
        padding: 0 1;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("j", "move_down", "Down"),
        ("down", "move_down", "Down"),
        ("k", "move_up", "Up"),
        ("up", "move_up", "Up"),
        ("g", "move_top", "Top"),
        ("G,shift+g", "move_bottom", "Bottom"),
        ("ctrl+d", "page_down", "Page down"),
        ("ctrl+u", "page_up", "Page up"),
        ("y", "copy_full", "Copy"),
        ("Y,shift+y", "copy_value", "Copy value"),
        ("e", "edit", "Edit"),
        ("i", "insert", "Insert"),
        ("D,shift+d", "duplicate", "Duplicate"),
        ("d", "delete", "Delete"),
        ("n", "next_document", "Next"),
        ("p", "previous_document", "Previous"),
    ]

    def __init__(
        self,
        documents: List[Document],
        clipboard: ClipboardWriter,
        service: Optional[DocumentService] = None,
        total: Optional[int] = None,
        sort_keys: bool = False,
        projection: Optional[Document] = None,
    ):
        """Initialize the viewer.

        Args:
            documents: Documents to page through.
            clipboard: Target for ``y``/``Y``.
            service: Enables ``e``, ``i``, ``D`` and ``d``; without it the
                documents are read-only.
            total: Number of matching documents, shown in the header.
            sort_keys: Render keys sorted.
            projection: Projection of the query that produced ``documents``;
                re-applied to documents written through ``service``.
        """
        super().__init__()
        self.documents = list(documents)
        self.clipboard = clipboard
        self.service = service
        self.total = len(self.documents) if total is None else total
        self.sort_keys = sort_keys
        self.projection = projection or Document()
        self.index = 0
        self.navigator = DocumentNavigator(self._current_text())

    def _current_text(self) -> str:
        if not self.documents:
            return ""
        return render_document(self.documents[self.index], self.sort_keys)

    def compose(self) -> ComposeResult:
        yield Label("", id="header")
        yield DocumentView(self.navigator, id="content")
        yield Label("j/k move  y/Y copy  e edit  i insert  D dup  d delete  n/p doc  q quit", id="footer")

    def on_mount(self) -> None:
        self._update_header()

    def _update_header(self) -> None:
        if self.documents:
            text = f"Document {self.index + 1} of {len(self.documents)} ({self.total} matching)"
        else:
            text = "No documents"
        self.query_one("#header", Label).update(text)

    def _repaint(self) -> None:
        self.query_one("#content", DocumentView).repaint()

    def _show(self, index: int) -> None:
        self.index = index
        self.navigator.open(self._current_text())
        self._update_header()
        self._repaint()

    # -- movement --------------------------------------------------------

    def action_move_down(self) -> None:
        self.navigator.move_down()
        self._repaint()

    def action_move_up(self) -> None:
        self.navigator.move_up()
        self._repaint()

    def action_move_top(self) -> None:
        self.navigator.move_to_top()
        self._repaint()

    def action_move_bottom(self) -> None:
        self.navigator.move_to_bottom()
        self._repaint()

    def action_page_down(self) -> None:
        self.navigator.page_down()
        self._repaint()

    def action_page_up(self) -> None:
        self.navigator.page_up()
        self._repaint()

    def action_next_document(self) -> None:
        if self.index < len(self.documents) - 1:
            self._show(self.index + 1)

    def action_previous_document(self) -> None:
        if self.index > 0:
            self._show(self.index - 1)

    # -- copy and edit ---------------------------------------------------

    def _copy(self, mode: CopyMode) -> None:
        try:
            text = self.navigator.copy_selection(mode, self.clipboard)
        except ClipboardError as e:
            logger.error("Copy failed: %s", e)
            self.notify(escape(str(e)), severity="error")
            return
        preview = text if len(text) <= 40 else text[:37] + "..."
        self.notify(f"Copied {escape(preview)}")

    def action_copy_full(self) -> None:
        self._copy(CopyMode.FULL)

    def action_copy_value(self) -> None:
        self._copy(CopyMode.VALUE)

    def _project(self, doc: Document) -> Document:
        """Shape a stored document the way the query shaped the list."""
        if not self.projection:
            return doc
        return project_document(doc, self.projection)

    def _current_id(self) -> Optional[Value]:
        """The ``_id`` of the shown document, or None after notifying why not."""
        if self.service is None or not self.documents:
            self.notify("Editing is not available", severity="warning")
            return None
        doc = self.documents[self.index]
        if "_id" not in doc:
            self.notify("Document has no _id", severity="error")
            return None
        return doc["_id"]

    def _with_editor(
        self, operation: Callable[[], Optional[Document]]
    ) -> Tuple[bool, Optional[Document]]:
        """Run an editor round trip with the UI suspended.

        Returns ``(ok, document)``; on failure the error has already been shown.
        """
        try:
            with self.suspend():
                return True, operation()
        except MongopeekError as e:
            logger.error("Editor round trip failed: %s", e)
            self.notify(escape(str(e)), severity="error")
            return False, None

    def _append(self, doc: Document, message: str) -> None:
        self.documents.append(self._project(doc))
        self.total += 1
        self._show(len(self.documents) - 1)
        self.notify(message)

    def action_edit(self) -> None:
        """Edit the current document in the external editor."""
        doc_id = self._current_id()
        if doc_id is None:
            return
        service = self.service
        ok, updated = self._with_editor(lambda: service.edit(doc_id))
        if not ok:
            return
        if updated is None:
            self.notify("No changes")
            return
        self.documents[self.index] = self._project(updated)
        self._show(self.index)
        self.notify("Document updated")

    def action_insert(self) -> None:
        """Write a new document in the external editor."""
        if self.service is None:
            self.notify("Editing is not available", severity="warning")
            return
        service = self.service
        ok, inserted = self._with_editor(service.insert)
        if not ok:
            return
        if inserted is None:
            self.notify("Nothing inserted")
            return
        self._append(inserted, "Document inserted")

    def action_duplicate(self) -> None:
        """Insert an edited copy of the current document."""
        doc_id = self._current_id()
        if doc_id is None:
            return
        service = self.service
        ok, copy = self._with_editor(lambda: service.duplicate(doc_id))
        if not ok:
            return
        if copy is None:
            self.notify("Nothing inserted")
            return
        self._append(copy, "Document duplicated")

    def action_delete(self) -> None:
        """Delete the current document after confirmation."""
        doc_id = self._current_id()
        if doc_id is None:
            return

        def check_delete(confirmed: Optional[bool]) -> None:
            if confirmed:
                self._delete(doc_id)

        self.push_screen(DeleteConfirmScreen(str(doc_id)), check_delete)

    def _delete(self, doc_id: Value) -> None:
        service = self.service
        try:
            service.delete(doc_id)
        except MongopeekError as e:
            logger.error("Delete failed: %s", e)
            self.notify(escape(str(e)), severity="error")
            return
        del self.documents[self.index]
        self.total = max(0, self.total - 1)
        self._show(max(0, min(self.index, len(self.documents) - 1)))
        self.notify("Document deleted")
