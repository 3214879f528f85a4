"""Browse documents from a file in the full-screen viewer."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from mongopeek.config.constants import DEFAULT_QUERY_LIMIT
from mongopeek.config.settings import Settings
from mongopeek.documents.compiler import is_blank_query
from mongopeek.documents.values import Document
from mongopeek.exceptions import MongopeekError
from mongopeek.services.clipboard import SystemClipboard
from mongopeek.services.document_service import DocumentService
from mongopeek.services.editor import ExternalEditor
from mongopeek.services.history import QueryHistory
from mongopeek.services.query import build_query, run_query
from mongopeek.services.store import InMemoryStore, dump_documents, load_documents
from mongopeek.utils.output import console, err_console

app = typer.Typer()


@app.command()
def browse(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="File of documents (JSON array or one per line)"),
    filter_text: Optional[str] = typer.Option(None, "--filter", "-f", help="Filter query"),
    sort_text: Optional[str] = typer.Option(None, "--sort", help="Sort document, e.g. '{ age: -1 }'"),
    projection_text: Optional[str] = typer.Option(None, "--projection", "-p", help="Projection document"),
    skip: int = typer.Option(0, "--skip", help="Documents to skip"),
    limit: int = typer.Option(DEFAULT_QUERY_LIMIT, "--limit", "-n", help="Maximum documents to show (0 = all)"),
    save: bool = typer.Option(False, "--save", help="Write edits back to the file on exit"),
) -> None:
    """Open the documents in a file that match a query.

    Examples:
        mongopeek browse users.json
        mongopeek browse users.json --filter '{ name: /^ali/i }' --sort '{ age: -1 }'
    """
    settings: Settings = ctx.obj
    try:
        store = InMemoryStore(load_documents(path))
        options = build_query(
            filter_text, sort_text, projection_text, skip, limit, settings.compiler_config()
        )
        documents, total = run_query(store, options)
    except MongopeekError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not is_blank_query(filter_text):
        QueryHistory(settings.history_path, settings.history_size).save(filter_text or "")

    if not documents:
        console.print("[yellow]No documents match[/yellow]")
        return

    # Imported here so the other commands start without loading Textual
    from mongopeek.ui.document_viewer import DocumentViewerApp

    service = DocumentService(
        store,
        ExternalEditor.from_settings(settings.editor),
        settings.compiler_config(),
        settings.sort_keys,
    )
    DocumentViewerApp(
        documents,
        SystemClipboard(),
        service,
        total=total,
        sort_keys=settings.sort_keys,
        projection=options.projection,
    ).run()

    if save:
        everything, _ = store.list_documents(Document(), Document(), Document())
        path.write_text(dump_documents(everything), encoding="utf-8")
        console.print(f"[green]Saved {len(everything)} documents to {escape(str(path))}[/green]")
