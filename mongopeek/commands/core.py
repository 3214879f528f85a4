"""Compile and format commands for mongopeek."""

from enum import Enum
from pathlib import Path

import typer
from rich.markup import escape

from mongopeek.config.settings import Settings
from mongopeek.documents.formatter import render_document
from mongopeek.exceptions import CompileError, FormatError, QueryError, StoreError
from mongopeek.services.query import build_query
from mongopeek.services.store import load_documents
from mongopeek.utils.output import err_console

app = typer.Typer()


class QueryKind(str, Enum):
    filter = "filter"
    sort = "sort"
    projection = "projection"


@app.command(name="compile")
def compile_text(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Query text, e.g. '{ age: { $gt: NumberInt(30) } }'"),
    kind: QueryKind = typer.Option(QueryKind.filter, "--kind", "-k", help="Which query box the text is for"),
) -> None:
    """Compile query text and print it as extended JSON.

    Examples:
        mongopeek compile '{ name: /^ali/i }'
        mongopeek compile '{ created: -1 }' --kind sort
    """
    settings: Settings = ctx.obj
    try:
        options = build_query(**{f"{kind.value}_text": text}, config=settings.compiler_config())
    except CompileError as e:
        err_console.print(f"[red]Error: {escape(e.message)}[/red]")
        if e.fragment:
            err_console.print(f"  near: {e.fragment}", markup=False)
        raise typer.Exit(1)

    typer.echo(render_document(getattr(options, kind.value), settings.sort_keys))


@app.command(name="format")
def format_file(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="File of documents (JSON array or one per line)"),
    sort_keys: bool = typer.Option(False, "--sort-keys", "-s", help="Sort keys in the output"),
) -> None:
    """Re-render the documents in a file as canonical extended JSON."""
    settings: Settings = ctx.obj
    try:
        documents = load_documents(path)
        for doc in documents:
            typer.echo(render_document(doc, sort_keys or settings.sort_keys))
    except (StoreError, FormatError, QueryError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)
