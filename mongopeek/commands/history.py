"""Saved query history commands."""

import typer

from mongopeek.config.settings import Settings
from mongopeek.services.history import QueryHistory
from mongopeek.utils.output import console

app = typer.Typer()


@app.command()
def history(
    ctx: typer.Context,
    clear: bool = typer.Option(False, "--clear", help="Forget every saved query"),
) -> None:
    """Show saved filter queries, newest first.

    Examples:
        mongopeek history
        mongopeek history --clear
    """
    settings: Settings = ctx.obj
    store = QueryHistory(settings.history_path, settings.history_size)

    if clear:
        store.clear()
        console.print("[green]History cleared[/green]")
        return

    entries = store.newest_first()
    if not entries:
        console.print("[yellow]No saved queries[/yellow]")
        return
    for number, entry in enumerate(entries, start=1):
        typer.echo(f"{number:>2} {entry}")
