#!/usr/bin/env python3
"""
Main CLI entry point for mongopeek
"""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from mongopeek import __version__
from mongopeek.commands.browse import app as browse_app
from mongopeek.commands.core import app as core_app
from mongopeek.commands.history import app as history_app
from mongopeek.config.settings import load_settings
from mongopeek.exceptions import ConfigurationError
from mongopeek.utils.logging_utils import setup_logging
from mongopeek.utils.output import err_console


def version():
    """Show mongopeek version"""
    typer.echo(f"mongopeek version {__version__}")


def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
    config_dir: Optional[Path] = typer.Option(
        None, "--config-dir", envvar="MONGOPEEK_CONFIG_DIR", help="Configuration directory"
    ),
):
    """
    mongopeek - compile shell-style queries and browse documents

    [bold]Examples:[/bold]

    Compile a filter:
        [cyan]mongopeek compile '{ _id: ObjectId("507f1f77bcf86cd799439011") }'[/cyan]

    Browse a file of documents:
        [cyan]mongopeek browse users.json --filter '{ age: { $gt: 30 } }'[/cyan]
    """
    try:
        settings = load_settings(config_dir)
    except ConfigurationError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    setup_logging("DEBUG" if verbose else settings.log_level, settings.log_path)
    ctx.obj = settings


def create_app() -> typer.Typer:
    """Create and configure the main CLI application"""
    app = typer.Typer(rich_markup_mode="rich", no_args_is_help=True)
    app.callback()(main)
    for module_app in (core_app, browse_app, history_app):
        app.registered_commands.extend(module_app.registered_commands)
    app.command()(version)
    return app


# Create the app instance
app = create_app()


def run():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    run()
