#!/usr/bin/env python3
"""
mediaboard CLI Main Application

Typer-based command-line interface for uploading media, regenerating
thumbnails and inspecting the installed extensions.
"""

import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from mediaboard.cli import __version__
from mediaboard.cli.commands import config, images
from mediaboard.cli.utils import console, open_application

app = typer.Typer(
    name="mediaboard",
    help="Pluggable media store with extension-driven ingestion and thumbnailing",
    context_settings={"help_option_names": ["-h", "--help"]},
    rich_markup_mode="rich",
    no_args_is_help=True,
)

app.command("upload")(images.upload)
app.command("thumbnail")(images.thumbnail)
app.command("show")(images.show)
app.add_typer(config.app, name="config", help="Manage configuration files")


def version_callback(value: bool):
    """Show version information."""
    if value:
        console.print(f"[bold cyan]mediaboard[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def app_callback(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version information and exit"
    ),
):
    """
    mediaboard - pluggable media store

    [bold]Quick Start:[/bold]

    • Write a config: [cyan]mediaboard config init mediaboard.yaml[/cyan]
    • Upload a file: [cyan]mediaboard upload picture.png --tags "cat cute"[/cyan]
    • Inspect it: [cyan]mediaboard show 1[/cyan]
    """


@app.command("extensions")
def list_extensions(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Configuration file path")] = None,
):
    """List registered extensions in dispatch order."""
    application = open_application(config_file)
    try:
        table = Table(title="Extensions")
        table.add_column("Name", style="cyan")
        table.add_column("Priority", justify="right")
        table.add_column("Live")
        table.add_column("Theme")
        table.add_column("Source", style="dim")

        for extension in application.extensions:
            entry = application.registry.get(extension.name)
            table.add_row(
                extension.name,
                str(extension.get_priority()),
                "[green]yes[/green]" if extension.is_live() else "[red]no[/red]",
                type(extension.theme).__name__ if extension.theme is not None else "-",
                entry.source if entry else "-",
            )
        console.print(table)

        disabled = [e.name for e in application.registry.entries()
                    if e.name in application.config.disabled_extensions or not e.enabled]
        if disabled:
            console.print(f"[dim]Disabled: {', '.join(disabled)}[/dim]")
    finally:
        application.close()


def main():
    """Entry point for the mediaboard console script."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(1)


if __name__ == "__main__":
    main()
