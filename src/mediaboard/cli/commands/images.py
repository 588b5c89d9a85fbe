"""
Image Commands

Upload files, regenerate thumbnails and inspect stored images.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from mediaboard.application import UploadOutcome
from mediaboard.cli.utils import console, handle_error, open_application
from mediaboard.core.exceptions import MediaBoardError
from mediaboard.core.models import explode_tags


ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Configuration file path")]
VerboseOption = Annotated[Optional[bool], typer.Option("--verbose", help="Enable verbose output")]
DebugOption = Annotated[Optional[bool], typer.Option("--debug", help="Enable debug logging")]


def upload(
    file: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="File to upload")],
    tags: Annotated[Optional[str], typer.Option("--tags", "-t", help="Space-separated tags")] = None,
    source: Annotated[Optional[str], typer.Option("--source", "-s", help="Where the file came from")] = None,
    rating: Annotated[Optional[str], typer.Option("--rating", "-r", help="Rating to set on the new image")] = None,
    locked: Annotated[bool, typer.Option("--locked", help="Lock the new image")] = False,
    replace: Annotated[Optional[int], typer.Option("--replace", help="Replace the content of this image id")] = None,
    config: ConfigOption = None,
    verbose: VerboseOption = None,
    debug: DebugOption = None,
):
    """
    Upload a file into the media store.

    The original file is left in place; a copy is archived.

    [bold cyan]Examples:[/bold cyan]

    • Upload with tags: [green]mediaboard upload cat.jpg --tags "cat cute"[/green]
    • Replace image 12: [green]mediaboard upload better.png --replace 12[/green]
    """
    app = open_application(config, verbose, debug)

    metadata = {
        'filename': file.name,
        'tags': explode_tags(tags),
        'source': source,
        'rating': rating,
        'locked': locked,
        'replace': replace,
    }

    try:
        with tempfile.TemporaryDirectory(prefix="mediaboard-upload-") as workdir:
            staged = Path(workdir) / file.name
            shutil.copy2(file, staged)
            result = app.ingest(staged, metadata)
    except MediaBoardError as e:
        handle_error(e)
    finally:
        app.close()

    if result.outcome is UploadOutcome.HANDLED:
        verb = "Replaced" if replace is not None else "Stored"
        console.print(f"[green]{verb} image #{result.image_id}[/green] [dim]({result.hash}, {result.handled_by})[/dim]")
    elif result.outcome is UploadOutcome.REJECTED:
        console.print(f"[red]Upload rejected:[/red] {result.message}")
        raise typer.Exit(1)
    else:
        console.print(f"[yellow]{result.message}[/yellow]")
        raise typer.Exit(1)


def thumbnail(
    hash: Annotated[str, typer.Argument(help="Content hash of the stored file")],
    ext: Annotated[Optional[str], typer.Option("--ext", help="File type; looked up from the image record when omitted")] = None,
    force: Annotated[bool, typer.Option("--force", "-f", help="Regenerate even if a thumbnail exists")] = False,
    config: ConfigOption = None,
    verbose: VerboseOption = None,
    debug: DebugOption = None,
):
    """Generate the thumbnail for a stored file."""
    app = open_application(config, verbose, debug)
    try:
        result = app.regenerate_thumbnail(hash, ext=ext, force=force)
    except MediaBoardError as e:
        handle_error(e)
    finally:
        app.close()

    if result is None:
        console.print(f"[yellow]No handler supports files of type {ext!r}[/yellow]")
        raise typer.Exit(1)
    if not result:
        console.print(f"[red]Thumbnail failed ({result.status.value}):[/red] {result.message}")
        raise typer.Exit(1)

    console.print(f"[green]Thumbnail ready:[/green] {result.output} [dim]({result.engine or 'cached'})[/dim]")


def show(
    image_id: Annotated[int, typer.Argument(help="Image id")],
    config: ConfigOption = None,
    verbose: VerboseOption = None,
    debug: DebugOption = None,
):
    """Show a stored image record and the markup handlers produce for it."""
    app = open_application(config, verbose, debug)
    try:
        image = app.storage.find_image_by_id(image_id)
        if image is None:
            console.print(f"[red]No image with id {image_id}[/red]")
            raise typer.Exit(1)
        page = app.display(image)
    finally:
        app.close()

    table = Table(title=f"Image #{image.id}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in image.to_dict().items():
        if key == 'tags':
            value = ' '.join(value)
        table.add_row(key, "" if value is None else str(value))
    console.print(table)

    for block in page.blocks:
        console.print(f"[bold]{block.header}[/bold] [dim]({block.section}, {block.position})[/dim]")
        console.print(block.body, markup=False)
