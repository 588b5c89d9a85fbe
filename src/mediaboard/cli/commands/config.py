"""
Config Command

Create and inspect configuration files.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
import yaml

from mediaboard.cli.utils import console, load_config_from_cli
from mediaboard.core.config import ConfigManager

app = typer.Typer(help="Manage configuration files", no_args_is_help=True)


@app.command("init")
def config_init(
    path: Annotated[Path, typer.Argument(help="Where to write the configuration file")] = Path("mediaboard.yaml"),
    force: Annotated[bool, typer.Option("--force", "-f", help="Overwrite an existing file")] = False,
):
    """Write a configuration file with every default spelled out."""
    if path.exists() and not force:
        console.print(f"[red]{path} already exists[/red] (use --force to overwrite)")
        raise typer.Exit(1)

    ConfigManager().create_example_config(path)
    console.print(f"[green]Configuration written to {path}[/green]")


@app.command("show")
def config_show(
    config: Annotated[Optional[Path], typer.Option("--config", "-c", help="Configuration file path")] = None,
):
    """Print the effective configuration after files and environment are applied."""
    app_config = load_config_from_cli(config)
    data = app_config.model_dump(mode='json', exclude={'created'})
    console.print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), markup=False)
