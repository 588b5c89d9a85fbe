"""
CLI Utilities

Shared helpers for the command line: console output, logging setup,
configuration loading and error display.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.panel import Panel

from mediaboard.application import Application, build_application
from mediaboard.core.config import AppConfig, ConfigManager
from mediaboard.core.exceptions import MediaBoardError

console = Console()


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Set up logging configuration for the application."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def handle_error(error: MediaBoardError) -> None:
    """Show an error with its recovery suggestions and exit."""
    console.print(Panel(
        f"[red]{error.get_user_message()}[/red]",
        title="[red]Error[/red]",
        border_style="red"
    ))
    raise typer.Exit(1)


def load_config_from_cli(
    config_file: Optional[Path] = None,
    cli_args: Optional[Dict[str, Any]] = None
) -> AppConfig:
    """
    Load configuration and configure logging from it.

    Raises:
        typer.Exit: If configuration is invalid
    """
    manager = ConfigManager(config_file=config_file)
    try:
        config = manager.load_config(cli_args=cli_args or {})
    except MediaBoardError as e:
        handle_error(e)

    setup_logging(config.verbose, config.debug)

    for warning in manager.validate_config(config):
        console.print(f"[yellow]Warning:[/yellow] {warning}")

    return config


def open_application(
    config_file: Optional[Path] = None,
    verbose: Optional[bool] = None,
    debug: Optional[bool] = None
) -> Application:
    """Load configuration and assemble the application, exiting on failure."""
    config = load_config_from_cli(config_file, {'verbose': verbose, 'debug': debug})
    try:
        return build_application(config)
    except MediaBoardError as e:
        handle_error(e)
