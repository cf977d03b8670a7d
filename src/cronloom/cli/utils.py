"""Utility functions for cronloom CLI."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import typer
from rich.markup import escape

from cronloom.cli import console
from cronloom.config import ConfigError, load_persistence_options


def setup_logging(log_file: Path | None = None, debug: bool = False) -> None:
    """Set up logging for a foreground scheduler.

    Args:
        log_file: Write to this file instead of stderr.
        debug: Enable debug logging.
    """
    level = logging.DEBUG if debug else logging.INFO
    handler: logging.Handler = (
        logging.FileHandler(log_file) if log_file else logging.StreamHandler()
    )
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[handler],
    )


def resolve_state_file(state_file: Path | None) -> Path:
    """Pick the state file: explicit path, else the configured one.

    Raises:
        typer.Exit: If the configuration cannot be read.
    """
    if state_file is not None:
        return state_file
    try:
        return Path(load_persistence_options().file_path)
    except ConfigError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1)


def format_datetime(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M:%S")
