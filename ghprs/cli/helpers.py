# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Shared helper functions for CLI commands
"""

from typing import Any, Dict, Optional

import click
from rich.console import Console

from ghprs.storage import LocalStore
from ghprs.utils.config import Settings, load_settings

console = Console()


def print_success(message: str) -> None:
    """Print a standardized success message."""
    console.print(f'\n  [green]✓[/green] {message}\n')


def print_error(message: str) -> None:
    """Print a standardized error message."""
    console.print(f'\n  [red]✗[/red] {message}\n')


def print_warning(message: str) -> None:
    """Print a standardized warning message."""
    console.print(f'\n  [yellow]![/yellow] {message}\n')


def resolve_settings(overrides: Optional[Dict[str, Any]] = None) -> Settings:
    """Load settings, turning conversion errors into click usage errors."""
    try:
        return load_settings(overrides)
    except ValueError as e:
        raise click.UsageError(str(e))


def open_store(settings: Settings) -> LocalStore:
    return LocalStore(settings.db_path, policy=settings.duplicate_policy)
