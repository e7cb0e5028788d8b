"""Helpers shared by CLI commands."""

import sys
import tomllib
from typing import NoReturn

from rich.console import Console
from rich.markup import escape

from accountant.assistant import Assistant, create_assistant
from accountant.config import get_app_config, get_config_path
from accountant.store import StoreCorrupt

console = Console()


def open_assistant() -> Assistant:
    """Build the assistant from the user's configuration.

    Raises:
        SystemExit: If the config file is invalid.
    """
    try:
        config = get_app_config()
    except (tomllib.TOMLDecodeError, ValueError) as e:
        console.print(f"[red]Invalid config file {get_config_path()}: {escape(str(e))}[/red]", style="bold")
        sys.exit(1)
    return create_assistant(config)


def exit_store_corrupt(error: StoreCorrupt) -> NoReturn:
    """Report an unreadable ledger and exit."""
    console.print(f"[red]{escape(str(error))}[/red]", style="bold")
    console.print("[yellow]Fix the file or use 'accountant restore <file>' to replace it.[/yellow]")
    sys.exit(1)
