"""Commands for viewing and changing currency settings."""

import sys

from rich.console import Console
from rich.markup import escape

from accountant.commands.common import exit_store_corrupt, open_assistant
from accountant.store import InvalidCurrency, StoreCorrupt

console = Console()


def currency_command(code: str | None = None) -> None:
    """Show or set the default output (reporting) currency."""
    store = open_assistant().store

    try:
        if code is None:
            console.print(f"Default output currency: [cyan]{store.get_default_currency()}[/cyan]")
            return
        currency = store.set_default_currency(code)
    except InvalidCurrency as e:
        console.print(f"[red]{escape(str(e))}[/red]", style="bold")
        sys.exit(1)
    except StoreCorrupt as e:
        exit_store_corrupt(e)

    console.print(f"[green]✓[/green] Default output currency set to {currency}")


def input_currency_command(code: str | None = None) -> None:
    """Show or set the currency assumed when a message names none."""
    store = open_assistant().store

    try:
        if code is None:
            console.print(f"Default input currency: [cyan]{store.get_default_input_currency()}[/cyan]")
            return
        currency = store.set_default_input_currency(code)
    except InvalidCurrency as e:
        console.print(f"[red]{escape(str(e))}[/red]", style="bold")
        sys.exit(1)
    except StoreCorrupt as e:
        exit_store_corrupt(e)

    console.print(f"[green]✓[/green] Default input currency set to {currency}")
