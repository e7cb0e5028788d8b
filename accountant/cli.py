"""CLI entry point for accountant."""

import typer

from accountant.commands.admin import backup_command, dump_command, init_command, restore_command
from accountant.commands.chat import chat_command
from accountant.commands.expenses import add_command, report_command
from accountant.commands.settings import currency_command, input_currency_command
from accountant.logging_utils import configure_logging

app = typer.Typer(
    name="accountant",
    help="Personal expense tracker with multi-currency monthly totals",
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Personal expense tracker with multi-currency monthly totals."""
    configure_logging(verbose)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing ledger and config"),
) -> None:
    """Initialize the ledger and configuration."""
    init_command(force)


@app.command()
def add(
    text: list[str] = typer.Argument(..., help='Expense, e.g. "1000 shop" or "50 EUR food"'),
    day: str = typer.Option(None, "--date", help="Booking date (YYYY-MM-DD, default: today)"),
) -> None:
    """Record an expense and show the month's running total."""
    add_command(text, day)


@app.command()
def report(
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
) -> None:
    """Show spending by category and the converted monthly total."""
    report_command(month)


@app.command()
def currency(
    code: str = typer.Argument(None, help="New default output currency (e.g. USD, EUR, RSD)"),
) -> None:
    """Show or set the currency monthly totals are reported in."""
    currency_command(code)


@app.command(name="input-currency")
def input_currency(
    code: str = typer.Argument(None, help="New default input currency (e.g. USD, EUR, RSD)"),
) -> None:
    """Show or set the currency used when an expense names none."""
    input_currency_command(code)


@app.command()
def dump(
    output: str = typer.Option(None, "--output", "-o", help="File to write (default: stdout)"),
) -> None:
    """Export the ledger as JSON."""
    dump_command(output)


@app.command()
def restore(
    path: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Replace without asking"),
) -> None:
    """Replace the ledger with an exported JSON file."""
    restore_command(path, yes)


@app.command()
def backup(
    output_dir: str = typer.Option(None, "--output", "-o", help="Backup directory (default: ~/.accountant/backups)"),
) -> None:
    """Backup your ledger and configuration files."""
    backup_command(output_dir)


@app.command()
def chat(
    download_dir: str = typer.Option(None, "--downloads", help="Where /dump_db saves db.json (default: cwd)"),
) -> None:
    """Talk to the assistant the way a chat client would."""
    chat_command(download_dir)


if __name__ == "__main__":
    app()
