"""Commands for recording expenses and viewing monthly totals."""

import sys
from datetime import date

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from accountant.commands.common import exit_store_corrupt, open_assistant
from accountant.dates import month_key, month_label, parse_day, parse_month
from accountant.domain.models import Month
from accountant.domain.parser import FORMAT_HINT, ParseError
from accountant.domain.report import MonthlySummary, format_amount
from accountant.store import LedgerError, StoreCorrupt

console = Console()


def resolve_day(day: str | None) -> date:
    """Resolve the booking day, defaulting to today.

    Raises:
        SystemExit: If the day is not YYYY-MM-DD.
    """
    if day is None:
        return date.today()
    try:
        return parse_day(day)
    except ValueError:
        console.print(f"[red]Invalid date '{escape(day)}'. Use YYYY-MM-DD.[/red]", style="bold")
        sys.exit(1)


def resolve_month(month: str | None) -> Month:
    """Resolve the report month, defaulting to the current one.

    Raises:
        SystemExit: If the month is not YYYY-MM.
    """
    if month is None:
        return month_key(date.today())
    try:
        return parse_month(month)
    except ValueError:
        console.print(f"[red]Invalid month '{escape(month)}'. Use YYYY-MM.[/red]", style="bold")
        sys.exit(1)


def add_command(words: list[str], day: str | None = None) -> None:
    """Record an expense from message-style text."""
    text = " ".join(words)
    booking_day = resolve_day(day)
    assistant = open_assistant()

    try:
        result = assistant.record_expense(text, booking_day)
    except ParseError:
        console.print(f"[red]{FORMAT_HINT}[/red]", style="bold")
        sys.exit(1)
    except LedgerError as e:
        console.print(f"[red]{escape(str(e))}[/red]", style="bold")
        sys.exit(1)
    except StoreCorrupt as e:
        exit_store_corrupt(e)

    first_line, _, rest = result.text.partition("\n")
    console.print(f"[green]✓[/green] {escape(first_line)}")
    if rest:
        console.print(rest, markup=False, highlight=False)


def render_summary(summary: MonthlySummary) -> None:
    """Render a monthly summary as a table.

    Args:
        summary: Summary to render.
    """
    label = month_label(summary.month)
    if not summary.by_category:
        console.print(f"[yellow]No expenses recorded for {label}[/yellow]")
        return

    table = Table(title=f"Expenses for {label}")
    table.add_column("Category", style="magenta")
    table.add_column("Amount", justify="right")

    for category in sorted(summary.by_category):
        by_currency = summary.by_category[category]
        amounts = " + ".join(f"{format_amount(amount)} {currency}" for currency, amount in by_currency.items())
        table.add_row(escape(category), amounts)

    console.print(table)
    console.print(f"[bold]Total:[/bold] {summary.total:,.2f} {summary.output_currency}")

    if summary.is_partial:
        skipped = ", ".join(summary.skipped_currencies)
        console.print(f"[yellow]Not included in total (rate unavailable): {skipped}[/yellow]")


def report_command(month: str | None = None) -> None:
    """Show the monthly breakdown and converted total."""
    report_month = resolve_month(month)
    assistant = open_assistant()

    try:
        summary = assistant.summarize(report_month)
    except StoreCorrupt as e:
        exit_store_corrupt(e)

    render_summary(summary)
