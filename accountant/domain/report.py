"""Pure functions for monthly aggregation and summary formatting.

This module contains the functional core for reporting:
- Raw per-category, per-currency sums without conversion
- A grand total converted into the reporting currency
- Plain-text rendering of the result

Conversion goes through a CurrencyConverter handed in by the caller.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from accountant.dates import month_label
from accountant.domain.currency import CurrencyConverter, RateUnavailable
from accountant.domain.models import CategoryName, Currency, Month, Transaction

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass(frozen=True)
class MonthlySummary:
    """Immutable monthly summary.

    ``by_category`` keeps original currencies. ``total`` only includes
    subtotals that could be converted; the rest are listed in
    ``skipped_currencies``.
    """

    month: Month
    output_currency: Currency
    total: float
    by_category: dict[CategoryName, dict[Currency, Decimal]]
    skipped_currencies: list[Currency] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.skipped_currencies)


def round_money(value: float) -> float:
    """Round to 2 decimal places, halves away from zero.

    Args:
        value: Amount to round.

    Returns:
        Rounded amount.
    """
    return float(Decimal(repr(value)).quantize(CENT, rounding=ROUND_HALF_UP))


def format_amount(amount: Decimal) -> str:
    """Format an original-currency amount: integers bare, others with 2 places."""
    if amount == amount.to_integral_value():
        return str(int(amount))
    return f"{amount:.2f}"


def group_by_category(
    transactions: Iterable[Transaction],
) -> dict[CategoryName, dict[Currency, Decimal]]:
    """Sum raw amounts per (category, currency) pair.

    Args:
        transactions: Transactions to aggregate, in display order.

    Returns:
        Nested dictionary category -> currency -> summed amount.
    """
    grouped: dict[CategoryName, dict[Currency, Decimal]] = {}
    for txn in transactions:
        by_currency = grouped.setdefault(txn.category, {})
        by_currency[txn.currency] = by_currency.get(txn.currency, Decimal(0)) + txn.amount
    return grouped


def summarize_month(
    month: Month,
    transactions: Iterable[Transaction],
    output_currency: Currency,
    converter: CurrencyConverter,
) -> MonthlySummary:
    """Build the monthly summary in ``output_currency``.

    Subtotals whose currency cannot be converted are left out of the total
    and reported in ``skipped_currencies``; the summary is still produced.

    Args:
        month: Month being summarized (YYYY-MM).
        transactions: The month's transactions.
        output_currency: Reporting currency.
        converter: Converter used for the grand total.

    Returns:
        MonthlySummary with breakdown and converted total.
    """
    by_category = group_by_category(transactions)

    total = 0.0
    skipped: list[Currency] = []
    for category, by_currency in by_category.items():
        for currency, subtotal in by_currency.items():
            try:
                total += converter.convert(float(subtotal), currency, output_currency)
            except RateUnavailable as e:
                logger.warning("Skipping %s %s in '%s' from total: %s", subtotal, currency, category, e)
                if currency not in skipped:
                    skipped.append(currency)

    return MonthlySummary(
        month=month,
        output_currency=output_currency,
        total=round_money(total),
        by_category=by_category,
        skipped_currencies=skipped,
    )


def format_category_line(category: CategoryName, by_currency: dict[Currency, Decimal]) -> str:
    """Render one breakdown line, e.g. "food: 1000 RSD + 10 USD"."""
    parts = [f"{format_amount(amount)} {currency}" for currency, amount in by_currency.items()]
    return f"{category}: {' + '.join(parts)}"


def format_added_line(
    amount: Decimal,
    currency: Currency,
    category: CategoryName,
    output_currency: Currency,
    converted: float | None,
) -> str:
    """Render the confirmation line for a newly added expense."""
    line = f"Added {format_amount(amount)} {currency}"
    if currency != output_currency:
        if converted is None:
            line += " (conversion unavailable)"
        else:
            line += f" (≈ {round_money(converted):.2f} {output_currency})"
    return f"{line} to category '{category}'"


def format_summary(summary: MonthlySummary, added_line: str | None = None) -> str:
    """Render a summary as plain text.

    Args:
        summary: Summary to render.
        added_line: Optional confirmation line placed first.

    Returns:
        Multi-line plain-text summary.
    """
    lines: list[str] = []
    if added_line:
        lines.append(added_line)

    label = month_label(summary.month)
    if not summary.by_category:
        lines.append(f"No expenses recorded for {label}")
        return "\n".join(lines)

    lines.append(f"Total for {label}: {summary.total:.2f} {summary.output_currency}")
    for category in sorted(summary.by_category):
        lines.append(format_category_line(category, summary.by_category[category]))

    if summary.is_partial:
        skipped = ", ".join(summary.skipped_currencies)
        lines.append(f"Not included in total (rate unavailable): {skipped}")

    return "\n".join(lines)
