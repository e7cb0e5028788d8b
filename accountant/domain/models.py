"""Domain type definitions for accountant.

These NewTypes provide semantic clarity and help with type checking:
- Currency: ISO-4217-like 3-letter code (e.g., "USD")
- Month: Month in YYYY-MM format
- DayKey: Calendar day in YYYY-MM-DD format
- CategoryName: Free-text expense category
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import NewType

# Currency codes are always 3 uppercase letters
Currency = NewType("Currency", str)

# Month is always in YYYY-MM format (e.g., "2025-01")
Month = NewType("Month", str)

# Ledger entries are keyed by day (e.g., "2025-01-15")
DayKey = NewType("DayKey", str)

# Category name as typed by the user
CategoryName = NewType("CategoryName", str)

DEFAULT_CURRENCY = Currency("USD")

# Amounts must stay below this so sums convert to finite floats
MAX_AMOUNT = Decimal(10) ** 15

CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


def is_currency_code(value: str) -> bool:
    """Check whether a string has the shape of a currency code."""
    return bool(CURRENCY_PATTERN.match(value))


@dataclass(frozen=True)
class Transaction:
    """Immutable expense record, amount kept in its original currency."""

    category: CategoryName
    amount: Decimal
    currency: Currency


@dataclass(frozen=True)
class Settings:
    """Immutable ledger settings."""

    default_input_currency: Currency = DEFAULT_CURRENCY
    default_output_currency: Currency = DEFAULT_CURRENCY


@dataclass
class Ledger:
    """All persisted state: transactions grouped by day plus settings."""

    transactions_by_date: dict[DayKey, list[Transaction]] = field(default_factory=dict)
    settings: Settings = field(default_factory=Settings)
