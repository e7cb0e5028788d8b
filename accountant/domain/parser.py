"""Pure functions for parsing free-text expense messages.

Accepted messages:
- "<amount> <CCC> <category>" e.g. "100.25 EUR shop"
- "<amount> <category>" e.g. "1000 shop", currency falls back to the default

Decimal amounts are truncated (not rounded) to 2 fractional digits.
"""

import re
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal
from enum import Enum

from accountant.domain.models import MAX_AMOUNT, CategoryName, Currency

_WITH_CURRENCY = re.compile(r"^(\S+)\s+([A-Z]{3})\s+(.+)$")
_WITHOUT_CURRENCY = re.compile(r"^(\S+)\s+(.+)$")
_AMOUNT = re.compile(r"^[0-9]+(?:\.[0-9]+)?$")

CENT = Decimal("0.01")

FORMAT_HINT = "Invalid message format. Should be: <amount> <category> or <amount> <currency> <category>"


class ParseErrorReason(str, Enum):
    """Why a message could not be parsed."""

    MALFORMED_AMOUNT = "malformed_amount"
    MALFORMED_FORMAT = "malformed_format"


class ParseError(ValueError):
    """Raised when a message is not a valid expense entry."""

    def __init__(self, reason: ParseErrorReason, message: str = FORMAT_HINT) -> None:
        super().__init__(message)
        self.reason = reason


@dataclass(frozen=True)
class ParsedExpense:
    """Immutable expense intent extracted from a message."""

    amount: Decimal
    category: CategoryName
    currency: Currency
    explicit_currency: bool


def parse_amount(raw: str) -> Decimal:
    """Parse an amount token, truncating decimals to cents.

    Args:
        raw: Amount token such as "1000" or "127.999".

    Returns:
        Amount as Decimal. Integers keep no fractional part.

    Raises:
        ParseError: If the token is not an unsigned number below MAX_AMOUNT.
    """
    if not _AMOUNT.match(raw):
        raise ParseError(ParseErrorReason.MALFORMED_AMOUNT, f"Invalid amount '{raw}'")

    amount = Decimal(raw)
    if amount >= MAX_AMOUNT:
        raise ParseError(ParseErrorReason.MALFORMED_AMOUNT, f"Amount '{raw}' is too large")
    if "." not in raw:
        return amount
    return amount.quantize(CENT, rounding=ROUND_DOWN)


def _looks_like_amount(token: str) -> bool:
    return token[:1].isdigit()


def parse_expense(text: str, default_currency: Currency) -> ParsedExpense:
    """Parse an expense message.

    Args:
        text: Raw message text.
        default_currency: Currency used when the message names none.

    Returns:
        ParsedExpense with amount, category and currency.

    Raises:
        ParseError: MALFORMED_FORMAT when no pattern matches,
            MALFORMED_AMOUNT when the leading number is not valid.
    """
    message = text.strip()

    match = _WITH_CURRENCY.match(message)
    if match and _looks_like_amount(match.group(1)):
        amount = parse_amount(match.group(1))
        return ParsedExpense(
            amount=amount,
            category=CategoryName(match.group(3).strip()),
            currency=Currency(match.group(2)),
            explicit_currency=True,
        )

    match = _WITHOUT_CURRENCY.match(message)
    if not match or not _looks_like_amount(match.group(1)):
        raise ParseError(ParseErrorReason.MALFORMED_FORMAT)

    amount = parse_amount(match.group(1))
    return ParsedExpense(
        amount=amount,
        category=CategoryName(match.group(2).strip()),
        currency=default_currency,
        explicit_currency=False,
    )
