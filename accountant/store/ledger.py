"""File-backed ledger store.

Every mutation reads the whole file, applies the change and rewrites the
whole file. Writes go to a temporary sibling and are moved into place with
os.replace, so readers see either the old or the new ledger.

The store is not thread-safe; callers must serialize access.
"""

import json
import logging
import os
import tempfile
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

from accountant.dates import day_key, month_of
from accountant.domain.models import (
    MAX_AMOUNT,
    CategoryName,
    Currency,
    Ledger,
    Month,
    Settings,
    Transaction,
    is_currency_code,
)
from accountant.store.schema import StoreCorrupt, decode_ledger, encode_ledger, get_ledger_path

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base class for rejected ledger operations."""


class ZeroAmount(LedgerError):
    """Raised when appending a transaction with a zero amount."""

    def __init__(self) -> None:
        super().__init__("Amount must not be zero")


class NegativeAmount(LedgerError):
    """Raised when appending a transaction with a negative amount."""

    def __init__(self, amount: Decimal) -> None:
        super().__init__(f"Amount must be positive, got {amount}")
        self.amount = amount


class AmountTooLarge(LedgerError):
    """Raised when appending an amount at or above MAX_AMOUNT."""

    def __init__(self, amount: Decimal) -> None:
        super().__init__(f"Amount must be below {MAX_AMOUNT:,}, got {amount}")
        self.amount = amount


class InvalidCurrency(LedgerError):
    """Raised when a currency setting is not a 3-letter code."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid currency code '{value}'. Use a 3-letter code such as USD, EUR or RSD.")
        self.value = value


def normalize_currency(value: str) -> Currency:
    """Upper-case and shape-check a currency code.

    Raises:
        InvalidCurrency: If the value is not 3 letters.
    """
    code = value.strip().upper()
    if not is_currency_code(code):
        raise InvalidCurrency(value)
    return Currency(code)


class LedgerStore:
    """Persisted ledger of transactions and settings."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path if path is not None else get_ledger_path()

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Ledger:
        """Read the ledger from disk.

        Returns:
            Ledger snapshot; empty with default settings if the file is missing or empty.

        Raises:
            StoreCorrupt: If the file cannot be decoded.
        """
        if not self.path.exists():
            return Ledger()

        data = self.path.read_bytes()
        if not data.strip():
            return Ledger()

        try:
            raw = json.loads(data, parse_float=Decimal)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StoreCorrupt(f"invalid JSON ({e})", self.path) from e

        try:
            return decode_ledger(raw)
        except StoreCorrupt as e:
            raise StoreCorrupt(e.reason, self.path) from e

    def _write(self, ledger: Ledger) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(encode_ledger(ledger), indent=2, ensure_ascii=False)

        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("Wrote ledger to %s", self.path)

    def initialize(self) -> None:
        """Write an empty ledger with default settings, replacing any file."""
        self._write(Ledger())

    def append(self, day: date, category: CategoryName, amount: Decimal, currency: Currency) -> Transaction:
        """Append a transaction and persist the ledger.

        Args:
            day: Calendar day of the expense.
            category: Expense category.
            amount: Amount in ``currency``.
            currency: Currency the amount was entered in.

        Returns:
            The stored Transaction.

        Raises:
            ZeroAmount: If amount is zero; nothing is written.
            NegativeAmount: If amount is negative; nothing is written.
            AmountTooLarge: If amount is at or above MAX_AMOUNT; nothing is written.
            StoreCorrupt: If the existing file cannot be decoded.
        """
        if amount == 0:
            raise ZeroAmount()
        if amount < 0:
            raise NegativeAmount(amount)
        if amount >= MAX_AMOUNT:
            raise AmountTooLarge(amount)

        transaction = Transaction(category=category, amount=amount, currency=Currency(currency.upper()))

        ledger = self.load()
        ledger.transactions_by_date.setdefault(day_key(day), []).append(transaction)
        self._write(ledger)

        logger.info("Recorded %s %s in '%s' on %s", amount, transaction.currency, category, day)
        return transaction

    def monthly_transactions(self, month: Month) -> list[Transaction]:
        """Get a month's transactions, ordered by day then insertion.

        Raises:
            StoreCorrupt: If the file cannot be decoded.
        """
        ledger = self.load()
        return [
            txn
            for key in sorted(ledger.transactions_by_date)
            if month_of(key) == month
            for txn in ledger.transactions_by_date[key]
        ]

    def get_settings(self) -> Settings:
        return self.load().settings

    def _update_settings(self, **changes: Currency) -> None:
        ledger = self.load()
        ledger.settings = Settings(
            default_input_currency=changes.get("default_input_currency", ledger.settings.default_input_currency),
            default_output_currency=changes.get("default_output_currency", ledger.settings.default_output_currency),
        )
        self._write(ledger)

    def get_default_currency(self) -> Currency:
        """Get the default output (reporting) currency."""
        return self.get_settings().default_output_currency

    def set_default_currency(self, currency: str) -> Currency:
        """Set the default output (reporting) currency.

        Raises:
            InvalidCurrency: If the code is not 3 letters.
        """
        code = normalize_currency(currency)
        self._update_settings(default_output_currency=code)
        return code

    def get_default_input_currency(self) -> Currency:
        """Get the currency assumed for messages that name none."""
        return self.get_settings().default_input_currency

    def set_default_input_currency(self, currency: str) -> Currency:
        """Set the currency assumed for messages that name none.

        Raises:
            InvalidCurrency: If the code is not 3 letters.
        """
        code = normalize_currency(currency)
        self._update_settings(default_input_currency=code)
        return code

    def dump(self) -> dict[str, Any]:
        """Get the full ledger as a canonical JSON-ready document."""
        return encode_ledger(self.load())

    def restore(self, snapshot: Any) -> Ledger:
        """Replace the entire ledger with a snapshot.

        Legacy snapshot versions are upgraded before writing.

        Raises:
            StoreCorrupt: If the snapshot cannot be decoded; nothing is written.
        """
        ledger = decode_ledger(snapshot)
        self._write(ledger)
        logger.info("Restored ledger with %d day(s) of transactions", len(ledger.transactions_by_date))
        return ledger

    def dump_bytes(self) -> bytes:
        return json.dumps(self.dump(), indent=2, ensure_ascii=False).encode("utf-8")

    def restore_bytes(self, data: bytes) -> Ledger:
        """Replace the ledger with an uploaded JSON file.

        Raises:
            StoreCorrupt: If the bytes are not a valid ledger document.
        """
        try:
            snapshot = json.loads(data, parse_float=Decimal)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StoreCorrupt(f"invalid JSON ({e})") from e
        return self.restore(snapshot)
