"""Ledger file location, JSON codec and schema migrations.

The canonical (version 3) document looks like::

    {
      "version": 3,
      "transactions": {"2025-01-15": [{"category": "food", "amount": 10, "currency": "USD"}]},
      "settings": {"defaultInputCurrency": "USD", "defaultOutputCurrency": "USD"}
    }

Older files are upgraded on read, one version at a time:
- v1: {"settings": {"defaultCurrency": ...}, "<YYYY-MM>": {category: [usd_amount, ...]}}
- v2: {"settings": {...}, "<date>": {category: {currency: [amount, ...]}}}
"""

import os
from collections.abc import Callable
from decimal import Decimal
from pathlib import Path
from typing import Any

from accountant.dates import day_key, parse_day
from accountant.domain.models import (
    DEFAULT_CURRENCY,
    MAX_AMOUNT,
    CategoryName,
    Currency,
    DayKey,
    Ledger,
    Settings,
    Transaction,
    is_currency_code,
)

SCHEMA_VERSION = 3

SETTINGS_KEY = "settings"
TRANSACTIONS_KEY = "transactions"
VERSION_KEY = "version"


class StoreCorrupt(Exception):
    """Raised when ledger data cannot be decoded."""

    def __init__(self, reason: str, path: Path | None = None) -> None:
        where = f" in {path}" if path else ""
        super().__init__(f"Ledger data is corrupt{where}: {reason}")
        self.reason = reason
        self.path = path


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_ledger_path() -> Path:
    """Get the default ledger path (XDG compliant)."""
    return get_xdg_data_home() / "accountant" / "ledger.json"


def encode_amount(amount: Decimal) -> int | float:
    """Encode an amount as a JSON number, integers stay integers."""
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def decode_amount(value: Any) -> Decimal:
    """Decode a JSON number into a Decimal.

    Raises:
        StoreCorrupt: If the value is not a finite number below MAX_AMOUNT.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise StoreCorrupt(f"amount {value!r} is not a number")
    amount = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    if not amount.is_finite():
        raise StoreCorrupt(f"amount {value!r} is not finite")
    if abs(amount) >= MAX_AMOUNT:
        raise StoreCorrupt(f"amount {value!r} is too large")
    return amount


def _currency(value: Any, what: str) -> Currency:
    if not isinstance(value, str) or not is_currency_code(value.upper()):
        raise StoreCorrupt(f"{what} {value!r} is not a currency code")
    return Currency(value.upper())


def _normalize_date_key(key: str) -> DayKey:
    """Turn a stored date key into a day key; month keys map to the 1st."""
    candidate = f"{key}-01" if len(key) == 7 else key
    try:
        return day_key(parse_day(candidate))
    except ValueError as e:
        raise StoreCorrupt(f"invalid date key {key!r}") from e


def detect_schema_version(raw: Any) -> int:
    """Work out which schema version a decoded document uses.

    Args:
        raw: Decoded JSON document.

    Returns:
        Schema version number.

    Raises:
        StoreCorrupt: If the document matches no known shape.
    """
    if not isinstance(raw, dict):
        raise StoreCorrupt("top-level value is not an object")

    if VERSION_KEY in raw:
        version = raw[VERSION_KEY]
        if isinstance(version, bool) or not isinstance(version, int):
            raise StoreCorrupt(f"version {version!r} is not an integer")
        return version

    if TRANSACTIONS_KEY in raw:
        return 3

    shapes: set[int] = set()
    for key, categories in raw.items():
        if key == SETTINGS_KEY:
            continue
        if not isinstance(categories, dict):
            raise StoreCorrupt(f"entry {key!r} is not an object")
        for entries in categories.values():
            if isinstance(entries, list):
                shapes.add(1)
            elif isinstance(entries, dict):
                shapes.add(2)
            else:
                raise StoreCorrupt(f"entry {key!r} has an unrecognized shape")

    if len(shapes) > 1:
        raise StoreCorrupt("document mixes legacy schema shapes")
    return shapes.pop() if shapes else 2


def migrate_v1_to_v2(raw: dict[str, Any]) -> dict[str, Any]:
    """Wrap v1 per-category USD amount lists into per-currency maps."""
    migrated: dict[str, Any] = {}
    for key, value in raw.items():
        if key == SETTINGS_KEY:
            migrated[key] = value
            continue
        if key == VERSION_KEY:
            continue
        if not isinstance(value, dict):
            raise StoreCorrupt(f"entry {key!r} is not an object")
        migrated[key] = {category: {"USD": amounts} for category, amounts in value.items()}
    return migrated


def migrate_v2_to_v3(raw: dict[str, Any]) -> dict[str, Any]:
    """Flatten v2 category/currency maps into per-day transaction lists."""
    settings = raw.get(SETTINGS_KEY) or {}
    if not isinstance(settings, dict):
        raise StoreCorrupt("settings is not an object")

    legacy_default = settings.get("defaultCurrency")
    migrated_settings = {
        "defaultInputCurrency": settings.get("defaultInputCurrency") or legacy_default or DEFAULT_CURRENCY,
        "defaultOutputCurrency": settings.get("defaultOutputCurrency") or legacy_default or DEFAULT_CURRENCY,
    }

    transactions: dict[str, list[dict[str, Any]]] = {}
    for key, categories in raw.items():
        if key in (SETTINGS_KEY, VERSION_KEY):
            continue
        if not isinstance(categories, dict):
            raise StoreCorrupt(f"entry {key!r} is not an object")
        day = _normalize_date_key(key)
        for category, by_currency in categories.items():
            if not isinstance(by_currency, dict):
                raise StoreCorrupt(f"entry {key!r}/{category!r} is not a currency map")
            for currency, amounts in by_currency.items():
                if not isinstance(amounts, list):
                    raise StoreCorrupt(f"entry {key!r}/{category!r}/{currency!r} is not a list")
                transactions.setdefault(day, []).extend(
                    {"category": category, "amount": amount, "currency": currency} for amount in amounts
                )

    return {
        VERSION_KEY: 3,
        TRANSACTIONS_KEY: transactions,
        SETTINGS_KEY: migrated_settings,
    }


MIGRATIONS: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    1: migrate_v1_to_v2,
    2: migrate_v2_to_v3,
}


def upgrade_document(raw: Any) -> dict[str, Any]:
    """Upgrade a decoded document to the current schema version.

    Raises:
        StoreCorrupt: If the version is unknown or the document is malformed.
    """
    version = detect_schema_version(raw)
    if version > SCHEMA_VERSION or (version < SCHEMA_VERSION and version not in MIGRATIONS):
        raise StoreCorrupt(f"unsupported schema version {version}")

    document: dict[str, Any] = raw
    while version < SCHEMA_VERSION:
        document = MIGRATIONS[version](document)
        version += 1
    return document


def decode_settings(raw: Any) -> Settings:
    """Decode the settings block, defaulting missing currencies to USD."""
    if raw is None:
        return Settings()
    if not isinstance(raw, dict):
        raise StoreCorrupt("settings is not an object")

    input_currency = raw.get("defaultInputCurrency") or DEFAULT_CURRENCY
    output_currency = raw.get("defaultOutputCurrency") or DEFAULT_CURRENCY
    return Settings(
        default_input_currency=_currency(input_currency, "defaultInputCurrency"),
        default_output_currency=_currency(output_currency, "defaultOutputCurrency"),
    )


def decode_transaction(raw: Any) -> Transaction:
    """Decode one stored transaction.

    Raises:
        StoreCorrupt: If a field is missing or has the wrong type.
    """
    if not isinstance(raw, dict):
        raise StoreCorrupt(f"transaction {raw!r} is not an object")

    category = raw.get("category")
    if not isinstance(category, str) or not category:
        raise StoreCorrupt(f"transaction category {category!r} is not a string")

    return Transaction(
        category=CategoryName(category),
        amount=decode_amount(raw.get("amount")),
        currency=_currency(raw.get("currency"), "transaction currency"),
    )


def decode_ledger(raw: Any) -> Ledger:
    """Decode any supported document version into a Ledger.

    Zero amounts and empty days are dropped so every day key keeps at
    least one transaction.

    Raises:
        StoreCorrupt: If the document cannot be decoded.
    """
    document = upgrade_document(raw)

    stored = document.get(TRANSACTIONS_KEY) or {}
    if not isinstance(stored, dict):
        raise StoreCorrupt("transactions is not an object")

    transactions_by_date: dict[DayKey, list[Transaction]] = {}
    for key in sorted(stored):
        entries = stored[key]
        if not isinstance(entries, list):
            raise StoreCorrupt(f"transactions for {key!r} is not a list")
        day = _normalize_date_key(key)
        decoded = [txn for txn in map(decode_transaction, entries) if txn.amount != 0]
        if decoded:
            transactions_by_date.setdefault(day, []).extend(decoded)

    return Ledger(
        transactions_by_date=transactions_by_date,
        settings=decode_settings(document.get(SETTINGS_KEY)),
    )


def encode_ledger(ledger: Ledger) -> dict[str, Any]:
    """Encode a Ledger as a canonical JSON-ready document."""
    return {
        VERSION_KEY: SCHEMA_VERSION,
        TRANSACTIONS_KEY: {
            day: [
                {
                    "category": txn.category,
                    "amount": encode_amount(txn.amount),
                    "currency": txn.currency,
                }
                for txn in ledger.transactions_by_date[day]
            ]
            for day in sorted(ledger.transactions_by_date)
        },
        SETTINGS_KEY: {
            "defaultInputCurrency": ledger.settings.default_input_currency,
            "defaultOutputCurrency": ledger.settings.default_output_currency,
        },
    }
