"""Ledger store layer - provides persistence for the application.

This module re-exports the public store API for easy importing.
"""

from accountant.store.ledger import (
    AmountTooLarge,
    InvalidCurrency,
    LedgerError,
    LedgerStore,
    NegativeAmount,
    ZeroAmount,
    normalize_currency,
)
from accountant.store.schema import (
    SCHEMA_VERSION,
    StoreCorrupt,
    decode_ledger,
    detect_schema_version,
    encode_ledger,
    get_ledger_path,
)

__all__ = [
    # Schema
    "SCHEMA_VERSION",
    "StoreCorrupt",
    "decode_ledger",
    "detect_schema_version",
    "encode_ledger",
    "get_ledger_path",
    # Store
    "AmountTooLarge",
    "InvalidCurrency",
    "LedgerError",
    "LedgerStore",
    "NegativeAmount",
    "ZeroAmount",
    "normalize_currency",
]
