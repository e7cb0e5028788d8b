"""Domain models and types for accountant.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from accountant.domain.models import CategoryName, Currency, DayKey, Ledger, Month, Settings, Transaction

__all__ = ["CategoryName", "Currency", "DayKey", "Ledger", "Month", "Settings", "Transaction"]
