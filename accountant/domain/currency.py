"""Currency conversion on top of a base-relative rate source.

A rate provider answers one question: how many units of the base currency
one unit of a given currency is worth. Cross rates are derived from two such
lookups. Nothing is retried, and rates are only reused within one request
(see CurrencyConverter.pinned).
"""

from typing import Protocol

from accountant.domain.models import DEFAULT_CURRENCY, Currency


class RateUnavailable(Exception):
    """Raised when an exchange rate cannot be obtained."""

    def __init__(self, currency: str, reason: str) -> None:
        super().__init__(f"Rate for {currency} unavailable: {reason}")
        self.currency = currency
        self.reason = reason


class RateProvider(Protocol):
    """Source of latest spot rates relative to a base currency."""

    def rate_to_base(self, currency: Currency) -> float:
        """Return units of base currency per 1 unit of ``currency``."""
        ...


class PinnedRates:
    """Provider wrapper that looks up each currency at most once.

    Failures are remembered too, so every use within one request agrees.
    """

    def __init__(self, provider: RateProvider) -> None:
        self.provider = provider
        self._rates: dict[Currency, float | RateUnavailable] = {}

    def rate_to_base(self, currency: Currency) -> float:
        if currency not in self._rates:
            try:
                self._rates[currency] = self.provider.rate_to_base(currency)
            except RateUnavailable as e:
                self._rates[currency] = e

        result = self._rates[currency]
        if isinstance(result, RateUnavailable):
            raise result
        return result


class CurrencyConverter:
    """Convert amounts between currencies using a RateProvider."""

    def __init__(self, provider: RateProvider, base: Currency = DEFAULT_CURRENCY) -> None:
        self.provider = provider
        self.base = Currency(base.upper())

    def pinned(self) -> "CurrencyConverter":
        """Get a converter that reuses each rate it fetches, for one request."""
        return CurrencyConverter(PinnedRates(self.provider), self.base)

    def rate_to_base(self, currency: Currency) -> float:
        """Get the rate from ``currency`` to the base currency.

        Raises:
            RateUnavailable: If the provider cannot supply a usable rate.
        """
        code = Currency(currency.upper())
        if code == self.base:
            return 1.0

        rate = self.provider.rate_to_base(code)
        if rate <= 0:
            raise RateUnavailable(code, f"non-positive rate {rate}")
        return rate

    def rate(self, from_currency: Currency, to_currency: Currency) -> float:
        """Get the multiplier that turns an amount in ``from_currency`` into ``to_currency``."""
        if from_currency.upper() == to_currency.upper():
            return 1.0
        return self.rate_to_base(from_currency) / self.rate_to_base(to_currency)

    def convert(self, amount: float, from_currency: Currency, to_currency: Currency) -> float:
        """Convert an amount between currencies.

        Same-currency conversion returns ``amount`` unchanged without
        touching the provider.

        Raises:
            RateUnavailable: If either rate cannot be obtained.
        """
        if from_currency.upper() == to_currency.upper():
            return amount
        return amount * self.rate(from_currency, to_currency)
