"""Exchange rate API interactions."""

import logging

import requests

from accountant.domain.currency import RateUnavailable
from accountant.domain.models import DEFAULT_CURRENCY, Currency

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.exchangerate-api.com/v4/latest/"
DEFAULT_TIMEOUT = 10.0


class ExchangeRateClient:
    """Latest spot rates from an exchangerate-api style endpoint.

    The endpoint is queried per currency: ``GET {base_url}{CURRENCY}``
    returns ``{"rates": {code: units_per_1_CURRENCY}}``.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        base_currency: Currency = DEFAULT_CURRENCY,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.base_currency = Currency(base_currency.upper())
        self.timeout = timeout
        self.session = session

    def fetch_latest_rates(self, currency: Currency) -> dict[str, float]:
        """Fetch the latest rates quoted against ``currency``.

        Args:
            currency: Currency the rates are quoted for.

        Returns:
            Mapping of currency code to units per 1 ``currency``.

        Raises:
            RateUnavailable: If the request fails or the payload is malformed.
        """
        code = currency.upper()
        url = f"{self.base_url}{code}"
        getter = self.session.get if self.session is not None else requests.get

        logger.debug("Fetching rates from %s", url)
        try:
            response = getter(url, headers={"Accept": "application/json"}, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise RateUnavailable(code, str(e)) from e
        except ValueError as e:
            raise RateUnavailable(code, "response is not JSON") from e

        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict):
            raise RateUnavailable(code, "invalid response format")
        return rates

    def rate_to_base(self, currency: Currency) -> float:
        """Get units of the base currency per 1 unit of ``currency``.

        Raises:
            RateUnavailable: If the rate cannot be fetched.
        """
        code = Currency(currency.upper())
        if code == self.base_currency:
            return 1.0

        rates = self.fetch_latest_rates(code)
        rate = rates.get(self.base_currency)
        if isinstance(rate, bool) or not isinstance(rate, (int, float)):
            raise RateUnavailable(code, f"{self.base_currency} rate not found")
        if rate <= 0:
            raise RateUnavailable(code, f"non-positive {self.base_currency} rate {rate}")
        return float(rate)
