"""Tests for accountant.domain.report pure functions."""

from decimal import Decimal

import pytest

from accountant.domain.currency import CurrencyConverter, RateUnavailable
from accountant.domain.models import CategoryName, Currency, Month, Transaction
from accountant.domain.report import (
    MonthlySummary,
    format_added_line,
    format_amount,
    format_summary,
    group_by_category,
    round_money,
    summarize_month,
)

MONTH = Month("2025-01")
USD = Currency("USD")


class StubProvider:
    """Rate provider with fixed USD-relative rates."""

    def __init__(self, rates: dict[str, float]) -> None:
        self.rates = rates

    def rate_to_base(self, currency: Currency) -> float:
        if currency not in self.rates:
            raise RateUnavailable(currency, "unknown currency")
        return self.rates[currency]


def txn(category: str, amount: str, currency: str) -> Transaction:
    return Transaction(CategoryName(category), Decimal(amount), Currency(currency))


class TestRoundMoney:
    """Tests for round_money."""

    def test_rounds_half_away_from_zero(self) -> None:
        """Should round 0.125 up to 0.13."""
        assert round_money(0.125) == 0.13

    def test_rounds_half_away_from_zero_for_negatives(self) -> None:
        """Should round -0.125 down to -0.13."""
        assert round_money(-0.125) == -0.13

    def test_float_representation_edge(self) -> None:
        """Should round 2.675 to 2.68 despite its binary representation."""
        assert round_money(2.675) == 2.68

    def test_keeps_two_places(self) -> None:
        """Should leave already-rounded values alone."""
        assert round_money(20.0) == 20.0


class TestFormatAmount:
    """Tests for format_amount."""

    def test_integer(self) -> None:
        """Should print integral amounts without decimals."""
        assert format_amount(Decimal("1000")) == "1000"

    def test_integral_decimal(self) -> None:
        """Should print 10.00 as 10."""
        assert format_amount(Decimal("10.00")) == "10"

    def test_fraction(self) -> None:
        """Should print fractions with two places."""
        assert format_amount(Decimal("12.5")) == "12.50"


class TestGroupByCategory:
    """Tests for group_by_category."""

    def test_sums_per_category_and_currency(self) -> None:
        """Should keep currencies apart within a category."""
        grouped = group_by_category(
            [txn("food", "10", "USD"), txn("food", "1000", "RSD"), txn("food", "5.50", "USD")]
        )

        assert grouped == {"food": {"USD": Decimal("15.50"), "RSD": Decimal("1000")}}

    def test_preserves_first_seen_order(self) -> None:
        """Should keep categories in the order they first appear."""
        grouped = group_by_category([txn("rent", "1", "USD"), txn("food", "1", "USD"), txn("rent", "1", "USD")])

        assert list(grouped) == ["rent", "food"]

    def test_empty(self) -> None:
        """Should return an empty mapping for no transactions."""
        assert group_by_category([]) == {}

    def test_breakdown_sum_equals_raw_sum(self) -> None:
        """Should not lose or invent money while grouping."""
        transactions = [
            txn("food", "10.10", "USD"),
            txn("food", "1000", "RSD"),
            txn("shop", "99.99", "EUR"),
            txn("shop", "0.01", "EUR"),
            txn("taxi", "7", "USD"),
        ]
        grouped = group_by_category(transactions)

        grouped_total = sum(amount for by_currency in grouped.values() for amount in by_currency.values())
        assert grouped_total == sum(t.amount for t in transactions)


class TestSummarizeMonth:
    """Tests for summarize_month."""

    def test_mixed_currency_scenario(self) -> None:
        """Should keep raw subtotals and convert only the total."""
        converter = CurrencyConverter(StubProvider({"RSD": 0.01}))
        summary = summarize_month(MONTH, [txn("food", "1000", "RSD"), txn("food", "10", "USD")], USD, converter)

        assert summary.by_category["food"]["RSD"] == 1000
        assert summary.by_category["food"]["USD"] == 10
        assert summary.total == 20.00
        assert summary.skipped_currencies == []
        assert summary.is_partial is False

    def test_total_in_non_base_currency(self) -> None:
        """Should convert the total into the output currency."""
        converter = CurrencyConverter(StubProvider({"EUR": 1.25}))
        summary = summarize_month(MONTH, [txn("food", "10", "USD"), txn("rent", "2", "EUR")], Currency("EUR"), converter)

        assert summary.total == 10.00
        assert summary.output_currency == "EUR"

    def test_unconvertible_subtotal_is_skipped(self) -> None:
        """Should drop unconvertible subtotals from the total but keep them in the breakdown."""
        converter = CurrencyConverter(StubProvider({"RSD": 0.01}))
        summary = summarize_month(
            MONTH,
            [txn("food", "1000", "RSD"), txn("food", "3", "XYZ"), txn("fun", "4", "XYZ")],
            USD,
            converter,
        )

        assert summary.total == 10.00
        assert summary.by_category["food"]["XYZ"] == 3
        assert summary.by_category["fun"]["XYZ"] == 4
        assert summary.skipped_currencies == ["XYZ"]
        assert summary.is_partial is True

    def test_skip_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Should log a warning for each skipped subtotal."""
        converter = CurrencyConverter(StubProvider({}))

        with caplog.at_level("WARNING", logger="accountant.domain.report"):
            summarize_month(MONTH, [txn("food", "3", "XYZ")], USD, converter)

        assert "XYZ" in caplog.text

    def test_intermediate_sums_not_rounded(self) -> None:
        """Should round only the final total."""
        converter = CurrencyConverter(StubProvider({"AAA": 0.004, "BBB": 0.004}))
        summary = summarize_month(MONTH, [txn("a", "1", "AAA"), txn("b", "1", "BBB")], USD, converter)

        # 0.004 + 0.004 = 0.008 -> 0.01; rounding each subtotal first would give 0.00
        assert summary.total == 0.01

    def test_empty_month(self) -> None:
        """Should produce a zero total for no transactions."""
        summary = summarize_month(MONTH, [], USD, CurrencyConverter(StubProvider({})))

        assert summary.total == 0.0
        assert summary.by_category == {}


class TestFormatting:
    """Tests for format_added_line and format_summary."""

    def test_added_line_same_currency(self) -> None:
        """Should omit the conversion for output-currency expenses."""
        line = format_added_line(Decimal("10"), USD, CategoryName("food"), USD, 10.0)

        assert line == "Added 10 USD to category 'food'"

    def test_added_line_with_conversion(self) -> None:
        """Should show the approximate converted amount."""
        line = format_added_line(Decimal("1000"), Currency("RSD"), CategoryName("food"), USD, 10.0)

        assert line == "Added 1000 RSD (≈ 10.00 USD) to category 'food'"

    def test_added_line_conversion_failed(self) -> None:
        """Should say when the conversion was not possible."""
        line = format_added_line(Decimal("12.50"), Currency("XYZ"), CategoryName("food"), USD, None)

        assert line == "Added 12.50 XYZ (conversion unavailable) to category 'food'"

    def test_summary_text(self) -> None:
        """Should list total and sorted categories."""
        summary = MonthlySummary(
            month=MONTH,
            output_currency=USD,
            total=20.0,
            by_category={
                CategoryName("shop"): {USD: Decimal("5")},
                CategoryName("food"): {Currency("RSD"): Decimal("1000"), USD: Decimal("10")},
            },
        )

        assert format_summary(summary, "Added 10 USD to category 'food'") == (
            "Added 10 USD to category 'food'\n"
            "Total for January 2025: 20.00 USD\n"
            "food: 1000 RSD + 10 USD\n"
            "shop: 5 USD"
        )

    def test_summary_mentions_skipped(self) -> None:
        """Should name currencies left out of the total."""
        summary = MonthlySummary(
            month=MONTH,
            output_currency=USD,
            total=0.0,
            by_category={CategoryName("food"): {Currency("XYZ"): Decimal("3")}},
            skipped_currencies=[Currency("XYZ")],
        )

        assert format_summary(summary).endswith("Not included in total (rate unavailable): XYZ")

    def test_empty_summary(self) -> None:
        """Should say there is nothing recorded."""
        summary = MonthlySummary(month=MONTH, output_currency=USD, total=0.0, by_category={})

        assert format_summary(summary) == "No expenses recorded for January 2025"
