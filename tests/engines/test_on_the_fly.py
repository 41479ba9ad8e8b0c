"""
Tests for OnTheFlyValuator and is_on_the_fly.
"""

from decimal import Decimal

from kardex_engines.on_the_fly import OnTheFlyValuator, PriceEntry, is_on_the_fly
from kardex_kernel.domain.kardex import CurrencyRef, CurrencyValue, KardexVariantSummary

USD = CurrencyRef(id="usd", code="USD", symbol="$")
MXN = CurrencyRef(id="mxn", code="MXN", symbol="MX$")


def _summary(values=()) -> KardexVariantSummary:
    return KardexVariantSummary(
        initial_stock=0,
        total_in=5,
        total_out=0,
        final_stock=5,
        avg_unit_cost=Decimal("10"),
        total_values_by_currency=tuple(values),
    )


class TestComputeFromStock:
    """Tests for compute_from_stock()."""

    def setup_method(self):
        self.valuator = OnTheFlyValuator()

    def test_values_stock_at_each_price(self):
        prices = [
            PriceEntry(currency_id="usd", price=Decimal("10"), currency=USD),
            PriceEntry(currency_id="mxn", price=Decimal("170.50"), currency=MXN),
        ]

        values = self.valuator.compute_from_stock(4, prices)

        assert len(values) == 2
        assert values[0].currency == USD
        assert values[0].total_value == Decimal("40")
        assert values[1].currency == MXN
        assert values[1].total_value == Decimal("682.00")

    def test_no_costs_on_valuation(self):
        values = self.valuator.compute_from_stock(
            3, [PriceEntry(currency_id="usd", price=Decimal("2"), currency=USD)]
        )

        assert values[0].unit_cost is None
        assert values[0].total_cost is None
        assert values[0].exchange_rate is None

    def test_negative_stock_is_never_valued(self):
        values = self.valuator.compute_from_stock(
            -1, [PriceEntry(currency_id="usd", price=Decimal("10"))]
        )

        assert values == ()

    def test_empty_prices(self):
        assert self.valuator.compute_from_stock(10, []) == ()

    def test_zero_stock_values_to_zero(self):
        values = self.valuator.compute_from_stock(
            0, [PriceEntry(currency_id="usd", price=Decimal("10"), currency=USD)]
        )

        assert values[0].total_value == Decimal("0")

    def test_accepted_currencies_filter_prices(self):
        prices = [
            PriceEntry(currency_id="usd", price=Decimal("10"), currency=USD),
            PriceEntry(currency_id="mxn", price=Decimal("170"), currency=MXN),
        ]

        values = self.valuator.compute_from_stock(2, prices, accepted_currency_ids=["mxn"])

        assert [v.currency.id for v in values] == ["mxn"]

    def test_accepted_currencies_can_filter_everything(self):
        prices = [PriceEntry(currency_id="usd", price=Decimal("10"), currency=USD)]

        assert self.valuator.compute_from_stock(2, prices, accepted_currency_ids=[]) == ()

    def test_missing_currency_ref_is_synthesised(self):
        values = self.valuator.compute_from_stock(
            1, [PriceEntry(currency_id="usd", price=Decimal("10"))]
        )

        assert values[0].currency == CurrencyRef(id="usd", code="usd", symbol="$")

    def test_negative_stock_logs_warning(self, captured_logs):
        self.valuator.compute_from_stock(-5, [PriceEntry(currency_id="usd", price=Decimal("1"))])

        records = [r for r in captured_logs() if r["message"] == "on_the_fly_negative_stock_rejected"]
        assert len(records) == 1
        assert records[0]["final_stock"] == -5
        assert records[0]["level"] == "WARNING"

    def test_fully_filtered_price_list_is_logged(self, captured_logs):
        prices = [
            PriceEntry(currency_id="usd", price=Decimal("10"), currency=USD),
            PriceEntry(currency_id="mxn", price=Decimal("170"), currency=MXN),
        ]

        values = self.valuator.compute_from_stock(3, prices, accepted_currency_ids=["eur"])

        assert values == ()
        logs = captured_logs()
        records = [r for r in logs if r["message"] == "on_the_fly_prices_filtered_out"]
        assert len(records) == 1
        assert records[0]["level"] == "DEBUG"
        assert records[0]["price_count"] == 2
        assert records[0]["price_currency_ids"] == ["mxn", "usd"]
        assert records[0]["accepted_currency_ids"] == ["eur"]
        assert not any(r["message"] == "on_the_fly_valuation_computed" for r in logs)


class TestIsOnTheFly:
    """Tests for is_on_the_fly()."""

    def test_empty_values_are_on_the_fly(self):
        assert is_on_the_fly(_summary()) is True

    def test_persisted_values_are_not_on_the_fly(self):
        summary = _summary([CurrencyValue(currency=USD, total_value=Decimal("50"))])

        assert is_on_the_fly(summary) is False

    def test_single_zero_value_counts_as_present(self):
        summary = _summary([CurrencyValue(currency=USD, total_value=Decimal("0"))])

        assert is_on_the_fly(summary) is False
