"""
Tests for CurrencyValueResolver.

Covers:
- Empty input
- Targeted lookup (hit and miss, no implicit fallback)
- Base-currency preference without a target
- Symbol lookup with display default
- Summary resolution
"""

from decimal import Decimal

from kardex_engines.currency import CurrencyValueResolver
from kardex_kernel.domain.kardex import CurrencyRef, CurrencyValue, KardexVariantSummary

USD = CurrencyRef(id="usd", code="USD", symbol="$")
MXN = CurrencyRef(id="mxn", code="MXN", symbol="MX$")
EUR = CurrencyRef(id="eur", code="EUR", symbol="€")


def _value(currency: CurrencyRef, total: str, rate: str | None = None) -> CurrencyValue:
    return CurrencyValue(
        currency=currency,
        total_value=Decimal(total),
        exchange_rate=Decimal(rate) if rate is not None else None,
    )


class TestResolve:
    """Tests for resolve()."""

    def setup_method(self):
        self.resolver = CurrencyValueResolver()

    def test_empty_values_resolve_to_none(self):
        assert self.resolver.resolve([]) is None
        assert self.resolver.resolve([], "usd") is None
        assert self.resolver.resolve((), None) is None

    def test_target_currency_is_selected(self):
        values = (_value(USD, "100", "1"), _value(MXN, "1700", "17"))

        selected = self.resolver.resolve(values, "mxn")

        assert selected is values[1]
        assert selected.total_value == Decimal("1700")

    def test_target_miss_returns_none_without_fallback(self):
        """A missing target never falls back to another currency."""
        values = (_value(USD, "100", "1"), _value(MXN, "1700", "17"))

        assert self.resolver.resolve(values, "eur") is None

    def test_first_match_wins_on_duplicate_ids(self):
        values = (_value(USD, "100", "1"), _value(USD, "999", "1"))

        assert self.resolver.resolve(values, "usd") is values[0]

    def test_no_target_prefers_base_currency(self):
        values = (_value(MXN, "1700", "17"), _value(USD, "100", "1.0"), _value(EUR, "90", "0.9"))

        assert self.resolver.resolve(values) is values[1]

    def test_no_target_without_base_picks_first(self):
        values = (_value(MXN, "1700", "17"), _value(EUR, "90", "0.9"))

        assert self.resolver.resolve(values) is values[0]

    def test_no_target_without_exchange_rates_picks_first(self):
        values = (_value(MXN, "1700"), _value(USD, "100"))

        assert self.resolver.resolve(values) is values[0]

    def test_resolution_is_stable(self):
        values = (_value(MXN, "1700", "17"), _value(USD, "100", "1"))

        first = self.resolver.resolve(values, "usd")
        second = self.resolver.resolve(values, "usd")

        assert first is second

    def test_currency_display_fields_round_trip(self):
        values = (_value(EUR, "90", "1"),)

        selected = self.resolver.resolve(values)

        assert selected.currency.code == "EUR"
        assert selected.currency.symbol == "€"


class TestSymbolOf:
    """Tests for symbol_of()."""

    def setup_method(self):
        self.resolver = CurrencyValueResolver()

    def test_symbol_of_target(self):
        values = (_value(USD, "100", "1"), _value(MXN, "1700", "17"))

        assert self.resolver.symbol_of(values, "mxn") == "MX$"

    def test_symbol_defaults_to_dollar_on_miss(self):
        values = (_value(MXN, "1700", "17"),)

        assert self.resolver.symbol_of(values, "eur") == "$"

    def test_symbol_defaults_on_empty(self):
        assert self.resolver.symbol_of([]) == "$"

    def test_custom_default(self):
        assert self.resolver.symbol_of([], default="¤") == "¤"

    def test_symbol_of_base_when_untargeted(self):
        values = (_value(MXN, "1700", "17"), _value(EUR, "90", "1"))

        assert self.resolver.symbol_of(values) == "€"


class TestResolveSummary:
    """Tests for resolve_summary()."""

    def setup_method(self):
        self.resolver = CurrencyValueResolver()

    def test_summary_values_are_resolved(self):
        summary = KardexVariantSummary(
            initial_stock=0,
            total_in=10,
            total_out=0,
            final_stock=10,
            avg_unit_cost=Decimal("5"),
            total_values_by_currency=(_value(USD, "50", "1"),),
        )

        assert self.resolver.resolve_summary(summary).total_value == Decimal("50")
        assert self.resolver.resolve_summary(summary, "mxn") is None

    def test_summary_without_values(self):
        summary = KardexVariantSummary(
            initial_stock=0,
            total_in=0,
            total_out=0,
            final_stock=0,
            avg_unit_cost=Decimal("0"),
        )

        assert self.resolver.resolve_summary(summary) is None
