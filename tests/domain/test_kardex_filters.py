"""
Tests for KardexFilters and DateRange.
"""

from datetime import UTC, date, datetime

from kardex_kernel.domain.kardex import (
    DateRange,
    KardexFilters,
    MovementType,
    SortOrder,
    ValuationMethod,
)


class TestDateRange:

    def test_open_range(self):
        assert DateRange().is_open is True
        assert DateRange(start=date(2024, 1, 1)).is_open is False

    def test_contains_is_inclusive(self):
        window = DateRange(start=date(2024, 1, 10), end=date(2024, 1, 20))

        assert window.contains(date(2024, 1, 10))
        assert window.contains(datetime(2024, 1, 20, 23, 59, tzinfo=UTC))
        assert not window.contains(date(2024, 1, 9))
        assert not window.contains(date(2024, 1, 21))

    def test_is_before(self):
        window = DateRange(start=date(2024, 1, 10))

        assert window.is_before(datetime(2024, 1, 9, 23, 0))
        assert not window.is_before(date(2024, 1, 10))
        assert not DateRange(end=date(2024, 1, 10)).is_before(date(2000, 1, 1))


class TestKardexFilters:

    def test_date_range(self):
        assert KardexFilters().date_range is None
        assert KardexFilters(start_date=date(2024, 1, 1)).date_range == DateRange(start=date(2024, 1, 1))

    def test_narrows_movement_set(self):
        assert KardexFilters().narrows_movement_set is False
        assert KardexFilters(search="shirt", category=("tops",)).narrows_movement_set is False
        assert KardexFilters(movement_type=(MovementType.COMPRA,)).narrows_movement_set is True
        assert KardexFilters(currency=("usd",)).narrows_movement_set is True

    def test_query_params_order(self):
        filters = KardexFilters(
            page=2,
            limit=50,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 31),
            search="shirt",
            sort_by="name",
            sort_order=SortOrder.DESC,
            valuation_method=ValuationMethod.FIFO,
            category=("tops", "sale"),
            movement_type=(MovementType.VENTA, MovementType.DEVOLUCION),
            currency=("usd",),
        )

        assert filters.to_query_params() == [
            ("page", "2"),
            ("limit", "50"),
            ("startDate", "2024-01-01"),
            ("endDate", "2024-01-31"),
            ("query", "shirt"),
            ("sortBy", "name"),
            ("sortOrder", "desc"),
            ("valuationMethod", "FIFO"),
            ("category", "tops"),
            ("category", "sale"),
            ("movementType", "VENTA"),
            ("movementType", "DEVOLUCION"),
            ("currency", "usd"),
        ]

    def test_empty_filters_have_no_params(self):
        assert KardexFilters().to_query_params() == []
