"""
Tests for API payload decoding.

Covers:
- Full page decoding from camelCase payloads
- Decimal and int coercion
- Date parsing (ISO strings with Z, date objects)
- Missing and invalid fields, unknown movement types
"""

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from kardex_kernel.domain.decoding import (
    decode_currency_value,
    decode_movement,
    decode_page,
    decode_summary,
    decode_variant,
)
from kardex_kernel.domain.kardex import MovementType
from kardex_kernel.exceptions import (
    DecodingError,
    InvalidFieldError,
    MissingFieldError,
    UnknownMovementTypeError,
)


def _currency_value(**overrides) -> dict:
    payload = {
        "currency": {"id": "usd", "code": "USD", "symbol": "$"},
        "unitCost": 2.5,
        "totalCost": "25.00",
        "totalValue": 30,
        "exchangeRate": 1,
        "exchangeRateDate": "2024-03-01T00:00:00Z",
    }
    payload.update(overrides)
    return payload


def _movement(**overrides) -> dict:
    payload = {
        "date": "2024-03-02T15:30:00Z",
        "type": "VENTA",
        "in": 0,
        "out": 3,
        "finalStock": 7,
        "unitCost": "2.50",
        "totalCost": "7.50",
        "values": [_currency_value()],
        "reference": "ORD-9",
    }
    payload.update(overrides)
    return payload


def _summary(**overrides) -> dict:
    payload = {
        "initialStock": 0,
        "totalIn": 10,
        "totalOut": 3,
        "finalStock": 7,
        "avgUnitCost": "2.50",
        "totalValuesByCurrency": [_currency_value()],
    }
    payload.update(overrides)
    return payload


class TestDecodeMovement:

    def test_decodes_all_fields(self):
        movement = decode_movement(_movement())

        assert movement.type == MovementType.VENTA
        assert movement.in_qty == 0
        assert movement.out_qty == 3
        assert movement.final_stock == 7
        assert movement.unit_cost == Decimal("2.50")
        assert movement.total_cost == Decimal("7.50")
        assert movement.reference == "ORD-9"
        assert movement.date == datetime(2024, 3, 2, 15, 30, tzinfo=UTC)
        assert len(movement.values) == 1

    def test_optional_fields_default(self):
        payload = _movement()
        for key in ("unitCost", "totalCost", "values", "reference"):
            del payload[key]

        movement = decode_movement(payload)

        assert movement.unit_cost is None
        assert movement.total_cost is None
        assert movement.values == ()
        assert movement.reference is None

    def test_null_values_list_is_empty(self):
        assert decode_movement(_movement(values=None)).values == ()

    def test_date_object_is_midnight_utc(self):
        movement = decode_movement(_movement(date=date(2024, 3, 2)))

        assert movement.date == datetime(2024, 3, 2, tzinfo=UTC)

    def test_integral_float_quantity_is_accepted(self):
        assert decode_movement(_movement(out=3.0)).out_qty == 3

    def test_fractional_quantity_is_rejected(self):
        with pytest.raises(InvalidFieldError) as exc_info:
            decode_movement(_movement(out=2.5))

        assert exc_info.value.field == "out"
        assert exc_info.value.code == "INVALID_FIELD"

    def test_boolean_quantity_is_rejected(self):
        with pytest.raises(InvalidFieldError):
            decode_movement(_movement(finalStock=True))

    @pytest.mark.parametrize("value", ["Infinity", "-Infinity", float("inf"), "NaN", float("nan")])
    def test_non_finite_quantity_is_rejected(self, value):
        with pytest.raises(InvalidFieldError) as exc_info:
            decode_movement(_movement(finalStock=value))

        assert exc_info.value.field == "finalStock"

    def test_unknown_type(self):
        with pytest.raises(UnknownMovementTypeError) as exc_info:
            decode_movement(_movement(type="TRANSFER"))

        assert exc_info.value.code == "UNKNOWN_MOVEMENT_TYPE"
        assert "TRANSFER" in str(exc_info.value)

    def test_missing_required_field(self):
        payload = _movement()
        del payload["finalStock"]

        with pytest.raises(MissingFieldError) as exc_info:
            decode_movement(payload)

        assert exc_info.value.entity == "KardexMovement"
        assert exc_info.value.field == "finalStock"

    def test_bad_date(self):
        with pytest.raises(InvalidFieldError):
            decode_movement(_movement(date="yesterday"))


class TestDecodeCurrencyValue:

    def test_floats_go_through_str(self):
        value = decode_currency_value(_currency_value(unitCost=0.1))

        assert value.unit_cost == Decimal("0.1")

    def test_base_currency_detection(self):
        assert decode_currency_value(_currency_value()).is_base is True
        assert decode_currency_value(_currency_value(exchangeRate="17.2")).is_base is False

    def test_missing_currency(self):
        payload = _currency_value()
        del payload["currency"]

        with pytest.raises(MissingFieldError):
            decode_currency_value(payload)

    def test_invalid_decimal(self):
        with pytest.raises(InvalidFieldError):
            decode_currency_value(_currency_value(totalValue="n/a"))


class TestDecodeSummary:

    def test_period_initial_stock_is_optional(self):
        assert decode_summary(_summary()).period_initial_stock is None
        assert decode_summary(_summary(periodInitialStock=4)).period_initial_stock == 4

    def test_avg_unit_cost_defaults_to_zero(self):
        payload = _summary()
        del payload["avgUnitCost"]

        assert decode_summary(payload).avg_unit_cost == Decimal("0")

    def test_missing_values_list(self):
        payload = _summary()
        del payload["totalValuesByCurrency"]

        assert decode_summary(payload).total_values_by_currency == ()

    @pytest.mark.parametrize("value", [float("nan"), "NaN", "sNaN", Decimal("NaN")])
    def test_nan_avg_unit_cost_is_rejected(self, value):
        with pytest.raises(InvalidFieldError) as exc_info:
            decode_summary(_summary(avgUnitCost=value))

        assert exc_info.value.field == "avgUnitCost"

    @pytest.mark.parametrize("value", [float("inf"), "-Infinity", Decimal("Infinity")])
    def test_infinite_avg_unit_cost_is_rejected(self, value):
        with pytest.raises(InvalidFieldError):
            decode_summary(_summary(avgUnitCost=value))

    def test_infinite_total_is_rejected(self):
        with pytest.raises(InvalidFieldError) as exc_info:
            decode_summary(_summary(totalIn="Infinity"))

        assert exc_info.value.field == "totalIn"


class TestDecodeVariantAndPage:

    def test_variant(self):
        variant = decode_variant({
            "id": "v-1",
            "name": "Red / M",
            "sku": "SKU-1",
            "summary": _summary(),
            "movements": [_movement(type="COMPRA", **{"in": 10, "out": 0, "finalStock": 10})],
        })

        assert variant.id == "v-1"
        assert variant.sku == "SKU-1"
        assert variant.movements[0].type == MovementType.COMPRA

    def test_page(self, captured_logs):
        page = decode_page({
            "data": [{
                "product": {"id": "p-1", "name": "Shirt", "categories": ["tops"]},
                "variants": [{"id": "v-1", "name": "M", "summary": _summary()}],
            }],
            "pagination": {
                "page": 1,
                "limit": 20,
                "total": 1,
                "totalPages": 1,
                "hasNext": False,
                "hasPrev": False,
            },
        })

        assert page.data[0].product.categories == ("tops",)
        assert page.data[0].variants[0].movements == ()
        assert page.pagination.total_pages == 1
        assert page.pagination.has_next is False

        decoded = [r for r in captured_logs() if r["message"] == "kardex_page_decoded"]
        assert decoded[0]["variant_count"] == 1

    def test_decoding_errors_share_a_base(self):
        with pytest.raises(DecodingError):
            decode_page({"data": []})
