"""
Decoding -- API payloads to Kardex domain types.

Responsibility:
    Turn the camelCase JSON shapes returned by the Kardex API (already parsed
    into dicts) into the frozen domain types of ``kardex_kernel.domain.kardex``.

Architecture position:
    Kernel > Domain -- integration boundary, zero I/O.  The engines never
    call this module; callers decode once and hand the result over.

Invariants enforced:
    - Money and exchange rates go through ``Decimal(str(x))`` so float
      payload values never leak into arithmetic.
    - Stock quantities are coerced to ``int``.
    - Dates accept ISO-8601 strings (a trailing ``Z`` means UTC) or
      ``date``/``datetime`` objects.

Failure modes:
    - MissingFieldError when a required key is absent.
    - InvalidFieldError when a value cannot be coerced, including NaN and
      infinite numbers.
    - UnknownMovementTypeError for an unknown movement ``type``.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any

from kardex_kernel.domain.kardex import (
    CurrencyRef,
    CurrencyValue,
    KardexMovement,
    KardexPage,
    KardexProduct,
    KardexVariant,
    KardexVariantSummary,
    MovementType,
    Pagination,
    ProductRef,
)
from kardex_kernel.exceptions import (
    InvalidFieldError,
    MissingFieldError,
    UnknownMovementTypeError,
)
from kardex_kernel.logging_config import get_logger

logger = get_logger("domain.decoding")


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------


def _require(payload: Mapping[str, Any], entity: str, key: str) -> Any:
    if key not in payload or payload[key] is None:
        raise MissingFieldError(entity, key)
    return payload[key]


def _to_int(entity: str, key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidFieldError(entity, key, value)
    if isinstance(value, int):
        return value
    try:
        as_decimal = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidFieldError(entity, key, value) from e
    if not as_decimal.is_finite() or as_decimal != as_decimal.to_integral_value():
        raise InvalidFieldError(entity, key, value)
    return int(as_decimal)


def _to_decimal(entity: str, key: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise InvalidFieldError(entity, key, value)
    if isinstance(value, Decimal):
        as_decimal = value
    else:
        try:
            as_decimal = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise InvalidFieldError(entity, key, value) from e
    # NaN and infinities are not amounts
    if not as_decimal.is_finite():
        raise InvalidFieldError(entity, key, value)
    return as_decimal


def _optional_decimal(payload: Mapping[str, Any], entity: str, key: str) -> Decimal | None:
    value = payload.get(key)
    if value is None:
        return None
    return _to_decimal(entity, key, value)


def _to_datetime(entity: str, key: str, value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=UTC)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidFieldError(entity, key, value) from e
    raise InvalidFieldError(entity, key, value)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


def decode_currency_ref(payload: Mapping[str, Any]) -> CurrencyRef:
    return CurrencyRef(
        id=str(_require(payload, "CurrencyRef", "id")),
        code=str(payload.get("code", "")),
        symbol=str(payload.get("symbol", "")),
    )


def decode_currency_value(payload: Mapping[str, Any]) -> CurrencyValue:
    """Decode one entry of ``values`` or ``totalValuesByCurrency``."""
    entity = "CurrencyValue"
    rate_date = payload.get("exchangeRateDate")
    return CurrencyValue(
        currency=decode_currency_ref(_require(payload, entity, "currency")),
        unit_cost=_optional_decimal(payload, entity, "unitCost"),
        total_cost=_optional_decimal(payload, entity, "totalCost"),
        total_value=_optional_decimal(payload, entity, "totalValue"),
        exchange_rate=_optional_decimal(payload, entity, "exchangeRate"),
        exchange_rate_date=(
            _to_datetime(entity, "exchangeRateDate", rate_date)
            if rate_date is not None
            else None
        ),
    )


def decode_movement(payload: Mapping[str, Any]) -> KardexMovement:
    entity = "KardexMovement"
    raw_type = _require(payload, entity, "type")
    try:
        movement_type = MovementType(raw_type)
    except ValueError as e:
        raise UnknownMovementTypeError(raw_type) from e

    reference = payload.get("reference")
    return KardexMovement(
        date=_to_datetime(entity, "date", _require(payload, entity, "date")),
        type=movement_type,
        in_qty=_to_int(entity, "in", _require(payload, entity, "in")),
        out_qty=_to_int(entity, "out", _require(payload, entity, "out")),
        final_stock=_to_int(entity, "finalStock", _require(payload, entity, "finalStock")),
        unit_cost=_optional_decimal(payload, entity, "unitCost"),
        total_cost=_optional_decimal(payload, entity, "totalCost"),
        values=tuple(decode_currency_value(v) for v in payload.get("values") or ()),
        reference=str(reference) if reference is not None else None,
    )


def decode_summary(payload: Mapping[str, Any]) -> KardexVariantSummary:
    entity = "KardexVariantSummary"
    period_initial = payload.get("periodInitialStock")
    return KardexVariantSummary(
        initial_stock=_to_int(entity, "initialStock", _require(payload, entity, "initialStock")),
        total_in=_to_int(entity, "totalIn", _require(payload, entity, "totalIn")),
        total_out=_to_int(entity, "totalOut", _require(payload, entity, "totalOut")),
        final_stock=_to_int(entity, "finalStock", _require(payload, entity, "finalStock")),
        avg_unit_cost=_to_decimal(entity, "avgUnitCost", payload.get("avgUnitCost", 0)),
        total_values_by_currency=tuple(
            decode_currency_value(v)
            for v in payload.get("totalValuesByCurrency") or ()
        ),
        period_initial_stock=(
            _to_int(entity, "periodInitialStock", period_initial)
            if period_initial is not None
            else None
        ),
    )


def decode_variant(payload: Mapping[str, Any]) -> KardexVariant:
    entity = "KardexVariant"
    sku = payload.get("sku")
    return KardexVariant(
        id=str(_require(payload, entity, "id")),
        name=str(payload.get("name", "")),
        summary=decode_summary(_require(payload, entity, "summary")),
        movements=tuple(decode_movement(m) for m in payload.get("movements") or ()),
        sku=str(sku) if sku else None,
    )


def decode_product(payload: Mapping[str, Any]) -> KardexProduct:
    entity = "KardexProduct"
    product = _require(payload, entity, "product")
    return KardexProduct(
        product=ProductRef(
            id=str(_require(product, "ProductRef", "id")),
            name=str(product.get("name", "")),
            categories=tuple(str(c) for c in product.get("categories") or ()),
        ),
        variants=tuple(decode_variant(v) for v in payload.get("variants") or ()),
    )


def decode_pagination(payload: Mapping[str, Any]) -> Pagination:
    entity = "Pagination"
    return Pagination(
        page=_to_int(entity, "page", _require(payload, entity, "page")),
        limit=_to_int(entity, "limit", _require(payload, entity, "limit")),
        total=_to_int(entity, "total", _require(payload, entity, "total")),
        total_pages=_to_int(entity, "totalPages", _require(payload, entity, "totalPages")),
        has_next=bool(payload.get("hasNext", False)),
        has_prev=bool(payload.get("hasPrev", False)),
    )


def decode_page(payload: Mapping[str, Any]) -> KardexPage:
    """Decode a full ``{data, pagination}`` response."""
    entity = "KardexPage"
    products = tuple(decode_product(p) for p in _require(payload, entity, "data"))
    pagination = decode_pagination(_require(payload, entity, "pagination"))

    logger.debug("kardex_page_decoded", extra={
        "product_count": len(products),
        "variant_count": sum(len(p.variants) for p in products),
        "page": pagination.page,
        "total_pages": pagination.total_pages,
    })

    return KardexPage(data=products, pagination=pagination)
