"""
Pure domain layer.

This module contains the immutable Kardex snapshot types and the decoder
that builds them from API payloads, with NO dependencies on:
- Persistence
- Network I/O
- Time/clock

All domain objects are immutable and deterministic.
"""

from kardex_kernel.domain.decoding import (
    decode_currency_value,
    decode_movement,
    decode_page,
    decode_product,
    decode_summary,
    decode_variant,
)
from kardex_kernel.domain.kardex import (
    BASE_EXCHANGE_RATE,
    SALES_MOVEMENT_TYPES,
    CurrencyRef,
    CurrencyValue,
    DateRange,
    KardexFilters,
    KardexMovement,
    KardexPage,
    KardexProduct,
    KardexVariant,
    KardexVariantSummary,
    MovementType,
    Pagination,
    ProductRef,
    SortOrder,
    ValuationMethod,
)

__all__ = [
    # Types
    "BASE_EXCHANGE_RATE",
    "SALES_MOVEMENT_TYPES",
    "CurrencyRef",
    "CurrencyValue",
    "DateRange",
    "KardexFilters",
    "KardexMovement",
    "KardexPage",
    "KardexProduct",
    "KardexVariant",
    "KardexVariantSummary",
    "MovementType",
    "Pagination",
    "ProductRef",
    "SortOrder",
    "ValuationMethod",
    # Decoding
    "decode_currency_value",
    "decode_movement",
    "decode_page",
    "decode_product",
    "decode_summary",
    "decode_variant",
]
