"""
kardex_engines.product_totals -- Product-level aggregates across variants.

Responsibility:
    Roll a product's variants up into the figures shown on a product card:
    total stock, movement count, low-stock variants and total value in a
    target currency.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Value selection goes through CurrencyValueResolver.

Invariants enforced:
    - Low stock means ``final_stock <= low_stock_threshold``.
    - ``total_value`` only sums values that resolve in the target currency;
      variants without one are counted in ``unvalued_variants`` rather than
      silently treated as zero.

Failure modes:
    - None.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from kardex_kernel.domain.kardex import CurrencyValue, KardexProduct
from kardex_kernel.logging_config import get_logger
from kardex_engines.currency import CurrencyValueResolver
from kardex_engines.tracer import traced_engine

logger = get_logger("engines.product_totals")


@dataclass(frozen=True)
class ProductTotals:
    product_id: str
    variant_count: int
    total_stock: int
    total_movements: int
    low_stock_variants: tuple[str, ...]
    total_value: Decimal
    unvalued_variants: tuple[str, ...] = ()

    @property
    def has_low_stock(self) -> bool:
        return len(self.low_stock_variants) > 0


class ProductTotalsCalculator:
    """
    Pure roll-up of variant summaries.

    Contract:
        No I/O, fully deterministic.
    Guarantees:
        - Variant order is preserved in the id tuples.
    Non-goals:
        - Does not convert values between currencies.
    """

    def __init__(self, resolver: CurrencyValueResolver | None = None):
        self._resolver = resolver or CurrencyValueResolver()

    @traced_engine("product_totals", "1.0", fingerprint_fields=("product", "target_currency_id", "low_stock_threshold"))
    def totals(
        self,
        product: KardexProduct,
        target_currency_id: str | None = None,
        low_stock_threshold: int = 0,
        values_by_variant: Mapping[str, tuple[CurrencyValue, ...]] | None = None,
    ) -> ProductTotals:
        """
        Aggregate one product.

        Args:
            product: Product snapshot.
            target_currency_id: Currency for ``total_value``.
            low_stock_threshold: Stock at or below which a variant is low.
            values_by_variant: Currency values to use per variant id in
                place of the persisted summary values (e.g. on-the-fly
                valuations computed by the caller).

        Returns:
            ProductTotals.
        """
        total_value = Decimal("0")
        low_stock: list[str] = []
        unvalued: list[str] = []

        for variant in product.variants:
            if variant.summary.final_stock <= low_stock_threshold:
                low_stock.append(variant.id)

            values = variant.summary.total_values_by_currency
            if values_by_variant is not None and variant.id in values_by_variant:
                values = values_by_variant[variant.id]

            selected = self._resolver.resolve(values, target_currency_id)
            if selected is None or selected.total_value is None:
                unvalued.append(variant.id)
            else:
                total_value += selected.total_value

        result = ProductTotals(
            product_id=product.product.id,
            variant_count=len(product.variants),
            total_stock=sum(v.summary.final_stock for v in product.variants),
            total_movements=sum(len(v.movements) for v in product.variants),
            low_stock_variants=tuple(low_stock),
            total_value=total_value,
            unvalued_variants=tuple(unvalued),
        )

        logger.info("product_totals_computed", extra={
            "product_id": result.product_id,
            "variant_count": result.variant_count,
            "total_stock": result.total_stock,
            "low_stock_count": len(result.low_stock_variants),
            "unvalued_count": len(result.unvalued_variants),
            "total_value": result.total_value,
        })
        return result
