"""
kardex_engines.sales -- Net sales of a variant in a target currency.

Responsibility:
    Sum sales minus returns over a movement list, reading movement-level
    currency values rather than the variant summary.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Uses the selection helpers of kardex_engines.currency.

Invariants enforced:
    - Only VENTA (+) and DEVOLUCION (-) contribute.
    - A sale is never dropped for a currency mismatch: a target id that
      misses falls back to the first value of the movement.  This is more
      permissive than CurrencyValueResolver.resolve, which returns None.
    - Movements without values fall back to their own ``total_cost``.
    - The total is not clamped; returns exceeding sales give a negative net.

Failure modes:
    - None.  A missing ``total_cost`` contributes zero.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from kardex_kernel.domain.kardex import CurrencyValue, KardexMovement, MovementType
from kardex_kernel.logging_config import get_logger
from kardex_engines.currency import find_base, find_by_currency_id
from kardex_engines.tracer import traced_engine

logger = get_logger("engines.sales")

_ZERO = Decimal("0")


@dataclass(frozen=True)
class SalesBreakdown:
    """Gross sales, returns and their net for one movement list."""

    gross_sales: Decimal
    returns: Decimal
    fallback_count: int = 0

    @property
    def net(self) -> Decimal:
        return self.gross_sales - self.returns


def _pick_value(
    values: Sequence[CurrencyValue],
    target_currency_id: str | None,
) -> tuple[CurrencyValue, bool]:
    """Selected value and whether the first-entry fallback was used."""
    if target_currency_id is not None:
        selected = find_by_currency_id(values, target_currency_id)
        if selected is not None:
            return selected, False
        return values[0], True
    base = find_base(values)
    return (base if base is not None else values[0]), False


class SalesAggregator:
    """
    Pure aggregator for sales movements.

    Contract:
        No I/O, fully deterministic.
    Guarantees:
        - ``net_sales == sales_breakdown(...).net`` for the same inputs.
    Non-goals:
        - Does not convert currencies; a fallback value is summed as is.
    """

    @traced_engine("sales_aggregator", "1.0", fingerprint_fields=("movements", "target_currency_id"))
    def sales_breakdown(
        self,
        movements: Sequence[KardexMovement],
        target_currency_id: str | None = None,
    ) -> SalesBreakdown:
        """
        Split sales movements into gross sales and returns.

        Args:
            movements: Movements to aggregate, any order.
            target_currency_id: Currency to report in, or None for the
                base currency.

        Returns:
            SalesBreakdown; ``fallback_count`` counts movements valued from
            their own total_cost or from the first-entry fallback.
        """
        gross = _ZERO
        returns = _ZERO
        fallbacks = 0

        for movement in movements:
            if not movement.is_sales_movement:
                continue

            if movement.has_values:
                value, fell_back = _pick_value(movement.values, target_currency_id)
                amount = value.total_cost if value.total_cost is not None else _ZERO
                if fell_back:
                    fallbacks += 1
                    logger.warning("sales_currency_fallback", extra={
                        "target_currency_id": target_currency_id,
                        "used_currency_id": value.currency.id,
                        "movement_type": movement.type.value,
                        "reference": movement.reference,
                    })
            else:
                amount = movement.total_cost if movement.total_cost is not None else _ZERO
                fallbacks += 1

            if movement.type == MovementType.VENTA:
                gross += amount
            else:
                returns += amount

        breakdown = SalesBreakdown(gross_sales=gross, returns=returns, fallback_count=fallbacks)

        logger.info("sales_aggregated", extra={
            "movement_count": len(movements),
            "target_currency_id": target_currency_id,
            "gross_sales": gross,
            "returns": returns,
            "net_sales": breakdown.net,
            "fallback_count": fallbacks,
        })
        return breakdown

    def net_sales(
        self,
        movements: Sequence[KardexMovement],
        target_currency_id: str | None = None,
    ) -> Decimal:
        """Sales minus returns; may be negative."""
        return self.sales_breakdown(movements, target_currency_id).net
