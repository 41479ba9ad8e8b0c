"""
kardex_engines.stock_series -- Running-stock series for charting.

Responsibility:
    Turn a variant's movements into an ordered series of stock points,
    starting with a synthetic opening point, each point carrying the unit
    cost in the selected currency when one can be resolved.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Unit cost selection goes through CurrencyValueResolver.

Invariants enforced:
    - The opening point is dated one day before the earliest movement and
      carries the opening stock without a unit cost.
    - Points are ordered by date; equal dates keep supplied order.
    - An empty ledger with zero opening stock yields an empty series.

Failure modes:
    - None.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from kardex_kernel.domain.kardex import KardexMovement
from kardex_kernel.logging_config import get_logger
from kardex_engines.currency import DEFAULT_CURRENCY_SYMBOL, CurrencyValueResolver
from kardex_engines.tracer import traced_engine

logger = get_logger("engines.stock_series")


@dataclass(frozen=True)
class StockPoint:
    moment: datetime
    stock: int
    unit_cost: Decimal | None = None
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    is_initial: bool = False
    movement_type: str | None = None


class StockSeriesBuilder:
    """Builds stock points from a chronological movement list."""

    def __init__(self, resolver: CurrencyValueResolver | None = None):
        self._resolver = resolver or CurrencyValueResolver()

    def _point(
        self,
        movement: KardexMovement,
        target_currency_id: str | None,
    ) -> StockPoint:
        unit_cost = None
        symbol = DEFAULT_CURRENCY_SYMBOL
        if movement.has_values:
            selected = self._resolver.resolve(movement.values, target_currency_id)
            if selected is not None:
                unit_cost = selected.unit_cost
                symbol = selected.currency.symbol or DEFAULT_CURRENCY_SYMBOL
        elif movement.unit_cost is not None:
            unit_cost = movement.unit_cost

        return StockPoint(
            moment=movement.timestamp,
            stock=movement.final_stock,
            unit_cost=unit_cost,
            currency_symbol=symbol,
            movement_type=movement.type.value,
        )

    @traced_engine("stock_series", "1.0", fingerprint_fields=("movements", "initial_stock", "target_currency_id"))
    def build(
        self,
        movements: Sequence[KardexMovement],
        initial_stock: int,
        target_currency_id: str | None = None,
        as_of: datetime | None = None,
    ) -> tuple[StockPoint, ...]:
        """
        Build the series.

        Args:
            movements: Movements in chronological order.
            initial_stock: Opening stock of the view.
            target_currency_id: Currency for unit costs.
            as_of: Date of the opening point when there are no movements.
                The engine never reads the clock; without movements and
                without ``as_of`` only an empty series can be dated, so the
                opening point is omitted.

        Returns:
            Tuple of StockPoint ordered by date.
        """
        if not movements and initial_stock == 0:
            return ()

        points = [self._point(m, target_currency_id) for m in movements]

        if points:
            opening_moment = min(p.moment for p in points) - timedelta(days=1)
        else:
            opening_moment = as_of

        if opening_moment is not None:
            points.append(StockPoint(
                moment=opening_moment,
                stock=initial_stock,
                is_initial=True,
            ))

        # Opening point sorts first on its own date
        series = tuple(sorted(points, key=lambda p: (p.moment, not p.is_initial)))

        logger.debug("stock_series_built", extra={
            "movement_count": len(movements),
            "point_count": len(series),
        })
        return series


def build_stock_series(
    movements: Sequence[KardexMovement],
    initial_stock: int,
    target_currency_id: str | None = None,
    as_of: datetime | None = None,
) -> tuple[StockPoint, ...]:
    """Functional form of StockSeriesBuilder.build."""
    return StockSeriesBuilder().build(movements, initial_stock, target_currency_id, as_of)
