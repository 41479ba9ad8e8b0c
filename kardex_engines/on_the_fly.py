"""
kardex_engines.on_the_fly -- Point-in-time valuation from stock and prices.

Responsibility:
    Compute a synthetic valuation (stock x unit price, per currency) for a
    variant whose summary has no persisted ``total_values_by_currency``.
    The stock quantity comes from the ledger; the price comes from the
    product's price list, never from the variant's inventory counter, so
    the displayed value cannot contradict the ledger.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Feeds the currency resolver when persisted values are missing.

Invariants enforced:
    - Negative stock is never valued: ``final_stock < 0`` yields ``()``.
    - Output values carry ``total_value`` only (no unit or total cost):
      they are valuations, not costed movements.
    - Callers must surface ``is_on_the_fly`` explicitly; these figures
      are not validated against the ledger formulas.

Failure modes:
    - None.  Empty or filtered-out price lists yield ``()``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from kardex_kernel.domain.kardex import CurrencyRef, CurrencyValue, KardexVariantSummary
from kardex_kernel.logging_config import get_logger
from kardex_engines.currency import DEFAULT_CURRENCY_SYMBOL
from kardex_engines.tracer import traced_engine

logger = get_logger("engines.on_the_fly")


@dataclass(frozen=True)
class PriceEntry:
    """One price of the product's price list."""

    currency_id: str
    price: Decimal
    currency: CurrencyRef | None = None

    @property
    def currency_ref(self) -> CurrencyRef:
        if self.currency is not None:
            return self.currency
        return CurrencyRef(
            id=self.currency_id,
            code=self.currency_id,
            symbol=DEFAULT_CURRENCY_SYMBOL,
        )


def is_on_the_fly(summary: KardexVariantSummary) -> bool:
    """True when the summary has no persisted currency values.

    A single entry, even a zero-valued one, counts as persisted.
    """
    return not summary.total_values_by_currency


class OnTheFlyValuator:
    """
    Pure valuator for variants without persisted valuations.

    Contract:
        No I/O, fully deterministic.
    Guarantees:
        - One output value per (accepted) price, in price-list order.
        - ``total_value = final_stock * price``.
    Non-goals:
        - Does not derive exchange rates; each price is already expressed
          in its own currency.
    """

    @traced_engine("on_the_fly_valuator", "1.0", fingerprint_fields=("final_stock", "prices", "accepted_currency_ids"))
    def compute_from_stock(
        self,
        final_stock: int,
        prices: Sequence[PriceEntry],
        accepted_currency_ids: Iterable[str] | None = None,
    ) -> tuple[CurrencyValue, ...]:
        """
        Value ``final_stock`` units at each listed price.

        Args:
            final_stock: Ledger-derived stock quantity.
            prices: Product price list.
            accepted_currency_ids: When given, only prices in these
                currencies are used.

        Returns:
            Tuple of CurrencyValue with ``total_value`` set.
        """
        if not prices:
            return ()

        if final_stock < 0:
            logger.warning("on_the_fly_negative_stock_rejected", extra={
                "final_stock": final_stock,
                "price_count": len(prices),
            })
            return ()

        selected = list(prices)
        if accepted_currency_ids is not None:
            accepted = frozenset(accepted_currency_ids)
            selected = [p for p in selected if p.currency_id in accepted]
            if not selected:
                logger.debug("on_the_fly_prices_filtered_out", extra={
                    "final_stock": final_stock,
                    "price_count": len(prices),
                    "price_currency_ids": sorted({p.currency_id for p in prices}),
                    "accepted_currency_ids": sorted(accepted),
                })
                return ()

        values = tuple(
            CurrencyValue(
                currency=p.currency_ref,
                total_value=Decimal(final_stock) * p.price,
            )
            for p in selected
        )

        logger.info("on_the_fly_valuation_computed", extra={
            "final_stock": final_stock,
            "price_count": len(prices),
            "value_count": len(values),
        })
        return values
