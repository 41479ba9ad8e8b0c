"""
kardex_engines.currency -- Deterministic selection of one currency value.

Responsibility:
    Pick a single CurrencyValue out of a currency-tagged list, given an
    optional target currency id.  Every other engine that needs "the value
    in the selected currency" goes through this module instead of doing its
    own lookup.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Leaf dependency of the on-the-fly valuator, sales aggregator, stock
    series and product totals.

Invariants enforced:
    - Determinism: identical inputs always return the same entry.
    - Strict targeting: a target id that is not in the list resolves to
      ``None``; there is no implicit fallback to another currency.
    - Base preference: with no target, the entry marked as base
      (``exchange_rate == 1``) wins, else the first entry.

Failure modes:
    - None.  Empty input resolves to ``None``; the symbol lookup falls back
      to a display default.
"""

from __future__ import annotations

from collections.abc import Sequence

from kardex_kernel.domain.kardex import CurrencyValue, KardexVariantSummary
from kardex_kernel.logging_config import get_logger
from kardex_engines.tracer import traced_engine

logger = get_logger("engines.currency")

DEFAULT_CURRENCY_SYMBOL = "$"


def find_by_currency_id(
    values: Sequence[CurrencyValue],
    currency_id: str,
) -> CurrencyValue | None:
    """First entry whose currency id equals ``currency_id``."""
    for value in values:
        if value.currency.id == currency_id:
            return value
    return None


def find_base(values: Sequence[CurrencyValue]) -> CurrencyValue | None:
    """First entry in the ledger's base currency."""
    for value in values:
        if value.is_base:
            return value
    return None


class CurrencyValueResolver:
    """
    Pure resolver over currency-tagged values.

    Contract:
        No I/O, fully deterministic.
    Guarantees:
        - ``resolve([], x)`` is ``None`` for any ``x``.
        - ``resolve(values, id)`` returns the first match or ``None``.
        - ``resolve(values)`` returns the base entry, else ``values[0]``.
        - ``symbol_of`` never returns an empty result; it is display-only.
    Non-goals:
        - Does not convert between currencies.
    """

    @traced_engine("currency_value_resolver", "1.0", fingerprint_fields=("values", "target_currency_id"))
    def resolve(
        self,
        values: Sequence[CurrencyValue],
        target_currency_id: str | None = None,
    ) -> CurrencyValue | None:
        """
        Select one value record.

        Args:
            values: Currency-tagged values, in persisted order.
            target_currency_id: Currency id to select, or None for the
                base currency.

        Returns:
            The selected CurrencyValue, or None.
        """
        if not values:
            return None

        if target_currency_id is not None:
            selected = find_by_currency_id(values, target_currency_id)
            if selected is None:
                logger.debug("currency_value_not_found", extra={
                    "target_currency_id": target_currency_id,
                    "available": [v.currency.id for v in values],
                })
            return selected

        base = find_base(values)
        return base if base is not None else values[0]

    def resolve_summary(
        self,
        summary: KardexVariantSummary,
        target_currency_id: str | None = None,
    ) -> CurrencyValue | None:
        """Resolve against a summary's persisted ``total_values_by_currency``."""
        return self.resolve(summary.total_values_by_currency, target_currency_id)

    def symbol_of(
        self,
        values: Sequence[CurrencyValue],
        target_currency_id: str | None = None,
        default: str = DEFAULT_CURRENCY_SYMBOL,
    ) -> str:
        """Symbol of the resolved value, ``default`` when nothing matches."""
        selected = self.resolve(values, target_currency_id)
        if selected is None or not selected.currency.symbol:
            return default
        return selected.currency.symbol
