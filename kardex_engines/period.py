"""
kardex_engines.period -- Opening-stock substitution for date-filtered views.

Responsibility:
    When movements are viewed through a date range, replace the all-time
    opening stock with the opening stock of the period, and record that
    substitution so the validator and aggregators work against the right
    baseline.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Runs first in kardex_services.view_service; its adjusted variant is what the
    validator, resolver and sales aggregator receive.

Invariants enforced:
    - A persisted ``period_initial_stock`` (computed by the data layer)
      always wins over anything derived here.
    - When derived, the period opening stock is the ``final_stock`` of the
      last movement dated before the window start, or the all-time
      ``initial_stock`` when no movement precedes the window.
    - The window summary is read off the supplied one: totals drop the
      movements outside the window and the final stock drops the net of
      the movements after it.  A summary that disagrees with its movements
      fails the same formula and totals checks through any window as it
      does unfiltered.
    - Inputs are never mutated; a new variant is built with
      ``dataclasses.replace``.

Failure modes:
    - None.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from kardex_kernel.domain.kardex import (
    DateRange,
    KardexMovement,
    KardexVariant,
    KardexVariantSummary,
)
from kardex_kernel.logging_config import get_logger
from kardex_engines.tracer import traced_engine

logger = get_logger("engines.period")


class BaselineSource(str, Enum):
    """Where the opening stock of a view comes from."""

    ALL_TIME = "all_time"  # summary.initial_stock
    PERSISTED = "persisted"  # summary.period_initial_stock from the data layer
    DERIVED = "derived"  # computed here from pre-window movements


@dataclass(frozen=True)
class PeriodAdjustment:
    """Outcome of a period adjustment for one variant."""

    variant: KardexVariant
    baseline: int
    all_time_initial_stock: int
    source: BaselineSource
    date_range: DateRange | None = None

    @property
    def substituted(self) -> bool:
        """True when the opening stock differs in origin from the all-time one."""
        return self.source != BaselineSource.ALL_TIME


def effective_initial_stock(summary: KardexVariantSummary) -> int:
    """``period_initial_stock`` when present, else ``initial_stock``."""
    return summary.effective_initial_stock


class PeriodWindowAdjuster:
    """
    Pure adjuster for date-filtered ledgers.

    Contract:
        No I/O, fully deterministic.
    Guarantees:
        - Without a date range and without a persisted period figure the
          variant is returned unchanged with source ALL_TIME.
        - With a persisted period figure the variant is returned unchanged
          with source PERSISTED.
        - Otherwise the supplied movements are read as the complete
          sequence and the window is derived (source DERIVED).
    Non-goals:
        - Does not sort movements; supplied order is chronological.
    """

    @traced_engine("period_window_adjuster", "1.0", fingerprint_fields=("variant", "date_range"))
    def adjust(
        self,
        variant: KardexVariant,
        date_range: DateRange | None = None,
    ) -> PeriodAdjustment:
        """
        Resolve the opening stock of the view.

        Args:
            variant: Variant snapshot as fetched.
            date_range: Active date filter, if any.

        Returns:
            PeriodAdjustment carrying the (possibly rebuilt) variant.
        """
        summary = variant.summary

        if summary.period_initial_stock is not None:
            logger.debug("period_baseline_persisted", extra={
                "variant_id": variant.id,
                "period_initial_stock": summary.period_initial_stock,
                "initial_stock": summary.initial_stock,
            })
            return PeriodAdjustment(
                variant=variant,
                baseline=summary.period_initial_stock,
                all_time_initial_stock=summary.initial_stock,
                source=BaselineSource.PERSISTED,
                date_range=date_range,
            )

        if date_range is None or date_range.is_open:
            return PeriodAdjustment(
                variant=variant,
                baseline=summary.initial_stock,
                all_time_initial_stock=summary.initial_stock,
                source=BaselineSource.ALL_TIME,
                date_range=date_range,
            )

        return self._derive_window(variant, date_range)

    def _derive_window(
        self,
        variant: KardexVariant,
        date_range: DateRange,
    ) -> PeriodAdjustment:
        summary = variant.summary

        opening = summary.initial_stock
        before: list[KardexMovement] = []
        in_window: list[KardexMovement] = []
        after: list[KardexMovement] = []
        for movement in variant.movements:
            if date_range.is_before(movement.date):
                opening = movement.final_stock
                before.append(movement)
            elif date_range.contains(movement.date):
                in_window.append(movement)
            else:
                after.append(movement)

        # Window figures are the supplied totals less the excluded movements,
        # so a discrepancy in the summary is still visible in the window.
        outside = before + after
        adjusted_summary = replace(
            summary,
            period_initial_stock=opening,
            total_in=summary.total_in - sum(m.in_qty for m in outside),
            total_out=summary.total_out - sum(m.out_qty for m in outside),
            final_stock=summary.final_stock - sum(m.in_qty - m.out_qty for m in after),
        )
        adjusted = replace(variant, summary=adjusted_summary, movements=tuple(in_window))

        logger.info("period_baseline_derived", extra={
            "variant_id": variant.id,
            "start": date_range.start,
            "end": date_range.end,
            "opening_stock": opening,
            "initial_stock": summary.initial_stock,
            "window_movements": len(in_window),
            "movements_before": len(before),
            "movements_after": len(after),
        })

        return PeriodAdjustment(
            variant=adjusted,
            baseline=opening,
            all_time_initial_stock=summary.initial_stock,
            source=BaselineSource.DERIVED,
            date_range=date_range,
        )
