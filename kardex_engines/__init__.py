"""
Module: kardex_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    Kardex calculation engines.  This is the canonical import surface for
    higher layers (kardex_services).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import kardex_kernel (and sibling engine modules).
    MUST NOT import kardex_services or kardex_config.

Invariants enforced:
    - Purity: engines never read the clock, files or environment.
    - Decimal-only arithmetic for money; stock quantities are ints.
    - Determinism: identical inputs always produce identical outputs.
    - Totality: engines report ledger anomalies as data, never raise.

Audit relevance:
    Every engine invocation is traced via the ``@traced_engine`` decorator
    (see ``kardex_engines.tracer``), emitting KARDEX_ENGINE_TRACE log
    records with engine name, version, input fingerprint and duration.

Usage:
    from kardex_engines.currency import CurrencyValueResolver
    from kardex_engines.validation import StockLedgerValidator
    from kardex_engines.period import PeriodWindowAdjuster
    from kardex_engines.sales import SalesAggregator
"""

from kardex_kernel.logging_config import get_logger

logger = get_logger("engines")

from kardex_engines.currency import (
    DEFAULT_CURRENCY_SYMBOL,
    CurrencyValueResolver,
)
from kardex_engines.on_the_fly import (
    OnTheFlyValuator,
    PriceEntry,
    is_on_the_fly,
)
from kardex_engines.period import (
    BaselineSource,
    PeriodAdjustment,
    PeriodWindowAdjuster,
    effective_initial_stock,
)
from kardex_engines.product_totals import (
    ProductTotals,
    ProductTotalsCalculator,
)
from kardex_engines.sales import (
    SalesAggregator,
    SalesBreakdown,
)
from kardex_engines.stock_series import (
    StockPoint,
    StockSeriesBuilder,
    build_stock_series,
)
from kardex_engines.validation import (
    Issue,
    IssueCode,
    IssueType,
    Severity,
    StockLedgerValidator,
    ValidationResult,
    ValidationSummary,
    ValidationWarning,
    WarningCode,
    WarningType,
    should_validate,
    summarize,
)

__all__ = [
    # Currency
    "CurrencyValueResolver",
    "DEFAULT_CURRENCY_SYMBOL",
    # On-the-fly valuation
    "OnTheFlyValuator",
    "PriceEntry",
    "is_on_the_fly",
    # Validation
    "StockLedgerValidator",
    "ValidationResult",
    "ValidationSummary",
    "ValidationWarning",
    "Issue",
    "IssueCode",
    "IssueType",
    "Severity",
    "WarningCode",
    "WarningType",
    "should_validate",
    "summarize",
    # Period window
    "PeriodWindowAdjuster",
    "PeriodAdjustment",
    "BaselineSource",
    "effective_initial_stock",
    # Sales
    "SalesAggregator",
    "SalesBreakdown",
    # Stock series
    "StockSeriesBuilder",
    "StockPoint",
    "build_stock_series",
    # Product totals
    "ProductTotalsCalculator",
    "ProductTotals",
]

logger.debug("engines_package_loaded", extra={
    "module_count": 7,
    "modules": [
        "currency", "on_the_fly", "validation", "period",
        "sales", "stock_series", "product_totals",
    ],
})
