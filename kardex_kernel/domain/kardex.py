"""
Kardex -- Immutable domain types for the perpetual-inventory ledger.

Responsibility:
    Defines the read-only snapshot a data-fetching collaborator hands to the
    engines: products, variants, their chronological movements, the variant
    summary, and the currency-tagged valuations attached to each.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.
    Imported by kardex_kernel.domain.decoding and every engine module.

Invariants enforced:
    - Immutability: every type is a frozen dataclass and every sequence is a
      tuple, so any engine call can be memoized on its arguments.
    - Stock quantities are ``int``; monetary figures and exchange rates are
      ``Decimal`` (never float).
    - ``exchange_rate == 1`` marks the ledger's base currency.

Failure modes:
    - None at this layer.  Shape errors are raised by the decoder; ledger
      anomalies are reported by the validator, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum

BASE_EXCHANGE_RATE = Decimal("1")


class MovementType(str, Enum):
    """Kind of ledger entry."""

    COMPRA = "COMPRA"  # Purchase
    VENTA = "VENTA"  # Sale
    DEVOLUCION = "DEVOLUCION"  # Customer return
    AJUSTE = "AJUSTE"  # Manual adjustment


SALES_MOVEMENT_TYPES = frozenset({MovementType.VENTA, MovementType.DEVOLUCION})


class ValuationMethod(str, Enum):
    """Valuation method requested from the data layer."""

    WEIGHTED_AVERAGE = "WEIGHTED_AVERAGE"
    FIFO = "FIFO"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# =============================================================================
# Currency values
# =============================================================================


@dataclass(frozen=True)
class CurrencyRef:
    """Identifies a currency. ``id`` is the key; code and symbol are display-only."""

    id: str
    code: str
    symbol: str


@dataclass(frozen=True)
class CurrencyValue:
    """A monetary figure expressed in one currency."""

    currency: CurrencyRef
    unit_cost: Decimal | None = None
    total_cost: Decimal | None = None
    total_value: Decimal | None = None
    exchange_rate: Decimal | None = None
    exchange_rate_date: datetime | None = None

    @property
    def currency_id(self) -> str:
        return self.currency.id

    @property
    def is_base(self) -> bool:
        """True when this value is in the ledger's native currency."""
        return self.exchange_rate is not None and self.exchange_rate == BASE_EXCHANGE_RATE


# =============================================================================
# Ledger entries
# =============================================================================


@dataclass(frozen=True)
class KardexMovement:
    """
    One ledger entry.

    ``in_qty``/``out_qty`` are the non-negative quantities entering and leaving
    stock; ``final_stock`` is the running balance after this entry.  The
    supplied order of movements is chronological.
    """

    date: datetime
    type: MovementType
    in_qty: int
    out_qty: int
    final_stock: int
    unit_cost: Decimal | None = None
    total_cost: Decimal | None = None
    values: tuple[CurrencyValue, ...] = ()
    reference: str | None = None

    @property
    def has_values(self) -> bool:
        return len(self.values) > 0

    @property
    def is_sales_movement(self) -> bool:
        return self.type in SALES_MOVEMENT_TYPES

    @property
    def net_quantity(self) -> int:
        return self.in_qty - self.out_qty

    @property
    def timestamp(self) -> datetime:
        """Movement date as an aware datetime (naive dates are read as UTC)."""
        if self.date.tzinfo is None:
            return self.date.replace(tzinfo=UTC)
        return self.date


@dataclass(frozen=True)
class KardexVariantSummary:
    """Persisted aggregate for one variant's ledger."""

    initial_stock: int
    total_in: int
    total_out: int
    final_stock: int
    avg_unit_cost: Decimal
    total_values_by_currency: tuple[CurrencyValue, ...] = ()
    period_initial_stock: int | None = None

    @property
    def effective_initial_stock(self) -> int:
        """Opening stock for the view: the period figure when present."""
        if self.period_initial_stock is not None:
            return self.period_initial_stock
        return self.initial_stock


@dataclass(frozen=True)
class KardexVariant:
    id: str
    name: str
    summary: KardexVariantSummary
    movements: tuple[KardexMovement, ...] = ()
    sku: str | None = None


@dataclass(frozen=True)
class ProductRef:
    id: str
    name: str
    categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class KardexProduct:
    product: ProductRef
    variants: tuple[KardexVariant, ...] = ()


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


@dataclass(frozen=True)
class KardexPage:
    """One response page from the data layer."""

    data: tuple[KardexProduct, ...]
    pagination: Pagination


# =============================================================================
# Filters
# =============================================================================


def _as_date(moment: date | datetime) -> date:
    if isinstance(moment, datetime):
        return moment.date()
    return moment


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-date window. Either bound may be open."""

    start: date | None = None
    end: date | None = None

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None

    def is_before(self, moment: date | datetime) -> bool:
        """True when ``moment`` falls before the window's start."""
        return self.start is not None and _as_date(moment) < self.start

    def contains(self, moment: date | datetime) -> bool:
        day = _as_date(moment)
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True


@dataclass(frozen=True)
class KardexFilters:
    """
    Filters the caller applied when fetching the ledger.

    The engines only read ``date_range`` and ``narrows_movement_set``; the
    rest is carried so callers can rebuild the data-layer query.
    """

    page: int | None = None
    limit: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    search: str | None = None
    sort_by: str | None = None
    sort_order: SortOrder | None = None
    valuation_method: ValuationMethod | None = None
    category: tuple[str, ...] = ()
    movement_type: tuple[MovementType, ...] = ()
    currency: tuple[str, ...] = ()

    @property
    def date_range(self) -> DateRange | None:
        if self.start_date is None and self.end_date is None:
            return None
        return DateRange(start=self.start_date, end=self.end_date)

    @property
    def narrows_movement_set(self) -> bool:
        """True when only part of each variant's movements is visible."""
        return bool(self.movement_type) or bool(self.currency)

    def to_query_params(self) -> list[tuple[str, str]]:
        """Query pairs for the data layer, in its expected order."""
        params: list[tuple[str, str]] = []
        if self.page:
            params.append(("page", str(self.page)))
        if self.limit:
            params.append(("limit", str(self.limit)))
        if self.start_date:
            params.append(("startDate", self.start_date.isoformat()))
        if self.end_date:
            params.append(("endDate", self.end_date.isoformat()))
        if self.search:
            params.append(("query", self.search))
        if self.sort_by:
            params.append(("sortBy", self.sort_by))
        if self.sort_order:
            params.append(("sortOrder", self.sort_order.value))
        if self.valuation_method:
            params.append(("valuationMethod", self.valuation_method.value))
        params.extend(("category", cat) for cat in self.category)
        params.extend(("movementType", mt.value) for mt in self.movement_type)
        params.extend(("currency", cur) for cur in self.currency)
        return params
