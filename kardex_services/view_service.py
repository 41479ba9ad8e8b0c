"""
kardex_services.view_service -- Per-variant derivation over the pure engines.

Responsibility:
    For a selected currency and a set of active filters, derive everything
    the Kardex viewer shows for a variant: the effective opening stock, the
    validation result, the resolved currency value (persisted or computed
    on the fly) and the net sales figure.  Rolls variants up into product
    and page views.

Architecture position:
    Services -- orchestration over engines + settings.
    Bridges the config layer (EngineSettings) to the engine layer; holds no
    state beyond its engine instances and settings.

Invariants enforced:
    - Order: PeriodWindowAdjuster -> StockLedgerValidator ->
      CurrencyValueResolver (OnTheFlyValuator when the summary has no
      persisted values) -> SalesAggregator.  Every step after the first
      reads the adjusted variant, so the validator reports against the
      period baseline.
    - Validation is skipped (vacuously valid, flagged) whenever a
      movement-type or currency filter narrows the movement set.
    - On-the-fly valuation is always surfaced through ``on_the_fly``; it is
      never silently substituted.

Failure modes:
    - None for well-typed input; engines report anomalies as data.

Usage:
    service = KardexViewService(get_active_settings())
    view = service.variant_view(variant, filters=filters, target_currency_id="usd")
    if view.on_the_fly:
        ...  # flag the figure as unvalidated
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from kardex_config.schema import EngineSettings
from kardex_engines.currency import CurrencyValueResolver
from kardex_engines.on_the_fly import OnTheFlyValuator, PriceEntry, is_on_the_fly
from kardex_engines.period import PeriodAdjustment, PeriodWindowAdjuster
from kardex_engines.product_totals import ProductTotals, ProductTotalsCalculator
from kardex_engines.sales import SalesAggregator
from kardex_engines.validation import (
    StockLedgerValidator,
    ValidationResult,
    should_validate,
)
from kardex_kernel.domain.kardex import (
    CurrencyValue,
    KardexFilters,
    KardexPage,
    KardexProduct,
    KardexVariant,
    Pagination,
)
from kardex_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.view_service")


@dataclass(frozen=True)
class VariantView:
    """Everything derived for one variant under one currency and filter set."""

    variant_id: str
    adjustment: PeriodAdjustment
    validation: ValidationResult
    validation_skipped: bool
    currency_values: tuple[CurrencyValue, ...]
    currency_value: CurrencyValue | None
    currency_symbol: str
    on_the_fly: bool
    net_sales: Decimal

    @property
    def variant(self) -> KardexVariant:
        """The variant as seen through the period window."""
        return self.adjustment.variant

    @property
    def effective_initial_stock(self) -> int:
        return self.adjustment.baseline


@dataclass(frozen=True)
class ProductView:
    product: KardexProduct
    variants: tuple[VariantView, ...]
    totals: ProductTotals


@dataclass(frozen=True)
class PageView:
    products: tuple[ProductView, ...]
    pagination: Pagination


class KardexViewService:
    """
    Composes the Kardex engines for the viewer.

    Contract:
        Pure functions of their inputs; results may be memoized on
        (variant, filters, currency, prices).
    Guarantees:
        - A variant view never mixes data from the raw and the adjusted
          variant: every engine after the adjuster reads the adjusted one.
    Non-goals:
        - Does not fetch data, persist corrections or render.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        resolver: CurrencyValueResolver | None = None,
        valuator: OnTheFlyValuator | None = None,
        validator: StockLedgerValidator | None = None,
        adjuster: PeriodWindowAdjuster | None = None,
        sales: SalesAggregator | None = None,
        totals: ProductTotalsCalculator | None = None,
    ):
        self._settings = settings or EngineSettings.with_defaults()
        self._resolver = resolver or CurrencyValueResolver()
        self._valuator = valuator or OnTheFlyValuator()
        self._validator = validator or StockLedgerValidator()
        self._adjuster = adjuster or PeriodWindowAdjuster()
        self._sales = sales or SalesAggregator()
        self._totals = totals or ProductTotalsCalculator(self._resolver)

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def _currency(self, target_currency_id: str | None) -> str | None:
        if target_currency_id is not None:
            return target_currency_id
        return self._settings.default_currency_id

    def variant_view(
        self,
        variant: KardexVariant,
        filters: KardexFilters | None = None,
        target_currency_id: str | None = None,
        prices: Sequence[PriceEntry] = (),
        accepted_currency_ids: Iterable[str] | None = None,
        inventory_quantity: int | None = None,
    ) -> VariantView:
        """
        Derive the view of one variant.

        Args:
            variant: Variant snapshot as fetched.
            filters: Filters the snapshot was fetched with.
            target_currency_id: Selected currency; defaults to the
                settings' ``default_currency_id``.
            prices: Product price list, used only for on-the-fly valuation.
            accepted_currency_ids: Currencies the store accepts.
            inventory_quantity: Variant inventory counter, for the sync check.

        Returns:
            VariantView.
        """
        currency_id = self._currency(target_currency_id)

        with LogContext.bind(variant_id=variant.id, currency_id=currency_id):
            date_range = filters.date_range if filters is not None else None
            adjustment = self._adjuster.adjust(variant, date_range)
            adjusted = adjustment.variant

            skipped = not should_validate(filters)
            if skipped:
                validation = ValidationResult.vacuous()
                logger.info("variant_validation_skipped", extra={
                    "movement_type_filter": [m.value for m in filters.movement_type],
                    "currency_filter": list(filters.currency),
                })
            else:
                validation = self._validator.validate(adjusted, inventory_quantity)

            on_the_fly = is_on_the_fly(adjusted.summary)
            if on_the_fly:
                currency_values = self._valuator.compute_from_stock(
                    adjusted.summary.final_stock,
                    prices,
                    accepted_currency_ids,
                )
            else:
                currency_values = adjusted.summary.total_values_by_currency

            currency_value = self._resolver.resolve(currency_values, currency_id)
            symbol = self._resolver.symbol_of(
                currency_values,
                currency_id,
                default=self._settings.display_currency_symbol,
            )
            net_sales = self._sales.net_sales(adjusted.movements, currency_id)

            logger.info("variant_view_derived", extra={
                "baseline_source": adjustment.source.value,
                "is_valid": validation.is_valid,
                "validation_skipped": skipped,
                "on_the_fly": on_the_fly,
                "has_currency_value": currency_value is not None,
                "net_sales": net_sales,
            })

        return VariantView(
            variant_id=variant.id,
            adjustment=adjustment,
            validation=validation,
            validation_skipped=skipped,
            currency_values=tuple(currency_values),
            currency_value=currency_value,
            currency_symbol=symbol,
            on_the_fly=on_the_fly,
            net_sales=net_sales,
        )

    def product_view(
        self,
        product: KardexProduct,
        filters: KardexFilters | None = None,
        target_currency_id: str | None = None,
        prices: Sequence[PriceEntry] = (),
        accepted_currency_ids: Iterable[str] | None = None,
        inventory_by_variant: Mapping[str, int] | None = None,
    ) -> ProductView:
        """Derive every variant of a product and roll them up."""
        accepted = tuple(accepted_currency_ids) if accepted_currency_ids is not None else None
        inventory = inventory_by_variant or {}

        with LogContext.bind(product_id=product.product.id):
            views = tuple(
                self.variant_view(
                    variant,
                    filters=filters,
                    target_currency_id=target_currency_id,
                    prices=prices,
                    accepted_currency_ids=accepted,
                    inventory_quantity=inventory.get(variant.id),
                )
                for variant in product.variants
            )

            adjusted_product = replace(product, variants=tuple(v.variant for v in views))
            totals = self._totals.totals(
                adjusted_product,
                target_currency_id=self._currency(target_currency_id),
                low_stock_threshold=self._settings.low_stock_threshold,
                values_by_variant={v.variant_id: v.currency_values for v in views},
            )

        return ProductView(product=product, variants=views, totals=totals)

    def page_view(
        self,
        page: KardexPage,
        filters: KardexFilters | None = None,
        target_currency_id: str | None = None,
        prices_by_product: Mapping[str, Sequence[PriceEntry]] | None = None,
        accepted_currency_ids: Iterable[str] | None = None,
        inventory_by_variant: Mapping[str, int] | None = None,
    ) -> PageView:
        """Derive a full response page."""
        prices = prices_by_product or {}
        accepted = tuple(accepted_currency_ids) if accepted_currency_ids is not None else None

        products = tuple(
            self.product_view(
                product,
                filters=filters,
                target_currency_id=target_currency_id,
                prices=prices.get(product.product.id, ()),
                accepted_currency_ids=accepted,
                inventory_by_variant=inventory_by_variant,
            )
            for product in page.data
        )

        logger.info("kardex_page_derived", extra={
            "page": page.pagination.page,
            "product_count": len(products),
            "invalid_variant_count": sum(
                1 for p in products for v in p.variants if not v.validation.is_valid
            ),
        })
        return PageView(products=products, pagination=page.pagination)
