"""
kardex_engines.validation -- Stock ledger integrity checks.

Responsibility:
    Walk a variant's movement sequence and its summary, check the stock
    conservation formula, per-movement continuity and aggregate totals,
    and report every inconsistency as a structured Issue or Warning with a
    severity and, where one can be derived, a remediation suggestion.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumed by kardex_services.view_service; results are rendered by the caller.

Invariants enforced:
    - Conservation: effective_initial + total_in - total_out == final_stock.
    - Continuity: movements[i-1].final_stock + in - out == movements[i].final_stock.
    - Totals: sum(in) == total_in and sum(out) == total_out.
    - Non-negativity of final stock, effective opening stock and average
      unit cost.
    - Validity: ``is_valid`` is True iff there are no issues; warnings never
      affect validity.

Failure modes:
    - None.  ``validate`` is total over well-typed input; anomalies become
      Issue/Warning entries rather than exceptions.

Caller policy:
    Validation must be skipped (vacuously valid) whenever the visible
    movement set was narrowed by a movement-type or currency filter, since
    the conservation formula is defined over the complete sequence.  Date
    filtering is exempt because ``period_initial_stock`` keeps the formula
    valid.  See ``should_validate``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from kardex_kernel.domain.kardex import (
    KardexFilters,
    KardexMovement,
    KardexVariant,
)
from kardex_kernel.logging_config import get_logger
from kardex_engines.tracer import traced_engine

logger = get_logger("engines.validation")


# =============================================================================
# Result types
# =============================================================================


class IssueType(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class WarningType(str, Enum):
    SYNC = "sync"
    CALCULATION = "calculation"
    DATA = "data"


class IssueCode(str, Enum):
    """Closed set of invariant violations, each with its presentation."""

    STOCK_FORMULA_MISMATCH = "STOCK_FORMULA_MISMATCH"
    TOTAL_IN_MISMATCH = "TOTAL_IN_MISMATCH"
    TOTAL_OUT_MISMATCH = "TOTAL_OUT_MISMATCH"
    MOVEMENT_STOCK_INCONSISTENT = "MOVEMENT_STOCK_INCONSISTENT"
    NEGATIVE_AVG_COST = "NEGATIVE_AVG_COST"
    NEGATIVE_STOCK = "NEGATIVE_STOCK"
    NEGATIVE_INITIAL_STOCK = "NEGATIVE_INITIAL_STOCK"
    MOVEMENT_STOCK_MISMATCH = "MOVEMENT_STOCK_MISMATCH"
    NEGATIVE_ENTRY = "NEGATIVE_ENTRY"
    NEGATIVE_EXIT = "NEGATIVE_EXIT"
    INVALID_UNIT_COST = "INVALID_UNIT_COST"

    @property
    def issue_type(self) -> IssueType:
        return _ISSUE_SPECS[self][0]

    @property
    def severity(self) -> Severity:
        return _ISSUE_SPECS[self][1]

    @property
    def template(self) -> str:
        return _ISSUE_SPECS[self][2]


_ISSUE_SPECS: dict[IssueCode, tuple[IssueType, Severity, str]] = {
    IssueCode.STOCK_FORMULA_MISMATCH: (
        IssueType.ERROR, Severity.HIGH,
        "Calculated final stock ({calculated}) does not match the recorded final stock ({recorded})",
    ),
    IssueCode.TOTAL_IN_MISMATCH: (
        IssueType.ERROR, Severity.HIGH,
        "Calculated total in ({calculated}) does not match the recorded total in ({recorded})",
    ),
    IssueCode.TOTAL_OUT_MISMATCH: (
        IssueType.ERROR, Severity.HIGH,
        "Calculated total out ({calculated}) does not match the recorded total out ({recorded})",
    ),
    IssueCode.MOVEMENT_STOCK_INCONSISTENT: (
        IssueType.ERROR, Severity.HIGH,
        "Movement #{position} has an inconsistent final stock. Expected: {expected}, actual: {actual}",
    ),
    IssueCode.NEGATIVE_AVG_COST: (
        IssueType.ERROR, Severity.MEDIUM,
        "Average unit cost cannot be negative: {value}",
    ),
    IssueCode.NEGATIVE_STOCK: (
        IssueType.ERROR, Severity.HIGH,
        "Final stock cannot be negative: {value}",
    ),
    IssueCode.NEGATIVE_INITIAL_STOCK: (
        IssueType.ERROR, Severity.HIGH,
        "Initial stock cannot be negative: {value}",
    ),
    IssueCode.MOVEMENT_STOCK_MISMATCH: (
        IssueType.ERROR, Severity.HIGH,
        "Inconsistent final stock. Expected: {expected}, actual: {actual}",
    ),
    IssueCode.NEGATIVE_ENTRY: (
        IssueType.ERROR, Severity.MEDIUM,
        "Quantity in cannot be negative: {value}",
    ),
    IssueCode.NEGATIVE_EXIT: (
        IssueType.ERROR, Severity.MEDIUM,
        "Quantity out cannot be negative: {value}",
    ),
    IssueCode.INVALID_UNIT_COST: (
        IssueType.WARNING, Severity.MEDIUM,
        "Unit cost must be greater than 0 for {movement_type}",
    ),
}


class WarningCode(str, Enum):
    """Closed set of advisory conditions, each with its presentation."""

    INITIAL_STOCK_CORRECTION = "INITIAL_STOCK_CORRECTION"
    INVENTORY_OUT_OF_SYNC = "INVENTORY_OUT_OF_SYNC"
    MOVEMENT_VALUES_MISSING = "MOVEMENT_VALUES_MISSING"
    SUMMARY_VALUES_MISSING = "SUMMARY_VALUES_MISSING"

    @property
    def warning_type(self) -> WarningType:
        return _WARNING_SPECS[self][0]

    @property
    def template(self) -> str:
        return _WARNING_SPECS[self][1]


_PERSIST_VALUES_SUGGESTION = (
    "Run the kardex correction to persist the currency values"
)

_WARNING_SPECS: dict[WarningCode, tuple[WarningType, str]] = {
    WarningCode.INITIAL_STOCK_CORRECTION: (
        WarningType.SYNC,
        "Initial stock looks wrong. It should be {correct} instead of "
        "{current} for the stock formula to hold.",
    ),
    WarningCode.INVENTORY_OUT_OF_SYNC: (
        WarningType.SYNC,
        "Kardex stock ({kardex_stock}) does not match the variant inventory "
        "({inventory_quantity})",
    ),
    WarningCode.MOVEMENT_VALUES_MISSING: (
        WarningType.DATA,
        "{movement_type} movement #{position} has no multi-currency values. "
        "They are being calculated on the fly.",
    ),
    WarningCode.SUMMARY_VALUES_MISSING: (
        WarningType.CALCULATION,
        "No currency values are stored. Values are being calculated on the fly.",
    ),
}

_PERIOD_BASELINE_SUGGESTION = (
    "The period initial stock is calculated. Check the movements dated "
    "before the start of the period."
)
_RESET_INITIAL_STOCK_SUGGESTION = (
    "Run the kardex correction with resetInitialStock=true to set the "
    "initial stock to {correct}"
)
_INVENTORY_SYNC_SUGGESTION = (
    "Run the kardex correction to synchronise the variant inventory"
)


@dataclass(frozen=True)
class Issue:
    """A violated invariant."""

    type: IssueType
    code: IssueCode
    message: str
    severity: Severity

    @classmethod
    def of(cls, code: IssueCode, **params: object) -> Issue:
        return cls(
            type=code.issue_type,
            code=code,
            message=code.template.format(**params),
            severity=code.severity,
        )


@dataclass(frozen=True)
class ValidationWarning:
    """An advisory condition that does not affect validity."""

    type: WarningType
    message: str
    suggestion: str | None = None
    code: WarningCode | None = None

    @classmethod
    def of(
        cls,
        code: WarningCode,
        suggestion: str | None = None,
        **params: object,
    ) -> ValidationWarning:
        return cls(
            type=code.warning_type,
            message=code.template.format(**params),
            suggestion=suggestion,
            code=code,
        )


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    issues: tuple[Issue, ...] = ()
    warnings: tuple[ValidationWarning, ...] = ()

    @classmethod
    def of(cls, issues: Sequence[Issue], warnings: Sequence[ValidationWarning]) -> ValidationResult:
        return cls(is_valid=not issues, issues=tuple(issues), warnings=tuple(warnings))

    @classmethod
    def vacuous(cls) -> ValidationResult:
        """Result for a skipped validation: valid, nothing reported."""
        return cls(is_valid=True)

    def codes(self) -> tuple[IssueCode, ...]:
        return tuple(issue.code for issue in self.issues)


@dataclass(frozen=True)
class ValidationSummary:
    """Counts a caller needs to decide how loudly to present a result."""

    has_errors: bool
    has_warnings: bool
    error_count: int
    warning_count: int
    critical_issues: tuple[Issue, ...]

    @property
    def blocks_correction(self) -> bool:
        """High-severity errors suppress any "apply correction" action."""
        return len(self.critical_issues) > 0


def summarize(result: ValidationResult) -> ValidationSummary:
    errors = [i for i in result.issues if i.type == IssueType.ERROR]
    critical = tuple(i for i in errors if i.severity == Severity.HIGH)
    return ValidationSummary(
        has_errors=len(errors) > 0,
        has_warnings=len(result.warnings) > 0,
        error_count=len(errors),
        warning_count=len(result.warnings),
        critical_issues=critical,
    )


def should_validate(filters: KardexFilters | None) -> bool:
    """False when the visible movement set is a partial view."""
    if filters is None:
        return True
    return not filters.narrows_movement_set


# =============================================================================
# Validator
# =============================================================================


class StockLedgerValidator:
    """
    Pure validator for one variant's ledger.

    Contract:
        No I/O, fully deterministic, total over well-typed input.
    Guarantees:
        - Checks run in a fixed order, so issue and warning order is stable.
        - A single continuity break yields exactly one
          MOVEMENT_STOCK_INCONSISTENT issue naming its 1-based position.
        - A totals mismatch on one side never reports the other side.
    Non-goals:
        - Does not decide whether to skip itself under filters
          (see ``should_validate``).
        - Does not repair the ledger; it only suggests corrections.
    """

    @traced_engine("stock_ledger_validator", "1.0", fingerprint_fields=("variant", "inventory_quantity"))
    def validate(
        self,
        variant: KardexVariant,
        inventory_quantity: int | None = None,
    ) -> ValidationResult:
        """
        Validate a variant's summary against its movements.

        Args:
            variant: The complete variant snapshot.
            inventory_quantity: Optional inventory counter of the variant,
                compared with the ledger's final stock.

        Returns:
            ValidationResult with issues and warnings in check order.
        """
        summary = variant.summary
        movements = variant.movements
        issues: list[Issue] = []
        warnings: list[ValidationWarning] = []

        logger.info("ledger_validation_started", extra={
            "variant_id": variant.id,
            "movement_count": len(movements),
            "period_adjusted": summary.period_initial_stock is not None,
        })

        effective_initial = summary.effective_initial_stock

        # Stock formula
        calculated_final = effective_initial + summary.total_in - summary.total_out
        if calculated_final != summary.final_stock:
            issues.append(Issue.of(
                IssueCode.STOCK_FORMULA_MISMATCH,
                calculated=calculated_final,
                recorded=summary.final_stock,
            ))

            correct_initial = summary.final_stock - summary.total_in + summary.total_out
            if correct_initial != effective_initial and correct_initial >= 0:
                if summary.period_initial_stock is not None:
                    suggestion = _PERIOD_BASELINE_SUGGESTION
                else:
                    suggestion = _RESET_INITIAL_STOCK_SUGGESTION.format(correct=correct_initial)
                warnings.append(ValidationWarning.of(
                    WarningCode.INITIAL_STOCK_CORRECTION,
                    suggestion=suggestion,
                    correct=correct_initial,
                    current=effective_initial,
                ))

        if inventory_quantity is not None and inventory_quantity != summary.final_stock:
            warnings.append(ValidationWarning.of(
                WarningCode.INVENTORY_OUT_OF_SYNC,
                suggestion=_INVENTORY_SYNC_SUGGESTION,
                kardex_stock=summary.final_stock,
                inventory_quantity=inventory_quantity,
            ))

        # Totals recomputed from movements
        calculated_in = sum(m.in_qty for m in movements)
        calculated_out = sum(m.out_qty for m in movements)
        if calculated_in != summary.total_in:
            issues.append(Issue.of(
                IssueCode.TOTAL_IN_MISMATCH,
                calculated=calculated_in,
                recorded=summary.total_in,
            ))
        if calculated_out != summary.total_out:
            issues.append(Issue.of(
                IssueCode.TOTAL_OUT_MISMATCH,
                calculated=calculated_out,
                recorded=summary.total_out,
            ))

        # Sequential continuity
        for index in range(1, len(movements)):
            movement = movements[index]
            expected = movements[index - 1].final_stock + movement.in_qty - movement.out_qty
            if expected != movement.final_stock:
                issues.append(Issue.of(
                    IssueCode.MOVEMENT_STOCK_INCONSISTENT,
                    position=index + 1,
                    expected=expected,
                    actual=movement.final_stock,
                ))

        # Data completeness
        for index, movement in enumerate(movements):
            if movement.is_sales_movement and not movement.has_values:
                warnings.append(ValidationWarning.of(
                    WarningCode.MOVEMENT_VALUES_MISSING,
                    suggestion=_PERSIST_VALUES_SUGGESTION,
                    movement_type=movement.type.value,
                    position=index + 1,
                ))

        if not summary.total_values_by_currency:
            warnings.append(ValidationWarning.of(
                WarningCode.SUMMARY_VALUES_MISSING,
                suggestion=_PERSIST_VALUES_SUGGESTION,
            ))

        # Sanity bounds
        if not summary.avg_unit_cost.is_nan() and summary.avg_unit_cost < Decimal("0"):
            issues.append(Issue.of(IssueCode.NEGATIVE_AVG_COST, value=summary.avg_unit_cost))
        if summary.final_stock < 0:
            issues.append(Issue.of(IssueCode.NEGATIVE_STOCK, value=summary.final_stock))
        if effective_initial < 0:
            issues.append(Issue.of(IssueCode.NEGATIVE_INITIAL_STOCK, value=effective_initial))

        result = ValidationResult.of(issues, warnings)

        if result.is_valid:
            logger.info("ledger_validation_completed", extra={
                "variant_id": variant.id,
                "is_valid": True,
                "warning_count": len(result.warnings),
            })
        else:
            logger.warning("ledger_validation_failed", extra={
                "variant_id": variant.id,
                "issue_codes": [i.code.value for i in result.issues],
                "warning_count": len(result.warnings),
            })

        return result

    @traced_engine("stock_ledger_validator", "1.0", fingerprint_fields=("movement", "previous_stock"))
    def validate_movement(
        self,
        movement: KardexMovement,
        previous_stock: int,
    ) -> tuple[Issue, ...]:
        """
        Validate one movement in isolation against the stock before it.

        Unit cost is only checked when the movement carries one.
        """
        issues: list[Issue] = []

        expected = previous_stock + movement.in_qty - movement.out_qty
        if expected != movement.final_stock:
            issues.append(Issue.of(
                IssueCode.MOVEMENT_STOCK_MISMATCH,
                expected=expected,
                actual=movement.final_stock,
            ))

        if movement.in_qty < 0:
            issues.append(Issue.of(IssueCode.NEGATIVE_ENTRY, value=movement.in_qty))
        if movement.out_qty < 0:
            issues.append(Issue.of(IssueCode.NEGATIVE_EXIT, value=movement.out_qty))

        if (
            movement.is_sales_movement
            and movement.unit_cost is not None
            and movement.unit_cost <= Decimal("0")
        ):
            issues.append(Issue.of(
                IssueCode.INVALID_UNIT_COST,
                movement_type=movement.type.value,
            ))

        return tuple(issues)

    def validate_stream(
        self,
        movements: Sequence[KardexMovement],
        opening_stock: int,
    ) -> tuple[tuple[int, Issue], ...]:
        """
        Run ``validate_movement`` over a sequence, incrementally.

        Each movement is checked against the recorded final stock of the
        one before it (``opening_stock`` for the first).

        Returns:
            ``(1-based position, issue)`` pairs in sequence order.
        """
        found: list[tuple[int, Issue]] = []
        previous = opening_stock
        for position, movement in enumerate(movements, start=1):
            for issue in self.validate_movement(movement, previous):
                found.append((position, issue))
            previous = movement.final_stock

        logger.debug("movement_stream_validated", extra={
            "movement_count": len(movements),
            "issue_count": len(found),
        })
        return tuple(found)
