"""
Typed exception hierarchy for the Kardex kernel.

===============================================================================
WHERE EXCEPTIONS ARE RAISED
===============================================================================

The Kardex engines never raise for well-typed input: every ledger anomaly
(formula mismatch, broken continuity, negative stock, missing currency
values) is reported as a structured Issue or Warning in a ValidationResult.

Exceptions exist only at the two integration boundaries:
  - decoding API payloads into domain types (a payload without a required
    field is a caller bug, not a ledger condition), and
  - loading engine settings.

Every exception has a CODE class attribute (machine-readable) and carries
its context as attributes so the structured log formatter can lift them.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    KardexKernelError (base)
    |
    +-- DecodingError
    |   +-- MissingFieldError
    |   +-- InvalidFieldError
    |   +-- UnknownMovementTypeError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Decoding        | MISSING_FIELD               | Required payload key absent
                | INVALID_FIELD               | Value cannot be coerced (date, number)
                | UNKNOWN_MOVEMENT_TYPE       | type not in COMPRA/VENTA/DEVOLUCION/AJUSTE
----------------|-----------------------------|-----------------------------------------
Configuration   | INVALID_CONFIGURATION       | Settings file or value rejected
"""

from typing import Any


class KardexKernelError(Exception):
    """
    Base exception for all kardex kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "KARDEX_KERNEL_ERROR"


# Decoding exceptions


class DecodingError(KardexKernelError):
    """Base exception for payload decoding errors."""

    code: str = "DECODING_ERROR"


class MissingFieldError(DecodingError):
    """A required key is absent from a payload."""

    code: str = "MISSING_FIELD"

    def __init__(self, entity: str, field: str):
        self.entity = entity
        self.field = field
        super().__init__(f"{entity} payload is missing required field '{field}'")


class InvalidFieldError(DecodingError):
    """A payload value cannot be coerced to its domain type."""

    code: str = "INVALID_FIELD"

    def __init__(self, entity: str, field: str, value: Any):
        self.entity = entity
        self.field = field
        self.value = repr(value)
        super().__init__(f"{entity}.{field} has invalid value {value!r}")


class UnknownMovementTypeError(DecodingError):
    """Movement type is not one of the ledger's movement types."""

    code: str = "UNKNOWN_MOVEMENT_TYPE"

    def __init__(self, movement_type: Any):
        self.movement_type = repr(movement_type)
        super().__init__(f"Unknown movement type: {movement_type!r}")


# Configuration exceptions


class ConfigurationError(KardexKernelError):
    """Engine settings could not be loaded or are invalid."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        super().__init__(message)
