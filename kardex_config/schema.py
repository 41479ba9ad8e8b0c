"""
Kardex engine settings schema.

Defines the structure and defaults of the settings the view service
passes to the engines.  Values are loaded from YAML by
``kardex_config.loader``; engines never read configuration themselves.
"""

from dataclasses import dataclass
from typing import Any, Self

from kardex_kernel.exceptions import ConfigurationError
from kardex_kernel.logging_config import get_logger

logger = get_logger("config.schema")


@dataclass(frozen=True)
class EngineSettings:
    """
    Settings for one engine run.

        settings = EngineSettings(
            low_stock_threshold=5,
            default_currency_id="usd",
        )
    """

    # Display fallback when no currency value resolves
    display_currency_symbol: str = "$"

    # A variant is low on stock at or below this quantity
    low_stock_threshold: int = 0

    # Currency used when the caller does not select one
    default_currency_id: str | None = None

    def __post_init__(self):
        if not self.display_currency_symbol:
            raise ConfigurationError("display_currency_symbol cannot be empty")
        if isinstance(self.low_stock_threshold, bool) or not isinstance(self.low_stock_threshold, int):
            raise ConfigurationError(
                f"low_stock_threshold must be an integer, got {self.low_stock_threshold!r}"
            )
        if self.default_currency_id == "":
            object.__setattr__(self, "default_currency_id", None)

    @classmethod
    def with_defaults(cls) -> Self:
        """Create settings with the packaged defaults."""
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create settings from a dictionary (e.g., a parsed YAML section)."""
        logger.info(
            "engine_settings_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(f"Unknown settings: {sorted(unknown)}")
        return cls(**data)
