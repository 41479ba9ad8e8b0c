"""
kardex_config -- single public entrypoint for engine settings.

Responsibility:
    Provides the ONLY way to obtain engine settings at runtime through
    ``get_active_settings()``.  The settings source is either the path the
    caller passes or the packaged ``defaults.yaml``; nothing is read from
    the process environment.  Engines never read files; the view service
    receives an ``EngineSettings`` and passes the relevant values down as
    arguments.

Failure modes:
    - ``ConfigurationError`` -- missing, malformed or invalid settings file.

Audit relevance:
    Every successful ``get_active_settings()`` call emits a
    ``KARDEX_CONFIG_TRACE`` log entry with the source path and the
    resolved values.
"""

from __future__ import annotations

from pathlib import Path

from kardex_config.loader import load_settings
from kardex_config.schema import EngineSettings
from kardex_kernel.logging_config import get_logger

_logger = get_logger("config")

# Packaged defaults
_DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_settings(config_path: Path | None = None) -> EngineSettings:
    """The ONLY public settings entrypoint.

    Loads ``config_path`` when given, otherwise the packaged
    ``defaults.yaml``.
    """
    if config_path is None:
        config_path = _DEFAULT_CONFIG_PATH

    settings = load_settings(config_path)

    _logger.info(
        "KARDEX_CONFIG_TRACE",
        extra={
            "trace_type": "KARDEX_CONFIG_TRACE",
            "source": str(config_path),
            "display_currency_symbol": settings.display_currency_symbol,
            "low_stock_threshold": settings.low_stock_threshold,
            "default_currency_id": settings.default_currency_id,
        },
    )
    return settings


__all__ = [
    "EngineSettings",
    "get_active_settings",
    "load_settings",
]
