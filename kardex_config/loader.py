"""
Settings loader (``kardex_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses its ``settings`` section into an
``EngineSettings`` instance.  The single public entry point for runtime
settings is ``kardex_config.get_active_settings()``.

Failure modes
-------------
* Missing YAML file  -> ``ConfigurationError``.
* Malformed YAML  -> ``ConfigurationError`` chained to ``yaml.YAMLError``.
* Unknown or invalid keys -> ``ConfigurationError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from kardex_config.schema import EngineSettings
from kardex_kernel.exceptions import ConfigurationError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Postconditions:
        - Returns a ``dict`` (empty if the YAML is empty).
    Raises:
        ConfigurationError: if the file is missing, unreadable or not a
            mapping.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Settings file not found: {path}", source=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Malformed settings file {path}: {e}", source=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Settings file {path} must contain a mapping, got {type(data).__name__}",
            source=str(path),
        )
    return data


def parse_settings(data: dict[str, Any]) -> EngineSettings:
    """Parse the ``settings`` section of a loaded YAML document."""
    section = data.get("settings") or {}
    if not isinstance(section, dict):
        raise ConfigurationError("'settings' must be a mapping")
    return EngineSettings.from_dict(section)


def load_settings(path: Path) -> EngineSettings:
    """Load and parse a settings file."""
    return parse_settings(load_yaml_file(path))
