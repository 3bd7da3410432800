"""
Configuration Loader (``aid_config.loader``).

Responsibility
--------------
Loads YAML configuration documents, overlays them, applies ``AID_*``
environment overrides and parses the result into a frozen
``ConsolidationConfig``.  The single public entry point for runtime config
is ``aid_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* A value of the wrong type or out of range  -> ``ConfigurationError``.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from aid_config.schema import LOG_LEVELS, ConsolidationConfig
from aid_kernel.exceptions import ConfigurationError

# Environment variable -> (section, key) in the merged document.
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "AID_DATABASE_URL": ("database", "url"),
    "AID_CONSOLIDATION_TIMEOUT_SECONDS": ("consolidation", "timeout_seconds"),
    "AID_ORDER_QUERY_CHUNK_SIZE": ("consolidation", "order_query_chunk_size"),
    "AID_LOG_LEVEL": ("logging", "level"),
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), "top-level YAML node must be a mapping")
    return data


def merge_documents(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Section-wise merge; keys in overlay win."""
    merged: dict[str, Any] = {key: value for key, value in base.items()}
    for key, value in overlay.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_documents(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_env_overrides(
    document: Mapping[str, Any], environ: Mapping[str, str]
) -> dict[str, Any]:
    """Overlay the AID_* environment variables that are set and non-empty."""
    overlay: dict[str, dict[str, Any]] = {}
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            overlay.setdefault(section, {})[key] = value
    return merge_documents(document, overlay)


def _section(document: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = document.get(name) or {}
    if not isinstance(section, Mapping):
        raise ConfigurationError(name, "section must be a mapping")
    return section


def _positive_number(key: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(key, f"expected a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(key, f"expected a number, got {value!r}") from None
    if number <= 0:
        raise ConfigurationError(key, f"must be positive, got {value!r}")
    return number


def _positive_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(key, f"expected an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(key, f"expected an integer, got {value!r}") from None
    if number < 1:
        raise ConfigurationError(key, f"must be at least 1, got {value!r}")
    return number


def _non_empty_str(key: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(key, f"expected a non-empty string, got {value!r}")
    return value.strip()


def parse_config(document: Mapping[str, Any]) -> ConsolidationConfig:
    """Parse a merged configuration document."""
    database = _section(document, "database")
    consolidation = _section(document, "consolidation")
    logging_section = _section(document, "logging")

    if "url" not in database:
        raise ConfigurationError("database.url", "required")

    level = _non_empty_str("logging.level", logging_section.get("level", "INFO")).upper()
    if level not in LOG_LEVELS:
        raise ConfigurationError(
            "logging.level", f"expected one of {', '.join(LOG_LEVELS)}, got {level!r}"
        )

    return ConsolidationConfig(
        database_url=_non_empty_str("database.url", database["url"]),
        timeout_seconds=_positive_number(
            "consolidation.timeout_seconds",
            consolidation.get("timeout_seconds", 30),
        ),
        order_query_chunk_size=_positive_int(
            "consolidation.order_query_chunk_size",
            consolidation.get("order_query_chunk_size", 500),
        ),
        received_status=_non_empty_str(
            "consolidation.received_status",
            consolidation.get("received_status", "received"),
        ),
        log_level=level,
    )
