"""
aid_config -- single public entrypoint for consolidation configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``ConsolidationConfig``.

Sources, later ones winning:
    1. ``aid_config/defaults.yaml`` shipped with the package.
    2. The YAML file named by ``AID_CONFIG_FILE`` (optional).
    3. ``AID_DATABASE_URL``, ``AID_CONSOLIDATION_TIMEOUT_SECONDS``,
       ``AID_ORDER_QUERY_CHUNK_SIZE`` and ``AID_LOG_LEVEL``.

Failure modes:
    - ``FileNotFoundError`` -- ``AID_CONFIG_FILE`` names a missing file.
    - ``ConfigurationError`` -- a value is missing, mistyped or out of range.

Audit relevance:
    Every successful ``get_active_config()`` call emits an
    ``AID_CONFIG_TRACE`` log entry.  The database URL is never logged.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from aid_config.loader import (
    apply_env_overrides,
    load_yaml_file,
    merge_documents,
    parse_config,
)
from aid_config.schema import ConsolidationConfig

_logger = logging.getLogger("aid_kernel.config")

DEFAULTS_FILE = Path(__file__).parent / "defaults.yaml"
CONFIG_FILE_ENV = "AID_CONFIG_FILE"


def get_active_config(
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ConsolidationConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_file: Overlay file.  Defaults to ``$AID_CONFIG_FILE`` if set.
        environ: Environment mapping.  Defaults to ``os.environ``.

    Returns:
        ConsolidationConfig -- frozen, validated.

    Raises:
        FileNotFoundError: If the overlay file does not exist.
        ConfigurationError: If a value is invalid.
    """
    env = os.environ if environ is None else environ

    document = load_yaml_file(DEFAULTS_FILE)
    overlay_path = config_file
    if overlay_path is None and env.get(CONFIG_FILE_ENV):
        overlay_path = Path(env[CONFIG_FILE_ENV])
    if overlay_path is not None:
        document = merge_documents(document, load_yaml_file(overlay_path))

    config = parse_config(apply_env_overrides(document, env))

    _logger.info(
        "AID_CONFIG_TRACE",
        extra={
            "trace_type": "AID_CONFIG_TRACE",
            "overlay_file": str(overlay_path) if overlay_path else None,
            "timeout_seconds": config.timeout_seconds,
            "order_query_chunk_size": config.order_query_chunk_size,
            "received_status": config.received_status,
            "log_level": config.log_level,
        },
    )
    return config


__all__ = ["ConsolidationConfig", "get_active_config"]
