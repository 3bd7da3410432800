"""
ConsolidationConfig schema.

Frozen runtime configuration for the order consolidation pipeline.  The
loader parses YAML documents and environment overrides into this type;
nothing downstream reads files or environment variables itself.
"""

from __future__ import annotations

from dataclasses import dataclass

LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ConsolidationConfig:
    """Settings for the consolidation services."""

    database_url: str
    timeout_seconds: float = 30.0
    order_query_chunk_size: int = 500
    received_status: str = "received"
    log_level: str = "INFO"
