"""
Typed Exception Hierarchy for the Aid Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The consolidation view has exactly two kinds of "empty" answer: a legitimate
zero (no orders placed yet) and a failure (order data could not be loaded).
Callers must be able to tell them apart without parsing message strings, so
every failure mode has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, log-safe)
  3. Structured DATA attributes (source name, timeout, column ...)

Example - WRONG way to handle errors:
    try:
        view = await service.get_consolidated_orders_with_tracking()
    except Exception as e:
        if "timeout" in str(e):  # FRAGILE - message might change
            show_timeout_banner()

Example - RIGHT way (what this module enables):
    try:
        view = await service.get_consolidated_orders_with_tracking()
    except ConsolidationTimeoutError as e:
        show_banner(f"Timed out after {e.timeout_seconds}s")
    except ConsolidationLoadError as e:
        show_banner(e.code)  # retryable, user may press Refresh

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from AidKernelError:

    AidKernelError (base)
    |
    +-- ConfigurationError
    |
    +-- EngineNotInitializedError
    |
    +-- ConsolidationError
        +-- ConsolidationLoadError          (retryable)
        |   +-- DemandSourceError
        |   +-- OrderDataUnavailableError
        |   +-- ConsolidationTimeoutError
        +-- InvalidSortColumnError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Config          | INVALID_CONFIGURATION       | YAML/env value missing or malformed
DB              | ENGINE_NOT_INITIALIZED      | Session requested before engine init
----------------|-----------------------------|-----------------------------------------
Consolidation   | CONSOLIDATION_LOAD_FAILED   | Generic load failure (base class)
                | DEMAND_SOURCE_FAILED        | District/public/institution fetch failed
                | ORDER_DATA_UNAVAILABLE      | Order-entry fetch failed
                | CONSOLIDATION_TIMEOUT       | Whole pipeline exceeded wall-clock budget
                | INVALID_SORT_COLUMN         | Sort requested on unknown column

===============================================================================
HANDLING PATTERNS
===============================================================================

1. LOAD FAILURES ARE ALL-OR-NOTHING:

    A ConsolidationLoadError means no consolidated rows were produced.
    Never fall back to demand-only rows when OrderDataUnavailableError is
    raised; the zero order figures would be indistinguishable from
    "nothing ordered yet".

2. NO AUTOMATIC RETRY:

    Every ConsolidationLoadError has retryable = True, which means a
    user- or caller-initiated retry may succeed.  Nothing in the kernel
    retries on its own.
"""


class AidKernelError(Exception):
    """
    Base exception for all aid kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "AID_KERNEL_ERROR"


class ConfigurationError(AidKernelError):
    """A configuration value is missing or malformed."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration for {key!r}: {reason}")


class EngineNotInitializedError(AidKernelError):
    """Database engine was used before init_engine_from_url()."""

    code: str = "ENGINE_NOT_INITIALIZED"

    def __init__(self):
        super().__init__(
            "Engine not initialized. Call init_engine_from_url() first."
        )


# Consolidation exceptions


class ConsolidationError(AidKernelError):
    """Base exception for order consolidation errors."""

    code: str = "CONSOLIDATION_ERROR"


class ConsolidationLoadError(ConsolidationError):
    """The consolidated view could not be produced. No partial result exists."""

    code: str = "CONSOLIDATION_LOAD_FAILED"
    retryable: bool = True

    user_message: str = "Failed to load consolidated orders. Please try again."


class DemandSourceError(ConsolidationLoadError):
    """One of the three beneficiary demand sources could not be fetched."""

    code: str = "DEMAND_SOURCE_FAILED"

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to fetch {source} allocations: {reason}")


class OrderDataUnavailableError(ConsolidationLoadError):
    """Order entries for the demanded articles could not be fetched."""

    code: str = "ORDER_DATA_UNAVAILABLE"

    def __init__(self, article_count: int, reason: str):
        self.article_count = article_count
        self.reason = reason
        super().__init__(
            f"Order data unavailable for {article_count} articles: {reason}"
        )


class ConsolidationTimeoutError(ConsolidationLoadError):
    """Aggregation plus reconciliation exceeded the wall-clock budget."""

    code: str = "CONSOLIDATION_TIMEOUT"

    user_message: str = (
        "Request timed out. Please check your connection and try again."
    )

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Order consolidation timed out after {timeout_seconds}s"
        )


class InvalidSortColumnError(ConsolidationError):
    """Sort requested on a column the consolidated view does not have."""

    code: str = "INVALID_SORT_COLUMN"

    def __init__(self, column: str, allowed: tuple[str, ...]):
        self.column = column
        self.allowed = allowed
        super().__init__(
            f"Cannot sort by {column!r}; expected one of {', '.join(allowed)}"
        )
