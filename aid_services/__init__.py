"""
aid_services -- Package init and public API.

Responsibility:
    Orchestration that composes the pure consolidation engines
    (aid_engines/) with database sessions, threads and wall-clock time.
    This is the **only** layer that may open sessions or await I/O.

Architecture position:
    Services -- imperative shell over engines + kernel.

    Dependency direction:
        aid_services/ -> aid_engines/  (allowed)
        aid_services/ -> aid_kernel/   (allowed)
        aid_engines/  -> aid_services/ (FORBIDDEN)
        aid_kernel/   -> aid_services/ (FORBIDDEN)
"""

from aid_services.consolidation_service import OrderConsolidationService
from aid_services.consolidation_view import ConsolidationViewController

__all__ = [
    "ConsolidationViewController",
    "OrderConsolidationService",
]
