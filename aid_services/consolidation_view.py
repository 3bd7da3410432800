"""
aid_services.consolidation_view -- Per-view state for the consolidated order table.

Responsibility:
    Own the load state of one consolidated order view: the in-flight guard,
    the user-facing error, the last result, retry bookkeeping, and the
    search/sort state used to present rows.

Architecture position:
    Services -- wraps OrderConsolidationService for one consumer.  Every
    view instance holds its own state; two views never block each other.

Invariants enforced:
    - At most one load in flight per controller.  A second load() while one
      is running returns False without fetching.
    - The guard is cleared on success, failure and timeout alike.
    - After a failed load ``result`` is None: stale or partial rows are
      never shown next to an error.

Failure modes:
    - ConsolidationLoadError subclasses are absorbed into ``error`` /
      ``error_code``.  Anything else is a programming error and propagates
      (the guard is still cleared).
"""

from __future__ import annotations

import time
from uuid import uuid4

from aid_engines.consolidation import (
    ConsolidatedArticle,
    ItemTypeSummary,
    OrderConsolidation,
    RowTotals,
    SortColumn,
    SortState,
    apply_view,
    parse_sort_column,
    summarize_by_item_type,
    totals_for,
)
from aid_kernel.exceptions import ConsolidationLoadError
from aid_kernel.logging_config import LogContext, get_logger
from aid_services.consolidation_service import OrderConsolidationService

logger = get_logger("services.consolidation_view")


class ConsolidationViewController:
    """Load state plus presentation state for one consolidated order view."""

    def __init__(
        self,
        service: OrderConsolidationService,
        *,
        view_id: str | None = None,
        track_orders: bool = True,
    ):
        self._service = service
        self._track_orders = track_orders
        self.view_id = view_id or uuid4().hex

        self.is_loading = False
        self.error: str | None = None
        self.error_code: str | None = None
        self.result: OrderConsolidation | None = None
        self.retry_count = 0
        self.last_duration_ms: float | None = None

        self.search_query = ""
        self.sort_state = SortState()

    # =========================================================================
    # Loading
    # =========================================================================

    async def load(self) -> bool:
        """
        Recompute the consolidated view.

        Returns:
            False if a load was already in flight (nothing fetched),
            True otherwise.  Check ``error`` for the outcome.
        """
        if self.is_loading:
            logger.info(
                "consolidation_load_skipped",
                extra={"view_id": self.view_id, "reason": "already_loading"},
            )
            return False

        self.is_loading = True
        self.error = None
        self.error_code = None
        t0 = time.monotonic()
        try:
            with LogContext.bind(view_id=self.view_id):
                if self._track_orders:
                    result = await self._service.get_consolidated_orders_with_tracking()
                else:
                    result = await self._service.get_consolidated_orders()
        except ConsolidationLoadError as exc:
            self.result = None
            self.error = exc.user_message
            self.error_code = exc.code
            logger.warning(
                "consolidation_load_failed",
                extra={
                    "view_id": self.view_id,
                    "error_code": exc.code,
                    "retry_count": self.retry_count,
                },
            )
        else:
            self.result = result
        finally:
            self.is_loading = False
            self.last_duration_ms = round((time.monotonic() - t0) * 1000, 2)
        return True

    async def retry(self) -> bool:
        """User-triggered re-run from scratch."""
        if self.is_loading:
            return False
        self.retry_count += 1
        logger.info(
            "consolidation_retry",
            extra={"view_id": self.view_id, "retry_count": self.retry_count},
        )
        return await self.load()

    @property
    def has_error(self) -> bool:
        return self.error is not None

    # =========================================================================
    # Presentation
    # =========================================================================

    @property
    def rows(self) -> tuple[ConsolidatedArticle, ...]:
        return self.result.articles if self.result is not None else ()

    def set_search(self, query: str | None) -> None:
        self.search_query = query or ""

    def toggle_sort(self, column: SortColumn | str) -> SortState:
        """Header click: same column flips direction, a new one starts ascending."""
        self.sort_state = self.sort_state.toggle(parse_sort_column(column))
        return self.sort_state

    def visible_rows(
        self,
        search: str | None = None,
        sort: SortState | None = None,
    ) -> list[ConsolidatedArticle]:
        """Rows after search filter and sort.  Arguments override view state."""
        return apply_view(
            self.rows,
            search=self.search_query if search is None else search,
            sort=self.sort_state if sort is None else sort,
        )

    def visible_totals(self, search: str | None = None) -> RowTotals:
        """Totals over the rows matching the current search."""
        return totals_for(
            apply_view(self.rows, search=self.search_query if search is None else search)
        )

    def item_type_summary(self) -> tuple[ItemTypeSummary, ...]:
        return summarize_by_item_type(self.rows)
