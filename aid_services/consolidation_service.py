"""
aid_services.consolidation_service -- Two-stage order consolidation pipeline.

Responsibility:
    Fetch beneficiary demand and supplier orders from the store and hand
    them to the pure engines:

        stage 1  aggregate_demand()       district | public | institutions
                                          (+ catalog) fetched concurrently,
                                          joined, then DemandAggregator
        stage 2  reconcile_orders(demand) orders for exactly
                                          demand.article_ids, then
                                          OrderReconciler

Architecture position:
    Services -- imperative shell over aid_engines + aid_kernel.  The only
    layer that opens sessions or measures wall-clock time.

Invariants enforced:
    - Stage 2 only ever queries the article ids stage 1 produced; it never
      scans the catalog.
    - All-or-nothing: a failing source aborts the whole run.  No demand-only
      result is ever returned by the tracking path.
    - Each concurrent fetch runs in a worker thread on its own Session;
      sessions are never shared across threads.
    - No automatic retries.

Failure modes:
    - DemandSourceError (source) if any demand source or the catalog fetch
      fails.
    - OrderDataUnavailableError (article_count) if the order fetch fails.
    - ConsolidationTimeoutError (timeout_seconds) if the run exceeds the
      wall-clock budget.  All three are ConsolidationLoadError (retryable).

Concurrency note:
    The computation is a best-effort snapshot.  No transaction spans the
    source fetches, so concurrent edits by other users may produce a view
    that never existed at a single instant.

Usage:
    service = OrderConsolidationService(get_session_factory())
    consolidation = asyncio.run(service.get_consolidated_orders_with_tracking())
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Any, TypeVar
from uuid import uuid4

from sqlalchemy.orm import Session

from aid_config import ConsolidationConfig
from aid_engines.consolidation import (
    DEFAULT_RECEIVED_STATUS,
    DemandAggregator,
    DemandResult,
    OrderConsolidation,
    OrderReconciler,
    demand_only,
)
from aid_kernel.db.engine import get_session_factory, init_engine_from_url
from aid_kernel.exceptions import (
    ConsolidationTimeoutError,
    DemandSourceError,
    OrderDataUnavailableError,
)
from aid_kernel.logging_config import LogContext, configure_logging, get_logger
from aid_kernel.selectors import AllocationSelector, ArticleSelector, OrderSelector
from aid_kernel.selectors.order_selector import DEFAULT_CHUNK_SIZE

logger = get_logger("services.consolidation")

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 30.0

# Fetch name -> selector call.  Order is the aggregation order.
_DEMAND_FETCHES: tuple[tuple[str, Callable[[Session], Any]], ...] = (
    ("district", lambda session: AllocationSelector(session).district_groups()),
    ("public", lambda session: AllocationSelector(session).public_lines()),
    ("institutions", lambda session: AllocationSelector(session).institution_groups()),
    ("catalog", lambda session: ArticleSelector(session).catalog()),
)


class OrderConsolidationService:
    """
    Async orchestrator for the consolidated order view.

    Contract:
        Receives a session factory via constructor injection.  Holds no
        per-run state, so one instance may serve concurrent callers.
    Guarantees:
        - ``aggregate_demand`` returns a complete DemandResult or raises.
        - ``reconcile_orders`` returns an OrderConsolidation with
          ``is_reconciled=True`` or raises.
        - ``get_consolidated_orders`` returns ``is_reconciled=False``.
    Non-goals:
        - No caching: every call recomputes from the store.
        - No retry: callers decide whether to run again.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        order_query_chunk_size: int = DEFAULT_CHUNK_SIZE,
        received_status: str = DEFAULT_RECEIVED_STATUS,
    ):
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        self._session_factory = session_factory
        self._timeout_seconds = timeout_seconds
        self._chunk_size = order_query_chunk_size
        self._reconciler = OrderReconciler(received_status)

    @classmethod
    def from_config(
        cls,
        config: ConsolidationConfig,
        session_factory: Callable[[], Session] | None = None,
    ) -> OrderConsolidationService:
        """
        Build a service from runtime configuration.

        Without a session_factory the process-wide engine is initialised
        from config.database_url.
        """
        configure_logging(level=config.log_level)
        if session_factory is None:
            init_engine_from_url(config.database_url)
            session_factory = get_session_factory()
        return cls(
            session_factory,
            timeout_seconds=config.timeout_seconds,
            order_query_chunk_size=config.order_query_chunk_size,
            received_status=config.received_status,
        )

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    # =========================================================================
    # Fetch helpers
    # =========================================================================

    def _in_session(self, work: Callable[[Session], T]) -> T:
        """Run work on a fresh session. Read-only: nothing is committed."""
        session = self._session_factory()
        try:
            return work(session)
        finally:
            session.close()

    async def _fetch(self, work: Callable[[Session], T]) -> T:
        return await asyncio.to_thread(self._in_session, work)

    # =========================================================================
    # Stage 1
    # =========================================================================

    async def aggregate_demand(self) -> DemandResult:
        """
        Fetch the three demand sources and the catalog concurrently, then
        aggregate.

        Raises:
            DemandSourceError: A source failed.  The first failing source in
                aggregation order is reported; the others are logged.
        """
        names = [name for name, _ in _DEMAND_FETCHES]
        results = await asyncio.gather(
            *(self._fetch(work) for _, work in _DEMAND_FETCHES),
            return_exceptions=True,
        )

        failures = [
            (name, result)
            for name, result in zip(names, results)
            if isinstance(result, BaseException)
        ]
        for name, exc in failures:
            if not isinstance(exc, Exception):
                raise exc
            logger.error(
                "demand_source_failed",
                extra={"source": name, "error": str(exc)},
                exc_info=exc,
            )
        if failures:
            name, exc = failures[0]
            raise DemandSourceError(name, str(exc)) from exc

        fetched = dict(zip(names, results))
        return DemandAggregator(fetched["catalog"]).aggregate(
            fetched["district"], fetched["public"], fetched["institutions"]
        )

    # =========================================================================
    # Stage 2
    # =========================================================================

    async def reconcile_orders(self, demand: DemandResult) -> OrderConsolidation:
        """
        Fetch orders for exactly demand.article_ids and merge them in.

        Raises:
            OrderDataUnavailableError: The order fetch failed.  Demand-only
                figures are never returned in its place.
        """
        article_ids = demand.article_ids
        chunk_size = self._chunk_size
        try:
            orders = await self._fetch(
                lambda session: OrderSelector(session, chunk_size).entries_for_articles(
                    article_ids
                )
            )
        except Exception as exc:
            logger.error(
                "order_fetch_failed",
                extra={"article_count": len(article_ids), "error": str(exc)},
                exc_info=exc,
            )
            raise OrderDataUnavailableError(len(article_ids), str(exc)) from exc

        summaries = self._reconciler.summarize(article_ids, orders)
        return self._reconciler.reconcile(demand, summaries)

    # =========================================================================
    # Entry points
    # =========================================================================

    async def _with_timeout(self, stage: str, work: Callable[[], Any]) -> Any:
        run_id = uuid4().hex
        with LogContext.bind(run_id=run_id):
            logger.info("consolidation_started", extra={"stage": stage})
            t0 = time.monotonic()
            try:
                result = await asyncio.wait_for(work(), timeout=self._timeout_seconds)
            except asyncio.TimeoutError:
                logger.error(
                    "consolidation_timed_out",
                    extra={"stage": stage, "timeout_seconds": self._timeout_seconds},
                )
                raise ConsolidationTimeoutError(self._timeout_seconds) from None
            logger.info(
                "consolidation_completed",
                extra={
                    "stage": stage,
                    "article_count": result.total_articles,
                    "is_reconciled": result.is_reconciled,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
            return result

    async def get_consolidated_orders(self) -> OrderConsolidation:
        """Demand only.  Order figures are zero and is_reconciled is False."""

        async def run() -> OrderConsolidation:
            return demand_only(await self.aggregate_demand())

        return await self._with_timeout("demand", run)

    async def get_consolidated_orders_with_tracking(self) -> OrderConsolidation:
        """Both stages under one wall-clock timeout."""

        async def run() -> OrderConsolidation:
            demand = await self.aggregate_demand()
            return await self.reconcile_orders(demand)

        return await self._with_timeout("tracking", run)
