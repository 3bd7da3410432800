"""
Tests for the Order Reconciler.

Covers:
- Ordered / received / pending figures per article
- Explicit zeros for demand without orders
- Pending clamping when orders exceed demand
- Demand-only views are flagged as not reconciled
"""

from decimal import Decimal

import pytest

from aid_engines.consolidation import (
    ConsolidatedArticle,
    DemandBreakdown,
    OrderReconciler,
    aggregate_demand,
    demand_only,
)
from aid_kernel.domain.dtos import BeneficiaryCategory
from tests.builders import make_group, make_line, make_order

D = BeneficiaryCategory.DISTRICT
P = BeneficiaryCategory.PUBLIC
INST = BeneficiaryCategory.INSTITUTIONS


@pytest.fixture
def reconciler() -> OrderReconciler:
    return OrderReconciler()


def _reconcile(reconciler, demand, orders):
    summaries = reconciler.summarize(demand.article_ids, orders)
    return reconciler.reconcile(demand, summaries)


class TestReferenceScenario:
    """Two articles across three categories, one partially ordered."""

    def test_consolidated_rows(self, reconciler):
        demand = aggregate_demand(
            [make_group(D, "D 001", make_line(D, "A1", 10, "1000", name="A1"))],
            [make_line(P, "A1", 5, "500", name="A1")],
            [make_group(INST, "I 001", make_line(INST, "A2", 3, "300", name="A2"))],
        )

        result = _reconcile(reconciler, demand, [make_order("A1", 8)])

        assert result.is_reconciled is True
        a1, a2 = result.articles
        assert a1.article_id == "A1"
        assert a1.total_quantity == 15
        assert a1.breakdown == DemandBreakdown(district=10, public=5, institutions=0)
        assert a1.total_value == Decimal("1500")
        assert a1.quantity_ordered == 8
        assert a1.quantity_pending == 7

        assert a2.article_id == "A2"
        assert a2.total_quantity == 3
        assert a2.breakdown == DemandBreakdown(district=0, public=0, institutions=3)
        assert a2.total_value == Decimal("300")
        assert a2.quantity_ordered == 0
        assert a2.quantity_pending == 3

        assert result.total_articles == 2
        assert result.total_value == Decimal("1800")


class TestOrderFigures:
    def test_orders_exceeding_demand_clamp_pending(self, reconciler):
        demand = aggregate_demand([], [make_line(P, "A1", 15, "150")], [])

        row = _reconcile(reconciler, demand, [make_order("A1", 20)]).articles[0]

        assert row.quantity_pending == 0
        assert row.excess_ordered == 5
        assert row.is_fully_ordered is True

    def test_no_orders_means_explicit_zeros(self, reconciler):
        demand = aggregate_demand([], [make_line(P, "A1", 6, "60")], [])

        row = _reconcile(reconciler, demand, []).articles[0]

        assert row.quantity_ordered == 0
        assert row.quantity_received == 0
        assert row.quantity_pending == 6
        assert row.order_summary is not None
        assert row.order_summary.order_count == 0

    def test_ordered_counts_every_status(self, reconciler):
        demand = aggregate_demand([], [make_line(P, "A1", 50, "500")], [])
        orders = [
            make_order("A1", 4, "pending"),
            make_order("A1", 5, "ordered"),
            make_order("A1", 6, "received"),
            make_order("A1", 7, "cancelled"),
        ]

        row = _reconcile(reconciler, demand, orders).articles[0]

        assert row.quantity_ordered == 22
        assert row.quantity_pending == 28

    def test_received_counts_only_received_status(self, reconciler):
        demand = aggregate_demand([], [make_line(P, "A1", 50, "500")], [])
        orders = [
            make_order("A1", 5, "ordered"),
            make_order("A1", 6, "received"),
            make_order("A1", 2, "received"),
        ]

        row = _reconcile(reconciler, demand, orders).articles[0]

        assert row.quantity_received == 8

    def test_custom_received_status(self):
        reconciler = OrderReconciler(received_status="delivered")
        demand = aggregate_demand([], [make_line(P, "A1", 10, "100")], [])

        row = _reconcile(
            reconciler,
            demand,
            [make_order("A1", 3, "delivered"), make_order("A1", 4, "received")],
        ).articles[0]

        assert row.quantity_received == 3

    def test_summary_keeps_orders_and_status_counts(self, reconciler):
        first = make_order("A1", 2, "ordered", amount="200")
        second = make_order("A1", 3, "ordered", amount="300")
        third = make_order("A1", 1, "received", amount="100")

        summary = reconciler.summarize(["A1"], [first, second, third])["A1"]

        assert summary.orders == (first, second, third)
        assert dict(summary.status_counts) == {"ordered": 2, "received": 1}
        assert summary.value_ordered == Decimal("600")

    def test_cancelled_orders_count_quantity_but_not_value(self, reconciler):
        summary = reconciler.summarize(
            ["A1"],
            [
                make_order("A1", 5, "ordered", amount="50"),
                make_order("A1", 5, "cancelled", amount="50"),
            ],
        )["A1"]

        assert summary.quantity_ordered == 10
        assert summary.value_ordered == Decimal("50")
        assert summary.status_counts["cancelled"] == 1

    def test_summary_for_every_requested_id(self, reconciler):
        summaries = reconciler.summarize(["A1", "A2", "A1"], [make_order("A2", 1)])

        assert list(summaries) == ["A1", "A2"]
        assert summaries["A1"].quantity_ordered == 0
        assert summaries["A2"].quantity_ordered == 1

    def test_orders_outside_demand_are_ignored(self, reconciler, captured_logs):
        summaries = reconciler.summarize(["A1"], [make_order("A1", 1), make_order("ZZ", 9)])

        assert set(summaries) == {"A1"}
        ignored = [r for r in captured_logs() if r["message"] == "order_entries_outside_demand_ignored"]
        assert ignored[0]["ignored_count"] == 1

    def test_missing_summary_treated_as_no_orders(self, reconciler):
        demand = aggregate_demand([], [make_line(P, "A1", 4, "40")], [])

        result = reconciler.reconcile(demand, {})

        assert result.articles[0].quantity_pending == 4

    def test_row_order_follows_demand(self, reconciler):
        demand = aggregate_demand(
            [],
            [make_line(P, "A1", 1, "1", name="Zither"), make_line(P, "A2", 1, "1", name="Anvil")],
            [],
        )

        result = _reconcile(reconciler, demand, [make_order("A1", 1)])

        assert [row.article_name for row in result.articles] == ["Anvil", "Zither"]


class TestDemandOnly:
    def test_demand_only_is_not_reconciled(self):
        demand = aggregate_demand([], [make_line(P, "A1", 4, "40")], [])

        view = demand_only(demand)

        assert view.is_reconciled is False
        row = view.articles[0]
        assert row.quantity_ordered == 0
        assert row.quantity_pending == 4
        assert row.order_summary is None


class TestRowInvariants:
    def test_inconsistent_pending_rejected(self):
        with pytest.raises(ValueError, match="Pending quantity"):
            ConsolidatedArticle(
                article_id="A1",
                article_name="Cot",
                total_quantity=5,
                breakdown=DemandBreakdown(district=5),
                total_value=Decimal("0"),
                quantity_ordered=2,
                quantity_pending=5,
            )

    def test_reconcile_traced(self, reconciler, captured_logs):
        demand = aggregate_demand([], [make_line(P, "A1", 1, "1")], [])

        _reconcile(reconciler, demand, [])

        engines = {r.get("engine_name") for r in captured_logs() if r["message"] == "AID_ENGINE_TRACE"}
        assert {"order_summary", "order_reconciler"} <= engines
