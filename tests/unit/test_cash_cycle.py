"""
Unit tests for reorder cash-cycle analysis.
"""
from datetime import datetime

import pytest

from analytics.cash_cycle import CashCycleAnalyzer, days_between, gap_band, parse_date
from models import (
    Component,
    CostEntry,
    DataSnapshot,
    PurchaseLineItem,
    PurchaseOrder,
)


def _settled_orders(component_id: int, dates: list[str], start_id: int) -> tuple[list, list, list]:
    orders, items, costs = [], [], []
    for offset, when in enumerate(dates):
        po_id = start_id + offset
        orders.append(PurchaseOrder(po_id=po_id, po_number=f"PO-{po_id}"))
        items.append(PurchaseLineItem(po_item_id=po_id, po_id=po_id, component_id=component_id, quantity=1, unit_cost=1))
        costs.append(CostEntry(cost_id=f"b{po_id}", po_id=po_id, cost_category="balance_payment", payment_date=when))
    return orders, items, costs


@pytest.mark.unit
class TestCashCycleAnalyzer:
    """Tests for CashCycleAnalyzer."""

    def test_three_order_scenario(self, cycle_snapshot):
        """Settled 2025-01-01, 2025-03-02, 2025-04-01 gives gaps 60 and 30."""
        report = CashCycleAnalyzer(cycle_snapshot).analyze()

        assert len(report.cycles) == 1
        cycle = report.cycles[0]
        assert cycle.component.component_id == 3
        assert cycle.avg_cycle == 45
        assert cycle.min_cycle == 30
        assert cycle.max_cycle == 60
        assert cycle.cycle_count == 2

    def test_entries_newest_first(self, cycle_snapshot):
        entries = CashCycleAnalyzer(cycle_snapshot).analyze().cycles[0].entries

        assert [e.po.po_number for e in entries] == ["PO-203", "PO-202", "PO-201"]
        assert [e.cycle_gap for e in entries] == [30, 60, None]
        assert entries[0].supplier_name == "Shenzhen Solar Co"
        assert entries[0].supplier_code == "SZS"

    def test_latest_balance_date_wins(self, cycle_snapshot):
        """PO-203 has balance payments on 03-20 and 04-01; it settles on 04-01."""
        settled = CashCycleAnalyzer(cycle_snapshot).settled_dates()

        assert settled[203] == "2025-04-01"
        # Down payments never settle an order
        assert settled[201] == "2025-01-01"

    def test_single_settled_order_excluded(self, cycle_snapshot):
        report = CashCycleAnalyzer(cycle_snapshot).analyze()
        assert 4 not in [c.component.component_id for c in report.cycles]

    def test_unsettled_orders_ignored(self):
        snapshot = DataSnapshot(
            components=[Component(component_id=1, supplier_model="X")],
            purchase_orders=[PurchaseOrder(po_id=1, po_number="PO-1"), PurchaseOrder(po_id=2, po_number="PO-2")],
            po_items=[
                PurchaseLineItem(po_item_id=1, po_id=1, component_id=1, quantity=1),
                PurchaseLineItem(po_item_id=2, po_id=2, component_id=1, quantity=1),
            ],
            po_costs=[
                CostEntry(cost_id="1", po_id=1, cost_category="balance_payment", payment_date="2025-01-01"),
                # No payment date: not settled
                CostEntry(cost_id="2", po_id=2, cost_category="balance_payment"),
            ],
        )
        report = CashCycleAnalyzer(snapshot).analyze()

        assert report.cycles == []
        assert report.summary.components_tracked == 0
        assert report.summary.overall_avg is None

    def test_ranked_fastest_first_with_summary(self):
        fast_orders, fast_items, fast_costs = _settled_orders(1, ["2025-01-01", "2025-01-11", "2025-01-31"], 10)
        slow_orders, slow_items, slow_costs = _settled_orders(2, ["2024-01-01", "2024-07-01"], 20)
        snapshot = DataSnapshot(
            components=[
                Component(component_id=2, supplier_model="SLOW"),
                Component(component_id=1, supplier_model="FAST"),
            ],
            purchase_orders=slow_orders + fast_orders,
            po_items=slow_items + fast_items,
            po_costs=slow_costs + fast_costs,
        )
        report = CashCycleAnalyzer(snapshot).analyze()

        assert [c.component.supplier_model for c in report.cycles] == ["FAST", "SLOW"]
        assert report.cycles[0].avg_cycle == 15
        assert report.cycles[1].avg_cycle == 182
        assert report.summary.fastest.component.supplier_model == "FAST"
        assert report.summary.slowest.component.supplier_model == "SLOW"
        # Overall figures are over every gap: 10, 20, 182
        assert report.summary.overall_avg == 71
        assert report.summary.overall_min == 10
        assert report.summary.overall_max == 182
        assert report.summary.components_tracked == 2

    def test_invalid_payment_date_reported(self, cycle_snapshot):
        snapshot = cycle_snapshot.model_copy(deep=True)
        snapshot.po_costs.append(
            CostEntry(cost_id="bad", po_id=202, cost_category="balance_payment", payment_date="02/03/2025")
        )
        report = CashCycleAnalyzer(snapshot).analyze()

        assert [e.entity_id for e in report.errors] == ["bad"]
        assert report.errors[0].entity == "po_cost"
        # The valid date still settles PO-202
        assert report.cycles[0].avg_cycle == 45

    def test_timestamps_round_to_whole_days(self):
        orders, items, costs = _settled_orders(1, ["2025-01-01T00:00:00Z", "2025-01-11T12:00:00Z"], 1)
        snapshot = DataSnapshot(
            components=[Component(component_id=1, supplier_model="X")],
            purchase_orders=orders, po_items=items, po_costs=costs,
        )
        cycle = CashCycleAnalyzer(snapshot).analyze().cycles[0]
        # 10.5 days rounds half up
        assert cycle.min_cycle == 11


@pytest.mark.unit
class TestCycleHelpers:
    """Tests for date and band helpers."""

    @pytest.mark.parametrize("days,band", [
        (None, None),
        (0, "very_fast"),
        (30, "very_fast"),
        (31, "fast"),
        (60, "fast"),
        (61, "moderate"),
        (120, "moderate"),
        (121, "slow"),
    ])
    def test_gap_band(self, days, band):
        assert gap_band(days) == band

    def test_parse_date_variants(self):
        assert parse_date("2025-03-02") == datetime(2025, 3, 2)
        assert parse_date("2025-03-02T08:00:00+08:00") == datetime(2025, 3, 2, 0, 0)
        assert parse_date(" 2025-03-02T00:00:00Z ") == datetime(2025, 3, 2)

    @pytest.mark.parametrize("value,expected", [
        ("2025-01-01 10:00:00+07", datetime(2025, 1, 1, 3, 0)),
        ("2025-01-01T10:00:00+0700", datetime(2025, 1, 1, 3, 0)),
        ("2025-01-01 10:00:00.500-05", datetime(2025, 1, 1, 15, 0, 0, 500000)),
        ("2025-01-01T10:00-0530", datetime(2025, 1, 1, 15, 30)),
    ])
    def test_parse_date_short_offsets(self, value, expected):
        """Offsets without a colon, as written by database exports."""
        assert parse_date(value) == expected

    def test_short_offset_payment_settles_order(self):
        orders, items, costs = _settled_orders(1, ["2025-01-01 10:00:00+07", "2025-01-31 10:00:00+07"], 1)
        snapshot = DataSnapshot(
            components=[Component(component_id=1, supplier_model="X")],
            purchase_orders=orders, po_items=items, po_costs=costs,
        )
        report = CashCycleAnalyzer(snapshot).analyze()

        assert report.errors == []
        assert report.cycles[0].min_cycle == 30

    def test_parse_date_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_date("next tuesday")

    def test_days_between(self):
        assert days_between(datetime(2025, 1, 1), datetime(2025, 3, 2)) == 60
        assert days_between(datetime(2025, 3, 2), datetime(2025, 4, 1)) == 30
