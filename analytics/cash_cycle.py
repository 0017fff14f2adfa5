"""
Reorder cash-cycle analysis.

An order is "settled" once it has a balance_payment or
additional_balance_payment entry with a payment_date; its settled date is the
latest such date (orders paid in several balance instalments settle on the
last one).

For each component ordered in two or more settled orders, the cycle gap is the
number of days between consecutive settled dates. Components are ranked by
their average gap, fastest-turning first.
"""
import logging
import re
from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional

from models.component import Component
from models.cost_category import is_balance_payment
from models.result import (
    CashCycleReport,
    ComponentCycle,
    CycleSummary,
    GapBand,
    RowError,
    SettledPOEntry,
)
from models.snapshot import DataSnapshot
from .formatting import round_half_up
from .lookup import TableIndex

logger = logging.getLogger(__name__)

MIN_SETTLED_ORDERS = 2
SECONDS_PER_DAY = 24 * 60 * 60

_SHORT_OFFSET = re.compile(r"^(.*[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?)([+-]\d{2})(\d{2})?$")

# Upper bounds (inclusive) in days; anything above the last is "slow"
GAP_BANDS: list[tuple[int, GapBand]] = [
    (30, "very_fast"),
    (60, "fast"),
    (120, "moderate"),
]

GAP_BAND_LABELS: dict[str, str] = {
    "very_fast": "very fast reorder",
    "fast": "fast",
    "moderate": "moderate",
    "slow": "slow reorder",
}


def gap_band(days: Optional[int]) -> Optional[GapBand]:
    """Classify a cycle gap (or average) in days; None has no band."""
    if days is None:
        return None
    for upper, band in GAP_BANDS:
        if days <= upper:
            return band
    return "slow"


def parse_date(value: str) -> datetime:
    """
    Parse an ISO-8601 date or timestamp into a naive UTC datetime.
    Raises ValueError for anything else.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # Database exports write offsets as "+07" or "+0700"
    short_offset = _SHORT_OFFSET.match(text)
    if short_offset:
        stamp, hours, minutes = short_offset.groups()
        text = f"{stamp}{hours}:{minutes or '00'}"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days from earlier to later, rounded to the nearest day."""
    return round_half_up((later - earlier).total_seconds() / SECONDS_PER_DAY)


def _mean(values: list[int]) -> Optional[int]:
    if not values:
        return None
    return round_half_up(sum(values) / len(values))


class CashCycleAnalyzer:
    """
    Usage:
        report = CashCycleAnalyzer(snapshot).analyze()
    """

    def __init__(self, snapshot: DataSnapshot):
        self.snapshot = snapshot
        self.index = TableIndex(snapshot)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def settled_dates(self) -> dict[int, str]:
        """po_id -> latest balance payment date, for every settled order."""
        settled, _ = self._settlements()
        return {po_id: raw for po_id, (raw, _) in settled.items()}

    def analyze(self) -> CashCycleReport:
        report = CashCycleReport()
        settled, date_errors = self._settlements()
        report.errors.extend(date_errors)

        # component_id -> [(settled datetime, entry)], in first-seen order
        by_component: dict[int, list[tuple[datetime, SettledPOEntry]]] = defaultdict(list)
        for item in self.snapshot.po_items:
            settlement = settled.get(item.po_id)
            if settlement is None:
                continue
            po = self.index.order(item.po_id)
            if po is None:
                logger.warning(
                    "Purchase line item %s references unknown PO %s — skipped",
                    item.po_item_id, item.po_id,
                )
                report.errors.append(RowError(
                    entity="purchase_line_item",
                    entity_id=str(item.po_item_id),
                    reason=f"references unknown po_id {item.po_id}",
                ))
                continue
            raw_date, when = settlement
            supplier = self.index.supplier_for_order(po)
            by_component[item.component_id].append((when, SettledPOEntry(
                po=po,
                settled_date=raw_date,
                quantity=item.quantity,
                supplier_description=item.supplier_description,
                supplier_name=supplier.supplier_name if supplier else None,
                supplier_code=supplier.supplier_code if supplier else None,
            )))

        cycles: list[ComponentCycle] = []
        for component_id, dated_entries in by_component.items():
            if len(dated_entries) < MIN_SETTLED_ORDERS:
                continue
            component = self.index.components.get(component_id)
            if component is None:
                logger.warning("Component %s in settled orders not found — skipped", component_id)
                report.errors.append(RowError(
                    entity="component",
                    entity_id=str(component_id),
                    reason="referenced by purchase line items but not in components",
                ))
                continue
            cycles.append(self._component_cycle(component, dated_entries))

        cycles.sort(key=lambda c: (c.avg_cycle is None, c.avg_cycle or 0))
        report.cycles = cycles
        report.summary = self._summary(cycles)

        logger.info(
            "Cash cycle: %d settled POs, %d components tracked",
            len(settled), len(cycles),
        )
        return report

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _settlements(self) -> tuple[dict[int, tuple[str, datetime]], list[RowError]]:
        """po_id -> (raw date string, parsed date) of the latest balance payment."""
        settled: dict[int, tuple[str, datetime]] = {}
        errors: list[RowError] = []
        for cost in self.snapshot.po_costs:
            if not is_balance_payment(cost.cost_category) or not cost.payment_date:
                continue
            try:
                when = parse_date(cost.payment_date)
            except ValueError:
                logger.warning(
                    "Cost entry %s (PO %s) has an invalid payment_date '%s' — ignored",
                    cost.cost_id, cost.po_id, cost.payment_date,
                )
                errors.append(RowError(
                    entity="po_cost",
                    entity_id=cost.cost_id,
                    reason=f"invalid payment_date {cost.payment_date!r}",
                ))
                continue
            existing = settled.get(cost.po_id)
            if existing is None or when > existing[1]:
                settled[cost.po_id] = (cost.payment_date, when)
        return settled, errors

    @staticmethod
    def _component_cycle(component: Component, dated_entries: list[tuple[datetime, SettledPOEntry]]) -> ComponentCycle:
        ordered = sorted(dated_entries, key=lambda pair: pair[0])
        gaps: list[int] = []
        for (prev_when, _), (when, entry) in zip(ordered, ordered[1:]):
            entry.cycle_gap = days_between(prev_when, when)
            gaps.append(entry.cycle_gap)

        return ComponentCycle(
            component=component,
            entries=[entry for _, entry in reversed(ordered)],
            avg_cycle=_mean(gaps),
            min_cycle=min(gaps) if gaps else None,
            max_cycle=max(gaps) if gaps else None,
            cycle_count=len(gaps),
        )

    @staticmethod
    def _summary(cycles: list[ComponentCycle]) -> CycleSummary:
        all_gaps = [
            e.cycle_gap for c in cycles for e in c.entries if e.cycle_gap is not None
        ]
        return CycleSummary(
            overall_avg=_mean(all_gaps),
            overall_min=min(all_gaps) if all_gaps else None,
            overall_max=max(all_gaps) if all_gaps else None,
            fastest=cycles[0] if cycles else None,
            slowest=cycles[-1] if cycles else None,
            components_tracked=len(cycles),
        )
