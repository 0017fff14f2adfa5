"""
True unit cost allocation.

For every purchase line item of a component, the order's principal payments,
bank fees and landed costs are apportioned by the line's share of the order's
foreign-currency value:

  line_share      = (unit_cost x quantity) / sum(unit_cost x quantity over lines with quantity > 0)
  alloc_<class>   = line_share x <class total for the order>
  true_unit_cost  = (alloc_principal + alloc_bank_fees + alloc_landed) / quantity

Tax entries (local_vat, local_income_tax) are never part of true cost; stored
amounts are ex-tax and already in the reporting currency.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from models.cost_category import (
    CLASS_LABELS,
    CostClass,
    category_label,
    classify_category,
    is_known_category,
)
from models.purchase_order import PurchaseLineItem, PurchaseOrder
from models.result import (
    CostAllocation,
    CostLookupResult,
    CostReference,
    QuoteLineView,
    RowError,
)
from models.snapshot import DataSnapshot
from .lookup import TableIndex

logger = logging.getLogger(__name__)

DEFAULT_REPORTING_CURRENCY = "IDR"

WARN_NO_PAYMENTS = "No payments recorded"
WARN_MISSING_RATE = "Missing exchange rate"
WARN_ZERO_TOTAL = "PO total is zero"


@dataclass
class _OrderTotals:
    """Per-order sums, computed once per order per lookup."""
    value_foreign: float = 0.0
    principal: float = 0.0
    bank_fees: float = 0.0
    landed: float = 0.0
    tax: float = 0.0
    unclassified: list[str] = field(default_factory=list)


class CostAllocator:
    """
    Builds the cost history of a component from a snapshot.

    Usage:
        allocator = CostAllocator(snapshot)
        result = allocator.lookup(component_id)
    """

    def __init__(self, snapshot: DataSnapshot, reporting_currency: str = DEFAULT_REPORTING_CURRENCY):
        self.snapshot = snapshot
        self.reporting_currency = reporting_currency.upper()
        self.index = TableIndex(snapshot)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def lookup(self, component_id: int) -> CostLookupResult:
        """Quote lines, per-line allocations and related PO costs for one component."""
        result = CostLookupResult(
            component_id=component_id,
            component=self.index.components.get(component_id),
            reporting_currency=self.reporting_currency,
        )
        if result.component is None:
            logger.info("Component %s not found in snapshot", component_id)

        result.quote_line_items = self._quote_lines(component_id)

        totals_cache: dict[int, _OrderTotals] = {}
        related_po_ids: set[int] = set()
        for item in self.snapshot.po_items:
            if item.component_id != component_id:
                continue
            related_po_ids.add(item.po_id)
            po = self.index.order(item.po_id)
            if po is None:
                logger.warning(
                    "Purchase line item %s references unknown PO %s — skipped",
                    item.po_item_id, item.po_id,
                )
                result.errors.append(RowError(
                    entity="purchase_line_item",
                    entity_id=str(item.po_item_id),
                    reason=f"references unknown po_id {item.po_id}",
                ))
                continue
            totals = totals_cache.get(po.po_id)
            if totals is None:
                totals = totals_cache[po.po_id] = self._order_totals(po.po_id)
            result.allocations.append(self._allocate(po, item, totals))

        result.cost_references = self._cost_references(related_po_ids)

        logger.debug(
            "Cost lookup for component %s: %d quote lines, %d allocations, %d errors",
            component_id, len(result.quote_line_items), len(result.allocations), len(result.errors),
        )
        return result

    def allocate_order(self, po_id: int) -> list[CostAllocation]:
        """Allocation rows for every line item of one order, in line order."""
        po = self.index.order(po_id)
        if po is None:
            return []
        totals = self._order_totals(po_id)
        return [self._allocate(po, item, totals) for item in self.index.items_for(po_id)]

    # ------------------------------------------------------------------
    # Allocation
    # ------------------------------------------------------------------

    def _order_totals(self, po_id: int) -> _OrderTotals:
        totals = _OrderTotals()
        totals.value_foreign = sum(
            i.value_foreign for i in self.index.items_for(po_id) if i.quantity > 0
        )
        for cost in self.index.costs_for(po_id):
            cost_class = classify_category(cost.cost_category)
            if cost_class is CostClass.PRINCIPAL:
                totals.principal += cost.amount
            elif cost_class is CostClass.BANK_FEE:
                totals.bank_fees += cost.amount
            elif cost_class is CostClass.TAX:
                totals.tax += cost.amount
            else:
                totals.landed += cost.amount
                if not is_known_category(cost.cost_category) and cost.cost_category not in totals.unclassified:
                    logger.warning(
                        "PO %s: unknown cost category '%s' counted as landed cost",
                        po_id, cost.cost_category,
                    )
                    totals.unclassified.append(cost.cost_category)
        return totals

    def _allocate(self, po: PurchaseOrder, item: PurchaseLineItem, totals: _OrderTotals) -> CostAllocation:
        line_value = item.value_foreign
        share = line_value / totals.value_foreign if totals.value_foreign != 0 else 0.0

        alloc_principal = share * totals.principal
        alloc_bank_fees = share * totals.bank_fees
        alloc_landed = share * totals.landed
        total_allocated = alloc_principal + alloc_bank_fees + alloc_landed

        if item.quantity > 0:
            true_unit_cost = total_allocated / item.quantity
            tax_unit_cost = share * totals.tax / item.quantity
        else:
            true_unit_cost = 0.0
            tax_unit_cost = 0.0

        return CostAllocation(
            po=po,
            item=item,
            line_value_foreign=line_value,
            total_po_value_foreign=totals.value_foreign,
            line_share=share,
            principal=totals.principal,
            bank_fees=totals.bank_fees,
            landed=totals.landed,
            tax_total=totals.tax,
            alloc_principal=alloc_principal,
            alloc_bank_fees=alloc_bank_fees,
            alloc_landed=alloc_landed,
            total_allocated=total_allocated,
            true_unit_cost=true_unit_cost,
            tax_unit_cost=tax_unit_cost,
            payment_variance_pct=self._payment_variance(po, totals),
            warnings=self._warnings(po, totals),
            unclassified_categories=list(totals.unclassified),
        )

    def _warnings(self, po: PurchaseOrder, totals: _OrderTotals) -> list[str]:
        warnings = []
        if totals.principal == 0:
            warnings.append(WARN_NO_PAYMENTS)
        if not po.exchange_rate and not self._in_reporting_currency(po):
            warnings.append(WARN_MISSING_RATE)
        if totals.value_foreign == 0:
            warnings.append(WARN_ZERO_TOTAL)
        return warnings

    def _payment_variance(self, po: PurchaseOrder, totals: _OrderTotals) -> Optional[float]:
        """Principal paid vs PO value converted at the exchange rate, as a percentage."""
        rate = po.exchange_rate
        if not rate and self._in_reporting_currency(po):
            rate = 1.0
        if not rate or rate <= 0 or totals.value_foreign <= 0:
            return None
        return (totals.principal / (totals.value_foreign * rate) - 1) * 100

    def _in_reporting_currency(self, po: PurchaseOrder) -> bool:
        return (po.currency or "").upper() == self.reporting_currency

    # ------------------------------------------------------------------
    # Quote lines and raw cost references
    # ------------------------------------------------------------------

    def _quote_lines(self, component_id: int) -> list[QuoteLineView]:
        views = []
        for qi in self.snapshot.quote_items:
            if qi.component_id != component_id:
                continue
            quote = self.index.quotes.get(qi.quote_id)
            supplier = self.index.supplier_for_quote(qi.quote_id)
            views.append(QuoteLineView(
                item=qi,
                quote=quote,
                supplier_name=supplier.supplier_name if supplier else None,
                line_total=qi.line_total,
            ))
        return views

    def _cost_references(self, po_ids: set[int]) -> list[CostReference]:
        refs = []
        for cost in self.snapshot.po_costs:
            if cost.po_id not in po_ids:
                continue
            po = self.index.order(cost.po_id)
            cost_class = classify_category(cost.cost_category)
            refs.append(CostReference(
                cost=cost,
                po_number=po.po_number if po else None,
                pi_number=po.pi_number if po else None,
                category_label=category_label(cost.cost_category),
                cost_class=cost_class.value,
                class_label=CLASS_LABELS[cost_class],
                excluded_from_true_cost=cost_class is CostClass.TAX,
            ))
        return refs
