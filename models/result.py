from pydantic import BaseModel, Field
from typing import Optional, List, Literal

from .component import Component
from .purchase_order import CostEntry, PurchaseLineItem, PurchaseOrder
from .quote import PriceQuote, PriceQuoteLineItem


AllocationWarning = Literal[
    "No payments recorded",
    "Missing exchange rate",
    "PO total is zero",
]

GapBand = Literal["very_fast", "fast", "moderate", "slow"]


class RowError(BaseModel):
    """An input row that broke the structural contract and was left out of the output."""
    entity: str                             # e.g. "purchase_line_item", "po_cost"
    entity_id: str
    reason: str


# ---------------------------------------------------------------------------
# Cost lookup
# ---------------------------------------------------------------------------

class QuoteLineView(BaseModel):
    """A quote line for the looked-up component. No allocation, raw totals only."""
    item: PriceQuoteLineItem
    quote: Optional[PriceQuote] = None
    supplier_name: Optional[str] = None
    line_total: float = 0.0                 # quantity * unit_price, quote currency


class CostAllocation(BaseModel):
    """
    True-cost breakdown for one purchase line item.

    All amounts are in the reporting currency at full precision; rounding is
    left to the report layer.
    """
    po: PurchaseOrder
    item: PurchaseLineItem

    line_value_foreign: float = 0.0
    total_po_value_foreign: float = 0.0
    line_share: float = 0.0

    # PO-level cost totals by class
    principal: float = 0.0
    bank_fees: float = 0.0
    landed: float = 0.0
    tax_total: float = 0.0                  # reference only, never allocated into true cost

    # This line's allocated share
    alloc_principal: float = 0.0
    alloc_bank_fees: float = 0.0
    alloc_landed: float = 0.0
    total_allocated: float = 0.0
    true_unit_cost: float = 0.0
    tax_unit_cost: float = 0.0              # reference only

    # Principal paid vs PO value at the exchange rate, in percent
    payment_variance_pct: Optional[float] = None

    warnings: List[str] = Field(default_factory=list)
    unclassified_categories: List[str] = Field(default_factory=list)


class CostReference(BaseModel):
    """A raw PO cost entry shown next to the allocations, labelled with its class."""
    cost: CostEntry
    po_number: Optional[str] = None
    pi_number: Optional[str] = None
    category_label: str
    cost_class: str                         # CostClass value
    class_label: str
    excluded_from_true_cost: bool = False


class CostLookupResult(BaseModel):
    """Everything known about one component's cost history."""
    component_id: int
    component: Optional[Component] = None
    reporting_currency: str = "IDR"
    quote_line_items: List[QuoteLineView] = Field(default_factory=list)
    allocations: List[CostAllocation] = Field(default_factory=list)
    cost_references: List[CostReference] = Field(default_factory=list)
    errors: List[RowError] = Field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return bool(self.quote_line_items or self.allocations)


# ---------------------------------------------------------------------------
# Cash cycle
# ---------------------------------------------------------------------------

class SettledPOEntry(BaseModel):
    """One settled order in a component's reorder history."""
    po: PurchaseOrder
    settled_date: str                       # latest balance payment date
    quantity: float
    supplier_description: Optional[str] = None
    supplier_name: Optional[str] = None
    supplier_code: Optional[str] = None
    cycle_gap: Optional[int] = None         # days since the previous settled order


class ComponentCycle(BaseModel):
    component: Component
    entries: List[SettledPOEntry] = Field(default_factory=list)    # newest first
    avg_cycle: Optional[int] = None
    min_cycle: Optional[int] = None
    max_cycle: Optional[int] = None
    cycle_count: int = 0

    @property
    def supplier_names(self) -> List[str]:
        """Distinct supplier names across the entries, in entry order."""
        seen: list[str] = []
        for e in self.entries:
            if e.supplier_name and e.supplier_name not in seen:
                seen.append(e.supplier_name)
        return seen


class CycleSummary(BaseModel):
    overall_avg: Optional[int] = None
    overall_min: Optional[int] = None
    overall_max: Optional[int] = None
    fastest: Optional[ComponentCycle] = None
    slowest: Optional[ComponentCycle] = None
    components_tracked: int = 0


class CashCycleReport(BaseModel):
    cycles: List[ComponentCycle] = Field(default_factory=list)     # fastest first
    summary: CycleSummary = Field(default_factory=CycleSummary)
    errors: List[RowError] = Field(default_factory=list)
