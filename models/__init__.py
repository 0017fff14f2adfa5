from .component import Component
from .supplier import Supplier
from .quote import PriceQuote, PriceQuoteLineItem
from .purchase_order import PurchaseOrder, PurchaseLineItem, CostEntry
from .cost_category import CostCategory, CostClass, classify_category
from .snapshot import DataSnapshot
from .result import (
    RowError, QuoteLineView, CostAllocation, CostReference, CostLookupResult,
    SettledPOEntry, ComponentCycle, CycleSummary, CashCycleReport,
)

__all__ = [
    "Component", "Supplier",
    "PriceQuote", "PriceQuoteLineItem",
    "PurchaseOrder", "PurchaseLineItem", "CostEntry",
    "CostCategory", "CostClass", "classify_category",
    "DataSnapshot",
    "RowError", "QuoteLineView", "CostAllocation", "CostReference", "CostLookupResult",
    "SettledPOEntry", "ComponentCycle", "CycleSummary", "CashCycleReport",
]
