from pydantic import BaseModel, Field
from typing import List

from .component import Component
from .purchase_order import CostEntry, PurchaseLineItem, PurchaseOrder
from .quote import PriceQuote, PriceQuoteLineItem
from .supplier import Supplier


class DataSnapshot(BaseModel):
    """
    All input tables for one analytics run, as loaded from the data source.
    Analyzers read from it and never modify it.
    """
    components: List[Component] = Field(default_factory=list)
    suppliers: List[Supplier] = Field(default_factory=list)
    quotes: List[PriceQuote] = Field(default_factory=list)
    quote_items: List[PriceQuoteLineItem] = Field(default_factory=list)
    purchase_orders: List[PurchaseOrder] = Field(default_factory=list)
    po_items: List[PurchaseLineItem] = Field(default_factory=list)
    po_costs: List[CostEntry] = Field(default_factory=list)

    def counts(self) -> dict[str, int]:
        """Row count per table, in table order."""
        return {name: len(getattr(self, name)) for name in type(self).model_fields}
