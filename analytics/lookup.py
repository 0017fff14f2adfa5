"""
Indexed lookups over a DataSnapshot.

Both analyzers join line items to orders, orders to cost entries and orders
to suppliers (through the originating quote). TableIndex builds those maps
once per computation so every join is a dict lookup.
"""
import logging
from collections import defaultdict
from typing import Optional

from models.component import Component
from models.purchase_order import CostEntry, PurchaseLineItem, PurchaseOrder
from models.quote import PriceQuote
from models.snapshot import DataSnapshot
from models.supplier import Supplier

logger = logging.getLogger(__name__)


class TableIndex:
    """Read-only id maps over one snapshot. Input order is preserved inside each group."""

    def __init__(self, snapshot: DataSnapshot):
        self.components: dict[int, Component] = {c.component_id: c for c in snapshot.components}
        self.suppliers: dict[int, Supplier] = {s.supplier_id: s for s in snapshot.suppliers}
        self.quotes: dict[int, PriceQuote] = {q.quote_id: q for q in snapshot.quotes}
        self.orders: dict[int, PurchaseOrder] = {}
        for po in snapshot.purchase_orders:
            if po.po_id in self.orders:
                logger.warning("Duplicate po_id %s in purchase orders; keeping the first", po.po_id)
                continue
            self.orders[po.po_id] = po

        items: dict[int, list[PurchaseLineItem]] = defaultdict(list)
        for item in snapshot.po_items:
            items[item.po_id].append(item)
        self.items_by_po: dict[int, list[PurchaseLineItem]] = dict(items)

        costs: dict[int, list[CostEntry]] = defaultdict(list)
        for cost in snapshot.po_costs:
            costs[cost.po_id].append(cost)
        self.costs_by_po: dict[int, list[CostEntry]] = dict(costs)

    def order(self, po_id: int) -> Optional[PurchaseOrder]:
        return self.orders.get(po_id)

    def items_for(self, po_id: int) -> list[PurchaseLineItem]:
        return self.items_by_po.get(po_id, [])

    def costs_for(self, po_id: int) -> list[CostEntry]:
        return self.costs_by_po.get(po_id, [])

    def supplier_for_quote(self, quote_id: Optional[int]) -> Optional[Supplier]:
        if quote_id is None:
            return None
        quote = self.quotes.get(quote_id)
        if quote is None or quote.supplier_id is None:
            return None
        return self.suppliers.get(quote.supplier_id)

    def supplier_for_order(self, po: PurchaseOrder) -> Optional[Supplier]:
        """Orders carry no supplier of their own; it comes from the quote they were raised from."""
        return self.supplier_for_quote(po.quote_id)
