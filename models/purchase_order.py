from pydantic import BaseModel
from typing import Optional


class PurchaseLineItem(BaseModel):
    """A single line on a Purchase Order. unit_cost is in the order's currency."""
    po_item_id: int
    po_id: int
    component_id: int
    supplier_description: Optional[str] = None
    quantity: float = 0.0
    unit_cost: float = 0.0
    currency: Optional[str] = None

    @property
    def value_foreign(self) -> float:
        return self.unit_cost * self.quantity


class PurchaseOrder(BaseModel):
    """
    A Purchase Order header.

    exchange_rate converts the order currency into the reporting currency and
    is expected unless the order is already in the reporting currency.
    """
    po_id: int
    po_number: str
    po_date: Optional[str] = None           # YYYY-MM-DD
    currency: str = "USD"
    exchange_rate: Optional[float] = None
    status: Optional[str] = None            # Draft / Sent / Confirmed / ... / Fully Received
    quote_id: Optional[int] = None
    pi_number: Optional[str] = None
    incoterms: Optional[str] = None
    freight_charges_intl: Optional[float] = None
    replaces_po_id: Optional[int] = None


class CostEntry(BaseModel):
    """
    A payment, fee, tax or landed cost booked against a Purchase Order.

    amount is already expressed in the reporting currency. cost_category is
    kept as the raw stored string so that categories unknown to this release
    still load; see models.cost_category.classify_category.
    """
    cost_id: str
    po_id: int
    cost_category: str
    amount: float = 0.0
    currency: Optional[str] = None
    payment_date: Optional[str] = None      # YYYY-MM-DD
    notes: Optional[str] = None
