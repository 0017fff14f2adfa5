from pydantic import BaseModel
from typing import Optional


class PriceQuote(BaseModel):
    """A supplier price quote header (optionally carrying a proforma invoice number)."""
    quote_id: int
    supplier_id: Optional[int] = None
    quote_date: Optional[str] = None        # YYYY-MM-DD
    pi_number: Optional[str] = None
    currency: str = "USD"
    total_value: Optional[float] = None
    status: Optional[str] = None            # Open / Accepted / Replaced / Rejected / Expired


class PriceQuoteLineItem(BaseModel):
    """A single quoted line. Quotes are never allocated, only listed."""
    quote_line_id: int
    quote_id: int
    component_id: int
    supplier_description: Optional[str] = None
    quantity: float = 0.0
    unit_price: float = 0.0
    currency: str = "USD"

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price
