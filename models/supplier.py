from pydantic import BaseModel
from typing import Optional


class Supplier(BaseModel):
    """
    A supplier from the supplier master table.
    Referenced from price quotes, and from purchase orders via their quote.
    """
    supplier_id: int
    supplier_name: str
    supplier_code: Optional[str] = None
    location: Optional[str] = None
    primary_contact_email: Optional[str] = None
