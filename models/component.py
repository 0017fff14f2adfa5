from pydantic import BaseModel
from typing import Optional, List


class Component(BaseModel):
    """A purchasable product / part. supplier_model is the supplier's code for it."""
    component_id: int
    supplier_model: str
    internal_description: str = ""
    brand: Optional[str] = None
    category: Optional[str] = None      # e.g. "pv_module", "inverter_charger"

    @property
    def label(self) -> str:
        return self.internal_description or self.supplier_model

    @property
    def searchable_fields(self) -> List[str]:
        """Description, model and brand, for component search."""
        return [f for f in (self.internal_description, self.supplier_model, self.brand) if f]
