"""
PO cost categories and their cost classes.

Every stored cost entry belongs to exactly one of four classes:

  PRINCIPAL  payments for the goods themselves
  BANK_FEE   transfer / bank charges
  TAX        VAT / income tax; never part of true unit cost (amounts are ex-tax)
  LANDED     everything else (duties, delivery, demurrage, penalties, ...)

LANDED is the residual class: a category string this module does not know is
classified as LANDED, and is_known_category() lets callers flag it.
"""
from enum import Enum
from typing import Optional


class CostCategory(str, Enum):
    # Payments
    DOWN_PAYMENT = "down_payment"
    BALANCE_PAYMENT = "balance_payment"
    ADDITIONAL_BALANCE_PAYMENT = "additional_balance_payment"
    OVERPAYMENT_CREDIT = "overpayment_credit"
    # Bank fees
    FULL_AMOUNT_BANK_FEE = "full_amount_bank_fee"
    TELEX_BANK_FEE = "telex_bank_fee"
    VALUE_TODAY_BANK_FEE = "value_today_bank_fee"
    ADMIN_BANK_FEE = "admin_bank_fee"
    INTER_BANK_TRANSFER_FEE = "inter_bank_transfer_fee"
    # Taxes
    LOCAL_VAT = "local_vat"
    LOCAL_INCOME_TAX = "local_income_tax"
    # Landed costs
    LOCAL_IMPORT_DUTY = "local_import_duty"
    LOCAL_DELIVERY = "local_delivery"
    DEMURRAGE_FEE = "demurrage_fee"
    PENALTY_FEE = "penalty_fee"
    DHL_ADVANCE_PAYMENT_FEE = "dhl_advance_payment_fee"
    LOCAL_IMPORT_TAX = "local_import_tax"


class CostClass(str, Enum):
    PRINCIPAL = "principal"
    BANK_FEE = "bank_fee"
    TAX = "tax"
    LANDED = "landed"


_CLASS_BY_CATEGORY: dict[CostCategory, CostClass] = {
    CostCategory.DOWN_PAYMENT:               CostClass.PRINCIPAL,
    CostCategory.BALANCE_PAYMENT:            CostClass.PRINCIPAL,
    CostCategory.ADDITIONAL_BALANCE_PAYMENT: CostClass.PRINCIPAL,
    CostCategory.OVERPAYMENT_CREDIT:         CostClass.PRINCIPAL,
    CostCategory.FULL_AMOUNT_BANK_FEE:       CostClass.BANK_FEE,
    CostCategory.TELEX_BANK_FEE:             CostClass.BANK_FEE,
    CostCategory.VALUE_TODAY_BANK_FEE:       CostClass.BANK_FEE,
    CostCategory.ADMIN_BANK_FEE:             CostClass.BANK_FEE,
    CostCategory.INTER_BANK_TRANSFER_FEE:    CostClass.BANK_FEE,
    CostCategory.LOCAL_VAT:                  CostClass.TAX,
    CostCategory.LOCAL_INCOME_TAX:           CostClass.TAX,
    CostCategory.LOCAL_IMPORT_DUTY:          CostClass.LANDED,
    CostCategory.LOCAL_DELIVERY:             CostClass.LANDED,
    CostCategory.DEMURRAGE_FEE:              CostClass.LANDED,
    CostCategory.PENALTY_FEE:                CostClass.LANDED,
    CostCategory.DHL_ADVANCE_PAYMENT_FEE:    CostClass.LANDED,
    CostCategory.LOCAL_IMPORT_TAX:           CostClass.LANDED,
}

_unmapped = set(CostCategory) - set(_CLASS_BY_CATEGORY)
if _unmapped:
    raise RuntimeError(f"Cost categories without a cost class: {sorted(c.value for c in _unmapped)}")

# Balance-type payments mark an order as settled
BALANCE_CATEGORIES = frozenset({
    CostCategory.BALANCE_PAYMENT,
    CostCategory.ADDITIONAL_BALANCE_PAYMENT,
})

COST_LABELS: dict[CostCategory, str] = {
    CostCategory.DOWN_PAYMENT:               "Down Payment",
    CostCategory.BALANCE_PAYMENT:            "Balance Payment",
    CostCategory.ADDITIONAL_BALANCE_PAYMENT: "Additional Balance",
    CostCategory.OVERPAYMENT_CREDIT:         "Overpayment Credit",
    CostCategory.FULL_AMOUNT_BANK_FEE:       "Bank Fee (Full Amount)",
    CostCategory.TELEX_BANK_FEE:             "Bank Fee (Telex)",
    CostCategory.VALUE_TODAY_BANK_FEE:       "Bank Fee (Value Today)",
    CostCategory.ADMIN_BANK_FEE:             "Bank Fee (Admin)",
    CostCategory.INTER_BANK_TRANSFER_FEE:    "Inter-bank Transfer Fee",
    CostCategory.LOCAL_VAT:                  "Local VAT / PPN",
    CostCategory.LOCAL_INCOME_TAX:           "Income Tax (PPh)",
    CostCategory.LOCAL_IMPORT_DUTY:          "Import Duty",
    CostCategory.LOCAL_DELIVERY:             "Local Delivery",
    CostCategory.DEMURRAGE_FEE:              "Demurrage",
    CostCategory.PENALTY_FEE:                "Penalty",
    CostCategory.DHL_ADVANCE_PAYMENT_FEE:    "DHL Advance Fee",
    CostCategory.LOCAL_IMPORT_TAX:           "Import Tax",
}

CLASS_LABELS: dict[CostClass, str] = {
    CostClass.PRINCIPAL: "Payment",
    CostClass.BANK_FEE:  "Bank Fee",
    CostClass.TAX:       "Tax (PPN)",
    CostClass.LANDED:    "Landed Cost",
}


def parse_category(category: Optional[str]) -> Optional[CostCategory]:
    """Return the CostCategory for a stored string, or None if it is not a known member."""
    if not category:
        return None
    try:
        return CostCategory(category.strip().lower())
    except ValueError:
        return None


def is_known_category(category: Optional[str]) -> bool:
    return parse_category(category) is not None


def classify_category(category: Optional[str]) -> CostClass:
    """
    Map a stored cost_category string to its CostClass.

    Known categories go through the explicit table. Unknown ones land in the
    residual LANDED class.
    """
    known = parse_category(category)
    if known is None:
        return CostClass.LANDED
    return _CLASS_BY_CATEGORY[known]


def is_balance_payment(category: Optional[str]) -> bool:
    return parse_category(category) in BALANCE_CATEGORIES


def category_label(category: Optional[str]) -> str:
    known = parse_category(category)
    if known is None:
        return category or ""
    return COST_LABELS[known]
