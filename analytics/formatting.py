"""
Display formatting and rounding helpers shared by the analyzers and reports.

Analyzers keep full precision; these functions are applied at presentation.
"""
import math
from typing import Optional

EMPTY = "—"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def fmt_money(amount: Optional[float], currency: str = "IDR") -> str:
    """Whole currency units with thousands separators, e.g. 'IDR 1,234,568'."""
    if amount is None:
        return EMPTY
    return f"{currency} {round_half_up(amount):,}"


def fmt_num(value: Optional[float]) -> str:
    """Two decimals with thousands separators."""
    if value is None:
        return EMPTY
    return f"{value:,.2f}"


def fmt_qty(value: Optional[float]) -> str:
    if value is None:
        return EMPTY
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,}"


def fmt_share(share: Optional[float]) -> str:
    """A 0-1 fraction as a percentage with one decimal, e.g. 0.3333 -> '33.3%'."""
    if share is None:
        return EMPTY
    return f"{share * 100:.1f}%"


def fmt_days(days: Optional[int]) -> str:
    if days is None:
        return EMPTY
    return f"{days}d"
