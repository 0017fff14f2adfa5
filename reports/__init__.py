"""
Report rendering for the analytics results.
"""
from .export import (
    allocation_rows,
    cost_payload,
    cost_reference_rows,
    cycle_payload,
    cycle_rows,
    quote_rows,
    render_report,
    write_csv,
    DEFAULT_COST_TEMPLATE,
    DEFAULT_CYCLE_TEMPLATE,
)

__all__ = [
    "allocation_rows",
    "cost_payload",
    "cost_reference_rows",
    "cycle_payload",
    "cycle_rows",
    "quote_rows",
    "render_report",
    "write_csv",
    "DEFAULT_COST_TEMPLATE",
    "DEFAULT_CYCLE_TEMPLATE",
]
