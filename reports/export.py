"""
Report building for cost lookups and cash-cycle analyses.

Turns analyzer results into flat display rows (rounded for presentation) and
renders them as plain-text reports through Jinja2. Operators can replace the
built-in templates with their own file (config.report_template).
"""
from pathlib import Path
from typing import Optional

from jinja2 import BaseLoader, Environment, FileSystemLoader

from analytics.cash_cycle import GAP_BAND_LABELS, gap_band
from analytics.csv_manager import csv_manager
from analytics.formatting import (
    fmt_days,
    fmt_money,
    fmt_num,
    fmt_qty,
    fmt_share,
    round_half_up,
)
from models.result import CashCycleReport, CostLookupResult

DEFAULT_COST_TEMPLATE = """\
{% set c = component %}
Cost history: {{ c.supplier_model if c else '(unknown component ' ~ component_id ~ ')' }}
{% if c %}  {{ c.internal_description }}{% if c.brand %} · {{ c.brand }}{% endif %}{% if c.category %} · {{ c.category }}{% endif %}
{% endif %}

A. Quote line items ({{ quotes | length }})
{% for q in quotes %}
  {{ "%-16s" | format(q.reference) }} {{ "%-10s" | format(q.quote_date or '—') }} {{ "%-24s" | format(q.supplier or '—') }} {{ q.quantity | qty }} x {{ q.currency }} {{ q.unit_price | num }} = {{ q.currency }} {{ q.line_total | num }}  [{{ q.status or '—' }}]
{% else %}
  (none)
{% endfor %}

B. Purchase order line items · true cost allocation ({{ allocations | length }})
{% for a in allocations %}
  {{ "%-14s" | format(a.po_number) }} {{ "%-10s" | format(a.po_date or '—') }} qty {{ a.quantity | qty }}  share {{ a.line_share | share }}
      principal {{ a.alloc_principal | money(currency) }}  bank fees {{ a.alloc_bank_fees | money(currency) }}  landed {{ a.alloc_landed | money(currency) }}
      true unit cost {{ a.true_unit_cost | money(currency) }}  (line total {{ a.total_allocated | money(currency) }})
{% if a.warnings %}      ! {{ a.warnings }}
{% endif %}
{% else %}
  (none)
{% endfor %}

C. PO costs reference ({{ costs | length }})
{% for r in costs %}
  {{ "%-14s" | format(r.po_number or '—') }} {{ "%-26s" | format(r.category) }} {{ "%-12s" | format(r.type) }} {{ r.currency or '' }} {{ r.amount | num }}{% if r.excluded %}  (excluded){% endif %}

{% else %}
  (none)
{% endfor %}
{% if errors %}

Skipped rows ({{ errors | length }})
{% for e in errors %}  {{ e.entity }} {{ e.entity_id }}: {{ e.reason }}
{% endfor %}
{% endif %}
"""

DEFAULT_CYCLE_TEMPLATE = """\
Reorder cycles: {{ summary.components_tracked }} products with ≥2 settled POs
  Avg. reorder cycle: {{ summary.overall_avg | days }}{% if summary.overall_min is not none %} (range {{ summary.overall_min | days }} – {{ summary.overall_max | days }}){% endif %}

{% if summary.fastest %}  Fastest: {{ summary.fastest.component.supplier_model }} ({{ summary.fastest.avg_cycle | days }} avg)
{% endif %}
{% if summary.slowest %}  Slowest: {{ summary.slowest.component.supplier_model }} ({{ summary.slowest.avg_cycle | days }} avg)
{% endif %}
{% for c in cycles %}

{{ c.component.supplier_model }} — {{ c.component.label }}
  suppliers: {{ c.supplier_names | join(", ") or "—" }}
  avg {{ c.avg_cycle | days }} [{{ band_label(c.avg_cycle) }}]  min {{ c.min_cycle | days }}  max {{ c.max_cycle | days }}  cycles {{ c.cycle_count }}  POs {{ c.entries | length }}
{% for e in c.entries %}
    {{ "%-14s" | format(e.po.po_number) }} {{ "%-24s" | format(e.supplier_name or 'Unknown') }} qty {{ e.quantity | qty }}  settled {{ e.settled_date }}  {{ e.cycle_gap | days if e.cycle_gap is not none else 'first' }}
{% endfor %}
{% else %}
No reorder cycles found yet.
{% endfor %}
"""


def quote_rows(result: CostLookupResult) -> list[dict]:
    rows = []
    for view in result.quote_line_items:
        qi, quote = view.item, view.quote
        rows.append({
            "quote_line_id": qi.quote_line_id,
            "reference": (quote.pi_number if quote and quote.pi_number else f"Quote #{qi.quote_id}"),
            "quote_date": quote.quote_date if quote else None,
            "supplier": view.supplier_name,
            "supplier_description": qi.supplier_description,
            "quantity": qi.quantity,
            "currency": qi.currency,
            "unit_price": qi.unit_price,
            "line_total": view.line_total,
            "status": quote.status if quote else None,
        })
    return rows


def allocation_rows(result: CostLookupResult) -> list[dict]:
    """One display row per allocation; money columns rounded to whole units."""
    rows = []
    for a in result.allocations:
        rows.append({
            "po_item_id": a.item.po_item_id,
            "po_number": a.po.po_number,
            "pi_number": a.po.pi_number,
            "po_date": a.po.po_date,
            "quantity": a.item.quantity,
            "currency": a.item.currency or a.po.currency,
            "unit_cost": a.item.unit_cost,
            "exchange_rate": a.po.exchange_rate,
            "line_share": a.line_share,
            "line_share_pct": round(a.line_share * 100, 2),
            "alloc_principal": round_half_up(a.alloc_principal),
            "alloc_bank_fees": round_half_up(a.alloc_bank_fees),
            "alloc_landed": round_half_up(a.alloc_landed),
            "total_allocated": round_half_up(a.total_allocated),
            "true_unit_cost": round_half_up(a.true_unit_cost),
            "payment_variance_pct": (
                round(a.payment_variance_pct, 2) if a.payment_variance_pct is not None else None
            ),
            "status": a.po.status,
            "warnings": "; ".join(a.warnings),
        })
    return rows


def cost_reference_rows(result: CostLookupResult) -> list[dict]:
    return [
        {
            "cost_id": r.cost.cost_id,
            "po_number": r.po_number or f"PO #{r.cost.po_id}",
            "pi_number": r.pi_number,
            "category": r.category_label,
            "type": r.class_label,
            "currency": r.cost.currency,
            "amount": r.cost.amount,
            "payment_date": r.cost.payment_date,
            "notes": r.cost.notes,
            "excluded": r.excluded_from_true_cost,
        }
        for r in result.cost_references
    ]


def cycle_rows(report: CashCycleReport) -> list[dict]:
    """One display row per settled order per component, newest first within a component."""
    rows = []
    for c in report.cycles:
        for e in c.entries:
            rows.append({
                "component_id": c.component.component_id,
                "supplier_model": c.component.supplier_model,
                "internal_description": c.component.internal_description,
                "avg_cycle": c.avg_cycle,
                "po_number": e.po.po_number,
                "pi_number": e.po.pi_number,
                "supplier_name": e.supplier_name,
                "supplier_code": e.supplier_code,
                "quantity": e.quantity,
                "settled_date": e.settled_date,
                "cycle_gap": e.cycle_gap,
                "gap_band": gap_band(e.cycle_gap),
            })
    return rows


def cost_payload(result: CostLookupResult) -> dict:
    return {
        "component_id": result.component_id,
        "component": result.component,
        "currency": result.reporting_currency,
        "quotes": quote_rows(result),
        "allocations": allocation_rows(result),
        "costs": cost_reference_rows(result),
        "errors": result.errors,
    }


def cycle_payload(report: CashCycleReport) -> dict:
    return {
        "summary": report.summary,
        "cycles": report.cycles,
        "errors": report.errors,
    }


def _band_label(days: Optional[int]) -> str:
    band = gap_band(days)
    return GAP_BAND_LABELS[band] if band else "—"


def _environment(loader) -> Environment:
    env = Environment(loader=loader, autoescape=False, trim_blocks=True, keep_trailing_newline=True)
    env.filters["money"] = lambda v, currency="IDR": fmt_money(v, currency)
    env.filters["num"] = fmt_num
    env.filters["qty"] = fmt_qty
    env.filters["share"] = fmt_share
    env.filters["days"] = fmt_days
    env.globals["band_label"] = _band_label
    return env


def render_report(kind: str, payload: dict, template_file: Path | None = None) -> str:
    """
    Render *payload* as text using the operator template (or built-in default).

    Args:
        kind: "cost" or "cycles", selects the built-in template
        payload: template context from cost_payload() / cycle_payload()
        template_file: Optional path to a custom Jinja2 template file
    """
    if template_file and template_file.exists():
        env = _environment(FileSystemLoader(str(template_file.parent)))
        tmpl = env.get_template(template_file.name)
    else:
        defaults = {"cost": DEFAULT_COST_TEMPLATE, "cycles": DEFAULT_CYCLE_TEMPLATE}
        if kind not in defaults:
            raise ValueError(f"Unknown report kind: {kind}")
        tmpl = _environment(BaseLoader()).from_string(defaults[kind])
    return tmpl.render(**payload)


def write_csv(path: Path, rows: list[dict]) -> Path:
    """Write display rows to *path*; the header follows the first row's keys."""
    fieldnames = list(rows[0].keys()) if rows else []
    csv_manager.save_dicts(path, rows, fieldnames)
    return path
