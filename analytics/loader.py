"""
Snapshot loading from CSV table exports.

Reads one CSV per table from a data directory:

  components.csv              component_id, supplier_model, internal_description, brand, category
  suppliers.csv               supplier_id, supplier_name, supplier_code, location, ...
  price_quotes.csv            quote_id, supplier_id, quote_date, pi_number, currency, total_value, status
  price_quote_line_items.csv  quote_line_id, quote_id, component_id, supplier_description,
                              quantity, unit_price, currency
  purchase_orders.csv         po_id, po_number, po_date, currency, exchange_rate, status,
                              quote_id, pi_number, incoterms, freight_charges_intl, replaces_po_id
  purchase_line_items.csv     po_item_id, po_id, component_id, supplier_description,
                              quantity, unit_cost, currency
  po_costs.csv                cost_id, po_id, cost_category, amount, currency, payment_date, notes

Extra columns (created_at, ...) are ignored. A missing file loads as an empty
table; a row that fails validation is logged with its line number and skipped.
"""
import csv
import logging
import re
from pathlib import Path
from typing import Optional, Type

from pydantic import BaseModel, ValidationError

from models.component import Component
from models.purchase_order import CostEntry, PurchaseLineItem, PurchaseOrder
from models.quote import PriceQuote, PriceQuoteLineItem
from models.snapshot import DataSnapshot
from models.supplier import Supplier
from .csv_manager import csv_manager

logger = logging.getLogger(__name__)

# snapshot attribute -> (file name, row model)
TABLE_FILES: dict[str, tuple[str, Type[BaseModel]]] = {
    "components":      ("components.csv", Component),
    "suppliers":       ("suppliers.csv", Supplier),
    "quotes":          ("price_quotes.csv", PriceQuote),
    "quote_items":     ("price_quote_line_items.csv", PriceQuoteLineItem),
    "purchase_orders": ("purchase_orders.csv", PurchaseOrder),
    "po_items":        ("purchase_line_items.csv", PurchaseLineItem),
    "po_costs":        ("po_costs.csv", CostEntry),
}

# Columns that may carry thousands separators or currency symbols
NUMERIC_COLUMNS = {
    "quantity", "unit_price", "unit_cost", "amount",
    "exchange_rate", "total_value", "freight_charges_intl",
}


class SnapshotLoader:
    """Loads a DataSnapshot from a directory of CSV files."""

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)

    def path_for(self, table: str) -> Path:
        return self.data_dir / TABLE_FILES[table][0]

    def load(self) -> DataSnapshot:
        tables = {table: self.load_table(table) for table in TABLE_FILES}
        snapshot = DataSnapshot(**tables)
        logger.info(
            "Loaded snapshot from %s: %s",
            self.data_dir,
            ", ".join(f"{name}={count}" for name, count in snapshot.counts().items()),
        )
        return snapshot

    def load_table(self, table: str) -> list:
        file_name, model = TABLE_FILES[table]
        path = self.data_dir / file_name
        try:
            raw_rows = csv_manager.load_dicts(path)
        except (UnicodeDecodeError, csv.Error) as e:
            logger.warning("%s could not be read, loaded as an empty table: %s", file_name, e)
            return []

        rows = []
        # Line 1 is the header
        for line_no, raw in enumerate(raw_rows, start=2):
            try:
                rows.append(model.model_validate(clean_row(raw)))
            except ValidationError as e:
                logger.warning(
                    "%s line %d: invalid row skipped (%d errors: %s)",
                    file_name, line_no, e.error_count(), _first_error(e),
                )
        return rows


def clean_row(raw: dict) -> dict:
    """
    Normalise one raw CSV row for model validation: strip values, drop blanks
    (so model defaults apply) and strip formatting from numeric columns.
    """
    cleaned: dict = {}
    for key, value in raw.items():
        if key is None:
            # Surplus cells beyond the header
            continue
        key = key.strip()
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            continue
        if key in NUMERIC_COLUMNS:
            number = _to_float(value)
            if number is not None:
                value = number
        cleaned[key] = value
    return cleaned


def _to_float(value: Optional[str]) -> Optional[float]:
    """
    Parse a spreadsheet-formatted number: "1,500,000", "IDR 1,500", "1.5E+04",
    or "(500)" for -500. Returns None when nothing numeric is left.
    """
    if value is None:
        return None
    text = str(value).strip()
    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1].strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        # Drop thousands separators, then any currency code or symbol around the digits
        cleaned = re.sub(r"^[^\d.+\-]+|[^\d.]+$", "", text.replace(",", "").replace(" ", ""))
        try:
            number = float(cleaned)
        except ValueError:
            return None
    return -number if negative else number


def _first_error(e: ValidationError) -> str:
    err = e.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err.get('msg')}"
