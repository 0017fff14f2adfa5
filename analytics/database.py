"""
SQLite mirror of the procurement tables.

A local database file (output/procurement.db by default) holding the same
seven tables the CSV loader reads. The analytics only ever issue plain
SELECTs against it; import_snapshot() refreshes the mirror from a loaded
snapshot (e.g. a fresh CSV export of the hosted database).
"""
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Type

from pydantic import BaseModel, ValidationError

from models.snapshot import DataSnapshot
from .loader import TABLE_FILES

logger = logging.getLogger(__name__)

# snapshot attribute -> SQL table name
TABLE_NAMES: dict[str, str] = {
    "components":      "components",
    "suppliers":       "suppliers",
    "quotes":          "price_quotes",
    "quote_items":     "price_quote_line_items",
    "purchase_orders": "purchases",
    "po_items":        "purchase_line_items",
    "po_costs":        "po_costs",
}

_SCHEMA = """
CREATE TABLE IF NOT EXISTS components (
    component_id          INTEGER PRIMARY KEY,
    supplier_model        TEXT NOT NULL,
    internal_description  TEXT NOT NULL DEFAULT '',
    brand                 TEXT,
    category              TEXT
);

CREATE TABLE IF NOT EXISTS suppliers (
    supplier_id           INTEGER PRIMARY KEY,
    supplier_name         TEXT NOT NULL,
    supplier_code         TEXT,
    location              TEXT,
    primary_contact_email TEXT
);

CREATE TABLE IF NOT EXISTS price_quotes (
    quote_id              INTEGER PRIMARY KEY,
    supplier_id           INTEGER,
    quote_date            TEXT,
    pi_number             TEXT,
    currency              TEXT NOT NULL DEFAULT 'USD',
    total_value           REAL,
    status                TEXT
);

CREATE TABLE IF NOT EXISTS price_quote_line_items (
    quote_line_id         INTEGER PRIMARY KEY,
    quote_id              INTEGER NOT NULL,
    component_id          INTEGER NOT NULL,
    supplier_description  TEXT,
    quantity              REAL NOT NULL DEFAULT 0,
    unit_price            REAL NOT NULL DEFAULT 0,
    currency              TEXT NOT NULL DEFAULT 'USD'
);

CREATE TABLE IF NOT EXISTS purchases (
    po_id                 INTEGER PRIMARY KEY,
    po_number             TEXT NOT NULL,
    po_date               TEXT,
    currency              TEXT NOT NULL DEFAULT 'USD',
    exchange_rate         REAL,
    status                TEXT,
    quote_id              INTEGER,
    pi_number             TEXT,
    incoterms             TEXT,
    freight_charges_intl  REAL,
    replaces_po_id        INTEGER
);

CREATE TABLE IF NOT EXISTS purchase_line_items (
    po_item_id            INTEGER PRIMARY KEY,
    po_id                 INTEGER NOT NULL,
    component_id          INTEGER NOT NULL,
    supplier_description  TEXT,
    quantity              REAL NOT NULL DEFAULT 0,
    unit_cost             REAL NOT NULL DEFAULT 0,
    currency              TEXT
);

CREATE TABLE IF NOT EXISTS po_costs (
    cost_id               TEXT PRIMARY KEY,
    po_id                 INTEGER NOT NULL,
    cost_category         TEXT NOT NULL,
    amount                REAL NOT NULL DEFAULT 0,
    currency              TEXT,
    payment_date          TEXT,
    notes                 TEXT
);

CREATE INDEX IF NOT EXISTS idx_po_costs_po_id        ON po_costs (po_id);
CREATE INDEX IF NOT EXISTS idx_po_costs_category     ON po_costs (cost_category);
CREATE INDEX IF NOT EXISTS idx_line_items_po_id      ON purchase_line_items (po_id);
CREATE INDEX IF NOT EXISTS idx_line_items_component  ON purchase_line_items (component_id);
CREATE INDEX IF NOT EXISTS idx_quote_items_component ON price_quote_line_items (component_id);
"""


class Database:
    """Thin wrapper around the SQLite mirror file."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------

    @contextmanager
    def _conn(self):
        conn = sqlite3.connect(str(self.db_path), timeout=30)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._conn() as conn:
            conn.executescript(_SCHEMA)
        logger.debug("Database schema ready: %s", self.db_path)

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def load_snapshot(self) -> DataSnapshot:
        """Read every table into a DataSnapshot, in insertion order."""
        tables = {}
        with self._conn() as conn:
            for attr, table in TABLE_NAMES.items():
                model = TABLE_FILES[attr][1]
                rows = conn.execute(f"SELECT * FROM {table} ORDER BY rowid").fetchall()
                tables[attr] = _validate_rows(table, model, rows)
        snapshot = DataSnapshot(**tables)
        logger.info("Loaded snapshot from %s: %s", self.db_path, snapshot.counts())
        return snapshot

    def counts(self) -> dict[str, int]:
        with self._conn() as conn:
            return {
                attr: conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
                for attr, table in TABLE_NAMES.items()
            }

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def import_snapshot(self, snapshot: DataSnapshot) -> dict[str, int]:
        """
        Replace the contents of every table with the rows of *snapshot*.

        Runs in a single transaction: either all tables are refreshed or none.
        Returns the number of rows written per table.
        """
        written: dict[str, int] = {}
        with self._conn() as conn:
            for attr, table in TABLE_NAMES.items():
                rows = [r.model_dump() for r in getattr(snapshot, attr)]
                columns = [c["name"] for c in conn.execute(f"PRAGMA table_info({table})")]
                conn.execute(f"DELETE FROM {table}")
                if rows:
                    placeholders = ", ".join(f":{c}" for c in columns)
                    conn.executemany(
                        f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
                        [{c: r.get(c) for c in columns} for r in rows],
                    )
                written[attr] = len(rows)
        logger.info("Imported snapshot into %s: %s", self.db_path, written)
        return written


def _validate_rows(table: str, model: Type[BaseModel], rows: list[sqlite3.Row]) -> list:
    valid = []
    for row in rows:
        data = {k: row[k] for k in row.keys() if row[k] is not None}
        if "cost_id" in data:
            data["cost_id"] = str(data["cost_id"])
        try:
            valid.append(model.model_validate(data))
        except ValidationError as e:
            logger.warning("%s: invalid row skipped (%s)", table, e.errors()[0].get("msg"))
    return valid
