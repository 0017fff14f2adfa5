"""
Pytest configuration and shared fixtures for the analytics test suite.
"""
import os
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from models import (
    Component,
    CostEntry,
    DataSnapshot,
    PriceQuote,
    PriceQuoteLineItem,
    PurchaseLineItem,
    PurchaseOrder,
    Supplier,
)

PROJECT_ROOT = Path(__file__).parent.parent
os.chdir(PROJECT_ROOT)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files."""
    tmp_path = tempfile.mkdtemp(prefix="analytics_test_")
    yield Path(tmp_path)
    shutil.rmtree(tmp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path, monkeypatch) -> "Config":
    """Provide a test configuration with isolated directories."""
    from config import Config

    # Keep a developer's analytics_settings.json out of the tests
    monkeypatch.setenv("CONFIG_DIR", str(temp_dir / "config"))
    config = Config()
    config.data_dir = temp_dir / "data"
    config.data_dir.mkdir(parents=True, exist_ok=True)
    config.output_dir = temp_dir / "output"
    config.output_dir.mkdir(parents=True, exist_ok=True)
    config.db_path = temp_dir / "output" / "procurement.db"
    config.reporting_currency = "IDR"
    return config


# ---------------------------------------------------------------------------
# In-memory snapshots
# ---------------------------------------------------------------------------

@pytest.fixture
def allocation_snapshot() -> DataSnapshot:
    """
    One USD order with two lines:
      A  5 x 10 = 50   (component 1)
      B  5 x 20 = 100  (component 2)
    paid 1,500 principal + 30 bank fee (+ 165 VAT, excluded) at rate 10.
    """
    return DataSnapshot(
        components=[
            Component(component_id=1, supplier_model="SCC-MPPT-60", internal_description="MPPT charge controller 60A", brand="Victron"),
            Component(component_id=2, supplier_model="PV-450M", internal_description="Solar panel 450W mono", brand="Jinko"),
        ],
        suppliers=[
            Supplier(supplier_id=1, supplier_name="Shenzhen Solar Co", supplier_code="SZS"),
        ],
        quotes=[
            PriceQuote(quote_id=10, supplier_id=1, quote_date="2025-01-05", pi_number="PI-2025-010", currency="USD", status="Accepted"),
        ],
        quote_items=[
            PriceQuoteLineItem(quote_line_id=1, quote_id=10, component_id=1, quantity=5, unit_price=10, currency="USD"),
            PriceQuoteLineItem(quote_line_id=2, quote_id=10, component_id=2, quantity=5, unit_price=20, currency="USD"),
        ],
        purchase_orders=[
            PurchaseOrder(po_id=100, po_number="PO-2025-100", po_date="2025-01-10", currency="USD",
                          exchange_rate=10.0, quote_id=10, pi_number="PI-2025-010"),
        ],
        po_items=[
            PurchaseLineItem(po_item_id=1, po_id=100, component_id=1, quantity=5, unit_cost=10),
            PurchaseLineItem(po_item_id=2, po_id=100, component_id=2, quantity=5, unit_cost=20),
        ],
        po_costs=[
            CostEntry(cost_id="c1", po_id=100, cost_category="down_payment", amount=500, payment_date="2025-01-12"),
            CostEntry(cost_id="c2", po_id=100, cost_category="balance_payment", amount=1000, payment_date="2025-02-01"),
            CostEntry(cost_id="c3", po_id=100, cost_category="telex_bank_fee", amount=30),
            CostEntry(cost_id="c4", po_id=100, cost_category="local_vat", amount=165),
        ],
    )


@pytest.fixture
def cycle_snapshot() -> DataSnapshot:
    """
    Component 3 bought on three settled orders (2025-01-01, 2025-03-02,
    2025-04-01); component 4 bought on a single settled order.
    """
    return DataSnapshot(
        components=[
            Component(component_id=3, supplier_model="BAT-LFP-100", internal_description="LiFePO4 battery 100Ah"),
            Component(component_id=4, supplier_model="INV-3K", internal_description="Inverter 3kW"),
        ],
        suppliers=[Supplier(supplier_id=1, supplier_name="Shenzhen Solar Co", supplier_code="SZS")],
        quotes=[PriceQuote(quote_id=20, supplier_id=1)],
        purchase_orders=[
            PurchaseOrder(po_id=201, po_number="PO-201", quote_id=20),
            PurchaseOrder(po_id=202, po_number="PO-202", quote_id=20),
            PurchaseOrder(po_id=203, po_number="PO-203", quote_id=20),
        ],
        po_items=[
            PurchaseLineItem(po_item_id=11, po_id=201, component_id=3, quantity=10, unit_cost=100),
            PurchaseLineItem(po_item_id=12, po_id=202, component_id=3, quantity=20, unit_cost=100),
            PurchaseLineItem(po_item_id=13, po_id=203, component_id=3, quantity=30, unit_cost=100),
            PurchaseLineItem(po_item_id=14, po_id=201, component_id=4, quantity=2, unit_cost=300),
        ],
        po_costs=[
            CostEntry(cost_id="p1", po_id=201, cost_category="down_payment", amount=100, payment_date="2024-12-01"),
            CostEntry(cost_id="p2", po_id=201, cost_category="balance_payment", amount=900, payment_date="2025-01-01"),
            CostEntry(cost_id="p3", po_id=202, cost_category="balance_payment", amount=2000, payment_date="2025-03-02"),
            CostEntry(cost_id="p4", po_id=203, cost_category="balance_payment", amount=2000, payment_date="2025-03-20"),
            CostEntry(cost_id="p5", po_id=203, cost_category="additional_balance_payment", amount=1000, payment_date="2025-04-01"),
        ],
    )


# ---------------------------------------------------------------------------
# CSV exports on disk
# ---------------------------------------------------------------------------

SAMPLE_CSVS = {
    "components.csv": """component_id,supplier_model,internal_description,brand,category,created_at
1,SCC-MPPT-60,MPPT charge controller 60A,Victron,charge_controller,2024-11-01
2,PV-450M,Solar panel 450W mono,Jinko,pv_module,2024-11-01
3,BAT-LFP-100,LiFePO4 battery 100Ah,,battery,2024-11-02
""",
    "suppliers.csv": """supplier_id,supplier_name,supplier_code,location,primary_contact_email
1,Shenzhen Solar Co,SZS,Shenzhen,sales@szsolar.example
""",
    "price_quotes.csv": """quote_id,supplier_id,quote_date,pi_number,currency,total_value,status
10,1,2025-01-05,PI-2025-010,USD,150,Accepted
""",
    "price_quote_line_items.csv": """quote_line_id,quote_id,component_id,supplier_description,quantity,unit_price,currency
1,10,1,MPPT 60A,5,10,USD
2,10,2,Mono 450W,5,20,USD
""",
    "purchase_orders.csv": """po_id,po_number,po_date,currency,exchange_rate,status,quote_id,pi_number,incoterms
100,PO-2025-100,2025-01-10,USD,10,Fully Received,10,PI-2025-010,FOB
101,PO-2025-101,2025-03-10,USD,"16,250",Confirmed,10,PI-2025-011,FOB
""",
    "purchase_line_items.csv": """po_item_id,po_id,component_id,supplier_description,quantity,unit_cost,currency
1,100,1,MPPT 60A,5,10,USD
2,100,2,Mono 450W,5,20,USD
3,101,1,MPPT 60A,8,10,USD
4,101,3,Battery 100Ah,not-a-number,95,USD
""",
    "po_costs.csv": """cost_id,po_id,cost_category,amount,currency,payment_date,notes
c1,100,down_payment,500,IDR,2025-01-12,
c2,100,balance_payment,"1,000",IDR,2025-02-01,final
c3,100,telex_bank_fee,30,IDR,,
c4,100,local_vat,165,IDR,,
c5,101,balance_payment,1300,IDR,2025-04-15,
""",
}


@pytest.fixture
def sample_data_dir(temp_dir: Path) -> Path:
    """Write a small set of CSV exports (one malformed line item row included)."""
    data_dir = temp_dir / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    for name, content in SAMPLE_CSVS.items():
        (data_dir / name).write_text(content, encoding="utf-8")
    return data_dir


@pytest.fixture
def test_db(test_config) -> "Database":
    """Provide a test database instance."""
    from analytics.database import Database
    return Database(test_config.db_path)


# Configure pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")
