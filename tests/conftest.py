"""
Pytest fixtures for the inventory test suite.

Every test gets its own file-backed SQLite database under tmp_path, so
threads in the concurrency tests share one real database.
"""
from decimal import Decimal
from itertools import count

import pytest
from fastapi.testclient import TestClient

from techstore.config import Settings
from techstore.crud.catalog import CatalogStore, CategoryStore
from techstore.crud.ledger import MovementLedger
from techstore.database import Database
from techstore.engine import InventoryEngine
from techstore.main import create_app


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'inventory.db'}")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db(database):
    with database.session() as session:
        yield session


@pytest.fixture
def catalog():
    return CatalogStore()


@pytest.fixture
def ledger():
    return MovementLedger()


@pytest.fixture
def engine(database, catalog, ledger):
    return InventoryEngine(database, catalog, ledger)


@pytest.fixture
def category(db):
    return CategoryStore().insert(db, {"name": "Laptops", "description": "Portable computers"})


@pytest.fixture
def make_product(db, catalog, category):
    """Factory inserting a product with sensible defaults."""
    sequence = count(1)

    def _make(stock=10, **overrides):
        n = next(sequence)
        data = {
            "sku": f"SKU-{n}",
            "name": f"Product {n}",
            "description": None,
            "price": Decimal("19.99"),
            "cost_price": Decimal("12.50"),
            "stock": stock,
            "category_id": category.id,
            "provider_id": None,
            "is_active": True,
        }
        data.update(overrides)
        return catalog.insert(db, data)

    return _make


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        LOW_STOCK_THRESHOLD=5,
        RECENT_MOVEMENTS_LIMIT=10,
        TOP_SELLERS_LIMIT=3,
        CSV_DELIMITER=";",
    )


@pytest.fixture
def client(database, settings):
    app = create_app(database=database, app_settings=settings)
    with TestClient(app) as test_client:
        yield test_client
