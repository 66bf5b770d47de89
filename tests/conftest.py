"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- An in-memory stand-in for the hosted database
- Sample layouts, trees and listings
- Service instances wired to the in-memory database
- FastAPI test client
"""
import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import copy
import itertools
from typing import Any, Dict, Iterable, List, Optional

import pytest
from fastapi.testclient import TestClient

from farm_market.main import app
from farm_market.api.dependencies import get_cart_registry, get_tree_catalog_cache
from farm_market.domain.models import Block, GridConfig, Product, Seller
from farm_market.infrastructure.database_client import DatabaseError, Op, get_database_client
from farm_market.services.application.cart_service import CartRegistry
from farm_market.services.application.layout_service import LayoutService
from farm_market.services.application.node_type_service import CONFLICT_COLUMNS, NodeTypeService
from farm_market.services.application.product_service import ProductService
from farm_market.services.application.tree_position_service import TreePositionService
from farm_market.services.domain.ttl_cache import TTLCache


# ============================================================
# In-memory Database
# ============================================================

def _matches(row: Dict[str, Any], column: str, expected: Any) -> bool:
    actual = row.get(column)
    if isinstance(expected, Op):
        if expected.operator == "neq":
            return str(actual) != str(expected.value)
        if expected.operator == "gte":
            return actual is not None and actual >= expected.value
        if expected.operator == "lte":
            return actual is not None and actual <= expected.value
        if expected.operator == "not.is" and expected.value == "null":
            return actual is not None
        raise AssertionError(f"Unsupported operator {expected.operator}")
    if expected is None:
        return actual is None
    if isinstance(expected, (list, tuple)):
        return str(actual) in {str(v) for v in expected}
    if isinstance(expected, bool):
        return actual is expected
    return str(actual) == str(expected)


class FakeDatabaseClient:
    """
    Dict-backed implementation of the DatabaseClient CRUD surface.

    Filters follow the same rules as the REST encoding: scalars compare
    for equality (as strings, since ids arrive as path strings), lists
    mean "in", None means "is null" and Op carries other operators.
    Embedded column selections are ignored.
    """

    def __init__(self, unique: Optional[Dict[str, Iterable[str]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.unique = {table: tuple(cols) for table, cols in (unique or {}).items()}
        self.fail_inserts: Dict[str, DatabaseError] = {}
        self._ids = itertools.count(1)

    def seed(self, table: str, *rows: Dict[str, Any]) -> List[Dict[str, Any]]:
        stored = []
        for row in rows:
            row = dict(row)
            row.setdefault("id", next(self._ids))
            self.tables.setdefault(table, []).append(row)
            stored.append(row)
        return stored

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])

    def _filter(self, table: str, filters: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [
            row for row in self.rows(table)
            if all(_matches(row, col, val) for col, val in (filters or {}).items())
        ]

    def _violates_unique(self, table: str, row: Dict[str, Any]) -> bool:
        cols = self.unique.get(table)
        if not cols:
            return False
        key = tuple(str(row.get(c)) for c in cols)
        return any(
            tuple(str(other.get(c)) for c in cols) == key and other.get("id") != row.get("id")
            for other in self.rows(table)
        )

    async def select(self, table, filters=None, columns="*", order=None, limit=None):
        rows = self._filter(table, filters)
        if order:
            column, _, direction = order.partition(".")
            rows = sorted(
                rows,
                key=lambda r: (r.get(column) is None, str(r.get(column))),
                reverse=direction == "desc",
            )
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    async def select_one(self, table, filters, columns="*"):
        rows = await self.select(table, filters=filters, columns=columns, limit=1)
        return rows[0] if rows else None

    async def insert(self, table, rows, columns="*"):
        if table in self.fail_inserts:
            raise self.fail_inserts[table]
        payload = rows if isinstance(rows, list) else [rows]
        stored = []
        for row in payload:
            row = dict(row)
            row.setdefault("id", next(self._ids))
            if self._violates_unique(table, row):
                raise DatabaseError("duplicate key value violates unique constraint", status_code=409)
            self.tables.setdefault(table, []).append(row)
            stored.append(row)
        return copy.deepcopy(stored)

    async def upsert(self, table, row, on_conflict):
        existing = self._filter(table, {c: row[c] for c in on_conflict})
        if existing:
            existing[0].update(row)
            return copy.deepcopy(existing[:1])
        return await self.insert(table, row)

    async def update(self, table, patch, filters, columns="*"):
        matched = self._filter(table, filters)
        for row in matched:
            candidate = {**row, **patch}
            if self._violates_unique(table, candidate):
                raise DatabaseError("duplicate key value violates unique constraint", status_code=409)
            row.update(patch)
        return copy.deepcopy(matched)

    async def delete(self, table, filters):
        if not filters:
            raise ValueError(f"Refusing to delete from {table} without filters")
        matched = self._filter(table, filters)
        self.tables[table] = [r for r in self.rows(table) if r not in matched]
        return copy.deepcopy(matched)

    async def close(self):
        pass


@pytest.fixture
def fake_db() -> FakeDatabaseClient:
    """Empty in-memory database with the unique keys of the real schema."""
    return FakeDatabaseClient(unique={
        "tree_positions": ("layout_id", "block_index", "grid_x", "grid_y"),
        "custom_node_types": CONFLICT_COLUMNS,
    })


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def two_block_config() -> GridConfig:
    """Two 24x24 blocks side by side."""
    return GridConfig(blocks=[
        Block(x=0, y=0, width=24, height=24),
        Block(x=24, y=0, width=24, height=24),
    ])


@pytest.fixture
def sample_layout(fake_db, two_block_config) -> Dict[str, Any]:
    """An active two-block layout for farm 7."""
    return fake_db.seed("farm_layouts", {
        "farm_id": 7,
        "name": "North orchard",
        "grid_config": two_block_config.model_dump(),
        "is_active": True,
        "created_at": "2024-03-01T08:00:00+00:00",
    })[0]


@pytest.fixture
def sample_tree_type(fake_db) -> Dict[str, Any]:
    return fake_db.seed("trees", {
        "code": "MNG",
        "name": "Mango",
        "category": "Fruit",
        "season": "Summer",
        "years_to_fruit": 4,
    })[0]


@pytest.fixture
def green_acres() -> Seller:
    return Seller(id="s-1", name="Green Acres", whatsapp_number="+911234567890")


@pytest.fixture
def hill_farm() -> Seller:
    return Seller(id="s-2", name="Hill Farm")


@pytest.fixture
def tomatoes(green_acres) -> Product:
    """5 kg of tomatoes at 10 per kg."""
    return Product(id="veg-1", name="Tomato", price=10.0, available_quantity=5, seller=green_acres)


@pytest.fixture
def tomato_listing(fake_db) -> Dict[str, Any]:
    """Stored listing behind the tomatoes product: 5 kg at 10 per kg."""
    return fake_db.seed("vegetables", {
        "id": "veg-1",
        "name": "Tomato",
        "price": 10,
        "quantity": 5,
        "unit": "kg",
        "category": "Vegetables",
        "location": "Nashik",
        "source_type": "farm",
        "owner_id": "s-1",
        "owner": {"id": "s-1", "name": "Green Acres", "whatsapp_number": "+911234567890"},
        "created_at": "2024-03-01T08:00:00+00:00",
    })[0]


@pytest.fixture
def free_marigold_sapling(green_acres) -> Product:
    return Product(id="veg-2", name="Marigold Sapling", price=0, available_quantity=3, seller=green_acres)


@pytest.fixture
def free_marigold_seeds(green_acres) -> Product:
    return Product(id="veg-3", name="Marigold Seeds", price=0, available_quantity=10, seller=green_acres)


# ============================================================
# Service Fixtures
# ============================================================

@pytest.fixture
def layout_service(fake_db) -> LayoutService:
    return LayoutService(db=fake_db, block_size=24)


@pytest.fixture
def position_service(fake_db, layout_service) -> TreePositionService:
    return TreePositionService(db=fake_db, layouts=layout_service)


@pytest.fixture
def node_type_service(fake_db, layout_service, position_service) -> NodeTypeService:
    return NodeTypeService(db=fake_db, layouts=layout_service, positions=position_service)


@pytest.fixture
def cart_registry() -> CartRegistry:
    return CartRegistry(TTLCache(ttl_seconds=3600))


@pytest.fixture
def product_service(fake_db) -> ProductService:
    return ProductService(db=fake_db)


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)


@pytest.fixture
def api_client(fake_db, cart_registry):
    """Test client whose services run against the in-memory database."""
    app.dependency_overrides[get_database_client] = lambda: fake_db
    app.dependency_overrides[get_cart_registry] = lambda: cart_registry
    app.dependency_overrides[get_tree_catalog_cache] = lambda: TTLCache(ttl_seconds=60)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
