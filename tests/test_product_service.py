"""
Unit tests for sellers' listings.

Tests cover:
- Browsing by seller, category and free listings
- Listing to cart product conversion
- Create and update validation
- Stock reduction after an order
"""
import pytest

from farm_market.domain.errors import (
    NotFoundError,
    QuantityExceedsStockError,
    ValidationError,
)
from farm_market.domain.models import CartItem, Seller


NEW_LISTING = {
    "owner_id": "s-2",
    "name": "Okra",
    "price": 4.5,
    "quantity": 12,
    "unit": "kg",
    "category": "Vegetables",
    "location": "Nashik",
    "source_type": "garden",
}


@pytest.fixture
def listings(fake_db, tomato_listing):
    """Tomatoes from s-1 plus a free listing and a sold-out one from s-2."""
    fake_db.seed(
        "vegetables",
        {"id": "veg-5", "name": "Basil Sapling", "price": 0, "quantity": 3, "category": "Herbs", "owner_id": "s-2"},
        {"id": "veg-6", "name": "Mango", "price": 80, "quantity": 0, "category": "Fruits", "owner_id": "s-2"},
    )
    return fake_db.rows("vegetables")


# ============================================================
# Browsing Tests
# ============================================================

class TestBrowse:
    """Tests for listing reads."""

    @pytest.mark.asyncio
    async def test_list_by_owner(self, product_service, listings):
        names = {v.name for v in await product_service.list_vegetables(owner_id="s-2")}

        assert names == {"Basil Sapling", "Mango"}

    @pytest.mark.asyncio
    async def test_free_only(self, product_service, listings):
        free = await product_service.list_vegetables(free_only=True)

        assert [v.id for v in free] == ["veg-5"]
        assert free[0].is_free

    @pytest.mark.asyncio
    async def test_by_category(self, product_service, listings):
        assert [v.name for v in await product_service.list_vegetables(category="Fruits")] == ["Mango"]

    @pytest.mark.asyncio
    async def test_categories_are_distinct(self, product_service, listings, fake_db):
        fake_db.seed("vegetables", {"name": "Brinjal", "price": 3, "quantity": 2, "category": "Vegetables", "owner_id": "s-1"})

        assert await product_service.list_categories() == ["Fruits", "Herbs", "Vegetables"]

    @pytest.mark.asyncio
    async def test_missing_listing(self, product_service):
        with pytest.raises(NotFoundError, match="Vegetable nope not found"):
            await product_service.get_vegetable("nope")


# ============================================================
# Cart Product Tests
# ============================================================

class TestGetProduct:
    """Tests for loading a listing in the cart's shape."""

    @pytest.mark.asyncio
    async def test_price_stock_and_seller_from_row(self, product_service, tomato_listing):
        product = await product_service.get_product("veg-1")

        assert product.price == 10
        assert product.available_quantity == 5
        assert product.seller.name == "Green Acres"

    @pytest.mark.asyncio
    async def test_seller_without_embedded_owner(self, product_service, listings):
        product = await product_service.get_product("veg-5")

        assert product.seller == Seller(id="s-2")

    @pytest.mark.asyncio
    async def test_sold_out_listing_rejected(self, product_service, listings):
        with pytest.raises(QuantityExceedsStockError, match="Mango is out of stock"):
            await product_service.get_product("veg-6")


# ============================================================
# Create and Update Tests
# ============================================================

class TestWrites:
    """Tests for creating and updating listings."""

    @pytest.mark.asyncio
    async def test_create(self, product_service, fake_db):
        vegetable = await product_service.create_vegetable(NEW_LISTING)

        assert vegetable.name == "Okra"
        assert vegetable.quantity == 12
        assert vegetable.created_at is not None
        assert len(fake_db.rows("vegetables")) == 1

    @pytest.mark.asyncio
    async def test_create_reports_missing_fields(self, product_service):
        data = {**NEW_LISTING, "location": "", "source_type": None}

        with pytest.raises(ValidationError, match="Missing required fields: location, source_type"):
            await product_service.create_vegetable(data)

    @pytest.mark.asyncio
    async def test_create_negative_price(self, product_service):
        with pytest.raises(ValidationError, match="Price must be a number and cannot be negative"):
            await product_service.create_vegetable({**NEW_LISTING, "price": -1})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [0, -3])
    async def test_create_non_positive_quantity(self, product_service, quantity):
        with pytest.raises(ValidationError, match="Quantity must be a positive number"):
            await product_service.create_vegetable({**NEW_LISTING, "quantity": quantity})

    @pytest.mark.asyncio
    async def test_create_drops_unknown_fields(self, product_service, fake_db):
        await product_service.create_vegetable({**NEW_LISTING, "id": "forged", "rating": 5})

        row = fake_db.rows("vegetables")[0]
        assert row["id"] != "forged"
        assert "rating" not in row

    @pytest.mark.asyncio
    async def test_update_stock(self, product_service, tomato_listing):
        updated = await product_service.update_vegetable("veg-1", {"quantity": 0, "owner_id": "s-9"})

        assert updated.quantity == 0
        assert not updated.in_stock
        assert updated.owner_id == "s-1"

    @pytest.mark.asyncio
    async def test_update_without_fields(self, product_service, tomato_listing):
        with pytest.raises(ValidationError, match="No valid fields to update"):
            await product_service.update_vegetable("veg-1", {"owner_id": "s-9"})

    @pytest.mark.asyncio
    async def test_update_negative_quantity(self, product_service, tomato_listing):
        with pytest.raises(ValidationError):
            await product_service.update_vegetable("veg-1", {"quantity": -1})

    @pytest.mark.asyncio
    async def test_update_missing(self, product_service):
        with pytest.raises(NotFoundError):
            await product_service.update_vegetable("nope", {"price": 3})

    @pytest.mark.asyncio
    async def test_delete(self, product_service, tomato_listing, fake_db):
        await product_service.delete_vegetable("veg-1")

        assert fake_db.rows("vegetables") == []
        with pytest.raises(NotFoundError):
            await product_service.delete_vegetable("veg-1")


# ============================================================
# Stock Reduction Tests
# ============================================================

class TestReduceStock:
    """Tests for taking ordered quantities off stock."""

    def _line(self, item_id, quantity):
        return CartItem(
            id=item_id, name="x", price=1, quantity=quantity, available_quantity=quantity, seller=Seller(id="s-1")
        )

    @pytest.mark.asyncio
    async def test_reduces_and_floors_at_zero(self, product_service, listings, fake_db):
        await product_service.reduce_stock([self._line("veg-1", 2), self._line("veg-5", 9)])

        stock = {row["id"]: row["quantity"] for row in fake_db.rows("vegetables")}
        assert stock["veg-1"] == 3
        assert stock["veg-5"] == 0

    @pytest.mark.asyncio
    async def test_missing_listing_skipped(self, product_service, tomato_listing, fake_db):
        await product_service.reduce_stock([self._line("gone", 1), self._line("veg-1", 1)])

        assert fake_db.rows("vegetables")[0]["quantity"] == 4
