"""
Application service: sellers' vegetable and fruit listings.

Listings are the source of truth for price and stock. Carts and checkout
read them from here rather than trusting what the buyer sends.
"""
from typing import Any, Dict, List, Optional, Sequence
import logging

from farm_market.domain.errors import (
    NotFoundError,
    QuantityExceedsStockError,
    ValidationError,
)
from farm_market.domain.models import CartItem, Product, RowId, Vegetable
from farm_market.infrastructure.api_constants import DatabaseTables
from farm_market.infrastructure.database_client import DatabaseClient, DatabaseError, Op
from farm_market.utils.timestamps import utcnow_iso

logger = logging.getLogger(__name__)

VEGETABLE_COLUMNS = "*,owner:users!owner_id(id,name,whatsapp_number,location)"

REQUIRED_FIELDS = ("name", "price", "quantity", "category", "location", "source_type", "owner_id")

UPDATABLE_FIELDS = frozenset({
    "name", "price", "quantity", "unit", "category", "location", "source_type", "description",
})


def _check_price(price: Any) -> None:
    if not isinstance(price, (int, float)) or isinstance(price, bool) or price < 0:
        raise ValidationError("Price must be a number and cannot be negative")


class ProductService:
    """Reads and writes listings in the ``vegetables`` table."""

    def __init__(self, db: DatabaseClient):
        self.db = db

    async def list_vegetables(
        self,
        owner_id: Optional[RowId] = None,
        category: Optional[str] = None,
        free_only: bool = False,
    ) -> List[Vegetable]:
        filters: Dict[str, Any] = {}
        if owner_id is not None:
            filters["owner_id"] = owner_id
        if category:
            filters["category"] = category
        if free_only:
            filters["price"] = 0
        rows = await self.db.select(
            DatabaseTables.VEGETABLES, filters=filters, columns=VEGETABLE_COLUMNS, order="created_at.desc"
        )
        return [Vegetable(**row) for row in rows]

    async def list_categories(self) -> List[str]:
        rows = await self.db.select(
            DatabaseTables.VEGETABLES, filters={"category": Op("not.is", "null")}, columns="category"
        )
        return sorted({row["category"] for row in rows if row.get("category")})

    async def get_vegetable(self, vegetable_id: RowId) -> Vegetable:
        row = await self.db.select_one(
            DatabaseTables.VEGETABLES, {"id": vegetable_id}, columns=VEGETABLE_COLUMNS
        )
        if row is None:
            raise NotFoundError(f"Vegetable {vegetable_id} not found")
        return Vegetable(**row)

    async def get_product(self, vegetable_id: RowId) -> Product:
        """
        Load a listing in the shape the cart takes.

        Raises:
            NotFoundError: If the listing does not exist
            QuantityExceedsStockError: If the listing has no stock left
        """
        vegetable = await self.get_vegetable(vegetable_id)
        if not vegetable.in_stock:
            raise QuantityExceedsStockError(f"{vegetable.name} is out of stock")
        return Product(
            id=vegetable.id,
            name=vegetable.name,
            price=vegetable.price,
            available_quantity=vegetable.quantity,
            unit=vegetable.unit,
            seller=vegetable.seller,
        )

    async def create_vegetable(self, data: Dict[str, Any]) -> Vegetable:
        """
        Create a listing.

        Args:
            data: Listing fields; name, price, quantity, category, location,
                source_type and owner_id are required

        Returns:
            The stored listing

        Raises:
            ValidationError: If a required field is missing, the price is
                negative or the quantity is not positive
        """
        missing = [f for f in REQUIRED_FIELDS if data.get(f) is None or data.get(f) == ""]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        _check_price(data["price"])
        quantity = data["quantity"]
        if not isinstance(quantity, (int, float)) or isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError("Quantity must be a positive number")

        row = {k: v for k, v in data.items() if k in UPDATABLE_FIELDS or k == "owner_id"}
        now = utcnow_iso()
        rows = await self.db.insert(
            DatabaseTables.VEGETABLES, {**row, "created_at": now, "updated_at": now}
        )
        vegetable = Vegetable(**rows[0])
        logger.info(f"Created listing {vegetable.name} ({vegetable.id}) for seller {vegetable.owner_id}")
        return vegetable

    async def update_vegetable(self, vegetable_id: RowId, patch: Dict[str, Any]) -> Vegetable:
        """
        Update a listing. Unknown fields are ignored; a quantity of zero
        marks the listing out of stock.

        Raises:
            ValidationError: If no updatable field is given, or price or
                quantity is negative
            NotFoundError: If the listing does not exist
        """
        updates = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS and v is not None}
        if not updates:
            raise ValidationError("No valid fields to update")
        if "price" in updates:
            _check_price(updates["price"])
        if "quantity" in updates and updates["quantity"] < 0:
            raise ValidationError("Quantity cannot be negative")

        rows = await self.db.update(
            DatabaseTables.VEGETABLES,
            {**updates, "updated_at": utcnow_iso()},
            filters={"id": vegetable_id},
        )
        if not rows:
            raise NotFoundError(f"Vegetable {vegetable_id} not found")
        logger.info(f"Updated listing {vegetable_id}: {', '.join(sorted(updates))}")
        return Vegetable(**rows[0])

    async def delete_vegetable(self, vegetable_id: RowId) -> None:
        rows = await self.db.delete(DatabaseTables.VEGETABLES, {"id": vegetable_id})
        if not rows:
            raise NotFoundError(f"Vegetable {vegetable_id} not found")
        logger.info(f"Deleted listing {vegetable_id}")

    async def reduce_stock(self, lines: Sequence[CartItem]) -> None:
        """
        Take ordered quantities off the listings' stock, never below zero.

        Runs after the order is stored, so a failure on one listing is
        logged and the remaining listings are still updated.
        """
        for line in lines:
            try:
                row = await self.db.select_one(
                    DatabaseTables.VEGETABLES, {"id": line.id}, columns="id,name,quantity"
                )
                if row is None:
                    logger.warning(f"Listing {line.id} disappeared before its stock was reduced")
                    continue
                remaining = max(0, (row.get("quantity") or 0) - line.quantity)
                await self.db.update(
                    DatabaseTables.VEGETABLES,
                    {"quantity": remaining, "updated_at": utcnow_iso()},
                    filters={"id": line.id},
                )
            except DatabaseError as e:
                logger.error(f"Failed to reduce stock of listing {line.id} by {line.quantity:g}: {e}")
                continue
            if remaining == 0:
                logger.info(f"Listing {row.get('name')} ({line.id}) is now out of stock")
