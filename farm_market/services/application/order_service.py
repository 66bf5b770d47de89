"""
Application service: turning carts into orders.
"""
from typing import List, Optional
import logging

from farm_market.domain.errors import EmptyCartError, NotFoundError, QuantityExceedsStockError
from farm_market.domain.models import Order, OrderItem, RowId
from farm_market.infrastructure.api_constants import DatabaseTables
from farm_market.infrastructure.database_client import DatabaseClient, DatabaseError
from farm_market.services.application.cart_service import CartRegistry
from farm_market.services.application.product_service import ProductService
from farm_market.utils.timestamps import utcnow_iso

logger = logging.getLogger(__name__)

ORDER_COLUMNS = "*,items:order_items(id,order_id,vegetable_id,quantity,price_per_unit,total_price)"


class OrderService:
    """
    Application service for orders.

    An order is written as one ``orders`` row followed by its
    ``order_items`` rows. The database offers no transaction across the
    two writes, so a failed item insert deletes the order row again.
    """

    def __init__(self, db: DatabaseClient, carts: CartRegistry, products: ProductService):
        self.db = db
        self.carts = carts
        self.products = products

    async def checkout(
        self,
        cart_id: str,
        user_id: Optional[RowId] = None,
        delivery_address: Optional[str] = None,
        contact_number: Optional[str] = None,
    ) -> Order:
        """
        Place an order for everything in a cart and empty the cart.

        Args:
            cart_id: Cart to check out
            user_id: Buyer, if signed in
            delivery_address: Where to deliver
            contact_number: Buyer phone number

        Returns:
            The stored order with its items

        Raises:
            NotFoundError: If the cart does not exist
            EmptyCartError: If the cart has no items
            QuantityExceedsStockError: If a line is above the listing's current stock
            DatabaseError: If storing the order fails
        """
        cart = self.carts.get(cart_id)
        if cart.is_empty:
            raise EmptyCartError("Cart is empty")

        for line in cart.items:
            listing = await self.products.get_vegetable(line.id)
            cart.sync_listing(line.id, listing.price, listing.quantity)
            if line.quantity > listing.quantity:
                raise QuantityExceedsStockError(
                    f"Only {listing.quantity:g} {listing.unit} of {listing.name} left in stock."
                )

        order_rows = await self.db.insert(
            DatabaseTables.ORDERS,
            {
                "user_id": user_id,
                "seller_id": cart.seller.id,
                "status": "pending",
                "total_amount": cart.total,
                "delivery_address": delivery_address,
                "contact_number": contact_number,
                "created_at": utcnow_iso(),
            },
        )
        order_row = order_rows[0]

        items = [
            {
                "order_id": order_row["id"],
                "vegetable_id": line.id,
                "quantity": line.quantity,
                "price_per_unit": line.price,
                "total_price": line.total,
            }
            for line in cart.items
        ]
        try:
            item_rows = await self.db.insert(DatabaseTables.ORDER_ITEMS, items)
        except DatabaseError:
            logger.error(f"Failed to store items of order {order_row['id']}, removing order")
            try:
                await self.db.delete(DatabaseTables.ORDERS, {"id": order_row["id"]})
            except DatabaseError as e:
                logger.error(f"Order {order_row['id']} left without items, removal failed: {e}")
            raise

        order = Order(**{**order_row, "items": [OrderItem(**row) for row in item_rows]})
        await self.products.reduce_stock(cart.items)
        self.carts.discard(cart_id)
        logger.info(f"Placed order {order.id} with {len(order.items)} items, total {order.total_amount}")
        return order

    async def get_order(self, order_id: RowId) -> Order:
        row = await self.db.select_one(DatabaseTables.ORDERS, {"id": order_id}, columns=ORDER_COLUMNS)
        if row is None:
            raise NotFoundError(f"Order {order_id} not found")
        return Order(**row)

    async def list_orders(
        self,
        user_id: Optional[RowId] = None,
        seller_id: Optional[RowId] = None,
    ) -> List[Order]:
        filters = {}
        if user_id is not None:
            filters["user_id"] = user_id
        if seller_id is not None:
            filters["seller_id"] = seller_id
        rows = await self.db.select(
            DatabaseTables.ORDERS, filters=filters, columns=ORDER_COLUMNS, order="created_at.desc"
        )
        return [Order(**row) for row in rows]
