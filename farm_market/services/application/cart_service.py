"""
Application service: carts held between requests.
"""
from typing import Optional
import logging

from farm_market.domain.errors import NotFoundError
from farm_market.domain.models import Product, RowId, Vegetable
from farm_market.services.domain.cart import Cart
from farm_market.services.domain.ttl_cache import TTLCache

logger = logging.getLogger(__name__)


class CartRegistry:
    """
    Keeps one Cart per cart id.

    Carts are stored in a TTL cache and every mutation writes the cart
    back, so a cart expires after the configured idle time. Expired carts
    are purged whenever a new cart is created.
    """

    def __init__(self, cache: TTLCache):
        self.cache = cache

    def get(self, cart_id: str) -> Cart:
        cart = self.cache.get(cart_id)
        if cart is None:
            raise NotFoundError(f"Cart {cart_id} not found")
        return cart

    def view(self, cart_id: str) -> Cart:
        """The stored cart, or an empty one that is not kept."""
        return self.cache.get(cart_id) or Cart(cart_id)

    def get_or_create(self, cart_id: str) -> Cart:
        cart = self.cache.get(cart_id)
        if cart is None:
            purged = self.cache.purge_expired()
            if purged:
                logger.debug(f"Purged {purged} expired carts")
            cart = Cart(cart_id)
            self.cache.set(cart_id, cart)
        return cart

    def _touch(self, cart: Cart) -> Cart:
        self.cache.set(cart.cart_id, cart)
        return cart

    def add_item(self, cart_id: str, product: Product, quantity: float) -> Cart:
        cart = self.get_or_create(cart_id)
        line = cart.add(product, quantity)
        logger.debug(f"Cart {cart_id}: {line.name} now {line.quantity:g} {line.unit}")
        return self._touch(cart)

    def update_item(
        self,
        cart_id: str,
        item_id: RowId,
        quantity: float,
        listing: Optional[Vegetable] = None,
    ) -> Cart:
        """
        Set a line's quantity, checking it against ``listing`` when given.
        """
        cart = self.get(cart_id)
        if listing is not None:
            cart.sync_listing(item_id, listing.price, listing.quantity)
        cart.update_quantity(item_id, quantity)
        return self._touch(cart)

    def remove_item(self, cart_id: str, item_id: RowId) -> Cart:
        cart = self.get(cart_id)
        cart.remove(item_id)
        return self._touch(cart)

    def discard(self, cart_id: str) -> None:
        self.cache.invalidate(cart_id)
