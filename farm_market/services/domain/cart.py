"""
Domain service: shopping cart rules.

A cart holds lines from a single seller. Quantities never exceed the
seller's declared stock, and only one free item of a kind may be claimed
per order.
"""
from typing import List, Optional, Sequence
import logging

from farm_market.domain.errors import (
    FreeItemConflictError,
    NotFoundError,
    QuantityExceedsStockError,
    SellerMismatchError,
    ValidationError,
)
from farm_market.domain.models import CartItem, Product, RowId, Seller

logger = logging.getLogger(__name__)


def are_product_names_similar(name1: Optional[str], name2: Optional[str]) -> bool:
    """
    Decide whether two listing names are variations of the same product.

    "Marigold Sapling" and "Marigold Seeds" are similar (same first word,
    both multi-word), as are "Apple" and "Apple Tree" (one contains the
    other with a small length difference). "free1" and "free2" are not.
    """
    if not name1 or not name2:
        return False

    a = name1.lower().strip()
    b = name2.lower().strip()
    if a == b:
        return True

    first_words_match = a.split(" ")[0] == b.split(" ")[0]
    both_multi_word = " " in a and " " in b
    one_contains_other = a in b or b in a

    return (first_words_match and both_multi_word) or (
        one_contains_other and abs(len(a) - len(b)) <= 10
    )


def product_category(name: Optional[str]) -> str:
    """Main category of a listing name, e.g. "marigold" for "Marigold Sapling"."""
    if not name:
        return ""
    return name.split(" ")[0].lower()


def find_similar_free_item(
    items: Sequence[CartItem],
    name: str,
    exclude_id: Optional[RowId] = None,
) -> Optional[CartItem]:
    """Return the first free line similar to ``name``, skipping ``exclude_id``."""
    for item in items:
        if exclude_id is not None and str(item.id) == str(exclude_id):
            continue
        if item.is_free and are_product_names_similar(item.name, name):
            return item
    return None


def _fmt(quantity: float) -> str:
    return f"{quantity:g}"


class Cart:
    """In-memory cart for one buyer."""

    def __init__(self, cart_id: Optional[str] = None):
        self.cart_id = cart_id
        self.items: List[CartItem] = []

    @property
    def seller(self) -> Optional[Seller]:
        return self.items[0].seller if self.items else None

    @property
    def total(self) -> float:
        return sum(item.total for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def get(self, item_id: RowId) -> Optional[CartItem]:
        for item in self.items:
            if str(item.id) == str(item_id):
                return item
        return None

    def add(self, product: Product, quantity: float = 1) -> CartItem:
        """
        Add a listing to the cart, merging with an existing line.

        The resulting line quantity is clamped to the listing's available
        stock.

        Args:
            product: The listing being added
            quantity: Requested quantity

        Returns:
            The created or updated cart line

        Raises:
            ValidationError: If quantity is not positive
            SellerMismatchError: If the cart holds another seller's items
            FreeItemConflictError: If a different free item of the same
                kind is already in the cart
        """
        if quantity <= 0:
            raise ValidationError("Quantity must be greater than zero")

        current = self.seller
        if current is not None and str(current.id) != str(product.seller.id):
            raise SellerMismatchError(
                f"Items in cart are from {current.name}. Please clear your cart "
                f"to add items from a different seller."
            )

        if product.is_free:
            conflict = find_similar_free_item(self.items, product.name, exclude_id=product.id)
            if conflict:
                logger.warning(f"Rejected free item {product.name!r}: {conflict.name!r} already in cart")
                raise FreeItemConflictError(
                    f'You already have "{conflict.name}" in your cart. To ensure fair '
                    f"distribution, you can only claim one free "
                    f"{product_category(product.name)} item per order."
                )

        line = self.get(product.id)
        if line is not None:
            line.quantity = min(line.quantity + quantity, product.available_quantity)
            line.available_quantity = product.available_quantity
            line.price = product.price
            return line

        line = CartItem(
            id=product.id,
            name=product.name,
            price=product.price,
            quantity=min(quantity, product.available_quantity),
            unit=product.unit,
            available_quantity=product.available_quantity,
            seller=product.seller,
        )
        self.items.append(line)
        return line

    def sync_listing(self, item_id: RowId, price: float, available_quantity: float) -> Optional[CartItem]:
        """Refresh a line's price and stock from the stored listing."""
        line = self.get(item_id)
        if line is not None:
            line.price = price
            line.available_quantity = available_quantity
        return line

    def update_quantity(self, item_id: RowId, quantity: float) -> Optional[CartItem]:
        """
        Set a line's quantity.

        Zero removes the line. Other values below one leave the line as is.

        Returns:
            The line, or None if it was removed

        Raises:
            NotFoundError: If the line is not in the cart
            QuantityExceedsStockError: If quantity is above available stock
        """
        line = self.get(item_id)
        if line is None:
            raise NotFoundError(f"Item {item_id} is not in the cart")

        if quantity == 0:
            self.remove(item_id)
            return None
        if quantity < 1:
            return line
        if quantity > line.available_quantity:
            raise QuantityExceedsStockError(
                f"Maximum {_fmt(line.available_quantity)} {line.unit or 'kg'} available for this item."
            )

        line.quantity = quantity
        return line

    def remove(self, item_id: RowId) -> None:
        line = self.get(item_id)
        if line is None:
            raise NotFoundError(f"Item {item_id} is not in the cart")
        self.items.remove(line)

    def clear(self) -> None:
        self.items = []
