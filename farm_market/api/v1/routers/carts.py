"""
API router for shopping carts.

Carts are kept by the server for a limited idle time; the client picks
the cart id and reuses it across requests.
"""
from fastapi import APIRouter, status

from farm_market.api.dependencies import CartRegistryDep, OrderServiceDep, ProductServiceDep
from farm_market.api.v1.models.requests import (
    CartAddRequest,
    CartQuantityRequest,
    CheckoutRequest,
)
from farm_market.api.v1.models.responses import CartResponse, MessageResponse
from farm_market.domain.models import Order


router = APIRouter(
    prefix="/carts",
    tags=["carts"],
)


@router.get(
    "/{cart_id}",
    response_model=CartResponse,
    summary="Get a cart",
    description="Unknown or expired cart ids read as an empty cart; nothing is stored until an item is added.",
)
async def get_cart(cart_id: str, carts: CartRegistryDep) -> CartResponse:
    return CartResponse.from_cart(carts.view(cart_id))


@router.post(
    "/{cart_id}/items",
    response_model=CartResponse,
    summary="Add a product to a cart",
    description="""
    Add a listing by id, merging with an existing line for the same listing.
    Price and stock come from the stored listing.

    A cart only holds products from one seller, and at most one free
    item per kind of produce. Quantities are capped at the available stock.
    """,
    responses={
        400: {"description": "Quantity is not positive, or the listing is out of stock"},
        404: {"description": "Listing not found"},
        409: {"description": "Product is from another seller, or a similar free item is already in the cart"},
    },
)
async def add_item(
    cart_id: str,
    request: CartAddRequest,
    carts: CartRegistryDep,
    products: ProductServiceDep,
) -> CartResponse:
    product = await products.get_product(request.product_id)
    cart = carts.add_item(cart_id, product, request.quantity)
    return CartResponse.from_cart(cart)


@router.patch(
    "/{cart_id}/items/{item_id}",
    response_model=CartResponse,
    summary="Change the quantity of a cart line",
    responses={
        400: {"description": "Quantity exceeds the listing's current stock"},
        404: {"description": "Cart, item or listing not found"},
    },
)
async def update_item(
    cart_id: str,
    item_id: str,
    request: CartQuantityRequest,
    carts: CartRegistryDep,
    products: ProductServiceDep,
) -> CartResponse:
    listing = await products.get_vegetable(item_id)
    cart = carts.update_item(cart_id, item_id, request.quantity, listing=listing)
    return CartResponse.from_cart(cart)


@router.delete("/{cart_id}/items/{item_id}", response_model=CartResponse, summary="Remove a cart line")
async def remove_item(cart_id: str, item_id: str, carts: CartRegistryDep) -> CartResponse:
    return CartResponse.from_cart(carts.remove_item(cart_id, item_id))


@router.delete("/{cart_id}", response_model=MessageResponse, summary="Discard a cart")
async def discard_cart(cart_id: str, carts: CartRegistryDep) -> MessageResponse:
    carts.discard(cart_id)
    return MessageResponse(message="Cart cleared")


@router.post(
    "/{cart_id}/checkout",
    response_model=Order,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order for the cart",
    responses={
        400: {"description": "Cart is empty, or a line is above current stock"},
        404: {"description": "Cart or listing not found"},
    },
)
async def checkout(cart_id: str, request: CheckoutRequest, order_service: OrderServiceDep) -> Order:
    return await order_service.checkout(
        cart_id,
        user_id=request.user_id,
        delivery_address=request.delivery_address,
        contact_number=request.contact_number,
    )
