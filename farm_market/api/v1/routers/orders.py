"""
API router for placed orders.
"""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Query

from farm_market.api.dependencies import OrderServiceDep
from farm_market.domain.models import Order


router = APIRouter(
    prefix="/orders",
    tags=["orders"],
)


@router.get("", response_model=List[Order], summary="List orders")
async def list_orders(
    order_service: OrderServiceDep,
    user_id: Annotated[Optional[str], Query()] = None,
    seller_id: Annotated[Optional[str], Query()] = None,
) -> List[Order]:
    return await order_service.list_orders(user_id=user_id, seller_id=seller_id)


@router.get("/{order_id}", response_model=Order, summary="Get an order with its items")
async def get_order(order_id: str, order_service: OrderServiceDep) -> Order:
    return await order_service.get_order(order_id)
