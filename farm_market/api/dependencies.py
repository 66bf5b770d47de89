"""
Dependency injection for FastAPI.
"""
from functools import lru_cache
from typing import Annotated
from fastapi import Depends

from farm_market.config import settings
from farm_market.infrastructure.database_client import (
    DatabaseClient,
    get_database_client,
)
from farm_market.services.application.care_log_service import CareLogService
from farm_market.services.application.cart_service import CartRegistry
from farm_market.services.application.layout_service import LayoutService
from farm_market.services.application.node_type_service import NodeTypeService
from farm_market.services.application.order_service import OrderService
from farm_market.services.application.prebooking_service import PreBookingService
from farm_market.services.application.product_service import ProductService
from farm_market.services.application.tree_position_service import TreePositionService
from farm_market.services.application.tree_service import TreeTypeService
from farm_market.services.domain.ttl_cache import TTLCache


DatabaseClientDep = Annotated[DatabaseClient, Depends(get_database_client)]


@lru_cache
def get_cart_registry() -> CartRegistry:
    """
    Process-wide cart registry.

    Carts live in memory between requests, so every request must see
    the same registry.

    Returns:
        CartRegistry instance
    """
    return CartRegistry(TTLCache(settings.cart_ttl_seconds))


@lru_cache
def get_tree_catalog_cache() -> TTLCache:
    """Process-wide cache for the tree type catalog."""
    return TTLCache(settings.tree_catalog_ttl_seconds)


def get_layout_service(db: DatabaseClientDep) -> LayoutService:
    """
    Dependency factory for LayoutService.

    Args:
        db: Database client (injected)

    Returns:
        LayoutService instance
    """
    return LayoutService(db=db, block_size=settings.block_size)


def get_tree_type_service(
    db: DatabaseClientDep,
    cache: Annotated[TTLCache, Depends(get_tree_catalog_cache)],
) -> TreeTypeService:
    return TreeTypeService(db=db, cache=cache)


def get_tree_position_service(
    db: DatabaseClientDep,
    layouts: Annotated[LayoutService, Depends(get_layout_service)],
) -> TreePositionService:
    return TreePositionService(db=db, layouts=layouts)


def get_node_type_service(
    db: DatabaseClientDep,
    layouts: Annotated[LayoutService, Depends(get_layout_service)],
    positions: Annotated[TreePositionService, Depends(get_tree_position_service)],
) -> NodeTypeService:
    return NodeTypeService(db=db, layouts=layouts, positions=positions)


def get_care_log_service(db: DatabaseClientDep) -> CareLogService:
    return CareLogService(db=db)


def get_prebooking_service(db: DatabaseClientDep) -> PreBookingService:
    return PreBookingService(db=db)


def get_product_service(db: DatabaseClientDep) -> ProductService:
    return ProductService(db=db)


def get_order_service(
    db: DatabaseClientDep,
    carts: Annotated[CartRegistry, Depends(get_cart_registry)],
    products: Annotated[ProductService, Depends(get_product_service)],
) -> OrderService:
    """
    Dependency factory for OrderService.

    Args:
        db: Database client (injected)
        carts: Cart registry (injected)
        products: Listing service (injected)

    Returns:
        OrderService instance
    """
    return OrderService(db=db, carts=carts, products=products)


# Type aliases for cleaner route signatures
LayoutServiceDep = Annotated[LayoutService, Depends(get_layout_service)]
TreeTypeServiceDep = Annotated[TreeTypeService, Depends(get_tree_type_service)]
TreePositionServiceDep = Annotated[TreePositionService, Depends(get_tree_position_service)]
NodeTypeServiceDep = Annotated[NodeTypeService, Depends(get_node_type_service)]
CareLogServiceDep = Annotated[CareLogService, Depends(get_care_log_service)]
CartRegistryDep = Annotated[CartRegistry, Depends(get_cart_registry)]
PreBookingServiceDep = Annotated[PreBookingService, Depends(get_prebooking_service)]
ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]
OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
