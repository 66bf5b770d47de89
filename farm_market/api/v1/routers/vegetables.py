"""
API router for sellers' vegetable and fruit listings.
"""
from typing import List, Optional
from fastapi import APIRouter, Query, status

from farm_market.api.dependencies import ProductServiceDep
from farm_market.api.v1.models.requests import VegetableCreateRequest, VegetableUpdateRequest
from farm_market.api.v1.models.responses import MessageResponse
from farm_market.domain.models import Vegetable


router = APIRouter(
    prefix="/vegetables",
    tags=["vegetables"],
)


@router.get(
    "",
    response_model=List[Vegetable],
    summary="Browse listings",
    description="""
    List listings, newest first, with the seller embedded.

    Filter by seller, by category, or to free listings only.
    """,
)
async def list_vegetables(
    products: ProductServiceDep,
    owner_id: Optional[str] = Query(None, description="Only this seller's listings"),
    category: Optional[str] = Query(None),
    free: bool = Query(False, description="Only listings priced at zero"),
) -> List[Vegetable]:
    return await products.list_vegetables(owner_id=owner_id, category=category, free_only=free)


@router.get("/categories", response_model=List[str], summary="List listing categories")
async def list_categories(products: ProductServiceDep) -> List[str]:
    return await products.list_categories()


@router.post(
    "",
    response_model=Vegetable,
    status_code=status.HTTP_201_CREATED,
    summary="Create a listing",
    responses={400: {"description": "Missing field, negative price or non-positive quantity"}},
)
async def create_vegetable(request: VegetableCreateRequest, products: ProductServiceDep) -> Vegetable:
    return await products.create_vegetable(request.model_dump())


@router.get(
    "/{vegetable_id}",
    response_model=Vegetable,
    summary="Get a listing",
    responses={404: {"description": "Listing not found"}},
)
async def get_vegetable(vegetable_id: str, products: ProductServiceDep) -> Vegetable:
    return await products.get_vegetable(vegetable_id)


@router.patch(
    "/{vegetable_id}",
    response_model=Vegetable,
    summary="Update a listing",
    description="Change price, stock or details. Carts pick up the new price and stock on their next change.",
    responses={
        400: {"description": "No fields given, or negative price or quantity"},
        404: {"description": "Listing not found"},
    },
)
async def update_vegetable(
    vegetable_id: str,
    request: VegetableUpdateRequest,
    products: ProductServiceDep,
) -> Vegetable:
    return await products.update_vegetable(vegetable_id, request.model_dump(exclude_unset=True))


@router.delete("/{vegetable_id}", response_model=MessageResponse, summary="Delete a listing")
async def delete_vegetable(vegetable_id: str, products: ProductServiceDep) -> MessageResponse:
    await products.delete_vegetable(vegetable_id)
    return MessageResponse(message=f"Vegetable {vegetable_id} deleted")
