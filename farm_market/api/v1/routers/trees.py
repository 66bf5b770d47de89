"""
API router for the tree type catalog.
"""
from typing import List
from fastapi import APIRouter, Query, status

from farm_market.api.dependencies import TreeTypeServiceDep
from farm_market.api.v1.models.requests import TreeTypeCreateRequest
from farm_market.domain.models import TreeType


router = APIRouter(
    prefix="/trees",
    tags=["trees"],
)


@router.get("", response_model=List[TreeType], summary="List tree types")
async def list_tree_types(
    tree_service: TreeTypeServiceDep,
    refresh: bool = Query(False, description="Bypass the catalog cache"),
) -> List[TreeType]:
    return await tree_service.list_tree_types(refresh=refresh)


@router.post("", response_model=TreeType, status_code=status.HTTP_201_CREATED, summary="Add a tree type")
async def create_tree_type(request: TreeTypeCreateRequest, tree_service: TreeTypeServiceDep) -> TreeType:
    return await tree_service.create_tree_type(**request.model_dump())


@router.get("/{tree_id}", response_model=TreeType, summary="Get a tree type")
async def get_tree_type(tree_id: str, tree_service: TreeTypeServiceDep) -> TreeType:
    return await tree_service.get_tree_type(tree_id)
