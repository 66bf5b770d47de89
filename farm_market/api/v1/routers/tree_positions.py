"""
API router for trees planted on a layout.
"""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Query, status

from farm_market.api.dependencies import TreePositionServiceDep
from farm_market.api.v1.models.requests import (
    GPSUpdateRequest,
    TreePositionCreateRequest,
    TreePositionMoveRequest,
    TreePositionUpdateRequest,
)
from farm_market.api.v1.models.responses import MessageResponse
from farm_market.domain.models import TreePosition


router = APIRouter(
    prefix="/tree-positions",
    tags=["tree-positions"],
)


@router.get("", response_model=List[TreePosition], summary="List planted trees")
async def list_positions(
    position_service: TreePositionServiceDep,
    layout_id: Annotated[Optional[str], Query()] = None,
    tree_id: Annotated[Optional[str], Query()] = None,
) -> List[TreePosition]:
    return await position_service.list_positions(layout_id=layout_id, tree_id=tree_id)


@router.post(
    "",
    response_model=TreePosition,
    status_code=status.HTTP_201_CREATED,
    summary="Plant a tree",
    responses={
        400: {"description": "Cell is outside the layout"},
        404: {"description": "Layout not found"},
        409: {"description": "Position is already occupied"},
    },
)
async def place_tree(
    request: TreePositionCreateRequest,
    position_service: TreePositionServiceDep,
) -> TreePosition:
    """
    Plant a tree on an empty cell of a layout.

    Args:
        request: Tree, layout and cell to plant on
        position_service: Tree position service (injected dependency)

    Returns:
        The stored position
    """
    return await position_service.place(
        layout_id=request.layout_id,
        block_index=request.block_index,
        grid_x=request.grid_x,
        grid_y=request.grid_y,
        tree_id=request.tree_id,
        variety=request.variety,
        status=request.status,
        planting_date=request.planting_date,
        notes=request.notes,
    )


@router.get("/{position_id}", response_model=TreePosition, summary="Get a planted tree")
async def get_position(position_id: str, position_service: TreePositionServiceDep) -> TreePosition:
    return await position_service.get_position(position_id)


@router.patch("/{position_id}", response_model=TreePosition, summary="Edit a planted tree")
async def update_position(
    position_id: str,
    request: TreePositionUpdateRequest,
    position_service: TreePositionServiceDep,
) -> TreePosition:
    return await position_service.update(position_id, request.model_dump(exclude_unset=True))


@router.put("/{position_id}/move", response_model=TreePosition, summary="Move a planted tree")
async def move_position(
    position_id: str,
    request: TreePositionMoveRequest,
    position_service: TreePositionServiceDep,
) -> TreePosition:
    return await position_service.move(
        position_id, request.block_index, request.grid_x, request.grid_y
    )


@router.put(
    "/{position_id}/gps",
    response_model=TreePosition,
    summary="Attach GPS coordinates to a planted tree",
    responses={400: {"description": "Coordinates out of range"}},
)
async def attach_gps(
    position_id: str,
    request: GPSUpdateRequest,
    position_service: TreePositionServiceDep,
) -> TreePosition:
    return await position_service.attach_gps(
        position_id,
        latitude=request.latitude,
        longitude=request.longitude,
        altitude=request.altitude,
        accuracy=request.accuracy,
        source=request.source,
    )


@router.delete("/{position_id}", response_model=MessageResponse, summary="Remove a planted tree")
async def remove_position(position_id: str, position_service: TreePositionServiceDep) -> MessageResponse:
    await position_service.remove(position_id)
    return MessageResponse(message="Tree removed successfully")
