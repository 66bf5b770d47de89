"""
API router for farm layout endpoints.
"""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Path, Query, status

from farm_market.api.dependencies import LayoutServiceDep, NodeTypeServiceDep
from farm_market.api.v1.models.requests import (
    DefaultLayoutRequest,
    ExpandLayoutRequest,
    LayoutActivateRequest,
    LayoutCreateRequest,
    LayoutUpdateRequest,
)
from farm_market.api.v1.models.responses import GridCellResponse, MessageResponse
from farm_market.config import settings
from farm_market.domain.models import Layout


router = APIRouter(
    prefix="/farm-layouts",
    tags=["farm-layouts"],
)


@router.get("", response_model=List[Layout], summary="List farm layouts")
async def list_layouts(
    layout_service: LayoutServiceDep,
    farm_id: Annotated[Optional[str], Query(description="Only layouts of this farm")] = None,
) -> List[Layout]:
    return await layout_service.list_layouts(farm_id)


@router.post(
    "",
    response_model=Layout,
    status_code=status.HTTP_201_CREATED,
    summary="Create a farm layout",
)
async def create_layout(request: LayoutCreateRequest, layout_service: LayoutServiceDep) -> Layout:
    return await layout_service.create_layout(
        farm_id=request.farm_id,
        name=request.name,
        grid_config=request.grid_config,
        description=request.description,
        is_active=request.is_active,
    )


@router.post(
    "/default",
    response_model=Layout,
    summary="Get or create the default layout of a farm",
    description="""
    Return the farm's active layout. A farm without one gets the default
    layout: eight 24x24 blocks arranged two rows by four columns.
    """,
)
async def ensure_default_layout(request: DefaultLayoutRequest, layout_service: LayoutServiceDep) -> Layout:
    return await layout_service.ensure_layout(request.farm_id)


@router.get("/{layout_id}", response_model=Layout, summary="Get a farm layout")
async def get_layout(
    layout_id: Annotated[str, Path(description="Layout identifier")],
    layout_service: LayoutServiceDep,
) -> Layout:
    return await layout_service.get_layout(layout_id)


@router.put("/{layout_id}", response_model=Layout, summary="Update a farm layout")
async def update_layout(
    layout_id: str,
    request: LayoutUpdateRequest,
    layout_service: LayoutServiceDep,
) -> Layout:
    return await layout_service.update_layout(
        layout_id,
        name=request.name,
        description=request.description,
        grid_config=request.grid_config,
        is_active=request.is_active,
    )


@router.patch("/{layout_id}/activate", response_model=Layout, summary="Make a layout the farm's active one")
async def activate_layout(
    layout_id: str,
    request: LayoutActivateRequest,
    layout_service: LayoutServiceDep,
) -> Layout:
    return await layout_service.activate_layout(layout_id, request.farm_id)


@router.delete("/{layout_id}", response_model=MessageResponse, summary="Delete a farm layout")
async def delete_layout(layout_id: str, layout_service: LayoutServiceDep) -> MessageResponse:
    await layout_service.delete_layout(layout_id)
    return MessageResponse(message="Layout deleted successfully")


@router.post(
    "/{layout_id}/expand",
    response_model=Layout,
    summary="Grow a layout by one row or column of blocks",
    description="""
    Add one block per existing row (left/right) or column (top/bottom) on
    the requested side. Growing left or top shifts the whole layout so no
    block has a negative coordinate.
    """,
    responses={
        200: {"description": "Layout with the added blocks"},
        400: {"description": "Layout has no blocks to expand from"},
        404: {"description": "Layout not found"},
    },
)
async def expand_layout(
    layout_id: str,
    request: ExpandLayoutRequest,
    layout_service: LayoutServiceDep,
) -> Layout:
    """
    Expand a layout in one direction.

    Args:
        layout_id: Layout to grow
        request: Direction to grow in
        layout_service: Layout service (injected dependency)

    Returns:
        The updated layout
    """
    return await layout_service.expand_layout(layout_id, request.direction)


@router.get(
    "/{layout_id}/blocks/{block_index}/cells",
    response_model=List[GridCellResponse],
    summary="Planting guide cells of a block",
)
async def get_block_cells(
    layout_id: str,
    block_index: Annotated[int, Path(ge=0, description="Index of the block in the layout")],
    node_type_service: NodeTypeServiceDep,
) -> List[GridCellResponse]:
    cells = await node_type_service.block_cells(
        layout_id, block_index, step=settings.planting_guide_step
    )
    return [GridCellResponse.from_cell(cell) for cell in cells]
