"""
API router for per-cell node type overrides.
"""
from typing import Annotated
from fastapi import APIRouter, Query

from farm_market.api.dependencies import NodeTypeServiceDep
from farm_market.api.v1.models.requests import NodeTypeRequest
from farm_market.api.v1.models.responses import (
    ClassificationResponse,
    CustomNodeTypesResponse,
    MessageResponse,
    NodeTypeUpdateResponse,
)
from farm_market.services.domain.position_classifier import circle_class, classify_position


router = APIRouter(
    prefix="/custom-node-types",
    tags=["custom-node-types"],
)


@router.get("", response_model=CustomNodeTypesResponse, summary="List overrides of a layout")
async def list_overrides(
    layout_id: Annotated[str, Query(description="Layout identifier")],
    node_type_service: NodeTypeServiceDep,
) -> CustomNodeTypesResponse:
    overrides = await node_type_service.get_overrides(layout_id)
    return CustomNodeTypesResponse(layout_id=layout_id, custom_node_types=overrides)


@router.post(
    "",
    response_model=NodeTypeUpdateResponse,
    summary="Set or clear the node type of a cell",
    description="""
    Force a tier on one cell. Accepted values are big, centerBig, medium,
    small, tiny and default. Sending null or "auto" removes the override
    so the cell falls back to its computed tier.
    """,
)
async def set_override(
    request: NodeTypeRequest,
    node_type_service: NodeTypeServiceDep,
) -> NodeTypeUpdateResponse:
    saved = await node_type_service.set_override(
        request.layout_id,
        request.block_index,
        request.grid_x,
        request.grid_y,
        request.node_type,
    )
    if saved is None:
        return NodeTypeUpdateResponse(action="deleted")
    return NodeTypeUpdateResponse(action="saved", data=saved)


@router.delete("", response_model=MessageResponse, summary="Clear the override of a cell")
async def clear_override(
    node_type_service: NodeTypeServiceDep,
    layout_id: Annotated[str, Query()],
    block_index: Annotated[int, Query(ge=0)],
    grid_x: Annotated[int, Query()],
    grid_y: Annotated[int, Query()],
) -> MessageResponse:
    await node_type_service.clear_override(layout_id, block_index, grid_x, grid_y)
    return MessageResponse(message="Custom node type deleted")


@router.get(
    "/classify",
    response_model=ClassificationResponse,
    summary="Computed tier of a block coordinate",
)
async def classify(
    grid_x: Annotated[int, Query(description="X position inside the block")],
    grid_y: Annotated[int, Query(description="Y position inside the block")],
    block_width: Annotated[int, Query(gt=0)] = 24,
    block_height: Annotated[int, Query(gt=0)] = 24,
) -> ClassificationResponse:
    node_type = classify_position(grid_x, grid_y, block_width, block_height)
    return ClassificationResponse(
        grid_x=grid_x,
        grid_y=grid_y,
        block_width=block_width,
        block_height=block_height,
        node_type=node_type.value,
        css_class=circle_class(node_type.value),
    )
