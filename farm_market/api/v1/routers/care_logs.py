"""
API router for tree care logs.
"""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Query, status

from farm_market.api.dependencies import CareLogServiceDep
from farm_market.api.v1.models.requests import CareLogCreateRequest, CareLogUpdateRequest
from farm_market.domain.models import TreeCareLog


router = APIRouter(
    prefix="/tree-care-logs",
    tags=["tree-care-logs"],
)


@router.get("", response_model=List[TreeCareLog], summary="List care activities")
async def list_logs(
    care_log_service: CareLogServiceDep,
    tree_id: Annotated[Optional[str], Query(description="Only logs of this planted tree")] = None,
    limit: Annotated[Optional[int], Query(gt=0, le=500)] = None,
) -> List[TreeCareLog]:
    return await care_log_service.list_logs(tree_id=tree_id, limit=limit)


@router.post("", response_model=TreeCareLog, status_code=status.HTTP_201_CREATED, summary="Log a care activity")
async def create_log(request: CareLogCreateRequest, care_log_service: CareLogServiceDep) -> TreeCareLog:
    return await care_log_service.create_log(**request.model_dump())


@router.put("/{log_id}", response_model=TreeCareLog, summary="Edit a care activity")
async def update_log(
    log_id: str,
    request: CareLogUpdateRequest,
    care_log_service: CareLogServiceDep,
) -> TreeCareLog:
    return await care_log_service.update_log(log_id, request.model_dump(exclude_unset=True))
