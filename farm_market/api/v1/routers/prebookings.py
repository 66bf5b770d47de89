"""
API router for vegetable prebookings.
"""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Query, status

from farm_market.api.dependencies import PreBookingServiceDep
from farm_market.api.v1.models.requests import (
    PreBookingCancelRequest,
    PreBookingCreateRequest,
    PreBookingStatusRequest,
)
from farm_market.domain.errors import ValidationError
from farm_market.domain.models import PreBooking
from farm_market.services.application.prebooking_service import SellerPreBookingStats


router = APIRouter(
    prefix="/prebookings",
    tags=["prebookings"],
)


@router.post(
    "",
    response_model=PreBooking,
    status_code=status.HTTP_201_CREATED,
    summary="Prebook a vegetable",
    responses={
        409: {"description": "An open prebooking for the same vegetable and seller already exists"},
    },
)
async def create_prebooking(
    request: PreBookingCreateRequest,
    prebooking_service: PreBookingServiceDep,
) -> PreBooking:
    return await prebooking_service.create_prebooking(**request.model_dump())


@router.get("", response_model=List[PreBooking], summary="List prebookings of a buyer or seller")
async def list_prebookings(
    prebooking_service: PreBookingServiceDep,
    user_id: Annotated[Optional[str], Query()] = None,
    seller_id: Annotated[Optional[str], Query()] = None,
) -> List[PreBooking]:
    if user_id is not None:
        return await prebooking_service.list_for_user(user_id)
    if seller_id is not None:
        return await prebooking_service.list_for_seller(seller_id)
    raise ValidationError("Either user_id or seller_id is required")


@router.patch("/{prebooking_id}/status", response_model=PreBooking, summary="Change prebooking status")
async def update_status(
    prebooking_id: str,
    request: PreBookingStatusRequest,
    prebooking_service: PreBookingServiceDep,
) -> PreBooking:
    return await prebooking_service.update_status(
        prebooking_id,
        request.status,
        seller_notes=request.seller_notes,
        user_notes=request.user_notes,
    )


@router.post("/{prebooking_id}/cancel", response_model=PreBooking, summary="Cancel a prebooking")
async def cancel_prebooking(
    prebooking_id: str,
    request: PreBookingCancelRequest,
    prebooking_service: PreBookingServiceDep,
) -> PreBooking:
    return await prebooking_service.cancel(prebooking_id, request.reason)


@router.get(
    "/sellers/{seller_id}/stats",
    response_model=SellerPreBookingStats,
    summary="Prebooking totals of a seller",
)
async def seller_stats(seller_id: str, prebooking_service: PreBookingServiceDep) -> SellerPreBookingStats:
    return await prebooking_service.seller_stats(seller_id)
