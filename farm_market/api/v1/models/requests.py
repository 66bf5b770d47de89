"""
API request models using Pydantic.

Range rules that belong to the domain (GPS bounds, stock limits, tier
values) are checked by the services so they surface as domain errors
rather than request validation errors.
"""
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field

from farm_market.domain.models import (
    Direction,
    GridConfig,
    PreBookingStatus,
    RowId,
)


# ------------------------------------------------------------
# Farm layouts
# ------------------------------------------------------------

class LayoutCreateRequest(BaseModel):
    farm_id: RowId
    name: str = Field(min_length=1)
    description: Optional[str] = None
    grid_config: GridConfig
    is_active: bool = True


class LayoutUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    grid_config: Optional[GridConfig] = None
    is_active: Optional[bool] = None


class LayoutActivateRequest(BaseModel):
    farm_id: RowId


class DefaultLayoutRequest(BaseModel):
    farm_id: RowId


class ExpandLayoutRequest(BaseModel):
    direction: Direction = Field(description="Side of the layout to grow on")


# ------------------------------------------------------------
# Trees and positions
# ------------------------------------------------------------

class TreeTypeCreateRequest(BaseModel):
    code: str
    name: str
    category: Optional[str] = None
    season: Optional[str] = None
    years_to_fruit: Optional[int] = None
    mature_height: Optional[str] = None
    description: Optional[str] = None


class TreePositionCreateRequest(BaseModel):
    tree_id: RowId
    layout_id: RowId
    block_index: int = 0
    grid_x: int
    grid_y: int
    variety: Optional[str] = None
    status: str = "healthy"
    planting_date: Optional[date] = None
    notes: Optional[str] = None


class TreePositionUpdateRequest(BaseModel):
    variety: Optional[str] = None
    status: Optional[str] = None
    planting_date: Optional[date] = None
    notes: Optional[str] = None


class TreePositionMoveRequest(BaseModel):
    block_index: int = 0
    grid_x: int
    grid_y: int


class GPSUpdateRequest(BaseModel):
    latitude: float = Field(description="Latitude in degrees, -90 to 90")
    longitude: float = Field(description="Longitude in degrees, -180 to 180")
    altitude: Optional[float] = None
    accuracy: Optional[float] = Field(default=None, description="Fix accuracy in meters")
    source: str = Field(default="manual", description="How the fix was captured, e.g. gps or manual")


class NodeTypeRequest(BaseModel):
    layout_id: RowId
    block_index: int
    grid_x: int
    grid_y: int
    node_type: Optional[str] = Field(
        default=None,
        description="Tier to force on the cell; null or 'auto' reverts to the computed tier",
    )


class CareLogCreateRequest(BaseModel):
    tree_id: RowId
    activity_type: str
    description: str
    notes: Optional[str] = None
    performed_by: Optional[str] = None
    images: List[str] = Field(default_factory=list)


class CareLogUpdateRequest(BaseModel):
    activity_type: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    images: Optional[List[str]] = None


# ------------------------------------------------------------
# Marketplace
# ------------------------------------------------------------

class VegetableCreateRequest(BaseModel):
    owner_id: Optional[RowId] = None
    name: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[float] = None
    unit: str = "kg"
    category: Optional[str] = None
    location: Optional[str] = None
    source_type: Optional[str] = Field(default=None, description="e.g. farm, garden or terrace")
    description: Optional[str] = None


class VegetableUpdateRequest(BaseModel):
    name: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[float] = Field(default=None, description="New stock; 0 marks the listing sold out")
    unit: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    source_type: Optional[str] = None
    description: Optional[str] = None


class CartAddRequest(BaseModel):
    product_id: RowId = Field(description="Listing to add; price and stock are read from the stored listing")
    quantity: float = 1


class CartQuantityRequest(BaseModel):
    quantity: float


class CheckoutRequest(BaseModel):
    user_id: Optional[RowId] = None
    delivery_address: Optional[str] = None
    contact_number: Optional[str] = None


class PreBookingCreateRequest(BaseModel):
    user_id: RowId
    seller_id: RowId
    vegetable_name: str
    quantity: float
    unit: str = "kg"
    category: Optional[str] = None
    estimated_price: Optional[float] = None
    target_date: Optional[date] = None
    user_notes: Optional[str] = None


class PreBookingStatusRequest(BaseModel):
    status: PreBookingStatus
    seller_notes: Optional[str] = None
    user_notes: Optional[str] = None


class PreBookingCancelRequest(BaseModel):
    reason: Optional[str] = None
