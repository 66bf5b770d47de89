"""
Domain models for farm layouts, trees and marketplace data.

Rows coming back from the hosted database are parsed into these models at
the service boundary, so malformed rows are rejected before any rule runs.
These models stay independent of the HTTP layer and the database client.
"""
from datetime import date
from enum import Enum
from typing import List, Optional, Union
from pydantic import BaseModel, Field

RowId = Union[int, str]


class NodeType(str, Enum):
    """Size tier of a grid cell."""
    BIG = "big"
    CENTER_BIG = "centerBig"
    MEDIUM = "medium"
    SMALL = "small"
    TINY = "tiny"


# Values accepted as a manual override; "default" renders like an
# unclassified cell.
OVERRIDE_NODE_TYPES = tuple(t.value for t in NodeType) + ("default",)

# Values that clear an override and fall back to the classifier.
AUTO_NODE_TYPE = "auto"


class Direction(str, Enum):
    """Side of the layout a grid expansion appends to."""
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


class Block(BaseModel):
    """A rectangular region of the farm plane that holds placements."""
    x: int
    y: int
    width: int = Field(default=24, gt=0)
    height: int = Field(default=24, gt=0)


class GridConfig(BaseModel):
    """Grid configuration stored on a layout."""
    blocks: List[Block] = Field(default_factory=list)

    class Config:
        extra = "allow"


class Layout(BaseModel):
    """A named collection of blocks for one farm."""
    id: RowId
    farm_id: RowId
    name: str
    description: Optional[str] = None
    grid_config: GridConfig = Field(default_factory=GridConfig)
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class TreeType(BaseModel):
    """Species template that planted positions refer to."""
    id: RowId
    code: str
    name: str
    category: Optional[str] = None
    season: Optional[str] = None
    years_to_fruit: Optional[int] = None
    mature_height: Optional[str] = None
    description: Optional[str] = None


class TreePosition(BaseModel):
    """A tree planted at one cell of a layout."""
    id: RowId
    tree_id: RowId
    layout_id: RowId
    block_index: int = 0
    grid_x: int
    grid_y: int
    variety: Optional[str] = None
    status: str = "healthy"
    planting_date: Optional[date] = None
    notes: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None
    gps_accuracy: Optional[float] = None
    coordinate_source: Optional[str] = None
    tree: Optional[TreeType] = Field(default=None, alias="trees")

    class Config:
        populate_by_name = True

    @property
    def cell(self) -> tuple[int, int, int]:
        return (self.block_index, self.grid_x, self.grid_y)


class CustomNodeType(BaseModel):
    """Manual tier override for one cell."""
    layout_id: RowId
    block_index: int
    grid_x: int
    grid_y: int
    node_type: str

    @property
    def key(self) -> str:
        return cell_key(self.block_index, self.grid_x, self.grid_y)


def cell_key(block_index: int, grid_x: int, grid_y: int) -> str:
    """Key used for per-cell maps, e.g. ``"0-12-12"``."""
    return f"{block_index}-{grid_x}-{grid_y}"


class TreeCareLog(BaseModel):
    """One care activity performed on a tree."""
    id: RowId
    tree_id: RowId
    activity_type: str
    description: str
    notes: Optional[str] = None
    performed_by: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    performed_at: Optional[str] = None


# ------------------------------------------------------------
# Marketplace
# ------------------------------------------------------------

class Seller(BaseModel):
    """Seller reference carried by listings and carts."""
    id: RowId
    name: str = "Unknown Seller"
    whatsapp_number: Optional[str] = None
    location: Optional[str] = None


class Product(BaseModel):
    """A listing as offered to the cart."""
    id: RowId
    name: str
    price: float = Field(ge=0)
    available_quantity: float = Field(gt=0)
    unit: str = "kg"
    seller: Seller

    @property
    def is_free(self) -> bool:
        return self.price == 0


class Vegetable(BaseModel):
    """A seller's listing as stored, with the owner embedded when selected."""
    id: RowId
    name: str
    price: float = Field(ge=0)
    quantity: float = Field(ge=0, description="Stock declared by the seller")
    unit: str = "kg"
    category: Optional[str] = None
    location: Optional[str] = None
    source_type: Optional[str] = None
    description: Optional[str] = None
    owner_id: RowId
    owner: Optional[Seller] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_free(self) -> bool:
        return self.price == 0

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0

    @property
    def seller(self) -> Seller:
        return self.owner or Seller(id=self.owner_id)


class CartItem(BaseModel):
    """One cart line."""
    id: RowId
    name: str
    price: float
    quantity: float
    unit: str = "kg"
    available_quantity: float
    seller: Seller

    @property
    def total(self) -> float:
        return self.price * self.quantity

    @property
    def is_free(self) -> bool:
        return self.price == 0


class PreBookingStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    READY = "ready"
    DELIVERED = "delivered"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


OPEN_PREBOOKING_STATUSES = (
    PreBookingStatus.PENDING,
    PreBookingStatus.ACCEPTED,
    PreBookingStatus.IN_PROGRESS,
)


class PreBooking(BaseModel):
    """Reservation for a vegetable that is currently out of stock."""
    id: RowId
    user_id: RowId
    seller_id: RowId
    vegetable_name: str
    category: Optional[str] = None
    quantity: float
    unit: str = "kg"
    estimated_price: Optional[float] = None
    target_date: Optional[date] = None
    user_notes: Optional[str] = None
    seller_notes: Optional[str] = None
    status: PreBookingStatus = PreBookingStatus.PENDING
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class OrderItem(BaseModel):
    id: Optional[RowId] = None
    order_id: RowId
    vegetable_id: RowId
    quantity: float
    price_per_unit: float
    total_price: float


class Order(BaseModel):
    """A checked-out cart."""
    id: RowId
    user_id: Optional[RowId] = None
    seller_id: RowId
    status: str = "pending"
    total_amount: float
    delivery_address: Optional[str] = None
    contact_number: Optional[str] = None
    created_at: Optional[str] = None
    items: List[OrderItem] = Field(default_factory=list)
