"""
API response models using Pydantic.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from farm_market.domain.models import CustomNodeType, RowId, Seller
from farm_market.services.application.node_type_service import GridCell
from farm_market.services.domain.cart import Cart


class MessageResponse(BaseModel):
    message: str


class CustomNodeTypesResponse(BaseModel):
    """Overrides of one layout."""
    layout_id: RowId
    custom_node_types: Dict[str, str] = Field(
        description="Map of '<block>-<x>-<y>' to node type"
    )


class NodeTypeUpdateResponse(BaseModel):
    success: bool = True
    action: str = Field(description="'saved' or 'deleted'")
    data: Optional[CustomNodeType] = None


class ClassificationResponse(BaseModel):
    """Computed tier of a block-local coordinate."""
    grid_x: int
    grid_y: int
    block_width: int
    block_height: int
    node_type: str
    css_class: str

    class Config:
        json_schema_extra = {
            "example": {
                "grid_x": 12,
                "grid_y": 12,
                "block_width": 24,
                "block_height": 24,
                "node_type": "centerBig",
                "css_class": "treeCircleCenterBig",
            }
        }


class GridCellResponse(BaseModel):
    block_index: int
    grid_x: int
    grid_y: int
    node_type: str
    is_custom: bool
    is_edge: bool
    css_class: str
    occupied: bool
    position_id: Optional[RowId] = None

    @classmethod
    def from_cell(cls, cell: GridCell) -> "GridCellResponse":
        return cls(
            block_index=cell.block_index,
            grid_x=cell.grid_x,
            grid_y=cell.grid_y,
            node_type=cell.node_type,
            is_custom=cell.is_custom,
            is_edge=cell.is_edge,
            css_class=cell.css_class,
            occupied=cell.occupied,
            position_id=cell.position_id,
        )


class CartLineResponse(BaseModel):
    id: RowId
    name: str
    price: float
    quantity: float
    unit: str
    available_quantity: float
    total: float


class CartResponse(BaseModel):
    """Current state of a cart."""
    cart_id: str
    seller: Optional[Seller] = None
    items: List[CartLineResponse]
    total: float

    @classmethod
    def from_cart(cls, cart: Cart) -> "CartResponse":
        return cls(
            cart_id=cart.cart_id,
            seller=cart.seller,
            items=[
                CartLineResponse(
                    id=line.id,
                    name=line.name,
                    price=line.price,
                    quantity=line.quantity,
                    unit=line.unit,
                    available_quantity=line.available_quantity,
                    total=line.total,
                )
                for line in cart.items
            ],
            total=cart.total,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "cart_id": "c-42",
                "seller": {"id": "s-1", "name": "Green Acres"},
                "items": [
                    {
                        "id": "veg-1",
                        "name": "Tomato",
                        "price": 10.0,
                        "quantity": 3,
                        "unit": "kg",
                        "available_quantity": 5,
                        "total": 30.0,
                    }
                ],
                "total": 30.0,
            }
        }
