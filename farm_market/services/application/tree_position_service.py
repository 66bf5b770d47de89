"""
Application service: trees planted on layout cells.

Each cell of a layout (layout, block index, x, y) holds at most one
planted tree. The service checks occupancy before writing and also maps a
unique-violation from the database to the same conflict, so a unique
constraint on the table closes the window between check and insert.
"""
from datetime import date
from typing import Any, Dict, List, Optional
import logging

from farm_market.domain.errors import (
    InvalidCoordinatesError,
    NotFoundError,
    PositionOccupiedError,
    ValidationError,
)
from farm_market.domain.models import RowId, TreePosition
from farm_market.infrastructure.api_constants import DatabaseTables
from farm_market.infrastructure.database_client import DatabaseClient, DatabaseError, Op
from farm_market.services.application.layout_service import LayoutService
from farm_market.services.domain.grid_layout import is_valid_cell
from farm_market.utils.timestamps import utcnow_iso

logger = logging.getLogger(__name__)

POSITION_COLUMNS = (
    "*,trees(id,code,name,category,season,years_to_fruit,mature_height,description)"
)

EDITABLE_FIELDS = ("variety", "status", "planting_date", "notes")


def validate_gps_coordinates(latitude: float, longitude: float) -> None:
    """
    Check that a GPS fix is on the globe.

    Raises:
        InvalidCoordinatesError: If latitude is outside [-90, 90] or
            longitude outside [-180, 180]
    """
    if latitude is None or not -90 <= latitude <= 90:
        raise InvalidCoordinatesError("Latitude must be between -90 and 90 degrees")
    if longitude is None or not -180 <= longitude <= 180:
        raise InvalidCoordinatesError("Longitude must be between -180 and 180 degrees")


class TreePositionService:
    """Application service for planting, editing and removing trees on a layout."""

    def __init__(self, db: DatabaseClient, layouts: LayoutService):
        self.db = db
        self.layouts = layouts

    async def list_positions(
        self,
        layout_id: Optional[RowId] = None,
        tree_id: Optional[RowId] = None,
    ) -> List[TreePosition]:
        filters: Dict[str, Any] = {}
        if layout_id is not None:
            filters["layout_id"] = layout_id
        if tree_id is not None:
            filters["tree_id"] = tree_id
        rows = await self.db.select(
            DatabaseTables.TREE_POSITIONS,
            filters=filters,
            columns=POSITION_COLUMNS,
            order="planted_at.desc",
        )
        return [TreePosition(**row) for row in rows]

    async def get_position(self, position_id: RowId) -> TreePosition:
        row = await self.db.select_one(
            DatabaseTables.TREE_POSITIONS, {"id": position_id}, columns=POSITION_COLUMNS
        )
        if row is None:
            raise NotFoundError(f"Tree position {position_id} not found")
        return TreePosition(**row)

    async def find_at(
        self,
        layout_id: RowId,
        block_index: int,
        grid_x: int,
        grid_y: int,
        exclude_id: Optional[RowId] = None,
    ) -> Optional[TreePosition]:
        """Return the tree planted at a cell, if any."""
        filters: Dict[str, Any] = {
            "layout_id": layout_id,
            "block_index": block_index,
            "grid_x": grid_x,
            "grid_y": grid_y,
        }
        if exclude_id is not None:
            filters["id"] = Op("neq", exclude_id)
        row = await self.db.select_one(DatabaseTables.TREE_POSITIONS, filters)
        return TreePosition(**row) if row else None

    async def is_occupied(self, layout_id: RowId, block_index: int, grid_x: int, grid_y: int) -> bool:
        return await self.find_at(layout_id, block_index, grid_x, grid_y) is not None

    async def _check_cell(self, layout_id: RowId, block_index: int, grid_x: int, grid_y: int) -> None:
        layout = await self.layouts.get_layout(layout_id)
        if not is_valid_cell(layout.grid_config.blocks, block_index, grid_x, grid_y):
            raise InvalidCoordinatesError(
                f"Cell ({grid_x}, {grid_y}) of block {block_index} is outside layout {layout_id}"
            )

    async def place(
        self,
        layout_id: RowId,
        block_index: int,
        grid_x: int,
        grid_y: int,
        tree_id: RowId,
        variety: Optional[str] = None,
        status: str = "healthy",
        planting_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> TreePosition:
        """
        Plant a tree on an empty cell.

        Args:
            layout_id: Layout to plant in
            block_index: Block of the layout
            grid_x: X position inside the block
            grid_y: Y position inside the block
            tree_id: Tree type being planted
            variety: Optional variety name
            status: Initial status
            planting_date: Defaults to today
            notes: Optional notes

        Returns:
            The stored position

        Raises:
            NotFoundError: If the layout does not exist
            InvalidCoordinatesError: If the cell is not part of the layout
            PositionOccupiedError: If a tree is already planted there
        """
        await self._check_cell(layout_id, block_index, grid_x, grid_y)

        if await self.is_occupied(layout_id, block_index, grid_x, grid_y):
            logger.warning(
                f"Rejected planting at layout {layout_id} block {block_index} ({grid_x}, {grid_y}): occupied"
            )
            raise PositionOccupiedError("Position is already occupied")

        row = {
            "tree_id": tree_id,
            "layout_id": layout_id,
            "block_index": block_index,
            "grid_x": grid_x,
            "grid_y": grid_y,
            "variety": variety or None,
            "status": status,
            "planting_date": (planting_date or date.today()).isoformat(),
            "notes": notes,
        }
        try:
            rows = await self.db.insert(DatabaseTables.TREE_POSITIONS, row, columns=POSITION_COLUMNS)
        except DatabaseError as e:
            if e.is_conflict:
                raise PositionOccupiedError("Position is already occupied")
            raise

        position = TreePosition(**rows[0])
        logger.info(
            f"Planted tree {tree_id} at layout {layout_id} block {block_index} "
            f"({grid_x}, {grid_y}) as position {position.id}"
        )
        return position

    async def update(self, position_id: RowId, patch: Dict[str, Any]) -> TreePosition:
        """
        Edit variety, status, planting date or notes of a planted tree.

        Keys outside those fields are ignored; cell coordinates never change
        here (see ``move``).

        Raises:
            ValidationError: If the patch has no editable field
            NotFoundError: If the position does not exist
        """
        data = {k: v for k, v in patch.items() if k in EDITABLE_FIELDS}
        if not data:
            raise ValidationError("No valid fields to update")
        if isinstance(data.get("planting_date"), date):
            data["planting_date"] = data["planting_date"].isoformat()

        await self.get_position(position_id)
        data["updated_at"] = utcnow_iso()

        rows = await self.db.update(
            DatabaseTables.TREE_POSITIONS, data, {"id": position_id}, columns=POSITION_COLUMNS
        )
        if not rows:
            raise NotFoundError(f"Tree position {position_id} not found after update")
        return TreePosition(**rows[0])

    async def move(
        self,
        position_id: RowId,
        block_index: int,
        grid_x: int,
        grid_y: int,
    ) -> TreePosition:
        """Relocate a planted tree to another cell of the same layout."""
        current = await self.get_position(position_id)
        await self._check_cell(current.layout_id, block_index, grid_x, grid_y)

        occupant = await self.find_at(
            current.layout_id, block_index, grid_x, grid_y, exclude_id=position_id
        )
        if occupant is not None:
            raise PositionOccupiedError("New position is already occupied")

        try:
            rows = await self.db.update(
                DatabaseTables.TREE_POSITIONS,
                {
                    "block_index": block_index,
                    "grid_x": grid_x,
                    "grid_y": grid_y,
                    "updated_at": utcnow_iso(),
                },
                {"id": position_id},
                columns=POSITION_COLUMNS,
            )
        except DatabaseError as e:
            if e.is_conflict:
                raise PositionOccupiedError("New position is already occupied")
            raise
        return TreePosition(**rows[0])

    async def remove(self, position_id: RowId) -> None:
        """Remove a planted tree, freeing its cell."""
        rows = await self.db.delete(DatabaseTables.TREE_POSITIONS, {"id": position_id})
        if not rows:
            raise NotFoundError(f"Tree position {position_id} not found")
        logger.info(f"Removed tree position {position_id}")

    async def attach_gps(
        self,
        position_id: RowId,
        latitude: float,
        longitude: float,
        altitude: Optional[float] = None,
        accuracy: Optional[float] = None,
        source: str = "manual",
    ) -> TreePosition:
        """
        Record where a planted tree is on the ground.

        Raises:
            InvalidCoordinatesError: If the coordinates are out of range
            NotFoundError: If the position does not exist
        """
        validate_gps_coordinates(latitude, longitude)
        await self.get_position(position_id)

        data: Dict[str, Any] = {
            "latitude": latitude,
            "longitude": longitude,
            "coordinate_source": source,
            "updated_at": utcnow_iso(),
        }
        if altitude is not None:
            data["altitude"] = altitude
        if accuracy is not None:
            data["gps_accuracy"] = accuracy

        rows = await self.db.update(
            DatabaseTables.TREE_POSITIONS, data, {"id": position_id}, columns=POSITION_COLUMNS
        )
        if not rows:
            raise NotFoundError(f"Tree position {position_id} not found after update")
        logger.info(f"Attached GPS ({latitude}, {longitude}) to tree position {position_id}")
        return TreePosition(**rows[0])
