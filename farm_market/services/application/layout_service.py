"""
Application service: farm layouts.

Loads and stores layouts through the database client and delegates all
block geometry to the grid layout domain service.
"""
from typing import Any, Dict, List, Optional
import logging

from farm_market.domain.errors import NotFoundError
from farm_market.domain.models import Direction, GridConfig, Layout, RowId
from farm_market.infrastructure.api_constants import DatabaseTables
from farm_market.infrastructure.database_client import DatabaseClient, Op
from farm_market.services.domain.grid_layout import default_grid_config, expand_blocks
from farm_market.utils.timestamps import utcnow_iso

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT_NAME = "Default Farm Layout"


class LayoutService:
    """
    Application service for farm layouts.

    Only one layout per farm is kept active: activating or creating an
    active layout deactivates the farm's other layouts first.
    """

    def __init__(self, db: DatabaseClient, block_size: int = 24):
        self.db = db
        self.block_size = block_size

    async def list_layouts(self, farm_id: Optional[RowId] = None) -> List[Layout]:
        filters = {"farm_id": farm_id} if farm_id is not None else None
        rows = await self.db.select(
            DatabaseTables.FARM_LAYOUTS, filters=filters, order="created_at.desc"
        )
        return [Layout(**row) for row in rows]

    async def get_layout(self, layout_id: RowId) -> Layout:
        row = await self.db.select_one(DatabaseTables.FARM_LAYOUTS, {"id": layout_id})
        if row is None:
            raise NotFoundError(f"Farm layout {layout_id} not found")
        return Layout(**row)

    async def get_active_layout(self, farm_id: RowId) -> Optional[Layout]:
        row = await self.db.select_one(
            DatabaseTables.FARM_LAYOUTS, {"farm_id": farm_id, "is_active": True}
        )
        return Layout(**row) if row else None

    async def _deactivate_farm_layouts(
        self, farm_id: RowId, except_id: Optional[RowId] = None
    ) -> None:
        filters: Dict[str, Any] = {"farm_id": farm_id}
        if except_id is not None:
            filters["id"] = Op("neq", except_id)
        await self.db.update(DatabaseTables.FARM_LAYOUTS, {"is_active": False}, filters)

    async def create_layout(
        self,
        farm_id: RowId,
        name: str,
        grid_config: GridConfig,
        description: Optional[str] = None,
        is_active: bool = True,
    ) -> Layout:
        """
        Create a layout for a farm.

        Args:
            farm_id: Farm the layout belongs to
            name: Display name
            grid_config: Initial blocks
            description: Optional description
            is_active: Make this the farm's active layout

        Returns:
            The stored layout
        """
        if is_active:
            await self._deactivate_farm_layouts(farm_id)

        rows = await self.db.insert(
            DatabaseTables.FARM_LAYOUTS,
            {
                "farm_id": farm_id,
                "name": name,
                "description": description,
                "grid_config": grid_config.model_dump(),
                "is_active": is_active,
            },
        )
        layout = Layout(**rows[0])
        logger.info(f"Created layout {layout.id} for farm {farm_id} with {len(grid_config.blocks)} blocks")
        return layout

    async def create_default_layout(self, farm_id: RowId) -> Layout:
        """Create the 8-block starting layout for a farm and make it active."""
        return await self.create_layout(
            farm_id=farm_id,
            name=DEFAULT_LAYOUT_NAME,
            description=(
                f"Initial 8-block layout (2x4 grid of {self.block_size}x{self.block_size} blocks)"
            ),
            grid_config=default_grid_config(self.block_size),
            is_active=True,
        )

    async def ensure_layout(self, farm_id: RowId) -> Layout:
        """Return the farm's active layout, creating the default one on first use."""
        layout = await self.get_active_layout(farm_id)
        if layout is not None:
            return layout
        logger.info(f"No active layout for farm {farm_id}, creating default")
        return await self.create_default_layout(farm_id)

    async def update_layout(
        self,
        layout_id: RowId,
        name: Optional[str] = None,
        description: Optional[str] = None,
        grid_config: Optional[GridConfig] = None,
        is_active: Optional[bool] = None,
    ) -> Layout:
        """Update the given fields of a layout. Omitted fields are left alone."""
        current = await self.get_layout(layout_id)

        if is_active:
            await self._deactivate_farm_layouts(current.farm_id, except_id=layout_id)

        patch: Dict[str, Any] = {"updated_at": utcnow_iso()}
        if name is not None:
            patch["name"] = name
        if description is not None:
            patch["description"] = description
        if grid_config is not None:
            patch["grid_config"] = grid_config.model_dump()
        if is_active is not None:
            patch["is_active"] = is_active

        rows = await self.db.update(DatabaseTables.FARM_LAYOUTS, patch, {"id": layout_id})
        if not rows:
            raise NotFoundError(f"Farm layout {layout_id} not found")
        return Layout(**rows[0])

    async def activate_layout(self, layout_id: RowId, farm_id: RowId) -> Layout:
        await self._deactivate_farm_layouts(farm_id)
        rows = await self.db.update(
            DatabaseTables.FARM_LAYOUTS,
            {"is_active": True},
            {"id": layout_id, "farm_id": farm_id},
        )
        if not rows:
            raise NotFoundError(f"Farm layout {layout_id} not found for farm {farm_id}")
        logger.info(f"Activated layout {layout_id} for farm {farm_id}")
        return Layout(**rows[0])

    async def delete_layout(self, layout_id: RowId) -> None:
        rows = await self.db.delete(DatabaseTables.FARM_LAYOUTS, {"id": layout_id})
        if not rows:
            raise NotFoundError(f"Farm layout {layout_id} not found")
        logger.info(f"Deleted layout {layout_id}")

    async def expand_layout(self, layout_id: RowId, direction: Direction) -> Layout:
        """
        Grow a layout by one row or column of blocks and store the result.

        The whole block array is written back, replacing the previous one.

        Args:
            layout_id: Layout to grow
            direction: Side to grow on

        Returns:
            The updated layout

        Raises:
            NotFoundError: If the layout does not exist
            EmptyLayoutError: If the layout has no blocks
        """
        layout = await self.get_layout(layout_id)
        blocks = expand_blocks(layout.grid_config.blocks, direction, self.block_size)
        grid_config = layout.grid_config.model_copy(update={"blocks": blocks})
        updated = await self.update_layout(layout_id, grid_config=grid_config)
        logger.info(
            f"Expanded layout {layout_id} {Direction(direction).value}: "
            f"{len(layout.grid_config.blocks)} -> {len(blocks)} blocks"
        )
        return updated
