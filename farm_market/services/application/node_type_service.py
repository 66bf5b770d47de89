"""
Application service: per-cell tier overrides and the resolved grid view.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional
import logging

from farm_market.domain.errors import InvalidCoordinatesError, ValidationError
from farm_market.domain.models import (
    AUTO_NODE_TYPE,
    Block,
    OVERRIDE_NODE_TYPES,
    CustomNodeType,
    RowId,
    cell_key,
)
from farm_market.infrastructure.api_constants import DatabaseTables
from farm_market.infrastructure.database_client import DatabaseClient
from farm_market.services.application.layout_service import LayoutService
from farm_market.services.application.tree_position_service import TreePositionService
from farm_market.services.domain.grid_layout import is_valid_cell
from farm_market.services.domain.position_classifier import (
    circle_class,
    planting_guide_class,
    resolve_node_type,
)
from farm_market.utils.timestamps import utcnow_iso

logger = logging.getLogger(__name__)

CONFLICT_COLUMNS = ("layout_id", "block_index", "grid_x", "grid_y")


@dataclass
class GridCell:
    """A planting guide cell with its resolved tier and occupancy."""
    block_index: int
    grid_x: int
    grid_y: int
    node_type: str
    is_custom: bool
    is_edge: bool
    css_class: str
    position_id: Optional[RowId] = None

    @property
    def occupied(self) -> bool:
        return self.position_id is not None


class NodeTypeService:
    """
    Application service for manual tier overrides.

    An override, when present, wins over the position classifier for its
    cell. Setting the override to None or "auto" deletes it.
    """

    def __init__(
        self,
        db: DatabaseClient,
        layouts: LayoutService,
        positions: TreePositionService,
    ):
        self.db = db
        self.layouts = layouts
        self.positions = positions

    async def get_overrides(self, layout_id: RowId) -> Dict[str, str]:
        """Overrides of a layout as a ``"<block>-<x>-<y>" -> node_type`` map."""
        rows = await self.db.select(
            DatabaseTables.CUSTOM_NODE_TYPES, filters={"layout_id": layout_id}
        )
        overrides = [CustomNodeType(**row) for row in rows]
        return {o.key: o.node_type for o in overrides}

    async def set_override(
        self,
        layout_id: RowId,
        block_index: int,
        grid_x: int,
        grid_y: int,
        node_type: Optional[str],
    ) -> Optional[CustomNodeType]:
        """
        Set or clear the tier override of a cell.

        Args:
            layout_id: Layout of the cell
            block_index: Block of the cell
            grid_x: X position inside the block
            grid_y: Y position inside the block
            node_type: New tier, or None / "auto" to revert to the classifier

        Returns:
            The stored override, or None when it was cleared

        Raises:
            ValidationError: If node_type is not an accepted value
            NotFoundError: If the layout does not exist
            InvalidCoordinatesError: If the cell is outside the layout
        """
        if not node_type or node_type == AUTO_NODE_TYPE:
            await self.clear_override(layout_id, block_index, grid_x, grid_y)
            return None

        if node_type not in OVERRIDE_NODE_TYPES:
            raise ValidationError(
                f"Invalid node type. Must be one of: {', '.join(OVERRIDE_NODE_TYPES)}"
            )

        await self._check_cell(layout_id, block_index, grid_x, grid_y)

        rows = await self.db.upsert(
            DatabaseTables.CUSTOM_NODE_TYPES,
            {
                "layout_id": layout_id,
                "block_index": block_index,
                "grid_x": grid_x,
                "grid_y": grid_y,
                "node_type": node_type,
                "updated_at": utcnow_iso(),
            },
            on_conflict=CONFLICT_COLUMNS,
        )
        logger.info(
            f"Set node type {node_type} at layout {layout_id} block {block_index} ({grid_x}, {grid_y})"
        )
        return CustomNodeType(**rows[0])

    async def clear_override(self, layout_id: RowId, block_index: int, grid_x: int, grid_y: int) -> None:
        await self.db.delete(
            DatabaseTables.CUSTOM_NODE_TYPES,
            {
                "layout_id": layout_id,
                "block_index": block_index,
                "grid_x": grid_x,
                "grid_y": grid_y,
            },
        )

    async def _check_cell(self, layout_id: RowId, block_index: int, grid_x: int, grid_y: int) -> List[Block]:
        layout = await self.layouts.get_layout(layout_id)
        blocks = layout.grid_config.blocks
        if not is_valid_cell(blocks, block_index, grid_x, grid_y):
            raise InvalidCoordinatesError(
                f"Cell ({grid_x}, {grid_y}) of block {block_index} is outside layout {layout_id}"
            )
        return blocks

    async def effective_node_type(
        self,
        layout_id: RowId,
        block_index: int,
        grid_x: int,
        grid_y: int,
    ) -> str:
        blocks = await self._check_cell(layout_id, block_index, grid_x, grid_y)
        overrides = await self.get_overrides(layout_id)
        return resolve_node_type(block_index, grid_x, grid_y, blocks[block_index], overrides)

    async def block_cells(self, layout_id: RowId, block_index: int, step: int = 3) -> List[GridCell]:
        """
        Planting guide cells of one block, every ``step`` units.

        Args:
            layout_id: Layout to render
            block_index: Block to render
            step: Spacing of guide cells

        Returns:
            Cells in row-major order with tier, styling and occupancy
        """
        layout = await self.layouts.get_layout(layout_id)
        blocks = layout.grid_config.blocks
        if block_index < 0 or block_index >= len(blocks):
            raise InvalidCoordinatesError(f"Block {block_index} is outside layout {layout_id}")
        block = blocks[block_index]

        overrides = await self.get_overrides(layout_id)
        planted = {
            (p.grid_x, p.grid_y): p.id
            for p in await self.positions.list_positions(layout_id=layout_id)
            if p.block_index == block_index
        }

        cells = []
        for y in range(0, block.height + 1, step):
            for x in range(0, block.width + 1, step):
                node_type = resolve_node_type(block_index, x, y, block, overrides)
                is_edge = x in (0, block.width) or y in (0, block.height)
                position_id = planted.get((x, y))
                cells.append(GridCell(
                    block_index=block_index,
                    grid_x=x,
                    grid_y=y,
                    node_type=node_type,
                    is_custom=cell_key(block_index, x, y) in overrides,
                    is_edge=is_edge,
                    css_class=circle_class(node_type) if position_id is not None
                    else planting_guide_class(node_type, is_edge),
                    position_id=position_id,
                ))
        return cells
