"""
Domain service: block geometry of a farm layout.

A layout is a list of rectangular blocks on a shared plane. Blocks are
addressed by their index in the list, and cells inside a block by local
(x, y) coordinates from (0, 0) to (width, height) inclusive.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence
import logging

from shapely.geometry import Point, box
from shapely.ops import unary_union

from farm_market.domain.errors import EmptyLayoutError
from farm_market.domain.models import Block, Direction, GridConfig

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE = 24


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned bounding box of a set of blocks."""
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y


@dataclass(frozen=True)
class CellLocation:
    """A cell addressed by block index and block-local coordinates."""
    block_index: int
    grid_x: int
    grid_y: int


def default_grid_config(block_size: int = DEFAULT_BLOCK_SIZE) -> GridConfig:
    """
    Starting configuration for a new farm: two columns by four rows.

    Args:
        block_size: Width and height of each block

    Returns:
        GridConfig with 8 blocks
    """
    blocks = [
        Block(x=col * block_size, y=row * block_size, width=block_size, height=block_size)
        for row in range(4)
        for col in range(2)
    ]
    return GridConfig(blocks=blocks)


def _block_shape(block: Block):
    return box(block.x, block.y, block.x + block.width, block.y + block.height)


def layout_bounds(blocks: Sequence[Block]) -> Bounds:
    """
    Compute the bounding box of a block list.

    Args:
        blocks: Layout blocks

    Returns:
        Bounds of the union of all blocks

    Raises:
        EmptyLayoutError: If there are no blocks
    """
    if not blocks:
        raise EmptyLayoutError("Layout has no blocks")
    min_x, min_y, max_x, max_y = unary_union([_block_shape(b) for b in blocks]).bounds
    return Bounds(int(min_x), int(min_y), int(max_x), int(max_y))


def expand_blocks(
    blocks: Sequence[Block],
    direction: Direction,
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> List[Block]:
    """
    Append a full row or column of blocks on one side of the layout.

    One new block is added per ``block_size`` step along the side. Growing
    left or up past zero shifts every block, new ones included, by one
    block so no coordinate is negative. The input list is not modified.

    Args:
        blocks: Current layout blocks
        direction: Side to grow on
        block_size: Size of the new blocks

    Returns:
        The complete new block list

    Raises:
        EmptyLayoutError: If there are no blocks to grow from
    """
    bounds = layout_bounds(blocks)
    direction = Direction(direction)
    new_blocks = [block.model_copy() for block in blocks]

    def _new(x: int, y: int) -> Block:
        return Block(x=x, y=y, width=block_size, height=block_size)

    if direction == Direction.RIGHT:
        new_blocks += [_new(bounds.max_x, y) for y in range(bounds.min_y, bounds.max_y, block_size)]
    elif direction == Direction.LEFT:
        new_blocks += [_new(bounds.min_x - block_size, y) for y in range(bounds.min_y, bounds.max_y, block_size)]
        if bounds.min_x - block_size < 0:
            new_blocks = [b.model_copy(update={"x": b.x + block_size}) for b in new_blocks]
    elif direction == Direction.BOTTOM:
        new_blocks += [_new(x, bounds.max_y) for x in range(bounds.min_x, bounds.max_x, block_size)]
    elif direction == Direction.TOP:
        new_blocks += [_new(x, bounds.min_y - block_size) for x in range(bounds.min_x, bounds.max_x, block_size)]
        if bounds.min_y - block_size < 0:
            new_blocks = [b.model_copy(update={"y": b.y + block_size}) for b in new_blocks]

    logger.debug(f"Expanded layout {direction.value}: {len(blocks)} -> {len(new_blocks)} blocks")
    return new_blocks


def is_valid_cell(blocks: Sequence[Block], block_index: int, grid_x: int, grid_y: int) -> bool:
    """Whether (grid_x, grid_y) lies inside the block at block_index, edges included."""
    if block_index < 0 or block_index >= len(blocks):
        return False
    block = blocks[block_index]
    return 0 <= grid_x <= block.width and 0 <= grid_y <= block.height


def absolute_position(block: Block, grid_x: int, grid_y: int) -> tuple[int, int]:
    """Convert block-local coordinates to plane coordinates."""
    return (block.x + grid_x, block.y + grid_y)


def locate_cell(blocks: Sequence[Block], abs_x: int, abs_y: int) -> Optional[CellLocation]:
    """
    Find the block cell under a plane coordinate.

    Cells on a shared edge belong to the block with the lowest index.

    Args:
        blocks: Layout blocks
        abs_x: X coordinate on the plane
        abs_y: Y coordinate on the plane

    Returns:
        CellLocation, or None if no block covers the point
    """
    point = Point(abs_x, abs_y)
    for index, block in enumerate(blocks):
        if _block_shape(block).covers(point):
            return CellLocation(index, abs_x - block.x, abs_y - block.y)
    return None
