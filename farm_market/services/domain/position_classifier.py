"""
Domain service: classify grid cells into tree size tiers.

A block is planted on a fixed pattern. Corners take the biggest trees, the
block center a big tree, edge midpoints medium trees, quarter points small
trees and every other cell a tiny one. Positions are local to the block,
so (0, 0) is the block's top-left corner and (W, H) its bottom-right.
"""
from typing import Mapping, Optional

from farm_market.domain.models import Block, NodeType, cell_key


_CIRCLE_CLASSES = {
    NodeType.BIG: "treeCircleBig",
    NodeType.CENTER_BIG: "treeCircleCenterBig",
    NodeType.MEDIUM: "treeCircleMedium",
    NodeType.SMALL: "treeCircle",
    NodeType.TINY: "treeCircleTiny",
}

_GUIDE_SUFFIXES = {
    NodeType.BIG: "Big",
    NodeType.CENTER_BIG: "CenterBig",
    NodeType.MEDIUM: "Medium",
    NodeType.SMALL: "",
    NodeType.TINY: "Tiny",
}


def classify_position(
    grid_x: int,
    grid_y: int,
    block_width: int = 24,
    block_height: int = 24,
) -> NodeType:
    """
    Determine the tree tier for a cell of a block.

    Checks run in priority order and the first match wins. Midpoints and
    quarter points are compared exactly, so for block sizes that do not
    divide evenly they never match and those cells come out tiny.

    Args:
        grid_x: X position inside the block
        grid_y: Y position inside the block
        block_width: Width of the block
        block_height: Height of the block

    Returns:
        The NodeType for the cell
    """
    w, h = block_width, block_height

    corners = {(0, 0), (w, 0), (0, h), (w, h)}
    if (grid_x, grid_y) in corners:
        return NodeType.BIG

    mid_x = w / 2
    mid_y = h / 2
    if grid_x == mid_x and grid_y == mid_y:
        return NodeType.CENTER_BIG

    midpoints = {(mid_x, 0), (w, mid_y), (mid_x, h), (0, mid_y)}
    if (grid_x, grid_y) in midpoints:
        return NodeType.MEDIUM

    quarter_x, three_quarter_x = w / 4, 3 * w / 4
    quarter_y, three_quarter_y = h / 4, 3 * h / 4
    quarter_points = {
        # Along the edges
        (quarter_x, 0), (three_quarter_x, 0),
        (w, quarter_y), (w, three_quarter_y),
        (three_quarter_x, h), (quarter_x, h),
        (0, three_quarter_y), (0, quarter_y),
        # Along the center axes
        (quarter_x, mid_y), (three_quarter_x, mid_y),
        (mid_x, quarter_y), (mid_x, three_quarter_y),
    }
    if (grid_x, grid_y) in quarter_points:
        return NodeType.SMALL

    return NodeType.TINY


def resolve_node_type(
    block_index: int,
    grid_x: int,
    grid_y: int,
    block: Block,
    overrides: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Effective tier of a cell: the manual override if one exists, otherwise
    the classifier's result.

    Args:
        block_index: Index of the block in the layout
        grid_x: X position inside the block
        grid_y: Y position inside the block
        block: The block the cell belongs to
        overrides: Map of ``"<block>-<x>-<y>"`` to override value

    Returns:
        Tier value as stored (override values may include "default")
    """
    if overrides:
        override = overrides.get(cell_key(block_index, grid_x, grid_y))
        if override:
            return override
    return classify_position(grid_x, grid_y, block.width, block.height).value


def circle_class(node_type: str) -> str:
    """CSS class used to draw a planted tree of the given tier."""
    try:
        return _CIRCLE_CLASSES[NodeType(node_type)]
    except ValueError:
        return _CIRCLE_CLASSES[NodeType.TINY]


def planting_guide_class(node_type: str, is_edge: bool = False) -> str:
    """CSS class used to draw an empty planting guide of the given tier."""
    try:
        suffix = _GUIDE_SUFFIXES[NodeType(node_type)]
    except ValueError:
        suffix = _GUIDE_SUFFIXES[NodeType.TINY]
    prefix = "edgeGuide" if is_edge else "interiorGuide"
    return f"{prefix}{suffix}"
