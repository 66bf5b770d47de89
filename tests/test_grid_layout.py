"""
Unit tests for grid layout geometry.

Tests cover:
- Default configuration
- Bounds of a block list
- Expansion in each direction, including the shift when growing left/up
- Cell validation and lookup
"""
import pytest

from farm_market.domain.errors import EmptyLayoutError
from farm_market.domain.models import Block, Direction
from farm_market.services.domain.grid_layout import (
    CellLocation,
    absolute_position,
    default_grid_config,
    expand_blocks,
    is_valid_cell,
    layout_bounds,
    locate_cell,
)


def _coords(blocks):
    return sorted((b.x, b.y) for b in blocks)


@pytest.fixture
def two_by_one():
    return [Block(x=0, y=0), Block(x=24, y=0)]


# ============================================================
# Default Layout Tests
# ============================================================

class TestDefaultGridConfig:
    """Tests for the starting layout."""

    def test_eight_blocks_two_columns_four_rows(self):
        config = default_grid_config()

        assert len(config.blocks) == 8
        assert _coords(config.blocks) == sorted(
            (col * 24, row * 24) for row in range(4) for col in range(2)
        )
        assert all(b.width == 24 and b.height == 24 for b in config.blocks)

    def test_custom_block_size(self):
        config = default_grid_config(block_size=10)

        bounds = layout_bounds(config.blocks)
        assert (bounds.width, bounds.height) == (20, 40)


# ============================================================
# Bounds Tests
# ============================================================

class TestLayoutBounds:
    """Tests for layout_bounds."""

    def test_bounds_of_two_blocks(self, two_by_one):
        bounds = layout_bounds(two_by_one)

        assert (bounds.min_x, bounds.min_y, bounds.max_x, bounds.max_y) == (0, 0, 48, 24)

    def test_empty_layout_rejected(self):
        with pytest.raises(EmptyLayoutError):
            layout_bounds([])


# ============================================================
# Expansion Tests
# ============================================================

class TestExpandBlocks:
    """Tests for expand_blocks."""

    def test_expand_right_adds_column(self, two_by_one):
        blocks = expand_blocks(two_by_one, Direction.RIGHT)

        assert _coords(blocks) == [(0, 0), (24, 0), (48, 0)]

    def test_expand_bottom_adds_one_block_per_column(self, two_by_one):
        blocks = expand_blocks(two_by_one, Direction.BOTTOM)

        assert _coords(blocks) == [(0, 0), (0, 24), (24, 0), (24, 24)]

    def test_expand_left_shifts_everything(self, two_by_one):
        """Growing left past zero moves every block right by one block."""
        blocks = expand_blocks(two_by_one, Direction.LEFT)

        assert _coords(blocks) == [(0, 0), (24, 0), (48, 0)]
        # The original blocks keep their order at the front of the list
        assert (blocks[0].x, blocks[1].x) == (24, 48)
        assert blocks[2].x == 0

    def test_expand_top_shifts_everything(self, two_by_one):
        blocks = expand_blocks(two_by_one, Direction.TOP)

        assert _coords(blocks) == [(0, 0), (0, 24), (24, 0), (24, 24)]
        assert all(b.y == 24 for b in blocks[:2])
        assert min(b.y for b in blocks) == 0

    def test_expand_left_without_shift_when_room(self):
        blocks = expand_blocks([Block(x=48, y=0)], Direction.LEFT)

        assert _coords(blocks) == [(24, 0), (48, 0)]

    def test_default_layout_expansions(self):
        """Right on the 2x4 default adds four blocks, bottom adds two."""
        blocks = default_grid_config().blocks

        assert len(expand_blocks(blocks, Direction.RIGHT)) == 12
        assert len(expand_blocks(blocks, Direction.BOTTOM)) == 10

    def test_input_not_modified(self, two_by_one):
        expand_blocks(two_by_one, Direction.LEFT)

        assert _coords(two_by_one) == [(0, 0), (24, 0)]

    def test_string_direction_accepted(self, two_by_one):
        assert len(expand_blocks(two_by_one, "right")) == 3

    def test_empty_layout_rejected(self):
        with pytest.raises(EmptyLayoutError):
            expand_blocks([], Direction.RIGHT)


# ============================================================
# Cell Tests
# ============================================================

class TestCells:
    """Tests for cell validation and coordinate conversion."""

    def test_edges_are_valid(self, two_by_one):
        assert is_valid_cell(two_by_one, 0, 0, 0)
        assert is_valid_cell(two_by_one, 1, 24, 24)

    @pytest.mark.parametrize("block_index,x,y", [(2, 0, 0), (-1, 0, 0), (0, 25, 0), (0, 0, -1)])
    def test_outside_cells_are_invalid(self, two_by_one, block_index, x, y):
        assert not is_valid_cell(two_by_one, block_index, x, y)

    def test_absolute_position(self, two_by_one):
        assert absolute_position(two_by_one[1], 6, 12) == (30, 12)

    def test_locate_cell_inside_block(self, two_by_one):
        assert locate_cell(two_by_one, 30, 12) == CellLocation(1, 6, 12)

    def test_shared_edge_belongs_to_lowest_index(self, two_by_one):
        assert locate_cell(two_by_one, 24, 5) == CellLocation(0, 24, 5)

    def test_locate_cell_outside(self, two_by_one):
        assert locate_cell(two_by_one, 60, 0) is None
