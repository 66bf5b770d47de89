"""
Unit tests for per-cell node type overrides and the block grid view.
"""
import pytest

from farm_market.domain.errors import InvalidCoordinatesError, NotFoundError, ValidationError


# ============================================================
# Override Tests
# ============================================================

class TestOverrides:
    """Tests for setting and clearing overrides."""

    @pytest.mark.asyncio
    async def test_override_changes_effective_type(self, node_type_service, sample_layout):
        layout_id = sample_layout["id"]
        assert await node_type_service.effective_node_type(layout_id, 0, 12, 12) == "centerBig"

        saved = await node_type_service.set_override(layout_id, 0, 12, 12, "tiny")

        assert saved.node_type == "tiny"
        assert await node_type_service.effective_node_type(layout_id, 0, 12, 12) == "tiny"
        assert await node_type_service.get_overrides(layout_id) == {"0-12-12": "tiny"}

    @pytest.mark.asyncio
    async def test_second_override_replaces_first(self, node_type_service, fake_db, sample_layout):
        layout_id = sample_layout["id"]
        await node_type_service.set_override(layout_id, 0, 3, 3, "medium")
        await node_type_service.set_override(layout_id, 0, 3, 3, "big")

        assert len(fake_db.rows("custom_node_types")) == 1
        assert await node_type_service.get_overrides(layout_id) == {"0-3-3": "big"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [None, "auto", ""])
    async def test_clearing_reverts_to_classifier(self, node_type_service, sample_layout, value):
        layout_id = sample_layout["id"]
        await node_type_service.set_override(layout_id, 0, 12, 12, "tiny")

        assert await node_type_service.set_override(layout_id, 0, 12, 12, value) is None
        assert await node_type_service.effective_node_type(layout_id, 0, 12, 12) == "centerBig"

    @pytest.mark.asyncio
    async def test_default_is_accepted(self, node_type_service, sample_layout):
        saved = await node_type_service.set_override(sample_layout["id"], 1, 0, 0, "default")

        assert saved.node_type == "default"

    @pytest.mark.asyncio
    async def test_invalid_value_rejected(self, node_type_service, sample_layout):
        with pytest.raises(ValidationError, match="Invalid node type"):
            await node_type_service.set_override(sample_layout["id"], 0, 0, 0, "huge")

    @pytest.mark.asyncio
    async def test_overrides_are_per_layout(self, node_type_service, layout_service, sample_layout, two_block_config):
        other = await layout_service.create_layout(7, "Other", two_block_config, is_active=False)
        await node_type_service.set_override(sample_layout["id"], 0, 0, 0, "tiny")

        assert await node_type_service.get_overrides(other.id) == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("block_index,grid_x,grid_y", [(5, 0, 0), (0, 25, 0), (0, 0, -1)])
    async def test_override_outside_layout_rejected(
        self, node_type_service, fake_db, sample_layout, block_index, grid_x, grid_y
    ):
        with pytest.raises(InvalidCoordinatesError):
            await node_type_service.set_override(sample_layout["id"], block_index, grid_x, grid_y, "big")

        assert fake_db.rows("custom_node_types") == []

    @pytest.mark.asyncio
    async def test_override_on_missing_layout(self, node_type_service):
        with pytest.raises(NotFoundError):
            await node_type_service.set_override(999, 0, 0, 0, "big")

    @pytest.mark.asyncio
    async def test_effective_type_outside_layout(self, node_type_service, sample_layout):
        with pytest.raises(InvalidCoordinatesError):
            await node_type_service.effective_node_type(sample_layout["id"], 5, 0, 0)


# ============================================================
# Block Grid Tests
# ============================================================

class TestBlockCells:
    """Tests for the planting guide view of a block."""

    @pytest.mark.asyncio
    async def test_cells_cover_block_every_step(self, node_type_service, sample_layout):
        cells = await node_type_service.block_cells(sample_layout["id"], 0, step=3)

        assert len(cells) == 9 * 9
        assert (cells[0].grid_x, cells[0].grid_y) == (0, 0)
        assert (cells[-1].grid_x, cells[-1].grid_y) == (24, 24)

    @pytest.mark.asyncio
    async def test_cells_carry_tier_style_and_occupancy(
        self, node_type_service, position_service, sample_layout, sample_tree_type
    ):
        layout_id = sample_layout["id"]
        planted = await position_service.place(layout_id, 0, 12, 12, tree_id=sample_tree_type["id"])
        await node_type_service.set_override(layout_id, 0, 3, 3, "medium")

        cells = {
            (c.grid_x, c.grid_y): c
            for c in await node_type_service.block_cells(layout_id, 0, step=3)
        }

        center = cells[(12, 12)]
        assert center.occupied and center.position_id == planted.id
        assert center.css_class == "treeCircleCenterBig"

        corner = cells[(0, 0)]
        assert corner.is_edge and not corner.occupied
        assert corner.css_class == "edgeGuideBig"

        custom = cells[(3, 3)]
        assert custom.is_custom and custom.node_type == "medium"
        assert custom.css_class == "interiorGuideMedium"

    @pytest.mark.asyncio
    async def test_trees_of_other_blocks_not_shown(
        self, node_type_service, position_service, sample_layout, sample_tree_type
    ):
        await position_service.place(sample_layout["id"], 1, 12, 12, tree_id=sample_tree_type["id"])

        cells = await node_type_service.block_cells(sample_layout["id"], 0)

        assert not any(c.occupied for c in cells)

    @pytest.mark.asyncio
    async def test_unknown_block(self, node_type_service, sample_layout):
        with pytest.raises(InvalidCoordinatesError):
            await node_type_service.block_cells(sample_layout["id"], 9)
