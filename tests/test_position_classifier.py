"""
Unit tests for the position classifier.

Tests cover:
- Tier of corners, center, midpoints and quarter points
- Non-square and odd-sized blocks
- Override resolution
- CSS class mapping
"""
import pytest

from farm_market.domain.models import Block, NodeType
from farm_market.services.domain.position_classifier import (
    circle_class,
    classify_position,
    planting_guide_class,
    resolve_node_type,
)


# ============================================================
# Classification Tests
# ============================================================

class TestClassifyPosition:
    """Tests for classify_position on the default 24x24 block."""

    @pytest.mark.parametrize("x,y", [(0, 0), (24, 0), (0, 24), (24, 24)])
    def test_corners_are_big(self, x, y):
        assert classify_position(x, y) == NodeType.BIG

    def test_center_is_center_big(self):
        assert classify_position(12, 12) == NodeType.CENTER_BIG

    @pytest.mark.parametrize("x,y", [(12, 0), (24, 12), (12, 24), (0, 12)])
    def test_edge_midpoints_are_medium(self, x, y):
        assert classify_position(x, y) == NodeType.MEDIUM

    @pytest.mark.parametrize("x,y", [
        (6, 0), (18, 0), (24, 6), (24, 18), (18, 24), (6, 24), (0, 18), (0, 6),
        (6, 12), (18, 12), (12, 6), (12, 18),
    ])
    def test_quarter_points_are_small(self, x, y):
        assert classify_position(x, y) == NodeType.SMALL

    @pytest.mark.parametrize("x,y", [(3, 3), (6, 6), (9, 15), (21, 3), (1, 0)])
    def test_everything_else_is_tiny(self, x, y):
        assert classify_position(x, y) == NodeType.TINY

    def test_rectangular_block(self):
        """Width and height are handled independently."""
        assert classify_position(48, 0, block_width=48, block_height=24) == NodeType.BIG
        assert classify_position(24, 12, block_width=48, block_height=24) == NodeType.CENTER_BIG
        assert classify_position(12, 12, block_width=48, block_height=24) == NodeType.SMALL

    def test_odd_block_has_no_center(self):
        """Midpoints of odd sizes are fractional, so no integer cell matches."""
        assert classify_position(2, 2, block_width=5, block_height=5) == NodeType.TINY
        assert classify_position(5, 5, block_width=5, block_height=5) == NodeType.BIG


# ============================================================
# Override Resolution Tests
# ============================================================

class TestResolveNodeType:
    """Tests for combining overrides with the classifier."""

    def test_without_overrides_uses_classifier(self):
        assert resolve_node_type(0, 12, 12, Block(x=0, y=0)) == "centerBig"

    def test_override_wins(self):
        overrides = {"0-12-12": "tiny"}
        assert resolve_node_type(0, 12, 12, Block(x=0, y=0), overrides) == "tiny"

    def test_override_is_per_block(self):
        overrides = {"1-12-12": "tiny"}
        assert resolve_node_type(0, 12, 12, Block(x=0, y=0), overrides) == "centerBig"

    def test_default_override_is_kept_verbatim(self):
        assert resolve_node_type(0, 0, 0, Block(x=0, y=0), {"0-0-0": "default"}) == "default"


# ============================================================
# Styling Tests
# ============================================================

class TestCssClasses:
    """Tests for the tier to CSS class mapping."""

    def test_circle_classes(self):
        assert circle_class("big") == "treeCircleBig"
        assert circle_class("centerBig") == "treeCircleCenterBig"
        assert circle_class("small") == "treeCircle"

    def test_unknown_tier_draws_tiny(self):
        assert circle_class("default") == "treeCircleTiny"

    def test_planting_guides(self):
        assert planting_guide_class("medium", is_edge=True) == "edgeGuideMedium"
        assert planting_guide_class("small") == "interiorGuide"
        assert planting_guide_class("default") == "interiorGuideTiny"
