"""Tests for box hierarchy construction."""

import pytest

from glyphrays.config import HierarchyConfig
from glyphrays.core import HierarchyBuilder, HierarchyLeaf, HierarchyNode, winding_at
from glyphrays.core.hierarchy import DELTA_DIV_FACTOR, SAMPLE_DELTA_CANDIDATES, sample_point
from glyphrays.core.winding import point_on_curve
from glyphrays.domain import Box, Curve, FillRule, Point, SplitAxis


def polygon(*points: tuple[int, int]) -> list[Curve]:
    pts = [Point(x, y) for x, y in points]
    return [Curve(start=pts[i], end=pts[(i + 1) % len(pts)]) for i in range(len(pts))]


TRIANGLE = polygon((0, 0), (0, 10), (10, 10))

# 20 x 10 rectangle whose long sides are made of two edges each.
SIX_EDGES = polygon((0, 0), (0, 10), (10, 10), (20, 10), (20, 0), (10, 0))


def build(edges: list[Curve], box: Box, units_per_em: float = 32, **config: object):
    return HierarchyBuilder(HierarchyConfig(**config), units_per_em).build(edges, box)


@pytest.fixture
def ring_hierarchy(ring_glyph):
    ring_glyph.finalize(FillRule.NONZERO, (0, 0), (200, 200), units_per_em=64)
    return ring_glyph.hierarchy


class TestSamplePoint:
    """Tests for sample_point."""

    def test_center(self) -> None:
        assert sample_point(Box(0, 0, 10, 10), (128, 128)) == (5, 5)

    def test_offset_box(self) -> None:
        x, y = sample_point(Box(10, 20, 30, 60), (64, 192))
        assert (x, y) == (15, 50)

    def test_candidates_are_inside(self) -> None:
        assert SAMPLE_DELTA_CANDIDATES[0] == (128, 128)
        for dx, dy in SAMPLE_DELTA_CANDIDATES:
            assert 0 < dx < DELTA_DIV_FACTOR
            assert 0 < dy < DELTA_DIV_FACTOR


class TestTermination:
    """Tests for the leaf conditions."""

    def test_few_curves_make_a_leaf(self) -> None:
        hierarchy = build(TRIANGLE, Box(0, 0, 10, 10), max_recursion=2, split_thresh=4)

        assert len(hierarchy.records) == 1
        leaf = hierarchy.root
        assert isinstance(leaf, HierarchyLeaf)
        assert leaf.curves == (0, 1, 2)
        assert leaf.depth == 0

    def test_zero_recursion_makes_a_single_leaf(self) -> None:
        hierarchy = build(SIX_EDGES, Box(0, 0, 20, 10), max_recursion=0, split_thresh=0)

        assert len(hierarchy.records) == 1
        assert hierarchy.root.curves == tuple(range(6))

    def test_depth_cap(self, ring_glyph) -> None:
        ring_glyph.finalize(
            FillRule.NONZERO,
            (0, 0),
            (200, 200),
            units_per_em=64,
            config=HierarchyConfig(max_recursion=3, split_thresh=0),
        )
        hierarchy = ring_glyph.hierarchy
        assert hierarchy.max_depth == 3
        assert all(leaf.depth == 3 for leaf in hierarchy.leaves)
        assert len(hierarchy.leaves) == 8

    def test_pixel_size_floor(self) -> None:
        edges = polygon(*[(x, 0) for x in range(0, 100, 10)], (100, 0), (100, 50), (0, 50))
        # 2048 / 32 = 64 units per pixel; the 50 unit side is below one pixel.
        hierarchy = build(edges, Box(0, 0, 100, 50), units_per_em=2048, split_thresh=0)
        assert len(hierarchy.records) == 1

        hierarchy = build(edges, Box(0, 0, 100, 50), units_per_em=32, split_thresh=0)
        assert len(hierarchy.records) > 1

    def test_box_too_small_to_split(self) -> None:
        edges = polygon((0, 0), (0, 1), (1, 1), (1, 0)) * 2
        hierarchy = build(edges, Box(0, 0, 1, 1), units_per_em=1, split_thresh=0)
        assert len(hierarchy.records) == 1


class TestSplitting:
    """Tests for node splitting and curve assignment."""

    def test_forced_split(self) -> None:
        hierarchy = build(SIX_EDGES, Box(0, 0, 20, 10), max_recursion=1, split_thresh=1)

        assert len(hierarchy.records) == 3
        root, first, second = hierarchy.records
        assert isinstance(root, HierarchyNode)
        assert root.axis == SplitAxis.X
        assert (root.child0, root.child1) == (1, 2)

        assert first.box == Box(0, 0, 10, 10)
        assert second.box == Box(10, 0, 20, 10)
        # Edges 2 and 4 start or end on x = 10 and land in both children.
        assert first.curves == (0, 1, 2, 4, 5)
        assert second.curves == (1, 2, 3, 4, 5)
        assert first.winding == 1
        assert second.winding == 1

    def test_tall_box_splits_along_y(self) -> None:
        edges = polygon((0, 0), (0, 10), (0, 20), (10, 20), (10, 10), (10, 0))
        hierarchy = build(edges, Box(0, 0, 10, 20), max_recursion=1, split_thresh=1)
        assert hierarchy.root.axis == SplitAxis.Y

    def test_preorder_arena(self, ring_hierarchy) -> None:
        records = ring_hierarchy.records
        assert isinstance(records[0], HierarchyNode)
        for index, record in enumerate(records):
            if isinstance(record, HierarchyNode):
                assert record.child0 == index + 1
                assert record.child1 > record.child0
                box0, box1 = record.box.split(record.axis)
                assert records[record.child0].box == box0
                assert records[record.child1].box == box1

    def test_leaves_tile_the_root_box(self, ring_hierarchy) -> None:
        area = sum(leaf.box.width * leaf.box.height for leaf in ring_hierarchy.leaves)
        assert area == 200 * 200

    def test_leaf_lists_every_curve_within_a_pixel(self, ring_hierarchy) -> None:
        # 64 units per EM at the default 32 pixel render size: 2 units per pixel.
        edges = ring_hierarchy.edges
        for leaf in ring_hierarchy.leaves:
            near = {
                i
                for i, curve in enumerate(edges)
                if leaf.box.intersects(curve.control_bounds(), margin=2)
            }
            assert set(leaf.curves) == near

    def test_depth_bounded_by_config(self, ring_hierarchy) -> None:
        assert 0 < ring_hierarchy.max_depth <= HierarchyConfig().max_recursion


class TestCurveMargin:
    """Tests for listing curves that lie just outside a box."""

    # 1000 unit square with a bar whose left edge sits one unit right of the split.
    SQUARE_AND_BAR = polygon((0, 0), (0, 1000), (1000, 1000), (1000, 0)) + polygon(
        (501, 200), (501, 800), (900, 800), (900, 200)
    )

    def test_curve_within_a_pixel_is_listed(self) -> None:
        # 1000 / 32 = 31.25 units per pixel.
        hierarchy = build(
            self.SQUARE_AND_BAR,
            Box(0, 0, 1000, 1000),
            units_per_em=1000,
            max_recursion=1,
            split_thresh=1,
        )
        _, left, right = hierarchy.records
        assert left.box == Box(0, 0, 500, 1000)
        assert left.curves == (0, 1, 3, 4, 5, 7)
        assert right.curves == (1, 2, 3, 4, 5, 6, 7)

    def test_margin_follows_render_size(self) -> None:
        # 1000 / 10000 = 0.1 units per pixel leaves the bar out of the left box.
        hierarchy = build(
            self.SQUARE_AND_BAR,
            Box(0, 0, 1000, 1000),
            units_per_em=1000,
            max_recursion=1,
            split_thresh=1,
            expected_min_render_size=10000,
        )
        _, left, _ = hierarchy.records
        assert left.curves == (0, 1, 3)

    def test_curves_beyond_the_margin_are_left_out(self) -> None:
        edges = polygon((0, 0), (0, 10), (10, 10), (10, 0)) + polygon(
            (40, 0), (40, 10), (50, 10), (50, 0)
        )
        hierarchy = build(edges, Box(0, 0, 10, 10), max_recursion=0)
        assert hierarchy.root.curves == (0, 1, 2, 3)


class TestSamples:
    """Tests for leaf winding samples."""

    def test_sample_avoids_curve(self) -> None:
        # The box center (5, 5) lies on the diagonal edge.
        hierarchy = build(TRIANGLE, Box(0, 0, 10, 10))
        leaf = hierarchy.root
        assert leaf.delta == (96, 160)
        assert leaf.winding == 1

    def test_no_candidate_off_the_curves(self) -> None:
        # Horizontal lines through the y of every candidate cover them all.
        rows = sorted({dy for _, dy in SAMPLE_DELTA_CANDIDATES})
        edges = [Curve(start=Point(0, y), end=Point(256, y)) for y in rows]
        hierarchy = build(edges, Box(0, 0, 256, 256), max_recursion=0)

        leaf = hierarchy.root
        assert leaf.curves == tuple(range(len(rows)))
        assert leaf.delta == SAMPLE_DELTA_CANDIDATES[0]
        assert leaf.winding == 0

    def test_samples_are_inside_and_consistent(self, ring_hierarchy) -> None:
        edges = ring_hierarchy.edges
        for leaf in ring_hierarchy.leaves:
            x, y = leaf.sample
            assert leaf.box.min_x < x < leaf.box.max_x
            assert leaf.box.min_y < y < leaf.box.max_y
            assert not any(point_on_curve(edges[i], leaf.sample) for i in leaf.curves)
            assert leaf.winding == winding_at(leaf.sample, edges)

    def test_ring_windings(self, ring_hierarchy) -> None:
        windings = {leaf.winding for leaf in ring_hierarchy.leaves}
        assert windings <= {0, 1}
        assert windings == {0, 1}
