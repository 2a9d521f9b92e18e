"""Box hierarchy construction.

The glyph's bounding box is split recursively in half along its longer
side. Every curve whose control-polygon box comes within one pixel of a
child box is handed to that child, so a curve straddling a split line lands
in both children and every leaf lists all curves that could cross it or
the pixels along its border. The pixel is measured at the configured
minimum render size. Each leaf also gets a sample point strictly inside
its box whose winding number is computed against the whole glyph.

The result is a flat arena: records reference their children by index,
parents always come before their children (preorder), and the root is
record 0.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from fractions import Fraction

import structlog

from glyphrays.config import HierarchyConfig
from glyphrays.core.winding import point_on_curve, winding_at
from glyphrays.domain import Box, Curve, SplitAxis

logger = structlog.get_logger(__name__)

# Sample deltas are in units of 1/DELTA_DIV_FACTOR of the box size.
DELTA_DIV_FACTOR = 256

# Candidate sample deltas, tried in order until one is off every curve of the leaf.
SAMPLE_DELTA_CANDIDATES: tuple[tuple[int, int], ...] = (
    (128, 128),
    (96, 160),
    (160, 96),
    (64, 64),
    (192, 192),
    (64, 192),
    (192, 64),
    (112, 144),
    (144, 112),
    (32, 224),
    (224, 32),
    (32, 32),
    (224, 224),
    (77, 179),
    (179, 77),
)


def sample_point(box: Box, delta: tuple[int, int]) -> tuple[Fraction, Fraction]:
    """Position of a winding sample given its quantized delta.

    Args:
        box: Leaf box
        delta: (delta_x, delta_y), each in 1..DELTA_DIV_FACTOR-1

    Returns:
        Exact (x, y) of the sample in glyph-local coordinates
    """
    dx, dy = delta
    return (
        box.min_x + Fraction(dx * box.width, DELTA_DIV_FACTOR),
        box.min_y + Fraction(dy * box.height, DELTA_DIV_FACTOR),
    )


@dataclass(frozen=True, slots=True)
class HierarchyNode:
    """Internal record: a box split in two.

    Attributes:
        box: Box covered by the node
        axis: Coordinate along which the box is split
        child0: Arena index of the child before the split (left or bottom)
        child1: Arena index of the child after the split (right or top)
    """

    box: Box
    axis: SplitAxis
    child0: int
    child1: int


@dataclass(frozen=True, slots=True)
class HierarchyLeaf:
    """Terminal record: curves crossing a box plus one winding sample.

    Attributes:
        box: Box covered by the leaf
        curves: Indices into the glyph's edge list of every curve within one
            pixel of the box
        delta: Quantized sample offset relative to the box
        winding: Winding number at the sample point
        depth: Depth of the leaf (root is 0)
    """

    box: Box
    curves: tuple[int, ...]
    delta: tuple[int, int]
    winding: int
    depth: int

    @property
    def sample(self) -> tuple[Fraction, Fraction]:
        return sample_point(self.box, self.delta)


HierarchyRecord = HierarchyNode | HierarchyLeaf


@dataclass
class Hierarchy:
    """Arena of hierarchy records for one glyph.

    Attributes:
        records: Preorder arena; index 0 is the root
        edges: Complete glyph edge list the curve indices refer to
    """

    records: list[HierarchyRecord]
    edges: list[Curve]

    @property
    def root(self) -> HierarchyRecord:
        return self.records[0]

    @property
    def leaves(self) -> list[HierarchyLeaf]:
        return [r for r in self.records if isinstance(r, HierarchyLeaf)]

    @property
    def nodes(self) -> list[HierarchyNode]:
        return [r for r in self.records if isinstance(r, HierarchyNode)]

    @property
    def max_depth(self) -> int:
        return max((leaf.depth for leaf in self.leaves), default=0)

    @property
    def largest_curve_list(self) -> int:
        return max((len(leaf.curves) for leaf in self.leaves), default=0)


class HierarchyBuilder:
    """Builds the box hierarchy of a glyph.

    A box becomes a leaf when any of these hold:
    - its depth reached config.max_recursion
    - it lists at most config.split_thresh curves
    - its smaller side is under one pixel at config.expected_min_render_size
    - its longer side is too short to split

    Curves are assigned to a box when their control-polygon bounds come
    within one pixel of it.

    Example:
        builder = HierarchyBuilder(HierarchyConfig(), units_per_em=2048)
        hierarchy = builder.build(edges, Box(0, 0, 1200, 1400))
    """

    def __init__(self, config: HierarchyConfig, units_per_em: float) -> None:
        """Initialize the builder.

        Args:
            config: Termination policy snapshot
            units_per_em: Units per EM of the glyph's font
        """
        self.config = config
        self.units_per_em = units_per_em
        self._pixel = config.pixel_size(units_per_em)
        self._edges: list[Curve] = []
        self._bounds: list[tuple[int, int, int, int]] = []
        self._records: list[HierarchyRecord | None] = []

    def build(self, edges: Sequence[Curve], box: Box) -> Hierarchy:
        """Build the hierarchy for a glyph.

        Args:
            edges: Every curve of the glyph, in glyph-local coordinates
            box: Root box in glyph-local coordinates

        Returns:
            Hierarchy arena with the root at index 0
        """
        self._edges = list(edges)
        self._bounds = [curve.control_bounds() for curve in self._edges]
        self._records = []

        root_ids = tuple(
            i for i, b in enumerate(self._bounds) if box.intersects(b, self._pixel)
        )
        self._build(box, root_ids, 0)

        records: list[HierarchyRecord] = [r for r in self._records if r is not None]
        hierarchy = Hierarchy(records=records, edges=self._edges)
        logger.debug(
            "Hierarchy built",
            curves=len(self._edges),
            nodes=len(hierarchy.nodes),
            leaves=len(hierarchy.leaves),
            max_depth=hierarchy.max_depth,
            largest_curve_list=hierarchy.largest_curve_list,
        )
        return hierarchy

    def _is_leaf(self, box: Box, curve_ids: tuple[int, ...], depth: int) -> bool:
        if depth >= self.config.max_recursion:
            return True
        if len(curve_ids) <= self.config.split_thresh:
            return True
        if min(box.width, box.height) < self._pixel:
            return True
        return max(box.width, box.height) < 2

    def _build(self, box: Box, curve_ids: tuple[int, ...], depth: int) -> int:
        index = len(self._records)
        self._records.append(None)

        if self._is_leaf(box, curve_ids, depth):
            self._records[index] = self._make_leaf(box, curve_ids, depth)
            return index

        axis = box.longer_axis()
        box0, box1 = box.split(axis)
        ids0 = tuple(i for i in curve_ids if box0.intersects(self._bounds[i], self._pixel))
        ids1 = tuple(i for i in curve_ids if box1.intersects(self._bounds[i], self._pixel))

        child0 = self._build(box0, ids0, depth + 1)
        child1 = self._build(box1, ids1, depth + 1)
        self._records[index] = HierarchyNode(box=box, axis=axis, child0=child0, child1=child1)
        return index

    def _make_leaf(self, box: Box, curve_ids: tuple[int, ...], depth: int) -> HierarchyLeaf:
        delta = self._choose_delta(box, curve_ids)
        winding = winding_at(sample_point(box, delta), self._edges)
        return HierarchyLeaf(
            box=box,
            curves=curve_ids,
            delta=delta,
            winding=winding,
            depth=depth,
        )

    def _choose_delta(self, box: Box, curve_ids: tuple[int, ...]) -> tuple[int, int]:
        """First candidate delta whose sample point is off every curve of the leaf."""
        local = [self._edges[i] for i in curve_ids]
        for delta in SAMPLE_DELTA_CANDIDATES:
            pt = sample_point(box, delta)
            if not any(point_on_curve(curve, pt) for curve in local):
                return delta
        logger.warning(
            "No sample candidate avoids every curve", box=box, curves=len(local)
        )
        return SAMPLE_DELTA_CANDIDATES[0]
