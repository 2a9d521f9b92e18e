"""Restricted-rays render data for a single glyph.

RestrictedRaysGlyph owns the whole build of one glyph: it accumulates the
contours, and finalize() builds the box hierarchy and packs it. The packed
block is handed to an atlas by upload_to_atlas(), which reports capacity
problems (a field overflowing its bits, or a full atlas) as
ReturnCode.FAILURE rather than raising.

Example:
    glyph = RestrictedRaysGlyph()
    glyph.start_contour((0, 0))
    glyph.add_line((0, 10))
    glyph.add_line((10, 10))
    glyph.add_line((0, 0))
    glyph.finalize(FillRule.NONZERO, (0, 0), (10, 10), units_per_em=32)

    attributes: list[GlyphAttribute] = []
    if glyph.upload_to_atlas(atlas, attributes):
        ...
"""

from dataclasses import dataclass

import structlog

from glyphrays.atlas.store import (
    AtlasSink,
    GlyphAttribute,
    GlyphAttributeIndex,
    ReturnCode,
)
from glyphrays.config import HierarchyConfig, default_hierarchy_config
from glyphrays.core.accumulator import GeometryAccumulator, PointLike, as_point
from glyphrays.core.hierarchy import Hierarchy, HierarchyBuilder
from glyphrays.core.packing import PackedGlyph, Packer
from glyphrays.domain import Box, Curve, FillRule, Point
from glyphrays.exceptions import AtlasError, BuildStateError, GeometryError, PackingError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class _BuiltGlyph:
    fill_rule: FillRule
    min_point: Point
    max_point: Point
    units_per_em: float
    config: HierarchyConfig
    edges: list[Curve]
    hierarchy: Hierarchy
    packed: PackedGlyph | None
    packing_error: PackingError | None


class RestrictedRaysGlyph:
    """Builds and packs the restricted-rays data of one glyph.

    Geometry is added with start_contour(), add_line() and add_quadratic();
    every contour must end at its start point. finalize() may be called once,
    after which the geometry can no longer change.
    """

    def __init__(self) -> None:
        self._accumulator = GeometryAccumulator()
        self._built: _BuiltGlyph | None = None

    def start_contour(self, point: PointLike) -> None:
        """Start a contour; the previous contour must already be closed."""
        self._accumulator.start_contour(point)

    def add_line(self, point: PointLike) -> None:
        """Add a line segment from the current point to point."""
        self._accumulator.add_line(point)

    def add_quadratic(self, control: PointLike, point: PointLike) -> None:
        """Add a quadratic curve from the current point to point."""
        self._accumulator.add_quadratic(control, point)

    def finalize(
        self,
        fill_rule: FillRule,
        min_point: PointLike,
        max_point: PointLike,
        units_per_em: float,
        config: HierarchyConfig | None = None,
    ) -> None:
        """Build and pack the glyph.

        Args:
            fill_rule: Fill rule to render the glyph with
            min_point: Minimum corner of the glyph's bounding box
            max_point: Maximum corner of the glyph's bounding box
            units_per_em: Units per EM of the glyph's font
            config: Hierarchy policy; the process-wide default is
                snapshotted when None

        Raises:
            BuildStateError: If finalize() was already called
            ContourError: If a contour is not closed
            GeometryError: If max_point is below min_point
        """
        if self._built is not None:
            raise BuildStateError("finalize() may only be called once")
        if config is None:
            config = default_hierarchy_config()

        lo = as_point(min_point)
        hi = as_point(max_point)
        if hi.x < lo.x or hi.y < lo.y:
            raise GeometryError(f"Invalid bounding box: min {lo} max {hi}")

        edges = [curve.translated(-lo.x, -lo.y) for curve in self._accumulator.seal()]
        width = hi.x - lo.x
        height = hi.y - lo.y

        hierarchy = HierarchyBuilder(config, units_per_em).build(
            edges, Box(0, 0, width, height)
        )

        packed: PackedGlyph | None = None
        packing_error: PackingError | None = None
        try:
            packed = Packer().pack(hierarchy, width=width, height=height)
        except PackingError as e:
            logger.warning(
                "Glyph cannot be packed",
                field=e.field,
                value=e.value,
                numbits=e.numbits,
                curves=len(edges),
            )
            packing_error = e

        self._built = _BuiltGlyph(
            fill_rule=fill_rule,
            min_point=lo,
            max_point=hi,
            units_per_em=units_per_em,
            config=config,
            edges=edges,
            hierarchy=hierarchy,
            packed=packed,
            packing_error=packing_error,
        )

    def upload_to_atlas(
        self,
        sink: AtlasSink,
        attributes: list[GlyphAttribute],
    ) -> ReturnCode:
        """Hand the packed data to an atlas and fill in the glyph attributes.

        On failure neither the sink nor attributes are modified.

        Args:
            sink: Destination store
            attributes: Replaced by the GLYPH_NUM_ATTRIBUTES attribute values
                on success

        Returns:
            ReturnCode.SUCCESS, or ReturnCode.FAILURE if the glyph could not
            be packed or the sink rejected it

        Raises:
            BuildStateError: If finalize() has not been called
        """
        built = self._require_built()
        if built.packed is None:
            return ReturnCode.FAILURE

        try:
            location = sink.allocate_data(built.packed.words)
        except AtlasError as e:
            logger.info("Atlas rejected glyph data", reason=str(e), words=built.packed.size)
            return ReturnCode.FAILURE

        w, h = built.packed.width, built.packed.height
        values = {
            GlyphAttributeIndex.GLYPH_COORDINATE_X: GlyphAttribute((0, w, 0, w)),
            GlyphAttributeIndex.GLYPH_COORDINATE_Y: GlyphAttribute((0, 0, h, h)),
            GlyphAttributeIndex.GLYPH_WIDTH: GlyphAttribute.constant(w),
            GlyphAttributeIndex.GLYPH_HEIGHT: GlyphAttribute.constant(h),
            GlyphAttributeIndex.GLYPH_OFFSET: GlyphAttribute.constant(location),
        }
        attributes[:] = [values[index] for index in GlyphAttributeIndex]
        return ReturnCode.SUCCESS

    @property
    def is_finalized(self) -> bool:
        return self._built is not None

    @property
    def contours(self) -> list[list[Curve]]:
        """Contours as added, in font units."""
        return self._accumulator.contours

    @property
    def fill_rule(self) -> FillRule:
        return self._require_built().fill_rule

    @property
    def config(self) -> HierarchyConfig:
        """Configuration snapshot the glyph was built with."""
        return self._require_built().config

    @property
    def bounds(self) -> tuple[Point, Point]:
        built = self._require_built()
        return (built.min_point, built.max_point)

    @property
    def edges(self) -> list[Curve]:
        """Every curve of the glyph in glyph-local coordinates."""
        return list(self._require_built().edges)

    @property
    def hierarchy(self) -> Hierarchy:
        return self._require_built().hierarchy

    @property
    def packed(self) -> PackedGlyph | None:
        """Packed data, or None if a value overflowed its bit field."""
        return self._require_built().packed

    @property
    def packing_error(self) -> PackingError | None:
        return self._require_built().packing_error

    def _require_built(self) -> _BuiltGlyph:
        if self._built is None:
            raise BuildStateError("Glyph has not been finalized")
        return self._built
