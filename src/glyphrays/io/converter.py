"""Converters between fonttools glyphs and domain models.

This module turns a fonttools glyph outline into closed contours of integer
lines and quadratic curves, and feeds domain glyphs to the encoder.
"""

from typing import Any

from fontTools.misc.arrayTools import calcIntBounds
from fontTools.pens.basePen import BasePen
from fontTools.pens.cu2quPen import Cu2QuPen
from fontTools.ttLib import TTFont

from glyphrays.core.render_data import RestrictedRaysGlyph
from glyphrays.domain import Curve, Point
from glyphrays.domain.glyph import Glyph, GlyphMetadata

# Maximum error, in font units, when approximating cubic curves by quadratics.
CUBIC_APPROXIMATION_ERROR = 1.0


def _round_point(pt: tuple[float, float]) -> Point:
    return Point(round(pt[0]), round(pt[1]))


class ContourPen(BasePen):
    """Pen collecting closed contours of integer lines and quadratics.

    Coordinates are rounded to integers. Every contour is closed with a
    line back to its start point if the outline does not end there; open
    paths are closed the same way. Cubic segments are rejected: draw
    through a Cu2QuPen first.

    Example:
        pen = ContourPen(font.getGlyphSet())
        glyph_set["A"].draw(pen)
        contours = pen.contours
    """

    def __init__(self, glyphSet: Any = None) -> None:
        super().__init__(glyphSet)
        self.contours: list[list[Curve]] = []
        self._start: Point | None = None
        self._current: Point | None = None

    def _moveTo(self, pt: tuple[float, float]) -> None:
        self._start = self._current = _round_point(pt)
        self.contours.append([])

    def _lineTo(self, pt: tuple[float, float]) -> None:
        end = _round_point(pt)
        self._append(Curve(start=self._current, end=end))  # type: ignore[arg-type]

    def _qCurveToOne(self, pt1: tuple[float, float], pt2: tuple[float, float]) -> None:
        end = _round_point(pt2)
        self._append(
            Curve(start=self._current, control=_round_point(pt1), end=end)  # type: ignore[arg-type]
        )

    def _curveToOne(self, pt1: Any, pt2: Any, pt3: Any) -> None:
        raise NotImplementedError("Cubic curves must be converted to quadratics first")

    def _closePath(self) -> None:
        if self._current is not None and self._current != self._start:
            self._append(Curve(start=self._current, end=self._start))  # type: ignore[arg-type]
        self._start = self._current = None

    def _endPath(self) -> None:
        self._closePath()

    def _append(self, curve: Curve) -> None:
        self.contours[-1].append(curve)
        self._current = curve.end


def fonttools_glyph_to_domain(
    name: str,
    fonttools_glyph: Any,
    font: TTFont
) -> Glyph:
    """Convert fonttools glyph to domain Glyph model.

    TrueType outlines are used as is. CFF outlines are approximated by
    quadratic curves with Cu2QuPen, reversing their direction so that
    outer contours wind clockwise as in TrueType.

    Args:
        name: Name of the glyph
        fonttools_glyph: The fonttools glyph object from GlyphSet
        font: The TTFont object for accessing metadata

    Returns:
        Domain Glyph model
    """
    pen = ContourPen(font.getGlyphSet())
    is_cff = "CFF " in font or "CFF2" in font
    if is_cff:
        fonttools_glyph.draw(
            Cu2QuPen(pen, CUBIC_APPROXIMATION_ERROR, reverse_direction=True)
        )
    else:
        fonttools_glyph.draw(pen)

    contours = [contour for contour in pen.contours if contour]
    metadata = _extract_glyph_metadata(name, font)
    glyph = Glyph(metadata=metadata, contours=contours, bounds=contour_bounds(contours))

    if hasattr(fonttools_glyph, "_glyph"):
        raw_glyph = fonttools_glyph._glyph
        is_composite = hasattr(raw_glyph, "isComposite") and raw_glyph.isComposite()
        glyph._is_composite = is_composite
    else:
        glyph._is_composite = False

    return glyph


def contour_bounds(contours: list[list[Curve]]) -> tuple[int, int, int, int] | None:
    """Integer bounding box of every point of the contours.

    Returns:
        Tuple of (min_x, min_y, max_x, max_y), None if there are no curves
    """
    points = [p.to_tuple() for contour in contours for curve in contour for p in curve.points()]
    if not points:
        return None
    return calcIntBounds(points)


def domain_glyph_to_render_data(glyph: Glyph) -> RestrictedRaysGlyph:
    """Feed the contours of a domain glyph to a new RestrictedRaysGlyph.

    The returned object is not finalized.
    """
    render_data = RestrictedRaysGlyph()
    for contour in glyph.contours:
        if not contour:
            continue
        render_data.start_contour(contour[0].start)
        for curve in contour:
            if curve.control is None:
                render_data.add_line(curve.end)
            else:
                render_data.add_quadratic(curve.control, curve.end)
    return render_data


def _extract_glyph_metadata(name: str, font: TTFont) -> GlyphMetadata:
    """Extract glyph metadata from font.

    Args:
        name: Glyph name
        font: The TTFont object

    Returns:
        GlyphMetadata object
    """
    hmtx = font.get("hmtx")
    advance_width = 0
    lsb = 0

    if hmtx and name in hmtx.metrics:
        advance_width, lsb = hmtx.metrics[name]

    cmap = font.getBestCmap()
    unicode_value = None

    if cmap:
        for code_point, glyph_name in cmap.items():
            if glyph_name == name:
                unicode_value = code_point
                break

    return GlyphMetadata(
        name=name,
        unicode=unicode_value,
        advance_width=advance_width,
        left_side_bearing=lsb
    )
