"""Shared fixtures for glyphrays tests."""

from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from glyphrays.config import reset_defaults
from glyphrays.core import RestrictedRaysGlyph

Polygon = Sequence[tuple[int, int]]

# Clockwise ring: four quadratics outside, four quadratics around a hole.
RING_OUTER = [
    ((0, 200), (100, 200)),
    ((200, 200), (200, 100)),
    ((200, 0), (100, 0)),
    ((0, 0), (0, 100)),
]
RING_INNER = [
    ((50, 50), (100, 50)),
    ((150, 50), (150, 100)),
    ((150, 150), (100, 150)),
    ((50, 150), (50, 100)),
]


@pytest.fixture(autouse=True)
def _restore_default_config() -> Iterator[None]:
    """Keep process-wide hierarchy defaults from leaking between tests."""
    reset_defaults()
    yield
    reset_defaults()


def add_polygon(glyph: RestrictedRaysGlyph, points: Polygon) -> None:
    """Add a closed polygon contour to a glyph."""
    glyph.start_contour(points[0])
    for pt in points[1:]:
        glyph.add_line(pt)
    glyph.add_line(points[0])


def add_ring(glyph: RestrictedRaysGlyph) -> None:
    """Add the ring outline (outer contour and hole) to a glyph."""
    glyph.start_contour((0, 100))
    for control, end in RING_OUTER:
        glyph.add_quadratic(control, end)
    glyph.start_contour((50, 100))
    for control, end in RING_INNER:
        glyph.add_quadratic(control, end)


@pytest.fixture
def polygon_glyph() -> Callable[..., RestrictedRaysGlyph]:
    """Factory for unfinalized glyphs made of closed polygons."""

    def make(*polygons: Polygon) -> RestrictedRaysGlyph:
        glyph = RestrictedRaysGlyph()
        for polygon in polygons:
            add_polygon(glyph, polygon)
        return glyph

    return make


@pytest.fixture
def make_ring_glyph() -> Callable[[], RestrictedRaysGlyph]:
    """Factory for unfinalized ring glyphs with bounds (0, 0) - (200, 200)."""

    def make() -> RestrictedRaysGlyph:
        glyph = RestrictedRaysGlyph()
        add_ring(glyph)
        return glyph

    return make


@pytest.fixture
def ring_glyph(make_ring_glyph) -> RestrictedRaysGlyph:
    """Unfinalized ring glyph with bounds (0, 0) - (200, 200)."""
    return make_ring_glyph()


def _draw_ring(pen: TTGlyphPen) -> None:
    pen.moveTo((0, 100))
    for control, end in RING_OUTER:
        pen.qCurveTo(control, end)
    pen.closePath()
    pen.moveTo((50, 100))
    for control, end in RING_INNER:
        pen.qCurveTo(control, end)
    pen.closePath()


def _draw_polygon(pen: TTGlyphPen, points: Polygon) -> None:
    pen.moveTo(points[0])
    for pt in points[1:]:
        pen.lineTo(pt)
    pen.closePath()


@pytest.fixture
def test_font_path(tmp_path: Path) -> Path:
    """TrueType font with .notdef, space (empty), A (triangle) and O (ring)."""
    glyph_order = [".notdef", "space", "A", "O"]
    builder = FontBuilder(1000, isTTF=True)
    builder.setupGlyphOrder(glyph_order)
    builder.setupCharacterMap({32: "space", 65: "A", 79: "O"})

    glyphs = {}
    pen = TTGlyphPen(None)
    _draw_polygon(pen, [(50, 0), (50, 700), (450, 700), (450, 0)])
    glyphs[".notdef"] = pen.glyph()

    glyphs["space"] = TTGlyphPen(None).glyph()

    pen = TTGlyphPen(None)
    _draw_polygon(pen, [(0, 0), (250, 700), (500, 0)])
    glyphs["A"] = pen.glyph()

    pen = TTGlyphPen(None)
    _draw_ring(pen)
    glyphs["O"] = pen.glyph()

    builder.setupGlyf(glyphs)
    glyf = builder.font["glyf"]
    builder.setupHorizontalMetrics(
        {name: (600, getattr(glyf[name], "xMin", 0)) for name in glyph_order}
    )
    builder.setupHorizontalHeader(ascent=800, descent=-200)
    builder.setupNameTable({"familyName": "RaysTest", "styleName": "Regular"})
    builder.setupOS2(sTypoAscender=800, usWinAscent=800, usWinDescent=200)
    builder.setupPost()

    path = tmp_path / "RaysTest-Regular.ttf"
    builder.save(str(path))
    return path
