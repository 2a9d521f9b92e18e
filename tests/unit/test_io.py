"""Unit tests for the Font I/O layer.

Tests for FontReader, AtlasWriter, and converter functions.
"""

import json
import struct
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

import pytest
from fontTools.pens.cu2quPen import Cu2QuPen

from glyphrays.atlas import GlyphAtlas, GlyphAttribute
from glyphrays.core.processor import EncodedGlyph
from glyphrays.domain import Curve, FillRule, Point
from glyphrays.exceptions import FontSaveError, GlyphNotFoundError
from glyphrays.io.converter import ContourPen, contour_bounds, domain_glyph_to_render_data
from glyphrays.io.reader import FontReader
from glyphrays.io.writer import AtlasWriter


class TestFontReader:
    """Tests for FontReader class."""

    def test_init(self):
        """Test FontReader initialization."""
        path = Path("test.ttf")
        reader = FontReader(path)
        assert reader._font_path == path
        assert reader._font is None

    def test_load_nonexistent_file(self):
        """Test loading a nonexistent file raises FileNotFoundError."""
        reader = FontReader(Path("nonexistent.ttf"))
        with pytest.raises(FileNotFoundError):
            reader.load()

    def test_format_before_load(self):
        """Test accessing format before loading raises RuntimeError."""
        reader = FontReader(Path("test.ttf"))
        with pytest.raises(RuntimeError, match="Font not loaded"):
            _ = reader.format

    def test_units_per_em_before_load(self):
        """Test accessing units_per_em before loading raises RuntimeError."""
        reader = FontReader(Path("test.ttf"))
        with pytest.raises(RuntimeError, match="Font not loaded"):
            _ = reader.units_per_em

    def test_iter_glyphs_before_load(self):
        """Test iterating glyphs before loading raises RuntimeError."""
        reader = FontReader(Path("test.ttf"))
        with pytest.raises(RuntimeError, match="Font not loaded"):
            list(reader.iter_glyphs())

    @patch("glyphrays.io.reader.TTFont")
    @patch.object(Path, "exists", return_value=True)
    def test_format_opentype(self, _mock_exists, mock_ttfont):  # noqa: ARG002
        """Test format property for CFF-flavoured fonts."""
        mock_font = MagicMock()
        mock_font.__contains__ = Mock(side_effect=lambda x: x == "CFF ")
        mock_ttfont.return_value = mock_font

        reader = FontReader(Path("test.otf"))
        reader.load()

        assert reader.format == "OpenType"

    def test_font_properties(self, test_font_path):
        """Test properties of a loaded TrueType font."""
        with FontReader(test_font_path) as reader:
            assert reader.format == "TrueType"
            assert reader.units_per_em == 1000
            assert reader.glyph_count == 4

    def test_iter_glyphs_in_font_order(self, test_font_path):
        """Test glyphs come out in glyph order."""
        with FontReader(test_font_path) as reader:
            names = [glyph.name for glyph in reader.iter_glyphs()]
        assert names == [".notdef", "space", "A", "O"]

    def test_line_glyph(self, test_font_path):
        """Test a polygon glyph becomes a closed contour of lines."""
        with FontReader(test_font_path) as reader:
            glyph = reader.get_glyph("A")

        assert glyph.metadata.unicode == 65
        assert glyph.metadata.advance_width == 600
        assert glyph.bounds == (0, 0, 500, 700)
        assert len(glyph.contours) == 1
        contour = glyph.contours[0]
        assert len(contour) == 3
        assert not any(curve.is_quadratic for curve in contour)
        assert contour[-1].end == contour[0].start

    def test_quadratic_glyph(self, test_font_path):
        """Test quadratic outlines keep their control points."""
        with FontReader(test_font_path) as reader:
            glyph = reader.get_glyph("O")

        assert len(glyph.contours) == 2
        assert glyph.curve_count == 8
        assert all(curve.is_quadratic for contour in glyph.contours for curve in contour)
        assert glyph.bounds == (0, 0, 200, 200)

    def test_empty_glyph(self, test_font_path):
        """Test glyphs without outline are empty."""
        with FontReader(test_font_path) as reader:
            glyph = reader.get_glyph("space")
        assert glyph.is_empty()
        assert glyph.bounds is None

    def test_missing_glyph(self, test_font_path):
        """Test unknown glyph names raise GlyphNotFoundError."""
        with FontReader(test_font_path) as reader:
            with pytest.raises(GlyphNotFoundError):
                reader.get_glyph("Z")

    def test_glyph_for_char(self, test_font_path):
        """Test looking glyphs up by character."""
        with FontReader(test_font_path) as reader:
            assert reader.get_glyph_for_char("O").name == "O"
            with pytest.raises(GlyphNotFoundError):
                reader.get_glyph_for_char("Z")
            with pytest.raises(GlyphNotFoundError):
                reader.get_glyph_for_char("AO")


class TestContourPen:
    """Tests for ContourPen."""

    def test_lines_are_rounded_and_closed(self):
        """Test coordinates are rounded and the contour is closed."""
        pen = ContourPen()
        pen.moveTo((0, 0))
        pen.lineTo((0.2, 10.4))
        pen.lineTo((10, 10))
        pen.closePath()

        assert pen.contours == [
            [
                Curve(start=Point(0, 0), end=Point(0, 10)),
                Curve(start=Point(0, 10), end=Point(10, 10)),
                Curve(start=Point(10, 10), end=Point(0, 0)),
            ]
        ]

    def test_no_closing_line_when_back_at_start(self):
        """Test a contour ending at its start gets no extra edge."""
        pen = ContourPen()
        pen.moveTo((0, 0))
        pen.qCurveTo((5, 20), (10, 0))
        pen.lineTo((0, 0))
        pen.closePath()
        assert len(pen.contours[0]) == 2

    def test_open_path_is_closed(self):
        """Test endPath closes the contour as well."""
        pen = ContourPen()
        pen.moveTo((0, 0))
        pen.lineTo((10, 0))
        pen.lineTo((10, 10))
        pen.endPath()
        assert pen.contours[0][-1] == Curve(start=Point(10, 10), end=Point(0, 0))

    def test_implied_on_curve_points(self):
        """Test consecutive off-curve points are split at their midpoint."""
        pen = ContourPen()
        pen.moveTo((0, 0))
        pen.qCurveTo((4, 10), (10, 10), (14, 0))
        pen.closePath()

        first, second, closing = pen.contours[0]
        assert first == Curve(start=Point(0, 0), control=Point(4, 10), end=Point(7, 10))
        assert second == Curve(start=Point(7, 10), control=Point(10, 10), end=Point(14, 0))
        assert closing == Curve(start=Point(14, 0), end=Point(0, 0))

    def test_cubic_rejected(self):
        """Test cubic segments must be converted first."""
        pen = ContourPen()
        pen.moveTo((0, 0))
        with pytest.raises(NotImplementedError):
            pen.curveTo((0, 50), (50, 100), (100, 100))

    def test_cubic_through_cu2qu(self):
        """Test cubic outlines become closed lines and quadratics."""
        pen = ContourPen()
        cu2qu = Cu2QuPen(pen, 1.0, reverse_direction=True)
        cu2qu.moveTo((0, 0))
        cu2qu.curveTo((0, 50), (50, 100), (100, 100))
        cu2qu.lineTo((100, 0))
        cu2qu.closePath()

        assert len(pen.contours) == 1
        contour = pen.contours[0]
        assert any(curve.is_quadratic for curve in contour)
        assert contour[-1].end == contour[0].start
        for previous, curve in zip(contour, contour[1:]):
            assert previous.end == curve.start


class TestConverter:
    """Tests for converter helpers."""

    def test_contour_bounds(self):
        """Test bounds include control points."""
        contours = [[Curve(start=Point(0, 0), control=Point(5, 20), end=Point(10, 0))]]
        assert contour_bounds(contours) == (0, 0, 10, 20)
        assert contour_bounds([]) is None

    def test_domain_glyph_to_render_data(self, test_font_path):
        """Test a domain glyph feeds its contours unchanged."""
        with FontReader(test_font_path) as reader:
            glyph = reader.get_glyph("O")

        render_data = domain_glyph_to_render_data(glyph)
        assert render_data.contours == glyph.contours
        assert not render_data.is_finalized


class TestAtlasWriter:
    """Tests for AtlasWriter class."""

    def test_get_atlas_path(self):
        """Test atlas path generation."""
        assert AtlasWriter.get_atlas_path(Path("font.ttf")) == Path("font.rays")
        assert AtlasWriter.get_atlas_path(Path("dir/Roboto-Regular.otf")) == Path(
            "dir/Roboto-Regular.rays"
        )

    def test_index_path(self):
        """Test the index sits next to the store."""
        writer = AtlasWriter(Path("out/font.rays"))
        assert writer.output_path == Path("out/font.rays")
        assert writer.index_path == Path("out/font.rays.json")

    def test_write(self, tmp_path):
        """Test the store and index files."""
        atlas = GlyphAtlas(capacity=16)
        location = atlas.allocate_data([1, 2, 3])
        attributes = (
            GlyphAttribute((0, 10, 0, 10)),
            GlyphAttribute((0, 0, 20, 20)),
            GlyphAttribute.constant(10),
            GlyphAttribute.constant(20),
            GlyphAttribute.constant(location),
        )
        entry = EncodedGlyph(
            name="A",
            unicode=65,
            fill_rule=FillRule.NONZERO,
            min_point=(5, -3),
            attributes=attributes,
        )

        writer = AtlasWriter(tmp_path / "font.rays")
        writer.write(atlas, [entry], upm=1000)

        assert writer.output_path.read_bytes() == struct.pack("<3I", 1, 2, 3)
        index = json.loads(writer.index_path.read_text(encoding="utf-8"))
        assert index["units_per_em"] == 1000
        assert index["word_count"] == 3
        assert index["attribute_names"] == [
            "glyph_coordinate_x",
            "glyph_coordinate_y",
            "glyph_width",
            "glyph_height",
            "glyph_offset",
        ]
        assert index["glyphs"] == [
            {
                "name": "A",
                "unicode": 65,
                "fill_rule": "nonzero",
                "min_point": [5, -3],
                "attributes": [[0, 10, 0, 10], [0, 0, 20, 20], [10] * 4, [20] * 4, [0] * 4],
            }
        ]

    def test_write_missing_directory(self, tmp_path):
        """Test write failures are reported as FontSaveError."""
        writer = AtlasWriter(tmp_path / "missing" / "font.rays")
        with pytest.raises(FontSaveError) as exc_info:
            writer.write(GlyphAtlas(capacity=4), [], upm=1000)
        assert exc_info.value.path == str(tmp_path / "missing" / "font.rays")
