"""Font reader for loading TTF/OTF fonts.

This module provides the FontReader class for loading font files
and extracting glyph outlines into domain models.
"""

from collections.abc import Iterator
from pathlib import Path

from fontTools.ttLib import TTFont

from glyphrays.domain.glyph import Glyph
from glyphrays.exceptions import GlyphNotFoundError
from glyphrays.io.converter import fonttools_glyph_to_domain


class FontReader:
    """Loads TTF/OTF fonts and extracts glyph outlines.

    Example:
        reader = FontReader(Path("font.ttf"))
        reader.load()
        for glyph in reader.iter_glyphs():
            print(glyph.name, glyph.curve_count)
    """

    def __init__(self, font_path: Path) -> None:
        """Initialize the font reader.

        Args:
            font_path: Path to the TTF or OTF font file
        """
        self._font_path = font_path
        self._font: TTFont | None = None

    def load(self) -> None:
        """Load the font file.

        Raises:
            FileNotFoundError: If font file does not exist
            Exception: If font file is invalid or cannot be loaded
        """
        if not self._font_path.exists():
            raise FileNotFoundError(f"Font file not found: {self._font_path}")

        self._font = TTFont(str(self._font_path))

    def _require_font(self) -> TTFont:
        if self._font is None:
            raise RuntimeError("Font not loaded. Call load() first.")
        return self._font

    @property
    def format(self) -> str:
        """Return font format.

        Returns:
            'TrueType' for TTF fonts, 'OpenType' for CFF-flavoured fonts

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        font = self._require_font()
        if "CFF " in font or "CFF2" in font:
            return "OpenType"
        return "TrueType"

    @property
    def units_per_em(self) -> int:
        """Return font's units per em.

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        return self._require_font()["head"].unitsPerEm  # type: ignore[attr-defined]

    @property
    def glyph_count(self) -> int:
        """Return total number of glyphs in the font.

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        return self._require_font()["maxp"].numGlyphs

    def iter_glyphs(self) -> Iterator[Glyph]:
        """Iterate over all glyphs, converting to domain model.

        Yields glyphs in the order they appear in the font.

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        font = self._require_font()
        for glyph_name in font.getGlyphOrder():
            yield self.get_glyph(glyph_name)

    def get_glyph(self, name: str) -> Glyph:
        """Get a specific glyph by name.

        Args:
            name: Name of the glyph to retrieve

        Returns:
            Glyph domain model

        Raises:
            RuntimeError: If font has not been loaded yet
            GlyphNotFoundError: If the font has no glyph with that name
        """
        font = self._require_font()
        if name not in font.getGlyphOrder():
            raise GlyphNotFoundError(name)

        glyph_set = font.getGlyphSet()
        return fonttools_glyph_to_domain(
            name=name,
            fonttools_glyph=glyph_set[name],
            font=font
        )

    def get_glyph_for_char(self, char: str) -> Glyph:
        """Get the glyph mapped to a character by the font's cmap.

        Raises:
            GlyphNotFoundError: If the character is not mapped
        """
        cmap = self._require_font().getBestCmap() or {}
        if len(char) != 1 or ord(char) not in cmap:
            raise GlyphNotFoundError(char)
        return self.get_glyph(cmap[ord(char)])

    def close(self) -> None:
        """Close the font file and free resources."""
        if self._font is not None:
            self._font.close()
            self._font = None

    def __enter__(self) -> "FontReader":
        """Context manager entry."""
        self.load()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
