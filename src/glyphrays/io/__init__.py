"""Font I/O layer for glyphrays.

This module handles reading font files using fonttools and writing the
encoded atlas. It provides a clean abstraction layer between fonttools and
the domain models.

Key responsibilities:
- Load TTF/OTF fonts
- Convert fonttools outlines to closed contours of lines and quadratics
- Write the atlas store and its glyph index

Key classes:
- FontReader: Load fonts and extract glyphs
- AtlasWriter: Save the encoded atlas
"""

from glyphrays.io.reader import FontReader
from glyphrays.io.writer import AtlasWriter

__all__ = [
    "AtlasWriter",
    "FontReader",
]
