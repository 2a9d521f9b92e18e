"""Domain models for glyphrays.

This module contains the core domain models representing glyph outlines and
the boxes of the encoding hierarchy. All models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Serializable for inter-process communication (parallel processing)
- Independent of fonttools implementation details

Key classes:
- Point: An integer 2D point
- Curve: A line or quadratic edge of a contour
- Box: An axis-aligned box of the hierarchy
- Glyph: A single glyph with its contours
"""

from glyphrays.domain.box import Box, SplitAxis
from glyphrays.domain.curve import Curve, CurveDegree, FillRule, Point
from glyphrays.domain.glyph import Glyph, GlyphMetadata

__all__: list[str] = [
    # Enums
    "CurveDegree",
    "FillRule",
    "SplitAxis",
    # Core types
    "Point",
    "Curve",
    "Box",
    "GlyphMetadata",
    "Glyph",
]
