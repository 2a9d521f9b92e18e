"""Core encoding algorithms for glyphrays.

This module contains the core algorithms for:

- Geometry accumulation (contours of lines and quadratic curves)
- Winding number evaluation by ray casting
- Box hierarchy construction
- Bit-exact packing of the hierarchy into 32-bit words

Font-level batch encoding lives in glyphrays.core.processor.

Key functions:
- winding_at: Winding number of the glyph at a point
- decode_hierarchy: Read the leaves back out of a packed block

Key classes:
- GeometryAccumulator: Collects closed contours
- HierarchyBuilder: Builds the box hierarchy
- Packer: Packs a hierarchy into words
- RestrictedRaysGlyph: Owns the whole build of one glyph
"""

from glyphrays.core.accumulator import GeometryAccumulator
from glyphrays.core.hierarchy import (
    Hierarchy,
    HierarchyBuilder,
    HierarchyLeaf,
    HierarchyNode,
)
from glyphrays.core.packing import (
    DecodedLeaf,
    PackedGlyph,
    Packer,
    decode_hierarchy,
)
from glyphrays.core.render_data import RestrictedRaysGlyph
from glyphrays.core.winding import curve_crossings, is_filled_at, winding_at

__all__ = [
    # Accumulator
    "GeometryAccumulator",
    # Hierarchy
    "Hierarchy",
    "HierarchyBuilder",
    "HierarchyLeaf",
    "HierarchyNode",
    # Packing
    "DecodedLeaf",
    "PackedGlyph",
    "Packer",
    "decode_hierarchy",
    # Render data
    "RestrictedRaysGlyph",
    # Winding
    "curve_crossings",
    "is_filled_at",
    "winding_at",
]
