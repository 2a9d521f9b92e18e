"""Atlas stores receiving packed glyph data.

Key classes:
- AtlasSink: Protocol every destination store implements
- GlyphAtlas: In-memory store with a fixed word capacity
- GlyphAttribute: Per-corner attribute values for the quad drawing a glyph
- ReturnCode: Success/failure of an upload
"""

from glyphrays.atlas.store import (
    GLYPH_NUM_ATTRIBUTES,
    AtlasSink,
    GlyphAtlas,
    GlyphAttribute,
    GlyphAttributeIndex,
    ReturnCode,
)

__all__ = [
    "GLYPH_NUM_ATTRIBUTES",
    "AtlasSink",
    "GlyphAtlas",
    "GlyphAttribute",
    "GlyphAttributeIndex",
    "ReturnCode",
]
