"""Exception hierarchy for glyphrays."""


class GlyphRaysError(Exception):
    """Base exception for all glyphrays errors."""

    pass


class FontError(GlyphRaysError):
    """Errors related to font loading."""

    pass


class FontLoadError(FontError):
    """Error loading a font file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load font '{path}': {reason}")


class FontSaveError(FontError):
    """Error writing the encoded atlas for a font."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save atlas '{path}': {reason}")


class GlyphError(GlyphRaysError):
    """Errors related to glyph encoding."""

    pass


class GlyphNotFoundError(GlyphError):
    """Requested glyph not found in font."""

    def __init__(self, glyph_name: str) -> None:
        self.glyph_name = glyph_name
        super().__init__(f"Glyph '{glyph_name}' not found in font")


class GeometryError(GlyphRaysError):
    """Errors in the geometry handed to the encoder."""

    pass


class ContourError(GeometryError):
    """Contour contract violation (unclosed contour, edge without a contour)."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class BuildStateError(GlyphRaysError):
    """Operation not valid in the current build state.

    Raised when geometry is added after finalize(), when finalize() is
    called twice, or when packed data is requested before finalize().
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


class PackingError(GlyphRaysError):
    """A value does not fit the bit field allotted to it."""

    def __init__(self, field: str, value: int, numbits: int) -> None:
        self.field = field
        self.value = value
        self.numbits = numbits
        super().__init__(
            f"Value {value} for '{field}' does not fit in {numbits} bits"
        )

    def __reduce__(self) -> tuple[type, tuple[str, int, int]]:
        # Glyphs built in worker processes carry their packing error back.
        return (type(self), (self.field, self.value, self.numbits))


class AtlasError(GlyphRaysError):
    """Errors raised by an atlas store."""

    pass


class AtlasFullError(AtlasError):
    """The atlas store has no room left for the requested block."""

    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            f"Atlas full: requested {requested} words, {available} available"
        )
