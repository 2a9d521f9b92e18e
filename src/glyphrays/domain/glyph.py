"""Glyph representation and metadata.

This module defines the glyph domain model, which represents a single
glyph (character) of a font as a list of closed contours of curves.
"""

from dataclasses import dataclass, field
from typing import Any

from glyphrays.domain.curve import Curve


@dataclass
class GlyphMetadata:
    """Metadata about a glyph.

    Attributes:
        name: Glyph name (e.g., "A", "B", "exclam")
        unicode: Unicode code point (None for unencoded glyphs)
        advance_width: Horizontal advance width in font units
        left_side_bearing: Left side bearing in font units
    """

    name: str
    unicode: int | None
    advance_width: int
    left_side_bearing: int

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {
            "name": self.name,
            "unicode": self.unicode,
            "advance_width": self.advance_width,
            "lsb": self.left_side_bearing
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GlyphMetadata":
        """Deserialize from dictionary."""
        return cls(
            name=data["name"],
            unicode=data["unicode"],
            advance_width=data["advance_width"],
            left_side_bearing=data["lsb"]
        )


@dataclass
class Glyph:
    """Represents a single glyph with its contours.

    Designed for efficient serialization for parallel processing.

    Attributes:
        metadata: Glyph metadata (name, unicode, metrics)
        contours: Closed contours, each an ordered list of curves
        bounds: Control-point bounding box (min_x, min_y, max_x, max_y),
            None for empty glyphs
        _is_composite: Internal flag indicating if glyph uses component references
    """

    metadata: GlyphMetadata
    contours: list[list[Curve]] = field(default_factory=list)
    bounds: tuple[int, int, int, int] | None = None
    _is_composite: bool = False

    @property
    def name(self) -> str:
        """Get glyph name from metadata."""
        return self.metadata.name

    def is_empty(self) -> bool:
        """Check if glyph has no outlines.

        Empty glyphs include spaces and other non-printing characters.
        """
        return not any(self.contours)

    def is_composite(self) -> bool:
        """Check if glyph is made of component references.

        This flag is set during font loading.
        """
        return self._is_composite

    @property
    def curve_count(self) -> int:
        """Total number of curves over all contours."""
        return sum(len(contour) for contour in self.contours)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {
            "metadata": self.metadata.to_dict(),
            "contours": [[c.to_dict() for c in contour] for contour in self.contours],
            "bounds": list(self.bounds) if self.bounds is not None else None,
            "is_composite": self.is_composite()
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Glyph":
        """Deserialize from dictionary."""
        metadata = GlyphMetadata.from_dict(data["metadata"])
        contours = [
            [Curve.from_dict(c) for c in contour] for contour in data["contours"]
        ]
        bounds = tuple(data["bounds"]) if data.get("bounds") is not None else None
        is_composite = data.get("is_composite", False)
        return cls(
            metadata=metadata,
            contours=contours,
            bounds=bounds,  # type: ignore[arg-type]
            _is_composite=is_composite,
        )
