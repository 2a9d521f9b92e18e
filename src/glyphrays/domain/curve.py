"""Core geometric types for glyph outlines.

This module defines the fundamental geometric types used throughout glyphrays:
- Point: An integer 2D point in font units
- Curve: A line segment or quadratic Bezier curve of a contour
- CurveDegree: Enum distinguishing lines from quadratics
- FillRule: Mapping from a winding number to inside/outside
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any


class CurveDegree(IntEnum):
    """Degree of a curve.

    The value is the bit stored in the degree tag of a packed curve entry.
    """

    LINE = 0
    QUADRATIC = 1


class FillRule(str, Enum):
    """Fill rule applied to a winding number.

    - ODD_EVEN: filled where the winding number is odd
    - NONZERO: filled where the winding number is not zero
    - COMPLEMENT_ODD_EVEN: filled where the winding number is even
    - COMPLEMENT_NONZERO: filled where the winding number is zero
    """

    ODD_EVEN = "odd_even"
    NONZERO = "nonzero"
    COMPLEMENT_ODD_EVEN = "complement_odd_even"
    COMPLEMENT_NONZERO = "complement_nonzero"

    def is_filled(self, winding: int) -> bool:
        """Check if a point with the given winding number is filled.

        Args:
            winding: Signed winding number

        Returns:
            True if the fill rule considers the point inside
        """
        if self is FillRule.ODD_EVEN:
            return winding % 2 != 0
        if self is FillRule.NONZERO:
            return winding != 0
        if self is FillRule.COMPLEMENT_ODD_EVEN:
            return winding % 2 == 0
        return winding == 0


@dataclass(frozen=True, slots=True)
class Point:
    """A point in 2D space with integer coordinates.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate in font units
        y: Y coordinate in font units
    """

    x: int
    y: int

    def to_tuple(self) -> tuple[int, int]:
        """Convert to simple (x, y) tuple."""
        return (self.x, self.y)

    def translated(self, dx: int, dy: int) -> "Point":
        """Return the point moved by (dx, dy)."""
        return Point(self.x + dx, self.y + dy)


@dataclass(frozen=True, slots=True)
class Curve:
    """A single edge of a contour.

    A curve without a control point is a line segment from start to end;
    a curve with a control point is a quadratic Bezier curve.

    Attributes:
        start: Start point of the curve
        end: End point of the curve
        control: Control point (quadratic curves only)
    """

    start: Point
    end: Point
    control: Point | None = None

    @property
    def degree(self) -> CurveDegree:
        """Degree of the curve."""
        if self.control is None:
            return CurveDegree.LINE
        return CurveDegree.QUADRATIC

    @property
    def is_quadratic(self) -> bool:
        """True if the curve is a quadratic Bezier curve."""
        return self.control is not None

    def points(self) -> tuple[Point, ...]:
        """Points of the curve in storage order (start, [control], end)."""
        if self.control is None:
            return (self.start, self.end)
        return (self.start, self.control, self.end)

    def control_bounds(self) -> tuple[int, int, int, int]:
        """Bounding box of the control polygon.

        The control polygon's box contains the whole curve, so it is a
        conservative stand-in for the curve's own bounding box.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y)
        """
        pts = self.points()
        xs = [p.x for p in pts]
        ys = [p.y for p in pts]
        return (min(xs), min(ys), max(xs), max(ys))

    def translated(self, dx: int, dy: int) -> "Curve":
        """Return the curve moved by (dx, dy)."""
        return Curve(
            start=self.start.translated(dx, dy),
            end=self.end.translated(dx, dy),
            control=self.control.translated(dx, dy) if self.control else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {
            "points": [p.to_tuple() for p in self.points()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Curve":
        """Deserialize from dictionary."""
        pts = [Point(x, y) for x, y in data["points"]]
        if len(pts) == 2:
            return cls(start=pts[0], end=pts[1])
        return cls(start=pts[0], control=pts[1], end=pts[2])
