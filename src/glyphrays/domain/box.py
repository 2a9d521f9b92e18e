"""Axis-aligned boxes of the glyph hierarchy."""

from dataclasses import dataclass
from enum import IntEnum


class SplitAxis(IntEnum):
    """Coordinate along which a box is split.

    The value is the bit stored in the splitting-coordinate field of a
    packed hierarchy node.
    """

    X = 0
    Y = 1


@dataclass(frozen=True, slots=True)
class Box:
    """Axis-aligned rectangle in glyph-local integer coordinates.

    Attributes:
        min_x: Left edge
        min_y: Bottom edge
        max_x: Right edge
        max_y: Top edge
    """

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    def longer_axis(self) -> SplitAxis:
        """Axis of the longer side; ties go to x."""
        if self.height > self.width:
            return SplitAxis.Y
        return SplitAxis.X

    def split(self, axis: SplitAxis) -> tuple["Box", "Box"]:
        """Split the box in half along an axis.

        When the side length is odd the second child gets the extra unit.

        Args:
            axis: Coordinate to split

        Returns:
            Tuple of (child before the split, child after the split)
        """
        if axis == SplitAxis.X:
            mid = self.min_x + self.width // 2
            return (
                Box(self.min_x, self.min_y, mid, self.max_y),
                Box(mid, self.min_y, self.max_x, self.max_y),
            )
        mid = self.min_y + self.height // 2
        return (
            Box(self.min_x, self.min_y, self.max_x, mid),
            Box(self.min_x, mid, self.max_x, self.max_y),
        )

    def intersects(self, bounds: tuple[int, int, int, int], margin: float = 0) -> bool:
        """Check if a (min_x, min_y, max_x, max_y) rectangle touches this box.

        Both rectangles are treated as closed, so sharing an edge counts.

        Args:
            bounds: Rectangle to test
            margin: Distance by which this box is grown on every side first
        """
        min_x, min_y, max_x, max_y = bounds
        return (
            min_x <= self.max_x + margin
            and max_x >= self.min_x - margin
            and min_y <= self.max_y + margin
            and max_y >= self.min_y - margin
        )
