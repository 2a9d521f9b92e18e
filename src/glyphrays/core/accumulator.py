"""Geometry accumulator for glyph outlines.

Records contours as sequences of lines and quadratic curves and enforces
that every contour is closed before the next one starts and before the
geometry is sealed for building.
"""

from glyphrays.domain import Curve, Point
from glyphrays.exceptions import BuildStateError, ContourError

PointLike = Point | tuple[int, int]


def as_point(value: PointLike) -> Point:
    """Coerce an (x, y) pair to a Point."""
    if isinstance(value, Point):
        return value
    x, y = value
    return Point(int(x), int(y))


class GeometryAccumulator:
    """Collects the contours of one glyph.

    Usage is a strict sequence of start_contour(), then add_line() or
    add_quadratic() calls ending back at the contour's start point, repeated
    for each contour, and finally seal().

    Example:
        acc = GeometryAccumulator()
        acc.start_contour((0, 0))
        acc.add_line((0, 10))
        acc.add_line((10, 10))
        acc.add_line((0, 0))
        edges = acc.seal()
    """

    def __init__(self) -> None:
        self._contours: list[list[Curve]] = []
        self._start: Point | None = None
        self._current: Point | None = None
        self._sealed = False

    @property
    def contours(self) -> list[list[Curve]]:
        """Contours recorded so far, in insertion order."""
        return [list(contour) for contour in self._contours]

    @property
    def edges(self) -> list[Curve]:
        """All curves of all contours as one flat list."""
        return [curve for contour in self._contours for curve in contour]

    @property
    def is_closed(self) -> bool:
        """True if no contour is open (the last one ends at its start)."""
        return self._current == self._start

    @property
    def sealed(self) -> bool:
        return self._sealed

    def start_contour(self, point: PointLike) -> None:
        """Start a new contour at a point.

        Raises:
            BuildStateError: If the accumulator was already sealed
            ContourError: If the previous contour is not closed
        """
        self._check_mutable()
        if not self.is_closed:
            raise ContourError(
                f"Contour {len(self._contours) - 1} is not closed: ends at "
                f"{self._current} but starts at {self._start}"
            )
        p = as_point(point)
        self._contours.append([])
        self._start = p
        self._current = p

    def add_line(self, point: PointLike) -> None:
        """Add a line segment from the current point to a point."""
        self._append(Curve(start=self._require_current(), end=as_point(point)))

    def add_quadratic(self, control: PointLike, point: PointLike) -> None:
        """Add a quadratic curve from the current point to a point."""
        self._append(
            Curve(
                start=self._require_current(),
                control=as_point(control),
                end=as_point(point),
            )
        )

    def seal(self) -> list[Curve]:
        """Close the accumulator to further input.

        Returns:
            Flat list of every curve of the glyph

        Raises:
            BuildStateError: If already sealed
            ContourError: If the last contour is not closed
        """
        self._check_mutable()
        if not self.is_closed:
            raise ContourError(
                f"Contour {len(self._contours) - 1} is not closed: ends at "
                f"{self._current} but starts at {self._start}"
            )
        self._sealed = True
        return self.edges

    def _append(self, curve: Curve) -> None:
        self._contours[-1].append(curve)
        self._current = curve.end

    def _require_current(self) -> Point:
        self._check_mutable()
        if self._current is None:
            raise ContourError("Edge added before start_contour()")
        return self._current

    def _check_mutable(self) -> None:
        if self._sealed:
            raise BuildStateError("Geometry cannot be modified after finalize()")
