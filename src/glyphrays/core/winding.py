"""Winding number evaluation by ray casting.

A ray is cast from the query point toward +x. Every curve crossing the ray
contributes +1 when it runs downward and -1 when it runs upward, so
clockwise contours (the TrueType convention for outer contours, y up)
enclose a winding of +1.

Crossings are counted with a half-open rule in y: a monotonic piece from
y_a to y_b counts when min(y_a, y_b) <= y < max(y_a, y_b). This behaves as
if the ray were nudged infinitesimally upward, so a ray through a shared
endpoint is counted exactly once and a ray grazing a tangent is not counted.
Vertical decisions are made with exact rational arithmetic; only the
horizontal position of a quadratic crossing is computed in floating point.
"""

import math
from collections.abc import Iterable, Iterator
from fractions import Fraction
from numbers import Rational

from glyphrays.domain import Curve, FillRule, Point

Coordinate = int | Fraction

# Tolerance in glyph units when deciding if a point sits on a quadratic.
ON_CURVE_TOLERANCE = 1e-6


def _exact(value: float | Rational) -> Coordinate:
    if isinstance(value, int | Fraction):
        return value
    return Fraction(value)


def _monotonic_pieces(
    curve: Curve,
) -> Iterator[tuple[Fraction, Fraction, Fraction, Fraction]]:
    """Split a curve into pieces monotonic in y.

    Yields:
        Tuples (t_a, y_a, t_b, y_b) of parameter and y at each piece end
    """
    y0 = Fraction(curve.start.y)
    y1 = Fraction(curve.end.y)
    if curve.control is None:
        yield (Fraction(0), y0, Fraction(1), y1)
        return

    a, b, c = _y_coefficients(curve.start, curve.control, curve.end)
    if a != 0:
        t_ext = -b / (2 * a)
        if 0 < t_ext < 1:
            y_ext = (a * t_ext + b) * t_ext + c
            yield (Fraction(0), y0, t_ext, y_ext)
            yield (t_ext, y_ext, Fraction(1), y1)
            return
    yield (Fraction(0), y0, Fraction(1), y1)


def _y_coefficients(
    start: Point, control: Point, end: Point
) -> tuple[Fraction, Fraction, Fraction]:
    """Coefficients of y(t) = a*t^2 + b*t + c for a quadratic curve."""
    y0, yc, y1 = start.y, control.y, end.y
    return (Fraction(y0 - 2 * yc + y1), Fraction(2 * (yc - y0)), Fraction(y0))


def _x_at(curve: Curve, t: float) -> float:
    if curve.control is None:
        return curve.start.x + t * (curve.end.x - curve.start.x)
    s = 1.0 - t
    return s * s * curve.start.x + 2.0 * s * t * curve.control.x + t * t * curve.end.x


def _solve_t(curve: Curve, y: Coordinate, t_a: Fraction, t_b: Fraction) -> float:
    """Parameter in [t_a, t_b] at which a monotonic piece reaches height y."""
    if curve.control is None:
        dy = curve.end.y - curve.start.y
        return float(Fraction(y - curve.start.y) / dy)

    a, b, c = _y_coefficients(curve.start, curve.control, curve.end)
    if a == 0:
        return float((y - c) / b)

    disc = b * b - 4 * a * (c - y)
    root = math.sqrt(max(float(disc), 0.0))
    lo, hi = float(t_a), float(t_b)
    candidates = ((float(-b) - root) / float(2 * a), (float(-b) + root) / float(2 * a))
    # Pick the root closest to the piece's parameter range.
    best = min(candidates, key=lambda t: max(lo - t, t - hi, 0.0))
    return min(max(best, lo), hi)


def curve_crossings(curve: Curve, x: Coordinate, y: Coordinate) -> int:
    """Signed crossings of a curve with the +x ray from (x, y).

    Args:
        curve: Line or quadratic curve
        x: X coordinate of the ray origin
        y: Y coordinate of the ray origin

    Returns:
        Sum of +1 (downward crossing) and -1 (upward crossing) contributions
    """
    min_x, min_y, max_x, max_y = curve.control_bounds()
    if max_x <= x or y < min_y or y >= max_y:
        return 0

    total = 0
    for t_a, y_a, t_b, y_b in _monotonic_pieces(curve):
        if y_a == y_b:
            continue
        if not (min(y_a, y_b) <= y < max(y_a, y_b)):
            continue

        if curve.control is None:
            # Exact intersection for lines.
            dx = curve.end.x - curve.start.x
            dy = curve.end.y - curve.start.y
            crossing_x: Coordinate | float = curve.start.x + Fraction(
                (y - curve.start.y) * dx, dy
            )
            is_right = crossing_x > x
        else:
            t = _solve_t(curve, y, t_a, t_b)
            is_right = _x_at(curve, t) > float(x)

        if is_right:
            total += 1 if y_b < y_a else -1
    return total


def winding_at(point: tuple[float | Rational, float | Rational], edges: Iterable[Curve]) -> int:
    """Winding number of a closed set of curves at a point.

    Args:
        point: Query point (x, y); may be fractional
        edges: Every curve of the glyph

    Returns:
        Raw signed winding number
    """
    x = _exact(point[0])
    y = _exact(point[1])
    return sum(curve_crossings(curve, x, y) for curve in edges)


def is_filled_at(
    point: tuple[float | Rational, float | Rational],
    edges: Iterable[Curve],
    fill_rule: FillRule,
) -> bool:
    """Check if a point is inside the glyph under a fill rule."""
    return fill_rule.is_filled(winding_at(point, edges))


def point_on_curve(curve: Curve, point: tuple[float | Rational, float | Rational]) -> bool:
    """Check if a point lies on a curve.

    Exact for lines; quadratics use ON_CURVE_TOLERANCE horizontally.
    """
    x = _exact(point[0])
    y = _exact(point[1])
    min_x, min_y, max_x, max_y = curve.control_bounds()
    if not (min_x <= x <= max_x and min_y <= y <= max_y):
        return False

    if curve.control is None:
        sx, sy = curve.start.x, curve.start.y
        ex, ey = curve.end.x, curve.end.y
        return (ex - sx) * (y - sy) - (ey - sy) * (x - sx) == 0

    for t_a, y_a, t_b, y_b in _monotonic_pieces(curve):
        if y_a == y_b:
            # Flat piece: the whole piece sits at y_a.
            if y == y_a:
                xs = (_x_at(curve, float(t_a)), _x_at(curve, float(t_b)))
                if min(xs) - ON_CURVE_TOLERANCE <= float(x) <= max(xs) + ON_CURVE_TOLERANCE:
                    return True
            continue
        if min(y_a, y_b) <= y <= max(y_a, y_b):
            t = _solve_t(curve, y, t_a, t_b)
            if abs(_x_at(curve, t) - float(x)) <= ON_CURVE_TOLERANCE:
                return True
    return False
