#!/usr/bin/env python3
"""
sim/geometry.py
===============
Low-level 2D math used by colliders, sensors and the physics controller.

Coordinates are ``(x, y)`` tuples in metres with Y pointing along the road.
Angles are in radians; 0 faces +Y and positive angles turn clockwise.

Keeping these in a separate module avoids circular imports and makes unit
testing straightforward.
"""

from __future__ import annotations

import math
from typing import Iterator, NamedTuple, Optional, Sequence, Tuple

Vec2 = Tuple[float, float]


class LineIntersection(NamedTuple):
    """Result of :func:`intersect_lines`.

    ``position_a`` / ``position_b`` are the interpolation fractions along
    each line (0 = start, 1 = end).
    """

    point: Vec2
    position_a: float
    position_b: float


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation, exact at ``t == 0`` and ``t == 1``."""
    return a * (1.0 - t) + b * t


def bound(value: float, minimum: float, maximum: float) -> float:
    """Clamp *value* into ``[minimum, maximum]``."""
    return max(minimum, min(value, maximum))


def deg_to_rad(deg: float) -> float:
    return deg / 180.0 * math.pi


def rad_to_deg(rad: float) -> float:
    return rad / math.pi * 180.0


def add(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] + b[0], a[1] + b[1])


def circle_point(radius: float, angle: float) -> Vec2:
    """Point on a circle around the origin for the clockwise-from-+Y heading."""
    return (math.sin(angle) * radius, math.cos(angle) * radius)


def rotate(vector: Vec2, angle: float) -> Vec2:
    """Rotate *vector* clockwise by *angle*."""
    cos_a = math.cos(-angle)
    sin_a = math.sin(-angle)
    x, y = vector
    return (cos_a * x - sin_a * y, sin_a * x + cos_a * y)


def intersect_lines(
    start_a: Vec2,
    end_a: Vec2,
    start_b: Vec2,
    end_b: Vec2,
    infinite_a: bool = False,
    infinite_b: bool = False,
) -> Optional[LineIntersection]:
    """Intersection of line A with line B.

    A line flagged *infinite* extends beyond its two points in both
    directions; a finite line only accepts positions in ``[0, 1]``.
    Parallel and colinear lines never intersect (exact zero test).

    Returns
    -------
    LineIntersection or None
        The point on A plus the position along each line.
    """
    t_top = (end_b[0] - start_b[0]) * (start_a[1] - start_b[1]) \
        - (end_b[1] - start_b[1]) * (start_a[0] - start_b[0])
    u_top = (start_b[1] - start_a[1]) * (start_a[0] - end_a[0]) \
        - (start_b[0] - start_a[0]) * (start_a[1] - end_a[1])
    bottom = (end_b[1] - start_b[1]) * (end_a[0] - start_a[0]) \
        - (end_b[0] - start_b[0]) * (end_a[1] - start_a[1])

    if bottom == 0:
        return None

    position_a = t_top / bottom
    position_b = u_top / bottom
    if not (infinite_a or 0.0 <= position_a <= 1.0):
        return None
    if not (infinite_b or 0.0 <= position_b <= 1.0):
        return None

    point = (
        lerp(start_a[0], end_a[0], position_a),
        lerp(start_a[1], end_a[1], position_a),
    )
    return LineIntersection(point, position_a, position_b)


def _edges(polygon: Sequence[Vec2]) -> Iterator[Tuple[Vec2, Vec2]]:
    """Closed edge loop ``polygon[i] -> polygon[(i + 1) % n]``."""
    count = len(polygon)
    for i in range(count):
        yield polygon[i], polygon[(i + 1) % count]


def line_polygon_intersections(
    start: Vec2, end: Vec2, polygon: Sequence[Vec2],
) -> Iterator[Tuple[Vec2, float]]:
    """Yield ``(point, position)`` for every polygon edge crossed by the
    finite line *start* → *end*, in polygon edge order.
    """
    for edge_start, edge_end in _edges(polygon):
        hit = intersect_lines(start, end, edge_start, edge_end)
        if hit is not None:
            yield hit.point, hit.position_a


def polygons_intersect(polygon_a: Sequence[Vec2], polygon_b: Sequence[Vec2]) -> bool:
    """True iff any edge of *polygon_a* crosses any edge of *polygon_b*.

    A polygon fully contained in the other has no crossing edges and is
    reported as not intersecting.
    """
    for a_start, a_end in _edges(polygon_a):
        for b_start, b_end in _edges(polygon_b):
            if intersect_lines(a_start, a_end, b_start, b_end) is not None:
                return True
    return False


def polygon_intersects_line(
    polygon: Sequence[Vec2],
    line_start: Vec2,
    line_end: Vec2,
    line_infinite: bool = False,
) -> bool:
    """True iff any edge of *polygon* crosses the (possibly infinite) line."""
    for edge_start, edge_end in _edges(polygon):
        hit = intersect_lines(
            edge_start, edge_end, line_start, line_end,
            infinite_b=line_infinite,
        )
        if hit is not None:
            return True
    return False
