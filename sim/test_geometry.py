#!/usr/bin/env python3
"""
Tests for the 2D geometry helpers.
"""

from __future__ import annotations

import math
import unittest

from sim.geometry import (
    bound,
    circle_point,
    deg_to_rad,
    intersect_lines,
    lerp,
    line_polygon_intersections,
    polygon_intersects_line,
    polygons_intersect,
    rad_to_deg,
    rotate,
)

_SQUARE = [(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)]


class ScalarHelperTests(unittest.TestCase):
    def test_lerp_is_exact_at_both_ends(self) -> None:
        self.assertEqual(lerp(0.1, 0.7, 0.0), 0.1)
        self.assertEqual(lerp(0.1, 0.7, 1.0), 0.7)
        self.assertAlmostEqual(lerp(-2.0, 2.0, 0.25), -1.0)

    def test_bound_clamps(self) -> None:
        self.assertEqual(bound(5.0, -1.0, 1.0), 1.0)
        self.assertEqual(bound(-5.0, -1.0, 1.0), -1.0)
        self.assertEqual(bound(0.3, -1.0, 1.0), 0.3)

    def test_degree_conversions(self) -> None:
        self.assertAlmostEqual(deg_to_rad(180.0), math.pi)
        self.assertAlmostEqual(rad_to_deg(math.pi / 2.0), 90.0)

    def test_heading_zero_faces_positive_y(self) -> None:
        x, y = circle_point(2.0, 0.0)
        self.assertAlmostEqual(x, 0.0)
        self.assertAlmostEqual(y, 2.0)

    def test_rotate_is_clockwise(self) -> None:
        x, y = rotate((0.0, 1.0), math.pi / 2.0)
        self.assertAlmostEqual(x, 1.0)
        self.assertAlmostEqual(y, 0.0)
        # Same convention as circle_point.
        cx, cy = circle_point(1.0, 0.3)
        rx, ry = rotate((0.0, 1.0), 0.3)
        self.assertAlmostEqual(cx, rx)
        self.assertAlmostEqual(cy, ry)


class LineIntersectionTests(unittest.TestCase):
    def test_crossing_segments(self) -> None:
        hit = intersect_lines((0.0, 0.0), (2.0, 0.0), (1.0, -1.0), (1.0, 1.0))
        self.assertIsNotNone(hit)
        self.assertAlmostEqual(hit.point[0], 1.0)
        self.assertAlmostEqual(hit.point[1], 0.0)
        self.assertAlmostEqual(hit.position_a, 0.5)
        self.assertAlmostEqual(hit.position_b, 0.5)

    def test_parallel_and_colinear_lines_never_intersect(self) -> None:
        self.assertIsNone(intersect_lines((0.0, 0.0), (1.0, 0.0), (0.0, 1.0), (1.0, 1.0)))
        self.assertIsNone(intersect_lines((0.0, 0.0), (2.0, 0.0), (1.0, 0.0), (3.0, 0.0)))

    def test_finite_segments_out_of_reach(self) -> None:
        self.assertIsNone(intersect_lines((0.0, 0.0), (1.0, 0.0), (3.0, -1.0), (3.0, 1.0)))

    def test_infinite_flag_extends_line(self) -> None:
        hit = intersect_lines(
            (0.0, 0.0), (4.0, 0.0), (3.0, 10.0), (3.0, 11.0), infinite_b=True,
        )
        self.assertIsNotNone(hit)
        self.assertAlmostEqual(hit.point[0], 3.0)
        self.assertAlmostEqual(hit.position_a, 0.75)
        self.assertAlmostEqual(hit.position_b, -10.0)

    def test_intersection_at_segment_end_counts(self) -> None:
        hit = intersect_lines((0.0, 0.0), (1.0, 0.0), (1.0, -1.0), (1.0, 1.0))
        self.assertIsNotNone(hit)
        self.assertAlmostEqual(hit.position_a, 1.0)


class PolygonTests(unittest.TestCase):
    def test_line_through_square_crosses_two_edges(self) -> None:
        hits = list(line_polygon_intersections((-1.0, 1.0), (3.0, 1.0), _SQUARE))
        self.assertEqual(len(hits), 2)
        positions = sorted(position for _point, position in hits)
        self.assertAlmostEqual(positions[0], 0.25)
        self.assertAlmostEqual(positions[1], 0.75)

    def test_overlapping_polygons_intersect(self) -> None:
        shifted = [(x + 1.0, y + 1.0) for x, y in _SQUARE]
        self.assertTrue(polygons_intersect(_SQUARE, shifted))

    def test_polygon_intersection_is_symmetric(self) -> None:
        triangle = [(1.0, -1.0), (3.0, 1.0), (1.0, 3.0)]
        far = [(10.0, 10.0), (11.0, 10.0), (11.0, 11.0)]
        self.assertEqual(polygons_intersect(_SQUARE, triangle), polygons_intersect(triangle, _SQUARE))
        self.assertTrue(polygons_intersect(triangle, _SQUARE))
        self.assertEqual(polygons_intersect(_SQUARE, far), polygons_intersect(far, _SQUARE))

    def test_disjoint_polygons(self) -> None:
        far = [(x + 5.0, y) for x, y in _SQUARE]
        self.assertFalse(polygons_intersect(_SQUARE, far))

    def test_contained_polygon_is_not_reported(self) -> None:
        inner = [(0.5, 0.5), (1.5, 0.5), (1.5, 1.5), (0.5, 1.5)]
        self.assertFalse(polygons_intersect(_SQUARE, inner))

    def test_polygon_against_infinite_line(self) -> None:
        self.assertTrue(
            polygon_intersects_line(_SQUARE, (1.0, 50.0), (1.0, 51.0), line_infinite=True)
        )
        self.assertFalse(polygon_intersects_line(_SQUARE, (1.0, 50.0), (1.0, 51.0)))
        self.assertFalse(
            polygon_intersects_line(_SQUARE, (5.0, 0.0), (5.0, 1.0), line_infinite=True)
        )


if __name__ == "__main__":
    unittest.main()
