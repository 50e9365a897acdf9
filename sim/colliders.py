#!/usr/bin/env python3
"""
sim/colliders.py
================
Collider components.

A collider only has to supply geometry — a sequence of lines (each
flagged finite or infinite) and a sequence of closed polygons.  Ray
queries and polygon collision tests are implemented once on
:class:`BaseCollider` on top of those two providers.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Tuple

from sim.entity import Component
from sim.geometry import (
    Vec2,
    add,
    intersect_lines,
    line_polygon_intersections,
    polygon_intersects_line,
    polygons_intersect,
    rotate,
)
from sim.parameters import CarParameterSet, RoadGeometry

LineGeometry = Tuple[Vec2, Vec2, bool]
Polygon = List[Vec2]


class BaseCollider(Component):
    """Base class for collider components of an entity."""

    def line_geometry(self) -> Iterator[LineGeometry]:
        """Yield ``(start, end, infinite)`` for every line of the collider."""
        raise NotImplementedError

    def polygon_geometry(self) -> Iterator[Polygon]:
        """Yield every polygon of the collider as a closed vertex loop."""
        raise NotImplementedError

    def collision_points(self, start: Vec2, end: Vec2) -> Iterator[Tuple[Vec2, float]]:
        """Intersections of the finite line *start* → *end* with all geometry.

        Yields
        ------
        (point, position)
            The intersection point and its position along the line,
            from 0 (start) to 1 (end).
        """
        for line_start, line_end, infinite in self.line_geometry():
            hit = intersect_lines(start, end, line_start, line_end, infinite_b=infinite)
            if hit is not None:
                yield hit.point, hit.position_a

        for polygon in self.polygon_geometry():
            yield from line_polygon_intersections(start, end, polygon)

    def check_polygon_collision(self, polygon: Sequence[Vec2]) -> bool:
        """True if *polygon* crosses any line or polygon of this collider."""
        for line_start, line_end, infinite in self.line_geometry():
            if polygon_intersects_line(polygon, line_start, line_end, infinite):
                return True
        for geometry in self.polygon_geometry():
            if polygons_intersect(polygon, geometry):
                return True
        return False


class CarCollider(BaseCollider):
    """Oriented rectangle around a car entity.

    The footprint comes from the entity's :class:`CarParameterSet`
    (default dimensions when it has none) and is recomputed on every
    call from the current pose.
    """

    _DEFAULT_PARAMETERS = CarParameterSet()

    def line_geometry(self) -> Iterator[LineGeometry]:
        return iter(())

    def polygon_geometry(self) -> Iterator[Polygon]:
        rectangle = self.rectangle()
        if rectangle is not None:
            yield rectangle

    def rectangle(self) -> Optional[Polygon]:
        entity = self.entity
        if entity is None:
            return None
        params = entity.get_parameter_set(CarParameterSet) or self._DEFAULT_PARAMETERS

        w2 = params.width / 2.0
        l2 = params.length / 2.0
        angle = entity.angle

        # Corners in the car frame, turned with the heading.
        return [
            add(entity.position, rotate((w2, l2), angle)),
            add(entity.position, rotate((w2, -l2), angle)),
            add(entity.position, rotate((-w2, -l2), angle)),
            add(entity.position, rotate((-w2, l2), angle)),
        ]


class RoadCollider(BaseCollider):
    """Two infinite border lines of a straight road.

    The borders come from the first :class:`RoadGeometry` on the entity
    (controllers are searched before parameter sets).
    """

    def _road(self) -> Optional[RoadGeometry]:
        entity = self.entity
        if entity is None:
            return None
        return entity.get_controller(RoadGeometry) or entity.get_parameter_set(RoadGeometry)

    def line_geometry(self) -> Iterator[LineGeometry]:
        road = self._road()
        if road is None:
            return
        yield (road.left_border, 0.0), (road.left_border, 1.0), True
        yield (road.right_border, 0.0), (road.right_border, 1.0), True

    def polygon_geometry(self) -> Iterator[Polygon]:
        return iter(())
