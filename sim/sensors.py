#!/usr/bin/env python3
"""
sim/sensors.py
==============
Sensor components.  A sensor is simulated before any controller of its
entity, so it always measures the world as it was left by the previous
frame (for entities not yet moved this frame).
"""

from __future__ import annotations

from typing import Optional

from sim.entity import Component
from sim.geometry import Vec2, add, rotate


class BaseSensor(Component):
    """A measuring component with a raw and a normalized reading."""

    def __init__(self) -> None:
        super().__init__()
        self.value: float = 0.0
        self.normalized_value: float = 0.0

    def simulate(self, simulation_time: float, time_delta: float) -> None:
        raise NotImplementedError


class DistanceSensor(BaseSensor):
    """Ray-cast distance sensor mounted on a car.

    Parameters
    ----------
    position : (float, float)
        Mount point relative to the entity position (in the entity frame).
    angle : float
        Ray angle relative to the entity heading in rad.
    range : float
        Ray length in metres.

    ``value`` is the distance to the closest hit (``range`` when nothing
    is hit); ``normalized_value`` is 1 for a hit at the mount point and 0
    when nothing is within range.
    """

    def __init__(self, position: Vec2, angle: float, range: float = 10.0) -> None:
        super().__init__()
        if range <= 0.0:
            raise ValueError(f"sensor range must be positive, got {range}")
        self.position: Vec2 = (float(position[0]), float(position[1]))
        self.angle = float(angle)
        self.range = float(range)
        self.value = self.range
        self.normalized_value = 0.0

    def start_point(self) -> Vec2:
        """Absolute start point of the ray."""
        entity = self.entity
        if entity is None:
            return (0.0, 0.0)
        return add(entity.position, rotate(self.position, entity.angle))

    def vector(self) -> Vec2:
        """Ray vector from start to end point."""
        entity = self.entity
        if entity is None:
            return (0.0, 0.0)
        return rotate((0.0, self.range), entity.angle + self.angle)

    def end_point(self) -> Vec2:
        """Absolute end point of the ray."""
        return add(self.start_point(), self.vector())

    def closest_hit(self) -> Optional[float]:
        """Smallest hit position along the ray over all other entities."""
        entity = self.entity
        if entity is None:
            return None
        start = self.start_point()
        end = self.end_point()
        positions = [
            position
            for other in entity.others
            for collider in other.colliders
            for _point, position in collider.collision_points(start, end)
        ]
        return min(positions) if positions else None

    def simulate(self, simulation_time: float, time_delta: float) -> None:
        entity = self.entity
        if entity is None or entity.graph is None:
            return

        closest = self.closest_hit()
        if closest is None:
            self.value = self.range
            self.normalized_value = 0.0
        else:
            self.value = self.range * closest
            self.normalized_value = 1.0 - closest
