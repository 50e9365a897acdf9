#!/usr/bin/env python3
"""
sim/parameters.py
=================
Passive parameter-set components.

:class:`CarParameterSet` carries the footprint used by
:class:`~sim.colliders.CarCollider`; :class:`RoadGeometry` derives the
border and lane positions of a straight road and is shared by
:class:`RoadParameterSet` and :class:`~sim.controllers.RoadController`.
"""

from __future__ import annotations

from sim.entity import Component
from sim.geometry import lerp


class ParameterSet(Component):
    """Component holding static entity parameters (no per-frame behaviour)."""


class CarParameterSet(ParameterSet):
    """Footprint of a car entity.

    Parameters
    ----------
    width : float
        Width of the car in metres.
    length : float
        Length of the car in metres.
    """

    def __init__(self, width: float = 1.8, length: float = 4.0) -> None:
        super().__init__()
        if width <= 0.0 or length <= 0.0:
            raise ValueError(f"car dimensions must be positive, got {width}x{length}")
        self.width = float(width)
        self.length = float(length)


class RoadGeometry:
    """Geometry of a straight road centred on ``x = 0``.

    Parameters
    ----------
    lane_count : int
        Number of lanes (≥ 1).
    lane_width : float
        Width of one lane in metres.
    """

    def __init__(self, lane_count: int, lane_width: float) -> None:
        if int(lane_count) < 1:
            raise ValueError(f"lane_count must be >= 1, got {lane_count}")
        if lane_width <= 0.0:
            raise ValueError(f"lane_width must be positive, got {lane_width}")
        self.lane_count = int(lane_count)
        self.lane_width = float(lane_width)
        self.right_border = self.lane_width * self.lane_count / 2.0
        self.left_border = -self.right_border

    def lane_position(self, index: int) -> float:
        """X-position of the centre of lane *index* (0 = leftmost)."""
        return lerp(
            self.left_border + self.lane_width / 2.0,
            self.right_border + self.lane_width / 2.0,
            index / self.lane_count,
        )


class RoadParameterSet(RoadGeometry, ParameterSet):
    """Road geometry attached to an entity as a parameter set."""

    def __init__(self, lane_count: int, lane_width: float) -> None:
        RoadGeometry.__init__(self, lane_count, lane_width)
        ParameterSet.__init__(self)
