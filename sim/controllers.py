#!/usr/bin/env python3
"""
sim/controllers.py
==================
Controller components — the per-frame behaviour of an entity.

* :class:`CarPhysicsController` — kinematics, drag, steering and the
  one-way alive → dead transition of a player / AI car.
* :class:`CarCruiseController` — constant-speed traffic car.
* :class:`RoadController` — road geometry provider (no behaviour).
* :class:`KeyboardCarInputController` and
  :class:`NeuronalNetworkInputController` — interchangeable sources of
  ``throttle`` / ``steering_input`` consumed by the physics controller.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from config import DEFAULT_HIDDEN_NEURONS
from ml.network import NeuronalNetwork
from sim.colliders import CarCollider
from sim.entity import Component, Entity
from sim.geometry import add, bound, circle_point
from sim.parameters import RoadGeometry
from sim.sensors import BaseSensor

log = logging.getLogger("physics")


class BaseController(Component):
    """A component invoked once per frame after the entity's sensors."""

    def simulate(self, simulation_time: float, time_delta: float) -> None:
        raise NotImplementedError


# ── Driving input sources ─────────────────────────────────────────────────────


class CarInputController(BaseController):
    """Source of driving inputs for :class:`CarPhysicsController`.

    ``throttle`` and ``steering_input`` are expected within ``[-1, 1]``;
    the physics controller clamps them anyway.
    """

    def __init__(self) -> None:
        super().__init__()
        self.throttle: float = 0.0
        self.steering_input: float = 0.0

    def _apply_intents(
        self, accelerate: bool, decelerate: bool, steer_left: bool, steer_right: bool,
    ) -> None:
        # Opposing intents cancel out.
        if accelerate == decelerate:
            self.throttle = 0.0
        else:
            self.throttle = 1.0 if accelerate else -1.0

        if steer_left == steer_right:
            self.steering_input = 0.0
        else:
            self.steering_input = 1.0 if steer_right else -1.0


class KeyState(NamedTuple):
    """Snapshot of the four driving keys."""

    accelerate: bool = False
    decelerate: bool = False
    steer_left: bool = False
    steer_right: bool = False


class KeyboardCarInputController(CarInputController):
    """Manual driving from externally polled key states.

    Parameters
    ----------
    get_input : callable
        Called once per frame; returns a :class:`KeyState` (or any
        ``(accelerate, decelerate, steer_left, steer_right)`` tuple).
    """

    def __init__(self, get_input: Callable[[], Tuple[bool, bool, bool, bool]]) -> None:
        super().__init__()
        self._get_input = get_input

    def simulate(self, simulation_time: float, time_delta: float) -> None:
        accelerate, decelerate, steer_left, steer_right = self._get_input()
        self._apply_intents(
            bool(accelerate), bool(decelerate), bool(steer_left), bool(steer_right),
        )


class NeuronalNetworkInputController(CarInputController):
    """Driving inputs decided by a :class:`~ml.network.NeuronalNetwork`.

    The normalized values of all the entity's sensors are fed through
    the network; its first four outputs are read as accelerate,
    steer-left, steer-right and decelerate (``> 0`` means pressed).

    Parameters
    ----------
    sensor_count : int
        Number of network inputs.
    hidden_count : int
        Neurons in the hidden layer.
    network : NeuronalNetwork or None
        Use this network instead of a freshly randomised
        ``[sensor_count, hidden_count, 4]`` one.
    seed : int or None
        Seed for the freshly created network.
    """

    def __init__(
        self,
        sensor_count: int,
        hidden_count: int = DEFAULT_HIDDEN_NEURONS,
        network: Optional[NeuronalNetwork] = None,
        seed: Optional[int] = None,
    ) -> None:
        super().__init__()
        if network is None:
            network = NeuronalNetwork([sensor_count, hidden_count, 4], seed=seed)
        self.network = network
        self.last_outputs: Sequence[float] = ()

    def sensor_inputs(self) -> List[float]:
        entity = self.entity
        if entity is None:
            return []
        return [sensor.normalized_value for sensor in entity.get_sensors(BaseSensor)]

    def simulate(self, simulation_time: float, time_delta: float) -> None:
        if self.entity is None:
            return
        outputs = self.network.feed_forward(self.sensor_inputs())
        self.last_outputs = tuple(float(o) for o in outputs)
        if len(outputs) >= 4:
            self._apply_intents(
                accelerate=bool(outputs[0] > 0),
                decelerate=bool(outputs[3] > 0),
                steer_left=bool(outputs[1] > 0),
                steer_right=bool(outputs[2] > 0),
            )


# ── Car physics ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CarDynamics:
    """Immutable bag of the default car physics constants."""

    max_forward_acceleration: float = 20.0
    """Maximum forward acceleration in m/s²."""

    max_reverse_acceleration: float = 10.0
    """Maximum reverse acceleration in m/s²."""

    max_braking_acceleration: float = 30.0
    """Maximum braking deceleration in m/s²."""

    drag_base: float = 1.0
    """Speed-independent drag in m/s²."""

    drag_factor: float = 0.02
    """Speed-squared drag factor in 1/m."""

    max_forward_speed: float = 15.0
    """Forward speed limit in m/s."""

    max_reverse_speed: float = 5.0
    """Reverse speed limit in m/s (positive number)."""

    steering_factor: float = 5.0 / 180.0 * math.pi
    """Heading change per metre driven at full steering input, in rad/m."""

    snap_throttle: float = 0.01
    """Throttle magnitude below which the car counts as coasting."""

    snap_speed: float = 0.5
    """Coasting speeds below this (m/s) are snapped to zero (anti-creep)."""


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


class CarPhysicsController(BaseController):
    """Approximate car physics plus collision-driven death.

    Throttle accelerates or brakes against a speed-squared drag; steering
    authority scales with speed.  Inputs are taken from the first
    :class:`CarInputController` of the entity when there is one,
    otherwise ``throttle`` / ``steering_input`` can be set directly.

    After a collision with a collider of any other entity that has no
    physics controller of its own (road borders, traffic) the car is
    dead and :meth:`simulate` does nothing until :meth:`reset`.

    Parameters
    ----------
    dynamics : CarDynamics or None
        Physics constants; uses defaults when *None*.
    """

    def __init__(self, dynamics: Optional[CarDynamics] = None) -> None:
        super().__init__()
        d = dynamics or CarDynamics()
        self.max_forward_acceleration = d.max_forward_acceleration
        self.max_reverse_acceleration = d.max_reverse_acceleration
        self.max_braking_acceleration = d.max_braking_acceleration
        self.drag_base = d.drag_base
        self.drag_factor = d.drag_factor
        self.max_forward_speed = d.max_forward_speed
        self.max_reverse_speed = d.max_reverse_speed
        self.steering_factor = d.steering_factor
        self.snap_throttle = d.snap_throttle
        self.snap_speed = d.snap_speed
        self.reset()

    def reset(self) -> None:
        """Bring the car back to life at rest with cleared statistics."""
        self.throttle: float = 0.0
        self.steering_input: float = 0.0
        self._acceleration = 0.0
        self._current_speed = 0.0
        self._is_dead = False
        self._time_of_death = 0.0
        self.distance_moved: float = 0.0
        self.distance_traveled: float = 0.0
        self.average_speed: float = 0.0

    # ── read-only state ───────────────────────────────────────────────────

    @property
    def acceleration(self) -> float:
        """Acceleration of the last frame in m/s² (negative = decelerating)."""
        return self._acceleration

    @property
    def current_speed(self) -> float:
        """Signed speed in m/s (negative = reversing)."""
        return self._current_speed

    @property
    def is_dead(self) -> bool:
        return self._is_dead

    @property
    def time_of_death(self) -> float:
        """Simulation time of the fatal collision in s (0 while alive)."""
        return self._time_of_death

    # ── per-frame update ──────────────────────────────────────────────────

    def simulate(self, simulation_time: float, time_delta: float) -> None:
        entity = self.entity
        if self._is_dead or entity is None or entity.graph is None:
            return

        source = entity.get_controller(CarInputController)
        if source is not None:
            self.throttle = bound(source.throttle, -1.0, 1.0)
            self.steering_input = bound(source.steering_input, -1.0, 1.0)

        speed = self._integrate_speed(time_delta)

        angle = entity.angle + self.steering_input * self.steering_factor * speed * time_delta
        if angle > math.pi:
            angle -= 2.0 * math.pi
        elif angle <= -math.pi:
            angle += 2.0 * math.pi

        displacement = circle_point(speed * time_delta, angle)
        entity.position = add(entity.position, displacement)
        entity.angle = angle

        step = math.hypot(*displacement)
        self.distance_moved += step if speed >= 0.0 else -step
        self.distance_traveled = entity.position[1]
        self.average_speed = (
            self.distance_moved / simulation_time if simulation_time > 0.0 else 0.0
        )

        if self._collides(entity):
            self._is_dead = True
            self._time_of_death = simulation_time
            log.info(
                "car died at t=%.2fs pos=(%.2f, %.2f) speed=%.2f traveled=%.1fm",
                simulation_time, entity.position[0], entity.position[1],
                speed, self.distance_traveled,
            )

    def _integrate_speed(self, time_delta: float) -> float:
        throttle = self.throttle
        speed = self._current_speed
        braking = _sign(throttle) != _sign(speed)

        if throttle > 0.0:
            acceleration = throttle * (
                self.max_braking_acceleration if braking else self.max_forward_acceleration
            )
        elif throttle < 0.0:
            acceleration = throttle * (
                self.max_braking_acceleration if braking else self.max_reverse_acceleration
            )
        else:
            acceleration = 0.0

        drag = speed * speed * self.drag_factor + self.drag_base
        if speed > 0.0:
            acceleration -= drag
        elif speed < 0.0:
            acceleration += drag

        speed = bound(
            speed + acceleration * time_delta,
            -self.max_reverse_speed,
            self.max_forward_speed,
        )
        if abs(throttle) < self.snap_throttle and abs(speed) < self.snap_speed:
            speed = 0.0

        self._acceleration = acceleration
        self._current_speed = speed
        return speed

    @staticmethod
    def _collides(entity: Entity) -> bool:
        collider = entity.get_collider(CarCollider)
        if collider is None:
            return False
        rectangle = collider.rectangle()
        if rectangle is None:
            return False
        # Other physics-driven cars are not obstacles.
        for other in entity.others:
            if other.get_controller(CarPhysicsController) is not None:
                continue
            for obstacle in other.colliders:
                if obstacle.check_polygon_collision(rectangle):
                    return True
        return False


# ── Traffic and road ──────────────────────────────────────────────────────────


class CarCruiseController(BaseController):
    """Moves the entity along +Y at a constant speed (no collision checks).

    Parameters
    ----------
    speed : float
        Cruise speed in m/s.
    """

    def __init__(self, speed: float) -> None:
        super().__init__()
        self.speed = float(speed)

    def simulate(self, simulation_time: float, time_delta: float) -> None:
        entity = self.entity
        if entity is None:
            return
        entity.position = add(entity.position, (0.0, self.speed * time_delta))


class RoadController(RoadGeometry, BaseController):
    """Road geometry exposed as a controller; it has no per-frame behaviour."""

    def __init__(self, lane_count: int, lane_width: float) -> None:
        RoadGeometry.__init__(self, lane_count, lane_width)
        BaseController.__init__(self)

    def simulate(self, simulation_time: float, time_delta: float) -> None:
        pass
