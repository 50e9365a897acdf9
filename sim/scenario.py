#!/usr/bin/env python3
"""
sim/scenario.py
===============
Construction helpers wiring entities for the default road scenario:
a straight multi-lane road, constant-speed traffic, and a hero car
driven either by key states or by a neural network.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Tuple

from config import (
    DEFAULT_HERO_LANE,
    DEFAULT_LANE_COUNT,
    DEFAULT_LANE_WIDTH_M,
    DEFAULT_SENSOR_RANGE_M,
    DEFAULT_SIMULATION_FREQUENCY_HZ,
    DEFAULT_TRAFFIC,
    DEFAULT_TRAFFIC_SPEED_MPS,
)
from ml.network import NeuronalNetwork
from sim.colliders import CarCollider, RoadCollider
from sim.controllers import (
    CarInputController,
    CarPhysicsController,
    CarCruiseController,
    NeuronalNetworkInputController,
    RoadController,
)
from sim.entity import Entity
from sim.geometry import deg_to_rad
from sim.graph import EntityGraph
from sim.parameters import CarParameterSet
from sim.sensors import DistanceSensor

SensorPattern = Callable[[Entity], Entity]

# (mount x, mount y, angle in degrees, range); a range of None uses the pattern default.
_PATTERN_1: Tuple[Tuple[float, float, float, Optional[float]], ...] = (
    (0.0, 2.0, 0.0, None),
    (0.9, 2.0, 22.5, None),
    (-0.9, 2.0, -22.5, None),
    (0.9, 1.7, 45.0, None),
    (-0.9, 1.7, -45.0, None),
)
_PATTERN_2: Tuple[Tuple[float, float, float, Optional[float]], ...] = (
    (0.0, 2.0, 0.0, None),
    (0.9, 2.0, 20.0, None),
    (-0.9, 2.0, -20.0, None),
    (0.9, 1.7, 45.0, None),
    (-0.9, 1.7, -45.0, None),
    (0.9, 1.5, 90.0, 3.0),
    (-0.9, 1.5, -90.0, 3.0),
    (0.9, -1.5, 90.0, 3.0),
    (-0.9, -1.5, -90.0, 3.0),
)


def _with_pattern(entity: Entity, pattern, sensor_range: float) -> Entity:
    for x, y, angle_deg, rng in pattern:
        entity.with_sensor(
            DistanceSensor((x, y), deg_to_rad(angle_deg), rng if rng is not None else sensor_range)
        )
    return entity


def with_sensor_pattern_1(entity: Entity, sensor_range: float = DEFAULT_SENSOR_RANGE_M) -> Entity:
    """Five forward-facing rays fanned out to ±45°."""
    return _with_pattern(entity, _PATTERN_1, sensor_range)


def with_sensor_pattern_2(entity: Entity, sensor_range: float = DEFAULT_SENSOR_RANGE_M) -> Entity:
    """Five forward rays plus four short side rays (front and rear)."""
    return _with_pattern(entity, _PATTERN_2, sensor_range)


def make_road(
    lane_count: int = DEFAULT_LANE_COUNT, lane_width: float = DEFAULT_LANE_WIDTH_M,
) -> Tuple[Entity, RoadController]:
    """Road entity with its geometry controller and border collider."""
    road = RoadController(lane_count, lane_width)
    entity = Entity().with_controller(road).with_collider(RoadCollider())
    return entity, road


def make_traffic_car(
    road: RoadController,
    lane: int,
    y: float,
    speed: float = DEFAULT_TRAFFIC_SPEED_MPS,
) -> Entity:
    """Constant-speed obstacle car centred in *lane* at road position *y*."""
    return (
        Entity((road.lane_position(lane), y), 0.0)
        .with_parameter_set(CarParameterSet())
        .with_collider(CarCollider())
        .with_controller(CarCruiseController(speed))
    )


def _car_body(road: RoadController, lane: int, y: float, pattern: SensorPattern) -> Entity:
    entity = (
        Entity((road.lane_position(lane), y), 0.0)
        .with_parameter_set(CarParameterSet())
        .with_collider(CarCollider())
    )
    return pattern(entity)


def make_hero_car(
    road: RoadController,
    input_controller: Optional[CarInputController] = None,
    lane: int = DEFAULT_HERO_LANE,
    y: float = 0.0,
    pattern: SensorPattern = with_sensor_pattern_1,
) -> Tuple[Entity, CarPhysicsController]:
    """Physics-driven car with sensors; the input controller comes first so
    its values are fresh when the physics controller reads them.
    """
    entity = _car_body(road, lane, y, pattern)
    if input_controller is not None:
        entity.with_controller(input_controller)
    physics = CarPhysicsController()
    entity.with_controller(physics)
    return entity, physics


def make_ai_car(
    road: RoadController,
    network: Optional[NeuronalNetwork] = None,
    lane: int = DEFAULT_HERO_LANE,
    y: float = 0.0,
    pattern: SensorPattern = with_sensor_pattern_1,
    seed: Optional[int] = None,
) -> Tuple[Entity, CarPhysicsController]:
    """Hero car whose driving inputs come from a neural network with one
    input per sensor of *pattern*.  *seed* only applies when a fresh
    network is created.
    """
    entity = _car_body(road, lane, y, pattern)
    entity.with_controller(
        NeuronalNetworkInputController(len(entity.sensors), network=network, seed=seed)
    )
    physics = CarPhysicsController()
    entity.with_controller(physics)
    return entity, physics


def populate(
    graph: EntityGraph,
    road: RoadController,
    traffic: Iterable[Tuple[int, float]] = DEFAULT_TRAFFIC,
    speed: float = DEFAULT_TRAFFIC_SPEED_MPS,
) -> None:
    """Add one traffic car per ``(lane, y)`` entry, skipping lanes the road lacks."""
    for lane, y in traffic:
        if 0 <= lane < road.lane_count:
            graph.add(make_traffic_car(road, lane, y, speed))


def build_default_scenario(
    input_controller: Optional[CarInputController] = None,
    frequency: float = DEFAULT_SIMULATION_FREQUENCY_HZ,
    traffic: Iterable[Tuple[int, float]] = DEFAULT_TRAFFIC,
) -> Tuple[EntityGraph, Entity, CarPhysicsController]:
    """Road, traffic and one hero car.

    Returns
    -------
    (graph, hero_entity, hero_physics)
    """
    graph = EntityGraph(frequency)
    road_entity, road = make_road()
    graph.add(road_entity)
    populate(graph, road, traffic)
    if input_controller is None:
        hero, physics = make_ai_car(road)
    else:
        hero, physics = make_hero_car(road, input_controller)
    graph.add(hero)
    return graph, hero, physics
