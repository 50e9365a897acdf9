#!/usr/bin/env python3
"""
sim/entity.py
=============
Entity / component data model.

An :class:`Entity` has no behaviour of its own: it carries a position,
a heading and four ordered component lists (controllers, colliders,
sensors, parameter sets).  Components are attached with the fluent
``with_*`` methods and keep a *weak* reference back to their owner, so
the entity is never kept alive by its own components.
"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Iterator, List, Optional, Type, TypeVar

from sim.geometry import Vec2

if TYPE_CHECKING:
    from sim.colliders import BaseCollider
    from sim.controllers import BaseController
    from sim.graph import EntityGraph
    from sim.parameters import ParameterSet
    from sim.sensors import BaseSensor

T = TypeVar("T")


class Component:
    """Base class of every entity component.

    Holds a non-owning reference to the entity it is attached to.
    """

    def __init__(self) -> None:
        self._entity_ref: Optional[weakref.ReferenceType] = None

    @property
    def entity(self) -> Optional["Entity"]:
        """The owning entity, or ``None`` when detached."""
        if self._entity_ref is None:
            return None
        return self._entity_ref()

    def _attach(self, entity: "Entity") -> None:
        owner = self.entity
        if owner is not None and owner is not entity:
            raise ValueError(
                f"{type(self).__name__} is already attached to another entity"
            )
        self._entity_ref = weakref.ref(entity)


def _first(items: List, cls: Type[T]) -> Optional[T]:
    for item in items:
        if isinstance(item, cls):
            return item
    return None


def _all(items: List, cls: Type[T]) -> Iterator[T]:
    return (item for item in items if isinstance(item, cls))


class Entity:
    """A positioned, headed object composed of components.

    Parameters
    ----------
    position : (float, float)
        World position in metres.
    angle : float
        Heading in radians (0 = +Y, positive = clockwise).
    """

    def __init__(self, position: Vec2 = (0.0, 0.0), angle: float = 0.0) -> None:
        self.position: Vec2 = (float(position[0]), float(position[1]))
        self.angle: float = float(angle)
        self.controllers: List["BaseController"] = []
        self.colliders: List["BaseCollider"] = []
        self.sensors: List["BaseSensor"] = []
        self.parameters: List["ParameterSet"] = []
        self._graph_ref: Optional[weakref.ReferenceType] = None

    def __repr__(self) -> str:
        return (
            f"Entity(position=({self.position[0]:.2f}, {self.position[1]:.2f}), "
            f"angle={self.angle:.3f})"
        )

    # ── graph back-reference ──────────────────────────────────────────────

    @property
    def graph(self) -> Optional["EntityGraph"]:
        """The graph this entity was added to, if any."""
        if self._graph_ref is None:
            return None
        return self._graph_ref()

    @graph.setter
    def graph(self, graph: Optional["EntityGraph"]) -> None:
        self._graph_ref = weakref.ref(graph) if graph is not None else None

    @property
    def others(self) -> Iterator["Entity"]:
        """Every other entity in the same graph (empty when detached)."""
        graph = self.graph
        if graph is None:
            return iter(())
        return (e for e in graph.entities if e is not self)

    # ── fluent construction ───────────────────────────────────────────────

    def with_controller(self, controller: "BaseController") -> "Entity":
        from sim.controllers import BaseController
        self._attach(controller, BaseController, self.controllers)
        return self

    def with_collider(self, collider: "BaseCollider") -> "Entity":
        from sim.colliders import BaseCollider
        self._attach(collider, BaseCollider, self.colliders)
        return self

    def with_sensor(self, sensor: "BaseSensor") -> "Entity":
        from sim.sensors import BaseSensor
        self._attach(sensor, BaseSensor, self.sensors)
        return self

    def with_parameter_set(self, parameter_set: "ParameterSet") -> "Entity":
        from sim.parameters import ParameterSet
        self._attach(parameter_set, ParameterSet, self.parameters)
        return self

    def _attach(self, component: Component, kind: type, target: List) -> None:
        if not isinstance(component, kind):
            raise TypeError(
                f"expected a {kind.__name__}, got {type(component).__name__}"
            )
        if any(existing is component for existing in target):
            raise ValueError(f"{type(component).__name__} is already attached")
        component._attach(self)
        target.append(component)

    # ── typed queries (first match in insertion order) ────────────────────

    def get_controller(self, cls: Type[T]) -> Optional[T]:
        return _first(self.controllers, cls)

    def get_controllers(self, cls: Type[T]) -> Iterator[T]:
        return _all(self.controllers, cls)

    def get_collider(self, cls: Type[T]) -> Optional[T]:
        return _first(self.colliders, cls)

    def get_colliders(self, cls: Type[T]) -> Iterator[T]:
        return _all(self.colliders, cls)

    def get_sensor(self, cls: Type[T]) -> Optional[T]:
        return _first(self.sensors, cls)

    def get_sensors(self, cls: Type[T]) -> Iterator[T]:
        return _all(self.sensors, cls)

    def get_parameter_set(self, cls: Type[T]) -> Optional[T]:
        return _first(self.parameters, cls)

    def get_parameter_sets(self, cls: Type[T]) -> Iterator[T]:
        return _all(self.parameters, cls)

    # ── simulation ────────────────────────────────────────────────────────

    def simulate(self, simulation_time: float, time_delta: float) -> None:
        """Simulate one frame: every sensor first, then every controller."""
        for sensor in self.sensors:
            sensor.simulate(simulation_time, time_delta)
        for controller in self.controllers:
            controller.simulate(simulation_time, time_delta)
