#!/usr/bin/env python3
"""
sim/graph.py
============
The :class:`EntityGraph` owns every :class:`~sim.entity.Entity` of a
run and advances them one fixed-size frame at a time.

:meth:`EntityGraph.simulate_frame` is a plain synchronous step with no
timer or global state; automatic stepping lives in
:class:`~sim.scheduler.SimulationScheduler`.  A fault raised by an
entity aborts the rest of that frame, is logged, and is reported to the
frame listeners instead of propagating to the caller.  A failing listener
is logged and does not stop the remaining listeners.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterator, List, Optional, Tuple

from config import DEFAULT_SIMULATION_FREQUENCY_HZ
from sim.entity import Entity

if TYPE_CHECKING:
    from sim.controllers import CarPhysicsController

log = logging.getLogger("graph")


@dataclass(frozen=True)
class FrameSimulatedEvent:
    """Completion notice emitted once per simulated frame.

    Attributes
    ----------
    simulation_time : float
        Total simulation time in seconds after the frame.
    frame_count : int
        Number of frames simulated so far, including this one.
    exception : Exception or None
        The fault that aborted the frame, ``None`` for a clean frame.
    """

    simulation_time: float
    frame_count: int
    exception: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.exception is None


FrameListener = Callable[[FrameSimulatedEvent], None]


class EntityGraph:
    """Ordered collection of entities plus the simulation clock.

    Parameters
    ----------
    simulation_frequency : float
        Nominal frames per second; every frame advances the clock by
        ``1 / simulation_frequency`` seconds.
    """

    def __init__(
        self, simulation_frequency: float = DEFAULT_SIMULATION_FREQUENCY_HZ,
    ) -> None:
        self._entities: List[Entity] = []
        self._listeners: List[FrameListener] = []
        self.simulation_frequency = float(simulation_frequency)
        self.frame_count: int = 0
        self.simulation_time: float = 0.0

    # ── construction ──────────────────────────────────────────────────────

    @property
    def entities(self) -> Tuple[Entity, ...]:
        return tuple(self._entities)

    def __len__(self) -> int:
        return len(self._entities)

    def add(self, entity: Entity) -> Entity:
        """Append *entity* and point its back-reference at this graph."""
        if not isinstance(entity, Entity):
            raise TypeError(f"expected an Entity, got {type(entity).__name__}")
        owner = entity.graph
        if owner is not None:
            raise ValueError("entity already belongs to a graph")
        entity.graph = self
        self._entities.append(entity)
        return entity

    # ── listeners ─────────────────────────────────────────────────────────

    def add_frame_listener(self, listener: FrameListener) -> None:
        self._listeners.append(listener)

    def remove_frame_listener(self, listener: FrameListener) -> None:
        self._listeners.remove(listener)

    # ── simulation ────────────────────────────────────────────────────────

    @property
    def time_delta(self) -> float:
        return 1.0 / self.simulation_frequency

    def reset_time(self) -> None:
        """Zero the frame counter and the simulation clock."""
        self.frame_count = 0
        self.simulation_time = 0.0

    def simulate_frame(self) -> FrameSimulatedEvent:
        """Advance the clock by one frame and simulate every entity.

        Returns
        -------
        FrameSimulatedEvent
            The event that was also handed to every frame listener.
        """
        if self.simulation_frequency <= 0.0:
            raise ValueError(
                f"simulation_frequency must be positive, got {self.simulation_frequency}"
            )
        time_delta = self.time_delta
        self.frame_count += 1
        self.simulation_time += time_delta

        fault: Optional[Exception] = None
        try:
            for entity in self._entities:
                entity.simulate(self.simulation_time, time_delta)
        except Exception as exc:
            log.exception("frame %d aborted", self.frame_count)
            fault = exc

        event = FrameSimulatedEvent(self.simulation_time, self.frame_count, fault)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                log.exception("frame %d listener failed", self.frame_count)
        return event

    # ── queries ───────────────────────────────────────────────────────────

    def physics_controllers(self) -> Iterator["CarPhysicsController"]:
        """Every car physics controller in entity insertion order."""
        from sim.controllers import CarPhysicsController
        for entity in self._entities:
            yield from entity.get_controllers(CarPhysicsController)

    def alive_car_count(self) -> int:
        return sum(1 for c in self.physics_controllers() if not c.is_dead)
