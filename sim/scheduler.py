#!/usr/bin/env python3
"""
sim/scheduler.py
================
Background-thread stepping for an :class:`~sim.graph.EntityGraph`.

The thread calls :meth:`EntityGraph.simulate_frame` every
``1 / (frequency * time_scale)`` wall-clock seconds.  The time scale
only changes the cadence; each frame still advances the simulation by
the fixed ``1 / frequency``.  :meth:`SimulationScheduler.step` runs a
single frame synchronously and can be used with or without the timer.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, List, Optional

from config import DEFAULT_TIME_SCALE
from sim.graph import EntityGraph, FrameSimulatedEvent

log = logging.getLogger("scheduler")

# Poll interval while automatic stepping is paused by a zero rate.
_IDLE_POLL_S = 0.05


class SimulationScheduler:
    """Drives an entity graph at a configurable cadence.

    Parameters
    ----------
    graph : EntityGraph
        The graph to step.
    time_scale : float
        Wall-clock speed-up factor (2.0 = twice as fast as real time).
    """

    def __init__(self, graph: EntityGraph, time_scale: float = DEFAULT_TIME_SCALE) -> None:
        self.graph = graph
        self.time_scale = float(time_scale)
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._stop_conditions: List[Callable[[EntityGraph], bool]] = []

    # ── cadence ───────────────────────────────────────────────────────────────

    @property
    def frequency(self) -> float:
        return self.graph.simulation_frequency

    @frequency.setter
    def frequency(self, value: float) -> None:
        with self._lock:
            self.graph.simulation_frequency = float(value)

    def tick_interval(self) -> Optional[float]:
        """Wall-clock seconds between frames, ``None`` while paused."""
        rate = self.frequency * self.time_scale
        if self.frequency <= 0.0 or self.time_scale <= 0.0:
            return None
        return 1.0 / rate

    # ── lifecycle ─────────────────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self, reset: bool = False) -> None:
        """Spawn the background stepping thread.

        Parameters
        ----------
        reset : bool
            Zero the graph's frame count and simulation time first.
        """
        if reset:
            with self._lock:
                self.graph.reset_time()
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(
            target=self._loop, daemon=True, name="SimulationScheduler"
        )
        self._thread.start()
        log.info(
            "Scheduler started at %.1f Hz x%.2f", self.frequency, self.time_scale
        )

    def stop(self) -> None:
        """Signal the thread to stop and wait for it to join."""
        self._running = False
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)
        self._thread = None
        log.info("Scheduler stopped at frame %d", self.graph.frame_count)

    def stop_when(self, condition: Callable[[EntityGraph], bool]) -> None:
        """Stop automatic stepping once *condition(graph)* is true after a frame."""
        self._stop_conditions.append(condition)

    def step(self) -> FrameSimulatedEvent:
        """Simulate exactly one frame on the calling thread."""
        with self._lock:
            return self.graph.simulate_frame()

    # ── background loop ───────────────────────────────────────────────────────

    def _loop(self) -> None:
        while self._running:
            interval = self.tick_interval()
            if interval is None:
                time.sleep(_IDLE_POLL_S)
                continue
            t0 = time.perf_counter()
            try:
                self.step()
            except Exception:
                log.exception("Scheduler tick error")
            if any(condition(self.graph) for condition in self._stop_conditions):
                log.info("Stop condition met at frame %d", self.graph.frame_count)
                self._running = False
                break
            time.sleep(max(0.0, interval - (time.perf_counter() - t0)))
