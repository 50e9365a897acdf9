#!/usr/bin/env python3
"""
main.py
=======
Headless entry point.

Environment overrides
---------------------
SIM_MODE            ``drive`` (one AI car, default) or ``evolve``.
SIM_FREQUENCY_HZ    Simulation frequency in Hz.
SIM_TIME_SCALE      Wall-clock speed-up of the drive run.
SIM_DURATION_S      Wall-clock limit of the drive run in seconds.
SIM_GENERATIONS     Generations of an evolve run.
SIM_POPULATION      Cars per generation of an evolve run.
SIM_BRAIN_PATH      Network file to load / save (relative to the project).
SIM_LOG_LEVEL       Logging level name, e.g. ``DEBUG``.
"""

import logging
import os
import time

from config import (
    BRAIN_REL_PATH,
    DEFAULT_DURATION_S,
    DEFAULT_GENERATIONS,
    DEFAULT_POPULATION,
    DEFAULT_SIMULATION_FREQUENCY_HZ,
    DEFAULT_TIME_SCALE,
)
from logging_setup import setup_logging
from ml.brain_store import load_network, save_network
from sim.controllers import NeuronalNetworkInputController
from sim.evolution import evolve
from sim.metrics import FrameMetrics
from sim.scenario import build_default_scenario
from sim.scheduler import SimulationScheduler

project_root = os.path.abspath(os.path.dirname(__file__))


def _env_float(name: str, default: float) -> float:
    return float(os.environ.get(name, default))


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


def run_drive(brain_path: str, log: logging.Logger) -> None:
    frequency = _env_float("SIM_FREQUENCY_HZ", DEFAULT_SIMULATION_FREQUENCY_HZ)
    time_scale = _env_float("SIM_TIME_SCALE", DEFAULT_TIME_SCALE)
    duration = _env_float("SIM_DURATION_S", DEFAULT_DURATION_S)

    graph, hero, physics = build_default_scenario(frequency=frequency)
    if os.path.exists(brain_path):
        hero.get_controller(NeuronalNetworkInputController).network = load_network(brain_path)
    else:
        log.info("No brain at '%s', driving a random network", brain_path)

    metrics = FrameMetrics()
    graph.add_frame_listener(metrics)

    scheduler = SimulationScheduler(graph, time_scale)
    scheduler.stop_when(lambda g: g.alive_car_count() == 0)
    scheduler.start()
    deadline = time.monotonic() + duration
    try:
        while scheduler.is_running and time.monotonic() < deadline:
            time.sleep(0.5)
            log.info(
                "t=%.1fs speed=%.1f m/s traveled=%.1fm",
                graph.simulation_time, physics.current_speed, physics.distance_traveled,
            )
    except KeyboardInterrupt:
        log.info("Shutting down...")
    finally:
        scheduler.stop()

    log.info("Result: dead=%s traveled=%.1fm metrics=%s",
             physics.is_dead, physics.distance_traveled, metrics.report())


def run_evolve(brain_path: str, log: logging.Logger) -> None:
    parent = load_network(brain_path) if os.path.exists(brain_path) else None
    best, history = evolve(
        generations=_env_int("SIM_GENERATIONS", DEFAULT_GENERATIONS),
        population=_env_int("SIM_POPULATION", DEFAULT_POPULATION),
        parent=parent,
    )
    save_network(best, brain_path)
    log.info("Best distance per generation: %s", ", ".join(f"{d:.1f}" for d in history))


def main():
    setup_logging(getattr(logging, os.environ.get("SIM_LOG_LEVEL", "INFO").upper(), logging.INFO))
    log = logging.getLogger("main")

    brain_path = os.path.join(project_root, os.environ.get("SIM_BRAIN_PATH", BRAIN_REL_PATH))
    mode = os.environ.get("SIM_MODE", "drive").lower()
    log.info("Starting in %s mode...", mode)

    if mode == "evolve":
        run_evolve(brain_path, log)
    elif mode == "drive":
        run_drive(brain_path, log)
    else:
        raise SystemExit(f"unknown SIM_MODE {mode!r} (expected 'drive' or 'evolve')")


if __name__ == "__main__":
    main()
