#!/usr/bin/env python3
"""
sim/evolution.py
================
Mutation-only search for a network that drives the hero car far.

Every generation runs a full population of network-driven cars, each
in its own :class:`~sim.graph.EntityGraph` with the same road and
traffic, so no candidate ever sees another on its sensors.  The car that
got furthest along the road provides the parent of the next generation:
car 0 keeps the parent unchanged and every other car drives a mutated
copy of it.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from config import (
    DEFAULT_GENERATION_FRAMES,
    DEFAULT_GENERATIONS,
    DEFAULT_MUTATION_AMOUNT,
    DEFAULT_POPULATION,
    DEFAULT_SIMULATION_FREQUENCY_HZ,
    DEFAULT_TRAFFIC,
)
from ml.brain_store import save_network
from ml.network import NeuronalNetwork
from sim.controllers import CarPhysicsController, NeuronalNetworkInputController
from sim.graph import EntityGraph
from sim.scenario import make_ai_car, make_road, populate

log = logging.getLogger("evolution")


def build_generation(
    population: int = DEFAULT_POPULATION,
    parent: Optional[NeuronalNetwork] = None,
    mutation_amount: float = DEFAULT_MUTATION_AMOUNT,
    frequency: float = DEFAULT_SIMULATION_FREQUENCY_HZ,
    traffic: Iterable[Tuple[int, float]] = DEFAULT_TRAFFIC,
    seed: Optional[int] = None,
) -> List[EntityGraph]:
    """One graph per candidate, each with the road, its traffic and a
    single AI car.

    Parameters
    ----------
    population : int
        Number of network-driven cars (at least one).
    parent : NeuronalNetwork or None
        Brain of the previous generation's best car.  Without a parent
        every car gets a freshly randomised network.
    mutation_amount : float
        Passed to :meth:`NeuronalNetwork.mutate` for every child.
    seed : int or None
        Base seed; car *i* uses ``seed + i`` when given.
    """
    if population < 1:
        raise ValueError(f"population must be at least 1, got {population}")

    traffic = tuple(traffic)
    graphs: List[EntityGraph] = []
    for i in range(population):
        car_seed = None if seed is None else seed + i
        network = None
        if parent is not None:
            network = parent.copy(seed=car_seed)
            if i > 0:
                network.mutate(mutation_amount)

        graph = EntityGraph(frequency)
        road_entity, road = make_road()
        graph.add(road_entity)
        populate(graph, road, traffic)
        entity, _ = make_ai_car(road, network, seed=car_seed)
        graph.add(entity)
        graphs.append(graph)
    return graphs


def alive_count(graphs: Sequence[EntityGraph]) -> int:
    return sum(graph.alive_car_count() for graph in graphs)


def run_generation(
    graphs: Sequence[EntityGraph], max_frames: int = DEFAULT_GENERATION_FRAMES,
) -> int:
    """Simulate until no car is alive or *max_frames* frames have run.

    Graphs whose car has died are no longer stepped.

    Returns
    -------
    int
        Number of frames simulated.
    """
    frames = 0
    while frames < max_frames:
        alive = [graph for graph in graphs if graph.alive_car_count() > 0]
        if not alive:
            break
        for graph in alive:
            graph.simulate_frame()
        frames += 1
    return frames


def best_car(graphs: Iterable[EntityGraph]) -> Optional[CarPhysicsController]:
    """Physics controller that got furthest along the road, if any."""
    cars = [car for graph in graphs for car in graph.physics_controllers()]
    if not cars:
        return None
    return max(cars, key=lambda car: car.distance_traveled)


def _brain_of(car: CarPhysicsController) -> NeuronalNetwork:
    return car.entity.get_controller(NeuronalNetworkInputController).network


def evolve(
    generations: int = DEFAULT_GENERATIONS,
    population: int = DEFAULT_POPULATION,
    parent: Optional[NeuronalNetwork] = None,
    mutation_amount: float = DEFAULT_MUTATION_AMOUNT,
    max_frames: int = DEFAULT_GENERATION_FRAMES,
    save_path: Optional[str] = None,
    seed: Optional[int] = None,
) -> Tuple[NeuronalNetwork, List[float]]:
    """Run *generations* rounds of build, simulate and select.

    Returns
    -------
    (best_network, best_distances)
        The parent for a further generation and the best
        ``distance_traveled`` of every generation.
    """
    if generations < 1:
        raise ValueError(f"generations must be at least 1, got {generations}")

    history: List[float] = []
    for generation in range(generations):
        gen_seed = None if seed is None else seed + generation * population
        graphs = build_generation(population, parent, mutation_amount, seed=gen_seed)
        frames = run_generation(graphs, max_frames)
        best = best_car(graphs)
        parent = _brain_of(best).copy()
        history.append(best.distance_traveled)
        log.info(
            "generation %d/%d: %d frames, %d alive, best %.1fm (avg %.2f m/s)",
            generation + 1, generations, frames, alive_count(graphs),
            best.distance_traveled, best.average_speed,
        )
        if save_path:
            save_network(parent, save_path)
    return parent, history
