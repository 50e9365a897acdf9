#!/usr/bin/env python3
"""
Tests for scenario construction and the mutation-only evolution loop.
"""

from __future__ import annotations

import os
import tempfile
import unittest

import numpy as np

from ml.network import NeuronalNetwork
from sim.colliders import CarCollider
from sim.controllers import (
    CarPhysicsController,
    KeyboardCarInputController,
    KeyState,
    NeuronalNetworkInputController,
)
from sim.entity import Entity
from sim.evolution import alive_count, best_car, build_generation, evolve, run_generation
from sim.graph import EntityGraph
from sim.scenario import (
    build_default_scenario,
    make_ai_car,
    make_hero_car,
    make_road,
    populate,
    with_sensor_pattern_2,
)
from sim.sensors import DistanceSensor


def _brain(entity: Entity) -> NeuronalNetwork:
    return entity.get_controller(NeuronalNetworkInputController).network


class ScenarioTests(unittest.TestCase):
    def test_default_scenario_with_ai_driver(self) -> None:
        graph, hero, physics = build_default_scenario()
        # Road, five traffic cars and the hero.
        self.assertEqual(len(graph), 7)
        self.assertIs(graph.entities[-1], hero)
        self.assertEqual(len(list(hero.get_sensors(DistanceSensor))), 5)
        self.assertEqual(_brain(hero).neuron_counts[0], 5)
        self.assertIs(hero.get_controller(CarPhysicsController), physics)
        self.assertEqual(graph.alive_car_count(), 1)

    def test_input_controller_precedes_physics(self) -> None:
        keyboard = KeyboardCarInputController(lambda: KeyState())
        _graph, hero, physics = build_default_scenario(keyboard)
        self.assertEqual(hero.controllers, [keyboard, physics])

    def test_second_sensor_pattern(self) -> None:
        _road_entity, road = make_road()
        hero, _physics = make_hero_car(road, pattern=with_sensor_pattern_2)
        self.assertEqual(len(hero.sensors), 9)
        ranges = sorted(sensor.range for sensor in hero.sensors)
        self.assertEqual(ranges[:4], [3.0] * 4)

        ai, _physics = make_ai_car(road, pattern=with_sensor_pattern_2)
        self.assertEqual(_brain(ai).neuron_counts, [9, 6, 4])

    def test_populate_skips_missing_lanes(self) -> None:
        graph = EntityGraph()
        _road_entity, road = make_road(2, 3.0)
        populate(graph, road, [(0, 10.0), (1, 20.0), (5, 30.0)])
        self.assertEqual(len(graph), 2)

    def test_hero_survives_first_second_at_rest(self) -> None:
        graph, _hero, physics = build_default_scenario(
            KeyboardCarInputController(lambda: KeyState()),
        )
        for _ in range(60):
            graph.simulate_frame()
        self.assertFalse(physics.is_dead)
        self.assertEqual(physics.current_speed, 0.0)


class EvolutionTests(unittest.TestCase):
    @staticmethod
    def _cars(graphs):
        return [car for graph in graphs for car in graph.physics_controllers()]

    def test_first_car_keeps_parent_and_others_mutate(self) -> None:
        parent = NeuronalNetwork([5, 6, 4], seed=0)
        graphs = build_generation(3, parent, mutation_amount=0.5, traffic=(), seed=1)
        self.assertEqual(len(graphs), 3)
        cars = self._cars(graphs)
        self.assertEqual(len(cars), 3)

        first = _brain(cars[0].entity)
        self.assertIsNot(first, parent)
        for level, parent_level in zip(first.levels, parent.levels):
            np.testing.assert_array_equal(level.weights, parent_level.weights)

        second = _brain(cars[1].entity)
        self.assertFalse(np.array_equal(second.levels[0].weights, parent.levels[0].weights))

    def test_each_candidate_gets_its_own_road_and_traffic(self) -> None:
        graphs = build_generation(2, traffic=[(0, 30.0), (2, 40.0)], seed=6)
        for graph in graphs:
            # Road, two traffic cars and one AI car.
            self.assertEqual(len(graph), 4)
            self.assertEqual(graph.alive_car_count(), 1)

    def test_candidates_do_not_see_each_other(self) -> None:
        def first_car_readings(population: int):
            graphs = build_generation(population, traffic=(), seed=7)
            graphs[0].simulate_frame()
            hero = next(graphs[0].physics_controllers()).entity
            return [sensor.normalized_value for sensor in hero.sensors]

        self.assertEqual(first_car_readings(2), first_car_readings(1))
        # Only the diagonal rays reach the road borders.
        self.assertEqual(first_car_readings(2)[:3], [0.0, 0.0, 0.0])

    def test_generation_without_parent(self) -> None:
        graphs = build_generation(4, traffic=(), seed=2)
        self.assertEqual(alive_count(graphs), 4)
        brains = [_brain(car.entity) for car in self._cars(graphs)]
        self.assertFalse(np.array_equal(brains[0].levels[0].weights, brains[1].levels[0].weights))

    def test_invalid_population(self) -> None:
        with self.assertRaises(ValueError):
            build_generation(0)

    def test_run_generation_respects_frame_limit(self) -> None:
        graphs = build_generation(2, traffic=(), seed=3)
        self.assertEqual(run_generation(graphs, max_frames=5), 5)
        self.assertEqual([graph.frame_count for graph in graphs], [5, 5])

    def test_run_generation_stops_when_all_cars_died(self) -> None:
        graph = EntityGraph()
        road_entity, _road = make_road(3, 3.0)
        graph.add(road_entity)
        graph.add(Entity((-4.5, 0.0)).with_collider(CarCollider())
                  .with_controller(CarPhysicsController()))
        with self.assertLogs("physics", level="INFO"):
            frames = run_generation([graph], max_frames=100)
        self.assertEqual(frames, 1)

    def test_dead_candidates_are_no_longer_stepped(self) -> None:
        doomed = EntityGraph()
        road_entity, _road = make_road(3, 3.0)
        doomed.add(road_entity)
        doomed.add(Entity((-4.5, 0.0)).with_collider(CarCollider())
                   .with_controller(CarPhysicsController()))
        survivor = build_generation(1, traffic=(), seed=8)[0]
        with self.assertLogs("physics", level="INFO"):
            frames = run_generation([doomed, survivor], max_frames=3)
        self.assertEqual(frames, 3)
        self.assertEqual(doomed.frame_count, 1)
        self.assertEqual(survivor.frame_count, 3)

    def test_best_car_is_furthest_along_the_road(self) -> None:
        graphs = build_generation(3, traffic=(), seed=4)
        cars = self._cars(graphs)
        for car, distance in zip(cars, (4.0, 12.5, -1.0)):
            car.distance_traveled = distance
        self.assertIs(best_car(graphs), cars[1])
        self.assertIsNone(best_car([]))
        self.assertIsNone(best_car([EntityGraph()]))

    def test_evolve_returns_best_brain_and_saves_it(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "best_brain.joblib")
            with self.assertLogs("evolution", level="INFO") as logs:
                best, history = evolve(
                    generations=2, population=3, max_frames=20, save_path=path, seed=5,
                )
            self.assertTrue(os.path.exists(path))
        self.assertEqual(len(history), 2)
        self.assertEqual(best.neuron_counts, [5, 6, 4])
        self.assertEqual(len([r for r in logs.records if r.name == "evolution"]), 2)

    def test_evolve_needs_a_generation(self) -> None:
        with self.assertRaises(ValueError):
            evolve(generations=0)


if __name__ == "__main__":
    unittest.main()
