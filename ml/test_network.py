#!/usr/bin/env python3
"""
Tests for the feed-forward network, its mutation and joblib persistence.
"""

from __future__ import annotations

import os
import tempfile
import unittest

import numpy as np

from ml.brain_store import load_network, network_from_state, network_state, save_network
from ml.network import Level, NeuronalNetwork


class LevelTests(unittest.TestCase):
    def test_threshold_outputs(self) -> None:
        level = Level(2, 3, np.random.default_rng(0))
        level.weights[:] = np.array([[1.0, 0.0, -1.0], [1.0, 0.0, -1.0]])
        level.biases[:] = np.array([1.5, 0.0, -2.5])
        outputs = level.feed_forward([1.0, 1.0])
        # 2 > 1.5, 0 > 0 is false, -2 > -2.5.
        self.assertEqual(list(outputs), [1.0, 0.0, 1.0])

    def test_extra_inputs_are_ignored(self) -> None:
        level = Level(2, 1, np.random.default_rng(0))
        level.feed_forward([0.25, 0.5, 99.0])
        self.assertEqual(list(level.inputs), [0.25, 0.5])

    def test_initial_values_within_unit_range(self) -> None:
        level = Level(4, 3, np.random.default_rng(1))
        self.assertEqual(level.weights.shape, (4, 3))
        self.assertTrue(np.all(np.abs(level.weights) <= 1.0))
        self.assertTrue(np.all(np.abs(level.biases) <= 1.0))


class NeuronalNetworkTests(unittest.TestCase):
    def test_topology_and_binary_outputs(self) -> None:
        network = NeuronalNetwork([5, 6, 4], seed=3)
        self.assertEqual(network.neuron_counts, [5, 6, 4])
        self.assertEqual(len(network.levels), 2)
        outputs = network.feed_forward([0.1, 0.9, 0.0, 0.5, 1.0])
        self.assertEqual(outputs.shape, (4,))
        self.assertTrue(set(outputs.tolist()) <= {0.0, 1.0})

    def test_same_seed_same_network(self) -> None:
        a = NeuronalNetwork([3, 4, 2], seed=11)
        b = NeuronalNetwork([3, 4, 2], seed=11)
        for la, lb in zip(a.levels, b.levels):
            np.testing.assert_array_equal(la.weights, lb.weights)
            np.testing.assert_array_equal(la.biases, lb.biases)

    def test_feed_forward_returns_a_copy(self) -> None:
        network = NeuronalNetwork([2, 2], seed=0)
        outputs = network.feed_forward([1.0, 1.0])
        outputs[:] = 42.0
        self.assertNotIn(42.0, network.levels[-1].outputs.tolist())

    def test_invalid_topology(self) -> None:
        with self.assertRaises(ValueError):
            NeuronalNetwork([4])
        with self.assertRaises(ValueError):
            NeuronalNetwork([4, 0, 2])

    def test_mutate_zero_is_a_no_op(self) -> None:
        network = NeuronalNetwork([3, 4, 2], seed=5)
        before = [level.weights.copy() for level in network.levels]
        network.mutate(0.0)
        for level, weights in zip(network.levels, before):
            np.testing.assert_array_equal(level.weights, weights)

    def test_full_mutation_forgets_previous_values(self) -> None:
        a = NeuronalNetwork([3, 4, 2], seed=8)
        b = NeuronalNetwork([3, 4, 2], seed=8)
        for level in b.levels:
            level.weights[:] = 0.123
            level.biases[:] = -0.5
        a.mutate(1.0)
        b.mutate(1.0)
        for la, lb in zip(a.levels, b.levels):
            np.testing.assert_array_equal(la.weights, lb.weights)
            np.testing.assert_array_equal(la.biases, lb.biases)
            self.assertTrue(np.all(np.abs(la.weights) <= 1.0))

    def test_partial_mutation_stays_in_range(self) -> None:
        network = NeuronalNetwork([3, 4, 2], seed=2)
        original = network.levels[0].weights.copy()
        network.mutate(0.3)
        changed = network.levels[0].weights
        self.assertFalse(np.array_equal(original, changed))
        self.assertTrue(np.all(np.abs(changed) <= 1.0))

    def test_invalid_mutation_amount(self) -> None:
        network = NeuronalNetwork([2, 2], seed=0)
        with self.assertRaises(ValueError):
            network.mutate(1.5)
        with self.assertRaises(ValueError):
            network.mutate(-0.1)

    def test_copy_is_independent(self) -> None:
        parent = NeuronalNetwork([3, 4, 2], seed=4)
        child = parent.copy(seed=9)
        np.testing.assert_array_equal(parent.levels[0].weights, child.levels[0].weights)
        child.mutate(1.0)
        self.assertFalse(np.array_equal(parent.levels[0].weights, child.levels[0].weights))


class BrainStoreTests(unittest.TestCase):
    def test_save_and_load(self) -> None:
        network = NeuronalNetwork([5, 6, 4], seed=21)
        inputs = [0.2, 0.0, 0.7, 1.0, 0.4]
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "nested", "brain.joblib")
            with self.assertLogs("brain_store", level="INFO"):
                save_network(network, path)
                loaded = load_network(path)
        self.assertEqual(loaded.neuron_counts, [5, 6, 4])
        for original, restored in zip(network.levels, loaded.levels):
            np.testing.assert_array_equal(original.weights, restored.weights)
            np.testing.assert_array_equal(original.biases, restored.biases)
        np.testing.assert_array_equal(network.feed_forward(inputs), loaded.feed_forward(inputs))

    def test_rejects_unknown_version(self) -> None:
        state = network_state(NeuronalNetwork([2, 2], seed=0))
        state["version"] = 99
        with self.assertRaises(ValueError):
            network_from_state(state)

    def test_rejects_mismatched_shapes(self) -> None:
        state = network_state(NeuronalNetwork([2, 3], seed=0))
        state["weights"][0] = np.zeros((3, 3))
        with self.assertRaises(ValueError):
            network_from_state(state)

    def test_rejects_missing_levels(self) -> None:
        state = network_state(NeuronalNetwork([2, 3, 2], seed=0))
        state["biases"] = state["biases"][:1]
        with self.assertRaises(ValueError):
            network_from_state(state)


if __name__ == "__main__":
    unittest.main()
