"""
ml/network.py
=============
Minimal fixed-topology feed-forward network with binary-threshold
neurons, in the style of Radu Mariescu-Istodor's self-driving car
tutorial.

There is no training: the only adaptation mechanism is
:meth:`NeuronalNetwork.mutate`, which pulls every weight and bias
towards a freshly drawn random value.
"""

from __future__ import annotations

import copy
from typing import Iterable, List, Optional, Sequence

import numpy as np


def _check_amount(amount: float) -> float:
    amount = float(amount)
    if not 0.0 <= amount <= 1.0:
        raise ValueError(f"mutation amount must be within [0, 1], got {amount}")
    return amount


class Level:
    """One fully-connected layer of the network.

    Attributes
    ----------
    inputs : np.ndarray
        Input buffer, shape ``(input_count,)``.
    outputs : np.ndarray
        Output buffer, shape ``(output_count,)``; values are 0.0 or 1.0.
    biases : np.ndarray
        Per-output threshold, shape ``(output_count,)``.
    weights : np.ndarray
        Connection weights, shape ``(input_count, output_count)``.
    """

    def __init__(
        self,
        input_count: int,
        output_count: int,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self._rng = rng if rng is not None else np.random.default_rng()
        self.inputs = np.zeros(input_count)
        self.outputs = np.zeros(output_count)
        self.biases = self._rng.uniform(-1.0, 1.0, output_count)
        self.weights = self._rng.uniform(-1.0, 1.0, (input_count, output_count))

    @property
    def input_count(self) -> int:
        return self.inputs.shape[0]

    @property
    def output_count(self) -> int:
        return self.outputs.shape[0]

    def feed_forward(self, given_inputs: Sequence[float]) -> np.ndarray:
        """Load *given_inputs* and compute the thresholded outputs.

        Extra inputs are ignored; missing trailing inputs keep the value
        left in the buffer by the previous call.
        """
        values = np.asarray(given_inputs, dtype=float).ravel()
        count = min(self.input_count, values.shape[0])
        self.inputs[:count] = values[:count]

        sums = self.inputs @ self.weights
        self.outputs[:] = np.where(sums > self.biases, 1.0, 0.0)
        return self.outputs

    def mutate(self, amount: float) -> None:
        """Interpolate every bias and weight towards a random value in
        ``[-1, 1]`` by *amount* (0 = unchanged, 1 = fully replaced).
        """
        amount = _check_amount(amount)
        new_biases = self._rng.uniform(-1.0, 1.0, self.biases.shape)
        new_weights = self._rng.uniform(-1.0, 1.0, self.weights.shape)
        self.biases[:] = self.biases * (1.0 - amount) + new_biases * amount
        self.weights[:] = self.weights * (1.0 - amount) + new_weights * amount


class NeuronalNetwork:
    """A chain of :class:`Level` objects.

    Parameters
    ----------
    neuron_counts : sequence of int
        Neurons per layer, input layer first.  A network with *n* layer
        sizes has *n − 1* levels.
    seed : int or None
        Seed for the weight initialisation and mutation draws.
    """

    def __init__(self, neuron_counts: Sequence[int], seed: Optional[int] = None) -> None:
        counts = [int(c) for c in neuron_counts]
        if len(counts) < 2:
            raise ValueError("a network needs at least an input and an output layer")
        if any(c < 1 for c in counts):
            raise ValueError(f"every layer needs at least one neuron, got {counts}")
        self._rng = np.random.default_rng(seed)
        self.levels: List[Level] = [
            Level(counts[i], counts[i + 1], self._rng) for i in range(len(counts) - 1)
        ]

    @property
    def neuron_counts(self) -> List[int]:
        return [self.levels[0].input_count] + [lvl.output_count for lvl in self.levels]

    def feed_forward(self, given_inputs: Iterable[float]) -> np.ndarray:
        """Feed *given_inputs* through every level; returns a copy of the
        last level's outputs.
        """
        outputs = self.levels[0].feed_forward(list(given_inputs))
        for level in self.levels[1:]:
            outputs = level.feed_forward(outputs)
        return outputs.copy()

    def mutate(self, amount: float = 1.0) -> None:
        _check_amount(amount)
        for level in self.levels:
            level.mutate(amount)

    def copy(self, seed: Optional[int] = None) -> "NeuronalNetwork":
        """Independent copy with the same weights and a fresh random stream."""
        clone = copy.deepcopy(self)
        clone._rng = np.random.default_rng(seed)
        for level in clone.levels:
            level._rng = clone._rng
        return clone
