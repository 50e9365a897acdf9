"""
ml/brain_store.py
=================
Persist and restore :class:`~ml.network.NeuronalNetwork` weights with
joblib, so the best network of an evolution run can be reloaded later.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

import joblib
import numpy as np

from ml.network import NeuronalNetwork

log = logging.getLogger("brain_store")

_FORMAT_VERSION = 1


def network_state(network: NeuronalNetwork) -> Dict[str, Any]:
    """Plain-dict snapshot of the topology, weights and biases."""
    return {
        "version": _FORMAT_VERSION,
        "neuron_counts": network.neuron_counts,
        "weights": [level.weights.copy() for level in network.levels],
        "biases": [level.biases.copy() for level in network.levels],
    }


def network_from_state(state: Dict[str, Any]) -> NeuronalNetwork:
    """Rebuild a network from :func:`network_state` output.

    Raises
    ------
    ValueError
        If the stored arrays do not match the stored topology.
    """
    if state.get("version") != _FORMAT_VERSION:
        raise ValueError(f"unsupported brain format: {state.get('version')!r}")
    network = NeuronalNetwork(state["neuron_counts"])
    if len(state["weights"]) != len(network.levels) or len(state["biases"]) != len(network.levels):
        raise ValueError("stored level count does not match the topology")
    for level, weights, biases in zip(network.levels, state["weights"], state["biases"]):
        weights = np.asarray(weights, dtype=float)
        biases = np.asarray(biases, dtype=float)
        if weights.shape != level.weights.shape or biases.shape != level.biases.shape:
            raise ValueError(
                f"stored level shape {weights.shape} does not match {level.weights.shape}"
            )
        level.weights[:] = weights
        level.biases[:] = biases
    return network


def save_network(network: NeuronalNetwork, path: str) -> None:
    """Serialise *network* to *path* (parent directories are created)."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    joblib.dump(network_state(network), path)
    log.info("Saved network %s to '%s'", network.neuron_counts, path)


def load_network(path: str) -> NeuronalNetwork:
    """Load a network written by :func:`save_network`."""
    network = network_from_state(joblib.load(path))
    log.info("Loaded network %s from '%s'", network.neuron_counts, path)
    return network
