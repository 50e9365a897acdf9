"""
ml — Driving brains
===================

Modules
-------
network
    :class:`NeuronalNetwork` binary-threshold feed-forward network with
    mutation.
brain_store
    joblib persistence of network weights.
"""
