"""
sim — Simulation core
=====================

Modules
-------
geometry
    Vector, line and polygon helpers.
entity
    :class:`Entity` and the :class:`Component` base.
graph
    :class:`EntityGraph` fixed-step frame loop and :class:`FrameSimulatedEvent`.
scheduler
    :class:`SimulationScheduler` background-thread stepping.
parameters, colliders, sensors, controllers
    The component kinds an entity is built from.
scenario
    Road, traffic and hero car construction helpers.
evolution
    Mutation-only search for a good driving network.
metrics
    :class:`FrameMetrics` frame listener.
"""
