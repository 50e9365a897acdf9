#!/usr/bin/env python3
"""
config.py
=========
Application-wide configuration constants.

Values can be overridden via environment variables (see :mod:`main`).
This module is a thin, import-safe leaf — it never imports from
other project packages.
"""

from typing import Tuple

# ── Simulation defaults ──────────────────────────────────────────────────────
DEFAULT_SIMULATION_FREQUENCY_HZ: float = 60.0
DEFAULT_TIME_SCALE: float = 1.0
DEFAULT_DURATION_S: float = 30.0

# ── Road ─────────────────────────────────────────────────────────────────────
DEFAULT_LANE_COUNT: int = 3
DEFAULT_LANE_WIDTH_M: float = 3.0

# ── Traffic ──────────────────────────────────────────────────────────────────
DEFAULT_TRAFFIC_SPEED_MPS: float = 10.0
DEFAULT_TRAFFIC: Tuple[Tuple[int, float], ...] = (
    # (lane index, start position along the road in metres)
    (1, 20.0),
    (0, 45.0),
    (2, 45.0),
    (1, 70.0),
    (0, 90.0),
)

# ── Hero car ─────────────────────────────────────────────────────────────────
DEFAULT_HERO_LANE: int = 1
DEFAULT_SENSOR_RANGE_M: float = 8.0

# ── Evolution ────────────────────────────────────────────────────────────────
DEFAULT_POPULATION: int = 50
DEFAULT_GENERATIONS: int = 10
DEFAULT_GENERATION_FRAMES: int = 60 * 60
DEFAULT_MUTATION_AMOUNT: float = 0.1
DEFAULT_HIDDEN_NEURONS: int = 6

# ── Persistence / logging (relative to the working directory) ────────────────
BRAIN_REL_PATH: str = "generated/best_brain.joblib"
LOG_FILE: str = "selfdriving.log"
PHYSICS_DEBUG_LOG_FILE: str = "physics_debug.log"
