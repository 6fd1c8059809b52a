"""Centralized constants for the cadence scheduler.

Model defaults, numeric bounds and fuzz bands live here so every layer
imports from a single source of truth.
"""

from datetime import timedelta

# ---------- Model ----------
MODEL_VERSION = "4.0"
WEIGHT_COUNT = 17

# Published FSRS v4 reference weights.
DEFAULT_WEIGHTS: tuple[float, ...] = (
    0.4,
    0.6,
    2.4,
    5.8,
    4.93,
    0.94,
    0.86,
    0.01,
    1.49,
    0.14,
    0.94,
    2.18,
    0.05,
    0.34,
    1.26,
    0.29,
    2.61,
)

# ---------- Forgetting curve ----------
DECAY = -1.0
FACTOR = 1.0 / 9.0

# ---------- Bounds ----------
STABILITY_MIN = 0.01
# A lapse keeps at most this share of the previous stability.
LAPSE_STABILITY_MAX_RATIO = 0.95
DIFFICULTY_MIN = 1.0
DIFFICULTY_MAX = 10.0

# ---------- Scheduling defaults ----------
DEFAULT_REQUEST_RETENTION = 0.9
DEFAULT_MAXIMUM_INTERVAL = 36500
DEFAULT_ENABLE_FUZZ = True
DEFAULT_LEARNING_STEPS: tuple[timedelta, ...] = (timedelta(minutes=1), timedelta(minutes=10))
DEFAULT_RELEARNING_STEPS: tuple[timedelta, ...] = (timedelta(minutes=10),)

# ---------- Fuzz ----------
FUZZ_MIN_INTERVAL = 2.5  # days
# (start, end, factor): the band half-width grows by `factor` per day in [start, end).
FUZZ_RANGES: tuple[tuple[float, float, float], ...] = (
    (2.5, 7.0, 0.15),
    (7.0, 20.0, 0.1),
    (20.0, float("inf"), 0.05),
)
