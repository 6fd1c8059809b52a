"""
Interval calculator: from stability to a concrete number of days.

Pure functions plus a small stateless wrapper bound to one parameter set.
Randomness only ever comes from the fuzz draw the caller passes in.
"""

import logging
import math

from cadence.domain.constants import FUZZ_MIN_INTERVAL, FUZZ_RANGES, STABILITY_MIN
from cadence.domain.parameters import Parameters

logger = logging.getLogger(__name__)


def next_interval(stability: float, request_retention: float, maximum_interval: int) -> int:
    """
    Days until retrievability falls to `request_retention`.

    Inverts R = (1 + t / (9 * S)) ^ -1:  t = 9 * S * (1 / r - 1),
    rounded and clamped to [1, maximum_interval].
    """
    stability = max(stability, STABILITY_MIN)
    days = 9.0 * stability * (1.0 / request_retention - 1.0)
    return min(max(round(days), 1), maximum_interval)


def fuzz_range(days: int, maximum_interval: int) -> tuple[int, int]:
    """
    Bounds of the fuzzed interval.

    The half-width starts at one day and widens by 15% of the interval
    between 2.5 and 7 days, 10% between 7 and 20, and 5% beyond that.
    """
    delta = 1.0
    for start, end, factor in FUZZ_RANGES:
        delta += factor * max(min(days, end) - start, 0.0)

    max_ivl = min(round(days + delta), maximum_interval)
    min_ivl = min(max(2, round(days - delta)), max_ivl)
    return min_ivl, max_ivl


def apply_fuzz(
    days: int,
    enable_fuzz: bool,
    maximum_interval: int,
    fuzz_factor: float,
) -> int:
    """
    Perturb a long-term interval so cards do not bunch up.

    `fuzz_factor` is a uniform draw in [0, 1) that picks a point in the
    fuzz range; one review uses the same draw for every candidate interval.
    Returns `days` unchanged when fuzz is disabled or the interval is
    shorter than 2.5 days. The result stays within [1, maximum_interval].
    """
    if not enable_fuzz or days < FUZZ_MIN_INTERVAL:
        return days

    min_ivl, max_ivl = fuzz_range(days, maximum_interval)
    fuzzed = math.floor(fuzz_factor * (max_ivl - min_ivl + 1) + min_ivl)
    return min(max(fuzzed, 1), maximum_interval)


def order_intervals(hard: int, good: int, easy: int, maximum_interval: int) -> tuple[int, int, int]:
    """Enforce hard <= good < easy, then re-clamp to the maximum interval."""
    hard = min(hard, good)
    good = max(good, hard + 1)
    easy = max(easy, good + 1)
    return (
        min(hard, maximum_interval),
        min(good, maximum_interval),
        min(easy, maximum_interval),
    )


class IntervalCalculator:
    """Interval arithmetic bound to one parameter set."""

    def __init__(self, parameters: Parameters):
        self.request_retention = parameters.request_retention
        self.maximum_interval = parameters.maximum_interval
        self.enable_fuzz = parameters.enable_fuzz

    def next_interval(self, stability: float) -> int:
        return next_interval(stability, self.request_retention, self.maximum_interval)

    def apply_fuzz(self, days: int, fuzz_factor: float) -> int:
        fuzzed = apply_fuzz(days, self.enable_fuzz, self.maximum_interval, fuzz_factor)
        if fuzzed != days:
            logger.debug(f"Fuzzed interval {days}d -> {fuzzed}d")
        return fuzzed

    def order(self, hard: int, good: int, easy: int) -> tuple[int, int, int]:
        return order_intervals(hard, good, easy, self.maximum_interval)
