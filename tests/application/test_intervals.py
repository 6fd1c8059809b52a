import random

import pytest

from cadence.application.intervals import (
    IntervalCalculator,
    apply_fuzz,
    fuzz_range,
    next_interval,
    order_intervals,
)
from cadence.domain.parameters import Parameters

MAX = 36500


# --- next_interval ---


@pytest.mark.parametrize(
    "stability,retention,expected",
    [
        (10.0, 0.9, 10),
        (29.008, 0.9, 29),
        (100.0, 0.9, 100),
        (10.0, 0.85, 16),
        (10.0, 0.95, 5),
    ],
    ids=["s10_r90", "s29_r90", "s100_r90", "s10_r85", "s10_r95"],
)
def test_next_interval(stability, retention, expected):
    assert next_interval(stability, retention, MAX) == expected


def test_next_interval_never_below_one_day():
    assert next_interval(0.01, 0.9, MAX) == 1
    assert next_interval(0.0, 0.99, MAX) == 1


def test_next_interval_clamped_to_maximum():
    assert next_interval(50000.0, 0.9, MAX) == MAX
    assert next_interval(1000.0, 0.9, 365) == 365


def test_next_interval_grows_with_stability():
    days = [next_interval(s, 0.9, MAX) for s in (1, 5, 20, 80, 300)]
    assert days == sorted(days)
    assert len(set(days)) == len(days)


# --- Fuzz ---


@pytest.mark.parametrize(
    "days,expected",
    [(3, (2, 4)), (10, (8, 12)), (100, (93, 107))],
    ids=["short", "medium", "long"],
)
def test_fuzz_range(days, expected):
    assert fuzz_range(days, MAX) == expected


def test_fuzz_range_respects_maximum():
    lo, hi = fuzz_range(MAX, MAX)
    assert hi == MAX
    assert lo < hi


def test_fuzz_stays_within_range():
    rng = random.Random(7)
    for days in (3, 10, 45, 400):
        lo, hi = fuzz_range(days, MAX)
        for _ in range(200):
            assert lo <= apply_fuzz(days, True, MAX, rng.random()) <= hi


def test_fuzz_is_deterministic_for_same_draw():
    first = [apply_fuzz(30, True, MAX, random.Random(42).random()) for _ in range(5)]
    assert len(set(first)) == 1


def test_fuzz_draw_spans_range():
    assert apply_fuzz(10, True, MAX, 0.0) == 8
    assert apply_fuzz(10, True, MAX, 0.999) == 12


def test_fuzz_spreads_values():
    rng = random.Random(1)
    values = {apply_fuzz(100, True, MAX, rng.random()) for _ in range(200)}
    assert len(values) > 5


def test_fuzz_disabled_is_identity():
    assert apply_fuzz(30, False, MAX, 0.5) == 30


@pytest.mark.parametrize("days", [1, 2])
def test_short_intervals_not_fuzzed(days):
    assert apply_fuzz(days, True, MAX, 0.5) == days


def test_fuzz_never_exceeds_maximum():
    rng = random.Random(3)
    assert all(apply_fuzz(100, True, 100, rng.random()) <= 100 for _ in range(100))


# --- Ordering ---


@pytest.mark.parametrize(
    "raw,expected",
    [
        ((5, 10, 20), (5, 10, 20)),
        ((5, 5, 5), (5, 6, 7)),
        ((10, 8, 20), (8, 9, 20)),
        ((1, 1, 1), (1, 2, 3)),
    ],
    ids=["already_ordered", "all_equal", "hard_above_good", "minimum"],
)
def test_order_intervals(raw, expected):
    assert order_intervals(*raw, MAX) == expected


def test_order_intervals_reclamps_to_maximum():
    assert order_intervals(MAX, MAX, MAX, MAX) == (MAX, MAX, MAX)


# --- IntervalCalculator ---


def test_calculator_binds_parameters():
    calc = IntervalCalculator(Parameters(request_retention=0.8, maximum_interval=20))
    assert calc.next_interval(10.0) == 20
    assert calc.next_interval(5.0) == 11


def test_calculator_fuzz_follows_toggle():
    on = IntervalCalculator(Parameters(enable_fuzz=True))
    off = IntervalCalculator(Parameters(enable_fuzz=False))

    assert off.apply_fuzz(50, 0.3) == 50
    lo, hi = fuzz_range(50, MAX)
    assert lo <= on.apply_fuzz(50, 0.3) <= hi
