"""
Immutable parameter set for the scheduler.

A Parameters value bundles the fitted model weights with the scheduling
configuration (retention target, interval bound, fuzz toggle, step lists).
It is frozen, so one instance can be shared by any number of schedulers.
"""

import math
import re
from datetime import timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    DEFAULT_ENABLE_FUZZ,
    DEFAULT_LEARNING_STEPS,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_RELEARNING_STEPS,
    DEFAULT_REQUEST_RETENTION,
    DEFAULT_WEIGHTS,
    MODEL_VERSION,
    WEIGHT_COUNT,
)

_STEP_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([smhd])\s*$")
_STEP_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_step(value: Any) -> Any:
    """
    Normalise a learning step to a timedelta.

    Numbers are minutes; strings like "30s", "10m", "1h" or "2d" use the
    suffix as unit. Anything else is handed to pydantic unchanged.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return timedelta(minutes=value)
    if isinstance(value, str):
        match = _STEP_PATTERN.match(value)
        if match:
            amount, unit = match.groups()
            return timedelta(**{_STEP_UNITS[unit]: float(amount)})
    return value


class Parameters(BaseModel):
    """
    Versioned model weights plus scheduling configuration.

    Attributes:
        version: Model version the weight vector was fitted for.
        weights: The 17 FSRS coefficients.
        request_retention: Target recall probability at the due date.
        maximum_interval: Upper bound on any scheduled interval (days).
        enable_fuzz: Whether long-term intervals are randomly perturbed.
        learning_steps: Delays used while a card is in Learning.
        relearning_steps: Delays used while a card is in Relearning.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = MODEL_VERSION
    weights: tuple[float, ...] = DEFAULT_WEIGHTS
    request_retention: float = Field(default=DEFAULT_REQUEST_RETENTION, gt=0.0, lt=1.0)
    maximum_interval: int = Field(default=DEFAULT_MAXIMUM_INTERVAL, ge=1)
    enable_fuzz: bool = DEFAULT_ENABLE_FUZZ
    learning_steps: tuple[timedelta, ...] = DEFAULT_LEARNING_STEPS
    relearning_steps: tuple[timedelta, ...] = DEFAULT_RELEARNING_STEPS

    @field_validator("weights")
    @classmethod
    def check_weights(cls, v: tuple[float, ...]) -> tuple[float, ...]:
        return check_weight_vector(v)

    @field_validator("learning_steps", "relearning_steps", mode="before")
    @classmethod
    def parse_steps(cls, v: Any) -> Any:
        if isinstance(v, list | tuple):
            return tuple(parse_step(step) for step in v)
        return v

    @field_validator("learning_steps", "relearning_steps")
    @classmethod
    def check_steps(cls, v: tuple[timedelta, ...]) -> tuple[timedelta, ...]:
        for step in v:
            if step <= timedelta(0):
                raise ValueError(f"Learning steps must be positive, got {step}")
        return v


def check_weight_vector(weights: tuple[float, ...]) -> tuple[float, ...]:
    """Raise ValueError unless `weights` has the model's length and only finite values."""
    if len(weights) != WEIGHT_COUNT:
        raise ValueError(f"Expected {WEIGHT_COUNT} weights, got {len(weights)}")
    for i, w in enumerate(weights):
        if not math.isfinite(w):
            raise ValueError(f"Weight w{i} is not finite: {w}")
    return weights
