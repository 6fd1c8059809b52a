"""cadence: FSRS review scheduling engine."""

from cadence.application.scheduler import Scheduler
from cadence.consts import VERSION
from cadence.domain.errors import (
    InvalidCard,
    InvalidRating,
    InvalidTimestamp,
    MalformedParameterSet,
    SchedulerError,
)
from cadence.domain.models import Card, Rating, ReviewLog, SchedulingInfo, State
from cadence.domain.parameters import Parameters

__version__ = VERSION

__all__ = [
    "Card",
    "InvalidCard",
    "InvalidRating",
    "InvalidTimestamp",
    "MalformedParameterSet",
    "Parameters",
    "Rating",
    "ReviewLog",
    "Scheduler",
    "SchedulerError",
    "SchedulingInfo",
    "State",
]
