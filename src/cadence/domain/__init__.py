# Domain Package
from .errors import (
    InvalidCard,
    InvalidRating,
    InvalidTimestamp,
    MalformedParameterSet,
    SchedulerError,
)
from .models import Card, Rating, ReviewLog, SchedulingInfo, State
from .parameters import Parameters
from .ports import CardRepository

__all__ = [
    "Card",
    "CardRepository",
    "InvalidCard",
    "InvalidRating",
    "InvalidTimestamp",
    "MalformedParameterSet",
    "Parameters",
    "Rating",
    "ReviewLog",
    "SchedulerError",
    "SchedulingInfo",
    "State",
]
