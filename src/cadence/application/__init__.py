# Application Package
from .intervals import IntervalCalculator, apply_fuzz, next_interval
from .memory_model import MemoryModel, retrievability
from .review_service import ReviewService
from .scheduler import Scheduler

__all__ = [
    "IntervalCalculator",
    "MemoryModel",
    "ReviewService",
    "Scheduler",
    "apply_fuzz",
    "next_interval",
    "retrievability",
]
