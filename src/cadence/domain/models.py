"""
Domain models for review scheduling.

These are pure value types with no I/O. The scheduler never mutates them;
every review produces new instances.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import IntEnum


class Rating(IntEnum):
    """Button pressed by the reviewer."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4


class State(IntEnum):
    """Learning phase of a card."""

    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Card:
    """
    Current memory state of a single card.

    Attributes:
        card_id: Storage identifier, carried through untouched.
        state: Current learning phase.
        step: Index into the active (re)learning steps, None outside them.
        due: When the card should next be shown.
        stability: Days until recall probability decays to 90%. None while New.
        difficulty: Intrinsic hardness on a 1-10 scale. None while New.
        elapsed_days: Whole days between the last two reviews.
        scheduled_days: Interval assigned by the last review (days).
        reps: Completed reviews.
        lapses: Times the card was forgotten while in Review.
        last_review: Timestamp of the previous review, None while New.
    """

    card_id: int | None = None
    state: State = State.NEW
    step: int | None = None
    due: datetime = field(default_factory=_utcnow)
    stability: float | None = None
    difficulty: float | None = None
    elapsed_days: int = 0
    scheduled_days: int = 0
    reps: int = 0
    lapses: int = 0
    last_review: datetime | None = None


@dataclass(frozen=True)
class ReviewLog:
    """
    A single review event. Never mutated after creation.

    Attributes:
        card_id: The card that was reviewed.
        rating: Button pressed.
        state: State of the card *before* this review.
        review: Timestamp of this review.
        scheduled_days: Interval assigned by this review.
        elapsed_days: Whole days since the previous review.
        stability: Stability produced by this review.
        difficulty: Difficulty produced by this review.
        duration: Time the reviewer spent on the card (informational).
    """

    card_id: int | None
    rating: Rating
    state: State
    review: datetime
    scheduled_days: int
    elapsed_days: int
    stability: float
    difficulty: float
    duration: timedelta | None = None


@dataclass(frozen=True)
class SchedulingInfo:
    """Outcome of one (actual or hypothetical) review."""

    card: Card
    review_log: ReviewLog

    @property
    def interval(self) -> timedelta:
        """Time from the review until the card is due again."""
        return self.card.due - self.review_log.review

    @property
    def scheduled_days(self) -> int:
        return self.card.scheduled_days
