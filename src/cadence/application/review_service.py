"""
Review Service: Application layer orchestrator.

Coordinates loading a card from storage, scheduling it and persisting the
outcome. The scheduler stays pure; all I/O goes through the repository port.
"""

import logging
from datetime import datetime, timedelta

from cadence.domain.models import Card, Rating, ReviewLog, SchedulingInfo
from cadence.domain.ports import CardRepository

from .scheduler import Scheduler

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Application service for recording reviews against stored cards.

    Follows Dependency Inversion: depends on the CardRepository abstraction,
    not a concrete storage adapter.
    """

    def __init__(
        self,
        repository: CardRepository,
        scheduler: Scheduler | None = None,
    ):
        """
        Args:
            repository: The repository (port) holding cards and history.
            scheduler: Optional custom scheduler; uses default parameters if not provided.
        """
        self._repo = repository
        self._scheduler = scheduler or Scheduler()

    def review(
        self,
        card_id: int,
        rating: Rating | int,
        now: datetime | None = None,
        duration: timedelta | None = None,
    ) -> tuple[Card, ReviewLog]:
        """
        Record one rating for a stored card.

        Nothing is persisted when the scheduler rejects the input.

        Raises:
            KeyError: If the card does not exist.
            SchedulerError: If the rating or timestamp is invalid.
        """
        card = self._repo.get(card_id)
        updated, log = self._scheduler.schedule(card, rating, now, duration=duration)
        self._repo.save(updated, log)
        logger.info(
            f"Reviewed card {card_id}: {log.rating.name}, next due {updated.due.isoformat()}"
        )
        return updated, log

    def preview(self, card_id: int, now: datetime | None = None) -> dict[Rating, SchedulingInfo]:
        """Projected outcome of each rating for a stored card."""
        return self._scheduler.preview_all(self._repo.get(card_id), now)

    def rebuild(self, card_id: int) -> Card:
        """
        Recompute a card from its stored history.

        Useful after the parameter set changes. The stored card is left
        untouched; the caller decides whether to save the result.
        """
        history = self._repo.history(card_id)
        card, _ = self._scheduler.replay(
            ((log.rating, log.review, log.duration) for log in history),
            card_id=card_id,
        )
        return card
