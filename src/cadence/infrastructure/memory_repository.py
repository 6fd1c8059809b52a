"""
In-memory repository: Infrastructure adapter backed by plain dicts.

Implements CardRepository for tests, simulations and the CLI.
"""

import logging

from cadence.domain.models import Card, ReviewLog
from cadence.domain.ports import CardRepository

logger = logging.getLogger(__name__)


class InMemoryCardRepository(CardRepository):
    """Keeps cards and their review logs in process memory."""

    def __init__(self, cards: list[Card] | None = None):
        self._cards: dict[int, Card] = {}
        self._history: dict[int, list[ReviewLog]] = {}
        for card in cards or []:
            self.add(card)

    def get(self, card_id: int) -> Card:
        try:
            return self._cards[card_id]
        except KeyError:
            raise KeyError(f"Unknown card {card_id}") from None

    def add(self, card: Card) -> None:
        if card.card_id is None:
            raise ValueError("Cannot store a card without card_id")
        if card.card_id in self._cards:
            raise ValueError(f"Card {card.card_id} already exists")
        self._cards[card.card_id] = card
        self._history[card.card_id] = []

    def save(self, card: Card, review_log: ReviewLog) -> None:
        if card.card_id not in self._cards:
            raise KeyError(f"Unknown card {card.card_id}")
        self._cards[card.card_id] = card
        self._history[card.card_id].append(review_log)
        logger.debug(f"Saved card {card.card_id} ({len(self._history[card.card_id])} reviews)")

    def history(self, card_id: int) -> list[ReviewLog]:
        if card_id not in self._history:
            raise KeyError(f"Unknown card {card_id}")
        return list(self._history[card_id])

    def __len__(self) -> int:
        return len(self._cards)
