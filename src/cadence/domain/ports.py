"""
Ports (interfaces) for card storage.

The scheduler itself never touches storage. These define the contract the
storage layer implements so application services can load a card, schedule
it and persist the outcome without knowing where cards live.
"""

from abc import ABC, abstractmethod

from .models import Card, ReviewLog


class CardRepository(ABC):
    """
    Port for loading and persisting cards and their review history.

    Implementations:
        - InMemoryCardRepository: Dict-backed store for tests and the CLI.
    """

    @abstractmethod
    def get(self, card_id: int) -> Card:
        """
        Fetch the current state of a card.

        Raises:
            KeyError: If no card with this id exists.
        """
        pass

    @abstractmethod
    def add(self, card: Card) -> None:
        """Store a card that has no history yet."""
        pass

    @abstractmethod
    def save(self, card: Card, review_log: ReviewLog) -> None:
        """
        Persist the outcome of one review.

        Args:
            card: The updated card, replacing the stored one.
            review_log: The review event, appended to the card's history.
        """
        pass

    @abstractmethod
    def history(self, card_id: int) -> list[ReviewLog]:
        """
        Fetch the review history of a card.

        Returns:
            ReviewLog entries, oldest first.
        """
        pass
