# Infrastructure Package
from .memory_repository import InMemoryCardRepository

__all__ = ["InMemoryCardRepository"]
