"""
Ports (interfaces) for review item persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import replace

from .models import ReviewItem, StudyDeck


class StoreError(Exception):
    """Raised when the deck cannot be loaded from or saved to storage."""


class ItemNotFoundError(KeyError):
    """Raised when an operation targets an id that is not in the deck."""


class ReviewItemStore(ABC):
    """
    Port for loading and saving review items.

    Implementations:
        - JsonFileStore: A single JSON document on disk.
        - InMemoryStore: Process-local, for tests and throwaway sessions.
    """

    @abstractmethod
    def load_deck(self) -> StudyDeck:
        """
        Load the whole deck.

        Raises:
            StoreError: If the underlying storage cannot be read.
        """
        pass

    @abstractmethod
    def save_deck(self, deck: StudyDeck) -> None:
        """
        Replace the stored deck.

        Raises:
            StoreError: If the underlying storage cannot be written.
        """
        pass

    def load(self) -> list[ReviewItem]:
        """Return every stored item. Order is not significant."""
        return list(self.load_deck().items)

    def save(self, items: Iterable[ReviewItem]) -> None:
        """
        Persist a full or partial collection.

        Items whose id is already stored replace the stored value; new ids
        are appended.
        """
        deck = self.load_deck()
        merged = list(deck.items)
        positions = {item.id: idx for idx, item in enumerate(merged)}
        for item in items:
            if item.id in positions:
                merged[positions[item.id]] = item
            else:
                positions[item.id] = len(merged)
                merged.append(item)
        self.save_deck(replace(deck, items=merged))
