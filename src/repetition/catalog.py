"""
Flashcard catalog boundary.

Sets and cards are owned by the content side of the platform; the scheduler
only needs to resolve set membership and verify that a card exists.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from .errors import NotFound


class FlashcardCatalog(Protocol):
    """What the scheduler needs to know about sets and cards."""

    def cards_in_set(self, set_id: int) -> Sequence[int]:
        """Card ids of a set. Raises NotFound for unknown sets."""
        ...

    def set_of(self, flashcard_id: int) -> int:
        """Owning set of a card. Raises NotFound for unknown cards."""
        ...


class InMemoryCatalog:
    """Dictionary-backed catalog for tests and local tools."""

    def __init__(self, sets: dict[int, Iterable[int]] | None = None):
        self._sets: dict[int, list[int]] = {}
        self._owner: dict[int, int] = {}
        for set_id, card_ids in (sets or {}).items():
            self.add_set(set_id, card_ids)

    def add_set(self, set_id: int, card_ids: Iterable[int]) -> None:
        cards = list(card_ids)
        for card_id in cards:
            owner = self._owner.get(card_id)
            if owner is not None and owner != set_id:
                raise ValueError(f"Flashcard {card_id} already belongs to set {owner}")
        self._sets[set_id] = cards
        for card_id in cards:
            self._owner[card_id] = set_id

    def cards_in_set(self, set_id: int) -> Sequence[int]:
        try:
            return tuple(self._sets[set_id])
        except KeyError:
            raise NotFound(f"Flashcard set {set_id} not found") from None

    def set_of(self, flashcard_id: int) -> int:
        try:
            return self._owner[flashcard_id]
        except KeyError:
            raise NotFound(f"Flashcard {flashcard_id} not found") from None
