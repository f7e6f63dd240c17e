"""
In-memory progress store for review scheduling state.

Holds one ReviewState per (user_id, flashcard_id) in an identity-keyed map
with a per-user index for due-card and history queries. Records are frozen
values, so a save is a whole-record replacement and readers never see a
half-updated state.

The store does no scheduling. Callers wrap the read-compute-write cycle in
``exclusive(user_id, flashcard_id)``.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta

from loguru import logger

from .errors import InvalidInput, NotFound
from .locks import KeyedLocks
from .models import ReviewState

Key = tuple[str, int]


def _aware(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC, matching the stored timestamps."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


class ProgressStore:
    """
    Identity-keyed storage of ReviewState records.

    Handles:
    - Lazy creation of fresh state for never-reviewed cards
    - Atomic upsert with invariant checks
    - Due-card and review-history queries per user
    """

    def __init__(
        self,
        initial_ease: float = 2.5,
        minimum_ease: float = 1.3,
        new_cards_first: bool = True,
    ):
        """
        Initialize the store.

        Args:
            initial_ease: Ease factor given to freshly created records
            minimum_ease: Floor checked on every save
            new_cards_first: Order never-reviewed cards before overdue ones
        """
        self.initial_ease = initial_ease
        self.minimum_ease = minimum_ease
        self.new_cards_first = new_cards_first

        self._states: dict[Key, ReviewState] = {}
        self._by_user: dict[str, set[int]] = {}
        self._lock = threading.RLock()
        self._keys = KeyedLocks()

    @classmethod
    def from_settings(cls, settings) -> ProgressStore:
        return cls(
            initial_ease=settings.srs_initial_ease,
            minimum_ease=settings.srs_minimum_ease,
            new_cards_first=settings.srs_new_cards_first,
        )

    # =========================================================================
    # Critical Sections
    # =========================================================================

    @contextmanager
    def exclusive(self, user_id: str, flashcard_id: int) -> Iterator[None]:
        """Serialize read-modify-write cycles on one (user, card) pair."""
        with self._keys.hold((user_id, flashcard_id)):
            yield

    # =========================================================================
    # Single-Record Operations
    # =========================================================================

    def get_or_create(self, user_id: str, flashcard_id: int) -> ReviewState:
        """
        Get state for a card, or a fresh never-reviewed state.

        The fresh state is not stored until it is saved.
        """
        with self._lock:
            state = self._states.get((user_id, flashcard_id))
        if state is not None:
            return state
        return ReviewState(
            user_id=user_id,
            flashcard_id=flashcard_id,
            ease_factor=self.initial_ease,
        )

    def get(self, user_id: str, flashcard_id: int) -> ReviewState:
        """
        Get stored state for a card.

        Raises:
            NotFound: no record exists for the pair
        """
        with self._lock:
            state = self._states.get((user_id, flashcard_id))
        if state is None:
            raise NotFound(f"No review state for user {user_id}, flashcard {flashcard_id}")
        return state

    def save(self, state: ReviewState) -> None:
        """
        Save or replace the state for a card. Last writer wins.

        Raises:
            InvalidInput: the record breaks a scheduling invariant
        """
        self._check(state)
        with self._lock:
            self._states[state.key] = state
            self._by_user.setdefault(state.user_id, set()).add(state.flashcard_id)
        logger.debug(
            f"Saved state user={state.user_id} card={state.flashcard_id} "
            f"interval={state.interval_days} next={state.next_review_at}"
        )

    def ensure(self, user_id: str, flashcard_ids: Iterable[int]) -> int:
        """
        Create never-reviewed records for cards that have none.

        Returns:
            Number of records created
        """
        created = 0
        with self._lock:
            known = self._by_user.setdefault(user_id, set())
            for flashcard_id in flashcard_ids:
                if flashcard_id in known:
                    continue
                self._states[(user_id, flashcard_id)] = ReviewState(
                    user_id=user_id,
                    flashcard_id=flashcard_id,
                    ease_factor=self.initial_ease,
                )
                known.add(flashcard_id)
                created += 1
        if created:
            logger.info(f"Created {created} new review states for user {user_id}")
        return created

    def _check(self, state: ReviewState) -> None:
        if state.ease_factor < self.minimum_ease:
            raise InvalidInput(
                f"Ease factor {state.ease_factor} below floor {self.minimum_ease}"
            )
        if state.interval_days < 0 or state.repetitions < 0:
            raise InvalidInput("Interval and repetitions must be non-negative")
        if state.last_reviewed_at is not None:
            if state.interval_days < 1:
                raise InvalidInput("Reviewed cards must have an interval of at least 1 day")
            if state.next_review_at != state.last_reviewed_at + timedelta(days=state.interval_days):
                raise InvalidInput("next_review_at must equal last_reviewed_at + interval_days")

    # =========================================================================
    # Queries
    # =========================================================================

    def all_for(self, user_id: str) -> list[ReviewState]:
        """All stored states of a user, ordered by flashcard id."""
        with self._lock:
            ids = sorted(self._by_user.get(user_id, ()))
            return [self._states[(user_id, card_id)] for card_id in ids]

    def states_for(self, user_id: str, flashcard_ids: Iterable[int]) -> list[ReviewState]:
        """Stored states of a user restricted to the given cards."""
        with self._lock:
            states = (self._states.get((user_id, card_id)) for card_id in flashcard_ids)
            return [state for state in states if state is not None]

    def due_for_review(
        self,
        user_id: str,
        as_of: datetime,
        limit: int | None = None,
    ) -> list[ReviewState]:
        """
        Get cards due for review.

        Args:
            user_id: Owner of the cards
            as_of: Cards scheduled at or before this instant are due
            limit: Maximum records to return

        Returns:
            Never-reviewed cards first (or last, per ``new_cards_first``),
            then ascending next_review_at, ties by flashcard id
        """
        return self.order_due(self.all_for(user_id), as_of, limit=limit)

    def order_due(
        self,
        states: Iterable[ReviewState],
        as_of: datetime,
        limit: int | None = None,
    ) -> list[ReviewState]:
        """Filter ``states`` to those due at ``as_of`` in review-queue order."""
        as_of = _aware(as_of)
        due = [state for state in states if state.is_due(as_of)]
        new = [state for state in due if state.next_review_at is None]
        scheduled = sorted(
            (state for state in due if state.next_review_at is not None),
            key=lambda state: (state.next_review_at, state.flashcard_id),
        )
        ordered = new + scheduled if self.new_cards_first else scheduled + new
        if limit is not None:
            ordered = ordered[:limit]
        return ordered

    def count_due(self, user_id: str, as_of: datetime) -> int:
        """Count cards due at ``as_of``."""
        as_of = _aware(as_of)
        return sum(1 for state in self.all_for(user_id) if state.is_due(as_of))

    def reviewed_since(self, user_id: str, since: datetime) -> list[ReviewState]:
        """Cards last reviewed at or after ``since``, oldest first."""
        since = _aware(since)
        reviewed = [
            state
            for state in self.all_for(user_id)
            if state.last_reviewed_at is not None and state.last_reviewed_at >= since
        ]
        return sorted(reviewed, key=lambda state: (state.last_reviewed_at, state.flashcard_id))

    def mastered(self, user_id: str) -> list[ReviewState]:
        """Cards the user has mastered."""
        return [state for state in self.all_for(user_id) if state.is_mastered]

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
