"""
Review Service: inbound operations of the review scheduler.

Wires the SM-2 scheduler, progress store, streak tracker and aggregator
behind the calls the web layer makes:

- submit_review    - grade a card, reschedule it, count the day's activity
- record_activity  - count a quiz or exam submission toward the streak
- due_cards        - ordered review queue
- due_cards_for_set - review queue restricted to one set
- set_progress     - completion statistics for one set
- overview         - dashboard totals recomputed from stored state
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from loguru import logger

from config import Settings, get_settings

from .catalog import FlashcardCatalog
from .clock import Clock, SystemClock
from .errors import InvalidClock
from .models import ReviewResult, SetProgressSnapshot, StreakSummary, UserOverview, UserStreak
from .progress_store import ProgressStore
from .scheduler import SM2Config, SM2Scheduler, validate_quality
from .set_progress import SetProgressAggregator
from .streaks import StreakTracker


@dataclass(frozen=True)
class DueCard:
    """One entry of the review queue."""

    flashcard_id: int
    next_review_at: datetime | None


class ReviewService:
    """
    Coordinates a review submission and the read paths around it.

    Each review runs get -> schedule -> save inside the store's critical
    section for the (user, card) pair; streak updates are atomic per user.
    """

    def __init__(
        self,
        catalog: FlashcardCatalog,
        store: ProgressStore | None = None,
        streaks: StreakTracker | None = None,
        scheduler: SM2Scheduler | None = None,
        clock: Clock | None = None,
        settings: Settings | None = None,
    ):
        if settings is None:
            settings = get_settings()
        if store is None:
            store = ProgressStore.from_settings(settings)
        if streaks is None:
            streaks = StreakTracker(leaderboard_size=settings.srs_leaderboard_size)
        if scheduler is None:
            scheduler = SM2Scheduler(SM2Config.from_settings(settings))
        self.catalog = catalog
        self.store = store
        self.streaks = streaks
        self.scheduler = scheduler
        self.clock = clock if clock is not None else SystemClock()
        self.aggregator = SetProgressAggregator()

    # =========================================================================
    # Write Paths
    # =========================================================================

    def submit_review(self, user_id: str, flashcard_id: int, quality: int) -> ReviewResult:
        """
        Grade a card and reschedule it.

        Args:
            user_id: Authenticated user
            flashcard_id: Reviewed card
            quality: Self-assessed recall quality (0-5)

        Returns:
            ReviewResult with the next review date and interval

        Raises:
            InvalidInput: quality outside [0, 5]
            NotFound: the card is unknown to the catalog
        """
        validate_quality(quality)
        self.catalog.set_of(flashcard_id)

        now = self.clock.now()
        with self.store.exclusive(user_id, flashcard_id):
            state = self.store.get_or_create(user_id, flashcard_id)
            new_state, result = self.scheduler.schedule(state, quality, now=now)
            self.store.save(new_state)

        logger.info(
            f"Review user={user_id} card={flashcard_id} q={quality} -> "
            f"{result.outcome.value}, next in {result.interval_days}d"
        )

        try:
            self.streaks.record_activity(user_id, now.date())
        except InvalidClock as exc:
            logger.warning(f"Streak not updated after review: {exc}")

        return result

    def record_activity(self, user_id: str, activity_date: date | None = None) -> StreakSummary:
        """Count a qualifying action (quiz or exam submission) toward the streak."""
        today = activity_date if activity_date is not None else self.clock.today()
        return self.streaks.record_activity(user_id, today)

    def open_set(self, user_id: str, set_id: int) -> int:
        """Create never-reviewed states for every card of a set the user opens."""
        return self.store.ensure(user_id, self.catalog.cards_in_set(set_id))

    # =========================================================================
    # Read Paths
    # =========================================================================

    def due_cards(
        self,
        user_id: str,
        as_of: datetime | None = None,
        limit: int | None = None,
    ) -> list[DueCard]:
        """Ordered review queue for a user."""
        if as_of is None:
            as_of = self.clock.now()
        return [
            DueCard(flashcard_id=state.flashcard_id, next_review_at=state.next_review_at)
            for state in self.store.due_for_review(user_id, as_of, limit=limit)
        ]

    def due_cards_for_set(
        self,
        user_id: str,
        set_id: int,
        as_of: datetime | None = None,
        limit: int | None = None,
    ) -> list[DueCard]:
        """
        Review queue restricted to one set.

        Cards of the set the user has never opened count as new and due,
        without creating any state for them.

        Raises:
            NotFound: the set is unknown to the catalog
        """
        card_ids = self.catalog.cards_in_set(set_id)
        if as_of is None:
            as_of = self.clock.now()
        states = [self.store.get_or_create(user_id, card_id) for card_id in card_ids]
        return [
            DueCard(flashcard_id=state.flashcard_id, next_review_at=state.next_review_at)
            for state in self.store.order_due(states, as_of, limit=limit)
        ]

    def set_progress(self, user_id: str, set_id: int) -> SetProgressSnapshot:
        """
        Completion statistics for one set.

        Raises:
            NotFound: the set is unknown to the catalog
        """
        card_ids = self.catalog.cards_in_set(set_id)
        states = self.store.states_for(user_id, card_ids)
        return self.aggregator.snapshot(set_id, len(card_ids), states)

    def streak(self, user_id: str) -> StreakSummary:
        return self.streaks.summary(user_id, self.clock.today())

    def leaderboard(self, top: int | None = None) -> list[UserStreak]:
        return self.streaks.leaderboard(self.clock.today(), top)

    def overview(self, user_id: str) -> UserOverview:
        """Dashboard totals, recomputed on every call."""
        return self.aggregator.overview(
            user_id,
            self.store.all_for(user_id),
            as_of=self.clock.now(),
            streak=self.streak(user_id),
        )
