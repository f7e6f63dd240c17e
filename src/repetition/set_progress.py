"""
Read-side progress statistics.

Folds ReviewState records into per-set snapshots and per-user dashboard
totals. Nothing here mutates state; callers may pass a stale view.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import datetime

from .models import CardStatus, ReviewState, SetProgressSnapshot, StreakSummary, UserOverview


class SetProgressAggregator:
    """Derives completion statistics from stored review states."""

    def snapshot(
        self,
        set_id: int,
        total_cards: int,
        states: Iterable[ReviewState],
    ) -> SetProgressSnapshot:
        """
        Build the progress snapshot for one set.

        Args:
            set_id: The flashcard set
            total_cards: Number of cards currently in the set
            states: The user's states for cards of this set

        Returns:
            SetProgressSnapshot
        """
        studied = 0
        mastered = 0
        for state in states:
            if state.last_reviewed_at is not None:
                studied += 1
            if state.is_mastered:
                mastered += 1

        return SetProgressSnapshot(
            set_id=set_id,
            total_cards=total_cards,
            studied_cards=min(studied, total_cards),
            mastered_cards=min(mastered, total_cards),
        )

    def overview(
        self,
        user_id: str,
        states: Iterable[ReviewState],
        as_of: datetime,
        streak: StreakSummary | None = None,
    ) -> UserOverview:
        """Recompute a user's dashboard totals from their review states."""
        states = list(states)
        by_status = Counter(state.status for state in states)

        return UserOverview(
            user_id=user_id,
            cards_studied=sum(1 for s in states if s.last_reviewed_at is not None),
            cards_mastered=by_status[CardStatus.MASTERED],
            due_now=sum(1 for s in states if s.is_due(as_of)),
            total_reviews=sum(s.total_reviews for s in states),
            correct_reviews=sum(s.correct_reviews for s in states),
            streak=streak,
            by_status={status: by_status[status] for status in CardStatus},
        )
