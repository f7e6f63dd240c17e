"""
Data classes for review scheduling state.

- ReviewState: per user x flashcard SM-2 record
- ReviewResult: outcome of a single review
- UserStreak: per-user daily activity record
- SetProgressSnapshot / UserOverview: derived read-side statistics
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

# =============================================================================
# Enums
# =============================================================================


class ReviewOutcome(str, Enum):
    """What a review did to the card."""

    LAPSE = "lapse"
    PROGRESS = "progress"
    MASTERED = "mastered"


class CardStatus(str, Enum):
    """Learning stage of a card for one user."""

    NEW = "new"  # Never reviewed
    LEARNING = "learning"  # Reviewed, fewer than two consecutive recalls
    REVIEWING = "reviewing"  # On a growing interval
    MASTERED = "mastered"

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.title()

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            CardStatus.NEW: "dim",
            CardStatus.LEARNING: "yellow",
            CardStatus.REVIEWING: "cyan",
            CardStatus.MASTERED: "green",
        }[self]


# =============================================================================
# Review State
# =============================================================================


@dataclass(frozen=True)
class ReviewState:
    """SM-2 algorithm state for a single (user, flashcard) pair."""

    user_id: str
    flashcard_id: int
    ease_factor: float = 2.5  # EF starts at 2.5
    interval_days: int = 0  # 0 = never reviewed
    repetitions: int = 0  # Consecutive correct answers since last lapse
    last_reviewed_at: datetime | None = None
    next_review_at: datetime | None = None  # None = due immediately
    is_mastered: bool = False

    # Lifetime counters
    total_reviews: int = 0
    correct_reviews: int = 0  # quality >= 3
    first_reviewed_at: datetime | None = None

    @property
    def key(self) -> tuple[str, int]:
        return (self.user_id, self.flashcard_id)

    @property
    def is_new(self) -> bool:
        return self.last_reviewed_at is None

    @property
    def accuracy(self) -> float:
        """Share of reviews answered with quality >= 3."""
        if self.total_reviews == 0:
            return 0.0
        return self.correct_reviews / self.total_reviews

    @property
    def status(self) -> CardStatus:
        if self.is_new:
            return CardStatus.NEW
        if self.is_mastered:
            return CardStatus.MASTERED
        if self.repetitions < 2:
            return CardStatus.LEARNING
        return CardStatus.REVIEWING

    def is_due(self, as_of: datetime) -> bool:
        """Check if this card is due for review at ``as_of``."""
        if self.next_review_at is None:
            return True  # Never reviewed = due
        return self.next_review_at <= as_of

    def days_overdue(self, as_of: datetime) -> int:
        """Whole days past the scheduled review date."""
        if self.next_review_at is None:
            return 0
        return max(0, (as_of - self.next_review_at).days)


@dataclass(frozen=True)
class ReviewResult:
    """Outcome of a single review, returned to the caller."""

    flashcard_id: int
    next_review_at: datetime
    interval_days: int
    outcome: ReviewOutcome
    message: str
    ease_factor: float
    repetitions: int
    is_mastered: bool


# =============================================================================
# Streaks
# =============================================================================


@dataclass
class UserStreak:
    """Daily activity record for one user."""

    user_id: str
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: date | None = None  # Calendar date, not timestamp
    total_active_days: int = 0


@dataclass(frozen=True)
class StreakSummary:
    """Streak view returned after recording or querying activity."""

    user_id: str
    current_streak: int
    longest_streak: int
    last_activity_date: date | None
    total_active_days: int
    is_active_today: bool
    is_new_record: bool = False


# =============================================================================
# Derived Statistics
# =============================================================================


@dataclass(frozen=True)
class SetProgressSnapshot:
    """Completion statistics for one flashcard set and one user."""

    set_id: int
    total_cards: int
    studied_cards: int
    mastered_cards: int = 0

    @property
    def progress_percentage(self) -> float:
        if self.total_cards == 0:
            return 0.0
        return self.studied_cards / self.total_cards * 100

    @property
    def is_completed(self) -> bool:
        return self.total_cards > 0 and self.studied_cards == self.total_cards


@dataclass(frozen=True)
class UserOverview:
    """Dashboard totals recomputed from stored review states."""

    user_id: str
    cards_studied: int
    cards_mastered: int
    due_now: int
    total_reviews: int
    correct_reviews: int
    streak: StreakSummary | None = None
    by_status: dict[CardStatus, int] = field(default_factory=dict)

    @property
    def accuracy(self) -> float:
        if self.total_reviews == 0:
            return 0.0
        return self.correct_reviews / self.total_reviews
