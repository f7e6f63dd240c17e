"""
Spaced-repetition review scheduler.

Decides, for every (user, flashcard) pair, when the card is next shown and
derives daily streaks and set progress from the review history.

Components:
- SM2Scheduler: Pure SM-2 state transition
- ProgressStore: Identity-keyed ReviewState storage and due queries
- StreakTracker: Daily activity state machine
- SetProgressAggregator: Read-side set and dashboard statistics
- ReviewService: Inbound operations with per-key critical sections
"""

from .api import ReviewApi
from .catalog import FlashcardCatalog, InMemoryCatalog
from .clock import Clock, FixedClock, SystemClock
from .errors import InvalidClock, InvalidInput, NotFound, RepetitionError
from .models import (
    CardStatus,
    ReviewOutcome,
    ReviewResult,
    ReviewState,
    SetProgressSnapshot,
    StreakSummary,
    UserOverview,
    UserStreak,
)
from .progress_store import ProgressStore
from .scheduler import SM2Config, SM2Scheduler
from .service import DueCard, ReviewService
from .set_progress import SetProgressAggregator
from .streaks import StreakTracker

__all__ = [
    # Scheduling
    "SM2Config",
    "SM2Scheduler",
    "ReviewState",
    "ReviewResult",
    "ReviewOutcome",
    "CardStatus",
    # Persistence
    "ProgressStore",
    # Streaks
    "StreakTracker",
    "UserStreak",
    "StreakSummary",
    # Statistics
    "SetProgressAggregator",
    "SetProgressSnapshot",
    "UserOverview",
    # Wiring
    "ReviewService",
    "ReviewApi",
    "DueCard",
    "FlashcardCatalog",
    "InMemoryCatalog",
    # Time
    "Clock",
    "SystemClock",
    "FixedClock",
    # Errors
    "RepetitionError",
    "InvalidInput",
    "InvalidClock",
    "NotFound",
]
