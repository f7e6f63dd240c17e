"""
SM-2 Spaced Repetition Scheduler.

Maps (current ReviewState, quality) to (new ReviewState, ReviewResult).
No I/O: the review instant is passed in, so a fixed (state, quality, now)
always yields the same output.

SM-2 Quality Scale:
0 - Complete blackout, wrong response
1 - Incorrect, but upon seeing answer remembered
2 - Incorrect, but answer seemed easy to recall
3 - Correct, but with significant difficulty
4 - Correct, with some hesitation
5 - Correct, with perfect recall
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from loguru import logger

from config import get_settings

from .errors import InvalidInput
from .models import ReviewOutcome, ReviewResult, ReviewState

MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class SM2Config:
    """Configuration for the SM-2 algorithm."""

    initial_easiness: float = 2.5
    minimum_easiness: float = 1.3
    first_interval: int = 1  # Days after first successful recall
    second_interval: int = 6  # Days after second successful recall
    lapse_interval: int = 1  # Days until retry after a lapse
    mastery_repetitions: int = 5
    mastery_min_interval: int = 21

    @classmethod
    def from_settings(cls, settings=None) -> SM2Config:
        """Build the policy from application settings."""
        if settings is None:
            settings = get_settings()
        return cls(
            initial_easiness=settings.srs_initial_ease,
            minimum_easiness=settings.srs_minimum_ease,
            first_interval=settings.srs_first_interval,
            second_interval=settings.srs_second_interval,
            lapse_interval=settings.srs_lapse_interval,
            mastery_repetitions=settings.srs_mastery_repetitions,
            mastery_min_interval=settings.srs_mastery_min_interval,
        )


def validate_quality(quality: int) -> int:
    """Reject anything that is not an integer grade in [0, 5]."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidInput(f"Quality must be an integer, got {quality!r}")
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidInput(
            f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}"
        )
    return quality


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


# =============================================================================
# SM-2 Algorithm
# =============================================================================


class SM2Scheduler:
    """
    Implements the SM-2 spaced repetition algorithm.

    The SuperMemo 2 algorithm calculates review intervals from performance
    history. Each card has:
    - Easiness Factor (EF): How easy the item is (2.5 default, min 1.3)
    - Interval: Days until next review
    - Repetitions: Consecutive correct recalls
    """

    def __init__(self, config: SM2Config | None = None):
        """
        Initialize SM-2 scheduler.

        Args:
            config: Custom configuration (uses defaults if None)
        """
        self.config = config if config is not None else SM2Config()

    def new_state(self, user_id: str, flashcard_id: int) -> ReviewState:
        """Fresh, never-reviewed state for a card."""
        return ReviewState(
            user_id=user_id,
            flashcard_id=flashcard_id,
            ease_factor=self.config.initial_easiness,
        )

    def next_easiness(self, easiness: float, quality: int) -> float:
        # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
        miss = MAX_QUALITY - quality
        candidate = easiness + (0.1 - miss * (0.08 + miss * 0.02))
        return max(candidate, self.config.minimum_easiness)

    def is_mastered(self, repetitions: int, interval_days: int) -> bool:
        return (
            repetitions >= self.config.mastery_repetitions
            and interval_days >= self.config.mastery_min_interval
        )

    def schedule(
        self,
        state: ReviewState,
        quality: int,
        *,
        now: datetime,
    ) -> tuple[ReviewState, ReviewResult]:
        """
        Calculate the next review for a card.

        Args:
            state: Current SM-2 state for the card
            quality: User grade (0-5)
            now: Instant of the review

        Returns:
            Tuple of (updated ReviewState, ReviewResult)

        Raises:
            InvalidInput: quality outside [0, 5]
        """
        validate_quality(quality)

        new_ef = self.next_easiness(state.ease_factor, quality)

        if quality < PASSING_QUALITY:
            # Lapse - reset the run, keep the degraded ease
            new_repetitions = 0
            new_interval = self.config.lapse_interval
        else:
            new_repetitions = state.repetitions + 1

            if new_repetitions == 1:
                new_interval = self.config.first_interval
            elif new_repetitions == 2:
                new_interval = self.config.second_interval
            else:
                new_interval = max(1, round_half_up(state.interval_days * new_ef))

        mastered = self.is_mastered(new_repetitions, new_interval)
        next_review = now + timedelta(days=new_interval)

        new_state = replace(
            state,
            ease_factor=new_ef,
            interval_days=new_interval,
            repetitions=new_repetitions,
            last_reviewed_at=now,
            next_review_at=next_review,
            is_mastered=mastered,
            total_reviews=state.total_reviews + 1,
            correct_reviews=state.correct_reviews + (quality >= PASSING_QUALITY),
            first_reviewed_at=state.first_reviewed_at or now,
        )

        if quality < PASSING_QUALITY:
            outcome = ReviewOutcome.LAPSE
        elif mastered and not state.is_mastered:
            outcome = ReviewOutcome.MASTERED
        else:
            outcome = ReviewOutcome.PROGRESS

        logger.debug(
            f"SM-2 card={state.flashcard_id} q={quality} ef={state.ease_factor:.3f}->{new_ef:.3f} "
            f"interval={state.interval_days}->{new_interval} reps={new_repetitions}"
        )

        result = ReviewResult(
            flashcard_id=state.flashcard_id,
            next_review_at=next_review,
            interval_days=new_interval,
            outcome=outcome,
            message=outcome_message(outcome, new_interval),
            ease_factor=new_ef,
            repetitions=new_repetitions,
            is_mastered=mastered,
        )
        return new_state, result


def outcome_message(outcome: ReviewOutcome, interval_days: int) -> str:
    """Presentation text for a review outcome."""
    days = "day" if interval_days == 1 else "days"
    if outcome is ReviewOutcome.LAPSE:
        return f"Try again! This card comes back in {interval_days} {days}."
    if outcome is ReviewOutcome.MASTERED:
        return f"Card mastered! Next check-in in {interval_days} {days}."
    return f"Well done! Next review in {interval_days} {days}."
