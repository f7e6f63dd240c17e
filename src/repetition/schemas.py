"""
Wire models for the scheduler's inbound operations.

The web layer hands raw payloads to ``parse_request`` and serializes the
response models with ``model_dump(mode="json")`` (timestamps as ISO-8601).
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import InvalidInput
from .models import ReviewResult, SetProgressSnapshot, StreakSummary

RequestT = TypeVar("RequestT", bound=BaseModel)


def parse_request(model: type[RequestT], payload: dict[str, Any]) -> RequestT:
    """Validate a raw payload, reporting failures as InvalidInput."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidInput(str(exc)) from exc


# =============================================================================
# Requests
# =============================================================================


class ReviewSubmission(BaseModel):
    """Request model for submitting a flashcard review."""

    flashcard_id: int = Field(..., description="Reviewed flashcard")
    quality: int = Field(..., ge=0, le=5, strict=True, description="Recall quality (0-5)")


class ActivityRequest(BaseModel):
    """Request model for recording a qualifying activity."""

    user_id: str = Field(..., min_length=1, description="Acting user")
    activity_date: date | None = Field(None, description="Calendar date (defaults to today)")


class DueCardsQuery(BaseModel):
    """Query model for the review queue."""

    user_id: str = Field(..., min_length=1)
    as_of: datetime | None = Field(None, description="Cutoff instant (defaults to now)")
    limit: int | None = Field(None, ge=1, le=1000)
    set_id: int | None = Field(None, description="Restrict the queue to one set")

    @field_validator("as_of")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class SetProgressQuery(BaseModel):
    """Query model for set progress."""

    user_id: str = Field(..., min_length=1)
    set_id: int


# =============================================================================
# Responses
# =============================================================================


class ReviewResponse(BaseModel):
    """Response model for a submitted review."""

    flashcard_id: int
    next_review_date: datetime
    interval_days: int
    message: str

    @classmethod
    def from_result(cls, result: ReviewResult) -> ReviewResponse:
        return cls(
            flashcard_id=result.flashcard_id,
            next_review_date=result.next_review_at,
            interval_days=result.interval_days,
            message=result.message,
        )


class StreakSummaryResponse(BaseModel):
    """Response model for streak state."""

    current_streak: int
    longest_streak: int
    last_activity_date: date | None
    total_active_days: int
    is_active_today: bool
    is_new_record: bool = False

    @classmethod
    def from_summary(cls, summary: StreakSummary) -> StreakSummaryResponse:
        return cls(
            current_streak=summary.current_streak,
            longest_streak=summary.longest_streak,
            last_activity_date=summary.last_activity_date,
            total_active_days=summary.total_active_days,
            is_active_today=summary.is_active_today,
            is_new_record=summary.is_new_record,
        )


class DueCardResponse(BaseModel):
    """One entry of the review queue."""

    flashcard_id: int
    next_review_date: datetime | None


class SetProgressResponse(BaseModel):
    """Response model for set progress."""

    set_id: int
    total_cards: int
    studied_cards: int
    mastered_cards: int
    progress_percentage: float
    is_completed: bool

    @classmethod
    def from_snapshot(cls, snapshot: SetProgressSnapshot) -> SetProgressResponse:
        return cls(
            set_id=snapshot.set_id,
            total_cards=snapshot.total_cards,
            studied_cards=snapshot.studied_cards,
            mastered_cards=snapshot.mastered_cards,
            progress_percentage=round(snapshot.progress_percentage, 2),
            is_completed=snapshot.is_completed,
        )
