"""
Payload-level entry points for the web layer.

Each handler validates a raw payload, calls the ReviewService and returns a
JSON-ready dictionary. Routing and authentication stay with the caller, which
resolves ``user_id`` before calling in.
"""

from __future__ import annotations

from typing import Any

from .schemas import (
    ActivityRequest,
    DueCardResponse,
    DueCardsQuery,
    ReviewResponse,
    ReviewSubmission,
    SetProgressQuery,
    SetProgressResponse,
    StreakSummaryResponse,
    parse_request,
)
from .service import ReviewService


class ReviewApi:
    """Thin adapter between wire payloads and ReviewService."""

    def __init__(self, service: ReviewService):
        self.service = service

    def submit_review(self, user_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        request = parse_request(ReviewSubmission, payload)
        result = self.service.submit_review(user_id, request.flashcard_id, request.quality)
        return ReviewResponse.from_result(result).model_dump(mode="json")

    def record_activity(self, payload: dict[str, Any]) -> dict[str, Any]:
        request = parse_request(ActivityRequest, payload)
        summary = self.service.record_activity(request.user_id, request.activity_date)
        return StreakSummaryResponse.from_summary(summary).model_dump(mode="json")

    def due_cards(self, payload: dict[str, Any]) -> list[dict[str, Any]]:
        query = parse_request(DueCardsQuery, payload)
        if query.set_id is None:
            cards = self.service.due_cards(query.user_id, query.as_of, limit=query.limit)
        else:
            cards = self.service.due_cards_for_set(
                query.user_id, query.set_id, query.as_of, limit=query.limit
            )
        return [
            DueCardResponse(
                flashcard_id=card.flashcard_id,
                next_review_date=card.next_review_at,
            ).model_dump(mode="json")
            for card in cards
        ]

    def set_progress(self, payload: dict[str, Any]) -> dict[str, Any]:
        query = parse_request(SetProgressQuery, payload)
        snapshot = self.service.set_progress(query.user_id, query.set_id)
        return SetProgressResponse.from_snapshot(snapshot).model_dump(mode="json")
