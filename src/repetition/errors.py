"""
Error taxonomy for the review scheduler.

Every error is scoped to the single request that produced it and is raised
before any state is mutated.
"""

from __future__ import annotations


class RepetitionError(Exception):
    """Base class for scheduler errors surfaced to callers."""

    pass


class InvalidInput(RepetitionError, ValueError):
    """Raised when a request carries an out-of-range or malformed value."""

    pass


class InvalidClock(RepetitionError):
    """Raised when an activity date precedes the last recorded activity."""

    def __init__(self, user_id: str, today, last_activity_date):
        self.user_id = user_id
        self.today = today
        self.last_activity_date = last_activity_date
        super().__init__(
            f"Activity on {today} for user {user_id} precedes last recorded "
            f"activity on {last_activity_date}"
        )


class NotFound(RepetitionError, LookupError):
    """Raised when a lookup references a record the store does not know."""

    pass
