"""
Daily activity streak tracking.

A streak counts consecutive calendar days with at least one qualifying action
(flashcard review, quiz submission, exam submission). The state machine is
driven by the gap between the activity date and the last recorded one:

    no prior activity  -> current = 1, total = 1
    gap of 0 days      -> no-op (same-day repeats never double-count)
    gap of 1 day       -> current += 1, total += 1
    gap of 2+ days     -> current = 1, total += 1
    negative gap       -> InvalidClock, nothing changes
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date

from loguru import logger

from .errors import InvalidClock, NotFound
from .locks import KeyedLocks
from .models import StreakSummary, UserStreak


class StreakTracker:
    """Owns UserStreak records and applies activity transitions atomically per user."""

    def __init__(self, leaderboard_size: int = 10):
        self.leaderboard_size = leaderboard_size
        self._streaks: dict[str, UserStreak] = {}
        self._lock = threading.Lock()
        self._users = KeyedLocks()

    def _load(self, user_id: str) -> UserStreak | None:
        with self._lock:
            streak = self._streaks.get(user_id)
            return replace(streak) if streak is not None else None

    def _store(self, streak: UserStreak) -> None:
        with self._lock:
            self._streaks[streak.user_id] = streak

    def record_activity(self, user_id: str, today: date) -> StreakSummary:
        """
        Apply one qualifying activity on ``today``.

        Args:
            user_id: Acting user
            today: Calendar date of the activity

        Returns:
            StreakSummary after the transition

        Raises:
            InvalidClock: ``today`` precedes the last recorded activity
        """
        with self._users.hold(user_id):
            streak = self._load(user_id) or UserStreak(user_id=user_id)
            previous_longest = streak.longest_streak

            if streak.last_activity_date is None:
                streak.current_streak = 1
                streak.total_active_days = 1
            else:
                gap = (today - streak.last_activity_date).days
                if gap < 0:
                    raise InvalidClock(user_id, today, streak.last_activity_date)
                if gap == 0:
                    return self._summarize(streak, today)
                if gap == 1:
                    streak.current_streak += 1
                else:
                    logger.info(
                        f"Streak broken for user {user_id} after {gap} days "
                        f"(was {streak.current_streak})"
                    )
                    streak.current_streak = 1
                streak.total_active_days += 1

            streak.longest_streak = max(streak.longest_streak, streak.current_streak)
            streak.last_activity_date = today
            self._store(streak)

        is_new_record = streak.longest_streak > previous_longest and streak.longest_streak > 1
        logger.info(
            f"Streak updated for user {user_id}: {streak.current_streak} days "
            f"(longest {streak.longest_streak})"
        )
        return self._summarize(streak, today, is_new_record=is_new_record)

    def get(self, user_id: str) -> UserStreak:
        """
        Get a copy of the stored streak record.

        Raises:
            NotFound: the user has never recorded activity
        """
        streak = self._load(user_id)
        if streak is None:
            raise NotFound(f"No activity recorded for user {user_id}")
        return streak

    def summary(self, user_id: str, today: date) -> StreakSummary:
        """
        Read-side streak view as of ``today``.

        A streak whose last activity is more than a day old is reported as 0;
        the stored record only changes on the next activity.
        """
        streak = self._load(user_id) or UserStreak(user_id=user_id)
        return self._summarize(self._as_of(streak, today), today)

    def leaderboard(self, today: date, top: int | None = None) -> list[UserStreak]:
        """
        Users ranked by current streak, then longest streak, then user id.

        Streaks are read as of ``today``, so a user who missed a day ranks
        with a current streak of 0.
        """
        with self._lock:
            streaks = [self._as_of(streak, today) for streak in self._streaks.values()]
        streaks.sort(key=lambda s: (-s.current_streak, -s.longest_streak, s.user_id))
        return streaks[: top or self.leaderboard_size]

    @staticmethod
    def _as_of(streak: UserStreak, today: date) -> UserStreak:
        last = streak.last_activity_date
        if last is not None and (today - last).days > 1:
            return replace(streak, current_streak=0)
        return replace(streak)

    @staticmethod
    def _summarize(streak: UserStreak, today: date, is_new_record: bool = False) -> StreakSummary:
        return StreakSummary(
            user_id=streak.user_id,
            current_streak=streak.current_streak,
            longest_streak=streak.longest_streak,
            last_activity_date=streak.last_activity_date,
            total_active_days=streak.total_active_days,
            is_active_today=streak.last_activity_date == today,
            is_new_record=is_new_record,
        )
