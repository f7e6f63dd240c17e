"""
Unit tests for SM2Scheduler.

Tests:
- Ease factor update formula and 1.3 floor
- Lapse handling (quality < 3)
- Interval progression 1, 6, round(I * EF)
- Mastery thresholds and review outcomes
- Input validation and determinism
"""

from datetime import timedelta

import pytest

from src.repetition.errors import InvalidInput
from src.repetition.models import CardStatus, ReviewOutcome, ReviewState
from src.repetition.scheduler import SM2Config, SM2Scheduler, round_half_up


def expected_ef(ef: float, q: int) -> float:
    """Reference formula, evaluated the same way as the scheduler."""
    return max(ef + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), 1.3)


def run(scheduler, state, qualities, start, follow_schedule=True):
    """Apply grades in order, reviewing each card on its due date."""
    now = start
    results = []
    for quality in qualities:
        state, result = scheduler.schedule(state, quality, now=now)
        results.append(result)
        if follow_schedule:
            now = result.next_review_at
    return state, results


@pytest.fixture
def fresh(scheduler):
    return scheduler.new_state("user-1", 42)


class TestEaseFactor:
    """Tests for the ease factor update."""

    @pytest.mark.parametrize(
        "quality,delta",
        [(5, 0.1), (4, 0.0), (3, -0.14), (2, -0.32), (1, -0.54), (0, -0.8)],
    )
    def test_delta_per_quality(self, scheduler, fresh, start_time, quality, delta):
        """Each grade moves the ease factor by the SM-2 delta."""
        state, _ = scheduler.schedule(fresh, quality, now=start_time)

        assert state.ease_factor == pytest.approx(2.5 + delta)

    def test_never_below_floor(self, scheduler, start_time):
        """Ease factor is clamped at 1.3 for every starting value and grade."""
        for ef in (1.3, 1.35, 1.5, 1.8, 2.5, 3.5):
            for quality in range(6):
                state = ReviewState(user_id="u", flashcard_id=1, ease_factor=ef)
                new_state, result = scheduler.schedule(state, quality, now=start_time)

                assert new_state.ease_factor >= 1.3
                assert result.ease_factor == new_state.ease_factor

    def test_floor_is_configurable(self, start_time):
        """A custom minimum replaces the default floor."""
        scheduler = SM2Scheduler(SM2Config(minimum_easiness=1.5))
        state = ReviewState(user_id="u", flashcard_id=1, ease_factor=1.6)

        new_state, _ = scheduler.schedule(state, 0, now=start_time)

        assert new_state.ease_factor == 1.5


class TestLapse:
    """Tests for grades below 3."""

    @pytest.mark.parametrize("quality", [0, 1, 2])
    def test_lapse_resets_run(self, scheduler, start_time, quality):
        """A lapse resets repetitions to 0 and the interval to 1 day."""
        state = ReviewState(
            user_id="u",
            flashcard_id=1,
            ease_factor=2.7,
            interval_days=120,
            repetitions=7,
            last_reviewed_at=start_time - timedelta(days=120),
            next_review_at=start_time,
            is_mastered=True,
        )

        new_state, result = scheduler.schedule(state, quality, now=start_time)

        assert new_state.repetitions == 0
        assert new_state.interval_days == 1
        assert new_state.is_mastered is False
        assert new_state.next_review_at == start_time + timedelta(days=1)
        assert result.outcome is ReviewOutcome.LAPSE

    def test_lapse_still_degrades_ease(self, scheduler, fresh, start_time):
        """Ease factor is updated on a lapse, not reset."""
        new_state, _ = scheduler.schedule(fresh, 1, now=start_time)

        assert new_state.ease_factor == expected_ef(2.5, 1)


class TestIntervals:
    """Tests for interval progression."""

    def test_repeated_perfect_recall(self, scheduler, fresh, start_time):
        """Intervals follow 1, 6, round(6 * EF), ... and strictly increase."""
        _, results = run(scheduler, fresh, [5, 5, 5, 5, 5], start_time)
        intervals = [r.interval_days for r in results]

        assert intervals == [1, 6, 17, 49, 147]
        assert all(a < b for a, b in zip(intervals, intervals[1:]))

    def test_reference_scenario(self, scheduler, fresh, start_time):
        """Grades 2, 4, 5, 5 from a new card reproduce the formula exactly."""
        ef = 2.5
        state = fresh
        expectations = [(2, 0, 1), (4, 1, 1), (5, 2, 6)]

        for quality, repetitions, interval in expectations:
            state, _ = scheduler.schedule(state, quality, now=start_time)
            ef = expected_ef(ef, quality)

            assert state.repetitions == repetitions
            assert state.interval_days == interval
            assert state.ease_factor == ef

        state, _ = scheduler.schedule(state, 5, now=start_time)
        ef = expected_ef(ef, 5)

        assert state.ease_factor == ef
        assert state.ease_factor == pytest.approx(2.38)
        assert state.repetitions == 3
        assert state.interval_days == round_half_up(6 * ef) == 14

    def test_dates_follow_interval(self, scheduler, fresh, start_time):
        """next_review_at = now + interval, last_reviewed_at = now."""
        state, result = scheduler.schedule(fresh, 4, now=start_time)

        assert state.last_reviewed_at == start_time
        assert state.next_review_at == start_time + timedelta(days=1)
        assert result.next_review_at == state.next_review_at

    def test_configured_steps(self, start_time):
        """First and second intervals come from configuration."""
        scheduler = SM2Scheduler(SM2Config(first_interval=2, second_interval=5))
        _, results = run(scheduler, scheduler.new_state("u", 1), [4, 4], start_time)

        assert [r.interval_days for r in results] == [2, 5]

    def test_round_half_up(self):
        assert round_half_up(14.28) == 14
        assert round_half_up(2.5) == 3
        assert round_half_up(16.8) == 17


class TestMastery:
    """Tests for mastery thresholds and outcomes."""

    def test_mastered_after_threshold(self, scheduler, fresh, start_time):
        """Default policy: 5 repetitions and an interval of at least 21 days."""
        state, results = run(scheduler, fresh, [5, 5, 5, 5, 5, 5], start_time)

        outcomes = [r.outcome for r in results]
        assert outcomes[:4] == [ReviewOutcome.PROGRESS] * 4
        assert outcomes[4] is ReviewOutcome.MASTERED
        assert outcomes[5] is ReviewOutcome.PROGRESS
        assert state.is_mastered
        assert state.status is CardStatus.MASTERED

    def test_custom_thresholds(self, start_time):
        """Mastery thresholds are policy, not algorithm constants."""
        scheduler = SM2Scheduler(SM2Config(mastery_repetitions=3, mastery_min_interval=10))
        state, results = run(scheduler, scheduler.new_state("u", 1), [5, 5, 5], start_time)

        assert state.is_mastered
        assert results[-1].outcome is ReviewOutcome.MASTERED

    def test_interval_threshold_required(self, start_time):
        """Enough repetitions alone do not master a card."""
        scheduler = SM2Scheduler(SM2Config(mastery_repetitions=2, mastery_min_interval=30))
        state, _ = run(scheduler, scheduler.new_state("u", 1), [5, 5, 5], start_time)

        assert state.repetitions == 3
        assert state.interval_days == 17
        assert not state.is_mastered


class TestCountersAndValidation:
    """Tests for lifetime counters, validation and determinism."""

    def test_counters(self, scheduler, fresh, start_time):
        state, _ = run(scheduler, fresh, [5, 1, 3, 4], start_time)

        assert state.total_reviews == 4
        assert state.correct_reviews == 3
        assert state.accuracy == pytest.approx(0.75)
        assert state.first_reviewed_at == start_time

    @pytest.mark.parametrize("quality", [-1, 6, 10, True, 3.0, "4", None])
    def test_invalid_quality_rejected(self, scheduler, fresh, start_time, quality):
        with pytest.raises(InvalidInput):
            scheduler.schedule(fresh, quality, now=start_time)

    def test_deterministic(self, scheduler, fresh, start_time):
        """Same state, grade and instant always give the same output."""
        first = scheduler.schedule(fresh, 4, now=start_time)
        second = scheduler.schedule(fresh, 4, now=start_time)

        assert first == second

    def test_input_state_untouched(self, scheduler, fresh, start_time):
        scheduler.schedule(fresh, 5, now=start_time)

        assert fresh.repetitions == 0
        assert fresh.interval_days == 0
        assert fresh.last_reviewed_at is None

    def test_messages_differ_by_outcome(self, scheduler, fresh, start_time):
        _, lapse = scheduler.schedule(fresh, 0, now=start_time)
        _, progress = scheduler.schedule(fresh, 5, now=start_time)

        assert lapse.message != progress.message
        assert "1 day" in progress.message
