"""Tests for the check-in streak transition."""
from datetime import date, timedelta

from profile_economy.services.streak import STREAK_MILESTONES, advance_streak, milestone_bonus


TODAY = date(2025, 3, 14)


class TestAdvanceStreak:

    def test_first_check_in_starts_streak(self):
        result = advance_streak(TODAY, None, 0, 0, 0)

        assert result.current_streak == 1
        assert result.longest_streak == 1
        assert result.last_streak_date == TODAY
        assert result.day_advanced is True
        assert result.bonus_reputation == 0

    def test_consecutive_day_hits_seven_day_milestone(self):
        result = advance_streak(TODAY, TODAY - timedelta(days=1), 6, 6, 0)

        assert result.current_streak == 7
        assert result.bonus_reputation == 15
        assert result.longest_streak >= 7
        assert result.used_skip is False

    def test_same_day_is_reentrant(self):
        result = advance_streak(TODAY, TODAY, 3, 5, 1)

        assert result.day_advanced is False
        assert result.current_streak == 3
        assert result.longest_streak == 5
        assert result.free_skip_count == 1
        assert result.bonus_reputation == 0

    def test_date_before_last_check_in_changes_nothing(self):
        result = advance_streak(TODAY - timedelta(days=1), TODAY, 4, 4, 0)

        assert result.day_advanced is False
        assert result.current_streak == 4
        assert result.last_streak_date == TODAY

    def test_one_missed_day_uses_skip(self):
        result = advance_streak(TODAY, TODAY - timedelta(days=2), 2, 2, 1)

        assert result.current_streak == 3
        assert result.used_skip is True
        assert result.free_skip_count == 0
        assert result.bonus_reputation == 5

    def test_one_missed_day_without_skip_resets(self):
        result = advance_streak(TODAY, TODAY - timedelta(days=2), 9, 9, 0)

        assert result.current_streak == 1
        assert result.was_reset is True
        assert result.longest_streak == 9

    def test_long_gap_resets_and_keeps_skips(self):
        result = advance_streak(TODAY, TODAY - timedelta(days=3), 12, 12, 1)

        assert result.current_streak == 1
        assert result.free_skip_count == 1
        assert result.used_skip is False

    def test_longest_never_below_current(self):
        result = advance_streak(TODAY, TODAY - timedelta(days=1), 20, 20, 0)

        assert result.longest_streak == 21


class TestMilestones:

    def test_exact_matches_only(self):
        assert milestone_bonus(3) == 5
        assert milestone_bonus(4) == 0
        assert milestone_bonus(100) == 500
        assert milestone_bonus(101) == 0

    def test_table(self):
        assert STREAK_MILESTONES == {3: 5, 7: 15, 14: 30, 30: 100, 100: 500}
