# tests/test_streaks_and_challenges.py
from datetime import date

import pytest

from brainquest.services.collaborators import SessionCounter
from brainquest.services.daily_challenge import challenge_bonus, get_daily_challenge, get_daily_challenges
from brainquest.services.streak_service import advance_streak
from brainquest.utils.exceptions import ContentUnavailableError

pytestmark = pytest.mark.engine

TODAY = date(2026, 10, 17)


class TestDailyStreak:
    def test_first_activity_starts_a_streak(self):
        update = advance_streak(0, 0, None, TODAY)
        assert (update.current_streak, update.longest_streak, update.is_new_day) == (1, 1, True)

    def test_same_day_is_unchanged(self):
        update = advance_streak(3, 5, TODAY, TODAY)
        assert (update.current_streak, update.longest_streak, update.is_new_day) == (3, 5, False)

    def test_next_day_extends(self):
        update = advance_streak(5, 5, date(2026, 10, 16), TODAY)
        assert (update.current_streak, update.longest_streak) == (6, 6)

    def test_across_month_boundary(self):
        update = advance_streak(2, 4, date(2026, 9, 30), date(2026, 10, 1))
        assert (update.current_streak, update.longest_streak) == (3, 4)

    def test_gap_resets_but_keeps_longest(self):
        update = advance_streak(9, 12, date(2026, 10, 14), TODAY)
        assert (update.current_streak, update.longest_streak) == (1, 12)
        assert update.last_active_date == TODAY


class TestDailyChallenges:
    def test_same_date_same_challenges(self):
        assert get_daily_challenges(TODAY) == get_daily_challenges(TODAY)

    def test_shape(self):
        challenges = get_daily_challenges(TODAY)
        assert len(challenges) == 3
        assert len({c.topic for c in challenges}) == 3
        for i, challenge in enumerate(challenges):
            assert challenge.id == f"daily-2026-10-17-{i}"
            assert 1 <= challenge.difficulty <= 3
            assert challenge.xp_bonus == 50 + 10 * challenge.difficulty
            assert challenge.question_count > 0

    def test_bonus(self):
        assert challenge_bonus(1) == 60
        assert challenge_bonus(3) == 80

    def test_lookup_by_id(self):
        challenge = get_daily_challenges(TODAY)[1]
        assert get_daily_challenge(challenge.id) == challenge

    @pytest.mark.parametrize("challenge_id", ["daily-2026-10-17-9", "daily-not-a-date-0", "nonsense"])
    def test_unknown_challenge(self, challenge_id):
        with pytest.raises(ContentUnavailableError):
            get_daily_challenge(challenge_id)


def test_session_counter_gates_feedback():
    counter = SessionCounter(value=0, every=5)
    assert not counter.feedback_due
    due = []
    for _ in range(10):
        counter.increment()
        due.append(counter.feedback_due)
    assert due == [False, False, False, False, True, False, False, False, False, True]
