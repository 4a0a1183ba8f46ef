# tests/test_scoring_leveling.py
import pytest

from brainquest.services.leveling import level_for, level_title, threshold_for, xp_state
from brainquest.services.scoring import calculate_xp, speed_multiplier, streak_multiplier

pytestmark = pytest.mark.engine


class TestScoring:
    @pytest.mark.parametrize("difficulty", [1, 2, 3, 4, 5])
    @pytest.mark.parametrize("time_taken,time_limit", [(0, 30), (29, 30), (100, 30), (5, None)])
    @pytest.mark.parametrize("streak", [0, 3, 50])
    def test_incorrect_answer_always_earns_consolation(self, difficulty, time_taken, time_limit, streak):
        assert calculate_xp(difficulty, False, time_taken, time_limit, streak) == 2

    def test_worked_example(self):
        # 10 * 2 (difficulty 3) * 1.5 (fast) * 1.2 (streak 4)
        assert calculate_xp(3, True, 5, 30, 4) == 36

    def test_untimed_question_skips_speed_bonus(self):
        assert calculate_xp(1, True, 0.1, None, 0) == 10
        assert calculate_xp(1, True, 0.1, 0, 0) == 10

    def test_difficulty_multipliers(self):
        assert [calculate_xp(d, True, 30, 30, 0) for d in range(1, 6)] == [10, 15, 20, 30, 40]

    def test_speed_bands(self):
        assert speed_multiplier(7, 30) == 1.5
        assert speed_multiplier(7.5, 30) == 1.3
        assert speed_multiplier(15, 30) == 1.1
        assert speed_multiplier(22.5, 30) == 1.0
        assert speed_multiplier(45, 30) == 1.0

    def test_streak_bonus_saturates_at_ten(self):
        assert streak_multiplier(0) == 1.0
        assert streak_multiplier(10) == pytest.approx(1.5)
        assert streak_multiplier(25) == pytest.approx(1.5)
        assert calculate_xp(5, True, 1, 30, 10) == calculate_xp(5, True, 1, 30, 99) == 90

    def test_result_is_rounded_to_nearest(self):
        # 10 * 1.5 * 1.1 * 1.05 = 17.325
        assert calculate_xp(2, True, 15, 30, 1) == 17
        # 10 * 1.5 * 1.3 = 19.5 rounds up
        assert calculate_xp(2, True, 10, 30, 0) == 20


class TestLeveling:
    def test_thresholds(self):
        assert threshold_for(1) == 0
        assert threshold_for(2) == 141
        assert threshold_for(3) == 259
        assert threshold_for(4) == 400

    def test_level_for_values(self):
        assert level_for(0) == 1
        assert level_for(140) == 1
        assert level_for(150) == 2
        assert level_for(10 ** 9) == 100

    def test_thresholds_are_monotonic(self):
        values = [threshold_for(level) for level in range(1, 101)]
        assert values == sorted(values)

    @pytest.mark.parametrize("level", range(1, 100))
    def test_level_and_threshold_are_inverse_at_boundaries(self, level):
        assert level_for(threshold_for(level)) == level
        if level > 1:
            assert level_for(threshold_for(level) - 1) == level - 1

    def test_xp_state(self):
        state = xp_state(200)
        assert state.current_level == 2
        assert state.xp_in_current_level == 59
        assert state.xp_for_next_level == 259 - 141
        assert state.title == "Apprentice"

    def test_xp_state_at_the_level_cap(self):
        state = xp_state(threshold_for(100) + 5000)
        assert state.current_level == 100
        assert state.xp_in_current_level == 5000
        assert state.xp_for_next_level == 0
        assert state.title == "Mighty One"

    def test_titles(self):
        assert level_title(1) == "Apprentice"
        assert level_title(9) == "Apprentice"
        assert level_title(10) == "Scholar"
        assert level_title(55) == "Mastermind"
        assert level_title(100) == "Mighty One"
