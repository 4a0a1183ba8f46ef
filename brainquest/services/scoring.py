# brainquest/services/scoring.py
import math
from typing import Optional

from brainquest.utils.config import settings

DIFFICULTY_MULTIPLIERS = {1: 1.0, 2: 1.5, 3: 2.0, 4: 3.0, 5: 4.0}

# (upper bound on time_taken / time_limit, multiplier), checked in order
SPEED_BANDS = ((0.25, 1.5), (0.5, 1.3), (0.75, 1.1))

STREAK_STEP = 0.05
STREAK_CAP = 0.5


def speed_multiplier(time_taken: float, time_limit: Optional[float]) -> float:
    """Bonus for answering well inside the time limit; untimed questions get none."""
    if not time_limit or time_limit <= 0:
        return 1.0
    ratio = time_taken / time_limit
    for upper_bound, multiplier in SPEED_BANDS:
        if ratio < upper_bound:
            return multiplier
    return 1.0


def streak_multiplier(session_streak: int) -> float:
    """1 + 5% per prior consecutive correct answer, saturating at +50%."""
    return 1.0 + min(max(session_streak, 0) * STREAK_STEP, STREAK_CAP)


def calculate_xp(
    difficulty: int,
    is_correct: bool,
    time_taken: float,
    time_limit: Optional[float],
    session_streak: int,
) -> int:
    """
    XP earned for one answered question.

    ``session_streak`` counts the consecutive correct answers *before* this one.
    Multipliers compose in a fixed order (difficulty, speed, streak) and the
    result is rounded half-up to an integer.
    """
    if not is_correct:
        return settings.incorrect_xp

    if difficulty not in DIFFICULTY_MULTIPLIERS:
        raise ValueError(f"Difficulty must be between 1 and 5, got {difficulty}")

    xp = float(settings.base_xp)
    xp *= DIFFICULTY_MULTIPLIERS[difficulty]
    xp *= speed_multiplier(time_taken, time_limit)
    xp *= streak_multiplier(session_streak)
    return int(math.floor(xp + 0.5))
