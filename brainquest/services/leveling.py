# brainquest/services/leveling.py
import math

from brainquest.models.progress import XPState
from brainquest.utils.config import settings

LEVEL_TITLES = {
    1: "Apprentice",
    10: "Scholar",
    20: "Thinker",
    30: "Strategist",
    40: "Champion",
    50: "Mastermind",
    60: "Sage",
    70: "Prophet",
    80: "Legend",
    90: "Grandmaster",
    100: "Mighty One",
}


def threshold_for(level: int) -> int:
    """Total XP needed to reach ``level``: 0 for level 1, floor(50 * level^1.5) above."""
    if level <= 1:
        return 0
    return int(math.floor(50 * math.pow(level, 1.5)))


def level_for(total_xp: int) -> int:
    """Largest level whose threshold does not exceed ``total_xp``, capped at the max level."""
    level = 1
    while level < settings.max_level and threshold_for(level + 1) <= total_xp:
        level += 1
    return level


def xp_state(total_xp: int) -> XPState:
    """Progress within the current level. At the max level there is no next level to fill."""
    current_level = level_for(total_xp)
    current_floor = threshold_for(current_level)
    if current_level >= settings.max_level:
        next_floor = current_floor
    else:
        next_floor = threshold_for(current_level + 1)
    return XPState(
        total_xp=total_xp,
        current_level=current_level,
        xp_in_current_level=total_xp - current_floor,
        xp_for_next_level=next_floor - current_floor,
        title=level_title(current_level),
    )


def level_title(level: int) -> str:
    for tier in sorted(LEVEL_TITLES, reverse=True):
        if level >= tier:
            return LEVEL_TITLES[tier]
    return LEVEL_TITLES[1]
