# brainquest/services/streak_service.py
from datetime import date
from typing import Callable, NamedTuple, Optional

from sqlalchemy.future import select

from brainquest.models.user import StreakState
from brainquest.utils.db import AsyncSessionLocal
from brainquest.utils.logger import logger


class StreakUpdate(NamedTuple):
    current_streak: int
    longest_streak: int
    last_active_date: date
    is_new_day: bool


def advance_streak(current: int, longest: int, last_active: Optional[date], today: date) -> StreakUpdate:
    """
    Daily streak after activity on ``today``: unchanged on the same day, one
    longer on the next calendar day, and back to 1 after a gap.
    """
    if last_active == today:
        return StreakUpdate(current, longest, today, False)
    if last_active is not None and (today - last_active).days == 1:
        new_streak = current + 1
    else:
        new_streak = 1
    return StreakUpdate(new_streak, max(longest, new_streak), today, True)


class StreakRecorder:
    """ActivityRecorder that keeps one user's daily streak in the database."""

    def __init__(self, user_id: str, today: Callable[[], date] = date.today):
        self.user_id = user_id
        self.today = today

    async def record_activity(self) -> None:
        async with AsyncSessionLocal() as session:
            result = await session.execute(select(StreakState).filter_by(user_id=self.user_id))
            state = result.scalars().first()
            if state is None:
                state = StreakState(user_id=self.user_id, current_streak=0, longest_streak=0)
                session.add(state)

            update = advance_streak(state.current_streak or 0, state.longest_streak or 0,
                                    state.last_active_date, self.today())
            if not update.is_new_day:
                return
            state.current_streak = update.current_streak
            state.longest_streak = update.longest_streak
            state.last_active_date = update.last_active_date
            await session.commit()
            logger.info(f"User '{self.user_id}' streak is now {update.current_streak} day(s).")
