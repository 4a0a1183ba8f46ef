# brainquest/services/achievement_service.py
"""
Achievements unlocked from a user's persisted history.

The summary and unlock rules are pure functions over attempt and session
records (pydantic records or ORM rows, anything with the same attributes).
``AchievementTracker`` loads one user's history, stores newly unlocked
achievements and credits their XP reward to the profile.
"""
from collections import Counter
from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Set

from fastapi import HTTPException
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from brainquest.models.enums import (
    AchievementCategory,
    AchievementCondition,
    BattlePhase,
    SessionType,
    Subject,
    Topic,
)
from brainquest.models.user import AttemptLog, SessionLog, StreakState, User, UserAchievement
from brainquest.services.daily_challenge import get_daily_challenges
from brainquest.state_manager import get_user_or_create
from brainquest.utils.db import AsyncSessionLocal
from brainquest.utils.logger import logger

# Total answering time allowed for a speed batch
SPEED_BATCH_SECONDS = 30.0


class Achievement(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    icon: str
    category: AchievementCategory
    condition: AchievementCondition
    threshold: int
    subject: Optional[Subject] = None
    xp_reward: int


def _achievement(id, name, description, icon, category, condition, threshold, xp_reward, subject=None):
    return Achievement(id=id, name=name, description=description, icon=icon, category=category,
                       condition=condition, threshold=threshold, subject=subject, xp_reward=xp_reward)


A = AchievementCategory
C = AchievementCondition

ACHIEVEMENTS: List[Achievement] = [
    _achievement("first_steps", "First Steps", "Answer 10 questions", "👣", A.VOLUME, C.TOTAL_ATTEMPTS, 10, 50),
    _achievement("half_century", "Half Century", "Answer 50 questions", "5️⃣", A.VOLUME, C.TOTAL_ATTEMPTS, 50, 100),
    _achievement("century_club", "Century Club", "Answer 100 questions", "💯", A.VOLUME, C.TOTAL_ATTEMPTS, 100, 200),
    _achievement("five_hundred", "Five Hundred", "Answer 500 questions", "🏆", A.VOLUME, C.TOTAL_ATTEMPTS, 500, 500),
    _achievement("thousand", "The Thousand", "Answer 1000 questions", "👑", A.VOLUME, C.TOTAL_ATTEMPTS, 1000, 1000),

    _achievement("sharp_mind", "Sharp Mind", "Get 10 correct in a row", "🎯", A.MASTERY, C.CORRECT_RUN, 10, 100),
    _achievement("perfect_ten", "Perfect Ten", "Score 10/10 on a quiz", "⭐", A.MASTERY, C.PERFECT_SESSION, 10, 150),
    _achievement("flawless", "Flawless", "Score 20/20 on a quiz", "💎", A.MASTERY, C.PERFECT_SESSION, 20, 300),
    _achievement("sharpshooter", "Sharpshooter", "Get 50 correct in a row", "🔫", A.MASTERY, C.CORRECT_RUN, 50, 500),

    _achievement("on_fire", "On Fire", "3-day practice streak", "🔥", A.STREAK, C.DAY_STREAK, 3, 50),
    _achievement("week_warrior", "Week Warrior", "7-day practice streak", "⚔️", A.STREAK, C.DAY_STREAK, 7, 150),
    _achievement("fortnight_fighter", "Fortnight Fighter", "14-day practice streak", "🛡️", A.STREAK, C.DAY_STREAK, 14, 300),
    _achievement("monthly_master", "Monthly Master", "30-day practice streak", "📅", A.STREAK, C.DAY_STREAK, 30, 500),
    _achievement("unstoppable", "Unstoppable", "60-day practice streak", "🚀", A.STREAK, C.DAY_STREAK, 60, 1000),

    _achievement("quick_thinker", "Quick Thinker", "Answer correctly in under 5 seconds", "⚡", A.SPEED,
                 C.FAST_ANSWER, 5, 50),
    _achievement("lightning_round", "Lightning Round", "Get 5 correct in under 30 seconds total", "🌩️", A.SPEED,
                 C.SPEED_BATCH, 5, 200),

    _achievement("explorer", "Explorer", f"Try all {len(Subject)} subjects", "🗺️", A.EXPLORATION,
                 C.SUBJECTS_TRIED, len(Subject), 100),
    _achievement("maths_fan", "Maths Fan", "Answer 50 Maths questions", "🔢", A.EXPLORATION,
                 C.SUBJECT_ATTEMPTS, 50, 100, subject=Subject.MATHS),
    _achievement("word_warrior", "Word Warrior", "Answer 50 Verbal Reasoning questions", "📝", A.EXPLORATION,
                 C.SUBJECT_ATTEMPTS, 50, 100, subject=Subject.VERBAL_REASONING),
    _achievement("bookworm", "Bookworm", "Answer 50 English questions", "📖", A.EXPLORATION,
                 C.SUBJECT_ATTEMPTS, 50, 100, subject=Subject.ENGLISH),

    _achievement("night_owl", "Night Owl", "Practice after 8pm", "🦉", A.SPECIAL, C.PRACTICE_FROM_HOUR, 20, 30),
    _achievement("early_bird", "Early Bird", "Practice before 8am", "🐦", A.SPECIAL, C.PRACTICE_BEFORE_HOUR, 8, 30),
    _achievement("daily_triple", "Daily Triple", "Complete all 3 daily challenges", "🎖️", A.SPECIAL,
                 C.DAILY_CHALLENGES, 3, 100),
    _achievement("boss_slayer", "Goliath Slayer", "Defeat your first boss", "🪨", A.SPECIAL, C.BOSSES_DEFEATED, 1, 200),
]

ACHIEVEMENTS_BY_ID: Dict[str, Achievement] = {a.id: a for a in ACHIEVEMENTS}


class ProgressSummary(NamedTuple):
    total_attempts: int
    subject_attempts: Dict[str, int]
    longest_correct_run: int
    fastest_correct: Optional[float]
    largest_perfect_session: int
    longest_speed_batch: int
    day_streak: int
    bosses_defeated: int
    daily_challenges_completed: int
    hour: int


def _subject_key(subject) -> str:
    return Subject(subject).value


def longest_correct_run(attempts: Iterable) -> int:
    best = run = 0
    for attempt in attempts:
        run = run + 1 if attempt.is_correct else 0
        best = max(best, run)
    return best


def largest_perfect_session(attempts: Iterable) -> int:
    """Size of the largest session in which every attempt was correct."""
    totals: Counter = Counter()
    correct: Counter = Counter()
    for attempt in attempts:
        if not attempt.session_id:
            continue
        totals[attempt.session_id] += 1
        if attempt.is_correct:
            correct[attempt.session_id] += 1
    perfect = [n for sid, n in totals.items() if correct[sid] == n]
    return max(perfect, default=0)


def longest_speed_batch(attempts: Iterable, window: float = SPEED_BATCH_SECONDS) -> int:
    """Most consecutive correct answers whose answering times add up to ``window`` or less."""
    times = [a.time_taken for a in attempts if a.is_correct]
    best = 0
    start = 0
    total = 0.0
    for i, taken in enumerate(times):
        total += taken
        while total > window and start < i:
            total -= times[start]
            start += 1
        if total <= window:
            best = max(best, i - start + 1)
    return best


def completed_daily_challenges(sessions: Iterable, day: date) -> int:
    """Number of ``day``'s challenges with a finished challenge session on that day."""
    played = {
        (tuple(Topic(t).value for t in s.topics or []), s.difficulty, s.total_questions)
        for s in sessions
        if s.type == SessionType.DAILY_CHALLENGE.value and s.end_time and s.end_time.date() == day
    }
    return sum(
        1 for c in get_daily_challenges(day)
        if ((c.topic.value,), c.difficulty, c.question_count) in played
    )


def summarize(attempts: List, sessions: List, day_streak: int, now: datetime) -> ProgressSummary:
    """
    Folds a user's history into the figures achievements are judged on.
    ``attempts`` must be in the order they were answered.
    """
    fastest = min((a.time_taken for a in attempts if a.is_correct), default=None)
    return ProgressSummary(
        total_attempts=len(attempts),
        subject_attempts=dict(Counter(_subject_key(a.subject) for a in attempts)),
        longest_correct_run=longest_correct_run(attempts),
        fastest_correct=fastest,
        largest_perfect_session=largest_perfect_session(attempts),
        longest_speed_batch=longest_speed_batch(attempts),
        day_streak=day_streak,
        bosses_defeated=sum(
            1 for s in sessions
            if s.type == SessionType.BOSS_BATTLE.value and s.outcome == BattlePhase.VICTORY.value
        ),
        daily_challenges_completed=completed_daily_challenges(sessions, now.date()),
        hour=now.hour,
    )


def is_unlocked(achievement: Achievement, summary: ProgressSummary) -> bool:
    threshold = achievement.threshold
    condition = achievement.condition
    if condition == C.TOTAL_ATTEMPTS:
        return summary.total_attempts >= threshold
    if condition == C.CORRECT_RUN:
        return summary.longest_correct_run >= threshold
    if condition == C.PERFECT_SESSION:
        return summary.largest_perfect_session >= threshold
    if condition == C.DAY_STREAK:
        return summary.day_streak >= threshold
    if condition == C.FAST_ANSWER:
        return summary.fastest_correct is not None and summary.fastest_correct <= threshold
    if condition == C.SPEED_BATCH:
        return summary.longest_speed_batch >= threshold
    if condition == C.SUBJECTS_TRIED:
        return len(summary.subject_attempts) >= threshold
    if condition == C.SUBJECT_ATTEMPTS:
        return summary.subject_attempts.get(achievement.subject.value, 0) >= threshold
    if condition == C.PRACTICE_FROM_HOUR:
        return summary.total_attempts > 0 and summary.hour >= threshold
    if condition == C.PRACTICE_BEFORE_HOUR:
        return summary.total_attempts > 0 and summary.hour < threshold
    if condition == C.DAILY_CHALLENGES:
        return summary.daily_challenges_completed >= threshold
    if condition == C.BOSSES_DEFEATED:
        return summary.bosses_defeated >= threshold
    return False


def newly_unlocked(summary: ProgressSummary, already: Set[str]) -> List[Achievement]:
    return [a for a in ACHIEVEMENTS if a.id not in already and is_unlocked(a, summary)]


class AchievementTracker:
    """Checks and stores achievements for one user."""

    def __init__(self, user_id: str, now: Callable[[], datetime] = datetime.now):
        self.user_id = user_id
        self.now = now

    async def check(self) -> List[Achievement]:
        """
        Unlocks every achievement the persisted history now satisfies and
        credits the rewards. Run it after the session's writes have landed.
        """
        now = self.now()
        async with AsyncSessionLocal() as session:
            user = await get_user_or_create(session, self.user_id)
            unlocked_rows = await session.execute(
                select(UserAchievement.achievement_id).where(UserAchievement.user_id == self.user_id)
            )
            already = set(unlocked_rows.scalars().all())
            if len(already) == len(ACHIEVEMENTS):
                return []

            attempts = (await session.execute(
                select(AttemptLog).where(AttemptLog.user_id == self.user_id).order_by(AttemptLog.timestamp)
            )).scalars().all()
            sessions = (await session.execute(
                select(SessionLog).where(SessionLog.user_id == self.user_id)
            )).scalars().all()
            streak = (await session.execute(
                select(StreakState.current_streak).where(StreakState.user_id == self.user_id)
            )).scalars().first()

            unlocked = newly_unlocked(summarize(attempts, sessions, streak or 0, now), already)
            if not unlocked:
                return []
            for achievement in unlocked:
                session.add(UserAchievement(user_id=self.user_id, achievement_id=achievement.id,
                                            unlocked_at=now, xp_reward=achievement.xp_reward))
            user.total_xp = (user.total_xp or 0) + sum(a.xp_reward for a in unlocked)
            await session.commit()

        logger.info(f"User '{self.user_id}' unlocked {', '.join(a.id for a in unlocked)}.")
        return unlocked


async def get_user_achievements(session: AsyncSession, user_id: str) -> List[dict]:
    """Every achievement with its unlock time for ``user_id`` (None while locked)."""
    if await session.get(User, user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    result = await session.execute(select(UserAchievement).where(UserAchievement.user_id == user_id))
    unlocked_at = {row.achievement_id: row.unlocked_at for row in result.scalars().all()}
    return [
        {
            **achievement.model_dump(mode="json"),
            "unlocked_at": unlocked_at[achievement.id].isoformat() if achievement.id in unlocked_at else None,
        }
        for achievement in ACHIEVEMENTS
    ]


async def check_achievements(user_id: str) -> List[dict]:
    """
    Runs the tracker for ``user_id`` and returns the newly unlocked
    achievements as plain dicts. A failed check is logged and unlocks nothing;
    the next check picks the same achievements up again.
    """
    try:
        unlocked = await AchievementTracker(user_id).check()
    except Exception:
        logger.exception(f"Achievement check for user '{user_id}' failed.")
        return []
    return [a.model_dump(mode="json") for a in unlocked]
