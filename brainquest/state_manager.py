# brainquest/state_manager.py
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from brainquest.models.user import User, AttemptLog, SessionLog
from brainquest.models.progress import AttemptRecord, LevelResult, SessionRecord
from brainquest.services.collaborators import SessionCounter
from brainquest.services.leveling import level_for, xp_state
from brainquest.services.streak_service import StreakRecorder
from brainquest.utils.db import AsyncSessionLocal
from brainquest.utils.logger import logger
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession



async def get_user_or_create(session: AsyncSession, user_id: str) -> User:
    """
    Fetches a user from the DB or creates a new one and adds it to the session.
    The calling function is responsible for committing the transaction.
    """
    result = await session.execute(select(User).filter_by(id=user_id))
    user = result.scalars().first()
    if not user:
        logger.info(f"Adding new user '{user_id}' to session.")
        user = User(id=user_id, total_xp=0, completed_sessions=0)
        session.add(user)
    return user


class UserCollaborators:
    """
    Progress store, XP accrual and session counter persistence for one user.
    Each write opens its own session so that it can run as a background task
    after the HTTP request that triggered it has moved on.
    """

    def __init__(self, user_id: str):
        self.user_id = user_id
        self.activity = StreakRecorder(user_id)

    async def ensure_user(self) -> None:
        async with AsyncSessionLocal() as session:
            await get_user_or_create(session, self.user_id)
            await session.commit()

    async def add_attempt(self, attempt: AttemptRecord) -> None:
        async with AsyncSessionLocal() as session:
            await get_user_or_create(session, self.user_id)
            data = attempt.model_dump(mode="json")
            data.update(timestamp=attempt.timestamp)
            session.add(AttemptLog(user_id=self.user_id, **data))
            await session.commit()

    async def put_session(self, record: SessionRecord) -> None:
        data = record.model_dump(mode="json")
        data.update(start_time=record.start_time, end_time=record.end_time)
        async with AsyncSessionLocal() as session:
            await get_user_or_create(session, self.user_id)
            # Idempotent on the record id
            await session.merge(SessionLog(**data))
            await session.commit()

    async def add_xp(self, amount: int) -> LevelResult:
        async with AsyncSessionLocal() as session:
            user = await get_user_or_create(session, self.user_id)
            old_total = user.total_xp or 0
            user.total_xp = old_total + amount
            await session.commit()
        old_level, new_level = level_for(old_total), level_for(old_total + amount)
        if new_level > old_level:
            logger.info(f"User '{self.user_id}' reached level {new_level}.")
        return LevelResult(leveled=new_level > old_level, old_level=old_level,
                           new_level=new_level, total_xp=old_total + amount)

    async def load_counter(self) -> SessionCounter:
        async with AsyncSessionLocal() as session:
            user = await get_user_or_create(session, self.user_id)
            value = user.completed_sessions or 0
            await session.commit()
        return SessionCounter(value=value, on_change=self.save_counter)

    async def save_counter(self, value: int) -> None:
        async with AsyncSessionLocal() as session:
            user = await get_user_or_create(session, self.user_id)
            user.completed_sessions = max(user.completed_sessions or 0, value)
            await session.commit()


async def get_user_profile_with_session(session: AsyncSession, user_id: str) -> dict:
    """Retrieves a consolidated user profile using provided session."""
    result = await session.execute(
        select(User)
        .where(User.id == user_id)
        .options(selectinload(User.streak))
    )
    user = result.scalars().first()

    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    streak = user.streak
    return {
        "user_id": user.id,
        "created_at": user.created_at.isoformat(),
        "preferences": user.preferences,
        "completed_sessions": user.completed_sessions,
        "xp": xp_state(user.total_xp).model_dump(),
        "streak": {
            "current_streak": streak.current_streak if streak else 0,
            "longest_streak": streak.longest_streak if streak else 0,
            "last_active_date": streak.last_active_date.isoformat() if streak and streak.last_active_date else None,
        },
    }


async def get_user_xp(session: AsyncSession, user_id: str) -> dict:
    result = await session.execute(select(User.total_xp).where(User.id == user_id))
    total_xp = result.scalars().first()
    if total_xp is None:
        raise HTTPException(status_code=404, detail="User not found")
    return xp_state(total_xp).model_dump()


async def get_session_history(session: AsyncSession, user_id: str, limit: int = 20) -> list:
    """Most recent completed sessions first."""
    result = await session.execute(
        select(SessionLog)
        .where(SessionLog.user_id == user_id)
        .order_by(SessionLog.end_time.desc())
        .limit(limit)
    )
    return [
        {
            "id": log.id,
            "type": log.type,
            "subject": log.subject,
            "topics": log.topics,
            "start_time": log.start_time.isoformat() if log.start_time else None,
            "end_time": log.end_time.isoformat() if log.end_time else None,
            "total_questions": log.total_questions,
            "correct_answers": log.correct_answers,
            "accuracy": log.accuracy,
            "xp_earned": log.xp_earned,
            "difficulty": log.difficulty,
            "outcome": log.outcome,
        }
        for log in result.scalars().all()
    ]


async def get_attempt_history(session: AsyncSession, user_id: str, session_id: str | None = None,
                              limit: int = 50) -> list:
    query = select(AttemptLog).where(AttemptLog.user_id == user_id)
    if session_id is not None:
        query = query.where(AttemptLog.session_id == session_id)
    result = await session.execute(query.order_by(AttemptLog.timestamp.desc()).limit(limit))
    return [
        {
            "id": log.id,
            "session_id": log.session_id,
            "question_id": log.question_id,
            "subject": log.subject,
            "topic": log.topic,
            "difficulty": log.difficulty,
            "user_answer": log.user_answer,
            "is_correct": log.is_correct,
            "time_taken": log.time_taken,
            "xp_earned": log.xp_earned,
            "timestamp": log.timestamp.isoformat(),
        }
        for log in result.scalars().all()
    ]
