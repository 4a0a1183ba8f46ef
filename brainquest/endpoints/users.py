# brainquest/endpoints/users.py
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from brainquest.services.achievement_service import get_user_achievements
from brainquest.state_manager import (
    get_attempt_history,
    get_session_history,
    get_user_or_create,
    get_user_profile_with_session,
    get_user_xp,
)
from brainquest.utils.logger import logger
from brainquest.utils.db import get_db

router = APIRouter(
    tags=["Users"]
)

class UserCreate(BaseModel):
    user_id: str

@router.post("/", response_model=dict)
async def create_user(user_create: UserCreate, db: AsyncSession = Depends(get_db)):
    """
    Creates a new user with an empty profile. If the user already exists,
    it returns the existing user's profile.
    """
    logger.debug(f"Attempting to create or fetch user: {user_create.user_id}")
    user = await get_user_or_create(db, user_create.user_id)

    # We need to flush to get the user's default values before reading the profile
    await db.flush()
    await db.refresh(user)

    # Now, commit the transaction to permanently save the new user
    await db.commit()

    return await get_user_profile_with_session(db, user_create.user_id)

@router.get("/{user_id}/profile", response_model=dict)
async def get_user_profile_endpoint(user_id: str, db: AsyncSession = Depends(get_db)):
    """
    Retrieves a consolidated user profile: XP state, daily streak and the
    number of completed sessions.
    """
    logger.debug(f"Fetching profile for user_id: {user_id}")
    return await get_user_profile_with_session(db, user_id)

@router.get("/{user_id}/xp", response_model=dict)
async def get_user_xp_endpoint(user_id: str, db: AsyncSession = Depends(get_db)):
    return await get_user_xp(db, user_id)

@router.get("/{user_id}/sessions", response_model=List[dict])
async def get_user_sessions(user_id: str, limit: int = Query(20, gt=0, le=100),
                            db: AsyncSession = Depends(get_db)):
    return await get_session_history(db, user_id, limit=limit)

@router.get("/{user_id}/attempts", response_model=List[dict])
async def get_user_attempts(user_id: str, session_id: Optional[str] = None,
                            limit: int = Query(50, gt=0, le=500),
                            db: AsyncSession = Depends(get_db)):
    """Recent answered questions, optionally narrowed to one session or encounter."""
    return await get_attempt_history(db, user_id, session_id=session_id, limit=limit)

@router.get("/{user_id}/achievements", response_model=List[dict])
async def get_user_achievements_endpoint(user_id: str, db: AsyncSession = Depends(get_db)):
    """The full achievement list, with ``unlocked_at`` set on the ones this user has earned."""
    return await get_user_achievements(db, user_id)
