# brainquest/endpoints/challenges.py
from datetime import date
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import List, Optional

from brainquest.endpoints.quiz import start_quiz_session
from brainquest.models.enums import SessionType
from brainquest.services.daily_challenge import DailyChallenge, get_daily_challenge, get_daily_challenges
from brainquest.services.question_service import question_service
from brainquest.utils.exceptions import ContentUnavailableError

router = APIRouter()

class ChallengeStart(BaseModel):
    user_id: str

@router.get("/daily", response_model=List[DailyChallenge])
async def list_daily_challenges(day: Optional[date] = None):
    """Today's challenges, or those of ``day``. Every user sees the same set."""
    return get_daily_challenges(day)

@router.post("/daily/{challenge_id}/quiz", response_model=dict)
async def start_daily_challenge(challenge_id: str, request: ChallengeStart):
    try:
        challenge = get_daily_challenge(challenge_id)
        questions = question_service.generate_quiz_questions(
            [challenge.topic], challenge.question_count, challenge.difficulty, seed=challenge.seed
        )
    except ContentUnavailableError as e:
        raise HTTPException(status_code=404, detail=str(e))

    session = await start_quiz_session(
        request.user_id, questions,
        session_type=SessionType.DAILY_CHALLENGE,
        difficulty=challenge.difficulty,
        completion_bonus=challenge.xp_bonus,
    )
    snapshot = session.snapshot()
    snapshot["challenge"] = challenge.model_dump(mode="json")
    return snapshot
