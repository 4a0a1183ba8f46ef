# brainquest/endpoints/quiz.py
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from typing import List, Optional

from brainquest.models.enums import SessionType, Subject
from brainquest.services import session_registry
from brainquest.services.achievement_service import check_achievements
from brainquest.services.question_service import question_service
from brainquest.services.quiz_session import QuizSession
from brainquest.state_manager import UserCollaborators
from brainquest.utils.config import settings
from brainquest.utils.exceptions import ContentUnavailableError, InvalidTransitionError
from brainquest.utils.logger import logger

router = APIRouter()

class QuizCreate(BaseModel):
    user_id: str
    topics: Optional[List[str]] = None # Defaults to every topic of ``subject``
    subject: Optional[Subject] = None
    count: int = Field(default_factory=lambda: settings.default_question_count, gt=0, le=50)
    difficulty: int = Field(default_factory=lambda: settings.default_difficulty, ge=1, le=5)
    seed: Optional[int] = None

class SelectRequest(BaseModel):
    option_id: str


async def start_quiz_session(user_id: str, questions, **kwargs) -> QuizSession:
    """Builds a session wired to the user's persisted collaborators and registers it."""
    collaborators = UserCollaborators(user_id)
    # Create the user row up front so background writes never race to insert it
    await collaborators.ensure_user()
    counter = await collaborators.load_counter()
    try:
        session = QuizSession(
            questions,
            user_id=user_id,
            store=collaborators,
            profile=collaborators,
            activity=collaborators.activity,
            counter=counter,
            **kwargs,
        )
    except ContentUnavailableError as e:
        raise HTTPException(status_code=404, detail=str(e))
    session_registry.register(session_registry.quiz_sessions, session.session_id, session)
    logger.info(f"Started {session.session_type.value} quiz {session.session_id} for user '{user_id}' "
                f"with {len(session.questions)} questions.")
    return session


def get_live_session(session_id: str) -> QuizSession:
    session = session_registry.lookup(session_registry.quiz_sessions, session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Quiz session not found")
    return session


async def settle(session: QuizSession) -> dict:
    """
    Waits for the session's writes so reads after the response see them, then
    reports any achievements they unlocked alongside the usual snapshot.
    """
    await session.drain()
    data = session.snapshot()
    data["achievements_unlocked"] = await check_achievements(session.user_id)
    return data


@router.post("/", response_model=dict)
async def create_quiz(request: QuizCreate):
    topics = request.topics
    if not topics:
        topics = [t.value for t in question_service.available_topics(request.subject)]
    try:
        questions = question_service.generate_quiz_questions(
            topics, request.count, request.difficulty, seed=request.seed
        )
    except ContentUnavailableError as e:
        raise HTTPException(status_code=404, detail=str(e))

    session = await start_quiz_session(
        request.user_id, questions,
        session_type=SessionType.PRACTICE,
        difficulty=request.difficulty,
    )
    return session.snapshot()

@router.get("/{session_id}", response_model=dict)
async def get_quiz(session_id: str):
    return get_live_session(session_id).snapshot()

@router.post("/{session_id}/select", response_model=dict)
async def select_option(session_id: str, request: SelectRequest):
    """
    Records the answer for the current question. A repeat selection on an
    already answered question is ignored and returns the unchanged state.
    """
    session = get_live_session(session_id)
    try:
        await session.select_option(request.option_id)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return await settle(session)

@router.post("/{session_id}/continue", response_model=dict)
async def continue_quiz(session_id: str):
    session = get_live_session(session_id)
    try:
        session.continue_()
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return await settle(session)

@router.post("/{session_id}/advance", response_model=dict)
async def advance_quiz(session_id: str):
    """Acknowledges the level-up screen (or the feedback) and moves on."""
    session = get_live_session(session_id)
    try:
        session.advance()
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return await settle(session)

@router.post("/{session_id}/retry", response_model=dict)
async def retry_quiz(session_id: str):
    session = get_live_session(session_id)
    try:
        session.retry()
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    # The session id changes on retry
    session_registry.rekey(session_registry.quiz_sessions, session_id, session, session.session_id)
    return session.snapshot()

@router.delete("/{session_id}", response_model=dict)
async def abandon_quiz(session_id: str):
    session = get_live_session(session_id)
    session.abandon()
    session_registry.discard(session_registry.quiz_sessions, session_id)
    return {"message": "Quiz session closed", "session_id": session_id}
