# Endpoints for listing generator topics and producing one-off generated questions

# brainquest/endpoints/questions.py
from fastapi import APIRouter, HTTPException, Query
from typing import List, Optional

from brainquest.models.enums import Subject
from brainquest.services.question_service import question_service # Import the service instance
from brainquest.services.quiz_session import question_view
from brainquest.utils.exceptions import ContentUnavailableError

router = APIRouter()

@router.get("/topics", response_model=List[str])
async def get_topics(subject: Optional[Subject] = None):
    topics = question_service.available_topics(subject)
    if not topics:
        # Service handles logging, endpoint just reports outcome
        raise HTTPException(status_code=404, detail="No topics available.")
    return [topic.value for topic in topics]

@router.get("/generate", response_model=dict)
async def generate_question(
    topic: str,
    difficulty: int = Query(2, ge=1, le=5),
    seed: Optional[int] = None,
    reveal: bool = False,
):
    """
    Generates a single question. Passing the same ``seed`` and ``difficulty``
    reproduces the same content and option order.
    """
    try:
        question = question_service.generate_question(topic, difficulty, seed=seed)
    except ContentUnavailableError as e:
        raise HTTPException(status_code=404, detail=str(e))

    view = question_view(question, reveal=reveal)
    if reveal:
        view["correct_answer"] = question.correct_answer.model_dump()
    return view
