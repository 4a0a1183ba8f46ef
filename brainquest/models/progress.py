# Data models for answered questions, finished sessions and derived XP state
# brainquest/models/progress.py
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional, Union

from brainquest.models.enums import SessionType, Subject, Topic

class AttemptRecord(BaseModel):
    """One answered question. Never mutated after creation."""
    model_config = ConfigDict(frozen=True)

    id: str
    question_id: str
    subject: Subject
    topic: Topic
    difficulty: int
    is_correct: bool
    user_answer: str # Label of the chosen option
    time_taken: float # Seconds
    xp_earned: int
    timestamp: datetime
    session_id: str

class SessionRecord(BaseModel):
    """Summary of one completed quiz or boss encounter."""
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    type: SessionType
    subject: Union[Subject, str] # A Subject, or "mixed" when attempts span several
    topics: List[Topic]
    start_time: datetime
    end_time: datetime
    total_questions: int
    correct_answers: int
    accuracy: float
    xp_earned: int
    difficulty: int
    outcome: Optional[str] = None # "victory" or "defeat" for boss encounters

class XPState(BaseModel):
    total_xp: int
    current_level: int
    xp_in_current_level: int
    xp_for_next_level: int
    title: str

class LevelResult(BaseModel):
    """Outcome of accruing XP into a profile."""
    leveled: bool = False
    old_level: int = 1
    new_level: int = 1
    total_xp: int = Field(default=0, ge=0)
