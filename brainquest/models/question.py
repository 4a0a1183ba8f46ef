# Data models for generated questions and the static templates they are built from
# brainquest/models/question.py
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Annotated, List, Literal, Optional, Union

from brainquest.models.enums import AnswerFormat, Subject, Topic

Difficulty = Annotated[int, Field(ge=1, le=5)]


class SingleAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["single"] = "single"
    id: str


class MultiAnswer(BaseModel):
    """A multi-part answer; single-select formats resolve through the first id."""
    model_config = ConfigDict(frozen=True)
    kind: Literal["multi"] = "multi"
    ids: List[str] = Field(min_length=1)


CorrectAnswer = Annotated[Union[SingleAnswer, MultiAnswer], Field(discriminator="kind")]


def primary_answer_key(answer: SingleAnswer | MultiAnswer) -> str:
    """The identifier (or label) a single-select question is checked against."""
    if isinstance(answer, SingleAnswer):
        return answer.id
    return answer.ids[0]


class QuestionOption(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str
    label: str
    illustration: Optional[str] = None


class ContentTemplate(BaseModel):
    """One fill-in-the-blank entry of a static template bank."""
    model_config = ConfigDict(frozen=True)
    pattern: str
    correct: str
    distractors: List[str] = Field(min_length=1)
    rule: str
    level: Difficulty


class Question(BaseModel):
    id: str
    subject: Subject
    topic: Topic
    difficulty: Difficulty
    answer_format: AnswerFormat = AnswerFormat.MULTIPLE_CHOICE
    prompt: str
    passage: Optional[str] = None
    illustration: Optional[str] = None
    options: Optional[List[QuestionOption]] = None
    correct_answer: CorrectAnswer
    explanation: str
    time_limit: Optional[int] = None  # Seconds; None means untimed
    xp_reward: int = 10
    is_generated: bool = False
    generator_id: Optional[str] = None
    generator_seed: Optional[int] = None
    tags: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def normalize_correct_answer(self):
        """
        Multiple-choice questions must carry options and a correct answer that
        names exactly one of them. A label-shaped answer is rewritten to the
        matching option id so that resolution downstream is id-only.
        """
        if self.answer_format != AnswerFormat.MULTIPLE_CHOICE:
            return self
        if not self.options:
            raise ValueError("A multiple-choice question needs at least one option")

        ids = [option.id for option in self.options]
        if len(set(ids)) != len(ids):
            raise ValueError("Option ids must be unique within a question")

        key = primary_answer_key(self.correct_answer)
        if key in ids:
            return self

        label_matches = [option for option in self.options if option.label == key]
        if len(label_matches) > 1:
            raise ValueError(f"Correct answer label '{key}' is shared by several options")
        if not label_matches:
            raise ValueError(f"Correct answer '{key}' does not match any option")

        resolved_id = label_matches[0].id
        if isinstance(self.correct_answer, SingleAnswer):
            self.correct_answer = SingleAnswer(id=resolved_id)
        else:
            self.correct_answer = MultiAnswer(ids=[resolved_id, *self.correct_answer.ids[1:]])
        return self
