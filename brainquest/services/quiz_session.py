# brainquest/services/quiz_session.py
"""
Practice / daily-challenge quiz session.

Phases run ``presenting -> feedback -> (level_up) -> presenting | finished``.
The session owns its attempt list and running XP and streak counters; records
are handed to the progress store as they are produced, and XP is accrued into
the profile as each answer is scored.
"""
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from brainquest.models.enums import MIXED_SUBJECT, QuizPhase, SessionType
from brainquest.models.progress import AttemptRecord, LevelResult, SessionRecord
from brainquest.models.question import Question, primary_answer_key
from brainquest.services.collaborators import (
    ActivityRecorder,
    BackgroundTasks,
    NullActivityRecorder,
    ProgressStore,
    SessionCounter,
    XPAccrual,
)
from brainquest.services.scoring import calculate_xp
from brainquest.services.timer import Clock, QuestionTimer
from brainquest.utils.exceptions import ContentUnavailableError, InvalidTransitionError
from brainquest.utils.logger import logger
from brainquest.utils.rng import unique_id


def resolve_correct_option(question: Question) -> Optional[str]:
    """
    Id of the option that answers ``question``: an id match first, then a
    unique label match. Returns None when nothing (or more than one option)
    matches, which marks the question as malformed.
    """
    options = question.options or []
    key = primary_answer_key(question.correct_answer)
    if any(option.id == key for option in options):
        return key
    matches = [option.id for option in options if option.label == key]
    if len(matches) == 1:
        return matches[0]
    return None


def usable_questions(questions: List[Question], label: str) -> List[Question]:
    """Drops questions whose correct answer cannot be resolved to an option."""
    usable = []
    for question in questions:
        if resolve_correct_option(question) is None:
            logger.warning(f"[{label}] Dropping question {question.id}: correct answer does not resolve to one option.")
            continue
        usable.append(question)
    return usable


def question_view(question: Question, reveal: bool = False) -> Dict[str, Any]:
    """Client-facing view of a question; the answer and explanation only once revealed."""
    view = question.model_dump(mode="json", exclude={"correct_answer", "explanation"})
    if reveal:
        view["explanation"] = question.explanation
    return view


def session_subject(questions: List[Question]):
    subjects = {q.subject for q in questions}
    if len(subjects) == 1:
        return subjects.pop()
    return MIXED_SUBJECT


def session_topics(questions: List[Question]):
    topics = []
    for q in questions:
        if q.topic not in topics:
            topics.append(q.topic)
    return topics


class QuizSession:
    def __init__(
        self,
        questions: List[Question],
        user_id: str,
        store: ProgressStore,
        profile: XPAccrual,
        activity: Optional[ActivityRecorder] = None,
        counter: Optional[SessionCounter] = None,
        session_type: SessionType = SessionType.PRACTICE,
        difficulty: Optional[int] = None,
        completion_bonus: int = 0,
        clock: Clock = time.monotonic,
    ):
        self.questions = usable_questions(questions or [], label="quiz")
        if not self.questions:
            raise ContentUnavailableError("No usable questions for this quiz")

        self.user_id = user_id
        self.store = store
        self.profile = profile
        self.activity = activity or NullActivityRecorder()
        self.counter = counter or SessionCounter()
        self.session_type = SessionType(session_type)
        self.difficulty = difficulty or self.questions[0].difficulty
        # Extra XP granted once when the session finishes (daily challenges)
        self.completion_bonus = completion_bonus
        self.clock = clock
        self.timer = QuestionTimer(None, clock=clock)
        self.tasks = BackgroundTasks(label="quiz")
        self._epoch = 0
        self._reset_state()

    # --- State ---

    def _reset_state(self):
        self.session_id = unique_id()
        self.tasks.label = f"quiz {self.session_id}"
        self.index = 0
        self.streak = 0
        self.xp_earned = 0
        self.attempts: List[AttemptRecord] = []
        self.pending_level_up: Optional[LevelResult] = None
        self.record: Optional[SessionRecord] = None
        # Clock reading when the session finished or was abandoned
        self.closed_at: Optional[float] = None
        self.start_time = datetime.now(timezone.utc)
        self._present()

    def _present(self):
        self.phase = QuizPhase.PRESENTING
        self.selected_option_id: Optional[str] = None
        self.correct_option_id: Optional[str] = None
        self.last_correct: Optional[bool] = None
        self.last_xp = 0
        if self.current_question.time_limit:
            self.timer.start(limit=self.current_question.time_limit)
        else:
            self.timer.release()

    @property
    def current_question(self) -> Question:
        return self.questions[self.index]

    @property
    def correct_count(self) -> int:
        return sum(1 for a in self.attempts if a.is_correct)

    def _require(self, event: str, *phases: QuizPhase):
        if self.phase not in phases:
            raise InvalidTransitionError(event, self.phase.value)

    # --- Events ---

    async def select_option(self, option_id: str) -> None:
        if self.phase in (QuizPhase.FEEDBACK, QuizPhase.LEVEL_UP):
            logger.debug(f"[{self.session_id}] Ignoring repeat selection '{option_id}'.")
            return
        self._require("select_option", QuizPhase.PRESENTING)

        question = self.current_question
        chosen = next((o for o in question.options or [] if o.id == option_id), None)
        if chosen is None:
            raise ValueError(f"Option '{option_id}' is not part of question {question.id}")

        time_taken = self.timer.stop()
        correct_id = resolve_correct_option(question)
        is_correct = option_id == correct_id
        xp = calculate_xp(question.difficulty, is_correct, time_taken, question.time_limit, self.streak)
        self.streak = self.streak + 1 if is_correct else 0
        self.xp_earned += xp

        self.phase = QuizPhase.FEEDBACK
        self.selected_option_id = option_id
        self.correct_option_id = correct_id
        self.last_correct = is_correct
        self.last_xp = xp

        attempt = AttemptRecord(
            id=unique_id(),
            question_id=question.id,
            subject=question.subject,
            topic=question.topic,
            difficulty=question.difficulty,
            is_correct=is_correct,
            user_answer=chosen.label,
            time_taken=round(time_taken, 3),
            xp_earned=xp,
            timestamp=datetime.now(timezone.utc),
            session_id=self.session_id,
        )
        self.attempts.append(attempt)
        self.tasks.spawn(self.store.add_attempt(attempt), "add_attempt")
        self.tasks.spawn(self.activity.record_activity(), "record_activity")
        logger.debug(f"[{self.session_id}] Q{self.index + 1} {'correct' if is_correct else 'incorrect'}, +{xp} XP")

        epoch = self._epoch
        try:
            result = await self.profile.add_xp(xp)
        except Exception:
            logger.exception(f"[{self.session_id}] XP accrual failed; continuing without level-up.")
            return
        if epoch == self._epoch and result.leveled:
            self.pending_level_up = result

    def continue_(self) -> None:
        self._require("continue", QuizPhase.FEEDBACK)
        if self.pending_level_up is not None:
            self.phase = QuizPhase.LEVEL_UP
            logger.debug(f"[{self.session_id}] Level up to {self.pending_level_up.new_level}")
            return
        self.advance()

    def advance(self) -> None:
        self._require("advance", QuizPhase.FEEDBACK, QuizPhase.LEVEL_UP)
        self.pending_level_up = None
        if self.index + 1 >= len(self.questions):
            self._finish()
            return
        self.index += 1
        self._present()

    def retry(self) -> None:
        """
        Starts the same question list over under a new session id. Writes for
        the previous playthrough are already handed off and still complete.
        """
        self._require("retry", QuizPhase.PRESENTING, QuizPhase.FEEDBACK, QuizPhase.LEVEL_UP,
                      QuizPhase.FINISHED, QuizPhase.ABANDONED)
        self.timer.release()
        self._epoch += 1
        self._reset_state()
        logger.debug(f"[{self.session_id}] Quiz restarted.")

    def abandon(self) -> None:
        self.timer.release()
        self._epoch += 1
        if self.phase != QuizPhase.FINISHED:
            self.phase = QuizPhase.ABANDONED
            self.closed_at = self.clock()
        logger.debug(f"[{self.session_id}] Quiz abandoned.")

    async def drain(self) -> None:
        await self.tasks.drain()

    def _finish(self):
        self.phase = QuizPhase.FINISHED
        self.closed_at = self.clock()
        self.timer.release()
        correct = self.correct_count
        total = len(self.questions)

        if self.completion_bonus:
            self.xp_earned += self.completion_bonus
            self.tasks.spawn(self.profile.add_xp(self.completion_bonus), "completion_bonus")

        self.record = SessionRecord(
            id=self.session_id,
            user_id=self.user_id,
            type=self.session_type,
            subject=session_subject(self.questions),
            topics=session_topics(self.questions),
            start_time=self.start_time,
            end_time=datetime.now(timezone.utc),
            total_questions=total,
            correct_answers=correct,
            accuracy=correct / total,
            xp_earned=self.xp_earned,
            difficulty=self.difficulty,
        )
        self.tasks.spawn(self.store.put_session(self.record), "put_session")

        self.counter.increment()
        if self.counter.on_change is not None:
            self.tasks.spawn(self.counter.on_change(self.counter.value), "save_session_count")
        logger.info(f"[{self.session_id}] Quiz finished: {correct}/{total}, {self.xp_earned} XP")

    # --- Views ---

    def snapshot(self) -> Dict[str, Any]:
        answered = self.phase in (QuizPhase.FEEDBACK, QuizPhase.LEVEL_UP)
        data: Dict[str, Any] = {
            "session_id": self.session_id,
            "type": self.session_type.value,
            "phase": self.phase.value,
            "index": self.index,
            "total_questions": len(self.questions),
            "streak": self.streak,
            "xp_earned": self.xp_earned,
            "correct_answers": self.correct_count,
            "question": None,
            "remaining_seconds": None,
            "result": None,
            "level_up": None,
            "summary": None,
            "feedback_due": False,
        }
        if self.phase in (QuizPhase.PRESENTING, QuizPhase.FEEDBACK, QuizPhase.LEVEL_UP):
            data["question"] = question_view(self.current_question, reveal=answered)
        if self.phase == QuizPhase.PRESENTING:
            data["remaining_seconds"] = self.timer.remaining_seconds()
        if answered:
            data["result"] = {
                "selected_option_id": self.selected_option_id,
                "correct_option_id": self.correct_option_id,
                "is_correct": self.last_correct,
                "xp_earned": self.last_xp,
            }
        if self.pending_level_up is not None:
            data["level_up"] = self.pending_level_up.model_dump()
        if self.record is not None:
            data["summary"] = self.record.model_dump(mode="json")
            data["feedback_due"] = self.counter.feedback_due
        return data
