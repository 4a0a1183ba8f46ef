# brainquest/services/boss_battle.py
"""
Timed boss encounter.

Each correct answer damages the boss, each wrong answer damages the player.
The encounter ends in victory when the boss runs out of HP, and in defeat when
the player does or when the questions run out first.
"""
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from brainquest.models.enums import BattlePhase, SessionType
from brainquest.models.progress import AttemptRecord, LevelResult, SessionRecord
from brainquest.models.question import Question
from brainquest.services.boss_catalog import BossConfig
from brainquest.services.collaborators import (
    ActivityRecorder,
    BackgroundTasks,
    NullActivityRecorder,
    ProgressStore,
    XPAccrual,
)
from brainquest.services.question_service import question_service
from brainquest.services.quiz_session import question_view, resolve_correct_option, usable_questions
from brainquest.services.scoring import calculate_xp
from brainquest.services.timer import Clock, QuestionTimer
from brainquest.utils.config import settings
from brainquest.utils.exceptions import ContentUnavailableError, InvalidTransitionError
from brainquest.utils.logger import logger
from brainquest.utils.rng import unique_id

TERMINAL_PHASES = (BattlePhase.VICTORY, BattlePhase.DEFEAT, BattlePhase.ABANDONED)

QuestionSource = Callable[[BossConfig], List[Question]]


def generate_boss_questions(boss: BossConfig) -> List[Question]:
    """Fresh question set for one encounter, timed with the boss time limit."""
    questions = question_service.generate_quiz_questions(boss.topics, boss.question_count, boss.difficulty)
    return [q.model_copy(update={"time_limit": settings.boss_time_limit}) for q in questions]


class BossBattle:
    def __init__(
        self,
        boss: BossConfig,
        user_id: str,
        store: ProgressStore,
        profile: XPAccrual,
        activity: Optional[ActivityRecorder] = None,
        question_source: QuestionSource = generate_boss_questions,
        clock: Clock = time.monotonic,
    ):
        self.boss = boss
        self.user_id = user_id
        self.store = store
        self.profile = profile
        self.activity = activity or NullActivityRecorder()
        self.question_source = question_source
        self.clock = clock
        self.timer = QuestionTimer(settings.boss_time_limit, clock=clock)
        self.tasks = BackgroundTasks(label=f"boss {boss.id}")
        self._epoch = 0
        self._setup()

    def _setup(self):
        questions = usable_questions(self.question_source(self.boss), label=f"boss {self.boss.id}")
        if not questions:
            raise ContentUnavailableError(f"No usable questions for boss '{self.boss.id}'")
        self.questions = questions
        self.encounter_id = unique_id()
        self.phase = BattlePhase.INTRO
        self.index = 0
        self.boss_hp = self.boss.total_hp
        self.player_hp = settings.player_max_hp
        self.xp_earned = 0
        self.attempts: List[AttemptRecord] = []
        self.last_correct: Optional[bool] = None
        self.last_correct_option_id: Optional[str] = None
        self.level_up: Optional[LevelResult] = None
        self.record: Optional[SessionRecord] = None
        self.closed_at: Optional[float] = None
        self.start_time: Optional[datetime] = None

    @property
    def current_question(self) -> Question:
        return self.questions[self.index]

    @property
    def is_over(self) -> bool:
        return self.phase in TERMINAL_PHASES

    # --- Events ---

    def start(self) -> None:
        if self.phase != BattlePhase.INTRO:
            raise InvalidTransitionError("start", self.phase.value)
        self.boss_hp = self.boss.total_hp
        self.player_hp = settings.player_max_hp
        self.start_time = datetime.now(timezone.utc)
        self.phase = BattlePhase.BATTLE
        self.timer.start(settings.boss_time_limit)
        logger.debug(f"[{self.encounter_id}] Battle against {self.boss.id} started.")

    async def answer(self, option_id: str) -> None:
        if self.is_over:
            logger.debug(f"[{self.encounter_id}] Ignoring answer after the battle ended.")
            return
        if self.phase != BattlePhase.BATTLE:
            raise InvalidTransitionError("answer", self.phase.value)

        question = self.current_question
        chosen = next((o for o in question.options or [] if o.id == option_id), None)
        if chosen is None:
            raise ValueError(f"Option '{option_id}' is not part of question {question.id}")

        time_taken = self.timer.stop()
        correct_id = resolve_correct_option(question)
        is_correct = option_id == correct_id
        # Boss answers earn no streak bonus
        xp = calculate_xp(question.difficulty, is_correct, time_taken, settings.boss_time_limit, 0)
        self.xp_earned += xp
        self.last_correct = is_correct
        self.last_correct_option_id = correct_id

        if is_correct:
            self.boss_hp = max(0, self.boss_hp - self.boss.damage_per_correct)
        else:
            self.player_hp = max(0, self.player_hp - settings.player_damage)

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
            session_id=self.encounter_id,
        )
        self.attempts.append(attempt)
        self.tasks.spawn(self.store.add_attempt(attempt), "add_attempt")
        self.tasks.spawn(self.activity.record_activity(), "record_activity")

        # Settle the outcome before yielding to XP accrual
        bonus = 0
        if self.boss_hp == 0:
            self.phase = BattlePhase.VICTORY
            bonus = self.boss.xp_reward
            self.xp_earned += bonus
        elif self.player_hp == 0:
            self.phase = BattlePhase.DEFEAT
        elif self.index + 1 >= len(self.questions):
            # Out of questions with the boss still standing
            self.phase = BattlePhase.DEFEAT
        else:
            self.index += 1
            self.timer.start(settings.boss_time_limit)

        if self.is_over:
            self.closed_at = self.clock()
            self.timer.release()
            self._emit_record()
            logger.info(f"[{self.encounter_id}] Battle against {self.boss.id} ended in {self.phase.value}.")

        epoch = self._epoch
        for amount in (xp, bonus):
            if not amount:
                continue
            try:
                result = await self.profile.add_xp(amount)
            except Exception:
                logger.exception(f"[{self.encounter_id}] XP accrual failed; continuing.")
                continue
            if epoch == self._epoch and result.leveled:
                self.level_up = result

    def reset(self) -> None:
        """
        Back to the intro with a freshly generated question set. The finished
        encounter's record and attempts are already handed off and still land.
        """
        self.timer.release()
        self._epoch += 1
        self._setup()
        logger.debug(f"[{self.encounter_id}] Battle against {self.boss.id} reset.")

    def abandon(self) -> None:
        self.timer.release()
        self._epoch += 1
        if not self.is_over:
            self.phase = BattlePhase.ABANDONED
            self.closed_at = self.clock()

    async def drain(self) -> None:
        await self.tasks.drain()

    def _emit_record(self):
        if self.record is not None:
            return
        answered = len(self.attempts)
        correct = sum(1 for a in self.attempts if a.is_correct)
        self.record = SessionRecord(
            id=self.encounter_id,
            user_id=self.user_id,
            type=SessionType.BOSS_BATTLE,
            subject=self.boss.subject,
            topics=list(self.boss.topics),
            start_time=self.start_time or datetime.now(timezone.utc),
            end_time=datetime.now(timezone.utc),
            total_questions=answered,
            correct_answers=correct,
            accuracy=correct / answered if answered else 0.0,
            xp_earned=self.xp_earned,
            difficulty=self.boss.difficulty,
            outcome=self.phase.value,
        )
        self.tasks.spawn(self.store.put_session(self.record), "put_session")

    # --- Views ---

    def snapshot(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "encounter_id": self.encounter_id,
            "boss": self.boss.model_dump(mode="json"),
            "phase": self.phase.value,
            "index": self.index,
            "total_questions": len(self.questions),
            "boss_hp": self.boss_hp,
            "player_hp": self.player_hp,
            "player_max_hp": settings.player_max_hp,
            "xp_earned": self.xp_earned,
            "question": None,
            "remaining_seconds": None,
            "last_answer": None,
            "level_up": self.level_up.model_dump() if self.level_up else None,
            "summary": self.record.model_dump(mode="json") if self.record else None,
        }
        if self.phase == BattlePhase.BATTLE:
            data["question"] = question_view(self.current_question)
            data["remaining_seconds"] = self.timer.remaining_seconds()
        if self.last_correct is not None:
            data["last_answer"] = {
                "is_correct": self.last_correct,
                "correct_option_id": self.last_correct_option_id,
            }
        return data
