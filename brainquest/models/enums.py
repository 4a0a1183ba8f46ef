# brainquest/models/enums.py
from enum import Enum

class Subject(str, Enum):
    """Top-level subject areas a question can belong to."""
    MATHS = "maths"
    ENGLISH = "english"
    VERBAL_REASONING = "verbal_reasoning"

class Topic(str, Enum):
    """Topics with a registered question generator."""
    ARITHMETIC = "arithmetic"
    GRAMMAR = "grammar"
    VOCABULARY = "vocabulary"
    SPELLING = "spelling"
    SYNONYMS = "synonyms"
    ANTONYMS = "antonyms"

TOPIC_SUBJECTS = {
    Topic.ARITHMETIC: Subject.MATHS,
    Topic.GRAMMAR: Subject.ENGLISH,
    Topic.VOCABULARY: Subject.ENGLISH,
    Topic.SPELLING: Subject.ENGLISH,
    Topic.SYNONYMS: Subject.VERBAL_REASONING,
    Topic.ANTONYMS: Subject.VERBAL_REASONING,
}

class AnswerFormat(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    TEXT_INPUT = "text_input"
    DRAG_ORDER = "drag_order"
    FILL_BLANK = "fill_blank"

class SessionType(str, Enum):
    PRACTICE = "practice"
    DAILY_CHALLENGE = "daily_challenge"
    BOSS_BATTLE = "boss_battle"

class QuizPhase(str, Enum):
    """Phases of a practice quiz session."""
    PRESENTING = "presenting"
    FEEDBACK = "feedback"
    LEVEL_UP = "level_up"
    FINISHED = "finished"
    ABANDONED = "abandoned"

class BattlePhase(str, Enum):
    """Phases of a boss encounter."""
    INTRO = "intro"
    BATTLE = "battle"
    VICTORY = "victory"
    DEFEAT = "defeat"
    ABANDONED = "abandoned"

MIXED_SUBJECT = "mixed"

class AchievementCategory(str, Enum):
    VOLUME = "volume"
    MASTERY = "mastery"
    STREAK = "streak"
    SPEED = "speed"
    EXPLORATION = "exploration"
    SPECIAL = "special"

class AchievementCondition(str, Enum):
    """What an achievement's threshold is compared against."""
    TOTAL_ATTEMPTS = "total_attempts"
    CORRECT_RUN = "correct_run"
    PERFECT_SESSION = "perfect_session"
    DAY_STREAK = "day_streak"
    FAST_ANSWER = "fast_answer"
    SPEED_BATCH = "speed_batch"
    SUBJECTS_TRIED = "subjects_tried"
    SUBJECT_ATTEMPTS = "subject_attempts"
    PRACTICE_FROM_HOUR = "practice_from_hour"
    PRACTICE_BEFORE_HOUR = "practice_before_hour"
    DAILY_CHALLENGES = "daily_challenges"
    BOSSES_DEFEATED = "bosses_defeated"
