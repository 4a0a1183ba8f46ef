# brainquest/services/boss_catalog.py
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from brainquest.models.enums import Subject, Topic
from brainquest.models.question import Difficulty
from brainquest.utils.exceptions import ContentUnavailableError


class BossConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    emoji: str
    description: str
    subject: Subject
    topics: List[Topic] = Field(min_length=1)
    difficulty: Difficulty
    question_count: int = Field(gt=0)
    total_hp: int = Field(gt=0)
    damage_per_correct: int = Field(gt=0)
    xp_reward: int = Field(ge=0)


BOSSES: List[BossConfig] = [
    # Maths
    BossConfig(
        id="number_nibbler",
        name="The Number Nibbler",
        emoji="🐛",
        description="A pesky bug that feeds on wrong answers! Quick arithmetic will squash it.",
        subject=Subject.MATHS,
        topics=[Topic.ARITHMETIC],
        difficulty=2,
        question_count=8,
        total_hp=100,
        damage_per_correct=15,
        xp_reward=150,
    ),
    BossConfig(
        id="times_table_titan",
        name="The Times Table Titan",
        emoji="🗿",
        description="A towering stone creature built from numbers. Only fast, accurate sums will topple it.",
        subject=Subject.MATHS,
        topics=[Topic.ARITHMETIC],
        difficulty=4,
        question_count=12,
        total_hp=250,
        damage_per_correct=25,
        xp_reward=500,
    ),
    # Verbal reasoning
    BossConfig(
        id="riddle_raven",
        name="The Riddle Raven",
        emoji="🐦",
        description="This clever bird speaks in riddles! Know your words to silence it.",
        subject=Subject.VERBAL_REASONING,
        topics=[Topic.SYNONYMS, Topic.ANTONYMS],
        difficulty=2,
        question_count=8,
        total_hp=100,
        damage_per_correct=15,
        xp_reward=150,
    ),
    BossConfig(
        id="word_warrior",
        name="The Word Warrior",
        emoji="⚔️",
        description="A mighty warrior armed with words! Use your wisdom to prevail.",
        subject=Subject.VERBAL_REASONING,
        topics=[Topic.SYNONYMS, Topic.ANTONYMS],
        difficulty=4,
        question_count=12,
        total_hp=200,
        damage_per_correct=20,
        xp_reward=400,
    ),
    # English
    BossConfig(
        id="grammar_guardian",
        name="The Grammar Guardian",
        emoji="🛡️",
        description="This mighty guardian protects the grammar gates! Set the rules right to pass.",
        subject=Subject.ENGLISH,
        topics=[Topic.GRAMMAR, Topic.SPELLING],
        difficulty=2,
        question_count=8,
        total_hp=100,
        damage_per_correct=15,
        xp_reward=150,
    ),
    BossConfig(
        id="vocab_victor",
        name="The Vocab Victor",
        emoji="🏅",
        description="A champion of confusing words! Master your vocabulary to triumph.",
        subject=Subject.ENGLISH,
        topics=[Topic.VOCABULARY, Topic.SPELLING, Topic.GRAMMAR],
        difficulty=3,
        question_count=10,
        total_hp=150,
        damage_per_correct=18,
        xp_reward=250,
    ),
]

BOSSES_BY_ID = {boss.id: boss for boss in BOSSES}


def get_all_bosses() -> List[BossConfig]:
    return BOSSES


def get_bosses_for_subject(subject: Subject) -> List[BossConfig]:
    return [boss for boss in BOSSES if boss.subject == subject]


def find_boss(boss_id: str) -> Optional[BossConfig]:
    return BOSSES_BY_ID.get(boss_id)


def get_boss_by_id(boss_id: str) -> BossConfig:
    """Like ``find_boss`` but an unknown id is a content error."""
    boss = find_boss(boss_id)
    if boss is None:
        raise ContentUnavailableError(f"Unknown boss '{boss_id}'")
    return boss
