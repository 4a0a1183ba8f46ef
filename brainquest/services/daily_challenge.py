# brainquest/services/daily_challenge.py
"""Three challenges per calendar day, identical for every user on that date."""
from datetime import date
from typing import List, Optional

from pydantic import BaseModel

from brainquest.models.enums import TOPIC_SUBJECTS, Subject, Topic
from brainquest.utils.exceptions import ContentUnavailableError
from brainquest.utils.rng import create_rng, pick, random_int, seed_from_string

CHALLENGES_PER_DAY = 3

CHALLENGE_TEMPLATES = [
    {"title": "Speed Bolt", "description": "Answer quickly for bonus XP!", "emoji": "⚡", "count": 5},
    {"title": "Brain Buster", "description": "Tackle harder questions!", "emoji": "🧠", "count": 8},
    {"title": "Perfect Run", "description": "Try to get them all right!", "emoji": "🎯", "count": 5},
    {"title": "Marathon", "description": "A longer challenge awaits!", "emoji": "🏃", "count": 15},
    {"title": "Mixed Bag", "description": "Questions from different topics!", "emoji": "🎲", "count": 10},
    {"title": "Quick Fire", "description": "Short and sharp!", "emoji": "🔥", "count": 5},
]


class DailyChallenge(BaseModel):
    id: str
    date: str
    title: str
    description: str
    emoji: str
    subject: Subject
    topic: Topic
    question_count: int
    difficulty: int
    xp_bonus: int
    seed: int


def challenge_bonus(difficulty: int) -> int:
    return 50 + difficulty * 10


def get_daily_challenges(day: Optional[date] = None) -> List[DailyChallenge]:
    date_str = (day or date.today()).isoformat()
    seed = seed_from_string(date_str)
    rng = create_rng(seed)

    remaining = list(Topic)
    challenges = []
    for i in range(CHALLENGES_PER_DAY):
        template = pick(CHALLENGE_TEMPLATES, rng)
        topic = pick(remaining, rng)
        remaining.remove(topic)
        difficulty = random_int(1, 3, rng)
        challenges.append(DailyChallenge(
            id=f"daily-{date_str}-{i}",
            date=date_str,
            title=template["title"],
            description=template["description"],
            emoji=template["emoji"],
            subject=TOPIC_SUBJECTS[topic],
            topic=topic,
            question_count=template["count"],
            difficulty=difficulty,
            xp_bonus=challenge_bonus(difficulty),
            # Questions are the same for everyone who plays this challenge
            seed=seed + i,
        ))
    return challenges


def get_daily_challenge(challenge_id: str) -> DailyChallenge:
    """Looks up a challenge by id (``daily-YYYY-MM-DD-N``) for any date."""
    parts = challenge_id.rsplit("-", 1)
    try:
        day = date.fromisoformat(parts[0].removeprefix("daily-"))
    except ValueError:
        raise ContentUnavailableError(f"Unknown daily challenge '{challenge_id}'")
    for challenge in get_daily_challenges(day):
        if challenge.id == challenge_id:
            return challenge
    raise ContentUnavailableError(f"Unknown daily challenge '{challenge_id}'")
