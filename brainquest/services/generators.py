# brainquest/services/generators.py
"""
Question generators.

A generator turns ``(seed, difficulty)`` into one multiple-choice question.
Template generators draw from a static bank of fill-in-the-blank entries; the
arithmetic generator builds its operands procedurally. Both share the same
option contract: the correct option plus one per distractor, each with a fresh
id, shuffled with the same seeded stream that chose the content.
"""
from typing import List, Sequence

from brainquest.models.enums import TOPIC_SUBJECTS, Topic
from brainquest.models.question import ContentTemplate, Question, QuestionOption, SingleAnswer
from brainquest.utils.config import settings
from brainquest.utils.exceptions import ContentUnavailableError
from brainquest.utils.rng import SeededRng, create_rng, pick, pick_n, random_int, shuffle, unique_id

# Prompt wording per template bank; ``{pattern}`` is the template's prompt fragment
PROMPT_FORMATS = {
    Topic.GRAMMAR: 'Choose the correct word to complete the sentence:\n\n"{pattern}"',
    Topic.VOCABULARY: 'What does the word "{pattern}" mean?',
    Topic.SYNONYMS: 'Which word means the same as "{pattern}"?',
    Topic.ANTONYMS: 'Which word means the opposite of "{pattern}"?',
    Topic.SPELLING: 'Choose the correct spelling to complete the sentence:\n\n"{pattern}"',
}

DIFFICULTY_BAND = 1


def difficulty_band(difficulty: int) -> range:
    """Template levels eligible for ``difficulty``: one either side, clamped to 1..5."""
    return range(max(1, difficulty - DIFFICULTY_BAND), min(5, difficulty + DIFFICULTY_BAND) + 1)


def build_options(correct: str, distractors: Sequence[str], rng: SeededRng):
    """Returns (shuffled options, id of the correct option)."""
    correct_id = unique_id()
    options = [QuestionOption(id=correct_id, label=correct)]
    options.extend(QuestionOption(id=unique_id(), label=label) for label in distractors)
    return shuffle(options, rng), correct_id


class TemplateGenerator:
    """Generator backed by a fixed bank of ``ContentTemplate`` entries."""

    def __init__(self, topic: Topic, templates: List[ContentTemplate], prompt_format: str = None):
        self.topic = topic
        self.generator_id = topic.value
        self.templates = list(templates)
        self.prompt_format = prompt_format or PROMPT_FORMATS.get(topic, "{pattern}")

    def eligible(self, difficulty: int) -> List[ContentTemplate]:
        band = difficulty_band(difficulty)
        return [t for t in self.templates if t.level in band]

    def generate(self, seed: int, difficulty: int) -> Question:
        eligible = self.eligible(difficulty)
        if not eligible:
            raise ContentUnavailableError(
                f"No '{self.generator_id}' templates near difficulty {difficulty}",
                topic=self.generator_id,
                difficulty=difficulty,
            )

        rng = create_rng(seed)
        template = pick(eligible, rng)
        options, correct_id = build_options(template.correct, template.distractors, rng)

        return Question(
            id=unique_id(),
            subject=TOPIC_SUBJECTS[self.topic],
            topic=self.topic,
            difficulty=difficulty,
            prompt=self.prompt_format.format(pattern=template.pattern),
            options=options,
            correct_answer=SingleAnswer(id=correct_id),
            explanation=template.rule,
            time_limit=settings.quiz_time_limit,
            is_generated=True,
            generator_id=self.generator_id,
            generator_seed=seed,
            tags=[self.generator_id, f"level-{template.level}"],
        )

    def __call__(self, seed: int, difficulty: int) -> Question:
        return self.generate(seed, difficulty)


# --- Procedural arithmetic ---

OPERATORS = ("+", "-", "×", "÷")


def _add_or_subtract(op: str, a: int, b: int):
    if op == "-" and b > a:
        a, b = b, a
    return a, b, (a + b if op == "+" else a - b)


def _arithmetic_operands(difficulty: int, rng: SeededRng):
    """Returns (a, op, b, answer) sized to the difficulty."""
    if difficulty <= 2:
        op = "+" if rng() < 0.5 else "-"
        upper = 20 if difficulty == 1 else 50
        a, b, answer = _add_or_subtract(op, random_int(2, upper, rng), random_int(2, upper, rng))
        return a, op, b, answer

    op = pick(OPERATORS, rng)
    if difficulty == 3:
        if op == "×":
            a, b = random_int(2, 12, rng), random_int(2, 12, rng)
            return a, op, b, a * b
        if op == "÷":
            b = random_int(2, 12, rng)
            answer = random_int(2, 12, rng)
            return b * answer, op, b, answer
        a, b, answer = _add_or_subtract(op, random_int(10, 100, rng), random_int(10, 100, rng))
        return a, op, b, answer

    if op == "×":
        a = random_int(12, 25 if difficulty == 4 else 50, rng)
        b = random_int(2, 15, rng)
        return a, op, b, a * b
    if op == "÷":
        b = random_int(3, 15, rng)
        answer = random_int(5, 30 if difficulty == 4 else 60, rng)
        return b * answer, op, b, answer
    upper = 999 if difficulty == 4 else 9999
    a, b, answer = _add_or_subtract(op, random_int(100, upper, rng), random_int(100, upper, rng))
    return a, op, b, answer


def numeric_distractors(answer: int, rng: SeededRng, count: int = 3) -> List[int]:
    """
    Near-miss wrong answers: distinct offsets drawn from a window that scales
    with the answer, applied above or below it and never below zero.
    """
    span = max(5, abs(answer) // 5 + 1)
    offsets = pick_n(range(1, span + 1), count, rng)
    values = []
    for offset in offsets:
        below = rng() < 0.5 and answer - offset >= 0
        values.append(answer - offset if below else answer + offset)
    return values


def generate_arithmetic(seed: int, difficulty: int) -> Question:
    rng = create_rng(seed)
    a, op, b, answer = _arithmetic_operands(difficulty, rng)
    distractors = numeric_distractors(answer, rng)
    options, correct_id = build_options(str(answer), [str(d) for d in distractors], rng)

    return Question(
        id=unique_id(),
        subject=TOPIC_SUBJECTS[Topic.ARITHMETIC],
        topic=Topic.ARITHMETIC,
        difficulty=difficulty,
        prompt=f"What is {a} {op} {b}?",
        options=options,
        correct_answer=SingleAnswer(id=correct_id),
        explanation=f"{a} {op} {b} = {answer}",
        time_limit=settings.quiz_time_limit,
        is_generated=True,
        generator_id=Topic.ARITHMETIC.value,
        generator_seed=seed,
        tags=[Topic.ARITHMETIC.value, op],
    )

