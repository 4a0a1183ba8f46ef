# brainquest/services/question_service.py
import csv
import json
import random
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from brainquest.models.enums import TOPIC_SUBJECTS, Subject, Topic
from brainquest.models.question import ContentTemplate, Question
from brainquest.services.generators import PROMPT_FORMATS, TemplateGenerator, generate_arithmetic
from brainquest.utils.config import settings
from brainquest.utils.exceptions import ContentUnavailableError
from brainquest.utils.logger import logger

Generator = Callable[[int, int], Question]

# Spacing between per-question seeds within one quiz
QUIZ_SEED_STRIDE = 7919


class QuestionService:
    def __init__(self):
        self.templates: Dict[Topic, List[ContentTemplate]] = {}
        self.generators: Dict[Topic, Generator] = {Topic.ARITHMETIC: generate_arithmetic}
        self._loaded = False
        logger.info("QuestionService initialized (template loading deferred).")

    def load_templates(self, template_dir: Optional[str] = None):
        """Loads every template bank (``<topic>.csv``) from the template directory."""
        template_dir = Path(template_dir if template_dir is not None else settings.template_dir)
        self.templates = {}
        self.generators = {Topic.ARITHMETIC: generate_arithmetic}

        for topic in PROMPT_FORMATS:
            csv_path = template_dir / f"{topic.value}.csv"
            templates = self._read_bank(csv_path)
            if not templates:
                logger.warning(f"No templates loaded for '{topic.value}'; the topic is unavailable.")
                continue
            self.templates[topic] = templates
            self.generators[topic] = TemplateGenerator(topic, templates)

        self._loaded = True
        logger.info(f"Loaded {sum(len(t) for t in self.templates.values())} templates "
                    f"across {len(self.templates)} banks.")
        logger.info(f"Available topics: {[t.value for t in self.generators]}")

    def _read_bank(self, csv_path: Path) -> List[ContentTemplate]:
        templates = []
        try:
            with open(csv_path, mode="r", encoding="utf-8") as csvfile:
                reader = csv.DictReader(csvfile)
                for row in reader:
                    try:
                        # Distractors are stored as a JSON-encoded list '["a", "b"]'
                        distractors = json.loads(row["distractors"])
                        if not isinstance(distractors, list):
                            logger.error(f"Skipping row in {csv_path.name}: distractors are not a list: {row}")
                            continue
                        templates.append(ContentTemplate(
                            pattern=row["pattern"].strip(),
                            correct=row["correct"].strip(),
                            distractors=[str(d).strip() for d in distractors],
                            rule=row["rule"].strip(),
                            level=int(row["level"]),
                        ))
                    except (json.JSONDecodeError, TypeError):
                        logger.error(f"Skipping row in {csv_path.name} due to invalid JSON in 'distractors': {row}")
                    except (ValueError, ValidationError) as ve:
                        logger.error(f"Skipping row in {csv_path.name} due to ValueError: {row} - Error: {ve}")
                    except KeyError as ke:
                        logger.error(f"Skipping row in {csv_path.name} due to missing key: {ke}")
        except FileNotFoundError:
            logger.error(f"Template file not found at: {csv_path}")
        return templates

    def _ensure_loaded(self):
        if not self._loaded:
            self.load_templates()

    def get_templates(self, topic: Topic) -> List[ContentTemplate]:
        self._ensure_loaded()
        return self.templates.get(topic, [])

    def available_topics(self, subject: Optional[Subject] = None) -> List[Topic]:
        """Topics with a registered generator, optionally narrowed to one subject."""
        self._ensure_loaded()
        topics = list(self.generators)
        if subject is not None:
            topics = [t for t in topics if TOPIC_SUBJECTS[t] == subject]
        return topics

    def get_generator(self, topic: Union[Topic, str]) -> Generator:
        self._ensure_loaded()
        try:
            topic = Topic(topic)
        except ValueError:
            raise ContentUnavailableError(f"Unknown topic '{topic}'", topic=str(topic))
        generator = self.generators.get(topic)
        if generator is None:
            raise ContentUnavailableError(f"No generator registered for '{topic.value}'", topic=topic.value)
        return generator

    def generate_question(self, topic: Union[Topic, str], difficulty: int, seed: Optional[int] = None) -> Question:
        generator = self.get_generator(topic)
        if seed is None:
            seed = fresh_seed()
        question = generator(seed, difficulty)
        logger.debug(f"Generated {question.generator_id} question {question.id} "
                     f"(seed={seed}, difficulty={difficulty})")
        return question

    def generate_quiz_questions(
        self,
        topics: List[Union[Topic, str]],
        count: int,
        difficulty: int,
        seed: Optional[int] = None,
    ) -> List[Question]:
        """
        Builds a quiz by cycling through ``topics``. Question ``i`` is seeded
        with ``seed + i * 7919`` so the whole set is reproducible from one seed.
        """
        if not topics:
            raise ContentUnavailableError("A quiz needs at least one topic")
        if count <= 0:
            raise ContentUnavailableError("A quiz needs at least one question")

        base = seed if seed is not None else fresh_seed()
        return [
            self.generate_question(topics[i % len(topics)], difficulty, seed=base + i * QUIZ_SEED_STRIDE)
            for i in range(count)
        ]


def fresh_seed() -> int:
    """Seed for an unseeded request: current milliseconds plus a random offset."""
    return int(time.time() * 1000) % 2**31 + random.randint(0, 9999)


# Instantiate the service globally or manage via dependency injection
question_service = QuestionService()
