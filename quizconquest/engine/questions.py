"""
Question bank loading.
The bank is a JSON list of {id, question, answers, correctAnswer}. It is read
once at startup and never modified. A missing or unreadable file yields an
empty bank, which makes every attack fail with "No questions available".
"""

import json
import logging
import random
from pathlib import Path

from quizconquest.engine.state import Question

logger = logging.getLogger(__name__)


def parse_questions(raw: object) -> list[Question]:
    """Parse a decoded JSON document. Individual bad entries are skipped."""
    if not isinstance(raw, list):
        logger.error("Question bank must be a JSON list, got %s", type(raw).__name__)
        return []
    questions = []
    for index, entry in enumerate(raw):
        try:
            questions.append(Question.from_dict(entry))
        except ValueError as e:
            logger.warning("Skipping question #%d: %s", index, e)
    return questions


def load_questions(path: str | Path) -> list[Question]:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Error loading questions from %s: %s", path, e)
        return []
    questions = parse_questions(raw)
    logger.info("Loaded %d questions from %s", len(questions), path)
    return questions


def pick_question_index(questions: list[Question], rng: random.Random | None = None) -> int | None:
    """Uniform draw with replacement; None when the bank is empty."""
    if not questions:
        return None
    rng = rng or random
    return rng.randrange(len(questions))
