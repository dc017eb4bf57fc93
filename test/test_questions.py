"""
Question bank loading and selection.
"""

import json
import logging
import random

import pytest

from quizconquest.config import DATA_DIR
from quizconquest.engine.questions import load_questions, parse_questions, pick_question_index
from quizconquest.engine.state import Question


def test_bundled_bank_loads():
    questions = load_questions(DATA_DIR / "questions.json")
    assert len(questions) >= 10
    for q in questions:
        assert 0 <= q.correct_answer < len(q.answers)
        assert q.answer_text == q.answers[q.correct_answer]


def test_missing_file_gives_an_empty_bank(tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        assert load_questions(tmp_path / "nope.json") == []
    assert "Error loading questions" in caplog.text


def test_malformed_json_gives_an_empty_bank(tmp_path):
    path = tmp_path / "questions.json"
    path.write_text("[{not json", encoding="utf-8")
    assert load_questions(path) == []


def test_document_must_be_a_list(tmp_path):
    path = tmp_path / "questions.json"
    path.write_text(json.dumps({"question": "?"}), encoding="utf-8")
    assert load_questions(path) == []


def test_bad_entries_are_skipped():
    raw = [
        {"id": 1, "question": "Ok?", "answers": ["yes", "no"], "correctAnswer": 0},
        {"id": 2, "question": "Out of range", "answers": ["a"], "correctAnswer": 3},
        {"id": 3, "question": "", "answers": ["a"], "correctAnswer": 0},
        "not an object",
        {"id": 4, "question": "Bool index", "answers": ["a", "b"], "correctAnswer": True},
        {"id": 5, "question": "No answers", "answers": [], "correctAnswer": 0},
    ]
    questions = parse_questions(raw)
    assert [q.id for q in questions] == [1]


def test_from_dict_rejects_non_string_answers():
    with pytest.raises(ValueError):
        Question.from_dict({"question": "?", "answers": [1, 2], "correctAnswer": 0})


def test_public_form_hides_the_correct_answer():
    q = Question(id=7, question="?", answers=["a", "b"], correct_answer=1)
    assert "correctAnswer" not in q.to_dict()
    assert q.to_dict(include_answer=True)["correctAnswer"] == 1


def test_pick_question_index():
    assert pick_question_index([]) is None
    bank = [Question(id=i, question="?", answers=["a"], correct_answer=0) for i in range(5)]
    rng = random.Random(3)
    picks = {pick_question_index(bank, rng) for _ in range(200)}
    assert picks == set(range(5))
