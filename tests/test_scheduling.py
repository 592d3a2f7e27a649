# FILE: tests/test_scheduling.py
"""Recognition method availability and spaced-repetition scheduling"""

from datetime import datetime, timedelta, timezone

import pytest
from certquiz.models.questions import QuestionFormat
from certquiz.models.submissions import RecognitionMethod
from certquiz.services.errors import InvalidRecognitionMethod
from certquiz.services.recognition import (
    available_recognition_methods, check_recognition_method, default_recognition_method
)
from certquiz.services.spaced_repetition import (
    is_due, next_review_at, review_interval_hours, select_due_questions
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_open_ended_offers_memory_and_reasoning_only():
    assert available_recognition_methods(QuestionFormat.OPEN_ENDED) == [
        RecognitionMethod.MEMORY, RecognitionMethod.EDUCATED_GUESS
    ]


def test_true_false_has_no_recognition():
    methods = available_recognition_methods(QuestionFormat.TRUE_FALSE)
    assert RecognitionMethod.RECOGNITION not in methods
    assert RecognitionMethod.RANDOM_GUESS in methods


def test_choice_formats_offer_all_methods():
    assert len(available_recognition_methods(QuestionFormat.MULTI_CHOICE)) == 4
    assert default_recognition_method(QuestionFormat.MULTI_CHOICE) == RecognitionMethod.RECOGNITION


def test_unavailable_method_is_rejected():
    with pytest.raises(InvalidRecognitionMethod):
        check_recognition_method(QuestionFormat.OPEN_ENDED, RecognitionMethod.RANDOM_GUESS)


@pytest.mark.parametrize("score,hours", [
    (0.0, 4),
    (1 / 3, 20),
    (0.5, 48),
    (2 / 3, 120),
    (0.9, 288),
    (1.0, 336),
])
def test_review_interval_steps(score, hours):
    assert review_interval_hours(score) == hours


def test_next_review_and_due():
    review_at = next_review_at(1.0, NOW)
    assert review_at == NOW + timedelta(hours=336)
    assert not is_due(review_at, NOW)
    assert is_due(review_at, NOW + timedelta(days=15))
    assert is_due(None, NOW)


def test_select_due_questions(question_set):
    sc, mc, tf = question_set
    reviews = {
        sc.id: NOW + timedelta(days=1),
        mc.id: NOW - timedelta(hours=1),
    }
    due = select_due_questions(question_set, reviews, NOW)
    assert [q.id for q in due] == [mc.id, tf.id]


def test_select_due_falls_back_to_everything(question_set):
    reviews = {q.id: NOW + timedelta(days=1) for q in question_set}
    assert select_due_questions(question_set, reviews, NOW) == question_set
