# FILE: tests/test_questions.py

import pytest
from certquiz.models.questions import QuestionFormat, question_from_record
from certquiz.services.canonical import canonicalize, to_option_letter, to_option_text
from certquiz.services.errors import UnsupportedFormat


def test_legacy_format_names_are_mapped():
    question = question_from_record({
        "id": "1",
        "question_text": "Pick one",
        "question_format": "mcq_single",
        "options": ["a", "b"],
        "correct_answer": "A",
    })
    assert question.format == QuestionFormat.SINGLE_CHOICE


def test_true_false_text_is_coerced():
    question = question_from_record({
        "id": "2",
        "question_text": "True or False: MD5 is collision resistant.",
        "question_format": "mcq_single",
        "options": ["True", "False"],
        "correct_answer": "False",
    })
    assert question.format == QuestionFormat.TRUE_FALSE
    assert question.options == []


def test_single_choice_without_options_is_coerced():
    question = question_from_record({
        "id": "3",
        "text": "Firewalls filter traffic.",
        "format": "single_choice",
        "correct_answer": "True",
    })
    assert question.format == QuestionFormat.TRUE_FALSE


def test_json_encoded_fields_are_decoded():
    question = question_from_record({
        "id": "4",
        "text": "Pick two",
        "format": "mcq_multi",
        "options": ["a", "b", "c"],
        "correct_answer": '["A", "C"]',
        "explanation": '{"A": "yes", "B": "no"}',
        "bloom_level": 3,
    })
    assert question.correct_answer == ["A", "C"]
    assert question.explanation == {"A": "yes", "B": "no"}
    assert question.difficulty_tag == 3


def test_unknown_format_is_rejected():
    with pytest.raises(UnsupportedFormat) as exc_info:
        question_from_record({"id": "5", "text": "Match them", "format": "matching", "correct_answer": "x"})
    assert exc_info.value.question_id == "5"


def test_canonicalize_only_expands_in_range_letters():
    options = ["Cats", "Dogs"]
    assert canonicalize("B", options) == "Dogs"
    assert canonicalize("Z", options) == "Z"
    assert canonicalize(["A", "Birds"], options) == ["Cats", "Birds"]
    assert canonicalize("A", []) == "A"


def test_letter_and_text_round_trip_helpers():
    options = ["Cats", "Dogs"]
    assert to_option_text("B. Dogs", options) == "Dogs"
    assert to_option_text("B. Cats", options) == "B. Cats"
    assert to_option_letter("Dogs", options) == "B"
    assert to_option_letter("A", options) == "A"
    assert to_option_letter("Birds", options) is None
