# FILE: tests/test_evaluator.py

import pytest
from certquiz.models.questions import Question, QuestionFormat
from certquiz.services.errors import MalformedQuestion
from certquiz.services.evaluator import EvaluationPolicy, check_question, evaluate


def test_true_false_is_case_sensitive(true_false_question):
    """No case normalization for true/false answers"""
    assert evaluate(true_false_question, "True").is_correct
    assert not evaluate(true_false_question, "true").is_correct
    assert not evaluate(true_false_question, "False").is_correct


def test_single_choice_letter_and_text(single_choice_question):
    assert evaluate(single_choice_question, "B").is_correct
    assert evaluate(single_choice_question, "Buffer overflow").is_correct
    assert evaluate(single_choice_question, "B. Buffer overflow").is_correct
    assert not evaluate(single_choice_question, "A").is_correct
    assert not evaluate(single_choice_question, "Phishing").is_correct


def test_single_choice_canonical_answer_is_option_text(single_choice_question):
    result = evaluate(single_choice_question, "A")
    assert result.canonical_correct_answer == "Buffer overflow"


def test_multi_choice_relaxed_set_equality(multi_choice_question):
    """Letters, option text and order all compare equal; cardinality must match"""
    assert evaluate(multi_choice_question, ["A", "B"]).is_correct
    assert evaluate(multi_choice_question, ["Cats", "Dogs"]).is_correct
    assert evaluate(multi_choice_question, ["B", "A"]).is_correct
    assert not evaluate(multi_choice_question, ["A"]).is_correct
    assert not evaluate(multi_choice_question, ["A", "B", "C"]).is_correct


def test_multi_choice_substring_containment():
    """A submitted item containing the correct text matches it"""
    question = Question(
        id="q-mc-text",
        format=QuestionFormat.MULTI_CHOICE,
        text="Pick the stream ciphers",
        options=["RC4", "AES", "ChaCha20"],
        correct_answer=["RC4", "ChaCha20"],
    )
    assert evaluate(question, ["A. RC4", "C. ChaCha20"]).is_correct
    assert not evaluate(question, ["A. RC4", "B. AES"]).is_correct
    assert not evaluate(question, ["RC4", "A. RC4 stream"]).is_correct


def test_multi_choice_same_option_twice_is_one_choice(multi_choice_question):
    assert not evaluate(multi_choice_question, ["A", "Cats"]).is_correct
    assert not evaluate(multi_choice_question, ["B", "B. Dogs"]).is_correct


def test_multi_choice_canonicalizes_each_letter(multi_choice_question):
    result = evaluate(multi_choice_question, ["A"])
    assert result.canonical_correct_answer == ["Cats", "Dogs"]


def test_fill_blank_substring_leniency(fill_blank_question):
    assert evaluate(fill_blank_question, "overflow").is_correct
    assert evaluate(fill_blank_question, "buffer overflow").is_correct
    assert not evaluate(fill_blank_question, "underflow").is_correct


def test_fill_blank_substring_policy_can_be_disabled(fill_blank_question):
    strict = EvaluationPolicy(fill_blank_substring=False)
    assert evaluate(fill_blank_question, "overflow", strict).is_correct
    assert not evaluate(fill_blank_question, "buffer overflow", strict).is_correct


def test_open_ended_fallback_is_case_insensitive(open_ended_question):
    assert evaluate(open_ended_question, "  tls ").is_correct
    assert not evaluate(open_ended_question, "SSH").is_correct


def test_evaluate_is_deterministic(multi_choice_question):
    first = evaluate(multi_choice_question, ["Cats", "Dogs"])
    second = evaluate(multi_choice_question, ["Cats", "Dogs"])
    assert first == second


def test_choice_question_without_options_is_malformed():
    question = Question(
        id="q-bad",
        format=QuestionFormat.MULTI_CHOICE,
        text="Pick two",
        correct_answer=["A", "B"],
    )
    with pytest.raises(MalformedQuestion):
        evaluate(question, ["A", "B"])


def test_letter_outside_options_is_malformed():
    question = Question(
        id="q-range",
        format=QuestionFormat.SINGLE_CHOICE,
        text="Pick one",
        options=["Yes", "No"],
        correct_answer="D",
    )
    with pytest.raises(MalformedQuestion):
        check_question(question)


def test_missing_correct_answer_is_malformed():
    question = Question(
        id="q-empty",
        format=QuestionFormat.FILL_BLANK,
        text="____",
        correct_answer="",
    )
    with pytest.raises(MalformedQuestion):
        check_question(question)
