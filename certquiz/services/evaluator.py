# FILE: certquiz/services/evaluator.py
"""
Answer evaluator

One grading strategy per question format. Correctness never depends on
canonicalization; canonicalization only shapes the correct answer shown
back to the learner.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Union

from certquiz.models.questions import Question, QuestionFormat
from certquiz.models.submissions import RawAnswer
from certquiz.services.canonical import (
    as_list, canonicalize, letter_index, to_option_text
)
from certquiz.services.errors import MalformedQuestion, UnsupportedFormat

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationPolicy:
    """Tunable grading leniency"""
    fill_blank_substring: bool = True


@dataclass(frozen=True)
class Evaluation:
    is_correct: bool
    canonical_correct_answer: Union[str, List[str]]


DEFAULT_POLICY = EvaluationPolicy()

OPTION_FORMATS = (QuestionFormat.SINGLE_CHOICE, QuestionFormat.MULTI_CHOICE)


def _single(answer: RawAnswer) -> str:
    if isinstance(answer, str):
        return answer
    values = [a for a in answer if a.strip()]
    return values[0] if len(values) == 1 else ""


def _grade_true_false(question: Question, answer: RawAnswer, policy: EvaluationPolicy) -> bool:
    # Literal comparison, "true" does not match "True"
    if not isinstance(answer, str):
        return False
    return any(answer == correct for correct in as_list(question.correct_answer))


def _grade_single_choice(question: Question, answer: RawAnswer, policy: EvaluationPolicy) -> bool:
    value = _single(answer)
    if not value:
        return False
    options = question.options
    for correct in as_list(question.correct_answer):
        if value == correct:
            return True
        if to_option_text(value, options) == to_option_text(correct, options):
            return True
    return False


def _grade_fill_blank(question: Question, answer: RawAnswer, policy: EvaluationPolicy) -> bool:
    value = _single(answer)
    if not value.strip():
        return False
    submitted = value.strip().lower()
    for correct in as_list(question.correct_answer):
        expected = to_option_text(correct, question.options)
        if value == correct or value == expected:
            return True
        phrase = expected.strip().lower()
        if policy.fill_blank_substring and phrase and phrase in submitted:
            return True
    return False


def _item_matches(submitted: str, correct: str, options: List[str]) -> bool:
    if submitted == correct:
        return True
    if to_option_text(submitted, options) == to_option_text(correct, options):
        return True
    if letter_index(correct) is None:
        # "B. Dogs" contains "Dogs"
        return correct in submitted
    return False


def _grade_multi_choice(question: Question, answer: RawAnswer, policy: EvaluationPolicy) -> bool:
    # Compare in option-text form so "A" and "Cats" count as one choice
    options = question.options
    submitted = {to_option_text(a, options) for a in as_list(answer) if a.strip()}
    correct = {to_option_text(c, options) for c in as_list(question.correct_answer) if c.strip()}
    if len(submitted) != len(correct):
        return False
    every_item_matches = all(
        any(_item_matches(item, c, options) for c in correct)
        for item in submitted
    )
    every_choice_covered = all(
        any(_item_matches(item, c, options) for item in submitted)
        for c in correct
    )
    return every_item_matches and every_choice_covered


def _grade_open_ended(question: Question, answer: RawAnswer, policy: EvaluationPolicy) -> bool:
    # Local fallback only; an attached grading sink is authoritative
    value = _single(answer).strip().lower()
    if not value:
        return False
    return any(value == c.strip().lower() for c in as_list(question.correct_answer))


_STRATEGIES: Dict[QuestionFormat, Callable[[Question, RawAnswer, EvaluationPolicy], bool]] = {
    QuestionFormat.TRUE_FALSE: _grade_true_false,
    QuestionFormat.SINGLE_CHOICE: _grade_single_choice,
    QuestionFormat.FILL_BLANK: _grade_fill_blank,
    QuestionFormat.MULTI_CHOICE: _grade_multi_choice,
    QuestionFormat.OPEN_ENDED: _grade_open_ended,
}


def check_question(question: Question):
    """Raise if the question cannot be graded"""
    if question.format not in _STRATEGIES:
        raise UnsupportedFormat(question.id, f"Unsupported question format: {question.format!r}")

    correct = [c for c in as_list(question.correct_answer) if c.strip()]
    if not correct:
        raise MalformedQuestion(question.id, "Question has no correct answer")

    if question.format in OPTION_FORMATS:
        if not question.options:
            raise MalformedQuestion(question.id, f"{question.format.value} question has no options")
        for value in correct:
            index = letter_index(value)
            if index is not None and index >= len(question.options):
                raise MalformedQuestion(
                    question.id,
                    f"Correct answer {value!r} is outside {len(question.options)} options"
                )


def evaluate(
    question: Question,
    raw_answer: RawAnswer,
    policy: EvaluationPolicy = DEFAULT_POLICY
) -> Evaluation:
    """Grade one answer against its question"""
    check_question(question)
    strategy = _STRATEGIES[question.format]
    is_correct = strategy(question, raw_answer, policy)
    logger.debug(f"Evaluated {question.id} ({question.format.value}): correct={is_correct}")
    return Evaluation(
        is_correct=is_correct,
        canonical_correct_answer=canonicalize(question.correct_answer, question.options)
    )
