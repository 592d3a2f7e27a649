# FILE: certquiz/models/questions.py
"""
Question models
"""
import json
import logging
import re
from enum import Enum
from typing import Optional, List, Dict, Any, Union
from pydantic import BaseModel, ConfigDict, Field

from certquiz.services.errors import UnsupportedFormat

logger = logging.getLogger(__name__)


class QuestionFormat(str, Enum):
    """Closed set of question formats"""
    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    TRUE_FALSE = "true_false"
    FILL_BLANK = "fill_blank"
    OPEN_ENDED = "open_ended"


# Stored format names that predate the current enum
FORMAT_ALIASES = {
    "mcq_single": QuestionFormat.SINGLE_CHOICE,
    "mcq_multi": QuestionFormat.MULTI_CHOICE,
}

_TRUE_FALSE_PREFIXES = ("trueorfalse", "truefalse")


class Question(BaseModel):
    """Quiz question, immutable once loaded"""
    model_config = ConfigDict(frozen=True)

    id: str
    format: QuestionFormat
    text: str
    options: List[str] = Field(default_factory=list)
    correct_answer: Union[str, List[str]]
    explanation: Union[str, Dict[str, str]] = ""
    difficulty_tag: Optional[int] = Field(None, ge=1, le=6, description="Taxonomy level 1-6")
    topic_id: Optional[str] = None


def parse_format(value: str, question_id: str = "") -> QuestionFormat:
    """Resolve a stored format name, including legacy aliases"""
    if value in FORMAT_ALIASES:
        return FORMAT_ALIASES[value]
    try:
        return QuestionFormat(value)
    except ValueError:
        raise UnsupportedFormat(question_id, f"Unsupported question format: {value!r}")


def _looks_true_false(text: str) -> bool:
    clean = re.sub(r"[^a-z]", "", text.lower())
    return clean.startswith(_TRUE_FALSE_PREFIXES)


def _decode_correct_answer(value: Any) -> Union[str, List[str]]:
    if isinstance(value, list):
        return [str(v) for v in value]
    value = str(value)
    if value.startswith("["):
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            return value
        if isinstance(decoded, list):
            return [str(v) for v in decoded]
    return value


def _decode_explanation(value: Any) -> Union[str, Dict[str, str]]:
    if value is None:
        return ""
    if isinstance(value, dict):
        return {str(k): str(v) for k, v in value.items() if v is not None}
    value = str(value)
    stripped = value.strip()
    if stripped.startswith("{") and stripped.endswith("}"):
        try:
            decoded = json.loads(stripped)
        except json.JSONDecodeError:
            return value
        if isinstance(decoded, dict):
            return {str(k): str(v) for k, v in decoded.items() if v is not None}
    return value


def question_from_record(record: Dict[str, Any]) -> Question:
    """
    Build a Question from a raw storage record

    Accepts both the current field names and the question bank's column
    names (question_text, question_format/question_type, bloom_level).
    Raises UnsupportedFormat for unknown formats.
    """
    question_id = str(record.get("id", ""))
    text = record.get("text") or record.get("question_text") or ""
    raw_format = (
        record.get("format")
        or record.get("question_format")
        or record.get("question_type")
        or ""
    )
    question_format = parse_format(str(raw_format), question_id)
    options = [str(o) for o in (record.get("options") or [])]

    # Data inconsistencies: true/false questions stored as single choice
    if question_format != QuestionFormat.TRUE_FALSE and (
        _looks_true_false(text)
        or (question_format == QuestionFormat.SINGLE_CHOICE and not options)
    ):
        logger.debug(f"Coercing question {question_id} to true_false")
        question_format = QuestionFormat.TRUE_FALSE
        options = []

    difficulty = record.get("difficulty_tag", record.get("bloom_level"))

    return Question(
        id=question_id,
        format=question_format,
        text=text,
        options=options,
        correct_answer=_decode_correct_answer(record.get("correct_answer", "")),
        explanation=_decode_explanation(record.get("explanation")),
        difficulty_tag=int(difficulty) if difficulty is not None else None,
        topic_id=record.get("topic_id")
    )
