# FILE: certquiz/models/submissions.py
"""
Submission models
"""
from enum import Enum, IntEnum
from typing import List, Union
from pydantic import BaseModel, ConfigDict


class Confidence(IntEnum):
    """Self-reported confidence, captured before answering"""
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class RecognitionMethod(str, Enum):
    """How the answer was produced, captured after the answer is locked in"""
    MEMORY = "memory"
    RECOGNITION = "recognition"
    EDUCATED_GUESS = "educated_guess"
    RANDOM_GUESS = "random_guess"


RawAnswer = Union[str, List[str]]


class Submission(BaseModel):
    """One answered question"""
    model_config = ConfigDict(frozen=True)

    question_id: str
    confidence: Confidence
    recognition_method: RecognitionMethod
    raw_answer: RawAnswer


def is_empty_answer(answer) -> bool:
    """True for None, blank strings and empty selections"""
    if answer is None:
        return True
    if isinstance(answer, str):
        return not answer.strip()
    return not [a for a in answer if isinstance(a, str) and a.strip()]
