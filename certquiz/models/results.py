# FILE: certquiz/models/results.py
"""
Graded result models
"""
from typing import Optional, List, Union
from pydantic import BaseModel, ConfigDict, Field

from certquiz.models.questions import QuestionFormat
from certquiz.models.submissions import Confidence, RecognitionMethod


class ExplanationBlock(BaseModel):
    """One explanation paragraph for the review screen"""
    model_config = ConfigDict(frozen=True)

    label: Optional[str] = None
    text: str
    is_correct: bool = False
    is_user_choice: bool = False


class Result(BaseModel):
    """Graded answer, derived purely from (question, submission)"""
    model_config = ConfigDict(frozen=True)

    question_id: str
    format: QuestionFormat
    is_correct: bool
    canonical_correct_answer: Union[str, List[str]]
    calibration_score: float = Field(..., ge=0.0, le=1.0)
    calibration_label: str
    review_interval_hours: int
    explanation_blocks: List[ExplanationBlock] = Field(default_factory=list)
    confidence: Confidence
    recognition_method: RecognitionMethod
    user_answer: Union[str, List[str]]
    difficulty_tag: Optional[int] = None
