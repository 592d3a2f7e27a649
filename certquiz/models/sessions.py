# FILE: certquiz/models/sessions.py
"""
Quiz session models
"""
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field

from certquiz.models.questions import Question
from certquiz.models.results import Result
from certquiz.models.submissions import Confidence, RawAnswer, RecognitionMethod


class QuizStep(str, Enum):
    """Per-question flow plus the terminal summary"""
    CONFIDENCE = "confidence"
    ANSWER = "answer"
    RECOGNITION = "recognition"
    RESULTS = "results"
    SUMMARY = "summary"


class Session(BaseModel):
    """
    One pass through a shuffled question set

    Value object: transitions in certquiz.services.quiz_session return a new
    Session instead of mutating this one.
    """
    model_config = ConfigDict(frozen=True)

    session_id: str
    topic_id: str
    questions: List[Question]
    cursor: int = 0
    pass_number: int = 0
    step: QuizStep = QuizStep.CONFIDENCE
    correct_count: int = 0
    confidence: Optional[Confidence] = None
    answer: Optional[RawAnswer] = None
    result: Optional[Result] = None
    results: List[Result] = Field(default_factory=list)
    skipped_question_ids: List[str] = Field(default_factory=list)

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Optional[Question]:
        if self.step == QuizStep.SUMMARY:
            return None
        if 0 <= self.cursor < len(self.questions):
            return self.questions[self.cursor]
        return None

    @property
    def question_ids(self) -> List[str]:
        return [q.id for q in self.questions]


class SessionSnapshot(BaseModel):
    """Read-only view handed to the presentation layer after every transition"""
    model_config = ConfigDict(frozen=True)

    session_id: str
    topic_id: str
    step: QuizStep
    question_number: int
    total_questions: int
    correct_count: int
    progress: float = Field(..., ge=0.0, le=1.0)
    question: Optional[Question] = None
    result: Optional[Result] = None
    percentage: Optional[int] = None
    available_recognition_methods: List[RecognitionMethod] = Field(default_factory=list)
    skipped_question_ids: List[str] = Field(default_factory=list)
