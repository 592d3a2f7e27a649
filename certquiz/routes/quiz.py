# FILE: certquiz/routes/quiz.py
"""
Quiz session endpoints
"""
import logging
from datetime import datetime, timezone
from typing import Optional, List, Union
from fastapi import APIRouter
from pydantic import BaseModel, Field

from certquiz.config import get_settings
from certquiz.models.questions import QuestionFormat
from certquiz.models.submissions import Confidence, RecognitionMethod
from certquiz.services.evaluator import EvaluationPolicy
from certquiz.services.grading_sink import AttemptLogSink, create_grading_sink
from certquiz.services.question_source import JsonlQuestionSource
from certquiz.services.quiz_session import SessionController, seeded_shuffle
from certquiz.services.recognition import (
    available_recognition_methods, default_recognition_method, unavailable_method_reason
)
from certquiz.services.session_registry import SessionRegistry
from certquiz.services.spaced_repetition import select_due_questions

logger = logging.getLogger(__name__)
router = APIRouter()
settings = get_settings()

question_source = JsonlQuestionSource()
grading_sink = create_grading_sink(settings)
registry = SessionRegistry(max_sessions=settings.max_sessions)


class StartSessionRequest(BaseModel):
    """Start a quiz on a topic"""
    topic_id: str = Field(..., min_length=1)
    seed: Optional[int] = Field(None, description="Fixes the question order (testing, replays)")


class ConfidenceRequest(BaseModel):
    confidence: Confidence


class AnswerRequest(BaseModel):
    answer: Union[str, List[str]]


class RecognitionRequest(BaseModel):
    recognition_method: RecognitionMethod


def _success(controller_snapshot) -> dict:
    return {
        "status": "success",
        "session": controller_snapshot.model_dump(mode="json")
    }


@router.post("/sessions")
async def start_session(request: StartSessionRequest):
    """Load the topic's questions and start a shuffled session"""
    logger.info(f"Start session: topic={request.topic_id}")

    questions = question_source.fetch_questions(request.topic_id)

    if settings.review_due_only and isinstance(grading_sink, AttemptLogSink):
        questions = select_due_questions(
            questions,
            grading_sink.next_reviews(request.topic_id),
            datetime.now(timezone.utc)
        )

    controller = SessionController.start(
        request.topic_id,
        questions,
        seeded_shuffle(request.seed),
        sink=grading_sink,
        policy=EvaluationPolicy(fill_blank_substring=settings.fill_blank_substring_match),
        use_recognition=settings.calibration_use_recognition,
        timeout=settings.grading_timeout
    )
    registry.add(controller)
    return _success(controller.snapshot())


@router.get("/sessions/{session_id}")
async def get_session(session_id: str):
    return _success(registry.get(session_id).snapshot())


@router.delete("/sessions/{session_id}")
async def end_session(session_id: str):
    """Leave the quiz; the session is discarded"""
    dropped = registry.drop(session_id)
    return {
        "status": "success" if dropped else "not_found",
        "session_id": session_id
    }


@router.post("/sessions/{session_id}/confidence")
async def choose_confidence(session_id: str, request: ConfidenceRequest):
    return _success(registry.get(session_id).choose_confidence(request.confidence))


@router.post("/sessions/{session_id}/answer")
async def submit_answer(session_id: str, request: AnswerRequest):
    return _success(registry.get(session_id).submit_answer(request.answer))


@router.post("/sessions/{session_id}/recognition")
async def submit_recognition(session_id: str, request: RecognitionRequest):
    """Record how the answer was produced, then grade it"""
    controller = registry.get(session_id)
    return _success(await controller.submit_recognition(request.recognition_method))


@router.post("/sessions/{session_id}/next")
async def next_question(session_id: str):
    return _success(registry.get(session_id).next())


@router.post("/sessions/{session_id}/retry")
async def retry_session(session_id: str):
    return _success(registry.get(session_id).retry())


@router.get("/recognition-methods/{question_format}")
async def recognition_methods(question_format: QuestionFormat):
    """Recognition methods offered for a question format"""
    return {
        "status": "success",
        "format": question_format.value,
        "methods": [m.value for m in available_recognition_methods(question_format)],
        "default": default_recognition_method(question_format).value,
        "note": unavailable_method_reason(question_format) or None
    }
