# FILE: certquiz/routes/attempts.py
"""
Attempt log endpoints
"""
import logging
from typing import Optional
from fastapi import APIRouter

from certquiz.routes import quiz
from certquiz.services.grading_sink import AttemptLogSink

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/export")
async def export_attempts(topic_id: Optional[str] = None, format: str = "csv"):
    """Export recorded attempts"""
    logger.info(f"Export attempts: topic={topic_id} format={format}")

    sink = quiz.grading_sink
    if not isinstance(sink, AttemptLogSink):
        return {
            "status": "unavailable",
            "message": "Attempt log is not enabled (GRADING_SINK=log)"
        }

    attempts = sink.export(topic_id=topic_id, format=format)
    count = len(sink.attempts(topic_id))

    return {
        "status": "success",
        "format": format,
        "count": count,
        "data": attempts
    }
