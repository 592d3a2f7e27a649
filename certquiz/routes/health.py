# FILE: certquiz/routes/health.py
"""
Health check endpoint
"""
import logging
from fastapi import APIRouter

from certquiz.config import get_settings
from certquiz.routes import quiz
from certquiz.services.telemetry import get_telemetry_summary
from certquiz.version import __version__

logger = logging.getLogger(__name__)
router = APIRouter()
settings = get_settings()


@router.get("")
async def health_check():
    """Service status, grading mode and live session count"""
    return {
        "status": "healthy",
        "version": __version__,
        "grading_sink": settings.grading_sink,
        "grading_best_effort": settings.grading_best_effort,
        "topics": quiz.question_source.topics(),
        **quiz.registry.stats(),
        "telemetry": get_telemetry_summary()
    }
