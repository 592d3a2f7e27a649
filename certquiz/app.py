# FILE: certquiz/app.py
"""
FastAPI application entry point for the certification calibration quiz
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from certquiz.config import get_settings
from certquiz.routes import attempts, health, quiz
from certquiz.services.errors import QuizError
from certquiz.services.telemetry import init_telemetry
from certquiz.version import __version__

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown"""
    logger.info(f"Starting certification quiz backend v{__version__}")
    logger.info(f"Grading sink: {settings.grading_sink} (best_effort={settings.grading_best_effort})")

    init_telemetry()

    yield

    logger.info(f"Shutting down; discarding {len(quiz.registry)} live sessions")
    quiz.registry.clear()


app = FastAPI(
    title="Certification Calibration Quiz API",
    description="Confidence-weighted, recognition-tagged certification quiz engine",
    version=__version__,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(QuizError)
async def quiz_exception_handler(request: Request, exc: QuizError):
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "error": exc.code, "detail": exc.message}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"status": "error", "error": "internal_error", "detail": str(exc)}
    )


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(quiz.router, prefix="/quiz", tags=["quiz"])
app.include_router(attempts.router, prefix="/attempts", tags=["attempts"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Certification Calibration Quiz",
        "version": __version__,
        "status": "active"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "certquiz.app:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.environment == "development"
    )
