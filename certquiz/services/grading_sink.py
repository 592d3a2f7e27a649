# FILE: certquiz/services/grading_sink.py
"""
Grading / submission sinks

A sink receives every graded answer together with the locally computed
result and returns the authoritative result:
- AttemptLogSink records attempts (idempotent, append-only JSONL) and
  keeps the local verdict.
- HttpGradingSink asks a remote grader for the verdict (open-ended answers).
"""
import csv
import io
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from certquiz.config import get_settings
from certquiz.models.questions import Question
from certquiz.models.results import Result
from certquiz.models.submissions import Submission
from certquiz.services.errors import GradingSinkError, GradingTimeout
from certquiz.services.spaced_repetition import next_review_at

logger = logging.getLogger(__name__)


class GradingSink:
    """Base class for grading sinks"""

    # When True a failing sink falls back to the local result
    best_effort: bool = True

    async def submit(
        self,
        question: Question,
        submission: Submission,
        local_result: Result,
        attempt_id: Optional[str] = None
    ) -> Result:
        raise NotImplementedError


class AttemptLogSink(GradingSink):
    """Append-only attempt log, one JSONL file per topic"""

    def __init__(self, attempts_dir: Optional[str] = None, best_effort: bool = True):
        self.attempts_dir = Path(attempts_dir or get_settings().attempts_dir)
        self.attempts_dir.mkdir(parents=True, exist_ok=True)
        self.best_effort = best_effort

    def _topic_file(self, topic_id: Optional[str]) -> Path:
        return self.attempts_dir / f"{topic_id or 'untagged'}.jsonl"

    async def submit(
        self,
        question: Question,
        submission: Submission,
        local_result: Result,
        attempt_id: Optional[str] = None
    ) -> Result:
        """Record attempt (idempotent on attempt_id)"""
        self.record(question, submission, local_result, attempt_id)
        return local_result

    def record(
        self,
        question: Question,
        submission: Submission,
        result: Result,
        attempt_id: Optional[str] = None
    ):
        attempts_file = self._topic_file(question.topic_id)

        if attempt_id and self._get_attempt(attempts_file, attempt_id):
            logger.debug(f"Attempt {attempt_id} already recorded (idempotent)")
            return

        now = datetime.now(timezone.utc)
        attempt = {
            "attempt_id": attempt_id,
            "question_id": question.id,
            "topic_id": question.topic_id,
            "format": question.format.value,
            "difficulty_tag": question.difficulty_tag,
            "response": submission.raw_answer,
            "is_correct": result.is_correct,
            "confidence": int(submission.confidence),
            "recognition_method": submission.recognition_method.value,
            "calibration_score": result.calibration_score,
            "next_review_at": next_review_at(result.calibration_score, now).isoformat(),
            "timestamp": now.isoformat()
        }

        try:
            with open(attempts_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(attempt) + "\n")
        except OSError as e:
            raise GradingSinkError(f"Failed to record attempt: {e}")

        logger.info(f"Recorded attempt {attempt_id} for question {question.id}")

    def _read(self, attempts_file: Path) -> List[Dict[str, Any]]:
        if not attempts_file.exists():
            return []
        attempts = []
        with open(attempts_file, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    attempt = json.loads(line)
                except json.JSONDecodeError as e:
                    logger.warning(f"{attempts_file.name}:{line_no}: invalid JSON skipped ({e})")
                    continue
                if not isinstance(attempt, dict):
                    logger.warning(f"{attempts_file.name}:{line_no}: expected an object, skipped")
                    continue
                attempts.append(attempt)
        return attempts

    def _get_attempt(self, attempts_file: Path, attempt_id: str) -> Optional[Dict[str, Any]]:
        for attempt in self._read(attempts_file):
            if attempt.get("attempt_id") == attempt_id:
                return attempt
        return None

    def attempts(self, topic_id: Optional[str] = None) -> List[Dict[str, Any]]:
        if topic_id:
            return self._read(self._topic_file(topic_id))
        attempts = []
        for attempts_file in sorted(self.attempts_dir.glob("*.jsonl")):
            attempts.extend(self._read(attempts_file))
        return attempts

    def next_reviews(self, topic_id: str) -> Dict[str, datetime]:
        """Latest scheduled review per question id"""
        reviews: Dict[str, datetime] = {}
        for attempt in self.attempts(topic_id):
            if not attempt.get("question_id") or not attempt.get("next_review_at"):
                continue
            try:
                reviews[attempt["question_id"]] = datetime.fromisoformat(attempt["next_review_at"])
            except (TypeError, ValueError):
                logger.warning(f"Bad next_review_at for {attempt['question_id']}: {attempt['next_review_at']!r}")
        return reviews

    def export(self, topic_id: Optional[str] = None, format: str = "csv") -> Any:
        """Export attempts as CSV text or a list of records"""
        attempts = self.attempts(topic_id)
        if format == "csv":
            return self._export_csv(attempts)
        return attempts

    def _export_csv(self, attempts: List[Dict[str, Any]]) -> str:
        if not attempts:
            return ""

        output = io.StringIO()
        fieldnames = ["attempt_id", "question_id", "topic_id", "format", "is_correct",
                      "confidence", "recognition_method", "calibration_score",
                      "next_review_at", "timestamp"]

        writer = csv.DictWriter(output, fieldnames=fieldnames)
        writer.writeheader()
        for attempt in attempts:
            writer.writerow({k: attempt.get(k, "") for k in fieldnames})

        return output.getvalue()


class HttpGradingSink(GradingSink):
    """Remote grader reached over HTTP"""

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        best_effort: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = url
        self.timeout = timeout
        self.best_effort = best_effort
        self.transport = transport
        logger.info(f"HTTP grading sink: {url} (timeout={timeout}s, best_effort={best_effort})")

    async def submit(
        self,
        question: Question,
        submission: Submission,
        local_result: Result,
        attempt_id: Optional[str] = None
    ) -> Result:
        payload = {
            "attempt_id": attempt_id,
            "question": question.model_dump(mode="json"),
            "submission": submission.model_dump(mode="json"),
            "local_result": local_result.model_dump(mode="json"),
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            raise GradingTimeout(f"Grading service timed out after {self.timeout}s") from e
        except (httpx.HTTPError, ValueError) as e:
            raise GradingSinkError(f"Grading service failed: {e}") from e

        if not isinstance(data, dict):
            raise GradingSinkError(f"Grading service returned {type(data).__name__}, expected an object")
        if "is_correct" not in data:
            raise GradingSinkError("Grading service response has no 'is_correct'")

        update: Dict[str, Any] = {"is_correct": bool(data["is_correct"])}
        if data.get("canonical_correct_answer"):
            update["canonical_correct_answer"] = data["canonical_correct_answer"]
        return local_result.model_copy(update=update)


def create_grading_sink(settings=None) -> Optional[GradingSink]:
    """Build the sink selected by GRADING_SINK"""
    settings = settings or get_settings()

    if settings.grading_sink == "none":
        return None
    if settings.grading_sink == "http":
        if not settings.grading_url:
            raise ValueError("GRADING_URL is required when GRADING_SINK=http")
        return HttpGradingSink(
            url=settings.grading_url,
            timeout=settings.grading_timeout,
            best_effort=settings.grading_best_effort
        )
    return AttemptLogSink(settings.attempts_dir, best_effort=settings.grading_best_effort)
