# FILE: certquiz/services/question_source.py
"""
Question source backed by JSONL files, one file per topic
"""
import json
import logging
from pathlib import Path
from typing import List, Dict, Any, Optional
from pydantic import ValidationError

from certquiz.config import get_settings
from certquiz.models.questions import Question, question_from_record
from certquiz.services.errors import QuestionError

logger = logging.getLogger(__name__)


class JsonlQuestionSource:
    """Reads <questions_dir>/<topic_id>.jsonl"""

    def __init__(self, questions_dir: Optional[str] = None):
        self.questions_dir = Path(questions_dir or get_settings().questions_dir)
        self.questions_dir.mkdir(parents=True, exist_ok=True)

    def _topic_file(self, topic_id: str) -> Path:
        # Topic ids come from URLs; keep them inside questions_dir
        safe_name = Path(topic_id).name
        return self.questions_dir / f"{safe_name}.jsonl"

    def fetch_questions(self, topic_id: str) -> List[Question]:
        """Questions for a topic; unknown topics yield an empty list"""
        topic_file = self._topic_file(topic_id)

        if not topic_file.exists():
            logger.info(f"No question file for topic '{topic_id}'")
            return []

        questions = []
        with open(topic_file, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError as e:
                    logger.warning(f"{topic_file.name}:{line_no}: invalid JSON skipped ({e})")
                    continue
                if not isinstance(record, dict):
                    logger.warning(f"{topic_file.name}:{line_no}: expected an object, skipped")
                    continue
                record.setdefault("topic_id", topic_id)
                try:
                    questions.append(question_from_record(record))
                except QuestionError as e:
                    logger.warning(f"{topic_file.name}:{line_no}: question {e.question_id} skipped: {e.message}")
                except (ValidationError, ValueError, TypeError) as e:
                    logger.warning(f"{topic_file.name}:{line_no}: malformed record skipped ({e})")

        logger.info(f"Loaded {len(questions)} questions for topic '{topic_id}'")
        return questions

    def add_question(self, topic_id: str, record: Dict[str, Any]):
        """Append a question record"""
        with open(self._topic_file(topic_id), "a", encoding="utf-8") as f:
            f.write(json.dumps(record) + "\n")

    def topics(self) -> List[str]:
        return sorted(p.stem for p in self.questions_dir.glob("*.jsonl"))
