# FILE: certquiz/services/spaced_repetition.py
"""
Spaced repetition scheduling driven by the calibration score

Better calibrated answers are reviewed later: 4 hours at 0.00 up to
two weeks at 1.00.
"""
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from certquiz.models.questions import Question

# (minimum normalized score, hours until next review), ascending
INTERVAL_MAP = [
    (0.00, 4),
    (0.10, 6),
    (0.17, 8),
    (0.23, 12),
    (0.30, 16),
    (0.33, 20),
    (0.37, 24),
    (0.40, 36),
    (0.43, 48),
    (0.60, 72),
    (0.63, 96),
    (0.67, 120),
    (0.73, 144),
    (0.77, 168),
    (0.80, 192),
    (0.83, 240),
    (0.90, 288),
    (1.00, 336),
]


def review_interval_hours(calibration_score: float) -> int:
    """Hours until review for the highest threshold not above the score"""
    value = round(calibration_score, 2)
    hours = INTERVAL_MAP[0][1]
    for threshold, interval in INTERVAL_MAP:
        if value >= threshold:
            hours = interval
        else:
            break
    return hours


def next_review_at(calibration_score: float, now: datetime) -> datetime:
    return now + timedelta(hours=review_interval_hours(calibration_score))


def is_due(review_at: Optional[datetime], now: datetime) -> bool:
    """Never-reviewed questions are due"""
    if review_at is None:
        return True
    return review_at <= now


def select_due_questions(
    questions: Sequence[Question],
    next_reviews: Dict[str, datetime],
    now: datetime
) -> List[Question]:
    """Questions due for review; every question when none is due"""
    due = [q for q in questions if is_due(next_reviews.get(q.id), now)]
    return due if due else list(questions)
