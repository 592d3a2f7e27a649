# FILE: certquiz/services/calibration.py
"""
Calibration scoring

Measures how well self-reported confidence matched actual correctness.
All scores are normalized to [0, 1]; 1.0 is perfectly calibrated.

Baseline score (recognition method is metadata only):
    correct:   confidence / 3        High -> 1.00, Low -> 0.33
    incorrect: (4 - confidence) / 3  Low -> 1.00, High -> 0.33

Weighted score (opt-in, CALIBRATION_USE_RECOGNITION): looks up the
correctness x confidence x recognition-method matrix, whose raw values
span -1.5 (confident false memory) to +1.5 (confident recall).
"""
import logging
from typing import Dict

from certquiz.models.submissions import Confidence, RecognitionMethod

logger = logging.getLogger(__name__)

RAW_MIN = -1.5
RAW_MAX = 1.5

_M = RecognitionMethod

CALIBRATION_MATRIX: Dict[bool, Dict[Confidence, Dict[RecognitionMethod, float]]] = {
    True: {
        Confidence.HIGH: {_M.MEMORY: 1.5, _M.RECOGNITION: 1.2, _M.EDUCATED_GUESS: 0.8, _M.RANDOM_GUESS: 0.3},
        Confidence.MEDIUM: {_M.MEMORY: 1.2, _M.RECOGNITION: 1.0, _M.EDUCATED_GUESS: 0.9, _M.RANDOM_GUESS: 0.4},
        Confidence.LOW: {_M.MEMORY: 0.9, _M.RECOGNITION: 0.8, _M.EDUCATED_GUESS: 0.7, _M.RANDOM_GUESS: 0.5},
    },
    False: {
        Confidence.HIGH: {_M.MEMORY: -1.5, _M.RECOGNITION: -1.2, _M.EDUCATED_GUESS: -0.8, _M.RANDOM_GUESS: -0.5},
        Confidence.MEDIUM: {_M.MEMORY: -1.0, _M.RECOGNITION: -0.8, _M.EDUCATED_GUESS: -0.6, _M.RANDOM_GUESS: -0.4},
        Confidence.LOW: {_M.MEMORY: -0.6, _M.RECOGNITION: -0.4, _M.EDUCATED_GUESS: -0.3, _M.RANDOM_GUESS: -0.2},
    },
}

# (minimum normalized score, label), highest first
CALIBRATION_LABELS = [
    (0.83, "Excellent"),
    (0.67, "Good"),
    (0.50, "Fair"),
    (0.33, "Developing"),
    (0.17, "Poor"),
    (0.00, "Critical"),
]


def score(confidence: Confidence, recognition_method: RecognitionMethod, is_correct: bool) -> float:
    """Baseline calibration score in [0, 1]"""
    level = int(Confidence(confidence))
    if is_correct:
        return level / 3
    return (3 - level + 1) / 3


def normalize_calibration(raw: float) -> float:
    """Map a raw matrix score from [-1.5, 1.5] to [0, 1], rounded to 2 places"""
    clamped = max(RAW_MIN, min(RAW_MAX, raw))
    return round((clamped - RAW_MIN) / (RAW_MAX - RAW_MIN), 2)


def raw_matrix_score(confidence: Confidence, recognition_method: RecognitionMethod, is_correct: bool) -> float:
    return CALIBRATION_MATRIX[bool(is_correct)][Confidence(confidence)][RecognitionMethod(recognition_method)]


def weighted_score(confidence: Confidence, recognition_method: RecognitionMethod, is_correct: bool) -> float:
    """Calibration score that also weighs how the answer was produced"""
    return normalize_calibration(raw_matrix_score(confidence, recognition_method, is_correct))


def calibration_score(
    confidence: Confidence,
    recognition_method: RecognitionMethod,
    is_correct: bool,
    use_recognition: bool = False
) -> float:
    if use_recognition:
        return weighted_score(confidence, recognition_method, is_correct)
    return score(confidence, recognition_method, is_correct)


def calibration_label(value: float) -> str:
    for threshold, label in CALIBRATION_LABELS:
        if value >= threshold:
            return label
    return CALIBRATION_LABELS[-1][1]
