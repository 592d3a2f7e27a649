# FILE: certquiz/services/recognition.py
"""
Recognition methods available per question format
"""
from typing import List

from certquiz.models.questions import QuestionFormat
from certquiz.models.submissions import RecognitionMethod
from certquiz.services.errors import InvalidRecognitionMethod

ALL_METHODS = [
    RecognitionMethod.MEMORY,
    RecognitionMethod.RECOGNITION,
    RecognitionMethod.EDUCATED_GUESS,
    RecognitionMethod.RANDOM_GUESS,
]

_AVAILABLE = {
    # Nothing to recognize and nothing to pick at random
    QuestionFormat.OPEN_ENDED: [RecognitionMethod.MEMORY, RecognitionMethod.EDUCATED_GUESS],
    # True and False are not recognizable answers
    QuestionFormat.TRUE_FALSE: [
        RecognitionMethod.MEMORY,
        RecognitionMethod.EDUCATED_GUESS,
        RecognitionMethod.RANDOM_GUESS,
    ],
}

_DEFAULTS = {
    QuestionFormat.OPEN_ENDED: RecognitionMethod.EDUCATED_GUESS,
    QuestionFormat.TRUE_FALSE: RecognitionMethod.EDUCATED_GUESS,
    QuestionFormat.SINGLE_CHOICE: RecognitionMethod.RECOGNITION,
    QuestionFormat.MULTI_CHOICE: RecognitionMethod.RECOGNITION,
    QuestionFormat.FILL_BLANK: RecognitionMethod.MEMORY,
}


def available_recognition_methods(question_format: QuestionFormat) -> List[RecognitionMethod]:
    return list(_AVAILABLE.get(question_format, ALL_METHODS))


def default_recognition_method(question_format: QuestionFormat) -> RecognitionMethod:
    return _DEFAULTS.get(question_format, RecognitionMethod.RECOGNITION)


def unavailable_method_reason(question_format: QuestionFormat) -> str:
    if question_format == QuestionFormat.OPEN_ENDED:
        return ("For open-ended questions there are no options to recognize or guess between, "
                "so only memory recall and educated reasoning are available.")
    if question_format == QuestionFormat.TRUE_FALSE:
        return ("For true/false questions recognition does not apply: "
                "you either know it, reason it out, or guess.")
    return ""


def check_recognition_method(question_format: QuestionFormat, method: RecognitionMethod):
    if method not in available_recognition_methods(question_format):
        raise InvalidRecognitionMethod(
            f"'{method.value}' is not available for {question_format.value} questions. "
            f"{unavailable_method_reason(question_format)}".strip()
        )
