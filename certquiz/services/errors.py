# FILE: certquiz/services/errors.py
"""
Quiz error taxonomy

Every error carries the HTTP status the API layer answers with.
"""


class QuizError(Exception):
    """Base class for quiz engine errors"""

    status_code = 400
    code = "quiz_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__


class QuestionError(QuizError):
    """Question cannot be graded"""

    status_code = 422
    code = "question_error"

    def __init__(self, question_id: str, message: str = ""):
        super().__init__(message)
        self.question_id = question_id


class MalformedQuestion(QuestionError):
    """Question is missing data its format requires"""

    code = "malformed_question"


class UnsupportedFormat(QuestionError):
    """Question format is not supported"""

    code = "unsupported_format"


class EmptySubmission(QuizError):
    """An answer is required before continuing"""

    status_code = 422
    code = "empty_submission"


class InvalidRecognitionMethod(QuizError):
    """Recognition method is not available for this question format"""

    status_code = 422
    code = "invalid_recognition_method"


class EmptyTopic(QuizError):
    """No questions available for this topic yet"""

    status_code = 404
    code = "empty_topic"

    def __init__(self, topic_id: str):
        super().__init__(f"No questions available for topic '{topic_id}'")
        self.topic_id = topic_id


class InvalidTransition(QuizError):
    """Transition is not allowed from the current step"""

    status_code = 409
    code = "invalid_transition"


class GradingInProgress(QuizError):
    """A submission for this session is still being graded"""

    status_code = 409
    code = "grading_in_progress"


class GradingSinkError(QuizError):
    """Grading service failed"""

    status_code = 502
    code = "grading_failed"


class GradingTimeout(GradingSinkError):
    """Grading service timed out"""

    status_code = 504
    code = "grading_timeout"


class SessionNotFound(QuizError):
    """Quiz session not found"""

    status_code = 404
    code = "session_not_found"
