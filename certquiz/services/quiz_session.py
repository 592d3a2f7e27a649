# FILE: certquiz/services/quiz_session.py
"""
Quiz session state machine

    confidence -> answer -> recognition -> results -> confidence (next question)
                                                   `-> summary (last question)
    summary --retry--> confidence (question 0, reshuffled, score reset)

Transitions are pure functions from Session to Session. The only
suspending transition is grading (recognition -> results), which may
call out to a grading sink. SessionController owns one Session and
rejects transitions while a grade is in flight.
"""
import asyncio
import logging
import math
import random
import uuid
from typing import Callable, List, Optional, Sequence

from certquiz.models.questions import Question
from certquiz.models.results import Result
from certquiz.models.sessions import QuizStep, Session, SessionSnapshot
from certquiz.models.submissions import (
    Confidence, RawAnswer, RecognitionMethod, Submission, is_empty_answer
)
from certquiz.services.calibration import calibration_label, calibration_score
from certquiz.services.errors import (
    EmptySubmission, EmptyTopic, GradingInProgress, GradingSinkError,
    GradingTimeout, InvalidTransition, QuestionError
)
from certquiz.services.evaluator import DEFAULT_POLICY, EvaluationPolicy, check_question, evaluate
from certquiz.services.explanations import select_explanations
from certquiz.services.grading_sink import GradingSink
from certquiz.services.recognition import available_recognition_methods, check_recognition_method
from certquiz.services.spaced_repetition import review_interval_hours
from certquiz.services.telemetry import record_event

logger = logging.getLogger(__name__)

ShuffleFn = Callable[[List[Question]], List[Question]]


def seeded_shuffle(seed: Optional[int] = None) -> ShuffleFn:
    """Shuffle function drawing from its own RNG; pass a seed for repeatable order"""
    rng = random.Random(seed)

    def shuffle(questions: List[Question]) -> List[Question]:
        items = list(questions)
        rng.shuffle(items)
        return items

    return shuffle


def keep_order(questions: List[Question]) -> List[Question]:
    return list(questions)


def restore_order(questions: Sequence[Question], saved_ids: Sequence[str]) -> List[Question]:
    """Saved order first, then questions added since the order was saved"""
    by_id = {q.id: q for q in questions}
    ordered = [by_id[qid] for qid in saved_ids if qid in by_id]
    seen = {q.id for q in ordered}
    ordered.extend(q for q in questions if q.id not in seen)
    return ordered


def _require(session: Session, action: str, *steps: QuizStep):
    if session.step not in steps:
        allowed = ", ".join(s.value for s in steps)
        logger.debug(f"Rejected {action} in session {session.session_id} at step {session.step.value}")
        raise InvalidTransition(f"Cannot {action} during '{session.step.value}' (allowed: {allowed})")


def _fresh_question_state() -> dict:
    return {"confidence": None, "answer": None, "result": None}


def start_session(
    topic_id: str,
    questions: Sequence[Question],
    shuffle: ShuffleFn,
    session_id: Optional[str] = None
) -> Session:
    """
    Create a session over the gradable questions, shuffled once

    Questions that cannot be graded are logged and left out of the
    denominator. Raises EmptyTopic when nothing gradable remains.
    """
    usable: List[Question] = []
    skipped: List[str] = []
    for question in questions:
        try:
            check_question(question)
        except QuestionError as e:
            logger.warning(f"Skipping question {question.id} in topic '{topic_id}': {e.message}")
            skipped.append(question.id)
            continue
        usable.append(question)

    if not usable:
        raise EmptyTopic(topic_id)

    return Session(
        session_id=session_id or uuid.uuid4().hex,
        topic_id=topic_id,
        questions=shuffle(usable),
        skipped_question_ids=skipped
    )


def choose_confidence(session: Session, confidence: Confidence) -> Session:
    _require(session, "choose confidence", QuizStep.CONFIDENCE)
    return session.model_copy(update={
        "confidence": Confidence(confidence),
        "step": QuizStep.ANSWER
    })


def submit_answer(session: Session, answer: RawAnswer) -> Session:
    """Lock in the answer; empty answers keep the session in the answer step"""
    _require(session, "submit an answer", QuizStep.ANSWER)
    if is_empty_answer(answer):
        raise EmptySubmission("An answer is required before continuing")
    if not isinstance(answer, str):
        answer = [a for a in answer if a.strip()]
    return session.model_copy(update={"answer": answer, "step": QuizStep.RECOGNITION})


def build_result(
    question: Question,
    submission: Submission,
    policy: EvaluationPolicy = DEFAULT_POLICY,
    use_recognition: bool = False,
    is_correct: Optional[bool] = None
) -> Result:
    """Grade a submission locally; is_correct overrides the local verdict"""
    evaluation = evaluate(question, submission.raw_answer, policy)
    verdict = evaluation.is_correct if is_correct is None else is_correct
    score = calibration_score(
        submission.confidence, submission.recognition_method, verdict, use_recognition
    )
    return Result(
        question_id=question.id,
        format=question.format,
        is_correct=verdict,
        canonical_correct_answer=evaluation.canonical_correct_answer,
        calibration_score=score,
        calibration_label=calibration_label(score),
        review_interval_hours=review_interval_hours(score),
        explanation_blocks=select_explanations(
            question.explanation, question.correct_answer, submission.raw_answer, question.options
        ),
        confidence=submission.confidence,
        recognition_method=submission.recognition_method,
        user_answer=submission.raw_answer,
        difficulty_tag=question.difficulty_tag
    )


def _reconcile(
    question: Question,
    submission: Submission,
    local: Result,
    authoritative: Result,
    policy: EvaluationPolicy,
    use_recognition: bool
) -> Result:
    if authoritative.question_id != question.id:
        raise GradingSinkError(
            f"Grading service answered for {authoritative.question_id}, expected {question.id}"
        )
    if authoritative.is_correct == local.is_correct:
        return authoritative
    logger.info(f"Grading service overrode verdict for {question.id}: {authoritative.is_correct}")
    rescored = build_result(question, submission, policy, use_recognition, authoritative.is_correct)
    return rescored.model_copy(update={
        "canonical_correct_answer": authoritative.canonical_correct_answer
    })


async def grade(
    session: Session,
    recognition_method: RecognitionMethod,
    sink: Optional[GradingSink] = None,
    policy: EvaluationPolicy = DEFAULT_POLICY,
    use_recognition: bool = False,
    timeout: Optional[float] = None
) -> Session:
    """
    Grade the locked-in answer and move to results

    When the sink fails, a best-effort sink falls back to the local
    result; otherwise the error propagates and the caller keeps the
    unchanged session (still in recognition) for a retry.
    """
    _require(session, "submit a recognition method", QuizStep.RECOGNITION)
    question = session.current_question
    method = RecognitionMethod(recognition_method)
    check_recognition_method(question.format, method)

    submission = Submission(
        question_id=question.id,
        confidence=session.confidence,
        recognition_method=method,
        raw_answer=session.answer
    )
    local = build_result(question, submission, policy, use_recognition)
    result = local

    if sink is not None:
        attempt_id = f"{session.session_id}:{session.pass_number}:{session.cursor}:{question.id}"
        try:
            pending = sink.submit(question, submission, local, attempt_id=attempt_id)
            if timeout:
                authoritative = await asyncio.wait_for(pending, timeout)
            else:
                authoritative = await pending
            result = _reconcile(question, submission, local, authoritative, policy, use_recognition)
        except (GradingSinkError, asyncio.TimeoutError) as e:
            if isinstance(e, asyncio.TimeoutError):
                e = GradingTimeout(f"Grading service timed out after {timeout}s")
            if not sink.best_effort:
                logger.error(f"Grading failed for {question.id}; session stays in recognition: {e.message}")
                raise e
            logger.warning(f"Grading sink failed for {question.id}, using local result: {e.message}")
            result = local

    return session.model_copy(update={
        "step": QuizStep.RESULTS,
        "result": result,
        "results": session.results + [result],
        "correct_count": session.correct_count + (1 if result.is_correct else 0)
    })


def next_question(session: Session) -> Session:
    """Advance past results; a no-op once the summary is reached"""
    if session.step == QuizStep.SUMMARY:
        return session
    _require(session, "advance", QuizStep.RESULTS)

    if session.cursor + 1 >= session.total_questions:
        return session.model_copy(update={"step": QuizStep.SUMMARY, **_fresh_question_state()})

    return session.model_copy(update={
        "cursor": session.cursor + 1,
        "step": QuizStep.CONFIDENCE,
        **_fresh_question_state()
    })


def retry(session: Session, shuffle: ShuffleFn) -> Session:
    """Start over from the summary with a new order and a zero score"""
    _require(session, "retry", QuizStep.SUMMARY)
    return session.model_copy(update={
        "questions": shuffle(session.questions),
        "pass_number": session.pass_number + 1,
        "cursor": 0,
        "step": QuizStep.CONFIDENCE,
        "correct_count": 0,
        "results": [],
        **_fresh_question_state()
    })


def percentage(session: Session) -> int:
    """Correct answers as a whole percentage, halves rounded up"""
    if not session.total_questions:
        return 0
    return int(math.floor(session.correct_count / session.total_questions * 100 + 0.5))


def snapshot(session: Session) -> SessionSnapshot:
    total = session.total_questions
    question = session.current_question

    if session.step == QuizStep.SUMMARY:
        progress = 1.0
        number = total
    elif session.step == QuizStep.RESULTS:
        progress = (session.cursor + 1) / total
        number = session.cursor + 1
    else:
        progress = session.cursor / total
        number = session.cursor + 1

    return SessionSnapshot(
        session_id=session.session_id,
        topic_id=session.topic_id,
        step=session.step,
        question_number=number,
        total_questions=total,
        correct_count=session.correct_count,
        progress=progress,
        question=question,
        result=session.result,
        percentage=percentage(session) if session.step == QuizStep.SUMMARY else None,
        available_recognition_methods=(
            available_recognition_methods(question.format) if question else []
        ),
        skipped_question_ids=list(session.skipped_question_ids)
    )


class SessionController:
    """Owns one session; one transition at a time, none while grading"""

    def __init__(
        self,
        session: Session,
        shuffle: ShuffleFn,
        sink: Optional[GradingSink] = None,
        policy: EvaluationPolicy = DEFAULT_POLICY,
        use_recognition: bool = False,
        timeout: Optional[float] = None
    ):
        self._session = session
        self._shuffle = shuffle
        self._sink = sink
        self._policy = policy
        self._use_recognition = use_recognition
        self._timeout = timeout
        self._grading = False

    @classmethod
    def start(
        cls,
        topic_id: str,
        questions: Sequence[Question],
        shuffle: ShuffleFn,
        **kwargs
    ) -> "SessionController":
        session = start_session(topic_id, questions, shuffle)
        record_event(
            "session_started",
            session_id=session.session_id,
            topic_id=topic_id,
            total_questions=session.total_questions,
            skipped=len(session.skipped_question_ids)
        )
        logger.info(f"Started session {session.session_id} on '{topic_id}' "
                    f"with {session.total_questions} questions")
        return cls(session, shuffle, **kwargs)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def grading(self) -> bool:
        return self._grading

    def _guard(self):
        if self._grading:
            raise GradingInProgress()

    def snapshot(self) -> SessionSnapshot:
        return snapshot(self._session)

    def choose_confidence(self, confidence: Confidence) -> SessionSnapshot:
        self._guard()
        self._session = choose_confidence(self._session, confidence)
        return self.snapshot()

    def submit_answer(self, answer: RawAnswer) -> SessionSnapshot:
        self._guard()
        self._session = submit_answer(self._session, answer)
        return self.snapshot()

    async def submit_recognition(self, method: RecognitionMethod) -> SessionSnapshot:
        self._guard()
        self._grading = True
        try:
            self._session = await grade(
                self._session,
                method,
                sink=self._sink,
                policy=self._policy,
                use_recognition=self._use_recognition,
                timeout=self._timeout
            )
        finally:
            self._grading = False

        result = self._session.result
        record_event(
            "answer_graded",
            session_id=self._session.session_id,
            question_id=result.question_id,
            format=result.format.value,
            is_correct=result.is_correct,
            confidence=int(result.confidence),
            recognition_method=result.recognition_method.value,
            calibration_score=result.calibration_score
        )
        return self.snapshot()

    def next(self) -> SessionSnapshot:
        self._guard()
        before = self._session.step
        self._session = next_question(self._session)
        if before == QuizStep.RESULTS and self._session.step == QuizStep.SUMMARY:
            record_event(
                "session_completed",
                session_id=self._session.session_id,
                topic_id=self._session.topic_id,
                correct=self._session.correct_count,
                total=self._session.total_questions,
                percentage=percentage(self._session)
            )
        return self.snapshot()

    def retry(self) -> SessionSnapshot:
        self._guard()
        self._session = retry(self._session, self._shuffle)
        record_event("session_retried", session_id=self._session.session_id)
        return self.snapshot()
