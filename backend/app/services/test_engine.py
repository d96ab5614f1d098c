"""Test session engine: session lifecycle, scoring on submit, and history.

States: no session -> active -> (submitted | expired | cancelled) -> no session.
At most one session is active at a time.
"""

import random
from typing import Callable

from app.common.clock import Clock, make_id, now_ms
from app.core.app_exceptions import (
    EmptyTestError,
    InvalidAnswerError,
    NoActiveSessionError,
    SessionAlreadyActiveError,
    SessionExpiredError,
)
from app.core.logging import get_logger
from app.schemas.test import (
    UNANSWERED,
    Question,
    ResultStatus,
    SessionProgress,
    TestConfig,
    TestResult,
    TestSession,
    TestStoreState,
)
from app.services.scoring import round_half_up, score_quiz_session

logger = get_logger(__name__)

RECENTLY_ASKED_LIMIT = 200

ResultListener = Callable[[TestResult], None]


class TestEngine:
    """Owns the active session, the result history and the recently-asked pool."""

    __test__ = False

    STORE_NAME = "learnsmart-tests"
    STORE_VERSION = 1

    def __init__(
        self,
        state: TestStoreState | None = None,
        clock: Clock = now_ms,
        rng: random.Random | None = None,
        on_result: ResultListener | None = None,
    ):
        self.state = state or TestStoreState()
        self.clock = clock
        self.rng = rng or random.Random()
        self.on_result = on_result

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    @property
    def current_session(self) -> TestSession | None:
        return self.state.current_session

    def start_test(self, config: TestConfig, replace: bool = False) -> str:
        """
        Start a new session.

        Args:
            config: Questions and curriculum location
            replace: Discard an active session instead of failing

        Returns:
            New test id

        Raises:
            EmptyTestError: If config has no questions
            SessionAlreadyActiveError: If a session is active and replace is False
        """
        if not config.questions:
            raise EmptyTestError("Cannot start a test without questions")

        self.check_and_expire_session()
        active = self.state.current_session
        if active is not None:
            if not replace:
                raise SessionAlreadyActiveError(active.test_id)
            logger.info("test_session_replaced", extra={"test_id": active.test_id})

        now = self.clock()
        session = TestSession(
            test_id=make_id("test", now, self.rng),
            questions=list(config.questions),
            user_answers=[UNANSWERED] * len(config.questions),
            current_question_index=0,
            start_time=now,
            test_type=config.test_type,
            class_id=config.class_id,
            subject_id=config.subject_id,
            chapter_id=config.chapter_id,
            topic_id=config.topic_id,
            duration_seconds=config.duration_seconds,
        )
        self.state.current_session = session

        logger.info(
            "test_session_started",
            extra={
                "test_id": session.test_id,
                "test_type": session.test_type.value,
                "question_count": len(session.questions),
                "duration_seconds": session.duration_seconds,
            },
        )
        return session.test_id

    def answer_question(self, answer_index: int) -> None:
        """Record an answer for the current question (last write wins)."""
        session = self._require_active("answer a question")
        question = session.questions[session.current_question_index]
        if not 0 <= answer_index < len(question.options):
            raise InvalidAnswerError(
                f"Answer index {answer_index} is out of range for this question",
                details={"answer_index": answer_index, "option_count": len(question.options)},
            )
        session.user_answers[session.current_question_index] = answer_index

    def go_to_next_question(self) -> None:
        session = self._require_active("move to the next question")
        if session.current_question_index < len(session.questions) - 1:
            session.current_question_index += 1

    def go_to_previous_question(self) -> None:
        session = self._require_active("move to the previous question")
        if session.current_question_index > 0:
            session.current_question_index -= 1

    def get_current_question(self) -> Question:
        session = self._require_active("read the current question")
        return session.questions[session.current_question_index]

    def get_progress(self) -> SessionProgress:
        session = self._require_active("read progress")
        return SessionProgress(
            answered_count=sum(1 for a in session.user_answers if a != UNANSWERED),
            total_questions=len(session.questions),
            current_question_index=session.current_question_index,
        )

    def submit_test(self) -> TestResult:
        """
        Grade and close the active session.

        An expired session is graded with status EXPIRED. Submitting with no
        active session (including a second submit) raises and records nothing.

        Raises:
            NoActiveSessionError: If no session is active
        """
        expired = self.check_and_expire_session()
        if expired is not None:
            return expired

        session = self.state.current_session
        if session is None:
            raise NoActiveSessionError("submit the test")

        return self._finish(session, ResultStatus.SUBMITTED)

    def cancel_test(self) -> None:
        session = self._require_active("cancel the test")
        self.state.current_session = None
        logger.info("test_session_cancelled", extra={"test_id": session.test_id})

    def check_and_expire_session(self) -> TestResult | None:
        """
        Auto-submit the active session if its time limit has passed (lazy expiry).

        Returns:
            The EXPIRED result if the session was auto-submitted, else None
        """
        session = self.state.current_session
        if session is None or session.expires_at is None:
            return None
        if self.clock() <= session.expires_at:
            return None
        return self._finish(session, ResultStatus.EXPIRED)

    def _require_active(self, operation: str) -> TestSession:
        session = self.state.current_session
        if session is None:
            raise NoActiveSessionError(operation)
        expired = self.check_and_expire_session()
        if expired is not None:
            raise SessionExpiredError(expired.test_id, operation)
        return session

    def _finish(self, session: TestSession, status: ResultStatus) -> TestResult:
        result = score_quiz_session(session, self.clock(), status=status)

        history = self.state.test_history
        history.insert(0, result)
        asked = self.state.recently_asked_question_ids + [q.id for q in session.questions]
        self.state.recently_asked_question_ids = asked[-RECENTLY_ASKED_LIMIT:]
        self.state.current_session = None

        logger.info(
            "test_session_finished",
            extra={
                "test_id": result.test_id,
                "status": status.value,
                "score": result.score,
                "correct_answers": result.correct_answers,
                "total_questions": result.total_questions,
                "time_taken_ms": result.time_taken,
            },
        )

        if self.on_result is not None:
            self.on_result(result)

        return result

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def get_test_history(self) -> list[TestResult]:
        """Results, newest first."""
        return list(self.state.test_history)

    def get_test_history_for_chapter(self, chapter_id: str) -> list[TestResult]:
        return [r for r in self.state.test_history if r.chapter_id == chapter_id]

    def get_test_history_for_topic(self, topic_id: str) -> list[TestResult]:
        return [r for r in self.state.test_history if r.topic_id == topic_id]

    def get_test_result(self, test_id: str) -> TestResult | None:
        return next((r for r in self.state.test_history if r.test_id == test_id), None)

    def get_average_score(self) -> int:
        history = self.state.test_history
        if not history:
            return 0
        return round_half_up(sum(r.score for r in history) / len(history))

    def get_total_tests_taken(self) -> int:
        return len(self.state.test_history)

    # ------------------------------------------------------------------
    # Recently asked pool (not consulted by the generator)
    # ------------------------------------------------------------------

    def mark_question_as_asked(self, question_id: str) -> None:
        asked = self.state.recently_asked_question_ids + [question_id]
        self.state.recently_asked_question_ids = asked[-RECENTLY_ASKED_LIMIT:]

    def is_question_recently_asked(self, question_id: str) -> bool:
        return question_id in self.state.recently_asked_question_ids

    def clear_recently_asked(self) -> None:
        self.state.recently_asked_question_ids = []
