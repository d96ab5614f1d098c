"""Quiz test endpoints: question generation, session lifecycle and history."""

from fastapi import APIRouter, Query, Response, status

from app.core.app_exceptions import AppError, NotFoundError
from app.core.dependencies import MutableStateDep, StateDep
from app.schemas.test import (
    AnswerSubmit,
    HistorySummary,
    Question,
    QuickTestRequest,
    SessionStateOut,
    SpecificTestRequest,
    StartTestRequest,
    TestConfig,
    TestResult,
    TestType,
)
from app.services.test_engine import TestEngine

router = APIRouter()


def _session_state(engine: TestEngine) -> SessionStateOut:
    question = engine.get_current_question()
    session = engine.current_session
    return SessionStateOut(
        test_id=session.test_id,
        test_type=session.test_type,
        current_question=question,
        progress=engine.get_progress(),
        user_answers=list(session.user_answers),
        expires_at=session.expires_at,
    )


# ============================================================================
# Question generation
# ============================================================================


@router.post("/questions/quick", response_model=list[Question])
def generate_quick_questions(payload: QuickTestRequest, state: StateDep) -> list[Question]:
    """3-5 questions from one topic (empty for an unknown or empty topic)."""
    return state.generator.generate_quick_test_questions(
        payload.topic_id, payload.class_id, payload.subject_id, payload.chapter_id
    )


@router.post("/questions/specific", response_model=list[Question])
def generate_specific_questions(payload: SpecificTestRequest, state: StateDep) -> list[Question]:
    """10-15 questions across a chapter."""
    return state.generator.generate_specific_test_questions(
        payload.class_id, payload.subject_id, payload.chapter_id
    )


# ============================================================================
# Session lifecycle
# ============================================================================


@router.post("/sessions", response_model=SessionStateOut, status_code=status.HTTP_201_CREATED)
def start_test(payload: StartTestRequest, state: MutableStateDep) -> SessionStateOut:
    """Generate questions and start a session."""
    if payload.test_type == TestType.QUICK:
        if not payload.topic_id:
            raise AppError(
                "Quick tests need a topic_id",
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                code="VALIDATION_ERROR",
                details=[{"field": "body.topic_id", "issue": "Field required for quick tests"}],
            )
        questions = state.generator.generate_quick_test_questions(
            payload.topic_id, payload.class_id, payload.subject_id, payload.chapter_id
        )
    else:
        questions = state.generator.generate_specific_test_questions(
            payload.class_id, payload.subject_id, payload.chapter_id
        )

    state.tests.start_test(
        TestConfig(
            questions=questions,
            test_type=payload.test_type,
            class_id=payload.class_id,
            subject_id=payload.subject_id,
            chapter_id=payload.chapter_id,
            topic_id=payload.topic_id,
            duration_seconds=payload.duration_seconds,
        ),
        replace=payload.replace,
    )
    return _session_state(state.tests)


@router.get("/sessions/current", response_model=SessionStateOut)
def get_current_session(state: MutableStateDep) -> SessionStateOut:
    return _session_state(state.tests)


@router.post("/sessions/current/answer", response_model=SessionStateOut)
def answer_question(payload: AnswerSubmit, state: MutableStateDep) -> SessionStateOut:
    state.tests.answer_question(payload.answer_index)
    return _session_state(state.tests)


@router.post("/sessions/current/next", response_model=SessionStateOut)
def next_question(state: MutableStateDep) -> SessionStateOut:
    state.tests.go_to_next_question()
    return _session_state(state.tests)


@router.post("/sessions/current/previous", response_model=SessionStateOut)
def previous_question(state: MutableStateDep) -> SessionStateOut:
    state.tests.go_to_previous_question()
    return _session_state(state.tests)


@router.post("/sessions/current/submit", response_model=TestResult)
def submit_test(state: MutableStateDep) -> TestResult:
    return state.tests.submit_test()


@router.delete("/sessions/current", status_code=status.HTTP_204_NO_CONTENT)
def cancel_test(state: MutableStateDep) -> Response:
    state.tests.cancel_test()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# History
# ============================================================================


@router.get("/history", response_model=list[TestResult])
def get_history(
    state: StateDep,
    chapter_id: str | None = Query(None),
    topic_id: str | None = Query(None),
) -> list[TestResult]:
    """Results newest first, optionally narrowed to a topic or chapter."""
    if topic_id:
        return state.tests.get_test_history_for_topic(topic_id)
    if chapter_id:
        return state.tests.get_test_history_for_chapter(chapter_id)
    return state.tests.get_test_history()


@router.get("/history/summary", response_model=HistorySummary)
def get_history_summary(state: StateDep) -> HistorySummary:
    return HistorySummary(
        total_tests_taken=state.tests.get_total_tests_taken(),
        average_score=state.tests.get_average_score(),
    )


@router.get("/results/{test_id}", response_model=TestResult)
def get_result(test_id: str, state: StateDep) -> TestResult:
    result = state.tests.get_test_result(test_id)
    if result is None:
        raise NotFoundError(f"Test result {test_id} not found", details={"test_id": test_id})
    return result


@router.delete("/recently-asked", status_code=status.HTTP_204_NO_CONTENT)
def clear_recently_asked(state: MutableStateDep) -> Response:
    state.tests.clear_recently_asked()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
