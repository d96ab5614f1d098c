"""Pydantic schemas for generated quizzes and test sessions."""

from datetime import datetime
from enum import Enum as PyEnum

from pydantic import BaseModel, ConfigDict, Field

UNANSWERED = -1


class QuestionType(str, PyEnum):
    """Generated question type."""

    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"


class Difficulty(str, PyEnum):
    """Difficulty label (assigned at random, not derived from content)."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class TestType(str, PyEnum):
    """Quick test (one topic) or specific test (whole chapter)."""

    __test__ = False

    QUICK = "quick"
    SPECIFIC = "specific"


class ResultStatus(str, PyEnum):
    """How a session ended."""

    SUBMITTED = "submitted"
    EXPIRED = "expired"


# ============================================================================
# Questions
# ============================================================================


class Question(BaseModel):
    """A generated quiz question."""

    model_config = ConfigDict(frozen=True)

    id: str
    topic_id: str
    chapter_id: str
    subject_id: str
    class_id: str
    type: QuestionType
    question: str
    options: list[str]
    correct_answer: int
    explanation: str
    difficulty: Difficulty
    timestamp: int  # epoch ms
    related_concept: str | None = None


# ============================================================================
# Sessions
# ============================================================================


class TestConfig(BaseModel):
    """Input to start a test session."""

    __test__ = False

    questions: list[Question]
    test_type: TestType
    class_id: str
    subject_id: str
    chapter_id: str | None = None
    topic_id: str | None = None
    duration_seconds: int | None = Field(None, ge=1, description="Optional time limit")


class TestSession(BaseModel):
    """The single in-progress attempt."""

    __test__ = False

    test_id: str
    questions: list[Question]
    user_answers: list[int]
    current_question_index: int = 0
    start_time: int  # epoch ms
    test_type: TestType
    class_id: str
    subject_id: str
    chapter_id: str | None = None
    topic_id: str | None = None
    duration_seconds: int | None = None

    @property
    def expires_at(self) -> int | None:
        if self.duration_seconds is None:
            return None
        return self.start_time + self.duration_seconds * 1000


class BucketScore(BaseModel):
    """Correct/total pair for one difficulty bucket."""

    model_config = ConfigDict(frozen=True)

    correct: int = 0
    total: int = 0


class ScoreBreakdown(BaseModel):
    """Per-difficulty score buckets."""

    model_config = ConfigDict(frozen=True)

    easy: BucketScore = Field(default_factory=BucketScore)
    medium: BucketScore = Field(default_factory=BucketScore)
    hard: BucketScore = Field(default_factory=BucketScore)


class TestResult(BaseModel):
    """Graded attempt, immutable once created."""

    __test__ = False
    model_config = ConfigDict(frozen=True)

    test_id: str
    test_type: TestType
    class_id: str
    subject_id: str
    chapter_id: str | None = None
    topic_id: str | None = None
    score: int  # 0-100
    total_questions: int
    correct_answers: int
    time_taken: int  # ms
    completed_at: datetime
    questions: list[Question]
    user_answers: list[int]
    score_breakdown: ScoreBreakdown
    status: ResultStatus = ResultStatus.SUBMITTED


class TestStoreState(BaseModel):
    """Persisted state of the test store."""

    __test__ = False

    test_history: list[TestResult] = Field(default_factory=list)
    current_session: TestSession | None = None
    recently_asked_question_ids: list[str] = Field(default_factory=list)


# ============================================================================
# API payloads
# ============================================================================


class QuickTestRequest(BaseModel):
    """Generate questions for one topic."""

    topic_id: str
    class_id: str
    subject_id: str
    chapter_id: str


class SpecificTestRequest(BaseModel):
    """Generate questions for a whole chapter."""

    class_id: str
    subject_id: str
    chapter_id: str


class StartTestRequest(BaseModel):
    """Generate and start a test in one call."""

    test_type: TestType
    class_id: str
    subject_id: str
    chapter_id: str
    topic_id: str | None = None
    duration_seconds: int | None = Field(None, ge=1)
    replace: bool = False


class AnswerSubmit(BaseModel):
    """Answer for the current question."""

    answer_index: int = Field(..., ge=0)


class SessionProgress(BaseModel):
    """Session progress summary."""

    answered_count: int
    total_questions: int
    current_question_index: int


class SessionStateOut(BaseModel):
    """Current session with its progress."""

    test_id: str
    test_type: TestType
    current_question: Question
    progress: SessionProgress
    user_answers: list[int]
    expires_at: int | None = None


class HistorySummary(BaseModel):
    """Aggregate history figures."""

    total_tests_taken: int
    average_score: int
