"""Pydantic schemas for learning analytics."""

from pydantic import BaseModel, Field


class DailyActivity(BaseModel):
    """Activity counters for one calendar day."""

    date: str  # YYYY-MM-DD
    lessons_completed: int = 0
    quizzes_taken: int = 0
    quizzes_passed: int = 0
    average_quiz_score: float = 0.0
    tests_taken: int = 0
    average_test_score: float = 0.0
    minutes_spent: int = 0
    credits_earned: int = 0
    credits_used: int = 0


class AnalyticsState(BaseModel):
    """Persisted analytics store."""

    daily_activity: dict[str, DailyActivity] = Field(default_factory=dict)
    subject_minutes: dict[str, int] = Field(default_factory=dict)


class StudentStats(BaseModel):
    """Totals over all tracked days."""

    total_lessons_completed: int
    total_quizzes_taken: int
    total_quizzes_passed: int
    average_quiz_score: int
    total_tests_taken: int
    average_test_score: int
    total_credits_used: int
    total_credits_earned: int
    learning_time: int  # minutes
    active_days: int
    top_subject: str | None


# ============================================================================
# API payloads
# ============================================================================


class LessonCompletedRequest(BaseModel):
    subject_id: str | None = None
    duration_minutes: int = Field(0, ge=0)


class TimeSpentRequest(BaseModel):
    minutes: int = Field(..., ge=1)
