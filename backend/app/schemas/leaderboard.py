"""Pydantic schemas for leaderboards."""

from datetime import datetime
from enum import Enum as PyEnum

from pydantic import BaseModel, Field


class LeaderboardType(str, PyEnum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ALL_TIME = "allTime"


class UserScore(BaseModel):
    """Per-user aggregate counters; total_points is always recomputed."""

    user_id: str
    username: str = "User"
    total_points: int = 0
    streak_points: int = 0
    achievement_points: int = 0
    credits_used: int = 0
    lessons_completed: int = 0
    quizzes_passed: int = 0
    badges_count: int = 0
    achievements_count: int = 0
    last_active: datetime


class LeaderboardEntry(BaseModel):
    """Ranked row derived from a UserScore."""

    user_id: str
    username: str
    rank: int
    points: int
    streak_days: int
    badges_count: int
    last_active: datetime


class UserRank(BaseModel):
    """A user's position on one board."""

    user_id: str
    rank: int
    total_points: int
    points_to_next_rank: int | None = None
    is_in_top_x: bool = False


class LeaderboardState(BaseModel):
    """Persisted leaderboards keyed by user id."""

    weekly: dict[str, UserScore] = Field(default_factory=dict)
    monthly: dict[str, UserScore] = Field(default_factory=dict)
    all_time: dict[str, UserScore] = Field(default_factory=dict)


class ActivityUpdate(BaseModel):
    """Counters reported by an activity; omitted fields keep their value."""

    username: str | None = None
    lessons_completed: int | None = Field(None, ge=0)
    quizzes_passed: int | None = Field(None, ge=0)
    credits_used: int | None = Field(None, ge=0)
    streak_days: int | None = Field(None, ge=0)
    badges_count: int | None = Field(None, ge=0)
    achievements_count: int | None = Field(None, ge=0)


class LeaderboardStats(BaseModel):
    weekly_rank: UserRank | None
    monthly_rank: UserRank | None
    all_time_rank: UserRank | None
