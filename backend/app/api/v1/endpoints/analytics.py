"""Learning analytics endpoints."""

from fastapi import APIRouter, Path

from app.core.app_exceptions import NotFoundError
from app.core.dependencies import MutableStateDep, StateDep
from app.gamification.achievements import check_lesson_completed_achievement
from app.schemas.analytics import (
    DailyActivity,
    LessonCompletedRequest,
    StudentStats,
    TimeSpentRequest,
)
from app.schemas.leaderboard import ActivityUpdate

router = APIRouter()


@router.get("/stats", response_model=StudentStats)
def get_stats(state: StateDep) -> StudentStats:
    return state.analytics.get_stats()


@router.get("/daily/{date}", response_model=DailyActivity)
def get_daily_activity(
    state: StateDep,
    date: str = Path(..., pattern=r"^\d{4}-\d{2}-\d{2}$"),
) -> DailyActivity:
    activity = state.analytics.get_daily_activity(date)
    if activity is None:
        raise NotFoundError(f"No activity recorded on {date}", details={"date": date})
    return activity


@router.post("/lessons", response_model=DailyActivity)
def track_lesson_completed(payload: LessonCompletedRequest, state: MutableStateDep) -> DailyActivity:
    """Record a finished lesson and refresh the lesson achievement and leaderboard."""
    activity = state.analytics.track_lesson_completed(payload.subject_id, payload.duration_minutes)
    stats = state.analytics.get_stats()

    check_lesson_completed_achievement(state.achievements, stats.total_lessons_completed)
    state.leaderboards.update_user_score(
        state.user_id,
        ActivityUpdate(
            username=state.username,
            lessons_completed=stats.total_lessons_completed,
            achievements_count=state.achievements.unlocked_count(),
        ),
    )
    return activity


@router.post("/time", response_model=DailyActivity)
def track_time_spent(payload: TimeSpentRequest, state: MutableStateDep) -> DailyActivity:
    return state.analytics.track_time_spent(payload.minutes)
