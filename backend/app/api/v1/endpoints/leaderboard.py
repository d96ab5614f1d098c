"""Leaderboard endpoints."""

from fastapi import APIRouter, Query

from app.core.dependencies import MutableStateDep, StateDep
from app.gamification.leaderboard import DEFAULT_LIMIT
from app.schemas.leaderboard import (
    ActivityUpdate,
    LeaderboardEntry,
    LeaderboardStats,
    LeaderboardType,
)

router = APIRouter()


@router.get("/me", response_model=LeaderboardStats)
def get_my_ranks(state: StateDep) -> LeaderboardStats:
    return state.leaderboards.get_leaderboard_stats(state.user_id)


@router.post("/me/activity", response_model=LeaderboardStats)
def report_activity(payload: ActivityUpdate, state: MutableStateDep) -> LeaderboardStats:
    """Merge the local user's counters into every board."""
    if payload.username is None:
        payload = payload.model_copy(update={"username": state.username})
    return state.leaderboards.update_user_score(state.user_id, payload)


@router.get("/{board}", response_model=list[LeaderboardEntry])
def get_leaderboard(
    board: LeaderboardType,
    state: StateDep,
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=1000),
) -> list[LeaderboardEntry]:
    return state.leaderboards.get_leaderboard(board, limit)
