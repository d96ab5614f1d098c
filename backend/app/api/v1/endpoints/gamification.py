"""XP, rank, streak, badge and achievement endpoints."""

from fastapi import APIRouter, Query

from app.core.app_exceptions import NotFoundError
from app.core.dependencies import MutableStateDep, StateDep
from app.gamification.rank import get_next_rank
from app.schemas.gamification import (
    Achievement,
    AchievementCategory,
    AchievementProgressUpdate,
    Badge,
    BadgeCategory,
    RankSummary,
    RankUpEvent,
    RewardClaim,
    StreakProtectionResult,
    StreakSummary,
    XPGainBatch,
    XPSummary,
)

router = APIRouter()


# ============================================================================
# XP and rank
# ============================================================================


@router.get("/xp", response_model=XPSummary)
def get_xp(state: MutableStateDep, limit: int = Query(20, ge=1, le=800)) -> XPSummary:
    return XPSummary(
        total_xp=state.xp.get_total_xp(),
        daily_xp=state.xp.get_daily_xp(),
        rank=state.rank.current_rank,
        progress=state.rank.get_progress_to_next(),
        history=state.xp.get_xp_history(limit),
    )


@router.post("/xp/last-batch/consume", response_model=XPGainBatch | None)
def consume_last_gain_batch(state: MutableStateDep) -> XPGainBatch | None:
    return state.xp.consume_last_gain_batch()


@router.get("/rank", response_model=RankSummary)
def get_rank(state: StateDep) -> RankSummary:
    rank = state.rank.current_rank
    return RankSummary(
        rank=rank,
        next_rank=get_next_rank(rank),
        progress=state.rank.get_progress_to_next(),
        history=state.rank.state.rank_history,
    )


@router.post("/rank/last-event/consume", response_model=RankUpEvent | None)
def consume_rank_up_event(state: MutableStateDep) -> RankUpEvent | None:
    return state.rank.consume_last_rank_up_event()


# ============================================================================
# Streak
# ============================================================================


@router.get("/streak", response_model=StreakSummary)
def get_streak(state: StateDep) -> StreakSummary:
    return StreakSummary(
        current=state.streak.get_current_streak(),
        longest=state.streak.get_longest_streak(),
        protection_active=state.streak.check_streak_protection(),
        calendar=state.streak.get_streak_calendar(),
    )


@router.post("/streak/protection", response_model=StreakProtectionResult)
def activate_streak_protection(state: MutableStateDep) -> StreakProtectionResult:
    activated = state.streak.activate_streak_protection()
    return StreakProtectionResult(
        activated=activated,
        expires_at=state.streak.state.streak_protection_expires_at,
    )


# ============================================================================
# Badges
# ============================================================================


@router.get("/badges", response_model=list[Badge])
def list_badges(state: StateDep, category: BadgeCategory | None = Query(None)) -> list[Badge]:
    if category is not None:
        return state.badges.get_badges_by_category(category)
    return state.badges.get_badges()


@router.get("/badges/unlocked", response_model=list[Badge])
def list_unlocked_badges(state: StateDep) -> list[Badge]:
    return state.badges.get_unlocked_badges()


@router.post("/badges/last-unlocked/consume", response_model=Badge | None)
def consume_last_unlocked_badge(state: MutableStateDep) -> Badge | None:
    return state.badges.consume_last_unlocked_badge()


# ============================================================================
# Achievements
# ============================================================================


@router.get("/achievements", response_model=list[Achievement])
def list_achievements(
    state: StateDep,
    category: AchievementCategory | None = Query(None),
    unlocked: bool | None = Query(None),
) -> list[Achievement]:
    if category is not None:
        achievements = state.achievements.get_achievements_by_category(category)
    else:
        achievements = state.achievements.get_achievements()
    if unlocked is not None:
        achievements = [a for a in achievements if (a.unlocked_at is not None) == unlocked]
    return achievements


@router.get("/achievements/in-progress", response_model=list[Achievement])
def list_achievements_in_progress(state: StateDep) -> list[Achievement]:
    return state.achievements.get_progress_achievements()


@router.put("/achievements/{achievement_id}/progress", response_model=Achievement)
def update_achievement_progress(
    achievement_id: str,
    payload: AchievementProgressUpdate,
    state: MutableStateDep,
) -> Achievement:
    achievement = state.achievements.update_achievement_progress(achievement_id, payload.progress)
    if achievement is None:
        raise NotFoundError(
            f"Achievement {achievement_id} not found",
            details={"achievement_id": achievement_id},
        )
    return achievement


@router.post("/achievements/{achievement_id}/claim", response_model=RewardClaim)
def claim_achievement_reward(achievement_id: str, state: StateDep) -> RewardClaim:
    reward = state.achievements.claim_achievement_reward(achievement_id)
    return RewardClaim(achievement_id=achievement_id, reward=reward)
