"""Weekly, monthly and all-time leaderboards. Deterministic tie-break by user_id."""

from datetime import datetime, timezone

from app.common.clock import Clock, now_ms
from app.core.logging import get_logger
from app.gamification.achievements import AchievementBook
from app.schemas.leaderboard import (
    ActivityUpdate,
    LeaderboardEntry,
    LeaderboardStats,
    LeaderboardState,
    LeaderboardType,
    UserRank,
    UserScore,
)

logger = get_logger(__name__)

POINTS_PER_LESSON = 10
POINTS_PER_QUIZ_PASSED = 20
POINTS_PER_TEN_CREDITS = 5
POINTS_PER_STREAK_DAY = 5
POINTS_PER_BADGE = 30
POINTS_PER_ACHIEVEMENT = 30
STREAK_BONUSES: tuple[tuple[int, int], ...] = ((7, 10), (30, 50), (100, 150))

DEFAULT_LIMIT = 100
TOP_X = 100
TOP_PERFORMER_RANK = 10


def calculate_points(
    lessons_completed: int = 0,
    quizzes_passed: int = 0,
    credits_used: int = 0,
    streak_days: int = 0,
    badges_count: int = 0,
    achievements_count: int = 0,
) -> int:
    """Total leaderboard points; streak bonuses are cumulative."""
    points = lessons_completed * POINTS_PER_LESSON
    points += quizzes_passed * POINTS_PER_QUIZ_PASSED
    points += (credits_used // 10) * POINTS_PER_TEN_CREDITS

    for threshold, bonus in STREAK_BONUSES:
        if streak_days >= threshold:
            points += bonus

    points += streak_days * POINTS_PER_STREAK_DAY
    points += badges_count * POINTS_PER_BADGE
    points += achievements_count * POINTS_PER_ACHIEVEMENT
    return points


def sort_and_rank(board: dict[str, UserScore]) -> list[LeaderboardEntry]:
    """
    Rank (1=best) every user on a board.

    Sort by points desc; tie-break by user_id asc so equal scores rank
    deterministically.
    """
    ordered = sorted(board.values(), key=lambda s: (-s.total_points, s.user_id))
    return [
        LeaderboardEntry(
            user_id=score.user_id,
            username=score.username,
            rank=index + 1,
            points=score.total_points,
            streak_days=score.streak_points // POINTS_PER_STREAK_DAY,
            badges_count=score.badges_count,
            last_active=score.last_active,
        )
        for index, score in enumerate(ordered)
    ]


class Leaderboards:
    STORE_NAME = "learnsmart-leaderboard"
    STORE_VERSION = 1

    def __init__(
        self,
        state: LeaderboardState | None = None,
        achievements: AchievementBook | None = None,
        clock: Clock = now_ms,
    ):
        self.state = state or LeaderboardState()
        self.achievements = achievements
        self.clock = clock

    def _board(self, type: LeaderboardType) -> dict[str, UserScore]:
        if type == LeaderboardType.MONTHLY:
            return self.state.monthly
        if type == LeaderboardType.ALL_TIME:
            return self.state.all_time
        return self.state.weekly

    def update_user_score(self, user_id: str, update: ActivityUpdate) -> LeaderboardStats:
        """
        Merge activity counters into every board and recompute totals.

        Fields left as None keep their stored value. A weekly top-10 rank unlocks
        the top_performer achievement of the achievement book's owner.
        """
        last_active = datetime.fromtimestamp(self.clock() / 1000, tz=timezone.utc)
        changes = update.model_dump(exclude_none=True, exclude={"streak_days"})
        if update.streak_days is not None:
            changes["streak_points"] = update.streak_days * POINTS_PER_STREAK_DAY

        for type in LeaderboardType:
            board = self._board(type)
            current = board.get(user_id) or UserScore(
                user_id=user_id,
                username=update.username or "User",
                last_active=last_active,
            )
            merged = current.model_copy(update={**changes, "last_active": last_active})
            merged.total_points = calculate_points(
                merged.lessons_completed,
                merged.quizzes_passed,
                merged.credits_used,
                merged.streak_points // POINTS_PER_STREAK_DAY,
                merged.badges_count,
                merged.achievements_count,
            )
            board[user_id] = merged

        stats = self.get_leaderboard_stats(user_id)
        logger.info(
            "leaderboard_updated",
            extra={
                "user_id": user_id,
                "weekly_rank": stats.weekly_rank.rank if stats.weekly_rank else None,
                "total_points": stats.all_time_rank.total_points if stats.all_time_rank else None,
            },
        )

        weekly = stats.weekly_rank
        if (
            self.achievements is not None
            and self.achievements.user_id == user_id
            and weekly is not None
            and weekly.rank <= TOP_PERFORMER_RANK
        ):
            self.achievements.unlock_achievement("top_performer")

        return stats

    def get_leaderboard(
        self, type: LeaderboardType, limit: int = DEFAULT_LIMIT
    ) -> list[LeaderboardEntry]:
        return sort_and_rank(self._board(type))[:limit]

    def get_user_rank(self, user_id: str, type: LeaderboardType) -> UserRank | None:
        entries = sort_and_rank(self._board(type))
        entry = next((e for e in entries if e.user_id == user_id), None)
        if entry is None:
            return None

        points_to_next = None
        if entry.rank > 1:
            points_to_next = entries[entry.rank - 2].points - entry.points

        return UserRank(
            user_id=user_id,
            rank=entry.rank,
            total_points=entry.points,
            points_to_next_rank=points_to_next,
            is_in_top_x=entry.rank <= TOP_X,
        )

    def is_user_in_top_x(self, user_id: str, type: LeaderboardType, x: int) -> bool:
        rank = self.get_user_rank(user_id, type)
        return rank is not None and rank.rank <= x

    def get_leaderboard_stats(self, user_id: str) -> LeaderboardStats:
        return LeaderboardStats(
            weekly_rank=self.get_user_rank(user_id, LeaderboardType.WEEKLY),
            monthly_rank=self.get_user_rank(user_id, LeaderboardType.MONTHLY),
            all_time_rank=self.get_user_rank(user_id, LeaderboardType.ALL_TIME),
        )

    def reset_leaderboards(self) -> None:
        self.state = LeaderboardState()
