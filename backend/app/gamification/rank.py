"""XP rank tiers and the rank tracker."""

import random

from app.common.clock import Clock, make_id, now_ms
from app.core.logging import get_logger
from app.schemas.gamification import Rank, RankProgress, RankState, RankUpEntry, RankUpEvent

logger = get_logger(__name__)

RANK_HISTORY_LIMIT = 50

RANKS: tuple[Rank, ...] = (
    Rank(id="novice", name="Novice", min_xp=0, max_xp=500, icon="🪵", description="Beginner"),
    Rank(id="seeker", name="Seeker", min_xp=500, max_xp=2000, icon="🥉", description="Curious"),
    Rank(id="scholar", name="Scholar", min_xp=2000, max_xp=5000, icon="🥈", description="Learned"),
    Rank(id="sage", name="Sage", min_xp=5000, max_xp=10000, icon="👑", description="Wise"),
    Rank(
        id="emerald-sage",
        name="Emerald Sage",
        min_xp=10000,
        max_xp=None,
        icon="💚",
        description="Master",
    ),
)

_RANKS_BY_ID = {rank.id: rank for rank in RANKS}


def get_rank_for_xp(xp: int) -> Rank:
    """Tier whose [min_xp, max_xp) range contains xp; negative xp counts as 0."""
    normalized = max(0, xp)
    for rank in RANKS:
        if normalized >= rank.min_xp and (rank.max_xp is None or normalized < rank.max_xp):
            return rank
    return RANKS[-1]


def get_rank_by_id(rank_id: str) -> Rank:
    return _RANKS_BY_ID.get(rank_id, RANKS[0])


def get_next_rank(rank: Rank) -> Rank | None:
    index = RANKS.index(rank)
    return RANKS[index + 1] if index + 1 < len(RANKS) else None


def _progress(xp: int, rank: Rank) -> tuple[int, int, float]:
    next_rank = get_next_rank(rank)
    if next_rank is None:
        return 0, 0, 100.0
    current = max(0, xp - rank.min_xp)
    needed = max(1, next_rank.min_xp - rank.min_xp)
    return current, needed, max(0.0, min(100.0, current / needed * 100))


class RankTracker:
    """Tracks the current rank as total XP changes."""

    STORE_NAME = "learnsmart-rank"
    STORE_VERSION = 1

    def __init__(
        self,
        state: RankState | None = None,
        clock: Clock = now_ms,
        rng: random.Random | None = None,
    ):
        self.state = state or RankState()
        self.clock = clock
        self.rng = rng or random.Random()

    @property
    def current_rank(self) -> Rank:
        return get_rank_by_id(self.state.current_rank_id)

    def update_from_xp(self, xp: int) -> bool:
        """
        Re-derive the rank from total XP.

        Returns:
            True if the rank changed
        """
        previous = self.current_rank
        rank = get_rank_for_xp(xp)
        _, _, percent = _progress(xp, rank)

        self.state.progress_percent = percent
        self.state.last_known_xp = xp

        if rank.id == previous.id:
            return False

        timestamp = self.clock()
        entry = RankUpEntry(
            id=make_id("rank", timestamp, self.rng),
            from_rank_id=previous.id,
            to_rank_id=rank.id,
            timestamp=timestamp,
            total_xp=xp,
        )
        self.state.previous_rank_id = previous.id
        self.state.current_rank_id = rank.id
        self.state.rank_history = [entry, *self.state.rank_history][:RANK_HISTORY_LIMIT]
        self.state.last_rank_up_event = RankUpEvent(
            from_rank=previous, to_rank=rank, timestamp=timestamp
        )

        logger.info(
            "rank_changed",
            extra={"from_rank": previous.id, "to_rank": rank.id, "total_xp": xp},
        )
        return True

    def get_progress_to_next(self) -> RankProgress:
        current, needed, percent = _progress(self.state.last_known_xp, self.current_rank)
        return RankProgress(current=current, needed=needed, percent=percent)

    def consume_last_rank_up_event(self) -> RankUpEvent | None:
        event = self.state.last_rank_up_event
        self.state.last_rank_up_event = None
        return event
