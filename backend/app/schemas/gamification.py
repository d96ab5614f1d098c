"""Pydantic schemas for XP, ranks, streaks, badges and achievements."""

from enum import Enum as PyEnum

from pydantic import BaseModel, Field


class XPType(str, PyEnum):
    """Source of an XP gain."""

    QUIZ_CORRECT = "quiz-correct"
    QUIZ_STREAK = "quiz-streak"
    DIFFICULTY_MULTIPLIER = "difficulty-multiplier"
    FORUM_HELPFUL = "forum-helpful"
    BADGE_UNLOCK = "badge-unlock"
    DAILY_STREAK = "daily-streak"


# ============================================================================
# XP
# ============================================================================


class XPItem(BaseModel):
    """XP gain request (before it is recorded)."""

    amount: float
    type: XPType
    description: str


class XPEntry(BaseModel):
    """Recorded XP gain."""

    id: str
    type: XPType
    amount: int
    timestamp: int  # epoch ms
    description: str


class XPGainBatch(BaseModel):
    """XP gained in one burst, for the gain animation."""

    amount: int
    entries: list[XPEntry]
    timestamp: int


class XPState(BaseModel):
    """Persisted XP ledger."""

    total_xp: int = 0
    daily_xp: int = 0
    last_daily_reset: int = 0
    xp_history: list[XPEntry] = Field(default_factory=list)
    last_gain_batch: XPGainBatch | None = None


# ============================================================================
# Rank
# ============================================================================


class Rank(BaseModel):
    """XP rank tier."""

    id: str
    name: str
    min_xp: int
    max_xp: int | None  # None for the top tier
    icon: str
    description: str


class RankUpEntry(BaseModel):
    """Rank change history row."""

    id: str
    from_rank_id: str
    to_rank_id: str
    timestamp: int
    total_xp: int


class RankUpEvent(BaseModel):
    """Unconsumed rank-up notification."""

    from_rank: Rank
    to_rank: Rank
    timestamp: int


class RankProgress(BaseModel):
    """Progress towards the next rank."""

    current: int
    needed: int
    percent: float


class RankState(BaseModel):
    """Persisted rank tracker."""

    current_rank_id: str = "novice"
    previous_rank_id: str | None = None
    progress_percent: float = 0.0
    last_known_xp: int = 0
    rank_history: list[RankUpEntry] = Field(default_factory=list)
    last_rank_up_event: RankUpEvent | None = None


# ============================================================================
# Streak
# ============================================================================


class StreakData(BaseModel):
    """Daily activity streak."""

    current: int = 0
    longest: int = 0
    last_activity_date: int = 0  # epoch ms, 0 = never
    streak_protection_active: bool = False
    streak_protection_expires_at: int | None = None
    calendar: dict[str, bool] = Field(default_factory=dict)  # YYYY-MM-DD


# ============================================================================
# Badges
# ============================================================================


class BadgeRarity(str, PyEnum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class BadgeCategory(str, PyEnum):
    LEARNING = "learning"
    COMMUNITY = "community"
    STREAK = "streak"
    ACHIEVEMENT = "achievement"


class Badge(BaseModel):
    """Badge definition plus unlock timestamp."""

    id: str
    name: str
    icon: str
    description: str
    category: BadgeCategory
    rarity: BadgeRarity
    criterion: str
    requirement: int
    xp_reward: int
    smart_coin_reward: int
    unlocked_at: int | None = None


class BadgeState(BaseModel):
    """Persisted badge book."""

    unlocked: dict[str, int] = Field(default_factory=dict)  # badge id -> unlocked_at
    progress: dict[str, int] = Field(default_factory=dict)  # criterion -> value
    learned_concept_ids: list[str] = Field(default_factory=list)
    last_unlocked_badge_id: str | None = None


# ============================================================================
# Achievements
# ============================================================================


class AchievementCategory(str, PyEnum):
    LEARNING = "learning"
    STREAK = "streak"
    SOCIAL = "social"
    MILESTONE = "milestone"


class Achievement(BaseModel):
    """Per-user achievement row."""

    id: str
    user_id: str
    title: str
    description: str
    icon: str
    category: AchievementCategory
    unlocked_at: int | None = None
    progress: int = 0
    max_progress: int
    reward: int
    is_hidden: bool = False


class AchievementState(BaseModel):
    """Persisted achievement book."""

    achievements: list[Achievement] = Field(default_factory=list)
    initialized: bool = False


# ============================================================================
# API payloads
# ============================================================================


class XPSummary(BaseModel):
    total_xp: int
    daily_xp: int
    rank: Rank
    progress: RankProgress
    history: list[XPEntry]


class StreakSummary(BaseModel):
    current: int
    longest: int
    protection_active: bool
    calendar: dict[str, bool]


class AchievementProgressUpdate(BaseModel):
    progress: int = Field(..., ge=0)


class RankSummary(BaseModel):
    rank: Rank
    next_rank: Rank | None
    progress: RankProgress
    history: list[RankUpEntry]


class StreakProtectionResult(BaseModel):
    activated: bool
    expires_at: int | None = None


class RewardClaim(BaseModel):
    achievement_id: str
    reward: int
