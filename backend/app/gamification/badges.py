"""Badge catalogue and unlock tracking."""

from app.common.clock import Clock, now_ms
from app.core.logging import get_logger
from app.gamification.xp import XPLedger
from app.schemas.gamification import Badge, BadgeCategory, BadgeRarity, BadgeState, XPType

logger = get_logger(__name__)


def _badge(
    id: str,
    name: str,
    icon: str,
    description: str,
    category: BadgeCategory,
    rarity: BadgeRarity,
    criterion: str,
    requirement: int,
    xp_reward: int,
    smart_coin_reward: int,
) -> Badge:
    return Badge(
        id=id,
        name=name,
        icon=icon,
        description=description,
        category=category,
        rarity=rarity,
        criterion=criterion,
        requirement=requirement,
        xp_reward=xp_reward,
        smart_coin_reward=smart_coin_reward,
    )


_L, _C, _S = BadgeCategory.LEARNING, BadgeCategory.COMMUNITY, BadgeCategory.STREAK
_COMMON, _RARE, _EPIC, _LEGENDARY = (
    BadgeRarity.COMMON,
    BadgeRarity.RARE,
    BadgeRarity.EPIC,
    BadgeRarity.LEGENDARY,
)

BADGES: tuple[Badge, ...] = (
    # Learning
    _badge("quick-learner", "Quick Learner", "🎓", "Complete 5 quizzes", _L, _COMMON, "quizzes_completed", 5, 50, 5),
    _badge("knowledge-seeker", "Knowledge Seeker", "📚", "Complete 25 quizzes", _L, _RARE, "quizzes_completed", 25, 100, 15),
    _badge("quiz-master", "Quiz Master", "🏆", "Complete 100 quizzes", _L, _EPIC, "quizzes_completed", 100, 200, 30),
    _badge("speed-runner", "Speed Runner", "🚀", "Complete a quiz in under 2 minutes", _L, _COMMON, "speed_runner", 1, 75, 10),
    _badge("perfect-score", "Perfect Score", "💯", "Get 3 consecutive 100% scores", _L, _RARE, "perfect_scores_streak", 3, 150, 20),
    _badge("concept-explorer", "Concept Explorer", "📖", "Learn 50 different concepts", _L, _EPIC, "concepts_learned", 50, 150, 25),
    # Community
    _badge("helper", "Helper", "💬", "Post 10 helpful forum answers", _C, _COMMON, "helpful_answers", 10, 50, 5),
    _badge("expert", "Expert", "⭐", "Receive 50 helpful marks", _C, _RARE, "helpful_marks", 50, 100, 20),
    _badge("community-star", "Community Star", "🌟", "Reach 200 reputation", _C, _EPIC, "reputation", 200, 200, 40),
    _badge("team-player", "Team Player", "👥", "Join a study group", _C, _COMMON, "study_group_joined", 1, 25, 5),
    _badge("contributor", "Contributor", "📝", "Ask 10 forum questions", _C, _COMMON, "questions_asked", 10, 40, 8),
    _badge("voiceful", "Voiceful", "🗣️", "Get 10 upvotes on your answers", _C, _RARE, "answer_upvotes", 10, 100, 15),
    # Streak
    _badge("week-warrior", "Week Warrior", "🔥", "Maintain a 7-day learning streak", _S, _COMMON, "streak_days", 7, 50, 10),
    _badge("month-maverick", "Month Maverick", "🌊", "Maintain a 30-day learning streak", _S, _RARE, "streak_days", 30, 150, 30),
    _badge("century-champion", "Century Champion", "🎯", "Maintain a 100-day learning streak", _S, _LEGENDARY, "streak_days", 100, 300, 100),
)  # fmt: skip

_BADGES_BY_ID = {badge.id: badge for badge in BADGES}


class BadgeBook:
    """Unlocked badges, per-criterion progress and learned concepts."""

    STORE_NAME = "learnsmart-badges"
    STORE_VERSION = 1

    def __init__(self, xp: XPLedger, state: BadgeState | None = None, clock: Clock = now_ms):
        self.xp = xp
        self.state = state or BadgeState()
        self.clock = clock

    def get_badges(self) -> list[Badge]:
        """Whole catalogue, with unlocked_at set on unlocked badges."""
        return [self._with_unlock(badge) for badge in BADGES]

    def get_unlocked_badges(self) -> list[Badge]:
        """Unlocked badges, most recent first."""
        unlocked = sorted(self.state.unlocked.items(), key=lambda item: item[1], reverse=True)
        return [self._with_unlock(_BADGES_BY_ID[badge_id]) for badge_id, _ in unlocked]

    def get_badges_by_category(self, category: BadgeCategory) -> list[Badge]:
        return [badge for badge in self.get_badges() if badge.category == category]

    def is_unlocked(self, badge_id: str) -> bool:
        return badge_id in self.state.unlocked

    def unlock_badge(self, badge_id: str) -> Badge | None:
        """
        Unlock a badge and grant its XP reward.

        Returns:
            The unlocked badge, or None if unknown or already unlocked
        """
        base = _BADGES_BY_ID.get(badge_id)
        if base is None or badge_id in self.state.unlocked:
            return None

        unlocked_at = self.clock()
        self.state.unlocked[badge_id] = unlocked_at
        self.state.last_unlocked_badge_id = badge_id

        logger.info("badge_unlocked", extra={"badge_id": badge_id, "xp_reward": base.xp_reward})

        self.xp.add_xp(
            base.xp_reward,
            XPType.BADGE_UNLOCK,
            f"{base.icon} {base.name} badge unlocked",
        )
        return base.model_copy(update={"unlocked_at": unlocked_at})

    def check_badge_progress(self, criterion: str, value: int) -> Badge | None:
        """Lowest-requirement locked badge for criterion that value satisfies."""
        value = max(0, value)
        candidates = sorted(
            (
                badge
                for badge in BADGES
                if badge.criterion == criterion and badge.id not in self.state.unlocked
            ),
            key=lambda badge: badge.requirement,
        )
        return next((badge for badge in candidates if value >= badge.requirement), None)

    def check_and_unlock_badges(self, criterion: str, value: int) -> list[Badge]:
        """Unlock every badge for criterion that value satisfies, lowest requirement first."""
        unlocked: list[Badge] = []
        candidate = self.check_badge_progress(criterion, value)
        while candidate is not None:
            badge = self.unlock_badge(candidate.id)
            if badge is not None:
                unlocked.append(badge)
            candidate = self.check_badge_progress(criterion, value)
        return unlocked

    def add_learned_concepts(self, concept_ids: list[str]) -> None:
        known = set(self.state.learned_concept_ids)
        for concept_id in concept_ids:
            if concept_id and concept_id not in known:
                known.add(concept_id)
                self.state.learned_concept_ids.append(concept_id)

    def get_learned_concept_count(self) -> int:
        return len(self.state.learned_concept_ids)

    def increment_progress(self, criterion: str, delta: int = 1) -> list[Badge]:
        value = self.state.progress.get(criterion, 0) + delta
        self.state.progress[criterion] = value
        return self.check_and_unlock_badges(criterion, value)

    def consume_last_unlocked_badge(self) -> Badge | None:
        badge_id = self.state.last_unlocked_badge_id
        self.state.last_unlocked_badge_id = None
        if badge_id is None:
            return None
        return self._with_unlock(_BADGES_BY_ID[badge_id])

    def _with_unlock(self, badge: Badge) -> Badge:
        unlocked_at = self.state.unlocked.get(badge.id)
        if unlocked_at is None:
            return badge
        return badge.model_copy(update={"unlocked_at": unlocked_at})
