"""Achievement catalogue and per-user progress."""

from app.common.clock import Clock, now_ms
from app.core.app_exceptions import AchievementNotUnlockedError, NotFoundError
from app.core.logging import get_logger
from app.schemas.gamification import Achievement, AchievementCategory, AchievementState

logger = get_logger(__name__)

_LEARN = AchievementCategory.LEARNING
_STREAK = AchievementCategory.STREAK
_SOCIAL = AchievementCategory.SOCIAL
_MILESTONE = AchievementCategory.MILESTONE

# (id, title, description, icon, category, max_progress, reward)
BASE_ACHIEVEMENTS: tuple[tuple[str, str, str, str, AchievementCategory, int, int], ...] = (
    # Learning
    ("first_lesson", "First Lesson", "Complete your first lesson", "📚", _LEARN, 1, 10),
    ("concept_crusher", "Concept Crusher", "Learn 5 concepts", "🧠", _LEARN, 5, 25),
    ("quiz_champion", "Quiz Champion", "Score 90%+ on a quiz", "🏆", _LEARN, 1, 30),
    ("perfect_score", "Perfect Score", "Get 100% on a test", "💯", _LEARN, 1, 50),
    ("speed_demon", "Speed Demon", "Complete test in under 5 minutes", "⚡", _LEARN, 1, 40),
    ("knowledge_seeker", "Knowledge Seeker", "Learn 25 concepts", "📖", _LEARN, 25, 75),
    ("chapter_master", "Chapter Master", "Complete a full chapter", "📘", _LEARN, 1, 35),
    ("expert_level", "Expert Level", "Complete 10 chapters", "🎓", _LEARN, 10, 100),
    ("subject_specialist", "Subject Specialist", "Master all concepts in one subject", "🎯", _LEARN, 100, 150),
    ("study_streak", "Consistent Learner", "Study 7 days in a row", "📅", _LEARN, 7, 60),
    # Streak
    ("day_1_streak", "Getting Started", "Login for 1 day", "✨", _STREAK, 1, 5),
    ("week_warrior", "Week Warrior", "Maintain a 7-day streak", "🔥", _STREAK, 7, 25),
    ("two_week_titan", "Two-Week Titan", "Maintain a 14-day streak", "🔥🔥", _STREAK, 14, 50),
    ("month_master", "Month Master", "Maintain a 30-day streak", "🔥🔥🔥", _STREAK, 30, 100),
    ("unstoppable", "Unstoppable", "Maintain a 60-day streak", "🚀", _STREAK, 60, 200),
    ("legendary", "Legendary", "Maintain a 100-day streak", "👑", _STREAK, 100, 500),
    ("streak_saver", "Streak Saver", "Use streak freeze 1 time", "🛡️", _STREAK, 1, 15),
    ("weekend_warriors", "Weekend Warrior", "Study on 10 weekends", "📚", _STREAK, 10, 75),
    ("night_owl", "Night Owl", "Study after 10 PM 7 days", "🦉", _STREAK, 7, 40),
    ("early_bird", "Early Bird", "Study before 7 AM 7 days", "🌅", _STREAK, 7, 40),
    ("streak_master", "Streak Master", "Reach 50 days streak", "⭐", _STREAK, 50, 150),
    ("never_give_up", "Never Give Up", "Recover from a broken streak", "💪", _STREAK, 1, 20),
    # Social
    ("generous_soul", "Generous Soul", "Gift 100 credits to friends", "🎁", _SOCIAL, 100, 80),
    ("friend_maker", "Friend Maker", "Gift to 5 different friends", "👥", _SOCIAL, 5, 50),
    ("community_champion", "Community Champion", "Receive gifts from 10 people", "🏅", _SOCIAL, 10, 60),
    ("sharing_is_caring", "Sharing is Caring", "Share 5 achievements", "📤", _SOCIAL, 5, 30),
    ("mentor", "Mentor", "Help 3 friends complete lessons", "🧑‍🏫", _SOCIAL, 3, 120),
    ("networker", "Networker", "Connect with 20 other learners", "🕸️", _SOCIAL, 20, 80),
    # Milestone
    ("note_taker", "Note Taker", "Create 5 notes", "🗒️", _MILESTONE, 5, 20),
    ("bookmark_hoarder", "Bookmark Hoarder", "Bookmark 20 items", "📌", _MILESTONE, 20, 40),
    ("analyst_pro", "Analytics Pro", "View analytics dashboard 20 times", "📊", _MILESTONE, 20, 55),
    ("top_performer", "Top Performer", "Reach top 10 in leaderboard", "🚀", _MILESTONE, 1, 250),
)  # fmt: skip

ALL_ACHIEVEMENT_IDS = tuple(row[0] for row in BASE_ACHIEVEMENTS)

STREAK_ACHIEVEMENT_IDS = (
    "week_warrior",
    "two_week_titan",
    "month_master",
    "unstoppable",
    "legendary",
    "streak_master",
)

QUIZ_CHAMPION_SCORE = 90
PERFECT_SCORE = 100


def initialize_for_user(user_id: str) -> list[Achievement]:
    return [
        Achievement(
            id=id,
            user_id=user_id,
            title=title,
            description=description,
            icon=icon,
            category=category,
            max_progress=max_progress,
            reward=reward,
        )
        for id, title, description, icon, category, max_progress, reward in BASE_ACHIEVEMENTS
    ]


class AchievementBook:
    """One user's achievements; the catalogue is copied in on first use."""

    STORE_NAME = "learnsmart-achievements"
    STORE_VERSION = 1

    def __init__(self, user_id: str, state: AchievementState | None = None, clock: Clock = now_ms):
        self.user_id = user_id
        self.state = state or AchievementState()
        self.clock = clock

    def initialize_achievements(self) -> None:
        if self.state.initialized:
            return
        self.state.achievements = initialize_for_user(self.user_id)
        self.state.initialized = True

    def get_achievements(self) -> list[Achievement]:
        self.initialize_achievements()
        return list(self.state.achievements)

    def get_unlocked_achievements(self) -> list[Achievement]:
        return [a for a in self.get_achievements() if a.unlocked_at is not None]

    def get_progress_achievements(self) -> list[Achievement]:
        """Started but not yet unlocked."""
        return [a for a in self.get_achievements() if a.progress > 0 and a.unlocked_at is None]

    def get_achievements_by_category(self, category: AchievementCategory) -> list[Achievement]:
        return [a for a in self.get_achievements() if a.category == category]

    def get_achievement(self, achievement_id: str) -> Achievement | None:
        self.initialize_achievements()
        return next((a for a in self.state.achievements if a.id == achievement_id), None)

    def unlock_achievement(self, achievement_id: str) -> Achievement | None:
        """
        Unlock once: sets unlocked_at and fills progress.

        Returns:
            The achievement if this call unlocked it, else None
        """
        achievement = self.get_achievement(achievement_id)
        if achievement is None or achievement.unlocked_at is not None:
            return None

        achievement.unlocked_at = self.clock()
        achievement.progress = achievement.max_progress
        logger.info(
            "achievement_unlocked",
            extra={"achievement_id": achievement_id, "reward": achievement.reward},
        )
        return achievement

    def update_achievement_progress(self, achievement_id: str, progress: int) -> Achievement | None:
        """
        Raise progress towards an achievement, unlocking it at max.

        Progress is clamped to [0, max_progress] and never decreases. Unknown
        or already unlocked achievements are left untouched.

        Returns:
            The achievement, or None if unknown
        """
        achievement = self.get_achievement(achievement_id)
        if achievement is None or achievement.unlocked_at is not None:
            return achievement

        clamped = min(max(0, progress), achievement.max_progress)
        achievement.progress = max(achievement.progress, clamped)

        if achievement.progress >= achievement.max_progress:
            self.unlock_achievement(achievement_id)
        return achievement

    def claim_achievement_reward(self, achievement_id: str) -> int:
        achievement = self.get_achievement(achievement_id)
        if achievement is None:
            raise NotFoundError(
                f"Achievement {achievement_id} not found",
                details={"achievement_id": achievement_id},
            )
        if achievement.unlocked_at is None:
            raise AchievementNotUnlockedError(
                "Achievement not unlocked",
                details={"achievement_id": achievement_id},
            )
        return achievement.reward

    def unlocked_count(self) -> int:
        return len(self.get_unlocked_achievements())

    def reset_achievements(self) -> None:
        self.state.achievements = []
        self.state.initialized = False


# ============================================================================
# Trigger helpers
# ============================================================================


def check_lesson_completed_achievement(book: AchievementBook, completed_lessons: int) -> None:
    if completed_lessons == 1:
        book.unlock_achievement("first_lesson")


def check_quiz_score_achievement(book: AchievementBook, score: int, achieved: bool = True) -> None:
    if not achieved:
        return
    if score >= QUIZ_CHAMPION_SCORE:
        book.unlock_achievement("quiz_champion")
    if score >= PERFECT_SCORE:
        book.unlock_achievement("perfect_score")


def check_streak_achievements(book: AchievementBook, streak_days: int) -> None:
    for achievement_id in STREAK_ACHIEVEMENT_IDS:
        book.update_achievement_progress(achievement_id, streak_days)
