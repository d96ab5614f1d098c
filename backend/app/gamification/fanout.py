"""Rewards applied when a quiz result is recorded."""

from typing import TYPE_CHECKING

from app.core.logging import get_logger
from app.gamification.achievements import check_quiz_score_achievement, check_streak_achievements
from app.schemas.gamification import XPItem, XPType
from app.schemas.leaderboard import ActivityUpdate
from app.schemas.test import Difficulty, TestResult
from app.services.analytics_service import QUIZ_PASS_SCORE
from app.services.scoring import is_answer_correct, round_half_up

if TYPE_CHECKING:
    from app.state import AppState

logger = get_logger(__name__)

XP_CORRECT = 50
XP_HARD_CORRECT = 100
XP_STREAK_BONUS = 20
XP_STREAK_EVERY = 3
XP_PERFECT_SCORE = 150
SPEED_RUNNER_MS = 2 * 60 * 1000


def build_xp_items(result: TestResult) -> list[XPItem]:
    """XP for each correct answer, every third consecutive correct, and a perfect score."""
    items: list[XPItem] = []
    consecutive = 0

    for question, answer in zip(result.questions, result.user_answers):
        if not is_answer_correct(answer, question.correct_answer):
            consecutive = 0
            continue

        consecutive += 1
        if question.difficulty == Difficulty.HARD:
            items.append(
                XPItem(
                    amount=XP_HARD_CORRECT,
                    type=XPType.DIFFICULTY_MULTIPLIER,
                    description="Hard question correct",
                )
            )
        else:
            items.append(
                XPItem(amount=XP_CORRECT, type=XPType.QUIZ_CORRECT, description="Correct answer")
            )

        if consecutive % XP_STREAK_EVERY == 0:
            items.append(
                XPItem(
                    amount=XP_STREAK_BONUS,
                    type=XPType.QUIZ_STREAK,
                    description="3 correct answers streak bonus",
                )
            )

    if result.score == 100:
        items.append(
            XPItem(amount=XP_PERFECT_SCORE, type=XPType.QUIZ_STREAK, description="Perfect score bonus")
        )

    return items


def perfect_score_streak(history: list[TestResult]) -> int:
    """Consecutive 100% results at the head (newest end) of history."""
    count = 0
    for result in history:
        if result.score != 100:
            break
        count += 1
    return count


def apply_gamification_for_test_result(state: "AppState", result: TestResult) -> None:
    """
    Apply every reward for a recorded result.

    Order: XP, streak, badges, achievements, analytics, leaderboard. Failures
    are logged and swallowed so a recorded result is never lost.
    """
    try:
        state.xp.add_xp_batch(build_xp_items(result))

        streak_days = state.streak.update_streak()

        history = state.tests.get_test_history()
        badges = state.badges
        badges.check_and_unlock_badges("quizzes_completed", len(history))
        if 0 < result.time_taken < SPEED_RUNNER_MS:
            badges.check_and_unlock_badges("speed_runner", 1)
        badges.check_and_unlock_badges("perfect_scores_streak", perfect_score_streak(history))
        badges.add_learned_concepts([q.related_concept for q in result.questions if q.related_concept])
        badges.check_and_unlock_badges("concepts_learned", badges.get_learned_concept_count())

        check_quiz_score_achievement(state.achievements, result.score)
        check_streak_achievements(state.achievements, streak_days)

        passed = result.score >= QUIZ_PASS_SCORE
        state.analytics.track_quiz_completed(
            result.score, passed, round_half_up(result.time_taken / 60_000)
        )

        stats = state.analytics.get_stats()
        activity = ActivityUpdate(
            username=state.username,
            lessons_completed=stats.total_lessons_completed,
            quizzes_passed=stats.total_quizzes_passed,
            credits_used=stats.total_credits_used,
            streak_days=streak_days,
            badges_count=len(badges.get_unlocked_badges()),
            achievements_count=state.achievements.unlocked_count(),
        )
        state.leaderboards.update_user_score(state.user_id, activity)

        # Entering the weekly top 10 may have just unlocked top_performer
        unlocked = state.achievements.unlocked_count()
        if unlocked != activity.achievements_count:
            state.leaderboards.update_user_score(
                state.user_id, ActivityUpdate(achievements_count=unlocked)
            )
    except Exception as e:
        logger.warning(
            "gamification_apply_failed",
            extra={"test_id": result.test_id, "error": str(e)},
            exc_info=True,
        )
