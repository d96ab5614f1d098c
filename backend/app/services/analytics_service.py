"""Analytics service: daily learning activity and aggregate student stats."""

from app.common.clock import Clock, date_key, now_ms
from app.core.logging import get_logger
from app.schemas.analytics import AnalyticsState, DailyActivity, StudentStats
from app.services.scoring import round_half_up

logger = get_logger(__name__)

QUIZ_PASS_SCORE = 70
QUIZ_PASS_CREDITS = 5


class AnalyticsService:
    """Per-day activity counters keyed by local YYYY-MM-DD."""

    STORE_NAME = "learnsmart-analytics"
    STORE_VERSION = 1

    def __init__(self, state: AnalyticsState | None = None, clock: Clock = now_ms):
        self.state = state or AnalyticsState()
        self.clock = clock

    def _today(self) -> DailyActivity:
        key = date_key(self.clock())
        daily = self.state.daily_activity.get(key)
        if daily is None:
            daily = DailyActivity(date=key)
            self.state.daily_activity[key] = daily
        return daily

    # ------------------------------------------------------------------
    # Tracking
    # ------------------------------------------------------------------

    def track_lesson_completed(self, subject_id: str | None, duration_minutes: int) -> DailyActivity:
        daily = self._today()
        daily.lessons_completed += 1
        daily.minutes_spent += max(0, duration_minutes)
        if subject_id:
            self.state.subject_minutes[subject_id] = (
                self.state.subject_minutes.get(subject_id, 0) + max(0, duration_minutes)
            )
        logger.info(
            "lesson_tracked",
            extra={"subject_id": subject_id, "duration_minutes": duration_minutes},
        )
        return daily

    def track_quiz_completed(self, score: int, passed: bool, duration_minutes: int) -> DailyActivity:
        """
        Record a finished quiz.

        Args:
            score: Percentage score
            passed: Whether the quiz counts as passed
            duration_minutes: Time spent

        Returns:
            Today's activity after the update
        """
        daily = self._today()
        daily.quizzes_taken += 1
        if passed:
            daily.quizzes_passed += 1
            daily.credits_earned += QUIZ_PASS_CREDITS

        previous_total = daily.average_quiz_score * (daily.quizzes_taken - 1)
        daily.average_quiz_score = (previous_total + score) / daily.quizzes_taken
        daily.minutes_spent += max(0, duration_minutes)

        logger.info(
            "quiz_tracked",
            extra={"score": score, "passed": passed, "duration_minutes": duration_minutes},
        )
        return daily

    def track_test_completed(self, score: int, duration_minutes: int) -> DailyActivity:
        daily = self._today()
        daily.tests_taken += 1
        previous_total = daily.average_test_score * (daily.tests_taken - 1)
        daily.average_test_score = (previous_total + score) / daily.tests_taken
        daily.minutes_spent += max(0, duration_minutes)
        return daily

    def track_credits_used(self, amount: int) -> DailyActivity:
        daily = self._today()
        daily.credits_used += max(0, amount)
        return daily

    def track_credits_earned(self, amount: int) -> DailyActivity:
        daily = self._today()
        daily.credits_earned += max(0, amount)
        return daily

    def track_time_spent(self, minutes: int) -> DailyActivity:
        daily = self._today()
        daily.minutes_spent += max(0, minutes)
        return daily

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_daily_activity(self, date: str) -> DailyActivity | None:
        return self.state.daily_activity.get(date)

    def get_stats(self) -> StudentStats:
        """Totals over every tracked day; averages are weighted by count."""
        days = list(self.state.daily_activity.values())

        quizzes = sum(d.quizzes_taken for d in days)
        tests = sum(d.tests_taken for d in days)
        quiz_score_sum = sum(d.average_quiz_score * d.quizzes_taken for d in days)
        test_score_sum = sum(d.average_test_score * d.tests_taken for d in days)

        subject_minutes = self.state.subject_minutes
        top_subject = (
            max(sorted(subject_minutes), key=lambda s: subject_minutes[s])
            if subject_minutes
            else None
        )

        return StudentStats(
            total_lessons_completed=sum(d.lessons_completed for d in days),
            total_quizzes_taken=quizzes,
            total_quizzes_passed=sum(d.quizzes_passed for d in days),
            average_quiz_score=round_half_up(quiz_score_sum / quizzes) if quizzes else 0,
            total_tests_taken=tests,
            average_test_score=round_half_up(test_score_sum / tests) if tests else 0,
            total_credits_used=sum(d.credits_used for d in days),
            total_credits_earned=sum(d.credits_earned for d in days),
            learning_time=sum(d.minutes_spent for d in days),
            active_days=sum(
                1 for d in days if d.lessons_completed or d.quizzes_taken or d.tests_taken
            ),
            top_subject=top_subject,
        )
