"""Tests for the analytics service."""

import pytest

from app.common.clock import date_key
from app.services.analytics_service import AnalyticsService
from tests.helpers.factories import BASE_TIME_MS, FakeClock

TODAY = date_key(BASE_TIME_MS)


@pytest.fixture
def analytics(clock: FakeClock) -> AnalyticsService:
    return AnalyticsService(clock=clock)


def test_empty_stats(analytics: AnalyticsService):
    stats = analytics.get_stats()
    assert stats.total_quizzes_taken == 0
    assert stats.average_quiz_score == 0
    assert stats.active_days == 0
    assert stats.top_subject is None
    assert analytics.get_daily_activity(TODAY) is None


def test_lesson_tracking(analytics: AnalyticsService):
    daily = analytics.track_lesson_completed("science", 12)

    assert daily.date == TODAY
    assert daily.lessons_completed == 1
    assert daily.minutes_spent == 12
    assert analytics.state.subject_minutes == {"science": 12}


def test_quiz_running_average(analytics: AnalyticsService):
    analytics.track_quiz_completed(80, True, 3)
    analytics.track_quiz_completed(50, False, 2)
    daily = analytics.track_quiz_completed(95, True, 0)

    assert daily.quizzes_taken == 3
    assert daily.quizzes_passed == 2
    assert daily.credits_earned == 10
    assert daily.average_quiz_score == pytest.approx(75.0)
    assert daily.minutes_spent == 5


def test_tests_credits_and_time(analytics: AnalyticsService):
    analytics.track_test_completed(60, 20)
    analytics.track_test_completed(71, 10)
    analytics.track_credits_used(15)
    analytics.track_credits_earned(4)
    analytics.track_time_spent(7)
    analytics.track_time_spent(-3)

    daily = analytics.get_daily_activity(TODAY)
    assert daily.tests_taken == 2
    assert daily.average_test_score == pytest.approx(65.5)
    assert daily.credits_used == 15
    assert daily.credits_earned == 4
    assert daily.minutes_spent == 37


def test_stats_weight_averages_by_count(analytics: AnalyticsService, clock: FakeClock):
    analytics.track_quiz_completed(100, True, 1)
    clock.advance_days(1)
    analytics.track_quiz_completed(40, False, 1)
    analytics.track_quiz_completed(40, False, 1)
    analytics.track_test_completed(55, 1)

    stats = analytics.get_stats()
    assert stats.total_quizzes_taken == 3
    assert stats.average_quiz_score == 60
    assert stats.average_test_score == 55
    assert stats.active_days == 2
    assert stats.learning_time == 4


def test_time_only_day_is_not_active(analytics: AnalyticsService):
    analytics.track_time_spent(30)
    stats = analytics.get_stats()
    assert stats.active_days == 0
    assert stats.learning_time == 30


def test_top_subject(analytics: AnalyticsService):
    analytics.track_lesson_completed("science", 10)
    analytics.track_lesson_completed("mathematics", 25)
    analytics.track_lesson_completed("science", 10)
    analytics.track_lesson_completed(None, 90)

    assert analytics.get_stats().top_subject == "mathematics"
    assert analytics.get_stats().total_lessons_completed == 4
