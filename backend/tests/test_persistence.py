"""Tests for the versioned key-value store and app state persistence."""

import random

from app.curriculum.index import CurriculumIndex
from app.schemas.leaderboard import LeaderboardType
from app.services.persistence import KeyValueStore
from app.services.test_engine import TestEngine
from app.state import STORES, AppState
from tests.helpers.factories import FakeClock, make_config, make_questions

# ============================================================================
# Key-value store
# ============================================================================


class TestKeyValueStore:
    def test_missing_blob(self, kv: KeyValueStore):
        assert kv.load("nothing", 1) is None

    def test_save_and_overwrite(self, kv: KeyValueStore):
        kv.save("store", 1, {"a": 1})
        kv.save("store", 1, {"a": 2, "b": [1, 2]})
        assert kv.load("store", 1) == {"a": 2, "b": [1, 2]}

    def test_version_mismatch_discards(self, kv: KeyValueStore):
        kv.save("store", 1, {"a": 1})
        assert kv.load("store", 2) is None

    def test_save_many_and_delete_all(self, kv: KeyValueStore):
        kv.save_many({"one": (1, {"x": 1}), "two": (3, {"y": 2})})
        assert kv.load("one", 1) == {"x": 1}
        assert kv.load("two", 3) == {"y": 2}

        kv.delete_all()
        assert kv.load("one", 1) is None


# ============================================================================
# App state
# ============================================================================


def _load(kv: KeyValueStore, curriculum: CurriculumIndex, clock: FakeClock) -> AppState:
    return AppState.load(kv, curriculum, "user-1", "Tester", clock=clock, rng=random.Random(8))


class TestAppStatePersistence:
    def test_empty_store_gives_initial_state(
        self, kv: KeyValueStore, curriculum: CurriculumIndex, clock: FakeClock
    ):
        state = _load(kv, curriculum, clock)
        assert state.tests.get_test_history() == []
        assert state.xp.get_total_xp() == 0
        assert len(state.practice_tests.get_practice_tests()) == 4
        assert state.achievements.state.initialized

    def test_round_trip(
        self,
        kv: KeyValueStore,
        curriculum: CurriculumIndex,
        clock: FakeClock,
        app_state: AppState,
    ):
        app_state.tests.start_test(make_config(make_questions(3)))
        app_state.tests.answer_question(0)
        result = app_state.tests.submit_test()
        app_state.tests.start_test(make_config(make_questions(2), duration_seconds=600))
        app_state.save(kv)

        restored = _load(kv, curriculum, clock)

        assert restored.tests.get_test_history() == [result]
        assert restored.tests.current_session == app_state.tests.current_session
        assert restored.xp.get_total_xp() == app_state.xp.get_total_xp()
        assert restored.rank.current_rank == app_state.rank.current_rank
        assert restored.streak.get_current_streak() == 1
        assert restored.badges.state == app_state.badges.state
        assert restored.achievements.unlocked_count() == app_state.achievements.unlocked_count()
        assert restored.analytics.get_stats() == app_state.analytics.get_stats()
        assert restored.leaderboards.get_user_rank(
            "user-1", LeaderboardType.WEEKLY
        ) == app_state.leaderboards.get_user_rank("user-1", LeaderboardType.WEEKLY)

    def test_every_store_is_written(self, kv: KeyValueStore, app_state: AppState):
        app_state.save(kv)
        for component, _ in STORES.values():
            assert kv.load(component.STORE_NAME, component.STORE_VERSION) is not None

    def test_old_version_starts_fresh(
        self,
        kv: KeyValueStore,
        curriculum: CurriculumIndex,
        clock: FakeClock,
        app_state: AppState,
    ):
        app_state.tests.start_test(make_config(make_questions(1)))
        app_state.tests.submit_test()
        app_state.save(kv)

        payload = kv.load(TestEngine.STORE_NAME, TestEngine.STORE_VERSION)
        kv.save(TestEngine.STORE_NAME, TestEngine.STORE_VERSION + 1, payload)

        restored = _load(kv, curriculum, clock)
        assert restored.tests.get_test_history() == []
        assert restored.xp.get_total_xp() == app_state.xp.get_total_xp()

    def test_invalid_payload_starts_fresh(
        self, kv: KeyValueStore, curriculum: CurriculumIndex, clock: FakeClock
    ):
        kv.save(TestEngine.STORE_NAME, TestEngine.STORE_VERSION, {"test_history": "not a list"})

        restored = _load(kv, curriculum, clock)
        assert restored.tests.get_test_history() == []

    def test_reset(self, app_state: AppState):
        app_state.tests.start_test(make_config(make_questions(1)))
        app_state.tests.answer_question(0)
        app_state.tests.submit_test()
        assert app_state.xp.get_total_xp() > 0

        app_state.reset()

        assert app_state.tests.get_test_history() == []
        assert app_state.xp.get_total_xp() == 0
        assert app_state.streak.get_current_streak() == 0
        assert app_state.achievements.unlocked_count() == 0
        assert app_state.leaderboards.get_leaderboard(LeaderboardType.ALL_TIME) == []
