"""Application state: every store for the local user, wired together."""

import random
from typing import Any

from pydantic import BaseModel, ValidationError

from app.common.clock import Clock, now_ms
from app.core.logging import get_logger
from app.curriculum.index import CurriculumIndex
from app.gamification.achievements import AchievementBook
from app.gamification.badges import BadgeBook
from app.gamification.fanout import apply_gamification_for_test_result
from app.gamification.leaderboard import Leaderboards
from app.gamification.rank import RankTracker
from app.gamification.streak import StreakTracker
from app.gamification.xp import XPLedger
from app.schemas.analytics import AnalyticsState
from app.schemas.gamification import AchievementState, BadgeState, RankState, StreakData, XPState
from app.schemas.leaderboard import LeaderboardState
from app.schemas.practice_test import PracticeTestState
from app.schemas.test import TestResult, TestStoreState
from app.services.analytics_service import AnalyticsService
from app.services.persistence import KeyValueStore
from app.services.practice_tests import PracticeTestService
from app.services.question_generator import QuestionGenerator
from app.services.test_engine import TestEngine

logger = get_logger(__name__)

# attribute -> (component class, persisted state model)
STORES: dict[str, tuple[type, type[BaseModel]]] = {
    "tests": (TestEngine, TestStoreState),
    "rank": (RankTracker, RankState),
    "xp": (XPLedger, XPState),
    "badges": (BadgeBook, BadgeState),
    "streak": (StreakTracker, StreakData),
    "achievements": (AchievementBook, AchievementState),
    "leaderboards": (Leaderboards, LeaderboardState),
    "practice_tests": (PracticeTestService, PracticeTestState),
    "analytics": (AnalyticsService, AnalyticsState),
}


class AppState:
    """
    Owns every store for one local user.

    Created explicitly at startup and held on ``app.state``; tests build their
    own instance with a fixed clock and seeded random source.
    """

    def __init__(
        self,
        curriculum: CurriculumIndex,
        user_id: str,
        username: str,
        clock: Clock = now_ms,
        rng: random.Random | None = None,
        states: dict[str, BaseModel] | None = None,
    ):
        self.curriculum = curriculum
        self.user_id = user_id
        self.username = username
        self.clock = clock
        self.rng = rng or random.Random()
        self._build(states or {})

    def _build(self, states: dict[str, Any]) -> None:
        clock, rng = self.clock, self.rng

        self.generator = QuestionGenerator(self.curriculum, rng=rng, clock=clock)
        self.rank = RankTracker(states.get("rank"), clock=clock, rng=rng)
        self.xp = XPLedger(self.rank, states.get("xp"), clock=clock, rng=rng)
        self.badges = BadgeBook(self.xp, states.get("badges"), clock=clock)
        self.streak = StreakTracker(self.xp, self.badges, states.get("streak"), clock=clock)
        self.achievements = AchievementBook(self.user_id, states.get("achievements"), clock=clock)
        self.achievements.initialize_achievements()
        self.leaderboards = Leaderboards(
            states.get("leaderboards"), achievements=self.achievements, clock=clock
        )
        self.analytics = AnalyticsService(states.get("analytics"), clock=clock)
        self.practice_tests = PracticeTestService(states.get("practice_tests"), clock=clock, rng=rng)
        self.tests = TestEngine(
            states.get("tests"), clock=clock, rng=rng, on_result=self._on_test_result
        )

    def _on_test_result(self, result: TestResult) -> None:
        apply_gamification_for_test_result(self, result)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        curriculum: CurriculumIndex,
        user_id: str,
        username: str,
        clock: Clock = now_ms,
        rng: random.Random | None = None,
    ) -> "AppState":
        """Fresh state with every store at its initial value."""
        return cls(curriculum, user_id, username, clock=clock, rng=rng)

    @classmethod
    def load(
        cls,
        kv: KeyValueStore,
        curriculum: CurriculumIndex,
        user_id: str,
        username: str,
        clock: Clock = now_ms,
        rng: random.Random | None = None,
    ) -> "AppState":
        """
        Restore every store from the key-value store.

        A store that is missing, written under another version or no longer
        valid starts from its initial value.
        """
        states: dict[str, BaseModel] = {}
        for attr, (component, model) in STORES.items():
            payload = kv.load(component.STORE_NAME, component.STORE_VERSION)
            if payload is None:
                continue
            try:
                states[attr] = model.model_validate(payload)
            except ValidationError as e:
                logger.warning(
                    "store_payload_invalid",
                    extra={"store": component.STORE_NAME, "errors": e.error_count()},
                )

        logger.info("app_state_loaded", extra={"restored_stores": sorted(states)})
        return cls(curriculum, user_id, username, clock=clock, rng=rng, states=states)

    def save(self, kv: KeyValueStore) -> None:
        kv.save_many(
            {
                component.STORE_NAME: (
                    component.STORE_VERSION,
                    getattr(self, attr).state.model_dump(mode="json"),
                )
                for attr, (component, _) in STORES.items()
            }
        )

    def reset(self) -> None:
        """Return every store to its initial value (logout)."""
        self._build({})
        logger.info("app_state_reset", extra={"user_id": self.user_id})
