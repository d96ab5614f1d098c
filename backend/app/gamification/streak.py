"""Daily learning streak with purchasable one-day protection."""

from app.common.clock import Clock, date_key, diff_days, now_ms
from app.core.logging import get_logger
from app.gamification.badges import BadgeBook
from app.gamification.xp import XPLedger
from app.schemas.gamification import StreakData, XPType

logger = get_logger(__name__)

STREAK_XP_REWARD = 25
PROTECTION_MIN_STREAK = 7
PROTECTION_DURATION_MS = 24 * 60 * 60 * 1000


class StreakTracker:
    STORE_NAME = "learnsmart-streak"
    STORE_VERSION = 1

    def __init__(
        self,
        xp: XPLedger,
        badges: BadgeBook,
        state: StreakData | None = None,
        clock: Clock = now_ms,
    ):
        self.xp = xp
        self.badges = badges
        self.state = state or StreakData()
        self.clock = clock

    def update_streak(self) -> int:
        """
        Record activity for today.

        The first activity of a day extends the streak if the last active day
        was yesterday, or the day before with protection active (consuming it);
        otherwise the streak restarts at 1.

        Returns:
            Current streak length
        """
        now = self.clock()
        today = date_key(now)
        streak = self.state
        last = streak.last_activity_date

        streak.calendar[today] = True
        if last > 0 and date_key(last) == today:
            return streak.current

        continued = False
        used_protection = False
        if last > 0:
            gap = diff_days(last, now)
            if gap == 1:
                continued = True
            elif gap == 2 and self.check_streak_protection():
                continued = True
                used_protection = True

        streak.current = max(1, streak.current + 1) if continued else 1
        streak.longest = max(streak.longest, streak.current)
        streak.last_activity_date = now
        if used_protection:
            streak.streak_protection_active = False
            streak.streak_protection_expires_at = None

        logger.info(
            "streak_updated",
            extra={
                "current": streak.current,
                "longest": streak.longest,
                "used_protection": used_protection,
            },
        )

        if continued:
            self.xp.add_xp(
                STREAK_XP_REWARD,
                XPType.DAILY_STREAK,
                f"Daily streak maintained ({streak.current} days)",
            )

        self.badges.check_and_unlock_badges("streak_days", streak.current)
        return streak.current

    def get_current_streak(self) -> int:
        return self.state.current

    def get_longest_streak(self) -> int:
        return self.state.longest

    def get_streak_calendar(self) -> dict[str, bool]:
        return dict(self.state.calendar)

    def activate_streak_protection(self) -> bool:
        """Protect the streak for 24 h; needs a 7+ day streak and no active protection."""
        if self.state.current < PROTECTION_MIN_STREAK or self.check_streak_protection():
            return False

        self.state.streak_protection_active = True
        self.state.streak_protection_expires_at = self.clock() + PROTECTION_DURATION_MS
        logger.info("streak_protection_activated", extra={"current": self.state.current})
        return True

    def check_streak_protection(self) -> bool:
        expires_at = self.state.streak_protection_expires_at
        if not self.state.streak_protection_active or expires_at is None:
            return False
        return expires_at > self.clock()
