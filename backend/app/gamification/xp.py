"""XP ledger: totals, daily XP, history and gain batches."""

import math
import random

from app.common.clock import Clock, make_id, now_ms, today_at_1am
from app.core.logging import get_logger
from app.gamification.rank import RankTracker
from app.schemas.gamification import XPEntry, XPGainBatch, XPItem, XPState, XPType
from app.services.scoring import round_half_up

logger = get_logger(__name__)

XP_HISTORY_LIMIT = 800
BATCH_MERGE_WINDOW_MS = 800


class XPLedger:
    """Records XP gains and keeps the rank tracker in step with total XP."""

    STORE_NAME = "learnsmart-xp"
    STORE_VERSION = 1

    def __init__(
        self,
        rank: RankTracker,
        state: XPState | None = None,
        clock: Clock = now_ms,
        rng: random.Random | None = None,
    ):
        self.rank = rank
        self.clock = clock
        self.rng = rng or random.Random()
        self.state = state or XPState(last_daily_reset=today_at_1am(clock()))

    def add_xp(self, amount: float, type: XPType, description: str) -> list[XPEntry]:
        return self.add_xp_batch([XPItem(amount=amount, type=type, description=description)])

    def add_xp_batch(self, items: list[XPItem]) -> list[XPEntry]:
        """
        Record a burst of XP gains.

        Amounts are rounded; items that are non-finite or round to zero are dropped.

        Returns:
            Recorded entries (empty if every item was dropped)
        """
        kept = [
            item
            for item in items
            if math.isfinite(item.amount) and round_half_up(item.amount) != 0
        ]
        if not kept:
            return []

        self._ensure_daily_reset()

        timestamp = self.clock()
        entries = [
            XPEntry(
                id=make_id("xp", timestamp, self.rng),
                type=item.type,
                amount=round_half_up(item.amount),
                timestamp=timestamp,
                description=item.description,
            )
            for item in kept
        ]
        amount = sum(entry.amount for entry in entries)

        state = self.state
        state.total_xp += amount
        state.daily_xp += amount
        state.xp_history = [*entries, *state.xp_history][:XP_HISTORY_LIMIT]

        previous = state.last_gain_batch
        if previous is not None and timestamp - previous.timestamp < BATCH_MERGE_WINDOW_MS:
            state.last_gain_batch = XPGainBatch(
                amount=previous.amount + amount,
                entries=[*previous.entries, *entries],
                timestamp=timestamp,
            )
        else:
            state.last_gain_batch = XPGainBatch(amount=amount, entries=entries, timestamp=timestamp)

        logger.info(
            "xp_added",
            extra={"amount": amount, "entries": len(entries), "total_xp": state.total_xp},
        )

        self.rank.update_from_xp(state.total_xp)
        return entries

    def get_total_xp(self) -> int:
        return self.state.total_xp

    def get_daily_xp(self) -> int:
        self._ensure_daily_reset()
        return self.state.daily_xp

    def get_xp_history(self, limit: int | None = None) -> list[XPEntry]:
        history = self.state.xp_history
        return list(history[:limit]) if limit else list(history)

    def reset_daily_xp(self) -> None:
        self.state.daily_xp = 0
        self.state.last_daily_reset = today_at_1am(self.clock())

    def consume_last_gain_batch(self) -> XPGainBatch | None:
        batch = self.state.last_gain_batch
        self.state.last_gain_batch = None
        return batch

    def _ensure_daily_reset(self) -> None:
        now = self.clock()
        boundary = today_at_1am(now)
        if now > boundary and self.state.last_daily_reset < boundary:
            self.state.daily_xp = 0
            self.state.last_daily_reset = boundary
