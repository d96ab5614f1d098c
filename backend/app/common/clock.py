"""Wall-clock helpers (epoch milliseconds, local calendar days)."""

import random
import string
import time
from datetime import datetime
from typing import Callable

Clock = Callable[[], int]

_ID_ALPHABET = string.digits + string.ascii_lowercase


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def to_local_datetime(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000)


def date_key(ms: int) -> str:
    """Local calendar day of an epoch-ms timestamp as YYYY-MM-DD."""
    return to_local_datetime(ms).strftime("%Y-%m-%d")


def start_of_day(ms: int) -> int:
    d = to_local_datetime(ms).replace(hour=0, minute=0, second=0, microsecond=0)
    return int(d.timestamp() * 1000)


def today_at_1am(ms: int) -> int:
    """01:00 local time on the day of ms (daily XP reset boundary)."""
    d = to_local_datetime(ms).replace(hour=1, minute=0, second=0, microsecond=0)
    return int(d.timestamp() * 1000)


def diff_days(a_ms: int, b_ms: int) -> int:
    """Whole calendar days from a to b."""
    return round((start_of_day(b_ms) - start_of_day(a_ms)) / 86_400_000)


def make_id(prefix: str, ms: int, rng: random.Random | None = None) -> str:
    """Synthetic id of the form <prefix>-<ms>-<9 base36 chars>."""
    rng = rng or random
    suffix = "".join(rng.choice(_ID_ALPHABET) for _ in range(9))
    return f"{prefix}-{ms}-{suffix}"
