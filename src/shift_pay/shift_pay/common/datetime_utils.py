from __future__ import annotations

import re
from datetime import datetime
from typing import Optional, Protocol

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def now_local() -> datetime:
    """Current local time, naive."""
    return datetime.now()


def is_hhmm(value: str) -> bool:
    return bool(value) and _HHMM.match(value) is not None


def parse_hhmm(value: str) -> int:
    """Parse an ``HH:MM`` string into minutes since midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minute_of_day(moment: datetime) -> int:
    """Minutes since midnight; seconds are ignored."""
    return moment.hour * 60 + moment.minute


def to_iso(moment: Optional[datetime]) -> Optional[str]:
    return moment.isoformat() if moment else None


def from_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def whole_seconds(delta_seconds: float) -> int:
    """Floor a duration to whole seconds, clamped at zero."""
    return max(0, int(delta_seconds // 1))


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    def now(self) -> datetime:
        return now_local()
