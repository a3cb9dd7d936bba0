from __future__ import annotations

from datetime import datetime
from enum import Enum


class Weekday(str, Enum):
    """Day of week as stored in compensation settings."""

    SUNDAY = "Sunday"
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"

    @classmethod
    def of(cls, moment: datetime) -> "Weekday":
        # datetime.weekday(): Monday == 0
        return _BY_ISO_INDEX[moment.weekday()]


_BY_ISO_INDEX = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
)


class TimerState(str, Enum):
    """Lifecycle of the active shift."""

    IDLE = "idle"
    WORKING = "working"
    ON_MANUAL_BREAK = "on_break"
    ON_AUTOMATIC_BREAK = "on_scheduled_break"
