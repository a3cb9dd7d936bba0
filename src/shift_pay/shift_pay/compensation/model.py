from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_hhmm
from ..core.constants import DEFAULT_BASE_RATE, DEFAULT_DAY_PERCENT
from ..core.enums import Weekday


@dataclass(frozen=True)
class TimeBonus:
    """Time-of-day window adding ``bonus_percent`` on top of the day multiplier."""

    start_time: str
    end_time: str
    bonus_percent: float
    bonus_id: Optional[str] = None

    @property
    def start_minutes(self) -> int:
        return parse_hhmm(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_hhmm(self.end_time)

    def covers(self, minute: int) -> bool:
        # [start, end)
        return self.start_minutes <= minute < self.end_minutes


@dataclass(frozen=True)
class ScheduledBreak:
    """Recurring unpaid break window on a set of weekdays."""

    break_id: str
    start_time: str
    end_time: str
    days: frozenset[Weekday] = frozenset()
    name: Optional[str] = None

    @property
    def start_minutes(self) -> int:
        return parse_hhmm(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_hhmm(self.end_time)

    @property
    def duration_seconds(self) -> int:
        return (self.end_minutes - self.start_minutes) * 60

    def applies_on(self, weekday: Weekday) -> bool:
        return weekday in self.days

    def covers(self, minute: int) -> bool:
        return self.start_minutes <= minute < self.end_minutes


@dataclass(frozen=True)
class CompensationConfig:
    base_rate: float = DEFAULT_BASE_RATE
    day_multipliers: Mapping[Weekday, float] = field(default_factory=dict)
    time_bonuses: tuple[TimeBonus, ...] = ()
    scheduled_breaks: tuple[ScheduledBreak, ...] = ()

    def day_percent(self, weekday: Weekday) -> float:
        value = self.day_multipliers.get(weekday)
        # 0 counts as unset
        return value or DEFAULT_DAY_PERCENT

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_rate": self.base_rate,
            "day_multipliers": {day.value: pct for day, pct in self.day_multipliers.items()},
            "time_bonuses": [
                {
                    "id": b.bonus_id,
                    "start_time": b.start_time,
                    "end_time": b.end_time,
                    "bonus_percent": b.bonus_percent,
                }
                for b in self.time_bonuses
            ],
            "scheduled_breaks": [
                {
                    "id": sb.break_id,
                    "name": sb.name,
                    "start_time": sb.start_time,
                    "end_time": sb.end_time,
                    "days": [d.value for d in Weekday if d in sb.days],
                }
                for sb in self.scheduled_breaks
            ],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompensationConfig":
        day_multipliers = {
            Weekday(day): float(pct)
            for day, pct in (data.get("day_multipliers") or {}).items()
            if pct is not None
        }
        bonuses = tuple(
            TimeBonus(
                start_time=str(b["start_time"]),
                end_time=str(b["end_time"]),
                bonus_percent=float(b.get("bonus_percent") or 0),
                bonus_id=b.get("id"),
            )
            for b in data.get("time_bonuses") or []
        )
        breaks = tuple(
            ScheduledBreak(
                break_id=str(sb["id"]),
                start_time=str(sb["start_time"]),
                end_time=str(sb["end_time"]),
                days=frozenset(Weekday(d) for d in sb.get("days") or []),
                name=sb.get("name") or None,
            )
            for sb in data.get("scheduled_breaks") or []
        )
        base_rate = data.get("base_rate")
        return cls(
            base_rate=float(DEFAULT_BASE_RATE if base_rate is None else base_rate),
            day_multipliers=day_multipliers,
            time_bonuses=bonuses,
            scheduled_breaks=breaks,
        )
