from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Optional

from ..common.datetime_utils import from_iso, to_iso
from ..core.enums import TimerState
from ..payroll.model import RateSegment


@dataclass(frozen=True)
class BreakInterval:
    """One break inside a shift. Open (no ``end_time``) while ongoing."""

    start_time: datetime
    end_time: Optional[datetime] = None
    is_automatic: bool = False
    scheduled_break_id: Optional[str] = None
    scheduled_break_name: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    def closed_at(self, moment: datetime) -> "BreakInterval":
        return replace(self, end_time=moment)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_time": to_iso(self.start_time),
            "end_time": to_iso(self.end_time),
            "is_automatic": self.is_automatic,
            "scheduled_break_id": self.scheduled_break_id,
            "scheduled_break_name": self.scheduled_break_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BreakInterval":
        return cls(
            start_time=from_iso(data["start_time"]),
            end_time=from_iso(data.get("end_time")),
            is_automatic=bool(data.get("is_automatic")),
            scheduled_break_id=data.get("scheduled_break_id"),
            scheduled_break_name=data.get("scheduled_break_name"),
        )


@dataclass(frozen=True)
class ActiveAutomaticBreak:
    """The scheduled break currently running, as it was configured when it fired."""

    break_id: str
    original_duration_seconds: int
    scheduled_start_time: str
    scheduled_end_time: str
    name: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.break_id,
            "name": self.name,
            "original_duration_seconds": self.original_duration_seconds,
            "scheduled_start_time": self.scheduled_start_time,
            "scheduled_end_time": self.scheduled_end_time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActiveAutomaticBreak":
        return cls(
            break_id=str(data["id"]),
            name=data.get("name"),
            original_duration_seconds=int(data["original_duration_seconds"]),
            scheduled_start_time=str(data["scheduled_start_time"]),
            scheduled_end_time=str(data["scheduled_end_time"]),
        )


@dataclass(frozen=True)
class ActiveShiftSnapshot:
    """Durable value of the one in-progress shift.

    Never mutated in place: every change produces a new snapshot.
    """

    shift_id: str
    start_time: datetime
    base_rate_at_start: float
    breaks: tuple[BreakInterval, ...] = ()
    active_automatic_break: Optional[ActiveAutomaticBreak] = None

    def open_interval(self) -> Optional[BreakInterval]:
        for br in reversed(self.breaks):
            if br.is_open:
                return br
        return None

    def open_automatic_interval(self, break_id: str) -> Optional[BreakInterval]:
        for br in self.breaks:
            if br.is_open and br.is_automatic and br.scheduled_break_id == break_id:
                return br
        return None

    def with_break(self, interval: BreakInterval) -> "ActiveShiftSnapshot":
        return replace(self, breaks=self.breaks + (interval,))

    def close_open_intervals(
        self,
        moment: datetime,
        predicate: Callable[[BreakInterval], bool] = lambda br: True,
    ) -> "ActiveShiftSnapshot":
        breaks = tuple(br.closed_at(moment) if br.is_open and predicate(br) else br for br in self.breaks)
        return replace(self, breaks=breaks)

    def manual_break_seconds(self, now: datetime) -> float:
        total = 0.0
        for br in self.breaks:
            if br.is_automatic:
                continue
            end = br.end_time or now
            if end > br.start_time:
                total += (end - br.start_time).total_seconds()
        return total

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.shift_id,
            "start_time": to_iso(self.start_time),
            "base_rate_at_start": self.base_rate_at_start,
            "breaks": [br.to_dict() for br in self.breaks],
            "active_automatic_break": (
                self.active_automatic_break.to_dict() if self.active_automatic_break else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActiveShiftSnapshot":
        active = data.get("active_automatic_break")
        return cls(
            shift_id=str(data["id"]),
            start_time=from_iso(data["start_time"]),
            base_rate_at_start=float(data.get("base_rate_at_start") or 0),
            breaks=tuple(BreakInterval.from_dict(b) for b in data.get("breaks") or []),
            active_automatic_break=ActiveAutomaticBreak.from_dict(active) if active else None,
        )


@dataclass(frozen=True)
class FinalizedShift:
    """A completed shift as appended to history. Immutable."""

    shift_id: str
    start_time: datetime
    end_time: datetime
    base_rate_at_start: float
    breaks: tuple[BreakInterval, ...]
    total_earnings: float
    rate_segments: tuple[RateSegment, ...]
    unused_automatic_break_seconds: Optional[int] = None

    @property
    def break_seconds(self) -> int:
        return int(sum(((br.end_time or self.end_time) - br.start_time).total_seconds() for br in self.breaks))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.shift_id,
            "start_time": to_iso(self.start_time),
            "end_time": to_iso(self.end_time),
            "base_rate_at_start": self.base_rate_at_start,
            "breaks": [br.to_dict() for br in self.breaks],
            "total_earnings": self.total_earnings,
            "rate_segments": [s.to_dict() for s in self.rate_segments],
            "unused_automatic_break_seconds": self.unused_automatic_break_seconds,
        }


@dataclass(frozen=True)
class TimerReadout:
    """Display values derived from (snapshot, state, now, config)."""

    elapsed_work_seconds: int = 0
    elapsed_break_seconds: int = 0
    automatic_break_countdown: Optional[int] = None
    unused_automatic_break_seconds: int = 0
    live_earnings: float = 0.0
    effective_rate: float = 0.0
    effective_percent: float = 0.0


@dataclass(frozen=True)
class PersistedTimer:
    snapshot: ActiveShiftSnapshot
    state: TimerState
    unused_automatic_break_seconds: int = 0
