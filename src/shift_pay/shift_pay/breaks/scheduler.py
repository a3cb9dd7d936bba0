from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import minute_of_day
from ..compensation.model import CompensationConfig, ScheduledBreak
from ..core.enums import Weekday
from ..timer.model import ActiveAutomaticBreak, ActiveShiftSnapshot, BreakInterval


@dataclass(frozen=True)
class TriggerDecision:
    scheduled_break: ScheduledBreak
    duration_seconds: int
    interval: BreakInterval
    active: ActiveAutomaticBreak

    def apply(self, snapshot: ActiveShiftSnapshot) -> ActiveShiftSnapshot:
        return replace(snapshot.with_break(self.interval), active_automatic_break=self.active)


class BreakScheduler:
    """Decides whether a configured break should start automatically.

    Scheduled breaks are examined in configuration order and the first one
    that qualifies wins, so overlapping windows never yield two automatic
    breaks at once. A break that already ran today (even if ended early) does
    not fire again.
    """

    def check_trigger(
        self,
        now: datetime,
        shift: ActiveShiftSnapshot,
        config: CompensationConfig,
    ) -> Optional[TriggerDecision]:
        weekday = Weekday.of(now)
        minute = minute_of_day(now)

        for sb in config.scheduled_breaks:
            if not sb.applies_on(weekday) or not sb.covers(minute):
                continue
            if self._already_taken(sb, shift, now):
                continue

            duration = sb.duration_seconds
            if duration <= 0:
                continue

            return TriggerDecision(
                scheduled_break=sb,
                duration_seconds=duration,
                interval=BreakInterval(
                    start_time=now,
                    is_automatic=True,
                    scheduled_break_id=sb.break_id,
                    scheduled_break_name=sb.name,
                ),
                active=ActiveAutomaticBreak(
                    break_id=sb.break_id,
                    name=sb.name,
                    original_duration_seconds=duration,
                    scheduled_start_time=sb.start_time,
                    scheduled_end_time=sb.end_time,
                ),
            )
        return None

    @staticmethod
    def _already_taken(sb: ScheduledBreak, shift: ActiveShiftSnapshot, now: datetime) -> bool:
        if shift.active_automatic_break and shift.active_automatic_break.break_id == sb.break_id:
            return True

        for br in shift.breaks:
            if not br.is_automatic or br.scheduled_break_id != sb.break_id:
                continue
            if br.is_open:
                return True
            if br.start_time.date() == now.date():
                return True
        return False
