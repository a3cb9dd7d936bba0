from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta

from ...common.datetime_utils import minute_of_day
from ...compensation.model import CompensationConfig
from ...core.constants import SECONDS_PER_MINUTE
from ...core.enums import Weekday
from ...timer.model import ActiveShiftSnapshot
from ..model import EarningsResult, RateSegment
from ..rate_resolver import resolve_rate
from .base import EarningsCalculator

STEP = timedelta(seconds=SECONDS_PER_MINUTE)
# "Right now" for the live rate: the last instant before as_of.
_LAST_INSTANT = timedelta(milliseconds=1)


class MinuteStepEarningsCalculator(EarningsCalculator):
    """Walks the shift one minute at a time from its start up to ``as_of``.

    A minute whose start instant falls inside a recorded break interval or a
    configured scheduled-break window earns nothing; every other minute earns
    ``rate / 60`` at the rate resolved for that instant. Rate changes inside a
    minute are not resolved.
    """

    def accumulate(self, shift: ActiveShiftSnapshot, config: CompensationConfig, as_of: datetime) -> EarningsResult:
        intervals = [(br.start_time, br.end_time or as_of) for br in shift.breaks]

        total = 0.0
        seconds_by_percent: dict[float, int] = defaultdict(int)

        t = shift.start_time
        while t < as_of:
            if not self._on_break(t, intervals, config):
                resolution = resolve_rate(t, config)
                total += resolution.rate / 60
                seconds_by_percent[resolution.percent] += SECONDS_PER_MINUTE
            t += STEP

        final = resolve_rate(max(shift.start_time, as_of - _LAST_INSTANT), config)
        segments = tuple(
            RateSegment(percent=pct, duration_seconds=secs)
            for pct, secs in sorted(seconds_by_percent.items())
        )
        return EarningsResult(
            total_earnings=round(total, 2),
            rate_segments=segments,
            final_percent=final.percent,
            final_rate=round(final.rate, 2),
        )

    @staticmethod
    def _on_break(t: datetime, intervals, config: CompensationConfig) -> bool:
        for start, end in intervals:
            if start <= t < end:
                return True

        weekday = Weekday.of(t)
        minute = minute_of_day(t)
        for sb in config.scheduled_breaks:
            if sb.applies_on(weekday) and sb.covers(minute):
                return True
        return False
