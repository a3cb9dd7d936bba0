from __future__ import annotations

from datetime import datetime

from ..common.datetime_utils import minute_of_day
from ..compensation.model import CompensationConfig
from ..core.enums import Weekday
from .model import RateResolution


def resolve_rate(moment: datetime, config: CompensationConfig) -> RateResolution:
    """Effective hourly rate at ``moment``.

    The day multiplier (percent of base, default 100) plus the largest bonus
    among the time windows containing the moment's time of day. Windows are
    half-open ``[start, end)``, so the result does not depend on the order of
    ``config.time_bonuses``.
    """
    day_percent = config.day_percent(Weekday.of(moment))

    minute = minute_of_day(moment)
    bonus_percent = 0.0
    for bonus in config.time_bonuses:
        if bonus.covers(minute):
            bonus_percent = max(bonus_percent, bonus.bonus_percent)

    percent = day_percent + bonus_percent
    return RateResolution(percent=percent, rate=config.base_rate * percent / 100)
