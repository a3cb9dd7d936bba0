from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.constants import MAX_BASE_RATE, MAX_BONUS_PERCENT, MAX_DAY_PERCENT
from ..core.exceptions import ValidationError
from .datetime_utils import is_hhmm, parse_hhmm

if TYPE_CHECKING:
    from ..compensation.model import CompensationConfig


def require_hhmm(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not is_hhmm(value):
        raise ValidationError(f"{field_name} must be a time in HH:MM format")
    return value


def require_window(start: str, end: str, field_name: str) -> None:
    """Same-day windows only: windows crossing midnight are rejected."""
    require_hhmm(start, f"{field_name} start time")
    require_hhmm(end, f"{field_name} end time")
    if parse_hhmm(start) >= parse_hhmm(end):
        raise ValidationError(f"{field_name}: end time must be after start time")


def require_range(value: float, field_name: str, low: float, high: float) -> float:
    if value is None or not low <= value <= high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return value


def validate_compensation(config: "CompensationConfig") -> "CompensationConfig":
    require_range(config.base_rate, "Base rate", 0, MAX_BASE_RATE)

    for day, pct in config.day_multipliers.items():
        require_range(pct, f"{day.value} percentage", 0, MAX_DAY_PERCENT)

    for i, bonus in enumerate(config.time_bonuses, start=1):
        require_window(bonus.start_time, bonus.end_time, f"Time bonus #{i}")
        require_range(bonus.bonus_percent, f"Time bonus #{i} percentage", 0, MAX_BONUS_PERCENT)

    seen: set[str] = set()
    for i, sb in enumerate(config.scheduled_breaks, start=1):
        label = sb.name or f"Scheduled break #{i}"
        require_window(sb.start_time, sb.end_time, label)
        if not sb.days:
            raise ValidationError(f"{label}: select at least one day")
        if sb.break_id in seen:
            raise ValidationError(f"{label}: duplicate id {sb.break_id!r}")
        seen.add(sb.break_id)

    return config
