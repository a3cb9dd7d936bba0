from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RateSegment:
    """Seconds worked at one pay percentage."""

    percent: float
    duration_seconds: int

    def to_dict(self) -> dict:
        return {"percent": self.percent, "duration_seconds": self.duration_seconds}

    @classmethod
    def from_dict(cls, data: dict) -> "RateSegment":
        return cls(percent=float(data["percent"]), duration_seconds=int(data["duration_seconds"]))


@dataclass(frozen=True)
class RateResolution:
    percent: float
    rate: float


@dataclass(frozen=True)
class EarningsResult:
    total_earnings: float
    rate_segments: tuple[RateSegment, ...]
    final_percent: float
    final_rate: float

    @property
    def paid_seconds(self) -> int:
        return sum(s.duration_seconds for s in self.rate_segments)
