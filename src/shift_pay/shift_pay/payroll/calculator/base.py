from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ...compensation.model import CompensationConfig
from ...timer.model import ActiveShiftSnapshot
from ..model import EarningsResult


class EarningsCalculator(ABC):
    """Calculator interface (Strategy Pattern for shift earnings)."""

    @abstractmethod
    def accumulate(self, shift: ActiveShiftSnapshot, config: CompensationConfig, as_of: datetime) -> EarningsResult:
        raise NotImplementedError
