from __future__ import annotations

from typing import Protocol, Sequence

from ..timer.model import FinalizedShift


class HistoryStore(Protocol):
    def append(self, shift: FinalizedShift) -> None:
        raise NotImplementedError

    def list_recent(self, limit: int) -> Sequence[FinalizedShift]:
        """Newest first."""
        raise NotImplementedError

    def delete(self, shift_id: str) -> bool:
        raise NotImplementedError

    def clear(self) -> int:
        raise NotImplementedError
