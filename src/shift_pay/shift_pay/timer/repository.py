from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import TimerState
from .model import ActiveShiftSnapshot, PersistedTimer


class SnapshotStore(Protocol):
    """Durable home of the active shift across process restarts.

    Implementations must be idempotent: repeating ``put`` or ``clear`` with the
    same arguments leaves the same stored result.
    """

    def get(self) -> Optional[PersistedTimer]:
        raise NotImplementedError

    def put(self, snapshot: ActiveShiftSnapshot, state: TimerState, unused_automatic_break_seconds: int) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError
