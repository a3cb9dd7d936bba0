from __future__ import annotations

from typing import Optional

from ..core.constants import ACTIVE_SHIFT_KEY, ACTIVE_STATE_KEY, UNUSED_BREAK_SECONDS_KEY
from ..core.enums import TimerState
from ..core.exceptions import StorageError
from ..storage.repository import KeyValueStore
from .model import ActiveShiftSnapshot, PersistedTimer
from .repository import SnapshotStore


class KeyValueSnapshotStore(SnapshotStore):
    """Keeps the snapshot, its state and the banked seconds under three keys,
    always written and removed together."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def get(self) -> Optional[PersistedTimer]:
        raw_shift = self._store.get(ACTIVE_SHIFT_KEY)
        raw_state = self._store.get(ACTIVE_STATE_KEY)
        if not raw_shift or not raw_state:
            return None

        try:
            snapshot = ActiveShiftSnapshot.from_dict(raw_shift)
            state = TimerState(raw_state)
            unused = int(self._store.get(UNUSED_BREAK_SECONDS_KEY) or 0)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Persisted active shift is malformed: {e}") from e

        return PersistedTimer(snapshot=snapshot, state=state, unused_automatic_break_seconds=unused)

    def put(self, snapshot: ActiveShiftSnapshot, state: TimerState, unused_automatic_break_seconds: int) -> None:
        self._store.set_many(
            {
                ACTIVE_SHIFT_KEY: snapshot.to_dict(),
                ACTIVE_STATE_KEY: state.value,
                UNUSED_BREAK_SECONDS_KEY: int(unused_automatic_break_seconds),
            }
        )

    def clear(self) -> None:
        self._store.remove_many((ACTIVE_SHIFT_KEY, ACTIVE_STATE_KEY, UNUSED_BREAK_SECONDS_KEY))
