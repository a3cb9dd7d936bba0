from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from ..breaks.scheduler import BreakScheduler
from ..common.datetime_utils import Clock, SystemClock, whole_seconds
from ..compensation.model import CompensationConfig
from ..compensation.repository import ConfigProvider
from ..core.enums import TimerState
from ..core.exceptions import StorageError
from ..history.repository import HistoryStore
from ..payroll.calculator.base import EarningsCalculator
from ..payroll.calculator.minute_calculator import MinuteStepEarningsCalculator
from .model import ActiveShiftSnapshot, BreakInterval, FinalizedShift, TimerReadout
from .repository import SnapshotStore
from .tick import RequestTickScheduler, TickScheduler

logger = logging.getLogger(__name__)


class ShiftStateMachine:
    """Owns the lifecycle of the one active shift.

    idle -> working -> (on_break | on_scheduled_break) -> working -> ... -> idle

    Commands called from a state where they do not apply are ignored and
    return ``False`` (``None`` for ``end_shift``); duplicate UI events are
    harmless. Every change replaces the whole snapshot, persists it and
    recomputes the display readout.
    """

    def __init__(
        self,
        config_provider: ConfigProvider,
        history: HistoryStore,
        snapshots: SnapshotStore,
        *,
        clock: Optional[Clock] = None,
        scheduler: Optional[TickScheduler] = None,
        calculator: Optional[EarningsCalculator] = None,
        break_scheduler: Optional[BreakScheduler] = None,
    ):
        self._config_provider = config_provider
        self._history = history
        self._snapshots = snapshots
        self._clock = clock or SystemClock()
        self._scheduler = scheduler or RequestTickScheduler()
        self._calculator = calculator or MinuteStepEarningsCalculator()
        self._break_scheduler = break_scheduler or BreakScheduler()

        self._state = TimerState.IDLE
        self._snapshot: Optional[ActiveShiftSnapshot] = None
        self._unused_seconds = 0
        self._readout = TimerReadout()
        self._loading = True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def snapshot(self) -> Optional[ActiveShiftSnapshot]:
        return self._snapshot

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def readout(self) -> TimerReadout:
        return self._readout

    @property
    def elapsed_work_seconds(self) -> int:
        return self._readout.elapsed_work_seconds

    @property
    def elapsed_break_seconds(self) -> int:
        return self._readout.elapsed_break_seconds

    @property
    def automatic_break_countdown(self) -> Optional[int]:
        return self._readout.automatic_break_countdown

    @property
    def unused_automatic_break_seconds(self) -> int:
        return self._unused_seconds

    @property
    def live_earnings(self) -> float:
        return self._readout.live_earnings

    @property
    def effective_rate(self) -> float:
        return self._readout.effective_rate

    @property
    def effective_percent(self) -> float:
        return self._readout.effective_percent

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def recover(self) -> TimerState:
        """Restore the persisted shift. Runs once, before the first tick."""
        if not self._loading:
            return self._state

        now = self._clock.now()
        try:
            persisted = self._snapshots.get()
        except StorageError as e:
            logger.warning("Discarding unreadable active shift: %s", e)
            self._snapshots.clear()
            persisted = None

        self._loading = False
        if persisted is None or persisted.state is TimerState.IDLE or persisted.snapshot.start_time is None:
            self._commit(None, TimerState.IDLE, now=now)
            return self._state

        snapshot = persisted.snapshot
        state = persisted.state
        self._unused_seconds = max(0, persisted.unused_automatic_break_seconds)

        snapshot, state = self._repair(snapshot, state, now)

        self._commit(snapshot, state, now=now)
        logger.info("Recovered shift %s in state %s", snapshot.shift_id, state.value)
        return self._state

    @classmethod
    def _repair(
        cls, snapshot: ActiveShiftSnapshot, state: TimerState, now: datetime
    ) -> tuple[ActiveShiftSnapshot, TimerState]:
        """Reconcile a persisted state with its snapshot's automatic-break records."""
        active = snapshot.active_automatic_break
        backing = snapshot.open_automatic_interval(active.break_id) if active else None

        if state is TimerState.ON_AUTOMATIC_BREAK:
            if backing is None:
                logger.warning(
                    "Shift %s was saved on an automatic break with no open break record; resuming work",
                    snapshot.shift_id,
                )
                return cls._finish_automatic_break(snapshot, now), TimerState.WORKING
            return snapshot, state

        if state is TimerState.WORKING and backing is not None and snapshot.open_interval() == backing:
            logger.warning(
                "Shift %s was saved as working during automatic break %r; resuming the break",
                snapshot.shift_id,
                active.break_id,
            )
            return snapshot, TimerState.ON_AUTOMATIC_BREAK

        if active is not None or any(br.is_open and br.is_automatic for br in snapshot.breaks):
            logger.warning(
                "Shift %s was saved as %s with an automatic break open; closing it",
                snapshot.shift_id,
                state.value,
            )
            return cls._finish_automatic_break(snapshot, now), state
        return snapshot, state

    def close(self) -> None:
        """Tear down: no tick may fire after this returns."""
        self._scheduler.cancel()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def start_shift(self) -> bool:
        if not self._accepts("start_shift", TimerState.IDLE):
            return False

        now = self._clock.now()
        config = self._config_provider.get()
        snapshot = ActiveShiftSnapshot(
            shift_id=f"shift_{int(now.timestamp() * 1000)}",
            start_time=now,
            base_rate_at_start=config.base_rate,
        )
        self._unused_seconds = 0
        self._commit(snapshot, TimerState.WORKING, now=now, config=config)
        logger.info("Shift %s started", snapshot.shift_id)
        return True

    def start_manual_break(self) -> bool:
        if not self._accepts("start_manual_break", TimerState.WORKING):
            return False

        now = self._clock.now()
        self._commit(self._snapshot.with_break(BreakInterval(start_time=now)), TimerState.ON_MANUAL_BREAK, now=now)
        logger.info("Shift %s: manual break started", self._snapshot.shift_id)
        return True

    def end_manual_break(self) -> bool:
        if not self._accepts("end_manual_break", TimerState.ON_MANUAL_BREAK):
            return False

        now = self._clock.now()
        snapshot = self._snapshot.close_open_intervals(now, lambda br: not br.is_automatic)
        self._commit(snapshot, TimerState.WORKING, now=now)
        logger.info("Shift %s: manual break ended", snapshot.shift_id)
        return True

    def end_scheduled_break_early(self) -> bool:
        if not self._accepts("end_scheduled_break_early", TimerState.ON_AUTOMATIC_BREAK):
            return False

        now = self._clock.now()
        remaining = self._countdown(self._snapshot, self._state, now) or 0
        if remaining > 0:
            self._unused_seconds += remaining

        snapshot = self._finish_automatic_break(self._snapshot, now)
        self._commit(snapshot, TimerState.WORKING, now=now)
        logger.info("Shift %s: automatic break ended early (%ss unused)", snapshot.shift_id, remaining)
        return True

    def end_shift(self) -> Optional[FinalizedShift]:
        if self._loading or self._state is TimerState.IDLE or self._snapshot is None:
            self._ignored("end_shift")
            return None

        now = self._clock.now()
        config = self._config_provider.get()
        closed = self._finish_automatic_break(self._snapshot, now).close_open_intervals(now)
        earnings = self._calculator.accumulate(closed, config, now)

        finalized = FinalizedShift(
            shift_id=closed.shift_id,
            start_time=closed.start_time,
            end_time=now,
            base_rate_at_start=closed.base_rate_at_start,
            breaks=closed.breaks,
            total_earnings=earnings.total_earnings,
            rate_segments=earnings.rate_segments,
            unused_automatic_break_seconds=self._unused_seconds if self._unused_seconds > 0 else None,
        )
        self._history.append(finalized)

        self._unused_seconds = 0
        self._commit(None, TimerState.IDLE, now=now, config=config)
        logger.info("Shift %s ended: earnings=%.2f", finalized.shift_id, finalized.total_earnings)
        return finalized

    def reset_active_shift(self) -> bool:
        if self._state is TimerState.IDLE and not self._loading:
            self._ignored("reset_active_shift")
            return False

        discarded = self._snapshot.shift_id if self._snapshot else None
        self._unused_seconds = 0
        self._commit(None, TimerState.IDLE, now=self._clock.now())
        logger.info("Active shift %s discarded", discarded)
        return True

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------
    def tick(self, now: Optional[datetime] = None) -> None:
        if self._loading or self._state is TimerState.IDLE or self._snapshot is None:
            return

        now = now or self._clock.now()
        config = self._config_provider.get()

        if self._state is TimerState.WORKING:
            decision = self._break_scheduler.check_trigger(now, self._snapshot, config)
            if decision is not None:
                # A new automatic break supersedes time left over from the last one.
                self._unused_seconds = 0
                self._commit(decision.apply(self._snapshot), TimerState.ON_AUTOMATIC_BREAK, now=now, config=config)
                logger.info(
                    "Shift %s: automatic break %r started (%ss)",
                    self._snapshot.shift_id,
                    decision.scheduled_break.name or decision.scheduled_break.break_id,
                    decision.duration_seconds,
                )
                return

        elif self._state is TimerState.ON_AUTOMATIC_BREAK:
            countdown = self._countdown(self._snapshot, self._state, now)
            if not countdown:
                snapshot = self._finish_automatic_break(self._snapshot, now)
                self._commit(snapshot, TimerState.WORKING, now=now, config=config)
                logger.info("Shift %s: automatic break finished", snapshot.shift_id)
                return

        self._readout = self._compute_readout(self._snapshot, self._state, now, config)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _on_tick(self) -> None:
        self.tick()

    def _accepts(self, action: str, source: TimerState) -> bool:
        if self._loading or self._state is not source:
            self._ignored(action)
            return False
        if source is not TimerState.IDLE and self._snapshot is None:
            self._ignored(action)
            return False
        return True

    def _ignored(self, action: str) -> None:
        logger.debug("Ignoring %s while %s", action, "loading" if self._loading else self._state.value)

    def _commit(
        self,
        snapshot: Optional[ActiveShiftSnapshot],
        state: TimerState,
        *,
        now: datetime,
        config: Optional[CompensationConfig] = None,
    ) -> None:
        if snapshot is None:
            state = TimerState.IDLE

        self._snapshot = snapshot
        self._state = state

        if state is TimerState.IDLE:
            self._scheduler.cancel()
            self._snapshots.clear()
        else:
            self._snapshots.put(snapshot, state, self._unused_seconds)
            self._scheduler.start(self._on_tick)

        self._readout = self._compute_readout(snapshot, state, now, config or self._config_provider.get())

    @staticmethod
    def _finish_automatic_break(snapshot: ActiveShiftSnapshot, now: datetime) -> ActiveShiftSnapshot:
        """Close open automatic intervals and drop the active-break metadata.

        An interval backed by the active break ends no later than its
        scheduled length, however late the tick that noticed it arrives.
        """
        active = snapshot.active_automatic_break

        def end_of(br: BreakInterval) -> datetime:
            if active is not None and br.scheduled_break_id == active.break_id:
                return min(now, br.start_time + timedelta(seconds=active.original_duration_seconds))
            return now

        breaks = tuple(br.closed_at(end_of(br)) if br.is_open and br.is_automatic else br for br in snapshot.breaks)
        return replace(snapshot, breaks=breaks, active_automatic_break=None)

    @staticmethod
    def _countdown(snapshot: Optional[ActiveShiftSnapshot], state: TimerState, now: datetime) -> Optional[int]:
        if snapshot is None or state is not TimerState.ON_AUTOMATIC_BREAK:
            return None
        active = snapshot.active_automatic_break
        if active is None:
            return None
        interval = snapshot.open_automatic_interval(active.break_id)
        if interval is None:
            return None
        expected_end = interval.start_time + timedelta(seconds=active.original_duration_seconds)
        return whole_seconds((expected_end - now).total_seconds())

    def _compute_readout(
        self,
        snapshot: Optional[ActiveShiftSnapshot],
        state: TimerState,
        now: datetime,
        config: CompensationConfig,
    ) -> TimerReadout:
        if snapshot is None or state is TimerState.IDLE:
            return TimerReadout(unused_automatic_break_seconds=self._unused_seconds)

        earnings = self._calculator.accumulate(snapshot, config, now)
        gross = (now - snapshot.start_time).total_seconds()

        elapsed_break = 0
        if state is TimerState.ON_MANUAL_BREAK:
            open_break = snapshot.open_interval()
            if open_break is not None and not open_break.is_automatic:
                elapsed_break = whole_seconds((now - open_break.start_time).total_seconds())

        return TimerReadout(
            elapsed_work_seconds=whole_seconds(gross - snapshot.manual_break_seconds(now)),
            elapsed_break_seconds=elapsed_break,
            automatic_break_countdown=self._countdown(snapshot, state, now),
            unused_automatic_break_seconds=self._unused_seconds,
            live_earnings=earnings.total_earnings,
            effective_rate=earnings.final_rate,
            effective_percent=earnings.final_percent,
        )
