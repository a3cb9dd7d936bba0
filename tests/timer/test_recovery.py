import json

from src.shift_pay.shift_pay.core.constants import ACTIVE_SHIFT_KEY, ACTIVE_STATE_KEY, UNUSED_BREAK_SECONDS_KEY
from src.shift_pay.shift_pay.core.enums import TimerState
from src.shift_pay.shift_pay.timer.model import ActiveAutomaticBreak, ActiveShiftSnapshot, BreakInterval

from tests.fakes import MONDAY, InMemoryKeyValueStore, TimerRig, at, make_config, monday_breaks

LUNCH = make_config(base_rate=12, breaks=monday_breaks(("lunch", "12:00", "12:30")))


def _persist(kv, snapshot, state, unused=0):
    kv.set(ACTIVE_SHIFT_KEY, snapshot.to_dict())
    kv.set(ACTIVE_STATE_KEY, state.value)
    kv.set(UNUSED_BREAK_SECONDS_KEY, unused)


def _on_lunch(kv) -> None:
    first = TimerRig(LUNCH, at(MONDAY, 11, 50), kv=kv)
    first.timer.recover()
    first.timer.start_shift()
    first.tick_at(at(MONDAY, 12, 0))
    first.timer.close()


def test_empty_store_recovers_idle():
    rig = TimerRig(LUNCH, at(MONDAY, 9, 0))

    assert rig.timer.recover() is TimerState.IDLE
    assert not rig.timer.is_loading
    assert not rig.scheduler.active


def test_working_shift_resumes_with_elapsed_time():
    kv = InMemoryKeyValueStore()
    first = TimerRig(make_config(base_rate=12), at(MONDAY, 9, 0), kv=kv)
    first.timer.recover()
    first.timer.start_shift()
    first.timer.close()

    second = TimerRig(make_config(base_rate=12), at(MONDAY, 10, 0), kv=kv)

    assert second.timer.recover() is TimerState.WORKING
    assert second.timer.snapshot == first.timer.snapshot
    assert second.timer.elapsed_work_seconds == 3600
    assert second.timer.live_earnings == 12.00
    assert second.scheduler.active


def test_automatic_break_countdown_accounts_for_downtime():
    kv = InMemoryKeyValueStore()
    _on_lunch(kv)

    rig = TimerRig(LUNCH, at(MONDAY, 12, 7), kv=kv)
    rig.timer.recover()

    assert rig.timer.state is TimerState.ON_AUTOMATIC_BREAK
    assert rig.timer.automatic_break_countdown == 1380


def test_expired_automatic_break_finishes_on_first_tick():
    kv = InMemoryKeyValueStore()
    _on_lunch(kv)

    rig = TimerRig(LUNCH, at(MONDAY, 12, 40), kv=kv)
    rig.timer.recover()

    assert rig.timer.state is TimerState.ON_AUTOMATIC_BREAK
    assert rig.timer.automatic_break_countdown == 0

    rig.tick_at(at(MONDAY, 12, 40, 1))
    assert rig.timer.state is TimerState.WORKING
    assert rig.timer.snapshot.breaks[-1].end_time == at(MONDAY, 12, 30)


def test_banked_seconds_survive_restart():
    kv = InMemoryKeyValueStore()
    _on_lunch(kv)
    middle = TimerRig(LUNCH, at(MONDAY, 12, 10), kv=kv)
    middle.timer.recover()
    middle.timer.end_scheduled_break_early()
    middle.timer.close()

    rig = TimerRig(LUNCH, at(MONDAY, 13, 0), kv=kv)
    rig.timer.recover()

    assert rig.timer.state is TimerState.WORKING
    assert rig.timer.unused_automatic_break_seconds == 1200


def test_automatic_state_without_active_break_resumes_work():
    kv = InMemoryKeyValueStore()
    snapshot = ActiveShiftSnapshot(
        shift_id="shift_1",
        start_time=at(MONDAY, 9, 0),
        base_rate_at_start=12.0,
        breaks=(BreakInterval(start_time=at(MONDAY, 12, 0), is_automatic=True, scheduled_break_id="lunch"),),
    )
    _persist(kv, snapshot, TimerState.ON_AUTOMATIC_BREAK)

    rig = TimerRig(LUNCH, at(MONDAY, 12, 5), kv=kv)

    assert rig.timer.recover() is TimerState.WORKING
    assert rig.timer.automatic_break_countdown is None
    assert rig.timer.snapshot.open_interval() is None
    assert rig.timer.snapshot.breaks[0].end_time == at(MONDAY, 12, 5)
    assert rig.snapshots.get().state is TimerState.WORKING


def test_manual_break_is_restored():
    kv = InMemoryKeyValueStore()
    snapshot = ActiveShiftSnapshot(
        shift_id="shift_1",
        start_time=at(MONDAY, 9, 0),
        base_rate_at_start=12.0,
        breaks=(BreakInterval(start_time=at(MONDAY, 10, 0)),),
    )
    _persist(kv, snapshot, TimerState.ON_MANUAL_BREAK)

    rig = TimerRig(LUNCH, at(MONDAY, 10, 20), kv=kv)

    assert rig.timer.recover() is TimerState.ON_MANUAL_BREAK
    assert rig.timer.elapsed_break_seconds == 1200
    assert rig.timer.end_manual_break() is True


def test_malformed_snapshot_is_discarded():
    kv = InMemoryKeyValueStore()
    kv.set(ACTIVE_SHIFT_KEY, {"start_time": "not a time"})
    kv.set(ACTIVE_STATE_KEY, TimerState.WORKING.value)

    rig = TimerRig(LUNCH, at(MONDAY, 10, 0), kv=kv)

    assert rig.timer.recover() is TimerState.IDLE
    assert kv.data == {}
    assert rig.timer.start_shift() is True


def test_unknown_state_is_discarded():
    kv = InMemoryKeyValueStore()
    snapshot = ActiveShiftSnapshot(shift_id="shift_1", start_time=at(MONDAY, 9, 0), base_rate_at_start=12.0)
    _persist(kv, snapshot, TimerState.WORKING)
    kv.data[ACTIVE_STATE_KEY] = json.dumps("sleeping")

    rig = TimerRig(LUNCH, at(MONDAY, 10, 0), kv=kv)

    assert rig.timer.recover() is TimerState.IDLE
    assert rig.snapshots.get() is None


def test_recover_runs_once():
    kv = InMemoryKeyValueStore()
    rig = TimerRig(LUNCH, at(MONDAY, 9, 0), kv=kv)
    rig.timer.recover()
    rig.timer.start_shift()

    assert rig.timer.recover() is TimerState.WORKING
    assert rig.timer.snapshot.start_time == at(MONDAY, 9, 0)


def test_reset_is_allowed_while_loading():
    kv = InMemoryKeyValueStore()
    snapshot = ActiveShiftSnapshot(shift_id="shift_1", start_time=at(MONDAY, 9, 0), base_rate_at_start=12.0)
    _persist(kv, snapshot, TimerState.WORKING)
    rig = TimerRig(LUNCH, at(MONDAY, 10, 0), kv=kv)

    assert rig.timer.reset_active_shift() is True
    assert kv.data == {}


def _lunch_in_progress(**overrides):
    lunch = ActiveAutomaticBreak(
        break_id="lunch",
        name="Lunch",
        original_duration_seconds=1800,
        scheduled_start_time="12:00",
        scheduled_end_time="12:30",
    )
    fields = dict(
        shift_id="shift_1",
        start_time=at(MONDAY, 11, 50),
        base_rate_at_start=12.0,
        breaks=(
            BreakInterval(
                start_time=at(MONDAY, 12, 0),
                is_automatic=True,
                scheduled_break_id="lunch",
                scheduled_break_name="Lunch",
            ),
        ),
        active_automatic_break=lunch,
    )
    fields.update(overrides)
    return ActiveShiftSnapshot(**fields)


def test_working_state_with_running_automatic_break_resumes_the_break():
    kv = InMemoryKeyValueStore()
    _persist(kv, _lunch_in_progress(), TimerState.WORKING)

    rig = TimerRig(LUNCH, at(MONDAY, 12, 1), kv=kv)

    assert rig.timer.recover() is TimerState.ON_AUTOMATIC_BREAK
    assert rig.timer.automatic_break_countdown == 1740
    assert rig.snapshots.get().state is TimerState.ON_AUTOMATIC_BREAK

    rig.tick_at(at(MONDAY, 14, 0))
    assert rig.timer.state is TimerState.WORKING
    assert rig.timer.snapshot.open_interval() is None

    rig.clock.set(at(MONDAY, 15, 0))
    assert rig.timer.end_shift().total_earnings == 32.00


def test_manual_break_state_with_automatic_break_open_closes_the_automatic_one():
    kv = InMemoryKeyValueStore()
    snapshot = _lunch_in_progress()
    snapshot = snapshot.with_break(BreakInterval(start_time=at(MONDAY, 12, 45)))
    _persist(kv, snapshot, TimerState.ON_MANUAL_BREAK)

    rig = TimerRig(LUNCH, at(MONDAY, 13, 0), kv=kv)

    assert rig.timer.recover() is TimerState.ON_MANUAL_BREAK
    automatic, manual = rig.timer.snapshot.breaks
    assert automatic.end_time == at(MONDAY, 12, 30)
    assert manual.is_open
    assert rig.timer.snapshot.active_automatic_break is None


def test_working_state_with_orphan_automatic_interval_closes_it():
    kv = InMemoryKeyValueStore()
    _persist(kv, _lunch_in_progress(active_automatic_break=None), TimerState.WORKING)

    rig = TimerRig(LUNCH, at(MONDAY, 12, 5), kv=kv)

    assert rig.timer.recover() is TimerState.WORKING
    assert rig.timer.snapshot.open_interval() is None
    assert rig.timer.snapshot.breaks[0].end_time == at(MONDAY, 12, 5)
