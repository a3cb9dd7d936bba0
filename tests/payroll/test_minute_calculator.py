from datetime import timedelta

from src.shift_pay.shift_pay.compensation.model import TimeBonus
from src.shift_pay.shift_pay.payroll.calculator.minute_calculator import MinuteStepEarningsCalculator
from src.shift_pay.shift_pay.payroll.model import RateSegment
from src.shift_pay.shift_pay.timer.model import ActiveShiftSnapshot, BreakInterval

from tests.fakes import MONDAY, at, make_config, monday_breaks


def _shift(start, *breaks):
    return ActiveShiftSnapshot(shift_id="shift_1", start_time=start, base_rate_at_start=12.0, breaks=tuple(breaks))


def test_two_hour_shift_with_half_hour_manual_break():
    shift = _shift(at(MONDAY, 9, 0), BreakInterval(start_time=at(MONDAY, 9, 30), end_time=at(MONDAY, 10, 0)))

    result = MinuteStepEarningsCalculator().accumulate(shift, make_config(base_rate=12), at(MONDAY, 11, 0))

    assert result.total_earnings == 18.00
    assert result.rate_segments == (RateSegment(percent=100, duration_seconds=5400),)
    assert result.final_percent == 100
    assert result.final_rate == 12.0


def test_scheduled_window_earns_nothing_even_without_a_recorded_break():
    config = make_config(base_rate=12, breaks=monday_breaks(("lunch", "12:00", "12:30")))
    shift = _shift(at(MONDAY, 11, 30))

    result = MinuteStepEarningsCalculator().accumulate(shift, config, at(MONDAY, 13, 0))

    assert result.total_earnings == 12.00
    assert result.paid_seconds == 3600


def test_segments_are_split_by_percent_and_sorted():
    config = make_config(
        base_rate=10,
        bonuses=(TimeBonus(start_time="18:00", end_time="22:00", bonus_percent=25),),
    )
    shift = _shift(at(MONDAY, 17, 0))

    result = MinuteStepEarningsCalculator().accumulate(shift, config, at(MONDAY, 19, 0))

    assert result.rate_segments == (
        RateSegment(percent=100, duration_seconds=3600),
        RateSegment(percent=125, duration_seconds=3600),
    )
    assert result.total_earnings == 22.50
    assert result.final_percent == 125
    assert result.final_rate == 12.5


def test_open_break_runs_until_as_of():
    shift = _shift(at(MONDAY, 9, 0), BreakInterval(start_time=at(MONDAY, 9, 10)))

    result = MinuteStepEarningsCalculator().accumulate(shift, make_config(base_rate=6), at(MONDAY, 10, 0))

    assert result.paid_seconds == 600
    assert result.total_earnings == 1.00


def test_final_rate_is_the_rate_just_before_as_of():
    config = make_config(
        base_rate=10,
        bonuses=(TimeBonus(start_time="18:00", end_time="22:00", bonus_percent=25),),
    )
    shift = _shift(at(MONDAY, 17, 0))

    result = MinuteStepEarningsCalculator().accumulate(shift, config, at(MONDAY, 18, 0))

    assert result.final_percent == 100


def test_nothing_earned_before_the_first_minute_starts():
    start = at(MONDAY, 9, 0)

    result = MinuteStepEarningsCalculator().accumulate(_shift(start), make_config(base_rate=12), start)

    assert result.total_earnings == 0
    assert result.rate_segments == ()
    assert result.final_rate == 12.0


def test_paid_seconds_match_shift_length_minus_breaks():
    start = at(MONDAY, 8, 0, 20)
    end = start + timedelta(hours=5, minutes=7, seconds=13)
    breaks = (
        BreakInterval(start_time=start + timedelta(minutes=30), end_time=start + timedelta(minutes=45)),
        BreakInterval(
            start_time=start + timedelta(hours=2),
            end_time=start + timedelta(hours=2, minutes=20),
            is_automatic=True,
            scheduled_break_id="coffee",
        ),
    )
    shift = _shift(start, *breaks)

    result = MinuteStepEarningsCalculator().accumulate(shift, make_config(), end)

    break_seconds = sum((b.end_time - b.start_time).total_seconds() for b in breaks)
    expected = ((end - start).total_seconds() - break_seconds) // 60 * 60
    assert abs(result.paid_seconds - expected) <= 60
