from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from smartpark.services.analytics import ComparisonPolicy, Period, aggregate
from smartpark.services.billing import compute_billing
from smartpark.services.sessions import ParkingSession

IST = ZoneInfo("Asia/Kolkata")
TODAY = date(2024, 3, 10)  # a Sunday


def _at(day: int, hour: int, minute: int = 0, month: int = 3) -> datetime:
    return datetime(2024, month, day, hour, minute, tzinfo=IST)


def _closed(plate: str, entry: datetime, minutes: int, rate: float = 20) -> ParkingSession:
    exit = entry + timedelta(minutes=minutes)
    billing = compute_billing(entry, exit, rate, grace_minutes=30, block_minutes=60)
    return ParkingSession(
        plate=plate,
        entry=entry,
        rate_at_entry=rate,
        exit=exit,
        duration=billing.duration,
        amount=billing.amount,
    )


def _parked(plate: str, entry: datetime) -> ParkingSession:
    return ParkingSession(plate=plate, entry=entry, rate_at_entry=20)


def _dataset() -> list[ParkingSession]:
    return [
        _closed("A", _at(9, 10), 60),  # exits Mar 9, amount 20
        _closed("B", _at(10, 8), 150),  # exits Mar 10, amount 40
        _closed("C", _at(5, 6), 400),  # exits Mar 5, amount 140
        _parked("D", _at(10, 12)),
        _closed("E", _at(2, 10), 60),  # previous window, exits Mar 2, amount 20
        _parked("F", _at(1, 9, month=2)),
    ]


def _seven_day(**kwargs):
    return aggregate(_dataset(), Period.SEVEN_DAY, today=TODAY, tz=IST, **kwargs)


def test_seven_day_bars_cover_last_seven_local_days():
    snapshot = _seven_day()
    days = [bar.day for bar in snapshot.daily_bars]
    assert days == [date(2024, 3, d) for d in range(4, 11)]
    assert [bar.label for bar in snapshot.daily_bars] == ["MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN"]
    assert snapshot.window_start == datetime(2024, 3, 4, 0, 0, tzinfo=IST)
    assert snapshot.window_end.date() == TODAY
    assert snapshot.window_label == "2024-03-04 → 2024-03-10"


def test_current_and_previous_revenue_per_bar():
    bars = {bar.day: bar for bar in _seven_day().daily_bars}
    assert bars[date(2024, 3, 5)].current_revenue == 140
    assert bars[date(2024, 3, 9)].current_revenue == 20
    assert bars[date(2024, 3, 10)].current_revenue == 40
    assert bars[date(2024, 3, 9)].previous_revenue == 20
    assert sum(bar.previous_revenue for bar in bars.values()) == 20


def test_total_revenue_equals_sum_of_bars():
    snapshot = _seven_day()
    assert snapshot.total_revenue == 200
    assert snapshot.total_revenue == sum(bar.current_revenue for bar in snapshot.daily_bars)


def test_window_scoped_metrics():
    snapshot = _seven_day()
    assert {s.plate for s in snapshot.period_sessions} == {"A", "B", "C", "D"}
    assert snapshot.occupancy_rate == 25
    # (60 + 150 + 400) / 3 minutes = 3.39 hours
    assert snapshot.avg_turnover_hours == 3.4
    assert [(b.label, b.percentage) for b in snapshot.duration_buckets] == [
        ("Short Stay (< 2h)", 33),
        ("Medium Stay (2–6h)", 33),
        ("Long Stay (> 6h)", 33),
    ]


def test_active_sessions_ignore_period_filter():
    assert _seven_day().active_session_count == 2


def test_turnover_rounds_half_up():
    sessions = [_closed("A", _at(9, 10), 60), _closed("B", _at(10, 8), 150)]
    snapshot = aggregate(sessions, Period.SEVEN_DAY, today=TODAY, tz=IST)
    assert snapshot.avg_turnover_hours == 1.8


def test_bucket_boundaries():
    sessions = [
        _closed("S", _at(9, 1), 119),
        _closed("M1", _at(9, 3), 120),
        _closed("M2", _at(9, 5), 359),
        _closed("L", _at(9, 8), 360),
    ]
    snapshot = aggregate(sessions, Period.SEVEN_DAY, today=TODAY, tz=IST)
    assert [b.percentage for b in snapshot.duration_buckets] == [25, 50, 25]


def test_empty_dataset_yields_zeroes():
    snapshot = aggregate([], Period.SEVEN_DAY, today=TODAY, tz=IST)
    assert snapshot.total_revenue == 0
    assert snapshot.occupancy_rate == 0
    assert snapshot.avg_turnover_hours == 0
    assert snapshot.active_session_count == 0
    assert [b.percentage for b in snapshot.duration_buckets] == [0, 0, 0]
    assert len(snapshot.daily_bars) == 7


def test_thirty_day_window():
    snapshot = aggregate(_dataset(), Period.THIRTY_DAY, today=TODAY, tz=IST)
    assert len(snapshot.daily_bars) == 30
    assert snapshot.daily_bars[0].day == date(2024, 2, 10)
    assert snapshot.daily_bars[0].label == "10"
    assert snapshot.daily_bars[1].label == ""
    assert snapshot.daily_bars[5].label == "15"
    assert snapshot.total_revenue == 220


def test_month_to_date_shift_policy_compares_n_days_back():
    sessions = [_closed("X", _at(19, 10, month=2), 60), _closed("Y", _at(2, 10), 60)]
    snapshot = aggregate(sessions, Period.MONTH_TO_DATE, today=TODAY, tz=IST)
    assert len(snapshot.daily_bars) == 10
    assert snapshot.daily_bars[0].day == date(2024, 3, 1)
    assert [b.label for b in snapshot.daily_bars][:6] == ["1", "", "", "", "", "6"]
    # Mar 1 - 10 days = Feb 20.
    assert snapshot.daily_bars[0].previous_revenue == 0
    assert snapshot.daily_bars[1].current_revenue == 20
    feb_20 = aggregate(
        [_closed("X", _at(20, 10, month=2), 60)], Period.MONTH_TO_DATE, today=TODAY, tz=IST
    )
    assert feb_20.daily_bars[0].previous_revenue == 20


def test_month_to_date_previous_month_policy():
    sessions = [_closed("X", _at(1, 10, month=2), 60)]
    snapshot = aggregate(
        sessions,
        Period.MONTH_TO_DATE,
        today=TODAY,
        tz=IST,
        comparison=ComparisonPolicy.PREVIOUS_MONTH_SAME_DAY,
    )
    assert snapshot.daily_bars[0].previous_revenue == 20


def test_previous_month_policy_skips_missing_days():
    sessions = [_closed("X", _at(29, 10, month=2), 60)]
    snapshot = aggregate(
        sessions,
        Period.MONTH_TO_DATE,
        today=date(2024, 3, 31),
        tz=IST,
        comparison="previous_month",
    )
    bars = snapshot.daily_bars
    assert bars[28].previous_revenue == 20  # Mar 29 vs Feb 29
    assert bars[29].previous_revenue == 0
    assert bars[30].previous_revenue == 0


def test_exit_late_in_the_evening_buckets_on_local_day():
    entry = datetime.fromisoformat("2024-03-10T22:00:00+05:30")
    session = _closed("Z", entry, 105)  # exits 23:45 IST = 18:15 UTC
    snapshot = aggregate([session], Period.SEVEN_DAY, today=TODAY, tz=IST)
    assert snapshot.daily_bars[-1].current_revenue == session.amount == 40


def test_local_day_holds_for_other_zones():
    new_york = ZoneInfo("America/New_York")
    entry = datetime(2024, 3, 10, 22, 0, tzinfo=new_york)
    session = _closed("Z", entry, 105)  # exits 23:45 local, 03:45 UTC next day
    snapshot = aggregate([session], Period.SEVEN_DAY, today=TODAY, tz=new_york)
    assert snapshot.daily_bars[-1].current_revenue == 40


def test_period_parsing():
    assert Period.parse("Last 7 Days") is Period.SEVEN_DAY
    assert Period.parse("30d") is Period.THIRTY_DAY
    assert Period.parse("Monthly View") is Period.MONTH_TO_DATE


def test_unknown_period_fails_loudly():
    with pytest.raises(ValueError):
        aggregate(_dataset(), "fortnight", today=TODAY, tz=IST)
    with pytest.raises(ValueError):
        aggregate(_dataset(), Period.SEVEN_DAY, today=TODAY, tz=IST, comparison="yearly")
