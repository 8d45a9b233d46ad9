"""
Calendar-windowed analytics over reconciled sessions.

A period selects a run of local calendar days ending today. Revenue is
bucketed by the local day of each session's exit, and every bar is paired
with a comparison day from the preceding window. The remaining metrics are
scoped by entry instant, except ``active_session_count``: a parked vehicle
has no exit to place it in any window, so it always counts the whole data
set.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable, Optional, Union

from ..core.config import get_local_timezone
from .sessions import ParkingSession
from .timestamps import local_day

_WEEKDAYS = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")

SHORT_STAY_MINUTES = 120
LONG_STAY_MINUTES = 360


class Period(str, Enum):
    SEVEN_DAY = "7d"
    THIRTY_DAY = "30d"
    MONTH_TO_DATE = "mtd"

    @classmethod
    def parse(cls, value: Union["Period", str]) -> "Period":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        aliases = {
            "7d": cls.SEVEN_DAY,
            "last 7 days": cls.SEVEN_DAY,
            "seven_day": cls.SEVEN_DAY,
            "30d": cls.THIRTY_DAY,
            "last 30 days": cls.THIRTY_DAY,
            "thirty_day": cls.THIRTY_DAY,
            "mtd": cls.MONTH_TO_DATE,
            "monthly view": cls.MONTH_TO_DATE,
            "month_to_date": cls.MONTH_TO_DATE,
        }
        if key not in aliases:
            raise ValueError(f"Unknown analytics period: {value!r}")
        return aliases[key]


class ComparisonPolicy(str, Enum):
    # Each bar is compared with the day N bars earlier.
    SHIFT_BY_BAR_COUNT = "shift"
    # Month-to-date bars are compared with the same day of the prior month.
    PREVIOUS_MONTH_SAME_DAY = "previous_month"


@dataclass(frozen=True)
class DailyBar:
    day: date
    label: str
    current_revenue: float
    previous_revenue: float


@dataclass(frozen=True)
class DurationBucket:
    label: str
    percentage: int


@dataclass(frozen=True)
class CalendarWindow:
    period: Period
    days: tuple[date, ...]
    start: datetime
    end: datetime

    @property
    def bar_count(self) -> int:
        return len(self.days)

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end

    @property
    def label(self) -> str:
        return f"{self.days[0].isoformat()} → {self.days[-1].isoformat()}"


@dataclass(frozen=True)
class AnalyticsSnapshot:
    period: Period
    window_start: datetime
    window_end: datetime
    window_label: str
    total_revenue: float
    occupancy_rate: int
    active_session_count: int
    avg_turnover_hours: float
    daily_bars: tuple[DailyBar, ...]
    duration_buckets: tuple[DurationBucket, ...]
    period_sessions: tuple[ParkingSession, ...]


def _round_half_up(value: float, places: int = 0) -> Decimal:
    quantum = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)


def _percent(part: int, whole: int) -> int:
    return int(_round_half_up(100 * part / whole)) if whole else 0


def calendar_window(period: Period, today: date, tz: tzinfo) -> CalendarWindow:
    if period is Period.SEVEN_DAY:
        count = 7
    elif period is Period.THIRTY_DAY:
        count = 30
    elif period is Period.MONTH_TO_DATE:
        count = today.day
    else:
        raise ValueError(f"Unknown analytics period: {period!r}")
    first = today - timedelta(days=count - 1)
    days = tuple(first + timedelta(days=i) for i in range(count))
    start = datetime.combine(first, time.min, tzinfo=tz)
    end = datetime.combine(today, time.max, tzinfo=tz)
    return CalendarWindow(period=period, days=days, start=start, end=end)


def _bar_label(period: Period, index: int, day: date) -> str:
    if period is Period.SEVEN_DAY:
        return _WEEKDAYS[day.weekday()]
    if index % 5 != 0:
        return ""
    if period is Period.THIRTY_DAY:
        return str(day.day)
    return str(index + 1)


def _same_day_previous_month(day: date) -> Optional[date]:
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    try:
        return day.replace(year=year, month=month)
    except ValueError:
        return None


def comparison_day(window: CalendarWindow, index: int, policy: ComparisonPolicy) -> Optional[date]:
    day = window.days[index]
    if policy is ComparisonPolicy.PREVIOUS_MONTH_SAME_DAY and window.period is Period.MONTH_TO_DATE:
        return _same_day_previous_month(day)
    return day - timedelta(days=window.bar_count)


def revenue_by_exit_day(sessions: Iterable[ParkingSession], tz: tzinfo) -> dict[date, float]:
    totals: dict[date, float] = defaultdict(float)
    for session in sessions:
        if session.exit is None:
            continue
        totals[local_day(session.exit, tz)] += session.amount or 0
    return dict(totals)


def _duration_buckets(exited: list[ParkingSession]) -> tuple[DurationBucket, ...]:
    short = medium = long = 0
    for session in exited:
        minutes = session.duration.total_minutes
        if minutes < SHORT_STAY_MINUTES:
            short += 1
        elif minutes < LONG_STAY_MINUTES:
            medium += 1
        else:
            long += 1
    total = max(1, len(exited))
    return (
        DurationBucket("Short Stay (< 2h)", _percent(short, total)),
        DurationBucket("Medium Stay (2–6h)", _percent(medium, total)),
        DurationBucket("Long Stay (> 6h)", _percent(long, total)),
    )


def aggregate(
    sessions: Iterable[ParkingSession],
    period: Union[Period, str],
    *,
    today: Optional[date] = None,
    tz: tzinfo | None = None,
    comparison: ComparisonPolicy = ComparisonPolicy.SHIFT_BY_BAR_COUNT,
) -> AnalyticsSnapshot:
    period = Period.parse(period)
    comparison = ComparisonPolicy(comparison)
    zone = tz or get_local_timezone()
    today = today or datetime.now(zone).date()
    data = list(sessions)

    window = calendar_window(period, today, zone)
    revenue = revenue_by_exit_day(data, zone)

    bars: list[DailyBar] = []
    for index, day in enumerate(window.days):
        prev = comparison_day(window, index, comparison)
        bars.append(
            DailyBar(
                day=day,
                label=_bar_label(period, index, day),
                current_revenue=revenue.get(day, 0),
                previous_revenue=revenue.get(prev, 0) if prev is not None else 0,
            )
        )

    in_window = [s for s in data if window.contains(s.entry)]
    exited = [s for s in in_window if not s.is_parked and s.duration is not None]
    parked_in_window = sum(1 for s in in_window if s.is_parked)

    avg_turnover = 0.0
    if exited:
        mean_hours = sum(s.duration.total_minutes for s in exited) / len(exited) / 60
        avg_turnover = float(_round_half_up(mean_hours, 1))

    return AnalyticsSnapshot(
        period=period,
        window_start=window.start,
        window_end=window.end,
        window_label=window.label,
        total_revenue=sum(bar.current_revenue for bar in bars),
        occupancy_rate=_percent(parked_in_window, len(in_window)),
        active_session_count=sum(1 for s in data if s.is_parked),
        avg_turnover_hours=avg_turnover,
        daily_bars=tuple(bars),
        duration_buckets=_duration_buckets(exited),
        period_sessions=tuple(in_window),
    )
