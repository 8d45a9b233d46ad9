"""
Record-table filtering and the day summary shown above it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Iterable, Optional

from ..core.config import get_local_timezone
from .sessions import ParkingSession, SessionStatus
from .timestamps import local_day


@dataclass(frozen=True)
class DayStats:
    total: int
    parked: int
    exited: int
    revenue: float


def _status_filter(status: Optional[str]) -> Optional[SessionStatus]:
    if not status or status.strip().lower() == "all":
        return None
    value = status.strip().capitalize()
    try:
        return SessionStatus(value)
    except ValueError as exc:
        raise ValueError(f"Unknown status filter: {status!r}") from exc


def _on_day(instant: Optional[datetime], day: date, tz: tzinfo) -> bool:
    return instant is not None and local_day(instant, tz) == day


def filter_sessions(
    sessions: Iterable[ParkingSession],
    *,
    day: Optional[date] = None,
    search: Optional[str] = None,
    status: Optional[str] = None,
    tz: tzinfo | None = None,
) -> list[ParkingSession]:
    zone = tz or get_local_timezone()
    wanted = _status_filter(status)
    needle = (search or "").strip().upper()
    out: list[ParkingSession] = []
    for session in sessions:
        if day is not None and not (_on_day(session.entry, day, zone) or _on_day(session.exit, day, zone)):
            continue
        if needle and needle not in session.plate:
            continue
        if wanted is not None and session.status is not wanted:
            continue
        out.append(session)
    return out


def day_stats(
    sessions: Iterable[ParkingSession],
    *,
    day: Optional[date] = None,
    search: Optional[str] = None,
    status: Optional[str] = None,
    today: Optional[date] = None,
    tz: tzinfo | None = None,
) -> DayStats:
    """Counts over the filtered sessions plus revenue for one local day.

    With a day filter, revenue covers filtered sessions that exited that
    day. Without one, it covers every session that exited today, whatever
    the other filters say.
    """
    zone = tz or get_local_timezone()
    data = list(sessions)
    visible = filter_sessions(data, day=day, search=search, status=status, tz=zone)
    if day is not None:
        revenue_day, pool = day, visible
    else:
        revenue_day, pool = today or datetime.now(zone).date(), data
    revenue = sum((s.amount or 0) for s in pool if _on_day(s.exit, revenue_day, zone))
    return DayStats(
        total=len(visible),
        parked=sum(1 for s in visible if s.is_parked),
        exited=sum(1 for s in visible if not s.is_parked),
        revenue=revenue,
    )
