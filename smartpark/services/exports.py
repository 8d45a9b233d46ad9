"""
Display formatting and CSV export for session records.
"""

from __future__ import annotations

import csv
import io
from datetime import datetime, tzinfo
from typing import Iterable, Iterator, Optional

from ..core.config import get_local_timezone
from .billing import Duration
from .sessions import ParkingSession

CSV_HEADER = ("plate", "entry", "exit", "duration", "amount", "status")


def format_duration(duration: Optional[Duration]) -> str:
    if duration is None:
        return "-"
    return f"{duration.hours}h {duration.minutes}m"


def format_datetime(instant: Optional[datetime], tz: tzinfo | None = None) -> str:
    if instant is None:
        return "-"
    local = instant.astimezone(tz or get_local_timezone())
    return local.strftime("%d %b %Y, %H:%M")


def format_amount(amount: Optional[float]) -> str:
    value = amount or 0
    return str(int(value)) if float(value).is_integer() else f"{value:.2f}"


def _csv_line(row: Iterable[object]) -> str:
    buf = io.StringIO()
    csv.writer(buf, lineterminator="\n").writerow(row)
    return buf.getvalue()


def sessions_to_csv_rows(sessions: Iterable[ParkingSession], tz: tzinfo | None = None) -> Iterator[str]:
    zone = tz or get_local_timezone()
    yield _csv_line(CSV_HEADER)
    for s in sessions:
        yield _csv_line(
            [
                s.plate,
                s.entry.astimezone(zone).isoformat(timespec="minutes"),
                s.exit.astimezone(zone).isoformat(timespec="minutes") if s.exit else "",
                format_duration(s.duration) if s.duration else "",
                format_amount(s.amount),
                s.status.value,
            ]
        )
