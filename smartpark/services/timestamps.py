"""
Timestamp normalisation for scan events.

Every timestamp shape seen upstream (ISO text, day-first ``D/M/YY HH:MM``
strings, epoch numbers, datetime objects) resolves to a single aware
``datetime`` in the configured local zone. Naive inputs are read as local
wall-clock time. Calendar days are always taken from the local wall clock,
never from a UTC rendering of the instant.
"""

from __future__ import annotations

import re
from datetime import date, datetime, tzinfo
from typing import Any, Optional

from ..core.config import get_local_timezone
from ..core.errors import MalformedTimestampError

_DAY_FIRST = re.compile(
    r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})(?:[ T](\d{1,2}):(\d{2}))?"
)

# Epoch values above this are milliseconds.
_EPOCH_MS_THRESHOLD = 10**12


def _localize(dt: datetime, tz: tzinfo) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def _parse_iso(text: str) -> Optional[datetime]:
    candidate = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(candidate)
    except ValueError:
        return None


def _parse_day_first(text: str) -> Optional[datetime]:
    m = _DAY_FIRST.match(text)
    if not m:
        return None
    day, month, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
    if year < 100:
        year += 2000
    hour = int(m.group(4)) if m.group(4) else 0
    minute = int(m.group(5)) if m.group(5) else 0
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError:
        return None


def _from_epoch(value: float, tz: tzinfo) -> Optional[datetime]:
    seconds = value / 1000.0 if abs(value) >= _EPOCH_MS_THRESHOLD else value
    try:
        return datetime.fromtimestamp(seconds, tz=tz)
    except (OverflowError, OSError, ValueError):
        return None


def parse_timestamp_strict(raw: Any, tz: tzinfo | None = None) -> datetime:
    """Parse ``raw`` or raise :class:`MalformedTimestampError`."""
    zone = tz or get_local_timezone()
    if isinstance(raw, datetime):
        return _localize(raw, zone)
    if isinstance(raw, bool):
        raise MalformedTimestampError(repr(raw))
    if isinstance(raw, (int, float)):
        parsed = _from_epoch(float(raw), zone)
        if parsed is None:
            raise MalformedTimestampError(repr(raw))
        return parsed
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedTimestampError(repr(raw))
    text = raw.strip()
    parsed = _parse_iso(text) or _parse_day_first(text)
    if parsed is None:
        raise MalformedTimestampError(text)
    return _localize(parsed, zone)


def parse_timestamp(raw: Any, tz: tzinfo | None = None) -> Optional[datetime]:
    """Parse ``raw`` into an aware local datetime, or ``None`` if unrecognised."""
    try:
        return parse_timestamp_strict(raw, tz)
    except MalformedTimestampError:
        return None


def local_day(instant: datetime, tz: tzinfo | None = None) -> date:
    return _localize(instant, tz or get_local_timezone()).date()
