"""
Adapters between upstream scan records and ``RawEvent``.

The local JSON scan file is the dashboard's offline data source. It holds
either a list of records or an object keyed by record id, in whatever field
spelling the sensor firmware used. Manual operator entries are appended to
the same file with the entry rate already attached.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from ..core.config import get_local_timezone
from ..core.errors import InvalidPlateError, dump_json_atomic, load_json
from ..schemas.scan_event import RawEvent
from .rates import RateResolver, RateTable

logger = logging.getLogger("EventSource")

NULL_PLATE = "NULL"

# Serialises read-modify-write cycles on the scan file across API worker threads.
_APPEND_LOCK = threading.Lock()


def normalize_plate(raw: Optional[str]) -> Optional[str]:
    """Trimmed, upper-cased plate, or ``None`` for empty and sentinel values."""
    if raw is None:
        return None
    plate = str(raw).strip().upper()
    if not plate or plate == NULL_PLATE:
        return None
    return plate


def coerce_event(item: Any) -> RawEvent:
    if isinstance(item, RawEvent):
        return item
    if not isinstance(item, Mapping):
        raise TypeError(f"scan record must be an object, got {type(item).__name__}")
    return RawEvent.model_validate(dict(item))


def normalize_record(key: Optional[str], record: Any) -> Optional[RawEvent]:
    """Map one upstream record to a ``RawEvent``; ``None`` when unusable."""
    if not isinstance(record, Mapping):
        return None
    try:
        event = coerce_event(record)
    except ValidationError as exc:
        logger.warning("Dropping malformed record key=%s: %s", key, exc.error_count())
        return None
    if normalize_plate(event.plate) is None:
        return None
    if key is not None and event.event_id is None:
        event = event.model_copy(update={"event_id": str(key)})
    return event


def _iter_entries(payload: Any) -> Iterable[tuple[str, Any]]:
    if isinstance(payload, list):
        return ((str(idx), item) for idx, item in enumerate(payload))
    if isinstance(payload, Mapping):
        return ((str(key), item) for key, item in payload.items())
    return ()


def load_local_events(path: str | Path) -> list[RawEvent]:
    target = Path(path)
    if not target.exists():
        logger.info("Local scan file not found path=%s", target)
        return []
    payload = load_json(target, None, logger=logger)
    events: list[RawEvent] = []
    for key, record in _iter_entries(payload):
        event = normalize_record(f"local_{key}", record)
        if event is not None:
            events.append(event)
    return events


def build_manual_entry(
    plate: str,
    vehicle_type: str,
    rates: Union[RateResolver, RateTable],
    *,
    now: Optional[datetime] = None,
    tz: tzinfo | None = None,
) -> RawEvent:
    """Operator entry for when the gate sensor is offline.

    The rate is resolved now and stored on the event, so the session it
    opens is billed at this rate whatever the registry says later.
    """
    clean = normalize_plate(plate)
    if clean is None:
        raise InvalidPlateError(f"invalid plate {plate!r}")
    if not vehicle_type or not vehicle_type.strip():
        raise ValueError("vehicle type is required")
    zone = tz or get_local_timezone()
    stamp = (now or datetime.now(zone)).astimezone(zone)
    return RawEvent(
        plate=clean,
        timestamp=stamp.isoformat(timespec="seconds"),
        vehicle_type=vehicle_type.strip().lower(),
        rate_at_entry=rates.rate_for(vehicle_type),
    )


def append_event(path: str | Path, event: RawEvent) -> bool:
    target = Path(path)
    with _APPEND_LOCK:
        payload = load_json(target, None, logger=logger) if target.exists() else []
        if isinstance(payload, list):
            payload.append(event.to_record())
        elif isinstance(payload, dict):
            key = f"manual_{len(payload)}"
            while key in payload:
                key = f"{key}_"
            payload[key] = event.to_record()
        else:
            logger.error("Local scan file has unexpected shape path=%s", target)
            return False
        return dump_json_atomic(target, payload, logger=logger, plate=event.plate)
