"""
Session reconciliation from raw plate scans.

Scans carry no direction, so pairing alternates per plate: the first
unmatched scan opens a session and the next scan for the same plate closes
it. A third scan opens a fresh session; closed sessions are never reopened.

Each plate's scans are folded in time order. Every step returns a new
accumulator that shares its history with the previous one instead of
copying it, so a call has no state beyond its own arguments and repeated
calls over the same scans yield equal results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, tzinfo
from functools import reduce
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from ..core.errors import NegativeDurationError
from ..schemas.scan_event import RawEvent
from .billing import compute_billing
from .event_source import coerce_event, normalize_plate
from .rates import RateProvider, RateResolver, RateTable
from .sessions import DataQualityIssue, IssueKind, ParkingSession
from .timestamps import parse_timestamp

logger = logging.getLogger("SessionReconciler")

RateSource = Union[RateResolver, RateTable, RateProvider]


@dataclass(frozen=True)
class _Scan:
    seq: int
    plate: str
    instant: datetime
    vehicle_type: Optional[str]
    rate_at_entry: Optional[float]


@dataclass(frozen=True)
class _Open:
    seq: int
    session: ParkingSession


@dataclass(frozen=True)
class _Link:
    head: Any
    tail: Optional["_Link"] = None


def _unwind(link: Optional[_Link]) -> list:
    """Items of a ``_Link`` chain, oldest first."""
    items = []
    while link is not None:
        items.append(link.head)
        link = link.tail
    items.reverse()
    return items


@dataclass(frozen=True)
class _Fold:
    """Pairing state for one plate."""

    closed: Optional[_Link] = None
    open: Optional[_Open] = None
    issues: Optional[_Link] = None


@dataclass(frozen=True)
class ReconciliationResult:
    sessions: tuple[ParkingSession, ...]
    issues: tuple[DataQualityIssue, ...]

    @property
    def closed(self) -> tuple[ParkingSession, ...]:
        return tuple(s for s in self.sessions if not s.is_parked)

    @property
    def parked(self) -> tuple[ParkingSession, ...]:
        return tuple(s for s in self.sessions if s.is_parked)


def _rate_table(rates: RateSource) -> RateTable:
    if isinstance(rates, RateTable):
        return rates
    if isinstance(rates, RateResolver):
        return rates.snapshot()
    return RateResolver(rates).snapshot()


def _normalize(
    events: Iterable[Union[RawEvent, Mapping[str, Any]]],
    tz: tzinfo | None,
) -> tuple[list[_Scan], list[DataQualityIssue]]:
    scans: list[_Scan] = []
    issues: list[DataQualityIssue] = []
    for seq, item in enumerate(events):
        try:
            event = coerce_event(item)
        except (ValidationError, TypeError, ValueError) as exc:
            logger.warning("Dropping malformed scan record index=%s: %s", seq, exc)
            issues.append(DataQualityIssue(IssueKind.MALFORMED_RECORD, None, None, f"record {seq}"))
            continue
        plate = normalize_plate(event.plate)
        if plate is None:
            logger.debug("Dropping scan with invalid plate=%r", event.plate)
            issues.append(DataQualityIssue(IssueKind.INVALID_PLATE, event.plate, _text(event.timestamp)))
            continue
        instant = parse_timestamp(event.timestamp, tz)
        if instant is None:
            logger.warning("Dropping scan with malformed timestamp plate=%s timestamp=%r", plate, event.timestamp)
            issues.append(DataQualityIssue(IssueKind.MALFORMED_TIMESTAMP, plate, _text(event.timestamp)))
            continue
        scans.append(_Scan(seq, plate, instant, event.vehicle_type, event.rate_at_entry))
    # list.sort is stable, so equal instants keep arrival order.
    scans.sort(key=lambda s: s.instant)
    return [replace(scan, seq=pos) for pos, scan in enumerate(scans)], issues


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _step(rates: RateTable, grace_minutes: Optional[int], block_minutes: Optional[int]):
    def step(acc: _Fold, scan: _Scan) -> _Fold:
        current = acc.open
        if current is None:
            rate = scan.rate_at_entry if scan.rate_at_entry is not None else rates.rate_for(scan.vehicle_type)
            opened = _Open(scan.seq, ParkingSession(plate=scan.plate, entry=scan.instant, rate_at_entry=rate))
            return _Fold(acc.closed, opened, acc.issues)

        session = current.session
        try:
            billing = compute_billing(
                session.entry,
                scan.instant,
                session.rate_at_entry,
                grace_minutes=grace_minutes,
                block_minutes=block_minutes,
            )
        except NegativeDurationError as exc:
            logger.warning("Rejecting session plate=%s: %s", scan.plate, exc)
            issue = DataQualityIssue(IssueKind.NEGATIVE_DURATION, scan.plate, scan.instant.isoformat(), str(exc))
            return _Fold(acc.closed, None, _Link(issue, acc.issues))
        closed = ParkingSession(
            plate=session.plate,
            entry=session.entry,
            rate_at_entry=session.rate_at_entry,
            exit=scan.instant,
            duration=billing.duration,
            amount=billing.amount,
        )
        return _Fold(_Link(_Open(current.seq, closed), acc.closed), None, acc.issues)

    return step


def reconcile_events(
    events: Iterable[Union[RawEvent, Mapping[str, Any]]],
    rates: RateSource,
    *,
    tz: tzinfo | None = None,
    grace_minutes: Optional[int] = None,
    block_minutes: Optional[int] = None,
) -> ReconciliationResult:
    """Pair scans into sessions and report the scans that were dropped.

    Sessions come back in chronological order of entry. Use
    :func:`smartpark.services.sessions.newest_first` for display order.
    """
    scans, issues = _normalize(events, tz)
    table = _rate_table(rates)
    by_plate: dict[str, list[_Scan]] = {}
    for scan in scans:
        by_plate.setdefault(scan.plate, []).append(scan)

    step = _step(table, grace_minutes, block_minutes)
    entries: list[_Open] = []
    for plate_scans in by_plate.values():
        folded = reduce(step, plate_scans, _Fold())
        entries.extend(_unwind(folded.closed))
        if folded.open is not None:
            entries.append(folded.open)
        issues.extend(_unwind(folded.issues))
    entries.sort(key=lambda item: item.seq)

    if table.fallback:
        logger.info("Reconciled %s scans with default rates", len(scans))
    return ReconciliationResult(
        sessions=tuple(item.session for item in entries),
        issues=tuple(issues),
    )


def reconcile(
    events: Iterable[Union[RawEvent, Mapping[str, Any]]],
    rates: RateSource,
    *,
    tz: tzinfo | None = None,
    grace_minutes: Optional[int] = None,
    block_minutes: Optional[int] = None,
) -> list[ParkingSession]:
    return list(
        reconcile_events(
            events,
            rates,
            tz=tz,
            grace_minutes=grace_minutes,
            block_minutes=block_minutes,
        ).sessions
    )
