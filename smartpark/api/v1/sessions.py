"""
Session endpoints.

Sessions are never stored. Every request reconciles the scan records from
scratch, either from the request body or from the local scan file.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response
from fastapi.responses import StreamingResponse

from ...core.config import resolve_events_path
from ...core.errors import InvalidPlateError
from ...core.pagination import paginate
from ...schemas.scan_event import ManualEntryIn
from ...schemas.session import DayStatsOut, IssueOut, ReconcileOut, SessionOut
from ...services.dashboard import day_stats, filter_sessions
from ...services.event_source import append_event, build_manual_entry, load_local_events
from ...services.exports import sessions_to_csv_rows
from ...services.rates import RateResolver
from ...services.reconciler import ReconciliationResult, reconcile_events
from ...services.sessions import newest_first
from .rates import get_rate_resolver


router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])

logger = logging.getLogger("SessionsApi")


def reconcile_local(resolver: RateResolver) -> ReconciliationResult:
    return reconcile_events(load_local_events(resolve_events_path()), resolver)


def _filtered(
    resolver: RateResolver,
    day: Optional[date],
    search: Optional[str],
    status: Optional[str],
):
    sessions = newest_first(reconcile_local(resolver).sessions)
    try:
        return sessions, filter_sessions(sessions, day=day, search=search, status=status)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@router.post("/reconcile", response_model=ReconcileOut)
def reconcile_records(
    records: List[Any] = Body(...),
    newest: bool = Query(True, alias="newest_first"),
    resolver: RateResolver = Depends(get_rate_resolver),
) -> ReconcileOut:
    table = resolver.snapshot()
    result = reconcile_events(records, table)
    sessions = newest_first(result.sessions) if newest else list(result.sessions)
    return ReconcileOut(
        sessions=[SessionOut.model_validate(s) for s in sessions],
        issues=[IssueOut.model_validate(i) for i in result.issues],
        rates_fallback=table.fallback,
    )


@router.get("", response_model=list[SessionOut])
def list_sessions(
    response: Response,
    day: Optional[date] = Query(None, alias="date"),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="Parked | Exited | All"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1),
    resolver: RateResolver = Depends(get_rate_resolver),
):
    _, visible = _filtered(resolver, day, search, status)
    page_items = paginate(visible, response, page=page, page_size=page_size)
    return [SessionOut.model_validate(s) for s in page_items]


@router.get("/stats", response_model=DayStatsOut)
def session_stats(
    day: Optional[date] = Query(None, alias="date"),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    resolver: RateResolver = Depends(get_rate_resolver),
):
    sessions = reconcile_local(resolver).sessions
    try:
        stats = day_stats(sessions, day=day, search=search, status=status)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return DayStatsOut.model_validate(stats)


@router.get("/export")
def export_sessions_csv(
    day: Optional[date] = Query(None, alias="date"),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    resolver: RateResolver = Depends(get_rate_resolver),
) -> StreamingResponse:
    _, visible = _filtered(resolver, day, search, status)
    return StreamingResponse(sessions_to_csv_rows(visible), media_type="text/csv")


@router.post("/manual-entry", status_code=201)
def manual_entry(
    payload: ManualEntryIn,
    resolver: RateResolver = Depends(get_rate_resolver),
) -> dict:
    try:
        event = build_manual_entry(payload.plate, payload.vehicle_type, resolver.snapshot())
    except (InvalidPlateError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not append_event(resolve_events_path(), event):
        raise HTTPException(status_code=500, detail="Failed to record manual entry")
    logger.info("Manual entry recorded plate=%s rate=%s", event.plate, event.rate_at_entry)
    return event.to_record()
