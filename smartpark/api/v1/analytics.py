"""
Analytics endpoints.

``period`` is validated against the ``Period`` enum, so an unknown value is
rejected with 422 before any computation runs.
"""

from __future__ import annotations

from datetime import date
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Query

from ...core.config import settings
from ...schemas.analytics import AnalyticsSnapshotOut
from ...services.analytics import ComparisonPolicy, Period, aggregate
from ...services.rates import RateResolver
from ...services.reconciler import reconcile
from .rates import get_rate_resolver
from .sessions import reconcile_local


router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


def _policy(value: Optional[ComparisonPolicy]) -> ComparisonPolicy:
    return value or ComparisonPolicy(settings.analytics_comparison)


@router.get("", response_model=AnalyticsSnapshotOut)
def analytics_snapshot(
    period: Period = Query(Period.SEVEN_DAY),
    comparison: Optional[ComparisonPolicy] = Query(None),
    as_of: Optional[date] = Query(None, description="Local date treated as today"),
    resolver: RateResolver = Depends(get_rate_resolver),
):
    sessions = reconcile_local(resolver).sessions
    snapshot = aggregate(sessions, period, today=as_of, comparison=_policy(comparison))
    return AnalyticsSnapshotOut.model_validate(snapshot)


@router.post("", response_model=AnalyticsSnapshotOut)
def analytics_for_records(
    records: List[Any] = Body(...),
    period: Period = Query(Period.SEVEN_DAY),
    comparison: Optional[ComparisonPolicy] = Query(None),
    as_of: Optional[date] = Query(None, description="Local date treated as today"),
    resolver: RateResolver = Depends(get_rate_resolver),
):
    sessions = reconcile(records, resolver)
    snapshot = aggregate(sessions, period, today=as_of, comparison=_policy(comparison))
    return AnalyticsSnapshotOut.model_validate(snapshot)
