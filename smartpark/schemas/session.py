"""
Response schemas for reconciled sessions.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from ..services.sessions import IssueKind, SessionStatus


class DurationOut(BaseModel):
    hours: int
    minutes: int
    total_minutes: int

    model_config = ConfigDict(from_attributes=True)


class SessionOut(BaseModel):
    plate: str
    entry: datetime
    exit: Optional[datetime] = None
    status: SessionStatus
    rate_at_entry: float
    duration: Optional[DurationOut] = None
    amount: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


class IssueOut(BaseModel):
    kind: IssueKind
    plate: Optional[str] = None
    timestamp: Optional[str] = None
    detail: str = ""

    model_config = ConfigDict(from_attributes=True)


class ReconcileOut(BaseModel):
    sessions: List[SessionOut]
    issues: List[IssueOut]
    rates_fallback: bool = False


class DayStatsOut(BaseModel):
    total: int
    parked: int
    exited: int
    revenue: float

    model_config = ConfigDict(from_attributes=True)
