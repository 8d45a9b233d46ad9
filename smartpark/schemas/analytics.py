"""
Response schemas for analytics snapshots.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List

from pydantic import BaseModel, ConfigDict

from ..services.analytics import Period
from .session import SessionOut


class DailyBarOut(BaseModel):
    day: date
    label: str
    current_revenue: float
    previous_revenue: float

    model_config = ConfigDict(from_attributes=True)


class DurationBucketOut(BaseModel):
    label: str
    percentage: int

    model_config = ConfigDict(from_attributes=True)


class AnalyticsSnapshotOut(BaseModel):
    period: Period
    window_start: datetime
    window_end: datetime
    window_label: str
    total_revenue: float
    occupancy_rate: int
    active_session_count: int
    avg_turnover_hours: float
    daily_bars: List[DailyBarOut]
    duration_buckets: List[DurationBucketOut]
    period_sessions: List[SessionOut]

    model_config = ConfigDict(from_attributes=True)
