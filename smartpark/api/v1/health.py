"""
Health endpoint for SmartPark.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ...core.config import get_local_timezone, resolve_events_path
from ...services.rates import RateResolver
from .rates import get_rate_resolver


router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("")
def health(resolver: RateResolver = Depends(get_rate_resolver)) -> dict:
    table = resolver.snapshot()
    events_path = resolve_events_path()
    return {
        "status": "ok",
        "timestamp_utc": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "timezone": str(get_local_timezone()),
        "rate_source": "fallback" if table.fallback else "registry",
        "events_source": {"path": str(events_path), "exists": events_path.exists()},
    }
