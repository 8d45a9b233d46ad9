"""
Service layer for SmartPark.

This package contains the reconciliation, billing and analytics engine
along with the adapters that feed it scan records and rates.
"""

from .analytics import ComparisonPolicy, Period, aggregate
from .billing import compute_billing
from .rates import RateResolver, SqlRateProvider, StaticRateProvider
from .reconciler import reconcile, reconcile_events
from .sessions import ParkingSession, SessionStatus, newest_first
from .timestamps import parse_timestamp

__all__ = [
    "ComparisonPolicy",
    "Period",
    "aggregate",
    "compute_billing",
    "RateResolver",
    "SqlRateProvider",
    "StaticRateProvider",
    "reconcile",
    "reconcile_events",
    "ParkingSession",
    "SessionStatus",
    "newest_first",
    "parse_timestamp",
]
