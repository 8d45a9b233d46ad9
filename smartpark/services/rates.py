"""
Rate snapshot resolution.

The resolver only ever answers "what is the hourly rate right now". Freezing
that answer onto a session is the reconciler's job, so later edits to the
registry never reach sessions that are already open or closed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import RateSourceUnavailable, log_exception
from ..models.parking_rate import ParkingRate

CATEGORIES = ("car", "bike", "truck")

DEFAULT_RATES: Mapping[str, float] = MappingProxyType({"car": 20.0, "bike": 10.0, "truck": 50.0})

_BIKE_KEYWORDS = ("bike", "motorcycle", "two")
_TRUCK_KEYWORDS = ("truck", "heavy")


def configured_default_rates() -> dict[str, float]:
    return {
        "car": settings.default_rate_car,
        "bike": settings.default_rate_bike,
        "truck": settings.default_rate_truck,
    }


def category_for(vehicle_type: Optional[str]) -> str:
    kind = (vehicle_type or "car").strip().lower()
    if any(word in kind for word in _BIKE_KEYWORDS):
        return "bike"
    if any(word in kind for word in _TRUCK_KEYWORDS):
        return "truck"
    return "car"


class RateProvider(Protocol):
    def get_rates(self) -> Mapping[str, float]:
        ...


@dataclass(frozen=True)
class StaticRateProvider:
    rates: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_RATES))

    def get_rates(self) -> Mapping[str, float]:
        return dict(self.rates)


class SqlRateProvider:
    """Rate registry backed by the ``parking_rates`` table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_rates(self) -> Mapping[str, float]:
        try:
            rows = self.db.query(ParkingRate).all()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RateSourceUnavailable(str(exc)) from exc
        return {row.category: float(row.hourly_rate) for row in rows}

    def update_rates(self, rates: Mapping[str, float]) -> dict[str, float]:
        for category, value in rates.items():
            if category not in CATEGORIES:
                raise ValueError(f"Unknown rate category: {category}")
            if value is None or float(value) <= 0:
                raise ValueError(f"Rate for {category} must be positive")
            row = self.db.get(ParkingRate, category)
            if row is None:
                row = ParkingRate(category=category, hourly_rate=float(value))
            else:
                row.hourly_rate = float(value)
            self.db.add(row)
        self.db.commit()
        return dict(self.get_rates())


def seed_default_rates(db: Session) -> int:
    """Insert configured defaults for any missing category. Returns rows added."""
    existing = {row.category for row in db.query(ParkingRate).all()}
    added = 0
    for category, value in configured_default_rates().items():
        if category in existing:
            continue
        db.add(ParkingRate(category=category, hourly_rate=value))
        added += 1
    if added:
        db.commit()
    return added


@dataclass(frozen=True)
class RateTable:
    """Immutable rate table captured at one moment."""

    rates: Mapping[str, float]
    fallback: bool = False

    def rate_for(self, vehicle_type: Optional[str]) -> float:
        category = category_for(vehicle_type)
        value = self.rates.get(category)
        if not value or value <= 0:
            return configured_default_rates()[category]
        return float(value)

    def as_dict(self) -> dict[str, float]:
        return {category: self.rate_for(category) for category in CATEGORIES}


class RateResolver:
    def __init__(self, provider: RateProvider, logger: Optional[logging.Logger] = None) -> None:
        self.provider = provider
        self.logger = logger or logging.getLogger("RateResolver")

    def snapshot(self) -> RateTable:
        try:
            rates = self.provider.get_rates()
        except (RateSourceUnavailable, SQLAlchemyError) as exc:
            self.logger.warning("Rate source unavailable, using default rates: %s", exc)
            return RateTable(rates=DEFAULT_RATES, fallback=True)
        except Exception as exc:
            # Network-backed providers raise their own transport errors.
            log_exception(self.logger, "Rate source unavailable, using default rates", exc=exc)
            return RateTable(rates=DEFAULT_RATES, fallback=True)
        return RateTable(rates=MappingProxyType(dict(rates)))

    def rate_for(self, vehicle_type: Optional[str]) -> float:
        return self.snapshot().rate_for(vehicle_type)
