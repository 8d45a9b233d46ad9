"""
ORM model for the hourly rate registry.

One row per vehicle category (``car``, ``bike``, ``truck``). Rows are read
as a whole table whenever a rate snapshot is taken.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from . import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ParkingRate(Base):
    __tablename__ = "parking_rates"

    category: Mapped[str] = mapped_column(String(32), primary_key=True)
    hourly_rate: Mapped[float] = mapped_column(Float, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
