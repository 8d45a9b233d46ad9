"""
SQLAlchemy model base class for SmartPark.

Only the rate registry is persisted; scan events and sessions are computed
on demand and never stored. All models inherit from the declarative `Base`
defined here.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    pass


from .parking_rate import ParkingRate  # noqa: E402,F401
