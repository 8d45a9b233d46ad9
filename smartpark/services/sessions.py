"""
Value objects produced by reconciliation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from .billing import Duration


class SessionStatus(str, Enum):
    PARKED = "Parked"
    EXITED = "Exited"


@dataclass(frozen=True)
class ParkingSession:
    plate: str
    entry: datetime
    rate_at_entry: float
    exit: Optional[datetime] = None
    duration: Optional[Duration] = None
    amount: Optional[float] = None

    @property
    def status(self) -> SessionStatus:
        return SessionStatus.EXITED if self.exit is not None else SessionStatus.PARKED

    @property
    def is_parked(self) -> bool:
        return self.exit is None

    @property
    def key(self) -> tuple[str, datetime]:
        return (self.plate, self.entry)


class IssueKind(str, Enum):
    MALFORMED_TIMESTAMP = "MALFORMED_TIMESTAMP"
    MALFORMED_RECORD = "MALFORMED_RECORD"
    INVALID_PLATE = "INVALID_PLATE"
    NEGATIVE_DURATION = "NEGATIVE_DURATION"


@dataclass(frozen=True)
class DataQualityIssue:
    kind: IssueKind
    plate: Optional[str]
    timestamp: Optional[str]
    detail: str = ""


def newest_first(sessions: Iterable[ParkingSession]) -> list[ParkingSession]:
    """Presentation order: reverse of the chronological reconciliation output."""
    return list(reversed(list(sessions)))
