"""
Billing for a closed parking session.

The first ``grace_minutes`` are free. Past that, every started block of
``block_minutes`` is billed at the rate frozen on the session at entry.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.config import settings
from ..core.errors import NegativeDurationError


@dataclass(frozen=True)
class Duration:
    hours: int
    minutes: int
    total_minutes: int

    @classmethod
    def from_minutes(cls, total_minutes: int) -> "Duration":
        hours, minutes = divmod(total_minutes, 60)
        return cls(hours=hours, minutes=minutes, total_minutes=total_minutes)


@dataclass(frozen=True)
class Billing:
    duration: Duration
    amount: float


def elapsed_minutes(entry: datetime, exit: datetime) -> int:
    seconds = (exit - entry).total_seconds()
    if seconds < 0:
        raise NegativeDurationError(entry, exit)
    return int(seconds // 60)


def amount_for(total_minutes: int, rate_at_entry: float, *, grace_minutes: int, block_minutes: int) -> float:
    if total_minutes <= grace_minutes:
        return 0
    blocks = math.ceil((total_minutes - grace_minutes) / block_minutes)
    return blocks * rate_at_entry


def compute_billing(
    entry: datetime,
    exit: datetime,
    rate_at_entry: float,
    *,
    grace_minutes: Optional[int] = None,
    block_minutes: Optional[int] = None,
) -> Billing:
    grace = settings.billing_grace_minutes if grace_minutes is None else grace_minutes
    block = settings.billing_block_minutes if block_minutes is None else block_minutes
    total = elapsed_minutes(entry, exit)
    return Billing(
        duration=Duration.from_minutes(total),
        amount=amount_for(total, rate_at_entry, grace_minutes=grace, block_minutes=block),
    )
