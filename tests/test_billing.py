from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from smartpark.core.errors import NegativeDurationError
from smartpark.services.billing import compute_billing

IST = ZoneInfo("Asia/Kolkata")
ENTRY = datetime(2024, 1, 1, 9, 0, tzinfo=IST)


def _bill(minutes: float, rate: float = 20):
    return compute_billing(ENTRY, ENTRY + timedelta(minutes=minutes), rate, grace_minutes=30, block_minutes=60)


@pytest.mark.parametrize(
    "minutes, expected",
    [
        (0, 0),
        (20, 0),
        (30, 0),
        (31, 20),
        (90, 20),
        (91, 40),
        (125, 40),
        (24 * 60, 480),
    ],
)
def test_grace_period_and_hourly_rounding(minutes, expected):
    assert _bill(minutes).amount == expected


def test_duration_decomposition():
    billing = _bill(125)
    assert billing.duration.total_minutes == 125
    assert billing.duration.hours == 2
    assert billing.duration.minutes == 5


def test_partial_minutes_are_floored():
    billing = compute_billing(ENTRY, ENTRY + timedelta(minutes=30, seconds=59), 20, grace_minutes=30, block_minutes=60)
    assert billing.duration.total_minutes == 30
    assert billing.amount == 0


def test_amount_uses_given_entry_rate():
    assert _bill(200, rate=35).amount == 3 * 35


def test_defaults_come_from_settings():
    billing = compute_billing(ENTRY, ENTRY + timedelta(minutes=31), 20)
    assert billing.amount == 20


def test_negative_duration_is_an_error():
    with pytest.raises(NegativeDurationError):
        compute_billing(ENTRY, ENTRY - timedelta(minutes=1), 20)
