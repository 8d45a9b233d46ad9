from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from smartpark.core.errors import MalformedTimestampError
from smartpark.services.timestamps import local_day, parse_timestamp, parse_timestamp_strict

IST = ZoneInfo("Asia/Kolkata")
NEW_YORK = ZoneInfo("America/New_York")


def test_iso_with_space_separator_is_local_wall_clock():
    parsed = parse_timestamp("2024-01-01 09:00", IST)
    assert parsed == datetime(2024, 1, 1, 9, 0, tzinfo=IST)
    assert parsed.utcoffset().total_seconds() == 5.5 * 3600


def test_iso_with_zulu_suffix_converts_to_local():
    parsed = parse_timestamp("2024-03-10T18:15:00Z", IST)
    assert parsed.hour == 23 and parsed.minute == 45
    assert parsed.date() == date(2024, 3, 10)


def test_day_first_formats():
    assert parse_timestamp("05/03/24 14:30", IST) == datetime(2024, 3, 5, 14, 30, tzinfo=IST)
    assert parse_timestamp("5-3-2024", IST) == datetime(2024, 3, 5, 0, 0, tzinfo=IST)
    assert parse_timestamp("31/12/2023T23:59", IST) == datetime(2023, 12, 31, 23, 59, tzinfo=IST)


def test_epoch_seconds_and_milliseconds():
    expected = datetime(2024, 1, 1, 3, 30, tzinfo=timezone.utc)
    seconds = int(expected.timestamp())
    assert parse_timestamp(seconds, IST) == expected
    assert parse_timestamp(seconds * 1000, IST) == expected
    assert parse_timestamp(seconds, IST).hour == 9


def test_datetime_inputs_are_localized():
    naive = datetime(2024, 1, 1, 9, 0)
    assert parse_timestamp(naive, IST) == datetime(2024, 1, 1, 9, 0, tzinfo=IST)
    aware = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
    assert parse_timestamp(aware, IST).tzinfo == IST


@pytest.mark.parametrize("raw", [None, "", "   ", "not a date", "31/02/2024", "99/99/99", True, {"a": 1}])
def test_unrecognised_values_return_none(raw):
    assert parse_timestamp(raw, IST) is None


def test_strict_variant_raises():
    with pytest.raises(MalformedTimestampError):
        parse_timestamp_strict("yesterday-ish", IST)


def test_local_day_uses_local_wall_clock():
    exit_ist = parse_timestamp("2024-03-10T23:45:00+05:30", IST)
    assert local_day(exit_ist, IST) == date(2024, 3, 10)

    # 23:45 in New York is already the next day in UTC.
    late_ny = parse_timestamp("2024-03-10 23:45", NEW_YORK)
    assert late_ny.astimezone(timezone.utc).date() == date(2024, 3, 11)
    assert local_day(late_ny, NEW_YORK) == date(2024, 3, 10)
