from datetime import datetime, timezone

import pytest

from src.biometric_attendance.biometric_attendance.common.datetime_utils import minutes_between, parse_punch_timestamp
from src.biometric_attendance.biometric_attendance.common.validators import parse_employee_number


@pytest.mark.parametrize(
    "raw, expected",
    [("1042", 1042), (" 7 ", 7), ("0012", 12), ("", None), ("12a", None), ("-3", None), ("1 2", None), (None, None)],
)
def test_parse_employee_number(raw, expected):
    assert parse_employee_number(raw) == expected


def test_parse_naive_iso_timestamp():
    assert parse_punch_timestamp("2025-03-03T09:12:00") == datetime(2025, 3, 3, 9, 12)


def test_parse_utc_timestamp_converts_to_local():
    utc = datetime(2025, 3, 3, 9, 12, tzinfo=timezone.utc)

    assert parse_punch_timestamp("2025-03-03T09:12:00Z") == utc.astimezone().replace(tzinfo=None)


def test_parse_epoch_seconds_and_millis():
    at = datetime(2025, 3, 3, 9, 12)
    seconds = int(at.timestamp())

    assert parse_punch_timestamp(seconds) == at
    assert parse_punch_timestamp(seconds * 1000) == at
    assert parse_punch_timestamp(str(seconds)) == at


@pytest.mark.parametrize("raw", ["", "yesterday", True])
def test_parse_rejects_garbage(raw):
    with pytest.raises((TypeError, ValueError)):
        parse_punch_timestamp(raw)


def test_minutes_between_truncates():
    assert minutes_between(datetime(2025, 3, 3, 9, 6, 59), datetime(2025, 3, 3, 9, 0)) == 6
