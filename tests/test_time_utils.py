from datetime import datetime, timezone

import pytest

from hiring_pipeline.utils.time import format_duration, parse_instant

pytestmark = pytest.mark.unit


def test_parse_instant_accepts_iso_strings_and_datetimes():
    aware = datetime(2026, 1, 2, 3, 4, tzinfo=timezone.utc)

    assert parse_instant("2026-01-02T03:04:00Z") == aware
    assert parse_instant("2026-01-02T05:04:00+02:00") == aware
    assert parse_instant(aware) == aware
    # Naive values are read as UTC
    assert parse_instant(datetime(2026, 1, 2, 3, 4)) == aware
    assert parse_instant("2026-01-02T03:04:00") == aware


@pytest.mark.parametrize("value", ["", "   ", "not a date", "2026-13-45", None, 12345, {}])
def test_parse_instant_returns_none_for_garbage(value):
    assert parse_instant(value) is None


@pytest.mark.parametrize(
    "seconds,expected",
    [
        (0, "< 1h"),
        (3599, "< 1h"),
        (3600 * 5 + 10, "5h"),
        (86400 * 3 + 3600 * 4, "3d 4h"),
        (86400, "1d 0h"),
        (-50, "< 1h"),
    ],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
