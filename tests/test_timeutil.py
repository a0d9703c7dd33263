from datetime import datetime, timedelta

import pytest

from nodeprobe.timeutil import get_start_time, parse_duration

NOW = datetime(2024, 3, 1, 12, 0, 0)


@pytest.mark.parametrize(
    "uptime, lookback, delay",
    [
        (timedelta(0), "abc", ""),
        (timedelta(0), "", "abc"),
    ],
)
def test_get_start_time_bad_values(uptime, lookback, delay):
    with pytest.raises(ValueError):
        get_start_time(NOW, uptime, lookback, delay)


@pytest.mark.parametrize(
    "uptime, lookback, delay, expected",
    [
        (timedelta(0), "", "", NOW),
        (timedelta(seconds=5), "7s", "", NOW - timedelta(seconds=5)),
        (timedelta(seconds=5), "3s", "", NOW - timedelta(seconds=3)),
        (timedelta(seconds=5), "", "7s", NOW + timedelta(seconds=2)),
        (timedelta(seconds=5), "", "3s", NOW),
        (timedelta(seconds=10), "6s", "12s", NOW + timedelta(seconds=2)),
        (timedelta(seconds=10), "12s", "7s", NOW - timedelta(seconds=3)),
        (timedelta(seconds=10), "6s", "7s", NOW - timedelta(seconds=3)),
        (timedelta(seconds=10), "2s", "7s", NOW - timedelta(seconds=2)),
    ],
)
def test_get_start_time(uptime, lookback, delay, expected):
    assert get_start_time(NOW, uptime, lookback, delay) == expected


def test_delay_error_message_names_value():
    with pytest.raises(ValueError, match="delay duration 'abc'"):
        get_start_time(NOW, timedelta(0), "", "abc")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("0", timedelta(0)),
        ("7s", timedelta(seconds=7)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1.5s", timedelta(milliseconds=1500)),
        ("-2m", timedelta(minutes=-2)),
        ("+3ms", timedelta(milliseconds=3)),
        ("250us", timedelta(microseconds=250)),
        ("2000ns", timedelta(microseconds=2)),
        (".5h", timedelta(minutes=30)),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "5", "1x", "-", "s", "1h 2m", "."])
def test_parse_duration_rejects(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_parse_duration_overflow():
    with pytest.raises(ValueError):
        parse_duration("3000000h")