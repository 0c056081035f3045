import pytest

from guildwarden.moderation.duration_parser import (
    DAY_MS,
    HOUR_MS,
    MINUTE_MS,
    WEEK_MS,
    format_duration,
    parse_duration,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1h", 3_600_000),
        ("90s", 90_000),
        ("2d", 172_800_000),
        ("30m", 30 * MINUTE_MS),
        ("1w", WEEK_MS),
        ("5min", 5 * MINUTE_MS),
        ("3hrs", 3 * HOUR_MS),
        ("2Days", 2 * DAY_MS),
        ("  10SECONDS  ", 10_000),
        ("0s", 0),
    ],
)
def test_parse_duration_accepts_known_units(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["tomorrow", "-5m", "5", "m", "", "1.5h", "5 m", "10y", "1h30m"])
def test_parse_duration_rejects_malformed_input(text):
    assert parse_duration(text) is None


def test_parse_duration_non_string_returns_none():
    assert parse_duration(None) is None  # type: ignore[arg-type]
    assert parse_duration(60) is None  # type: ignore[arg-type]


def test_parse_duration_has_no_upper_bound():
    assert parse_duration("400d") == 400 * DAY_MS


@pytest.mark.parametrize(
    "duration_ms, expected",
    [
        (45_000, "45 seconds"),
        (1_000, "1 second"),
        (HOUR_MS, "1 hour"),
        (3 * HOUR_MS, "3 hours"),
        (5 * MINUTE_MS + 30_000, "5 minutes 30 seconds"),
        (2 * DAY_MS + 3 * HOUR_MS, "2 days 3 hours"),
        (DAY_MS + 2 * HOUR_MS + 59 * MINUTE_MS, "1 day 2 hours"),
        (28 * DAY_MS, "28 days"),
        (0, "0 seconds"),
    ],
)
def test_format_duration(duration_ms, expected):
    assert format_duration(duration_ms) == expected
