"""
Parsing and formatting of human-entered durations.

``parse_duration("30m")`` returns milliseconds, or ``None`` when the text is
not a non-negative integer immediately followed by a known unit. The parser
applies no upper bound; callers enforce their own ceiling (the timeout
command caps at 28 days).
"""

import re
from typing import Optional

SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS
WEEK_MS = 7 * DAY_MS

DURATION_PATTERN = re.compile(r"^(\d+)([a-z]+)$")

UNIT_MULTIPLIERS = {
    **dict.fromkeys(("s", "sec", "secs", "second", "seconds"), SECOND_MS),
    **dict.fromkeys(("m", "min", "mins", "minute", "minutes"), MINUTE_MS),
    **dict.fromkeys(("h", "hr", "hrs", "hour", "hours"), HOUR_MS),
    **dict.fromkeys(("d", "day", "days"), DAY_MS),
    **dict.fromkeys(("w", "week", "weeks"), WEEK_MS),
}


def parse_duration(text: str) -> Optional[int]:
    """Convert a duration like ``"90s"`` or ``"2Days"`` into milliseconds.

    Args:
        text: Raw user input. Surrounding whitespace is ignored and the unit is
            case-insensitive.

    Returns:
        The duration in milliseconds, or ``None`` if the format or unit is not
        recognized.
    """
    if not isinstance(text, str):
        return None

    match = DURATION_PATTERN.match(text.strip().lower())
    if not match:
        return None

    multiplier = UNIT_MULTIPLIERS.get(match.group(2))
    if multiplier is None:
        return None

    return int(match.group(1)) * multiplier


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def format_duration(duration_ms: int) -> str:
    """Render milliseconds as at most two units, e.g. ``"1 day 2 hours"``.

    The second unit is dropped when it is zero, so 3 hours reads
    ``"3 hours"`` rather than ``"3 hours 0 minutes"``.
    """
    seconds = max(duration_ms, 0) // SECOND_MS
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)

    if days:
        return _plural(days, "day") + (f" {_plural(hours, 'hour')}" if hours else "")
    if hours:
        return _plural(hours, "hour") + (f" {_plural(minutes, 'minute')}" if minutes else "")
    if minutes:
        return _plural(minutes, "minute") + (f" {_plural(seconds, 'second')}" if seconds else "")
    return _plural(seconds, "second")
