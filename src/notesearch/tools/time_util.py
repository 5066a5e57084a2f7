"""
Date/time extraction for advanced note searches.

Notes carry free-form timestamps such as ``03/15/2026 10:00 AM``. This module
pulls the first such token out of arbitrary text and exposes the temporal
predicates (past, future, today) used by the advanced query dialect.

All instants are epoch milliseconds in local time. ``0`` is the "not found"
sentinel and never means the epoch itself.
"""

import re
import time
from datetime import datetime, timedelta
from typing import Optional, Union


MS_PER_DAY = 24 * 60 * 60 * 1000

DATE_TIME_REGEX = re.compile(
    r'(\d{1,2})/(\d{1,2})/(\d{2,4})'
    r'(?:\s+(\d{1,2}):(\d{2})(?::(\d{2}))?\s*(AM|PM))?',
    re.IGNORECASE
)

Number = Union[int, float]


def now_ms() -> int:
    """Current instant in epoch milliseconds."""
    return int(time.time() * 1000)


def extract_timestamp(text: str) -> int:
    """
    Find the first date (and optional time) token in text.

    Accepts ``M/D/YY``, ``M/D/YYYY`` optionally followed by ``H:MM AM`` or
    ``H:MM:SS PM``. Two-digit years are read as 2000+YY and a missing time is
    midnight.

    Args:
        text: Arbitrary text to scan

    Returns:
        Local-time epoch milliseconds, or 0 if no token was found
    """
    match = DATE_TIME_REGEX.search(text)
    if not match:
        return 0

    month = int(match.group(1))
    day = int(match.group(2))
    year = int(match.group(3))
    if year < 100:
        year += 2000

    hours = minutes = seconds = 0
    if match.group(4):
        hours = int(match.group(4))
        minutes = int(match.group(5))
        seconds = int(match.group(6)) if match.group(6) else 0
        meridiem = match.group(7).upper()

        if meridiem == 'PM' and hours != 12:
            hours += 12
        elif meridiem == 'AM' and hours == 12:
            hours = 0

    return _local_timestamp(year, month, day, hours, minutes, seconds)


def _local_timestamp(year: int, month: int, day: int,
                     hours: int, minutes: int, seconds: int) -> int:
    """Build a local-time instant, rolling out-of-range fields over."""
    extra_years, month_index = divmod(month - 1, 12)
    try:
        base = datetime(year + extra_years, month_index + 1, 1)
        moment = base + timedelta(days=day - 1, hours=hours, minutes=minutes, seconds=seconds)
        return int(moment.timestamp() * 1000)
    except (ValueError, OverflowError, OSError):
        # Year outside what the platform clock can represent
        return 0


def _window_ms(days: Number) -> Number:
    """Convert a day window to milliseconds; only plain numbers are accepted."""
    if isinstance(days, bool) or not isinstance(days, (int, float)):
        raise TypeError(f"Day window must be a number, got {type(days).__name__}")
    return days * MS_PER_DAY


def past(timestamp: Number, lookback_days: Optional[Number] = None) -> bool:
    """
    Check whether a timestamp lies before now.

    Args:
        timestamp: Epoch milliseconds (0 means "no timestamp")
        lookback_days: If given, the timestamp must also be within this many days

    Returns:
        True if the timestamp is in the past (and within the window, if any)
    """
    if timestamp == 0:
        return False

    now = now_ms()
    if lookback_days is None:
        return timestamp < now

    cutoff = now - _window_ms(lookback_days)
    return cutoff <= timestamp < now


def future(timestamp: Number, lookahead_days: Optional[Number] = None) -> bool:
    """
    Check whether a timestamp lies after now.

    Args:
        timestamp: Epoch milliseconds (0 means "no timestamp")
        lookahead_days: If given, the timestamp must also be within this many days

    Returns:
        True if the timestamp is in the future (and within the window, if any)
    """
    if timestamp == 0:
        return False

    now = now_ms()
    if lookahead_days is None:
        return timestamp > now

    cutoff = now + _window_ms(lookahead_days)
    return now < timestamp <= cutoff


def today(timestamp: Number) -> bool:
    """Check whether a timestamp falls on today's local calendar date."""
    if timestamp == 0:
        return False

    try:
        check_date = datetime.fromtimestamp(timestamp / 1000).date()
    except (ValueError, OverflowError, OSError):
        return False
    return check_date == datetime.fromtimestamp(now_ms() / 1000).date()
