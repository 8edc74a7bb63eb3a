"""
Date/time helpers for turning extracted schedule text into Deputy timestamps.
"""
import re
from datetime import datetime
from typing import Any, Optional, Tuple

from performance import create_logger

log = create_logger("TIMESTAMPS")

MONTHS = {
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4, 'may': 5, 'jun': 6,
    'jul': 7, 'aug': 8, 'sep': 9, 'oct': 10, 'nov': 11, 'dec': 12
}


def to_24_hour(hour: int, period: str) -> int:
    """
    Convert a 12-hour clock hour to 24-hour.

    12 AM is midnight (0), 12 PM is noon (12), other PM hours add 12.
    """
    period = period.lower()
    if period not in ('am', 'pm'):
        raise ValueError(f"Unknown period '{period}'")
    if not 1 <= hour <= 12:
        raise ValueError(f"Hour {hour} is not on a 12-hour clock")

    if period == 'pm' and hour != 12:
        return hour + 12
    if period == 'am' and hour == 12:
        return 0
    return hour


def convert_to_unix_timestamp(date_str: str, time_str: str) -> Optional[int]:
    """
    Convert a schedule date and time to a Unix timestamp in local time.

    Args:
        date_str: Date in D-MMM-YY format (e.g., "1-Dec-24")
        time_str: Time in H:MM AM/PM format (e.g., "9:00 AM")

    Returns:
        Seconds since epoch, or None if either input is malformed
    """
    try:
        day, month, year = date_str.strip().split('-')
        clock, period = time_str.strip().split()
        hours, minutes = clock.split(':')

        month_number = MONTHS[month.strip().lower()[:3]]
        hour = to_24_hour(int(hours), period)

        date = datetime(
            2000 + int(year),
            month_number,
            int(day),
            hour,
            int(minutes)
        )
        return int(date.timestamp())
    except (ValueError, KeyError, AttributeError, TypeError) as e:
        log(f"Could not convert '{date_str}' '{time_str}' to timestamp: {e!r}", "WARN")
        return None


def validate_or_default(value: Any, default: Any) -> Tuple[Any, bool]:
    """
    Return (value, False) when value is usable, otherwise (default, True).
    """
    if value is None:
        return default, True
    return value, False


def parse_int_field(raw: Any) -> Optional[int]:
    """
    Leniently read an integer field from model output.

    Accepts ints, floats and strings with a leading number ("30", "30 min").
    Booleans and anything without a leading number return None.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            return int(raw)
        except (ValueError, OverflowError):
            return None
    if isinstance(raw, str):
        match = re.match(r'\s*(-?\d+)', raw)
        if match:
            return int(match.group(1))
    return None
