"""
Timing utilities.

Helper functions for time-related operations and the date/time
formats used in attendance records.
"""

import time
from datetime import datetime
from typing import Callable, TypeVar

T = TypeVar('T')


def format_uptime(seconds: float) -> str:
    """
    Format uptime in human-readable format.

    Args:
        seconds: Uptime in seconds

    Returns:
        Formatted string (e.g., "1d 2h 30m 45s")
    """
    seconds = int(seconds)

    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    parts = []
    if days > 0:
        parts.append(f'{days}d')
    if hours > 0:
        parts.append(f'{hours}h')
    if minutes > 0:
        parts.append(f'{minutes}m')
    parts.append(f'{secs}s')

    return ' '.join(parts)


def day_key(moment: datetime) -> str:
    """
    Day key stored on attendance records.

    Returns:
        Date string such as "Sat Oct 17 2026"
    """
    return moment.strftime('%a %b %d %Y')


def clock_time(moment: datetime) -> str:
    """
    Clock time stored on attendance records.

    Returns:
        Time string such as "3:04:05 PM"
    """
    hour = moment.hour % 12 or 12
    return f"{hour}:{moment:%M:%S} {moment:%p}"


def short_date(moment: datetime) -> str:
    """
    Short date used in exports and student details.

    Returns:
        Date string such as "10/7/2026"
    """
    return f'{moment.month}/{moment.day}/{moment.year}'


def display_datetime(moment: datetime) -> str:
    """
    Long date and time shown on the dashboard header.

    Returns:
        String such as "Saturday, October 17, 2026 | 03:04:05 PM"
    """
    return f"{moment:%A, %B} {moment.day}, {moment.year} | {moment:%I:%M:%S %p}"


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into local time.

    Accepts a trailing "Z" (UTC) as written by browsers. Offset-aware
    values are converted to the local zone; naive values are taken as local.

    Raises:
        ValueError: If the value is not ISO-8601
    """
    if value.endswith(('Z', 'z')):
        value = value[:-1] + '+00:00'
    moment = datetime.fromisoformat(value)
    if moment.tzinfo is not None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment


def epoch_millis(moment: datetime) -> int:
    """Milliseconds since the epoch for a local datetime."""
    return int(moment.timestamp() * 1000)


def retry_with_backoff(
    func: Callable[[], T],
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0
) -> T:
    """
    Retry function with exponential backoff.

    Args:
        func: Function to retry
        max_attempts: Maximum number of attempts
        initial_delay: Initial delay in seconds
        backoff_factor: Backoff multiplier

    Returns:
        Function result

    Raises:
        Last exception if all attempts fail
    """
    delay = initial_delay
    last_exception: Exception | None = None

    for attempt in range(max_attempts):
        try:
            return func()
        except Exception as e:
            last_exception = e
            if attempt < max_attempts - 1:
                time.sleep(delay)
                delay *= backoff_factor

    if last_exception:
        raise last_exception

    raise RuntimeError('Retry failed with no exception')
