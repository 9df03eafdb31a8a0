"""
Utility modules package.
"""

from .timing import (
    clock_time,
    day_key,
    display_datetime,
    epoch_millis,
    format_uptime,
    parse_timestamp,
    retry_with_backoff,
    short_date,
)

__all__ = [
    'clock_time',
    'day_key',
    'display_datetime',
    'epoch_millis',
    'format_uptime',
    'parse_timestamp',
    'retry_with_backoff',
    'short_date',
]
