"""
Time helpers shared by the incident and posture services.

All timestamps are timezone-aware UTC and truncated to whole milliseconds,
so that durations computed as differences are exact integer milliseconds.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

MS_PER_HOUR = 60 * 60 * 1000


def utc_now() -> datetime:
    """Current UTC time truncated to millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def to_epoch_ms(value: datetime) -> int:
    """Convert an aware datetime to integer epoch milliseconds."""
    return elapsed_ms(EPOCH, value)


def elapsed_ms(start: datetime, end: datetime) -> int:
    """Whole milliseconds between two timestamps."""
    delta = end - start
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000
