"""
GateWatch utility helpers
"""

from .logging_security import sanitize_for_log
from .time_utils import MS_PER_HOUR, Clock, elapsed_ms, to_epoch_ms, utc_now

__all__ = [
    "sanitize_for_log",
    "MS_PER_HOUR",
    "Clock",
    "elapsed_ms",
    "to_epoch_ms",
    "utc_now",
]
