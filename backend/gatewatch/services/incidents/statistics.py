"""
Incident Statistics Aggregator

Scans the most recent incidents (capped) and computes counts, averages
and a trailing 7-day opened/resolved trend.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from ...models import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    Incident,
    IncidentStatistics,
    TrendPoint,
)
from ...repositories import IncidentRepository
from ...utils.time_utils import Clock, utc_now

logger = logging.getLogger(__name__)

DEFAULT_SCAN_LIMIT = 10000
TREND_DAYS = 7


def _mean(values: List[int]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def compute_statistics(incidents: Iterable[Incident], now: datetime, trend_days: int = TREND_DAYS) -> IncidentStatistics:
    """
    Aggregate a batch of incidents.

    Only incidents that actually carry response_time / resolution_time
    contribute to the respective averages. The trend covers the trailing
    `trend_days` ending at `now`: creations bucket by created_at's UTC date,
    resolutions by resolved_at's UTC date.
    """
    stats = IncidentStatistics()
    response_times: List[int] = []
    resolution_times: List[int] = []
    opened: Dict[str, int] = defaultdict(int)
    resolved: Dict[str, int] = defaultdict(int)
    window_start = now - timedelta(days=trend_days)

    for incident in incidents:
        stats.total_incidents += 1
        if incident.status in ACTIVE_STATUSES:
            stats.open_incidents += 1
        elif incident.status in TERMINAL_STATUSES:
            stats.resolved_incidents += 1

        stats.by_severity[incident.severity] += 1
        stats.by_type[incident.type] += 1
        stats.by_status[incident.status] += 1

        if incident.response_time is not None:
            response_times.append(incident.response_time)
        if incident.resolution_time is not None:
            resolution_times.append(incident.resolution_time)

        if window_start <= incident.created_at <= now:
            opened[incident.created_at.date().isoformat()] += 1
        if incident.resolved_at is not None and window_start <= incident.resolved_at <= now:
            resolved[incident.resolved_at.date().isoformat()] += 1

    stats.average_response_time = _mean(response_times)
    stats.average_resolution_time = _mean(resolution_times)
    stats.recent_trends = [
        TrendPoint(date=day, opened=opened.get(day, 0), resolved=resolved.get(day, 0))
        for day in sorted(set(opened) | set(resolved))
    ]
    return stats


class IncidentStatisticsService:
    """Reads incidents through the repository and aggregates them."""

    def __init__(
        self,
        repository: IncidentRepository,
        scan_limit: int = DEFAULT_SCAN_LIMIT,
        clock: Clock = utc_now,
    ):
        self.repository = repository
        self.scan_limit = scan_limit
        self._clock = clock

    async def get_statistics(self, now: Optional[datetime] = None) -> IncidentStatistics:
        """
        Full scan of up to `scan_limit` most recent incidents.

        Raises:
            RedisError: If the repository scan fails
        """
        incidents = await self.repository.list(limit=self.scan_limit)
        stats = compute_statistics(incidents, now or self._clock())

        logger.debug(
            f"Incident statistics computed over {stats.total_incidents} incidents "
            f"({stats.open_incidents} open, {stats.resolved_incidents} resolved)"
        )
        return stats
