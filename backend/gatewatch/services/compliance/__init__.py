"""
Compliance Service

Gathers the live signals once per request and feeds them through the
posture scorer and the framework mapper. There is no degraded mode: if
any source fails the whole computation fails.

Dependencies are injected at construction time, so the incident
statistics service is resolved once at startup.
"""

import asyncio
import logging
from typing import Tuple

from ...models import ComplianceMetrics, IncidentStatistics, MetricsSummary, PostureSnapshot, ThreatStatistics
from ...utils.time_utils import Clock, utc_now
from ..incidents.statistics import IncidentStatisticsService
from ..prometheus_metrics import get_metrics_instance
from ..signal_sources import MetricsSource, ThreatStatisticsSource
from .constants import DEFAULT_LOG_RETENTION_DAYS
from .frameworks import ComplianceFrameworkMapper
from .posture import PostureScorer

logger = logging.getLogger(__name__)

Signals = Tuple[MetricsSummary, ThreatStatistics, IncidentStatistics]


class ComplianceService:
    """Security posture and compliance framework reporting."""

    def __init__(
        self,
        metrics_source: MetricsSource,
        threat_source: ThreatStatisticsSource,
        incident_statistics: IncidentStatisticsService,
        clock: Clock = utc_now,
        log_retention_days: int = DEFAULT_LOG_RETENTION_DAYS,
    ):
        self.metrics_source = metrics_source
        self.threat_source = threat_source
        self.incident_statistics = incident_statistics
        self.scorer = PostureScorer(log_retention_days=log_retention_days)
        self.mapper = ComplianceFrameworkMapper()
        self._clock = clock
        self.metrics = get_metrics_instance()

    async def _gather_signals(self) -> Signals:
        metrics, threats, incidents = await asyncio.gather(
            self.metrics_source.get_summary(),
            self.threat_source.get_statistics(),
            self.incident_statistics.get_statistics(),
        )
        return metrics, threats, incidents

    def _score(self, signals: Signals) -> PostureSnapshot:
        metrics, threats, incidents = signals
        posture = self.scorer.calculate(metrics, threats, incidents, self._clock())
        self.metrics.update_posture(
            posture.overall_score,
            {name: factor.score for name, factor in posture.factors},
        )
        return posture

    async def calculate_posture(self) -> PostureSnapshot:
        """
        Compute the current security posture.

        Raises:
            CollaboratorError: If the metrics or threat source fails
            RedisError: If the incident statistics scan fails
        """
        return self._score(await self._gather_signals())

    async def get_compliance_metrics(self) -> ComplianceMetrics:
        """Compute posture and map it onto the four compliance frameworks."""
        signals = await self._gather_signals()
        posture = self._score(signals)
        metrics, threats, _ = signals
        return self.mapper.map(posture, metrics, threats)


__all__ = [
    "ComplianceService",
    "ComplianceFrameworkMapper",
    "PostureScorer",
]
