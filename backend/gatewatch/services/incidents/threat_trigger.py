"""
Threat Incident Trigger

Entry point the threat intelligence pipeline calls for every updated
per-IP summary. The collaborator runs in-process and invokes
`await app.state.threat_trigger.handle(signal)`; there is no HTTP route.
Creation is fire-and-forget: failures are logged and swallowed so they
never interrupt the signal's own processing.
"""

import logging
from typing import Optional

import redis.asyncio as aioredis

from ...models import Incident, ThreatSignal
from ...utils.logging_security import sanitize_for_log
from ..prometheus_metrics import get_metrics_instance
from .lifecycle import QUALIFYING_THREAT_LEVELS, IncidentLifecycleService

logger = logging.getLogger(__name__)

DEDUP_KEY_PREFIX = "threat:incident_created:"
DEFAULT_DEDUP_SECONDS = 24 * 60 * 60


class ThreatIncidentTrigger:
    """
    Auto-create incidents from qualifying threat signals, at most once per
    source IP per suppression window.

    The marker key is written only after a successful creation, so a failed
    attempt is retried on the next signal for that IP. A failed marker write
    is logged and the created incident is still returned. A dedup_seconds of
    0 disables suppression.
    """

    def __init__(
        self,
        lifecycle: IncidentLifecycleService,
        redis_client: aioredis.Redis,
        dedup_seconds: int = DEFAULT_DEDUP_SECONDS,
    ):
        self.lifecycle = lifecycle
        self.redis = redis_client
        self.dedup_seconds = dedup_seconds
        self.metrics = get_metrics_instance()

    @staticmethod
    def _marker_key(ip: str) -> str:
        return f"{DEDUP_KEY_PREFIX}{ip}"

    async def _mark(self, ip: str, incident_id: str) -> None:
        # The incident is already stored at this point
        try:
            await self.redis.setex(self._marker_key(ip), self.dedup_seconds, incident_id)
        except Exception as e:
            logger.warning(f"Created incident {incident_id} but could not mark {sanitize_for_log(ip)}: {e}")

    async def handle(self, signal: ThreatSignal) -> Optional[Incident]:
        if signal.threat_level not in QUALIFYING_THREAT_LEVELS:
            self.metrics.record_auto_incident("ignored")
            return None

        ip = sanitize_for_log(signal.ip)
        try:
            if self.dedup_seconds and await self.redis.exists(self._marker_key(signal.ip)):
                logger.debug(f"Auto-incident suppressed for {ip}: recent incident exists")
                self.metrics.record_auto_incident("suppressed")
                return None

            incident = await self.lifecycle.create_from_threat_signal(signal)
            if incident is None:
                self.metrics.record_auto_incident("ignored")
                return None
        except Exception as e:
            logger.warning(f"Failed to auto-create incident for threat from {ip}: {e}")
            self.metrics.record_auto_incident("failed")
            return None

        if self.dedup_seconds:
            await self._mark(signal.ip, incident.id)

        logger.info(f"Auto-created incident {incident.id} for {signal.threat_level.value} threat from {ip}")
        self.metrics.record_auto_incident("created")
        return incident
