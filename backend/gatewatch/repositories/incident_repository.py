"""
Incident Repository for Redis Storage

Durable storage and time-ordered indexing of incident records.

Layout:
    incident:{id}      JSON record, expires after the retention window
    incidents:index    sorted set of ids scored by created_at (epoch ms)

Writes are whole-record replacements. There is no partial patch and no
version check: two concurrent read-modify-write cycles on the same id
resolve as last-write-wins.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import redis.asyncio as aioredis
from pydantic import ValidationError
from redis.exceptions import RedisError

from ..models import Incident, IncidentSeverity, IncidentStatus, IncidentType
from ..utils.time_utils import to_epoch_ms

INCIDENT_KEY_PREFIX = "incident:"
INCIDENT_INDEX_KEY = "incidents:index"
DEFAULT_RETENTION_SECONDS = 90 * 24 * 60 * 60


class IncidentRepository:
    """
    Redis-backed incident store.

    Example:
        repo = IncidentRepository(redis_client)
        await repo.create(incident)
        recent = await repo.list(status=IncidentStatus.OPEN, limit=20)
    """

    def __init__(self, redis_client: aioredis.Redis, retention_seconds: int = DEFAULT_RETENTION_SECONDS):
        self.redis = redis_client
        self.retention_seconds = retention_seconds
        self.logger = logging.getLogger(f"{__name__}.IncidentRepository")
        self._slow_query_threshold = 1.0  # seconds

    @staticmethod
    def _key(incident_id: str) -> str:
        return f"{INCIDENT_KEY_PREFIX}{incident_id}"

    async def create(self, incident: Incident) -> Incident:
        """
        Persist a new incident and add it to the time-ordered index.

        Index entries older than the retention window are pruned in the
        same transaction, since their records have already expired.

        Raises:
            RedisError: If the write fails (never retried)
        """
        start_time = time.time()
        created_ms = to_epoch_ms(incident.created_at)
        cutoff_ms = created_ms - self.retention_seconds * 1000
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.setex(self._key(incident.id), self.retention_seconds, incident.model_dump_json())
                pipe.zadd(INCIDENT_INDEX_KEY, {incident.id: created_ms})
                pipe.zremrangebyscore(INCIDENT_INDEX_KEY, "-inf", f"({cutoff_ms}")
                await pipe.execute()

            self._log_query_performance(
                operation="create", query={"id": incident.id}, duration=time.time() - start_time
            )
            return incident
        except RedisError as e:
            self.logger.error(f"Error creating incident {incident.id}: {e}")
            raise

    async def get(self, incident_id: str) -> Optional[Incident]:
        """
        Fetch a single incident.

        Returns:
            Incident if found, None when absent or expired
        """
        start_time = time.time()
        try:
            data = await self.redis.get(self._key(incident_id))
        except RedisError as e:
            self.logger.error(f"Error fetching incident {incident_id}: {e}")
            raise

        self._log_query_performance(operation="get", query={"id": incident_id}, duration=time.time() - start_time)

        if not data:
            return None
        return self._deserialize(incident_id, data)

    async def list(
        self,
        status: Optional[IncidentStatus] = None,
        severity: Optional[IncidentSeverity] = None,
        type: Optional[IncidentType] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Incident]:
        """
        List incidents newest first.

        The window [offset, offset + limit) is taken over the index before
        filtering, so a filtered page may hold fewer than `limit` records.
        Records whose fetch fails or that expired after indexing are skipped.

        Args:
            status: Optional status filter
            severity: Optional severity filter
            type: Optional incident type filter
            limit: Maximum number of index entries to read
            offset: Number of newest index entries to skip

        Returns:
            List of incidents in descending creation order
        """
        if limit <= 0:
            return []

        start_time = time.time()
        try:
            ids = await self.redis.zrevrange(INCIDENT_INDEX_KEY, offset, offset + limit - 1)
            if not ids:
                return []

            async with self.redis.pipeline(transaction=False) as pipe:
                for incident_id in ids:
                    pipe.get(self._key(incident_id))
                results = await pipe.execute(raise_on_error=False)
        except RedisError as e:
            self.logger.error(f"Error listing incidents (offset={offset}, limit={limit}): {e}")
            raise

        incidents: List[Incident] = []
        for incident_id, data in zip(ids, results):
            if isinstance(data, Exception):
                self.logger.debug(f"Skipping incident {incident_id}: fetch failed ({data})")
                continue
            if not data:
                self.logger.debug(f"Skipping incident {incident_id}: record expired")
                continue

            incident = self._deserialize(incident_id, data)
            if incident is None:
                continue
            if status and incident.status != status:
                continue
            if severity and incident.severity != severity:
                continue
            if type and incident.type != type:
                continue
            incidents.append(incident)

        self._log_query_performance(
            operation="list",
            query={"status": status, "severity": severity, "type": type, "offset": offset, "limit": limit},
            duration=time.time() - start_time,
            result_count=len(incidents),
        )
        return incidents

    async def update(self, incident: Incident) -> Incident:
        """
        Overwrite the whole record and refresh its retention TTL.

        Raises:
            RedisError: If the write fails (never retried)
        """
        start_time = time.time()
        try:
            await self.redis.setex(self._key(incident.id), self.retention_seconds, incident.model_dump_json())
        except RedisError as e:
            self.logger.error(f"Error updating incident {incident.id}: {e}")
            raise

        self._log_query_performance(operation="update", query={"id": incident.id}, duration=time.time() - start_time)
        return incident

    def _deserialize(self, incident_id: str, data: str) -> Optional[Incident]:
        try:
            return Incident.model_validate_json(data)
        except ValidationError as e:
            self.logger.error(f"Corrupt incident record {incident_id}: {e}")
            return None

    def _log_query_performance(
        self,
        operation: str,
        query: Dict[str, Any],
        duration: float,
        result_count: Optional[int] = None,
    ):
        """Log operation timing and warn about slow Redis round-trips."""
        log_msg = f"{operation} completed in {duration:.3f}s"

        if result_count is not None:
            log_msg += f" ({result_count} results)"

        if duration > self._slow_query_threshold:
            self.logger.warning(f"SLOW QUERY: {log_msg} - Query: {query}")
        else:
            self.logger.debug(log_msg)
