"""
Signal Sources for Posture Scoring

Contracts for the external collaborators the posture scorer consumes,
plus Redis-backed adapters reading the counters those pipelines publish:

    metrics:auth:{failed,success,lockouts}:{minute}   per-minute counters
    metrics:ratelimit:total:{minute}                  per-minute counter
    metrics:ratelimit:by_ip:{minute}                  sorted set ip -> count
    token:*                                           live session tokens
    threat:ip:{ip}                                    per-IP threat JSON
    threat:blocked_ips                                set of blocked IPs

Any adapter failure is raised as CollaboratorError; posture computation
has no degraded mode.
"""

import json
import logging
from typing import List, Optional, Protocol, runtime_checkable

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from ..models import MetricsSummary, ThreatLevel, ThreatStatistics
from ..models.signal_models import AuthStats, RateLimitStats, RateLimitViolator
from ..utils.time_utils import Clock, to_epoch_ms, utc_now

logger = logging.getLogger(__name__)

METRICS_PREFIX = "metrics"
THREAT_KEY_PREFIX = "threat:ip:"
BLOCKED_IPS_KEY = "threat:blocked_ips"

SUMMARY_WINDOW_MINUTES = 5
TOP_VIOLATORS = 5
THREAT_SCAN_LIMIT = 1000


class CollaboratorError(Exception):
    """Raised when an external signal source cannot produce its summary."""

    def __init__(self, source: str, message: str):
        self.source = source
        self.message = message
        super().__init__(f"{source}: {message}")


@runtime_checkable
class MetricsSource(Protocol):
    async def get_summary(self) -> MetricsSummary: ...


@runtime_checkable
class ThreatStatisticsSource(Protocol):
    async def get_statistics(self) -> ThreatStatistics: ...


class RedisMetricsSource:
    """Aggregate auth and rate-limit counters over the last five minutes."""

    def __init__(self, redis_client: aioredis.Redis, clock: Clock = utc_now):
        self.redis = redis_client
        self._clock = clock

    async def _count_sum(self, prefix: str, current_minute: int) -> int:
        keys = [f"{prefix}:{current_minute - i}" for i in range(SUMMARY_WINDOW_MINUTES)]
        values = await self.redis.mget(keys)
        return sum(int(v) for v in values if v)

    async def _active_sessions(self) -> int:
        count = 0
        async for key in self.redis.scan_iter(match="token:*"):
            if "blacklist" in key or "family" in key:
                continue
            count += 1
        return count

    async def get_summary(self) -> MetricsSummary:
        current_minute = to_epoch_ms(self._clock()) // 60000
        try:
            failed = await self._count_sum(f"{METRICS_PREFIX}:auth:failed", current_minute)
            success = await self._count_sum(f"{METRICS_PREFIX}:auth:success", current_minute)
            lockouts = await self._count_sum(f"{METRICS_PREFIX}:auth:lockouts", current_minute)
            sessions = await self._active_sessions()
            violations = await self._count_sum(f"{METRICS_PREFIX}:ratelimit:total", current_minute)
            top = await self.redis.zrevrange(
                f"{METRICS_PREFIX}:ratelimit:by_ip:{current_minute}", 0, TOP_VIOLATORS - 1, withscores=True
            )
        except (RedisError, ValueError) as e:
            logger.error(f"Failed to read metrics summary: {e}")
            raise CollaboratorError("metrics", str(e)) from e

        return MetricsSummary(
            auth_stats=AuthStats(
                failed_logins=failed,
                successful_logins=success,
                account_lockouts=lockouts,
                active_sessions=sessions,
            ),
            rate_limit_stats=RateLimitStats(
                violations=violations,
                top_violators=[RateLimitViolator(ip=ip, count=int(score)) for ip, score in top],
            ),
        )


def _parse_threat_level(data: str) -> Optional[ThreatLevel]:
    """Pull the threat level out of a stored per-IP summary, or None if unreadable."""
    try:
        record = json.loads(data)
        level = record.get("threatLevel", record.get("threat_level"))
        return ThreatLevel(level)
    except (ValueError, TypeError, AttributeError):
        return None


class RedisThreatStatisticsSource:
    """Count tracked threats by level and the blocked-IP set."""

    def __init__(self, redis_client: aioredis.Redis, scan_limit: int = THREAT_SCAN_LIMIT):
        self.redis = redis_client
        self.scan_limit = scan_limit

    async def get_statistics(self) -> ThreatStatistics:
        try:
            keys: List[str] = []
            async for key in self.redis.scan_iter(match=f"{THREAT_KEY_PREFIX}*"):
                keys.append(key)
                if len(keys) >= self.scan_limit:
                    break
            values = await self.redis.mget(keys) if keys else []
            blocked = await self.redis.scard(BLOCKED_IPS_KEY)
        except RedisError as e:
            logger.error(f"Failed to read threat statistics: {e}")
            raise CollaboratorError("threat_intelligence", str(e)) from e

        stats = ThreatStatistics(blocked_ips=blocked)
        for key, data in zip(keys, values):
            if not data:
                continue
            level = _parse_threat_level(data)
            if level is None:
                logger.debug(f"Skipping unreadable threat record {key}")
                continue
            stats.total_threats += 1
            if level == ThreatLevel.CRITICAL:
                stats.critical_threats += 1
            elif level == ThreatLevel.HIGH:
                stats.high_threats += 1
            elif level == ThreatLevel.MEDIUM:
                stats.medium_threats += 1
            else:
                stats.low_threats += 1
        return stats


__all__ = [
    "CollaboratorError",
    "MetricsSource",
    "ThreatStatisticsSource",
    "RedisMetricsSource",
    "RedisThreatStatisticsSource",
]
