"""
Signal Models

Output contracts of the collaborators the posture scorer and the
incident lifecycle consume: the metrics pipeline summary, threat
intelligence statistics and per-IP threat summaries.
"""

from typing import List

from pydantic import BaseModel, Field

from .enums import ThreatLevel


class AuthStats(BaseModel):
    failed_logins: int = Field(0, ge=0)
    successful_logins: int = Field(0, ge=0)
    account_lockouts: int = Field(0, ge=0)
    active_sessions: int = Field(0, ge=0)


class RateLimitViolator(BaseModel):
    ip: str
    count: int = Field(0, ge=0)


class RateLimitStats(BaseModel):
    violations: int = Field(0, ge=0)
    top_violators: List[RateLimitViolator] = Field(default_factory=list)


class MetricsSummary(BaseModel):
    """Aggregate auth and rate-limit counters from the metrics pipeline."""

    auth_stats: AuthStats = Field(default_factory=AuthStats)
    rate_limit_stats: RateLimitStats = Field(default_factory=RateLimitStats)


class ThreatStatistics(BaseModel):
    """Threat counts by level plus the number of blocked IPs."""

    total_threats: int = Field(0, ge=0)
    blocked_ips: int = Field(0, ge=0)
    critical_threats: int = Field(0, ge=0)
    high_threats: int = Field(0, ge=0)
    medium_threats: int = Field(0, ge=0)
    low_threats: int = Field(0, ge=0)


class ThreatEventCounts(BaseModel):
    failed_logins: int = Field(0, ge=0)
    rate_limit_violations: int = Field(0, ge=0)
    suspicious_activity: int = Field(0, ge=0)
    account_lockouts: int = Field(0, ge=0)


class ThreatSignal(BaseModel):
    """Per-IP threat summary emitted by the threat intelligence component."""

    ip: str
    threat_score: int = Field(0, ge=0, le=100)
    threat_level: ThreatLevel
    event_types: ThreatEventCounts = Field(default_factory=ThreatEventCounts)


__all__ = [
    "AuthStats",
    "RateLimitViolator",
    "RateLimitStats",
    "MetricsSummary",
    "ThreatStatistics",
    "ThreatEventCounts",
    "ThreatSignal",
]
