"""
Unit test fixtures and helpers.

Provides lightweight fixtures for unit testing that do NOT require
a Redis server or a running application.
"""

from datetime import datetime
from typing import Callable, Optional

import pytest

from gatewatch.models import Incident, IncidentSeverity, IncidentStatus, IncidentType
from gatewatch.models.signal_models import AuthStats, MetricsSummary, RateLimitStats, ThreatStatistics


@pytest.fixture
def incident_factory(clock) -> Callable[..., Incident]:
    """Build Incident records directly, bypassing the lifecycle service."""

    def make(
        incident_id: str = "inc-0001",
        created_at: Optional[datetime] = None,
        status: IncidentStatus = IncidentStatus.OPEN,
        severity: IncidentSeverity = IncidentSeverity.MEDIUM,
        type: IncidentType = IncidentType.OTHER,
        **fields,
    ) -> Incident:
        created_at = created_at or clock.now
        return Incident(
            id=incident_id,
            title=fields.pop("title", f"Incident {incident_id}"),
            description=fields.pop("description", "test incident"),
            type=type,
            severity=severity,
            status=status,
            created_at=created_at,
            updated_at=fields.pop("updated_at", created_at),
            reported_by=fields.pop("reported_by", "tester"),
            **fields,
        )

    return make


@pytest.fixture
def quiet_metrics() -> MetricsSummary:
    """Metrics summary with no auth failures or rate-limit violations."""
    return MetricsSummary()


@pytest.fixture
def noisy_metrics() -> MetricsSummary:
    """Metrics summary that trips every authentication and rate-limit penalty."""
    return MetricsSummary(
        auth_stats=AuthStats(failed_logins=60, successful_logins=10, account_lockouts=6, active_sessions=3),
        rate_limit_stats=RateLimitStats(violations=25),
    )


@pytest.fixture
def no_threats() -> ThreatStatistics:
    return ThreatStatistics()
