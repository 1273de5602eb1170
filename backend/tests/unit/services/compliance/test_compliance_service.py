"""
Unit tests for ComplianceService.

Signal sources are replaced with AsyncMocks; incident statistics come
from the real service over the in-memory store.
"""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import RedisError

from gatewatch.models import Grade, IncidentSeverity, IncidentType, ScoringMode, ThreatStatistics
from gatewatch.services.compliance import ComplianceService
from gatewatch.services.prometheus_metrics import registry
from gatewatch.services.signal_sources import CollaboratorError


def _source(method: str, result=None, error: Exception = None) -> AsyncMock:
    source = AsyncMock()
    getattr(source, method).return_value = result
    if error is not None:
        getattr(source, method).side_effect = error
    return source


@pytest.fixture
def make_service(statistics_service, clock):
    def make(metrics=None, threats=None, metrics_error=None, threats_error=None) -> ComplianceService:
        return ComplianceService(
            metrics_source=_source("get_summary", metrics, metrics_error),
            threat_source=_source("get_statistics", threats, threats_error),
            incident_statistics=statistics_service,
            clock=clock,
        )

    return make


@pytest.mark.unit
class TestCalculatePosture:
    @pytest.mark.asyncio
    async def test_quiet_system(self, make_service, quiet_metrics, no_threats, clock) -> None:
        service = make_service(quiet_metrics, no_threats)

        posture = await service.calculate_posture()

        assert posture.overall_score == 99
        assert posture.grade == Grade.A
        assert posture.last_updated == clock.now
        service.metrics_source.get_summary.assert_awaited_once()
        service.threat_source.get_statistics.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_open_incidents_feed_incident_factor(self, make_service, lifecycle, quiet_metrics, no_threats) -> None:
        for i in range(6):
            await lifecycle.create_incident(f"t{i}", "d", IncidentType.OTHER, IncidentSeverity.LOW, "alice")

        posture = await make_service(quiet_metrics, no_threats).calculate_posture()

        assert posture.factors.incident_response.score == 90
        assert posture.factors.incident_response.details.open_incidents == 6
        assert "Address 6 open security incidents" in posture.recommendations

    @pytest.mark.asyncio
    async def test_publishes_gauges(self, make_service, noisy_metrics, no_threats) -> None:
        posture = await make_service(noisy_metrics, no_threats).calculate_posture()

        assert registry.get_sample_value("gatewatch_posture_overall_score") == posture.overall_score
        assert registry.get_sample_value("gatewatch_posture_factor_score", {"factor": "authentication"}) == 65

    @pytest.mark.asyncio
    async def test_metrics_source_failure_propagates(self, make_service, no_threats) -> None:
        service = make_service(threats=no_threats, metrics_error=CollaboratorError("metrics", "down"))
        with pytest.raises(CollaboratorError):
            await service.calculate_posture()

    @pytest.mark.asyncio
    async def test_threat_source_failure_propagates(self, make_service, quiet_metrics) -> None:
        service = make_service(metrics=quiet_metrics, threats_error=CollaboratorError("threat_intelligence", "down"))
        with pytest.raises(CollaboratorError) as exc_info:
            await service.calculate_posture()
        assert exc_info.value.source == "threat_intelligence"

    @pytest.mark.asyncio
    async def test_incident_scan_failure_propagates(self, make_service, quiet_metrics, no_threats, fake_redis) -> None:
        fake_redis.fail_commands.add("zrevrange")
        with pytest.raises(RedisError):
            await make_service(quiet_metrics, no_threats).calculate_posture()


@pytest.mark.unit
class TestComplianceMetrics:
    @pytest.mark.asyncio
    async def test_maps_all_frameworks(self, make_service, noisy_metrics) -> None:
        threats = ThreatStatistics(total_threats=2, high_threats=2, blocked_ips=2)
        service = make_service(noisy_metrics, threats)

        compliance = await service.get_compliance_metrics()

        assert compliance.nist.score == 100
        assert compliance.nist.mode == ScoringMode.LIVE
        assert compliance.owasp.score == 90
        assert compliance.pci.score == 85
        assert compliance.gdpr.score == 100
        service.metrics_source.get_summary.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_propagates(self, make_service, no_threats) -> None:
        service = make_service(threats=no_threats, metrics_error=CollaboratorError("metrics", "down"))
        with pytest.raises(CollaboratorError):
            await service.get_compliance_metrics()
