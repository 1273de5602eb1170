"""
Unit tests for incident statistics aggregation.
"""

from datetime import timedelta

import pytest

from gatewatch.models import IncidentSeverity, IncidentStatus, IncidentType
from gatewatch.services.incidents import IncidentStatisticsService, compute_statistics


@pytest.mark.unit
class TestComputeStatistics:
    """Test the pure aggregation over a batch of incidents."""

    def test_empty_batch(self, clock) -> None:
        """No incidents means zero counts, zero averages and no trend."""
        stats = compute_statistics([], clock.now)

        assert stats.total_incidents == 0
        assert stats.average_response_time == 0
        assert stats.average_resolution_time == 0
        assert stats.recent_trends == []
        assert set(stats.by_type) == set(IncidentType)
        assert all(count == 0 for count in stats.by_status.values())

    def test_contained_counts_toward_neither_open_nor_resolved(self, incident_factory, clock) -> None:
        incidents = [
            incident_factory("a", status=IncidentStatus.OPEN),
            incident_factory("b", status=IncidentStatus.INVESTIGATING),
            incident_factory("c", status=IncidentStatus.CONTAINED),
            incident_factory("d", status=IncidentStatus.RESOLVED),
            incident_factory("e", status=IncidentStatus.CLOSED),
        ]
        stats = compute_statistics(incidents, clock.now)

        assert stats.total_incidents == 5
        assert stats.open_incidents == 2
        assert stats.resolved_incidents == 2
        assert stats.open_incidents + stats.resolved_incidents < stats.total_incidents
        assert sum(stats.by_status.values()) == stats.total_incidents
        assert stats.by_status[IncidentStatus.CONTAINED] == 1

    def test_breakdowns_are_exhaustive(self, incident_factory, clock) -> None:
        incidents = [
            incident_factory("a", severity=IncidentSeverity.CRITICAL, type=IncidentType.DDOS),
            incident_factory("b", severity=IncidentSeverity.CRITICAL, type=IncidentType.MALWARE),
            incident_factory("c", severity=IncidentSeverity.LOW, type=IncidentType.DDOS),
        ]
        stats = compute_statistics(incidents, clock.now)

        assert stats.by_severity[IncidentSeverity.CRITICAL] == 2
        assert stats.by_severity[IncidentSeverity.LOW] == 1
        assert stats.by_severity[IncidentSeverity.HIGH] == 0
        assert stats.by_type[IncidentType.DDOS] == 2
        assert stats.by_type[IncidentType.BRUTE_FORCE] == 0
        assert sum(stats.by_type.values()) == 3

    def test_averages_only_count_incidents_with_the_field(self, incident_factory, clock) -> None:
        """Incidents without response/resolution time do not drag the mean down."""
        incidents = [
            incident_factory("a", response_time=1000),
            incident_factory("b", response_time=3000),
            incident_factory("c"),
            incident_factory("d", status=IncidentStatus.RESOLVED, resolved_at=clock.now, resolution_time=5000),
        ]
        stats = compute_statistics(incidents, clock.now)

        assert stats.average_response_time == 2000
        assert stats.average_resolution_time == 5000

    def test_response_time_average_zero_when_none_assigned(self, incident_factory, clock) -> None:
        stats = compute_statistics([incident_factory("a"), incident_factory("b")], clock.now)
        assert stats.average_response_time == 0

    def test_recent_trends_bucket_by_day_within_window(self, incident_factory, clock) -> None:
        """Opened buckets by created_at date, resolved by resolved_at date; older items are excluded."""
        now = clock.now
        incidents = [
            incident_factory("today", created_at=now - timedelta(hours=1)),
            incident_factory(
                "resolved-today",
                created_at=now - timedelta(days=2),
                status=IncidentStatus.RESOLVED,
                resolved_at=now - timedelta(hours=2),
                resolution_time=1,
            ),
            incident_factory("two-days", created_at=now - timedelta(days=2, hours=1)),
            incident_factory("too-old", created_at=now - timedelta(days=10)),
        ]
        stats = compute_statistics(incidents, now)

        today = now.date().isoformat()
        two_days_ago = (now - timedelta(days=2)).date().isoformat()
        trends = {p.date: (p.opened, p.resolved) for p in stats.recent_trends}

        assert trends == {two_days_ago: (2, 0), today: (1, 1)}
        assert [p.date for p in stats.recent_trends] == sorted(trends)
        assert stats.total_incidents == 4


@pytest.mark.unit
class TestIncidentStatisticsService:
    """Test the repository-backed scan."""

    @pytest.mark.asyncio
    async def test_scans_repository(self, lifecycle, statistics_service, clock) -> None:
        first = await lifecycle.create_incident("t1", "d", IncidentType.DDOS, IncidentSeverity.HIGH, "alice")
        await lifecycle.create_incident("t2", "d", IncidentType.MALWARE, IncidentSeverity.LOW, "alice")
        clock.advance(minutes=10)
        await lifecycle.assign(first.id, "bob", "bob")

        stats = await statistics_service.get_statistics()

        assert stats.total_incidents == 2
        assert stats.open_incidents == 2
        assert stats.average_response_time == 10 * 60 * 1000
        assert stats.recent_trends[0].opened == 2

    @pytest.mark.asyncio
    async def test_scan_is_capped(self, repository, lifecycle, clock) -> None:
        """Only the most recent scan_limit incidents are aggregated."""
        for i in range(5):
            clock.advance(seconds=1)
            await lifecycle.create_incident(f"t{i}", "d", IncidentType.OTHER, IncidentSeverity.LOW, "alice")

        capped = IncidentStatisticsService(repository, scan_limit=3, clock=clock)
        stats = await capped.get_statistics()

        assert stats.total_incidents == 3
