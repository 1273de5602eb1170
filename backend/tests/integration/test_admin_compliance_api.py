"""
Integration tests for the posture and compliance endpoints.

Tests:
- Admin-role gating
- Posture and framework response structure
- Live counters flowing through to the scores
- Signal source and storage failures (502 / 503)
"""

import json

import pytest

from gatewatch.config import get_settings
from gatewatch.dependencies import get_compliance_service
from gatewatch.main import app, configure_services
from gatewatch.services.signal_sources import CollaboratorError
from gatewatch.utils.time_utils import to_epoch_ms, utc_now

POSTURE = "/api/admin/compliance/posture"
METRICS = "/api/admin/compliance/metrics"


@pytest.mark.integration
class TestComplianceAccess:
    def test_unauthenticated(self, client):
        assert client.get(POSTURE).status_code in (401, 403)

    def test_auditor_is_rejected(self, client, auditor_headers):
        """Auditors hold compliance:view but are not an admin role."""
        assert client.get(METRICS, headers=auditor_headers).status_code == 403


@pytest.mark.integration
class TestPostureEndpoint:
    def test_quiet_system(self, client, admin_headers):
        resp = client.get(POSTURE, headers=admin_headers)
        data = resp.json()

        assert resp.status_code == 200
        assert data["overall_score"] == 99
        assert data["grade"] == "A"
        assert data["recommendations"] == []
        assert set(data["factors"]) == {
            "authentication",
            "threat_intelligence",
            "rate_limiting",
            "audit_logging",
            "incident_response",
        }
        assert data["factors"]["audit_logging"]["score"] == 90

    def test_live_threats_lower_the_score(self, client, admin_headers, fake_redis):
        fake_redis.strings["threat:ip:198.51.100.1"] = json.dumps({"threatLevel": "critical"})
        fake_redis.strings["threat:ip:198.51.100.2"] = json.dumps({"threatLevel": "critical"})

        data = client.get(POSTURE, headers=admin_headers).json()
        threat = data["factors"]["threat_intelligence"]

        assert threat["score"] == 80
        assert threat["details"]["critical_threats"] == 2
        assert "Address 2 critical threat(s) immediately" in data["recommendations"]
        assert "Consider blocking more high-risk IP addresses" in data["recommendations"]

    def test_retention_days_follow_settings(self, client, admin_headers, fake_redis):
        settings = get_settings().model_copy(update={"incident_retention_days": 30})
        configure_services(app, fake_redis, settings)

        data = client.get(POSTURE, headers=admin_headers).json()
        assert data["factors"]["audit_logging"]["details"]["retention_days"] == 30

    def test_signal_source_failure_is_502(self, client, admin_headers, fake_redis):
        fake_redis.fail_commands.add("mget")
        resp = client.get(POSTURE, headers=admin_headers)

        assert resp.status_code == 502
        assert resp.json()["error"] == "external_api_error"

    def test_incident_store_failure_is_503(self, client, admin_headers, fake_redis):
        created = client.post(
            "/api/admin/incidents",
            json={"title": "t", "description": "d", "type": "other", "severity": "low"},
            headers=admin_headers,
        )
        assert created.status_code == 201

        fake_redis.fail_commands.add("execute")
        resp = client.get(POSTURE, headers=admin_headers)
        assert resp.status_code == 503


class _FailingComplianceService:
    async def calculate_posture(self):
        raise CollaboratorError("threat_intelligence", "timeout")

    async def get_compliance_metrics(self):
        raise CollaboratorError("metrics", "timeout")


@pytest.mark.integration
class TestComplianceMetricsEndpoint:
    def test_framework_blocks(self, client, admin_headers):
        resp = client.get(METRICS, headers=admin_headers)
        data = resp.json()

        assert resp.status_code == 200
        assert data["nist"]["mode"] == "live"
        assert data["nist"]["score"] == 75
        assert [c["id"] for c in data["nist"]["controls"]] == ["AC-2", "AC-7", "SI-4", "SC-5"]
        assert data["owasp"]["score"] == 90
        assert data["owasp"]["mode"] == "static_catalog"
        assert data["pci"]["score"] == 85
        assert data["pci"]["requirements"][2]["status"] == "non-compliant"
        assert data["gdpr"]["score"] == 100
        assert len(data["gdpr"]["principles"]) == 7

    def test_lockouts_make_account_management_compliant(self, client, admin_headers, fake_redis):
        # Any minute key within the window counts; the current minute always is
        fake_redis.strings.update({f"metrics:auth:lockouts:{minute}": "1" for minute in _recent_minutes()})

        data = client.get(METRICS, headers=admin_headers).json()
        assert data["nist"]["controls"][0]["status"] == "compliant"
        assert data["nist"]["score"] == 100

    def test_failure_is_502(self, client, admin_headers):
        app.dependency_overrides[get_compliance_service] = lambda: _FailingComplianceService()
        resp = client.get(METRICS, headers=admin_headers)

        assert resp.status_code == 502
        assert resp.json()["details"][0]["message"] == "Signal source 'metrics' failed"


def _recent_minutes():
    current = to_epoch_ms(utc_now()) // 60000
    return range(current - 1, current + 2)
