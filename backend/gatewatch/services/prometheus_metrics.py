"""
Prometheus Metrics Collection for GateWatch
Incident lifecycle and security posture metrics
"""

import logging

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, Info, generate_latest

logger = logging.getLogger(__name__)

# Create registry for metrics
registry = CollectorRegistry()

service_info = Info("gatewatch_service", "Service information", registry=registry)

# HTTP Metrics
http_requests_total = Counter(
    "gatewatch_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=registry,
)

http_request_duration_seconds = Histogram(
    "gatewatch_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=registry,
)

# Incident Metrics
incidents_created_total = Counter(
    "gatewatch_incidents_created_total",
    "Total incidents created",
    ["type", "severity", "source"],
    registry=registry,
)

incident_status_transitions_total = Counter(
    "gatewatch_incident_status_transitions_total",
    "Total incident status changes",
    ["status"],
    registry=registry,
)

auto_incident_outcomes_total = Counter(
    "gatewatch_auto_incident_outcomes_total",
    "Outcomes of threat-signal driven incident creation",
    ["outcome"],
    registry=registry,
)

# Posture Metrics
posture_overall_score = Gauge(
    "gatewatch_posture_overall_score",
    "Most recently computed overall security posture score",
    registry=registry,
)

posture_factor_score = Gauge(
    "gatewatch_posture_factor_score",
    "Most recently computed posture factor score",
    ["factor"],
    registry=registry,
)


class PrometheusMetrics:
    """Centralized metrics collection and management"""

    def __init__(self):
        service_info.info({"service": "gatewatch"})

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics"""
        http_requests_total.labels(method=method, endpoint=endpoint, status=str(status_code)).inc()
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

    def record_incident_created(self, incident_type: str, severity: str, source: str):
        incidents_created_total.labels(type=incident_type, severity=severity, source=source).inc()

    def record_status_transition(self, status: str):
        incident_status_transitions_total.labels(status=status).inc()

    def record_auto_incident(self, outcome: str):
        """outcome is one of: created, ignored, suppressed, failed"""
        auto_incident_outcomes_total.labels(outcome=outcome).inc()

    def update_posture(self, overall_score: int, factor_scores: dict):
        posture_overall_score.set(overall_score)
        for factor, score in factor_scores.items():
            posture_factor_score.labels(factor=factor).set(score)

    def get_metrics(self) -> bytes:
        """Get all metrics in Prometheus format"""
        return generate_latest(registry)


# Global metrics instance
metrics = PrometheusMetrics()


def get_metrics_instance() -> PrometheusMetrics:
    """Get the global metrics instance"""
    return metrics
