"""
Security Posture Scorer

Combines the metrics summary, threat statistics and incident statistics
into five independently scored factors, a weighted overall score, a
letter grade and an ordered list of recommendations.

Each factor starts at 100, loses tiered penalties and is clamped to
[0, 100]. Recommendations re-read the raw counters and are never gated
on the factor status tiers.
"""

import logging
from datetime import datetime
from typing import Dict, List

from ...models import Grade, IncidentStatistics, MetricsSummary, PostureSnapshot, ThreatStatistics
from ...models.posture_models import (
    AuditLoggingDetails,
    AuditLoggingFactor,
    AuthenticationDetails,
    AuthenticationFactor,
    IncidentResponseDetails,
    IncidentResponseFactor,
    PostureFactors,
    RateLimitingDetails,
    RateLimitingFactor,
    ThreatIntelligenceDetails,
    ThreatIntelligenceFactor,
)
from .constants import (
    AUDIT_LOGGING_FIXED_SCORE,
    CRITICAL_THREAT_PENALTY,
    DEFAULT_LOG_COVERAGE,
    DEFAULT_LOG_RETENTION_DAYS,
    DEFAULT_RATE_LIMIT_COVERAGE,
    DEFAULT_SESSION_SECURITY,
    FACTOR_WEIGHTS,
    FAILED_LOGIN_PENALTIES,
    HIGH_THREAT_PENALTY,
    LOCKOUT_PENALTIES,
    MAX_BLOCK_RATE_BONUS,
    OPEN_INCIDENT_PENALTIES,
    RATE_LIMIT_PENALTIES,
    RECOMMEND_AUDIT_BELOW_SCORE,
    RECOMMEND_BLOCK_RATIO,
    RECOMMEND_FAILED_LOGINS_ABOVE,
    RECOMMEND_MFA_BELOW_AUTH_SCORE,
    RECOMMEND_OPEN_INCIDENTS_ABOVE,
    RECOMMEND_RESPONSE_TIME_ABOVE_MS,
    RECOMMEND_VIOLATIONS_ABOVE,
    RESPONSE_TIME_PENALTIES,
    clamp_score,
    get_factor_status,
    get_grade,
    round_half_up,
    tiered_penalty,
)

logger = logging.getLogger(__name__)


def score_authentication(metrics: MetricsSummary) -> int:
    auth = metrics.auth_stats
    score = 100
    score -= tiered_penalty(auth.failed_logins, FAILED_LOGIN_PENALTIES)
    score -= tiered_penalty(auth.account_lockouts, LOCKOUT_PENALTIES)
    return int(clamp_score(score))


def score_threat_intelligence(threats: ThreatStatistics) -> float:
    """
    Deduct per critical/high threat, then add up to +10 for the share of
    threats whose IPs are blocked. The bonus only applies once something
    has been blocked.

    The result stays fractional; the overall score is rounded once, after
    weighting.
    """
    score = 100.0
    score -= threats.critical_threats * CRITICAL_THREAT_PENALTY
    score -= threats.high_threats * HIGH_THREAT_PENALTY

    if threats.blocked_ips > 0:
        block_rate = min(threats.blocked_ips / max(threats.total_threats, 1), 1.0)
        score += block_rate * MAX_BLOCK_RATE_BONUS

    return clamp_score(score)


def score_rate_limiting(metrics: MetricsSummary) -> int:
    score = 100 - tiered_penalty(metrics.rate_limit_stats.violations, RATE_LIMIT_PENALTIES)
    return int(clamp_score(score))


def score_audit_logging() -> int:
    return AUDIT_LOGGING_FIXED_SCORE


def score_incident_response(incidents: IncidentStatistics) -> int:
    score = 100
    score -= tiered_penalty(incidents.open_incidents, OPEN_INCIDENT_PENALTIES)
    score -= tiered_penalty(incidents.average_response_time, RESPONSE_TIME_PENALTIES)
    return int(clamp_score(score))


def weighted_overall(factor_scores: Dict[str, float]) -> int:
    """Weighted sum of the factor scores, rounded half-up and clamped."""
    total = sum(factor_scores[name] * weight for name, weight in FACTOR_WEIGHTS.items())
    return int(clamp_score(round_half_up(total)))


def build_recommendations(
    metrics: MetricsSummary,
    threats: ThreatStatistics,
    incidents: IncidentStatistics,
    auth_score: int,
    audit_score: int,
) -> List[str]:
    """Ordered recommendations, each triggered independently."""
    recommendations: List[str] = []

    if auth_score < RECOMMEND_MFA_BELOW_AUTH_SCORE:
        recommendations.append("Consider implementing MFA for enhanced authentication security")
    if metrics.auth_stats.failed_logins > RECOMMEND_FAILED_LOGINS_ABOVE:
        recommendations.append("High number of failed login attempts detected - review authentication logs")

    if threats.critical_threats > 0:
        recommendations.append(f"Address {threats.critical_threats} critical threat(s) immediately")
    if threats.blocked_ips < threats.total_threats * RECOMMEND_BLOCK_RATIO:
        recommendations.append("Consider blocking more high-risk IP addresses")

    if metrics.rate_limit_stats.violations > RECOMMEND_VIOLATIONS_ABOVE:
        recommendations.append("High rate limit violations - review and adjust rate limits")

    if audit_score < RECOMMEND_AUDIT_BELOW_SCORE:
        recommendations.append("Ensure comprehensive audit logging coverage for all security events")

    if incidents.open_incidents > RECOMMEND_OPEN_INCIDENTS_ABOVE:
        recommendations.append(f"Address {incidents.open_incidents} open security incidents")
    if incidents.average_response_time > RECOMMEND_RESPONSE_TIME_ABOVE_MS:
        recommendations.append("Improve incident response time - aim for < 1 hour")

    return recommendations


class PostureScorer:
    """
    Pure posture computation over already-gathered signals.

    Example:
        scorer = PostureScorer()
        snapshot = scorer.calculate(metrics, threats, incident_stats, now)
        print(snapshot.overall_score, snapshot.grade)
    """

    def __init__(self, log_retention_days: int = DEFAULT_LOG_RETENTION_DAYS):
        self.log_retention_days = log_retention_days

    def calculate(
        self,
        metrics: MetricsSummary,
        threats: ThreatStatistics,
        incidents: IncidentStatistics,
        now: datetime,
    ) -> PostureSnapshot:
        auth_score = score_authentication(metrics)
        threat_raw = score_threat_intelligence(threats)
        threat_score = round_half_up(threat_raw)
        rate_limit_score = score_rate_limiting(metrics)
        audit_score = score_audit_logging()
        incident_score = score_incident_response(incidents)

        factor_scores: Dict[str, float] = {
            "authentication": auth_score,
            "threat_intelligence": threat_raw,
            "rate_limiting": rate_limit_score,
            "audit_logging": audit_score,
            "incident_response": incident_score,
        }
        overall = weighted_overall(factor_scores)
        grade: Grade = get_grade(overall)

        factors = PostureFactors(
            authentication=AuthenticationFactor(
                score=auth_score,
                status=get_factor_status(auth_score),
                details=AuthenticationDetails(
                    failed_login_rate=metrics.auth_stats.failed_logins,
                    account_lockouts=metrics.auth_stats.account_lockouts,
                    mfa_enabled=False,
                    session_security=DEFAULT_SESSION_SECURITY,
                ),
            ),
            threat_intelligence=ThreatIntelligenceFactor(
                score=threat_score,
                status=get_factor_status(threat_score),
                details=ThreatIntelligenceDetails(
                    critical_threats=threats.critical_threats,
                    high_threats=threats.high_threats,
                    total_threats=threats.total_threats,
                    blocked_ips=threats.blocked_ips,
                    threat_response_time=0,
                ),
            ),
            rate_limiting=RateLimitingFactor(
                score=rate_limit_score,
                status=get_factor_status(rate_limit_score),
                details=RateLimitingDetails(
                    violations=metrics.rate_limit_stats.violations,
                    coverage=DEFAULT_RATE_LIMIT_COVERAGE,
                ),
            ),
            audit_logging=AuditLoggingFactor(
                score=audit_score,
                status=get_factor_status(audit_score),
                details=AuditLoggingDetails(
                    log_coverage=DEFAULT_LOG_COVERAGE,
                    retention_days=self.log_retention_days,
                ),
            ),
            incident_response=IncidentResponseFactor(
                score=incident_score,
                status=get_factor_status(incident_score),
                details=IncidentResponseDetails(
                    open_incidents=incidents.open_incidents,
                    avg_response_time=incidents.average_response_time,
                    avg_resolution_time=incidents.average_resolution_time,
                ),
            ),
        )

        recommendations = build_recommendations(metrics, threats, incidents, auth_score, audit_score)

        displayed = dict(factor_scores, threat_intelligence=threat_score)
        logger.info(f"Security posture computed: score={overall}, grade={grade.value}, factors={displayed}")
        return PostureSnapshot(
            overall_score=overall,
            grade=grade,
            factors=factors,
            recommendations=recommendations,
            last_updated=now,
        )
