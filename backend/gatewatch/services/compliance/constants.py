"""
Posture Scoring Constants

Factor weights, threshold ladders and the static framework catalogs used
by the posture scorer and the compliance framework mapper.

Overall score formula:
    overall = round(auth * 0.25 + threat * 0.25 + rate_limit * 0.15 +
                    audit * 0.15 + incident * 0.20)

Two threshold ladders are in use and are intentionally different:
    factor status: 90 excellent, 75 good, 60 fair, else poor
    letter grade:  90 A, 80 B, 70 C, 60 D, else F

Example:
    >>> get_grade(85)
    <Grade.B: 'B'>
    >>> get_factor_status(85)
    <FactorStatus.GOOD: 'good'>
"""

import math
from typing import Dict, Final, List, Tuple

from ...models.enums import ControlStatus, FactorStatus, Grade, RiskStatus

# Factor weights (sum to 1.0)
FACTOR_WEIGHTS: Final[Dict[str, float]] = {
    "authentication": 0.25,
    "threat_intelligence": 0.25,
    "rate_limiting": 0.15,
    "audit_logging": 0.15,
    "incident_response": 0.20,
}

SCORE_MIN: Final[int] = 0
SCORE_MAX: Final[int] = 100

# Factor status ladder
STATUS_THRESHOLD_EXCELLENT: Final[int] = 90
STATUS_THRESHOLD_GOOD: Final[int] = 75
STATUS_THRESHOLD_FAIR: Final[int] = 60

# Grade ladder
GRADE_THRESHOLD_A: Final[int] = 90
GRADE_THRESHOLD_B: Final[int] = 80
GRADE_THRESHOLD_C: Final[int] = 70
GRADE_THRESHOLD_D: Final[int] = 60

# Audit logging has no coverage signal; it is scored as always adequate
AUDIT_LOGGING_FIXED_SCORE: Final[int] = 90

# Ordered (threshold, penalty) tiers: the first tier whose threshold is
# exceeded applies
FAILED_LOGIN_PENALTIES: Final[List[Tuple[int, int]]] = [(50, 20), (20, 10), (10, 5)]
LOCKOUT_PENALTIES: Final[List[Tuple[int, int]]] = [(5, 15), (0, 5)]
RATE_LIMIT_PENALTIES: Final[List[Tuple[int, int]]] = [(20, 15), (10, 10), (0, 5)]
OPEN_INCIDENT_PENALTIES: Final[List[Tuple[int, int]]] = [(10, 20), (5, 10), (0, 5)]
RESPONSE_TIME_PENALTIES: Final[List[Tuple[int, int]]] = [(2 * 3600000, 15), (3600000, 10)]

CRITICAL_THREAT_PENALTY: Final[int] = 10
HIGH_THREAT_PENALTY: Final[int] = 5
MAX_BLOCK_RATE_BONUS: Final[int] = 10

# Recommendation triggers
RECOMMEND_MFA_BELOW_AUTH_SCORE: Final[int] = 70
RECOMMEND_FAILED_LOGINS_ABOVE: Final[int] = 20
RECOMMEND_BLOCK_RATIO: Final[float] = 0.8
RECOMMEND_VIOLATIONS_ABOVE: Final[int] = 10
RECOMMEND_AUDIT_BELOW_SCORE: Final[int] = 80
RECOMMEND_OPEN_INCIDENTS_ABOVE: Final[int] = 5
RECOMMEND_RESPONSE_TIME_ABOVE_MS: Final[int] = 3600000

# Factor detail values with no live signal behind them
DEFAULT_SESSION_SECURITY: Final[int] = 85
DEFAULT_RATE_LIMIT_COVERAGE: Final[int] = 90
DEFAULT_LOG_COVERAGE: Final[int] = 95
DEFAULT_LOG_RETENTION_DAYS: Final[int] = 90


def tiered_penalty(value: float, tiers: List[Tuple[int, int]]) -> int:
    """
    Return the penalty of the first tier whose threshold `value` exceeds.

    Example:
        >>> tiered_penalty(25, FAILED_LOGIN_PENALTIES)
        10
        >>> tiered_penalty(3, FAILED_LOGIN_PENALTIES)
        0
    """
    for threshold, penalty in tiers:
        if value > threshold:
            return penalty
    return 0


def clamp_score(score: float) -> float:
    return max(SCORE_MIN, min(SCORE_MAX, score))


def get_factor_status(score: float) -> FactorStatus:
    if score >= STATUS_THRESHOLD_EXCELLENT:
        return FactorStatus.EXCELLENT
    elif score >= STATUS_THRESHOLD_GOOD:
        return FactorStatus.GOOD
    elif score >= STATUS_THRESHOLD_FAIR:
        return FactorStatus.FAIR
    else:
        return FactorStatus.POOR


def get_grade(score: float) -> Grade:
    if score >= GRADE_THRESHOLD_A:
        return Grade.A
    elif score >= GRADE_THRESHOLD_B:
        return Grade.B
    elif score >= GRADE_THRESHOLD_C:
        return Grade.C
    elif score >= GRADE_THRESHOLD_D:
        return Grade.D
    else:
        return Grade.F


# =============================================================================
# NIST SP 800-53 (live)
# =============================================================================

NIST_CONTROL_WEIGHT: Final[int] = 25

NIST_CONTROLS: Final[List[Dict]] = [
    {
        "id": "AC-2",
        "name": "Account Management",
        "evidence": ["Account lockout mechanism implemented", "Failed login tracking enabled"],
    },
    {
        "id": "AC-7",
        "name": "Unsuccessful Logon Attempts",
        "evidence": ["Rate limiting on login endpoints", "Account lockout after failed attempts"],
    },
    {
        "id": "SI-4",
        "name": "System Monitoring",
        "evidence": ["Real-time metrics collection", "Audit logging enabled"],
    },
    {
        "id": "SC-5",
        "name": "Denial of Service Protection",
        "evidence": ["Rate limiting implemented", "DDoS protection via rate limits"],
    },
]

# =============================================================================
# STATIC CATALOGS
# Statuses and scores below are fixed; they are not derived from live counters.
# =============================================================================

OWASP_STATIC_SCORE: Final[int] = 90  # 9 of 10 risks counted as mitigated

OWASP_TOP10: Final[List[Dict]] = [
    {
        "risk": "A01:2021 – Broken Access Control",
        "status": RiskStatus.MITIGATED,
        "description": "RBAC implemented, JWT-based authentication, role-based permissions",
    },
    {
        "risk": "A02:2021 – Cryptographic Failures",
        "status": RiskStatus.MITIGATED,
        "description": "HTTPS enforced, secure token storage, password hashing with bcrypt",
    },
    {
        "risk": "A03:2021 – Injection",
        "status": RiskStatus.MITIGATED,
        "description": "Input validation, parameterized queries, type-safe APIs",
    },
    {
        "risk": "A04:2021 – Insecure Design",
        "status": RiskStatus.PARTIAL,
        "description": "Security by design principles applied, threat modeling considered",
    },
    {
        "risk": "A05:2021 – Security Misconfiguration",
        "status": RiskStatus.MITIGATED,
        "description": "Secure defaults, environment-based configuration, minimal attack surface",
    },
    {
        "risk": "A07:2021 – Identification and Authentication Failures",
        "status": RiskStatus.MITIGATED,
        "description": "Account lockout, rate limiting, secure session management",
    },
    {
        "risk": "A08:2021 – Software and Data Integrity Failures",
        "status": RiskStatus.MITIGATED,
        "description": "Dependency scanning, secure update mechanisms",
    },
    {
        "risk": "A09:2021 – Security Logging and Monitoring Failures",
        "status": RiskStatus.MITIGATED,
        "description": "Comprehensive audit logging, real-time monitoring, threat detection",
    },
    {
        "risk": "A10:2021 – Server-Side Request Forgery",
        "status": RiskStatus.MITIGATED,
        "description": "Input validation, URL whitelisting, network segmentation",
    },
]

PCI_STATIC_SCORE: Final[int] = 85  # (8 compliant + 1 partial * 0.5) / 10

PCI_REQUIREMENTS: Final[List[Dict]] = [
    {"id": "Req 1", "name": "Install and maintain firewall configuration", "status": ControlStatus.COMPLIANT},
    {"id": "Req 2", "name": "Do not use vendor-supplied defaults", "status": ControlStatus.COMPLIANT},
    {"id": "Req 3", "name": "Protect stored cardholder data", "status": ControlStatus.NON_COMPLIANT},
    {"id": "Req 4", "name": "Encrypt transmission of cardholder data", "status": ControlStatus.COMPLIANT},
    {"id": "Req 5", "name": "Use and regularly update anti-virus", "status": ControlStatus.PARTIAL},
    {"id": "Req 6", "name": "Develop and maintain secure systems", "status": ControlStatus.COMPLIANT},
    {"id": "Req 7", "name": "Restrict access to cardholder data", "status": ControlStatus.COMPLIANT},
    {"id": "Req 8", "name": "Assign unique ID to each person", "status": ControlStatus.COMPLIANT},
    {"id": "Req 9", "name": "Restrict physical access", "status": ControlStatus.PARTIAL},
    {"id": "Req 10", "name": "Track and monitor network access", "status": ControlStatus.COMPLIANT},
]

GDPR_STATIC_SCORE: Final[int] = 100

GDPR_PRINCIPLES: Final[List[Dict]] = [
    {
        "principle": "Lawfulness, fairness and transparency",
        "status": ControlStatus.COMPLIANT,
        "description": "Clear privacy policies, consent mechanisms, transparent data processing",
    },
    {
        "principle": "Purpose limitation",
        "status": ControlStatus.COMPLIANT,
        "description": "Data collected only for specified purposes",
    },
    {
        "principle": "Data minimisation",
        "status": ControlStatus.COMPLIANT,
        "description": "Only necessary data collected and processed",
    },
    {
        "principle": "Accuracy",
        "status": ControlStatus.COMPLIANT,
        "description": "Data accuracy maintained, update mechanisms in place",
    },
    {
        "principle": "Storage limitation",
        "status": ControlStatus.COMPLIANT,
        "description": "Data retention policies implemented, automatic deletion",
    },
    {
        "principle": "Integrity and confidentiality",
        "status": ControlStatus.COMPLIANT,
        "description": "Encryption, access controls, secure storage",
    },
    {
        "principle": "Accountability",
        "status": ControlStatus.COMPLIANT,
        "description": "Audit logging, compliance monitoring, documentation",
    },
]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, not to even."""
    return int(math.floor(value + 0.5))
