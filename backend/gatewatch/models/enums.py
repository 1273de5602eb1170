"""
Shared Enums

Enumeration types for incidents, threat signals and posture reporting.
Kept separate from the pydantic models so routes, services and
repositories can import them without circular references.

Usage:
    from gatewatch.models.enums import IncidentStatus, IncidentSeverity
"""

from enum import Enum


class IncidentStatus(str, Enum):
    """
    Lifecycle status of a security incident.

    Any status may move to any other through an explicit status update;
    there is no transition table and no timeout-driven transition.
    """

    OPEN = "open"
    INVESTIGATING = "investigating"
    CONTAINED = "contained"
    RESOLVED = "resolved"
    CLOSED = "closed"


# Statuses that stamp resolved_at / resolution_time when entered
TERMINAL_STATUSES = frozenset({IncidentStatus.RESOLVED, IncidentStatus.CLOSED})

# Statuses counted as "open" by the statistics aggregator
ACTIVE_STATUSES = frozenset({IncidentStatus.OPEN, IncidentStatus.INVESTIGATING})


class IncidentSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IncidentType(str, Enum):
    BRUTE_FORCE = "brute_force"
    CREDENTIAL_STUFFING = "credential_stuffing"
    RATE_LIMIT_ABUSE = "rate_limit_abuse"
    ACCOUNT_LOCKOUT = "account_lockout"
    SUSPICIOUS_ACTIVITY = "suspicious_activity"
    DATA_BREACH = "data_breach"
    DDOS = "ddos"
    MALWARE = "malware"
    UNAUTHORIZED_ACCESS = "unauthorized_access"
    OTHER = "other"


class ThreatLevel(str, Enum):
    """Threat level reported by the threat intelligence collaborator."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class FactorStatus(str, Enum):
    """Status tier of a single posture factor (90/75/60 ladder)."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class Grade(str, Enum):
    """Letter grade of the overall posture score (90/80/70/60 ladder)."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class ControlStatus(str, Enum):
    """Status of a NIST control, PCI requirement or GDPR principle."""

    COMPLIANT = "compliant"
    PARTIAL = "partial"
    NON_COMPLIANT = "non-compliant"


class RiskStatus(str, Enum):
    """Status of an OWASP Top 10 risk."""

    MITIGATED = "mitigated"
    PARTIAL = "partial"
    VULNERABLE = "vulnerable"


class ScoringMode(str, Enum):
    """How a framework block's statuses were produced."""

    LIVE = "live"
    STATIC_CATALOG = "static_catalog"
