"""
Posture and Compliance Models

Ephemeral, recomputed-on-demand results of the posture scorer and
the compliance framework mapper. Every nested block defaults to a
zero score and empty lists so consumers only need top-level checks.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from .enums import ControlStatus, FactorStatus, Grade, RiskStatus, ScoringMode


# =============================================================================
# POSTURE FACTORS
# =============================================================================


class AuthenticationDetails(BaseModel):
    failed_login_rate: int = 0
    account_lockouts: int = 0
    mfa_enabled: bool = False
    session_security: int = 85


class ThreatIntelligenceDetails(BaseModel):
    critical_threats: int = 0
    high_threats: int = 0
    total_threats: int = 0
    blocked_ips: int = 0
    threat_response_time: int = 0


class RateLimitingDetails(BaseModel):
    violations: int = 0
    coverage: int = Field(90, description="Percent of endpoints protected")


class AuditLoggingDetails(BaseModel):
    log_coverage: int = 95
    retention_days: int = 90


class IncidentResponseDetails(BaseModel):
    open_incidents: int = 0
    avg_response_time: float = 0.0
    avg_resolution_time: float = 0.0


class AuthenticationFactor(BaseModel):
    score: int = Field(..., ge=0, le=100)
    status: FactorStatus
    details: AuthenticationDetails


class ThreatIntelligenceFactor(BaseModel):
    score: int = Field(..., ge=0, le=100)
    status: FactorStatus
    details: ThreatIntelligenceDetails


class RateLimitingFactor(BaseModel):
    score: int = Field(..., ge=0, le=100)
    status: FactorStatus
    details: RateLimitingDetails


class AuditLoggingFactor(BaseModel):
    score: int = Field(..., ge=0, le=100)
    status: FactorStatus
    details: AuditLoggingDetails


class IncidentResponseFactor(BaseModel):
    score: int = Field(..., ge=0, le=100)
    status: FactorStatus
    details: IncidentResponseDetails


class PostureFactors(BaseModel):
    authentication: AuthenticationFactor
    threat_intelligence: ThreatIntelligenceFactor
    rate_limiting: RateLimitingFactor
    audit_logging: AuditLoggingFactor
    incident_response: IncidentResponseFactor


class PostureSnapshot(BaseModel):
    """Overall security posture computed at last_updated."""

    overall_score: int = Field(..., ge=0, le=100)
    grade: Grade
    factors: PostureFactors
    recommendations: List[str] = Field(default_factory=list)
    last_updated: datetime


# =============================================================================
# COMPLIANCE FRAMEWORKS
# =============================================================================


class NistControl(BaseModel):
    id: str
    name: str
    status: ControlStatus
    evidence: List[str] = Field(default_factory=list)


class OwaspRisk(BaseModel):
    risk: str
    status: RiskStatus
    description: str = ""


class PciRequirement(BaseModel):
    id: str
    name: str
    status: ControlStatus


class GdprPrinciple(BaseModel):
    principle: str
    status: ControlStatus
    description: str = ""


class NistBlock(BaseModel):
    score: int = 0
    mode: ScoringMode = ScoringMode.LIVE
    controls: List[NistControl] = Field(default_factory=list)


class OwaspBlock(BaseModel):
    score: int = 0
    mode: ScoringMode = ScoringMode.STATIC_CATALOG
    top10: List[OwaspRisk] = Field(default_factory=list)


class PciBlock(BaseModel):
    score: int = 0
    mode: ScoringMode = ScoringMode.STATIC_CATALOG
    requirements: List[PciRequirement] = Field(default_factory=list)


class GdprBlock(BaseModel):
    score: int = 0
    mode: ScoringMode = ScoringMode.STATIC_CATALOG
    principles: List[GdprPrinciple] = Field(default_factory=list)


class ComplianceMetrics(BaseModel):
    nist: NistBlock = Field(default_factory=NistBlock)
    owasp: OwaspBlock = Field(default_factory=OwaspBlock)
    pci: PciBlock = Field(default_factory=PciBlock)
    gdpr: GdprBlock = Field(default_factory=GdprBlock)


__all__ = [
    "AuthenticationDetails",
    "ThreatIntelligenceDetails",
    "RateLimitingDetails",
    "AuditLoggingDetails",
    "IncidentResponseDetails",
    "AuthenticationFactor",
    "ThreatIntelligenceFactor",
    "RateLimitingFactor",
    "AuditLoggingFactor",
    "IncidentResponseFactor",
    "PostureFactors",
    "PostureSnapshot",
    "NistControl",
    "OwaspRisk",
    "PciRequirement",
    "GdprPrinciple",
    "NistBlock",
    "OwaspBlock",
    "PciBlock",
    "GdprBlock",
    "ComplianceMetrics",
]
