"""
GateWatch Models Package
Incident, signal and posture models shared by services and routes
"""

from .enums import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    ControlStatus,
    FactorStatus,
    Grade,
    IncidentSeverity,
    IncidentStatus,
    IncidentType,
    RiskStatus,
    ScoringMode,
    ThreatLevel,
)
from .incident_models import Incident, IncidentNote, IncidentStatistics, TrendPoint
from .posture_models import ComplianceMetrics, PostureSnapshot
from .signal_models import MetricsSummary, ThreatEventCounts, ThreatSignal, ThreatStatistics

__all__ = [
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "ControlStatus",
    "FactorStatus",
    "Grade",
    "IncidentSeverity",
    "IncidentStatus",
    "IncidentType",
    "RiskStatus",
    "ScoringMode",
    "ThreatLevel",
    "Incident",
    "IncidentNote",
    "IncidentStatistics",
    "TrendPoint",
    "ComplianceMetrics",
    "PostureSnapshot",
    "MetricsSummary",
    "ThreatEventCounts",
    "ThreatSignal",
    "ThreatStatistics",
]
