"""
Incident Response Services

Lifecycle management, statistics aggregation and threat-driven
auto-creation of security incidents.
"""

from .lifecycle import IncidentLifecycleService, classify_threat_signal
from .statistics import IncidentStatisticsService, compute_statistics
from .threat_trigger import ThreatIncidentTrigger

__all__ = [
    "IncidentLifecycleService",
    "IncidentStatisticsService",
    "ThreatIncidentTrigger",
    "classify_threat_signal",
    "compute_statistics",
]
