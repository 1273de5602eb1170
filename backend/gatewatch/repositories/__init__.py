"""
Repository Pattern for Redis Operations
Centralized incident storage logic
"""

from .incident_repository import INCIDENT_INDEX_KEY, INCIDENT_KEY_PREFIX, IncidentRepository

__all__ = [
    "INCIDENT_INDEX_KEY",
    "INCIDENT_KEY_PREFIX",
    "IncidentRepository",
]
