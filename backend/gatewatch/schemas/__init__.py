"""
API request schemas
"""

from .incident_schemas import (
    AssignRequest,
    IncidentCreateRequest,
    IncidentUpdateRequest,
    NoteCreateRequest,
    StatusUpdateRequest,
)

__all__ = [
    "AssignRequest",
    "IncidentCreateRequest",
    "IncidentUpdateRequest",
    "NoteCreateRequest",
    "StatusUpdateRequest",
]
