"""
Incident API Schemas

Request bodies for the incident response endpoints. Responses reuse the
domain models from gatewatch.models directly.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..models import IncidentSeverity, IncidentStatus, IncidentType


class IncidentCreateRequest(BaseModel):
    """Request to open a new incident."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1)
    type: IncidentType
    severity: IncidentSeverity
    affected_ips: List[str] = Field(default_factory=list)
    affected_users: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None


class StatusUpdateRequest(BaseModel):
    status: IncidentStatus


class AssignRequest(BaseModel):
    assigned_to: str = Field(..., min_length=1, description="User the incident is assigned to")


class NoteCreateRequest(BaseModel):
    content: str = Field(..., min_length=1)


class IncidentUpdateRequest(BaseModel):
    """Any subset of the mutable incident fields. Omitted fields are left as-is."""

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = Field(None, min_length=1)
    severity: Optional[IncidentSeverity] = None
    tags: Optional[List[str]] = None
    affected_ips: Optional[List[str]] = None
    affected_users: Optional[List[str]] = None
