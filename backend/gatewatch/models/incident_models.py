"""
Incident Models

Pydantic models for security incidents and the statistics computed over them.
Timestamps are timezone-aware UTC datetimes truncated to millisecond precision;
durations (response_time, resolution_time) are integer milliseconds.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .enums import IncidentSeverity, IncidentStatus, IncidentType


def _unique(values: List[str]) -> List[str]:
    """Drop duplicates while keeping first-seen order."""
    return list(dict.fromkeys(values))


class IncidentNote(BaseModel):
    """Single immutable entry in an incident's timeline."""

    timestamp: datetime
    author: str
    content: str


class Incident(BaseModel):
    """
    A tracked security incident.

    Invariants maintained by IncidentLifecycleService:
        - updated_at >= created_at
        - resolution_time is set iff status is resolved/closed, and equals
          resolved_at - created_at in milliseconds
        - response_time, once set, is never overwritten
        - notes are append-only and ordered by timestamp
    """

    id: str
    title: str
    description: str
    type: IncidentType
    severity: IncidentSeverity
    status: IncidentStatus = IncidentStatus.OPEN
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None
    reported_by: str
    assigned_to: Optional[str] = None
    affected_ips: List[str] = Field(default_factory=list)
    affected_users: List[str] = Field(default_factory=list)
    response_time: Optional[int] = Field(None, ge=0, description="Creation to first assignment (ms)")
    resolution_time: Optional[int] = Field(None, ge=0, description="Creation to latest resolution (ms)")
    notes: List[IncidentNote] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("affected_ips", "affected_users", "tags")
    @classmethod
    def deduplicate(cls, v: List[str]) -> List[str]:
        return _unique(v)

    def append_note(self, timestamp: datetime, author: str, content: str) -> None:
        """Append a timeline entry and bump updated_at."""
        self.notes.append(IncidentNote(timestamp=timestamp, author=author, content=content))
        self.updated_at = timestamp


class TrendPoint(BaseModel):
    """Opened/resolved counts for one calendar day (UTC)."""

    date: str
    opened: int = 0
    resolved: int = 0


class IncidentStatistics(BaseModel):
    """Aggregates over the most recent incidents."""

    total_incidents: int = 0
    open_incidents: int = 0
    resolved_incidents: int = 0
    average_response_time: float = Field(0.0, description="Mean response time in ms")
    average_resolution_time: float = Field(0.0, description="Mean resolution time in ms")
    by_severity: Dict[IncidentSeverity, int] = Field(default_factory=lambda: {s: 0 for s in IncidentSeverity})
    by_type: Dict[IncidentType, int] = Field(default_factory=lambda: {t: 0 for t in IncidentType})
    by_status: Dict[IncidentStatus, int] = Field(default_factory=lambda: {s: 0 for s in IncidentStatus})
    recent_trends: List[TrendPoint] = Field(default_factory=list)


__all__ = [
    "IncidentNote",
    "Incident",
    "TrendPoint",
    "IncidentStatistics",
]
