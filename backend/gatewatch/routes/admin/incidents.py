"""
Incident Response API Endpoints

Create, list, triage and annotate security incidents. Every endpoint
requires an admin role; the acting user is recorded as reporter, note
author or actor.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...auth import get_actor_name, require_permission
from ...dependencies import get_lifecycle_service, get_statistics_service
from ...models import Incident, IncidentSeverity, IncidentStatistics, IncidentStatus, IncidentType
from ...rbac import Permission
from ...schemas import (
    AssignRequest,
    IncidentCreateRequest,
    IncidentUpdateRequest,
    NoteCreateRequest,
    StatusUpdateRequest,
)
from ...services.incidents import IncidentLifecycleService, IncidentStatisticsService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/incidents", tags=["Incident Response"])

read_access = require_permission(Permission.INCIDENT_READ)
write_access = require_permission(Permission.INCIDENT_WRITE)


def _found(incident: Optional[Incident]) -> Incident:
    if incident is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Incident not found")
    return incident


@router.post("", response_model=Incident, status_code=status.HTTP_201_CREATED)
async def create_incident(
    request: IncidentCreateRequest,
    current_user: Dict[str, Any] = Depends(write_access),
    service: IncidentLifecycleService = Depends(get_lifecycle_service),
) -> Incident:
    """Open a new incident in status open."""
    return await service.create_incident(
        title=request.title,
        description=request.description,
        type=request.type,
        severity=request.severity,
        reported_by=get_actor_name(current_user),
        affected_ips=request.affected_ips,
        affected_users=request.affected_users,
        tags=request.tags,
        metadata=request.metadata,
    )


@router.get("", response_model=List[Incident])
async def list_incidents(
    status_filter: Optional[IncidentStatus] = Query(None, alias="status"),
    severity: Optional[IncidentSeverity] = Query(None),
    type: Optional[IncidentType] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    current_user: Dict[str, Any] = Depends(read_access),
    service: IncidentLifecycleService = Depends(get_lifecycle_service),
) -> List[Incident]:
    """
    List incidents newest first.

    Filters apply after the [offset, offset + limit) window is taken, so a
    filtered page can be shorter than `limit`.
    """
    return await service.list_incidents(
        status=status_filter, severity=severity, type=type, limit=limit, offset=offset
    )


# Declared before /{incident_id} so "statistics" is not taken as an id
@router.get("/statistics", response_model=IncidentStatistics)
async def get_incident_statistics(
    current_user: Dict[str, Any] = Depends(read_access),
    service: IncidentStatisticsService = Depends(get_statistics_service),
) -> IncidentStatistics:
    return await service.get_statistics()


@router.get("/{incident_id}", response_model=Incident)
async def get_incident(
    incident_id: str,
    current_user: Dict[str, Any] = Depends(read_access),
    service: IncidentLifecycleService = Depends(get_lifecycle_service),
) -> Incident:
    return _found(await service.get_incident(incident_id))


@router.patch("/{incident_id}/status", response_model=Incident)
async def update_incident_status(
    incident_id: str,
    request: StatusUpdateRequest,
    current_user: Dict[str, Any] = Depends(write_access),
    service: IncidentLifecycleService = Depends(get_lifecycle_service),
) -> Incident:
    return _found(await service.update_status(incident_id, request.status, get_actor_name(current_user)))


@router.patch("/{incident_id}/assign", response_model=Incident)
async def assign_incident(
    incident_id: str,
    request: AssignRequest,
    current_user: Dict[str, Any] = Depends(write_access),
    service: IncidentLifecycleService = Depends(get_lifecycle_service),
) -> Incident:
    return _found(await service.assign(incident_id, request.assigned_to, get_actor_name(current_user)))


@router.post("/{incident_id}/notes", response_model=Incident)
async def add_incident_note(
    incident_id: str,
    request: NoteCreateRequest,
    current_user: Dict[str, Any] = Depends(write_access),
    service: IncidentLifecycleService = Depends(get_lifecycle_service),
) -> Incident:
    return _found(await service.add_note(incident_id, get_actor_name(current_user), request.content))


@router.patch("/{incident_id}", response_model=Incident)
async def update_incident(
    incident_id: str,
    request: IncidentUpdateRequest,
    current_user: Dict[str, Any] = Depends(write_access),
    service: IncidentLifecycleService = Depends(get_lifecycle_service),
) -> Incident:
    updates = request.model_dump(exclude_unset=True)
    return _found(await service.update_fields(incident_id, updates, get_actor_name(current_user)))
