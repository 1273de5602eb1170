"""
Incident Lifecycle Service

Creates incidents, applies status-transition side effects, records
assignment/response timing and appends the note timeline.

Every mutation is a read-modify-write of the whole record through
IncidentRepository. Operations on an unknown id return None; storage
failures propagate to the caller unchanged and are never retried.
"""

import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from ...models import (
    TERMINAL_STATUSES,
    Incident,
    IncidentSeverity,
    IncidentStatus,
    IncidentType,
    ThreatLevel,
    ThreatSignal,
)
from ...repositories import IncidentRepository
from ...utils.logging_security import sanitize_for_log
from ...utils.time_utils import Clock, elapsed_ms, utc_now
from ..prometheus_metrics import get_metrics_instance

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("gatewatch.audit")

# Fields a details update may overwrite
UPDATABLE_FIELDS = frozenset({"title", "description", "severity", "tags", "affected_ips", "affected_users"})

AUTO_INCIDENT_TAGS = ["auto-generated", "threat-intelligence"]
QUALIFYING_THREAT_LEVELS = frozenset({ThreatLevel.HIGH, ThreatLevel.CRITICAL})

# Classification thresholds for threat-signal incidents, evaluated in order
BRUTE_FORCE_FAILED_LOGINS = 10
RATE_LIMIT_ABUSE_VIOLATIONS = 5


def classify_threat_signal(signal: ThreatSignal) -> IncidentType:
    """Pick the incident type for a threat signal from its raw counters."""
    events = signal.event_types
    if events.failed_logins > BRUTE_FORCE_FAILED_LOGINS:
        return IncidentType.BRUTE_FORCE
    if events.rate_limit_violations > RATE_LIMIT_ABUSE_VIOLATIONS:
        return IncidentType.RATE_LIMIT_ABUSE
    if events.account_lockouts > 0:
        return IncidentType.ACCOUNT_LOCKOUT
    return IncidentType.SUSPICIOUS_ACTIVITY


class IncidentLifecycleService:
    """Service for managing the lifecycle of security incidents."""

    def __init__(
        self,
        repository: IncidentRepository,
        clock: Clock = utc_now,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.repository = repository
        self._clock = clock
        self._id_factory = id_factory
        self.metrics = get_metrics_instance()

    async def create_incident(
        self,
        title: str,
        description: str,
        type: IncidentType,
        severity: IncidentSeverity,
        reported_by: str,
        affected_ips: Optional[List[str]] = None,
        affected_users: Optional[List[str]] = None,
        tags: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        source: str = "manual",
    ) -> Incident:
        """
        Create and persist a new incident in status open with no notes.

        Duplicate titles are allowed; no validation is done beyond the
        model's type checks.

        Args:
            title: Short incident title
            description: Free-text description
            type: Incident classification
            severity: Incident severity
            reported_by: User (or "system") reporting the incident
            affected_ips: Optional source/target IP addresses
            affected_users: Optional affected user names
            tags: Optional free-form tags
            metadata: Optional free-form metadata
            source: Metrics label for where the incident came from

        Returns:
            The persisted Incident
        """
        now = self._clock()
        incident = Incident(
            id=self._id_factory(),
            title=title,
            description=description,
            type=type,
            severity=severity,
            status=IncidentStatus.OPEN,
            created_at=now,
            updated_at=now,
            reported_by=reported_by,
            affected_ips=affected_ips or [],
            affected_users=affected_users or [],
            tags=tags or [],
            metadata=metadata,
        )

        await self.repository.create(incident)

        self.metrics.record_incident_created(incident.type.value, incident.severity.value, source)
        logger.info(
            f"Incident created: {incident.id} (type={incident.type.value}, severity={incident.severity.value})"
        )
        audit_logger.info(
            f"INCIDENT_CREATED - Id: {incident.id}, Reporter: {sanitize_for_log(reported_by)}, "
            f"Title: {sanitize_for_log(title)}"
        )
        return incident

    async def get_incident(self, incident_id: str) -> Optional[Incident]:
        return await self.repository.get(incident_id)

    async def list_incidents(
        self,
        status: Optional[IncidentStatus] = None,
        severity: Optional[IncidentSeverity] = None,
        type: Optional[IncidentType] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Incident]:
        return await self.repository.list(status=status, severity=severity, type=type, limit=limit, offset=offset)

    async def update_status(self, incident_id: str, status: IncidentStatus, actor: str) -> Optional[Incident]:
        """
        Move an incident to any status.

        Entering resolved or closed stamps resolved_at and recomputes
        resolution_time, including when a terminal status is re-entered.
        Leaving the terminal statuses clears both fields again.

        Returns:
            Updated Incident, or None if the id is unknown
        """
        incident = await self.repository.get(incident_id)
        if incident is None:
            return None

        now = self._clock()
        incident.status = status

        if status in TERMINAL_STATUSES:
            incident.resolved_at = now
            incident.resolution_time = elapsed_ms(incident.created_at, now)
        else:
            incident.resolved_at = None
            incident.resolution_time = None

        incident.append_note(now, actor, f"Status changed to {status.value}")
        await self.repository.update(incident)

        self.metrics.record_status_transition(status.value)
        logger.info(f"Incident status updated: {incident_id} -> {status.value} by {sanitize_for_log(actor)}")
        audit_logger.info(
            f"INCIDENT_STATUS_{status.value.upper()} - Id: {incident_id}, Actor: {sanitize_for_log(actor)}"
        )
        return incident

    async def assign(self, incident_id: str, assignee: str, actor: str) -> Optional[Incident]:
        """
        Assign an incident.

        The first assignment of a still-open incident records response_time;
        it is never overwritten by later reassignments.

        Returns:
            Updated Incident, or None if the id is unknown
        """
        incident = await self.repository.get(incident_id)
        if incident is None:
            return None

        now = self._clock()
        incident.assigned_to = assignee

        if incident.response_time is None and incident.status == IncidentStatus.OPEN:
            incident.response_time = elapsed_ms(incident.created_at, now)

        incident.append_note(now, actor, f"Assigned to {assignee}")
        await self.repository.update(incident)

        logger.info(f"Incident {incident_id} assigned to {sanitize_for_log(assignee)}")
        audit_logger.info(
            f"INCIDENT_ASSIGNED - Id: {incident_id}, Assignee: {sanitize_for_log(assignee)}, "
            f"Actor: {sanitize_for_log(actor)}"
        )
        return incident

    async def add_note(self, incident_id: str, author: str, content: str) -> Optional[Incident]:
        """Append a free-text note. Returns None if the id is unknown."""
        incident = await self.repository.get(incident_id)
        if incident is None:
            return None

        incident.append_note(self._clock(), author, content)
        await self.repository.update(incident)

        logger.debug(f"Note added to incident {incident_id} by {sanitize_for_log(author)}")
        return incident

    async def update_fields(self, incident_id: str, updates: Dict[str, Any], actor: str) -> Optional[Incident]:
        """
        Overwrite any subset of title, description, severity, tags,
        affected_ips and affected_users.

        Keys outside that set, and None values, are ignored.

        Returns:
            Updated Incident, or None if the id is unknown
        """
        incident = await self.repository.get(incident_id)
        if incident is None:
            return None

        changes = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS and v is not None}
        # Re-validate so enum coercion and de-duplication apply to the new values
        incident = Incident.model_validate({**incident.model_dump(), **changes})

        incident.append_note(self._clock(), actor, "Incident details updated")
        await self.repository.update(incident)

        logger.info(f"Incident {incident_id} details updated ({', '.join(sorted(changes)) or 'no fields'})")
        audit_logger.info(f"INCIDENT_UPDATED - Id: {incident_id}, Actor: {sanitize_for_log(actor)}")
        return incident

    async def create_from_threat_signal(self, signal: ThreatSignal, reported_by: str = "system") -> Optional[Incident]:
        """
        Auto-create an incident from a high or critical threat signal.

        No deduplication happens here: repeated qualifying signals produce
        repeated incidents. ThreatIncidentTrigger suppresses repeats per IP.

        Returns:
            Created Incident, or None when the threat level does not qualify
        """
        if signal.threat_level not in QUALIFYING_THREAT_LEVELS:
            return None

        incident_type = classify_threat_signal(signal)
        severity = IncidentSeverity.CRITICAL if signal.threat_level == ThreatLevel.CRITICAL else IncidentSeverity.HIGH
        events = signal.event_types

        return await self.create_incident(
            title=f"{severity.value.upper()}: Suspicious activity from {signal.ip}",
            description=(
                f"Threat score: {signal.threat_score}/100\n\n"
                f"Failed logins: {events.failed_logins}\n"
                f"Rate limit violations: {events.rate_limit_violations}\n"
                f"Suspicious activity: {events.suspicious_activity}\n"
                f"Account lockouts: {events.account_lockouts}"
            ),
            type=incident_type,
            severity=severity,
            reported_by=reported_by,
            affected_ips=[signal.ip],
            tags=list(AUTO_INCIDENT_TAGS),
            source="threat_intelligence",
        )
