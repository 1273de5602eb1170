"""
Security Posture and Compliance API Endpoints

Both endpoints recompute from live signals on every call and fail as a
whole if any signal source fails.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...auth import require_permission
from ...dependencies import get_compliance_service
from ...models import ComplianceMetrics, PostureSnapshot
from ...rbac import Permission
from ...services.compliance import ComplianceService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/compliance", tags=["Compliance"])


@router.get("/posture", response_model=PostureSnapshot)
async def get_security_posture(
    current_user: Dict[str, Any] = Depends(require_permission(Permission.COMPLIANCE_VIEW)),
    service: ComplianceService = Depends(get_compliance_service),
) -> PostureSnapshot:
    """Weighted five-factor posture score, grade and recommendations."""
    return await service.calculate_posture()


@router.get("/metrics", response_model=ComplianceMetrics)
async def get_compliance_metrics(
    current_user: Dict[str, Any] = Depends(require_permission(Permission.COMPLIANCE_VIEW)),
    service: ComplianceService = Depends(get_compliance_service),
) -> ComplianceMetrics:
    """
    NIST, OWASP, PCI and GDPR control lists.

    Only the NIST block is scored live; the others carry
    mode="static_catalog".
    """
    return await service.get_compliance_metrics()
