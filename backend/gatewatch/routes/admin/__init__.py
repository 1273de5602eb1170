"""
Administration API Package

Consolidates administrative REST API endpoints.

Package Structure:
    admin/
    ├── __init__.py         # This file - router aggregation
    ├── incidents.py        # Incident response (/admin/incidents/*)
    └── compliance.py       # Posture and compliance (/admin/compliance/*)

Usage:
    from gatewatch.routes.admin import router
    app.include_router(router, prefix="/api")
"""

from fastapi import APIRouter

from .compliance import router as compliance_router
from .incidents import router as incidents_router

router = APIRouter(prefix="/admin", tags=["Administration"])

router.include_router(incidents_router)
router.include_router(compliance_router)

__all__ = ["router"]
