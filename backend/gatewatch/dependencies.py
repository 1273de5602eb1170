"""
FastAPI dependency providers

Services are built once in the application lifespan and stored on
app.state; routes resolve them through these providers so tests can
swap them with app.dependency_overrides.
"""

from fastapi import Request

from .services.compliance import ComplianceService
from .services.incidents import IncidentLifecycleService, IncidentStatisticsService


def get_lifecycle_service(request: Request) -> IncidentLifecycleService:
    return request.app.state.lifecycle_service


def get_statistics_service(request: Request) -> IncidentStatisticsService:
    return request.app.state.statistics_service


def get_compliance_service(request: Request) -> ComplianceService:
    return request.app.state.compliance_service
