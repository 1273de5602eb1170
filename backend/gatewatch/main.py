"""
GateWatch FastAPI Application - API Gateway Security Operations
Incident response and security posture for the gateway admin plane
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Callable

import redis.asyncio as aioredis
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from redis.exceptions import RedisError
from starlette.responses import Response

from .auth import audit_logger
from .config import SECURITY_HEADERS, Settings, get_settings
from .database import check_redis_health, create_redis_client
from .middleware.error_handling import register_exception_handlers
from .middleware.metrics import PrometheusMiddleware
from .repositories import IncidentRepository
from .routes.admin import router as admin_router
from .services.compliance import ComplianceService
from .services.incidents import IncidentLifecycleService, IncidentStatisticsService, ThreatIncidentTrigger
from .services.prometheus_metrics import get_metrics_instance
from .services.signal_sources import RedisMetricsSource, RedisThreatStatisticsSource

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

settings = get_settings()
logging.getLogger().setLevel(settings.log_level.upper())


def configure_services(app: FastAPI, redis_client: aioredis.Redis, settings: Settings) -> None:
    """
    Wire the service graph once and store it on app.state.

    The compliance service receives the statistics service directly, so
    there is no lazy cross-service lookup at request time.

    app.state.threat_trigger has no HTTP route. The threat-intelligence
    collaborator, running in the same process, calls
    `await app.state.threat_trigger.handle(signal)` with a ThreatSignal each
    time it updates the per-IP summary for a source.
    """
    repository = IncidentRepository(redis_client, retention_seconds=settings.incident_retention_seconds)
    lifecycle = IncidentLifecycleService(repository)
    statistics = IncidentStatisticsService(repository, scan_limit=settings.statistics_scan_limit)

    app.state.redis = redis_client
    app.state.lifecycle_service = lifecycle
    app.state.statistics_service = statistics
    app.state.threat_trigger = ThreatIncidentTrigger(
        lifecycle, redis_client, dedup_seconds=settings.auto_incident_dedup_hours * 3600
    )
    app.state.compliance_service = ComplianceService(
        RedisMetricsSource(redis_client),
        RedisThreatStatisticsSource(redis_client),
        statistics,
        log_retention_days=settings.incident_retention_days,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan management."""
    logger.info("Starting GateWatch application...")

    if settings.audit_log_file:
        audit_logger.configure_file_handler(settings.audit_log_file)
        logger.info(f"Audit log file: {settings.audit_log_file}")

    redis_client = create_redis_client(settings)
    try:
        await redis_client.ping()
        logger.info("Redis connection established")
    except RedisError as e:
        # Requests touching storage will fail with 503 until Redis is reachable
        logger.warning(f"Redis not reachable at startup: {e}")

    configure_services(app, redis_client, settings)
    logger.info("Incident response and compliance services initialized")

    yield

    logger.info("Shutting down GateWatch application...")
    await redis_client.aclose()


# Create FastAPI application
app = FastAPI(
    title="GateWatch - Security Operations",
    description="Incident response and security posture API for the gateway admin plane",
    version=settings.app_version,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)


@app.middleware("http")
async def security_headers_middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
    """Add security headers to all responses."""
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers[header] = value
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH"],
    allow_headers=["Authorization", "Content-Type"],
)

app.add_middleware(PrometheusMiddleware)

register_exception_handlers(app)


# Health Check Endpoint
@app.get("/health")
async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint for container orchestration."""
    redis_client = getattr(request.app.state, "redis", None)
    if redis_client is None:
        redis_ok, redis_status = False, "not_initialized"
    else:
        redis_ok, redis_status = await check_redis_health(redis_client)

    return JSONResponse(
        status_code=200 if redis_ok else 503,
        content={
            "status": "healthy" if redis_ok else "degraded",
            "timestamp": time.time(),
            "version": settings.app_version,
            "redis": redis_status,
        },
    )


# Prometheus Metrics Endpoint
@app.get("/metrics")
async def metrics() -> PlainTextResponse:
    """Prometheus metrics endpoint."""
    metrics_data = get_metrics_instance().get_metrics()
    return PlainTextResponse(content=metrics_data, media_type="text/plain; version=0.0.4; charset=utf-8")


# Unified API at /api prefix
app.include_router(admin_router, prefix="/api")


if __name__ == "__main__":
    # Development server configuration
    uvicorn.run(
        "gatewatch.main:app",
        host="0.0.0.0",  # nosec B104 - Intentional for container binding
        port=8000,
        log_level=settings.log_level.lower(),
        reload=settings.debug,
    )
