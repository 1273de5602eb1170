"""
API Error Handling for GateWatch
Maps request validation, storage and collaborator failures to standardized
error responses
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from redis.exceptions import RedisError

from ..services.signal_sources import CollaboratorError

logger = logging.getLogger(__name__)


class ErrorDetail(BaseModel):
    """Detailed error information"""

    field: Optional[str] = None
    message: str
    type: Optional[str] = None


class APIErrorResponse(BaseModel):
    """Standardized API error response"""

    success: bool = False
    error: str
    message: str
    details: List[ErrorDetail] = Field(default_factory=list)
    error_id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    path: Optional[str] = None
    method: Optional[str] = None


class ErrorType:
    """Standard error types for consistent handling"""

    VALIDATION_ERROR = "validation_error"
    DATABASE_ERROR = "database_error"
    EXTERNAL_API_ERROR = "external_api_error"
    INTERNAL_ERROR = "internal_error"


USER_MESSAGES = {
    ErrorType.VALIDATION_ERROR: "Invalid request data provided",
    ErrorType.DATABASE_ERROR: "Incident store operation failed",
    ErrorType.EXTERNAL_API_ERROR: "Security signal source unavailable",
    ErrorType.INTERNAL_ERROR: "Internal server error occurred",
}


def _error_response(request: Request, status_code: int, error_type: str, details: List[ErrorDetail]) -> JSONResponse:
    error_response = APIErrorResponse(
        error=error_type,
        message=USER_MESSAGES[error_type],
        details=details,
        path=str(request.url.path),
        method=request.method,
    )
    return JSONResponse(status_code=status_code, content=error_response.model_dump(mode="json"))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        ErrorDetail(
            field=str(item["loc"][-1]) if item.get("loc") else None,
            message=item.get("msg", "Validation error"),
            type=item.get("type"),
        )
        for item in exc.errors()
    ]
    logger.info(f"Rejected {request.method} {request.url.path}: {len(details)} validation error(s)")
    return _error_response(request, 422, ErrorType.VALIDATION_ERROR, details)


async def redis_error_handler(request: Request, exc: RedisError) -> JSONResponse:
    """Storage failures surface as 503; incident writes are never retried"""
    logger.error(f"Redis error on {request.method} {request.url.path}: {exc}")
    return _error_response(
        request,
        status.HTTP_503_SERVICE_UNAVAILABLE,
        ErrorType.DATABASE_ERROR,
        [ErrorDetail(message="Storage backend error", type=type(exc).__name__)],
    )


async def collaborator_error_handler(request: Request, exc: CollaboratorError) -> JSONResponse:
    """Posture has no degraded mode, so a failed signal source fails the request"""
    logger.error(f"Signal source '{exc.source}' failed on {request.url.path}: {exc.message}")
    return _error_response(
        request,
        status.HTTP_502_BAD_GATEWAY,
        ErrorType.EXTERNAL_API_ERROR,
        [ErrorDetail(message=f"Signal source '{exc.source}' failed", type="CollaboratorError")],
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all that never leaks internals"""
    error_response = APIErrorResponse(
        error=ErrorType.INTERNAL_ERROR,
        message=USER_MESSAGES[ErrorType.INTERNAL_ERROR],
        path=str(request.url.path),
        method=request.method,
    )
    logger.error(
        f"Unexpected error ({error_response.error_id}): {exc}",
        exc_info=True,
        extra={"error_id": error_response.error_id, "path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(RedisError, redis_error_handler)
    app.add_exception_handler(CollaboratorError, collaborator_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
