"""
Authentication and authorization dependencies for GateWatch
Verifies bearer JWTs issued by the gateway's auth subsystem
"""

import logging
from typing import Any, Callable, Dict

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import get_settings
from .rbac import Permission, RBACManager
from .utils.logging_security import sanitize_for_log

logger = logging.getLogger(__name__)

security = HTTPBearer()


class SecurityAuditLogger:
    """Security event audit logging"""

    def __init__(self):
        self.audit_logger = logging.getLogger("gatewatch.audit")
        self.audit_logger.setLevel(logging.INFO)

    def configure_file_handler(self, path: str):
        """Write audit entries to a dedicated file in addition to the root handlers"""
        handler = logging.FileHandler(path)
        formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        self.audit_logger.addHandler(handler)

    def log_access_denied(self, username: str, role: str, resource: str):
        """Log rejected access to an admin resource"""
        self.audit_logger.warning(
            f"ACCESS_DENIED - User: {sanitize_for_log(username)}, Role: {sanitize_for_log(role)}, "
            f"Resource: {sanitize_for_log(resource)}"
        )


audit_logger = SecurityAuditLogger()


def verify_token(token: str) -> Dict[str, Any]:
    """Verify an HS256 JWT against the configured secret"""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Dict[str, Any]:
    """Get current authenticated user from the bearer JWT"""
    payload = verify_token(credentials.credentials)
    if payload.get("sub") is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    return payload


def get_actor_name(current_user: Dict[str, Any]) -> str:
    """Name recorded as reporter, note author or actor for the current user"""
    return str(current_user.get("username") or current_user.get("sub"))


def require_admin(
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    """Require admin role (super_admin or security_admin) for protected endpoints"""
    role = RBACManager.parse_role(current_user.get("role", "guest"))
    if not RBACManager.is_admin(role):
        audit_logger.log_access_denied(get_actor_name(current_user), role.value, "admin")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin privileges required")
    return current_user


def require_permission(permission: Permission) -> Callable[..., Dict[str, Any]]:
    """Dependency factory requiring a specific permission"""

    def dependency(current_user: Dict[str, Any] = Depends(require_admin)) -> Dict[str, Any]:
        role = RBACManager.parse_role(current_user.get("role", "guest"))
        if not RBACManager.has_permission(role, permission):
            audit_logger.log_access_denied(get_actor_name(current_user), role.value, permission.value)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {permission.value}",
            )
        return current_user

    return dependency
