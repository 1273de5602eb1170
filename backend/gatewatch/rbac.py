"""
Role-Based Access Control (RBAC) for GateWatch
Defines permissions, roles, and access control logic for the admin plane
"""

import logging
from enum import Enum
from typing import Dict, FrozenSet, List, Set

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    """System permissions"""

    # Incident Response
    INCIDENT_READ = "incident:read"
    INCIDENT_WRITE = "incident:write"

    # Audit and Compliance
    AUDIT_READ = "audit:read"
    COMPLIANCE_VIEW = "compliance:view"


class UserRole(str, Enum):
    """User roles in the system"""

    SUPER_ADMIN = "super_admin"
    SECURITY_ADMIN = "security_admin"
    SECURITY_ANALYST = "security_analyst"
    AUDITOR = "auditor"
    GUEST = "guest"


# Role permission mappings
ROLE_PERMISSIONS: Dict[UserRole, List[Permission]] = {
    UserRole.SUPER_ADMIN: [
        Permission.INCIDENT_READ,
        Permission.INCIDENT_WRITE,
        Permission.AUDIT_READ,
        Permission.COMPLIANCE_VIEW,
    ],
    UserRole.SECURITY_ADMIN: [
        Permission.INCIDENT_READ,
        Permission.INCIDENT_WRITE,
        Permission.AUDIT_READ,
        Permission.COMPLIANCE_VIEW,
    ],
    UserRole.SECURITY_ANALYST: [
        # Day-to-day triage, no admin plane access
        Permission.INCIDENT_READ,
        Permission.INCIDENT_WRITE,
        Permission.COMPLIANCE_VIEW,
    ],
    UserRole.AUDITOR: [
        Permission.INCIDENT_READ,
        Permission.AUDIT_READ,
        Permission.COMPLIANCE_VIEW,
    ],
    UserRole.GUEST: [],
}

# Roles admitted to the administrative endpoints
ADMIN_ROLES: FrozenSet[UserRole] = frozenset({UserRole.SUPER_ADMIN, UserRole.SECURITY_ADMIN})


class RBACManager:
    """Role-Based Access Control Manager"""

    @staticmethod
    def parse_role(value) -> UserRole:
        """Map a role claim to a UserRole, treating unknown roles as guest"""
        try:
            return UserRole(value)
        except ValueError:
            logger.debug(f"Unknown role claim {value!r}, treating as guest")
            return UserRole.GUEST

    @staticmethod
    def get_role_permissions(role: UserRole) -> Set[Permission]:
        """Get all permissions for a role"""
        return set(ROLE_PERMISSIONS.get(role, []))

    @staticmethod
    def has_permission(user_role: UserRole, required_permission: Permission) -> bool:
        """Check if a role has a specific permission"""
        return required_permission in RBACManager.get_role_permissions(user_role)

    @staticmethod
    def is_admin(user_role: UserRole) -> bool:
        return user_role in ADMIN_ROLES
