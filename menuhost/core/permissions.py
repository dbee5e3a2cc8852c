"""
RBAC (Role-Based Access Control) permission system
"""

from enum import Enum
from typing import Set


class Permission(str, Enum):
    """Permission definitions"""
    # Tenant permissions
    TENANT_CREATE = "tenant:create"
    TENANT_VIEW_ANY = "tenant:view_any"
    TENANT_MANAGE = "tenant:manage"
    TENANT_UPDATE_OWN = "tenant:update_own"

    # Subscription permissions
    SUBSCRIPTION_MANAGE = "subscription:manage"
    SUBSCRIPTION_VIEW_ANY = "subscription:view_any"
    SUBSCRIPTION_VIEW_OWN = "subscription:view_own"

    # Plan permissions
    PLAN_MANAGE = "plan:manage"
    PLAN_VIEW_ANY = "plan:view_any"


# Role permission mapping
ROLE_PERMISSIONS = {
    "sys_admin": {
        # System admins run the platform
        Permission.TENANT_CREATE,
        Permission.TENANT_VIEW_ANY,
        Permission.TENANT_MANAGE,
        Permission.TENANT_UPDATE_OWN,
        Permission.SUBSCRIPTION_MANAGE,
        Permission.SUBSCRIPTION_VIEW_ANY,
        Permission.SUBSCRIPTION_VIEW_OWN,
        Permission.PLAN_MANAGE,
        Permission.PLAN_VIEW_ANY,
    },
    "support": {
        # Support staff can onboard and inspect, but not alter billing
        Permission.TENANT_CREATE,
        Permission.TENANT_VIEW_ANY,
        Permission.SUBSCRIPTION_VIEW_ANY,
        Permission.PLAN_VIEW_ANY,
    },
    "super_admin": {
        # Tenant owner created at provisioning
        Permission.TENANT_UPDATE_OWN,
        Permission.SUBSCRIPTION_VIEW_OWN,
    },
    "admin": {
        Permission.SUBSCRIPTION_VIEW_OWN,
    },
    "manager": set(),
    "user": set(),
}


def get_permissions_for_role(role: str) -> Set[Permission]:
    """Get permissions for a given role"""
    return ROLE_PERMISSIONS.get(role.lower(), set())


def has_permission(required_permission: Permission, user_permissions: Set[Permission]) -> bool:
    """Check if user has required permission"""
    return required_permission in user_permissions

