"""RBAC (Role-Based Access Control) module for the CITT portal.

This module defines the entity-kind/action permission model, the portal roles, and the access policy.
"""

from .permissions import Permission, EntityKind, Action
from .roles import (
    Role,
    ROLE_HIERARCHY,
    ROLE_NAMES,
    ROLE_DESCRIPTIONS,
    get_all_roles,
    get_role_permissions,
)
from .checker import (
    PermissionChecker,
    can_perform,
    reviewer_roles,
    visible_state_for,
    require_role,
)

__all__ = [
    "Permission",
    "EntityKind",
    "Action",
    "Role",
    "ROLE_HIERARCHY",
    "ROLE_NAMES",
    "ROLE_DESCRIPTIONS",
    "get_all_roles",
    "get_role_permissions",
    "PermissionChecker",
    "can_perform",
    "reviewer_roles",
    "visible_state_for",
    "require_role",
]
