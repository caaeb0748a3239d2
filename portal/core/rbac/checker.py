"""Access policy checks for the CITT portal.

`can_perform` is the single source of truth for "may this role attempt
this action on this entity kind". Ownership is not part of the policy:
owner-only actions pass here and are gated by the approval workflow.
"""

import logging
from functools import wraps
from typing import Callable, List, Optional, Union

from portal.core.errors import AuthorizationError

from .permissions import EntityKind, Action, Permission, PERMISSION_MATRIX
from .roles import (
    DEFAULT_ROLES,
    VIEW_RESTRICTIONS,
    get_role_permissions,
)


logger = logging.getLogger(__name__)


class PermissionChecker:
    """Checks if a role grants specific permissions."""

    def __init__(self, role: Optional[str]):
        self.role = role
        self.permissions = get_role_permissions(role)

    def has_permission(self, permission: Union[str, Permission]) -> bool:
        perm_str = str(permission) if isinstance(permission, Permission) else permission
        return perm_str in self.permissions

    def can_access(self, kind: EntityKind, action: Action) -> bool:
        """Check if the role can perform action on entity kind."""
        if action not in PERMISSION_MATRIX.get(kind, frozenset()):
            return False
        return self.has_permission(Permission(kind, action))


def _coerce(value, enum_cls):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def can_perform(
    actor_role: Optional[str],
    action: Union[str, Action],
    entity_kind: Union[str, EntityKind],
) -> bool:
    """
    Answer whether a role may attempt an action on an entity kind.

    Args:
        actor_role: Role key such as "admin" or "innovator"
        action: Workflow action
        entity_kind: Kind of entity the action targets

    Returns:
        False for unknown roles, actions or kinds and for any combination
        the role does not grant.
    """
    action_ = _coerce(action, Action)
    kind_ = _coerce(entity_kind, EntityKind)
    if action_ is None or kind_ is None:
        return False
    return PermissionChecker(actor_role).can_access(kind_, action_)


def visible_state_for(actor_role: Optional[str], entity_kind: EntityKind) -> Optional[str]:
    """Approval state a view-all role is restricted to, if any."""
    return VIEW_RESTRICTIONS.get((actor_role, EntityKind(entity_kind)))


def reviewer_roles(entity_kind: EntityKind) -> List[str]:
    """Roles holding approve on a kind; these receive submission notices."""
    return [
        role for role in DEFAULT_ROLES
        if can_perform(role, Action.APPROVE, entity_kind)
    ]


def require_role(*roles: str):
    """
    Decorator factory for endpoints restricted to specific roles.

    The wrapped endpoint must receive the request-scoped actor as the
    ``actor`` keyword argument.

    Usage:
        @router.get("/audit-logs")
        @require_role("admin", "superAdmin")
        async def list_audit_logs(actor: Actor = Depends(get_current_actor)):
            ...
    """
    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            actor = kwargs.get("actor")
            if actor is None or actor.role not in roles:
                logger.warning(
                    "Role check failed for %s: requires one of %s",
                    getattr(actor, "user_id", None), ", ".join(roles),
                )
                raise AuthorizationError(
                    f"Insufficient permissions. Required role: {', '.join(roles)}"
                )
            return await func(*args, **kwargs)

        return wrapper
    return decorator
