"""Role definitions for the CITT innovation portal.

Defines the 5 portal roles with their capability sets:
1. Super Administrator - Everything an administrator can do, plus system control
2. Administrator - Reviews projects, funding and IP records
3. IP Manager - Reviews funding applications and IP records
4. Investor - Browses approved funding and pledges against it
5. Innovator - Submits and maintains their own entities
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from .permissions import EntityKind, Action, Permission, PERMISSION_MATRIX


class Role(str, Enum):
    SUPER_ADMIN = "superAdmin"
    ADMIN = "admin"
    IP_MANAGER = "ipManager"
    INVESTOR = "investor"
    INNOVATOR = "innovator"


# Higher number = more authority
ROLE_HIERARCHY: Dict[str, int] = {
    Role.INNOVATOR.value: 1,
    Role.INVESTOR.value: 1,
    Role.IP_MANAGER.value: 2,
    Role.ADMIN.value: 3,
    Role.SUPER_ADMIN.value: 4,
}

ROLE_NAMES: Dict[str, str] = {
    Role.SUPER_ADMIN.value: "Super Administrator",
    Role.ADMIN.value: "Administrator",
    Role.IP_MANAGER.value: "IP Manager",
    Role.INVESTOR.value: "Investor",
    Role.INNOVATOR.value: "Innovator",
}

ROLE_DESCRIPTIONS: Dict[str, str] = {
    Role.SUPER_ADMIN.value: "Full system access and control",
    Role.ADMIN.value: "Manage projects, funding and intellectual property reviews",
    Role.IP_MANAGER.value: "Manage intellectual property and funding reviews",
    Role.INVESTOR.value: "Browse approved funding applications and pledge support",
    Role.INNOVATOR.value: "Submit projects, funding applications and IP records",
}


def _build_permissions(*perms: Tuple[EntityKind, Action]) -> List[str]:
    """Build permission strings from (EntityKind, Action) tuples."""
    return [str(Permission(k, a)) for k, a in perms]


def _for_kinds(kinds, *actions: Action) -> List[Tuple[EntityKind, Action]]:
    return [(k, a) for k in kinds for a in actions if a in PERMISSION_MATRIX[k]]


_ALL_KINDS = list(EntityKind)
_SUBMITTER_ACTIONS = (Action.SUBMIT, Action.RESUBMIT, Action.EDIT)
_REVIEW_ACTIONS = (Action.APPROVE, Action.REJECT, Action.UPDATE_STATUS)


# Innovator: submit and maintain own entities
INNOVATOR_PERMISSIONS = _build_permissions(
    *_for_kinds(_ALL_KINDS, *_SUBMITTER_ACTIONS),
)

# Investor: submitter actions plus read access to approved funding
INVESTOR_PERMISSIONS = _build_permissions(
    *_for_kinds(_ALL_KINDS, *_SUBMITTER_ACTIONS),
    (EntityKind.FUNDING, Action.VIEW_ALL),
    (EntityKind.FUNDING, Action.PLEDGE),
)

# IP Manager: reviews funding and IP, deletes IP records
IP_MANAGER_PERMISSIONS = _build_permissions(
    *_for_kinds(_ALL_KINDS, *_SUBMITTER_ACTIONS, Action.VIEW_ALL),
    *_for_kinds([EntityKind.FUNDING, EntityKind.IP_RECORD], *_REVIEW_ACTIONS),
    (EntityKind.IP_RECORD, Action.DELETE),
)

# Admin: reviews and deletes every kind
ADMIN_PERMISSIONS = _build_permissions(
    *_for_kinds(
        _ALL_KINDS,
        *_SUBMITTER_ACTIONS,
        *_REVIEW_ACTIONS,
        Action.DELETE,
        Action.VIEW_ALL,
        Action.PLEDGE,
    ),
)

# Super admin inherits everything from admin
SUPER_ADMIN_PERMISSIONS: List[str] = []

# Role -> role whose capabilities it inherits
ROLE_INHERITANCE: Dict[str, str] = {
    Role.SUPER_ADMIN.value: Role.ADMIN.value,
}

# Roles whose view_all is limited to entities in a given approval state
VIEW_RESTRICTIONS: Dict[Tuple[str, EntityKind], str] = {
    (Role.INVESTOR.value, EntityKind.FUNDING): "approved",
}


DEFAULT_ROLES: Dict[str, dict] = {
    Role.SUPER_ADMIN.value: {
        "name": ROLE_NAMES[Role.SUPER_ADMIN.value],
        "description": ROLE_DESCRIPTIONS[Role.SUPER_ADMIN.value],
        "permissions": SUPER_ADMIN_PERMISSIONS,
        "level": ROLE_HIERARCHY[Role.SUPER_ADMIN.value],
    },
    Role.ADMIN.value: {
        "name": ROLE_NAMES[Role.ADMIN.value],
        "description": ROLE_DESCRIPTIONS[Role.ADMIN.value],
        "permissions": ADMIN_PERMISSIONS,
        "level": ROLE_HIERARCHY[Role.ADMIN.value],
    },
    Role.IP_MANAGER.value: {
        "name": ROLE_NAMES[Role.IP_MANAGER.value],
        "description": ROLE_DESCRIPTIONS[Role.IP_MANAGER.value],
        "permissions": IP_MANAGER_PERMISSIONS,
        "level": ROLE_HIERARCHY[Role.IP_MANAGER.value],
    },
    Role.INVESTOR.value: {
        "name": ROLE_NAMES[Role.INVESTOR.value],
        "description": ROLE_DESCRIPTIONS[Role.INVESTOR.value],
        "permissions": INVESTOR_PERMISSIONS,
        "level": ROLE_HIERARCHY[Role.INVESTOR.value],
    },
    Role.INNOVATOR.value: {
        "name": ROLE_NAMES[Role.INNOVATOR.value],
        "description": ROLE_DESCRIPTIONS[Role.INNOVATOR.value],
        "permissions": INNOVATOR_PERMISSIONS,
        "level": ROLE_HIERARCHY[Role.INNOVATOR.value],
    },
}


def get_role_permissions(role_key: Optional[str]) -> FrozenSet[str]:
    """Get the effective permission set for a role, following inheritance.

    Unknown roles have no capabilities.
    """
    perms: set = set()
    seen = set()
    current = role_key
    while current and current not in seen:
        seen.add(current)
        role = DEFAULT_ROLES.get(current)
        if not role:
            break
        perms.update(role["permissions"])
        current = ROLE_INHERITANCE.get(current)
    return frozenset(perms)


def get_all_roles() -> List[dict]:
    """Role metadata, highest authority first."""
    roles = []
    for key, role in DEFAULT_ROLES.items():
        roles.append({
            "key": key,
            "name": role["name"],
            "description": role["description"],
            "level": role["level"],
            "permissions": sorted(get_role_permissions(key)),
        })
    return sorted(roles, key=lambda r: -r["level"])
