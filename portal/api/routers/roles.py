"""Role metadata endpoints."""

from typing import Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from portal.api.deps import get_current_actor
from portal.core.actor import Actor
from portal.core.rbac.checker import PermissionChecker
from portal.core.rbac.permissions import Action, EntityKind
from portal.core.rbac.roles import get_all_roles

router = APIRouter(prefix="/roles", tags=["roles"])


class RoleResponse(BaseModel):
    key: str
    name: str
    description: str
    level: int
    permissions: List[str]


class CapabilitiesResponse(BaseModel):
    role: str
    capabilities: Dict[str, List[str]]


@router.get("", response_model=List[RoleResponse])
async def list_roles(actor: Actor = Depends(get_current_actor)):
    """All portal roles, highest authority first."""
    return get_all_roles()


@router.get("/me", response_model=CapabilitiesResponse)
async def my_capabilities(actor: Actor = Depends(get_current_actor)):
    """Actions the caller's role grants, per entity kind."""
    checker = PermissionChecker(actor.role)
    return CapabilitiesResponse(
        role=actor.role,
        capabilities={
            kind.value: sorted(a.value for a in Action if checker.can_access(kind, a))
            for kind in EntityKind
        },
    )
