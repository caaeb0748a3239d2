"""Innovation project endpoints."""

from portal.api.routers.entities import build_entity_router
from portal.api.schemas.entities import ProjectResponse
from portal.core.rbac.permissions import EntityKind

router = build_entity_router(EntityKind.PROJECT, "/projects", ProjectResponse, tags=["projects"])
