"""Intellectual property record endpoints."""

from portal.api.routers.entities import build_entity_router
from portal.api.schemas.entities import IPRecordResponse
from portal.core.rbac.permissions import EntityKind

router = build_entity_router(EntityKind.IP_RECORD, "/ip-records", IPRecordResponse, tags=["ip-records"])
