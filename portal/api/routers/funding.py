"""Funding application endpoints, including investor pledges."""

from typing import Any, Dict, Optional

from fastapi import Body, Depends, status

from portal.api.deps import get_current_actor, get_workflow
from portal.api.routers.entities import build_entity_router
from portal.api.schemas.entities import FundingResponse, PledgeResult
from portal.core.actor import Actor
from portal.core.approval import ApprovalWorkflow
from portal.core.rbac.permissions import EntityKind

router = build_entity_router(EntityKind.FUNDING, "/funding", FundingResponse, tags=["funding"])


@router.post("/{entity_id}/pledge", response_model=PledgeResult, status_code=status.HTTP_201_CREATED)
def pledge_funding(
    entity_id: int,
    payload: Optional[Dict[str, Any]] = Body(None),
    actor: Actor = Depends(get_current_actor),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    """
    Pledge support for an approved funding application.

    Body: {amount, note?}. Returns the pledge and the running total.
    """
    payload = payload or {}
    return workflow.pledge(entity_id, actor, payload.get("amount"), payload.get("note"))
