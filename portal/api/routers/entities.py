"""Approval workflow endpoints shared by every entity kind.

Request bodies are taken as plain JSON objects and validated by the
workflow, so malformed input is reported as 400 with a field message.

Handlers are plain functions: the workflow and its sinks (including the
webhook) block, so they run in the threadpool.
"""

from typing import Any, Dict, List, Optional, Type

from fastapi import APIRouter, Body, Depends, Query, Response, status
from pydantic import BaseModel

from portal.api.deps import get_current_actor, get_workflow
from portal.api.schemas.common import ErrorResponse, PaginatedResponse
from portal.api.schemas.entities import HistoryResponse, SummaryResponse
from portal.core.actor import Actor
from portal.core.approval import ApprovalWorkflow
from portal.core.rbac.permissions import EntityKind

# Documented error bodies; WorkflowError handlers produce {"detail": message}
ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def build_entity_router(
    kind: EntityKind,
    prefix: str,
    response_model: Type[BaseModel],
    tags: Optional[List[str]] = None,
) -> APIRouter:
    """Create the CRUD and transition routes for one entity kind."""
    router = APIRouter(prefix=prefix, tags=tags or [prefix.strip("/")], responses=ERROR_RESPONSES)
    page_model = PaginatedResponse[response_model]

    @router.post("", response_model=response_model, status_code=status.HTTP_201_CREATED)
    def submit_entity(
        payload: Optional[Dict[str, Any]] = Body(None),
        actor: Actor = Depends(get_current_actor),
        workflow: ApprovalWorkflow = Depends(get_workflow),
    ):
        """Submit a new entity; it starts out pending review."""
        return workflow.submit(kind, actor, payload)

    @router.get("", response_model=page_model)
    def list_entities(
        page: int = Query(1, ge=1),
        per_page: int = Query(20, ge=1, le=100),
        approval_status: Optional[str] = None,
        status_filter: Optional[str] = Query(None, alias="status"),
        search: Optional[str] = None,
        actor: Actor = Depends(get_current_actor),
        workflow: ApprovalWorkflow = Depends(get_workflow),
    ):
        """
        List entities visible to the caller, newest first.

        Reviewers see every entity (investors only approved funding); everyone
        else sees their own.
        """
        items, total = workflow.list_entities(
            kind,
            actor,
            approval_status=approval_status,
            secondary_status=status_filter,
            search=search,
            page=page,
            per_page=per_page,
        )
        return page_model.create(items=items, total=total, page=page, per_page=per_page)

    @router.get("/pending", response_model=List[response_model])
    def list_pending(
        actor: Actor = Depends(get_current_actor),
        workflow: ApprovalWorkflow = Depends(get_workflow),
    ):
        """Review queue, oldest first."""
        return workflow.list_pending(kind, actor)

    @router.get("/summary", response_model=SummaryResponse)
    def get_summary(
        actor: Actor = Depends(get_current_actor),
        workflow: ApprovalWorkflow = Depends(get_workflow),
    ):
        return workflow.summary(kind, actor)

    @router.get("/{entity_id}", response_model=response_model)
    def get_entity(
        entity_id: int,
        actor: Actor = Depends(get_current_actor),
        workflow: ApprovalWorkflow = Depends(get_workflow),
    ):
        return workflow.get(kind, entity_id, actor)

    @router.get("/{entity_id}/history", response_model=List[HistoryResponse])
    def get_history(
        entity_id: int,
        actor: Actor = Depends(get_current_actor),
        workflow: ApprovalWorkflow = Depends(get_workflow),
    ):
        """Transition history, oldest first."""
        return workflow.history(kind, entity_id, actor)

    @router.put("/{entity_id}/approve", response_model=response_model)
    def approve_entity(
        entity_id: int,
        payload: Optional[Dict[str, Any]] = Body(None),
        actor: Actor = Depends(get_current_actor),
        workflow: ApprovalWorkflow = Depends(get_workflow),
    ):
        """Approve a pending entity. Body: {comments?, amount_approved?}"""
        payload = payload or {}
        return workflow.approve(
            kind,
            entity_id,
            actor,
            comments=payload.get("comments"),
            amount_approved=payload.get("amount_approved"),
        )

    @router.put("/{entity_id}/reject", response_model=response_model)
    def reject_entity(
        entity_id: int,
        payload: Optional[Dict[str, Any]] = Body(None),
        actor: Actor = Depends(get_current_actor),
        workflow: ApprovalWorkflow = Depends(get_workflow),
    ):
        """Reject a pending entity. Body: {reason}"""
        return workflow.reject(kind, entity_id, actor, (payload or {}).get("reason"))

    @router.put("/{entity_id}/resubmit", response_model=response_model)
    def resubmit_entity(
        entity_id: int,
        payload: Optional[Dict[str, Any]] = Body(None),
        actor: Actor = Depends(get_current_actor),
        workflow: ApprovalWorkflow = Depends(get_workflow),
    ):
        """Owner resubmits a rejected entity, optionally with field edits."""
        return workflow.resubmit(kind, entity_id, actor, payload)

    @router.put("/{entity_id}/status", response_model=response_model)
    def update_status(
        entity_id: int,
        payload: Optional[Dict[str, Any]] = Body(None),
        actor: Actor = Depends(get_current_actor),
        workflow: ApprovalWorkflow = Depends(get_workflow),
    ):
        """Move the secondary status of an approved entity. Body: {status}"""
        return workflow.update_status(kind, entity_id, actor, (payload or {}).get("status"))

    @router.put("/{entity_id}", response_model=response_model)
    def edit_entity(
        entity_id: int,
        payload: Optional[Dict[str, Any]] = Body(None),
        actor: Actor = Depends(get_current_actor),
        workflow: ApprovalWorkflow = Depends(get_workflow),
    ):
        """Owner edit while the entity is pending or rejected."""
        return workflow.edit(kind, entity_id, actor, payload)

    @router.delete("/{entity_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_entity(
        entity_id: int,
        actor: Actor = Depends(get_current_actor),
        workflow: ApprovalWorkflow = Depends(get_workflow),
    ):
        workflow.delete(kind, entity_id, actor)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
