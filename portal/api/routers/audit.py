"""Audit log query API endpoints."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy import or_
from sqlalchemy.orm import Session

from portal.api.deps import get_current_actor, get_db
from portal.api.schemas.common import PaginatedResponse
from portal.core.actor import Actor
from portal.core.errors import NotFoundError
from portal.core.rbac import Role, require_role
from portal.db.base import LIKE_ESCAPE, contains_pattern
from portal.db.models import AuditLog

router = APIRouter(prefix="/audit-logs", tags=["audit"])

_AUDIT_ROLES = (Role.ADMIN.value, Role.SUPER_ADMIN.value)


# Schemas
class AuditLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    user_role: Optional[str] = None
    action: str
    resource_type: str
    resource_id: Optional[int] = None
    severity: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    details: Optional[dict] = None
    old_values: Optional[dict] = None
    new_values: Optional[dict] = None
    created_at: datetime


# Endpoints
@router.get("", response_model=PaginatedResponse[AuditLogResponse])
@require_role(*_AUDIT_ROLES)
async def list_audit_logs(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    user_id: Optional[int] = None,
    action: Optional[str] = None,
    resource_type: Optional[str] = None,
    resource_id: Optional[int] = None,
    severity: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    search: Optional[str] = None,
):
    """
    List audit log entries, newest first.

    Supports filtering by user, action, resource, severity, and date range.
    """
    query = db.query(AuditLog)

    if user_id is not None:
        query = query.filter(AuditLog.user_id == user_id)
    if action:
        query = query.filter(AuditLog.action == action)
    if resource_type:
        query = query.filter(AuditLog.resource_type == resource_type)
    if resource_id is not None:
        query = query.filter(AuditLog.resource_id == resource_id)
    if severity:
        query = query.filter(AuditLog.severity == severity)
    if start_date:
        query = query.filter(AuditLog.created_at >= start_date)
    if end_date:
        query = query.filter(AuditLog.created_at <= end_date)
    if search:
        pattern = contains_pattern(search)
        query = query.filter(
            or_(
                AuditLog.action.ilike(pattern, escape=LIKE_ESCAPE),
                AuditLog.resource_type.ilike(pattern, escape=LIKE_ESCAPE),
            )
        )

    total = query.count()
    logs = (
        query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    return PaginatedResponse[AuditLogResponse].create(
        items=[AuditLogResponse.model_validate(log) for log in logs],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/{log_id}", response_model=AuditLogResponse)
@require_role(*_AUDIT_ROLES)
async def get_audit_log(
    log_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Get a specific audit log entry."""
    log = db.query(AuditLog).filter(AuditLog.id == log_id).first()
    if not log:
        raise NotFoundError(f"Audit log {log_id} not found")
    return AuditLogResponse.model_validate(log)
