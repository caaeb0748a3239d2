"""Response schemas for workflow entities."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class EntityResponse(BaseModel):
    """Approval envelope shared by every entity kind."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    entity_kind: str
    owner_id: int
    owner_name: Optional[str] = None
    title: str
    approval_status: str
    rejection_reason: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[int] = None
    rejected_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProjectResponse(EntityResponse):
    description: str
    problem_statement: Optional[str] = None
    category: str
    institution: Optional[str] = None
    funding_needed: Optional[float] = None
    project_status: str


class FundingResponse(EntityResponse):
    description: str
    amount: float
    amount_approved: Optional[float] = None
    currency: str
    grant_type: str
    project_id: Optional[int] = None
    project_linked: bool = False
    project_title: Optional[str] = None
    funding_status: str
    total_pledged: float = 0


class IPRecordResponse(EntityResponse):
    ip_type: str
    inventors: Optional[str] = None
    abstract: str
    field: Optional[str] = None
    trl: Optional[int] = None
    prior_art: Optional[str] = None
    status: str
    identification_numbers: Dict[str, Any] = {}
    project_id: Optional[int] = None
    project_linked: bool = False
    project_title: Optional[str] = None


class HistoryResponse(BaseModel):
    id: int
    entity_kind: str
    entity_id: int
    from_state: Optional[str] = None
    to_state: str
    transition: str
    user_id: Optional[int] = None
    comment: Optional[str] = None
    extra_data: Dict[str, Any] = {}
    created_at: Optional[datetime] = None


class SummaryResponse(BaseModel):
    entity_kind: str
    total: int
    by_approval_status: Dict[str, int]
    by_status: Dict[str, int]


class PledgeResponse(BaseModel):
    id: int
    funding_id: int
    pledger_id: Optional[int] = None
    amount: float
    note: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None


class PledgeResult(BaseModel):
    pledge: PledgeResponse
    total_pledged: float


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    message: str
    type: str
    link: Optional[str] = None
    read: bool
    created_at: datetime


class NotificationListResponse(BaseModel):
    items: List[NotificationResponse]
    unread: int
