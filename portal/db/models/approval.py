"""Approval workflow database models.

The approval envelope shared by projects, funding applications and IP
records, and the state transition history kept for all three.
"""

from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Text, Integer
from sqlalchemy.orm import declared_attr, relationship

from portal.db.base import Base, utcnow


class ApprovableMixin:
    """
    Columns every reviewable entity carries.

    Only the approval workflow writes approval_status and the
    approved_*/rejected_* columns.
    """

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Workflow state
    approval_status = Column(String(20), nullable=False, default="pending", index=True)
    rejection_reason = Column(Text, nullable=True)

    # Timestamps
    approved_at = Column(DateTime, nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @declared_attr
    def owner_id(cls):
        return Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    @declared_attr
    def approved_by(cls):
        return Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    @declared_attr
    def rejected_by(cls):
        return Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    @declared_attr
    def owner(cls):
        return relationship("User", foreign_keys=f"{cls.__name__}.owner_id")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id} [{self.approval_status}]>"


class ApprovalHistory(Base):
    """
    Records all state transitions for reviewable entities.

    Provides a complete audit trail of the approval workflow.
    """
    __tablename__ = "approval_history"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Entity identification (no FK: rows outlive deleted entities)
    entity_kind = Column(String(50), nullable=False)
    entity_id = Column(Integer, nullable=False)

    # Transition details; from_state is empty for the initial submission
    from_state = Column(String(20), nullable=True)
    to_state = Column(String(20), nullable=False)
    transition = Column(String(50), nullable=False)

    # Actor
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Optional comment (required for rejections)
    comment = Column(Text, nullable=True)

    # Additional context
    extra_data = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=utcnow, index=True)

    user = relationship("User")

    def __repr__(self) -> str:
        return f"<ApprovalHistory {self.entity_kind}:{self.entity_id} {self.from_state} -> {self.to_state}>"
