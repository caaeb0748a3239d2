"""Audit log model for the CITT portal.

Entries are append-only: nothing in the application updates or deletes them.
"""

from enum import Enum
from typing import Optional, Dict, Any
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Text, Integer
from sqlalchemy.orm import relationship

from portal.db.base import Base, utcnow


class AuditSeverity(str, Enum):
    """Severity levels for audit log entries."""
    DEBUG = "debug"       # Low-level debugging info
    INFO = "info"         # Standard operations
    WARNING = "warning"   # Potentially concerning actions
    ERROR = "error"       # Failed operations
    CRITICAL = "critical" # Security-relevant events


class AuditLog(Base):
    """
    Audit log entry.

    Records workflow transitions and significant API actions.
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Actor information
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    user_role = Column(String(50), nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    # Action details
    action = Column(String(100), nullable=False, index=True)
    resource_type = Column(String(100), nullable=False, index=True)
    resource_id = Column(Integer, nullable=True, index=True)

    # Change tracking
    old_values = Column(JSON, nullable=True)  # Previous state (for updates)
    new_values = Column(JSON, nullable=True)  # New state (for creates/updates)
    details = Column(JSON, nullable=True)     # Additional context

    # Metadata
    severity = Column(String(20), nullable=False, default="info", index=True)
    request_id = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)

    user = relationship("User")

    def __repr__(self) -> str:
        return f"<AuditLog {self.action} on {self.resource_type} by user {self.user_id}>"

    @classmethod
    def create_entry(
        cls,
        action: str,
        resource_type: str,
        *,
        user_id: Optional[int] = None,
        user_role: Optional[str] = None,
        resource_id: Optional[int] = None,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        request_id: Optional[str] = None,
        severity: AuditSeverity = AuditSeverity.INFO,
    ) -> "AuditLog":
        """
        Factory method to create a new audit log entry.

        Args:
            action: Action performed (e.g., 'approve', 'reject', 'delete')
            resource_type: Type of resource (e.g., 'project', 'ip_record')
            user_id: ID of user performing action (None for system actions)
            user_role: Role the user acted under
            resource_id: ID of affected resource
            old_values: Previous values (for updates)
            new_values: New values (for creates/updates)
            details: Additional context
            ip_address: Client IP address
            user_agent: Client user agent string
            request_id: Request correlation ID
            severity: Log severity level
        """
        return cls(
            action=action,
            resource_type=resource_type,
            user_id=user_id,
            user_role=user_role,
            resource_id=resource_id,
            old_values=old_values,
            new_values=new_values,
            details=details,
            ip_address=ip_address,
            user_agent=user_agent,
            request_id=request_id,
            severity=severity.value if isinstance(severity, AuditSeverity) else severity,
        )
