"""Database models for the CITT portal."""

from portal.db.models.user import User
from portal.db.models.approval import ApprovableMixin, ApprovalHistory
from portal.db.models.project import Project
from portal.db.models.funding import FundingApplication
from portal.db.models.ip_record import IPRecord
from portal.db.models.pledge import FundingPledge, PledgeStatus
from portal.db.models.notification import Notification, NotificationType
from portal.db.models.audit import AuditLog, AuditSeverity

__all__ = [
    "User",
    "ApprovableMixin",
    "ApprovalHistory",
    "Project",
    "FundingApplication",
    "IPRecord",
    "FundingPledge",
    "PledgeStatus",
    "Notification",
    "NotificationType",
    "AuditLog",
    "AuditSeverity",
]
