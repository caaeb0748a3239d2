"""Services for the CITT portal."""

from portal.services.notifications import (
    NotificationSink,
    InAppNotificationSink,
    AuditLogSink,
    WebhookSink,
    NotificationDispatcher,
    build_dispatcher,
)

__all__ = [
    "NotificationSink",
    "InAppNotificationSink",
    "AuditLogSink",
    "WebhookSink",
    "NotificationDispatcher",
    "build_dispatcher",
]
