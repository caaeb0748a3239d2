"""Notification sinks for workflow events.

Handles:
- In-app notifications (the bell icon) for reviewers and owners
- Audit log entries for every committed transition
- Webhook delivery to an external system

Sinks run after the transition has been committed. The dispatcher logs and
swallows sink failures so a broken sink never affects the workflow.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Sequence

import httpx
from jinja2 import Template
from sqlalchemy.orm import Session

from portal.core.approval.entities import get_entity_config
from portal.core.approval.events import WorkflowEvent
from portal.core.config import Settings
from portal.core.rbac.checker import reviewer_roles
from portal.db.models import AuditLog, AuditSeverity, Notification, NotificationType, User

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


# In-app message templates, keyed by transition
IN_APP_TEMPLATES: Dict[str, Dict[str, str]] = {
    "submit": {
        "title": "New {{ label }} Submission",
        "message": 'A new {{ label|lower }} "{{ title }}" has been submitted and is awaiting review.',
        "type": NotificationType.INFO.value,
    },
    "resubmit": {
        "title": "{{ label }} Resubmitted",
        "message": 'The {{ label|lower }} "{{ title }}" has been resubmitted and is awaiting review.',
        "type": NotificationType.INFO.value,
    },
    "approve": {
        "title": "{{ label }} Approved",
        "message": 'Your {{ label|lower }} "{{ title }}" has been approved.'
                   '{% if extra.amount_approved %} Approved amount: {{ "{:,.2f}".format(extra.amount_approved) }}.{% endif %}',
        "type": NotificationType.SUCCESS.value,
    },
    "reject": {
        "title": "{{ label }} Rejected",
        "message": 'Your {{ label|lower }} "{{ title }}" has been rejected.'
                   '{% if comment %} Reason: {{ comment }}{% endif %}',
        "type": NotificationType.WARNING.value,
    },
    "update_status": {
        "title": "{{ label }} Status Updated",
        "message": 'The status of your {{ label|lower }} "{{ title }}" is now {{ extra.to }}.',
        "type": NotificationType.INFO.value,
    },
    "delete": {
        "title": "{{ label }} Removed",
        "message": 'Your {{ label|lower }} "{{ title }}" has been removed by a reviewer.',
        "type": NotificationType.WARNING.value,
    },
}

# Transitions that go to the review queue rather than the owner
_REVIEWER_TRANSITIONS = frozenset(["submit", "resubmit"])


class NotificationSink(ABC):
    """Receives workflow events."""

    name = "sink"

    @abstractmethod
    def emit(self, event: WorkflowEvent) -> None:
        ...


class InAppNotificationSink(NotificationSink):
    """
    Writes notification rows.

    Submissions and resubmissions go to every active reviewer for the kind;
    decisions and status changes go to the owner.
    """

    name = "in_app"

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def render(self, event: WorkflowEvent) -> Optional[Dict[str, str]]:
        template = IN_APP_TEMPLATES.get(event.transition)
        if not template:
            return None
        context = {
            "label": get_entity_config(event.entity_kind).label,
            "title": event.title,
            "comment": event.comment,
            "extra": event.extra,
        }
        return {
            "title": Template(template["title"]).render(**context),
            "message": Template(template["message"]).render(**context),
            "type": template["type"],
        }

    def recipients(self, db: Session, event: WorkflowEvent) -> List[int]:
        if event.transition in _REVIEWER_TRANSITIONS:
            rows = (
                db.query(User.id)
                .filter(
                    User.role.in_(reviewer_roles(event.entity_kind)),
                    User.is_active == True,  # noqa: E712
                    User.id != event.actor_id,
                )
                .order_by(User.id)
                .all()
            )
            return [row.id for row in rows]
        if event.owner_id is not None:
            return [event.owner_id]
        return []

    def emit(self, event: WorkflowEvent) -> None:
        rendered = self.render(event)
        if rendered is None:
            return

        db = self.session_factory()
        try:
            recipients = self.recipients(db, event)
            for user_id in recipients:
                db.add(Notification(
                    user_id=user_id,
                    title=rendered["title"],
                    message=rendered["message"],
                    type=rendered["type"],
                    link=event.link if event.transition != "delete" else None,
                ))
            db.commit()
            logger.debug(
                "Created %d notification(s) for %s %s %s",
                len(recipients), event.entity_kind, event.entity_id, event.transition,
            )
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


class AuditLogSink(NotificationSink):
    """Writes one audit_logs row per event."""

    name = "audit_log"

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def emit(self, event: WorkflowEvent) -> None:
        severity = AuditSeverity.WARNING if event.transition == "delete" else AuditSeverity.INFO
        entry = AuditLog.create_entry(
            action=event.transition,
            resource_type=event.entity_kind,
            user_id=event.actor_id,
            user_role=event.actor_role,
            resource_id=event.entity_id,
            old_values={"approval_status": event.from_state},
            new_values={"approval_status": event.to_state},
            details={
                "title": event.title,
                "owner_id": event.owner_id,
                "comment": event.comment,
                **event.extra,
            },
            severity=severity,
        )

        db = self.session_factory()
        try:
            db.add(entry)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


class WebhookSink(NotificationSink):
    """POSTs each event as JSON to an external URL."""

    name = "webhook"

    def __init__(self, url: str, timeout: float = 30, client: Optional[httpx.Client] = None):
        self.url = url
        self.timeout = timeout
        self._client = client

    def build_payload(self, event: WorkflowEvent) -> Dict:
        return {
            "event": f"{event.entity_kind}.{event.transition}",
            "timestamp": event.timestamp.isoformat(),
            "data": event.to_dict(),
        }

    def emit(self, event: WorkflowEvent) -> None:
        payload = self.build_payload(event)
        headers = {"Content-Type": "application/json"}
        if self._client is not None:
            response = self._client.post(self.url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return
        with httpx.Client(timeout=self.timeout) as client:
            response = client.post(self.url, json=payload, headers=headers)
            response.raise_for_status()


class NotificationDispatcher:
    """Fans an event out to every sink, isolating sink failures."""

    def __init__(self, sinks: Sequence[NotificationSink]):
        self.sinks = list(sinks)

    def dispatch(self, event: WorkflowEvent) -> List[str]:
        """
        Deliver an event to all sinks.

        Returns:
            Names of the sinks that failed
        """
        failed = []
        for sink in self.sinks:
            try:
                sink.emit(event)
            except Exception:
                logger.exception(
                    "Notification sink %s failed for %s %s %s",
                    sink.name, event.entity_kind, event.entity_id, event.transition,
                )
                failed.append(sink.name)
        return failed


def build_dispatcher(settings: Settings, session_factory: SessionFactory) -> NotificationDispatcher:
    """Dispatcher with the sinks enabled by settings. The audit log is always on."""
    sinks: List[NotificationSink] = [AuditLogSink(session_factory)]
    if settings.notifications_enabled:
        sinks.append(InAppNotificationSink(session_factory))
        if settings.webhook_url:
            sinks.append(WebhookSink(settings.webhook_url, timeout=settings.webhook_timeout))
    return NotificationDispatcher(sinks)
