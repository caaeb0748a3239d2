"""In-app notification endpoints (the bell icon)."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from portal.api.deps import get_current_actor, get_db
from portal.api.schemas.common import SuccessResponse
from portal.api.schemas.entities import NotificationListResponse, NotificationResponse
from portal.core.actor import Actor
from portal.core.errors import NotFoundError
from portal.db.models import Notification

router = APIRouter(prefix="/notifications", tags=["notifications"])

# The bell shows the most recent notifications only
NOTIFICATION_LIMIT = 50


def _get_own(db: Session, notification_id: int, actor: Actor) -> Notification:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == actor.user_id,
    ).first()
    if not notification:
        raise NotFoundError(f"Notification {notification_id} not found")
    return notification


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Latest notifications for the current user, newest first."""
    query = db.query(Notification).filter(Notification.user_id == actor.user_id)
    unread = query.filter(Notification.read == False).count()  # noqa: E712
    items = (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(NOTIFICATION_LIMIT)
        .all()
    )
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in items],
        unread=unread,
    )


@router.put("/mark-all-read", response_model=SuccessResponse)
async def mark_all_read(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == actor.user_id, Notification.read == False)  # noqa: E712
        .update({"read": True}, synchronize_session=False)
    )
    db.commit()
    return SuccessResponse(message="All notifications marked as read", data={"updated": updated})


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    notification = _get_own(db, notification_id, actor)
    notification.read = True
    db.commit()
    db.refresh(notification)
    return NotificationResponse.model_validate(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    notification = _get_own(db, notification_id, actor)
    db.delete(notification)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
