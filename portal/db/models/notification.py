"""In-app notification model (the bell icon)."""

from enum import Enum

from sqlalchemy import Column, String, DateTime, ForeignKey, Boolean, Text, Integer
from sqlalchemy.orm import relationship

from portal.db.base import Base, utcnow


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"


class Notification(Base):
    """A message shown to a single user."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(20), nullable=False, default=NotificationType.INFO.value)
    link = Column(String(512), nullable=True)
    read = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User")

    def __repr__(self) -> str:
        return f"<Notification {self.title!r} to user {self.user_id}>"
