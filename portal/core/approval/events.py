"""Workflow events handed to notification sinks."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class WorkflowEvent:
    """A committed change to an entity's workflow state."""

    entity_kind: str
    entity_id: int
    transition: str
    from_state: Optional[str]
    to_state: Optional[str]
    actor_id: int
    timestamp: datetime
    owner_id: Optional[int] = None
    actor_role: Optional[str] = None
    title: Optional[str] = None
    comment: Optional[str] = None
    link: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity_kind": self.entity_kind,
            "entity_id": self.entity_id,
            "transition": self.transition,
            "from_state": self.from_state,
            "to_state": self.to_state,
            "actor_id": self.actor_id,
            "actor_role": self.actor_role,
            "owner_id": self.owner_id,
            "title": self.title,
            "comment": self.comment,
            "link": self.link,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
