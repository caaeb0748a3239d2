"""Permission model for the CITT portal access policy.

Permissions combine an entity kind with a workflow action.
Permission string format: "kind:action"
Examples:
  - project:approve
  - funding_application:view_all
  - ip_record:delete
"""

from enum import Enum
from typing import NamedTuple, FrozenSet


class EntityKind(str, Enum):
    """Entity kinds that move through the approval workflow."""

    PROJECT = "project"
    FUNDING = "funding_application"
    IP_RECORD = "ip_record"


class Action(str, Enum):
    """Actions an actor can attempt on an entity kind."""

    # Submitter actions
    SUBMIT = "submit"
    RESUBMIT = "resubmit"         # Owner only
    EDIT = "edit"                 # Owner only

    # Reviewer actions
    APPROVE = "approve"
    REJECT = "reject"
    UPDATE_STATUS = "update_status"  # Secondary status after approval
    DELETE = "delete"

    # Visibility
    VIEW_ALL = "view_all"         # Bypass the ownership filter

    # Side channel
    PLEDGE = "pledge"             # Investor pledge on approved funding


class Permission(NamedTuple):
    """A permission is a combination of entity kind and action."""
    kind: EntityKind
    action: Action

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.action.value}"


_WORKFLOW_ACTIONS = frozenset([
    Action.SUBMIT, Action.RESUBMIT, Action.EDIT,
    Action.APPROVE, Action.REJECT, Action.UPDATE_STATUS, Action.DELETE,
    Action.VIEW_ALL,
])

# Maps each entity kind to the actions that make sense for it
PERMISSION_MATRIX: dict[EntityKind, FrozenSet[Action]] = {
    EntityKind.PROJECT: _WORKFLOW_ACTIONS,
    EntityKind.FUNDING: _WORKFLOW_ACTIONS | {Action.PLEDGE},
    EntityKind.IP_RECORD: _WORKFLOW_ACTIONS,
}
