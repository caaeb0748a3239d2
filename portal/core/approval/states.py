"""Approval workflow states and transitions.

State Machine Diagram (shared by projects, funding applications and IP records):

         submit
           │
    ┌──────▼───┐
    │ PENDING  │ ← Initial state
    └────┬─────┘
         │
         ├─────────────────────┐
         │ approve             │ reject
    ┌────▼─────┐         ┌─────▼────┐
    │ APPROVED │         │ REJECTED │
    └──────────┘         └─────┬────┘
                               │ resubmit (owner only)
                               └──────► PENDING

Approved entities carry an independent secondary status
(project_status, funding_status, IP status) that reviewers move forward.
"""

from enum import Enum
from typing import Set, Dict, Optional, NamedTuple

from portal.core.rbac.permissions import Action


class ApprovalState(str, Enum):
    """States in the approval workflow."""

    PENDING = "pending"      # Awaiting review
    APPROVED = "approved"    # Accepted by a reviewer
    REJECTED = "rejected"    # Declined with a reason, may be resubmitted


class ApprovalTransition(str, Enum):
    """Actions that trigger state transitions."""

    SUBMIT = "submit"        # (new) → PENDING
    APPROVE = "approve"      # PENDING → APPROVED
    REJECT = "reject"        # PENDING → REJECTED
    RESUBMIT = "resubmit"    # REJECTED → PENDING


class TransitionRule(NamedTuple):
    """Defines a valid state transition."""
    from_state: ApprovalState
    to_state: ApprovalState
    transition: ApprovalTransition


class TransitionGuard(NamedTuple):
    """Who may attempt a transition, independent of the current state."""
    action: Action
    owner_only: bool = False
    requires_comment: bool = False


TRANSITION_RULES: list[TransitionRule] = [
    TransitionRule(ApprovalState.PENDING, ApprovalState.APPROVED, ApprovalTransition.APPROVE),
    TransitionRule(ApprovalState.PENDING, ApprovalState.REJECTED, ApprovalTransition.REJECT),
    TransitionRule(ApprovalState.REJECTED, ApprovalState.PENDING, ApprovalTransition.RESUBMIT),
]

TRANSITION_GUARDS: Dict[ApprovalTransition, TransitionGuard] = {
    ApprovalTransition.SUBMIT: TransitionGuard(Action.SUBMIT),
    ApprovalTransition.APPROVE: TransitionGuard(Action.APPROVE),
    ApprovalTransition.REJECT: TransitionGuard(Action.REJECT, requires_comment=True),
    ApprovalTransition.RESUBMIT: TransitionGuard(Action.RESUBMIT, owner_only=True),
}

TRANSITION_TARGETS: Dict[tuple[ApprovalState, ApprovalTransition], TransitionRule] = {
    (rule.from_state, rule.transition): rule for rule in TRANSITION_RULES
}

# Owner edits are allowed while the entity is in one of these states
EDITABLE_STATES: Set[ApprovalState] = {
    ApprovalState.PENDING,
    ApprovalState.REJECTED,
}


class ProjectStatus(str, Enum):
    """Secondary progression of an approved project."""

    SUBMITTED = "submitted"
    ON_PROGRESS = "on_progress"
    COMPLETED = "completed"


class FundingStatus(str, Enum):
    """Secondary progression of a funding application."""

    PENDING = "pending"
    APPROVED = "approved"
    DISBURSED = "disbursed"


def get_transition_rule(from_state: ApprovalState, transition: ApprovalTransition) -> Optional[TransitionRule]:
    """Get the transition rule for a state/action combination."""
    return TRANSITION_TARGETS.get((from_state, transition))
