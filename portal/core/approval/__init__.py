"""Approval workflow module for the CITT portal.

Implements the approval state machine shared by projects, funding
applications and IP records.
"""

from .states import ApprovalState, ApprovalTransition
from .machine import ApprovalStateMachine
from .events import WorkflowEvent
from .service import ApprovalWorkflow

__all__ = [
    "ApprovalState",
    "ApprovalTransition",
    "ApprovalStateMachine",
    "WorkflowEvent",
    "ApprovalWorkflow",
]
