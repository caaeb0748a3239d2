"""Error taxonomy for the approval workflow.

Every error carries a human-readable message and the HTTP status the API
layer reports it with:

    ValidationError         400  malformed or missing input
    AuthorizationError      403  role or ownership check failed
    NotFoundError           404  entity id did not resolve
    InvalidTransitionError  409  current state does not permit the action
"""

from typing import Optional


class WorkflowError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(WorkflowError):
    """Raised when a payload is malformed or a required field is missing."""

    status_code = 400


class AuthorizationError(WorkflowError):
    """Raised when the actor's role or ownership does not allow an action."""

    status_code = 403

    def __init__(self, message: str, required_permission: Optional[str] = None):
        super().__init__(message)
        self.required_permission = required_permission


class NotFoundError(WorkflowError):
    """Raised when an entity id does not resolve."""

    status_code = 404


class InvalidTransitionError(WorkflowError):
    """Raised when the entity's current state does not permit the action."""

    status_code = 409

    def __init__(
        self,
        message: str,
        from_state: Optional[str] = None,
        transition: Optional[str] = None,
    ):
        super().__init__(message)
        self.from_state = from_state
        self.transition = transition
