"""Approval state machine implementation.

Checks role, ownership, required comments and the current state before
moving an entity between approval states.
"""

import logging
from typing import Optional

from portal.core.actor import Actor
from portal.core.errors import (
    AuthorizationError,
    InvalidTransitionError,
    ValidationError,
)
from portal.core.rbac.checker import can_perform
from portal.core.rbac.permissions import EntityKind, Permission

from .states import (
    ApprovalState,
    ApprovalTransition,
    TRANSITION_GUARDS,
    get_transition_rule,
)

logger = logging.getLogger(__name__)


class ApprovalStateMachine:
    """
    State machine for the approval workflow of a single entity.

    Checks are applied in a fixed order:
    - the actor's role and ownership (AuthorizationError)
    - a required comment is present (ValidationError)
    - the transition is legal from the current state (InvalidTransitionError)
    """

    def __init__(
        self,
        entity_kind: EntityKind,
        entity_id: Optional[int],
        current_state: ApprovalState,
        actor: Actor,
        *,
        owner_id: Optional[int] = None,
    ):
        """
        Initialize the state machine.

        Args:
            entity_kind: Kind of the entity being moved
            entity_id: ID of the entity
            current_state: Current approval state
            actor: Identity performing transitions
            owner_id: Owner of the entity, for owner-only transitions
        """
        self.entity_kind = EntityKind(entity_kind)
        self.entity_id = entity_id
        self._state = ApprovalState(current_state)
        self.actor = actor
        self.owner_id = owner_id

    @property
    def state(self) -> ApprovalState:
        """Current state of the entity."""
        return self._state

    def is_authorized(self, transition: ApprovalTransition) -> bool:
        """Check role and ownership for a transition, ignoring state."""
        guard = TRANSITION_GUARDS[transition]
        if not can_perform(self.actor.role, guard.action, self.entity_kind):
            return False
        if guard.owner_only and not self.actor.owns(self.owner_id):
            return False
        return True

    def authorize(self, transition: ApprovalTransition) -> None:
        """Raise AuthorizationError if the actor may not attempt a transition."""
        guard = TRANSITION_GUARDS[transition]
        if self.is_authorized(transition):
            return

        required = str(Permission(self.entity_kind, guard.action))
        logger.warning(
            "Denied %s on %s %s for user %s (role %s)",
            transition.value, self.entity_kind.value, self.entity_id,
            self.actor.user_id, self.actor.role,
        )
        if guard.owner_only and can_perform(self.actor.role, guard.action, self.entity_kind):
            raise AuthorizationError(
                f"Only the owner can {transition.value} this {self.entity_kind.value}",
                required_permission=required,
            )
        raise AuthorizationError(
            f"Role '{self.actor.role}' cannot {transition.value} a {self.entity_kind.value}",
            required_permission=required,
        )

    def transition(
        self,
        transition: ApprovalTransition,
        *,
        comment: Optional[str] = None,
    ) -> ApprovalState:
        """
        Perform a state transition.

        Args:
            transition: The transition to perform
            comment: Optional comment (required for rejection)

        Returns:
            The new state after transition

        Raises:
            AuthorizationError: If the actor's role or ownership is insufficient
            ValidationError: If a required comment is missing
            InvalidTransitionError: If the transition is invalid from the current state
        """
        self.authorize(transition)

        guard = TRANSITION_GUARDS[transition]
        if comment is not None:
            comment = comment.strip() or None
        if guard.requires_comment and not comment:
            raise ValidationError(f"A reason is required to {transition.value}")

        rule = get_transition_rule(self._state, transition)
        if rule is None:
            raise InvalidTransitionError(
                f"Cannot {transition.value} a {self.entity_kind.value} "
                f"that is {self._state.value}",
                from_state=self._state.value,
                transition=transition.value,
            )

        self._state = rule.to_state
        return self._state
