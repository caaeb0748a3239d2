"""Tests for approval workflow state machine."""

import pytest

from portal.core.actor import Actor
from portal.core.approval.machine import ApprovalStateMachine
from portal.core.approval.states import (
    ApprovalState, ApprovalTransition,
    EDITABLE_STATES, TRANSITION_GUARDS, TRANSITION_TARGETS,
    get_transition_rule,
)
from portal.core.errors import (
    AuthorizationError, InvalidTransitionError, ValidationError,
)
from portal.core.rbac.permissions import EntityKind


OWNER = Actor(user_id=1, role="innovator")
STRANGER = Actor(user_id=2, role="innovator")
ADMIN = Actor(user_id=3, role="admin")
IP_MANAGER = Actor(user_id=4, role="ipManager")
INVESTOR = Actor(user_id=5, role="investor")


def _machine(state, actor, kind=EntityKind.PROJECT, owner_id=OWNER.user_id):
    return ApprovalStateMachine(kind, 10, state, actor, owner_id=owner_id)


class TestApprovalStates:
    """Test approval state definitions."""

    def test_all_states_defined(self):
        assert {s.value for s in ApprovalState} == {"pending", "approved", "rejected"}

    def test_editable_states(self):
        assert EDITABLE_STATES == {ApprovalState.PENDING, ApprovalState.REJECTED}


class TestApprovalTransitions:
    """Test valid state transitions."""

    def test_pending_transitions(self):
        assert get_transition_rule(ApprovalState.PENDING, ApprovalTransition.APPROVE)
        assert get_transition_rule(ApprovalState.PENDING, ApprovalTransition.REJECT)
        assert get_transition_rule(ApprovalState.PENDING, ApprovalTransition.RESUBMIT) is None

    def test_approved_has_no_outgoing_transitions(self):
        for transition in ApprovalTransition:
            assert get_transition_rule(ApprovalState.APPROVED, transition) is None

    def test_transition_targets(self):
        assert len(TRANSITION_TARGETS) == 3
        rule = TRANSITION_TARGETS[(ApprovalState.REJECTED, ApprovalTransition.RESUBMIT)]
        assert rule.to_state == ApprovalState.PENDING

    def test_transition_rule_lookup(self):
        rule = get_transition_rule(ApprovalState.PENDING, ApprovalTransition.REJECT)
        assert rule.to_state == ApprovalState.REJECTED
        assert get_transition_rule(ApprovalState.PENDING, ApprovalTransition.RESUBMIT) is None

    def test_guards(self):
        assert TRANSITION_GUARDS[ApprovalTransition.REJECT].requires_comment
        assert TRANSITION_GUARDS[ApprovalTransition.RESUBMIT].owner_only
        assert not TRANSITION_GUARDS[ApprovalTransition.APPROVE].owner_only


class TestApprovalStateMachine:
    """Test the state machine class."""

    def test_initial_state(self):
        machine = _machine(ApprovalState.PENDING, ADMIN)
        assert machine.state == ApprovalState.PENDING

    def test_approve(self):
        machine = _machine(ApprovalState.PENDING, ADMIN)
        assert machine.transition(ApprovalTransition.APPROVE) == ApprovalState.APPROVED
        assert machine.state == ApprovalState.APPROVED

    def test_reject_requires_reason(self):
        machine = _machine(ApprovalState.PENDING, ADMIN)
        with pytest.raises(ValidationError):
            machine.transition(ApprovalTransition.REJECT)
        with pytest.raises(ValidationError):
            machine.transition(ApprovalTransition.REJECT, comment="   ")
        assert machine.state == ApprovalState.PENDING

    def test_whitespace_padded_reason_is_accepted(self):
        machine = _machine(ApprovalState.PENDING, ADMIN)
        assert machine.transition(
            ApprovalTransition.REJECT, comment="  insufficient budget "
        ) == ApprovalState.REJECTED

    def test_approve_then_reject_is_invalid(self):
        machine = _machine(ApprovalState.PENDING, ADMIN)
        machine.transition(ApprovalTransition.APPROVE)
        with pytest.raises(InvalidTransitionError) as exc_info:
            machine.transition(ApprovalTransition.REJECT, comment="too late")
        assert exc_info.value.from_state == "approved"
        assert exc_info.value.status_code == 409

    def test_unauthorized_role_checked_before_state(self):
        """An investor is refused approve whatever the state."""
        for state in ApprovalState:
            machine = _machine(state, INVESTOR, kind=EntityKind.FUNDING)
            with pytest.raises(AuthorizationError):
                machine.transition(ApprovalTransition.APPROVE)

    def test_authorization_checked_before_reason(self):
        machine = _machine(ApprovalState.PENDING, OWNER)
        with pytest.raises(AuthorizationError):
            machine.transition(ApprovalTransition.REJECT, comment="")

    def test_reason_checked_before_state(self):
        machine = _machine(ApprovalState.APPROVED, ADMIN)
        with pytest.raises(ValidationError):
            machine.transition(ApprovalTransition.REJECT, comment="")

    def test_ip_manager_cannot_review_projects(self):
        machine = _machine(ApprovalState.PENDING, IP_MANAGER)
        with pytest.raises(AuthorizationError) as exc_info:
            machine.transition(ApprovalTransition.APPROVE)
        assert exc_info.value.required_permission == "project:approve"

    def test_ip_manager_reviews_ip_records(self):
        machine = _machine(ApprovalState.PENDING, IP_MANAGER, kind=EntityKind.IP_RECORD)
        assert machine.transition(ApprovalTransition.APPROVE) == ApprovalState.APPROVED

    def test_resubmit_by_owner(self):
        machine = _machine(ApprovalState.REJECTED, OWNER)
        assert machine.transition(ApprovalTransition.RESUBMIT) == ApprovalState.PENDING

    def test_resubmit_by_non_owner_refused_even_for_admin(self):
        for actor in (STRANGER, ADMIN):
            machine = _machine(ApprovalState.REJECTED, actor)
            with pytest.raises(AuthorizationError) as exc_info:
                machine.transition(ApprovalTransition.RESUBMIT)
            assert "Only the owner" in exc_info.value.message

    def test_resubmit_from_pending_is_invalid(self):
        machine = _machine(ApprovalState.PENDING, OWNER)
        with pytest.raises(InvalidTransitionError):
            machine.transition(ApprovalTransition.RESUBMIT)
