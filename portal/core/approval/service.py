"""Approval workflow service.

Applies state machine transitions to projects, funding applications and
IP records, records their history and hands committed changes to the
notification dispatcher.
"""

import logging
from decimal import Decimal
from datetime import datetime
from typing import Optional, Dict, Any, List, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from portal.core.actor import Actor
from portal.core.config import Settings, get_settings
from portal.core.errors import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from portal.core.rbac.checker import can_perform, visible_state_for
from portal.core.rbac.permissions import Action, EntityKind, Permission
from portal.core.rbac.roles import Role
from portal.db.base import LIKE_ESCAPE, contains_pattern, utcnow
from portal.db.models import ApprovalHistory, FundingPledge, PledgeStatus, Project

from .entities import EntityConfig, get_entity_config
from .events import WorkflowEvent
from .machine import ApprovalStateMachine
from .payloads import (
    ApproveOptions,
    PledgeRequest,
    RejectOptions,
    StatusUpdate,
    parse_payload,
    unknown_identification_keys,
)
from .states import ApprovalState, ApprovalTransition, EDITABLE_STATES, FundingStatus

logger = logging.getLogger(__name__)

# Roles that may link entities to projects they do not own
_PROJECT_LINK_ROLES = frozenset([Role.ADMIN.value, Role.SUPER_ADMIN.value])


class ApprovalWorkflow:
    """
    High-level service for the approval workflow.

    Handles:
    - Submitting, editing and deleting entities
    - Approve, reject and resubmit transitions with persistence
    - Secondary status updates after approval
    - Investor pledges on approved funding
    - Visibility-filtered reads

    Every write is a single commit. Transitions use a conditional update on
    approval_status so that concurrent reviewers cannot both succeed.
    """

    def __init__(
        self,
        db: Session,
        *,
        dispatcher=None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the workflow.

        Args:
            db: Database session
            dispatcher: Receives a WorkflowEvent after each committed transition
            settings: Application settings (defaults to get_settings())
        """
        self.db = db
        self.dispatcher = dispatcher
        self.settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def submit(self, kind, actor: Actor, payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Create an entity owned by the actor in the pending state.

        Raises:
            AuthorizationError: If the role cannot submit, or links a project it does not own
            ValidationError: If required fields are missing or malformed
        """
        config = get_entity_config(kind)
        machine = ApprovalStateMachine(
            config.kind, None, ApprovalState.PENDING, actor, owner_id=actor.user_id,
        )
        machine.authorize(ApprovalTransition.SUBMIT)

        values = parse_payload(config.create_schema, payload).model_dump()
        if values.get("project_id") is not None:
            self._check_project_link(values["project_id"], actor)

        entity = config.model(
            **values,
            owner_id=actor.user_id,
            approval_status=ApprovalState.PENDING.value,
        )
        self.db.add(entity)
        self.db.flush()

        self.db.add(ApprovalHistory(
            entity_kind=config.kind.value,
            entity_id=entity.id,
            from_state=None,
            to_state=ApprovalState.PENDING.value,
            transition=ApprovalTransition.SUBMIT.value,
            user_id=actor.user_id,
            extra_data={},
        ))
        self.db.commit()
        self.db.refresh(entity)

        logger.info(
            "%s %s submitted by user %s", config.label, entity.id, actor.user_id,
        )
        self._emit(config, entity, ApprovalTransition.SUBMIT.value, None, ApprovalState.PENDING.value, actor)
        return self._to_dict(config, entity)

    def approve(
        self,
        kind,
        entity_id: int,
        actor: Actor,
        *,
        comments: Optional[str] = None,
        amount_approved: Any = None,
    ) -> Dict[str, Any]:
        """
        Approve a pending entity.

        For funding applications amount_approved defaults to the requested
        amount and funding_status becomes approved.

        Raises:
            NotFoundError: If the entity does not exist
            AuthorizationError: If the reviewer's role lacks approve for the kind
            ValidationError: If amount_approved is not a positive amount, or is
                given for a kind other than funding
            InvalidTransitionError: If the entity is not pending
        """
        config = get_entity_config(kind)
        entity = self._load(config, entity_id)
        machine = self._machine(config, entity, actor)
        machine.authorize(ApprovalTransition.APPROVE)

        if amount_approved is not None and config.kind != EntityKind.FUNDING:
            raise ValidationError("amount_approved only applies to funding applications")
        opts = parse_payload(ApproveOptions, {
            "comments": comments,
            "amount_approved": amount_approved,
        })

        from_state = machine.state
        machine.transition(ApprovalTransition.APPROVE, comment=opts.comments)

        now = utcnow()
        values: Dict[str, Any] = {
            "approval_status": ApprovalState.APPROVED.value,
            "approved_by": actor.user_id,
            "approved_at": now,
        }
        extra: Dict[str, Any] = {}
        if config.kind == EntityKind.FUNDING:
            approved_amount = opts.amount_approved if opts.amount_approved is not None else entity.amount
            if self.settings.cap_approved_amount and Decimal(approved_amount) > Decimal(entity.amount):
                raise ValidationError("amount_approved cannot exceed the requested amount")
            values["amount_approved"] = approved_amount
            values["funding_status"] = FundingStatus.APPROVED.value
            extra["amount_approved"] = float(approved_amount)

        self._apply(
            config, entity, from_state, values,
            transition=ApprovalTransition.APPROVE.value,
            to_state=ApprovalState.APPROVED.value,
            actor=actor,
            comment=opts.comments,
            extra=extra,
        )
        return self._to_dict(config, entity)

    def reject(self, kind, entity_id: int, actor: Actor, reason: Optional[str]) -> Dict[str, Any]:
        """
        Reject a pending entity with a non-empty reason.

        Raises:
            NotFoundError: If the entity does not exist
            AuthorizationError: If the reviewer's role lacks reject for the kind
            ValidationError: If the reason is missing or blank
            InvalidTransitionError: If the entity is not pending
        """
        config = get_entity_config(kind)
        entity = self._load(config, entity_id)
        machine = self._machine(config, entity, actor)
        machine.authorize(ApprovalTransition.REJECT)

        reason = parse_payload(RejectOptions, {"reason": reason}).reason
        from_state = machine.state
        machine.transition(ApprovalTransition.REJECT, comment=reason)
        reason = reason.strip()

        self._apply(
            config, entity, from_state,
            {
                "approval_status": ApprovalState.REJECTED.value,
                "rejection_reason": reason,
                "rejected_by": actor.user_id,
                "rejected_at": utcnow(),
            },
            transition=ApprovalTransition.REJECT.value,
            to_state=ApprovalState.REJECTED.value,
            actor=actor,
            comment=reason,
        )
        return self._to_dict(config, entity)

    def resubmit(
        self,
        kind,
        entity_id: int,
        actor: Actor,
        changes: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Return a rejected entity to pending, optionally applying owner edits.

        Clears the rejection and any earlier approval footprint. Funding
        applications also go back to funding_status pending with no
        approved amount.

        Raises:
            NotFoundError: If the entity does not exist
            AuthorizationError: If the actor is not the owner
            ValidationError: If the edits are malformed
            InvalidTransitionError: If the entity is not rejected
        """
        config = get_entity_config(kind)
        entity = self._load(config, entity_id)
        machine = self._machine(config, entity, actor)
        machine.authorize(ApprovalTransition.RESUBMIT)

        edits = self._validate_changes(config, entity, actor, changes, allow_empty=True)

        from_state = machine.state
        machine.transition(ApprovalTransition.RESUBMIT)

        values = dict(edits)
        values.update({
            "approval_status": ApprovalState.PENDING.value,
            "rejection_reason": None,
            "rejected_by": None,
            "rejected_at": None,
            "approved_by": None,
            "approved_at": None,
        })
        if config.kind == EntityKind.FUNDING:
            values["funding_status"] = FundingStatus.PENDING.value
            values["amount_approved"] = None

        self._apply(
            config, entity, from_state, values,
            transition=ApprovalTransition.RESUBMIT.value,
            to_state=ApprovalState.PENDING.value,
            actor=actor,
            extra={"changed_fields": sorted(edits)} if edits else {},
        )
        return self._to_dict(config, entity)

    def edit(self, kind, entity_id: int, actor: Actor, fields: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Owner edit while the entity is pending or rejected.

        approval_status is left unchanged and no event is emitted.

        Raises:
            NotFoundError: If the entity does not exist
            AuthorizationError: If the actor is not the owner
            ValidationError: If a field is unknown, workflow-owned or malformed
            InvalidTransitionError: If the entity has been approved
        """
        config = get_entity_config(kind)
        entity = self._load(config, entity_id)
        if not (can_perform(actor.role, Action.EDIT, config.kind) and actor.owns(entity.owner_id)):
            self._deny(config, entity, actor, Action.EDIT, f"Only the owner can edit this {config.label}")

        edits = self._validate_changes(config, entity, actor, fields, allow_empty=False)

        current = ApprovalState(entity.approval_status)
        if current not in EDITABLE_STATES:
            raise InvalidTransitionError(
                f"Cannot edit a {config.label} that is {current.value}",
                from_state=current.value,
                transition=Action.EDIT.value,
            )

        self._apply(config, entity, current.value, edits)
        logger.info(
            "%s %s edited by user %s: %s",
            config.label, entity.id, actor.user_id, ", ".join(sorted(edits)),
        )
        return self._to_dict(config, entity)

    def update_status(self, kind, entity_id: int, actor: Actor, status: Any) -> Dict[str, Any]:
        """
        Move an approved entity's secondary status.

        project_status and funding_status take one of their enumerated
        values; an IP record's status is any non-empty string.

        Raises:
            NotFoundError: If the entity does not exist
            AuthorizationError: If the role lacks update_status for the kind
            ValidationError: If the status is empty or not allowed
            InvalidTransitionError: If the entity is not approved
        """
        config = get_entity_config(kind)
        entity = self._load(config, entity_id)
        if not can_perform(actor.role, Action.UPDATE_STATUS, config.kind):
            self._deny(
                config, entity, actor, Action.UPDATE_STATUS,
                f"Role '{actor.role}' cannot update the status of a {config.label}",
            )

        new_status = parse_payload(StatusUpdate, {"status": status}).status
        if config.secondary_values is not None and new_status not in config.secondary_values:
            raise ValidationError(
                f"status must be one of: {', '.join(config.secondary_values)}"
            )

        current = entity.approval_status
        if current != ApprovalState.APPROVED.value:
            raise InvalidTransitionError(
                f"Cannot update the status of a {config.label} that is {current}",
                from_state=current,
                transition=Action.UPDATE_STATUS.value,
            )

        old_status = getattr(entity, config.secondary_field)
        self._apply(
            config, entity, current,
            {config.secondary_field: new_status},
            transition=Action.UPDATE_STATUS.value,
            to_state=current,
            actor=actor,
            extra={"field": config.secondary_field, "from": old_status, "to": new_status},
        )
        return self._to_dict(config, entity)

    def delete(self, kind, entity_id: int, actor: Actor) -> None:
        """
        Remove an entity. Weak references to it are left untouched.

        Raises:
            NotFoundError: If the entity does not exist
            AuthorizationError: If the role lacks delete for the kind
        """
        config = get_entity_config(kind)
        entity = self._load(config, entity_id)
        if not can_perform(actor.role, Action.DELETE, config.kind):
            self._deny(
                config, entity, actor, Action.DELETE,
                f"Role '{actor.role}' cannot delete a {config.label}",
            )

        event = self._event(config, entity, Action.DELETE.value, entity.approval_status, None, actor)
        self.db.delete(entity)
        self.db.commit()

        logger.info("%s %s deleted by user %s", config.label, entity_id, actor.user_id)
        self._dispatch(event)

    def pledge(
        self,
        funding_id: int,
        actor: Actor,
        amount: Any,
        note: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Record an investor pledge against an approved funding application.

        Pledges do not change the application's workflow state.

        Returns:
            {"pledge": {...}, "total_pledged": float}

        Raises:
            NotFoundError: If the application does not exist
            AuthorizationError: If the role lacks pledge
            ValidationError: If the amount is not positive
            InvalidTransitionError: If the application is not approved
        """
        config = get_entity_config(EntityKind.FUNDING)
        entity = self._load(config, funding_id)
        if not can_perform(actor.role, Action.PLEDGE, config.kind):
            self._deny(
                config, entity, actor, Action.PLEDGE,
                f"Role '{actor.role}' cannot pledge on a {config.label}",
            )

        request = parse_payload(PledgeRequest, {"amount": amount, "note": note})
        if entity.approval_status != ApprovalState.APPROVED.value:
            raise InvalidTransitionError(
                "Pledges can only be made on approved funding applications",
                from_state=entity.approval_status,
                transition=Action.PLEDGE.value,
            )

        pledge = FundingPledge(
            funding_id=entity.id,
            pledger_id=actor.user_id,
            amount=request.amount,
            note=request.note or None,
            status=PledgeStatus.PLEDGED.value,
        )
        self.db.add(pledge)
        self.db.commit()
        self.db.refresh(pledge)

        total = self.total_pledged(entity.id)
        logger.info(
            "User %s pledged %s on funding application %s (total %s)",
            actor.user_id, pledge.amount, entity.id, total,
        )
        return {"pledge": self._pledge_to_dict(pledge), "total_pledged": total}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, kind, entity_id: int, actor: Actor) -> Dict[str, Any]:
        """Get an entity the actor is allowed to see."""
        config = get_entity_config(kind)
        entity = self._load(config, entity_id)
        self._check_visible(config, entity, actor)
        return self._to_dict(config, entity)

    def list_entities(
        self,
        kind,
        actor: Actor,
        *,
        approval_status: Optional[str] = None,
        secondary_status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        List entities visible to the actor, newest first.

        Returns:
            (items for the requested page, total matching rows)
        """
        config = get_entity_config(kind)
        model = config.model
        query = self._visible_query(config, actor)

        if approval_status:
            if approval_status not in {s.value for s in ApprovalState}:
                raise ValidationError(f"Unknown approval status: {approval_status}")
            query = query.filter(model.approval_status == approval_status)
        if secondary_status:
            query = query.filter(getattr(model, config.secondary_field) == secondary_status)
        if search:
            pattern = contains_pattern(search.strip())
            query = query.filter(or_(*[
                getattr(model, name).ilike(pattern, escape=LIKE_ESCAPE)
                for name in config.search_fields
            ]))

        total = query.count()
        rows = (
            query.order_by(model.created_at.desc(), model.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return [self._to_dict(config, row) for row in rows], total

    def list_pending(self, kind, actor: Actor) -> List[Dict[str, Any]]:
        """Review queue: pending entities, oldest first."""
        config = get_entity_config(kind)
        if not can_perform(actor.role, Action.APPROVE, config.kind):
            raise AuthorizationError(
                f"Role '{actor.role}' cannot review a {config.label}",
                required_permission=str(Permission(config.kind, Action.APPROVE)),
            )
        model = config.model
        rows = (
            self.db.query(model)
            .filter(model.approval_status == ApprovalState.PENDING.value)
            .order_by(model.created_at.asc(), model.id.asc())
            .all()
        )
        return [self._to_dict(config, row) for row in rows]

    def history(self, kind, entity_id: int, actor: Actor) -> List[Dict[str, Any]]:
        """Transition history of an entity, oldest first."""
        config = get_entity_config(kind)
        entity = self._load(config, entity_id)
        self._check_visible(config, entity, actor)

        rows = (
            self.db.query(ApprovalHistory)
            .filter(
                ApprovalHistory.entity_kind == config.kind.value,
                ApprovalHistory.entity_id == entity.id,
            )
            .order_by(ApprovalHistory.created_at.asc(), ApprovalHistory.id.asc())
            .all()
        )
        return [self._history_to_dict(row) for row in rows]

    def summary(self, kind, actor: Actor) -> Dict[str, Any]:
        """Counts by approval status and by secondary status."""
        config = get_entity_config(kind)
        if not can_perform(actor.role, Action.VIEW_ALL, config.kind):
            raise AuthorizationError(
                f"Role '{actor.role}' cannot view all {config.label} records",
                required_permission=str(Permission(config.kind, Action.VIEW_ALL)),
            )
        model = config.model
        query = self._visible_query(config, actor)

        by_approval = {s.value: 0 for s in ApprovalState}
        for state, count in (
            query.with_entities(model.approval_status, func.count(model.id))
            .group_by(model.approval_status)
            .all()
        ):
            by_approval[state] = count

        secondary_column = getattr(model, config.secondary_field)
        by_secondary = {value: 0 for value in (config.secondary_values or ())}
        for value, count in (
            query.with_entities(secondary_column, func.count(model.id))
            .group_by(secondary_column)
            .all()
        ):
            by_secondary[value] = count

        return {
            "entity_kind": config.kind.value,
            "total": sum(by_approval.values()),
            "by_approval_status": by_approval,
            "by_status": by_secondary,
        }

    def total_pledged(self, funding_id: int) -> float:
        """Sum of the active pledges on an application."""
        total = (
            self.db.query(func.coalesce(func.sum(FundingPledge.amount), 0))
            .filter(
                FundingPledge.funding_id == funding_id,
                FundingPledge.status == PledgeStatus.PLEDGED.value,
            )
            .scalar()
        )
        return float(total or 0)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load(self, config: EntityConfig, entity_id: int):
        entity = self.db.query(config.model).filter(config.model.id == entity_id).first()
        if not entity:
            raise NotFoundError(f"{config.label} {entity_id} not found")
        return entity

    def _machine(self, config: EntityConfig, entity, actor: Actor) -> ApprovalStateMachine:
        return ApprovalStateMachine(
            config.kind,
            entity.id,
            ApprovalState(entity.approval_status),
            actor,
            owner_id=entity.owner_id,
        )

    def _deny(self, config: EntityConfig, entity, actor: Actor, action: Action, message: str):
        logger.warning(
            "Denied %s on %s %s for user %s (role %s)",
            action.value, config.kind.value, entity.id, actor.user_id, actor.role,
        )
        raise AuthorizationError(message, required_permission=str(Permission(config.kind, action)))

    def _visible_query(self, config: EntityConfig, actor: Actor):
        model = config.model
        query = self.db.query(model)
        if can_perform(actor.role, Action.VIEW_ALL, config.kind):
            restricted = visible_state_for(actor.role, config.kind)
            if restricted:
                query = query.filter(or_(
                    model.approval_status == restricted,
                    model.owner_id == actor.user_id,
                ))
            return query
        return query.filter(model.owner_id == actor.user_id)

    def _check_visible(self, config: EntityConfig, entity, actor: Actor) -> None:
        if actor.owns(entity.owner_id):
            return
        if can_perform(actor.role, Action.VIEW_ALL, config.kind):
            restricted = visible_state_for(actor.role, config.kind)
            if not restricted or entity.approval_status == restricted:
                return
        raise AuthorizationError(
            f"You do not have access to {config.label} {entity.id}",
            required_permission=str(Permission(config.kind, Action.VIEW_ALL)),
        )

    def _check_project_link(self, project_id: int, actor: Actor) -> None:
        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise ValidationError(f"project_id: project {project_id} does not exist")
        if actor.role not in _PROJECT_LINK_ROLES and not actor.owns(project.owner_id):
            raise AuthorizationError("You can only link your own projects")

    def _validate_changes(
        self,
        config: EntityConfig,
        entity,
        actor: Actor,
        data: Optional[Dict[str, Any]],
        *,
        allow_empty: bool,
    ) -> Dict[str, Any]:
        edits = parse_payload(config.change_schema, data).changes()
        if not edits and not allow_empty:
            raise ValidationError("No editable fields supplied")

        if config.kind == EntityKind.IP_RECORD:
            ip_type = edits.get("ip_type", entity.ip_type)
            numbers = edits.get("identification_numbers", entity.identification_numbers)
            unknown = unknown_identification_keys(ip_type, numbers)
            if unknown:
                raise ValidationError(
                    f"identification_numbers: {', '.join(unknown)} do not apply to {ip_type}"
                )

        if edits.get("project_id") is not None and edits["project_id"] != getattr(entity, "project_id", None):
            self._check_project_link(edits["project_id"], actor)
        return edits

    def _apply(
        self,
        config: EntityConfig,
        entity,
        expected_state: str,
        values: Dict[str, Any],
        *,
        transition: Optional[str] = None,
        to_state: Optional[str] = None,
        actor: Optional[Actor] = None,
        comment: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Write values only if the row is still in expected_state, then commit.

        When transition is given a history row is written in the same commit
        and the event is dispatched after it.
        """
        model = config.model
        updated = (
            self.db.query(model)
            .filter(model.id == entity.id, model.approval_status == expected_state)
            .update(values, synchronize_session=False)
        )
        if updated != 1:
            self.db.rollback()
            logger.warning(
                "Conflicting update on %s %s: expected %s",
                config.kind.value, entity.id, expected_state,
            )
            raise InvalidTransitionError(
                f"{config.label} {entity.id} is no longer {expected_state}",
                from_state=expected_state,
                transition=transition,
            )

        if transition:
            self.db.add(ApprovalHistory(
                entity_kind=config.kind.value,
                entity_id=entity.id,
                from_state=expected_state,
                to_state=to_state,
                transition=transition,
                user_id=actor.user_id,
                comment=comment,
                extra_data=extra or {},
            ))
        self.db.commit()
        self.db.refresh(entity)

        if transition:
            logger.info(
                "%s %s: %s -> %s (%s by user %s)",
                config.label, entity.id, expected_state, to_state, transition, actor.user_id,
            )
            self._emit(config, entity, transition, expected_state, to_state, actor, comment, extra)

    def _event(
        self,
        config: EntityConfig,
        entity,
        transition: str,
        from_state: Optional[str],
        to_state: Optional[str],
        actor: Actor,
        comment: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> WorkflowEvent:
        return WorkflowEvent(
            entity_kind=config.kind.value,
            entity_id=entity.id,
            transition=transition,
            from_state=from_state,
            to_state=to_state,
            actor_id=actor.user_id,
            actor_role=actor.role,
            owner_id=entity.owner_id,
            title=entity.title,
            comment=comment,
            link=config.link_for(entity.id),
            extra=dict(extra or {}),
            timestamp=utcnow(),
        )

    def _emit(self, config, entity, transition, from_state, to_state, actor, comment=None, extra=None):
        self._dispatch(self._event(config, entity, transition, from_state, to_state, actor, comment, extra))

    def _dispatch(self, event: WorkflowEvent) -> None:
        if self.dispatcher is None:
            return
        try:
            self.dispatcher.dispatch(event)
        except Exception:
            # The state change is already committed
            logger.exception(
                "Failed to dispatch %s event for %s %s",
                event.transition, event.entity_kind, event.entity_id,
            )

    def _to_dict(self, config: EntityConfig, entity) -> Dict[str, Any]:
        """Convert an entity model to a JSON-ready dictionary."""
        data: Dict[str, Any] = {"entity_kind": config.kind.value}
        for column in entity.__table__.columns:
            data[column.name] = _jsonable(getattr(entity, column.name))

        if "project_id" in data:
            project = None
            if entity.project_id is not None:
                project = self.db.query(Project).filter(Project.id == entity.project_id).first()
            data["project_linked"] = project is not None
            data["project_title"] = project.title if project else None
        if config.kind == EntityKind.FUNDING:
            data["total_pledged"] = self.total_pledged(entity.id)
        data["owner_name"] = entity.owner.name if entity.owner else None
        return data

    def _history_to_dict(self, row: ApprovalHistory) -> Dict[str, Any]:
        return {
            "id": row.id,
            "entity_kind": row.entity_kind,
            "entity_id": row.entity_id,
            "from_state": row.from_state,
            "to_state": row.to_state,
            "transition": row.transition,
            "user_id": row.user_id,
            "comment": row.comment,
            "extra_data": row.extra_data or {},
            "created_at": row.created_at.isoformat() if row.created_at else None,
        }

    def _pledge_to_dict(self, pledge: FundingPledge) -> Dict[str, Any]:
        return {
            "id": pledge.id,
            "funding_id": pledge.funding_id,
            "pledger_id": pledge.pledger_id,
            "amount": float(pledge.amount),
            "note": pledge.note,
            "status": pledge.status,
            "created_at": pledge.created_at.isoformat() if pledge.created_at else None,
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value
