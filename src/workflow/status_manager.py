"""
Filing Lifecycle Manager

Manages the lifecycle of a filing:
- DRAFT: Initial state, editable by its owner
- CREATED: Payload complete and valid, still editable
- PENDING: Submitted; internal filings may be marked received / not received
- APPROVED / REJECTED: Reviewed by an admin (terminal)
- RETURNED: Sent back to the owner for correction
- WITHDRAWN: Abandoned by the owner (terminal)

Guarantees:
- Every transition is checked against VALID_TRANSITIONS, the actor and the
  filing category before anything changes
- Moving to CREATED or PENDING requires a valid payload
- A transition returns a new Filing; the input is never modified
- Every transition is recorded in the filing's history
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple
import logging

from domain.aggregates import (
    CommentType,
    Filing,
    FilingComment,
    FilingHistoryEntry,
    FilingStatus,
    HistoryAction,
    PENDING_STATUSES,
    ReturnSnapshot,
)
from domain.exceptions import IllegalTransition, TransitionRejection, ValidationFailed
from domain.value_objects import Attachment
from rbac.roles import ActorContext
from rbac.status_permissions import (
    edit_denial_reason,
    review_denial_reason,
    visible_in_admin_mode,
    withdraw_denial_reason,
)

logger = logging.getLogger(__name__)


# Valid status transitions
VALID_TRANSITIONS: Dict[FilingStatus, List[FilingStatus]] = {
    FilingStatus.DRAFT: [FilingStatus.CREATED, FilingStatus.PENDING, FilingStatus.WITHDRAWN],
    FilingStatus.CREATED: [FilingStatus.PENDING, FilingStatus.DRAFT, FilingStatus.WITHDRAWN],
    FilingStatus.PENDING: [
        FilingStatus.PENDING_RECEIVED,
        FilingStatus.PENDING_NOT_RECEIVED,
        FilingStatus.APPROVED,
        FilingStatus.REJECTED,
        FilingStatus.RETURNED,
        FilingStatus.WITHDRAWN,
    ],
    FilingStatus.PENDING_RECEIVED: [
        FilingStatus.PENDING_NOT_RECEIVED,
        FilingStatus.APPROVED,
        FilingStatus.REJECTED,
        FilingStatus.RETURNED,
        FilingStatus.WITHDRAWN,
    ],
    FilingStatus.PENDING_NOT_RECEIVED: [
        FilingStatus.PENDING_RECEIVED,
        FilingStatus.APPROVED,
        FilingStatus.REJECTED,
        FilingStatus.RETURNED,
        FilingStatus.WITHDRAWN,
    ],
    FilingStatus.RETURNED: [
        FilingStatus.DRAFT,
        FilingStatus.CREATED,
        FilingStatus.PENDING,
        FilingStatus.WITHDRAWN,
    ],
    FilingStatus.APPROVED: [],
    FilingStatus.REJECTED: [],
    FilingStatus.WITHDRAWN: [],
}

# Targets that require a fully valid payload
VALIDATED_TARGETS = frozenset({FilingStatus.CREATED, FilingStatus.PENDING})

# Acknowledgement sub-states exist for internal filings only
INTERNAL_ONLY_TARGETS = frozenset({FilingStatus.PENDING_RECEIVED, FilingStatus.PENDING_NOT_RECEIVED})

# Targets decided by a reviewing admin
REVIEW_TARGETS = frozenset({
    FilingStatus.PENDING_RECEIVED,
    FilingStatus.PENDING_NOT_RECEIVED,
    FilingStatus.APPROVED,
    FilingStatus.REJECTED,
    FilingStatus.RETURNED,
})

_HISTORY_ACTIONS: Dict[FilingStatus, HistoryAction] = {
    FilingStatus.PENDING: HistoryAction.SUBMIT,
    FilingStatus.APPROVED: HistoryAction.APPROVE,
    FilingStatus.REJECTED: HistoryAction.REJECT,
    FilingStatus.RETURNED: HistoryAction.RETURN,
    FilingStatus.WITHDRAWN: HistoryAction.WITHDRAW,
}


@dataclass
class FilingActions:
    """What an actor may currently do with a filing."""
    visible: bool = True
    editable: bool = False
    can_submit: bool = False
    can_review: bool = False
    can_withdraw: bool = False

    @classmethod
    def for_filing(cls, filing: Filing, actor: ActorContext) -> "FilingActions":
        """Get available actions for a filing and actor."""
        is_owner = filing.is_owned_by(actor.user_id)
        editable = edit_denial_reason(filing.status, filing.category, actor, is_owner) is None
        return cls(
            visible=visible_in_admin_mode(filing.status, filing.category) if actor.acting_as_admin else is_owner,
            editable=editable,
            can_submit=editable,
            can_review=review_denial_reason(filing.status, actor) is None,
            can_withdraw=withdraw_denial_reason(filing.status, filing.category, actor, is_owner) is None,
        )

    def to_dict(self) -> Dict[str, bool]:
        """Convert to dictionary."""
        return {
            "visible": self.visible,
            "editable": self.editable,
            "can_submit": self.can_submit,
            "can_review": self.can_review,
            "can_withdraw": self.can_withdraw,
        }


def _status(value: Any) -> FilingStatus:
    return value if isinstance(value, FilingStatus) else FilingStatus(value)


class FilingLifecycle:
    """
    Status state machine for filings.

    Payload validation is delegated to the filing schema registered for the
    filing's type; a custom validator can be injected for tests.
    """

    def __init__(self, payload_validator=None):
        """
        Initialize the lifecycle.

        Args:
            payload_validator: Callable(filing) -> list of failed
                ValidationResult. Defaults to the registered filing schema.
        """
        self._payload_validator = payload_validator

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def validate_payload(self, filing: Filing) -> list:
        """Return the blocking validation problems of a filing's payload."""
        if self._payload_validator is not None:
            return list(self._payload_validator(filing))
        from forms.registry import get_schema

        schema = get_schema(filing.type)
        try:
            payload = schema.parse(filing.data)
        except ValidationFailed as e:
            return list(e.errors)
        return schema.validate(payload)

    def rejection_for(
        self,
        filing: Filing,
        target: FilingStatus,
        actor: ActorContext,
    ) -> Optional[Tuple[TransitionRejection, str]]:
        """Guard check without payload validation; None when allowed."""
        current = filing.status
        valid_targets = VALID_TRANSITIONS.get(current, [])
        if target not in valid_targets:
            return (
                TransitionRejection.WRONG_STATE,
                f"Cannot transition from {current.value} to {target.value}. "
                f"Valid transitions: {[s.value for s in valid_targets]}",
            )

        is_owner = filing.is_owned_by(actor.user_id)
        if target == FilingStatus.WITHDRAWN:
            reason = withdraw_denial_reason(current, filing.category, actor, is_owner)
        elif current in PENDING_STATUSES and target in REVIEW_TARGETS:
            reason = review_denial_reason(current, actor)
            if reason is None and target in INTERNAL_ONLY_TARGETS and not filing.is_internal:
                reason = TransitionRejection.WRONG_CATEGORY
        else:
            reason = edit_denial_reason(current, filing.category, actor, is_owner)

        if reason is None:
            return None
        messages = {
            TransitionRejection.WRONG_ACTOR: f"User {actor.user_id} may not move this filing to {target.value}",
            TransitionRejection.WRONG_CATEGORY: (
                f"Admin mode may not move a {filing.category.value} filing to {target.value}"
            ),
            TransitionRejection.WRONG_STATE: f"Filing in {current.value} cannot move to {target.value}",
        }
        return reason, messages[reason]

    def can_transition(self, filing: Filing, target: Any, actor: ActorContext) -> Tuple[bool, str]:
        """
        Check if a status transition is allowed (payload validity included).

        Returns:
            Tuple of (is_valid, error_message)
        """
        target = _status(target)
        rejection = self.rejection_for(filing, target, actor)
        if rejection is not None:
            return (False, rejection[1])
        if target in VALIDATED_TARGETS:
            errors = self.validate_payload(filing)
            if errors:
                return (False, f"{len(errors)} field(s) failed validation")
        return (True, "")

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def transition(
        self,
        filing: Filing,
        target: Any,
        actor: ActorContext,
        comment: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Filing:
        """
        Move a filing to a new status.

        Args:
            filing: Current filing (not modified)
            target: Target status
            actor: Acting user
            comment: Optional comment or return/rejection reason
            now: Timestamp to record (defaults to utcnow)

        Returns:
            Updated copy of the filing

        Raises:
            IllegalTransition: If the transition is not allowed for this actor
            ValidationFailed: If the target requires a valid payload and it is not
        """
        target = _status(target)
        current = filing.status
        rejection = self.rejection_for(filing, target, actor)
        if rejection is not None:
            reason, message = rejection
            logger.warning(
                f"Rejected transition of filing {filing.id}: {current.value} -> {target.value} "
                f"({reason.value})"
            )
            raise IllegalTransition(message, reason, current.value, target.value)

        if target in VALIDATED_TARGETS:
            errors = self.validate_payload(filing)
            if errors:
                logger.info(f"Filing {filing.id} failed validation moving to {target.value}: {len(errors)} error(s)")
                raise ValidationFailed(errors)

        now = now or datetime.utcnow()
        updated = filing.model_copy(deep=True)

        if target == FilingStatus.RETURNED:
            updated.return_history.append(ReturnSnapshot(
                returned_at=now,
                returned_by=actor.user_id,
                reason=comment,
                data_snapshot=filing.model_copy(deep=True).data,
                attachments_snapshot=[a.model_copy() for a in filing.attachments],
                submission_date=filing.submission_date,
            ))
        if target in (FilingStatus.RETURNED, FilingStatus.REJECTED) and comment:
            updated.comments.append(FilingComment(
                user_id=actor.user_id, comment=comment,
                type=CommentType.REJECTION_REASON, created_at=now,
            ))
        if target == FilingStatus.PENDING:
            updated.submission_date = now.date()
        if target == FilingStatus.WITHDRAWN:
            updated.withdrawn_at = now

        updated.status = target
        updated.updated_at = now
        updated.history.append(FilingHistoryEntry(
            user_id=actor.user_id,
            action=_HISTORY_ACTIONS.get(target, HistoryAction.STATUS_CHANGE),
            comment=comment,
            from_status=current,
            to_status=target,
            created_at=now,
        ))

        logger.info(f"Filing {filing.id} ({filing.type}) moved {current.value} -> {target.value} by {actor.user_id}")
        return updated

    def submit(self, filing: Filing, actor: ActorContext, comment: Optional[str] = None) -> Filing:
        """Submit a filing for review."""
        return self.transition(filing, FilingStatus.PENDING, actor, comment)

    def approve(self, filing: Filing, actor: ActorContext, comment: Optional[str] = None) -> Filing:
        return self.transition(filing, FilingStatus.APPROVED, actor, comment)

    def reject(self, filing: Filing, actor: ActorContext, reason: Optional[str] = None) -> Filing:
        return self.transition(filing, FilingStatus.REJECTED, actor, reason)

    def return_to_owner(self, filing: Filing, actor: ActorContext, reason: Optional[str] = None) -> Filing:
        """Send a filing back to its owner, snapshotting data and attachments."""
        return self.transition(filing, FilingStatus.RETURNED, actor, reason)

    def withdraw(self, filing: Filing, actor: ActorContext, comment: Optional[str] = None) -> Filing:
        return self.transition(filing, FilingStatus.WITHDRAWN, actor, comment)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def check_can_edit(self, filing: Filing, actor: ActorContext) -> None:
        """
        Raise unless the actor may modify the filing's payload or attachments.

        Raises:
            IllegalTransition: With the reason the edit is refused
        """
        reason = edit_denial_reason(filing.status, filing.category, actor, filing.is_owned_by(actor.user_id))
        if reason is not None:
            logger.warning(f"Rejected edit of filing {filing.id} by {actor.user_id} ({reason.value})")
            raise IllegalTransition(
                f"User {actor.user_id} may not edit filing {filing.id} in {filing.status.value}",
                reason,
                filing.status.value,
            )

    def update_data(
        self,
        filing: Filing,
        data: Dict[str, Any],
        actor: ActorContext,
        now: Optional[datetime] = None,
    ) -> Filing:
        """Replace the payload; returns an updated copy."""
        self.check_can_edit(filing, actor)
        updated = filing.model_copy(deep=True)
        updated.replace_data(data)
        if now is not None:
            updated.updated_at = now
        return updated

    def set_attachments(
        self,
        filing: Filing,
        attachments: List[Attachment],
        actor: ActorContext,
        now: Optional[datetime] = None,
    ) -> Filing:
        """Replace the attachment list; returns an updated copy."""
        self.check_can_edit(filing, actor)
        updated = filing.model_copy(deep=True)
        updated.attachments = [a.model_copy() for a in attachments]
        updated.updated_at = now or datetime.utcnow()
        return updated


def editing_attachments(filing: Filing) -> List[Attachment]:
    """
    Attachment baseline when a filing is opened for editing.

    A returned filing resurfaces the attachments captured by its last return
    snapshot; otherwise (or without a snapshot) the current attachments.
    """
    if filing.status == FilingStatus.RETURNED:
        snapshot = filing.last_return
        if snapshot is not None and snapshot.attachments_snapshot is not None:
            return [a.model_copy() for a in snapshot.attachments_snapshot]
    return [a.model_copy() for a in filing.attachments]


# Global singleton
_lifecycle: Optional[FilingLifecycle] = None


def get_filing_lifecycle() -> FilingLifecycle:
    """Get the global filing lifecycle instance."""
    global _lifecycle
    if _lifecycle is None:
        _lifecycle = FilingLifecycle()
    return _lifecycle
