"""Roles and status-based permissions for filings."""

from .roles import ActorContext, Role
from .status_permissions import (
    EDITABLE_STATUSES,
    can_edit_filing,
    can_review_filing,
    can_submit_filing,
    can_withdraw_filing,
    edit_denial_reason,
    review_denial_reason,
    visible_in_admin_mode,
    withdraw_denial_reason,
)

__all__ = [
    "ActorContext",
    "Role",
    "EDITABLE_STATUSES",
    "can_edit_filing",
    "can_review_filing",
    "can_submit_filing",
    "can_withdraw_filing",
    "edit_denial_reason",
    "review_denial_reason",
    "visible_in_admin_mode",
    "withdraw_denial_reason",
]
