"""
Status-Based Permission Control

This module defines WHEN an actor may act on a filing, based on its status
and category.

Flow:
1. DRAFT / CREATED / RETURNED: owner can edit and submit
2. PENDING (and its received / not-received sub-states): admin reviews
3. APPROVED / REJECTED / WITHDRAWN: locked for everyone

Admin mode:
- An admin in admin mode may edit, submit and withdraw EXTERNAL filings only
- INTERNAL filings in draft/created are private to their owner and are not
  even listed in admin mode
"""

from typing import Optional

from domain.aggregates import FilingCategory, FilingStatus, PENDING_STATUSES
from domain.exceptions import TransitionRejection
from .roles import ActorContext

EDITABLE_STATUSES = frozenset({
    FilingStatus.DRAFT,
    FilingStatus.CREATED,
    FilingStatus.RETURNED,
})

PRIVATE_INTERNAL_STATUSES = frozenset({
    FilingStatus.DRAFT,
    FilingStatus.CREATED,
})


def edit_denial_reason(
    status: FilingStatus,
    category: FilingCategory,
    actor: ActorContext,
    is_owner: bool = False,
) -> Optional[TransitionRejection]:
    """
    Why an actor may not modify a filing, or None when they may.

    Args:
        status: Current status of the filing
        category: Filing category
        actor: Acting user
        is_owner: Whether the actor owns the filing

    Returns:
        The rejection reason, or None if editing is allowed

    Examples:
        >>> edit_denial_reason(FilingStatus.DRAFT, FilingCategory.INTERNAL,
        ...                    ActorContext.admin("hr-1")).value
        'wrong_category'
        >>> edit_denial_reason(FilingStatus.DRAFT, FilingCategory.EXTERNAL,
        ...                    ActorContext.admin("hr-1")) is None
        True
    """
    if actor.acting_as_admin:
        # Admin mode never touches internal filings
        if category == FilingCategory.INTERNAL:
            return TransitionRejection.WRONG_CATEGORY
    elif not is_owner:
        return TransitionRejection.WRONG_ACTOR

    if status not in EDITABLE_STATUSES:
        return TransitionRejection.WRONG_STATE
    return None


def can_edit_filing(
    status: FilingStatus,
    category: FilingCategory,
    actor: ActorContext,
    is_owner: bool = False,
) -> bool:
    """
    Check if an actor can edit a filing's payload or attachments.

    Examples:
        >>> can_edit_filing(FilingStatus.RETURNED, FilingCategory.INTERNAL,
        ...                 ActorContext.employee("emp-1"), is_owner=True)
        True
        >>> can_edit_filing(FilingStatus.PENDING, FilingCategory.INTERNAL,
        ...                 ActorContext.employee("emp-1"), is_owner=True)
        False
    """
    return edit_denial_reason(status, category, actor, is_owner) is None


def can_submit_filing(
    status: FilingStatus,
    category: FilingCategory,
    actor: ActorContext,
    is_owner: bool = False,
) -> bool:
    """
    Check if an actor can move a filing forward to created or pending.

    Same rule as editing: the owner, or an admin in admin mode for external
    filings, while the filing is draft, created or returned.
    """
    return can_edit_filing(status, category, actor, is_owner)


def review_denial_reason(status: FilingStatus, actor: ActorContext) -> Optional[TransitionRejection]:
    """Why an actor may not approve/reject/return a filing, or None."""
    if not actor.acting_as_admin:
        return TransitionRejection.WRONG_ACTOR
    if status not in PENDING_STATUSES:
        return TransitionRejection.WRONG_STATE
    return None


def can_review_filing(status: FilingStatus, actor: ActorContext) -> bool:
    """
    Check if an actor can approve, reject, return or acknowledge a filing.

    Only an admin in admin mode, and only while the filing is pending.
    """
    return review_denial_reason(status, actor) is None


def withdraw_denial_reason(
    status: FilingStatus,
    category: FilingCategory,
    actor: ActorContext,
    is_owner: bool = False,
) -> Optional[TransitionRejection]:
    """Why an actor may not withdraw a filing, or None."""
    if actor.acting_as_admin:
        if category == FilingCategory.INTERNAL:
            return TransitionRejection.WRONG_CATEGORY
    elif not is_owner:
        return TransitionRejection.WRONG_ACTOR
    if status.is_terminal:
        return TransitionRejection.WRONG_STATE
    return None


def can_withdraw_filing(
    status: FilingStatus,
    category: FilingCategory,
    actor: ActorContext,
    is_owner: bool = False,
) -> bool:
    """Check if an actor can withdraw a filing (any non-terminal state)."""
    return withdraw_denial_reason(status, category, actor, is_owner) is None


def visible_in_admin_mode(status: FilingStatus, category: FilingCategory) -> bool:
    """
    Whether a filing appears in admin-mode listings.

    Examples:
        >>> visible_in_admin_mode(FilingStatus.CREATED, FilingCategory.INTERNAL)
        False
        >>> visible_in_admin_mode(FilingStatus.PENDING, FilingCategory.INTERNAL)
        True
    """
    return not (category == FilingCategory.INTERNAL and status in PRIVATE_INTERNAL_STATUSES)
