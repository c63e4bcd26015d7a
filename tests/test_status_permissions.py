"""
Tests for status-based permission control.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from domain.aggregates import FilingCategory, FilingStatus
from domain.exceptions import TransitionRejection
from rbac.roles import ActorContext, Role
from rbac.status_permissions import (
    EDITABLE_STATUSES,
    can_edit_filing,
    can_review_filing,
    can_withdraw_filing,
    edit_denial_reason,
    review_denial_reason,
    visible_in_admin_mode,
    withdraw_denial_reason,
)

INTERNAL = FilingCategory.INTERNAL
EXTERNAL = FilingCategory.EXTERNAL


class TestActorContext:
    """Roles and admin mode."""

    def test_admin_mode_required(self):
        assert ActorContext.admin("hr-1").acting_as_admin is True
        assert ActorContext.admin("hr-1", admin_mode=False).acting_as_admin is False
        assert ActorContext.employee("emp-1").acting_as_admin is False

    def test_role_flag(self):
        assert Role.ADMIN.is_admin
        assert not Role.EMPLOYEE.is_admin


class TestEditPermissions:
    """Who may edit a filing, and when."""

    @pytest.mark.parametrize("status", sorted(EDITABLE_STATUSES))
    def test_owner_edits_editable_statuses(self, status):
        assert can_edit_filing(status, INTERNAL, ActorContext.employee("emp-1"), is_owner=True)

    @pytest.mark.parametrize("status", [
        FilingStatus.PENDING, FilingStatus.APPROVED, FilingStatus.REJECTED, FilingStatus.WITHDRAWN,
    ])
    def test_locked_statuses(self, status):
        reason = edit_denial_reason(status, INTERNAL, ActorContext.employee("emp-1"), is_owner=True)
        assert reason == TransitionRejection.WRONG_STATE

    def test_non_owner_denied(self):
        reason = edit_denial_reason(FilingStatus.DRAFT, INTERNAL, ActorContext.employee("emp-9"))
        assert reason == TransitionRejection.WRONG_ACTOR

    def test_admin_mode_edits_external_only(self):
        admin = ActorContext.admin("hr-1")
        assert edit_denial_reason(FilingStatus.DRAFT, EXTERNAL, admin) is None
        assert edit_denial_reason(FilingStatus.RETURNED, INTERNAL, admin) == TransitionRejection.WRONG_CATEGORY

    def test_admin_outside_admin_mode_is_ordinary_user(self):
        admin = ActorContext.admin("hr-1", admin_mode=False)
        assert edit_denial_reason(FilingStatus.DRAFT, EXTERNAL, admin) == TransitionRejection.WRONG_ACTOR
        assert can_edit_filing(FilingStatus.DRAFT, EXTERNAL, admin, is_owner=True)


class TestReviewPermissions:
    """Approve, reject and return."""

    @pytest.mark.parametrize("status", [
        FilingStatus.PENDING, FilingStatus.PENDING_RECEIVED, FilingStatus.PENDING_NOT_RECEIVED,
    ])
    def test_admin_reviews_pending(self, status):
        assert can_review_filing(status, ActorContext.admin("hr-1"))

    def test_employee_cannot_review(self):
        assert review_denial_reason(FilingStatus.PENDING, ActorContext.employee("emp-1")) == (
            TransitionRejection.WRONG_ACTOR
        )

    def test_not_pending(self):
        assert review_denial_reason(FilingStatus.DRAFT, ActorContext.admin("hr-1")) == (
            TransitionRejection.WRONG_STATE
        )


class TestWithdrawPermissions:
    """Withdrawal from any non-terminal state."""

    def test_owner_withdraws_pending(self):
        assert can_withdraw_filing(FilingStatus.PENDING, INTERNAL, ActorContext.employee("emp-1"), is_owner=True)

    def test_terminal_cannot_withdraw(self):
        reason = withdraw_denial_reason(
            FilingStatus.APPROVED, EXTERNAL, ActorContext.employee("emp-1"), is_owner=True,
        )
        assert reason == TransitionRejection.WRONG_STATE

    def test_admin_mode_cannot_withdraw_internal(self):
        reason = withdraw_denial_reason(FilingStatus.PENDING, INTERNAL, ActorContext.admin("hr-1"))
        assert reason == TransitionRejection.WRONG_CATEGORY


class TestAdminModeVisibility:
    """Internal drafts stay private to their owner."""

    @pytest.mark.parametrize("status,visible", [
        (FilingStatus.DRAFT, False),
        (FilingStatus.CREATED, False),
        (FilingStatus.PENDING, True),
        (FilingStatus.RETURNED, True),
        (FilingStatus.APPROVED, True),
    ])
    def test_internal(self, status, visible):
        assert visible_in_admin_mode(status, INTERNAL) is visible

    def test_external_always_visible(self):
        assert all(visible_in_admin_mode(status, EXTERNAL) for status in FilingStatus)
