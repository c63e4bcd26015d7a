"""
Domain Aggregates for the Social Insurance Filing Core.

The Filing is the aggregate root: one statutory submission record with its
type-specific payload, attachments, comments, audit history and return
snapshots. Lifecycle changes go through workflow.status_manager, which
returns a new Filing rather than mutating the one it was given.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from .value_objects import Attachment


class FilingCategory(str, Enum):
    """Whether a filing stays inside the company or goes to the authorities."""
    INTERNAL = "internal"  # Employee to HR request
    EXTERNAL = "external"  # Statutory filing to the pension/insurance office


class FilingStatus(str, Enum):
    """Lifecycle states of a filing."""
    DRAFT = "draft"
    CREATED = "created"
    PENDING = "pending"
    PENDING_RECEIVED = "pending_received"          # Internal: HR acknowledged
    PENDING_NOT_RECEIVED = "pending_not_received"  # Internal: not yet acknowledged
    APPROVED = "approved"
    REJECTED = "rejected"
    RETURNED = "returned"
    WITHDRAWN = "withdrawn"

    @property
    def is_pending(self) -> bool:
        return self in PENDING_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


PENDING_STATUSES = frozenset({
    FilingStatus.PENDING,
    FilingStatus.PENDING_RECEIVED,
    FilingStatus.PENDING_NOT_RECEIVED,
})

TERMINAL_STATUSES = frozenset({
    FilingStatus.APPROVED,
    FilingStatus.REJECTED,
    FilingStatus.WITHDRAWN,
})


class ExternalFilingStatus(str, Enum):
    """Transmission state of an external filing."""
    SENT = "sent"
    RECEIVED = "received"
    ERROR = "error"


class HistoryAction(str, Enum):
    """Actions recorded in a filing's audit history."""
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    RETURN = "return"
    WITHDRAW = "withdraw"
    STATUS_CHANGE = "status_change"


class CommentType(str, Enum):
    COMMENT = "comment"
    REJECTION_REASON = "rejection_reason"


class FilingComment(BaseModel):
    """Comment or rejection reason left on a filing."""
    user_id: str
    comment: str
    type: CommentType = Field(default=CommentType.COMMENT)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class FilingHistoryEntry(BaseModel):
    """One audit-trail entry."""
    user_id: str
    action: HistoryAction
    comment: Optional[str] = None
    from_status: Optional[FilingStatus] = None
    to_status: Optional[FilingStatus] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ReturnSnapshot(BaseModel):
    """
    State of a filing captured at the moment it was returned.

    The attachments snapshot becomes the editing baseline when the owner
    reopens the returned filing.
    """
    returned_at: datetime = Field(default_factory=datetime.utcnow)
    returned_by: str
    reason: Optional[str] = None
    data_snapshot: Dict[str, Any] = Field(default_factory=dict)
    attachments_snapshot: Optional[List[Attachment]] = None
    submission_date: Optional[date] = None


class Filing(BaseModel):
    """
    Filing Aggregate Root.

    Invariants:
    - `data` is the serialized payload of the schema registered for `type`
    - `category` matches the category of `type`
    - Absent payload fields are omitted from `data`, never stored as null
    """

    # Identity
    id: str = Field(default_factory=lambda: str(uuid4()))
    type: str = Field(description="Filing type code, e.g. INSURANCE_ACQUISITION")
    category: FilingCategory = Field(description="internal or external")
    status: FilingStatus = Field(default=FilingStatus.DRAFT)

    # Ownership
    employee_id: Optional[str] = Field(default=None, description="Owning employee (applicant)")
    organization_id: str = Field(description="Employer organization")

    # Content
    data: Dict[str, Any] = Field(default_factory=dict, description="Type-specific payload")
    attachments: List[Attachment] = Field(default_factory=list)
    comments: List[FilingComment] = Field(default_factory=list)

    # Audit
    history: List[FilingHistoryEntry] = Field(default_factory=list)
    return_history: List[ReturnSnapshot] = Field(default_factory=list)

    # External tracking
    external_status: Optional[ExternalFilingStatus] = Field(default=None)
    related_internal_ids: List[str] = Field(default_factory=list)
    related_external_ids: List[str] = Field(default_factory=list)

    # Dates
    deadline: Optional[date] = Field(default=None)
    submission_date: Optional[date] = Field(default=None)
    withdrawn_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_internal(self) -> bool:
        return self.category == FilingCategory.INTERNAL

    @property
    def is_external(self) -> bool:
        return self.category == FilingCategory.EXTERNAL

    @property
    def last_return(self) -> Optional[ReturnSnapshot]:
        return self.return_history[-1] if self.return_history else None

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        return user_id is not None and self.employee_id == user_id

    def add_comment(self, user_id: str, comment: str, type: CommentType = CommentType.COMMENT) -> None:
        self.comments.append(FilingComment(user_id=user_id, comment=comment, type=type))
        self.updated_at = datetime.utcnow()

    def replace_data(self, data: Dict[str, Any]) -> None:
        """Replace the payload (caller has already checked edit permission)."""
        self.data = data
        self.updated_at = datetime.utcnow()
