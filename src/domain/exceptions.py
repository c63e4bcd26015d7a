"""
Domain Errors for the Social Insurance Filing Core.

Every error raised by the core derives from FilingError so the calling layer
can translate it into a user-facing message with a single handler. None of
these abort the process; derived computations (reward totals, required-field
sets) never raise and degrade to None instead.
"""

from enum import Enum
from typing import Any, List, Optional


class FilingError(Exception):
    """Base class for all filing core errors."""


class InvalidDate(FilingError):
    """Raised when an era-tagged tuple does not denote a real calendar date."""

    def __init__(
        self,
        era: Any,
        year: int,
        month: int,
        day: Optional[int] = None,
        reason: str = "not a real calendar date",
    ):
        self.era = era
        self.year = year
        self.month = month
        self.day = day
        self.reason = reason
        era_value = getattr(era, "value", era)
        super().__init__(
            f"Invalid era date {era_value} {year}/{month}"
            + (f"/{day}" if day is not None else "")
            + f": {reason}"
        )


class ValidationFailed(FilingError):
    """
    Raised when a payload has missing or malformed required fields at submit time.

    Carries the individual ValidationResult entries so callers can highlight
    each offending field path.
    """

    def __init__(self, errors: List[Any], message: Optional[str] = None):
        self.errors = list(errors)
        if message is None:
            message = f"{len(self.errors)} field(s) failed validation"
            if self.fields:
                message += f": {', '.join(self.fields[:5])}"
        super().__init__(message)

    @property
    def fields(self) -> List[str]:
        """Field paths of the failing entries, in report order."""
        return [e.field for e in self.errors if getattr(e, "field", None)]


class TransitionRejection(str, Enum):
    """Why a lifecycle transition was refused."""
    WRONG_ACTOR = "wrong_actor"        # Actor is neither owner nor permitted admin
    WRONG_CATEGORY = "wrong_category"  # Admin mode touching an internal filing
    WRONG_STATE = "wrong_state"        # Transition not allowed from current status


class IllegalTransition(FilingError):
    """Raised when a lifecycle guard is violated."""

    def __init__(
        self,
        message: str,
        reason: TransitionRejection,
        current_status: str,
        target_status: Optional[str] = None,
    ):
        self.reason = reason
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(message)


class NotFound(FilingError):
    """Raised when a referenced filing, organization or person is absent."""

    def __init__(self, kind: str, identifier: Any):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")
