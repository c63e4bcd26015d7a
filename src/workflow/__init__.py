"""
Filing workflow: lifecycle state machine and statutory deadlines.
"""

from .status_manager import (
    VALID_TRANSITIONS,
    FilingActions,
    FilingLifecycle,
    editing_attachments,
    get_filing_lifecycle,
)
from .deadlines import (
    DeadlinePolicy,
    StatutoryDeadlinePolicy,
    adjust_for_business_day,
    end_of_month_after,
)

__all__ = [
    "VALID_TRANSITIONS",
    "FilingActions",
    "FilingLifecycle",
    "editing_attachments",
    "get_filing_lifecycle",
    "DeadlinePolicy",
    "StatutoryDeadlinePolicy",
    "adjust_for_business_day",
    "end_of_month_after",
]
