"""
Domain layer for the Social Insurance Filing Core.

This module contains the era-date value type, value objects, the Filing
aggregate, the error taxonomy and the collaborator interfaces.
"""

from .era_date import (
    Era,
    EraDate,
    EraYearMonth,
    era_for_year,
    format_era_code,
    from_gregorian,
    to_gregorian,
)
from .exceptions import (
    FilingError,
    IllegalTransition,
    InvalidDate,
    NotFound,
    TransitionRejection,
    ValidationFailed,
)
from .value_objects import (
    Address,
    Attachment,
    AttachmentSetting,
    DocumentSettings,
    EmployeeRecord,
    Gender,
    IdentificationType,
    OrganizationProfile,
)
from .aggregates import (
    ExternalFilingStatus,
    Filing,
    FilingCategory,
    FilingComment,
    FilingHistoryEntry,
    FilingStatus,
    HistoryAction,
    ReturnSnapshot,
)
from .repositories import (
    IAttachmentStore,
    IEmployeeDirectory,
    IFilingRepository,
    IOrganizationProvider,
)

__all__ = [
    # Era dates
    "Era",
    "EraDate",
    "EraYearMonth",
    "era_for_year",
    "format_era_code",
    "from_gregorian",
    "to_gregorian",
    # Errors
    "FilingError",
    "IllegalTransition",
    "InvalidDate",
    "NotFound",
    "TransitionRejection",
    "ValidationFailed",
    # Value objects
    "Address",
    "Attachment",
    "AttachmentSetting",
    "DocumentSettings",
    "EmployeeRecord",
    "Gender",
    "IdentificationType",
    "OrganizationProfile",
    # Aggregates
    "ExternalFilingStatus",
    "Filing",
    "FilingCategory",
    "FilingComment",
    "FilingHistoryEntry",
    "FilingStatus",
    "HistoryAction",
    "ReturnSnapshot",
    # Repositories
    "IAttachmentStore",
    "IEmployeeDirectory",
    "IFilingRepository",
    "IOrganizationProvider",
]
