"""
Filing Type Catalog.

Eleven filing types: eight statutory forms sent to the pension and
insurance office (external) and three employee-to-HR requests (internal).
Each internal request has an external counterpart that HR files once the
request is approved.
"""

from enum import Enum
from typing import Dict, Optional

from domain.aggregates import FilingCategory


class FilingType(str, Enum):
    """Filing type codes."""
    # External (statutory forms)
    INSURANCE_ACQUISITION = "INSURANCE_ACQUISITION"          # Qualification acquisition
    INSURANCE_LOSS = "INSURANCE_LOSS"                        # Qualification loss
    DEPENDENT_CHANGE_EXTERNAL = "DEPENDENT_CHANGE_EXTERNAL"  # Dependent (change) notification
    ADDRESS_CHANGE_EXTERNAL = "ADDRESS_CHANGE_EXTERNAL"      # Address change notification
    NAME_CHANGE_EXTERNAL = "NAME_CHANGE_EXTERNAL"            # Name change notification
    REWARD_BASE = "REWARD_BASE"                              # Standard reward assessment
    REWARD_CHANGE = "REWARD_CHANGE"                          # Monthly reward revision
    BONUS_PAYMENT = "BONUS_PAYMENT"                          # Bonus payment report

    # Internal (employee requests)
    DEPENDENT_CHANGE = "DEPENDENT_CHANGE"
    ADDRESS_CHANGE = "ADDRESS_CHANGE"
    NAME_CHANGE = "NAME_CHANGE"

    @property
    def category(self) -> FilingCategory:
        if self in INTERNAL_TO_EXTERNAL:
            return FilingCategory.INTERNAL
        return FilingCategory.EXTERNAL

    @property
    def is_internal(self) -> bool:
        return self.category == FilingCategory.INTERNAL

    @property
    def external_counterpart(self) -> Optional["FilingType"]:
        """The statutory form filed for an internal request (None for external types)."""
        return INTERNAL_TO_EXTERNAL.get(self)

    @property
    def internal_counterpart(self) -> Optional["FilingType"]:
        """The internal request that feeds an external form, if any."""
        return EXTERNAL_TO_INTERNAL.get(self)

    @classmethod
    def from_code(cls, code: str) -> "FilingType":
        """Parse a type code, case-insensitively."""
        return cls(code.strip().upper())


INTERNAL_TO_EXTERNAL: Dict[FilingType, FilingType] = {
    FilingType.DEPENDENT_CHANGE: FilingType.DEPENDENT_CHANGE_EXTERNAL,
    FilingType.ADDRESS_CHANGE: FilingType.ADDRESS_CHANGE_EXTERNAL,
    FilingType.NAME_CHANGE: FilingType.NAME_CHANGE_EXTERNAL,
}

EXTERNAL_TO_INTERNAL: Dict[FilingType, FilingType] = {
    external: internal for internal, external in INTERNAL_TO_EXTERNAL.items()
}

# Forms that list several insured persons; deadlines are computed per person
MULTI_PERSON_TYPES = frozenset({
    FilingType.INSURANCE_ACQUISITION,
    FilingType.INSURANCE_LOSS,
    FilingType.REWARD_BASE,
    FilingType.REWARD_CHANGE,
    FilingType.BONUS_PAYMENT,
})
