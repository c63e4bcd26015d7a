"""
Base class for filing schemas.

A schema knows, for one filing type, which payload model it uses, how to
seed a fresh payload from the organization snapshot (and optionally an
employee), how to recompute derived figures and how to validate the payload
before submission.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Type

from domain.era_date import EraDate
from domain.value_objects import EmployeeRecord, IdentificationType, OrganizationProfile
from validation.field_rules import (
    ValidationResult,
    check_required,
    failures,
    join_path,
    validate_basic_pension_number,
    validate_era_date,
    validate_personal_number,
    validate_postal_code,
)
from .filing_types import FilingType
from .payloads.common import PayloadModel, PersonAddress, SubmitterInfo, dump_payload, load_payload

# Office fields most forms require
DEFAULT_OFFICE_FIELDS: FrozenSet[str] = frozenset({"office_address", "office_name"})


class BaseFilingSchema(ABC):
    """
    Abstract base for per-type filing schemas.

    Subclasses set the class attributes and implement `validate_body()`;
    `prefill()` and `recalculate()` are optional hooks.
    """

    filing_type: ClassVar[FilingType]
    payload_model: ClassVar[Type[PayloadModel]]

    # Submitter block
    has_submitter: ClassVar[bool] = True
    office_fields: ClassVar[FrozenSet[str]] = DEFAULT_OFFICE_FIELDS
    include_office_number: ClassVar[bool] = True
    address_with_postal_code: ClassVar[bool] = True
    include_owner_name: ClassVar[bool] = True

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def build_payload(
        self,
        organization: Optional[OrganizationProfile] = None,
        employee: Optional[EmployeeRecord] = None,
        today: Optional[date] = None,
    ) -> PayloadModel:
        """
        Instantiate a fresh payload seeded with defaults.

        Args:
            organization: Organization snapshot (source of the office block)
            employee: Optional employee to pre-fill a person entry from
            today: Reference date for date defaults (defaults to today)

        Returns:
            New payload instance of `payload_model`
        """
        payload = self.payload_model()
        if self.has_submitter and organization is not None:
            payload.submitter = self.submitter_defaults(organization)
        if employee is not None:
            self.prefill(payload, employee, today or date.today())
        self.recalculate(payload)
        return payload

    def submitter_defaults(self, organization: OrganizationProfile) -> SubmitterInfo:
        """Office block seeded from the organization profile."""
        settings = organization.insurance_settings
        return SubmitterInfo(
            office_symbol=settings.health_insurance.office_symbol or None,
            office_number=(settings.pension_insurance.office_number or None)
            if self.include_office_number else None,
            office_address=organization.address.one_line(self.address_with_postal_code) or None,
            office_name=organization.name or None,
            owner_name=(organization.owner_name or None) if self.include_owner_name else None,
            phone_number=organization.phone_number or None,
        )

    def prefill(self, payload: Any, employee: EmployeeRecord, today: date) -> None:
        """Add or fill person data from a directory employee (no-op by default)."""

    def recalculate(self, payload: Any) -> None:
        """Recompute derived figures in place (no-op by default)."""

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, payload: Any) -> List[ValidationResult]:
        """Return every blocking problem of the payload (empty when valid)."""
        errors: List[ValidationResult] = []
        if self.has_submitter:
            errors.extend(check_required(
                payload.submitter or SubmitterInfo(), self.office_fields, prefix="submitter",
            ))
        errors.extend(self.validate_body(payload))
        return errors

    def is_valid(self, payload: Any) -> bool:
        return not self.validate(payload)

    @abstractmethod
    def validate_body(self, payload: Any) -> List[ValidationResult]:
        """Validate everything except the submitter block."""

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def parse(self, data: Optional[Dict[str, Any]]) -> PayloadModel:
        """Parse stored `Filing.data` into the payload model."""
        return load_payload(self.payload_model, data or {})

    def dump(self, payload: PayloadModel) -> Dict[str, Any]:
        """Serialize a payload for storage, omitting absent fields."""
        return dump_payload(payload)


# ----------------------------------------------------------------------
# Shared person checks
# ----------------------------------------------------------------------

def check_identification(person: Any, prefix: str, required: bool = False) -> List[ValidationResult]:
    """
    Check the identification selection of a person entry.

    The selected identifier must be present (when `required`) and well formed.
    """
    results: List[ValidationResult] = []
    selection = getattr(person, "identification_type", None)
    if selection is None:
        if required:
            results.extend(check_required(person, {"identification_type"}, prefix))
        return results

    if selection == IdentificationType.PERSONAL_NUMBER:
        if required:
            results.extend(check_required(person, {"personal_number"}, prefix))
        results.append(validate_personal_number(
            person.personal_number, join_path(prefix, "personal_number"),
        ))
    elif selection == IdentificationType.BASIC_PENSION_NUMBER:
        if required:
            results.extend(check_required(person, {"basic_pension_number"}, prefix))
        results.append(validate_basic_pension_number(
            person.basic_pension_number, join_path(prefix, "basic_pension_number"),
        ))
    return failures(results)


def check_era_dates(obj: Any, names: List[str], prefix: str) -> List[ValidationResult]:
    """Format-check the named EraDate attributes of `obj`."""
    results = []
    for name in names:
        value = getattr(obj, name, None)
        if isinstance(value, EraDate):
            results.append(validate_era_date(value, join_path(prefix, name)))
    return failures(results)


def check_address(address: Optional[PersonAddress], prefix: str, required: bool = False) -> List[ValidationResult]:
    """Check a person address: required parts when `required`, postal code format always."""
    if address is None:
        if required:
            return check_required({}, {"postal_code", "prefecture", "city"}, prefix)
        return []
    results = []
    if required:
        results.extend(check_required(address, {"postal_code", "prefecture", "city"}, prefix))
    results.append(validate_postal_code(address.postal_code, join_path(prefix, "postal_code")))
    return failures(results)

