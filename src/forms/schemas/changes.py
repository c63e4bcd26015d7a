"""Schemas of the address change and name change forms (internal and external)."""

from datetime import date
from typing import List

from domain.era_date import from_gregorian
from domain.value_objects import EmployeeRecord
from validation.field_rules import ValidationResult, check_required
from ..base_schema import BaseFilingSchema, check_address, check_era_dates, check_identification
from ..filing_types import FilingType
from ..payloads.changes import AddressChangePayload, AddressChangePerson, NameChangePayload, NameChangePerson
from ..prefill import address_from_employee, identity_from_employee
from ..registry import register_schema


class _AddressChangeSchemaBase(BaseFilingSchema):
    payload_model = AddressChangePayload

    PERSON_FIELDS = frozenset({"last_name", "first_name", "birth_date"})
    SPOUSE_FIELDS = frozenset({"last_name", "first_name", "birth_date"})

    def prefill(self, payload: AddressChangePayload, employee: EmployeeRecord, today: date) -> None:
        payload.insured_person = AddressChangePerson(
            **identity_from_employee(employee),
            insurance_number=employee.insurance_number,
        )
        payload.old_address = address_from_employee(employee)

    def validate_body(self, payload: AddressChangePayload) -> List[ValidationResult]:
        person = payload.insured_person
        errors = check_required(person, self.PERSON_FIELDS, "insured_person")
        errors.extend(check_identification(person, "insured_person"))
        errors.extend(check_era_dates(person, ["birth_date"], "insured_person"))
        errors.extend(check_required(payload, {"change_date"}))
        errors.extend(check_era_dates(payload, ["change_date"], ""))
        errors.extend(check_address(payload.new_address, "new_address", required=True))
        errors.extend(check_address(payload.old_address, "old_address"))

        if payload.living_with_spouse and payload.spouse is not None:
            spouse = payload.spouse
            errors.extend(check_required(spouse, self.SPOUSE_FIELDS, "spouse"))
            errors.extend(check_identification(spouse, "spouse"))
            errors.extend(check_era_dates(spouse, ["birth_date", "change_date"], "spouse"))
            errors.extend(check_address(spouse.address, "spouse.address"))
        return errors


@register_schema(FilingType.ADDRESS_CHANGE)
class AddressChangeSchema(_AddressChangeSchemaBase):
    """Employee request to HR to record a new address."""

    has_submitter = False


@register_schema(FilingType.ADDRESS_CHANGE_EXTERNAL)
class AddressChangeExternalSchema(_AddressChangeSchemaBase):
    """Statutory address change notification."""

    office_fields = frozenset({"office_symbol", "office_address", "office_name"})


class _NameChangeSchemaBase(BaseFilingSchema):
    payload_model = NameChangePayload

    PERSON_FIELDS = frozenset({
        "birth_date",
        "new_last_name",
        "new_first_name",
        "new_last_name_kana",
        "new_first_name_kana",
        "old_last_name",
        "old_first_name",
    })

    def prefill(self, payload: NameChangePayload, employee: EmployeeRecord, today: date) -> None:
        identity = identity_from_employee(employee)
        payload.insured_person = NameChangePerson(
            employee_id=employee.id,
            insurance_number=employee.insurance_number,
            identification_type=identity.get("identification_type"),
            personal_number=identity.get("personal_number"),
            basic_pension_number=identity.get("basic_pension_number"),
            birth_date=from_gregorian(employee.birth_date) if employee.birth_date else None,
            old_last_name=employee.last_name or None,
            old_first_name=employee.first_name or None,
        )

    def validate_body(self, payload: NameChangePayload) -> List[ValidationResult]:
        person = payload.insured_person
        errors = check_required(person, self.PERSON_FIELDS, "insured_person")
        errors.extend(check_identification(person, "insured_person"))
        errors.extend(check_era_dates(person, ["birth_date"], "insured_person"))
        return errors


@register_schema(FilingType.NAME_CHANGE)
class NameChangeSchema(_NameChangeSchemaBase):
    """Employee request to HR to record a new name."""

    has_submitter = False


@register_schema(FilingType.NAME_CHANGE_EXTERNAL)
class NameChangeExternalSchema(_NameChangeSchemaBase):
    """Statutory name change notification."""
