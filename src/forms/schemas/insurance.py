"""Schemas of the qualification acquisition and loss forms."""

from datetime import date, timedelta
from typing import List

from domain.era_date import from_gregorian
from domain.value_objects import EmployeeRecord, IdentificationType
from calculator.reward_calculator import salary_month_total
from validation.field_rules import ValidationResult, check_required
from ..base_schema import BaseFilingSchema, check_address, check_era_dates, check_identification
from ..filing_types import FilingType
from ..payloads.insurance import (
    AcquisitionPerson,
    InsuranceAcquisitionPayload,
    InsuranceLossPayload,
    LossPerson,
    LossReason,
)
from ..prefill import address_from_employee, identity_from_employee
from ..registry import register_schema

_NAME_FIELDS = {"last_name", "first_name", "last_name_kana", "first_name_kana"}


def _require_persons(persons: list) -> List[ValidationResult]:
    if persons:
        return []
    return [ValidationResult(valid=False, message="At least one person is required", field="persons")]


@register_schema(FilingType.INSURANCE_ACQUISITION)
class InsuranceAcquisitionSchema(BaseFilingSchema):
    """Qualification acquisition: people joining health and pension insurance."""

    payload_model = InsuranceAcquisitionPayload
    office_fields = frozenset({"office_symbol", "office_number", "office_address", "office_name"})

    PERSON_FIELDS = _NAME_FIELDS | {"birth_date", "gender", "acquisition_date"}

    def prefill(self, payload: InsuranceAcquisitionPayload, employee: EmployeeRecord, today: date) -> None:
        person = AcquisitionPerson(
            **identity_from_employee(employee),
            insurance_number=employee.insurance_number,
            acquisition_date=from_gregorian(employee.join_date) if employee.join_date else None,
        )
        if person.identification_type == IdentificationType.BASIC_PENSION_NUMBER:
            person.address = address_from_employee(employee)
        payload.persons.append(person)

    def recalculate(self, payload: InsuranceAcquisitionPayload) -> None:
        for person in payload.persons:
            remuneration = person.remuneration
            remuneration.total = salary_month_total(remuneration.currency, remuneration.in_kind)

    def validate_body(self, payload: InsuranceAcquisitionPayload) -> List[ValidationResult]:
        errors = _require_persons(payload.persons)
        for index, person in enumerate(payload.persons):
            prefix = f"persons[{index}]"
            errors.extend(check_required(person, self.PERSON_FIELDS, prefix))
            errors.extend(check_identification(person, prefix, required=True))
            errors.extend(check_era_dates(person, ["birth_date", "acquisition_date"], prefix))
            # Address is printed only for people identified by basic pension number
            needs_address = person.identification_type == IdentificationType.BASIC_PENSION_NUMBER
            errors.extend(check_address(person.address, f"{prefix}.address", required=needs_address))
        return errors


@register_schema(FilingType.INSURANCE_LOSS)
class InsuranceLossSchema(BaseFilingSchema):
    """Qualification loss: people leaving health and pension insurance."""

    payload_model = InsuranceLossPayload
    office_fields = frozenset({"office_number", "office_address", "office_name"})

    PERSON_FIELDS = _NAME_FIELDS | {"birth_date", "loss_date", "loss_reason"}

    def prefill(self, payload: InsuranceLossPayload, employee: EmployeeRecord, today: date) -> None:
        person = LossPerson(**identity_from_employee(employee), insurance_number=employee.insurance_number)
        if employee.retirement_date is not None:
            # Insured status ends the day after retirement
            person.loss_reason = LossReason.RETIREMENT
            person.retirement_date = from_gregorian(employee.retirement_date)
            person.loss_date = from_gregorian(employee.retirement_date + timedelta(days=1))
        payload.persons.append(person)

    def validate_body(self, payload: InsuranceLossPayload) -> List[ValidationResult]:
        errors = _require_persons(payload.persons)
        for index, person in enumerate(payload.persons):
            prefix = f"persons[{index}]"
            required = set(self.PERSON_FIELDS)
            if person.loss_reason == LossReason.RETIREMENT:
                required.add("retirement_date")
            elif person.loss_reason == LossReason.DEATH:
                required.add("death_date")
            if person.over70_not_applicable:
                required.add("over70_not_applicable_date")
            errors.extend(check_required(person, required, prefix))
            errors.extend(check_identification(person, prefix))
            errors.extend(check_era_dates(
                person,
                ["birth_date", "loss_date", "retirement_date", "death_date", "over70_not_applicable_date"],
                prefix,
            ))
        return errors
