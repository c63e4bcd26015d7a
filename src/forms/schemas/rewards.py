"""Schemas of the reward assessment, reward revision and bonus payment forms."""

from datetime import date
from typing import Any, List

from domain.era_date import from_gregorian
from domain.value_objects import EmployeeRecord
from calculator.reward_calculator import default_applicable_date, get_reward_calculator
from validation.field_rules import ValidationResult, check_required, failures, validate_era_year_month
from ..base_schema import BaseFilingSchema, check_era_dates
from ..filing_types import FilingType
from ..payloads.rewards import (
    BonusPaymentPayload,
    BonusPerson,
    RewardBasePayload,
    RewardBasePerson,
    RewardChangePayload,
    RewardChangePerson,
    RewardPerson,
)
from ..registry import register_schema

MAX_BASE_DAYS = 31


def _person_seed(employee: EmployeeRecord) -> dict:
    return {
        "employee_id": employee.id,
        "insurance_number": employee.insurance_number,
        "name": employee.full_name or None,
        "birth_date": from_gregorian(employee.birth_date) if employee.birth_date else None,
        "personal_number": employee.personal_number,
    }


def _require_persons(persons: list) -> List[ValidationResult]:
    if persons:
        return []
    return [ValidationResult(valid=False, message="At least one person is required", field="persons")]


def _check_salary_months(person: RewardPerson, prefix: str) -> List[ValidationResult]:
    results = []
    for index, month in enumerate(person.salary_months):
        if month.base_days is not None and not 0 <= month.base_days <= MAX_BASE_DAYS:
            results.append(ValidationResult(
                valid=False,
                message=f"Base days must be between 0 and {MAX_BASE_DAYS}",
                field=f"{prefix}.salary_months[{index}].base_days",
            ))
    return results


def _check_year_months(person: Any, names: List[str], prefix: str) -> List[ValidationResult]:
    return failures(
        validate_era_year_month(getattr(person, name, None), f"{prefix}.{name}") for name in names
    )


@register_schema(FilingType.REWARD_BASE)
class RewardBaseSchema(BaseFilingSchema):
    """Standard reward assessment (April-June salaries, applies from September)."""

    payload_model = RewardBasePayload

    PERSON_FIELDS = frozenset({"name", "birth_date", "applicable_date"})

    def prefill(self, payload: RewardBasePayload, employee: EmployeeRecord, today: date) -> None:
        applicable = default_applicable_date(today)
        if payload.target_year is None:
            payload.target_year = applicable.to_gregorian_month()[0]
        payload.persons.append(RewardBasePerson(**_person_seed(employee), applicable_date=applicable))

    def recalculate(self, payload: RewardBasePayload) -> None:
        calculator = get_reward_calculator()
        for person in payload.persons:
            calculator.recalculate_person(person)

    def validate_body(self, payload: RewardBasePayload) -> List[ValidationResult]:
        errors = _require_persons(payload.persons)
        for index, person in enumerate(payload.persons):
            prefix = f"persons[{index}]"
            errors.extend(check_required(person, self.PERSON_FIELDS, prefix))
            errors.extend(check_era_dates(person, ["birth_date"], prefix))
            errors.extend(_check_year_months(person, ["applicable_date", "previous_change_date"], prefix))
            errors.extend(_check_salary_months(person, prefix))
        return errors


@register_schema(FilingType.REWARD_CHANGE)
class RewardChangeSchema(BaseFilingSchema):
    """Monthly reward revision after a fixed-wage change."""

    payload_model = RewardChangePayload
    include_office_number = False
    address_with_postal_code = False
    include_owner_name = False

    PERSON_FIELDS = frozenset({"name", "birth_date", "change_date"})

    def prefill(self, payload: RewardChangePayload, employee: EmployeeRecord, today: date) -> None:
        payload.persons.append(RewardChangePerson(**_person_seed(employee)))

    def recalculate(self, payload: RewardChangePayload) -> None:
        calculator = get_reward_calculator()
        for person in payload.persons:
            calculator.recalculate_person(person)

    def set_first_month(self, payload: RewardChangePayload, person_index: int, first_month: Any) -> None:
        """Set a person's first month, relabel the three months and recalculate."""
        person = payload.persons[person_index]
        calculator = get_reward_calculator()
        calculator.set_first_month(person, first_month)
        calculator.recalculate_person(person)

    def validate_body(self, payload: RewardChangePayload) -> List[ValidationResult]:
        errors = _require_persons(payload.persons)
        for index, person in enumerate(payload.persons):
            prefix = f"persons[{index}]"
            errors.extend(check_required(person, self.PERSON_FIELDS, prefix))
            errors.extend(check_era_dates(person, ["birth_date"], prefix))
            errors.extend(_check_year_months(person, ["change_date", "previous_change_date"], prefix))
            errors.extend(_check_salary_months(person, prefix))
            if person.first_month is not None and not 1 <= person.first_month <= 12:
                errors.append(ValidationResult(
                    valid=False,
                    message="First month must be between 1 and 12",
                    field=f"{prefix}.first_month",
                ))
        return errors


@register_schema(FilingType.BONUS_PAYMENT)
class BonusPaymentSchema(BaseFilingSchema):
    """Bonus payment report."""

    payload_model = BonusPaymentPayload

    PERSON_FIELDS = frozenset({"name", "birth_date"})

    def prefill(self, payload: BonusPaymentPayload, employee: EmployeeRecord, today: date) -> None:
        payload.persons.append(BonusPerson(**_person_seed(employee)))

    def recalculate(self, payload: BonusPaymentPayload) -> None:
        calculator = get_reward_calculator()
        for person in payload.persons:
            calculator.recalculate_bonus(person)

    def validate_body(self, payload: BonusPaymentPayload) -> List[ValidationResult]:
        errors = check_required(payload, {"common_bonus_payment_date"})
        errors.extend(check_era_dates(payload, ["common_bonus_payment_date"], ""))
        errors.extend(_require_persons(payload.persons))
        for index, person in enumerate(payload.persons):
            prefix = f"persons[{index}]"
            errors.extend(check_required(person, self.PERSON_FIELDS, prefix))
            errors.extend(check_era_dates(person, ["birth_date", "bonus_payment_date"], prefix))
        return errors
