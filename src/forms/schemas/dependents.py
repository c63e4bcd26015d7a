"""
Schemas of the dependent change forms.

The internal request and the external filing share one payload model and
one validator; they differ only in the submitter block. Each dependent
sub-record gets its own state machine instance.
"""

from datetime import date
from typing import Any, Dict, FrozenSet, List, Tuple

from domain.value_objects import EmployeeRecord
from domain.exceptions import NotFound
from validation.dependent_rules import ChangeType, DependentValidationStateMachine, RecordKind
from validation.field_rules import ValidationResult, check_required, get_path
from ..base_schema import BaseFilingSchema, check_address, check_era_dates, check_identification
from ..filing_types import FilingType
from ..payloads.dependents import DependentChangePayload, DependentRecord, InsuredPerson
from ..prefill import address_from_employee, identity_from_employee
from ..registry import register_schema

SPOUSE_PATH = "spouse_dependent"

_RECORD_DATES = ["birth_date"]
_GROUP_DATES = {
    "dependent_start": ["date"],
    "dependent_end": ["date", "death_date"],
    "change_after": ["birth_date"],
    "overseas_exception": ["start_date", "end_date", "domestic_transfer_date"],
}


def dependent_records(payload: DependentChangePayload) -> List[Tuple[str, DependentRecord, RecordKind]]:
    """(path, record, kind) for the spouse and every other dependent."""
    records: List[Tuple[str, DependentRecord, RecordKind]] = []
    if payload.spouse_dependent is not None:
        records.append((SPOUSE_PATH, payload.spouse_dependent, RecordKind.SPOUSE))
    for index, record in enumerate(payload.other_dependents):
        records.append((f"other_dependents[{index}]", record, RecordKind.OTHER_DEPENDENT))
    return records


def _check_record_formats(
    record: DependentRecord,
    prefix: str,
    machine: DependentValidationStateMachine,
) -> List[ValidationResult]:
    """
    Format checks for the parts of a record its state machine keeps active.

    No change and an exempt spouse leave nothing to check; `change` checks
    only the corrected details.
    """
    if machine.is_informational:
        return []
    if machine.change_type == ChangeType.CHANGE:
        after = record.change_after
        errors = check_era_dates(after, _GROUP_DATES["change_after"], f"{prefix}.change_after")
        errors.extend(check_address(after.address, f"{prefix}.change_after.address"))
        return errors

    errors = check_identification(record, prefix)
    errors.extend(check_era_dates(record, _RECORD_DATES, prefix))
    for group, names in _GROUP_DATES.items():
        if group == "change_after":
            continue
        errors.extend(check_era_dates(getattr(record, group), names, f"{prefix}.{group}"))
    errors.extend(check_address(record.address, f"{prefix}.address"))
    return errors


class _DependentChangeSchemaBase(BaseFilingSchema):
    payload_model = DependentChangePayload

    INSURED_FIELDS: FrozenSet[str] = frozenset({"last_name", "first_name", "birth_date"})

    def prefill(self, payload: DependentChangePayload, employee: EmployeeRecord, today: date) -> None:
        payload.insured_person = InsuredPerson(
            **identity_from_employee(employee),
            insurance_number=employee.insurance_number,
            address=address_from_employee(employee),
        )

    def state_machines(self, payload: DependentChangePayload) -> Dict[str, DependentValidationStateMachine]:
        """One independent state machine per dependent sub-record, keyed by path."""
        return {
            path: DependentValidationStateMachine.for_record(record, kind)
            for path, record, kind in dependent_records(payload)
        }

    def set_change_type(self, payload: DependentChangePayload, record_path: str, value: Any) -> FrozenSet[str]:
        """
        Write a record's change type and return its recomputed required fields.

        Other fields of the record keep their values.

        Raises:
            NotFound: If no dependent record exists at `record_path`
        """
        record = get_path(payload, record_path)
        if not isinstance(record, DependentRecord):
            raise NotFound("dependent record", record_path)
        kind = RecordKind.SPOUSE if record_path == SPOUSE_PATH else RecordKind.OTHER_DEPENDENT
        machine = DependentValidationStateMachine.for_record(record, kind)
        required = machine.set_change_type(value)
        record.change_type = machine.change_type
        return required

    def validate_body(self, payload: DependentChangePayload) -> List[ValidationResult]:
        errors = check_required(payload.insured_person, self.INSURED_FIELDS, "insured_person")
        errors.extend(check_identification(payload.insured_person, "insured_person"))
        errors.extend(check_era_dates(payload.insured_person, ["birth_date", "acquisition_date"], "insured_person"))

        machines = self.state_machines(payload)
        for path, record, _kind in dependent_records(payload):
            errors.extend(machines[path].validate(record, prefix=path))
            errors.extend(_check_record_formats(record, path, machines[path]))
        return errors


@register_schema(FilingType.DEPENDENT_CHANGE)
class DependentChangeSchema(_DependentChangeSchemaBase):
    """Employee request to HR to change dependents."""

    has_submitter = False


@register_schema(FilingType.DEPENDENT_CHANGE_EXTERNAL)
class DependentChangeExternalSchema(_DependentChangeSchemaBase):
    """Statutory dependent (change) notification."""

    INSURED_FIELDS = frozenset({"last_name", "first_name", "birth_date", "insurance_number"})
