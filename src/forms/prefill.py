"""
Pre-fill and reverse lookup against the employee directory.

Person entries are seeded from directory employees while a form is edited.
The `employee_id` link is not persisted, so after a filing is reloaded each
entry is matched back to its directory employee by insurance number, or by
(last name, first name, birth date) when the insurance number is missing or
unknown.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence

import logging

from domain.era_date import EraDate, from_gregorian, try_to_gregorian
from domain.value_objects import EmployeeRecord, IdentificationType
from .payloads.common import PersonAddress

logger = logging.getLogger(__name__)


def era_birth_date(employee: EmployeeRecord) -> Optional[EraDate]:
    """Employee birth date as an era date."""
    if employee.birth_date is None:
        return None
    return from_gregorian(employee.birth_date)


def address_from_employee(employee: EmployeeRecord) -> Optional[PersonAddress]:
    """Convert a directory address to a form address."""
    if employee.address is None:
        return None
    source = employee.address
    return PersonAddress(
        postal_code=source.postal_code or None,
        prefecture=source.prefecture or None,
        city=source.city or None,
        street=source.street or None,
        building=source.building or None,
        address_kana=source.kana or None,
    )


def identity_from_employee(employee: EmployeeRecord) -> Dict[str, Any]:
    """
    Identity fields of a person entry seeded from an employee.

    The personal number is preferred; the basic pension number is used only
    when no personal number is on file.
    """
    identity: Dict[str, Any] = {
        "employee_id": employee.id,
        "last_name": employee.last_name or None,
        "first_name": employee.first_name or None,
        "last_name_kana": employee.last_name_kana or None,
        "first_name_kana": employee.first_name_kana or None,
        "birth_date": era_birth_date(employee),
        "gender": employee.gender,
    }
    if employee.personal_number:
        identity["identification_type"] = IdentificationType.PERSONAL_NUMBER
        identity["personal_number"] = employee.personal_number
    elif employee.basic_pension_number:
        identity["identification_type"] = IdentificationType.BASIC_PENSION_NUMBER
        identity["basic_pension_number"] = employee.basic_pension_number
    return identity


def _normalise(value: Optional[str]) -> str:
    return (value or "").replace(" ", "").replace("　", "").strip()


def _person_names(person: Any) -> tuple:
    """(last, first) of a person entry; single `name` fields are split on whitespace."""
    last = getattr(person, "last_name", None)
    first = getattr(person, "first_name", None)
    if last is None and first is None:
        last = getattr(person, "new_last_name", None) or getattr(person, "old_last_name", None)
        first = getattr(person, "new_first_name", None) or getattr(person, "old_first_name", None)
    if last is None and first is None:
        full = (getattr(person, "name", None) or "").replace("　", " ").split()
        if len(full) >= 2:
            last, first = full[0], " ".join(full[1:])
        elif full:
            last = full[0]
    return _normalise(last), _normalise(first)


def find_employee(person: Any, employees: Sequence[EmployeeRecord]) -> Optional[EmployeeRecord]:
    """
    Reverse-lookup a person entry in the directory.

    Args:
        person: Person entry (any payload person model)
        employees: Directory employees of the organization

    Returns:
        The matching employee, or None
    """
    linked = getattr(person, "employee_id", None)
    if linked:
        for employee in employees:
            if employee.id == linked:
                return employee

    insurance_number = _normalise(getattr(person, "insurance_number", None))
    if insurance_number:
        for employee in employees:
            if _normalise(employee.insurance_number) == insurance_number:
                return employee

    birth_date = try_to_gregorian(getattr(person, "birth_date", None))
    last, first = _person_names(person)
    if birth_date is None or not (last or first):
        return None
    for employee in employees:
        if (
            employee.birth_date == birth_date
            and _normalise(employee.last_name) == last
            and _normalise(employee.first_name) == first
        ):
            return employee
    return None


def link_persons(persons: Iterable[Any], employees: Sequence[EmployeeRecord]) -> List[Optional[EmployeeRecord]]:
    """
    Restore the `employee_id` link on each person entry.

    Returns the matched employee per entry (None where no match).
    """
    matches = []
    for person in persons:
        employee = find_employee(person, employees)
        if employee is not None and hasattr(person, "employee_id"):
            person.employee_id = employee.id
        elif employee is None:
            logger.debug("No directory match for person entry")
        matches.append(employee)
    return matches
