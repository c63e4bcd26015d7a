"""
Field Rules for Filing Payload Validation.

A single generic validator checks a payload against a set of required field
paths and a handful of format rules (identification numbers, postal codes,
era dates). Which paths are required is decided elsewhere: by the filing
schema for fixed fields and by the dependent state machine for
change-type-driven ones.

Field paths are dotted attribute names with list indices, e.g.
`persons[0].birth_date` or `spouse_dependent.last_name_kana`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional
import re

from domain.era_date import EraDate, EraYearMonth, ERA_OFFSETS, try_to_gregorian


class FieldRequirement(str, Enum):
    """Field requirement levels."""
    MANDATORY = "mandatory"                # Always required
    CONDITIONAL_MANDATORY = "conditional"  # Required based on conditions
    OPTIONAL = "optional"                  # Never required
    HIDDEN = "hidden"                      # Should not be shown


class ValidationSeverity(str, Enum):
    """Validation message severity."""
    ERROR = "error"        # Blocks submission
    WARNING = "warning"    # Allows submission with confirmation
    INFO = "info"          # Informational only


@dataclass
class ValidationResult:
    """Result of a validation check."""
    valid: bool
    message: Optional[str] = None
    severity: ValidationSeverity = ValidationSeverity.ERROR
    field: Optional[str] = None
    suggestion: Optional[str] = None

    @property
    def is_blocking(self) -> bool:
        return not self.valid and self.severity == ValidationSeverity.ERROR


@dataclass
class FieldState:
    """State of a field based on conditions."""
    field_id: str
    requirement: FieldRequirement
    visible: bool = True
    enabled: bool = True
    label: Optional[str] = None
    hint: Optional[str] = None

    @property
    def required(self) -> bool:
        return self.requirement in (
            FieldRequirement.MANDATORY,
            FieldRequirement.CONDITIONAL_MANDATORY,
        )


PERSONAL_NUMBER_PATTERN = re.compile(r"^\d{12}$")
BASIC_PENSION_NUMBER_PATTERN = re.compile(r"^\d{4}-?\d{6}$")
POSTAL_CODE_PATTERN = re.compile(r"^\d{3}-?\d{4}$")

_PATH_TOKEN = re.compile(r"([^.\[\]]+)|\[(\d+)\]")


def is_blank(value: Any) -> bool:
    """
    Whether a field value counts as missing.

    Examples:
        >>> is_blank("  ")
        True
        >>> is_blank(0)
        False
        >>> is_blank([])
        True
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def get_path(obj: Any, path: str) -> Any:
    """
    Resolve a dotted/indexed field path against models, dicts and lists.

    Returns None when any segment is missing.

    Examples:
        >>> get_path({"persons": [{"name": "A"}]}, "persons[0].name")
        'A'
        >>> get_path({"persons": []}, "persons[3].name") is None
        True
    """
    current = obj
    for name, index in _PATH_TOKEN.findall(path):
        if current is None:
            return None
        if name:
            if isinstance(current, dict):
                current = current.get(name)
            else:
                current = getattr(current, name, None)
        else:
            position = int(index)
            if not isinstance(current, (list, tuple)) or position >= len(current):
                return None
            current = current[position]
    return current


def join_path(prefix: str, name: str) -> str:
    """Join a parent path and a child field name."""
    if not prefix:
        return name
    return f"{prefix}.{name}"


def check_required(obj: Any, paths: Iterable[str], prefix: str = "") -> List[ValidationResult]:
    """
    Report every required path that is blank.

    Args:
        obj: Model or mapping the relative paths are resolved against
        paths: Required relative paths
        prefix: Path of `obj` inside the whole payload, for reporting

    Returns:
        Failed results only (empty when everything is present)
    """
    errors = []
    for path in sorted(paths):
        if is_blank(get_path(obj, path)):
            full_path = join_path(prefix, path)
            errors.append(ValidationResult(
                valid=False,
                message=f"{full_path} is required",
                field=full_path,
            ))
    return errors


def validate_personal_number(value: Optional[str], field: str) -> ValidationResult:
    """Personal number: exactly 12 digits."""
    if is_blank(value):
        return ValidationResult(valid=True, field=field)
    if not PERSONAL_NUMBER_PATTERN.match(str(value).strip()):
        return ValidationResult(
            valid=False,
            message="Personal number must be 12 digits",
            field=field,
            suggestion="Enter the 12-digit individual number without spaces",
        )
    return ValidationResult(valid=True, field=field)


def validate_basic_pension_number(value: Optional[str], field: str) -> ValidationResult:
    """Basic pension number: 10 digits, optionally written as 4-6."""
    if is_blank(value):
        return ValidationResult(valid=True, field=field)
    if not BASIC_PENSION_NUMBER_PATTERN.match(str(value).strip()):
        return ValidationResult(
            valid=False,
            message="Basic pension number must be 10 digits",
            field=field,
            suggestion="Use the format 1234-567890",
        )
    return ValidationResult(valid=True, field=field)


def validate_postal_code(value: Optional[str], field: str) -> ValidationResult:
    """Postal code: 7 digits, optionally written as 3-4."""
    if is_blank(value):
        return ValidationResult(valid=True, field=field)
    if not POSTAL_CODE_PATTERN.match(str(value).strip()):
        return ValidationResult(
            valid=False,
            message="Postal code must be 7 digits",
            field=field,
            suggestion="Use the format 123-4567",
        )
    return ValidationResult(valid=True, field=field)


def validate_era_date(value: Optional[EraDate], field: str) -> ValidationResult:
    """An era date, when present, must have a positive year and be a real date."""
    if value is None:
        return ValidationResult(valid=True, field=field)
    if value.year < 1:
        return ValidationResult(valid=False, message="Era year must be 1 or later", field=field)
    if try_to_gregorian(value) is None:
        return ValidationResult(
            valid=False,
            message=f"{value} is not a valid date",
            field=field,
        )
    return ValidationResult(valid=True, field=field)


def validate_era_year_month(value: Optional[EraYearMonth], field: str) -> ValidationResult:
    """An era year-month, when present, must have a positive year and a real month."""
    if value is None:
        return ValidationResult(valid=True, field=field)
    if value.year < 1 or not 1 <= value.month <= 12 or value.era not in ERA_OFFSETS:
        return ValidationResult(
            valid=False,
            message=f"{value.era.value} {value.year}/{value.month} is not a valid year-month",
            field=field,
        )
    return ValidationResult(valid=True, field=field)


def failures(results: Iterable[ValidationResult]) -> List[ValidationResult]:
    """Keep only failed results."""
    return [r for r in results if not r.valid]
