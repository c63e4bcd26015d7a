"""
Dependent Record Validation State Machine.

The dependent-change forms carry one spouse record and any number of other
dependent records. For each of them a `change_type` selector decides which
fields are mandatory:

- no_change:       nothing is required; the record is informational only
- change:          only the selector itself; the corrected values live in the
                   free-form `change_after` group, so base identity and
                   overseas-exception fields are not required
- applicable /
  not_applicable:  name (last/first and kana), birth date, gender and
                   relationship

The spouse record also has a "spouse exempt" flag (a dependent-exempt spouse
is present, nothing to report). When set, only the spouse's income is
required and the selector is not required at all. The two rules are mutually
exclusive.

`required_fields()` is a pure function; the state machine object only keeps
the current inputs for one record so that each record is evaluated
independently. Changing the selector never clears previously entered values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple
import logging

from .field_rules import (
    FieldRequirement,
    FieldState,
    ValidationResult,
    check_required,
)

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    """Per-dependent change classification."""
    NO_CHANGE = "no_change"            # Coverage unchanged
    APPLICABLE = "applicable"          # Newly a dependent
    NOT_APPLICABLE = "not_applicable"  # No longer a dependent
    CHANGE = "change"                  # Correction of recorded details only


class RecordKind(str, Enum):
    """Which sub-record of a dependent-change payload is being validated."""
    SPOUSE = "spouse"
    OTHER_DEPENDENT = "other_dependent"


class ConditionalGroup(str, Enum):
    """Conditional field groups of a dependent record."""
    DEPENDENT_START = "dependent_start"
    DEPENDENT_END = "dependent_end"
    CHANGE_AFTER = "change_after"


CHANGE_TYPE_FIELD = "change_type"
SPOUSE_INCOME_FIELD = "spouse_income"

NAME_FIELDS: Tuple[str, ...] = ("last_name", "first_name", "last_name_kana", "first_name_kana")
IDENTITY_FIELDS: Tuple[str, ...] = NAME_FIELDS + ("birth_date", "gender", "relationship")

# Group that carries the authoritative values for each change type
ACTIVE_GROUP: Dict[ChangeType, ConditionalGroup] = {
    ChangeType.APPLICABLE: ConditionalGroup.DEPENDENT_START,
    ChangeType.NOT_APPLICABLE: ConditionalGroup.DEPENDENT_END,
    ChangeType.CHANGE: ConditionalGroup.CHANGE_AFTER,
}

_COMMON_FIELDS: Tuple[str, ...] = IDENTITY_FIELDS + (
    "identification_type",
    "personal_number",
    "basic_pension_number",
    "is_foreigner",
    "foreign_name",
    "address",
    "living_together",
    "phone_number",
    "occupation",
    "income",
    "remarks",
    "certificate_required",
)

_GROUP_FIELDS: Dict[ConditionalGroup, Tuple[str, ...]] = {
    ConditionalGroup.DEPENDENT_START: ("date", "reason", "reason_other"),
    ConditionalGroup.DEPENDENT_END: ("date", "reason", "reason_other", "death_date"),
    ConditionalGroup.CHANGE_AFTER: NAME_FIELDS + ("birth_date", "gender", "relationship", "address"),
}

_OVERSEAS_FIELDS: Tuple[str, ...] = (
    "overseas_exception.status",
    "overseas_exception.start_date",
    "overseas_exception.start_reason",
    "overseas_exception.end_date",
    "overseas_exception.end_reason",
    "overseas_exception.domestic_transfer_date",
)


def coerce_change_type(value: Any) -> Optional[ChangeType]:
    """
    Read a change type from a form value, treating blanks and unknowns as unset.

    Examples:
        >>> coerce_change_type("applicable")
        <ChangeType.APPLICABLE: 'applicable'>
        >>> coerce_change_type("") is None
        True
    """
    if value is None or isinstance(value, ChangeType):
        return value
    try:
        return ChangeType(value)
    except ValueError:
        return None


def required_fields(
    change_type: Any,
    record_kind: RecordKind,
    spouse_exempt: bool = False,
) -> FrozenSet[str]:
    """
    Required field paths of a dependent record.

    Args:
        change_type: Current selector value (None or blank when unset)
        record_kind: Spouse or other dependent
        spouse_exempt: Spouse-exemption flag; ignored for other dependents

    Returns:
        Relative field paths that must be non-blank

    Examples:
        >>> sorted(required_fields("no_change", RecordKind.OTHER_DEPENDENT))
        []
        >>> sorted(required_fields("change", RecordKind.SPOUSE))
        ['change_type']
        >>> sorted(required_fields("applicable", RecordKind.SPOUSE, spouse_exempt=True))
        ['spouse_income']
    """
    if record_kind == RecordKind.SPOUSE and spouse_exempt:
        return frozenset({SPOUSE_INCOME_FIELD})

    selected = coerce_change_type(change_type)
    if selected == ChangeType.NO_CHANGE:
        return frozenset()
    if selected == ChangeType.CHANGE:
        return frozenset({CHANGE_TYPE_FIELD})
    # applicable, not_applicable, or not chosen yet
    return frozenset((CHANGE_TYPE_FIELD,) + IDENTITY_FIELDS)


def active_group(change_type: Any) -> Optional[ConditionalGroup]:
    """The conditional group that applies to a change type, if any."""
    selected = coerce_change_type(change_type)
    if selected is None:
        return None
    return ACTIVE_GROUP.get(selected)


def record_field_paths(record_kind: RecordKind) -> Tuple[str, ...]:
    """Every field path the state machine decides on for a record kind."""
    paths: List[str] = [CHANGE_TYPE_FIELD]
    paths.extend(_COMMON_FIELDS)
    for group, names in _GROUP_FIELDS.items():
        paths.extend(f"{group.value}.{name}" for name in names)
    paths.extend(_OVERSEAS_FIELDS)
    if record_kind == RecordKind.SPOUSE:
        paths.extend(("spouse_exempt", SPOUSE_INCOME_FIELD))
    else:
        paths.extend(("relationship_other", "student_year"))
    return tuple(paths)


def field_states(
    change_type: Any,
    record_kind: RecordKind,
    spouse_exempt: bool = False,
) -> Dict[str, FieldState]:
    """
    Requirement and visibility of every field of a dependent record.

    Inactive conditional groups are hidden; with no_change or spouse
    exemption all three groups are inactive.
    """
    required = required_fields(change_type, record_kind, spouse_exempt)
    exempt = record_kind == RecordKind.SPOUSE and spouse_exempt
    group = None if exempt else active_group(change_type)
    overseas_relevant = not exempt and coerce_change_type(change_type) not in (
        ChangeType.NO_CHANGE, ChangeType.CHANGE,
    )

    states: Dict[str, FieldState] = {}
    for path in record_field_paths(record_kind):
        head = path.split(".", 1)[0]
        visible = True
        if head in {g.value for g in ConditionalGroup}:
            visible = group is not None and head == group.value
        elif head == "overseas_exception":
            visible = overseas_relevant
        elif path == SPOUSE_INCOME_FIELD:
            visible = exempt

        if path in required:
            requirement = FieldRequirement.CONDITIONAL_MANDATORY
        elif visible:
            requirement = FieldRequirement.OPTIONAL
        else:
            requirement = FieldRequirement.HIDDEN
        states[path] = FieldState(field_id=path, requirement=requirement, visible=visible)
    return states


@dataclass
class DependentValidationStateMachine:
    """
    Required-field state of one dependent record.

    One instance per sub-record (the spouse and each other dependent), so no
    record's state leaks into another's.
    """
    record_kind: RecordKind
    change_type: Optional[ChangeType] = None
    spouse_exempt: bool = False
    _required: FrozenSet[str] = field(default=frozenset(), init=False, repr=False)

    def __post_init__(self) -> None:
        self.change_type = coerce_change_type(self.change_type)
        self._recompute()

    @classmethod
    def for_record(cls, record: Any, record_kind: RecordKind) -> "DependentValidationStateMachine":
        """Build a machine from a record's current selector and exemption flag."""
        return cls(
            record_kind=record_kind,
            change_type=getattr(record, CHANGE_TYPE_FIELD, None),
            spouse_exempt=bool(getattr(record, "spouse_exempt", False)),
        )

    @property
    def required(self) -> FrozenSet[str]:
        return self._required

    @property
    def is_informational(self) -> bool:
        """True when nothing on the record is checked (no change, or an exempt spouse)."""
        if self.record_kind == RecordKind.SPOUSE and self.spouse_exempt:
            return True
        return self.change_type == ChangeType.NO_CHANGE

    @property
    def active_group(self) -> Optional[ConditionalGroup]:
        if self.record_kind == RecordKind.SPOUSE and self.spouse_exempt:
            return None
        return active_group(self.change_type)

    def set_change_type(self, value: Any) -> FrozenSet[str]:
        """Handle a write to the selector; returns the new required set."""
        self.change_type = coerce_change_type(value)
        return self._recompute()

    def set_spouse_exempt(self, value: bool) -> FrozenSet[str]:
        """Handle a write to the spouse-exemption flag."""
        self.spouse_exempt = bool(value)
        return self._recompute()

    def is_required(self, path: str) -> bool:
        return path in self._required

    def field_states(self) -> Dict[str, FieldState]:
        return field_states(self.change_type, self.record_kind, self.spouse_exempt)

    def validate(self, record: Any, prefix: str = "") -> List[ValidationResult]:
        """Check the record's required fields; values are never modified."""
        return check_required(record, self._required, prefix=prefix)

    def _recompute(self) -> FrozenSet[str]:
        if (
            self.record_kind == RecordKind.SPOUSE
            and self.spouse_exempt
            and self.change_type is not None
        ):
            logger.warning(
                f"Spouse record has both exemption flag and change type "
                f"{self.change_type.value}; exemption takes precedence"
            )
        self._required = required_fields(self.change_type, self.record_kind, self.spouse_exempt)
        return self._required
