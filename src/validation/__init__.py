"""Filing payload validation and conditional field rules."""

from .field_rules import (
    FieldRequirement,
    FieldState,
    ValidationResult,
    ValidationSeverity,
    check_required,
    get_path,
    is_blank,
)

from .dependent_rules import (
    ChangeType,
    ConditionalGroup,
    DependentValidationStateMachine,
    RecordKind,
    active_group,
    field_states,
    required_fields,
)

__all__ = [
    # Field rules
    'FieldRequirement',
    'FieldState',
    'ValidationResult',
    'ValidationSeverity',
    'check_required',
    'get_path',
    'is_blank',
    # Dependent state machine
    'ChangeType',
    'ConditionalGroup',
    'DependentValidationStateMachine',
    'RecordKind',
    'active_group',
    'field_states',
    'required_fields',
]
