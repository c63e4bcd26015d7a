"""
Filing schema registry for dynamic lookup.

Each filing type has exactly one schema class, registered with
`@register_schema`. Dispatch on the type code is a single table lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Type, Union

from domain.aggregates import Filing
from domain.exceptions import NotFound, ValidationFailed
from domain.value_objects import EmployeeRecord, OrganizationProfile
from validation.field_rules import ValidationResult
from .base_schema import BaseFilingSchema
from .filing_types import FilingType
from .payloads.common import PayloadModel


class FilingSchemaRegistry:
    """
    Registry of filing schemas.

    Uses a factory pattern: schema classes are registered by filing type and
    instantiated on lookup.
    """

    # Storage: filing_type -> schema class
    _schemas: Dict[FilingType, Type[BaseFilingSchema]] = {}

    @classmethod
    def register(cls, filing_type: FilingType, schema_class: Type[BaseFilingSchema]) -> None:
        """
        Register a schema class for a filing type.

        Args:
            filing_type: Filing type code
            schema_class: The schema class to register
        """
        schema_class.filing_type = filing_type
        cls._schemas[filing_type] = schema_class

    @classmethod
    def get_schema(cls, filing_type: Union[FilingType, str]) -> BaseFilingSchema:
        """
        Get the schema for a filing type.

        Raises:
            NotFound: If the type code is unknown or has no schema
        """
        try:
            key = filing_type if isinstance(filing_type, FilingType) else FilingType.from_code(filing_type)
        except ValueError:
            raise NotFound("filing type", filing_type)
        schema_class = cls._schemas.get(key)
        if schema_class is None:
            raise NotFound("filing schema", key.value)
        return schema_class()

    @classmethod
    def get_supported_types(cls) -> List[FilingType]:
        """Registered filing types, in declaration order."""
        return [t for t in FilingType if t in cls._schemas]

    @classmethod
    def is_supported(cls, filing_type: Union[FilingType, str]) -> bool:
        try:
            cls.get_schema(filing_type)
        except NotFound:
            return False
        return True


def register_schema(filing_type: FilingType) -> Callable:
    """
    Decorator to register a filing schema.

    Usage:
        @register_schema(FilingType.INSURANCE_LOSS)
        class InsuranceLossSchema(BaseFilingSchema):
            ...
    """
    def decorator(cls: Type[BaseFilingSchema]) -> Type[BaseFilingSchema]:
        FilingSchemaRegistry.register(filing_type, cls)
        return cls
    return decorator


def get_schema(filing_type: Union[FilingType, str]) -> BaseFilingSchema:
    """Convenience wrapper around FilingSchemaRegistry.get_schema()."""
    return FilingSchemaRegistry.get_schema(filing_type)


@dataclass
class ActiveFiling:
    """
    The form currently being edited: a filing type and its typed payload.

    "Is type X active" is a tag comparison on `type`.
    """
    type: FilingType
    payload: PayloadModel

    @classmethod
    def start(
        cls,
        filing_type: Union[FilingType, str],
        organization: Optional[OrganizationProfile] = None,
        employee: Optional[EmployeeRecord] = None,
        today: Optional[date] = None,
    ) -> "ActiveFiling":
        """Open a new form of the given type with defaults applied."""
        schema = get_schema(filing_type)
        return cls(type=schema.filing_type, payload=schema.build_payload(organization, employee, today))

    @classmethod
    def from_filing(cls, filing: Filing) -> "ActiveFiling":
        """Reopen a stored filing for editing."""
        schema = get_schema(filing.type)
        return cls(type=schema.filing_type, payload=schema.parse(filing.data))

    @property
    def schema(self) -> BaseFilingSchema:
        return get_schema(self.type)

    def is_type(self, filing_type: Union[FilingType, str]) -> bool:
        return self.type == (filing_type if isinstance(filing_type, FilingType) else FilingType.from_code(filing_type))

    def recalculate(self) -> None:
        self.schema.recalculate(self.payload)

    def validate(self) -> List[ValidationResult]:
        return self.schema.validate(self.payload)

    def require_valid(self) -> None:
        """Raise ValidationFailed when the payload has blocking problems."""
        errors = self.validate()
        if errors:
            raise ValidationFailed(errors)

    def to_data(self) -> Dict[str, Any]:
        return self.schema.dump(self.payload)
