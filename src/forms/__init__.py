"""
Filing forms: type catalog, typed payloads and the schema registry.

Importing this package registers every filing schema.
"""

from .filing_types import FilingType, INTERNAL_TO_EXTERNAL, MULTI_PERSON_TYPES
from .base_schema import BaseFilingSchema
from .registry import ActiveFiling, FilingSchemaRegistry, get_schema, register_schema

# Import schemas to register them
from forms import schemas  # noqa: F401

__all__ = [
    "FilingType",
    "INTERNAL_TO_EXTERNAL",
    "MULTI_PERSON_TYPES",
    "BaseFilingSchema",
    "ActiveFiling",
    "FilingSchemaRegistry",
    "get_schema",
    "register_schema",
]
