"""
Shared building blocks of filing payloads.

Payloads are persisted as `Filing.data`. Keys are camelCase on the wire and
snake_case in Python; `dump_payload()` omits absent (None) fields so a
saved filing never gains null keys, and fields marked `exclude=True`
(directory linkage) are never persisted.
"""

from typing import Any, Dict, Optional, Tuple, Type, TypeVar, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from domain.era_date import EraDate
from domain.exceptions import ValidationFailed
from domain.value_objects import Gender, IdentificationType
from validation.field_rules import ValidationResult, join_path


P = TypeVar("P", bound="PayloadModel")


class PayloadModel(BaseModel):
    """Base for every payload model: camelCase aliases, populate by name."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )


class SubmitterInfo(PayloadModel):
    """Office block printed at the top of every statutory form."""
    office_symbol: Optional[str] = Field(default=None, description="Health insurance office symbol")
    office_number: Optional[str] = Field(default=None, description="Pension office number")
    office_address: Optional[str] = Field(default=None, description="Office address line")
    office_name: Optional[str] = Field(default=None, description="Office (employer) name")
    owner_name: Optional[str] = Field(default=None, description="Business owner name")
    phone_number: Optional[str] = Field(default=None, description="Office phone number")


class PersonAddress(PayloadModel):
    """Address of a person as entered on a form."""
    postal_code: Optional[str] = None
    prefecture: Optional[str] = None
    city: Optional[str] = None
    street: Optional[str] = None
    building: Optional[str] = None
    address_kana: Optional[str] = None


class PaymentAmount(PayloadModel):
    """Cash and in-kind parts of a payment, in yen."""
    currency: Optional[int] = None
    in_kind: Optional[int] = None


class PersonBase(PayloadModel):
    """
    Identity fields shared by person entries.

    `employee_id` links the entry to a directory employee while editing; it
    is never persisted and is recovered later by reverse lookup.
    """
    employee_id: Optional[str] = Field(default=None, exclude=True)
    last_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name_kana: Optional[str] = None
    first_name_kana: Optional[str] = None
    birth_date: Optional[EraDate] = None
    gender: Optional[Gender] = None
    identification_type: Optional[IdentificationType] = None
    personal_number: Optional[str] = None
    basic_pension_number: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.last_name or ''} {self.first_name or ''}".strip()


def dump_payload(payload: PayloadModel) -> Dict[str, Any]:
    """Serialize a payload for `Filing.data`."""
    return payload.model_dump(mode="json", by_alias=True, exclude_none=True)


def load_payload(model: Type[P], data: Dict[str, Any]) -> P:
    """
    Parse `Filing.data` back into its payload model.

    Raises:
        ValidationFailed: One entry per malformed value, keyed by its
            snake_case field path
    """
    try:
        return model.model_validate(data or {})
    except ValidationError as e:
        raise ValidationFailed([
            ValidationResult(
                valid=False,
                field=_error_path(model, error["loc"]),
                message=error["msg"],
            )
            for error in e.errors()
        ]) from e


def _error_path(model: Type[BaseModel], loc: Tuple[Any, ...]) -> str:
    """Turn a pydantic error location (aliases, list indexes) into a field path."""
    path = ""
    current: Optional[Type[BaseModel]] = model
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
            continue
        name = str(part)
        fields = current.model_fields if current is not None else {}
        by_alias = {info.alias: key for key, info in fields.items() if info.alias}
        name = by_alias.get(name, name)
        path = join_path(path, name)
        current = _nested_model(fields.get(name))
    return path


def _nested_model(info: Any) -> Optional[Type[BaseModel]]:
    if info is None:
        return None
    annotation = info.annotation
    candidates = [annotation, *get_args(annotation)]
    for candidate in list(candidates):
        candidates.extend(get_args(candidate))
    for candidate in candidates:
        if isinstance(candidate, type) and issubclass(candidate, BaseModel):
            return candidate
    return None
