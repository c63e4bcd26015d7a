"""Payloads of the address change and name change forms."""

from typing import Optional

from pydantic import Field

from domain.era_date import EraDate
from domain.value_objects import IdentificationType
from .common import PayloadModel, PersonAddress, PersonBase, SubmitterInfo


class AddressChangePerson(PersonBase):
    """The insured person moving house."""
    insurance_number: Optional[str] = None


class SpouseAddressChange(PersonBase):
    """Spouse details when the spouse moves together with the insured person."""
    address: Optional[PersonAddress] = None
    change_date: Optional[EraDate] = None


class AddressChangePayload(PayloadModel):
    submitter: Optional[SubmitterInfo] = None
    insured_person: AddressChangePerson = Field(default_factory=AddressChangePerson)
    new_address: PersonAddress = Field(default_factory=PersonAddress)
    old_address: Optional[PersonAddress] = None
    change_date: Optional[EraDate] = None
    remarks: Optional[str] = None
    living_with_spouse: Optional[bool] = None
    spouse: Optional[SpouseAddressChange] = None


class NameChangePerson(PayloadModel):
    """The insured person changing name; names are recorded before and after."""
    employee_id: Optional[str] = Field(default=None, exclude=True)
    insurance_number: Optional[str] = None
    identification_type: Optional[IdentificationType] = None
    personal_number: Optional[str] = None
    basic_pension_number: Optional[str] = None
    birth_date: Optional[EraDate] = None
    new_last_name: Optional[str] = None
    new_first_name: Optional[str] = None
    new_last_name_kana: Optional[str] = None
    new_first_name_kana: Optional[str] = None
    old_last_name: Optional[str] = None
    old_first_name: Optional[str] = None


class NameChangePayload(PayloadModel):
    submitter: Optional[SubmitterInfo] = None
    insured_person: NameChangePerson = Field(default_factory=NameChangePerson)
    remarks: Optional[str] = None
