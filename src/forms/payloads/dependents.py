"""
Payload of the dependent change forms (internal request and external filing).

The spouse and each other dependent are independent records; which of their
fields are required is decided per record by the dependent state machine.
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import Field

from domain.era_date import EraDate
from domain.value_objects import Gender
from validation.dependent_rules import ChangeType
from .common import PayloadModel, PersonAddress, PersonBase, SubmitterInfo


class SpouseRelationship(str, Enum):
    HUSBAND = "husband"
    WIFE = "wife"
    HUSBAND_UNREGISTERED = "husband_unregistered"
    WIFE_UNREGISTERED = "wife_unregistered"


class OverseasExceptionStatus(str, Enum):
    APPLICABLE = "applicable"
    NOT_APPLICABLE = "not_applicable"


class DependentStart(PayloadModel):
    """When and why a person became a dependent."""
    date: Optional[EraDate] = None
    reason: Optional[str] = None
    reason_other: Optional[str] = None


class DependentEnd(PayloadModel):
    """When and why a person stopped being a dependent."""
    date: Optional[EraDate] = None
    reason: Optional[str] = None
    reason_other: Optional[str] = None
    death_date: Optional[EraDate] = None


class ChangeAfter(PayloadModel):
    """Corrected details for a change-type `change` record (free-form)."""
    last_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name_kana: Optional[str] = None
    first_name_kana: Optional[str] = None
    birth_date: Optional[EraDate] = None
    gender: Optional[Gender] = None
    relationship: Optional[str] = None
    address: Optional[PersonAddress] = None


class OverseasException(PayloadModel):
    """Overseas residency exception to the domestic-residence requirement."""
    status: Optional[OverseasExceptionStatus] = None
    start_date: Optional[EraDate] = None
    start_reason: Optional[str] = None
    start_reason_other: Optional[str] = None
    end_date: Optional[EraDate] = None
    end_reason: Optional[str] = None
    end_reason_other: Optional[str] = None
    domestic_transfer_date: Optional[EraDate] = None


class DependentRecord(PersonBase):
    """Common shape of spouse and other-dependent records."""
    relationship: Optional[str] = None
    is_foreigner: Optional[bool] = None
    foreign_name: Optional[str] = None
    address: Optional[PersonAddress] = None
    living_together: Optional[bool] = None
    phone_number: Optional[str] = None
    phone_type: Optional[str] = None
    change_type: Optional[ChangeType] = None
    dependent_start: DependentStart = Field(default_factory=DependentStart)
    dependent_end: DependentEnd = Field(default_factory=DependentEnd)
    change_after: ChangeAfter = Field(default_factory=ChangeAfter)
    overseas_exception: OverseasException = Field(default_factory=OverseasException)
    occupation: Optional[str] = None
    income: Optional[int] = None
    remarks: Optional[str] = None
    certificate_required: bool = False


class SpouseDependent(DependentRecord):
    """The insured person's spouse."""
    spouse_exempt: bool = Field(
        default=False,
        description="A dependent-exempt spouse is present and nothing is reported for them",
    )
    spouse_income: Optional[int] = None


class OtherDependent(DependentRecord):
    """A dependent other than the spouse."""
    relationship_other: Optional[str] = None
    student_year: Optional[str] = None


class InsuredPerson(PersonBase):
    """The employee whose dependents change."""
    insurance_number: Optional[str] = None
    acquisition_date: Optional[EraDate] = None
    income: Optional[int] = None
    address: Optional[PersonAddress] = None


class Declaration(PayloadModel):
    content: Optional[str] = None
    signature: Optional[str] = None


class DependentChangePayload(PayloadModel):
    """
    Dependent change payload.

    `submitter`, `business_owner_receipt_date` and `submission_date` are
    filled only on the external form.
    """
    submitter: Optional[SubmitterInfo] = None
    business_owner_receipt_date: Optional[EraDate] = None
    submission_date: Optional[date] = None
    fact_date: Optional[date] = Field(default=None, description="Date the change occurred")
    insured_person: InsuredPerson = Field(default_factory=InsuredPerson)
    spouse_dependent: Optional[SpouseDependent] = None
    other_dependents: List[OtherDependent] = Field(default_factory=list)
    declaration: Optional[Declaration] = None
