"""Payloads of the qualification acquisition and loss forms."""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from domain.era_date import EraDate
from .common import PaymentAmount, PayloadModel, PersonAddress, PersonBase, SubmitterInfo


class AcquisitionType(str, Enum):
    """Which insurance schemes the person joins."""
    HEALTH_AND_PENSION = "health_and_pension"
    HEALTH_ONLY = "health_only"
    PENSION_ONLY = "pension_only"


class LossReason(str, Enum):
    """Reason a person loses insured status."""
    RETIREMENT = "retirement"
    DEATH = "death"
    OVER_75 = "over75"
    DISABILITY = "disability"
    SOCIAL_SECURITY = "social_security"


class Remuneration(PaymentAmount):
    """Monthly remuneration at acquisition; total is derived."""
    total: Optional[int] = None


class AcquisitionPerson(PersonBase):
    """One person joining health and pension insurance."""
    insurance_number: Optional[str] = None
    person_type: Optional[str] = Field(default=None, description="Insured person category code")
    acquisition_type: Optional[AcquisitionType] = None
    acquisition_date: Optional[EraDate] = None
    has_dependents: Optional[bool] = None
    remuneration: Remuneration = Field(default_factory=Remuneration)
    remarks: Optional[str] = None
    remarks_other: Optional[str] = None
    address: Optional[PersonAddress] = Field(
        default=None,
        description="Required only when identified by basic pension number",
    )
    certificate_required: bool = False


class InsuranceAcquisitionPayload(PayloadModel):
    submitter: SubmitterInfo = Field(default_factory=SubmitterInfo)
    persons: List[AcquisitionPerson] = Field(default_factory=list)


class CertificateCollection(PayloadModel):
    """Health insurance cards collected back from the leaver."""
    attached: Optional[int] = None
    unrecoverable: Optional[int] = None


class LossPerson(PersonBase):
    """One person losing insured status."""
    insurance_number: Optional[str] = None
    loss_date: Optional[EraDate] = None
    loss_reason: Optional[LossReason] = None
    retirement_date: Optional[EraDate] = None
    death_date: Optional[EraDate] = None
    certificate_collection: CertificateCollection = Field(default_factory=CertificateCollection)
    over70_not_applicable: bool = False
    over70_not_applicable_date: Optional[EraDate] = None
    remarks: Optional[str] = None


class InsuranceLossPayload(PayloadModel):
    submitter: SubmitterInfo = Field(default_factory=SubmitterInfo)
    persons: List[LossPerson] = Field(default_factory=list)
