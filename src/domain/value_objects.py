"""
Domain Value Objects for the Social Insurance Filing Core.

Value objects describe characteristics of a thing and have no identity of
their own. The organization profile and employee records here are read-only
snapshots handed to the core by the directory collaborators; the core never
mutates them.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class IdentificationType(str, Enum):
    """Which national identifier a person entry carries."""
    PERSONAL_NUMBER = "personal_number"            # 12-digit individual number
    BASIC_PENSION_NUMBER = "basic_pension_number"  # 10-digit basic pension number


class Gender(str, Enum):
    """Gender as printed on the forms."""
    MALE = "male"
    FEMALE = "female"


class Address(BaseModel):
    """Postal address of a person or office."""
    postal_code: str = Field(default="", description="Postal code, e.g. 100-0001")
    prefecture: str = Field(default="", description="Prefecture")
    city: str = Field(default="", description="City, ward or town")
    street: str = Field(default="", description="Street and block number")
    building: str = Field(default="", description="Building name and room")
    kana: str = Field(default="", description="Phonetic reading of the address")

    def one_line(self, include_postal_code: bool = True) -> str:
        """
        Render the address as printed in the office-address box.

        Examples:
            >>> Address(postal_code="100-0001", prefecture="Tokyo", city="Chiyoda",
            ...         street="1-1", building="").one_line()
            '〒100-0001 TokyoChiyoda1-1'
        """
        body = f"{self.prefecture}{self.city}{self.street}{self.building}"
        if include_postal_code and self.postal_code:
            return f"〒{self.postal_code} {body}"
        return body


class Attachment(BaseModel):
    """Reference to an uploaded supporting document."""
    file_name: str = Field(description="Original file name")
    file_url: str = Field(description="Reference returned by the attachment store")
    uploaded_at: datetime = Field(default_factory=datetime.utcnow)


class HealthInsuranceSettings(BaseModel):
    """Health insurance registration of the employer."""
    office_symbol: str = Field(default="", description="Office reference symbol")
    insurer_name: Optional[str] = Field(default=None)


class PensionInsuranceSettings(BaseModel):
    """Pension insurance registration of the employer."""
    office_number: str = Field(default="", description="Office number")


class InsuranceSettings(BaseModel):
    """Insurance registrations held on the organization profile."""
    health_insurance: HealthInsuranceSettings = Field(default_factory=HealthInsuranceSettings)
    pension_insurance: PensionInsuranceSettings = Field(default_factory=PensionInsuranceSettings)


class DocumentSettings(BaseModel):
    """Organization-level attachment defaults."""
    allowed_formats: List[str] = Field(default_factory=list, description="Allowed file extensions")
    max_file_size: Optional[int] = Field(default=None, description="Maximum upload size in MB")


class AttachmentSetting(BaseModel):
    """Per filing-type attachment override configured by the organization."""
    filing_type: str = Field(description="Filing type code")
    allowed_formats: List[str] = Field(default_factory=list)
    max_file_size: Optional[int] = Field(default=None, description="Maximum upload size in MB")


class OrganizationProfile(BaseModel):
    """
    Read-only snapshot of the employer organization.

    Taken once per filing-schema instantiation; source of office defaults.
    """
    id: str = Field(description="Organization identifier")
    name: str = Field(default="", description="Registered office name")
    owner_name: str = Field(default="", description="Business owner (representative) name")
    phone_number: str = Field(default="", description="Office phone number")
    address: Address = Field(default_factory=Address)
    insurance_settings: InsuranceSettings = Field(default_factory=InsuranceSettings)
    document_settings: Optional[DocumentSettings] = Field(default=None)
    attachment_settings: List[AttachmentSetting] = Field(default_factory=list)


class EmployeeRecord(BaseModel):
    """
    Employee as held in the directory.

    Used to pre-fill person entries and as the reverse-lookup target.
    """
    id: str = Field(description="Employee identifier")
    employee_number: Optional[str] = Field(default=None)
    last_name: str = Field(default="")
    first_name: str = Field(default="")
    last_name_kana: str = Field(default="")
    first_name_kana: str = Field(default="")
    birth_date: Optional[date] = Field(default=None)
    gender: Optional[Gender] = Field(default=None)
    insurance_number: Optional[str] = Field(default=None, description="Health insurance card number")
    personal_number: Optional[str] = Field(default=None)
    basic_pension_number: Optional[str] = Field(default=None)
    address: Optional[Address] = Field(default=None)
    join_date: Optional[date] = Field(default=None)
    retirement_date: Optional[date] = Field(default=None)

    @property
    def full_name(self) -> str:
        return f"{self.last_name} {self.first_name}".strip()
