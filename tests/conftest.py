"""Pytest configuration and fixtures for test suite."""

import os
import sys
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from domain.aggregates import Filing, FilingStatus
from domain.repositories import (
    IAttachmentStore,
    IEmployeeDirectory,
    IFilingRepository,
    IOrganizationProvider,
)
from domain.value_objects import (
    Address,
    EmployeeRecord,
    Gender,
    HealthInsuranceSettings,
    InsuranceSettings,
    OrganizationProfile,
    PensionInsuranceSettings,
)
from rbac.roles import ActorContext


# =============================================================================
# IN-MEMORY COLLABORATORS
# =============================================================================

class InMemoryOrganizationProvider(IOrganizationProvider):
    def __init__(self, organizations: List[OrganizationProfile]):
        self._organizations = {o.id: o for o in organizations}

    async def get_organization(self, organization_id: str) -> Optional[OrganizationProfile]:
        return self._organizations.get(organization_id)


class InMemoryEmployeeDirectory(IEmployeeDirectory):
    def __init__(self, employees_by_org: Dict[str, List[EmployeeRecord]]):
        self._employees = employees_by_org

    async def get_employees_by_organization(self, organization_id: str) -> List[EmployeeRecord]:
        return list(self._employees.get(organization_id, []))


class InMemoryFilingRepository(IFilingRepository):
    def __init__(self):
        self.filings: Dict[str, Filing] = {}
        self.save_count = 0

    async def save_filing(self, filing: Filing) -> None:
        self.filings[filing.id] = filing.model_copy(deep=True)
        self.save_count += 1

    async def load_filing(self, filing_id: str) -> Optional[Filing]:
        filing = self.filings.get(filing_id)
        return filing.model_copy(deep=True) if filing else None

    async def list_filings(
        self,
        organization_id: str,
        status: Optional[FilingStatus] = None,
        employee_id: Optional[str] = None,
    ) -> List[Filing]:
        return [
            f.model_copy(deep=True) for f in self.filings.values()
            if f.organization_id == organization_id
            and (status is None or f.status == status)
            and (employee_id is None or f.employee_id == employee_id)
        ]


class InMemoryAttachmentStore(IAttachmentStore):
    def __init__(self):
        self.uploads: Dict[str, bytes] = {}

    async def upload(self, file_name: str, content: bytes, organization_id: str, filing_id: str) -> str:
        url = f"memory://{organization_id}/{filing_id}/{file_name}"
        self.uploads[url] = content
        return url


# =============================================================================
# ISOLATION
# =============================================================================

@pytest.fixture(autouse=True)
def reset_config_caches(monkeypatch):
    """Fresh settings and catalog for each test, without stray env overrides."""
    from config.filing_config_loader import clear_config_cache
    from config.settings import get_settings

    for key in list(os.environ):
        if key.startswith("FILING_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    clear_config_cache()
    yield
    get_settings.cache_clear()
    clear_config_cache()


# =============================================================================
# DOMAIN FIXTURES
# =============================================================================

@pytest.fixture
def organization() -> OrganizationProfile:
    return OrganizationProfile(
        id="org-1",
        name="Sakura Trading Co.",
        owner_name="Yamada Taro",
        phone_number="03-1234-5678",
        address=Address(
            postal_code="100-0001",
            prefecture="Tokyo",
            city="Chiyoda",
            street="1-1-1",
            building="Sakura Bldg 3F",
        ),
        insurance_settings=InsuranceSettings(
            health_insurance=HealthInsuranceSettings(office_symbol="01-ABC"),
            pension_insurance=PensionInsuranceSettings(office_number="12345"),
        ),
    )


@pytest.fixture
def employee() -> EmployeeRecord:
    return EmployeeRecord(
        id="emp-1",
        employee_number="0001",
        last_name="Suzuki",
        first_name="Hanako",
        last_name_kana="スズキ",
        first_name_kana="ハナコ",
        birth_date=date(1990, 5, 20),
        gender=Gender.FEMALE,
        insurance_number="1001",
        personal_number="123456789012",
        address=Address(postal_code="150-0001", prefecture="Tokyo", city="Shibuya", street="2-2-2"),
        join_date=date(2024, 4, 1),
    )


@pytest.fixture
def retiring_employee() -> EmployeeRecord:
    return EmployeeRecord(
        id="emp-2",
        last_name="Tanaka",
        first_name="Ichiro",
        last_name_kana="タナカ",
        first_name_kana="イチロウ",
        birth_date=date(1960, 1, 15),
        gender=Gender.MALE,
        insurance_number="1002",
        basic_pension_number="1234-567890",
        join_date=date(2010, 4, 1),
        retirement_date=date(2024, 3, 31),
    )


@pytest.fixture
def employee_directory(employee, retiring_employee) -> InMemoryEmployeeDirectory:
    return InMemoryEmployeeDirectory({"org-1": [employee, retiring_employee]})


@pytest.fixture
def organization_provider(organization) -> InMemoryOrganizationProvider:
    return InMemoryOrganizationProvider([organization])


@pytest.fixture
def filing_repository() -> InMemoryFilingRepository:
    return InMemoryFilingRepository()


@pytest.fixture
def attachment_store() -> InMemoryAttachmentStore:
    return InMemoryAttachmentStore()


@pytest.fixture
def owner() -> ActorContext:
    return ActorContext.employee("emp-1", organization_id="org-1")


@pytest.fixture
def other_employee() -> ActorContext:
    return ActorContext.employee("emp-9", organization_id="org-1")


@pytest.fixture
def admin() -> ActorContext:
    return ActorContext.admin("hr-1", organization_id="org-1")


@pytest.fixture
def filing_service(organization_provider, employee_directory, filing_repository, attachment_store):
    from services.filing_service import FilingService

    return FilingService(
        organizations=organization_provider,
        employees=employee_directory,
        repository=filing_repository,
        attachment_store=attachment_store,
    )
