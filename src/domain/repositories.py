"""
Collaborator Interfaces for the Social Insurance Filing Core.

The core owns none of storage, directories or file upload. These interfaces
define what it consumes; implementations live with the calling layer (tests
use in-memory versions).

This abstraction allows:
1. Swapping storage backends without touching filing rules
2. Testing with in-memory implementations
3. Clear separation between domain and infrastructure
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .aggregates import Filing, FilingStatus
from .value_objects import EmployeeRecord, OrganizationProfile


class IOrganizationProvider(ABC):
    """Read-only source of organization profiles (filing defaults)."""

    @abstractmethod
    async def get_organization(self, organization_id: str) -> Optional[OrganizationProfile]:
        """
        Retrieve an organization profile.

        Args:
            organization_id: Organization identifier

        Returns:
            The profile if found, None otherwise
        """
        pass


class IEmployeeDirectory(ABC):
    """Read-only employee directory used for pre-fill and reverse lookup."""

    @abstractmethod
    async def get_employees_by_organization(self, organization_id: str) -> List[EmployeeRecord]:
        """
        List all employees of an organization.

        Args:
            organization_id: Organization identifier

        Returns:
            Employee records (possibly empty)
        """
        pass

    async def get_employee(self, organization_id: str, employee_id: str) -> Optional[EmployeeRecord]:
        """Find one employee by id (default implementation scans the organization)."""
        for employee in await self.get_employees_by_organization(organization_id):
            if employee.id == employee_id:
                return employee
        return None


class IFilingRepository(ABC):
    """
    Persistence for filings.

    Implementations must round-trip `Filing.data` structurally, without
    renaming keys, and must not introduce nulls for omitted fields.
    """

    @abstractmethod
    async def save_filing(self, filing: Filing) -> None:
        """
        Save a filing (create or update).

        Args:
            filing: The filing to save
        """
        pass

    @abstractmethod
    async def load_filing(self, filing_id: str) -> Optional[Filing]:
        """
        Load a filing by ID.

        Args:
            filing_id: Filing identifier

        Returns:
            The filing if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_filings(
        self,
        organization_id: str,
        status: Optional[FilingStatus] = None,
        employee_id: Optional[str] = None,
    ) -> List[Filing]:
        """
        List filings of an organization.

        Args:
            organization_id: Organization identifier
            status: Optional status filter
            employee_id: Optional owner filter

        Returns:
            Matching filings
        """
        pass


class IAttachmentStore(ABC):
    """File storage for supporting documents."""

    @abstractmethod
    async def upload(self, file_name: str, content: bytes, organization_id: str, filing_id: str) -> str:
        """
        Store a file.

        Args:
            file_name: Original file name
            content: File bytes
            organization_id: Owning organization
            filing_id: Filing the file belongs to

        Returns:
            Reference URL of the stored file
        """
        pass
