"""
Filing Service - Application service for filing operations.

Orchestrates the filing flow against the async collaborators:
- Creating filings seeded from the organization snapshot
- Payload edits with recalculation and dependent re-validation
- Lifecycle transitions (submit, review, return, withdraw)
- Attachment uploads under the resolved attachment policy
- Statutory deadline refresh

The engines it calls are synchronous and pure; only the collaborator
boundaries are awaited. One writer per filing id is assumed.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, FrozenSet, List, Optional, Union

from domain.aggregates import Filing, FilingStatus
from domain.exceptions import NotFound
from domain.repositories import (
    IAttachmentStore,
    IEmployeeDirectory,
    IFilingRepository,
    IOrganizationProvider,
)
from domain.value_objects import Attachment, EmployeeRecord, OrganizationProfile
from forms.attachments import check_attachment, resolve_attachment_policy
from forms.filing_types import FilingType
from forms.prefill import link_persons
from forms.registry import ActiveFiling, get_schema
from rbac.roles import ActorContext
from rbac.status_permissions import visible_in_admin_mode
from workflow.deadlines import DeadlinePolicy, StatutoryDeadlinePolicy
from workflow.status_manager import FilingLifecycle, editing_attachments, get_filing_lifecycle

from .logging_config import filing_context, get_logger, log_performance

logger = get_logger(__name__)


@dataclass
class EditingSession:
    """A filing opened for editing: its typed payload and attachment baseline."""
    filing: Filing
    active: ActiveFiling
    attachments: List[Attachment] = field(default_factory=list)
    matched_employee_ids: List[Optional[str]] = field(default_factory=list)


def _person_entries(payload: Any) -> List[Any]:
    """Person entries of a payload, whatever its shape."""
    persons = getattr(payload, "persons", None)
    if persons is not None:
        return list(persons)
    insured = getattr(payload, "insured_person", None)
    return [insured] if insured is not None else []


class FilingService:
    """
    Application service for filings.

    Orchestrates:
    - FilingSchemaRegistry (payload construction, recalculation, validation)
    - FilingLifecycle (status transitions and edit guards)
    - DeadlinePolicy (statutory deadlines)
    - The repository, directory and attachment store collaborators
    """

    def __init__(
        self,
        organizations: IOrganizationProvider,
        employees: IEmployeeDirectory,
        repository: IFilingRepository,
        attachment_store: Optional[IAttachmentStore] = None,
        deadline_policy: Optional[DeadlinePolicy] = None,
        lifecycle: Optional[FilingLifecycle] = None,
    ):
        """
        Initialize FilingService.

        Args:
            organizations: Organization snapshot provider
            employees: Read-only employee directory
            repository: Filing persistence
            attachment_store: File storage for supporting documents
            deadline_policy: Deadline calculation (defaults to statutory rules)
            lifecycle: Status state machine
        """
        self._organizations = organizations
        self._employees = employees
        self._repository = repository
        self._attachment_store = attachment_store
        self._deadline_policy = deadline_policy or StatutoryDeadlinePolicy(employees)
        self._lifecycle = lifecycle or get_filing_lifecycle()

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    async def _require_organization(self, organization_id: str) -> OrganizationProfile:
        organization = await self._organizations.get_organization(organization_id)
        if organization is None:
            raise NotFound("organization", organization_id)
        return organization

    async def _require_employee(self, organization_id: str, employee_id: str) -> EmployeeRecord:
        employee = await self._employees.get_employee(organization_id, employee_id)
        if employee is None:
            raise NotFound("employee", employee_id)
        return employee

    async def get_filing(self, filing_id: str) -> Filing:
        """
        Load a filing.

        Raises:
            NotFound: If the repository has no filing with this id
        """
        filing = await self._repository.load_filing(filing_id)
        if filing is None:
            raise NotFound("filing", filing_id)
        return filing

    async def list_filings(
        self,
        actor: ActorContext,
        organization_id: str,
        status: Optional[FilingStatus] = None,
    ) -> List[Filing]:
        """
        List the filings an actor can see.

        Admin mode sees everything except internal draft/created filings;
        otherwise an actor sees only the filings they own.
        """
        filings = await self._repository.list_filings(organization_id, status=status)
        if actor.acting_as_admin:
            return [f for f in filings if visible_in_admin_mode(f.status, f.category)]
        return [f for f in filings if f.is_owned_by(actor.user_id)]

    # =========================================================================
    # CREATION AND EDITING
    # =========================================================================

    @log_performance("FilingService.create_filing")
    async def create_filing(
        self,
        actor: ActorContext,
        organization_id: str,
        filing_type: Union[FilingType, str],
        employee_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Filing:
        """
        Create a draft filing with its payload seeded from the organization.

        Args:
            actor: Creating user; becomes the filing's owner
            organization_id: Employer organization
            filing_type: Filing type (enum or code)
            employee_id: Optional directory employee to pre-fill a person from
            today: Reference date for date defaults

        Returns:
            The saved draft filing

        Raises:
            NotFound: For an unknown filing type, organization or employee
        """
        schema = get_schema(filing_type)
        organization = await self._require_organization(organization_id)
        employee = await self._require_employee(organization_id, employee_id) if employee_id else None

        active = ActiveFiling.start(schema.filing_type, organization, employee, today)
        filing = Filing(
            type=schema.filing_type.value,
            category=schema.filing_type.category,
            employee_id=actor.user_id,
            organization_id=organization_id,
            data=active.to_data(),
        )
        with filing_context(filing.id, actor.user_id):
            filing.deadline = await self._deadline_policy.calculate_legal_deadline(filing, schema.filing_type)
            await self._repository.save_filing(filing)
            logger.info(f"Created {filing.type} filing {filing.id}")
        return filing

    async def open_for_editing(self, filing_id: str) -> EditingSession:
        """
        Reopen a filing: typed payload with person links restored, and the
        attachment baseline (the last return snapshot for returned filings).
        """
        filing = await self.get_filing(filing_id)
        active = ActiveFiling.from_filing(filing)
        directory = await self._employees.get_employees_by_organization(filing.organization_id)
        matches = link_persons(_person_entries(active.payload), directory)
        return EditingSession(
            filing=filing,
            active=active,
            attachments=editing_attachments(filing),
            matched_employee_ids=[m.id if m else None for m in matches],
        )

    async def update_payload(self, actor: ActorContext, filing_id: str, data: Dict[str, Any]) -> Filing:
        """
        Replace a filing's payload, recalculating derived figures.

        Raises:
            NotFound: If the filing does not exist
            IllegalTransition: If the actor may not edit the filing
            ValidationFailed: If a value in `data` is malformed
        """
        filing = await self.get_filing(filing_id)
        self._lifecycle.check_can_edit(filing, actor)

        schema = get_schema(filing.type)
        payload = schema.parse(data)
        schema.recalculate(payload)
        return await self._save_edit(filing, schema.dump(payload), actor)

    async def change_change_type(
        self,
        actor: ActorContext,
        filing_id: str,
        record_path: str,
        value: Any,
    ) -> FrozenSet[str]:
        """
        Set the change type of one dependent record and re-run its validator.

        Args:
            record_path: "spouse_dependent" or "other_dependents[i]"
            value: New change type

        Returns:
            The record's recomputed required field set
        """
        filing = await self.get_filing(filing_id)
        self._lifecycle.check_can_edit(filing, actor)

        schema = get_schema(filing.type)
        if not hasattr(schema, "set_change_type"):
            raise NotFound("dependent record", f"{filing.type}:{record_path}")
        payload = schema.parse(filing.data)
        required = schema.set_change_type(payload, record_path, value)
        await self._save_edit(filing, schema.dump(payload), actor)
        return required

    async def set_first_month(
        self,
        actor: ActorContext,
        filing_id: str,
        person_index: int,
        first_month: Any,
    ) -> Filing:
        """Set the first month of a reward-change person and recalculate it."""
        filing = await self.get_filing(filing_id)
        self._lifecycle.check_can_edit(filing, actor)

        schema = get_schema(filing.type)
        if not hasattr(schema, "set_first_month"):
            raise NotFound("reward change person", f"{filing.type}:{person_index}")
        payload = schema.parse(filing.data)
        if not 0 <= person_index < len(payload.persons):
            raise NotFound("reward change person", str(person_index))
        schema.set_first_month(payload, person_index, first_month)
        return await self._save_edit(filing, schema.dump(payload), actor)

    async def _save_edit(self, filing: Filing, data: Dict[str, Any], actor: ActorContext) -> Filing:
        updated = self._lifecycle.update_data(filing, data, actor)
        updated.deadline = await self._deadline_policy.calculate_legal_deadline(updated, updated.type)
        await self._repository.save_filing(updated)
        logger.debug(f"Saved payload of filing {filing.id}")
        return updated

    # =========================================================================
    # ATTACHMENTS
    # =========================================================================

    async def add_attachment(
        self,
        actor: ActorContext,
        filing_id: str,
        file_name: str,
        content: bytes,
    ) -> Filing:
        """
        Upload a supporting document and attach it to a filing.

        Raises:
            IllegalTransition: If the actor may not edit the filing
            ValidationFailed: If the file format or size is not allowed
            NotFound: If no attachment store is configured
        """
        if self._attachment_store is None:
            raise NotFound("attachment store", filing_id)
        filing = await self.get_filing(filing_id)
        self._lifecycle.check_can_edit(filing, actor)

        organization = await self._organizations.get_organization(filing.organization_id)
        policy = resolve_attachment_policy(filing.type, organization)
        check_attachment(policy, file_name, len(content))

        with filing_context(filing.id, actor.user_id):
            url = await self._attachment_store.upload(file_name, content, filing.organization_id, filing.id)
            attachments = editing_attachments(filing)
            attachments.append(Attachment(file_name=file_name, file_url=url))
            updated = self._lifecycle.set_attachments(filing, attachments, actor)
            await self._repository.save_filing(updated)
            logger.info(f"Attached {file_name} to filing {filing.id}")
        return updated

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def transition(
        self,
        actor: ActorContext,
        filing_id: str,
        target: Union[FilingStatus, str],
        comment: Optional[str] = None,
    ) -> Filing:
        """
        Move a filing to another status and persist it.

        Raises:
            NotFound: If the filing does not exist
            IllegalTransition: If the move is not allowed for this actor
            ValidationFailed: If the target requires a valid payload
        """
        filing = await self.get_filing(filing_id)
        with filing_context(filing.id, actor.user_id):
            updated = self._lifecycle.transition(filing, target, actor, comment)
            await self._repository.save_filing(updated)
        return updated

    async def submit(self, actor: ActorContext, filing_id: str, comment: Optional[str] = None) -> Filing:
        """Submit a filing for review."""
        return await self.transition(actor, filing_id, FilingStatus.PENDING, comment)

    async def withdraw(self, actor: ActorContext, filing_id: str, comment: Optional[str] = None) -> Filing:
        return await self.transition(actor, filing_id, FilingStatus.WITHDRAWN, comment)

    async def refresh_deadline(self, filing_id: str) -> Optional[date]:
        """Recompute and store a filing's statutory deadline."""
        filing = await self.get_filing(filing_id)
        deadline = await self._deadline_policy.calculate_legal_deadline(filing, filing.type)
        if deadline != filing.deadline:
            filing = filing.model_copy(deep=True)
            filing.deadline = deadline
            filing.updated_at = datetime.utcnow()
            await self._repository.save_filing(filing)
        return deadline
