"""
Tests for the filing application service.

Runs the full flow against in-memory collaborators:
creation, editing, dependent change types, attachments, lifecycle and
deadline refresh.
"""

import os
import sys
from datetime import date

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from domain.aggregates import FilingCategory, FilingStatus
from domain.era_date import Era, EraDate
from domain.exceptions import IllegalTransition, NotFound, TransitionRejection, ValidationFailed
from forms.filing_types import FilingType
from forms.payloads import OtherDependent, PersonAddress
from validation.dependent_rules import ChangeType


async def _valid_address_change(filing_service, owner):
    """Create an internal address change and complete its payload."""
    filing = await filing_service.create_filing(owner, "org-1", FilingType.ADDRESS_CHANGE, employee_id="emp-1")
    session = await filing_service.open_for_editing(filing.id)
    payload = session.active.payload
    payload.change_date = EraDate(era=Era.REIWA, year=6, month=6, day=1)
    payload.new_address = PersonAddress(postal_code="160-0022", prefecture="Tokyo", city="Shinjuku")
    return await filing_service.update_payload(owner, filing.id, session.active.to_data())


# =============================================================================
# CREATION
# =============================================================================

class TestCreateFiling:
    """Draft creation seeded from the organization and directory."""

    @pytest.mark.asyncio
    async def test_create_external_with_employee(self, filing_service, filing_repository, admin):
        filing = await filing_service.create_filing(
            admin, "org-1", "insurance_acquisition", employee_id="emp-1",
        )
        assert filing.status == FilingStatus.DRAFT
        assert filing.category == FilingCategory.EXTERNAL
        assert filing.employee_id == "hr-1"
        assert filing.data["submitter"]["officeNumber"] == "12345"
        assert filing.data["persons"][0]["insuranceNumber"] == "1001"
        assert "employeeId" not in filing.data["persons"][0]
        # join 2024-04-01 + 5 days is a Saturday
        assert filing.deadline == date(2024, 4, 8)
        assert filing_repository.filings[filing.id].deadline == date(2024, 4, 8)

    @pytest.mark.asyncio
    async def test_internal_has_no_deadline(self, filing_service, owner):
        filing = await filing_service.create_filing(owner, "org-1", FilingType.NAME_CHANGE, employee_id="emp-1")
        assert filing.category == FilingCategory.INTERNAL
        assert filing.deadline is None
        assert "submitter" not in filing.data

    @pytest.mark.asyncio
    async def test_unknown_type(self, filing_service, owner):
        with pytest.raises(NotFound):
            await filing_service.create_filing(owner, "org-1", "PAYROLL_TAX")

    @pytest.mark.asyncio
    async def test_unknown_organization(self, filing_service, owner):
        with pytest.raises(NotFound) as exc_info:
            await filing_service.create_filing(owner, "org-404", FilingType.BONUS_PAYMENT)
        assert exc_info.value.kind == "organization"

    @pytest.mark.asyncio
    async def test_unknown_employee(self, filing_service, filing_repository, owner):
        with pytest.raises(NotFound) as exc_info:
            await filing_service.create_filing(owner, "org-1", FilingType.BONUS_PAYMENT, employee_id="emp-404")
        assert exc_info.value.kind == "employee"
        assert filing_repository.save_count == 0


# =============================================================================
# LISTING AND LOADING
# =============================================================================

class TestListFilings:
    """Visibility of filings per actor."""

    @pytest.mark.asyncio
    async def test_owner_and_admin_views(self, filing_service, owner, admin):
        internal = await filing_service.create_filing(owner, "org-1", FilingType.ADDRESS_CHANGE)
        external = await filing_service.create_filing(admin, "org-1", FilingType.BONUS_PAYMENT)

        assert [f.id for f in await filing_service.list_filings(owner, "org-1")] == [internal.id]
        assert [f.id for f in await filing_service.list_filings(admin, "org-1")] == [external.id]

    @pytest.mark.asyncio
    async def test_submitted_internal_visible_to_admin(self, filing_service, owner, admin):
        filing = await _valid_address_change(filing_service, owner)
        await filing_service.submit(owner, filing.id)
        listed = await filing_service.list_filings(admin, "org-1", status=FilingStatus.PENDING)
        assert [f.id for f in listed] == [filing.id]

    @pytest.mark.asyncio
    async def test_get_missing_filing(self, filing_service):
        with pytest.raises(NotFound):
            await filing_service.get_filing("nope")


# =============================================================================
# EDITING
# =============================================================================

class TestEditing:
    """Payload edits, recalculation and reverse lookup."""

    @pytest.mark.asyncio
    async def test_update_recalculates(self, filing_service, admin):
        filing = await filing_service.create_filing(admin, "org-1", FilingType.BONUS_PAYMENT, employee_id="emp-1")
        data = dict(filing.data)
        data["commonBonusPaymentDate"] = {"era": "reiwa", "year": 6, "month": 7, "day": 1}
        data["persons"][0]["paymentAmount"] = {"currency": 512345}

        updated = await filing_service.update_payload(admin, filing.id, data)

        assert updated.data["persons"][0]["bonusAmount"] == 512000
        assert updated.deadline == date(2024, 7, 8)

    @pytest.mark.asyncio
    async def test_update_by_stranger_is_refused(self, filing_service, filing_repository, owner, other_employee):
        filing = await filing_service.create_filing(owner, "org-1", FilingType.ADDRESS_CHANGE)
        saves = filing_repository.save_count
        with pytest.raises(IllegalTransition) as exc_info:
            await filing_service.update_payload(other_employee, filing.id, {})
        assert exc_info.value.reason == TransitionRejection.WRONG_ACTOR
        assert filing_repository.save_count == saves

    @pytest.mark.asyncio
    async def test_malformed_update_is_validation_failure(self, filing_service, filing_repository, owner):
        filing = await filing_service.create_filing(owner, "org-1", FilingType.DEPENDENT_CHANGE)
        saves = filing_repository.save_count
        with pytest.raises(ValidationFailed) as exc_info:
            await filing_service.update_payload(owner, filing.id, {
                "spouseDependent": {"changeType": "bogus"},
                "otherDependents": [{"birthDate": {"era": "reiwa", "year": "two", "month": 1, "day": 1}}],
            })
        assert sorted(exc_info.value.fields) == [
            "other_dependents[0].birth_date.year",
            "spouse_dependent.change_type",
        ]
        assert filing_repository.save_count == saves

    @pytest.mark.asyncio
    async def test_no_change_spouse_with_stale_values_submits(self, filing_service, owner):
        filing = await filing_service.create_filing(owner, "org-1", FilingType.DEPENDENT_CHANGE, employee_id="emp-1")
        data = dict(filing.data)
        data["spouseDependent"] = {
            "changeType": "no_change",
            "identificationType": "personal_number",
            "personalNumber": "123",
            "address": {"postalCode": "12"},
        }
        await filing_service.update_payload(owner, filing.id, data)
        submitted = await filing_service.submit(owner, filing.id)
        assert submitted.status == FilingStatus.PENDING

    @pytest.mark.asyncio
    async def test_open_for_editing_restores_links(self, filing_service, admin):
        filing = await filing_service.create_filing(
            admin, "org-1", FilingType.INSURANCE_LOSS, employee_id="emp-2",
        )
        session = await filing_service.open_for_editing(filing.id)
        assert session.active.type == FilingType.INSURANCE_LOSS
        assert session.active.payload.persons[0].employee_id == "emp-2"
        assert session.matched_employee_ids == ["emp-2"]

    @pytest.mark.asyncio
    async def test_change_change_type(self, filing_service, filing_repository, owner):
        filing = await filing_service.create_filing(owner, "org-1", FilingType.DEPENDENT_CHANGE, employee_id="emp-1")
        session = await filing_service.open_for_editing(filing.id)
        session.active.payload.other_dependents.append(
            OtherDependent(last_name="Suzuki", change_type=ChangeType.NOT_APPLICABLE),
        )
        await filing_service.update_payload(owner, filing.id, session.active.to_data())

        required = await filing_service.change_change_type(owner, filing.id, "other_dependents[0]", "no_change")

        assert required == frozenset()
        stored = filing_repository.filings[filing.id].data["otherDependents"][0]
        assert stored["changeType"] == "no_change"
        assert stored["lastName"] == "Suzuki"

    @pytest.mark.asyncio
    async def test_change_type_on_other_form(self, filing_service, owner):
        filing = await filing_service.create_filing(owner, "org-1", FilingType.NAME_CHANGE)
        with pytest.raises(NotFound):
            await filing_service.change_change_type(owner, filing.id, "spouse_dependent", "change")

    @pytest.mark.asyncio
    async def test_set_first_month(self, filing_service, admin):
        filing = await filing_service.create_filing(admin, "org-1", FilingType.REWARD_CHANGE, employee_id="emp-1")
        updated = await filing_service.set_first_month(admin, filing.id, 0, 11)
        person = updated.data["persons"][0]
        assert person["firstMonth"] == 11
        assert [m["month"] for m in person["salaryMonths"]] == [11, 12, 1]

        with pytest.raises(NotFound):
            await filing_service.set_first_month(admin, filing.id, 3, 11)


# =============================================================================
# ATTACHMENTS
# =============================================================================

class TestAttachments:
    """Uploads under the resolved policy."""

    @pytest.mark.asyncio
    async def test_upload(self, filing_service, attachment_store, admin):
        filing = await filing_service.create_filing(admin, "org-1", FilingType.INSURANCE_ACQUISITION)
        updated = await filing_service.add_attachment(admin, filing.id, "license.pdf", b"%PDF-1.7")
        assert [a.file_name for a in updated.attachments] == ["license.pdf"]
        assert updated.attachments[0].file_url == f"memory://org-1/{filing.id}/license.pdf"
        assert attachment_store.uploads[updated.attachments[0].file_url] == b"%PDF-1.7"

    @pytest.mark.asyncio
    async def test_disallowed_format_not_uploaded(self, filing_service, attachment_store, admin):
        filing = await filing_service.create_filing(admin, "org-1", FilingType.INSURANCE_ACQUISITION)
        with pytest.raises(ValidationFailed):
            await filing_service.add_attachment(admin, filing.id, "tool.exe", b"MZ")
        assert attachment_store.uploads == {}

    @pytest.mark.asyncio
    async def test_no_store(self, organization_provider, employee_directory, filing_repository, admin):
        from services.filing_service import FilingService

        service = FilingService(organization_provider, employee_directory, filing_repository)
        filing = await service.create_filing(admin, "org-1", FilingType.BONUS_PAYMENT)
        with pytest.raises(NotFound) as exc_info:
            await service.add_attachment(admin, filing.id, "a.pdf", b"x")
        assert exc_info.value.kind == "attachment store"


# =============================================================================
# LIFECYCLE
# =============================================================================

class TestLifecycleFlow:
    """Submit, return, resubmit and approve through the service."""

    @pytest.mark.asyncio
    async def test_invalid_submit_leaves_filing_unchanged(self, filing_service, filing_repository, admin):
        filing = await filing_service.create_filing(admin, "org-1", FilingType.BONUS_PAYMENT)
        with pytest.raises(ValidationFailed) as exc_info:
            await filing_service.submit(admin, filing.id)
        assert "common_bonus_payment_date" in exc_info.value.fields
        assert filing_repository.filings[filing.id].status == FilingStatus.DRAFT

    @pytest.mark.asyncio
    async def test_return_and_resubmit(self, filing_service, owner, admin):
        filing = await _valid_address_change(filing_service, owner)
        await filing_service.add_attachment(owner, filing.id, "residence.pdf", b"%PDF")
        submitted = await filing_service.submit(owner, filing.id)
        assert submitted.submission_date is not None

        with pytest.raises(IllegalTransition):
            await filing_service.update_payload(owner, filing.id, submitted.data)

        returned = await filing_service.transition(admin, filing.id, "returned", comment="wrong postal code")
        assert returned.last_return.reason == "wrong postal code"

        session = await filing_service.open_for_editing(filing.id)
        assert [a.file_name for a in session.attachments] == ["residence.pdf"]

        resubmitted = await filing_service.submit(owner, filing.id)
        approved = await filing_service.transition(admin, filing.id, FilingStatus.APPROVED)
        assert resubmitted.status == FilingStatus.PENDING
        assert approved.status == FilingStatus.APPROVED
        assert [h.to_status for h in approved.history] == [
            FilingStatus.PENDING,
            FilingStatus.RETURNED,
            FilingStatus.PENDING,
            FilingStatus.APPROVED,
        ]

    @pytest.mark.asyncio
    async def test_withdraw(self, filing_service, owner):
        filing = await filing_service.create_filing(owner, "org-1", FilingType.ADDRESS_CHANGE)
        withdrawn = await filing_service.withdraw(owner, filing.id)
        assert withdrawn.status == FilingStatus.WITHDRAWN
        with pytest.raises(IllegalTransition):
            await filing_service.submit(owner, filing.id)

    @pytest.mark.asyncio
    async def test_refresh_deadline(self, filing_service, filing_repository, admin):
        filing = await filing_service.create_filing(admin, "org-1", FilingType.REWARD_BASE)
        stored = filing_repository.filings[filing.id]
        stored.data["targetYear"] = 2021
        saves = filing_repository.save_count

        assert await filing_service.refresh_deadline(filing.id) == date(2021, 7, 12)
        assert filing_repository.filings[filing.id].deadline == date(2021, 7, 12)
        assert filing_repository.save_count == saves + 1

        await filing_service.refresh_deadline(filing.id)
        assert filing_repository.save_count == saves + 1
