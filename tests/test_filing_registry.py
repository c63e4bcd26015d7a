"""
Tests for the filing schema registry and the per-type schemas.

These tests verify:
1. Exactly eleven filing types are registered, with their categories
2. Office defaults seeded from the organization per type
3. Per-type required fields
4. Storage round trip: camelCase keys, absent fields omitted,
   directory linkage never persisted
5. The ActiveFiling value
"""

import os
import sys
from datetime import date

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from domain.aggregates import Filing, FilingCategory
from domain.era_date import Era, EraDate, EraYearMonth
from domain.exceptions import NotFound, ValidationFailed
from domain.value_objects import IdentificationType
from forms.filing_types import FilingType, INTERNAL_TO_EXTERNAL
from forms.payloads import (
    AcquisitionPerson,
    BonusPerson,
    InsuranceAcquisitionPayload,
    InsuranceLossPayload,
    LossPerson,
    LossReason,
    PaymentAmount,
    PersonAddress,
    RewardChangePerson,
    SalaryMonth,
)
from forms.registry import ActiveFiling, FilingSchemaRegistry, get_schema


EXTERNAL_TYPES = {
    FilingType.INSURANCE_ACQUISITION,
    FilingType.INSURANCE_LOSS,
    FilingType.DEPENDENT_CHANGE_EXTERNAL,
    FilingType.ADDRESS_CHANGE_EXTERNAL,
    FilingType.NAME_CHANGE_EXTERNAL,
    FilingType.REWARD_BASE,
    FilingType.REWARD_CHANGE,
    FilingType.BONUS_PAYMENT,
}
INTERNAL_TYPES = {FilingType.DEPENDENT_CHANGE, FilingType.ADDRESS_CHANGE, FilingType.NAME_CHANGE}


def _birth() -> EraDate:
    return EraDate(era=Era.HEISEI, year=2, month=5, day=20)


# =============================================================================
# CATALOG
# =============================================================================

class TestFilingTypes:
    """Filing type catalog and registry contents."""

    def test_exactly_eleven_registered(self):
        supported = FilingSchemaRegistry.get_supported_types()
        assert len(supported) == 11
        assert set(supported) == EXTERNAL_TYPES | INTERNAL_TYPES

    def test_categories(self):
        for filing_type in EXTERNAL_TYPES:
            assert filing_type.category == FilingCategory.EXTERNAL
        for filing_type in INTERNAL_TYPES:
            assert filing_type.category == FilingCategory.INTERNAL
            assert filing_type.is_internal

    def test_internal_counterparts(self):
        assert INTERNAL_TO_EXTERNAL[FilingType.NAME_CHANGE] == FilingType.NAME_CHANGE_EXTERNAL
        assert FilingType.ADDRESS_CHANGE_EXTERNAL.internal_counterpart == FilingType.ADDRESS_CHANGE
        assert FilingType.REWARD_BASE.internal_counterpart is None

    def test_lookup_by_code(self):
        schema = get_schema("insurance_loss")
        assert schema.filing_type == FilingType.INSURANCE_LOSS
        assert FilingSchemaRegistry.is_supported("BONUS_PAYMENT")

    def test_unknown_code(self):
        with pytest.raises(NotFound):
            get_schema("PAYROLL_TAX")
        assert FilingSchemaRegistry.is_supported("PAYROLL_TAX") is False


# =============================================================================
# OFFICE DEFAULTS
# =============================================================================

class TestOfficeDefaults:
    """Submitter block seeded from the organization snapshot."""

    def test_full_office_block(self, organization):
        payload = get_schema(FilingType.INSURANCE_ACQUISITION).build_payload(organization)
        submitter = payload.submitter
        assert submitter.office_symbol == "01-ABC"
        assert submitter.office_number == "12345"
        assert submitter.office_address == "〒100-0001 TokyoChiyoda1-1-1Sakura Bldg 3F"
        assert submitter.office_name == "Sakura Trading Co."
        assert submitter.owner_name == "Yamada Taro"
        assert submitter.phone_number == "03-1234-5678"

    def test_reward_change_block(self, organization):
        submitter = get_schema(FilingType.REWARD_CHANGE).build_payload(organization).submitter
        assert submitter.office_address == "TokyoChiyoda1-1-1Sakura Bldg 3F"
        assert submitter.office_number is None
        assert submitter.owner_name is None
        assert submitter.office_symbol == "01-ABC"

    @pytest.mark.parametrize("filing_type", sorted(INTERNAL_TYPES - {FilingType.DEPENDENT_CHANGE}))
    def test_internal_forms_have_no_submitter(self, organization, filing_type):
        assert get_schema(filing_type).build_payload(organization).submitter is None

    def test_organization_is_not_mutated(self, organization):
        before = organization.model_dump()
        get_schema(FilingType.BONUS_PAYMENT).build_payload(organization)
        assert organization.model_dump() == before

    @pytest.mark.parametrize("filing_type,fields", [
        (FilingType.INSURANCE_ACQUISITION, {"office_symbol", "office_number", "office_address", "office_name"}),
        (FilingType.INSURANCE_LOSS, {"office_number", "office_address", "office_name"}),
        (FilingType.ADDRESS_CHANGE_EXTERNAL, {"office_symbol", "office_address", "office_name"}),
        (FilingType.BONUS_PAYMENT, {"office_address", "office_name"}),
        (FilingType.NAME_CHANGE_EXTERNAL, {"office_address", "office_name"}),
    ])
    def test_required_office_fields(self, filing_type, fields):
        schema = get_schema(filing_type)
        payload = schema.build_payload()
        reported = {e.field for e in schema.validate(payload) if e.field.startswith("submitter.")}
        assert reported == {f"submitter.{name}" for name in fields}


# =============================================================================
# PER-TYPE REQUIRED FIELDS
# =============================================================================

class TestAcquisitionSchema:
    """Qualification acquisition validation."""

    def _person(self, **overrides) -> AcquisitionPerson:
        values = dict(
            last_name="Suzuki", first_name="Hanako",
            last_name_kana="スズキ", first_name_kana="ハナコ",
            birth_date=_birth(), gender="female",
            acquisition_date=EraDate(era=Era.REIWA, year=6, month=4, day=1),
            identification_type=IdentificationType.PERSONAL_NUMBER,
            personal_number="123456789012",
        )
        values.update(overrides)
        return AcquisitionPerson(**values)

    def test_valid_person(self, organization):
        schema = get_schema(FilingType.INSURANCE_ACQUISITION)
        payload = schema.build_payload(organization)
        payload.persons.append(self._person())
        assert schema.validate(payload) == []

    def test_requires_a_person(self, organization):
        schema = get_schema(FilingType.INSURANCE_ACQUISITION)
        assert [e.field for e in schema.validate(schema.build_payload(organization))] == ["persons"]

    def test_malformed_personal_number(self, organization):
        schema = get_schema(FilingType.INSURANCE_ACQUISITION)
        payload = schema.build_payload(organization)
        payload.persons.append(self._person(personal_number="1234"))
        assert [e.field for e in schema.validate(payload)] == ["persons[0].personal_number"]

    def test_basic_pension_number_requires_address(self, organization):
        schema = get_schema(FilingType.INSURANCE_ACQUISITION)
        payload = schema.build_payload(organization)
        payload.persons.append(self._person(
            identification_type=IdentificationType.BASIC_PENSION_NUMBER,
            personal_number=None,
            basic_pension_number="1234-567890",
        ))
        fields = {e.field for e in schema.validate(payload)}
        assert fields == {
            "persons[0].address.postal_code",
            "persons[0].address.prefecture",
            "persons[0].address.city",
        }
        payload.persons[0].address = PersonAddress(postal_code="1500001", prefecture="Tokyo", city="Shibuya")
        assert schema.validate(payload) == []

    def test_invalid_acquisition_date(self, organization):
        schema = get_schema(FilingType.INSURANCE_ACQUISITION)
        payload = schema.build_payload(organization)
        payload.persons.append(self._person(acquisition_date=EraDate(era=Era.REIWA, year=6, month=4, day=31)))
        assert [e.field for e in schema.validate(payload)] == ["persons[0].acquisition_date"]

    def test_remuneration_total_recalculated(self):
        schema = get_schema(FilingType.INSURANCE_ACQUISITION)
        payload = InsuranceAcquisitionPayload(persons=[self._person()])
        payload.persons[0].remuneration.currency = 250000
        payload.persons[0].remuneration.in_kind = 5000
        schema.recalculate(payload)
        assert payload.persons[0].remuneration.total == 255000


class TestLossSchema:
    """Qualification loss conditional fields."""

    def _person(self, **overrides) -> LossPerson:
        values = dict(
            last_name="Tanaka", first_name="Ichiro",
            last_name_kana="タナカ", first_name_kana="イチロウ",
            birth_date=EraDate(era=Era.SHOWA, year=35, month=1, day=15),
            loss_date=EraDate(era=Era.REIWA, year=6, month=4, day=1),
        )
        values.update(overrides)
        return LossPerson(**values)

    @pytest.mark.parametrize("reason,extra", [
        (LossReason.RETIREMENT, "retirement_date"),
        (LossReason.DEATH, "death_date"),
    ])
    def test_reason_specific_dates(self, organization, reason, extra):
        schema = get_schema(FilingType.INSURANCE_LOSS)
        payload = InsuranceLossPayload(
            submitter=schema.submitter_defaults(organization),
            persons=[self._person(loss_reason=reason)],
        )
        assert [e.field for e in schema.validate(payload)] == [f"persons[0].{extra}"]

    def test_over70_flag_requires_date(self, organization):
        schema = get_schema(FilingType.INSURANCE_LOSS)
        payload = InsuranceLossPayload(
            submitter=schema.submitter_defaults(organization),
            persons=[self._person(loss_reason=LossReason.OVER_75, over70_not_applicable=True)],
        )
        assert [e.field for e in schema.validate(payload)] == ["persons[0].over70_not_applicable_date"]

    def test_prefill_from_retired_employee(self, organization, retiring_employee):
        payload = get_schema(FilingType.INSURANCE_LOSS).build_payload(organization, retiring_employee)
        person = payload.persons[0]
        assert person.loss_reason == LossReason.RETIREMENT
        assert person.retirement_date.to_gregorian() == date(2024, 3, 31)
        assert person.loss_date.to_gregorian() == date(2024, 4, 1)
        assert person.identification_type == IdentificationType.BASIC_PENSION_NUMBER


class TestChangeSchemas:
    """Address and name change forms."""

    def test_address_change_requirements(self, employee):
        schema = get_schema(FilingType.ADDRESS_CHANGE)
        payload = schema.build_payload(employee=employee)
        fields = {e.field for e in schema.validate(payload)}
        assert fields == {"change_date", "new_address.postal_code", "new_address.prefecture", "new_address.city"}
        assert payload.old_address.city == "Shibuya"

    def test_name_change_prefills_old_names(self, employee):
        schema = get_schema(FilingType.NAME_CHANGE)
        payload = schema.build_payload(employee=employee)
        person = payload.insured_person
        assert (person.old_last_name, person.old_first_name) == ("Suzuki", "Hanako")
        fields = {e.field for e in schema.validate(payload)}
        assert fields == {
            "insured_person.new_last_name",
            "insured_person.new_first_name",
            "insured_person.new_last_name_kana",
            "insured_person.new_first_name_kana",
        }


class TestRewardSchemas:
    """Reward assessment, revision and bonus forms."""

    def test_reward_base_prefill(self, organization, employee):
        schema = get_schema(FilingType.REWARD_BASE)
        payload = schema.build_payload(organization, employee, today=date(2024, 6, 1))
        assert payload.target_year == 2024
        person = payload.persons[0]
        assert person.applicable_date == EraYearMonth(era=Era.REIWA, year=6, month=9)
        assert person.name == "Suzuki Hanako"
        assert schema.validate(payload) == []

    def test_base_days_range(self, organization, employee):
        schema = get_schema(FilingType.REWARD_BASE)
        payload = schema.build_payload(organization, employee, today=date(2024, 6, 1))
        payload.persons[0].salary_months[1].base_days = 40
        assert [e.field for e in schema.validate(payload)] == ["persons[0].salary_months[1].base_days"]

    def test_reward_change_first_month(self, organization, employee):
        schema = get_schema(FilingType.REWARD_CHANGE)
        payload = schema.build_payload(organization, employee)
        payload.persons[0].salary_months = [
            SalaryMonth(base_days=20, currency=300000) for _ in range(3)
        ]
        schema.set_first_month(payload, 0, 11)
        person = payload.persons[0]
        assert [m.month for m in person.salary_months] == [11, 12, 1]
        assert person.average == 300000
        assert [e.field for e in schema.validate(payload)] == ["persons[0].change_date"]

    def test_reward_change_invalid_year_month(self, organization):
        schema = get_schema(FilingType.REWARD_CHANGE)
        payload = schema.build_payload(organization)
        payload.persons.append(RewardChangePerson(
            name="Suzuki Hanako", birth_date=_birth(),
            change_date=EraYearMonth(era=Era.REIWA, year=6, month=13),
        ))
        assert [e.field for e in schema.validate(payload)] == ["persons[0].change_date"]

    def test_bonus_requires_common_date(self, organization):
        schema = get_schema(FilingType.BONUS_PAYMENT)
        payload = schema.build_payload(organization)
        payload.persons.append(BonusPerson(
            name="Suzuki Hanako", birth_date=_birth(),
            payment_amount=PaymentAmount(currency=500500),
        ))
        schema.recalculate(payload)
        assert payload.persons[0].bonus_amount == 500000
        assert [e.field for e in schema.validate(payload)] == ["common_bonus_payment_date"]


# =============================================================================
# STORAGE ROUND TRIP
# =============================================================================

class TestPersistenceShape:
    """Serialized payloads stored in Filing.data."""

    def test_absent_fields_omitted(self, organization, employee):
        schema = get_schema(FilingType.INSURANCE_ACQUISITION)
        data = schema.dump(schema.build_payload(organization, employee))
        person = data["persons"][0]
        assert "basicPensionNumber" not in person
        assert "remarks" not in person
        assert person["personalNumber"] == "123456789012"
        assert person["lastNameKana"] == "スズキ"
        assert data["submitter"]["officeSymbol"] == "01-ABC"

    def test_linkage_never_persisted(self, organization, employee):
        schema = get_schema(FilingType.INSURANCE_ACQUISITION)
        payload = schema.build_payload(organization, employee)
        assert payload.persons[0].employee_id == "emp-1"
        data = schema.dump(payload)
        assert "employeeId" not in data["persons"][0]
        assert "employee_id" not in data["persons"][0]

    def test_round_trip_preserves_structure(self, organization, employee):
        schema = get_schema(FilingType.REWARD_BASE)
        data = schema.dump(schema.build_payload(organization, employee, today=date(2024, 6, 1)))
        assert schema.dump(schema.parse(data)) == data

    def test_parse_accepts_snake_case(self):
        payload = get_schema(FilingType.NAME_CHANGE).parse({"insured_person": {"new_last_name": "Sato"}})
        assert payload.insured_person.new_last_name == "Sato"


# =============================================================================
# ACTIVE FILING
# =============================================================================

class TestActiveFiling:
    """The single tagged value replacing per-form flags."""

    def test_start_and_tag_comparison(self, organization, employee):
        active = ActiveFiling.start(FilingType.BONUS_PAYMENT, organization, employee)
        assert active.is_type("BONUS_PAYMENT")
        assert not active.is_type(FilingType.REWARD_BASE)

    def test_require_valid(self, organization):
        active = ActiveFiling.start(FilingType.BONUS_PAYMENT, organization)
        with pytest.raises(ValidationFailed) as exc_info:
            active.require_valid()
        assert "common_bonus_payment_date" in exc_info.value.fields

    def test_from_filing(self, organization, employee):
        active = ActiveFiling.start(FilingType.NAME_CHANGE_EXTERNAL, organization, employee)
        filing = Filing(
            type=FilingType.NAME_CHANGE_EXTERNAL.value,
            category=FilingCategory.EXTERNAL,
            organization_id="org-1",
            data=active.to_data(),
        )
        reopened = ActiveFiling.from_filing(filing)
        assert reopened.type == FilingType.NAME_CHANGE_EXTERNAL
        assert reopened.payload.insured_person.old_last_name == "Suzuki"
        assert reopened.payload.insured_person.employee_id is None
