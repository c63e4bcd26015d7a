"""
Payloads of the reward assessment, reward revision and bonus payment forms.

Every reward person carries exactly three salary months and three
retroactive payment entries; derived totals are written by the
RewardCalculator.
"""

from typing import List, Optional

from pydantic import Field

from domain.era_date import EraDate, EraYearMonth
from .common import PaymentAmount, PayloadModel, SubmitterInfo

# Reward assessment months (April-June)
_ASSESSMENT_LABELS = ("april", "may", "june")


class SalaryMonth(PayloadModel):
    """One month of paid salary within a reward period group."""
    month: Optional[int] = None
    base_days: Optional[int] = None
    currency: Optional[int] = None
    in_kind: Optional[int] = None
    total: Optional[int] = None


class RetroactivePayment(PayloadModel):
    """Back pay included in a month's salary."""
    month: Optional[str] = None
    amount: Optional[int] = None


class PreviousStandardReward(PayloadModel):
    """Standard reward in force before this filing, in thousands of yen."""
    health_insurance: Optional[int] = None
    pension_insurance: Optional[int] = None


class SalaryChange(PayloadModel):
    """Month and direction of a fixed-wage change."""
    month: Optional[int] = None
    type: Optional[str] = Field(default=None, description="raise or cut")


def _assessment_months() -> List[SalaryMonth]:
    return [SalaryMonth(month=m) for m in (4, 5, 6)]


def _assessment_retroactive() -> List[RetroactivePayment]:
    return [RetroactivePayment(month=label) for label in _ASSESSMENT_LABELS]


def _blank_months() -> List[SalaryMonth]:
    return [SalaryMonth() for _ in range(3)]


def _blank_retroactive() -> List[RetroactivePayment]:
    return [RetroactivePayment() for _ in range(3)]


class RewardPerson(PayloadModel):
    """Fields shared by assessment and revision person entries."""
    employee_id: Optional[str] = Field(default=None, exclude=True)
    insurance_number: Optional[str] = None
    name: Optional[str] = None
    birth_date: Optional[EraDate] = None
    personal_number: Optional[str] = None
    previous_standard_reward: PreviousStandardReward = Field(default_factory=PreviousStandardReward)
    previous_change_date: Optional[EraYearMonth] = None
    salary_change: SalaryChange = Field(default_factory=SalaryChange)
    retroactive_payments: List[RetroactivePayment] = Field(
        default_factory=_blank_retroactive, min_length=3, max_length=3,
    )
    salary_months: List[SalaryMonth] = Field(
        default_factory=_blank_months, min_length=3, max_length=3,
    )
    total: Optional[int] = None
    average: Optional[int] = None
    adjusted_average: Optional[int] = None
    remarks: Optional[str] = None


class RewardBasePerson(RewardPerson):
    """Person on the standard reward assessment (April-June salaries)."""
    applicable_date: Optional[EraYearMonth] = None
    retroactive_payments: List[RetroactivePayment] = Field(
        default_factory=_assessment_retroactive, min_length=3, max_length=3,
    )
    salary_months: List[SalaryMonth] = Field(
        default_factory=_assessment_months, min_length=3, max_length=3,
    )


class RewardChangePerson(RewardPerson):
    """Person on a monthly reward revision (three months from the change)."""
    change_date: Optional[EraYearMonth] = None
    first_month: Optional[int] = None


class RewardBasePayload(PayloadModel):
    submitter: SubmitterInfo = Field(default_factory=SubmitterInfo)
    target_year: Optional[int] = Field(default=None, description="Assessment year (Gregorian)")
    persons: List[RewardBasePerson] = Field(default_factory=list)


class RewardChangePayload(PayloadModel):
    submitter: SubmitterInfo = Field(default_factory=SubmitterInfo)
    persons: List[RewardChangePerson] = Field(default_factory=list)


class BonusPerson(PayloadModel):
    """One bonus recipient; `bonus_amount` is derived."""
    employee_id: Optional[str] = Field(default=None, exclude=True)
    insurance_number: Optional[str] = None
    name: Optional[str] = None
    birth_date: Optional[EraDate] = None
    personal_number: Optional[str] = None
    bonus_payment_date: Optional[EraDate] = None
    payment_amount: PaymentAmount = Field(default_factory=PaymentAmount)
    bonus_amount: Optional[int] = None
    remarks: Optional[str] = None


class BonusPaymentPayload(PayloadModel):
    submitter: SubmitterInfo = Field(default_factory=SubmitterInfo)
    common_bonus_payment_date: Optional[EraDate] = None
    persons: List[BonusPerson] = Field(default_factory=list)
