"""
Statutory deadline calculation.

DeadlinePolicy is the seam the calling layer depends on; the statutory
reference policy below encodes the usual Japan Pension Service rules:

    INSURANCE_ACQUISITION      join date + 5 days
    INSURANCE_LOSS             retirement date + 6 days (loss date + 5)
    DEPENDENT_CHANGE_EXTERNAL  fact date + 5 days
    REWARD_BASE                10 July of the target year
    REWARD_CHANGE              last day of the third month after the change month
    BONUS_PAYMENT              payment date + 5 days
    ADDRESS/NAME_CHANGE_EXTERNAL  creation date + prompt days

A deadline falling on Saturday moves to Monday (+2), on Sunday to Monday
(+1). Holidays are not considered. Internal filings have no statutory
deadline.
"""

import calendar
import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta
from typing import Any, List, Optional, Sequence, Union

from config.filing_config_loader import FilingConfigLoader, get_config_loader
from config.settings import FilingSettings, get_settings
from domain.aggregates import Filing
from domain.era_date import EraYearMonth, try_to_gregorian
from domain.exceptions import InvalidDate
from domain.repositories import IEmployeeDirectory
from domain.value_objects import EmployeeRecord
from forms.filing_types import FilingType, MULTI_PERSON_TYPES
from forms.payloads import BonusPaymentPayload, DependentChangePayload, RewardBasePayload
from forms.prefill import find_employee
from forms.registry import get_schema

logger = logging.getLogger(__name__)

ACQUISITION_DAYS = 5
LOSS_DAYS_AFTER_RETIREMENT = 6  # loss date is the day after retirement
LOSS_DAYS = 5
DEPENDENT_CHANGE_DAYS = 5
BONUS_DAYS = 5
REWARD_BASE_MONTH = 7
REWARD_BASE_DAY = 10
REWARD_CHANGE_MONTHS = 3

PROMPT_TYPES = frozenset({FilingType.ADDRESS_CHANGE_EXTERNAL, FilingType.NAME_CHANGE_EXTERNAL})


def adjust_for_business_day(value: date) -> date:
    """
    Move a weekend deadline to the following Monday.

    Examples:
        >>> adjust_for_business_day(date(2024, 4, 6))  # Saturday
        datetime.date(2024, 4, 8)
        >>> adjust_for_business_day(date(2024, 4, 7))  # Sunday
        datetime.date(2024, 4, 8)
    """
    weekday = value.weekday()
    if weekday == 5:
        return value + timedelta(days=2)
    if weekday == 6:
        return value + timedelta(days=1)
    return value


def end_of_month_after(year: int, month: int, months: int) -> date:
    """Last day of the month `months` after (year, month)."""
    index = year * 12 + (month - 1) + months
    target_year, target_month = divmod(index, 12)
    target_month += 1
    return date(target_year, target_month, calendar.monthrange(target_year, target_month)[1])


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def _filing_type(value: Any) -> FilingType:
    return value if isinstance(value, FilingType) else FilingType.from_code(str(value))


class DeadlinePolicy(ABC):
    """Computes the statutory deadline of a filing."""

    @abstractmethod
    async def calculate_legal_deadline(self, filing: Filing, filing_type: Any) -> Optional[date]:
        """
        Calculate the legal deadline of a filing.

        Args:
            filing: The filing
            filing_type: Its filing type (enum or code)

        Returns:
            Deadline date, or None when the filing has no statutory deadline
            or the inputs it depends on are missing
        """
        pass


class StatutoryDeadlinePolicy(DeadlinePolicy):
    """
    Reference deadline policy.

    Multi-person types are computed per person entry and the filing's
    deadline is the earliest of them.
    """

    def __init__(
        self,
        employee_directory: Optional[IEmployeeDirectory] = None,
        settings: Optional[FilingSettings] = None,
        loader: Optional[FilingConfigLoader] = None,
    ):
        self.employee_directory = employee_directory
        self.settings = settings or get_settings()
        self.loader = loader or get_config_loader()

    async def _employees(self, filing: Filing) -> List[EmployeeRecord]:
        if self.employee_directory is None:
            return []
        return await self.employee_directory.get_employees_by_organization(filing.organization_id)

    async def calculate_legal_deadline(self, filing: Filing, filing_type: Any) -> Optional[date]:
        filing_type = _filing_type(filing_type)
        if filing_type.is_internal:
            logger.debug(f"Filing {filing.id} is internal, no statutory deadline")
            return None

        if filing_type == FilingType.REWARD_BASE:
            # Same date for every person, so it does not depend on the entries
            result = self._reward_base_deadline(get_schema(filing_type).parse(filing.data), filing)
        elif filing_type in MULTI_PERSON_TYPES:
            deadlines = [d for d in (await self.calculate_person_deadlines(filing, filing_type)) if d is not None]
            result = min(deadlines) if deadlines else None
        elif filing_type == FilingType.DEPENDENT_CHANGE_EXTERNAL:
            payload = get_schema(filing_type).parse(filing.data)
            result = self._dependent_change_deadline(payload)
        elif filing_type in PROMPT_TYPES:
            result = self.prompt_deadline(filing, filing_type)
        else:
            result = None

        logger.debug(f"Deadline for filing {filing.id} ({filing_type.value}): {result}")
        return result

    async def calculate_person_deadlines(self, filing: Filing, filing_type: Any) -> List[Optional[date]]:
        """
        Deadline of each person entry of a multi-person filing.

        Returns:
            One entry per person, None where it cannot be determined
        """
        filing_type = _filing_type(filing_type)
        payload = get_schema(filing_type).parse(filing.data)

        if filing_type == FilingType.INSURANCE_ACQUISITION:
            employees = await self._employees(filing)
            return [self._acquisition_deadline(p, employees) for p in payload.persons]
        if filing_type == FilingType.INSURANCE_LOSS:
            employees = await self._employees(filing)
            return [self._loss_deadline(p, employees) for p in payload.persons]
        if filing_type == FilingType.REWARD_BASE:
            deadline = self._reward_base_deadline(payload, filing)
            return [deadline for _ in payload.persons]
        if filing_type == FilingType.REWARD_CHANGE:
            return [self._reward_change_deadline(p.change_date) for p in payload.persons]
        if filing_type == FilingType.BONUS_PAYMENT:
            return [self._bonus_deadline(p, payload) for p in payload.persons]
        return []

    # ------------------------------------------------------------------
    # Per-type rules
    # ------------------------------------------------------------------

    @staticmethod
    def _acquisition_deadline(person: Any, employees: Sequence[EmployeeRecord]) -> Optional[date]:
        employee = find_employee(person, employees)
        start = employee.join_date if employee and employee.join_date else try_to_gregorian(person.acquisition_date)
        if start is None:
            return None
        return adjust_for_business_day(start + timedelta(days=ACQUISITION_DAYS))

    @staticmethod
    def _loss_deadline(person: Any, employees: Sequence[EmployeeRecord]) -> Optional[date]:
        employee = find_employee(person, employees)
        retirement = employee.retirement_date if employee and employee.retirement_date else None
        retirement = retirement or try_to_gregorian(person.retirement_date)
        if retirement is not None:
            return adjust_for_business_day(retirement + timedelta(days=LOSS_DAYS_AFTER_RETIREMENT))
        loss_date = try_to_gregorian(person.loss_date)
        if loss_date is None:
            return None
        return adjust_for_business_day(loss_date + timedelta(days=LOSS_DAYS))

    @staticmethod
    def _dependent_change_deadline(payload: DependentChangePayload) -> Optional[date]:
        if payload.fact_date is None:
            return None
        return adjust_for_business_day(payload.fact_date + timedelta(days=DEPENDENT_CHANGE_DAYS))

    @staticmethod
    def _reward_base_deadline(payload: RewardBasePayload, filing: Filing) -> date:
        year = payload.target_year or _as_date(filing.created_at).year
        return adjust_for_business_day(date(year, REWARD_BASE_MONTH, REWARD_BASE_DAY))

    @staticmethod
    def _reward_change_deadline(change_date: Optional[EraYearMonth]) -> Optional[date]:
        if change_date is None or not 1 <= change_date.month <= 12:
            return None
        try:
            year, month = change_date.to_gregorian_month()
        except InvalidDate as e:
            logger.debug(f"Unusable change date: {e}")
            return None
        if change_date.year < 1:
            return None
        return adjust_for_business_day(end_of_month_after(year, month, REWARD_CHANGE_MONTHS))

    @staticmethod
    def _bonus_deadline(person: Any, payload: BonusPaymentPayload) -> Optional[date]:
        paid = try_to_gregorian(person.bonus_payment_date) or try_to_gregorian(payload.common_bonus_payment_date)
        if paid is None:
            return None
        return adjust_for_business_day(paid + timedelta(days=BONUS_DAYS))

    def prompt_deadline(self, filing: Filing, filing_type: FilingType) -> date:
        """Creation date plus the configured number of days."""
        entry = self.loader.get_entry(filing_type.value)
        days = entry.deadline_days if entry and entry.deadline_days is not None else self.settings.prompt_deadline_days
        return adjust_for_business_day(_as_date(filing.created_at) + timedelta(days=days))

    @staticmethod
    def overdue_deadline(created_at: Union[date, datetime]) -> date:
        """
        Deadline used once the statutory deadline has already passed.

        An external filing prepared from an employee's internal request is
        then due one business day after the request was made.
        """
        return adjust_for_business_day(_as_date(created_at) + timedelta(days=1))

