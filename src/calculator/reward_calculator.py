"""
Standard Reward and Bonus Calculator.

Derives the figures printed on the reward assessment (REWARD_BASE), reward
revision (REWARD_CHANGE) and bonus payment (BONUS_PAYMENT) forms.

Rules:
- Month total = currency + in-kind (blanks count as 0; a zero sum is absent)
- A month counts toward the average only if base days >= 17 and its total
  is present
- Person total = sum of counted month totals
- Average = floor(total / counted months)
- Adjusted average = floor((total - retroactive payments) / counted months),
  flooring toward negative infinity when retroactive pay exceeds the total
- Bonus amount = currency + in-kind truncated to the lower 1,000 yen

Nothing here raises on bad input: insufficient data yields None.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import logging

from domain.era_date import EraYearMonth
from .yen_math import floor_divide, sum_yen, to_yen, truncate_to_unit, yen_or_zero

logger = logging.getLogger(__name__)

# Statutory minimum paid days for a month to count toward the average
MIN_BASE_DAYS = 17

# Number of salary months in every reward period group
PERIOD_MONTHS = 3

# Reward assessment always uses April, May and June
ASSESSMENT_MONTHS = (4, 5, 6)

# New standard reward from assessment applies from September
ASSESSMENT_APPLICABLE_MONTH = 9


@dataclass
class RewardTotals:
    """Aggregate figures for one person's reward period group."""
    total: Optional[int] = None
    average: Optional[int] = None
    adjusted_average: Optional[int] = None
    valid_months: List[int] = field(default_factory=list)  # indices of counted months
    retroactive_total: int = 0

    @property
    def valid_month_count(self) -> int:
        return len(self.valid_months)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "average": self.average,
            "adjusted_average": self.adjusted_average,
            "valid_months": list(self.valid_months),
            "retroactive_total": self.retroactive_total,
        }


def salary_month_total(currency: Any, in_kind: Any) -> Optional[int]:
    """
    Compute a salary month's total.

    Examples:
        >>> salary_month_total(300000, None)
        300000
        >>> salary_month_total(250000, 12000)
        262000
        >>> salary_month_total(None, None) is None
        True
    """
    total = yen_or_zero(currency) + yen_or_zero(in_kind)
    return total or None


def is_counted_month(base_days: Any, total: Optional[int]) -> bool:
    """
    Whether a month counts toward the average.

    Examples:
        >>> is_counted_month(17, 300000)
        True
        >>> is_counted_month(16, 300000)
        False
        >>> is_counted_month(20, None)
        False
    """
    days = to_yen(base_days)
    return days is not None and days >= MIN_BASE_DAYS and total is not None


def calculate_reward_totals(
    months: Sequence[Any],
    retroactive_amounts: Sequence[Any] = (),
) -> RewardTotals:
    """
    Calculate total, average and adjusted average for a period group.

    Args:
        months: Salary months exposing `base_days` and `total`
            (as attributes or mapping keys)
        retroactive_amounts: Retroactive payment amounts (blanks are 0)

    Returns:
        RewardTotals; all figures are None when no month counts

    Examples:
        >>> months = [{"base_days": 20, "total": 300000},
        ...           {"base_days": 15, "total": 300000},
        ...           {"base_days": 30, "total": 330000}]
        >>> calculate_reward_totals(months).average
        315000
    """
    valid_indices: List[int] = []
    valid_totals: List[int] = []
    for index, month in enumerate(months):
        base_days = _read(month, "base_days")
        total = to_yen(_read(month, "total"))
        if total == 0:
            total = None
        if is_counted_month(base_days, total):
            valid_indices.append(index)
            valid_totals.append(total)

    retroactive_total = sum_yen(retroactive_amounts)
    result = RewardTotals(valid_months=valid_indices, retroactive_total=retroactive_total)

    if not valid_totals:
        return result

    count = len(valid_totals)
    result.total = sum(valid_totals)
    result.average = floor_divide(result.total, count)
    result.adjusted_average = floor_divide(result.total - retroactive_total, count)
    return result


def bonus_amount(currency: Any, in_kind: Any) -> Optional[int]:
    """
    Statutory bonus amount: payment truncated to the lower 1,000 yen.

    Examples:
        >>> bonus_amount(512345, 0)
        512000
        >>> bonus_amount(0, 0) is None
        True
    """
    amount = truncate_to_unit(yen_or_zero(currency) + yen_or_zero(in_kind))
    return amount or None


def apply_first_month(first_month: Any) -> Optional[List[int]]:
    """
    Month numbers of the three consecutive months starting at `first_month`.

    Wraps December into January. Returns None for an out-of-range month.

    Examples:
        >>> apply_first_month(11)
        [11, 12, 1]
    """
    month = to_yen(first_month)
    if month is None or not 1 <= month <= 12:
        return None
    return [((month - 1 + i) % 12) + 1 for i in range(PERIOD_MONTHS)]


def default_applicable_date(today: date) -> EraYearMonth:
    """
    Default applicable year-month for a reward assessment.

    The next September: this year's before September, next year's from
    September on.

    Examples:
        >>> default_applicable_date(date(2024, 5, 10)).to_gregorian_month()
        (2024, 9)
        >>> default_applicable_date(date(2024, 9, 1)).to_gregorian_month()
        (2025, 9)
    """
    year = today.year + 1 if today.month >= ASSESSMENT_APPLICABLE_MONTH else today.year
    return EraYearMonth.from_gregorian_month(year, ASSESSMENT_APPLICABLE_MONTH)


class RewardCalculator:
    """
    Writes derived reward figures onto payload objects.

    Works on any objects shaped like the reward payloads: salary months with
    `currency`, `in_kind`, `base_days`, `total`; persons with `salary_months`,
    `retroactive_payments`, `total`, `average`, `adjusted_average`; bonus
    persons with `payment_amount` and `bonus_amount`. Recalculation only
    assigns derived fields, so running it twice yields the same state.
    """

    def recalculate_month(self, month: Any) -> Optional[int]:
        """Recompute one salary month's total in place."""
        month.total = salary_month_total(month.currency, month.in_kind)
        return month.total

    def recalculate_person(self, person: Any) -> RewardTotals:
        """Recompute every month total and the person's aggregates in place."""
        for month in person.salary_months:
            self.recalculate_month(month)
        totals = calculate_reward_totals(
            person.salary_months,
            [p.amount for p in person.retroactive_payments],
        )
        person.total = totals.total
        person.average = totals.average
        person.adjusted_average = totals.adjusted_average
        logger.debug(
            f"Recalculated reward totals: total={totals.total} "
            f"average={totals.average} counted={totals.valid_month_count}"
        )
        return totals

    def recalculate_bonus(self, person: Any) -> Optional[int]:
        """Recompute a bonus person's truncated bonus amount in place."""
        payment = person.payment_amount
        person.bonus_amount = bonus_amount(payment.currency, payment.in_kind)
        return person.bonus_amount

    def set_first_month(self, person: Any, first_month: Any) -> None:
        """Set the first month of a reward revision and relabel its months."""
        person.first_month = to_yen(first_month)
        months = apply_first_month(first_month)
        if months is None:
            return
        for salary_month, number in zip(person.salary_months, months):
            salary_month.month = number


def _read(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


# Global singleton
_calculator: Optional[RewardCalculator] = None


def get_reward_calculator() -> RewardCalculator:
    """Get the global reward calculator instance."""
    global _calculator
    if _calculator is None:
        _calculator = RewardCalculator()
    return _calculator
