"""
Era-Tagged Dates (Japanese Calendar).

Statutory filings record dates as (era, year-within-era, month, day). This
module converts those tuples to and from Gregorian dates and renders the
numeric display code printed on the paper forms.

Conversion rules:
- Era to Gregorian: add the era offset (reiwa +2018, heisei +1988,
  showa +1925, taisho +1911). Meiji has no offset and cannot be converted.
- Gregorian to era: year < 1926 -> taisho, 1926-1988 -> showa,
  1989-2018 -> heisei, >= 2019 -> reiwa.

An EraDate whose label is on the wrong side of a boundary for its Gregorian
year still converts forward but will not round-trip to the same label.
"""

import calendar
from datetime import date
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, Field

from .exceptions import InvalidDate


class Era(str, Enum):
    """Japanese calendar eras recognised on filing forms."""
    MEIJI = "meiji"
    TAISHO = "taisho"
    SHOWA = "showa"
    HEISEI = "heisei"
    REIWA = "reiwa"


# Gregorian year = era year + offset
ERA_OFFSETS: Dict[Era, int] = {
    Era.TAISHO: 1911,
    Era.SHOWA: 1925,
    Era.HEISEI: 1988,
    Era.REIWA: 2018,
}

# Numeric era codes printed on the forms
ERA_CODES: Dict[Era, int] = {
    Era.MEIJI: 1,
    Era.TAISHO: 3,
    Era.SHOWA: 5,
    Era.HEISEI: 7,
    Era.REIWA: 9,
}

# First Gregorian year labelled with each era, newest first
_ERA_BOUNDARIES: Tuple[Tuple[int, Era], ...] = (
    (2019, Era.REIWA),
    (1989, Era.HEISEI),
    (1926, Era.SHOWA),
)


def era_for_year(gregorian_year: int) -> Era:
    """
    Select the era label for a Gregorian year.

    Examples:
        >>> era_for_year(2024)
        <Era.REIWA: 'reiwa'>
        >>> era_for_year(1925)
        <Era.TAISHO: 'taisho'>
    """
    for start_year, era in _ERA_BOUNDARIES:
        if gregorian_year >= start_year:
            return era
    return Era.TAISHO


def gregorian_year(era: Era, era_year: int) -> int:
    """
    Convert an era-relative year to a Gregorian year.

    Raises:
        InvalidDate: If the era has no known offset (meiji)
    """
    offset = ERA_OFFSETS.get(Era(era))
    if offset is None:
        raise InvalidDate(era, era_year, 0, reason=f"no year offset defined for era {Era(era).value}")
    return era_year + offset


class EraDate(BaseModel):
    """
    A calendar date expressed in a Japanese era.

    The year is era-relative and unconstrained here so that from_gregorian()
    is total; to_gregorian() and form validation reject years below 1.
    """
    era: Era = Field(default=Era.REIWA, description="Era label")
    year: int = Field(description="Year within the era")
    month: int = Field(description="Month (1-12)")
    day: int = Field(description="Day of month (1-31)")

    def to_gregorian(self) -> date:
        """Convert to a Gregorian date (raises InvalidDate)."""
        return to_gregorian(self)

    def to_display_code(self) -> str:
        """Render the numeric form code, e.g. 9-060401."""
        return format_era_code(self)

    def __str__(self) -> str:
        return f"{self.era.value} {self.year}/{self.month}/{self.day}"


class EraYearMonth(BaseModel):
    """A year-month in a Japanese era (used for reward periods)."""
    era: Era = Field(default=Era.REIWA, description="Era label")
    year: int = Field(description="Year within the era")
    month: int = Field(description="Month (1-12)")

    def to_gregorian_month(self) -> Tuple[int, int]:
        """Return (gregorian_year, month)."""
        return gregorian_year(self.era, self.year), self.month

    @classmethod
    def from_gregorian_month(cls, year: int, month: int) -> "EraYearMonth":
        era = era_for_year(year)
        offset = ERA_OFFSETS[era]
        return cls(era=era, year=year - offset, month=month)


def to_gregorian(value: EraDate) -> date:
    """
    Convert an EraDate to a Gregorian date.

    Args:
        value: Era-tagged date

    Returns:
        Equivalent datetime.date

    Raises:
        InvalidDate: If the era cannot be converted, the era year is below 1,
            or the tuple is not a real calendar date (e.g. 31 April, 29 February
            in a common year)

    Examples:
        >>> to_gregorian(EraDate(era=Era.REIWA, year=6, month=4, day=1))
        datetime.date(2024, 4, 1)
    """
    year = gregorian_year(value.era, value.year)
    if value.year < 1:
        raise InvalidDate(value.era, value.year, value.month, value.day, reason="era year must be 1 or later")
    if not 1 <= value.month <= 12:
        raise InvalidDate(value.era, value.year, value.month, value.day, reason="month out of range")
    last_day = calendar.monthrange(year, value.month)[1]
    if not 1 <= value.day <= last_day:
        raise InvalidDate(
            value.era, value.year, value.month, value.day,
            reason=f"day out of range (month has {last_day} days)",
        )
    return date(year, value.month, value.day)


def from_gregorian(value: date) -> EraDate:
    """
    Convert a Gregorian date to an EraDate.

    Total for every date from year 1; dates before 1912 yield a taisho label
    with a non-positive era year.

    Examples:
        >>> from_gregorian(date(2024, 4, 1))
        EraDate(era=<Era.REIWA: 'reiwa'>, year=6, month=4, day=1)
    """
    era = era_for_year(value.year)
    return EraDate(era=era, year=value.year - ERA_OFFSETS[era], month=value.month, day=value.day)


def format_era_code(value: EraDate) -> str:
    """
    Render the display-only encoding (eraCode)-(YY)(MM)(DD).

    This is a formatter, not a parser.

    Examples:
        >>> format_era_code(EraDate(era=Era.REIWA, year=6, month=4, day=1))
        '9-060401'
        >>> format_era_code(EraDate(era=Era.SHOWA, year=45, month=12, day=3))
        '5-451203'
    """
    code = ERA_CODES[Era(value.era)]
    return f"{code}-{value.year:02d}{value.month:02d}{value.day:02d}"


def try_to_gregorian(value: Optional[EraDate]) -> Optional[date]:
    """Convert when possible, returning None for absent or invalid dates."""
    if value is None:
        return None
    try:
        return to_gregorian(value)
    except InvalidDate:
        return None
