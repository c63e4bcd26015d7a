"""
Yen Arithmetic Utilities for Reward Calculations.

Statutory reward and bonus figures are whole yen. Inputs arrive from form
fields as ints, numeric strings, floats or blanks, so everything is
normalised through Decimal before any division or truncation.

Rounding rules used by the insurance forms:
- Monthly averages are floored (fractions of a yen are discarded)
- Bonus amounts are truncated to the lower multiple of 1,000 yen
"""

from decimal import Decimal, ROUND_FLOOR, InvalidOperation
from typing import Iterable, Optional, Union
import logging

logger = logging.getLogger(__name__)

# Type alias for values that can be converted to yen
Numeric = Union[int, float, str, Decimal]

BONUS_UNIT = 1000


def to_decimal(value: Numeric) -> Decimal:
    """
    Convert a numeric value to Decimal.

    Examples:
        >>> to_decimal(100)
        Decimal('100')
        >>> to_decimal("300,000")
        Decimal('300000')
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Convert float to string first to preserve representation
        return Decimal(str(value))
    if isinstance(value, str):
        return Decimal(value.replace(",", "").strip())
    return Decimal(value)


def to_yen(value: Optional[Numeric]) -> Optional[int]:
    """
    Normalise a form value to whole yen, or None when blank/unparseable.

    Examples:
        >>> to_yen("12,345")
        12345
        >>> to_yen("") is None
        True
        >>> to_yen(99.9)
        99
    """
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        return int(to_decimal(value).to_integral_value(rounding=ROUND_FLOOR))
    except (InvalidOperation, ValueError):
        logger.debug(f"Ignoring non-numeric yen value: {value!r}")
        return None


def yen_or_zero(value: Optional[Numeric]) -> int:
    """Blank-tolerant conversion where a missing value counts as zero."""
    result = to_yen(value)
    return 0 if result is None else result


def sum_yen(values: Iterable[Optional[Numeric]]) -> int:
    """Sum form values, treating blanks as zero."""
    return sum(yen_or_zero(v) for v in values)


def floor_divide(numerator: int, denominator: int) -> int:
    """
    Divide and floor toward negative infinity.

    Examples:
        >>> floor_divide(630000, 2)
        315000
        >>> floor_divide(-5, 2)
        -3
    """
    if denominator == 0:
        raise ZeroDivisionError("denominator must be non-zero")
    return int((Decimal(numerator) / Decimal(denominator)).to_integral_value(rounding=ROUND_FLOOR))


def truncate_to_unit(amount: int, unit: int = BONUS_UNIT) -> int:
    """
    Truncate to the lower multiple of `unit`.

    Examples:
        >>> truncate_to_unit(512345)
        512000
        >>> truncate_to_unit(999)
        0
    """
    return floor_divide(amount, unit) * unit
