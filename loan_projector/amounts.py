"""
Decimal Amount Helpers

Conversion and rounding helpers for monetary values and rates.
NEVER uses float for monetary values.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from typing import Union
import re

# Set global decimal context for financial precision
getcontext().prec = 28  # High precision for repeated compounding

ZERO = Decimal('0')

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """
    Convert a number to Decimal without passing through binary float

    Args:
        value: Decimal, int, float or numeric string

    Returns:
        Decimal value

    Raises:
        ValueError: If the value cannot be represented as a Decimal
    """
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Cannot convert {value!r} to Decimal")
        return value
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to Decimal")
    if isinstance(value, str):
        return decimal_from_string(value)
    try:
        result = Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise ValueError(f"Cannot convert {value!r} to Decimal")

    if not result.is_finite():
        raise ValueError(f"Cannot convert {value!r} to Decimal")
    return result


def decimal_from_string(value: str) -> Decimal:
    """
    Safely convert string to Decimal, handling common formats

    Args:
        value: String representation of number

    Returns:
        Decimal value

    Raises:
        ValueError: If string cannot be converted to valid Decimal
    """
    if not value or not isinstance(value, str):
        raise ValueError("Value must be a non-empty string")

    # Remove currency symbols and whitespace
    clean_value = re.sub(r'[\s$€£¥]', '', value)

    # Anything else left over is not part of a number
    if re.search(r'[^\d.,\-+eE]', clean_value):
        raise ValueError(f"Cannot convert '{value}' to Decimal")

    # Both comma and dot - assume comma is thousands separator
    if ',' in clean_value and '.' in clean_value:
        clean_value = clean_value.replace(',', '')
    elif ',' in clean_value and clean_value.count(',') == 1:
        parts = clean_value.split(',')
        if len(parts[1]) <= 2:  # Likely decimal separator
            clean_value = clean_value.replace(',', '.')
        else:  # Likely thousands separator
            clean_value = clean_value.replace(',', '')

    try:
        result = Decimal(clean_value)
    except InvalidOperation:
        raise ValueError(f"Cannot convert '{value}' to Decimal")

    if not result.is_finite():
        raise ValueError(f"Cannot convert '{value}' to Decimal")
    return result


def round_amount(value: Decimal, places: int = 2) -> Decimal:
    """Round to display precision, half up"""
    return value.quantize(Decimal('0.1') ** places, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal, places: int = 2) -> str:
    """Format for display with thousands separators"""
    return f"{round_amount(value, places):,.{places}f}"


def format_rate(rate: Decimal, places: int = 3) -> str:
    """Format an annual rate fraction as a percentage"""
    return f"{round_amount(rate * 100, places):.{places}f}%"
