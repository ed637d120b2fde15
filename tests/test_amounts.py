"""
Test suite for amounts and dates helpers

Tests Decimal conversion, display rounding and the calendar helpers used by
accrual and simulation.
"""

import pytest
from decimal import Decimal
from datetime import date

from loan_projector.amounts import (
    to_decimal, decimal_from_string, round_amount, format_amount, format_rate
)
from loan_projector.dates import days_in_year, day_of_year, add_months


class TestDecimalConversion:
    """Test conversion to Decimal"""

    def test_decimal_passthrough(self):
        value = Decimal('12.345')
        assert to_decimal(value) is value

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal('0.1')

    def test_int(self):
        assert to_decimal(400) == Decimal('400')

    def test_bool_rejected(self):
        with pytest.raises(ValueError):
            to_decimal(True)

    def test_string_formats(self):
        assert decimal_from_string("$1,234.56") == Decimal('1234.56')
        assert decimal_from_string("1,5") == Decimal('1.5')
        assert decimal_from_string("1,500") == Decimal('1500')
        assert decimal_from_string(" -20.00 ") == Decimal('-20.00')

    def test_invalid_strings(self):
        with pytest.raises(ValueError, match="non-empty"):
            decimal_from_string("")
        with pytest.raises(ValueError, match="Cannot convert"):
            decimal_from_string("abc")

    def test_letters_are_not_stripped(self):
        """Text around digits is rejected rather than silently dropped"""
        for text in ("10k", "1.5 million", "12abc", "USD 100"):
            with pytest.raises(ValueError, match="Cannot convert"):
                decimal_from_string(text)

        assert decimal_from_string("€ 12,50") == Decimal('12.50')
        assert decimal_from_string("1e3") == Decimal('1000')

    def test_non_finite_numbers_rejected(self):
        for value in (float("nan"), float("inf"), float("-inf"), Decimal("NaN")):
            with pytest.raises(ValueError, match="Cannot convert"):
                to_decimal(value)

        with pytest.raises(ValueError):
            decimal_from_string("inf")


class TestDisplay:
    """Test rounding and formatting"""

    def test_round_half_up(self):
        assert round_amount(Decimal('2.675')) == Decimal('2.68')
        assert round_amount(Decimal('2.665'), 1) == Decimal('2.7')

    def test_format_amount(self):
        assert format_amount(Decimal('1234.5')) == "1,234.50"

    def test_format_rate(self):
        assert format_rate(Decimal('0.05')) == "5.000%"
        assert format_rate(Decimal('0.06875'), 2) == "6.88%"


class TestDates:
    """Test calendar helpers"""

    def test_days_in_year(self):
        assert days_in_year(2024) == 366
        assert days_in_year(2023) == 365
        assert days_in_year(1900) == 365
        assert days_in_year(2000) == 366

    def test_day_of_year(self):
        assert day_of_year(date(2024, 1, 1)) == 1
        assert day_of_year(date(2023, 12, 22)) == 356
        assert day_of_year(date(2024, 12, 31)) == 366

    def test_add_months(self):
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)
        assert add_months(date(2024, 12, 1), 1) == date(2025, 1, 1)
        assert add_months(date(2024, 5, 9), 0) == date(2024, 5, 9)

    def test_add_months_clamps_to_month_end(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 1, 31), 2) == date(2024, 3, 31)
