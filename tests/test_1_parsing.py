"""
Number and Date Parsing Tests

Test Coverage:
- Strict and lossy amount parsing (Indian and western grouping)
- Operand detection used by rule comparisons
- Day-first dates with two and four digit years, ISO fallback
- Canonical dd/mm/yyyy rendering and month keys
"""

from datetime import date, datetime

import numpy as np
import pandas as pd
import pytest

from superbank.config import EPOCH
from superbank.parsing import (
    format_date_ddmmyyyy,
    is_number,
    month_key,
    normalize_date_string,
    parse_amount,
    parse_amount_or_zero,
    parse_date,
    to_iso_date,
    to_number,
    try_parse_date,
)


def create_test_amount_data():
    """Amount strings as they appear on statements, with expected values."""
    return {
        'indian_grouping': ('11,11,111.00', 1111111.00),
        'western_grouping': ('1,111,111.00', 1111111.00),
        'plain': ('500', 500.0),
        'negative': ('-250.75', -250.75),
        'rupee_symbol': ('₹ 1,200.50', 1200.50),
        'dollar_symbol': ('$50.00', 50.0),
        'parentheses': ('(1,000.00)', -1000.0),
        'padded': ('  42.10 ', 42.10),
        'zero': ('0.00', 0.0),
    }


@pytest.mark.dependency()
class TestAmountParsing:
    """Test suite for amount parsing."""

    @pytest.mark.dependency()
    def test_statement_amounts(self):
        for raw, expected in create_test_amount_data().values():
            assert parse_amount(raw) == pytest.approx(expected)

    @pytest.mark.dependency(depends=["TestAmountParsing::test_statement_amounts"])
    def test_numbers_pass_through(self):
        assert parse_amount(500) == 500.0
        assert parse_amount(-12.5) == -12.5
        assert parse_amount(np.float64(3.25)) == 3.25

    @pytest.mark.parametrize("raw", ['abc', '', '   ', None, '12abc', '1.2.3', float('nan'), True, [], '1e400', '-1e400'])
    def test_invalid_amounts_raise(self, raw):
        with pytest.raises(ValueError):
            parse_amount(raw)

    def test_lossy_fallback(self):
        """Unreadable amounts coerce to zero."""
        assert parse_amount_or_zero('11,11,111.00') == 1111111.00
        assert parse_amount_or_zero('abc') == 0
        assert parse_amount_or_zero(None) == 0
        assert parse_amount_or_zero('') == 0
        assert parse_amount_or_zero(float('nan')) == 0
        assert parse_amount_or_zero('1e400') == 0


class TestOperands:
    """Operand detection for rule comparisons."""

    @pytest.mark.parametrize("value", ['10', ' 10 ', '-3.5', '+7', '.5', '5.', '1e3', 0, 2.5])
    def test_numbers(self, value):
        assert is_number(value)

    @pytest.mark.parametrize("value", ['', 'abc', '1,000', 'nan', 'inf', None, True, ['1']])
    def test_not_numbers(self, value):
        assert not is_number(value)

    def test_to_number(self):
        assert to_number(' 12.5 ') == 12.5
        assert to_number('CR') is None


@pytest.mark.dependency()
class TestDateParsing:
    """Test suite for statement date parsing."""

    @pytest.mark.dependency()
    def test_short_year_and_iso_agree(self):
        assert parse_date('05/03/23') == date(2023, 3, 5)
        assert parse_date('2023-03-05') == date(2023, 3, 5)
        assert parse_date('05/03/23') == parse_date('2023-03-05')

    @pytest.mark.dependency(depends=["TestDateParsing::test_short_year_and_iso_agree"])
    @pytest.mark.parametrize("raw", ['05/03/2023', '05-03-2023', '5/3/2023', '05-03-23', '5-3-23'])
    def test_day_first_variants(self, raw):
        assert parse_date(raw) == date(2023, 3, 5)

    def test_generic_fallbacks(self):
        assert parse_date('2023/03/05') == date(2023, 3, 5)
        assert parse_date('2023-03-05 10:15:00') == date(2023, 3, 5)
        assert parse_date('2023-03-05T10:15:00') == date(2023, 3, 5)
        assert parse_date('5 March 2023') == date(2023, 3, 5)
        assert parse_date('05-Mar-23') == date(2023, 3, 5)
        assert parse_date('Mar 5, 2023') == date(2023, 3, 5)
        assert parse_date('20230305') == date(2023, 3, 5)

    def test_date_objects(self):
        assert parse_date(date(2023, 3, 5)) == date(2023, 3, 5)
        assert parse_date(datetime(2023, 3, 5, 12, 0)) == date(2023, 3, 5)
        assert parse_date(pd.Timestamp('2023-03-05')) == date(2023, 3, 5)

    @pytest.mark.parametrize("raw", [
        '', 'not a date', '31/02/2023', None, 12345, pd.NaT,
        '10:30', 'Mar', '12', 'March 2023', '123456', '5/3/202',
    ])
    def test_unreadable_dates_use_epoch(self, raw):
        assert parse_date(raw) == EPOCH
        assert try_parse_date(raw) is None


class TestDateFormatting:
    """Test suite for canonical date rendering."""

    def test_format(self):
        assert format_date_ddmmyyyy(date(2023, 3, 5)) == '05/03/2023'
        assert format_date_ddmmyyyy(datetime(2023, 12, 25, 8, 30)) == '25/12/2023'

    def test_normalize_date_string(self):
        assert normalize_date_string('5-3-23') == '05/03/2023'
        assert normalize_date_string('2023-03-05') == '05/03/2023'
        assert normalize_date_string('pending') == 'pending'
        assert normalize_date_string('') == ''
        assert normalize_date_string(20230305) == 20230305

    def test_iso_and_month(self):
        assert to_iso_date('05/03/23') == '2023-03-05'
        assert month_key('05/03/2023') == '2023-03'
        assert month_key('2023-11-30') == '2023-11'
        assert month_key('garbage') is None
        assert to_iso_date('garbage') is None
        assert month_key('Mar') is None
        assert month_key('10:30') is None
