"""
Tests for input validation utilities.
"""

from datetime import date, datetime
from decimal import Decimal

from utils.validators import (
    validate_email,
    validate_phone,
    parse_date,
    validate_positive_int,
    validate_amount,
    validate_integer_list,
    validate_card_number,
    sanitize_input
)


class TestValidateEmail:
    """Tests for email validation."""

    def test_valid_email(self):
        """Test valid email formats."""
        assert validate_email('user@example.com') is True
        assert validate_email('user.name@example.com') is True
        assert validate_email('user+tag@example.co.uk') is True

    def test_invalid_email(self):
        """Test invalid email formats."""
        assert validate_email('') is False
        assert validate_email(None) is False
        assert validate_email('invalid') is False
        assert validate_email('missing@domain') is False
        assert validate_email('spaces in@email.com') is False


class TestValidatePhone:
    """Tests for local phone validation."""

    def test_valid_phones(self):
        assert validate_phone('0771234567') is True
        assert validate_phone('+94771234567') is True

    def test_valid_phones_with_separators(self):
        """Test phones with spaces and separators."""
        assert validate_phone('077 123 4567') is True
        assert validate_phone('+94 77 123-4567') is True
        assert validate_phone('(077) 1234567') is True

    def test_invalid_phones(self):
        assert validate_phone('') is False
        assert validate_phone(None) is False
        assert validate_phone('771234567') is False  # Missing leading 0
        assert validate_phone('+9477123456') is False  # Too short
        assert validate_phone('07712abc67') is False


class TestParseDate:
    """Tests for ISO date parsing."""

    def test_parses_iso_string(self):
        assert parse_date('2026-03-01') == date(2026, 3, 1)
        assert parse_date(' 2026-03-01 ') == date(2026, 3, 1)

    def test_passes_dates_through(self):
        assert parse_date(date(2026, 3, 1)) == date(2026, 3, 1)
        assert parse_date(datetime(2026, 3, 1, 14, 30)) == date(2026, 3, 1)

    def test_rejects_malformed(self):
        assert parse_date(None) is None
        assert parse_date('') is None
        assert parse_date('01/03/2026') is None
        assert parse_date('2026-13-01') is None
        assert parse_date('2026-02-30') is None


class TestValidatePositiveInt:
    """Tests for positive integer coercion."""

    def test_accepts_integers(self):
        assert validate_positive_int(3) == 3
        assert validate_positive_int('3') == 3
        assert validate_positive_int(2.0) == 2

    def test_rejects_non_positive_and_junk(self):
        assert validate_positive_int(0) is None
        assert validate_positive_int(-1) is None
        assert validate_positive_int(2.5) is None
        assert validate_positive_int('two') is None
        assert validate_positive_int(None) is None
        assert validate_positive_int(True) is None


class TestValidateAmount:
    """Tests for money amount coercion."""

    def test_accepts_positive_amounts(self):
        assert validate_amount('25.50') == Decimal('25.50')
        assert validate_amount(10) == Decimal('10')
        assert validate_amount(0.1) == Decimal('0.1')

    def test_rejects_invalid_amounts(self):
        assert validate_amount(0) is None
        assert validate_amount('-5') is None
        assert validate_amount('abc') is None
        assert validate_amount('NaN') is None
        assert validate_amount('Infinity') is None
        assert validate_amount(None) is None
        assert validate_amount(False) is None


class TestValidateIntegerList:
    """Tests for room id lists."""

    def test_valid_list(self):
        assert validate_integer_list([3, '1', 2]) == [3, 1, 2]

    def test_invalid_lists(self):
        assert validate_integer_list([]) is None
        assert validate_integer_list(None) is None
        assert validate_integer_list('123') is None
        assert validate_integer_list([1, 1]) is None
        assert validate_integer_list([1, 0]) is None


class TestValidateCardNumber:
    """Tests for card number shape."""

    def test_valid_numbers(self):
        assert validate_card_number('4111111111111111') is True
        assert validate_card_number('4111 1111 1111 1111') is True
        assert validate_card_number('4111-1111-1111-1') is True

    def test_invalid_numbers(self):
        assert validate_card_number('') is False
        assert validate_card_number(None) is False
        assert validate_card_number('411111111111') is False  # 12 digits
        assert validate_card_number('4111 1111 abcd 1111') is False


class TestSanitizeInput:
    """Tests for input sanitization."""

    def test_trim_whitespace(self):
        assert sanitize_input('  hello  ') == 'hello'
        assert sanitize_input('\n\ttext\n') == 'text'

    def test_limit_length(self):
        assert sanitize_input('hello world', max_length=5) == 'hello'
        assert sanitize_input('short', max_length=10) == 'short'

    def test_empty_input(self):
        assert sanitize_input('') == ''
        assert sanitize_input(None) == ''
