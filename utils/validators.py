"""
Input validation helper functions.
Provides validation for common input types.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation


def validate_email(email: str) -> bool:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        True if valid email format
    """
    if not email:
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def validate_phone(phone: str) -> bool:
    """
    Validate local phone number format.
    Accepts 10 digits starting with 0, or +94 followed by 9 digits.

    Args:
        phone: Phone number to validate

    Returns:
        True if valid phone format
    """
    if not phone:
        return False

    # Remove spaces and common separators
    cleaned = re.sub(r'[\s\-\(\)]', '', phone)

    patterns = [
        r'^0[0-9]{9}$',       # 0XXXXXXXXX
        r'^\+94[0-9]{9}$',    # +94XXXXXXXXX
    ]

    return any(bool(re.match(pattern, cleaned)) for pattern in patterns)


def parse_date(value) -> date | None:
    """
    Parse a YYYY-MM-DD string (or pass through a date).

    Args:
        value: date, datetime or ISO date string

    Returns:
        date, or None if missing or malformed
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError:
        return None


def validate_positive_int(value) -> int | None:
    """
    Coerce a value to a strictly positive integer.

    Args:
        value: int or numeric string

    Returns:
        int, or None if missing, non-integral or not positive
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    if isinstance(value, float) and value != number:
        return None
    return number if number > 0 else None


def validate_amount(value) -> Decimal | None:
    """
    Coerce a money amount to a strictly positive Decimal.

    Args:
        value: int, float, Decimal or numeric string

    Returns:
        Decimal, or None if missing, malformed or not positive
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def validate_integer_list(values) -> list | None:
    """
    Validate a non-empty list of positive integer ids without duplicates.

    Args:
        values: Iterable of ids

    Returns:
        list of ints, or None if invalid
    """
    if not values or isinstance(values, (str, bytes)):
        return None
    ids = []
    for value in values:
        number = validate_positive_int(value)
        if number is None or number in ids:
            return None
        ids.append(number)
    return ids


def validate_card_number(card_number: str) -> bool:
    """
    Validate a card number's shape (13-19 digits, spaces allowed).

    Args:
        card_number: Card number as entered

    Returns:
        True if the digits look like a card number
    """
    if not card_number:
        return False
    cleaned = re.sub(r'[\s\-]', '', str(card_number))
    return bool(re.match(r'^[0-9]{13,19}$', cleaned))


def sanitize_input(text: str, max_length: int = None) -> str:
    """
    Sanitize text input by trimming and limiting length.

    Args:
        text: Text to sanitize
        max_length: Maximum length (optional)

    Returns:
        Sanitized text
    """
    if not text:
        return ''

    # Strip whitespace
    sanitized = text.strip()

    # Limit length if specified
    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
