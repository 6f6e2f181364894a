"""
Customer data access functions.
Lookup and find-or-create by email for the staff booking path.
"""

from typing import Optional

from utils.validators import validate_email, validate_phone, sanitize_input


def get_customer_by_id(db, customer_id: int) -> Optional[dict]:
    """
    Get customer by ID.

    Args:
        db: Database connection
        customer_id: Customer ID

    Returns:
        dict or None: Customer data
    """
    row = db.execute('SELECT * FROM customers WHERE id = ?', (customer_id,)).fetchone()
    return dict(row) if row else None


def get_customer_by_email(db, email: str) -> Optional[dict]:
    """Get customer by email (case-insensitive)."""
    row = db.execute(
        'SELECT * FROM customers WHERE LOWER(email) = LOWER(?)',
        (email.strip(),)
    ).fetchone()
    return dict(row) if row else None


def validate_guest(guest) -> bool:
    """Check that walk-in guest details carry a name and a valid email; phone is optional."""
    if not isinstance(guest, dict):
        return False
    if guest.get('phone') and not validate_phone(str(guest['phone'])):
        return False
    return bool(sanitize_input(guest.get('full_name'))) and validate_email((guest.get('email') or '').strip())


def find_or_create_customer(db, guest: dict) -> int:
    """
    Resolve a walk-in guest to a customer record, creating it if needed.
    Must run inside the caller's transaction.

    Args:
        db: Database connection
        guest: {'full_name', 'email', 'phone'?, 'address'?}

    Returns:
        int: Customer ID

    Raises:
        ValueError: If guest details are incomplete
    """
    email = (guest.get('email') or '').strip()
    full_name = sanitize_input(guest.get('full_name'), max_length=200)
    if not full_name or not validate_email(email):
        raise ValueError('Guest details require full_name and a valid email')

    existing = get_customer_by_email(db, email)
    if existing:
        return existing['id']

    cursor = db.execute('''
        INSERT INTO customers (full_name, email, phone, address)
        VALUES (?, ?, ?, ?)
    ''', (
        full_name,
        email.lower(),
        sanitize_input(guest.get('phone'), max_length=30) or None,
        sanitize_input(guest.get('address'), max_length=300) or None
    ))
    return cursor.lastrowid
