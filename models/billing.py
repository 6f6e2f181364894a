"""
Billing calculations and billing row helpers.
Stay charges, optional-charge accumulation and invoice lookups.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from flask import current_app, has_app_context

from .status import BILLING_UNPAID

CENT = Decimal('0.01')
DEFAULT_TAX_RATE = Decimal('0.10')


# =============================================================================
# MONEY
# =============================================================================

def to_money(value) -> Decimal:
    """
    Convert a number to a Decimal rounded half-up to cents.

    Args:
        value: int, float, str or Decimal (None counts as zero)

    Returns:
        Decimal: Amount with two decimal places
    """
    if value is None:
        return Decimal('0.00')
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def count_nights(check_in: date, check_out: date) -> int:
    """Number of nights between two dates (checkout day not charged)."""
    return (check_out - check_in).days


def calculate_stay_charges(
    check_in: date,
    check_out: date,
    nightly_prices: list,
    tax_rate=DEFAULT_TAX_RATE,
    discount_rate=None
) -> dict:
    """
    Price a stay across one or more rooms.

    room_charge = sum(price * nights); an optional percentage discount is
    taken off before tax; tax = tax_rate * discounted charge.

    Args:
        check_in: Stay start
        check_out: Stay end (exclusive)
        nightly_prices: Price per night of each booked room
        tax_rate: Flat tax rate as a fraction (e.g. 0.10)
        discount_rate: Percentage discount 0-100 (optional)

    Returns:
        dict: {'nights', 'room_charge', 'discount_amount', 'tax_amount', 'total_amount'}
    """
    nights = count_nights(check_in, check_out)
    room_charge = to_money(sum((to_money(price) * nights for price in nightly_prices), Decimal('0')))

    discount_amount = Decimal('0.00')
    if discount_rate:
        discount_amount = to_money(room_charge * Decimal(str(discount_rate)) / Decimal('100'))

    taxable = room_charge - discount_amount
    tax_amount = to_money(taxable * Decimal(str(tax_rate)))

    return {
        'nights': nights,
        'room_charge': room_charge,
        'discount_amount': discount_amount,
        'tax_amount': tax_amount,
        'total_amount': to_money(taxable + tax_amount),
    }


# =============================================================================
# BILLING ROWS
# =============================================================================

def get_billing_by_reservation(db, reservation_id: int) -> dict:
    """
    Get the billing record of a reservation.

    Args:
        db: Database connection
        reservation_id: Reservation ID

    Returns:
        dict or None: Billing row with its itemised charges
    """
    row = db.execute('SELECT * FROM billing WHERE reservation_id = ?', (reservation_id,)).fetchone()
    if not row:
        return None

    billing = dict(row)
    charges = db.execute('''
        SELECT id, amount, description, created_at
        FROM billing_charges
        WHERE billing_id = ?
        ORDER BY id
    ''', (billing['id'],)).fetchall()
    billing['charges'] = [dict(charge) for charge in charges]
    return billing


def add_charge_to_billing(db, reservation_id: int, amount: Decimal, description: str, billing_date: date) -> dict:
    """
    Accumulate an optional charge, opening an Unpaid bill if none exists.
    Must run inside the caller's transaction.

    Args:
        db: Database connection
        reservation_id: Reservation ID
        amount: Positive charge amount
        description: What the charge is for
        billing_date: Date to stamp on a newly created bill

    Returns:
        dict: Billing row after the update
    """
    amount = to_money(amount)
    existing = db.execute('SELECT * FROM billing WHERE reservation_id = ?', (reservation_id,)).fetchone()

    if existing is None:
        cursor = db.execute('''
            INSERT INTO billing (reservation_id, total_amount, tax_amount, other_charges, billing_date, status)
            VALUES (?, ?, 0, ?, ?, ?)
        ''', (reservation_id, amount, amount, billing_date, BILLING_UNPAID))
        billing_id = cursor.lastrowid
    else:
        billing_id = existing['id']
        db.execute('''
            UPDATE billing
            SET other_charges = ?, total_amount = ?
            WHERE id = ?
        ''', (
            to_money(existing['other_charges']) + amount,
            to_money(existing['total_amount']) + amount,
            billing_id
        ))

    db.execute('''
        INSERT INTO billing_charges (billing_id, amount, description)
        VALUES (?, ?, ?)
    ''', (billing_id, amount, description))

    return get_billing_by_reservation(db, reservation_id)


def settle_stay_billing(db, reservation_id: int, charges: dict, billing_date: date, status: str) -> dict:
    """
    Write the final stay bill, keeping optional charges already accumulated.
    Must run inside the caller's transaction.

    Args:
        db: Database connection
        reservation_id: Reservation ID
        charges: Output of calculate_stay_charges()
        billing_date: Billing date
        status: Billing status to set

    Returns:
        dict: Billing row after the upsert
    """
    existing = db.execute('SELECT * FROM billing WHERE reservation_id = ?', (reservation_id,)).fetchone()

    if existing is None:
        db.execute('''
            INSERT INTO billing (reservation_id, total_amount, tax_amount, other_charges, billing_date, status)
            VALUES (?, ?, ?, 0, ?, ?)
        ''', (reservation_id, charges['total_amount'], charges['tax_amount'], billing_date, status))
    else:
        other_charges = to_money(existing['other_charges'])
        db.execute('''
            UPDATE billing
            SET total_amount = ?, tax_amount = ?, billing_date = ?, status = ?
            WHERE id = ?
        ''', (
            charges['total_amount'] + other_charges,
            charges['tax_amount'],
            billing_date,
            status,
            existing['id']
        ))

    return get_billing_by_reservation(db, reservation_id)


def get_tax_rate() -> Decimal:
    """Flat tax rate from the application config (10% outside an app context)."""
    if has_app_context():
        return Decimal(str(current_app.config.get('TAX_RATE', DEFAULT_TAX_RATE)))
    return DEFAULT_TAX_RATE
