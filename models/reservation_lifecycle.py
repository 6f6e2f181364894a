"""
Reservation lifecycle operations.
Creation, check-in, check-out with billing, date extension, optional
charges, cancellation, completion and payment details.

State machine (reservation_status):

    No_show / Confirmed  --payment details, check-in-->  Confirmed
    Confirmed            --check-out, sweep, complete-->  Completed
    any open state       --cancel------------------->  Cancelled

Every multi-row write runs inside one BEGIN IMMEDIATE transaction.
"""

import logging
import sqlite3

from database.connection import transaction
from utils.datetime_helpers import get_today
from utils.messages import MESSAGES
from utils.results import ErrorKind, OperationResult, ok, fail
from utils.validators import (
    parse_date,
    validate_positive_int,
    validate_integer_list,
    validate_amount,
    validate_card_number,
    sanitize_input,
)
from .availability import find_available_rooms, get_conflicting_bookings
from .billing import (
    calculate_stay_charges,
    settle_stay_billing,
    add_charge_to_billing,
    get_tax_rate,
)
from .customer import get_customer_by_id, validate_guest, find_or_create_customer
from .reservation_queries import get_reservation
from .room import set_room_status, release_rooms
from .status import (
    ROOM_MAINTENANCE,
    ROOM_OCCUPIED,
    RESERVATION_NO_SHOW,
    RESERVATION_CONFIRMED,
    RESERVATION_CANCELLED,
    RESERVATION_COMPLETED,
    RESERVATION_TERMINAL_STATES,
    PAYMENT_CONFIRMED,
    PAYMENT_PAID,
    BILLING_PAID,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CREATE
# =============================================================================

def create_reservation(
    db,
    branch_id: int,
    check_in_date,
    check_out_date,
    number_of_occupants,
    customer_id: int = None,
    guest: dict = None,
    room_type_id: int = None,
    number_of_rooms=None,
    room_ids: list = None
) -> OperationResult:
    """
    Create a reservation and hold its rooms.

    Two entry paths:
    - Customer self-service (customer_id): starts No_show until payment
      details are submitted.
    - Staff booking for a guest (guest dict): the customer is resolved or
      created by email and the reservation starts Confirmed.

    Rooms are chosen automatically (room_type_id + number_of_rooms) or given
    explicitly (room_ids).

    Args:
        db: Database connection
        branch_id: Branch ID
        check_in_date: Stay start (date or YYYY-MM-DD)
        check_out_date: Stay end, exclusive
        number_of_occupants: Guests staying
        customer_id: Authenticated customer (self-service path)
        guest: {'full_name', 'email', 'phone'?, 'address'?} (staff path)
        room_type_id: Room type for automatic selection
        number_of_rooms: Rooms wanted
        room_ids: Explicit room selection

    Returns:
        OperationResult: 201 with the reservation projection on success
    """
    check_in = parse_date(check_in_date)
    check_out = parse_date(check_out_date)
    if check_in is None or check_out is None:
        return fail(ErrorKind.VALIDATION, MESSAGES['invalid_date'])
    if check_out <= check_in:
        return fail(ErrorKind.VALIDATION, MESSAGES['invalid_date_range'])

    occupants = validate_positive_int(number_of_occupants)
    if occupants is None:
        return fail(ErrorKind.VALIDATION, MESSAGES['invalid_occupants'])

    if customer_id is None and guest is None:
        return fail(ErrorKind.VALIDATION, MESSAGES['customer_required'])
    if customer_id is None and not validate_guest(guest):
        return fail(ErrorKind.VALIDATION, MESSAGES['invalid_guest'])

    branch_id = validate_positive_int(branch_id)
    if branch_id is None:
        return _invalid_id('branch_id')
    if customer_id is not None:
        customer_id = validate_positive_int(customer_id)
        if customer_id is None:
            return _invalid_id('customer_id')

    if room_ids is not None:
        selected_ids = validate_integer_list(room_ids)
        if selected_ids is None:
            return fail(ErrorKind.VALIDATION, MESSAGES['invalid_room_ids'])
        if number_of_rooms is not None and validate_positive_int(number_of_rooms) != len(selected_ids):
            return fail(ErrorKind.VALIDATION, MESSAGES['room_count_mismatch'])
        room_count = len(selected_ids)
    else:
        if room_type_id is None or number_of_rooms is None:
            return fail(ErrorKind.VALIDATION, MESSAGES['room_selection_required'])
        room_type_id = validate_positive_int(room_type_id)
        if room_type_id is None:
            return _invalid_id('room_type_id')
        room_count = validate_positive_int(number_of_rooms)
        if room_count is None:
            return fail(ErrorKind.VALIDATION, MESSAGES['invalid_room_count'])

    initial_status = RESERVATION_NO_SHOW if customer_id is not None else RESERVATION_CONFIRMED

    try:
        with transaction(db):
            if not _row_exists(db, 'branches', branch_id):
                return fail(ErrorKind.NOT_FOUND, MESSAGES['branch_not_found'].format(branch_id=branch_id))

            if customer_id is not None and get_customer_by_id(db, customer_id) is None:
                return fail(ErrorKind.NOT_FOUND, MESSAGES['customer_not_found'].format(customer_id=customer_id))

            if room_ids is not None:
                selection = _check_explicit_rooms(db, branch_id, selected_ids, check_in, check_out)
            else:
                if not _row_exists(db, 'room_types', room_type_id):
                    return fail(
                        ErrorKind.NOT_FOUND,
                        MESSAGES['room_type_not_found'].format(room_type_id=room_type_id)
                    )
                selection = find_available_rooms(db, branch_id, room_type_id, check_in, check_out, room_count)

            if not selection:
                return selection
            rooms = selection.data['room_ids']

            if customer_id is None:
                customer_id = find_or_create_customer(db, guest)

            cursor = db.execute('''
                INSERT INTO reservations (
                    branch_id, customer_id, check_in_date, check_out_date,
                    number_of_occupants, number_of_rooms, payment_status, reservation_status
                ) VALUES (?, ?, ?, ?, ?, ?, 'Pending', ?)
            ''', (branch_id, customer_id, check_in, check_out, occupants, len(rooms), initial_status))
            reservation_id = cursor.lastrowid

            for room_id in rooms:
                db.execute(
                    'INSERT INTO booked_rooms (reservation_id, room_id) VALUES (?, ?)',
                    (reservation_id, room_id)
                )

            set_room_status(db, rooms, ROOM_OCCUPIED)

    except sqlite3.IntegrityError as e:
        if not _is_overlap_violation(e):
            raise
        return _storage_conflict(e, MESSAGES['rooms_unavailable'], requested=room_count)

    logger.info(
        f"Reservation {reservation_id} created for customer {customer_id}: "
        f"rooms {rooms} {check_in}..{check_out} ({initial_status})"
    )
    return ok(
        data=get_reservation(db, reservation_id),
        message=MESSAGES['reservation_created'],
        status_code=201
    )


def _check_explicit_rooms(db, branch_id: int, room_ids: list, check_in, check_out) -> OperationResult:
    """Validate an explicit room selection against branch, status and bookings."""
    placeholders = ','.join('?' * len(room_ids))
    rows = db.execute(
        f'SELECT id, branch_id, status FROM rooms WHERE id IN ({placeholders})',
        room_ids
    ).fetchall()

    if len(rows) != len(room_ids):
        found = {row['id'] for row in rows}
        return fail(
            ErrorKind.NOT_FOUND,
            MESSAGES['rooms_not_found'],
            room_ids=[room_id for room_id in room_ids if room_id not in found]
        )

    if any(row['branch_id'] != branch_id for row in rows):
        return fail(ErrorKind.VALIDATION, MESSAGES['rooms_not_in_branch'])

    maintenance = [row['id'] for row in rows if row['status'] == ROOM_MAINTENANCE]
    conflicts = get_conflicting_bookings(db, room_ids, check_in, check_out)
    if maintenance or conflicts:
        unavailable = sorted(set(maintenance) | {c['room_id'] for c in conflicts})
        logger.warning(f"Explicit rooms unavailable for {check_in}..{check_out}: {unavailable}")
        return fail(
            ErrorKind.INSUFFICIENT_AVAILABILITY,
            MESSAGES['rooms_unavailable'],
            requested=len(room_ids),
            available=len(room_ids) - len(unavailable),
            unavailable_room_ids=unavailable
        )

    return ok(data={'room_ids': list(room_ids)})


# =============================================================================
# CHECK-IN / CHECK-OUT
# =============================================================================

def check_in_reservation(db, reservation_id: int) -> OperationResult:
    """
    Check a guest in. The reservation must be Confirmed; its rooms become
    Occupied and the status stays Confirmed.

    Args:
        db: Database connection
        reservation_id: Reservation ID

    Returns:
        OperationResult: Reservation projection on success
    """
    with transaction(db):
        reservation = _load_reservation(db, reservation_id)
        if reservation is None:
            return _not_found(reservation_id)
        if reservation['reservation_status'] != RESERVATION_CONFIRMED:
            return fail(
                ErrorKind.INVALID_STATE,
                MESSAGES['checkin_requires_confirmed'],
                status=reservation['reservation_status']
            )

        set_room_status(db, _booked_room_ids(db, reservation_id), ROOM_OCCUPIED)
        db.execute(
            'UPDATE reservations SET updated_at = CURRENT_TIMESTAMP WHERE id = ?',
            (reservation_id,)
        )

    logger.info(f"Reservation {reservation_id} checked in")
    return ok(data=get_reservation(db, reservation_id), message=MESSAGES['reservation_checked_in'])


def check_out_reservation(db, reservation_id: int, billing_date=None) -> OperationResult:
    """
    Check a guest out and settle the bill.

    room_charge = nights x sum of nightly room prices
    tax         = TAX_RATE x room_charge
    total       = room_charge + tax + optional charges already on the bill

    Args:
        db: Database connection
        reservation_id: Reservation ID
        billing_date: Date to stamp on the bill (default: today)

    Returns:
        OperationResult: data {'reservation', 'billing', 'charges'}
    """
    billing_date = parse_date(billing_date) or get_today()

    with transaction(db):
        reservation = _load_reservation(db, reservation_id)
        if reservation is None:
            return _not_found(reservation_id)
        if reservation['reservation_status'] != RESERVATION_CONFIRMED:
            return fail(
                ErrorKind.INVALID_STATE,
                MESSAGES['not_checked_in'],
                status=reservation['reservation_status']
            )

        rooms = db.execute('''
            SELECT rm.id, COALESCE(rm.price_per_night, rt.base_price) as price_per_night
            FROM booked_rooms br
            JOIN rooms rm ON br.room_id = rm.id
            JOIN room_types rt ON rm.room_type_id = rt.id
            WHERE br.reservation_id = ?
            ORDER BY rm.id
        ''', (reservation_id,)).fetchall()

        charges = calculate_stay_charges(
            reservation['check_in_date'],
            reservation['check_out_date'],
            [room['price_per_night'] for room in rooms],
            tax_rate=get_tax_rate()
        )
        billing = settle_stay_billing(db, reservation_id, charges, billing_date, BILLING_PAID)

        release_rooms(db, [room['id'] for room in rooms], exclude_reservation_id=reservation_id)
        db.execute('''
            UPDATE reservations
            SET reservation_status = ?, payment_status = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (RESERVATION_COMPLETED, PAYMENT_PAID, reservation_id))

    logger.info(
        f"Reservation {reservation_id} checked out: {charges['nights']} nights, "
        f"total {billing['total_amount']}"
    )
    return ok(
        data={
            'reservation': get_reservation(db, reservation_id),
            'billing': billing,
            'charges': charges,
        },
        message=MESSAGES['reservation_checked_out']
    )


# =============================================================================
# DATE EXTENSION
# =============================================================================

def update_checkout_date(db, reservation_id: int, new_check_out_date) -> OperationResult:
    """
    Extend a stay to a later checkout date.

    Only the added nights [current checkout, new checkout) are checked
    against other bookings on the reservation's rooms.

    Args:
        db: Database connection
        reservation_id: Reservation ID
        new_check_out_date: New checkout date (date or YYYY-MM-DD)

    Returns:
        OperationResult: Reservation projection on success
    """
    new_check_out = parse_date(new_check_out_date)
    if new_check_out is None:
        return fail(ErrorKind.VALIDATION, MESSAGES['invalid_date'])

    try:
        with transaction(db):
            reservation = _load_reservation(db, reservation_id)
            if reservation is None:
                return _not_found(reservation_id)

            status = reservation['reservation_status']
            if status in RESERVATION_TERMINAL_STATES:
                return fail(
                    ErrorKind.INVALID_STATE,
                    MESSAGES['dates_locked'].format(status=status),
                    status=status
                )

            current_check_out = reservation['check_out_date']
            if new_check_out <= current_check_out:
                return fail(ErrorKind.VALIDATION, MESSAGES['checkout_not_later'])

            room_ids = _booked_room_ids(db, reservation_id)
            conflicts = get_conflicting_bookings(
                db, room_ids, current_check_out, new_check_out,
                exclude_reservation_id=reservation_id
            )
            if conflicts:
                logger.warning(
                    f"Extension of reservation {reservation_id} to {new_check_out} "
                    f"blocked by {len(conflicts)} booking(s)"
                )
                return fail(
                    ErrorKind.INSUFFICIENT_AVAILABILITY,
                    MESSAGES['extension_unavailable'],
                    conflicts=conflicts
                )

            db.execute('''
                UPDATE reservations
                SET check_out_date = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
            ''', (new_check_out, reservation_id))

    except sqlite3.IntegrityError as e:
        if not _is_overlap_violation(e):
            raise
        return _storage_conflict(e, MESSAGES['extension_unavailable'])

    logger.info(f"Reservation {reservation_id} extended from {current_check_out} to {new_check_out}")
    return ok(data=get_reservation(db, reservation_id), message=MESSAGES['reservation_extended'])


# =============================================================================
# CHARGES AND PAYMENT
# =============================================================================

def add_optional_charge(db, reservation_id: int, amount, description: str = None, today=None) -> OperationResult:
    """
    Add an extra charge (minibar, laundry...) to a reservation's bill.

    Args:
        db: Database connection
        reservation_id: Reservation ID
        amount: Positive amount
        description: What the charge is for
        today: Billing date for a newly opened bill (default: today)

    Returns:
        OperationResult: 201 with the billing row
    """
    charge = validate_amount(amount)
    if charge is None:
        return fail(ErrorKind.VALIDATION, MESSAGES['invalid_amount'])

    with transaction(db):
        reservation = _load_reservation(db, reservation_id)
        if reservation is None:
            return _not_found(reservation_id)
        if reservation['reservation_status'] == RESERVATION_CANCELLED:
            return fail(ErrorKind.INVALID_STATE, MESSAGES['charge_on_cancelled'])

        billing = add_charge_to_billing(
            db,
            reservation_id,
            charge,
            sanitize_input(description, max_length=200) or None,
            parse_date(today) or get_today()
        )

    logger.info(f"Charge {charge} added to reservation {reservation_id}")
    return ok(data=billing, message=MESSAGES['charge_added'], status_code=201)


def add_payment_details(
    db,
    reservation_id: int,
    card_type: str,
    card_number: str,
    card_exp_month,
    card_exp_year
) -> OperationResult:
    """
    Record card details for a reservation and confirm it.

    Only the last four digits of the card are stored; nothing is charged.

    Returns:
        OperationResult: 201 with the reservation projection
    """
    card_type = sanitize_input(card_type, max_length=30)
    exp_month = validate_positive_int(card_exp_month)
    exp_year = validate_positive_int(card_exp_year)
    if not card_type or not validate_card_number(card_number) or not exp_month or exp_month > 12 or not exp_year:
        return fail(ErrorKind.VALIDATION, MESSAGES['invalid_card'])

    digits = ''.join(ch for ch in str(card_number) if ch.isdigit())

    with transaction(db):
        reservation = _load_reservation(db, reservation_id)
        if reservation is None:
            return _not_found(reservation_id)

        status = reservation['reservation_status']
        if status in RESERVATION_TERMINAL_STATES:
            return fail(
                ErrorKind.INVALID_STATE,
                MESSAGES['payment_on_closed'].format(status=status),
                status=status
            )

        existing = db.execute(
            'SELECT id FROM reservation_payment_details WHERE reservation_id = ?',
            (reservation_id,)
        ).fetchone()
        if existing:
            return fail(ErrorKind.VALIDATION, MESSAGES['payment_details_exist'])

        db.execute('''
            INSERT INTO reservation_payment_details (
                reservation_id, card_type, card_last_four, card_exp_month, card_exp_year
            ) VALUES (?, ?, ?, ?, ?)
        ''', (reservation_id, card_type, digits[-4:], exp_month, exp_year))

        db.execute('''
            UPDATE reservations
            SET payment_status = ?, reservation_status = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (PAYMENT_CONFIRMED, RESERVATION_CONFIRMED, reservation_id))

    logger.info(f"Payment details recorded for reservation {reservation_id}")
    return ok(
        data=get_reservation(db, reservation_id),
        message=MESSAGES['payment_details_added'],
        status_code=201
    )


# =============================================================================
# CANCEL / COMPLETE
# =============================================================================

def cancel_reservation(db, reservation_id: int) -> OperationResult:
    """
    Cancel a reservation and release its rooms.

    A second cancel fails with INVALID_STATE and changes nothing. Booked room
    links are kept as history.

    Args:
        db: Database connection
        reservation_id: Reservation ID

    Returns:
        OperationResult: Reservation projection on success
    """
    with transaction(db):
        reservation = _load_reservation(db, reservation_id)
        if reservation is None:
            return _not_found(reservation_id)

        status = reservation['reservation_status']
        if status == RESERVATION_CANCELLED:
            return fail(ErrorKind.INVALID_STATE, MESSAGES['already_cancelled'], status=status)
        if status == RESERVATION_COMPLETED:
            return fail(ErrorKind.INVALID_STATE, MESSAGES['cancel_completed'], status=status)

        db.execute('''
            UPDATE reservations
            SET reservation_status = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (RESERVATION_CANCELLED, reservation_id))
        release_rooms(db, _booked_room_ids(db, reservation_id), exclude_reservation_id=reservation_id)

    logger.info(f"Reservation {reservation_id} cancelled (was {status})")
    return ok(data=get_reservation(db, reservation_id), message=MESSAGES['reservation_cancelled'])


def complete_reservation(db, reservation_id: int) -> OperationResult:
    """Guest-initiated completion of a paid, still-open reservation."""
    with transaction(db):
        reservation = _load_reservation(db, reservation_id)
        if reservation is None:
            return _not_found(reservation_id)

        status = reservation['reservation_status']
        if status == RESERVATION_CANCELLED:
            return fail(ErrorKind.INVALID_STATE, MESSAGES['complete_cancelled'], status=status)
        if status == RESERVATION_COMPLETED:
            return fail(ErrorKind.INVALID_STATE, MESSAGES['already_completed'], status=status)
        if reservation['payment_status'] != PAYMENT_PAID:
            return fail(
                ErrorKind.INVALID_STATE,
                MESSAGES['complete_unpaid'],
                payment_status=reservation['payment_status']
            )

        db.execute('''
            UPDATE reservations
            SET reservation_status = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (RESERVATION_COMPLETED, reservation_id))
        release_rooms(db, _booked_room_ids(db, reservation_id), exclude_reservation_id=reservation_id)

    logger.info(f"Reservation {reservation_id} completed")
    return ok(data=get_reservation(db, reservation_id), message=MESSAGES['reservation_completed'])


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _load_reservation(db, reservation_id: int):
    return db.execute('SELECT * FROM reservations WHERE id = ?', (reservation_id,)).fetchone()


def _booked_room_ids(db, reservation_id: int) -> list:
    rows = db.execute(
        'SELECT room_id FROM booked_rooms WHERE reservation_id = ? ORDER BY room_id',
        (reservation_id,)
    ).fetchall()
    return [row['room_id'] for row in rows]


def _row_exists(db, table: str, row_id) -> bool:
    """Check a primary key in one of the reference tables."""
    return db.execute(f'SELECT 1 FROM {table} WHERE id = ?', (row_id,)).fetchone() is not None


def _invalid_id(field: str) -> OperationResult:
    return fail(ErrorKind.VALIDATION, MESSAGES['invalid_id'].format(field=field), field=field)


def _not_found(reservation_id: int) -> OperationResult:
    return fail(
        ErrorKind.NOT_FOUND,
        MESSAGES['reservation_not_found'].format(reservation_id=reservation_id)
    )


def _is_overlap_violation(error: sqlite3.IntegrityError) -> bool:
    """True when the error comes from the room overlap triggers."""
    return 'room_overlap' in str(error)


def _storage_conflict(error: sqlite3.IntegrityError, message: str, **detail) -> OperationResult:
    """
    Report a storage-level overlap rejection as insufficient availability.
    Another writer committed an overlapping booking between check and insert.
    """
    logger.warning(f"Overlap guard rejected write: {error}")
    return fail(
        ErrorKind.INSUFFICIENT_AVAILABILITY,
        message,
        cause=ErrorKind.CONFLICT.value,
        **detail
    )
