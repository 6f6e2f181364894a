"""
Blocked booking operations.
Travel-company bulk holds: creation, cancellation, billing and lookups.

Blocked bookings share the overlap rule of reservations, so a room can never
be committed twice across either booking kind.
"""

import logging
import sqlite3
from typing import Optional

from flask import current_app, has_app_context

from database.connection import transaction
from utils.datetime_helpers import get_today
from utils.messages import MESSAGES
from utils.results import ErrorKind, OperationResult, ok, fail
from utils.validators import parse_date, validate_positive_int
from .availability import find_available_rooms
from .billing import calculate_stay_charges, get_tax_rate
from .room import set_room_status, release_rooms
from .status import ROOM_OCCUPIED, BLOCK_ACTIVE, BLOCK_CANCELLED, BILLING_UNPAID

logger = logging.getLogger(__name__)

DEFAULT_MIN_ROOMS = 3


# =============================================================================
# QUERIES
# =============================================================================

def get_blocked_booking(db, blocked_booking_id: int) -> Optional[dict]:
    """
    Get a blocked booking with its company, rooms and bill.

    Args:
        db: Database connection
        blocked_booking_id: Blocked booking ID

    Returns:
        dict or None: Header fields plus 'rooms' and 'billing'
    """
    row = db.execute('''
        SELECT b.*, tc.company_name, tc.discount_rate,
               br.name as branch_name, rt.type_name as room_type
        FROM blocked_bookings b
        JOIN travel_companies tc ON b.company_id = tc.id
        JOIN branches br ON b.branch_id = br.id
        JOIN room_types rt ON b.room_type_id = rt.id
        WHERE b.id = ?
    ''', (blocked_booking_id,)).fetchone()

    if not row:
        return None

    block = dict(row)
    block['rooms'] = _get_block_rooms(db, blocked_booking_id)

    billing = db.execute(
        'SELECT * FROM blocked_booking_billing WHERE blocked_booking_id = ?',
        (blocked_booking_id,)
    ).fetchone()
    block['billing'] = dict(billing) if billing else None
    return block


def list_blocked_bookings(db, company_id: int = None, include_cancelled: bool = False) -> list:
    """
    List blocked bookings, soonest start first.

    Args:
        db: Database connection
        company_id: Restrict to one travel company (optional)
        include_cancelled: Also return cancelled holds

    Returns:
        list: Blocked booking dicts with their rooms
    """
    query = '''
        SELECT b.*, tc.company_name, br.name as branch_name, rt.type_name as room_type
        FROM blocked_bookings b
        JOIN travel_companies tc ON b.company_id = tc.id
        JOIN branches br ON b.branch_id = br.id
        JOIN room_types rt ON b.room_type_id = rt.id
        WHERE 1=1
    '''
    params = []

    if company_id:
        query += ' AND b.company_id = ?'
        params.append(company_id)

    if not include_cancelled:
        query += ' AND b.status = ?'
        params.append(BLOCK_ACTIVE)

    query += ' ORDER BY b.start_date, b.id'

    blocks = []
    for row in db.execute(query, params).fetchall():
        block = dict(row)
        block['rooms'] = _get_block_rooms(db, block['id'])
        blocks.append(block)
    return blocks


def _get_block_rooms(db, blocked_booking_id: int) -> list:
    rows = db.execute('''
        SELECT rm.id, rm.room_number, rm.status,
               COALESCE(rm.price_per_night, rt.base_price) as price_per_night
        FROM blocked_booking_rooms bbr
        JOIN rooms rm ON bbr.room_id = rm.id
        JOIN room_types rt ON rm.room_type_id = rt.id
        WHERE bbr.blocked_booking_id = ?
        ORDER BY rm.id
    ''', (blocked_booking_id,)).fetchall()
    return [dict(row) for row in rows]


# =============================================================================
# CREATE
# =============================================================================

def create_blocked_booking(
    db,
    company_id: int,
    branch_id: int,
    room_type_id: int,
    start_date,
    end_date,
    number_of_rooms,
    min_rooms: int = None
) -> OperationResult:
    """
    Hold a block of rooms of one type for a travel company.

    Args:
        db: Database connection
        company_id: Travel company ID
        branch_id: Branch ID
        room_type_id: Room type ID
        start_date: First night (date or YYYY-MM-DD)
        end_date: End of the hold, exclusive
        number_of_rooms: Rooms to hold; must exceed the bulk minimum
        min_rooms: Bulk minimum override (default: BLOCK_BOOKING_MIN_ROOMS)

    Returns:
        OperationResult: 201 with the blocked booking on success
    """
    start = parse_date(start_date)
    end = parse_date(end_date)
    if start is None or end is None:
        return fail(ErrorKind.VALIDATION, MESSAGES['invalid_date'])
    if end <= start:
        return fail(ErrorKind.VALIDATION, MESSAGES['invalid_date_range'])

    ids = {
        'company_id': validate_positive_int(company_id),
        'branch_id': validate_positive_int(branch_id),
        'room_type_id': validate_positive_int(room_type_id),
    }
    for field, value in ids.items():
        if value is None:
            return fail(ErrorKind.VALIDATION, MESSAGES['invalid_id'].format(field=field), field=field)
    company_id, branch_id, room_type_id = ids['company_id'], ids['branch_id'], ids['room_type_id']

    count = validate_positive_int(number_of_rooms)
    if count is None:
        return fail(ErrorKind.VALIDATION, MESSAGES['invalid_room_count'])

    minimum = min_rooms if min_rooms is not None else get_block_min_rooms()
    if count <= minimum:
        return fail(
            ErrorKind.VALIDATION,
            MESSAGES['block_too_small'].format(minimum=minimum),
            minimum=minimum,
            requested=count
        )

    try:
        with transaction(db):
            if not db.execute('SELECT 1 FROM travel_companies WHERE id = ?', (company_id,)).fetchone():
                return fail(ErrorKind.NOT_FOUND, MESSAGES['company_not_found'].format(company_id=company_id))
            if not db.execute('SELECT 1 FROM branches WHERE id = ?', (branch_id,)).fetchone():
                return fail(ErrorKind.NOT_FOUND, MESSAGES['branch_not_found'].format(branch_id=branch_id))
            if not db.execute('SELECT 1 FROM room_types WHERE id = ?', (room_type_id,)).fetchone():
                return fail(
                    ErrorKind.NOT_FOUND,
                    MESSAGES['room_type_not_found'].format(room_type_id=room_type_id)
                )

            selection = find_available_rooms(db, branch_id, room_type_id, start, end, count)
            if not selection:
                return selection
            rooms = selection.data['room_ids']

            cursor = db.execute('''
                INSERT INTO blocked_bookings (
                    company_id, branch_id, room_type_id, start_date, end_date, number_of_rooms, status
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ''', (company_id, branch_id, room_type_id, start, end, count, BLOCK_ACTIVE))
            blocked_booking_id = cursor.lastrowid

            for room_id in rooms:
                db.execute(
                    'INSERT INTO blocked_booking_rooms (blocked_booking_id, room_id) VALUES (?, ?)',
                    (blocked_booking_id, room_id)
                )

            set_room_status(db, rooms, ROOM_OCCUPIED)

    except sqlite3.IntegrityError as e:
        if 'room_overlap' not in str(e):
            raise
        logger.warning(f"Overlap guard rejected blocked booking for company {company_id}: {e}")
        return fail(
            ErrorKind.INSUFFICIENT_AVAILABILITY,
            MESSAGES['rooms_unavailable'],
            cause=ErrorKind.CONFLICT.value,
            requested=count
        )

    logger.info(
        f"Blocked booking {blocked_booking_id} created for company {company_id}: "
        f"{count} rooms {start}..{end}"
    )
    return ok(
        data=get_blocked_booking(db, blocked_booking_id),
        message=MESSAGES['block_created'],
        status_code=201
    )


# =============================================================================
# CANCEL
# =============================================================================

def cancel_blocked_booking(db, blocked_booking_id: int, today=None) -> OperationResult:
    """
    Cancel a hold before its end date, dropping its room links and freeing rooms.

    Args:
        db: Database connection
        blocked_booking_id: Blocked booking ID
        today: Reference date (default: today)

    Returns:
        OperationResult: Cancelled blocked booking on success
    """
    today = parse_date(today) or get_today()

    with transaction(db):
        block = db.execute('SELECT * FROM blocked_bookings WHERE id = ?', (blocked_booking_id,)).fetchone()
        if block is None:
            return _not_found(blocked_booking_id)
        if block['status'] == BLOCK_CANCELLED:
            return fail(ErrorKind.INVALID_STATE, MESSAGES['block_already_cancelled'])
        if today >= block['end_date']:
            return fail(ErrorKind.INVALID_STATE, MESSAGES['block_ended'], end_date=block['end_date'])

        room_ids = [row['room_id'] for row in db.execute(
            'SELECT room_id FROM blocked_booking_rooms WHERE blocked_booking_id = ?',
            (blocked_booking_id,)
        ).fetchall()]

        db.execute('DELETE FROM blocked_booking_rooms WHERE blocked_booking_id = ?', (blocked_booking_id,))
        db.execute('UPDATE blocked_bookings SET status = ? WHERE id = ?', (BLOCK_CANCELLED, blocked_booking_id))
        release_rooms(db, room_ids, exclude_blocked_booking_id=blocked_booking_id, today=today)

    logger.info(f"Blocked booking {blocked_booking_id} cancelled, released rooms {room_ids}")
    return ok(data=get_blocked_booking(db, blocked_booking_id), message=MESSAGES['block_cancelled'])


# =============================================================================
# BILLING
# =============================================================================

def bill_blocked_booking(db, blocked_booking_id: int, billing_date=None) -> OperationResult:
    """
    Raise the single bill of a blocked booking.

    room_charge = nights x sum of nightly room prices, less the company's
    discount percentage, plus flat tax on the discounted charge.

    Returns:
        OperationResult: 201 with the billing row
    """
    billing_date = parse_date(billing_date) or get_today()

    with transaction(db):
        block = db.execute('''
            SELECT b.*, tc.discount_rate
            FROM blocked_bookings b
            JOIN travel_companies tc ON b.company_id = tc.id
            WHERE b.id = ?
        ''', (blocked_booking_id,)).fetchone()
        if block is None:
            return _not_found(blocked_booking_id)
        if block['status'] == BLOCK_CANCELLED:
            return fail(ErrorKind.INVALID_STATE, MESSAGES['block_cancelled_billing'])

        if db.execute(
            'SELECT 1 FROM blocked_booking_billing WHERE blocked_booking_id = ?',
            (blocked_booking_id,)
        ).fetchone():
            return fail(ErrorKind.INVALID_STATE, MESSAGES['block_already_billed'])

        prices = [room['price_per_night'] for room in _get_block_rooms(db, blocked_booking_id)]
        charges = calculate_stay_charges(
            block['start_date'],
            block['end_date'],
            prices,
            tax_rate=get_tax_rate(),
            discount_rate=block['discount_rate']
        )

        db.execute('''
            INSERT INTO blocked_booking_billing (
                blocked_booking_id, room_charge, discount_amount, tax_amount,
                total_amount, billing_date, status
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
        ''', (
            blocked_booking_id,
            charges['room_charge'],
            charges['discount_amount'],
            charges['tax_amount'],
            charges['total_amount'],
            billing_date,
            BILLING_UNPAID
        ))

    billing = db.execute(
        'SELECT * FROM blocked_booking_billing WHERE blocked_booking_id = ?',
        (blocked_booking_id,)
    ).fetchone()

    logger.info(f"Blocked booking {blocked_booking_id} billed: total {charges['total_amount']}")
    return ok(
        data={'billing': dict(billing), 'charges': charges},
        message=MESSAGES['block_billed'],
        status_code=201
    )


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_block_min_rooms() -> int:
    """Bulk minimum from config; holds must book more rooms than this."""
    if has_app_context():
        return int(current_app.config.get('BLOCK_BOOKING_MIN_ROOMS', DEFAULT_MIN_ROOMS))
    return DEFAULT_MIN_ROOMS


def _not_found(blocked_booking_id: int) -> OperationResult:
    return fail(
        ErrorKind.NOT_FOUND,
        MESSAGES['block_not_found'].format(blocked_booking_id=blocked_booking_id)
    )
