"""
Room availability checking.
Overlap detection across reservations and blocked bookings, and room
selection for new bookings.

Two bookings on the same room conflict when their half-open stays
[start, end) intersect:

    existing.start < requested.end AND existing.end > requested.start

Cancelled reservations and cancelled blocked bookings never conflict.
"""

import logging

from utils.messages import MESSAGES
from utils.validators import parse_date
from utils.results import ErrorKind, OperationResult, ok, fail
from .status import (
    ROOM_AVAILABLE,
    RESERVATION_CANCELLED,
    BLOCK_ACTIVE,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONFLICT QUERIES
# =============================================================================

def get_conflicting_bookings(
    db,
    room_ids: list,
    check_in,
    check_out,
    exclude_reservation_id: int = None,
    exclude_blocked_booking_id: int = None
) -> list:
    """
    Get every active booking link that overlaps the requested stay.

    Args:
        db: Database connection
        room_ids: Room IDs to check
        check_in: Requested start (date or YYYY-MM-DD)
        check_out: Requested end, exclusive (date or YYYY-MM-DD)
        exclude_reservation_id: Reservation to ignore (for date changes)
        exclude_blocked_booking_id: Blocked booking to ignore

    Returns:
        list: [{'kind': 'reservation'|'blocked_booking', 'booking_id': int,
                'room_id': int, 'start_date': date, 'end_date': date}]
    """
    if not room_ids:
        return []

    placeholders = ','.join('?' * len(room_ids))

    reservation_query = f'''
        SELECT 'reservation' as kind, r.id as booking_id, br.room_id,
               r.check_in_date as start_date, r.check_out_date as end_date
        FROM booked_rooms br
        JOIN reservations r ON br.reservation_id = r.id
        WHERE br.room_id IN ({placeholders})
          AND r.reservation_status != ?
          AND r.check_in_date < ?
          AND r.check_out_date > ?
    '''
    params = list(room_ids) + [RESERVATION_CANCELLED, check_out, check_in]

    if exclude_reservation_id:
        reservation_query += ' AND r.id != ?'
        params.append(exclude_reservation_id)

    block_query = f'''
        SELECT 'blocked_booking' as kind, b.id as booking_id, bbr.room_id,
               b.start_date, b.end_date
        FROM blocked_booking_rooms bbr
        JOIN blocked_bookings b ON bbr.blocked_booking_id = b.id
        WHERE bbr.room_id IN ({placeholders})
          AND b.status = ?
          AND b.start_date < ?
          AND b.end_date > ?
    '''
    block_params = list(room_ids) + [BLOCK_ACTIVE, check_out, check_in]

    if exclude_blocked_booking_id:
        block_query += ' AND b.id != ?'
        block_params.append(exclude_blocked_booking_id)

    rows = db.execute(reservation_query, params).fetchall()
    rows += db.execute(block_query, block_params).fetchall()

    # Dates come back as text when a column has no DATE declaration
    conflicts = []
    for row in rows:
        conflict = dict(row)
        conflict['start_date'] = _as_date(conflict['start_date'])
        conflict['end_date'] = _as_date(conflict['end_date'])
        conflicts.append(conflict)

    conflicts.sort(key=lambda c: (c['room_id'], c['start_date']))
    return conflicts


def has_conflict(
    db,
    room_ids: list,
    check_in,
    check_out,
    exclude_reservation_id: int = None,
    exclude_blocked_booking_id: int = None
) -> bool:
    """
    Check whether any of the rooms is held for part of the requested stay.

    Args:
        db: Database connection
        room_ids: Room IDs to check
        check_in: Requested start
        check_out: Requested end, exclusive
        exclude_reservation_id: Reservation to ignore (for date changes)
        exclude_blocked_booking_id: Blocked booking to ignore

    Returns:
        bool: True if at least one active booking overlaps
    """
    return bool(get_conflicting_bookings(
        db, room_ids, check_in, check_out,
        exclude_reservation_id=exclude_reservation_id,
        exclude_blocked_booking_id=exclude_blocked_booking_id
    ))


def _busy_room_ids(db, room_ids: list, check_in, check_out) -> set:
    """Room IDs among room_ids with at least one overlapping active booking."""
    return {c['room_id'] for c in get_conflicting_bookings(db, room_ids, check_in, check_out)}


# =============================================================================
# ROOM SELECTION
# =============================================================================

def get_candidate_rooms(db, branch_id: int, room_type_id: int = None) -> list:
    """
    Get rooms eligible for new bookings, in stable ascending id order.

    Rooms not marked Available (e.g. under maintenance) are never candidates,
    whatever their bookings.

    Args:
        db: Database connection
        branch_id: Branch ID
        room_type_id: Restrict to one room type (optional)

    Returns:
        list: Room dicts
    """
    query = '''
        SELECT r.id, r.room_number, r.room_type_id, r.branch_id, r.status,
               r.price_per_night, rt.type_name
        FROM rooms r
        JOIN room_types rt ON r.room_type_id = rt.id
        WHERE r.branch_id = ? AND r.status = ?
    '''
    params = [branch_id, ROOM_AVAILABLE]

    if room_type_id:
        query += ' AND r.room_type_id = ?'
        params.append(room_type_id)

    query += ' ORDER BY r.id'

    return [dict(row) for row in db.execute(query, params).fetchall()]


def find_available_rooms(
    db,
    branch_id: int,
    room_type_id: int,
    check_in,
    check_out,
    count: int
) -> OperationResult:
    """
    Select the first `count` conflict-free rooms of a type in a branch.

    Args:
        db: Database connection
        branch_id: Branch ID
        room_type_id: Room type ID
        check_in: Stay start
        check_out: Stay end, exclusive
        count: Rooms needed

    Returns:
        OperationResult: data {'room_ids': [...]} on success, otherwise an
        INSUFFICIENT_AVAILABILITY failure with requested/available counts
    """
    candidates = get_candidate_rooms(db, branch_id, room_type_id)
    candidate_ids = [room['id'] for room in candidates]
    busy = _busy_room_ids(db, candidate_ids, check_in, check_out)

    selected = []
    for room_id in candidate_ids:
        if room_id in busy:
            continue
        selected.append(room_id)
        if len(selected) == count:
            break

    if len(selected) < count:
        logger.warning(
            f"Availability shortfall: branch {branch_id} type {room_type_id} "
            f"{check_in}..{check_out} requested {count}, available {len(selected)}"
        )
        return fail(
            ErrorKind.INSUFFICIENT_AVAILABILITY,
            MESSAGES['insufficient_rooms'].format(requested=count, available=len(selected)),
            requested=count,
            available=len(selected)
        )

    return ok(data={'room_ids': selected}, message=MESSAGES['rooms_available'])


# =============================================================================
# AVAILABILITY LISTINGS
# =============================================================================

def get_available_rooms(db, branch_id: int, check_in, check_out, room_type_id: int = None) -> list:
    """
    List rooms in a branch free for the whole stay.

    Args:
        db: Database connection
        branch_id: Branch ID
        check_in: Stay start
        check_out: Stay end, exclusive
        room_type_id: Restrict to one room type (optional)

    Returns:
        list: [{'id', 'room_number', 'status', 'room_type', 'room_type_id',
                'price_per_night'}]
    """
    candidates = get_candidate_rooms(db, branch_id, room_type_id)
    busy = _busy_room_ids(db, [room['id'] for room in candidates], check_in, check_out)

    return [
        {
            'id': room['id'],
            'room_number': room['room_number'],
            'status': room['status'],
            'room_type': room['type_name'],
            'room_type_id': room['room_type_id'],
            'price_per_night': room['price_per_night'],
        }
        for room in candidates
        if room['id'] not in busy
    ]


def get_room_availability_summary(db, branch_id: int, room_type_id: int, check_in, check_out) -> dict:
    """
    Count bookable and free rooms of a type for a stay.

    Returns:
        dict: {'total_rooms': int, 'available_rooms': int}
    """
    candidates = get_candidate_rooms(db, branch_id, room_type_id)
    candidate_ids = [room['id'] for room in candidates]
    busy = _busy_room_ids(db, candidate_ids, check_in, check_out)

    return {
        'total_rooms': len(candidate_ids),
        'available_rooms': len(candidate_ids) - len(busy)
    }


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _as_date(value):
    """Normalize a date column that may come back as text."""
    if hasattr(value, 'isoformat'):
        return value
    return parse_date(value)
