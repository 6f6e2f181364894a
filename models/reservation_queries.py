"""
Reservation query operations.
Read-only listings, detail projections, invoices and room status.
"""

from typing import Optional

from utils.validators import parse_date
from .billing import get_billing_by_reservation


# =============================================================================
# DETAIL
# =============================================================================

def get_reservation(db, reservation_id: int) -> Optional[dict]:
    """
    Get reservation by ID with customer, branch and booked rooms.

    Args:
        db: Database connection
        reservation_id: Reservation ID

    Returns:
        dict or None: Reservation with 'customer', 'branch' and 'rooms'
    """
    row = db.execute('''
        SELECT r.*,
               c.full_name as customer_name, c.email as customer_email,
               c.phone as customer_phone,
               b.name as branch_name, b.address as branch_address
        FROM reservations r
        JOIN customers c ON r.customer_id = c.id
        JOIN branches b ON r.branch_id = b.id
        WHERE r.id = ?
    ''', (reservation_id,)).fetchone()

    if not row:
        return None

    return _project_reservation(row, get_reservation_rooms(db, reservation_id))


def get_reservation_rooms(db, reservation_id: int) -> list:
    """
    Get the rooms linked to a reservation.

    Returns:
        list: [{'id', 'room_number', 'status', 'room_type_id', 'room_type',
                'price_per_night'}] with the effective nightly price
    """
    rows = db.execute('''
        SELECT rm.id, rm.room_number, rm.status, rm.room_type_id,
               rt.type_name as room_type,
               COALESCE(rm.price_per_night, rt.base_price) as price_per_night
        FROM booked_rooms br
        JOIN rooms rm ON br.room_id = rm.id
        JOIN room_types rt ON rm.room_type_id = rt.id
        WHERE br.reservation_id = ?
        ORDER BY rm.id
    ''', (reservation_id,)).fetchall()
    return [dict(row) for row in rows]


def _project_reservation(row, rooms: list) -> dict:
    """Shape a joined reservation row into the API projection."""
    return {
        'id': row['id'],
        'branch_id': row['branch_id'],
        'customer_id': row['customer_id'],
        'check_in_date': row['check_in_date'],
        'check_out_date': row['check_out_date'],
        'number_of_occupants': row['number_of_occupants'],
        'number_of_rooms': row['number_of_rooms'],
        'payment_status': row['payment_status'],
        'reservation_status': row['reservation_status'],
        'created_at': row['created_at'],
        'customer': {
            'id': row['customer_id'],
            'full_name': row['customer_name'],
            'email': row['customer_email'],
            'phone': row['customer_phone'],
        },
        'branch': {
            'id': row['branch_id'],
            'name': row['branch_name'],
            'address': row['branch_address'],
        },
        'rooms': rooms,
    }


# =============================================================================
# LIST QUERIES
# =============================================================================

def list_reservations(
    db,
    customer: str = None,
    status: str = None,
    check_in_start=None,
    check_in_end=None,
    page: int = 1,
    limit: int = 10
) -> dict:
    """
    Get reservations with optional filters, newest check-in first.

    Args:
        db: Database connection
        customer: Case-insensitive substring of customer name or email
        status: Exact reservation_status
        check_in_start: Earliest check-in date, inclusive
        check_in_end: Latest check-in date, inclusive
        page: 1-based page number
        limit: Page size

    Returns:
        dict: {'total_count', 'page', 'limit', 'reservations': [...]}
    """
    page = max(int(page or 1), 1)
    limit = max(int(limit or 10), 1)

    where = ' WHERE 1=1'
    params = []

    if status:
        where += ' AND r.reservation_status = ?'
        params.append(status)

    start = parse_date(check_in_start)
    if start:
        where += ' AND r.check_in_date >= ?'
        params.append(start)

    end = parse_date(check_in_end)
    if end:
        where += ' AND r.check_in_date <= ?'
        params.append(end)

    if customer:
        where += ' AND (LOWER(c.full_name) LIKE ? OR LOWER(c.email) LIKE ?)'
        pattern = f'%{customer.strip().lower()}%'
        params.extend([pattern, pattern])

    base = '''
        FROM reservations r
        JOIN customers c ON r.customer_id = c.id
        JOIN branches b ON r.branch_id = b.id
    ''' + where

    total_count = db.execute(f'SELECT COUNT(*) {base}', params).fetchone()[0]

    rows = db.execute(f'''
        SELECT r.*,
               c.full_name as customer_name, c.email as customer_email,
               c.phone as customer_phone,
               b.name as branch_name, b.address as branch_address
        {base}
        ORDER BY r.check_in_date DESC, r.id DESC
        LIMIT ? OFFSET ?
    ''', params + [limit, (page - 1) * limit]).fetchall()

    reservations = [
        _project_reservation(row, get_reservation_rooms(db, row['id']))
        for row in rows
    ]

    return {
        'total_count': total_count,
        'page': page,
        'limit': limit,
        'reservations': reservations
    }


def get_customer_reservations(db, customer_id: int) -> list:
    """
    Get all reservations of one customer, newest check-in first.

    Args:
        db: Database connection
        customer_id: Customer ID

    Returns:
        list: Reservation projections
    """
    rows = db.execute('''
        SELECT r.*,
               c.full_name as customer_name, c.email as customer_email,
               c.phone as customer_phone,
               b.name as branch_name, b.address as branch_address
        FROM reservations r
        JOIN customers c ON r.customer_id = c.id
        JOIN branches b ON r.branch_id = b.id
        WHERE r.customer_id = ?
        ORDER BY r.check_in_date DESC, r.id DESC
    ''', (customer_id,)).fetchall()

    return [_project_reservation(row, get_reservation_rooms(db, row['id'])) for row in rows]


# =============================================================================
# BILLING QUERIES
# =============================================================================

def get_reservation_invoice(db, reservation_id: int) -> Optional[dict]:
    """
    Get the invoice of a reservation.

    Returns:
        dict or None: {'reservation_id', 'billing'} if a bill exists
    """
    billing = get_billing_by_reservation(db, reservation_id)
    if billing is None:
        return None
    return {'reservation_id': reservation_id, 'billing': billing}


def get_customer_billing(db, customer_id: int) -> list:
    """
    Get every bill raised against a customer's reservations.

    Returns:
        list: Billing rows with reservation dates and status
    """
    rows = db.execute('''
        SELECT bl.*, r.check_in_date, r.check_out_date, r.reservation_status
        FROM billing bl
        JOIN reservations r ON bl.reservation_id = r.id
        WHERE r.customer_id = ?
        ORDER BY bl.billing_date DESC, bl.id DESC
    ''', (customer_id,)).fetchall()
    return [dict(row) for row in rows]


# =============================================================================
# ROOM STATUS
# =============================================================================

def get_rooms_status(db, branch_id: int = None) -> list:
    """
    Get the status of every physical room.

    Args:
        db: Database connection
        branch_id: Filter by branch (optional)

    Returns:
        list: [{'id', 'room_number', 'status', 'price_per_night',
                'room_type': {...}, 'branch': {...}}]
    """
    query = '''
        SELECT rm.id, rm.room_number, rm.status,
               COALESCE(rm.price_per_night, rt.base_price) as price_per_night,
               rt.id as room_type_id, rt.type_name,
               b.id as branch_id, b.name as branch_name
        FROM rooms rm
        JOIN room_types rt ON rm.room_type_id = rt.id
        JOIN branches b ON rm.branch_id = b.id
    '''
    params = []
    if branch_id:
        query += ' WHERE rm.branch_id = ?'
        params.append(branch_id)
    query += ' ORDER BY rm.room_number, rm.id'

    return [
        {
            'id': row['id'],
            'room_number': row['room_number'],
            'status': row['status'],
            'price_per_night': row['price_per_night'],
            'room_type': {'id': row['room_type_id'], 'type_name': row['type_name']},
            'branch': {'id': row['branch_id'], 'name': row['branch_name']},
        }
        for row in db.execute(query, params).fetchall()
    ]
