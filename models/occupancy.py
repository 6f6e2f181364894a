"""
Occupancy and revenue reporting.
Read-only projections over reservations, booked rooms and billing.

A reservation occupies its rooms on every night in [check_in, check_out):
the checkout day itself is free. Cancelled and No_show reservations never
count as occupying.
"""

from collections import OrderedDict
from datetime import date
from decimal import Decimal

from utils.datetime_helpers import get_today, iter_days
from utils.messages import MESSAGES
from utils.results import ErrorKind, OperationResult, ok, fail
from utils.validators import parse_date
from .billing import to_money
from .status import RESERVATION_NO_SHOW, RESERVATION_NON_OCCUPYING_STATES, BILLING_PAID

GROUP_DAILY = 'daily'
GROUP_MONTHLY = 'monthly'


# =============================================================================
# OCCUPANCY
# =============================================================================

def count_total_rooms(db, branch_id: int = None) -> int:
    """Count physical rooms, optionally within one branch."""
    if branch_id:
        return db.execute('SELECT COUNT(*) FROM rooms WHERE branch_id = ?', (branch_id,)).fetchone()[0]
    return db.execute('SELECT COUNT(*) FROM rooms').fetchone()[0]


def count_occupied_rooms(db, day: date, branch_id: int = None) -> int:
    """
    Count rooms held by occupying reservations on one night.

    Args:
        db: Database connection
        day: Night to count
        branch_id: Filter by branch (optional)

    Returns:
        int: Occupied rooms
    """
    query = f'''
        SELECT COUNT(DISTINCT br.room_id)
        FROM booked_rooms br
        JOIN reservations r ON br.reservation_id = r.id
        WHERE r.check_in_date <= ?
          AND r.check_out_date > ?
          AND r.reservation_status NOT IN ({','.join('?' * len(RESERVATION_NON_OCCUPYING_STATES))})
    '''
    params = [day, day] + list(RESERVATION_NON_OCCUPYING_STATES)

    if branch_id:
        query += ' AND r.branch_id = ?'
        params.append(branch_id)

    return db.execute(query, params).fetchone()[0]


def daily_occupancy(db, day=None, branch_id: int = None) -> OperationResult:
    """
    Occupancy snapshot for one day.

    Args:
        db: Database connection
        day: Date or YYYY-MM-DD (default: today)
        branch_id: Filter by branch (optional)

    Returns:
        OperationResult: data {'date', 'total_rooms', 'occupied_rooms',
        'available_rooms', 'occupancy_rate'}
    """
    if day is None:
        target = get_today()
    else:
        target = parse_date(day)
        if target is None:
            return fail(ErrorKind.VALIDATION, MESSAGES['invalid_date'])

    total = count_total_rooms(db, branch_id)
    occupied = count_occupied_rooms(db, target, branch_id)

    return ok(data={
        'date': target,
        'total_rooms': total,
        'occupied_rooms': occupied,
        'available_rooms': total - occupied,
        'occupancy_rate': round(occupied / total * 100, 2) if total else 0.0,
    })


def iter_projected_occupancy(db, from_date: date, to_date: date, branch_id: int = None):
    """
    Lazily yield occupancy for every day of an inclusive range.

    Yields:
        dict: {'date', 'occupied_rooms', 'available_rooms'}
    """
    total = count_total_rooms(db, branch_id)
    for day in iter_days(from_date, to_date):
        occupied = count_occupied_rooms(db, day, branch_id)
        yield {
            'date': day,
            'occupied_rooms': occupied,
            'available_rooms': total - occupied,
        }


def projected_occupancy(db, from_date, to_date, branch_id: int = None) -> OperationResult:
    """
    Day-by-day occupancy for an inclusive date range.

    Returns:
        OperationResult: data is the list from iter_projected_occupancy()
    """
    start, end, error = _parse_range(from_date, to_date)
    if error:
        return error
    return ok(data=list(iter_projected_occupancy(db, start, end, branch_id)))


# =============================================================================
# REVENUE
# =============================================================================

def revenue_report(db, from_date, to_date, branch_id: int = None, group_by: str = None) -> OperationResult:
    """
    Sum reservation billing with billing_date in an inclusive range.

    Args:
        db: Database connection
        from_date: First billing date
        to_date: Last billing date
        branch_id: Filter by the reservation's branch (optional)
        group_by: None, 'daily' or 'monthly'

    Returns:
        OperationResult: ungrouped data {'from_date', 'to_date', 'total_revenue',
        'tax', 'other_charges', 'paid_reservations', 'unpaid_reservations'};
        grouped data [{'period', 'total_revenue', 'tax', 'other_charges'}]
        sorted by period
    """
    start, end, error = _parse_range(from_date, to_date)
    if error:
        return error
    if group_by not in (None, '', GROUP_DAILY, GROUP_MONTHLY):
        return fail(ErrorKind.VALIDATION, MESSAGES['invalid_group_by'])

    rows = get_billing_rows(db, start, end, branch_id)

    if not group_by:
        paid = sum(1 for row in rows if row['status'] == BILLING_PAID)
        return ok(data={
            'from_date': start,
            'to_date': end,
            'total_revenue': _sum(rows, 'total_amount'),
            'tax': _sum(rows, 'tax_amount'),
            'other_charges': _sum(rows, 'other_charges'),
            'paid_reservations': paid,
            'unpaid_reservations': len(rows) - paid,
        })

    buckets = OrderedDict()
    for row in sorted(rows, key=lambda r: r['billing_date']):
        billing_date = row['billing_date']
        if group_by == GROUP_MONTHLY:
            period = f'{billing_date.year:04d}-{billing_date.month:02d}'
        else:
            period = billing_date.isoformat()
        buckets.setdefault(period, []).append(row)

    return ok(data=[
        {
            'period': period,
            'total_revenue': _sum(bucket, 'total_amount'),
            'tax': _sum(bucket, 'tax_amount'),
            'other_charges': _sum(bucket, 'other_charges'),
        }
        for period, bucket in buckets.items()
    ])


def get_billing_rows(db, from_date: date, to_date: date, branch_id: int = None) -> list:
    """
    Get billing rows joined to their reservation for a billing date range.

    Returns:
        list: Billing dicts with reservation_id, branch and customer name
    """
    query = '''
        SELECT bl.id, bl.reservation_id, bl.total_amount, bl.tax_amount,
               bl.other_charges, bl.billing_date, bl.status,
               r.branch_id, b.name as branch_name, c.full_name as customer_name
        FROM billing bl
        JOIN reservations r ON bl.reservation_id = r.id
        JOIN branches b ON r.branch_id = b.id
        JOIN customers c ON r.customer_id = c.id
        WHERE bl.billing_date >= ? AND bl.billing_date <= ?
    '''
    params = [from_date, to_date]

    if branch_id:
        query += ' AND r.branch_id = ?'
        params.append(branch_id)

    query += ' ORDER BY bl.billing_date, bl.id'
    return [dict(row) for row in db.execute(query, params).fetchall()]


def _sum(rows: list, column: str) -> Decimal:
    return to_money(sum((to_money(row[column]) for row in rows), Decimal('0')))


# =============================================================================
# NO-SHOWS
# =============================================================================

def no_show_report(db, from_date=None, to_date=None, branch_id: int = None) -> OperationResult:
    """
    List reservations still marked No_show, newest check-in first.

    Args:
        db: Database connection
        from_date: Earliest check-in date, inclusive (optional)
        to_date: Latest check-in date, inclusive (optional)
        branch_id: Filter by branch (optional)

    Returns:
        OperationResult: data [{'reservation_id', 'customer', 'check_in_date',
        'rooms', 'branch'}]
    """
    start = parse_date(from_date)
    end = parse_date(to_date)
    if (from_date and start is None) or (to_date and end is None):
        return fail(ErrorKind.VALIDATION, MESSAGES['invalid_date'])
    if start and end and start > end:
        return fail(ErrorKind.VALIDATION, MESSAGES['invalid_report_range'])

    query = '''
        SELECT r.id, r.check_in_date, r.customer_id, c.full_name, c.email,
               r.branch_id, b.name as branch_name
        FROM reservations r
        JOIN customers c ON r.customer_id = c.id
        JOIN branches b ON r.branch_id = b.id
        WHERE r.reservation_status = ?
    '''
    params = [RESERVATION_NO_SHOW]

    if start:
        query += ' AND r.check_in_date >= ?'
        params.append(start)
    if end:
        query += ' AND r.check_in_date <= ?'
        params.append(end)
    if branch_id:
        query += ' AND r.branch_id = ?'
        params.append(branch_id)

    query += ' ORDER BY r.check_in_date DESC, r.id DESC'

    report = []
    for row in db.execute(query, params).fetchall():
        rooms = db.execute('''
            SELECT rm.id, rm.room_number
            FROM booked_rooms br
            JOIN rooms rm ON br.room_id = rm.id
            WHERE br.reservation_id = ?
            ORDER BY rm.id
        ''', (row['id'],)).fetchall()

        report.append({
            'reservation_id': row['id'],
            'customer': {'id': row['customer_id'], 'full_name': row['full_name'], 'email': row['email']},
            'check_in_date': row['check_in_date'],
            'rooms': [dict(room) for room in rooms],
            'branch': {'id': row['branch_id'], 'name': row['branch_name']},
        })

    return ok(data=report)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _parse_range(from_date, to_date):
    """Parse an inclusive report range into (start, end, error_result)."""
    start = parse_date(from_date)
    end = parse_date(to_date)
    if start is None or end is None:
        return None, None, fail(ErrorKind.VALIDATION, MESSAGES['invalid_date'])
    if start > end:
        return None, None, fail(ErrorKind.VALIDATION, MESSAGES['invalid_report_range'])
    return start, end, None
