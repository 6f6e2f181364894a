"""
Maintenance sweeps invoked by an external scheduler.

Both sweeps run as a single transaction and return how many reservations
they changed. The flask CLI exposes them as `sweep-unpaid` and
`sweep-completed`.
"""

import logging
from datetime import datetime, time

from database.connection import transaction
from utils.datetime_helpers import get_today
from utils.validators import parse_date
from .room import release_rooms
from .status import (
    PAYMENT_PENDING,
    RESERVATION_CANCELLED,
    RESERVATION_COMPLETED,
    RESERVATION_TERMINAL_STATES,
)

logger = logging.getLogger(__name__)


def run_unpaid_sweep(db, cutoff: datetime = None) -> int:
    """
    Cancel open reservations still awaiting payment that were created since cutoff.

    Args:
        db: Database connection
        cutoff: Creation timestamp lower bound (default: start of today)

    Returns:
        int: Number of reservations cancelled
    """
    if cutoff is None:
        cutoff = datetime.combine(get_today(), time.min)

    with transaction(db):
        rows = db.execute('''
            SELECT id FROM reservations
            WHERE payment_status = ?
              AND reservation_status NOT IN (?, ?)
              AND created_at >= ?
            ORDER BY id
        ''', [PAYMENT_PENDING] + list(RESERVATION_TERMINAL_STATES) + [cutoff]).fetchall()
        reservation_ids = [row['id'] for row in rows]

        for reservation_id in reservation_ids:
            db.execute('''
                UPDATE reservations
                SET reservation_status = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
            ''', (RESERVATION_CANCELLED, reservation_id))
            release_rooms(db, _room_ids(db, reservation_id), exclude_reservation_id=reservation_id)

    logger.info(f"Unpaid sweep cancelled {len(reservation_ids)} reservation(s) created since {cutoff}")
    return len(reservation_ids)


def run_completion_sweep(db, today=None) -> int:
    """
    Complete every open reservation whose checkout date has passed.

    Args:
        db: Database connection
        today: Reference date (default: today)

    Returns:
        int: Number of reservations completed
    """
    today = parse_date(today) or get_today()

    with transaction(db):
        rows = db.execute('''
            SELECT id FROM reservations
            WHERE check_out_date < ?
              AND reservation_status NOT IN (?, ?)
            ORDER BY id
        ''', [today] + list(RESERVATION_TERMINAL_STATES)).fetchall()
        reservation_ids = [row['id'] for row in rows]

        for reservation_id in reservation_ids:
            db.execute('''
                UPDATE reservations
                SET reservation_status = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
            ''', (RESERVATION_COMPLETED, reservation_id))
            release_rooms(db, _room_ids(db, reservation_id), exclude_reservation_id=reservation_id, today=today)

    logger.info(f"Completion sweep completed {len(reservation_ids)} reservation(s) before {today}")
    return len(reservation_ids)


def _room_ids(db, reservation_id: int) -> list:
    return [row['room_id'] for row in db.execute(
        'SELECT room_id FROM booked_rooms WHERE reservation_id = ?',
        (reservation_id,)
    ).fetchall()]
