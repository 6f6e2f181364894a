"""
Room status updates shared by the booking managers.
"""

from datetime import date

from utils.datetime_helpers import get_today
from .status import (
    ROOM_AVAILABLE,
    ROOM_OCCUPIED,
    RESERVATION_NO_SHOW,
    RESERVATION_CONFIRMED,
    BLOCK_ACTIVE,
)


def set_room_status(db, room_ids: list, status: str) -> None:
    """
    Set the status of several rooms at once.
    Must run inside the caller's transaction.
    """
    if not room_ids:
        return
    placeholders = ','.join('?' * len(room_ids))
    db.execute(
        f'UPDATE rooms SET status = ? WHERE id IN ({placeholders})',
        [status] + list(room_ids)
    )


def release_rooms(
    db,
    room_ids: list,
    exclude_reservation_id: int = None,
    exclude_blocked_booking_id: int = None,
    today: date = None
) -> int:
    """
    Return Occupied rooms to Available unless another live booking still holds them.

    A room stays Occupied while an open reservation (No_show or Confirmed) or an
    active blocked booking on it has not yet reached its end date. Rooms under
    maintenance are never touched.
    Must run inside the caller's transaction.

    Args:
        db: Database connection
        room_ids: Rooms to release
        exclude_reservation_id: Reservation being closed (ignored as a holder)
        exclude_blocked_booking_id: Blocked booking being closed
        today: Reference date (default: today)

    Returns:
        int: Number of rooms set to Available
    """
    if not room_ids:
        return 0

    today = today or get_today()
    placeholders = ','.join('?' * len(room_ids))

    reservation_filter = ''
    block_filter = ''
    params = [ROOM_AVAILABLE] + list(room_ids) + [ROOM_OCCUPIED,
                                                  RESERVATION_NO_SHOW, RESERVATION_CONFIRMED, today]
    if exclude_reservation_id:
        reservation_filter = 'AND r.id != ?'
        params.append(exclude_reservation_id)
    params.extend([BLOCK_ACTIVE, today])
    if exclude_blocked_booking_id:
        block_filter = 'AND b.id != ?'
        params.append(exclude_blocked_booking_id)

    cursor = db.execute(f'''
        UPDATE rooms SET status = ?
        WHERE id IN ({placeholders})
          AND status = ?
          AND NOT EXISTS (
              SELECT 1 FROM booked_rooms br
              JOIN reservations r ON br.reservation_id = r.id
              WHERE br.room_id = rooms.id
                AND r.reservation_status IN (?, ?)
                AND r.check_out_date > ?
                {reservation_filter}
          )
          AND NOT EXISTS (
              SELECT 1 FROM blocked_booking_rooms bbr
              JOIN blocked_bookings b ON bbr.blocked_booking_id = b.id
              WHERE bbr.room_id = rooms.id
                AND b.status = ?
                AND b.end_date > ?
                {block_filter}
          )
    ''', params)
    return cursor.rowcount
