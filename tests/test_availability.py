"""
Tests for room availability checking and selection.
"""

from datetime import date

from models.availability import (
    has_conflict,
    get_conflicting_bookings,
    find_available_rooms,
    get_available_rooms,
    get_room_availability_summary,
)
from models.reservation_lifecycle import create_reservation, cancel_reservation
from utils.results import ErrorKind


def _book(db, hotel, guest, room_ids, check_in, check_out):
    result = create_reservation(
        db, hotel['branch_id'], check_in, check_out, 1,
        guest=guest, room_ids=room_ids
    )
    assert result.success, result.message
    return result.data['id']


class TestHasConflict:
    """Tests for the half-open overlap predicate."""

    def test_overlapping_stay_conflicts(self, db, hotel, guest):
        """Intersecting ranges on the same room conflict."""
        room = hotel['standard_rooms'][0]
        _book(db, hotel, guest, [room], '2026-05-10', '2026-05-15')

        assert has_conflict(db, [room], date(2026, 5, 12), date(2026, 5, 13)) is True
        assert has_conflict(db, [room], date(2026, 5, 8), date(2026, 5, 11)) is True
        assert has_conflict(db, [room], date(2026, 5, 14), date(2026, 5, 20)) is True

    def test_touching_stays_do_not_conflict(self, db, hotel, guest):
        """Checkout day is free for the next check-in."""
        room = hotel['standard_rooms'][0]
        _book(db, hotel, guest, [room], '2026-05-10', '2026-05-15')

        assert has_conflict(db, [room], date(2026, 5, 15), date(2026, 5, 18)) is False
        assert has_conflict(db, [room], date(2026, 5, 7), date(2026, 5, 10)) is False

    def test_other_rooms_unaffected(self, db, hotel, guest):
        """A booking on one room does not block another."""
        _book(db, hotel, guest, [hotel['standard_rooms'][0]], '2026-05-10', '2026-05-15')
        assert has_conflict(db, [hotel['standard_rooms'][1]], '2026-05-10', '2026-05-15') is False

    def test_cancelled_reservation_ignored(self, db, hotel, guest):
        """Cancelled reservations release their dates."""
        room = hotel['standard_rooms'][0]
        reservation_id = _book(db, hotel, guest, [room], '2026-05-10', '2026-05-15')
        cancel_reservation(db, reservation_id)

        assert has_conflict(db, [room], '2026-05-10', '2026-05-15') is False

    def test_exclude_reservation(self, db, hotel, guest):
        """A reservation never conflicts with itself."""
        room = hotel['standard_rooms'][0]
        reservation_id = _book(db, hotel, guest, [room], '2026-05-10', '2026-05-15')

        assert has_conflict(
            db, [room], '2026-05-10', '2026-05-15', exclude_reservation_id=reservation_id
        ) is False

    def test_active_blocked_booking_conflicts(self, db, hotel, make_company):
        """Rooms held by a travel company block are busy."""
        company_id = make_company()
        room = hotel['standard_rooms'][0]
        cursor = db.execute('''
            INSERT INTO blocked_bookings (company_id, branch_id, room_type_id, start_date, end_date, number_of_rooms)
            VALUES (?, ?, ?, '2026-06-01', '2026-06-05', 4)
        ''', (company_id, hotel['branch_id'], hotel['standard_type_id']))
        db.execute(
            'INSERT INTO blocked_booking_rooms (blocked_booking_id, room_id) VALUES (?, ?)',
            (cursor.lastrowid, room)
        )
        db.commit()

        conflicts = get_conflicting_bookings(db, [room], '2026-06-04', '2026-06-06')
        assert len(conflicts) == 1
        assert conflicts[0]['kind'] == 'blocked_booking'
        assert conflicts[0]['start_date'] == date(2026, 6, 1)

        assert has_conflict(
            db, [room], '2026-06-04', '2026-06-06', exclude_blocked_booking_id=cursor.lastrowid
        ) is False

    def test_empty_room_list(self, db):
        assert has_conflict(db, [], '2026-06-01', '2026-06-02') is False


class TestFindAvailableRooms:
    """Tests for first-N room selection."""

    def test_selects_lowest_ids_first(self, db, hotel):
        result = find_available_rooms(
            db, hotel['branch_id'], hotel['standard_type_id'], '2026-07-01', '2026-07-03', 2
        )

        assert result.success is True
        assert result.data['room_ids'] == hotel['standard_rooms'][:2]

    def test_skips_conflicting_rooms(self, db, hotel, guest):
        _book(db, hotel, guest, [hotel['standard_rooms'][0]], '2026-07-01', '2026-07-03')
        # Free the status so only the date conflict excludes the room
        db.execute("UPDATE rooms SET status = 'Available' WHERE id = ?", (hotel['standard_rooms'][0],))
        db.commit()

        result = find_available_rooms(
            db, hotel['branch_id'], hotel['standard_type_id'], '2026-07-02', '2026-07-04', 1
        )

        assert result.data['room_ids'] == [hotel['standard_rooms'][1]]

    def test_maintenance_rooms_excluded(self, db, hotel):
        """Rooms under maintenance are never candidates."""
        db.execute("UPDATE rooms SET status = 'Maintenance' WHERE id = ?", (hotel['deluxe_rooms'][0],))
        db.commit()

        result = find_available_rooms(
            db, hotel['branch_id'], hotel['deluxe_type_id'], '2026-07-01', '2026-07-03', 2
        )

        assert result.success is False
        assert result.kind == ErrorKind.INSUFFICIENT_AVAILABILITY
        assert result.detail == {'requested': 2, 'available': 1}

    def test_reports_requested_and_available(self, db, hotel):
        result = find_available_rooms(
            db, hotel['branch_id'], hotel['standard_type_id'], '2026-07-01', '2026-07-03', 9
        )

        assert result.success is False
        assert result.status_code == 409
        assert result.detail['requested'] == 9
        assert result.detail['available'] == 6

    def test_other_branch_has_no_rooms(self, db, hotel):
        result = find_available_rooms(
            db, hotel['other_branch_id'], hotel['standard_type_id'], '2026-07-01', '2026-07-03', 1
        )
        assert result.kind == ErrorKind.INSUFFICIENT_AVAILABILITY


class TestAvailabilityListings:
    """Tests for free room listings and summaries."""

    def test_available_rooms_listing(self, db, hotel, guest):
        _book(db, hotel, guest, [hotel['deluxe_rooms'][0]], '2026-08-01', '2026-08-04')

        rooms = get_available_rooms(
            db, hotel['branch_id'], '2026-08-01', '2026-08-04', room_type_id=hotel['deluxe_type_id']
        )

        assert [room['id'] for room in rooms] == [hotel['deluxe_rooms'][1]]
        assert rooms[0]['room_type'] == 'Deluxe'

    def test_summary_counts(self, db, hotel, guest):
        _book(db, hotel, guest, hotel['standard_rooms'][:2], '2026-08-01', '2026-08-04')

        summary = get_room_availability_summary(
            db, hotel['branch_id'], hotel['standard_type_id'], '2026-08-01', '2026-08-04'
        )

        # Booked rooms turn Occupied and leave the candidate pool
        assert summary == {'total_rooms': 4, 'available_rooms': 4}
