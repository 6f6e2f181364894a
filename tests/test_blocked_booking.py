"""
Tests for travel company blocked bookings.
"""

from datetime import date
from decimal import Decimal

import pytest

from models.blocked_booking import (
    create_blocked_booking,
    cancel_blocked_booking,
    bill_blocked_booking,
    get_blocked_booking,
    list_blocked_bookings,
)
from models.reservation_lifecycle import create_reservation
from utils.results import ErrorKind


def _room_status(db, room_id):
    return db.execute('SELECT status FROM rooms WHERE id = ?', (room_id,)).fetchone()['status']


@pytest.fixture
def company_id(make_company):
    return make_company(discount_rate=10)


def _block(db, hotel, company_id, count=4, start='2099-06-01', end='2099-06-03'):
    return create_blocked_booking(
        db, company_id, hotel['branch_id'], hotel['standard_type_id'], start, end, count
    )


class TestCreateBlockedBooking:
    """Tests for bulk hold creation."""

    def test_holds_rooms(self, db, hotel, company_id):
        result = _block(db, hotel, company_id)

        assert result.success is True
        assert result.status_code == 201
        block = result.data
        assert block['status'] == 'Active'
        assert block['number_of_rooms'] == 4
        assert [room['id'] for room in block['rooms']] == hotel['standard_rooms'][:4]
        assert all(_room_status(db, room) == 'Occupied' for room in hotel['standard_rooms'][:4])
        assert _room_status(db, hotel['standard_rooms'][4]) == 'Available'

    def test_must_exceed_minimum(self, db, hotel, company_id):
        result = _block(db, hotel, company_id, count=3)

        assert result.kind == ErrorKind.VALIDATION
        assert result.detail['minimum'] == 3
        assert db.execute('SELECT COUNT(*) FROM blocked_bookings').fetchone()[0] == 0

    def test_minimum_override(self, db, hotel, company_id):
        result = create_blocked_booking(
            db, company_id, hotel['branch_id'], hotel['standard_type_id'],
            '2099-06-01', '2099-06-03', 2, min_rooms=1
        )
        assert result.success is True

    def test_insufficient_rooms(self, db, hotel, company_id):
        result = _block(db, hotel, company_id, count=7)

        assert result.kind == ErrorKind.INSUFFICIENT_AVAILABILITY
        assert result.detail == {'requested': 7, 'available': 6}

    def test_shares_rooms_with_reservations(self, db, hotel, company_id, guest):
        """Reservations and blocks are checked jointly."""
        create_reservation(
            db, hotel['branch_id'], '2099-06-02', '2099-06-04', 2,
            guest=guest, room_type_id=hotel['standard_type_id'], number_of_rooms=2
        )

        result = _block(db, hotel, company_id, count=5)

        assert result.kind == ErrorKind.INSUFFICIENT_AVAILABILITY
        assert result.detail['available'] == 4

    def test_reservation_cannot_take_blocked_room(self, db, hotel, company_id, guest):
        _block(db, hotel, company_id)

        result = create_reservation(
            db, hotel['branch_id'], '2099-06-02', '2099-06-05', 1,
            guest=guest, room_ids=[hotel['standard_rooms'][0]]
        )

        assert result.kind == ErrorKind.INSUFFICIENT_AVAILABILITY

    def test_unknown_references(self, db, hotel, company_id):
        assert create_blocked_booking(
            db, 999, hotel['branch_id'], hotel['standard_type_id'], '2099-06-01', '2099-06-03', 4
        ).kind == ErrorKind.NOT_FOUND
        assert create_blocked_booking(
            db, company_id, 999, hotel['standard_type_id'], '2099-06-01', '2099-06-03', 4
        ).kind == ErrorKind.NOT_FOUND
        assert create_blocked_booking(
            db, company_id, hotel['branch_id'], 999, '2099-06-01', '2099-06-03', 4
        ).kind == ErrorKind.NOT_FOUND

    def test_ids_coerced_and_validated(self, db, hotel, company_id):
        result = create_blocked_booking(
            db, str(company_id), str(hotel['branch_id']), str(hotel['standard_type_id']),
            '2099-06-01', '2099-06-03', 4
        )
        assert result.success is True
        assert result.data['company_id'] == company_id

        result = create_blocked_booking(
            db, company_id, [hotel['branch_id']], hotel['standard_type_id'], '2099-07-01', '2099-07-03', 4
        )
        assert result.kind == ErrorKind.VALIDATION
        assert result.detail['field'] == 'branch_id'

    def test_invalid_dates(self, db, hotel, company_id):
        assert _block(db, hotel, company_id, start='2099-06-03', end='2099-06-01').kind == ErrorKind.VALIDATION


class TestCancelBlockedBooking:
    """Tests for hold cancellation."""

    def test_cancel_frees_rooms(self, db, hotel, company_id):
        block_id = _block(db, hotel, company_id).data['id']

        result = cancel_blocked_booking(db, block_id, today='2099-05-20')

        assert result.success is True
        assert result.data['status'] == 'Cancelled'
        assert result.data['rooms'] == []
        assert all(_room_status(db, room) == 'Available' for room in hotel['standard_rooms'][:4])
        assert db.execute(
            'SELECT COUNT(*) FROM blocked_booking_rooms WHERE blocked_booking_id = ?', (block_id,)
        ).fetchone()[0] == 0

    def test_cancelled_rooms_bookable_again(self, db, hotel, company_id):
        block_id = _block(db, hotel, company_id).data['id']
        cancel_blocked_booking(db, block_id, today='2099-05-20')

        assert _block(db, hotel, company_id, count=6).success is True

    def test_cancel_twice(self, db, hotel, company_id):
        block_id = _block(db, hotel, company_id).data['id']
        cancel_blocked_booking(db, block_id, today='2099-05-20')

        assert cancel_blocked_booking(db, block_id, today='2099-05-20').kind == ErrorKind.INVALID_STATE

    def test_no_cancel_after_end_date(self, db, hotel, company_id):
        block_id = _block(db, hotel, company_id).data['id']

        result = cancel_blocked_booking(db, block_id, today='2099-06-03')

        assert result.kind == ErrorKind.INVALID_STATE
        assert get_blocked_booking(db, block_id)['status'] == 'Active'

    def test_cancel_unknown(self, db):
        assert cancel_blocked_booking(db, 999).kind == ErrorKind.NOT_FOUND


class TestBillBlockedBooking:
    """Tests for blocked booking billing."""

    def test_bill_applies_company_discount(self, db, hotel, company_id):
        block_id = _block(db, hotel, company_id).data['id']

        result = bill_blocked_booking(db, block_id, billing_date='2099-06-03')

        assert result.success is True
        charges = result.data['charges']
        # 4 rooms x 100 x 2 nights = 800, less 10% = 720, plus 10% tax
        assert charges['room_charge'] == Decimal('800.00')
        assert charges['discount_amount'] == Decimal('80.00')
        assert charges['tax_amount'] == Decimal('72.00')
        assert charges['total_amount'] == Decimal('792.00')
        assert result.data['billing']['billing_date'] == date(2099, 6, 3)
        assert result.data['billing']['status'] == 'Unpaid'

    def test_one_bill_per_block(self, db, hotel, company_id):
        block_id = _block(db, hotel, company_id).data['id']
        bill_blocked_booking(db, block_id)

        assert bill_blocked_booking(db, block_id).kind == ErrorKind.INVALID_STATE

    def test_cancelled_block_not_billed(self, db, hotel, company_id):
        block_id = _block(db, hotel, company_id).data['id']
        cancel_blocked_booking(db, block_id, today='2099-05-20')

        assert bill_blocked_booking(db, block_id).kind == ErrorKind.INVALID_STATE


class TestBlockedBookingQueries:
    """Tests for blocked booking listings."""

    def test_list_by_company(self, db, hotel, company_id, make_company):
        other_company = make_company(name='Lanka Travels')
        _block(db, hotel, company_id, start='2099-06-01', end='2099-06-03')
        cancelled = create_blocked_booking(
            db, other_company, hotel['branch_id'], hotel['standard_type_id'],
            '2099-07-01', '2099-07-03', 2, min_rooms=1
        ).data['id']
        cancel_blocked_booking(db, cancelled, today='2099-05-20')

        assert [b['company_id'] for b in list_blocked_bookings(db, company_id=company_id)] == [company_id]
        assert len(list_blocked_bookings(db)) == 1
        assert len(list_blocked_bookings(db, include_cancelled=True)) == 2

    def test_detail_includes_billing(self, db, hotel, company_id):
        block_id = _block(db, hotel, company_id).data['id']
        assert get_blocked_booking(db, block_id)['billing'] is None

        bill_blocked_booking(db, block_id)

        block = get_blocked_booking(db, block_id)
        assert block['billing']['total_amount'] == Decimal('792')
        assert block['company_name'] == 'Island Tours'
