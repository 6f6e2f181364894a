"""
Front desk reservation routes.
Staff bookings for walk-in guests, stay operations and room status.
"""

from flask import Blueprint, current_app, request

from database import get_db
from models.reservation import (
    create_reservation,
    list_reservations,
    get_reservation,
    check_in_reservation,
    check_out_reservation,
    update_checkout_date,
    add_optional_charge,
    cancel_reservation,
    get_reservation_invoice,
    get_rooms_status,
)
from utils.api_response import api_success, api_error, result_response
from utils.decorators import login_required, role_required
from utils.messages import MESSAGES

reservations_bp = Blueprint('reservations', __name__)

STAFF_ROLES = ('clerk', 'manager')


@reservations_bp.route('', methods=['POST'])
@login_required
@role_required(*STAFF_ROLES)
def create_guest_reservation():
    """
    Book rooms for a guest at the front desk.

    Request body:
        branch_id, check_in_date, check_out_date, number_of_occupants,
        guest {'full_name', 'email', 'phone'?, 'address'?},
        room_type_id + number_of_rooms, or room_ids

    Returns:
        201 with the reservation
    """
    data = request.get_json(silent=True) or {}
    if not data.get('branch_id') or not data.get('guest'):
        return api_error(MESSAGES['missing_fields'], status=400)

    result = create_reservation(
        get_db(),
        branch_id=data['branch_id'],
        check_in_date=data.get('check_in_date'),
        check_out_date=data.get('check_out_date'),
        number_of_occupants=data.get('number_of_occupants'),
        guest=data['guest'],
        room_type_id=data.get('room_type_id'),
        number_of_rooms=data.get('number_of_rooms'),
        room_ids=data.get('room_ids')
    )
    return result_response(result)


@reservations_bp.route('', methods=['GET'])
@login_required
@role_required(*STAFF_ROLES)
def list_reservations_view():
    """
    Search reservations.

    Query params:
        customer: Name or email substring (optional)
        status: Reservation status (optional)
        check_in_start, check_in_end: Check-in date bounds (optional)
        page, limit: Pagination

    Returns:
        JSON page of reservations with total_count
    """
    limit = request.args.get('limit', current_app.config['ITEMS_PER_PAGE'], type=int)
    limit = min(max(limit, 1), current_app.config['MAX_ITEMS_PER_PAGE'])

    page = list_reservations(
        get_db(),
        customer=request.args.get('customer') or None,
        status=request.args.get('status') or None,
        check_in_start=request.args.get('check_in_start') or None,
        check_in_end=request.args.get('check_in_end') or None,
        page=request.args.get('page', 1, type=int),
        limit=limit
    )
    return api_success(data=page)


@reservations_bp.route('/<int:reservation_id>', methods=['GET'])
@login_required
@role_required(*STAFF_ROLES)
def reservation_detail(reservation_id):
    """Get one reservation with customer, branch and rooms."""
    reservation = get_reservation(get_db(), reservation_id)
    if reservation is None:
        return api_error(MESSAGES['reservation_not_found'].format(reservation_id=reservation_id), status=404)
    return api_success(data=reservation)


@reservations_bp.route('/<int:reservation_id>/check-in', methods=['POST'])
@login_required
@role_required(*STAFF_ROLES)
def check_in(reservation_id):
    """Check a guest in."""
    return result_response(check_in_reservation(get_db(), reservation_id))


@reservations_bp.route('/<int:reservation_id>/check-out', methods=['POST'])
@login_required
@role_required(*STAFF_ROLES)
def check_out(reservation_id):
    """
    Check a guest out and settle the bill.

    Request body (optional):
        billing_date: YYYY-MM-DD (default: today)
    """
    data = request.get_json(silent=True) or {}
    return result_response(check_out_reservation(get_db(), reservation_id, billing_date=data.get('billing_date')))


@reservations_bp.route('/<int:reservation_id>/checkout-date', methods=['PATCH'])
@login_required
@role_required(*STAFF_ROLES)
def extend_stay(reservation_id):
    """
    Move the checkout date later.

    Request body:
        new_check_out_date: YYYY-MM-DD
    """
    data = request.get_json(silent=True) or {}
    if not data.get('new_check_out_date'):
        return api_error(MESSAGES['missing_fields'], status=400)
    return result_response(update_checkout_date(get_db(), reservation_id, data['new_check_out_date']))


@reservations_bp.route('/<int:reservation_id>/charges', methods=['POST'])
@login_required
@role_required(*STAFF_ROLES)
def add_charge(reservation_id):
    """
    Add an optional charge to the bill.

    Request body:
        amount: Positive number
        description: What the charge is for (optional)
    """
    data = request.get_json(silent=True) or {}
    return result_response(add_optional_charge(
        get_db(), reservation_id, data.get('amount'), description=data.get('description')
    ))


@reservations_bp.route('/<int:reservation_id>/cancel', methods=['POST'])
@login_required
@role_required(*STAFF_ROLES)
def cancel(reservation_id):
    """Cancel a reservation on behalf of a guest."""
    return result_response(cancel_reservation(get_db(), reservation_id))


@reservations_bp.route('/<int:reservation_id>/invoice', methods=['GET'])
@login_required
@role_required(*STAFF_ROLES)
def invoice(reservation_id):
    """Get the bill of a reservation."""
    bill = get_reservation_invoice(get_db(), reservation_id)
    if bill is None:
        return api_error(MESSAGES['invoice_not_found'].format(reservation_id=reservation_id), status=404)
    return api_success(data=bill)


@reservations_bp.route('/rooms/status', methods=['GET'])
@login_required
@role_required(*STAFF_ROLES)
def rooms_status():
    """
    Current status of every room.

    Query params:
        branch_id: Filter by branch (optional)
    """
    rooms = get_rooms_status(get_db(), branch_id=request.args.get('branch_id', type=int))
    return api_success(data=rooms, count=len(rooms))
