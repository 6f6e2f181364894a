"""
Customer self-service routes.
Customers book, pay for, cancel and complete their own reservations.
"""

from flask import Blueprint, request
from flask_login import current_user

from database import get_db
from models.reservation import (
    create_reservation,
    get_reservation,
    get_customer_reservations,
    cancel_reservation,
    complete_reservation,
    add_payment_details,
    get_reservation_invoice,
    get_customer_billing,
)
from utils.api_response import api_success, api_error, result_response
from utils.decorators import login_required, role_required
from utils.messages import MESSAGES

customer_bp = Blueprint('customer', __name__)


def _owned_reservation(reservation_id: int):
    """The reservation if it belongs to the calling customer, else None."""
    reservation = get_reservation(get_db(), reservation_id)
    if reservation is None or reservation['customer_id'] != current_user.customer_id:
        return None
    return reservation


def _not_found(reservation_id: int):
    return api_error(
        MESSAGES['reservation_not_found'].format(reservation_id=reservation_id),
        status=404,
        error_kind='not_found'
    )


@customer_bp.route('/reservations', methods=['POST'])
@login_required
@role_required('customer')
def create_own_reservation():
    """
    Book rooms for the calling customer.

    Request body:
        branch_id, check_in_date, check_out_date, number_of_occupants,
        room_ids, or room_type_id + number_of_rooms

    Returns:
        201 with the reservation (status No_show until payment details arrive)
    """
    data = request.get_json(silent=True) or {}
    if not data.get('branch_id'):
        return api_error(MESSAGES['missing_fields'], status=400)

    result = create_reservation(
        get_db(),
        branch_id=data['branch_id'],
        check_in_date=data.get('check_in_date'),
        check_out_date=data.get('check_out_date'),
        number_of_occupants=data.get('number_of_occupants'),
        customer_id=current_user.customer_id,
        room_type_id=data.get('room_type_id'),
        number_of_rooms=data.get('number_of_rooms'),
        room_ids=data.get('room_ids')
    )
    return result_response(result)


@customer_bp.route('/reservations', methods=['GET'])
@login_required
@role_required('customer')
def list_own_reservations():
    """List the calling customer's reservations."""
    reservations = get_customer_reservations(get_db(), current_user.customer_id)
    return api_success(data=reservations, count=len(reservations))


@customer_bp.route('/reservations/<int:reservation_id>', methods=['GET'])
@login_required
@role_required('customer')
def own_reservation_detail(reservation_id):
    reservation = _owned_reservation(reservation_id)
    if reservation is None:
        return _not_found(reservation_id)
    return api_success(data=reservation)


@customer_bp.route('/reservations/<int:reservation_id>/cancel', methods=['POST'])
@login_required
@role_required('customer')
def cancel_own_reservation(reservation_id):
    if _owned_reservation(reservation_id) is None:
        return _not_found(reservation_id)
    return result_response(cancel_reservation(get_db(), reservation_id))


@customer_bp.route('/reservations/<int:reservation_id>/complete', methods=['POST'])
@login_required
@role_required('customer')
def complete_own_reservation(reservation_id):
    if _owned_reservation(reservation_id) is None:
        return _not_found(reservation_id)
    return result_response(complete_reservation(get_db(), reservation_id))


@customer_bp.route('/reservations/<int:reservation_id>/payment-details', methods=['POST'])
@login_required
@role_required('customer')
def submit_payment_details(reservation_id):
    """
    Attach card details to a reservation, confirming it.

    Request body:
        card_type, card_number, card_exp_month, card_exp_year
    """
    if _owned_reservation(reservation_id) is None:
        return _not_found(reservation_id)

    data = request.get_json(silent=True) or {}
    return result_response(add_payment_details(
        get_db(),
        reservation_id,
        card_type=data.get('card_type'),
        card_number=data.get('card_number'),
        card_exp_month=data.get('card_exp_month'),
        card_exp_year=data.get('card_exp_year')
    ))


@customer_bp.route('/reservations/<int:reservation_id>/invoice', methods=['GET'])
@login_required
@role_required('customer')
def own_invoice(reservation_id):
    if _owned_reservation(reservation_id) is None:
        return _not_found(reservation_id)

    bill = get_reservation_invoice(get_db(), reservation_id)
    if bill is None:
        return api_error(MESSAGES['invoice_not_found'].format(reservation_id=reservation_id), status=404)
    return api_success(data=bill)


@customer_bp.route('/billing', methods=['GET'])
@login_required
@role_required('customer')
def own_billing():
    """Every bill raised against the calling customer's reservations."""
    bills = get_customer_billing(get_db(), current_user.customer_id)
    return api_success(data=bills, count=len(bills))
