"""
Travel company routes for blocked bookings (bulk room holds).
"""

from flask import Blueprint, request
from flask_login import current_user

from database import get_db
from models.blocked_booking import (
    create_blocked_booking,
    cancel_blocked_booking,
    bill_blocked_booking,
    get_blocked_booking,
    list_blocked_bookings,
)
from utils.api_response import api_success, api_error, result_response
from utils.decorators import login_required, role_required
from utils.messages import MESSAGES

blocked_bookings_bp = Blueprint('blocked_bookings', __name__)


def _owned_block(blocked_booking_id: int):
    """The blocked booking if the calling company (or staff) may act on it."""
    block = get_blocked_booking(get_db(), blocked_booking_id)
    if block is None:
        return None
    if current_user.role == 'travel_company' and block['company_id'] != current_user.company_id:
        return None
    return block


def _not_found(blocked_booking_id: int):
    return api_error(
        MESSAGES['block_not_found'].format(blocked_booking_id=blocked_booking_id),
        status=404,
        error_kind='not_found'
    )


@blocked_bookings_bp.route('', methods=['POST'])
@login_required
@role_required('travel_company')
def create_block():
    """
    Hold a block of rooms for the calling travel company.

    Request body:
        branch_id, room_type_id, start_date, end_date, number_of_rooms

    Returns:
        201 with the blocked booking
    """
    data = request.get_json(silent=True) or {}
    if not data.get('branch_id') or not data.get('room_type_id'):
        return api_error(MESSAGES['missing_fields'], status=400)

    return result_response(create_blocked_booking(
        get_db(),
        company_id=current_user.company_id,
        branch_id=data['branch_id'],
        room_type_id=data['room_type_id'],
        start_date=data.get('start_date'),
        end_date=data.get('end_date'),
        number_of_rooms=data.get('number_of_rooms')
    ))


@blocked_bookings_bp.route('', methods=['GET'])
@login_required
@role_required('travel_company', 'manager')
def list_blocks():
    """
    List blocked bookings. Companies see their own holds only.

    Query params:
        include_cancelled: 'true' to include cancelled holds
    """
    include_cancelled = request.args.get('include_cancelled', 'false').lower() == 'true'
    company_id = current_user.company_id if current_user.role == 'travel_company' else None
    blocks = list_blocked_bookings(get_db(), company_id=company_id, include_cancelled=include_cancelled)
    return api_success(data=blocks, count=len(blocks))


@blocked_bookings_bp.route('/<int:blocked_booking_id>', methods=['GET'])
@login_required
@role_required('travel_company', 'manager')
def block_detail(blocked_booking_id):
    block = _owned_block(blocked_booking_id)
    if block is None:
        return _not_found(blocked_booking_id)
    return api_success(data=block)


@blocked_bookings_bp.route('/<int:blocked_booking_id>/cancel', methods=['POST'])
@login_required
@role_required('travel_company')
def cancel_block(blocked_booking_id):
    """Cancel a hold before its end date."""
    if _owned_block(blocked_booking_id) is None:
        return _not_found(blocked_booking_id)
    return result_response(cancel_blocked_booking(get_db(), blocked_booking_id))


@blocked_bookings_bp.route('/<int:blocked_booking_id>/bill', methods=['POST'])
@login_required
@role_required('travel_company', 'manager')
def bill_block(blocked_booking_id):
    """
    Raise the bill of a hold.

    Request body (optional):
        billing_date: YYYY-MM-DD (default: today)
    """
    if _owned_block(blocked_booking_id) is None:
        return _not_found(blocked_booking_id)
    data = request.get_json(silent=True) or {}
    return result_response(bill_blocked_booking(get_db(), blocked_booking_id, billing_date=data.get('billing_date')))
