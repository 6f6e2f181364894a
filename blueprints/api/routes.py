"""
Public API routes for JSON endpoints.
Health check and room availability lookups.
"""

from flask import Blueprint, current_app, jsonify, request

from database import get_db
from models.availability import get_available_rooms, get_room_availability_summary
from utils.api_response import api_success, api_error
from utils.messages import MESSAGES
from utils.validators import parse_date

api_bp = Blueprint('api', __name__)


@api_bp.route('/health')
def health_check():
    """
    Health check endpoint (no authentication required).

    Returns:
        JSON with status and version
    """
    return jsonify({
        'status': 'ok',
        'version': current_app.config.get('APP_VERSION', '1.0.0'),
        'app': current_app.config.get('APP_NAME', 'HotelBooking')
    })


@api_bp.route('/availability')
def api_availability():
    """
    Count free rooms of a type for a stay (no authentication required).

    Query params:
        branch_id: Branch ID
        room_type_id: Room type ID
        check_in_date: YYYY-MM-DD
        check_out_date: YYYY-MM-DD

    Returns:
        JSON {'total_rooms', 'available_rooms'}
    """
    branch_id = request.args.get('branch_id', type=int)
    room_type_id = request.args.get('room_type_id', type=int)
    stay, error = _parse_stay(request.args)
    if error:
        return error
    if not branch_id or not room_type_id:
        return api_error(MESSAGES['missing_fields'], status=400)

    summary = get_room_availability_summary(get_db(), branch_id, room_type_id, *stay)
    return api_success(data=summary)


@api_bp.route('/rooms/available')
def api_available_rooms():
    """
    List rooms free for a whole stay (no authentication required).

    Query params:
        branch_id: Branch ID
        check_in_date: YYYY-MM-DD
        check_out_date: YYYY-MM-DD
        room_type_id: Filter by room type (optional)

    Returns:
        JSON list of rooms
    """
    branch_id = request.args.get('branch_id', type=int)
    stay, error = _parse_stay(request.args)
    if error:
        return error
    if not branch_id:
        return api_error(MESSAGES['missing_fields'], status=400)

    rooms = get_available_rooms(
        get_db(), branch_id, *stay,
        room_type_id=request.args.get('room_type_id', type=int)
    )
    return api_success(data=rooms, count=len(rooms))


def _parse_stay(args):
    """Parse check-in/check-out query params into ((in, out), error_response)."""
    check_in = parse_date(args.get('check_in_date'))
    check_out = parse_date(args.get('check_out_date'))
    if check_in is None or check_out is None:
        return None, api_error(MESSAGES['invalid_date'], status=400)
    if check_out <= check_in:
        return None, api_error(MESSAGES['invalid_date_range'], status=400)
    return (check_in, check_out), None
