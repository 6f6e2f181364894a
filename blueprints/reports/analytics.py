"""Occupancy, revenue and no-show report routes."""
from flask import request

from database import get_db
from models.occupancy import daily_occupancy, projected_occupancy, revenue_report, no_show_report
from utils.api_response import result_response
from utils.decorators import login_required, role_required


def register_routes(bp):
    """Register analytics routes on the reports blueprint."""

    @bp.route('/occupancy/daily')
    @login_required
    @role_required('manager')
    def occupancy_daily():
        """
        Occupancy for one day.

        Query params:
            date: YYYY-MM-DD (default: today)
            branch_id: Filter by branch (optional)
        """
        return result_response(daily_occupancy(
            get_db(),
            request.args.get('date') or None,
            branch_id=request.args.get('branch_id', type=int)
        ))

    @bp.route('/occupancy/projected')
    @login_required
    @role_required('manager')
    def occupancy_projected():
        """
        Day-by-day occupancy for a range.

        Query params:
            from_date, to_date: Inclusive YYYY-MM-DD range
            branch_id: Filter by branch (optional)
        """
        return result_response(projected_occupancy(
            get_db(),
            request.args.get('from_date'),
            request.args.get('to_date'),
            branch_id=request.args.get('branch_id', type=int)
        ))

    @bp.route('/revenue')
    @login_required
    @role_required('manager')
    def revenue():
        """
        Revenue for a billing date range.

        Query params:
            from_date, to_date: Inclusive YYYY-MM-DD range
            branch_id: Filter by branch (optional)
            group_by: 'daily' or 'monthly' (optional)
        """
        return result_response(revenue_report(
            get_db(),
            request.args.get('from_date'),
            request.args.get('to_date'),
            branch_id=request.args.get('branch_id', type=int),
            group_by=request.args.get('group_by') or None
        ))

    @bp.route('/no-shows')
    @login_required
    @role_required('manager')
    def no_shows():
        """
        Reservations still marked No_show.

        Query params:
            from_date, to_date: Check-in date bounds (optional)
            branch_id: Filter by branch (optional)
        """
        return result_response(no_show_report(
            get_db(),
            from_date=request.args.get('from_date') or None,
            to_date=request.args.get('to_date') or None,
            branch_id=request.args.get('branch_id', type=int)
        ))
